# alarmbot - Discord Alarm Bot
# Copyright (c) 2025-2026 Slash Daemon slashdaemon@protonmail.com
#
# This program is free software: you can redistribute it and/or modify
# it under the terms of the GNU Affero General Public License as published by
# the Free Software Foundation, version 3 of the License.
#
# This program is distributed in the hope that it will be useful,
# but WITHOUT ANY WARRANTY; without even the implied warranty of
# MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE. See the
# GNU Affero General Public License for more details.
#
# You should have received a copy of the GNU Affero General Public License
# along with this program. If not, see <https://www.gnu.org/licenses/>.
#
# Commercial licensing: [slashdaemon@protonmail.com]

"""
Lightweight event tracking for alarmbot.

Events land in an `analytics_events` Postgres table when DATABASE_URL is set
and ANALYTICS_ENABLED is not "false". Without a database every call is a
no-op, so alarms themselves never depend on it.

Usage:
    from analytics import track

    track("alarm_scheduled", "alarm", user_id=123, properties={"strategy": "24h"})
"""

import asyncio
import json
import logging
import os
from typing import Any, Optional

import asyncpg

logger = logging.getLogger("alarmbot.analytics")

_pool: Optional[asyncpg.Pool] = None
_pool_failed = False


def is_enabled() -> bool:
    return (
        os.getenv("ANALYTICS_ENABLED", "true").lower() == "true"
        and bool(os.getenv("DATABASE_URL"))
    )


async def _get_pool() -> Optional[asyncpg.Pool]:
    """Get or lazily create the connection pool."""
    global _pool, _pool_failed
    if _pool is None and not _pool_failed:
        try:
            _pool = await asyncpg.create_pool(os.getenv("DATABASE_URL"), min_size=1, max_size=2)
        except Exception as e:
            # Don't hammer an unreachable database on every event
            _pool_failed = True
            logger.warning(f"Analytics pool creation failed, tracking disabled: {e}")
    return _pool


async def track_async(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> bool:
    """
    Record an event.

    Args:
        event_name: Event identifier (e.g., "alarm_delivered")
        event_category: One of: alarm, command, error, system
        user_id: Discord user ID (optional)
        guild_id: Discord guild ID (optional)
        properties: Additional event data

    Returns:
        True if the event was recorded
    """
    if not is_enabled():
        return False

    pool = await _get_pool()
    if pool is None:
        return False

    try:
        await pool.execute(
            """
            INSERT INTO analytics_events
                (event_name, event_category, user_id, guild_id, properties)
            VALUES ($1, $2, $3, $4, $5)
            """,
            event_name,
            event_category,
            user_id,
            guild_id,
            json.dumps(properties or {}),
        )
        return True
    except Exception as e:
        logger.debug(f"Analytics tracking failed: {e}")
        return False


def track(
    event_name: str,
    event_category: str,
    user_id: Optional[int] = None,
    guild_id: Optional[int] = None,
    properties: Optional[dict[str, Any]] = None,
) -> None:
    """Fire-and-forget version of track_async. Needs a running loop."""
    if not is_enabled():
        return

    try:
        loop = asyncio.get_running_loop()
    except RuntimeError:
        # No running loop - skip tracking
        return
    loop.create_task(track_async(event_name, event_category, user_id, guild_id, properties))


async def shutdown() -> None:
    """Close the connection pool. Call on bot shutdown."""
    global _pool
    if _pool is not None:
        await _pool.close()
        _pool = None
