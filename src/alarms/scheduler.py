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
Alarm Scheduler Module

Owns the alarm registry and runs the background loop that fires due alarms.
Uses discord.ext.tasks for the fixed-interval tick.
"""

import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING, Callable, Optional

from discord.ext import tasks

from analytics import track

from .config import AlarmConfig
from .dispatcher import NotificationDispatcher
from .registry import Alarm, AlarmRegistry, AlarmSummary, RecipientContext
from .time_parser import local_now, parse_time_expression

if TYPE_CHECKING:
    from discord.ext import commands

logger = logging.getLogger("alarmbot.alarms.scheduler")


@dataclass(frozen=True)
class ScheduledAlarm:
    """What the caller gets back after scheduling."""

    alarm_id: str
    due_at: datetime
    confirmation_text: str


class AlarmScheduler:
    """
    Background scheduler for one-shot alarms.

    Every tick removes all due alarms from the registry and hands each one to
    the dispatcher as its own task. Removal happens before delivery, so an
    alarm fires at most once and a concurrent cancel simply finds nothing.
    """

    def __init__(
        self,
        dispatcher: NotificationDispatcher,
        registry: Optional[AlarmRegistry] = None,
        config: Optional[AlarmConfig] = None,
        bot: Optional["commands.Bot"] = None,
        clock: Callable[[], datetime] = local_now,
    ):
        """
        Initialize the alarm scheduler.

        Args:
            dispatcher: Delivers fired alarms
            registry: Pending alarm store (a fresh one by default)
            config: Alarm settings
            bot: Bot to wait for before the loop starts
            clock: Source of the current instant
        """
        self.config = config or AlarmConfig()
        self.dispatcher = dispatcher
        self.registry = registry if registry is not None else AlarmRegistry(self.config.default_message)
        self.bot = bot
        self._clock = clock
        self._inflight: set[asyncio.Task] = set()
        self._started = False

        self._check_alarms.change_interval(seconds=self.config.check_interval)

    def start(self) -> None:
        """Start the scheduler loop."""
        if not self._started:
            self._check_alarms.start()
            self._started = True
            logger.info(f"Alarm scheduler started (interval={self.config.check_interval}s)")

    def stop(self) -> None:
        """Stop the scheduler loop."""
        if self._started:
            self._check_alarms.cancel()
            self._started = False
            logger.info("Alarm scheduler stopped")

    # =========================================================================
    # Caller-facing operations
    # =========================================================================

    def schedule(
        self,
        text: str,
        owner_id: int,
        recipient: RecipientContext,
        message: Optional[str] = None,
    ) -> ScheduledAlarm:
        """
        Parse a time expression and schedule an alarm for it.

        Raises:
            InvalidTimeFormat: If the expression is not understood
        """
        now = self._clock()
        parsed = parse_time_expression(text, now=now)
        alarm_id, confirmation = self.registry.schedule(
            parsed.due_at, owner_id, recipient, message, now=now
        )
        logger.debug(f"Alarm {alarm_id} parsed '{text}' via {parsed.strategy} ({parsed.language})")
        return ScheduledAlarm(alarm_id, parsed.due_at, confirmation)

    def cancel(self, alarm_id: str, requester_id: int) -> bool:
        return self.registry.cancel(alarm_id, requester_id)

    def list_for(self, owner_id: int) -> list[AlarmSummary]:
        return self.registry.list_for(owner_id)

    def count_for(self, owner_id: int) -> int:
        return self.registry.count_for(owner_id)

    # =========================================================================
    # Loop
    # =========================================================================

    async def _dispatch(self, alarm: Alarm) -> None:
        try:
            await self.dispatcher.deliver(alarm)
        except Exception as e:
            logger.error(f"Failed to trigger alarm {alarm.id}: {e}", exc_info=True)

    def tick(self, now: Optional[datetime] = None) -> list[Alarm]:
        """
        Fire every alarm that is due.

        Must be called from a running event loop; deliveries run as separate
        tasks.

        Returns:
            The alarms that were removed and dispatched
        """
        due = self.registry.pop_due(now or self._clock())

        for alarm in due:
            try:
                task = asyncio.create_task(self._dispatch(alarm), name=f"deliver-{alarm.id}")
            except Exception as e:
                logger.error(f"Could not dispatch alarm {alarm.id}: {e}", exc_info=True)
                continue
            self._inflight.add(task)
            task.add_done_callback(self._inflight.discard)

        if due:
            logger.info(f"Fired {len(due)} due alarm(s)")
        return due

    async def wait_for_deliveries(self) -> None:
        """Wait until every in-flight delivery has finished."""
        while self._inflight:
            await asyncio.gather(*list(self._inflight), return_exceptions=True)

    @tasks.loop(seconds=1.0)
    async def _check_alarms(self) -> None:
        """Check for due alarms and dispatch them."""
        try:
            self.tick()
        except Exception as e:
            logger.error(f"Error in alarm scheduler loop: {e}", exc_info=True)
            track(
                "scheduler_error",
                "error",
                properties={
                    "error_type": type(e).__name__,
                    "error_message": str(e)[:200],
                },
            )

    @_check_alarms.before_loop
    async def _before_check(self) -> None:
        """Wait for the bot to be ready before starting the loop."""
        if self.bot is not None:
            await self.bot.wait_until_ready()
        logger.info("Alarm scheduler ready, starting loop")

    @_check_alarms.after_loop
    async def _after_check(self) -> None:
        await self.wait_for_deliveries()
