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
Alarm Registry Module

In-memory store of pending alarms. Every mutation goes through one lock so
that a scheduler scan and a user cancel can never both claim the same alarm.
"""

import logging
import time
import uuid
from dataclasses import dataclass
from datetime import datetime
from threading import Lock
from typing import Optional

from .duration import format_duration
from .time_parser import local_now

logger = logging.getLogger("alarmbot.alarms.registry")

DEFAULT_MESSAGE = "Time is up!"


@dataclass(frozen=True)
class RecipientContext:
    """
    Where to find the owner of an alarm when it fires.

    Plain data captured at scheduling time; the delivery transport turns it
    back into platform objects.
    """

    user_id: int
    guild_id: Optional[int] = None
    channel_id: Optional[int] = None


@dataclass(frozen=True)
class Alarm:
    """A pending one-shot alarm."""

    id: str
    due_at: datetime
    owner_id: int
    recipient: RecipientContext
    message: str
    created_at: datetime


@dataclass(frozen=True)
class AlarmSummary:
    """Read-only view of an alarm for listings."""

    id: str
    due_at: datetime
    message: str


def generate_alarm_id() -> str:
    """Opaque id like alarm_1735689600000_3f9a1c2b7."""
    return f"alarm_{int(time.time() * 1000)}_{uuid.uuid4().hex[:9]}"


class AlarmRegistry:
    """
    Thread-safe map of alarm id to Alarm.

    Alarms are immutable once stored. Cancelling and triggering both act by
    removal, so whichever happens first wins and the other sees nothing.
    """

    def __init__(self, default_message: str = DEFAULT_MESSAGE):
        self.default_message = default_message
        self._alarms: dict[str, Alarm] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._alarms)

    def __contains__(self, alarm_id: object) -> bool:
        with self._lock:
            return alarm_id in self._alarms

    def schedule(
        self,
        due_at: datetime,
        owner_id: int,
        recipient: RecipientContext,
        message: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> tuple[str, str]:
        """
        Store a new alarm.

        Args:
            due_at: When the alarm should fire
            owner_id: User who owns the alarm
            recipient: Delivery context for the owner
            message: Text shown at delivery (defaults to the placeholder)
            now: Reference instant for the confirmation text

        Returns:
            Tuple of (alarm_id, human-readable time until the alarm)
        """
        if now is None:
            now = local_now()

        with self._lock:
            alarm_id = generate_alarm_id()
            while alarm_id in self._alarms:
                alarm_id = generate_alarm_id()

            self._alarms[alarm_id] = Alarm(
                id=alarm_id,
                due_at=due_at,
                owner_id=owner_id,
                recipient=recipient,
                message=message or self.default_message,
                created_at=now,
            )

        logger.info(f"Scheduled alarm {alarm_id} for user {owner_id} at {due_at.isoformat()}")
        return alarm_id, format_duration(due_at - now)

    def get(self, alarm_id: str) -> Optional[Alarm]:
        with self._lock:
            return self._alarms.get(alarm_id)

    def cancel(self, alarm_id: str, requester_id: int) -> bool:
        """
        Remove an alarm if the requester owns it.

        Returns:
            True if removed, False if not found or not owned
        """
        with self._lock:
            alarm = self._alarms.get(alarm_id)
            if alarm is None or alarm.owner_id != requester_id:
                return False
            del self._alarms[alarm_id]

        logger.info(f"Cancelled alarm {alarm_id} for user {requester_id}")
        return True

    def list_for(self, owner_id: int) -> list[AlarmSummary]:
        """Snapshot of a user's pending alarms, soonest first."""
        with self._lock:
            owned = [alarm for alarm in self._alarms.values() if alarm.owner_id == owner_id]

        owned.sort(key=lambda alarm: alarm.due_at)
        return [AlarmSummary(id=alarm.id, due_at=alarm.due_at, message=alarm.message) for alarm in owned]

    def count_for(self, owner_id: int) -> int:
        with self._lock:
            return sum(1 for alarm in self._alarms.values() if alarm.owner_id == owner_id)

    def pop_due(self, now: Optional[datetime] = None) -> list[Alarm]:
        """
        Remove and return every alarm due at or before now.

        The scan and the removal happen under one lock acquisition.
        """
        if now is None:
            now = local_now()

        with self._lock:
            due = [alarm for alarm in self._alarms.values() if alarm.due_at <= now]
            for alarm in due:
                del self._alarms[alarm.id]

        due.sort(key=lambda alarm: alarm.due_at)
        return due
