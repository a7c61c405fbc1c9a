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
Alarms Package

One-shot alarms parsed from free-form time expressions, delivered by voice
and DM.
"""

from .config import AlarmConfig
from .dispatcher import ChannelOutcome, DeliveryReport, NotificationDispatcher
from .duration import format_duration
from .registry import Alarm, AlarmRegistry, AlarmSummary, RecipientContext
from .scheduler import AlarmScheduler, ScheduledAlarm
from .time_parser import (
    InvalidTimeFormat,
    ParsedTime,
    TimeParseError,
    detect_language,
    parse_time_expression,
)

__all__ = [
    "AlarmConfig",
    "ChannelOutcome",
    "DeliveryReport",
    "NotificationDispatcher",
    "format_duration",
    "Alarm",
    "AlarmRegistry",
    "AlarmSummary",
    "RecipientContext",
    "AlarmScheduler",
    "ScheduledAlarm",
    "InvalidTimeFormat",
    "ParsedTime",
    "TimeParseError",
    "detect_language",
    "parse_time_expression",
]
