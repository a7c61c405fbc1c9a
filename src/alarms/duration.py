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

"""Human-readable formatting of the time left until an alarm fires."""

from datetime import timedelta


def _pluralize(value: int, unit: str) -> str:
    return f"{value} {unit}" if value == 1 else f"{value} {unit}s"


def format_duration(delta: timedelta) -> str:
    """
    Format a duration as e.g. "1 hour and 30 minutes".

    Seconds are only shown for sub-minute durations. Zero or negative
    durations give an empty string.
    """
    total_seconds = max(0, int(delta.total_seconds()))
    hours = total_seconds // 3600
    minutes = (total_seconds // 60) % 60
    seconds = total_seconds % 60

    parts = []
    if hours > 0:
        parts.append(_pluralize(hours, "hour"))
    if minutes > 0:
        parts.append(_pluralize(minutes, "minute"))
    if hours == 0 and minutes == 0 and seconds > 0:
        parts.append(_pluralize(seconds, "second"))

    return " and ".join(parts)
