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
Alarm Configuration

Tunable settings for the alarm scheduler and delivery.
Values can be overridden via environment variables.
"""

import os
from dataclasses import dataclass
from pathlib import Path

DEFAULT_SOUND_PATH = str(Path(__file__).resolve().parent.parent / "assets" / "alarm.mp3")


@dataclass
class AlarmConfig:
    """Configuration for alarm scheduling and delivery."""

    # Scheduler loop interval in seconds
    check_interval: float = 1.0

    # Voice cue
    sound_path: str = DEFAULT_SOUND_PATH
    sound_volume: float = 0.5

    default_message: str = "Time is up!"

    # Pending alarms a single user may hold
    max_alarms_per_user: int = 25

    @classmethod
    def from_env(cls) -> "AlarmConfig":
        """Create config from environment variables with defaults."""
        return cls(
            check_interval=float(os.getenv("ALARM_CHECK_INTERVAL", "1.0")),
            sound_path=os.getenv("ALARM_SOUND_PATH", DEFAULT_SOUND_PATH),
            sound_volume=float(os.getenv("ALARM_SOUND_VOLUME", "0.5")),
            default_message=os.getenv("ALARM_DEFAULT_MESSAGE", "Time is up!"),
            max_alarms_per_user=int(os.getenv("ALARM_MAX_PER_USER", "25")),
        )
