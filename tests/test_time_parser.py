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

"""Tests for the alarm time expression parser."""

import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from alarms.time_parser import (
    InvalidTimeFormat,
    TimeParseError,
    detect_language,
    parse_time_expression,
)


def _at(hour: int, minute: int = 0, second: int = 0) -> datetime:
    return datetime(2025, 1, 1, hour, minute, second, tzinfo=timezone.utc)


class TestLanguageDetection:
    """Test indicator-word language detection."""

    def test_english_indicators(self):
        assert detect_language("in 5 minutes") == "en"
        assert detect_language("half an hour") == "en"
        assert detect_language("A QUARTER HOUR") == "en"

    def test_portuguese_indicators(self):
        assert detect_language("em 10 minutos") == "pt"
        assert detect_language("daqui a 2 horas") == "pt"
        assert detect_language("meia hora") == "pt"

    def test_portuguese_checked_first(self):
        # "em" hits before any English word is considered
        assert detect_language("remember in 5 minutes") == "pt"

    def test_default_language(self):
        assert detect_language("14:30") == "en"
        assert detect_language("whenever") == "en"


class TestClockTimes:
    """Test 24h and 12h clock parsing with rollover."""

    def test_24h_later_today(self):
        result = parse_time_expression("14:00", now=_at(13, 0))
        assert result.due_at == _at(14, 0)
        assert result.strategy == "24h"

    def test_24h_already_passed_rolls_to_tomorrow(self):
        result = parse_time_expression("14:00", now=_at(15, 0))
        assert result.due_at == _at(14, 0) + timedelta(days=1)

    def test_24h_exactly_now_rolls_to_tomorrow(self):
        result = parse_time_expression("13:00", now=_at(13, 0))
        assert result.due_at == _at(13, 0) + timedelta(days=1)

    def test_24h_with_seconds(self):
        result = parse_time_expression("09:05:10", now=_at(8, 0))
        assert result.due_at == _at(9, 5, 10)

    def test_24h_single_digit_hour(self):
        result = parse_time_expression("9:05", now=_at(8, 0))
        assert result.due_at == _at(9, 5)

    def test_24h_clears_microseconds(self):
        now = _at(8, 0).replace(microsecond=123456)
        result = parse_time_expression("10:00", now=now)
        assert result.due_at.microsecond == 0

    def test_12h_pm(self):
        result = parse_time_expression("2:30 pm", now=_at(13, 0))
        assert result.due_at == _at(14, 30)
        assert result.strategy == "12h"

    def test_12h_uppercase_and_no_space(self):
        result = parse_time_expression("2:30PM", now=_at(13, 0))
        assert result.due_at == _at(14, 30)

    def test_12h_noon_and_midnight(self):
        assert parse_time_expression("12:00 pm", now=_at(11, 0)).due_at == _at(12, 0)
        assert parse_time_expression("12:00 am", now=_at(11, 0)).due_at == _at(0, 0) + timedelta(days=1)

    def test_12h_am_passed_rolls_over(self):
        result = parse_time_expression("7:15 am", now=_at(13, 0))
        assert result.due_at == _at(7, 15) + timedelta(days=1)

    def test_rollover_is_never_more_than_a_day(self):
        now = _at(23, 59, 59)
        for text in ["00:00", "23:59", "12:00 pm", "11:59:59 pm"]:
            due = parse_time_expression(text, now=now).due_at
            assert now < due <= now + timedelta(days=1)

    def test_invalid_clock_values(self):
        for text in ["24:00", "12:60", "13:00 pm", "0:30 am", "1.5:00"]:
            with pytest.raises(InvalidTimeFormat):
                parse_time_expression(text, now=_at(12, 0))


class TestCompactDurations:
    """Test compact h/m/s shorthand."""

    def test_hours_and_minutes(self):
        now = _at(10, 0)
        result = parse_time_expression("1h30m", now=now)
        assert result.due_at == now + timedelta(hours=1, minutes=30)
        assert result.strategy == "compact"

    def test_all_components(self):
        now = _at(10, 0)
        assert parse_time_expression("2h5m10s", now=now).due_at == now + timedelta(hours=2, minutes=5, seconds=10)

    def test_single_components(self):
        now = _at(10, 0)
        assert parse_time_expression("45s", now=now).due_at == now + timedelta(seconds=45)
        assert parse_time_expression("2h", now=now).due_at == now + timedelta(hours=2)
        assert parse_time_expression("10M", now=now).due_at == now + timedelta(minutes=10)

    def test_no_rollover_for_durations(self):
        now = _at(23, 30)
        assert parse_time_expression("1h", now=now).due_at == now + timedelta(hours=1)

    def test_decimal_not_accepted(self):
        with pytest.raises(InvalidTimeFormat):
            parse_time_expression("1.5h", now=_at(10, 0))


class TestNaturalPhrases:
    """Test English and Portuguese relative phrases."""

    @pytest.mark.parametrize(
        "text,offset",
        [
            ("in 30 seconds", timedelta(seconds=30)),
            ("10 secs", timedelta(seconds=10)),
            ("in 5 minutes", timedelta(minutes=5)),
            ("5 min", timedelta(minutes=5)),
            ("In 5 Minutes", timedelta(minutes=5)),
            ("in 2 hours", timedelta(hours=2)),
            ("1.5 hours", timedelta(hours=1, minutes=30)),
            ("in 3 hrs", timedelta(hours=3)),
            ("one and a half hours", timedelta(hours=1, minutes=30)),
            ("in one hour", timedelta(hours=1)),
            ("half an hour", timedelta(minutes=30)),
            ("in half an hour", timedelta(minutes=30)),
            ("quarter hour", timedelta(minutes=15)),
            ("a quarter of an hour", timedelta(minutes=15)),
        ],
    )
    def test_english(self, text, offset):
        now = _at(10, 0)
        result = parse_time_expression(text, now=now)
        assert result.due_at == now + offset
        assert result.language == "en"

    @pytest.mark.parametrize(
        "text,offset",
        [
            ("em 20 segundos", timedelta(seconds=20)),
            ("em 10 minutos", timedelta(minutes=10)),
            ("daqui a 2 horas", timedelta(hours=2)),
            ("em 1.5 horas", timedelta(hours=1, minutes=30)),
            ("uma hora e meia", timedelta(hours=1, minutes=30)),
            ("em uma hora", timedelta(hours=1)),
            ("meia hora", timedelta(minutes=30)),
            ("daqui a meia hora", timedelta(minutes=30)),
            ("um quarto de hora", timedelta(minutes=15)),
        ],
    )
    def test_portuguese(self, text, offset):
        now = _at(10, 0)
        result = parse_time_expression(text, now=now)
        assert result.due_at == now + offset
        assert result.language == "pt"

    def test_surrounding_whitespace_ignored(self):
        now = _at(10, 0)
        assert parse_time_expression("   in 5 minutes  ", now=now).due_at == now + timedelta(minutes=5)


class TestInvalidFormat:
    """Test error reporting."""

    def test_unrecognized_input_uses_default_language(self):
        with pytest.raises(InvalidTimeFormat) as exc_info:
            parse_time_expression("whenever", now=_at(10, 0))
        assert exc_info.value.language == "en"
        assert str(exc_info.value) == "Invalid time format"

    def test_portuguese_message(self):
        with pytest.raises(InvalidTimeFormat) as exc_info:
            parse_time_expression("amanhã de manhã cedo em breve", now=_at(10, 0))
        assert exc_info.value.language == "pt"
        assert str(exc_info.value) == "Formato de tempo inválido"

    def test_empty_input(self):
        with pytest.raises(TimeParseError):
            parse_time_expression("   ", now=_at(10, 0))

    def test_defaults_to_local_now(self):
        before = datetime.now().astimezone()
        result = parse_time_expression("in 5 minutes")
        after = datetime.now().astimezone()
        assert before + timedelta(minutes=5) <= result.due_at <= after + timedelta(minutes=5)


class TestOutOfRange:
    """Grammar-valid expressions past the largest representable date."""

    @pytest.mark.parametrize(
        "text",
        [
            "99999999999h",
            "in 100000000 hours",
            "99999999999 min",
            "99999999999999999999 seconds",
            "daqui a 100000000 horas",
        ],
    )
    def test_huge_offsets_are_invalid_format(self, text):
        with pytest.raises(InvalidTimeFormat):
            parse_time_expression(text, now=_at(12, 0))

    def test_out_of_range_message_is_localized(self):
        with pytest.raises(InvalidTimeFormat) as exc_info:
            parse_time_expression("em 99999999999 minutos", now=_at(12, 0))
        assert exc_info.value.language == "pt"
        assert str(exc_info.value) == "Formato de tempo inválido"

    def test_rollover_past_max_date(self):
        with pytest.raises(InvalidTimeFormat):
            parse_time_expression("10:00", now=datetime(9999, 12, 31, 12, 0, tzinfo=timezone.utc))
