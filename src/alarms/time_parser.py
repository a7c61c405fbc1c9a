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
Time Parser Module

Turns free-form time expressions into an absolute local instant for alarms.
Understands clock times ("14:30", "2:30 pm"), compact durations ("1h30m",
"45s") and short natural phrases in English and Portuguese ("in 5 minutes",
"em 10 minutos", "half an hour", "meia hora").
"""

import logging
import re
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable, Optional

logger = logging.getLogger("alarmbot.alarms.time_parser")

DEFAULT_LANGUAGE = "en"

# Checked in order; the first language with a substring hit wins
LANGUAGE_INDICATORS = {
    "pt": ["daqui", "hora", "horas", "minuto", "minutos", "meia", "quarto", "em", "segundo", "segundos"],
    "en": ["hour", "hours", "minute", "minutes", "quarter", "half", "in", "second", "seconds"],
}

INVALID_FORMAT_MESSAGES = {
    "en": "Invalid time format",
    "pt": "Formato de tempo inválido",
}

TWENTY_FOUR_HOUR = re.compile(r"^([01]?[0-9]|2[0-3]):([0-5][0-9])(?::([0-5][0-9]))?$")
TWELVE_HOUR = re.compile(
    r"^(1[0-2]|0?[1-9]):([0-5][0-9])(?::([0-5][0-9]))?\s*(am|pm)$", re.IGNORECASE
)
# At least one component, always starting with a digit
COMPACT_DURATION = re.compile(r"^(?=\d)(?:(\d+)h)?(?:(\d+)m)?(?:(\d+)s)?$", re.IGNORECASE)

OffsetBuilder = Callable[[re.Match], timedelta]

# Natural phrases per language, tried in this order
NATURAL_PATTERNS: dict[str, list[tuple[str, re.Pattern, OffsetBuilder]]] = {
    "en": [
        (
            "seconds",
            re.compile(r"^(?:in\s*)?(\d+)\s*sec(?:ond)?s?$", re.IGNORECASE),
            lambda m: timedelta(seconds=int(m.group(1))),
        ),
        (
            "minutes",
            re.compile(r"^(?:in\s*)?(\d+)\s*min(?:ute)?s?$", re.IGNORECASE),
            lambda m: timedelta(minutes=int(m.group(1))),
        ),
        (
            "hours",
            re.compile(r"^(?:in\s*)?(\d+(?:\.\d+)?)\s*h(?:ou)?rs?$", re.IGNORECASE),
            lambda m: timedelta(hours=float(m.group(1))),
        ),
        (
            "one_and_a_half_hours",
            re.compile(r"^(?:in\s*)?(?:one|1)\s*and\s*(?:a\s*)?half\s*h(?:ou)?rs?$", re.IGNORECASE),
            lambda m: timedelta(hours=1, minutes=30),
        ),
        (
            "one_hour",
            re.compile(r"^(?:in\s*)?(?:one|1)\s*h(?:ou)?r$", re.IGNORECASE),
            lambda m: timedelta(hours=1),
        ),
        (
            "half_hour",
            re.compile(r"^(?:in\s*)?half\s*(?:an\s*)?h(?:ou)?r$", re.IGNORECASE),
            lambda m: timedelta(minutes=30),
        ),
        (
            "quarter_hour",
            re.compile(r"^(?:in\s*)?(?:a\s*)?quarter\s*(?:of\s*an\s*)?h(?:ou)?r$", re.IGNORECASE),
            lambda m: timedelta(minutes=15),
        ),
    ],
    "pt": [
        (
            "seconds",
            re.compile(r"^(?:em|daqui a)?\s*(\d+)\s*seg(?:undo)?s?$", re.IGNORECASE),
            lambda m: timedelta(seconds=int(m.group(1))),
        ),
        (
            "minutes",
            re.compile(r"^(?:em|daqui a)?\s*(\d+)\s*min(?:uto)?s?$", re.IGNORECASE),
            lambda m: timedelta(minutes=int(m.group(1))),
        ),
        (
            "hours",
            re.compile(r"^(?:em|daqui a)?\s*(\d+(?:\.\d+)?)\s*h(?:ora)?s?$", re.IGNORECASE),
            lambda m: timedelta(hours=float(m.group(1))),
        ),
        (
            "one_and_a_half_hours",
            re.compile(r"^(?:em|daqui a)?\s*(?:uma|1)\s*(?:hora\s*)?e\s*meia$", re.IGNORECASE),
            lambda m: timedelta(hours=1, minutes=30),
        ),
        (
            "one_hour",
            re.compile(r"^(?:em|daqui a)?\s*(?:uma|1)\s*hora$", re.IGNORECASE),
            lambda m: timedelta(hours=1),
        ),
        (
            "half_hour",
            re.compile(r"^(?:em|daqui a)?\s*meia\s*hora$", re.IGNORECASE),
            lambda m: timedelta(minutes=30),
        ),
        (
            "quarter_hour",
            re.compile(r"^(?:em|daqui a)?\s*(?:um\s*)?quarto\s*de\s*hora$", re.IGNORECASE),
            lambda m: timedelta(minutes=15),
        ),
    ],
}


@dataclass
class ParsedTime:
    """Result of parsing a time expression."""

    due_at: datetime
    strategy: str  # "24h", "12h", "compact" or "natural:<phrase>"
    language: str
    original_input: str


class TimeParseError(Exception):
    """Raised when a time expression cannot be parsed."""

    pass


class InvalidTimeFormat(TimeParseError):
    """No parsing strategy matched. The message is in the detected language."""

    def __init__(self, language: str = DEFAULT_LANGUAGE):
        self.language = language
        super().__init__(INVALID_FORMAT_MESSAGES.get(language, INVALID_FORMAT_MESSAGES[DEFAULT_LANGUAGE]))


def local_now() -> datetime:
    """Current host-local time, timezone aware."""
    return datetime.now().astimezone()


def detect_language(expr: str) -> str:
    """
    Guess the language of a time expression from indicator words.

    Args:
        expr: Raw time expression

    Returns:
        Language code ("pt" or "en"), DEFAULT_LANGUAGE if nothing matched
    """
    expr_lower = expr.lower()
    for language, indicators in LANGUAGE_INDICATORS.items():
        if any(indicator in expr_lower for indicator in indicators):
            return language
    return DEFAULT_LANGUAGE


def _next_occurrence(now: datetime, hour: int, minute: int, second: int) -> datetime:
    """Today at the given time-of-day, or tomorrow if that is not after now."""
    candidate = now.replace(hour=hour, minute=minute, second=second, microsecond=0)
    if candidate <= now:
        candidate += timedelta(days=1)
    return candidate


def _parse_twenty_four_hour(expr: str, now: datetime) -> Optional[datetime]:
    match = TWENTY_FOUR_HOUR.match(expr)
    if not match:
        return None

    hours, minutes, seconds = match.groups()
    return _next_occurrence(now, int(hours), int(minutes), int(seconds or 0))


def _parse_twelve_hour(expr: str, now: datetime) -> Optional[datetime]:
    match = TWELVE_HOUR.match(expr)
    if not match:
        return None

    hours, minutes, seconds, period = match.groups()
    hour = int(hours)
    period = period.lower()

    # Convert to 24-hour
    if period == "pm" and hour != 12:
        hour += 12
    elif period == "am" and hour == 12:
        hour = 0

    return _next_occurrence(now, hour, int(minutes), int(seconds or 0))


def _parse_compact(expr: str, now: datetime) -> Optional[datetime]:
    match = COMPACT_DURATION.match(expr)
    if not match:
        return None

    hours, minutes, seconds = (int(group or 0) for group in match.groups())
    return now + timedelta(hours=hours, minutes=minutes, seconds=seconds)


def _parse_natural(expr: str, now: datetime, language: str) -> Optional[tuple[str, datetime]]:
    for name, pattern, offset in NATURAL_PATTERNS[language]:
        match = pattern.match(expr)
        if match:
            return name, now + offset(match)
    return None


def _match_strategies(expr: str, now: datetime, language: str) -> Optional[ParsedTime]:
    """Try each strategy in order; None if nothing matched."""
    due_at = _parse_twenty_four_hour(expr, now)
    if due_at is not None:
        return ParsedTime(due_at, "24h", language, expr)

    due_at = _parse_twelve_hour(expr, now)
    if due_at is not None:
        return ParsedTime(due_at, "12h", language, expr)

    due_at = _parse_compact(expr, now)
    if due_at is not None:
        return ParsedTime(due_at, "compact", language, expr)

    natural = _parse_natural(expr, now, language)
    if natural is not None:
        name, due_at = natural
        return ParsedTime(due_at, f"natural:{name}", language, expr)

    return None


def parse_time_expression(expr: str, now: Optional[datetime] = None) -> ParsedTime:
    """
    Parse a time expression into an absolute instant.

    Strategies are tried in a fixed order and the first match wins:
    24-hour clock, 12-hour clock, compact duration, natural phrases.
    Clock times roll over to tomorrow when already passed today.

    Args:
        expr: The time expression to parse
        now: Reference instant (defaults to the host's local time)

    Returns:
        ParsedTime with the due instant and how it was recognised

    Raises:
        InvalidTimeFormat: If no strategy matches the expression
    """
    expr = expr.strip()
    language = detect_language(expr)

    if not expr:
        raise InvalidTimeFormat(language)

    if now is None:
        now = local_now()

    try:
        parsed = _match_strategies(expr, now, language)
    except OverflowError:
        # Grammar-valid but past the largest representable date
        logger.debug(f"Time expression out of range: '{expr}'")
        raise InvalidTimeFormat(language)

    if parsed is not None:
        return parsed

    logger.debug(f"No strategy matched '{expr}' (language={language})")
    raise InvalidTimeFormat(language)
