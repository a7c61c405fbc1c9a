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
Notification Dispatcher Module

Delivers a fired alarm through every channel we have: a sound in the owner's
voice channel (best effort) and a direct message. Each channel produces its
own outcome; nothing raised by a channel ever reaches the caller.
"""

import logging
from dataclasses import dataclass
from typing import Optional, Protocol

from analytics import track

from .registry import Alarm, RecipientContext

logger = logging.getLogger("alarmbot.alarms.dispatcher")

VOICE = "voice"
DIRECT_MESSAGE = "direct_message"

DELIVERED = "delivered"
SKIPPED = "skipped"
FAILED = "failed"


class VoiceDestination(Protocol):
    """A voice channel the owner is currently in."""

    @property
    def joinable(self) -> bool: ...


class DeliveryTransport(Protocol):
    """Platform capabilities needed to deliver an alarm."""

    async def resolve_voice_destination(
        self, recipient: RecipientContext
    ) -> Optional[VoiceDestination]: ...

    async def play_alarm_cue(self, destination: VoiceDestination) -> None: ...

    async def send_direct_message(self, recipient: RecipientContext, content: str) -> None: ...


@dataclass(frozen=True)
class ChannelOutcome:
    """Result of one delivery channel."""

    channel: str
    status: str
    error: Optional[str] = None

    @property
    def delivered(self) -> bool:
        return self.status == DELIVERED


@dataclass(frozen=True)
class DeliveryReport:
    """Per-channel outcomes for a single alarm."""

    alarm_id: str
    voice: ChannelOutcome
    direct_message: ChannelOutcome

    @property
    def delivered(self) -> bool:
        """True if at least one channel got through."""
        return self.voice.delivered or self.direct_message.delivered


def format_alarm_message(message: str) -> str:
    return f"🔔 **Alarm!** {message}"


class NotificationDispatcher:
    """Attempts voice and DM delivery for alarms, never raising."""

    def __init__(self, transport: DeliveryTransport):
        self.transport = transport

    async def _deliver_voice(self, alarm: Alarm) -> ChannelOutcome:
        try:
            destination = await self.transport.resolve_voice_destination(alarm.recipient)
            if destination is None:
                return ChannelOutcome(VOICE, SKIPPED, "not in a voice channel")
            if not destination.joinable:
                return ChannelOutcome(VOICE, SKIPPED, "voice channel not joinable")

            await self.transport.play_alarm_cue(destination)
            return ChannelOutcome(VOICE, DELIVERED)
        except Exception as e:
            logger.warning(f"Could not play voice notification for alarm {alarm.id}: {e}")
            return ChannelOutcome(VOICE, FAILED, str(e)[:200])

    async def _deliver_direct_message(self, alarm: Alarm) -> ChannelOutcome:
        try:
            await self.transport.send_direct_message(
                alarm.recipient, format_alarm_message(alarm.message)
            )
            return ChannelOutcome(DIRECT_MESSAGE, DELIVERED)
        except Exception as e:
            logger.warning(f"Could not send DM for alarm {alarm.id}: {e}")
            return ChannelOutcome(DIRECT_MESSAGE, FAILED, str(e)[:200])

    async def deliver(self, alarm: Alarm) -> DeliveryReport:
        """
        Deliver an alarm through voice and then DM.

        Both channels are always attempted; a voice success does not skip
        the DM and a voice failure does not block it.

        Args:
            alarm: The alarm that fired

        Returns:
            DeliveryReport with one outcome per channel
        """
        voice = await self._deliver_voice(alarm)
        direct_message = await self._deliver_direct_message(alarm)
        report = DeliveryReport(alarm.id, voice, direct_message)

        logger.info(
            f"Alarm {alarm.id} for user {alarm.owner_id}: "
            f"voice={voice.status}, dm={direct_message.status}"
        )

        track(
            "alarm_delivered",
            "alarm",
            user_id=alarm.owner_id,
            properties={
                "alarm_id": alarm.id,
                "voice": voice.status,
                "direct_message": direct_message.status,
            },
        )
        return report
