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
Discord Delivery Transport

discord.py implementation of the alarm delivery capabilities: finding the
owner's voice channel, playing the alarm sound there and sending a DM.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Optional, Union

import discord
from discord.ext import commands

from .config import AlarmConfig
from .registry import RecipientContext

logger = logging.getLogger("alarmbot.alarms.discord_transport")

VoiceChannelType = Union[discord.VoiceChannel, discord.StageChannel]


class VoiceBusyError(Exception):
    """The bot is already playing audio in this guild."""

    pass


@dataclass(frozen=True)
class DiscordVoiceDestination:
    """The voice channel a member is connected to."""

    channel: VoiceChannelType
    joinable: bool


class DiscordTransport:
    """
    Delivers alarms through a running discord.py bot.

    Recipient contexts only carry ids; guilds, members and users are looked
    up from the bot cache (falling back to the API) at delivery time.
    """

    def __init__(self, bot: commands.Bot, config: Optional[AlarmConfig] = None):
        self.bot = bot
        self.config = config or AlarmConfig()

    async def _get_member(self, guild: discord.Guild, user_id: int) -> Optional[discord.Member]:
        member = guild.get_member(user_id)
        if member is not None:
            return member
        try:
            return await guild.fetch_member(user_id)
        except discord.NotFound:
            return None

    async def resolve_voice_destination(
        self, recipient: RecipientContext
    ) -> Optional[DiscordVoiceDestination]:
        """
        Find the voice channel the recipient is sitting in.

        Returns:
            The destination, or None outside guilds or when not in voice
        """
        if recipient.guild_id is None:
            return None

        guild = self.bot.get_guild(recipient.guild_id)
        if guild is None:
            return None

        member = await self._get_member(guild, recipient.user_id)
        if member is None or member.voice is None or member.voice.channel is None:
            return None

        channel = member.voice.channel
        permissions = channel.permissions_for(guild.me)
        return DiscordVoiceDestination(
            channel=channel,
            joinable=permissions.connect and permissions.speak,
        )

    async def play_alarm_cue(self, destination: DiscordVoiceDestination) -> None:
        """
        Join the destination channel and start the alarm sound.

        Returns once playback has started; the bot leaves the channel when
        the sound finishes.
        """
        channel = destination.channel
        voice_client = channel.guild.voice_client

        if voice_client is not None and voice_client.is_connected():
            if voice_client.is_playing():
                raise VoiceBusyError(f"Already playing in guild {channel.guild.id}")
            if voice_client.channel != channel:
                await voice_client.move_to(channel)
        else:
            voice_client = await channel.connect()

        try:
            source = discord.PCMVolumeTransformer(
                discord.FFmpegPCMAudio(self.config.sound_path),
                volume=self.config.sound_volume,
            )
        except Exception:
            await voice_client.disconnect()
            raise

        loop = asyncio.get_running_loop()

        def _after_playback(error: Optional[Exception]) -> None:
            # Runs on the audio player thread
            if error:
                logger.warning(f"Alarm sound playback error in {channel.id}: {error}")
            asyncio.run_coroutine_threadsafe(voice_client.disconnect(), loop)

        try:
            voice_client.play(source, after=_after_playback)
        except Exception:
            await voice_client.disconnect()
            raise
        logger.info(f"Playing alarm sound in voice channel {channel.id}")

    async def send_direct_message(self, recipient: RecipientContext, content: str) -> None:
        """Send a DM to the recipient. Raises discord errors on failure."""
        user = self.bot.get_user(recipient.user_id)
        if user is None:
            user = await self.bot.fetch_user(recipient.user_id)
        await user.send(content)
