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
alarmbot Discord Bot

Connects to Discord, registers the /alarm commands and runs the alarm
scheduler. Alarms live in memory only and are lost on restart.
"""

import asyncio
import logging
import os
from typing import Optional

import discord
from discord.ext import commands
from dotenv import load_dotenv

import analytics
from alarms import AlarmConfig, AlarmScheduler, NotificationDispatcher
from alarms.discord_transport import DiscordTransport
from commands.alarm_commands import AlarmCommands

load_dotenv()

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger("alarmbot")


class AlarmBot(commands.Bot):
    """Discord bot that rings alarms in voice and by DM."""

    def __init__(self, config: Optional[AlarmConfig] = None, guild_id: Optional[int] = None):
        intents = discord.Intents.default()
        intents.guilds = True
        intents.voice_states = True

        super().__init__(command_prefix="!", intents=intents)

        self.config = config or AlarmConfig.from_env()
        self.guild_id = guild_id
        self.scheduler = AlarmScheduler(
            NotificationDispatcher(DiscordTransport(self, self.config)),
            config=self.config,
            bot=self,
        )

    async def setup_hook(self):
        """Called when the bot is starting up."""
        logger.info(f"Setup: ALARM_CHECK_INTERVAL={self.config.check_interval}")
        logger.info(f"Setup: ALARM_SOUND_PATH={self.config.sound_path}")
        logger.info(f"Setup: analytics {'enabled' if analytics.is_enabled() else 'disabled'}")

        if not os.path.exists(self.config.sound_path):
            logger.warning(f"Alarm sound not found at {self.config.sound_path}, voice cues will fail")

        await self.add_cog(AlarmCommands(self, self.scheduler))

        try:
            if self.guild_id:
                guild = discord.Object(id=self.guild_id)
                self.tree.copy_global_to(guild=guild)
                synced = await self.tree.sync(guild=guild)
            else:
                synced = await self.tree.sync()
            logger.info(f"Synced {len(synced)} application command(s)")
        except discord.HTTPException as e:
            logger.error(f"Failed to sync application commands: {e}", exc_info=True)

        self.scheduler.start()

    async def on_ready(self):
        """Called when the bot has connected to Discord."""
        logger.info(f"Logged in as {self.user} (ID: {self.user.id})")
        logger.info(f"Connected to {len(self.guilds)} guild(s)")

    async def close(self):
        """Clean up resources on shutdown."""
        self.scheduler.stop()
        await self.scheduler.wait_for_deliveries()
        pending = len(self.scheduler.registry)
        if pending:
            logger.info(f"Shutting down with {pending} pending alarm(s), they will not fire")
        await analytics.shutdown()
        await super().close()


async def main():
    """Run the bot."""
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        print("Error: DISCORD_BOT_TOKEN environment variable not set")
        print("Please set it in your .env file")
        return

    guild_id = os.getenv("DISCORD_GUILD_ID")
    bot = AlarmBot(guild_id=int(guild_id) if guild_id else None)
    async with bot:
        await bot.start(token)


def run():
    """Console script entry point."""
    asyncio.run(main())


if __name__ == "__main__":
    run()
