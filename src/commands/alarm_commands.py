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
Alarm Slash Commands

Discord slash commands for setting, listing and cancelling alarms.
"""

import logging
from typing import Optional

import discord
from discord import app_commands
from discord.ext import commands

from alarms import AlarmScheduler, AlarmSummary, InvalidTimeFormat, RecipientContext, ScheduledAlarm
from analytics import track

logger = logging.getLogger("alarmbot.commands.alarm")

TIME_EXAMPLES = {
    "en": (
        "**Examples:**\n"
        "- `14:30` or `2:30 pm`\n"
        "- `1h30m`, `45s`\n"
        "- `in 5 minutes`, `1.5 hours`\n"
        "- `half an hour`, `quarter hour`"
    ),
    "pt": (
        "**Exemplos:**\n"
        "- `14:30`\n"
        "- `1h30m`, `45s`\n"
        "- `em 10 minutos`, `daqui a 2 horas`\n"
        "- `meia hora`, `uma hora e meia`"
    ),
}

# Embed field limit
MAX_LISTED = 25


def recipient_from_interaction(interaction: discord.Interaction) -> RecipientContext:
    """Capture the ids needed to reach the user later."""
    return RecipientContext(
        user_id=interaction.user.id,
        guild_id=interaction.guild_id,
        channel_id=interaction.channel_id,
    )


def build_confirmation(scheduled: ScheduledAlarm) -> str:
    duration = scheduled.confirmation_text or "a moment"
    return f"✅ Alarm set! I'll notify you in {duration}"


def build_list_embed(alarms: list[AlarmSummary]) -> discord.Embed:
    """Embed listing pending alarms with Discord-rendered timestamps."""
    embed = discord.Embed(
        title="Your Alarms",
        description=f"{len(alarms)} pending alarm(s)",
        color=discord.Color.blue(),
    )

    for alarm in alarms[:MAX_LISTED]:
        message = alarm.message
        if len(message) > 50:
            message = message[:47] + "..."

        embed.add_field(
            name=f"`{alarm.id}`",
            value=(
                f"{message}\n"
                f"{discord.utils.format_dt(alarm.due_at, 'T')} "
                f"({discord.utils.format_dt(alarm.due_at, 'R')})"
            ),
            inline=False,
        )

    if len(alarms) > MAX_LISTED:
        embed.set_footer(text=f"Showing {MAX_LISTED} of {len(alarms)} | Use /alarm cancel <id> to remove")
    else:
        embed.set_footer(text="Use /alarm cancel <id> to remove")
    return embed


class AlarmCommands(commands.Cog):
    """
    Slash commands for alarms.

    Commands:
    - /alarm set - Set an alarm
    - /alarm list - List your pending alarms
    - /alarm cancel - Cancel an alarm
    """

    alarm_group = app_commands.Group(
        name="alarm",
        description="Set and manage your alarms",
    )

    def __init__(self, bot: commands.Bot, scheduler: AlarmScheduler):
        self.bot = bot
        self.scheduler = scheduler

    def _track_command(self, interaction: discord.Interaction, subcommand: str) -> None:
        track(
            "command_used",
            "command",
            user_id=interaction.user.id,
            guild_id=interaction.guild_id,
            properties={"command_name": "alarm", "subcommand": subcommand},
        )

    # =========================================================================
    # /alarm set
    # =========================================================================

    @alarm_group.command(name="set")
    @app_commands.describe(
        time="When to ring (e.g., '14:30', '2:30 pm', '1h30m', 'in 5 minutes', 'meia hora')",
        message="Optional: what to tell you when the alarm goes off",
    )
    async def set_alarm(
        self,
        interaction: discord.Interaction,
        time: str,
        message: Optional[str] = None,
    ):
        """Set an alarm."""
        self._track_command(interaction, "set")
        user_id = interaction.user.id

        limit = self.scheduler.config.max_alarms_per_user
        if self.scheduler.count_for(user_id) >= limit:
            await interaction.response.send_message(
                f"You already have {limit} pending alarms. "
                "Cancel one with `/alarm cancel` first.",
                ephemeral=True,
            )
            return

        try:
            scheduled = self.scheduler.schedule(
                time, user_id, recipient_from_interaction(interaction), message
            )
        except InvalidTimeFormat as e:
            await interaction.response.send_message(
                f"{e}: `{time}`\n\n{TIME_EXAMPLES.get(e.language, TIME_EXAMPLES['en'])}",
                ephemeral=True,
            )
            return

        embed = discord.Embed(color=discord.Color.green())
        embed.add_field(name="ID", value=f"`{scheduled.alarm_id}`", inline=True)
        embed.add_field(
            name="Rings",
            value=discord.utils.format_dt(scheduled.due_at, "F"),
            inline=True,
        )
        await interaction.response.send_message(
            build_confirmation(scheduled), embed=embed, ephemeral=True
        )

        track(
            "alarm_scheduled",
            "alarm",
            user_id=user_id,
            guild_id=interaction.guild_id,
            properties={"alarm_id": scheduled.alarm_id, "has_message": message is not None},
        )

    # =========================================================================
    # /alarm list
    # =========================================================================

    @alarm_group.command(name="list")
    async def list_alarms(self, interaction: discord.Interaction):
        """List your pending alarms."""
        self._track_command(interaction, "list")

        alarms = self.scheduler.list_for(interaction.user.id)
        if not alarms:
            await interaction.response.send_message(
                "You don't have any alarms. Use `/alarm set` to create one!",
                ephemeral=True,
            )
            return

        await interaction.response.send_message(embed=build_list_embed(alarms), ephemeral=True)

    # =========================================================================
    # /alarm cancel
    # =========================================================================

    @alarm_group.command(name="cancel")
    @app_commands.describe(alarm_id="The alarm ID to cancel (see /alarm list)")
    async def cancel_alarm(self, interaction: discord.Interaction, alarm_id: str):
        """Cancel an alarm."""
        self._track_command(interaction, "cancel")
        alarm_id = alarm_id.strip().strip("`")

        if self.scheduler.cancel(alarm_id, interaction.user.id):
            await interaction.response.send_message(
                f"Alarm `{alarm_id}` has been cancelled.", ephemeral=True
            )
            track("alarm_cancelled", "alarm", user_id=interaction.user.id, properties={"alarm_id": alarm_id})
        else:
            await interaction.response.send_message(
                f"Alarm `{alarm_id}` not found or you don't own it.", ephemeral=True
            )

    @cancel_alarm.autocomplete("alarm_id")
    async def alarm_id_autocomplete(
        self,
        interaction: discord.Interaction,
        current: str,
    ) -> list[app_commands.Choice[str]]:
        """Autocomplete with the user's own pending alarms."""
        current_lower = current.lower()
        choices = []
        for alarm in self.scheduler.list_for(interaction.user.id):
            label = f"{alarm.due_at.strftime('%H:%M:%S')} - {alarm.message}"[:100]
            if current_lower in alarm.id.lower() or current_lower in label.lower():
                choices.append(app_commands.Choice(name=label, value=alarm.id))
        return choices[:25]
