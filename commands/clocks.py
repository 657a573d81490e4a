"""
Clock channel commands (status, sync).
"""
import logging
from datetime import datetime, timezone

import discord
from discord import app_commands

from config import Config
from services.registry import ChannelRegistry
from services.zones import ZoneResolver
from utils.discord_helpers import is_admin, channel_mention, PastelColors

logger = logging.getLogger("clock-bot.commands.clocks")


def create_clock_commands(
    clocks_group: app_commands.Group,
    config: Config,
    registry: ChannelRegistry,
    resolver: ZoneResolver,
    clock_tasks_getter,
) -> None:
    """
    Register clock channel commands.

    Args:
        clocks_group: Discord command group to add commands to.
        config: Bot configuration.
        registry: Channel registry.
        resolver: Zone resolver.
        clock_tasks_getter: Callable returning the running ClockTasks.
    """

    @clocks_group.command(name="status", description="Show the clock channels of this server")
    async def clocks_status(interaction: discord.Interaction):
        await interaction.response.defer(ephemeral=True)

        guild_id = str(interaction.guild_id) if interaction.guild_id else None
        tracked = registry.guild_channels(guild_id) if guild_id else []

        if not tracked:
            embed = discord.Embed(
                title="Clock Channels",
                description="This server is not managed by the clock bot.",
                color=PastelColors.GREY,
            )
            await interaction.followup.send(embed=embed, ephemeral=True)
            return

        now = datetime.now(timezone.utc)
        clock_tasks = clock_tasks_getter()

        embed = discord.Embed(
            title="Clock Channels",
            color=PastelColors.GREEN if clock_tasks.is_running else PastelColors.YELLOW,
        )
        for channel in tracked:
            desired = resolver.channel_name(channel.label, now)
            value = f"{channel_mention(channel.channel_id)}\nCurrent: `{channel.name}`"
            if desired != channel.name:
                value += f"\nNext: `{desired}`"
            embed.add_field(name=channel.label.value, value=value, inline=False)

        last_update = clock_tasks.last_update
        embed.add_field(
            name="Updates",
            value=(
                f"Every {config.update_every_minutes} minutes"
                + (f", last at {last_update:%H:%M} UTC" if last_update else "")
            ),
            inline=False,
        )
        embed.set_footer(text=f"Requested by {interaction.user}")
        await interaction.followup.send(embed=embed, ephemeral=True)

    @clocks_group.command(name="sync", description="Update the clock channels now (admin only)")
    async def clocks_sync(interaction: discord.Interaction):
        if not is_admin(interaction, config.admin_discord_id):
            await interaction.response.send_message(
                "You are not allowed to use this command.",
                ephemeral=True,
            )
            return

        await interaction.response.defer(ephemeral=True)

        logger.warning(f"Clock sync requested by {interaction.user} ({interaction.user.id})")
        renamed = await clock_tasks_getter().reconcile(force=True)

        embed = discord.Embed(
            title="Clock Sync",
            description=(
                f"Renamed {renamed} channel(s)." if renamed
                else "All clock channels are already up to date."
            ),
            color=PastelColors.BLUE,
        )
        embed.set_footer(text=f"Requested by {interaction.user}")
        await interaction.followup.send(embed=embed, ephemeral=True)
