"""
Discord-specific utility functions.
"""
from typing import Optional

import discord


# Pastel color palette for embeds
class PastelColors:
    """Pastel color palette for Discord embeds."""
    GREEN = discord.Color.from_rgb(169, 223, 191)      # Pastel mint green
    YELLOW = discord.Color.from_rgb(255, 223, 186)     # Pastel peach
    BLUE = discord.Color.from_rgb(174, 198, 207)       # Pastel blue
    GREY = discord.Color.from_rgb(189, 195, 199)       # Pastel grey


def is_admin(interaction: discord.Interaction, admin_discord_id: int = 0) -> bool:
    """
    Check if the interaction user may manage the clock channels.

    Args:
        interaction: Discord interaction to check.
        admin_discord_id: Configured admin user ID (0 if none).

    Returns:
        bool: True if user is the configured admin or can manage channels.
    """
    if admin_discord_id and interaction.user.id == admin_discord_id:
        return True

    permissions = getattr(interaction.user, "guild_permissions", None)
    return bool(permissions and permissions.manage_channels)


def channel_mention(channel_id: Optional[int]) -> str:
    """Mention string for a channel ID."""
    if not channel_id:
        return "`missing`"
    return f"<#{channel_id}>"
