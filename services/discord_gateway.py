"""
Discord service module for the channel operations the bot relies on.
"""
import logging
from typing import Dict, List

import discord

logger = logging.getLogger("clock-bot.gateway")


class DiscordChannelGateway:
    """Service for listing, creating and renaming guild voice channels."""

    def __init__(self, client: discord.Client):
        """
        Initialize the gateway.

        Args:
            client: Logged-in Discord client.
        """
        self.client = client
        self._guilds: Dict[int, discord.Guild] = {}
        self._channels: Dict[int, discord.abc.GuildChannel] = {}

    async def _get_guild(self, guild_id: str) -> discord.Guild:
        """
        Get a guild, fetching it from the API the first time.

        Args:
            guild_id: Guild ID.

        Returns:
            discord.Guild: The guild.
        """
        key = int(guild_id)
        guild = self._guilds.get(key) or self.client.get_guild(key)
        if guild is None:
            guild = await self.client.fetch_guild(key)
        self._guilds[key] = guild
        return guild

    async def list_voice_channels(self, guild_id: str) -> List[discord.VoiceChannel]:
        """
        List the voice channels of a guild.

        Args:
            guild_id: Guild ID.

        Returns:
            List[discord.VoiceChannel]: Voice channels in the guild.
        """
        guild = await self._get_guild(guild_id)
        channels = await guild.fetch_channels()

        voice_channels = []
        for channel in channels:
            if not isinstance(channel, discord.VoiceChannel):
                continue
            self._channels[channel.id] = channel
            voice_channels.append(channel)

        logger.debug(f"Guild {guild_id}: {len(voice_channels)}/{len(channels)} channels are voice channels")
        return voice_channels

    async def create_voice_channel(self, guild_id: str, name: str) -> discord.VoiceChannel:
        """
        Create a voice channel.

        Args:
            guild_id: Guild ID.
            name: Initial channel name.

        Returns:
            discord.VoiceChannel: The new channel.
        """
        guild = await self._get_guild(guild_id)
        channel = await guild.create_voice_channel(name, reason="Time zone clock channel")
        self._channels[channel.id] = channel
        logger.info(f"Created voice channel '{name}' ({channel.id}) in guild {guild_id}")
        return channel

    async def rename_channel(self, channel_id: int, name: str) -> discord.abc.GuildChannel:
        """
        Rename a channel.

        Args:
            channel_id: Channel ID.
            name: New channel name.

        Returns:
            discord.abc.GuildChannel: The updated channel.
        """
        channel = self._channels.get(channel_id) or self.client.get_channel(channel_id)
        if channel is None:
            channel = await self.client.fetch_channel(channel_id)

        edited = await channel.edit(name=name, reason="Time zone clock update")
        if edited is not None:
            channel = edited
        self._channels[channel_id] = channel
        return channel
