"""
Channel registry: which voice channel shows which zone in each guild.
"""
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional

from bot.errors import ChannelCreateError, ChannelListError
from services.zones import ZoneLabel, ZoneResolver, classify_channel_name

logger = logging.getLogger("clock-bot.registry")

# Discord channel rename rate limit
RENAME_LIMIT = 2
RENAME_WINDOW = timedelta(minutes=10)


@dataclass
class TrackedChannel:
    """A clock channel and the last name successfully applied to it."""

    guild_id: str
    label: ZoneLabel
    channel_id: int
    name: str
    renamed_at: List[datetime] = field(default_factory=list)

    def can_rename(self, now: datetime) -> bool:
        """
        Check the channel's rename budget.

        Discord allows RENAME_LIMIT renames per channel in any
        RENAME_WINDOW.

        Args:
            now: Instant of the rename to be made.

        Returns:
            bool: True if another rename fits in the window ending at now.
        """
        recent = [at for at in self.renamed_at if at > now - RENAME_WINDOW]
        return len(recent) < RENAME_LIMIT

    def record_rename(self, name: str, now: datetime) -> None:
        """
        Store a successful rename.

        Args:
            name: Name now shown by the channel.
            now: Instant of the rename.
        """
        self.name = name
        self.renamed_at = (self.renamed_at + [now])[-RENAME_LIMIT:]


class ChannelRegistry:
    """Maps guild -> zone label -> tracked channel."""

    def __init__(self, gateway, resolver: ZoneResolver, token_index: int = 1):
        """
        Initialize the registry.

        Args:
            gateway: Channel gateway (list, create, rename).
            resolver: Zone resolver used for initial channel names.
            token_index: Position of the zone abbreviation in channel names.
        """
        self.gateway = gateway
        self.resolver = resolver
        self.token_index = token_index
        self._guilds: Dict[str, Dict[ZoneLabel, TrackedChannel]] = {}

    async def discover(self, guild_id: str) -> Dict[ZoneLabel, TrackedChannel]:
        """
        Find existing clock channels in a guild.

        When several channels show the same zone, the last one listed wins.

        Args:
            guild_id: Guild ID.

        Returns:
            Dict[ZoneLabel, TrackedChannel]: Channels found for the guild.

        Raises:
            ChannelListError: If the guild's channels cannot be listed.
        """
        try:
            channels = await self.gateway.list_voice_channels(guild_id)
        except Exception as e:
            raise ChannelListError(f"Cannot read channels of guild {guild_id}: {e}") from e

        tracked = self._guilds.setdefault(guild_id, {})
        for channel in channels:
            label = classify_channel_name(channel.name, self.token_index)
            if label is None or not self.resolver.manages(label):
                continue
            if label in tracked:
                logger.warning(
                    f"Guild {guild_id}: channel '{channel.name}' ({channel.id}) "
                    f"replaces '{tracked[label].name}' for {label.value}"
                )
            tracked[label] = TrackedChannel(guild_id, label, channel.id, channel.name)

        logger.info(
            f"Guild {guild_id}: found clock channels for "
            f"{[label.value for label in tracked] or 'no zones'}"
        )
        return tracked

    async def ensure_all(
        self,
        guild_id: str,
        now: Optional[datetime] = None,
    ) -> Dict[ZoneLabel, TrackedChannel]:
        """
        Create a channel for every managed zone the guild is missing.

        Args:
            guild_id: Guild ID.
            now: Instant used for the initial channel names.

        Returns:
            Dict[ZoneLabel, TrackedChannel]: All channels of the guild.

        Raises:
            ChannelCreateError: If a channel cannot be created.
        """
        now = now or datetime.now(timezone.utc)
        tracked = self._guilds.setdefault(guild_id, {})

        for label in self.resolver.labels:
            if label in tracked:
                continue
            name = self.resolver.channel_name(label, now)
            try:
                channel = await self.gateway.create_voice_channel(guild_id, name)
            except Exception as e:
                raise ChannelCreateError(f"Channel Make Error ({label.value}): {e}") from e
            tracked[label] = TrackedChannel(guild_id, label, channel.id, channel.name)

        return tracked

    def get(self, guild_id: str, label: ZoneLabel) -> Optional[TrackedChannel]:
        """
        Look up the channel of one zone in a guild.

        Args:
            guild_id: Guild ID.
            label: Zone label.

        Returns:
            Optional[TrackedChannel]: The tracked channel, or None if there is none.
        """
        return self._guilds.get(guild_id, {}).get(label)

    def guild_ids(self) -> List[str]:
        """
        Get the guilds known to the registry.

        Returns:
            List[str]: Guild IDs, in the order they were added.
        """
        return list(self._guilds)

    def guild_channels(self, guild_id: str) -> List[TrackedChannel]:
        """Tracked channels of one guild, in zone label order."""
        channels = self._guilds.get(guild_id, {})
        return [channels[label] for label in ZoneLabel if label in channels]

    def tracked_channels(self) -> Iterator[TrackedChannel]:
        """
        Iterate over every tracked channel.

        Returns:
            Iterator[TrackedChannel]: Channels of every guild, guild by guild.
        """
        for guild_id in self._guilds:
            yield from self.guild_channels(guild_id)
