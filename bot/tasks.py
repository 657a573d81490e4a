"""
Background tasks for the Discord bot.
"""
import asyncio
import logging
from datetime import datetime, timezone
from typing import Optional

import discord
from discord.ext import tasks

from services.registry import ChannelRegistry
from services.zones import ZoneResolver

logger = logging.getLogger("clock-bot.tasks")


class ClockTasks:
    """Keeps the clock channel names in step with the current time."""

    def __init__(
        self,
        bot: discord.Client,
        registry: ChannelRegistry,
        resolver: ZoneResolver,
        gateway,
        tick_seconds: float = 5,
        update_every_minutes: int = 5,
    ):
        """
        Initialize clock tasks.

        Args:
            bot: Discord bot client.
            registry: Populated channel registry.
            resolver: Zone resolver for channel names.
            gateway: Channel gateway used for renames.
            tick_seconds: Seconds between ticks.
            update_every_minutes: Only rename on minutes divisible by this.
        """
        self.bot = bot
        self.registry = registry
        self.resolver = resolver
        self.gateway = gateway
        self.tick_seconds = tick_seconds
        self.update_every_minutes = update_every_minutes

        # State tracking
        self.last_update: Optional[datetime] = None
        self._ticking = False
        self._reconcile_lock = asyncio.Lock()

        # Create the task
        self._clock_task = tasks.loop(seconds=tick_seconds)(self._tick)
        self._clock_task.before_loop(self._before_tick)

    @property
    def is_running(self) -> bool:
        """Whether the clock task is running."""
        return self._clock_task.is_running()

    def start(self) -> None:
        """Start the clock task."""
        if not self._clock_task.is_running():
            self._clock_task.start()
            logger.info(
                f"Clock updates started (tick {self.tick_seconds}s, "
                f"every {self.update_every_minutes} minutes)"
            )

    def stop(self) -> None:
        """Ask the clock task to stop after the current iteration."""
        if self._clock_task.is_running():
            self._clock_task.stop()
            logger.info("Stopping channel updates")

    async def shutdown(self) -> None:
        """
        Stop the clock task and wait for it to finish.

        A rename already in flight is allowed to complete.
        """
        task = self._clock_task.get_task()
        if task is None or task.done():
            return

        if not self._ticking:
            # Still waiting for the first ready event; nothing in flight
            self._clock_task.cancel()
        else:
            self.stop()

        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Channel updates stopped")

    async def _before_tick(self) -> None:
        """Wait for bot to be ready before the first tick."""
        await self.bot.wait_until_ready()
        self._ticking = True
        logger.info("Clock task initialized")

    async def _tick(self) -> None:
        try:
            await self.reconcile()
        except Exception as e:
            logger.error(f"Clock update failed: {e}")

    def is_update_minute(self, now: datetime) -> bool:
        """
        Check if renames are due at the given instant.

        Args:
            now: Current instant.

        Returns:
            bool: True if the minute is a multiple of update_every_minutes.
        """
        return now.minute % self.update_every_minutes == 0

    async def reconcile(self, now: Optional[datetime] = None, force: bool = False) -> int:
        """
        Rename every tracked channel whose name is out of date.

        Discord allows 2 channel renames per 10 minutes, so renames only
        happen on update minutes, only when the name actually changes and
        only while the channel's rename budget allows it. A failed rename
        keeps the old name and is retried on the next update minute.

        Passes never overlap: a sync requested during a tick waits for the
        tick to finish and then sees the names it applied.

        Args:
            now: Current instant (defaults to now, UTC).
            force: Skip the update minute check. The rename budget still applies.

        Returns:
            int: Number of channels renamed.
        """
        now = now or datetime.now(timezone.utc)
        if not force and not self.is_update_minute(now):
            return 0

        async with self._reconcile_lock:
            return await self._rename_stale(now)

    async def _rename_stale(self, now: datetime) -> int:
        renamed = 0
        for tracked in self.registry.tracked_channels():
            desired = self.resolver.channel_name(tracked.label, now)
            if tracked.name == desired:
                continue
            if not tracked.can_rename(now):
                logger.debug(
                    f"Rename budget used up for {tracked.channel_id}; "
                    f"keeping '{tracked.name}'"
                )
                continue

            try:
                await self.gateway.rename_channel(tracked.channel_id, desired)
            except Exception as e:
                logger.error(
                    f"Channel Edit Error ({tracked.guild_id}/{tracked.label.value}, "
                    f"{tracked.channel_id}): {e}"
                )
                continue

            logger.debug(f"Renamed {tracked.channel_id}: '{tracked.name}' -> '{desired}'")
            tracked.record_rename(desired, now)
            renamed += 1

        if renamed:
            self.last_update = now
            logger.info(f"Updated {renamed} clock channel(s)")
        return renamed
