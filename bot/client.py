"""
Discord bot client setup and initialization.
"""
import asyncio
import logging
import signal
from datetime import datetime, timezone
from typing import Optional

import discord
from discord import app_commands

from config import Config
from bot.errors import SessionCreateError, SessionOpenError
from bot.tasks import ClockTasks
from commands.clocks import create_clock_commands
from services.discord_gateway import DiscordChannelGateway
from services.registry import ChannelRegistry
from services.zones import ZoneResolver

logger = logging.getLogger("clock-bot.client")


class ClockBot:
    """
    Main bot class that orchestrates all components.

    Lifecycle:
    1. Log in to Discord
    2. Find or create the clock channels of every guild
    3. Open the gateway connection and start clock updates
    4. Wait for SIGINT/SIGTERM
    5. Stop clock updates, then close the session
    """

    def __init__(self, config: Config):
        """
        Initialize the clock bot.

        Args:
            config: Validated bot configuration.
        """
        self.config = config

        # Setup Discord client
        intents = discord.Intents.default()
        self.bot = discord.Client(intents=intents, application_id=config.bot_id or None)
        self.tree = app_commands.CommandTree(self.bot)

        # Initialize services
        self.resolver = ZoneResolver(config.zones, clock_faces=config.clock_faces)
        self.gateway = DiscordChannelGateway(self.bot)
        self.registry = ChannelRegistry(
            self.gateway,
            self.resolver,
            token_index=config.zone_token_index,
        )

        # Initialize background tasks
        self.clock_tasks = ClockTasks(
            self.bot,
            self.registry,
            self.resolver,
            self.gateway,
            tick_seconds=config.tick_seconds,
            update_every_minutes=config.update_every_minutes,
        )

        # Setup command group
        self.clocks_group = app_commands.Group(
            name="clocks",
            description="Time zone clock channels"
        )

        self._shutdown_event = asyncio.Event()
        self._connect_task: Optional[asyncio.Task] = None
        self._closed = False

        # Register commands
        self._register_commands()

        # Register event handlers
        self._register_events()

    def _register_commands(self) -> None:
        """Register all command groups."""
        create_clock_commands(
            self.clocks_group,
            self.config,
            self.registry,
            self.resolver,
            lambda: self.clock_tasks,
        )

        # Add command group to tree
        self.tree.add_command(self.clocks_group)

    def _register_events(self) -> None:
        """Register Discord event handlers."""

        @self.bot.event
        async def on_ready():
            """Called when the bot is ready."""
            logger.info(f"Logged in as {self.bot.user} (ID: {self.bot.user.id})")

            # Sync slash commands
            try:
                await self.tree.sync()
                logger.info("Slash commands synced.")
            except discord.HTTPException as e:
                logger.warning(f"Could not sync slash commands: {e}")

    async def _open_session(self) -> None:
        """
        Log in to the Discord HTTP API.

        Raises:
            SessionCreateError: If the login fails.
        """
        try:
            await self.bot.login(self.config.bot_token)
        except Exception as e:
            raise SessionCreateError(f"Error creating Discord session: {e}") from e

    async def build_registry(self) -> None:
        """
        Find or create the clock channels of every configured guild.

        Raises:
            ChannelListError: If a guild's channels cannot be listed.
            ChannelCreateError: If a missing channel cannot be created.
        """
        now = datetime.now(timezone.utc)
        for guild_id in self.config.guild_ids:
            await self.registry.discover(guild_id)
            await self.registry.ensure_all(guild_id, now)
            logger.info(f"Guild {guild_id}: {len(self.registry.guild_channels(guild_id))} clock channels ready")

    async def start(self) -> None:
        """
        Start the bot and run until a shutdown signal arrives.

        Raises:
            ClockBotError: If any startup step fails.
        """
        logger.info("Starting clock bot...")
        try:
            await self._open_session()
            await self.build_registry()

            self._setup_signal_handlers()

            # Create the websocket connection
            logger.info("Connecting to Discord...")
            self._connect_task = asyncio.create_task(self.bot.connect())
            self.clock_tasks.start()

            await self._wait_for_shutdown()
        finally:
            await self.shutdown()

    async def _wait_for_shutdown(self) -> None:
        """
        Wait for a shutdown signal.

        Raises:
            SessionOpenError: If the gateway connection ends first.
        """
        shutdown_waiter = asyncio.create_task(self._shutdown_event.wait())
        done, _ = await asyncio.wait(
            {self._connect_task, shutdown_waiter},
            return_when=asyncio.FIRST_COMPLETED,
        )
        if shutdown_waiter in done:
            return

        shutdown_waiter.cancel()
        error = self._connect_task.exception()
        raise SessionOpenError(
            f"Discord connection failed: {error or 'connection closed'}"
        ) from error

    async def shutdown(self) -> None:
        """Stop clock updates, then close the Discord session."""
        if self._closed:
            return
        self._closed = True

        logger.info("Shutting down...")
        await self.clock_tasks.shutdown()

        if not self.bot.is_closed():
            await self.bot.close()
        if self._connect_task is not None:
            await asyncio.gather(self._connect_task, return_exceptions=True)

        logger.info("Shutdown complete.")

    def _setup_signal_handlers(self) -> None:
        """Setup handlers for graceful shutdown on SIGINT/SIGTERM."""
        loop = asyncio.get_running_loop()

        def signal_handler():
            logger.info("Received shutdown signal")
            self._shutdown_event.set()

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, signal_handler)
            except NotImplementedError:
                # Windows doesn't support add_signal_handler
                signal.signal(sig, lambda s, f: loop.call_soon_threadsafe(signal_handler))

    def run(self) -> None:
        """
        Start the bot.

        Blocks until shutdown. Startup errors propagate to the caller.
        """
        try:
            asyncio.run(self.start())
        except KeyboardInterrupt:
            logger.info("Interrupted by user")
