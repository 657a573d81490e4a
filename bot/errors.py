"""
Application-specific exceptions.

Every startup failure carries the process exit code the entry point uses
when it gives up.
"""


class ClockBotError(Exception):
    """Base class for all clock bot errors."""

    exit_code: int = 1


class ConfigError(ClockBotError):
    """Configuration could not be loaded."""


class ConfigReadError(ConfigError):
    """The configuration file is missing or unreadable."""

    exit_code = 1


class ConfigDecodeError(ConfigError):
    """The configuration file could not be parsed or holds invalid values."""

    exit_code = 2


class UnknownZoneError(ConfigDecodeError):
    """A zone label is not one of the supported labels."""


class SessionCreateError(ClockBotError):
    """Logging in to Discord failed."""

    exit_code = 3


class ChannelListError(ClockBotError):
    """The channels of a guild could not be listed."""

    exit_code = 4


class ChannelCreateError(ClockBotError):
    """A clock channel could not be created."""

    exit_code = 5


class SessionOpenError(ClockBotError):
    """The Discord gateway connection could not be opened."""

    exit_code = 6
