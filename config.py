"""
Configuration module for the time zone clock bot.
Loads the YAML config file and applies environment variable overrides.
"""
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import yaml
from dotenv import load_dotenv

from bot.errors import ConfigDecodeError, ConfigReadError
from services.zones import ALL_LABELS, ZoneLabel, default_token_index

# Load environment variables
load_dotenv()

logger = logging.getLogger("clock-bot.config")

DEFAULT_CONFIG_PATH = "config.yaml"

# Config file keys and the environment variables that override them
ENV_OVERRIDES = {
    "bot_id": ("BOT_ID",),
    "bot_token": ("BOT_TOKEN", "DISCORD_TOKEN"),
    "bot_secret": ("BOT_SECRET",),
    "guild_ids": ("GUILD_IDS",),
    "admin_discord_id": ("ADMIN_DISCORD_ID",),
    "log_level": ("LOG_LEVEL",),
}


def _as_bool(key: str, value: Any) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ConfigDecodeError(f"'{key}' must be true or false, got {value!r}")
    return value


def _as_int(key: str, value: Any) -> int:
    if isinstance(value, bool):
        raise ConfigDecodeError(f"'{key}' must be an integer, got {value!r}")
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ConfigDecodeError(f"'{key}' must be an integer, got {value!r}") from None


def _as_guild_ids(value: Any) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [part for part in value.split(",") if part.strip()]
    if not isinstance(value, (list, tuple)):
        raise ConfigDecodeError(f"'guild_ids' must be a list, got {value!r}")
    return tuple(str(guild_id).strip() for guild_id in value)


@dataclass
class Config:
    """Central configuration for the bot."""

    bot_token: str
    guild_ids: Tuple[str, ...]
    bot_id: int = 0
    bot_secret: str = field(default="", repr=False)
    zones: Tuple[ZoneLabel, ...] = ALL_LABELS
    clock_faces: bool = False
    zone_token_index: Optional[int] = None
    tick_seconds: float = 5
    update_every_minutes: int = 5
    admin_discord_id: int = 0
    log_level: str = "INFO"

    def __post_init__(self):
        if self.zone_token_index is None:
            self.zone_token_index = default_token_index(self.clock_faces)

    @classmethod
    def load(cls, path: Optional[str] = None) -> "Config":
        """
        Load configuration from a YAML file and the environment.

        Args:
            path: Config file path (defaults to $CONFIG_PATH or config.yaml).

        Returns:
            Config: Validated configuration.

        Raises:
            ConfigReadError: If the file cannot be read.
            ConfigDecodeError: If the file cannot be parsed or is invalid.
        """
        path = path or os.getenv("CONFIG_PATH", DEFAULT_CONFIG_PATH)

        try:
            with open(path, "r", encoding="utf-8") as f:
                raw = f.read()
        except OSError as e:
            raise ConfigReadError(f"Unable to load config file {path}: {e}") from e

        try:
            data = yaml.safe_load(raw)
        except yaml.YAMLError as e:
            raise ConfigDecodeError(f"Unable to decode config file {path}: {e}") from e

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigDecodeError(f"Unable to decode config file {path}: expected a mapping")

        data = cls._apply_env_overrides(data)
        config = cls.from_dict(data)
        config.validate()
        logger.info(f"Configuration loaded from {path} ({len(config.guild_ids)} guilds)")
        return config

    @staticmethod
    def _apply_env_overrides(data: Dict[str, Any]) -> Dict[str, Any]:
        data = dict(data)
        overrides = 0
        for key, env_names in ENV_OVERRIDES.items():
            for env_name in env_names:
                env_value = os.getenv(env_name)
                if env_value:
                    data[key] = env_value
                    overrides += 1
                    break

        if overrides > 0:
            logger.info(f"Configuration overridden by {overrides} environment variables")
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        """
        Build a config from decoded file contents.

        Raises:
            ConfigDecodeError: If a value has the wrong type or a zone is unknown.
        """
        kwargs: Dict[str, Any] = {
            "bot_token": str(data.get("bot_token") or ""),
            "guild_ids": _as_guild_ids(data.get("guild_ids") or []),
            "bot_id": _as_int("bot_id", data.get("bot_id") or 0),
            "bot_secret": str(data.get("bot_secret") or ""),
            "clock_faces": _as_bool("clock_faces", data.get("clock_faces", False)),
            "admin_discord_id": _as_int("admin_discord_id", data.get("admin_discord_id") or 0),
            "log_level": str(data.get("log_level") or "INFO").upper(),
        }

        zones = data.get("zones")
        if zones is not None:
            if not isinstance(zones, list):
                raise ConfigDecodeError(f"'zones' must be a list, got {zones!r}")
            kwargs["zones"] = tuple(ZoneLabel.parse(zone) for zone in zones)

        if data.get("zone_token_index") is not None:
            kwargs["zone_token_index"] = _as_int("zone_token_index", data["zone_token_index"])

        if data.get("tick_seconds") is not None:
            try:
                kwargs["tick_seconds"] = float(data["tick_seconds"])
            except (TypeError, ValueError):
                raise ConfigDecodeError(
                    f"'tick_seconds' must be a number, got {data['tick_seconds']!r}"
                ) from None

        if data.get("update_every_minutes") is not None:
            kwargs["update_every_minutes"] = _as_int(
                "update_every_minutes", data["update_every_minutes"]
            )

        return cls(**kwargs)

    def validate(self) -> None:
        """
        Validate that all required configuration values are present.

        Raises:
            ConfigDecodeError: If any required value is missing or out of range.
        """
        missing: List[str] = []
        if not self.bot_token:
            missing.append("bot_token")
        if not self.guild_ids or not all(self.guild_ids):
            missing.append("guild_ids")
        if missing:
            raise ConfigDecodeError(
                f"Missing required configuration: {', '.join(missing)}\n"
                "Please set them in your config file or environment."
            )

        if not self.zones:
            raise ConfigDecodeError("'zones' must name at least one zone")
        if self.tick_seconds <= 0:
            raise ConfigDecodeError("'tick_seconds' must be positive")
        if not 1 <= self.update_every_minutes <= 60:
            raise ConfigDecodeError("'update_every_minutes' must be between 1 and 60")
        if self.zone_token_index < 0:
            raise ConfigDecodeError("'zone_token_index' must not be negative")
