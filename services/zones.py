"""
Time zone service: zone labels, channel name formatting and classification.
"""
import enum
import logging
from datetime import datetime, timezone
from typing import Dict, Iterable, Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from bot.errors import UnknownZoneError

logger = logging.getLogger("clock-bot.zones")

# Fixed display template: "HH:MM ZZZ | Weekday Mon DD"
CHANNEL_NAME_FORMAT = "%H:%M %Z | %a %b %d"

# Clock emojis for each hour (0-23)
CLOCK_FACES = [
    "🕛", "🕐", "🕑", "🕒", "🕓", "🕔", "🕕", "🕖", "🕗", "🕘", "🕙", "🕚",
    "🕛", "🕐", "🕑", "🕒", "🕓", "🕔", "🕕", "🕖", "🕗", "🕘", "🕙", "🕚",
]


class ZoneLabel(enum.Enum):
    """Supported zone labels, in channel creation order."""

    UTC = "UTC"
    PST = "PST"
    EST = "EST"
    AEST = "AEST"

    @classmethod
    def parse(cls, value: str) -> "ZoneLabel":
        """
        Look up a label by name.

        Args:
            value: Label name, case-insensitive.

        Returns:
            ZoneLabel: The matching label.

        Raises:
            UnknownZoneError: If the name is not a supported label.
        """
        if isinstance(value, cls):
            return value
        try:
            return cls[str(value).strip().upper()]
        except KeyError:
            supported = ", ".join(label.value for label in cls)
            raise UnknownZoneError(
                f"Unknown zone label '{value}' (supported: {supported})"
            ) from None


ALL_LABELS = tuple(ZoneLabel)

ZONE_DATABASE: Dict[ZoneLabel, str] = {
    ZoneLabel.UTC: "UTC",
    ZoneLabel.PST: "America/Los_Angeles",
    ZoneLabel.EST: "America/New_York",
    ZoneLabel.AEST: "Australia/Melbourne",
}

# Abbreviations found in channel names, standard and daylight time alike
ZONE_ALIASES: Dict[str, ZoneLabel] = {
    "PST": ZoneLabel.PST,
    "PDT": ZoneLabel.PST,
    "EST": ZoneLabel.EST,
    "EDT": ZoneLabel.EST,
    "AEST": ZoneLabel.AEST,
    "AEDT": ZoneLabel.AEST,
    "UTC": ZoneLabel.UTC,
}


def default_token_index(clock_faces: bool) -> int:
    """Position of the zone abbreviation in a channel name."""
    return 2 if clock_faces else 1


def classify_channel_name(name: str, token_index: int = 1) -> Optional[ZoneLabel]:
    """
    Work out which zone a channel name displays.

    The name is split on whitespace and the token at ``token_index`` is
    looked up in the alias table. Names too short to hold the zone and the
    separator after it are ignored.

    Args:
        name: Channel name.
        token_index: Position of the zone abbreviation.

    Returns:
        Optional[ZoneLabel]: The zone label, or None if the name doesn't match.
    """
    parts = (name or "").split()
    if len(parts) < token_index + 2:
        return None
    return ZONE_ALIASES.get(parts[token_index])


class ZoneResolver:
    """Formats the current time for each managed zone label."""

    def __init__(
        self,
        labels: Iterable[ZoneLabel] = ALL_LABELS,
        clock_faces: bool = False,
    ):
        """
        Initialize the resolver and load every zone up front.

        Args:
            labels: Zone labels to manage.
            clock_faces: Prefix channel names with the hour's clock emoji.

        Raises:
            UnknownZoneError: If a label or its time zone cannot be loaded.
        """
        self.clock_faces = clock_faces
        self._zones: Dict[ZoneLabel, ZoneInfo] = {}

        for label in labels:
            label = ZoneLabel.parse(label)
            try:
                self._zones[label] = ZoneInfo(ZONE_DATABASE[label])
            except ZoneInfoNotFoundError as e:
                raise UnknownZoneError(
                    f"Unable to load location {ZONE_DATABASE[label]}: {e}"
                ) from e

        logger.debug(f"Zone resolver ready for {[label.value for label in self._zones]}")

    @property
    def labels(self) -> tuple:
        """Managed labels, in creation order."""
        return tuple(label for label in ALL_LABELS if label in self._zones)

    def manages(self, label: ZoneLabel) -> bool:
        """
        Check if a zone label is managed by this resolver.

        Args:
            label: Zone label.

        Returns:
            bool: True if the label was configured.
        """
        return label in self._zones

    def localize(self, label: ZoneLabel, now: datetime) -> datetime:
        """
        Convert an instant to the local time of a zone.

        Args:
            label: Zone label.
            now: Instant to convert; naive values are taken as UTC.

        Returns:
            datetime: The instant in the zone's local time.

        Raises:
            UnknownZoneError: If the label is not managed.
        """
        if now.tzinfo is None:
            now = now.replace(tzinfo=timezone.utc)
        try:
            zone = self._zones[label]
        except KeyError:
            raise UnknownZoneError(f"Zone label {label} is not managed") from None
        return now.astimezone(zone)

    def resolve(self, label: ZoneLabel, now: datetime) -> str:
        """
        Format an instant in the given zone.

        Args:
            label: Zone label.
            now: Instant to format; naive values are taken as UTC.

        Returns:
            str: Display string such as ``"12:03 EST | Sat Mar 09"``.
        """
        return self.localize(label, now).strftime(CHANNEL_NAME_FORMAT)

    def channel_name(self, label: ZoneLabel, now: datetime) -> str:
        """Name to apply to the label's channel at the given instant."""
        name = self.resolve(label, now)
        if self.clock_faces:
            hour = self.localize(label, now).hour
            name = f"{CLOCK_FACES[hour]} {name}"
        return name
