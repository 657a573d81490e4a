import asyncio
from datetime import datetime, timezone

import pytest

from bot.errors import ChannelCreateError, ChannelListError
from services.registry import ChannelRegistry
from services.zones import ALL_LABELS, ZoneLabel, ZoneResolver
from tests.fakes import FakeGateway, channel

NOW = datetime(2024, 3, 9, 17, 3, tzinfo=timezone.utc)


def test_discover_classifies_existing_channels():
    gateway = FakeGateway(
        {
            "1": [
                channel(1, "🕐 PDT | something"),
                channel(2, "PDT"),
                channel(3, "X Narnia Y"),
                channel(4, "12:00 AEDT | Sun Mar 10"),
                channel(5, "General"),
            ]
        }
    )
    registry = ChannelRegistry(gateway, ZoneResolver())

    found = asyncio.run(registry.discover("1"))

    assert set(found) == {ZoneLabel.PST, ZoneLabel.AEST}
    assert found[ZoneLabel.PST].channel_id == 1
    assert found[ZoneLabel.PST].name == "🕐 PDT | something"
    assert found[ZoneLabel.AEST].channel_id == 4


def test_discover_last_scanned_channel_wins():
    gateway = FakeGateway(
        {
            "1": [
                channel(1, "08:00 EST | Sat Mar 09"),
                channel(2, "09:00 EDT | Sat Mar 09"),
            ]
        }
    )
    registry = ChannelRegistry(gateway, ZoneResolver())

    asyncio.run(registry.discover("1"))

    assert registry.get("1", ZoneLabel.EST).channel_id == 2


def test_discover_ignores_unmanaged_zones():
    gateway = FakeGateway({"1": [channel(1, "08:00 EST | Sat Mar 09")]})
    registry = ChannelRegistry(gateway, ZoneResolver([ZoneLabel.UTC]))

    found = asyncio.run(registry.discover("1"))

    assert found == {}


def test_discover_list_failure_raises():
    registry = ChannelRegistry(FakeGateway(fail_list=True), ZoneResolver())

    with pytest.raises(ChannelListError) as exc_info:
        asyncio.run(registry.discover("1"))

    assert exc_info.value.exit_code == 4
    assert "Missing Access" in str(exc_info.value)


def test_ensure_all_creates_missing_channels():
    gateway = FakeGateway({"1": [channel(7, "12:03 EST | Sat Mar 09")]})
    registry = ChannelRegistry(gateway, ZoneResolver())

    async def scenario():
        await registry.discover("1")
        return await registry.ensure_all("1", NOW)

    tracked = asyncio.run(scenario())

    assert set(tracked) == set(ALL_LABELS)
    assert tracked[ZoneLabel.EST].channel_id == 7
    assert gateway.created == [
        ("1", "17:03 UTC | Sat Mar 09"),
        ("1", "09:03 PST | Sat Mar 09"),
        ("1", "04:03 AEDT | Sun Mar 10"),
    ]


def test_ensure_all_covers_every_guild():
    gateway = FakeGateway()
    registry = ChannelRegistry(gateway, ZoneResolver())

    async def scenario():
        for guild_id in ("1", "2"):
            await registry.discover(guild_id)
            await registry.ensure_all(guild_id, NOW)

    asyncio.run(scenario())

    assert registry.guild_ids() == ["1", "2"]
    for guild_id in ("1", "2"):
        for label in ALL_LABELS:
            assert registry.get(guild_id, label) is not None
    assert len(list(registry.tracked_channels())) == 8


def test_ensure_all_uses_clock_face_names():
    gateway = FakeGateway()
    registry = ChannelRegistry(gateway, ZoneResolver([ZoneLabel.EST], clock_faces=True), token_index=2)

    asyncio.run(registry.ensure_all("1", NOW))

    assert gateway.created == [("1", "🕛 12:03 EST | Sat Mar 09")]


def test_ensure_all_create_failure_raises():
    registry = ChannelRegistry(FakeGateway(fail_create=True), ZoneResolver())

    with pytest.raises(ChannelCreateError) as exc_info:
        asyncio.run(registry.ensure_all("1", NOW))

    assert exc_info.value.exit_code == 5


def test_guild_channels_in_label_order():
    gateway = FakeGateway(
        {
            "1": [
                channel(1, "12:00 AEST | Sun Mar 10"),
                channel(2, "12:00 UTC | Sat Mar 09"),
            ]
        }
    )
    registry = ChannelRegistry(gateway, ZoneResolver())

    asyncio.run(registry.discover("1"))

    assert [c.label for c in registry.guild_channels("1")] == [ZoneLabel.UTC, ZoneLabel.AEST]
    assert registry.guild_channels("missing") == []
