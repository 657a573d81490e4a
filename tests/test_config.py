import pytest

from bot.errors import ConfigDecodeError, ConfigReadError, UnknownZoneError
from config import Config
from services.zones import ALL_LABELS, ZoneLabel

ENV_VARS = (
    "BOT_ID",
    "BOT_TOKEN",
    "DISCORD_TOKEN",
    "BOT_SECRET",
    "GUILD_IDS",
    "ADMIN_DISCORD_ID",
    "LOG_LEVEL",
    "CONFIG_PATH",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text, encoding="utf-8")
    return str(path)


def test_load_config_reads_values(tmp_path):
    path = _write(
        tmp_path,
        "bot_id: 1234\n"
        "bot_token: abc\n"
        "bot_secret: s3cret\n"
        "guild_ids:\n"
        "  - '111'\n"
        "  - 222\n",
    )

    cfg = Config.load(path)

    assert cfg.bot_id == 1234
    assert cfg.bot_token == "abc"
    assert cfg.bot_secret == "s3cret"
    assert cfg.guild_ids == ("111", "222")
    assert cfg.zones == ALL_LABELS
    assert cfg.zone_token_index == 1
    assert cfg.tick_seconds == 5
    assert cfg.update_every_minutes == 5
    assert "s3cret" not in repr(cfg)


def test_load_config_optional_values(tmp_path):
    path = _write(
        tmp_path,
        "bot_token: abc\n"
        "guild_ids: ['1']\n"
        "zones: [utc, AEST]\n"
        "clock_faces: true\n"
        "tick_seconds: 2.5\n"
        "update_every_minutes: 10\n"
        "log_level: debug\n",
    )

    cfg = Config.load(path)

    assert cfg.zones == (ZoneLabel.UTC, ZoneLabel.AEST)
    assert cfg.clock_faces is True
    assert cfg.zone_token_index == 2
    assert cfg.tick_seconds == 2.5
    assert cfg.update_every_minutes == 10
    assert cfg.log_level == "DEBUG"


def test_explicit_token_index_wins(tmp_path):
    path = _write(tmp_path, "bot_token: abc\nguild_ids: ['1']\nclock_faces: true\nzone_token_index: 1\n")

    assert Config.load(path).zone_token_index == 1


def test_env_overrides_file(tmp_path, monkeypatch):
    path = _write(tmp_path, "bot_token: from-file\nguild_ids: ['1']\n")
    monkeypatch.setenv("DISCORD_TOKEN", "from-env")
    monkeypatch.setenv("GUILD_IDS", "5, 6")

    cfg = Config.load(path)

    assert cfg.bot_token == "from-env"
    assert cfg.guild_ids == ("5", "6")


def test_config_path_from_env(tmp_path, monkeypatch):
    path = _write(tmp_path, "bot_token: abc\nguild_ids: ['1']\n")
    monkeypatch.setenv("CONFIG_PATH", path)

    assert Config.load().bot_token == "abc"


def test_missing_file_is_read_error(tmp_path):
    with pytest.raises(ConfigReadError) as exc_info:
        Config.load(str(tmp_path / "nope.yaml"))

    assert exc_info.value.exit_code == 1


def test_unparsable_file_is_decode_error(tmp_path):
    path = _write(tmp_path, "bot_token: [unclosed\n")

    with pytest.raises(ConfigDecodeError) as exc_info:
        Config.load(path)

    assert exc_info.value.exit_code == 2


def test_non_mapping_is_decode_error(tmp_path):
    path = _write(tmp_path, "- just\n- a list\n")

    with pytest.raises(ConfigDecodeError):
        Config.load(path)


def test_missing_required_values(tmp_path):
    path = _write(tmp_path, "bot_id: 1\n")

    with pytest.raises(ConfigDecodeError) as exc_info:
        Config.load(path)

    assert "bot_token" in str(exc_info.value)
    assert "guild_ids" in str(exc_info.value)


def test_unknown_zone_fails_at_load(tmp_path):
    path = _write(tmp_path, "bot_token: abc\nguild_ids: ['1']\nzones: [UTC, Narnia]\n")

    with pytest.raises(UnknownZoneError):
        Config.load(path)


@pytest.mark.parametrize(
    "extra",
    [
        "bot_id: twelve\n",
        "tick_seconds: 0\n",
        "update_every_minutes: 0\n",
        "zones: UTC\n",
        "guild_ids: 5\n",
    ],
)
def test_invalid_values_are_decode_errors(tmp_path, extra):
    text = "bot_token: abc\n" + ("" if extra.startswith("guild_ids") else "guild_ids: ['1']\n") + extra
    path = _write(tmp_path, text)

    with pytest.raises(ConfigDecodeError):
        Config.load(path)


@pytest.mark.parametrize("value", ["'no'", "'false'", "1", "yes please"])
def test_clock_faces_must_be_a_boolean(tmp_path, value):
    path = _write(tmp_path, f"bot_token: abc\nguild_ids: ['1']\nclock_faces: {value}\n")

    with pytest.raises(ConfigDecodeError) as exc_info:
        Config.load(path)

    assert "clock_faces" in str(exc_info.value)


def test_clock_faces_accepts_yaml_booleans(tmp_path):
    path = _write(tmp_path, "bot_token: abc\nguild_ids: ['1']\nclock_faces: no\n")

    assert Config.load(path).clock_faces is False
