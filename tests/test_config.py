"""Tests for configuration loading."""

import pathlib
import tempfile

import pytest
import yaml

from magyartv.config import (
    DEFAULT_CHANNELS,
    EMBED_HEADERS,
    AppConfig,
    embed_headers,
    load_config,
)


def write_yaml(data: object) -> pathlib.Path:
    """Write ``data`` to a temporary YAML file."""
    with tempfile.NamedTemporaryFile(mode="w", suffix=".yaml", delete=False) as f:
        yaml.dump(data, f)
        return pathlib.Path(f.name)


def test_load_config() -> None:
    """Test loading channels and settings from YAML."""
    yaml_path = write_yaml(
        {
            "channels": {"M1": "mtv1live", "M2": "mtv2live", "M4": "mtv4live"},
            "default": "M2",
            "request_timeout": 20,
            "probe_interval": 2.5,
            "player": "vlc",
        }
    )

    try:
        config = load_config(yaml_path)
        assert config.channels == {"M1": "mtv1live", "M2": "mtv2live", "M4": "mtv4live"}
        assert config.default_label == "M2"
        assert config.request_timeout == 20.0
        assert config.probe_interval == 2.5
        assert config.player == "vlc"
    finally:
        yaml_path.unlink()


def test_load_config_first_channel_is_default() -> None:
    """Test the first channel becomes the default when none is named."""
    yaml_path = write_yaml({"channels": {"M1": "mtv1live"}})

    try:
        config = load_config(yaml_path)
        assert config.default_label == "M1"
        assert config.channel_for() == "mtv1live"
    finally:
        yaml_path.unlink()


def test_load_config_missing_explicit_file() -> None:
    """Test error handling for a missing YAML file."""
    with pytest.raises(FileNotFoundError):
        load_config(pathlib.Path("/nonexistent/channels.yaml"))


def test_load_config_defaults_without_file(tmp_path: pathlib.Path, monkeypatch) -> None:
    """Test built-in defaults when no channels.yaml is present."""
    monkeypatch.chdir(tmp_path)

    config = load_config()

    assert config.channels == DEFAULT_CHANNELS
    assert config.channel_for() == "mtv4live"
    assert config.request_timeout == 15.0


def test_load_config_not_dict() -> None:
    """Test error handling when YAML is not a mapping."""
    yaml_path = write_yaml(["mtv1live", "mtv4live"])

    try:
        with pytest.raises(ValueError, match="must contain a mapping"):
            load_config(yaml_path)
    finally:
        yaml_path.unlink()


def test_load_config_unknown_default() -> None:
    """Test the default label must name a configured channel."""
    yaml_path = write_yaml({"channels": {"M1": "mtv1live"}, "default": "M9"})

    try:
        with pytest.raises(ValueError, match="not one of the configured channels"):
            load_config(yaml_path)
    finally:
        yaml_path.unlink()


def test_load_config_bad_channels() -> None:
    """Test channels must be a non-empty mapping."""
    yaml_path = write_yaml({"channels": ["mtv1live"]})

    try:
        with pytest.raises(TypeError, match="'channels' must be"):
            load_config(yaml_path)
    finally:
        yaml_path.unlink()


@pytest.mark.parametrize("timeout", [0, -5])
def test_load_config_non_positive_timeout(timeout: int) -> None:
    """Test the request timeout must be positive."""
    yaml_path = write_yaml({"request_timeout": timeout})

    try:
        with pytest.raises(ValueError, match="must be positive"):
            load_config(yaml_path)
    finally:
        yaml_path.unlink()


def test_load_config_non_numeric_timeout() -> None:
    """Test the request timeout must be a number."""
    yaml_path = write_yaml({"request_timeout": "soon"})

    try:
        with pytest.raises(TypeError, match="number of seconds"):
            load_config(yaml_path)
    finally:
        yaml_path.unlink()


def test_channel_for_label_or_raw_id() -> None:
    """Test channel lookup by case-insensitive label or raw id."""
    config = AppConfig()

    assert config.channel_for("m1") == "mtv1live"
    assert config.channel_for("M4") == "mtv4live"
    assert config.channel_for("dunalive") == "dunalive"


def test_embed_headers() -> None:
    """Test the full header set derives Host from the embed URL."""
    headers = embed_headers("https://player.mediaklikk.hu/playernew/player.php")

    assert list(headers)[0] == "Host"
    assert headers["Host"] == "player.mediaklikk.hu"
    assert headers["User-Agent"].startswith("Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7)")
    assert headers["Accept-Language"] == "en-GB,en;q=0.9"
    assert headers["Connection"] == "keep-alive"
    assert len(headers) == len(EMBED_HEADERS) + 1
