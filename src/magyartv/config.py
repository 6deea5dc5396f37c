"""Static request configuration and the channels.yaml loader."""

import logging
import pathlib
from dataclasses import dataclass, field
from urllib.parse import urlsplit

import yaml

from .types import Channel

logger = logging.getLogger(__name__)

EMBED_URL = "https://player.mediaklikk.hu/playernew/player.php"

# Header values must stay byte-identical to what a browser sends when it loads
# the embed as an iframe from the broadcaster's site; the upstream gates on them.
EMBED_HEADERS: dict[str, str] = {
    "Sec-Fetch-Dest": "iframe",
    "User-Agent": (
        "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 "
        "(KHTML, like Gecko) Version/18.0 Safari/605.1.15"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
    "Referer": "https://m4sport.hu/",
    "Sec-Fetch-Site": "cross-site",
    "Sec-Fetch-Mode": "navigate",
    "Accept-Language": "en-GB,en;q=0.9",
    "Priority": "u=0, i",
    "Connection": "keep-alive",
}

DEFAULT_CHANNELS: dict[str, Channel] = {
    "M1": "mtv1live",
    "M4": "mtv4live",
}
DEFAULT_CHANNEL_LABEL = "M4"
DEFAULT_REQUEST_TIMEOUT = 15.0
DEFAULT_PROBE_INTERVAL = 5.0


def embed_headers(embed_url: str = EMBED_URL) -> dict[str, str]:
    """
    Build the full header set for a request to the embed endpoint.

    Args:
        embed_url: The embed endpoint; its host becomes the Host header.

    Returns:
        A fresh dict with Host first, followed by the pinned browser headers.
    """
    headers = {"Host": urlsplit(embed_url).netloc}
    headers.update(EMBED_HEADERS)
    return headers


@dataclass
class AppConfig:
    """
    Runtime configuration for the CLI.

    Attributes:
        channels: Mapping of display label to channel identifier.
        default_label: Label of the channel played when none is given.
        request_timeout: Seconds before the embed fetch is abandoned.
        probe_interval: Seconds between connectivity probes.
        player: Preferred player command, or None to auto-detect.
    """

    channels: dict[str, Channel] = field(default_factory=lambda: dict(DEFAULT_CHANNELS))
    default_label: str = DEFAULT_CHANNEL_LABEL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    probe_interval: float = DEFAULT_PROBE_INTERVAL
    player: str | None = None

    def channel_for(self, name: str | None = None) -> Channel:
        """
        Look up a channel identifier by label, or accept a raw identifier.

        Args:
            name: A configured label (case-insensitive) or a channel id.
                Uses the default label when None.

        Returns:
            The channel identifier.
        """
        if name is None:
            name = self.default_label
        for label, channel in self.channels.items():
            if label.lower() == name.lower():
                return channel
        return name


def load_config(yaml_path: pathlib.Path | None = None) -> AppConfig:
    """
    Load configuration from a YAML file.

    Args:
        yaml_path: Path to channels.yaml. If None, looks in the working
            directory and falls back to built-in defaults when absent.

    Returns:
        The parsed configuration.

    Raises:
        FileNotFoundError: If an explicit path doesn't exist.
        ValueError: If the YAML content is invalid.
        TypeError: If a field has the wrong type.
    """
    explicit = yaml_path is not None
    if yaml_path is None:
        yaml_path = pathlib.Path.cwd() / "channels.yaml"

    if not yaml_path.exists():
        if explicit:
            msg = f"Channel configuration not found at {yaml_path}"
            raise FileNotFoundError(msg)
        logger.debug("No configuration at %s, using defaults", yaml_path)
        return AppConfig()

    with yaml_path.open() as f:
        data = yaml.safe_load(f)

    if data is None:
        return AppConfig()

    if not isinstance(data, dict):
        msg = "YAML file must contain a mapping of settings"
        raise ValueError(msg)

    config = AppConfig()

    if "channels" in data:
        channels = data["channels"]
        if not isinstance(channels, dict) or not channels:
            msg = "'channels' must be a non-empty mapping of label to channel id"
            raise TypeError(msg)
        config.channels = {str(label): str(channel) for label, channel in channels.items()}
        config.default_label = next(iter(config.channels))

    if "default" in data:
        default = str(data["default"])
        if default not in config.channels:
            msg = f"Default channel {default!r} is not one of the configured channels"
            raise ValueError(msg)
        config.default_label = default

    for key, attr in (("request_timeout", "request_timeout"), ("probe_interval", "probe_interval")):
        if key in data:
            value = data[key]
            if isinstance(value, bool) or not isinstance(value, int | float):
                msg = f"'{key}' must be a number of seconds"
                raise TypeError(msg)
            if value <= 0:
                msg = f"'{key}' must be positive"
                raise ValueError(msg)
            setattr(config, attr, float(value))

    if data.get("player") is not None:
        config.player = str(data["player"])

    logger.info("Loaded %d channels from %s", len(config.channels), yaml_path)
    return config
