"""Command-line interface for magyartv."""

import argparse
import asyncio
import logging
import pathlib
import sys

from .config import AppConfig, load_config
from .connectivity import ConnectivityMonitor, http_probe
from .errors import ResolutionError
from .extractor import iter_candidates
from .fetcher import EmbedFetcher
from .player import StreamPlayer
from .resolver import StreamResolver
from .session import ChannelSession
from .types import Channel

logger = logging.getLogger(__name__)


def setup_logging(debug: bool = False) -> None:
    """
    Configure logging for the application.

    Args:
        debug: Enable debug level logging if True.
    """
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler("magyartv.log"),
            logging.StreamHandler(),
        ],
    )


def positive_float(value: str) -> float:
    """Parse a strictly positive number of seconds for argparse."""
    try:
        number = float(value)
    except ValueError:
        msg = f"{value!r} is not a number"
        raise argparse.ArgumentTypeError(msg) from None
    if not number > 0:
        msg = f"{value!r} must be a positive number of seconds"
        raise argparse.ArgumentTypeError(msg)
    return number


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the magyartv command."""
    parser = argparse.ArgumentParser(
        prog="magyartv",
        description="magyartv - Watch Hungarian live TV channels in your video player",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Play the default channel (M4)
  magyartv

  # Play M1 by label or by channel id
  magyartv --channel M1
  magyartv --channel mtv1live

  # Print the resolved stream URL without playing it
  magyartv --channel M4 --resolve-only
        """,
    )
    parser.add_argument(
        "--channel",
        "-c",
        type=str,
        help="Channel label from the config (e.g. M1) or a raw channel id",
    )
    parser.add_argument(
        "--list",
        "-l",
        action="store_true",
        help="List configured channels and exit",
    )
    parser.add_argument(
        "--config",
        type=pathlib.Path,
        help="Path to channels.yaml configuration file",
    )
    parser.add_argument(
        "--resolve-only",
        "-r",
        action="store_true",
        help="Resolve the stream URL, print it and exit",
    )
    parser.add_argument(
        "--list-candidates",
        action="store_true",
        help="Print every stream candidate found on the embed page and exit",
    )
    parser.add_argument(
        "--timeout",
        type=positive_float,
        help="Embed page request timeout in seconds (default: from config, 15)",
    )
    parser.add_argument(
        "--player",
        "-p",
        type=str,
        help="Preferred video player: mpv, vlc or ffplay",
    )
    parser.add_argument(
        "--debug",
        "-d",
        action="store_true",
        help="Enable debug logging",
    )
    return parser


async def resolve_once(resolver: StreamResolver, channel: Channel) -> int:
    """
    Resolve a channel and print the stream URL.

    Returns:
        Process exit code: 0 on success, 1 on failure.
    """
    result = await resolver.resolve(channel)
    if result.ok:
        print(result.stream.url)
        return 0
    logger.error("Could not resolve %s: %s", channel, result.error)
    return 1


def list_candidates(fetcher: EmbedFetcher, channel: Channel) -> int:
    """
    Print every acceptable stream candidate on the channel's embed page.

    Returns:
        Process exit code: 0 if at least one candidate was found.
    """
    try:
        html = fetcher.fetch(channel)
        candidates = list(iter_candidates(html))
    except ResolutionError as e:
        logger.error("Could not fetch %s: %s", channel, e)
        return 1

    if not candidates:
        logger.error("No stream candidates found for %s", channel)
        return 1

    for idx, url in enumerate(candidates, 1):
        print(f"{idx}. {url}")
    return 0


async def run_session(
    channel: Channel,
    resolver: StreamResolver,
    player: StreamPlayer,
    monitor: ConnectivityMonitor,
) -> None:
    """Play a channel until cancelled, reloading when the network returns."""
    session = ChannelSession(channel, resolver, player, monitor=monitor)
    session.start()
    try:
        await asyncio.Event().wait()
    finally:
        teardown = session.stop()
        if teardown is not None:
            await teardown


def print_channels(config: AppConfig) -> None:
    """Print the configured channels, marking the default."""
    for label, channel in config.channels.items():
        marker = " (default)" if label == config.default_label else ""
        print(f"{label}: {channel}{marker}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the magyartv CLI."""
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        config = load_config(args.config)
    except (FileNotFoundError, ValueError, TypeError):
        logger.exception("Error loading configuration")
        return 2

    if args.list:
        print_channels(config)
        return 0

    channel = config.channel_for(args.channel)
    timeout = args.timeout if args.timeout is not None else config.request_timeout
    fetcher = EmbedFetcher(timeout=timeout)

    if args.list_candidates:
        try:
            return list_candidates(fetcher, channel)
        finally:
            fetcher.close()

    resolver = StreamResolver(fetcher)
    try:
        if args.resolve_only:
            return asyncio.run(resolve_once(resolver, channel))

        player = StreamPlayer(args.player or config.player)
        monitor = ConnectivityMonitor(
            probe=lambda: http_probe(fetcher.embed_url),
            interval=config.probe_interval,
        )
        logger.info("Playing channel %s (press Ctrl+C to exit)", channel)
        try:
            asyncio.run(run_session(channel, resolver, player, monitor))
        except KeyboardInterrupt:
            logger.info("Shutting down...")
        return 0
    finally:
        resolver.close()


if __name__ == "__main__":
    sys.exit(main())
