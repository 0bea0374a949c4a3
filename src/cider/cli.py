"""
Cider CLI - Command Line Interface

argparse-based remote control for a running Cider instance.
"""

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

from . import __version__
from .client import CiderClient
from .exceptions import CiderError, ErrorKind, NothingPlayingError
from .logger import setup_logging
from .models import CiderConfig, NowPlaying, QueueItem

logger = logging.getLogger(__name__)

# Commands that map one-to-one onto a client method without arguments
SIMPLE_COMMANDS = {
    "play": "play",
    "pause": "pause",
    "toggle": "play_pause",
    "stop": "stop",
    "next": "next",
    "previous": "previous",
    "add-to-library": "add_to_library",
    "clear-queue": "clear_queue",
    "toggle-repeat": "toggle_repeat",
    "toggle-shuffle": "toggle_shuffle",
    "toggle-autoplay": "toggle_autoplay",
}


def create_parser() -> argparse.ArgumentParser:
    """
    Create argument parser for CLI.

    Returns:
        Configured ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="cider",
        description="Remote control for the Cider music player",
        epilog="Example: cider --token $CIDER_API_TOKEN now-playing",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "--url",
        type=str,
        metavar="URL",
        help="Cider RPC address (default: $CIDER_BASE_URL or http://127.0.0.1:10767)",
    )

    parser.add_argument(
        "--token",
        type=str,
        metavar="TOKEN",
        help="API token (default: $CIDER_API_TOKEN)",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose debug logging",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, metavar="COMMAND")

    subparsers.add_parser("status", help="Check that Cider is running")
    subparsers.add_parser("now-playing", help="Show the current track")
    subparsers.add_parser("queue", help="List the playback queue")

    for name, method in SIMPLE_COMMANDS.items():
        subparsers.add_parser(name, help=f"Run {method.replace('_', ' ')}")

    seek = subparsers.add_parser("seek", help="Seek to a position in the current track")
    seek.add_argument("seconds", type=float, help="Target position in seconds")

    volume = subparsers.add_parser("volume", help="Show or set the volume")
    volume.add_argument("level", type=float, nargs="?", help="New volume between 0.0 and 1.0")

    subparsers.add_parser("repeat", help="Show the repeat mode")
    subparsers.add_parser("shuffle", help="Show the shuffle mode")
    subparsers.add_parser("autoplay", help="Show the autoplay setting")

    rate = subparsers.add_parser("rate", help="Rate the current track")
    rate.add_argument("rating", type=int, choices=(-1, 0, 1), help="-1 dislike, 0 unset, 1 like")

    play_url = subparsers.add_parser("play-url", help="Play an Apple Music URL")
    play_url.add_argument("url", help="music.apple.com URL")

    amapi = subparsers.add_parser("amapi", help="Run a raw Apple Music API request")
    amapi.add_argument("path", help="API path, e.g. /v1/me/library/songs")

    return parser


def build_config(args: argparse.Namespace) -> CiderConfig:
    """Environment configuration with CLI flags applied on top."""
    config = CiderConfig.from_environment()
    if args.url:
        config = config.with_base_url(args.url)
    if args.token:
        config = config.with_token(args.token)
    return config


def format_duration(seconds: float) -> str:
    """
    Format seconds as m:ss.

    Examples:
        >>> format_duration(234.0)
        '3:54'
    """
    total = int(max(seconds, 0))
    return f"{total // 60}:{total % 60:02d}"


def display_now_playing(track: NowPlaying) -> None:
    """
    Display the current track.

    Args:
        track: Track returned by now_playing()
    """
    print(f"{track.name} - {track.artist_name}")
    print(f"Album:    {track.album_name}")
    print(
        f"Position: {format_duration(track.current_playback_time)} / "
        f"{format_duration(track.duration_in_millis / 1000)}"
    )
    print(f"Shuffle:  {track.shuffle_mode.name.lower()}  Repeat: {track.repeat_mode.name.lower()}")
    print(f"Artwork:  {track.artwork_url(600)}")


def display_queue(queue: List[QueueItem]) -> None:
    """
    Display the queue, marking the current item.

    Args:
        queue: Items returned by get_queue()
    """
    if not queue:
        print("Queue is empty")
        return

    for position, item in enumerate(queue, start=1):
        marker = ">" if item.is_current() else " "
        attrs = item.attributes
        if attrs is None:
            print(f"{marker} {position:3d}. {item.id or '?'}")
            continue
        print(f"{marker} {position:3d}. {attrs.name or '?'} - {attrs.artist_name or '?'}")


def display_error(error: CiderError) -> None:
    """
    Display error message with appropriate context.

    Args:
        error: Classified client error
    """
    if error.kind is ErrorKind.NOT_REACHABLE:
        print("Cider is not running or not reachable.")
        print("Check that Cider is open and Settings > Connectivity > WebSockets API is enabled.")
    elif error.kind is ErrorKind.UNAUTHORIZED:
        print("Cider rejected the API token.")
        print("Create one under Settings > Connectivity > Manage External Application Access.")
    elif error.kind is ErrorKind.TRANSPORT:
        print(f"Network error: {error}")
    elif error.kind is ErrorKind.UNEXPECTED_RESPONSE:
        print(f"Unexpected response from Cider: {error}")
    else:
        print(f"Error: {error}")


async def run_command(args: argparse.Namespace, client: CiderClient) -> None:
    """
    Execute the selected subcommand.

    Args:
        args: Parsed CLI arguments
        client: Client to run the command with
    """
    command = args.command

    if command == "status":
        await client.is_active()
        playing = await client.is_playing()
        print(f"Cider is running ({'playing' if playing else 'paused'})")
    elif command == "now-playing":
        display_now_playing(await client.now_playing())
    elif command == "queue":
        display_queue(await client.get_queue())
    elif command in SIMPLE_COMMANDS:
        await getattr(client, SIMPLE_COMMANDS[command])()
    elif command == "seek":
        await client.seek(args.seconds)
    elif command == "volume":
        if args.level is None:
            print(f"Volume: {await client.get_volume():.2f}")
        else:
            await client.set_volume(args.level)
    elif command == "repeat":
        print(f"Repeat: {(await client.get_repeat_mode()).name.lower()}")
    elif command == "shuffle":
        print(f"Shuffle: {(await client.get_shuffle_mode()).name.lower()}")
    elif command == "autoplay":
        print(f"Autoplay: {'on' if await client.get_autoplay() else 'off'}")
    elif command == "rate":
        await client.set_rating(args.rating)
    elif command == "play-url":
        await client.play_url(args.url)
    elif command == "amapi":
        print(json.dumps(await client.amapi_run_v3(args.path), indent=2))
    else:
        raise ValueError(f"Unknown command: {command}")


async def async_main(args: argparse.Namespace, client: Optional[CiderClient] = None) -> int:
    """
    Async main function.

    Args:
        args: Parsed CLI arguments
        client: Optional preconfigured client

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    try:
        if client is None:
            client = CiderClient(build_config(args))
        await run_command(args, client)
        return 0

    except NothingPlayingError:
        print("Nothing playing")
        return 0

    except CiderError as e:
        display_error(e)
        if args.verbose:
            logger.exception("Detailed error traceback:")
        return 1

    except ValueError as e:
        print(f"Invalid argument: {e}")
        return 1


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Exit code (0 for success, 1 for failure)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging()
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        return asyncio.run(async_main(args))
    except KeyboardInterrupt:
        print()
        print("Interrupted")
        return 1


if __name__ == "__main__":
    sys.exit(main())
