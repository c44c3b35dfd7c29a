#!/usr/bin/env python3
"""
Spotify to Lavalink resolver

Prints "Artist - Title" lines for a Spotify track, album or playlist, or,
with --resolve, the best matching Lavalink track for each as JSON.
"""

import argparse
import json
import logging
import sys

from .config import BatchMode, Config, configure_logging
from .errors import SpotLinkError
from .parser import SpotifyParser
from .utils.identifiers import SPOTIFY_KINDS, parse_spotify_reference

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Resolve Spotify tracks, albums and playlists into Lavalink tracks"
    )
    parser.add_argument(
        "source",
        help="Spotify URL, spotify:<kind>:<id> URI, or a bare ID together with --kind",
    )
    parser.add_argument(
        "--kind",
        choices=SPOTIFY_KINDS,
        help="Kind of a bare ID",
    )
    parser.add_argument(
        "--resolve",
        action="store_true",
        help="Search the Lavalink node and print matched tracks as JSON",
    )
    parser.add_argument(
        "--partial",
        action="store_true",
        help="Keep going when a single album/playlist item fails",
    )
    parser.add_argument(
        "--workers",
        type=int,
        help="Number of parallel searches (default: from environment, or 4)",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Per-request timeout in seconds (default: from environment, or 10)",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Verbose output",
    )
    return parser.parse_args(argv)


def run(parser: SpotifyParser, kind: str, spotify_id: str, resolve: bool) -> None:
    """Fetch and print one Spotify reference."""
    if kind == "track":
        result = parser.get_track(spotify_id, convert=resolve)
        if not resolve:
            print(result)
        else:
            print(json.dumps(result.to_dict() if result else None, indent=2, ensure_ascii=False))
        return

    fetch = parser.get_album_tracks if kind == "album" else parser.get_playlist_tracks
    results = fetch(spotify_id, convert=resolve, show_progress=resolve)

    if not resolve:
        for title in results:
            print(title)
        return

    print(json.dumps([r.to_dict() for r in results], indent=2, ensure_ascii=False))
    failed = [r for r in results if not r.ok]
    if failed:
        print(f"{len(failed)} of {len(results)} tracks could not be resolved", file=sys.stderr)


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    configure_logging(verbose=args.verbose)

    try:
        config = Config.from_environment()
        if args.workers is not None:
            config.max_workers = args.workers
        if args.timeout is not None:
            config.timeout = args.timeout
        if args.partial:
            config.batch_mode = BatchMode.PARTIAL
        config.validate()
        kind, spotify_id = parse_spotify_reference(args.source, args.kind)
    except ValueError as e:
        print(f"Error: {e}")
        return 2

    try:
        with SpotifyParser.from_config(config) as parser:
            run(parser, kind, spotify_id, args.resolve)
    except SpotLinkError as e:
        logger.debug("Resolution failed", exc_info=True)
        print(f"Error: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
