"""CLI entry point for media subtitle matcher."""

import argparse
import json
import logging
import sys
from pathlib import Path

from .. import __version__
from ..core import AutoFileMatcher, MatcherConfig, MatchRun, SubAutoLoadMode


def setup_logging(level: str = "INFO") -> None:
    """
    Set up logging configuration.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
    """
    logging.basicConfig(
        level=getattr(logging, level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def match_file_cli(current_file: Path, config: MatcherConfig) -> MatchRun:
    """
    Match subtitles for the directory of a media file from the command line.

    Args:
        current_file: Media file whose directory is matched
        config: Matcher configuration built from the command line

    Returns:
        MatchRun with the matching results
    """
    if not current_file.exists():
        raise FileNotFoundError(f"File not found: {current_file}")

    if current_file.is_dir():
        raise IsADirectoryError(f"Path is a directory, expected a media file: {current_file}")

    matcher = AutoFileMatcher(config)
    return matcher.start(current_file)


def run_to_dict(run: MatchRun) -> dict:
    """Convert a run to a JSON-serialisable summary."""
    return {
        "ticket": run.ticket,
        "status": run.status.value,
        "videos": [str(video.path) for video in run.result.videos],
        "subtitles": [str(sub.path) for sub in run.result.subtitles],
        "matched_subs": run.result.matched_subs,
        "playlist": [str(insertion.path) for insertion in run.playlist],
        "diagnostics": [
            {"kind": d.kind.value, "message": d.message, "path": str(d.path) if d.path else None}
            for d in run.diagnostics
        ],
    }


def print_match_results(run: MatchRun, detailed: bool = False) -> None:
    """
    Print match results to console.

    Args:
        run: Results from the matching run
        detailed: Whether to list videos without subtitles too
    """
    result = run.result
    print("\n" + "=" * 60)
    print("SUBTITLE MATCHES")
    print("=" * 60)

    print(f"Videos found: {len(result.videos)}")
    print(f"Subtitles found: {len(result.subtitles)}")
    print(f"Videos with subtitles: {result.matched_video_count}")

    for diagnostic in run.diagnostics:
        print(f"⚠️  {diagnostic.message}")

    if not result.matched_video_count:
        print("\nNo subtitles matched.")
        if not detailed:
            return

    print("\n" + "-" * 60)
    for video in result.videos:
        urls = result.subs_for(video)
        if not urls and not detailed:
            continue
        print(f"\n{video.path.name}")
        if not urls:
            print("  (no subtitles)")
        for i, url in enumerate(urls, 1):
            print(f"  {i}. {url}")


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        description="Media Subtitle Matcher - Pair videos with subtitle files by filename",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Match subtitles for every video next to an episode
  media-subtitle-matcher ~/Videos/Show/Show.S01E01.mkv

  # Also look in ~/Subtitles and every subdirectory of ./Subs
  media-subtitle-matcher episode.mkv --search-path "~/Subtitles:./Subs/*"

  # Prefer English subtitles
  media-subtitle-matcher episode.mkv --priority "en,eng"

  # JSON output
  media-subtitle-matcher episode.mkv --output-format json
        """,
    )

    parser.add_argument("file", type=Path, help="Media file currently being played")

    parser.add_argument(
        "--search-path",
        default="./*",
        help="Colon-separated extra subtitle directories; ~ and a trailing /* are supported "
        "(default: ./*)",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in SubAutoLoadMode],
        default=SubAutoLoadMode.BOTH.value,
        help="Subtitle auto-matching mode (default: both)",
    )
    parser.add_argument(
        "--priority",
        default="",
        help="Comma-separated strings that move a subtitle to the front",
    )
    parser.add_argument(
        "--no-playlist", action="store_true", help="Don't plan playlist additions"
    )
    parser.add_argument(
        "--no-fallback", action="store_true", help="Don't pair leftovers by filename distance"
    )
    parser.add_argument(
        "--detailed", action="store_true", help="List videos without subtitles as well"
    )

    parser.add_argument(
        "--output-format",
        choices=["text", "json"],
        default="text",
        help="Output format for results (default: text)",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Set logging level (default: WARNING)",
    )
    parser.add_argument(
        "--no-logging", action="store_true", help="Don't configure logging output"
    )

    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def main(argv: list[str] | None = None) -> int:
    """
    Main entry point for the CLI application.

    Returns:
        Exit code (0 for success, non-zero for error)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    config = MatcherConfig(
        auto_add_to_playlist=not args.no_playlist,
        sub_search_path=args.search_path,
        sub_auto_load=SubAutoLoadMode(args.mode),
        priority_strings=args.priority,
        enable_fallback_matching=not args.no_fallback,
        log_level=args.log_level,
        enable_logging=not args.no_logging,
    )

    if config.enable_logging:
        setup_logging(config.log_level)
    logger = logging.getLogger(__name__)

    try:
        run = match_file_cli(args.file, config)

        if args.output_format == "json":
            print(json.dumps(run_to_dict(run), indent=2))
        else:
            print_match_results(run, detailed=args.detailed)

        return 0

    except KeyboardInterrupt:
        print("\n\nOperation cancelled by user.")
        return 1
    except FileNotFoundError as e:
        print(f"Error: {e}")
        return 1
    except IsADirectoryError as e:
        print(f"Error: {e}")
        return 1
    except Exception as e:
        logger.exception("Unexpected error occurred")
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
