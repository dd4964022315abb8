"""
Command line access to the Amara API

amara-adapter --config configs/amara.toml video AbCdEfGh1234
amara-adapter --config configs/amara.toml subtitle AbCdEfGh1234 en --format srt
"""

import argparse
import json
import sys
import traceback
from pathlib import Path
from typing import List, Optional

from amara_adapter.client import AmaraAPI
from amara_adapter.config_loader import ConfigLoader
from amara_adapter.errors import AmaraAPIError
from amara_adapter.logging_config import configure_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='amara-adapter',
        description="Query the Amara subtitling API",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Validate configuration and environment only
  amara-adapter --config configs/amara.toml validate

  # List all subtitle languages of a video
  amara-adapter --config configs/amara.toml languages AbCdEfGh1234

  # Download a subtitle track as SRT
  amara-adapter --config configs/amara.toml subtitle AbCdEfGh1234 en --format srt
        """
    )
    parser.add_argument("--config", required=True, help="Path to TOML configuration file")
    parser.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("validate", help="Only validate configuration")

    video = commands.add_parser("video", help="Show video metadata")
    video.add_argument("video_id")

    languages = commands.add_parser("languages", help="List a video's subtitle languages")
    languages.add_argument("video_id")

    subtitle = commands.add_parser("subtitle", help="Fetch a subtitle track")
    subtitle.add_argument("video_id")
    subtitle.add_argument("language_code")
    subtitle.add_argument("--format", default=None, help="Subtitle format, e.g. srt, vtt, dfxp")
    subtitle.add_argument("--version", type=int, default=None, help="Subtitle version number")

    tasks = commands.add_parser("tasks", help="List a team's tasks")
    tasks.add_argument("team")

    members = commands.add_parser("members", help="List a team's members")
    members.add_argument("team")

    return parser


def run_command(api: AmaraAPI, args: argparse.Namespace):
    if args.command == 'video':
        return api.get_video_info(video_id=args.video_id)
    if args.command == 'languages':
        return api.get_video_languages(args.video_id)
    if args.command == 'subtitle':
        return api.get_subtitle(args.video_id, args.language_code,
                                format=args.format, version_number=args.version)
    if args.command == 'tasks':
        return api.get_tasks(args.team)
    if args.command == 'members':
        return api.get_members(args.team)
    raise ValueError(f"Unknown command: {args.command}")


def main(argv: Optional[List[str]] = None) -> int:
    """Main execution function; returns the process exit code"""
    args = build_parser().parse_args(argv)

    try:
        config = ConfigLoader.load_toml_config(Path(args.config))
        log_file = config.logging.get('log_file_name')
        configure_logging(
            'DEBUG' if args.verbose else config.logging.get('level', 'INFO'),
            Path(log_file) if log_file else None
        )

        api = AmaraAPI.from_config(config)
        if args.command == 'validate':
            print("Configuration validation passed!")
            print(f"Host: {api.credentials.host}")
            print(f"User: {api.credentials.user}")
            return 0

        with api:
            result = run_command(api, args)

    except (AmaraAPIError, FileNotFoundError) as e:
        print(f"Execution failed: {e}", file=sys.stderr)
        if args.verbose:
            print(f"Traceback: {traceback.format_exc()}", file=sys.stderr)
        return 1

    if result is None:
        print("No result (invalid identifier, or the request gave up after retries)", file=sys.stderr)
        return 1

    if isinstance(result, str):
        print(result)
    else:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
