"""twixter - command line client for twtxt, the microblog for hackers."""

import argparse
import sys
from typing import Optional

from twixter import __version__
from twixter.config import Config, reload_config, resolve_config_path
from twixter.core import TimelineService
from twixter.exceptions import ConfigError, TwixterError
from twixter.logger import get_logger, setup_logger

logger = get_logger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="twixter",
        description="A client for twtxt, microblog for hackers",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument(
        "-c",
        "--config",
        metavar="PATH",
        help="Specifies a custom config file location",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log fetch progress to stderr",
    )

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    tweet = subparsers.add_parser("tweet", help="Append a new tweet to your twtxt file")
    tweet.add_argument("content", nargs="*", help="Text of the post")

    timeline = subparsers.add_parser("timeline", help="Retrieves your timeline")
    timeline.add_argument(
        "--limit",
        type=int,
        metavar="N",
        help="Number of entries to show (overrides limit_timeline)",
    )
    time_group = timeline.add_mutually_exclusive_group()
    time_group.add_argument(
        "--abs-time",
        dest="absolute",
        action="store_true",
        default=None,
        help="Show absolute timestamps",
    )
    time_group.add_argument(
        "--rel-time",
        dest="absolute",
        action="store_false",
        help="Show relative timestamps",
    )

    follow = subparsers.add_parser("follow", help="Adds a new source to your followings")
    follow.add_argument("nick", metavar="NICK", help="Specifies nickname to store source with")
    follow.add_argument("url", metavar="URL", help="Specifies source url")

    return parser


def cmd_tweet(service: TimelineService, args: argparse.Namespace) -> int:
    content = " ".join(args.content)
    service.tweet(content)
    return 0


def cmd_timeline(service: TimelineService, args: argparse.Namespace) -> int:
    if args.limit is not None and args.limit < 0:
        print("Error: --limit must not be negative", file=sys.stderr)
        return 2
    for line in service.timeline(limit=args.limit, absolute=args.absolute):
        print(line)
    return 0


def cmd_follow(service: TimelineService, args: argparse.Namespace, config_path: str) -> int:
    service.follow(config_path, args.nick, args.url)
    print(f"You're now following {args.nick}.")
    return 0


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    config_path = str(resolve_config_path(args.config))

    try:
        config: Config = reload_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    setup_logger(level="DEBUG" if args.verbose else None, config=config.logging)

    service = TimelineService(config)

    try:
        if args.command == "tweet":
            return cmd_tweet(service, args)
        if args.command == "timeline":
            return cmd_timeline(service, args)
        if args.command == "follow":
            return cmd_follow(service, args, config_path)
    except (TwixterError, ValueError, OSError) as e:
        logger.debug(f"{args.command} failed: {e!r}")
        print(f"Error: {e}", file=sys.stderr)
        return 1

    parser.error(f"unknown command: {args.command}")
    return 2


if __name__ == "__main__":
    sys.exit(main())
