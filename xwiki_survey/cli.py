#!/usr/bin/env python3
"""
Command-line entry point.

Usage:
    xwiki-survey Example                     # survey one user
    xwiki-survey Example "Sockpuppets of X"  # add the category's user pages
    xwiki-survey Example --wikipage "User:Example/Socks"
    xwiki-survey Example --lockedafter 2021-08-21
    xwiki-survey Example --outfile report.txt --verbose
"""

import argparse
import logging
import shlex
import sys
from typing import Optional

from xwiki_survey.config import load_config
from xwiki_survey.logging_config import setup_logging
from xwiki_survey.models import parse_timestamp
from xwiki_survey.survey import run


def _timestamp(value: str):
    try:
        return parse_timestamp(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid date: {value!r}")


def command_line_footer(argv: list[str]) -> str:
    """Report footer recording the command that produced it."""
    return f"Command line: <kbd>{shlex.join(['xwiki-survey', *argv])}</kbd>"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="xwiki-survey",
        description="Survey the new pages created by a user across all Wikimedia wikis.",
    )
    parser.add_argument("username", help="User to survey, without the User: prefix")
    parser.add_argument(
        "category",
        nargs="?",
        help="Category (without the Category: prefix) whose user pages are also surveyed",
    )
    parser.add_argument("--wikipage", help="Home wiki page whose linked users are also surveyed")
    parser.add_argument(
        "--lockedafter",
        type=_timestamp,
        help="Skip users globally locked before this date (e.g., 2021-08-21)",
    )
    parser.add_argument("--outfile", help="Report file (default: spam.txt)")
    parser.add_argument("--config", help="Path to a config.json file")
    parser.add_argument("--log-dir", help="Directory for log files (default: ./logs)")
    parser.add_argument("--verbose", "-v", action="store_true", help="Log debug output")
    return parser


def main(argv: Optional[list[str]] = None):
    """Main entry point."""
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(argv)
    config = load_config(args.config)
    if args.log_dir:
        config.log_dir = args.log_dir

    logger = setup_logging(
        username=args.username,
        log_dir=config.log_dir,
        level=logging.DEBUG if args.verbose else logging.INFO,
    )
    logger.info("Cross-wiki Contribution Survey")
    logger.info("=" * 50)
    logger.info(f"User: {args.username}")
    if args.category:
        logger.info(f"Category: {args.category}")
    if args.wikipage:
        logger.info(f"User list page: {args.wikipage}")
    if args.lockedafter:
        logger.info(f"Skipping users locked before {args.lockedafter:%Y-%m-%d}")
    logger.info(f"Delay: {config.delay} seconds between requests")

    try:
        path = run(
            config,
            args.username,
            args.category,
            args.outfile,
            wikipage=args.wikipage,
            locked_after=args.lockedafter,
            footer=command_line_footer(argv),
        )
    except Exception:
        logger.exception("Survey failed")
        raise

    logger.info(f"=== SURVEY COMPLETE === {path}")


if __name__ == "__main__":
    main()
