"""Command-line interface for Unsubscribe Finder.

This module provides the main entry point for the CLI application. The CLI
acts on the mailbox whose OAuth token is stored locally.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

import structlog

from unsubscribe_finder import __version__
from unsubscribe_finder.config import get_settings
from unsubscribe_finder.exceptions import (
    AuthExpiredError,
    CredentialsMissingError,
    UnsubscribeFinderError,
)
from unsubscribe_finder.pipeline import CandidatePipeline
from unsubscribe_finder.sessions import LocalTokenCredentialStore
from unsubscribe_finder.utils import configure_logging

logger = structlog.get_logger()

LOCAL_USER_ID = "local"


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="unsubscribe-finder",
        description="Find unsubscribe links hiding in your Gmail",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan_parser = subparsers.add_parser("scan", help="List messages carrying unsubscribe links")
    scan_parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum number of search hits to inspect (default: settings default_page_size)",
    )
    scan_parser.add_argument("--sender", default=None, help="Only messages from this sender")
    scan_parser.add_argument(
        "--page-token",
        default=None,
        help="Continue from the token printed by a previous scan",
    )
    scan_parser.add_argument(
        "--include-archived",
        action="store_true",
        help="Search the whole mailbox, not just the inbox",
    )

    subparsers.add_parser("stats", help="Show inbox size and unsubscribe estimate")

    show_parser = subparsers.add_parser("show", help="Show one message's headers and body")
    show_parser.add_argument("email_id", help="Gmail message ID")
    show_parser.add_argument(
        "--headers-only",
        action="store_true",
        help="Do not print the message body",
    )

    return parser


async def _cmd_scan(pipeline: CandidatePipeline, args: argparse.Namespace) -> int:
    result = await pipeline.fetch_candidates(
        LOCAL_USER_ID,
        page=2 if args.page_token else 1,
        limit=args.limit,
        sender=args.sender,
        page_token=args.page_token,
        include_archived=args.include_archived,
    )

    for email in result.emails:
        print(f"{email.date}\t{email.sender}\t{email.subject}")
        for link in email.unsubscribe_links:
            print(f"    [{link.source.value}] {link.url}")

    print(f"\n{len(result.emails)} candidates (about {result.total_count} matching messages)")
    if result.next_page_token:
        print(f"Next page: --page-token {result.next_page_token}")
    return 0


async def _cmd_stats(pipeline: CandidatePipeline, args: argparse.Namespace) -> int:
    stats = await pipeline.fetch_stats(LOCAL_USER_ID)
    print(f"Inbox messages: {stats.total_inbox_emails}")
    print(f"Unsubscribe candidates (estimate): {stats.unsubscribe_emails_count}")
    return 0


async def _cmd_show(pipeline: CandidatePipeline, args: argparse.Namespace) -> int:
    detail = await pipeline.fetch_single_email_detail(LOCAL_USER_ID, args.email_id)
    print(f"From: {detail.sender}")
    print(f"Subject: {detail.subject}")
    print(f"Date: {detail.date}")
    if not args.headers_only:
        print()
        print(detail.body)
    return 0


_COMMANDS = {
    "scan": _cmd_scan,
    "stats": _cmd_stats,
    "show": _cmd_show,
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Unsubscribe Finder CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()
    configure_logging(settings)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    command = _COMMANDS.get(parsed.command)
    if command is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    pipeline = CandidatePipeline(LocalTokenCredentialStore(settings), settings=settings)
    try:
        return asyncio.run(command(pipeline, parsed))
    except (AuthExpiredError, CredentialsMissingError) as exc:
        print(f"Authentication required: {exc}", file=sys.stderr)
        print(f"Delete {settings.gmail_token_path} and run again to sign in.", file=sys.stderr)
        return 1
    except UnsubscribeFinderError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
