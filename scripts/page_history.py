#!/usr/bin/env python3
"""
Page history viewer

Prints the history of a wiki page, newest first, one revision per line.
Works against wikis with the REST API and against Action-API-only wikis.

Usage:
    python scripts/page_history.py "Main Page"
    python scripts/page_history.py "Main Page" --limit 20 --filter minor
    python scripts/page_history.py "Main Page" --config /etc/wikibridge.json
"""

import argparse
import asyncio
import sys
from pathlib import Path
from urllib.parse import urlsplit

# Add project root to path for the package when run from a checkout
SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
sys.path.insert(0, str(PROJECT_ROOT))

from wikibridge import Wiki, WikiError, load_config, setup_logging
from wikibridge.backends import HISTORY_FILTERS


def format_revision(revision) -> str:
    """Render one revision as a single line."""
    delta = "" if revision.delta is None else f"{revision.delta:+d}"
    comment = revision.comment or ""
    return f"{revision.id}\t{revision.timestamp}\t{revision.user.name}\t{delta}\t{comment}"


async def print_history(wiki: Wiki, title: str, limit: int, filter: str | None) -> int:
    """Print revisions and return how many were printed."""
    history = wiki.page(title).history(filter=filter).limit(limit)
    printed = 0
    async for revision in history:
        print(format_revision(revision))
        printed += 1
    return printed


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Print the history of a wiki page.")
    parser.add_argument("title", help="Page title")
    parser.add_argument("--limit", type=int, default=20, help="Number of revisions (default: 20)")
    parser.add_argument("--filter", choices=HISTORY_FILTERS, help="Only revisions of this kind")
    parser.add_argument("--config", help="Config file (default: $WIKIBRIDGE_CONFIG or ./config.json)")
    parser.add_argument("--url", help="Wiki URL, overriding wiki.api_url from the config")
    args = parser.parse_args()

    config = load_config(args.config)
    if args.url:
        config["wiki"]["api_url"] = args.url

    wiki_host = urlsplit(config["wiki"]["api_url"] or "").netloc or "wiki"
    logger = setup_logging(
        name="page-history",
        wiki_id=wiki_host,
        log_dir=config["logging"]["dir"],
        level=config["logging"]["level"],
    )

    async def run() -> int:
        async with Wiki.from_config(config, logger=logger) as wiki:
            return await print_history(wiki, args.title, args.limit, args.filter)

    try:
        printed = asyncio.run(run())
    except WikiError as e:
        logger.error(f"{args.title}: {e}")
        sys.exit(1)

    logger.info(f"Printed {printed} revisions of {args.title}")


if __name__ == "__main__":
    main()
