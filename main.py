#!/usr/bin/env python3
"""
Retrospect - Recent Notes Harvester

Main entry point for Retrospect. Crawls the notes edited in the last few days,
renders them as markdown and prints them, ready to be handed to an assistant
for a retrospective.
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from retrospect.client import NotionClient
from retrospect.config import ConfigManager
from retrospect.crawler import Crawler
from retrospect.errors import RetrospectError
from retrospect.importers import MockNotionClient, NotionImporter
from retrospect.render import to_prompt_text


def setup_logging(config: ConfigManager):
    """Configure logging for the application."""
    level = getattr(logging, config.get("logging.level", "INFO").upper())
    format_str = config.get("logging.format", "%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(config.log_filename)
        ]
    )


async def harvest_notes(importer_type: str, days: int, config: ConfigManager) -> str:
    """
    Crawl the workspace and render the recently edited notes.

    Args:
        importer_type: 'notion' for the live API, 'mock' for the bundled sample workspace
        days: Number of days to look back
        config: Configuration to use

    Returns:
        The rendered markdown notes
    """
    if importer_type == "mock":
        client = MockNotionClient()
    elif importer_type == "notion":
        client = NotionClient.from_config(config)
    else:
        raise ValueError(f"Unknown importer type: {importer_type}")

    async with client:
        importer = NotionImporter(client, page_size=config.page_size)
        crawler = Crawler(importer, config_manager=config)
        parsed_pages = await crawler.parse_last_edited(days=days)

    return to_prompt_text(parsed_pages)


def parse_arguments():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Retrospect - Recent Notes Harvester",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py                            # Notes from the last 7 days
  python main.py --days 14                  # Notes from the last two weeks
  python main.py --importer mock            # Run against the bundled sample workspace
  python main.py --use-prompt-info-file     # Reuse (or create) the cached prompt_info.md
        """
    )

    parser.add_argument(
        "-d", "--days",
        type=int,
        default=None,
        help="Number of days to look back for notes (default: crawl.lookback_days)"
    )

    parser.add_argument(
        "--importer",
        choices=["notion", "mock"],
        default="notion",
        help="Data source to crawl (default: notion)"
    )

    parser.add_argument(
        "-u", "--use-prompt-info-file",
        action="store_true",
        help="Read the rendered notes from the prompt info file if it exists, otherwise write it"
    )

    parser.add_argument(
        "--config",
        type=str,
        default="config.yaml",
        help="Path to the configuration file (default: config.yaml)"
    )

    parser.add_argument(
        "--version",
        action="version",
        version="Retrospect 0.1.0"
    )

    return parser.parse_args()


def main():
    """Main entry point."""
    args = parse_arguments()
    config = ConfigManager(args.config)
    setup_logging(config)

    days = config.lookback_days if args.days is None else args.days
    prompt_path = Path(config.prompt_info_filename)

    try:
        if args.use_prompt_info_file and prompt_path.exists():
            logging.info(f"Using cached prompt info from {prompt_path}")
            prompt_info = prompt_path.read_text(encoding="utf-8")
        else:
            logging.info(f"Analyzing your last {days} {'day' if days == 1 else 'days'} of notes...")
            prompt_info = asyncio.run(harvest_notes(args.importer, days, config))
            if args.use_prompt_info_file:
                prompt_path.write_text(prompt_info, encoding="utf-8")
                logging.info(f"Wrote prompt info to {prompt_path}")

    except KeyboardInterrupt:
        logging.info("Crawl interrupted by user")
        print("\nCrawl interrupted.", file=sys.stderr)
        sys.exit(130)

    except RetrospectError as e:
        logging.error(f"Crawl failed: {e}")
        print(f"\nCrawl failed: {e}", file=sys.stderr)
        sys.exit(1)

    print(prompt_info)


if __name__ == "__main__":
    main()
