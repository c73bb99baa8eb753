# main.py

"""Entry point for the price_alert command-line tool."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging
from src.config.settings import Settings

logger = logging.getLogger("price_alert.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    retailers = ", ".join(s["label"] for s in Settings.AVAILABLE_RETAILERS)

    parser = argparse.ArgumentParser(
        prog="price_alert",
        description="Multi-retailer price tracker with target alerts.",
        epilog=f"Supported retailers: {retailers}",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser(
        "add", help="Track a product at one or more retailer URLs.",
    )
    add.add_argument("name", help='Product name, e.g. "AirPods Pro".')
    add.add_argument(
        "target",
        help="Alert when ANY retailer drops to this price (dollars).",
    )
    add.add_argument("urls", nargs="+", help="Retailer product URLs.")

    append = sub.add_parser(
        "append", help="Add retailer URLs to an existing product.",
    )
    append.add_argument("product_id")
    append.add_argument("urls", nargs="+")

    sub.add_parser("list", help="List tracked products and best prices.")

    remove = sub.add_parser("remove", help="Stop tracking a product.")
    remove.add_argument("product_id")

    remove_retailer = sub.add_parser(
        "remove-retailer", help="Stop tracking one retailer URL.",
    )
    remove_retailer.add_argument("product_id")
    remove_retailer.add_argument("url")

    sub.add_parser("check", help="Check all prices now.")

    history = sub.add_parser(
        "history", help="Show recorded price history for a product.",
    )
    history.add_argument("product_id")
    return parser


def main() -> None:
    """Parse arguments and dispatch to the matching command."""
    log_file = setup_logging()
    logger.info("price_alert starting, log file: %s", log_file)

    args = _build_parser().parse_args()

    from src.cli import runner

    commands = {
        "add": lambda: runner.add_product(args.name, args.target, args.urls),
        "append": lambda: runner.append_retailers(
            args.product_id, args.urls,
        ),
        "list": runner.list_products,
        "remove": lambda: runner.remove_product(args.product_id),
        "remove-retailer": lambda: runner.remove_retailer(
            args.product_id, args.url,
        ),
        "check": runner.check_prices,
        "history": lambda: runner.show_history(args.product_id),
    }

    try:
        exit_code = asyncio.run(commands[args.command]())
    except Exception:
        logger.critical("Fatal error running %s", args.command, exc_info=True)
        raise
    finally:
        logger.info("price_alert shutting down")
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
