#!/usr/bin/env python3
"""
ledgertree CLI - command-line interface for hierarchical transactions.

Usage:
    python -m cli [--ledger FILE] [--format auto|yaml|csv] <command> <subcommand> [options]

Commands:
    transactions Query and manage transactions

Examples:
    python -m cli --ledger ledger.yaml transactions show 10
    python -m cli --ledger ledger.yaml transactions types cars
    python -m cli --ledger ledger.csv transactions sum 10
    python -m cli --ledger ledger.yaml transactions shell
"""

import sys
import argparse
from cli import transactions
from config import LEDGER_FORMATS, load_config
from services.base import Services
from tools.ledger import load_ledger_file
from logger import setup_logging


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="cli",
        description="ledgertree - Hierarchical transaction queries",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--ledger",
        help="Ledger file to load before running the command "
        "(defaults to [ledger] file in the config)",
    )
    parser.add_argument(
        "--format",
        choices=LEDGER_FORMATS,
        default=None,
        help="Ledger file format (defaults to [ledger] format in the config)",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
        required=True,
    )

    transactions.setup_parser(subparsers)
    return parser


def main():
    """Main CLI entry point with subcommands."""
    parser = build_parser()
    args = parser.parse_args()

    if hasattr(args, "func"):
        try:
            config = load_config()
            setup_logging(config)

            services = Services(config)

            ledger_file = args.ledger or config.ledger_file
            if ledger_file:
                load_ledger_file(
                    services, ledger_file, args.format or config.ledger_format
                )

            args.func(args, services)
        except Exception as e:
            print(f"Error: {e}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
