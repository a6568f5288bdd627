"""Module to run a dialog using the cli interface.

Example:
    python scripts/run_cli.py -d victim-interview --source classroom-a -v
"""

import argparse
import sys

from loguru import logger

from dialog_simulation_engine.cli.runner import run_cli
from dialog_simulation_engine.helpers.logging_helpers import configure_logger


def main() -> None:
    """Main entrypoint for running the CLI."""
    parser = argparse.ArgumentParser(description="Dialog simulation CLI")
    parser.add_argument(
        "-d",
        "--dialog",
        type=str,
        required=True,
        help="Dialog id, title or path to a YAML/JSON dialog file.",
    )
    parser.add_argument("--version", type=str, default="latest")
    parser.add_argument("--source", type=str, default=None)
    parser.add_argument("--theme", type=str, default=None, help="Theme YAML file.")
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Show info logs (-v) or debug (-vv) to console",
    )

    args = parser.parse_args()

    if args.source is None:
        logger.warning(
            "No source was provided for run, defaulting to 'cli-default'."
            " Source helps track the origin of saved runs."
        )
        args.source = "cli-default"

    try:
        configure_logger(source=args.source)
    except OSError as e:
        logger.warning(f"Failed to configure logger with source '{args.source}': {e}")

    if args.verbose > 0:
        level = "DEBUG" if args.verbose > 1 else "INFO"
        logger.add(
            sys.stderr,
            level=level,
            format="<green>{time:HH:mm:ss}</green> | <level>{message}</level>",
        )

    logger.info("Starting CLI.")
    try:
        run_cli(
            dialog=args.dialog,
            source=args.source,
            version=args.version,
            custom_theme_path=args.theme,
        )
    except Exception as e:
        logger.exception(f"Exception occurred while running the CLI: {e}")
        print("Error occurred while running the CLI. Stopping. Check logs for details.")
        sys.exit(1)
    finally:
        logger.info("CLI exited.")


if __name__ == "__main__":
    main()
