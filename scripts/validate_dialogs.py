"""Validate dialog content files against the schema and the tree rules.

Example:
    python scripts/validate_dialogs.py            # built-in dialogs/
    python scripts/validate_dialogs.py path/to/my_dialog.yml --schema dialogs/.schema.yml
"""

import argparse
import sys

from dialog_simulation_engine.core.constants import DIALOGS_FPATH
from dialog_simulation_engine.helpers.logging_helpers import configure_logger
from dialog_simulation_engine.helpers.validation_helpers import validate_and_print


def main() -> None:
    """Validate and exit non-zero if any file is invalid."""
    parser = argparse.ArgumentParser(description="Validate dialog content files")
    parser.add_argument(
        "target",
        nargs="?",
        default=str(DIALOGS_FPATH),
        help="A dialog file or a directory of dialog files.",
    )
    parser.add_argument("--schema", type=str, default=None, help="Yamale schema path.")
    args = parser.parse_args()

    configure_logger(source="validate-dialogs")
    try:
        ok = validate_and_print(args.target, schema_path=args.schema)
    except FileNotFoundError as e:
        print(f"❌ {e}")
        sys.exit(2)
    sys.exit(0 if ok else 1)


if __name__ == "__main__":
    main()
