"""Constants for core module."""

from pathlib import Path

# --- I/O --- #
OUTPUT_FPATH: Path = Path("output")
LOGS_FPATH: Path = Path("logs")

# built-in dialog content lives next to the package, like games/ did for configs
DIALOGS_FPATH: Path = Path(__file__).resolve().parent.parent.parent / "dialogs"
DIALOG_SCHEMA_FILENAME: str = ".schema.yml"
DIALOG_SUFFIXES: frozenset[str] = frozenset({".yml", ".yaml", ".json"})

# --- Run commands --- #
EXIT_COMMANDS: frozenset[str] = frozenset({"quit", "stop", "exit"})
SUMMARY_COMMANDS: frozenset[str] = frozenset({"summary", "score"})
HELP_COMMANDS: frozenset[str] = frozenset({"help", "?"})

# --- Messages for the engine (NOT FOR A SPECIFIC DIALOG) --- #
WELCOME_MSG: str = """
# Welcome

This is a branching dialog simulator for cybercrime investigation training.
You play the officer. Each response you pick shapes how the other person
feels and is scored on empathy, clarity, professionalism, accuracy and
patience.
"""

USAGE_MSG: str = """
Pick a response by typing its number (or its id).

Commands:
  /summary   show your scores so far
  /help      show this message
  /quit      leave the simulation
"""
