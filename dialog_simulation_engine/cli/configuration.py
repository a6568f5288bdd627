"""CLI configuration management."""

from pathlib import Path
from typing import Optional

import yaml
from loguru import logger

DEFAULT_THEME = {
    "intro": "bold blue",
    "outtro": "bold blue",
    "info": "bold bright_black",
    "user-prompt": "bold cyan",
    "speaker": "bold magenta",
    "npc": "green",
    "narrator": "italic bright_black",
    "option": "cyan",
    "feedback-good": "bold green",
    "feedback-bad": "bold yellow",
    "warning": "yellow",
    "error": "bold red",
}


def load_theme(config_path: Optional[str] = None) -> dict:
    """Load the CLI theme from a YAML file with a top-level `theme` mapping.

    Missing keys fall back to DEFAULT_THEME; an unreadable file means defaults.
    """
    if config_path is None:
        return DEFAULT_THEME.copy()
    p = Path(config_path)
    if not p.exists():
        logger.warning(f"Theme file not found at {p}; using defaults.")
        return DEFAULT_THEME.copy()
    try:
        with p.open("r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Failed to load theme from {config_path}: {e}")
        return DEFAULT_THEME.copy()
    theme = config.get("theme") if isinstance(config, dict) else None
    if not isinstance(theme, dict):
        logger.warning(f"No `theme` mapping in {config_path}; using defaults.")
        return DEFAULT_THEME.copy()
    return {**DEFAULT_THEME, **{str(k): str(v) for k, v in theme.items()}}
