"""File utility functions."""

import re
from datetime import datetime
from pathlib import Path


def safe_timestamp() -> str:
    """Returns a timestamp string safe for file names."""
    return datetime.now().strftime("%Y%m%d_%H%M%S")


def slugify(text: str) -> str:
    """Lowercase text and collapse anything non-alphanumeric into single dashes."""
    return re.sub(r"[^a-z0-9]+", "-", text.strip().lower()).strip("-")


def unique_fpath(path: Path) -> Path:
    """Returns an incremented unique file path to avoid overwriting existing files."""
    path = Path(path)
    if not path.exists():
        return path

    parent, stem, suffix = path.parent, path.stem, path.suffix
    counter = 1
    while True:
        candidate = parent / f"{stem}_{counter}{suffix}"
        if not candidate.exists():
            return candidate
        counter += 1
