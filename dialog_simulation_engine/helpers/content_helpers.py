"""Helpers for finding and loading dialog content."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List, NamedTuple, Optional, Union

import yaml
from loguru import logger
from packaging.version import InvalidVersion, Version

from dialog_simulation_engine.core.constants import DIALOG_SUFFIXES, DIALOGS_FPATH
from dialog_simulation_engine.core.dialog import DialogTree
from dialog_simulation_engine.utils.file import slugify


class DialogInfo(NamedTuple):
    """Header of a built-in dialog file."""

    id: str
    title: str
    version: str
    path: Path


def _read_raw(path: Path) -> Dict[str, Any]:
    """Read a YAML or JSON content file into a dict without model validation."""
    text = path.read_text(encoding="utf-8")
    if path.suffix.lower() == ".json":
        doc = json.loads(text)
    else:
        doc = yaml.safe_load(text)
    return doc if isinstance(doc, dict) else {}


def _is_content_file(p: Path) -> bool:
    return (
        p.is_file()
        and p.suffix.lower() in DIALOG_SUFFIXES
        and not p.name.startswith(".")
    )


def list_dialogs(dialogs_dir: Optional[Union[str, Path]] = None) -> List[DialogInfo]:
    """List built-in dialogs found in `dialogs_dir` (sorted by id, then version)."""
    root = Path(dialogs_dir) if dialogs_dir else DIALOGS_FPATH
    if not root.is_dir():
        logger.warning(f"Dialogs directory not found: {root}")
        return []

    found: List[DialogInfo] = []
    for path in sorted(p for p in root.iterdir() if _is_content_file(p)):
        try:
            doc = _read_raw(path)
        except (OSError, ValueError, yaml.YAMLError) as e:
            logger.warning(f"Failed to read dialog file {path}: {e}. Skipping.")
            continue

        title = doc.get("title")
        if not title:
            logger.warning(f"Dialog file {path} has no top-level 'title'. Skipping.")
            continue
        dialog_id = str(doc.get("id") or slugify(str(title)))
        found.append(
            DialogInfo(
                id=dialog_id,
                title=str(title),
                version=str(doc.get("version", "1.0.0")).strip(),
                path=path,
            )
        )
    return sorted(found, key=lambda d: (d.id, d.version))


def get_dialog_path(
    dialog: Union[str, Path],
    version: str = "latest",
    dialogs_dir: Optional[Union[str, Path]] = None,
) -> Path:
    """Return the path to a dialog content file.

    Accepts either:
      - A filesystem path to a YAML/JSON dialog file
      - A built-in dialog id or title (matched case-insensitively)

    `version` selects among built-ins sharing an id:
      - "latest" (default): the highest stable version (PEP 440 ordering),
        falling back to the highest pre-release if no stable one exists.
      - Anything else: the dialog whose `version` matches exactly.
    """
    possible_path = Path(dialog).expanduser()
    if possible_path.is_file() and possible_path.suffix.lower() in DIALOG_SUFFIXES:
        return possible_path

    wanted = str(dialog).strip().lower()
    available = list_dialogs(dialogs_dir)
    matches = [
        d for d in available if wanted in (d.id.lower(), d.title.strip().lower())
    ]
    if not matches:
        raise FileNotFoundError(
            f"No dialog matching {str(dialog)!r} found. "
            f"Found built-ins: {[d.id for d in available]}"
        )

    if version != "latest":
        for d in matches:
            if d.version == version:
                logger.debug(f"Selected dialog {d.path} for {dialog!r} v{version}")
                return d.path
        raise FileNotFoundError(
            f"No dialog {str(dialog)!r} with version {version!r} found. "
            f"Available versions: {sorted({d.version for d in matches})}"
        )

    stable: List[tuple[Version, Path]] = []
    other: List[tuple[Version, Path]] = []
    for d in matches:
        try:
            v = Version(d.version)
        except InvalidVersion:
            logger.warning(
                f"Dialog {d.path} has invalid version {d.version!r}. Ignoring it."
            )
            continue
        if v.is_prerelease or v.is_devrelease:
            other.append((v, d.path))
        else:
            stable.append((v, d.path))

    candidates = stable or other
    if not candidates:
        raise FileNotFoundError(
            f"No dialog {str(dialog)!r} with a usable version was found."
        )
    v, chosen = max(candidates, key=lambda x: x[0])
    logger.debug(f"Selected dialog {chosen} for {dialog!r}, version={v}")
    return chosen


def load_dialog_tree(
    dialog: Union[str, Path, DialogTree],
    version: str = "latest",
    dialogs_dir: Optional[Union[str, Path]] = None,
) -> DialogTree:
    """Load a dialog by name or path and check it is well formed."""
    if isinstance(dialog, DialogTree):
        return dialog.validate_structure()

    path = get_dialog_path(dialog, version=version, dialogs_dir=dialogs_dir)
    logger.debug(f"Loading dialog tree from {path}")
    if path.suffix.lower() == ".json":
        tree = DialogTree.load_json(path)
    else:
        tree = DialogTree.load_yaml(path)
    return tree.validate_structure()
