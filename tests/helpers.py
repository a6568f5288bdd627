"""Helpers tests."""

import copy
from pathlib import Path
from types import SimpleNamespace
from typing import List

import yaml

from dialog_simulation_engine.core.constants import DIALOG_SUFFIXES, DIALOGS_FPATH


def _merge_into(base: dict, patch: dict) -> dict:
    """Deep-ish merge: patch keys overwrite; descend only if both sides are dicts."""
    out = copy.deepcopy(base)
    for k, v in patch.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _merge_into(out[k], v)
        else:
            out[k] = v
    return out


def patch_yml(base_path: Path, patch_yml_str: str) -> SimpleNamespace:
    """Patch a YAML file with additional YAML content."""
    base = yaml.safe_load(base_path.read_text(encoding="utf-8"))
    patch = yaml.safe_load(patch_yml_str)
    merged = _merge_into(base, patch)

    patched_path = base_path.with_name(base_path.stem + "_patched.yml")
    patched_path.write_text(
        yaml.safe_dump(merged, allow_unicode=True), encoding="utf-8"
    )
    return SimpleNamespace(path=patched_path, data=merged)


def builtin_dialog_files() -> List[Path]:
    """All dialog content files shipped in dialogs/ (the schema excluded)."""
    return sorted(
        p
        for p in DIALOGS_FPATH.iterdir()
        if p.is_file()
        and p.suffix.lower() in DIALOG_SUFFIXES
        and not p.name.startswith(".")
    )
