"""Validation helpers for dialog content files.

Two layers of checks:

- Yamale schema validation of the YAML shape (`validate_files_with_schema`).
- Model + structural validation of each file as a DialogTree
  (`validate_dialog_files`), which catches what a schema cannot: dangling
  node references, unknown participants, a missing root node.

Schema resolution when `schema_path` is not given:
    1) <target_dir>/<schema_filename>
    2) <target_dir>/schemas/<schema_filename>
    3) ./schemas/<schema_filename>   (cwd fallback)
"""

from __future__ import annotations

import fnmatch
from pathlib import Path
from typing import Dict, List

import yamale
from loguru import logger
from yamale import YamaleError

from dialog_simulation_engine.core.constants import DIALOG_SCHEMA_FILENAME
from dialog_simulation_engine.core.dialog import DialogTree, InvalidTreeError


def _is_yaml(p: Path) -> bool:
    return p.is_file() and p.suffix.lower() in {".yml", ".yaml"}


def _resolve_target_files(
    target_path: Path, includes: List[str] | None, excludes: List[str] | None
) -> List[Path]:
    """A single YAML file, or the YAML files of a directory after globbing."""
    if target_path.is_file():
        return [target_path] if _is_yaml(target_path) else []

    if includes:
        selected: set[Path] = set()
        for pat in includes:
            selected.update(p for p in target_path.glob(pat) if _is_yaml(p))
        files = sorted(selected)
    else:
        files = sorted(p for p in target_path.iterdir() if _is_yaml(p))

    excludes = excludes or []
    # dotfiles cover the schema itself
    return [
        p
        for p in files
        if not p.name.startswith(".")
        and not any(fnmatch.fnmatch(p.name, pat) for pat in excludes)
    ]


def _resolve_schema_path(
    target_path: Path, schema_path: str | Path | None, schema_filename: str
) -> Path:
    if schema_path:
        sp = Path(schema_path).resolve()
        if not sp.exists():
            raise FileNotFoundError(f"Schema file not found: {sp}")
        return sp

    base_dir = target_path.parent if target_path.is_file() else target_path
    candidates = [
        base_dir / schema_filename,
        base_dir / "schemas" / schema_filename,
        Path.cwd() / "schemas" / schema_filename,
    ]
    for c in candidates:
        if c.exists():
            return c.resolve()
    raise FileNotFoundError(
        f"No schema found. Tried: {', '.join(str(c) for c in candidates)}"
    )


def validate_files_with_schema(
    target: str | Path,
    schema_path: str | Path | None = None,
    *,
    schema_filename: str = DIALOG_SCHEMA_FILENAME,
    includes: List[str] | None = None,
    excludes: List[str] | None = None,
) -> Dict[Path, List[str]]:
    """Validate YAML file(s) against a Yamale schema.

    Returns:
        dict[Path, list[str]]  # empty list means valid

    Raises:
        FileNotFoundError if target or schema not found.
    """
    target_path = Path(target).resolve()
    if not target_path.exists():
        raise FileNotFoundError(f"Target not found: {target_path}")

    schema_p = _resolve_schema_path(target_path, schema_path, schema_filename)
    files = [
        p
        for p in _resolve_target_files(target_path, includes, excludes)
        if p != schema_p
    ]
    if not files:
        return {}

    schema = yamale.make_schema(str(schema_p))
    results: Dict[Path, List[str]] = {p: [] for p in files}
    for p in files:
        try:
            yamale.validate(schema, yamale.make_data(str(p)))
        except YamaleError as e:
            for r in e.results:
                results[p].extend(str(err) for err in r.errors)
        except Exception as e:
            # unreadable YAML is reported like any other schema failure
            results[p].append(f"could not parse: {e}")
    return results


def validate_dialog_files(
    target: str | Path,
    schema_path: str | Path | None = None,
    *,
    schema_filename: str = DIALOG_SCHEMA_FILENAME,
) -> Dict[Path, List[str]]:
    """Schema-validate, then model- and structure-validate, each dialog file."""
    results = validate_files_with_schema(
        target, schema_path, schema_filename=schema_filename
    )
    for path, errors in results.items():
        if errors:
            continue
        try:
            DialogTree.load_yaml(path).validate_structure()
        except InvalidTreeError as e:
            errors.extend(e.problems)
        except ValueError as e:
            errors.append(str(e))
        logger.debug(f"Validated dialog file {path.name}: {len(errors)} problem(s)")
    return results


def validate_and_print(
    target: str | Path,
    schema_path: str | Path | None = None,
    *,
    schema_filename: str = DIALOG_SCHEMA_FILENAME,
) -> bool:
    """Validate dialog files and print a summary. Returns True if all are valid."""
    results = validate_dialog_files(
        target=target, schema_path=schema_path, schema_filename=schema_filename
    )

    if not results:
        print(f"ℹ️ No dialog files to validate under {Path(target).resolve()}")
        return True

    invalid = {p: errs for p, errs in results.items() if errs}
    if not invalid:
        print(f"✅ {len(results)} dialog file(s) valid")
        for p in sorted(results):
            print(f"   • {p.name}")
        return True

    print("❌ Validation failed:")
    for p, errs in invalid.items():
        print(f"\n- File: {p.name}")
        for msg in errs:
            hint = "  (Hint: required by schema)" if "required" in msg else ""
            print(f"   • {msg}{hint}")
    return False
