"""Serialization / deserialization (serde) mixin for dialog content models.

Example Usage:
tree = DialogTree.from_yaml("dialogs/victim_interview.yml")

js = tree.to_json(indent=2)
ys = tree.to_yaml()

tree2 = DialogTree.from_json(js)
tree.save_yaml("copy.yml")
tree3 = DialogTree.load_yaml("copy.yml")

Loaders turn YAML syntax errors and pydantic validation errors into
plain-English `ValueError`s aimed at content authors.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, TypeVar, Union

import yaml
from loguru import logger
from pydantic import BaseModel, ValidationError

T = TypeVar("T", bound="BaseModel")


class SerdeMixin(BaseModel):
    """Mixin adding serialization / deserialization methods to Pydantic models."""

    # ---------- exports ----------
    def to_dict(self, **dump_kwargs: Any) -> dict[str, Any]:
        """Convert model to a JSON-safe dict. Pass model_dump kwargs if desired."""
        dump_kwargs.setdefault("mode", "json")
        return self.model_dump(**dump_kwargs)

    def to_json(self, **dump_kwargs: Any) -> str:
        """Convert model to JSON string."""
        return self.model_dump_json(**dump_kwargs)

    def to_yaml(self, **dump_kwargs: Any) -> str:
        """Convert model to block-style YAML, keeping field order."""
        return str(
            yaml.safe_dump(
                self.to_dict(exclude_none=True),
                allow_unicode=True,
                sort_keys=False,
                default_flow_style=False,
                width=88,
                **dump_kwargs,
            )
        )

    # ---------- loaders ----------
    @classmethod
    def from_json(
        cls: type[T], source: Union[Mapping[str, Any], str, Path], **kw: Any
    ) -> T:
        """Instantiate model from a mapping, a JSON string or a JSON file path."""
        if isinstance(source, Mapping):
            data: Any = dict(source)
        else:
            if isinstance(source, Path):
                text = source.read_text(encoding="utf-8")
            else:
                s = source.strip()
                if s.startswith("{") or s.startswith("["):
                    text = s
                else:
                    try:
                        text = Path(source).read_text(encoding="utf-8")
                    except OSError:
                        text = source
            try:
                data = json.loads(text)
            except json.JSONDecodeError as e:
                raise ValueError(
                    f"Your JSON isn’t valid. Line {e.lineno}, column {e.colno}: "
                    f"{e.msg}."
                ) from e

        try:
            return cls.model_validate(data, **kw)
        except ValidationError as e:
            raise ValueError(
                SerdeMixin._format_validation_error(e, kind="JSON")
            ) from e

    @classmethod
    def from_yaml(cls: type[T], source: Union[str, Path], **validate_kwargs: Any) -> T:
        """Instantiate model from a YAML string or a file path with friendly errors."""
        if isinstance(source, Path) or (
            isinstance(source, str) and "\n" not in source and Path(source).is_file()
        ):
            logger.debug(f"Reading YAML content from {source}")
            text = Path(source).read_text(encoding="utf-8")
        else:
            text = str(source)

        try:
            data = yaml.safe_load(text) or {}
        except yaml.YAMLError as e:
            raise ValueError(SerdeMixin._format_yaml_syntax_error(e, text)) from e

        try:
            return cls.model_validate(data, **validate_kwargs)
        except ValidationError as e:
            raise ValueError(
                SerdeMixin._format_validation_error(e, kind="YAML")
            ) from e

    # ---------- save/load ----------
    def save_json(self, path: Union[str, Path], **dump_kwargs: Any) -> Path:
        """Save model to a JSON file. Returns the Path."""
        p = Path(path)
        p.write_text(self.to_json(**dump_kwargs), encoding="utf-8")
        return p

    def save_yaml(self, path: Union[str, Path], **dump_kwargs: Any) -> Path:
        """Save model to a YAML file. Returns the Path."""
        p = Path(path)
        p.write_text(self.to_yaml(**dump_kwargs), encoding="utf-8")
        return p

    @classmethod
    def load_json(cls: type[T], path: Union[str, Path], **validate_kwargs: Any) -> T:
        """Load model from a JSON file."""
        return cls.from_json(Path(path), **validate_kwargs)  # type: ignore

    @classmethod
    def load_yaml(cls: type[T], path: Union[str, Path], **validate_kwargs: Any) -> T:
        """Load model from a YAML file."""
        return cls.from_yaml(Path(path), **validate_kwargs)  # type: ignore

    # ---------- friendly error messages ----------
    @staticmethod
    def _yaml_context_snippet(text: str, line: int, col: int, context: int = 1) -> str:
        """Build a small snippet pointing at the YAML error location (1-based)."""
        lines = text.splitlines()
        i = max(line - 1 - context, 0)
        j = min(line + context, len(lines))
        out = []
        for idx in range(i, j):
            prefix = ">" if idx == line - 1 else " "
            out.append(f"{prefix} {idx + 1:>4}: {lines[idx]}")
            if idx == line - 1:
                out.append(" " * (col + 8) + "^")
        return "\n".join(out)

    @classmethod
    def _format_yaml_syntax_error(cls, e: yaml.YAMLError, text: str) -> str:
        header = "Your YAML isn’t valid."
        problem_mark = getattr(e, "problem_mark", None)
        if problem_mark is None:
            return f"{header} {e}"
        line = problem_mark.line + 1
        col = problem_mark.column
        snippet = cls._yaml_context_snippet(text, line, col)
        return (
            f"{header}\nLine {line}, column {col + 1}.\n\n{snippet}\n\n"
            "Fix the YAML formatting at the ^ marker."
        )

    @classmethod
    def _format_validation_error(cls, e: ValidationError, kind: str = "YAML") -> str:
        """Turn Pydantic errors into actionable guidance for content authors."""
        lines = [f"Your {kind} loaded, but it doesn’t match the expected structure:"]
        for err in e.errors():
            loc = ".".join(str(p) for p in err.get("loc", ()))
            lines.append(
                f"• {cls._humanize_error(loc, err.get('type', ''), err.get('msg', ''))}"
            )
        lines.append(
            "\nTip: keys are case-sensitive; remove unknown keys; match the types shown."
        )
        return "\n".join(lines)

    @staticmethod
    def _humanize_error(loc: str, typ: str, msg: str) -> str:
        if typ == "missing":
            return f"Missing required field: `{loc}`."
        if typ == "extra_forbidden":
            return f"Unknown field at `{loc}`. Remove this key or rename it."
        if typ == "enum" or typ.endswith("_type") or typ.endswith("_parsing"):
            return f"Wrong type at `{loc}`. {msg}"
        if typ == "value_error":
            # custom validators prefix their message with "Value error, "
            return f"Invalid value at `{loc}`. {msg.removeprefix('Value error, ')}"
        nice = msg[0].upper() + msg[1:] if msg else "Invalid value."
        return f"{nice} (at `{loc}`)."
