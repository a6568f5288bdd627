"""Run manager module that orchestrates one dialog session for a front end."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, computed_field

from dialog_simulation_engine.core.constants import (
    EXIT_COMMANDS,
    HELP_COMMANDS,
    OUTPUT_FPATH,
    SUMMARY_COMMANDS,
    USAGE_MSG,
)
from dialog_simulation_engine.core.dialog import (
    DialogEngine,
    DialogEngineError,
    DialogNode,
    DialogSession,
    DialogSummary,
    DialogTree,
    InvalidOptionError,
)
from dialog_simulation_engine.helpers.content_helpers import load_dialog_tree
from dialog_simulation_engine.utils.file import safe_timestamp, unique_fpath

Event = Dict[str, Any]


class DialogRun(BaseModel):
    """A single playthrough of a dialog tree."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    tree: DialogTree
    session: DialogSession
    engine: DialogEngine = Field(exclude=True)

    source: str = Field(default="unknown")
    save_runs: bool = Field(default=True)
    output_dir: Path = Field(default=OUTPUT_FPATH)

    start_ts: datetime = Field(default_factory=datetime.now)
    end_ts: Optional[datetime] = None
    exited: bool = Field(default=False)
    saved: bool = Field(default=False)
    exit_reason: str = Field(default="")
    output_path: Optional[Path] = None

    @computed_field(return_type=int)
    def turns(self) -> int:
        """Get the number of options selected so far."""
        return self.session.steps

    @computed_field(return_type=str)
    def runtime_string(self) -> str:
        """Get the runtime as a formatted string HH:MM:SS."""
        end = self.end_ts or datetime.now()
        secs = int((end - self.start_ts).total_seconds())
        h, m = divmod(secs, 3600)
        m, s = divmod(m, 60)
        return f"{h:02d}:{m:02d}:{s:02d}"

    @classmethod
    def create(
        cls,
        dialog: Union[str, Path, DialogTree],
        source: str = "unknown",
        version: str = "latest",
        output_dir: Optional[Union[str, Path]] = None,
        save_runs: bool = True,
        max_steps: Optional[int] = None,
    ) -> "DialogRun":
        """Load a dialog by name, path or value and start a session on it."""
        if source == "unknown":
            logger.warning(
                "No source given for run; saved runs will be hard to attribute."
            )

        try:
            tree = load_dialog_tree(dialog, version=version)
            engine = DialogEngine.compile(tree, max_steps=max_steps)
        except Exception as e:
            logger.error(f"Failed to load dialog {dialog!r}: {e}")
            raise

        session = engine.start()
        name = f"{source}-{tree.id}-{safe_timestamp()}".lower().replace(" ", "-")
        run = cls(
            name=name,
            tree=tree,
            session=session,
            engine=engine,
            source=source,
            save_runs=save_runs,
            output_dir=Path(output_dir) if output_dir else OUTPUT_FPATH,
        )
        logger.info(f"Created new run {name} for dialog '{tree.title}'.")
        return run

    # ---------- views ----------
    @property
    def current_node(self) -> DialogNode:
        """The node the session is on."""
        return self.engine.current_node(self.session)

    def summary(self) -> DialogSummary:
        """Current summary of the session."""
        return self.engine.summarize(self.session)

    def render_node(self) -> List[Event]:
        """Events that present the current node (speaker line, then options)."""
        node = self.current_node
        participant = self.tree.get_participant(node.participant_id)
        mood = node.emotional_state or (
            participant.emotional_state if participant else None
        )
        events: List[Event] = [
            {
                "type": "npc" if participant else "narrator",
                "speaker": participant.name if participant else None,
                "emotional_state": mood.value if mood else None,
                "content": node.message.content.strip(),
                "node_id": node.id,
            }
        ]
        if not node.ends_conversation:
            events.append(
                {
                    "type": "options",
                    "content": [
                        {"number": i, "id": o.id, "text": o.text}
                        for i, o in enumerate(node.options, start=1)
                    ],
                }
            )
        return events

    # ---------- input ----------
    def step(self, user_input: Optional[str] = None) -> List[Event]:
        """Advance the run by one user action and return events to display.

        - Empty input renders the current node again.
        - `/quit`, `/stop`, `/exit` end the run; `/summary` reports scores;
          `/help` lists commands.
        - Anything else is an option id or a 1-based option number.
        """
        if self.exited:
            logger.info("Run is exited; ignoring input.")
            return [{"type": "warning", "content": "This simulation has ended."}]

        text = (user_input or "").strip()
        if not text:
            return self.render_node()

        if text.startswith("/") or text.startswith("\\"):
            return self._command(text)

        option_id = self._resolve_option(text)
        try:
            result = self.engine.select_option(self.session, option_id)
        except InvalidOptionError as e:
            return [
                {
                    "type": "error",
                    "content": (
                        f"'{text}' is not one of the available responses. "
                        f"Choose 1-{len(e.available)}."
                    ),
                }
            ]
        except DialogEngineError as e:
            logger.warning(f"Run {self.name} cannot continue: {e}")
            self.exit(reason=str(e))
            return [{"type": "error", "content": str(e)}]

        events: List[Event] = []
        if result.feedback_text:
            events.append(
                {
                    "type": "feedback",
                    "content": result.feedback_text,
                    "is_correct": result.is_correct,
                }
            )
        # an option pointing nowhere ends the dialog without a closing line
        if not result.is_complete or self.current_node.ends_conversation:
            events.extend(self.render_node())
        if result.is_complete:
            self.exit(reason="dialog complete")
            events.append({"type": "summary", "content": self.summary().to_dict()})
        return events

    def _resolve_option(self, text: str) -> str:
        """Map a 1-based option number to its id; anything else is taken as an id."""
        if text.isdigit():
            options = self.current_node.options
            index = int(text) - 1
            if 0 <= index < len(options):
                return options[index].id
        return text

    def _command(self, text: str) -> List[Event]:
        parts = text.split(maxsplit=1)
        cmd = parts[0].lower().lstrip("/\\")

        if cmd in EXIT_COMMANDS:
            self.exit(reason="received exit command")
            return [
                {"type": "info", "content": "Simulation stopped."},
                {"type": "summary", "content": self.summary().to_dict()},
            ]
        if cmd in SUMMARY_COMMANDS:
            return [{"type": "summary", "content": self.summary().to_dict()}]
        if cmd in HELP_COMMANDS:
            return [{"type": "info", "content": USAGE_MSG.strip()}]

        logger.warning(f"Run manager doesn't recognize this command: {cmd}.")
        return [{"type": "warning", "content": f"Unknown command '/{cmd}'."}]

    # ---------- lifecycle ----------
    def exit(self, reason: str) -> None:
        """Mark the run as exited and save it once."""
        if self.exited:
            logger.info("Run already exited; skipping exit call.")
            return
        self.exited = True
        self.exit_reason = reason
        self.end_ts = datetime.now()
        logger.info(f"Run {self.name} exited. Reason: {reason}")
        if self.save_runs:
            self.save()

    def save(self, path: Optional[Union[str, Path]] = None) -> Path:
        """Write the run record as JSON and return the path written.

        `path` may be a file path or a directory; defaults to `output_dir`.
        Saving twice returns the first path without writing again.
        """
        if self.saved and self.output_path is not None:
            logger.info("Run has already been saved; skipping duplicate save.")
            return self.output_path

        record = {
            "name": self.name,
            "tree_id": self.tree.id,
            "tree_version": self.tree.version,
            "source": self.source,
            "start_ts": self.start_ts.isoformat(),
            "end_ts": self.end_ts.isoformat() if self.end_ts else None,
            "runtime": self.runtime_string,
            "exit_reason": self.exit_reason,
            "session": self.session.to_dict(),
            "summary": self.summary().to_dict(),
        }

        target = Path(path) if path is not None else self.output_dir
        if target.suffix:
            target.parent.mkdir(parents=True, exist_ok=True)
            out_path = target
        else:
            target.mkdir(parents=True, exist_ok=True)
            out_path = unique_fpath(target / f"{self.name}.json")

        with out_path.open("w", encoding="utf-8") as f:
            json.dump(record, f, indent=2, ensure_ascii=False)

        self.output_path = out_path
        self.saved = True
        logger.info(f"Run saved to: {out_path}")
        return out_path
