"""Simple in-memory registry for live dialog sessions.

This module encapsulates a minimal service layer for storing and
retrieving sessions keyed by their session id. Each entry keeps the engine
the session runs on, so compiled trees are shared between sessions on the
same dialog.

Notes/Assumptions:
    - This is *not* persistent. A process restart clears the registry.
    - Not multiprocess-safe. Replace with a DB or shared cache if needed.
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, NamedTuple, Optional, Tuple, Union

from loguru import logger

from dialog_simulation_engine.api.settings import settings
from dialog_simulation_engine.core.dialog import DialogEngine, DialogSession
from dialog_simulation_engine.helpers.content_helpers import load_dialog_tree


class SessionEntry(NamedTuple):
    """A live session and the engine that drives it."""

    engine: DialogEngine
    session: DialogSession


class SessionRegistry:
    """In-memory registry of dialog sessions.

    Attributes:
        _engines (Dict[Tuple[str, str], DialogEngine]): Compiled engines keyed
            by (dialog, version) as requested.
        _store (Dict[str, SessionEntry]): Map of session id -> entry.
    """

    def __init__(self, dialogs_dir: Optional[Union[str, Path]] = None) -> None:
        """Initialize the registry."""
        self.dialogs_dir = dialogs_dir
        self._engines: Dict[Tuple[str, str], DialogEngine] = {}
        self._store: Dict[str, SessionEntry] = {}

    def engine_for(self, dialog: str, version: str = "latest") -> DialogEngine:
        """Load and compile a dialog once, then reuse the engine.

        Raises:
            FileNotFoundError: No such dialog.
            ValueError: The dialog file is malformed (InvalidTreeError included).
        """
        key = (dialog.strip().lower(), version)
        engine = self._engines.get(key)
        if engine is None:
            tree = load_dialog_tree(dialog, version=version, dialogs_dir=self.dialogs_dir)
            engine = DialogEngine.compile(tree)
            self._engines[key] = engine
        return engine

    def create(self, dialog: str, version: str = "latest") -> SessionEntry:
        """Start and store a new session on `dialog`."""
        engine = self.engine_for(dialog, version)
        entry = SessionEntry(engine=engine, session=engine.start())
        self._store[entry.session.session_id] = entry
        logger.debug(f"Registered session {entry.session.session_id} on '{engine.tree.id}'.")
        return entry

    def get(self, session_id: str) -> Optional[SessionEntry]:
        """Retrieve a session entry by id, or None."""
        return self._store.get(session_id)

    def remove(self, session_id: str) -> None:
        """Remove a session by id; unknown ids are ignored."""
        self._store.pop(session_id, None)

    def __len__(self) -> int:
        return len(self._store)


# Single global registry instance for simplicity; swap for DI container if needed.
_registry: Optional[SessionRegistry] = None


def get_registry() -> SessionRegistry:
    """FastAPI dependency provider for the global registry.

    Returns:
        SessionRegistry: The singleton registry instance.
    """
    global _registry
    if _registry is None:
        _registry = SessionRegistry(dialogs_dir=settings.dialogs_dir)
    return _registry
