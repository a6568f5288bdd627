"""Dependency utilities for route handlers.

Provides reusable dependency functions for resolving shared services
and objects (e.g., looking up a live session by ID).
"""

from fastapi import Depends, HTTPException

from dialog_simulation_engine.api.services.registry import (
    SessionEntry,
    SessionRegistry,
    get_registry,
)


def get_session_entry(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> SessionEntry:
    """Resolve a live session (and its engine) from the registry.

    Raises:
        HTTPException: If the session ID is not found in the registry.
    """
    entry = registry.get(session_id)
    if entry is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return entry
