"""Pydantic models (request/response schemas) for the API.

Defines the schema used by FastAPI to validate requests and shape
responses. These models also drive the generated OpenAPI schema.

Notes/Assumptions:
    - Keep API contracts stable; changes affect clients and OpenAPI docs.
    - Engine values (StepResult, DialogSummary) are returned as-is so the
      HTTP contract follows the core models.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from dialog_simulation_engine.core.dialog import DialogSummary, StepResult


class DialogListItem(BaseModel):
    """One available dialog."""

    id: str
    title: str
    version: str


class CreateSessionRequest(BaseModel):
    """Request body to start a session on a dialog.

    Attributes:
        dialog (str): Dialog id or title.
        version (str): Dialog version, or "latest".
    """

    dialog: str = Field(..., examples=["victim-interview"])
    version: str = Field(default="latest")


class OptionView(BaseModel):
    """A response the player can choose."""

    id: str
    text: str


class NodeView(BaseModel):
    """What a client shows for the current node."""

    id: str
    content: str
    message_type: str
    audio_url: Optional[str] = None
    image_url: Optional[str] = None
    speaker: Optional[str] = None
    avatar_url: Optional[str] = None
    emotional_state: Optional[str] = None
    options: List[OptionView] = []


class SessionState(BaseModel):
    """Snapshot of a session's progress."""

    session_id: str
    tree_id: str
    title: str
    current_node_id: str
    metric_totals: Dict[str, int] = {}
    history: List[str] = []
    steps: int = 0
    is_complete: bool = False


class SessionResponse(BaseModel):
    """Session state together with the node to display."""

    session: SessionState
    node: NodeView


class SelectOptionRequest(BaseModel):
    """Request to select one option on the current node."""

    option_id: str = Field(..., examples=["intro-empathetic"])


class SelectOptionResponse(BaseModel):
    """Outcome of a selection plus the node to display next."""

    result: StepResult
    session: SessionState
    node: NodeView


class SummaryResponse(BaseModel):
    """Summary of a session."""

    summary: DialogSummary
