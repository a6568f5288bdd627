"""Runtime session state and the values the engine emits."""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from dialog_simulation_engine.core.dialog.constants import EmotionalState
from dialog_simulation_engine.utils.serde import SerdeMixin


class DialogSession(SerdeMixin, BaseModel):
    """State of one user walking through one dialog tree.

    Owned by the caller and mutated only by `DialogEngine.select_option`.
    Sessions share nothing, so many can run against the same tree at once.
    """

    model_config = ConfigDict(extra="forbid", validate_assignment=True)

    session_id: str = Field(default_factory=lambda: uuid4().hex)
    tree_id: str
    current_node_id: str
    metric_totals: Dict[str, int] = Field(default_factory=dict)
    # selected option ids, oldest first; replaying them reproduces the session
    history: List[str] = Field(default_factory=list)
    visited_node_ids: List[str] = Field(default_factory=list)
    steps: int = 0
    is_complete: bool = False
    started_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None


class StepResult(BaseModel):
    """What the presentation layer shows after one selection."""

    model_config = ConfigDict(frozen=True)

    option_id: str
    node_id: str
    feedback_text: str = ""
    new_emotional_state: Optional[EmotionalState] = None
    is_correct: bool = False
    is_complete: bool = False


class DialogSummary(SerdeMixin, BaseModel):
    """Outcome of a session, suitable for an activity-recording service."""

    model_config = ConfigDict(frozen=True)

    tree_id: str
    metric_totals: Dict[str, int]
    history: List[str]
    overall_score: float
    rating: str
    scoring: str
    correct_choices: int = 0
    steps: int = 0
    is_complete: bool = False
