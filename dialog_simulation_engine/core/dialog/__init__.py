"""Public API for the dialog subpackage."""

from .builder import DialogTreeBuilder
from .constants import EmotionalState, MessageType, ParticipantType
from .engine import DialogEngine
from .errors import (
    AlreadyCompleteError,
    DialogEngineError,
    InvalidOptionError,
    InvalidTreeError,
    StepLimitExceededError,
)
from .models import (
    DialogMessage,
    DialogNode,
    DialogOption,
    DialogParticipant,
    DialogTree,
)
from .session import DialogSession, DialogSummary, StepResult

__all__ = [
    "AlreadyCompleteError",
    "DialogEngine",
    "DialogEngineError",
    "DialogMessage",
    "DialogNode",
    "DialogOption",
    "DialogParticipant",
    "DialogSession",
    "DialogSummary",
    "DialogTree",
    "DialogTreeBuilder",
    "EmotionalState",
    "InvalidOptionError",
    "InvalidTreeError",
    "MessageType",
    "ParticipantType",
    "StepLimitExceededError",
    "StepResult",
]
