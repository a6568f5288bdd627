"""Dialog engine constants."""

from enum import Enum


class EmotionalState(str, Enum):
    """Moods a simulated participant can be in."""

    NEUTRAL = "neutral"
    HAPPY = "happy"
    SAD = "sad"
    ANGRY = "angry"
    CONFUSED = "confused"
    SCARED = "scared"
    SURPRISED = "surprised"
    DISTRESSED = "distressed"
    CALM = "calm"
    FRUSTRATED = "frustrated"


class MessageType(str, Enum):
    """How a node's message is delivered."""

    TEXT = "text"
    AUDIO = "audio"
    TEXT_WITH_AUDIO = "text_with_audio"
    SYSTEM = "system"


class ParticipantType(str, Enum):
    """Who a participant is in the conversation."""

    CHARACTER = "character"
    OFFICER = "officer"
    SYSTEM = "system"


DEFAULT_METRICS: tuple[str, ...] = (
    "empathy",
    "clarity",
    "professionalism",
    "accuracy",
    "patience",
)

DEFAULT_SCORING: str = "mean"

# guard against content that loops forever; trees may override with max_steps
DEFAULT_MAX_STEPS: int = 1000

# (threshold, band) checked top down; anything below the last threshold is "poor"
RATING_BANDS: tuple[tuple[float, str], ...] = (
    (8.0, "excellent"),
    (5.0, "good"),
    (3.0, "fair"),
)
LOWEST_RATING: str = "poor"
