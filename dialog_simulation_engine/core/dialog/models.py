"""Dialog content models.

Trees are plain declarative data: a mapping of node id to node, a mapping of
participant id to participant and a root node id. They are loaded read-only
and shared between sessions; the engine never mutates them.

Pydantic validation covers field types. Graph-level checks (dangling
references, missing root, ...) live in `DialogTree.find_problems` so that a
malformed tree can still be built and then rejected by the engine at start.
"""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Optional

from loguru import logger
from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator
from pydantic import model_validator

from dialog_simulation_engine.core.dialog.constants import (
    DEFAULT_METRICS,
    DEFAULT_SCORING,
    EmotionalState,
    MessageType,
    ParticipantType,
)
from dialog_simulation_engine.core.dialog.errors import InvalidTreeError
from dialog_simulation_engine.core.dialog.scoring import SCORING_POLICIES
from dialog_simulation_engine.utils.file import slugify
from dialog_simulation_engine.utils.serde import SerdeMixin

VersionStr = Annotated[
    str,
    StringConstraints(
        pattern=(
            r"^(0|[1-9]\d*)\."
            r"(0|[1-9]\d*)\."
            r"(0|[1-9]\d*)"
            r"(?:-[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?"
            r"(?:\+[0-9A-Za-z-]+(?:\.[0-9A-Za-z-]+)*)?$"
        )
    ),
]

NodeId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class DialogMessage(BaseModel):
    """What a node shows: text plus optional media references."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    content: str = ""
    type: MessageType = MessageType.TEXT
    audio_url: Optional[str] = None
    audio_duration: Optional[float] = None
    image_url: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DialogParticipant(BaseModel):
    """A simulated character (or the officer) taking part in the dialog."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: NodeId
    name: str
    type: ParticipantType = ParticipantType.CHARACTER
    avatar_url: Optional[str] = None
    description: str = ""
    emotional_state: EmotionalState = EmotionalState.NEUTRAL
    # flavour only
    traits: List[str] = Field(default_factory=list)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class DialogOption(BaseModel):
    """A response the player can pick."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: NodeId
    text: str
    next_node_id: Optional[str] = None
    metrics: Dict[str, int] = Field(default_factory=dict)
    feedback: str = ""
    is_correct: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("metrics", mode="before")
    @classmethod
    def _none_to_empty_dict(cls, v: Any) -> Any:
        return {} if v is None else v


class DialogNode(BaseModel):
    """One conversational turn."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: NodeId
    message: DialogMessage = Field(default_factory=DialogMessage)
    participant_id: Optional[str] = None
    emotional_state: Optional[EmotionalState] = None
    options: List[DialogOption] = Field(default_factory=list)
    is_terminal: bool = False
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("message", mode="before")
    @classmethod
    def _text_to_message(cls, v: Any) -> Any:
        """Allow `message: "plain text"` in content files."""
        if isinstance(v, str):
            return {"content": v}
        return v

    @field_validator("options", mode="before")
    @classmethod
    def _none_to_empty_list(cls, v: Any) -> Any:
        return [] if v is None else v

    @property
    def ends_conversation(self) -> bool:
        """True when reaching this node finishes the dialog."""
        return self.is_terminal or not self.options

    def list_options(self) -> List[str]:
        """Option ids in display order."""
        return [o.id for o in self.options]

    def get_option(self, option_id: str) -> Optional[DialogOption]:
        """Return the option with this id, if the node offers it."""
        for option in self.options:
            if option.id == option_id:
                return option
        return None


def _fill_ids_from_keys(raw: Any) -> Any:
    """Fill missing `id`s in a {key: body} mapping from the keys."""
    if not isinstance(raw, dict):
        return raw
    out: Dict[str, Any] = {}
    for key, body in raw.items():
        if isinstance(body, dict):
            body = {"id": key, **body}
        elif body is None:
            body = {"id": key}
        out[key] = body
    return out


class DialogTree(SerdeMixin, BaseModel):
    """The full content graph for one simulation.

    Despite the name a tree may contain cycles; only nodes without options
    (or flagged terminal) end a session.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    id: NodeId
    title: str
    description: str = ""
    version: VersionStr = "1.0.0"
    root_node_id: str
    nodes: Dict[str, DialogNode] = Field(default_factory=dict)
    participants: Dict[str, DialogParticipant] = Field(default_factory=dict)
    metrics: List[str] = Field(default_factory=lambda: list(DEFAULT_METRICS))
    scoring: str = DEFAULT_SCORING
    max_steps: Optional[int] = Field(default=None, ge=1)
    metadata: Dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _defaults_from_content(cls, data: Any) -> Any:
        """Derive the tree id from its title and node/participant ids from keys."""
        if not isinstance(data, dict):
            return data
        data = dict(data)
        if not data.get("id") and isinstance(data.get("title"), str):
            data["id"] = slugify(data["title"])
        for key in ("nodes", "participants"):
            if key in data:
                data[key] = _fill_ids_from_keys(data[key])
        return data

    @field_validator("metrics")
    @classmethod
    def _unique_metrics(cls, v: List[str]) -> List[str]:
        """Tracked metrics must be distinct, non-empty names."""
        if any(not m or not m.strip() for m in v):
            raise ValueError("Metric names must not be empty.")
        if len(set(v)) != len(v):
            raise ValueError(f"Metric names must be unique, got {v}.")
        return v

    # ---------- lookups ----------
    def get_node(self, node_id: Optional[str]) -> Optional[DialogNode]:
        """Return a node by id, or None."""
        if node_id is None:
            return None
        return self.nodes.get(node_id)

    def get_participant(self, participant_id: Optional[str]) -> Optional[DialogParticipant]:
        """Return a participant by id, or None."""
        if participant_id is None:
            return None
        return self.participants.get(participant_id)

    def root_node(self) -> Optional[DialogNode]:
        """Return the root node, or None if the root id is dangling."""
        return self.get_node(self.root_node_id)

    def list_nodes(self) -> List[str]:
        """Node ids in authoring order."""
        return list(self.nodes)

    # ---------- structural validation ----------
    def find_problems(self) -> List[str]:
        """Collect every structural problem in the tree (empty list if well formed)."""
        problems: List[str] = []

        if self.root_node_id not in self.nodes:
            problems.append(
                f"root node '{self.root_node_id}' is not in the node mapping"
            )

        if self.scoring not in SCORING_POLICIES:
            problems.append(
                f"unknown scoring policy '{self.scoring}' "
                f"(available: {sorted(SCORING_POLICIES)})"
            )

        for key, participant in self.participants.items():
            if participant.id != key:
                problems.append(
                    f"participant key '{key}' does not match its id '{participant.id}'"
                )

        for key, node in self.nodes.items():
            if node.id != key:
                problems.append(f"node key '{key}' does not match its id '{node.id}'")

            if node.participant_id is not None and (
                node.participant_id not in self.participants
            ):
                problems.append(
                    f"node '{key}' references unknown participant "
                    f"'{node.participant_id}'"
                )

            if node.is_terminal and node.options:
                problems.append(f"node '{key}' is flagged terminal but has options")

            seen: set[str] = set()
            for option in node.options:
                if option.id in seen:
                    problems.append(f"node '{key}' has duplicate option '{option.id}'")
                seen.add(option.id)

                for metric in option.metrics:
                    if metric not in self.metrics:
                        problems.append(
                            f"option '{option.id}' on node '{key}' scores untracked "
                            f"metric '{metric}' (tracked: {self.metrics})"
                        )

                if option.next_node_id is not None and (
                    option.next_node_id not in self.nodes
                ):
                    problems.append(
                        f"option '{option.id}' on node '{key}' points to unknown "
                        f"node '{option.next_node_id}'"
                    )

        return problems

    def validate_structure(self) -> "DialogTree":
        """Raise InvalidTreeError if the tree is not well formed; return self."""
        problems = self.find_problems()
        if problems:
            logger.error(f"Dialog tree '{self.id}' failed validation: {problems}")
            raise InvalidTreeError(problems, title=self.title)
        logger.debug(
            f"Dialog tree '{self.id}' is well formed "
            f"({len(self.nodes)} nodes, {len(self.participants)} participants)."
        )
        return self
