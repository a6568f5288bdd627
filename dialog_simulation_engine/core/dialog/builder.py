"""Fluent builder for authoring dialog trees in code.

The builder only accumulates plain dicts; `build()` hands them to
`DialogTree` and runs structural validation, so a tree built here is the
same value a YAML file would produce.

Example:
    tree = (
        DialogTreeBuilder("Phishing call")
        .participant("victim", "Asha", emotional_state="distressed")
        .node("intro", "Someone took money from my account!", participant="victim")
        .option("intro", "calm", "Take a seat, let's go through it.",
                next_node="details", metrics={"empathy": 2})
        .node("details", "Thank you...", participant="victim", emotional_state="calm")
        .build()
    )
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, Optional

from dialog_simulation_engine.core.dialog.models import DialogTree


class DialogTreeBuilder:
    """Accumulates participants, nodes and options, then builds a DialogTree."""

    def __init__(self, title: str, description: str = "", **tree_fields: Any) -> None:
        self._tree: Dict[str, Any] = {
            "title": title,
            "description": description,
            **tree_fields,
        }
        self._participants: Dict[str, Dict[str, Any]] = {}
        self._nodes: Dict[str, Dict[str, Any]] = {}
        self._root: Optional[str] = None

    def participant(
        self,
        participant_id: str,
        name: str,
        type: str = "character",
        emotional_state: str = "neutral",
        traits: Optional[Iterable[str]] = None,
        **fields: Any,
    ) -> "DialogTreeBuilder":
        """Add (or replace) a participant."""
        self._participants[participant_id] = {
            "id": participant_id,
            "name": name,
            "type": type,
            "emotional_state": emotional_state,
            "traits": list(traits or []),
            **fields,
        }
        return self

    def node(
        self,
        node_id: str,
        message: Any = "",
        participant: Optional[str] = None,
        emotional_state: Optional[str] = None,
        terminal: bool = False,
        **fields: Any,
    ) -> "DialogTreeBuilder":
        """Add (or replace) a node. The first node added is the default root."""
        if node_id in self._nodes:
            options = self._nodes[node_id]["options"]
        else:
            options = []
        self._nodes[node_id] = {
            "id": node_id,
            "message": message,
            "participant_id": participant,
            "emotional_state": emotional_state,
            "is_terminal": terminal,
            "options": options,
            **fields,
        }
        if self._root is None:
            self._root = node_id
        return self

    def option(
        self,
        node_id: str,
        option_id: str,
        text: str,
        next_node: Optional[str] = None,
        metrics: Optional[Dict[str, int]] = None,
        feedback: str = "",
        correct: bool = False,
        **fields: Any,
    ) -> "DialogTreeBuilder":
        """Append an option to an existing node."""
        if node_id not in self._nodes:
            raise KeyError(f"Add node '{node_id}' before adding options to it.")
        self._nodes[node_id]["options"].append(
            {
                "id": option_id,
                "text": text,
                "next_node_id": next_node,
                "metrics": dict(metrics or {}),
                "feedback": feedback,
                "is_correct": correct,
                **fields,
            }
        )
        return self

    def root(self, node_id: str) -> "DialogTreeBuilder":
        """Choose the root node explicitly."""
        self._root = node_id
        return self

    def to_dict(self) -> Dict[str, Any]:
        """The raw content mapping the builder has accumulated so far."""
        return {
            **self._tree,
            "root_node_id": self._root or "",
            "participants": {k: dict(v) for k, v in self._participants.items()},
            "nodes": {
                k: {**v, "options": [dict(o) for o in v["options"]]}
                for k, v in self._nodes.items()
            },
        }

    def build(self, validate: bool = True) -> DialogTree:
        """Create the tree; raises InvalidTreeError if it is malformed."""
        tree = DialogTree.model_validate(self.to_dict())
        if validate:
            tree.validate_structure()
        return tree
