"""Dialog simulation engine.

States are the node ids of a tree; transitions are labelled by option ids.
A session starts at the tree's root node and completes when it enters a node
that ends the conversation or takes an option that points nowhere. Cycles are
allowed and walked one selection at a time, so there is no recursion to
exhaust; a step guard stops content that never reaches a terminal node.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional, Union

from loguru import logger

from dialog_simulation_engine.core.dialog.constants import (
    DEFAULT_MAX_STEPS,
    EmotionalState,
)
from dialog_simulation_engine.core.dialog.errors import (
    AlreadyCompleteError,
    DialogEngineError,
    InvalidOptionError,
    StepLimitExceededError,
)
from dialog_simulation_engine.core.dialog.models import DialogNode, DialogTree
from dialog_simulation_engine.core.dialog.scoring import rate, score
from dialog_simulation_engine.core.dialog.session import (
    DialogSession,
    DialogSummary,
    StepResult,
)


class DialogEngine:
    """Drives sessions through one validated, read-only dialog tree.

    The engine keeps no per-session state. Build it with `compile`, then
    `start` as many sessions as needed.
    """

    def __init__(self, tree: DialogTree, max_steps: Optional[int] = None) -> None:
        """Validate `tree` and bind the engine to it.

        Raises InvalidTreeError for a malformed tree and ValueError for a
        step guard below 1.
        """
        if max_steps is None:
            max_steps = tree.max_steps if tree.max_steps is not None else DEFAULT_MAX_STEPS
        if max_steps < 1:
            raise ValueError(f"max_steps must be at least 1, got {max_steps}.")
        self._tree = tree.validate_structure()
        self.max_steps: int = max_steps

    @classmethod
    def compile(
        cls,
        tree: Union[DialogTree, Mapping[str, Any], str, Path],
        max_steps: Optional[int] = None,
    ) -> "DialogEngine":
        """Validate the whole tree up front and return an engine for it.

        Accepts a DialogTree, a mapping, or a YAML/JSON path or string.
        Raises InvalidTreeError for a malformed tree.
        """
        if isinstance(tree, Mapping):
            tree = DialogTree.from_json(tree)
        elif isinstance(tree, (str, Path)):
            is_file_path = isinstance(tree, Path) or "\n" not in tree
            if is_file_path and Path(tree).suffix.lower() == ".json":
                tree = DialogTree.load_json(tree)
            else:
                tree = DialogTree.from_yaml(tree)
        elif not isinstance(tree, DialogTree):
            raise TypeError(f"Cannot compile a dialog engine from {type(tree)}.")

        engine = cls(tree, max_steps=max_steps)
        logger.debug(
            f"Compiled dialog engine for '{tree.id}' (max_steps={engine.max_steps})."
        )
        return engine

    @property
    def tree(self) -> DialogTree:
        """The dialog tree this engine runs."""
        return self._tree

    # ---------- lifecycle ----------
    def start(self) -> DialogSession:
        """Create a fresh session positioned on the root node."""
        root = self._tree.root_node()
        if root is None:
            raise DialogEngineError(f"Root node '{self._tree.root_node_id}' missing.")

        session = DialogSession(
            tree_id=self._tree.id,
            current_node_id=root.id,
            metric_totals={m: 0 for m in self._tree.metrics},
            visited_node_ids=[root.id],
        )
        if root.ends_conversation:
            logger.warning(
                f"Root node '{root.id}' of '{self._tree.id}' ends the conversation; "
                "session starts complete."
            )
            session.is_complete = True
            session.completed_at = session.started_at
        logger.info(f"Started dialog session {session.session_id} on '{self._tree.id}'.")
        return session

    def current_node(self, session: DialogSession) -> DialogNode:
        """Return the node the session is on (terminal nodes included)."""
        self._check_owner(session)
        node = self._tree.get_node(session.current_node_id)
        if node is None:
            raise DialogEngineError(
                f"Session {session.session_id} is on unknown node "
                f"'{session.current_node_id}'."
            )
        return node

    def select_option(self, session: DialogSession, option_id: str) -> StepResult:
        """Apply one player choice to the session.

        All checks run before the session is touched, so a failed call leaves
        it exactly as it was.

        Raises:
            AlreadyCompleteError: the session has finished.
            InvalidOptionError: the current node does not offer `option_id`.
            StepLimitExceededError: the step guard would be exceeded.
        """
        if session.is_complete:
            raise AlreadyCompleteError(session.session_id)

        node = self.current_node(session)
        option = node.get_option(option_id)
        if option is None:
            logger.warning(
                f"Session {session.session_id}: option '{option_id}' not offered "
                f"on node '{node.id}'."
            )
            raise InvalidOptionError(option_id, node.id, node.list_options())

        if session.steps >= self.max_steps:
            raise StepLimitExceededError(session.session_id, self.max_steps)

        totals = dict(session.metric_totals)
        for metric, delta in option.metrics.items():
            if metric in totals:
                totals[metric] += delta

        next_node = self._tree.get_node(option.next_node_id)
        if option.next_node_id is not None and next_node is None:
            raise DialogEngineError(
                f"Option '{option.id}' on node '{node.id}' points to unknown node "
                f"'{option.next_node_id}'."
            )

        visited = list(session.visited_node_ids)
        if next_node is None:
            complete = True
            new_node_id = node.id
            emotional_state = None
        else:
            complete = next_node.ends_conversation
            new_node_id = next_node.id
            emotional_state = self._emotional_state_of(next_node)
            visited.append(next_node.id)

        # validated; apply everything
        session.metric_totals = totals
        session.history = [*session.history, option.id]
        session.visited_node_ids = visited
        session.steps = session.steps + 1
        session.current_node_id = new_node_id
        if complete:
            session.is_complete = True
            session.completed_at = datetime.now()

        logger.debug(
            f"Session {session.session_id}: '{node.id}' --{option.id}--> "
            f"'{option.next_node_id}' (complete={complete}, totals={totals})"
        )
        if complete:
            logger.info(
                f"Dialog session {session.session_id} complete after "
                f"{session.steps} steps."
            )

        return StepResult(
            option_id=option.id,
            node_id=new_node_id,
            feedback_text=option.feedback,
            new_emotional_state=emotional_state,
            is_correct=option.is_correct,
            is_complete=complete,
        )

    def is_complete(self, session: DialogSession) -> bool:
        """True once the session reached the end of the conversation."""
        self._check_owner(session)
        return session.is_complete

    def summarize(self, session: DialogSession) -> DialogSummary:
        """Totals, ordered history and overall score; pure and repeatable."""
        self._check_owner(session)
        overall = score(session.metric_totals, self._tree.scoring)
        return DialogSummary(
            tree_id=self._tree.id,
            metric_totals=dict(session.metric_totals),
            history=list(session.history),
            overall_score=overall,
            rating=rate(overall),
            scoring=self._tree.scoring,
            correct_choices=self._count_correct(session),
            steps=session.steps,
            is_complete=session.is_complete,
        )

    def replay(self, option_ids: Iterable[str]) -> DialogSession:
        """Run a fresh session through `option_ids` and return it."""
        session = self.start()
        for option_id in option_ids:
            self.select_option(session, option_id)
        return session

    # ---------- helpers ----------
    def _emotional_state_of(self, node: DialogNode) -> Optional[EmotionalState]:
        if node.emotional_state is not None:
            return node.emotional_state
        participant = self._tree.get_participant(node.participant_id)
        return participant.emotional_state if participant else None

    def _count_correct(self, session: DialogSession) -> int:
        correct = 0
        # choice i was made on visited_node_ids[i]
        for node_id, option_id in zip(session.visited_node_ids, session.history):
            node = self._tree.get_node(node_id)
            option = node.get_option(option_id) if node else None
            if option is not None and option.is_correct:
                correct += 1
        return correct

    def _check_owner(self, session: DialogSession) -> None:
        if session.tree_id != self._tree.id:
            raise ValueError(
                f"Session {session.session_id} belongs to tree '{session.tree_id}', "
                f"not '{self._tree.id}'."
            )
