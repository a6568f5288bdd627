"""Dialog engine exceptions."""

from __future__ import annotations

from typing import Iterable, Optional


class DialogEngineError(Exception):
    """Base class for every error raised by the dialog engine."""


class InvalidTreeError(DialogEngineError, ValueError):
    """A dialog tree failed structural validation and cannot be started."""

    def __init__(self, problems: Iterable[str], title: Optional[str] = None) -> None:
        self.problems = list(problems)
        self.title = title
        name = f"'{title}'" if title else "dialog tree"
        detail = "; ".join(self.problems) or "unknown problem"
        super().__init__(f"Invalid {name}: {detail}")


class InvalidOptionError(DialogEngineError, LookupError):
    """The selected option is not offered by the session's current node."""

    def __init__(self, option_id: str, node_id: str, available: Iterable[str]) -> None:
        self.option_id = option_id
        self.node_id = node_id
        self.available = list(available)
        super().__init__(
            f"Option '{option_id}' is not available on node '{node_id}'. "
            f"Available: {self.available}"
        )


class AlreadyCompleteError(DialogEngineError):
    """Input was sent to a session that has already finished."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"Dialog session '{session_id}' is already complete.")


class StepLimitExceededError(DialogEngineError):
    """A session hit the maximum number of steps allowed for its tree."""

    def __init__(self, session_id: str, max_steps: int) -> None:
        self.session_id = session_id
        self.max_steps = max_steps
        super().__init__(
            f"Dialog session '{session_id}' reached the step limit of {max_steps}."
        )
