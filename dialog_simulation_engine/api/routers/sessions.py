"""Session-related API routes (list dialogs, start, select, summary, delete)."""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from loguru import logger

from dialog_simulation_engine.api.deps import get_session_entry
from dialog_simulation_engine.api.models import (
    CreateSessionRequest,
    DialogListItem,
    NodeView,
    OptionView,
    SelectOptionRequest,
    SelectOptionResponse,
    SessionResponse,
    SessionState,
    SummaryResponse,
)
from dialog_simulation_engine.api.services.registry import (
    SessionEntry,
    SessionRegistry,
    get_registry,
)
from dialog_simulation_engine.core.dialog import (
    AlreadyCompleteError,
    InvalidOptionError,
    InvalidTreeError,
    StepLimitExceededError,
)
from dialog_simulation_engine.helpers.content_helpers import list_dialogs

router = APIRouter()


# ---------------------------
# Helpers
# ---------------------------


def _node_view(entry: SessionEntry) -> NodeView:
    tree = entry.engine.tree
    node = entry.engine.current_node(entry.session)
    participant = tree.get_participant(node.participant_id)
    mood = node.emotional_state or (participant.emotional_state if participant else None)
    return NodeView(
        id=node.id,
        content=node.message.content.strip(),
        message_type=node.message.type.value,
        audio_url=node.message.audio_url,
        image_url=node.message.image_url,
        speaker=participant.name if participant else None,
        avatar_url=participant.avatar_url if participant else None,
        emotional_state=mood.value if mood else None,
        options=(
            []
            if entry.session.is_complete
            else [OptionView(id=o.id, text=o.text) for o in node.options]
        ),
    )


def _session_state(entry: SessionEntry) -> SessionState:
    s = entry.session
    return SessionState(
        session_id=s.session_id,
        tree_id=s.tree_id,
        title=entry.engine.tree.title,
        current_node_id=s.current_node_id,
        metric_totals=dict(s.metric_totals),
        history=list(s.history),
        steps=s.steps,
        is_complete=s.is_complete,
    )


# ---------------------------
# Routes
# ---------------------------


@router.get(
    "/dialogs",
    response_model=List[DialogListItem],
    summary="List the dialogs sessions can be started on",
)
def get_dialogs(registry: SessionRegistry = Depends(get_registry)) -> List[DialogListItem]:
    """List available dialogs."""
    return [
        DialogListItem(id=d.id, title=d.title, version=d.version)
        for d in list_dialogs(registry.dialogs_dir)
    ]


@router.post(
    "/sessions",
    response_model=SessionResponse,
    status_code=201,
    summary="Start a new session on a dialog",
)
def create_session(
    payload: CreateSessionRequest, registry: SessionRegistry = Depends(get_registry)
) -> SessionResponse:
    """Compile the dialog (once) and start a session at its root node."""
    try:
        entry = registry.create(payload.dialog, version=payload.version)
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTreeError as e:
        logger.error(f"Dialog {payload.dialog!r} is malformed: {e.problems}")
        raise HTTPException(status_code=422, detail=e.problems)
    except ValueError as e:
        logger.error(f"Dialog {payload.dialog!r} failed to load: {e}")
        raise HTTPException(status_code=422, detail=str(e))
    return SessionResponse(session=_session_state(entry), node=_node_view(entry))


@router.get(
    "/sessions/{session_id}",
    response_model=SessionResponse,
    summary="Get the current node and session state",
)
def get_session(entry: SessionEntry = Depends(get_session_entry)) -> SessionResponse:
    """Retrieve the session snapshot."""
    return SessionResponse(session=_session_state(entry), node=_node_view(entry))


@router.post(
    "/sessions/{session_id}/select",
    response_model=SelectOptionResponse,
    summary="Select an option on the current node",
)
def select_option(
    body: SelectOptionRequest, entry: SessionEntry = Depends(get_session_entry)
) -> SelectOptionResponse:
    """Advance the session by one choice."""
    try:
        result = entry.engine.select_option(entry.session, body.option_id)
    except InvalidOptionError as e:
        raise HTTPException(
            status_code=400,
            detail={"message": str(e), "available": e.available},
        )
    except (AlreadyCompleteError, StepLimitExceededError) as e:
        logger.warning(f"Rejected selection on {entry.session.session_id}: {e}")
        raise HTTPException(status_code=409, detail=str(e))
    return SelectOptionResponse(
        result=result, session=_session_state(entry), node=_node_view(entry)
    )


@router.get(
    "/sessions/{session_id}/summary",
    response_model=SummaryResponse,
    summary="Get metric totals, history and overall score",
)
def get_summary(entry: SessionEntry = Depends(get_session_entry)) -> SummaryResponse:
    """Summarize the session; can be called at any point."""
    return SummaryResponse(summary=entry.engine.summarize(entry.session))


@router.delete(
    "/sessions/{session_id}",
    status_code=204,
    response_class=Response,
)
def delete_session(
    session_id: str, registry: SessionRegistry = Depends(get_registry)
) -> Response:
    """Delete a session from the registry."""
    registry.remove(session_id)
    return Response(status_code=204)
