"""
Session routes - create agent sessions and drive them over SSE.

Each driver endpoint (run/respond/execute) streams ``AgentEvent.to_dict()``
as ``data: {json}\\n\\n`` frames until the agent suspends, completes or fails.
"""

import json
from collections.abc import AsyncIterator
from functools import lru_cache
from typing import Any, List, Optional, Union

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from skillforce.application.factory import AgentFactory
from skillforce.application.sessions import AgentSessionManager
from skillforce.application.settings import get_settings
from skillforce.core.domain.agent import AutonomousAgent
from skillforce.core.domain.errors import ConfigurationError, SessionNotFoundError
from skillforce.core.domain.events import AgentEvent
from skillforce.core.domain.models import to_jsonable

router = APIRouter()


@lru_cache
def get_session_manager() -> AgentSessionManager:
    """Process-wide session registry (override in tests via dependency_overrides)."""
    return AgentSessionManager(AgentFactory(config_dir=get_settings().config_dir))


class CreateSessionRequest(BaseModel):
    """Request to create an agent session."""

    profile: Optional[str] = None
    organization_id: Optional[str] = None
    user_id: Optional[str] = None
    auto_execute: Optional[bool] = None


class SessionResponse(BaseModel):
    session_id: str
    phase: str
    organization_id: str
    user_id: str


class RunRequest(BaseModel):
    """A new goal for the agent."""

    message: str = Field(..., min_length=1)


class RespondRequest(BaseModel):
    """Answer to a question message; a list of options is joined with ', '."""

    message_id: str
    response: Union[str, List[str]]


def _session_response(agent: AutonomousAgent) -> SessionResponse:
    return SessionResponse(
        session_id=agent.state.session_id,
        phase=agent.state.phase.value,
        organization_id=agent.config.organization_id,
        user_id=agent.config.user_id,
    )


def _get_agent(manager: AgentSessionManager, session_id: str) -> AutonomousAgent:
    try:
        return manager.get(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _stream(events: AsyncIterator[AgentEvent]) -> StreamingResponse:
    async def event_generator():
        async for event in events:
            data = json.dumps(event.to_dict(), default=str)
            yield f"data: {data}\n\n"

    return StreamingResponse(event_generator(), media_type="text/event-stream")


@router.post("/sessions", response_model=SessionResponse, status_code=201)
async def create_session(
    request: CreateSessionRequest,
    manager: AgentSessionManager = Depends(get_session_manager),
):
    """Create an agent session from a configuration profile."""
    overrides = {"auto_execute": request.auto_execute} if request.auto_execute is not None else None
    try:
        agent = manager.create(
            profile=request.profile or get_settings().profile,
            organization_id=request.organization_id or get_settings().organization_id,
            user_id=request.user_id or get_settings().user_id,
            overrides=overrides,
        )
    except FileNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _session_response(agent)


@router.get("/sessions")
async def list_sessions(manager: AgentSessionManager = Depends(get_session_manager)):
    return {"sessions": manager.list_sessions()}


@router.get("/sessions/{session_id}")
async def get_session_state(
    session_id: str, manager: AgentSessionManager = Depends(get_session_manager)
) -> dict[str, Any]:
    """Snapshot of the agent state (phase, goal, context, plan, gaps, history)."""
    return to_jsonable(_get_agent(manager, session_id).get_state())


@router.get("/sessions/{session_id}/history")
async def get_session_history(
    session_id: str, manager: AgentSessionManager = Depends(get_session_manager)
):
    return {"messages": to_jsonable(_get_agent(manager, session_id).get_history())}


@router.post("/sessions/{session_id}/run")
async def run_session(
    session_id: str,
    request: RunRequest,
    manager: AgentSessionManager = Depends(get_session_manager),
):
    """Start a turn with a new goal; streams events via SSE."""
    agent = _get_agent(manager, session_id)
    return _stream(agent.run(request.message))


@router.post("/sessions/{session_id}/respond")
async def respond_session(
    session_id: str,
    request: RespondRequest,
    manager: AgentSessionManager = Depends(get_session_manager),
):
    """Answer a pending question; streams events via SSE."""
    agent = _get_agent(manager, session_id)
    return _stream(agent.respond(request.message_id, request.response))


@router.post("/sessions/{session_id}/execute")
async def execute_session(
    session_id: str, manager: AgentSessionManager = Depends(get_session_manager)
):
    """Execute the pending steps of the current plan; streams events via SSE."""
    agent = _get_agent(manager, session_id)
    return _stream(agent.execute())


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(
    session_id: str, manager: AgentSessionManager = Depends(get_session_manager)
):
    """Reset the session; the response carries the new session id."""
    try:
        agent = manager.reset(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return _session_response(agent)


@router.delete("/sessions/{session_id}", status_code=204)
async def delete_session(
    session_id: str, manager: AgentSessionManager = Depends(get_session_manager)
):
    try:
        manager.remove(session_id)
    except SessionNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
