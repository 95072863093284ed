from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, ConfigDict, Field

from agent_wizard.errors import SessionNotFoundError
from agent_wizard.result import Err, Ok, attempt
from agent_wizard.wizard import AgentCreationService, WizardSession, WizardState

logger = logging.getLogger(__name__)

router = APIRouter()


def get_wizard_service(request: Request) -> AgentCreationService:
    """Service created at startup (dependency injection)."""
    return request.app.state.wizard_service


class AgentRequest(BaseModel):
    """Wizard step request"""
    model_config = ConfigDict(populate_by_name=True)

    session_id: Optional[str] = Field(default=None, alias="sessionId")
    objective: Optional[str] = None
    state: Optional[str] = None
    plan: Optional[Dict[str, Any]] = None


class AgentResponse(BaseModel):
    """Wizard step response"""
    model_config = ConfigDict(populate_by_name=True)

    session_id: str = Field(alias="sessionId")
    state: WizardState
    plan: Optional[Dict[str, Any]] = None
    error_message: Optional[str] = Field(default=None, alias="errorMessage")


def _serialize_session(session: WizardSession, state: WizardState | None = None) -> Dict[str, Any]:
    response = AgentResponse(
        session_id=session.session_id,
        state=state or session.state,
        plan=session.plan.to_dict() if session.plan is not None else None,
        error_message=session.error_message,
    )
    return response.model_dump(by_alias=True, mode="json")


def _has_text(value: Optional[str]) -> bool:
    return value is not None and bool(value.strip())


def _parse_state(value: Optional[str]) -> Optional[WizardState]:
    """Unknown state names become None and fall through to "Invalid state transition"."""
    if value is None:
        return None
    try:
        return WizardState(value)
    except ValueError:
        return None


def _unwrap(outcome):
    """Ok -> value; Err -> HTTP error (404 for unknown sessions, 500 otherwise)."""
    if isinstance(outcome, Ok):
        return outcome.value
    if isinstance(outcome, Err):
        if isinstance(outcome.error, SessionNotFoundError):
            raise HTTPException(status_code=404, detail="Session not found")
        logger.error(f"Wizard request failed [{outcome.code}]: {outcome.error}")
        raise HTTPException(
            status_code=500, detail=f"Error processing request: {outcome.error}"
        )
    raise TypeError(f"Unexpected outcome: {outcome!r}")


def _create_or_advance(request: AgentRequest, service: AgentCreationService) -> Dict[str, Any]:
    """Start a session or advance an existing one (internal function, easy to test)."""
    state = _parse_state(request.state)
    if state is WizardState.INITIAL and request.plan is None:
        session_id = service.start_session()
        if _has_text(request.objective):
            session = _unwrap(attempt(service.process_objective, session_id, request.objective))
        else:
            session = service.get_session(session_id)
        return _serialize_session(session)

    if not request.session_id:
        raise HTTPException(status_code=400, detail="Invalid request")

    session = service.get_session(request.session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")

    if state is WizardState.OBJECTIVE_ENTERED:
        if not _has_text(request.objective):
            raise HTTPException(status_code=400, detail="Objective is required")
        session = _unwrap(
            attempt(service.process_objective, request.session_id, request.objective)
        )
    elif state is WizardState.AGENT_REVIEWED:
        session = _unwrap(attempt(service.review_agent, request.session_id))
    elif state is WizardState.COMPLETED:
        _unwrap(attempt(service.complete_creation, request.session_id))
        return _serialize_session(session, WizardState.COMPLETED)
    else:
        raise HTTPException(status_code=400, detail="Invalid state transition")

    return _serialize_session(session)


@router.post("/api/agent/create")
def create_agent(
    request: AgentRequest,
    service: AgentCreationService = Depends(get_wizard_service),
) -> Dict[str, Any]:
    return _create_or_advance(request, service)


@router.get("/api/agent/create")
def get_agent_session(
    session_id: Optional[str] = Query(default=None, alias="sessionId"),
    service: AgentCreationService = Depends(get_wizard_service),
) -> Dict[str, Any]:
    if not _has_text(session_id):
        raise HTTPException(status_code=400, detail="Session ID is required")
    session = service.get_session(session_id)
    if session is None:
        raise HTTPException(status_code=404, detail="Session not found")
    return _serialize_session(session)
