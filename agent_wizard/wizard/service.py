"""
Agent Creation Service - drives wizard sessions through their states.

Each session owns at most one Plan. The service enforces the legal step order and keeps
sessions apart; it does not lock a single session, so concurrent calls on the same
session id race and the last writer wins.
"""

from __future__ import annotations

import logging
import threading
import uuid
from typing import Optional

from agent_wizard.credentials import Credentials
from agent_wizard.decomposition import ObjectiveDecomposer
from agent_wizard.errors import IllegalTransitionError, SessionNotFoundError
from agent_wizard.llm.factory import build_llm
from agent_wizard.llm_config import LLMConfig
from agent_wizard.models import Plan
from agent_wizard.wizard.state import WizardSession, WizardState, can_transition
from agent_wizard.wizard.store import InMemorySessionStore, SessionStore

logger = logging.getLogger(__name__)


class AgentCreationService:
    def __init__(self, decomposer: ObjectiveDecomposer, store: SessionStore) -> None:
        self._decomposer = decomposer
        self._store = store

    @property
    def store(self) -> SessionStore:
        return self._store

    def start_session(self) -> str:
        session_id = str(uuid.uuid4())
        self._store.put(WizardSession(session_id))
        logger.info(f"Started wizard session {session_id}")
        return session_id

    def get_session(self, session_id: str) -> Optional[WizardSession]:
        return self._store.get(session_id)

    def process_objective(
        self,
        session_id: str,
        objective: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> WizardSession:
        """
        Decompose ``objective`` and attach the resulting Plan to the session.

        The Plan's id is set to ``session_id``. Re-running on a decomposed or reviewed
        session replaces its Plan and calls the LLM again.

        Raises:
            SessionNotFoundError: Unknown session id
            IllegalTransitionError: Session is COMPLETED or in ERROR
            Any decomposition failure, after the session has been moved to ERROR
        """
        session = self._require(session_id)
        self._check(session, WizardState.OBJECTIVE_ENTERED, "objective processing")

        try:
            session.update_state(WizardState.OBJECTIVE_ENTERED)
            plan = self._decomposer.decompose(objective, cancel_event=cancel_event)
            # TODO: give Plan its own identity once plans can outlive a session
            plan.id = session_id
            session.attach_plan(plan)
            session.update_state(WizardState.OBJECTIVE_DECOMPOSED)
        except Exception as exc:
            logger.error(f"Session {session_id}: error processing objective: {exc}")
            session.fail(f"Error processing objective: {exc}")
            raise

        logger.info(f"Session {session_id}: objective decomposed into {len(plan.goals)} goals")
        return session

    def review_agent(self, session_id: str) -> WizardSession:
        session = self._require(session_id)
        self._check(session, WizardState.AGENT_REVIEWED, "review")
        session.update_state(WizardState.AGENT_REVIEWED)
        logger.info(f"Session {session_id}: plan reviewed")
        return session

    def complete_creation(self, session_id: str) -> Plan:
        session = self._require(session_id)
        self._check(session, WizardState.COMPLETED, "completion")
        session.update_state(WizardState.COMPLETED)
        logger.info(f"Session {session_id}: creation completed")
        return session.plan

    def remove_session(self, session_id: str) -> bool:
        removed = self._store.remove(session_id)
        if removed:
            logger.info(f"Removed wizard session {session_id}")
        return removed

    def active_session_count(self) -> int:
        return len(self._store)

    def _require(self, session_id: str) -> WizardSession:
        session = self._store.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    @staticmethod
    def _check(session: WizardSession, target: WizardState, action: str) -> None:
        if not can_transition(session.state, target):
            raise IllegalTransitionError(
                session.session_id, session.state.value, target.value, action
            )


def build_agent_creation_service(
    config: LLMConfig | None = None,
    credentials: Credentials | None = None,
    store: SessionStore | None = None,
) -> AgentCreationService:
    """Wire the default service graph: LLM client -> decomposer -> service."""
    llm = build_llm(config, credentials)
    return AgentCreationService(
        ObjectiveDecomposer(llm),
        store if store is not None else InMemorySessionStore(),
    )
