"""
Wizard State - the step-by-step lifecycle of one plan's construction.

State Flow:
    INITIAL → OBJECTIVE_ENTERED → OBJECTIVE_DECOMPOSED → AGENT_REVIEWED → COMPLETED

    OBJECTIVE_DECOMPOSED / AGENT_REVIEWED → OBJECTIVE_ENTERED   (re-decompose)
    any state → ERROR                                          (via WizardSession.fail)

COMPLETED and ERROR are terminal.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from agent_wizard.models import Plan


class WizardState(str, Enum):
    INITIAL = "INITIAL"                            # Session started, nothing entered
    OBJECTIVE_ENTERED = "OBJECTIVE_ENTERED"        # Objective received, decomposition running
    OBJECTIVE_DECOMPOSED = "OBJECTIVE_DECOMPOSED"  # Plan attached
    AGENT_REVIEWED = "AGENT_REVIEWED"              # Plan reviewed and confirmed
    COMPLETED = "COMPLETED"                        # Creation finished
    ERROR = "ERROR"                                # Failure, see error_message


VALID_TRANSITIONS = {
    WizardState.INITIAL: {WizardState.OBJECTIVE_ENTERED},
    WizardState.OBJECTIVE_ENTERED: {WizardState.OBJECTIVE_DECOMPOSED},
    WizardState.OBJECTIVE_DECOMPOSED: {
        WizardState.AGENT_REVIEWED,
        WizardState.OBJECTIVE_ENTERED,
    },
    WizardState.AGENT_REVIEWED: {
        WizardState.COMPLETED,
        WizardState.OBJECTIVE_ENTERED,
    },
    WizardState.COMPLETED: set(),  # Terminal
    WizardState.ERROR: set(),  # Terminal
}


def can_transition(from_state: WizardState, to_state: WizardState) -> bool:
    if to_state is WizardState.ERROR:
        return True
    return to_state in VALID_TRANSITIONS.get(from_state, set())


def is_terminal_state(state: WizardState) -> bool:
    return len(VALID_TRANSITIONS.get(state, set())) == 0


def _now() -> datetime:
    return datetime.now(UTC)


@dataclass
class WizardSession:
    """One caller's wizard progress.

    ``plan`` stays ``None`` until decomposition succeeds; ``error_message`` is only set
    once the session is in ERROR.
    """
    session_id: str
    state: WizardState = WizardState.INITIAL
    plan: Optional[Plan] = None
    created_at: datetime = field(default_factory=_now)
    last_updated_at: Optional[datetime] = None
    error_message: Optional[str] = None
    history: List[Dict[str, str]] = field(default_factory=list)

    def __post_init__(self):
        if self.last_updated_at is None:
            self.last_updated_at = self.created_at

    def update_state(self, state: WizardState) -> None:
        now = _now()
        self.history.append({
            "from": self.state.value,
            "to": state.value,
            "timestamp": now.isoformat(),
        })
        self.state = state
        self.last_updated_at = now

    def attach_plan(self, plan: Plan) -> None:
        self.plan = plan
        self.last_updated_at = _now()

    def fail(self, error_message: str) -> None:
        self.update_state(WizardState.ERROR)
        self.error_message = error_message

    def has_error(self) -> bool:
        return self.state is WizardState.ERROR

    def is_completed(self) -> bool:
        return self.state is WizardState.COMPLETED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sessionId": self.session_id,
            "state": self.state.value,
            "plan": self.plan.to_dict() if self.plan is not None else None,
            "errorMessage": self.error_message,
            "createdAt": self.created_at.isoformat(),
            "lastUpdatedAt": self.last_updated_at.isoformat(),
        }
