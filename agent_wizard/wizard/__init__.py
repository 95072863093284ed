from agent_wizard.wizard.service import AgentCreationService, build_agent_creation_service
from agent_wizard.wizard.state import (
    VALID_TRANSITIONS,
    WizardSession,
    WizardState,
    can_transition,
    is_terminal_state,
)
from agent_wizard.wizard.store import InMemorySessionStore, SessionStore

__all__ = [
    # Service
    "AgentCreationService",
    "build_agent_creation_service",

    # State
    "VALID_TRANSITIONS",
    "WizardSession",
    "WizardState",
    "can_transition",
    "is_terminal_state",

    # Store
    "InMemorySessionStore",
    "SessionStore",
]
