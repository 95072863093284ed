"""Agent wizard: objective -> goals -> subgoals -> actions, one wizard step at a time."""

from agent_wizard.decomposition import ObjectiveDecomposer
from agent_wizard.models import Action, Goal, Plan, SubGoal
from agent_wizard.wizard import AgentCreationService, WizardSession, WizardState

__all__ = [
    "Action",
    "AgentCreationService",
    "Goal",
    "ObjectiveDecomposer",
    "Plan",
    "SubGoal",
    "WizardSession",
    "WizardState",
]

__version__ = "0.1.0"
