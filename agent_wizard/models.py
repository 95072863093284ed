"""
Plan model - the three-level tree produced by objective decomposition.

    Plan (a.k.a. Agent)
        └── Goal
              └── SubGoal
                    └── Action   (atomic, executable leaf)

Children are kept in insertion order and only ever appended to. Serialization uses the
wire field names consumed by the wizard API (``standardProcedure``, ``subgoals``...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Optional
from uuid import uuid4


def new_id() -> str:
    return str(uuid4())


@dataclass
class Action:
    """Atomic unit of work an autonomous system can perform."""
    description: str
    id: str = field(default_factory=new_id)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "description": self.description}


@dataclass
class SubGoal:
    description: str
    id: str = field(default_factory=new_id)
    actions: List[Action] = field(default_factory=list)

    def add_action(self, action: Action) -> None:
        self.actions.append(action)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "actions": [action.to_dict() for action in self.actions],
        }


@dataclass
class Goal:
    description: str
    id: str = field(default_factory=new_id)
    subgoals: List[SubGoal] = field(default_factory=list)

    def add_subgoal(self, subgoal: SubGoal) -> None:
        self.subgoals.append(subgoal)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "description": self.description,
            "subgoals": [subgoal.to_dict() for subgoal in self.subgoals],
        }


@dataclass
class Plan:
    """
    Full decomposition of an objective.

    Attributes:
        id: Unique plan id. Inside a wizard session it is forced to the session id.
        name: Human readable name (model supplied or "Agent for <objective>").
        objective: The objective the plan achieves.
        standard_procedure: Markdown description of the conventional procedure that
            grounded the decomposition, if one was fetched.
        goals: Ordered goals.
    """
    name: str
    objective: str
    standard_procedure: Optional[str] = None
    id: str = field(default_factory=new_id)
    goals: List[Goal] = field(default_factory=list)

    def add_goal(self, goal: Goal) -> None:
        self.goals.append(goal)

    def iter_ids(self) -> Iterator[str]:
        """Yield every id in the tree, plan first, depth first."""
        yield self.id
        for goal in self.goals:
            yield goal.id
            for subgoal in goal.subgoals:
                yield subgoal.id
                for action in subgoal.actions:
                    yield action.id

    def action_count(self) -> int:
        return sum(len(sg.actions) for goal in self.goals for sg in goal.subgoals)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "objective": self.objective,
            "standardProcedure": self.standard_procedure,
            "goals": [goal.to_dict() for goal in self.goals],
        }
