"""
Objective Decomposer - objective text to Plan in two LLM calls.

    objective
        ↓  call 1: "what is the standard procedure for this?"
    standard procedure (markdown)
        ↓  call 2: "decompose the objective given this procedure, answer in JSON"
    JSON text  →  extract_json()  →  parse_plan()  →  Plan

The decomposer keeps the last fetched procedure on the instance, so one instance must not
decompose two objectives at the same time.
"""

from __future__ import annotations

import json
import logging
import threading
from typing import Any, List, Optional

from agent_wizard.errors import ParseError
from agent_wizard.llm.base import BaseLLM
from agent_wizard.models import Action, Goal, Plan, SubGoal
from agent_wizard.prompts import (
    format_action_decomposition_prompt,
    format_standard_procedure_prompt,
)

logger = logging.getLogger(__name__)


class ObjectiveDecomposer:
    def __init__(self, llm: BaseLLM) -> None:
        self._llm = llm
        self._standard_procedure: Optional[str] = None

    @property
    def standard_procedure(self) -> Optional[str]:
        """Procedure text from the most recent phase-1 call."""
        return self._standard_procedure

    def decompose(self, objective: str, cancel_event: Optional[threading.Event] = None) -> Plan:
        """
        Decompose an objective into goals, subgoals and actions.

        Args:
            objective: Free-text objective (must not be blank)
            cancel_event: Aborts either LLM call while it waits between retries

        Returns:
            A new Plan with a fresh id

        Raises:
            ValueError: Blank objective
            LLMError: Transport or API failure from either call
            ParseError: The decomposition answer is not usable JSON
        """
        if not objective or not objective.strip():
            raise ValueError("objective must not be empty")
        procedure = self.fetch_standard_procedure(objective, cancel_event)
        return self.decompose_with_procedure(objective, procedure, cancel_event)

    def fetch_standard_procedure(
        self, objective: str, cancel_event: Optional[threading.Event] = None
    ) -> str:
        prompt = format_standard_procedure_prompt(objective)
        self._standard_procedure = self._llm.send(prompt, cancel_event=cancel_event)
        logger.info(f"Fetched standard procedure ({len(self._standard_procedure)} chars)")
        return self._standard_procedure

    def decompose_with_procedure(
        self,
        objective: str,
        standard_procedure: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> Plan:
        prompt = format_action_decomposition_prompt(objective, standard_procedure)
        content = self._llm.send(prompt, cancel_event=cancel_event)
        plan = parse_plan(content, objective, standard_procedure)
        logger.info(
            f"Decomposed objective into {len(plan.goals)} goals / {plan.action_count()} actions"
        )
        return plan


def extract_json(text: str) -> str:
    """Return the JSON object embedded in ``text``.

    Already an object at the trimmed ends -> returned as is. Otherwise the span from the
    first ``{`` to the last ``}``. No braces at all -> the text unchanged.
    """
    stripped = text.strip()
    if stripped.startswith("{") and stripped.endswith("}"):
        return stripped
    start = text.find("{")
    end = text.rfind("}") + 1
    if start >= 0 and end > start:
        return text[start:end]
    return text


def parse_plan(text: str, objective: str, standard_procedure: Optional[str]) -> Plan:
    """Build a Plan from the phase-2 answer; raises ParseError carrying ``text``."""
    try:
        document = json.loads(extract_json(text))
    except json.JSONDecodeError as exc:
        raise ParseError(f"Failed to parse Claude response as JSON: {exc}", raw_text=text) from exc
    if not isinstance(document, dict):
        raise ParseError("Claude response JSON is not an object", raw_text=text)

    name = _non_blank(document.get("agentName")) or f"Agent for {objective}"
    plan = Plan(
        name=name,
        objective=_non_blank(document.get("objective")) or objective,
        standard_procedure=standard_procedure,
    )

    for goal_entry in _entries(document, "goals", text):
        goal = Goal(description=_text(goal_entry.get("description")))
        for subgoal_entry in _entries(goal_entry, "subgoals", text):
            description = _text(subgoal_entry.get("description"))
            subgoal_name = _non_blank(subgoal_entry.get("name"))
            if subgoal_name:
                description = f"{subgoal_name}: {description}"
            subgoal = SubGoal(description=description)
            for action_text in _actions(subgoal_entry, text):
                subgoal.add_action(Action(description=action_text))
            goal.add_subgoal(subgoal)
        plan.add_goal(goal)
    return plan


def _entries(container: dict, key: str, raw: str) -> List[dict]:
    items = _list(container, key, raw)
    for item in items:
        if not isinstance(item, dict):
            raise ParseError(f"Entries of '{key}' must be JSON objects", raw_text=raw)
    return items


def _actions(container: dict, raw: str) -> List[str]:
    items = _list(container, "actions", raw)
    for item in items:
        if not isinstance(item, str):
            raise ParseError("Entries of 'actions' must be strings", raw_text=raw)
    return items


def _list(container: dict, key: str, raw: str) -> List[Any]:
    value = container.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ParseError(f"'{key}' must be a JSON array", raw_text=raw)
    return value


def _non_blank(value: Any) -> Optional[str]:
    if isinstance(value, str) and value.strip():
        return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)
