from __future__ import annotations

import json
import re
import threading
from typing import Dict, List, Optional

from agent_wizard.llm.base import BaseLLM
from agent_wizard.prompts import DECOMPOSITION_MARKER, STANDARD_PROCEDURE_MARKER

_PHASES = (
    ("Scope", "Define and scope", ("Record the triggering event", "Identify affected items", "Notify stakeholders")),
    ("Analyse", "Analyse the evidence for", ("Collect records", "Interview personnel", "Compare against the expected state")),
    ("Close", "Close out", ("Document conclusions", "Define corrective actions", "Obtain approval")),
)


class StubLLM(BaseLLM):
    """Deterministic offline responder for the two decomposition prompts."""

    def generate_messages(
        self,
        messages: List[Dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        self.validate_messages(messages)
        user_messages = [m["content"] for m in messages if m.get("role") == "user"]
        prompt = user_messages[-1] if user_messages else messages[-1]["content"]

        if DECOMPOSITION_MARKER in prompt:
            return self._decomposition(_objective_from_decomposition_prompt(prompt))
        if STANDARD_PROCEDURE_MARKER in prompt:
            return self._procedure(_objective_from_procedure_prompt(prompt))
        return "Okay."

    @staticmethod
    def _procedure(objective: str) -> str:
        lines = [f"# Standard procedure: {objective}"]
        for index, (phase, verb, tasks) in enumerate(_PHASES, start=1):
            lines.append(f"## {index}. {phase}")
            lines.append(f"{verb} the work required to {objective.lower()}.")
            lines.extend(f"- {task}" for task in tasks)
        return "\n".join(lines)

    @staticmethod
    def _decomposition(objective: str) -> str:
        goals = []
        for phase, verb, tasks in _PHASES:
            goals.append(
                {
                    "name": phase,
                    "description": f"{verb}: {objective}",
                    "subgoals": [
                        {
                            "name": f"{phase} preparation",
                            "description": f"Prepare to {phase.lower()}",
                            "actions": list(tasks[:2]),
                        },
                        {
                            "name": f"{phase} execution",
                            "description": f"Carry out the {phase.lower()} step",
                            "actions": list(tasks[1:]),
                        },
                    ],
                }
            )
        document = {"agentName": f"Agent for {objective}", "objective": objective, "goals": goals}
        return json.dumps(document, indent=2)


def _objective_from_procedure_prompt(prompt: str) -> str:
    match = re.search(r"Objective:\s*(.+)", prompt)
    return match.group(1).strip() if match else prompt.strip()


def _objective_from_decomposition_prompt(prompt: str) -> str:
    match = re.search(r"Objective:\s*```(.*?)```", prompt, re.DOTALL)
    return match.group(1).strip() if match else prompt.strip()
