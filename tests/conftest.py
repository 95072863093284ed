from __future__ import annotations

import json
import threading
from typing import Dict, List, Optional

import pytest

from agent_wizard.decomposition import ObjectiveDecomposer
from agent_wizard.llm.base import BaseLLM
from agent_wizard.wizard import AgentCreationService, InMemorySessionStore

SAMPLE_PROCEDURE = "# Deviation investigation\n## 1. Intake\n- Log the deviation"

SAMPLE_DECOMPOSITION = {
    "agentName": "Deviation Investigator",
    "objective": "Investigate a deviation and find its root cause",
    "goals": [
        {
            "name": "Intake",
            "description": "Capture the deviation",
            "subgoals": [
                {
                    "name": "Record",
                    "description": "Record the event",
                    "actions": ["Open a deviation record", "Attach batch documents"],
                },
                {
                    "description": "Assess impact",
                    "actions": ["Rate severity"],
                },
            ],
        },
        {
            "name": "Root cause",
            "description": "Find the root cause",
            "subgoals": [
                {
                    "name": "Analyse",
                    "description": "Run a fishbone analysis",
                    "actions": ["Gather the team", "Fill the diagram", "Pick the likely cause"],
                }
            ],
        },
    ],
}


class FakeLLM(BaseLLM):
    """Replays scripted responses in order; an Exception entry is raised instead."""

    def __init__(self, responses: List[object]) -> None:
        super().__init__()
        self.responses = list(responses)
        self.calls: List[List[Dict[str, str]]] = []
        self._lock = threading.Lock()

    def generate_messages(
        self,
        messages: List[Dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        with self._lock:
            self.calls.append(messages)
            response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def scripted_llm(*decompositions: str) -> FakeLLM:
    """One procedure + decomposition pair per given decomposition text."""
    responses: List[object] = []
    for text in decompositions:
        responses.extend([SAMPLE_PROCEDURE, text])
    return FakeLLM(responses)


@pytest.fixture
def sample_json() -> str:
    return json.dumps(SAMPLE_DECOMPOSITION)


@pytest.fixture
def make_service():
    def _make(llm: BaseLLM) -> AgentCreationService:
        return AgentCreationService(ObjectiveDecomposer(llm), InMemorySessionStore())

    return _make


@pytest.fixture
def fake_llm():
    return FakeLLM


@pytest.fixture
def scripted():
    return scripted_llm
