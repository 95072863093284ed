from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import Dict, List, Optional

VALID_ROLES = ("system", "user", "assistant")


class BaseLLM(ABC):
    def __init__(self, system_prompt: Optional[str] = None) -> None:
        self._system_prompt = system_prompt

    @abstractmethod
    def generate_messages(
        self,
        messages: List[Dict[str, str]],
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """
        Takes an ordered list of role-tagged messages.
        Returns the completion text with markdown fences already stripped.
        Must NOT parse JSON here.
        """
        raise NotImplementedError

    def send(
        self,
        user_prompt: str,
        system_prompt: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        """Send one user prompt, preceded by a system message when one is given or configured.

        Args:
            user_prompt: Non-empty prompt text.
            system_prompt: Overrides the client's default system prompt for this call.
            cancel_event: Setting it aborts the call while it waits between retries.

        Returns:
            Completion text.
        """
        if not user_prompt or not user_prompt.strip():
            raise ValueError("user_prompt must not be empty")
        system = system_prompt if system_prompt is not None else self._system_prompt
        messages: List[Dict[str, str]] = []
        if system and system.strip():
            messages.append({"role": "system", "content": system})
        messages.append({"role": "user", "content": user_prompt})
        return self.generate_messages(messages, cancel_event=cancel_event)

    def generate(self, prompt: str) -> str:
        return self.send(prompt)

    @staticmethod
    def validate_messages(messages: List[Dict[str, str]]) -> None:
        if not messages:
            raise ValueError("messages must not be empty")
        for msg in messages:
            if not isinstance(msg, dict):
                raise ValueError(f"Message must be a dict, got {type(msg)}")
            role = msg.get("role", "user")
            if role not in VALID_ROLES:
                raise ValueError(f"Role must be 'system', 'user', or 'assistant', got '{role}'")
            content = msg.get("content", "")
            if not isinstance(content, str):
                raise ValueError(f"Content must be a string, got {type(content)}")
