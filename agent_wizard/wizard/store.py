from __future__ import annotations

import threading
from typing import Dict, List, Optional, Protocol

from agent_wizard.wizard.state import WizardSession


class SessionStore(Protocol):
    def get(self, session_id: str) -> Optional[WizardSession]:
        ...

    def put(self, session: WizardSession) -> None:
        ...

    def remove(self, session_id: str) -> bool:
        ...

    def clear(self) -> None:
        ...

    def __len__(self) -> int:
        ...


class InMemorySessionStore:
    """
    Process-local session map.

    Thread-safe for concurrent get/put/remove. Guards the map only: two threads updating
    the same WizardSession still race, last writer wins.
    """

    def __init__(self) -> None:
        self._sessions: Dict[str, WizardSession] = {}
        self._lock = threading.Lock()

    def get(self, session_id: str) -> Optional[WizardSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def put(self, session: WizardSession) -> None:
        with self._lock:
            self._sessions[session.session_id] = session

    def remove(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def session_ids(self) -> List[str]:
        with self._lock:
            return list(self._sessions)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)
