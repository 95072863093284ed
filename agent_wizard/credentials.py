from __future__ import annotations

import os
import threading
from pathlib import Path
from typing import Dict, Optional

from dotenv import dotenv_values

from agent_wizard.errors import ConfigurationError

CLAUDE_API_KEY_ENV = "CLAUDE_API_KEY"
OPENAI_API_KEY_ENV = "OPENAI_API_KEY"


class Credentials:
    """API keys for the remote services.

    Keys passed to the constructor (or :meth:`init`) win. Otherwise a key is looked up on
    first use: ``.env`` file first, then the process environment. A key that is still
    missing at that point raises :class:`ConfigurationError`.
    """

    def __init__(
        self,
        claude_api_key: Optional[str] = None,
        openai_api_key: Optional[str] = None,
        *,
        env_file: str | Path | None = ".env",
    ) -> None:
        self._values: Dict[str, Optional[str]] = {
            CLAUDE_API_KEY_ENV: claude_api_key,
            OPENAI_API_KEY_ENV: openai_api_key,
        }
        self._env_file = Path(env_file) if env_file else None
        self._dotenv: Optional[Dict[str, Optional[str]]] = None
        self._lock = threading.Lock()

    def init(self, claude_api_key: Optional[str], openai_api_key: Optional[str]) -> None:
        with self._lock:
            self._values[CLAUDE_API_KEY_ENV] = claude_api_key
            self._values[OPENAI_API_KEY_ENV] = openai_api_key

    def claude_api_key(self) -> str:
        return self._resolve(CLAUDE_API_KEY_ENV, "Claude")

    def openai_api_key(self) -> str:
        return self._resolve(OPENAI_API_KEY_ENV, "OpenAI")

    def _resolve(self, name: str, label: str) -> str:
        with self._lock:
            value = self._values.get(name)
            if not value:
                value = self._load_dotenv().get(name) or os.getenv(name)
                if not value:
                    raise ConfigurationError(
                        f"{label} API key not set. Pass it explicitly or set the {name} "
                        "environment variable."
                    )
                self._values[name] = value
            return value

    def _load_dotenv(self) -> Dict[str, Optional[str]]:
        if self._dotenv is None:
            if self._env_file is not None and self._env_file.is_file():
                self._dotenv = dict(dotenv_values(self._env_file))
            else:
                self._dotenv = {}
        return self._dotenv
