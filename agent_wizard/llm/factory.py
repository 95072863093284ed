from __future__ import annotations

from agent_wizard.credentials import Credentials
from agent_wizard.llm.base import BaseLLM
from agent_wizard.llm.claude import ClaudeChatLLM
from agent_wizard.llm.stub import StubLLM
from agent_wizard.llm_config import LLMConfig


def build_llm(config: LLMConfig | None = None, credentials: Credentials | None = None) -> BaseLLM:
    """Build the client named by ``config.provider`` (config file + env when not given)."""
    config = config or LLMConfig.load()
    provider = config.provider.lower()

    if provider == "stub":
        return StubLLM(system_prompt=config.system_prompt)

    if provider == "claude":
        return ClaudeChatLLM(config, credentials=credentials)

    raise ValueError(f"Unsupported LLM provider: {provider}")
