from agent_wizard.llm.base import BaseLLM
from agent_wizard.llm.claude import ClaudeChatLLM, ClaudeResponse
from agent_wizard.llm.factory import build_llm
from agent_wizard.llm.stub import StubLLM

__all__ = [
    "BaseLLM",
    "ClaudeChatLLM",
    "ClaudeResponse",
    "StubLLM",
    "build_llm",
]
