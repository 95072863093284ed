import pytest

from agent_wizard.credentials import Credentials
from agent_wizard.errors import ConfigurationError


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("CLAUDE_API_KEY", raising=False)
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)


def test_explicit_keys_win(monkeypatch):
    monkeypatch.setenv("CLAUDE_API_KEY", "from-env")
    credentials = Credentials(claude_api_key="explicit", openai_api_key="oa", env_file=None)

    assert credentials.claude_api_key() == "explicit"
    assert credentials.openai_api_key() == "oa"


def test_init_replaces_keys():
    credentials = Credentials(env_file=None)
    credentials.init("claude-key", "openai-key")

    assert credentials.claude_api_key() == "claude-key"
    assert credentials.openai_api_key() == "openai-key"


def test_dotenv_file_before_environment(tmp_path, monkeypatch):
    env_file = tmp_path / ".env"
    env_file.write_text("CLAUDE_API_KEY=from-file\n", encoding="utf-8")
    monkeypatch.setenv("CLAUDE_API_KEY", "from-env")
    monkeypatch.setenv("OPENAI_API_KEY", "openai-from-env")

    credentials = Credentials(env_file=env_file)

    assert credentials.claude_api_key() == "from-file"
    assert credentials.openai_api_key() == "openai-from-env"


def test_missing_key_raises_on_access(tmp_path):
    credentials = Credentials(env_file=tmp_path / "absent.env")

    with pytest.raises(ConfigurationError) as exc_info:
        credentials.claude_api_key()
    assert "CLAUDE_API_KEY" in str(exc_info.value)


def test_resolved_key_is_cached(monkeypatch):
    monkeypatch.setenv("CLAUDE_API_KEY", "first")
    credentials = Credentials(env_file=None)
    assert credentials.claude_api_key() == "first"

    monkeypatch.setenv("CLAUDE_API_KEY", "second")
    assert credentials.claude_api_key() == "first"
