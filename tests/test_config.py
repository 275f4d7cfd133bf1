"""
Tests for settings resolution.
"""

import pytest

from timeparser.infra.completion import create_completion
from timeparser.infra.completion.ollama_client import OllamaCompletion
from timeparser.infra.config import LLMSettings, Settings


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    """No workspace config/settings.yaml or .env leaks into these tests"""
    monkeypatch.chdir(tmp_path)
    for key in ("TIMEPARSER_LLM__MODEL", "TIMEPARSER_SERVER__PORT", "TIMEPARSER_DATABASE_URL", "TIMEPARSER_LLM"):
        monkeypatch.delenv(key, raising=False)


def _settings(tmp_path, **kwargs):
    return Settings(config_dir=tmp_path / "cfg", data_dir=tmp_path / "data", **kwargs)


def test_defaults(tmp_path):
    settings = _settings(tmp_path)

    assert settings.llm.model == "gemma3:4b"
    assert settings.llm.timeout is None
    assert settings.server.port == 3001
    assert settings.get_db_url() == f"sqlite+aiosqlite:///{tmp_path / 'data' / 'timeparser.db'}"
    assert (tmp_path / "cfg").is_dir()


def test_yaml_in_config_dir(tmp_path):
    (tmp_path / "cfg").mkdir()
    (tmp_path / "cfg" / "settings.yaml").write_text(
        "llm:\n  model: llama3\n  timeout: 30\nserver:\n  port: 8080\n",
        encoding="utf-8",
    )

    settings = _settings(tmp_path)

    assert settings.llm.model == "llama3"
    assert settings.llm.timeout == 30
    assert settings.server.port == 8080


def test_env_beats_yaml(tmp_path, monkeypatch):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "settings.yaml").write_text(
        "llm:\n  base_url: http://gpu-box:11434\n  model: llama3\n  timeout: 60\n"
        "server:\n  host: 0.0.0.0\n  port: 8080\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("TIMEPARSER_LLM__MODEL", "mistral")
    monkeypatch.setenv("TIMEPARSER_SERVER__PORT", "9000")

    settings = _settings(tmp_path)

    assert settings.llm.model == "mistral"
    assert settings.llm.base_url == "http://gpu-box:11434"
    assert settings.llm.timeout == 60
    assert settings.server.port == 9000
    assert settings.server.host == "0.0.0.0"


def test_kwargs_beat_yaml_key_by_key(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "settings.yaml").write_text(
        "llm:\n  base_url: http://gpu-box:11434\n  model: llama3\n", encoding="utf-8"
    )

    settings = _settings(tmp_path, llm=LLMSettings(model="phi3:mini"))

    assert settings.llm.model == "phi3:mini"
    assert settings.llm.base_url == "http://gpu-box:11434"


def test_explicit_database_url(tmp_path):
    settings = _settings(tmp_path, database_url="sqlite+aiosqlite:///:memory:")
    assert settings.get_db_url() == "sqlite+aiosqlite:///:memory:"


def test_completion_factory():
    backend = create_completion(LLMSettings(base_url="http://ollama:11434/", model="phi3:mini"))

    assert isinstance(backend, OllamaCompletion)
    assert backend.base_url == "http://ollama:11434"
    assert backend.model == "phi3:mini"


def test_unknown_completion_backend():
    with pytest.raises(ValueError):
        create_completion(LLMSettings(backend="nope"))
