"""Tests for settings resolution."""

import pytest

from chatfn.config import (
    DEFAULT_TEMPERATURE,
    OLLAMA_MODEL,
    OPENAI_BASE_URL,
    OPENAI_MODEL,
    load_settings,
)
from chatfn.exceptions import ConfigurationError


def test_defaults():
    settings = load_settings({})
    assert settings.backend == "openai"
    assert settings.model == OPENAI_MODEL
    assert settings.temperature == DEFAULT_TEMPERATURE
    assert settings.base_url == OPENAI_BASE_URL
    assert settings.api_key is None
    assert settings.system_prompt_file is None


def test_environment_values():
    settings = load_settings(
        {
            "OPENAI_API_KEY": "sk-test",
            "OPENAI_MODEL": "gpt-4-0613",
            "OPENAI_TEMPERATURE": "0.2",
            "OPENAI_BASE_URL": "http://localhost:8000/v1/",
            "SYSTEM_PROMPT_FILE": "requirements.md",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.api_key == "sk-test"
    assert settings.model == "gpt-4-0613"
    assert settings.temperature == 0.2
    assert settings.base_url == "http://localhost:8000/v1"
    assert settings.system_prompt_file == "requirements.md"
    assert settings.log_level == "DEBUG"


def test_overrides_win_over_environment():
    settings = load_settings(
        {"OPENAI_MODEL": "gpt-4-0613", "OPENAI_TEMPERATURE": "0.2"},
        model="gpt-3.5-turbo-16k-0613",
        temperature=0.0,
        backend=None,
    )
    assert settings.model == "gpt-3.5-turbo-16k-0613"
    assert settings.temperature == 0.0


def test_ollama_backend_model_default():
    settings = load_settings({"CHAT_BACKEND": "Ollama", "OLLAMA_HOST": "http://gpu:11434"})
    assert settings.backend == "ollama"
    assert settings.model == OLLAMA_MODEL
    assert settings.ollama_host == "http://gpu:11434"


def test_invalid_temperature():
    with pytest.raises(ConfigurationError, match="OPENAI_TEMPERATURE"):
        load_settings({"OPENAI_TEMPERATURE": "warm"})


def test_unknown_backend():
    with pytest.raises(ConfigurationError, match="backend"):
        load_settings({"CHAT_BACKEND": "carrier-pigeon"})


def test_unknown_log_level():
    with pytest.raises(ConfigurationError, match="log level"):
        load_settings({"LOG_LEVEL": "chatty"})
