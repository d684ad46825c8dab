"""Configuration for the chatfn agent."""

import logging
import os
from dataclasses import dataclass
from typing import Optional

from chatfn.exceptions import ConfigurationError

# Model backends
DEFAULT_BACKEND = "openai"
BACKENDS = ("openai", "ollama")

# OpenAI-compatible API
OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENAI_MODEL = "gpt-3.5-turbo-0613"

# Ollama API
OLLAMA_HOST = "http://localhost:11434"
OLLAMA_MODEL = "llama3.1"

# Model parameters
DEFAULT_TEMPERATURE = 0.7
FUNCTION_RESULT_TEMPERATURE = 0.0

# Timeout for model requests (seconds)
REQUEST_TIMEOUT = 30.0
CONNECT_TIMEOUT = 10.0

# Placeholder appended when the model replies without content
EMPTY_REPLY = "... no response ..."

EXIT_COMMAND = "exit"

LOG_LEVEL = "WARNING"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


@dataclass
class Settings:
    """Runtime settings resolved from the environment and CLI flags."""

    backend: str = DEFAULT_BACKEND
    api_key: Optional[str] = None
    base_url: str = OPENAI_BASE_URL
    model: str = OPENAI_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    ollama_host: str = OLLAMA_HOST
    timeout: float = REQUEST_TIMEOUT
    system_prompt_file: Optional[str] = None
    log_level: str = LOG_LEVEL


def _float_env(environ, key: str, default: float) -> float:
    raw = environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{key} must be a number, got {raw!r}")


def load_settings(environ=None, **overrides) -> Settings:
    """Build Settings from environment variables.

    Keyword overrides whose value is not None win over the environment
    (used for CLI flags).
    """
    if environ is None:
        environ = os.environ

    backend = (overrides.get("backend") or environ.get("CHAT_BACKEND") or DEFAULT_BACKEND).lower()
    if backend not in BACKENDS:
        raise ConfigurationError(
            f"Unknown backend {backend!r}, expected one of: {', '.join(BACKENDS)}"
        )

    if backend == "ollama":
        default_model = environ.get("OLLAMA_MODEL") or OLLAMA_MODEL
    else:
        default_model = environ.get("OPENAI_MODEL") or OPENAI_MODEL

    settings = Settings(
        backend=backend,
        api_key=environ.get("OPENAI_API_KEY") or None,
        base_url=(environ.get("OPENAI_BASE_URL") or OPENAI_BASE_URL).rstrip("/"),
        model=default_model,
        temperature=_float_env(environ, "OPENAI_TEMPERATURE", DEFAULT_TEMPERATURE),
        ollama_host=environ.get("OLLAMA_HOST") or OLLAMA_HOST,
        timeout=_float_env(environ, "REQUEST_TIMEOUT", REQUEST_TIMEOUT),
        system_prompt_file=environ.get("SYSTEM_PROMPT_FILE") or None,
        log_level=(environ.get("LOG_LEVEL") or LOG_LEVEL).upper(),
    )

    for key in ("model", "temperature", "system_prompt_file", "log_level"):
        value = overrides.get(key)
        if value is not None:
            setattr(settings, key, value)
    settings.log_level = settings.log_level.upper()
    if not isinstance(logging.getLevelName(settings.log_level), int):
        raise ConfigurationError(f"Unknown log level {settings.log_level!r}")
    return settings
