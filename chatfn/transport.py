"""Model transports: send the transcript plus function metadata, get one reply.

Two backends are supported:
- openai (default): OpenAI-compatible /chat/completions over httpx,
  using the ``functions`` / ``function_call`` request fields
- ollama: the ollama Python library, mapping functions to ``tools``

Neither retries. A failed request raises TransportError and ends the run.
"""

import json
import logging
from typing import Iterable, Optional, Sequence

import httpx
import ollama

from chatfn.config import CONNECT_TIMEOUT, Settings
from chatfn.exceptions import AuthenticationError, ConfigurationError, TransportError
from chatfn.functions.registry import FunctionMetadata
from chatfn.messages import AssistantTurn, FunctionCall, Message, Role

logger = logging.getLogger(__name__)

_AUTH_ERROR_STATUS_CODES = {401, 403}


class ModelTransport:
    """Base class for chat-completion backends."""

    model: str

    async def complete(
        self,
        messages: Iterable[Message],
        functions: Sequence[FunctionMetadata] = (),
        function_call: str = "auto",
        temperature: Optional[float] = None,
    ) -> AssistantTurn:
        """Request one assistant turn.

        Args:
            messages: Transcript, oldest first
            functions: Metadata of the functions the model may call
            function_call: Function selection mode ("auto", "none")
            temperature: Sampling temperature, backend default if None

        Returns:
            AssistantTurn with content and/or a function-call request
        """
        raise NotImplementedError

    async def aclose(self):
        pass

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        await self.aclose()


class OpenAITransport(ModelTransport):
    """Async httpx client for OpenAI-compatible chat completions."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = "https://api.openai.com/v1",
        timeout: float = 30.0,
        client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            raise ConfigurationError(
                "No API key provided. Set the OPENAI_API_KEY environment variable."
            )
        self.model = model
        self._base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout, connect=CONNECT_TIMEOUT),
        )
        self._headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }

    def build_payload(
        self,
        messages: Iterable[Message],
        functions: Sequence[FunctionMetadata] = (),
        function_call: str = "auto",
        temperature: Optional[float] = None,
    ) -> dict:
        payload = {
            "model": self.model,
            "messages": [m.to_dict() for m in messages],
        }
        if functions:
            payload["functions"] = [f.to_dict() for f in functions]
            payload["function_call"] = function_call
        if temperature is not None:
            payload["temperature"] = temperature
        return payload

    async def complete(
        self,
        messages: Iterable[Message],
        functions: Sequence[FunctionMetadata] = (),
        function_call: str = "auto",
        temperature: Optional[float] = None,
    ) -> AssistantTurn:
        payload = self.build_payload(messages, functions, function_call, temperature)
        try:
            response = await self._client.post(
                f"{self._base_url}/chat/completions",
                json=payload,
                headers=self._headers,
            )
        except httpx.HTTPError as e:
            logger.error(f"Chat completion request failed: {e!r}")
            raise TransportError(f"Chat completion request failed: {e!r}") from e

        if response.status_code in _AUTH_ERROR_STATUS_CODES:
            raise AuthenticationError(
                f"Authentication failed: HTTP {response.status_code} - {response.text}"
            )
        try:
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Chat completion API error: {e}")
            raise TransportError(
                f"Chat completion API error: HTTP {response.status_code} - {response.text}"
            ) from e
        except ValueError as e:
            raise TransportError(f"Chat completion response is not JSON: {e}") from e

        return self.parse_response(data)

    @staticmethod
    def parse_response(data: dict) -> AssistantTurn:
        """Extract the first choice's message from a response dict."""
        try:
            message = data["choices"][0]["message"]
        except (KeyError, IndexError, TypeError) as e:
            raise TransportError(
                f"Unexpected response format: {e!r}. Response: {data}"
            ) from e

        function_call = None
        raw_call = message.get("function_call")
        if raw_call and raw_call.get("name"):
            function_call = FunctionCall(
                name=raw_call["name"],
                arguments=raw_call.get("arguments") or "",
            )
        return AssistantTurn(
            content=message.get("content"),
            function_call=function_call,
            role=message.get("role") or "assistant",
            raw=data,
        )

    async def aclose(self):
        await self._client.aclose()


class OllamaTransport(ModelTransport):
    """Wrapper around the ollama AsyncClient."""

    def __init__(
        self,
        model: str,
        host: str = "http://localhost:11434",
        timeout: float = 30.0,
        client: Optional[ollama.AsyncClient] = None,
    ):
        self.model = model
        self._client = client or ollama.AsyncClient(
            host=host,
            timeout=httpx.Timeout(timeout, connect=CONNECT_TIMEOUT),
        )

    @staticmethod
    def to_ollama_message(message: Message) -> dict:
        """Map a transcript message onto Ollama's tool-calling roles."""
        if message.role is Role.FUNCTION:
            return {"role": "tool", "content": message.content, "tool_name": message.name}
        data = {"role": message.role.value, "content": message.content}
        if message.function_call is not None:
            data["tool_calls"] = [
                {
                    "function": {
                        "name": message.function_call.name,
                        "arguments": _arguments_as_dict(message.function_call.arguments),
                    }
                }
            ]
        return data

    async def complete(
        self,
        messages: Iterable[Message],
        functions: Sequence[FunctionMetadata] = (),
        function_call: str = "auto",
        temperature: Optional[float] = None,
    ) -> AssistantTurn:
        kwargs = {
            "model": self.model,
            "messages": [self.to_ollama_message(m) for m in messages],
        }
        # Ollama has no forced/disabled selection; "none" just hides the tools
        if functions and function_call != "none":
            kwargs["tools"] = [f.to_tool_schema() for f in functions]
        if temperature is not None:
            kwargs["options"] = {"temperature": temperature}

        try:
            response = await self._client.chat(**kwargs)
        except ollama.ResponseError as e:
            logger.error(f"Ollama API error: {e}")
            raise TransportError(f"Ollama API error: {e}") from e
        except (httpx.HTTPError, ConnectionError) as e:
            logger.error(f"Ollama request failed: {e!r}")
            raise TransportError(f"Ollama request failed: {e!r}") from e

        call = None
        tool_calls = response.message.tool_calls or []
        if tool_calls:
            if len(tool_calls) > 1:
                logger.warning(
                    f"Ollama returned {len(tool_calls)} tool calls, using the first"
                )
            first = tool_calls[0].function
            call = FunctionCall(name=first.name, arguments=json.dumps(dict(first.arguments or {})))

        return AssistantTurn(
            content=response.message.content or None,
            function_call=call,
            role=response.message.role or "assistant",
        )


def _arguments_as_dict(raw: str) -> dict:
    try:
        parsed = json.loads(raw) if raw else {}
    except ValueError:
        return {}
    return parsed if isinstance(parsed, dict) else {}


def create_transport(settings: Settings) -> ModelTransport:
    """Build the transport selected by ``settings.backend``."""
    if settings.backend == "ollama":
        return OllamaTransport(
            model=settings.model,
            host=settings.ollama_host,
            timeout=settings.timeout,
        )
    if settings.backend == "openai":
        return OpenAITransport(
            api_key=settings.api_key,
            model=settings.model,
            base_url=settings.base_url,
            timeout=settings.timeout,
        )
    raise ConfigurationError(f"Unknown backend {settings.backend!r}")
