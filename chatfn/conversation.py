"""Main conversation loop - drives the model and dispatches function calls."""

import argparse
import asyncio
import enum
import logging
import sys
from typing import Optional

from dotenv import load_dotenv

from chatfn.config import (
    DEFAULT_TEMPERATURE,
    EMPTY_REPLY,
    EXIT_COMMAND,
    FUNCTION_RESULT_TEMPERATURE,
    LOG_FORMAT,
    load_settings,
)
from chatfn.console import ConsoleIO, PromptSource
from chatfn.dispatcher import CallStatus, Dispatcher
from chatfn.exceptions import ChatFnError
from chatfn.functions import create_registry
from chatfn.functions.registry import FunctionRegistry
from chatfn.messages import AssistantTurn, Conversation, Message, Role
from chatfn.transport import ModelTransport, create_transport

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    INIT = "init"
    AWAITING_MODEL = "awaiting_model"
    PROCESS_RESPONSE = "process_response"
    DISPATCHING = "dispatching"
    AWAITING_USER = "awaiting_user"
    TERMINATED = "terminated"


def is_exit(text: str) -> bool:
    return text.strip().lower() == EXIT_COMMAND


class ConversationSession:
    """One interactive session: owns the transcript and runs the state machine.

    Function calls are handled in the same loop as user turns: after a
    function result the model is asked again, until it answers without
    requesting another function.
    """

    def __init__(
        self,
        transport: ModelTransport,
        registry: FunctionRegistry,
        io: PromptSource,
        default_temperature: float = DEFAULT_TEMPERATURE,
    ):
        self.transport = transport
        self.registry = registry
        self.dispatcher = Dispatcher(registry)
        self.io = io
        self.default_temperature = default_temperature
        self.conversation = Conversation()
        self.state = SessionState.INIT
        self.last_response: Optional[AssistantTurn] = None
        self._pending: Optional[Message] = None

    def select_temperature(self) -> float:
        """Deterministic output right after a function result, default otherwise."""
        last = self.conversation.last
        if last is not None and last.role is Role.FUNCTION:
            return FUNCTION_RESULT_TEMPERATURE
        return self.default_temperature

    async def run(self) -> Optional[AssistantTurn]:
        """Run until the user exits.

        Returns:
            The last model response, or None if the user exited before the
            model was ever asked.

        Raises:
            UnknownFunctionError: The model asked for an unregistered function
            TransportError: The model request failed
        """
        handlers = {
            SessionState.INIT: self._init,
            SessionState.AWAITING_MODEL: self._await_model,
            SessionState.PROCESS_RESPONSE: self._process_response,
            SessionState.DISPATCHING: self._dispatch,
            SessionState.AWAITING_USER: self._await_user,
        }
        while self.state is not SessionState.TERMINATED:
            self.state = await handlers[self.state]()
        return self.last_response

    async def _init(self) -> SessionState:
        system_prompt = await self.io.system_prompt()
        self.conversation.append(Message.system(system_prompt))
        return await self._read_user_turn()

    async def _await_model(self) -> SessionState:
        temperature = self.select_temperature()
        logger.debug(
            f"Requesting completion: {len(self.conversation)} messages, "
            f"temperature={temperature}"
        )
        self.last_response = await self.transport.complete(
            self.conversation.messages,
            functions=self.registry.list_metadata(),
            function_call="auto",
            temperature=temperature,
        )
        return SessionState.PROCESS_RESPONSE

    async def _process_response(self) -> SessionState:
        turn = self.last_response
        self._pending = self.conversation.append(
            Message.assistant(turn.content or EMPTY_REPLY, function_call=turn.function_call)
        )
        if turn.function_call is not None:
            return SessionState.DISPATCHING
        return SessionState.AWAITING_USER

    async def _dispatch(self) -> SessionState:
        call = self._pending.function_call
        outcome = await self.dispatcher.dispatch(call.name, call.arguments)

        if outcome.status is CallStatus.ERROR:
            # Execution errors go back as assistant text, not as function output
            self.conversation.append(Message.assistant(outcome.message))
        else:
            self.conversation.append(Message.function(call.name, outcome.message))
        return SessionState.AWAITING_MODEL

    async def _await_user(self) -> SessionState:
        # Don't show the user's own words back at them
        if self.last_response is not None and self.last_response.role != Role.USER.value:
            self.io.emit(self._pending.content)
        return await self._read_user_turn()

    async def _read_user_turn(self) -> SessionState:
        text = await self.io.next_user_turn()
        if is_exit(text):
            return SessionState.TERMINATED
        self.conversation.append(Message.user(text))
        return SessionState.AWAITING_MODEL


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Chat with a language model that can call local functions."
    )
    parser.add_argument("--backend", choices=["openai", "ollama"], help="Model backend")
    parser.add_argument("--model", help="Model name")
    parser.add_argument("--temperature", type=float, help="Default sampling temperature")
    parser.add_argument(
        "--system-prompt-file", help="Read the system prompt from this file"
    )
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, ...)")
    return parser.parse_args(argv)


async def run_session(settings) -> Optional[AssistantTurn]:
    async with create_transport(settings) as transport:
        registry = create_registry(transport)
        logger.info(f"Registered functions: {', '.join(registry.get_all_names())}")
        session = ConversationSession(
            transport,
            registry,
            ConsoleIO(system_prompt_file=settings.system_prompt_file),
            default_temperature=settings.temperature,
        )
        return await session.run()


def main(argv=None):
    load_dotenv()
    args = parse_args(argv)

    try:
        settings = load_settings(
            backend=args.backend,
            model=args.model,
            temperature=args.temperature,
            system_prompt_file=args.system_prompt_file,
            log_level=args.log_level,
        )
    except ChatFnError as e:
        logging.basicConfig(format=LOG_FORMAT)
        logger.error(f"Configuration error: {e}")
        sys.exit(1)

    logging.basicConfig(level=settings.log_level, format=LOG_FORMAT)
    if settings.backend == "openai":
        if settings.api_key:
            logger.info("OpenAI configured: True")
        else:
            logger.warning("OpenAI configured: False (OPENAI_API_KEY is not set)")

    try:
        response = asyncio.run(run_session(settings))
    except ChatFnError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        print("\nGoodbye!")
        return

    if response is not None:
        logger.debug(f"Final response: {response.raw or response}")
    print("Goodbye!")


if __name__ == "__main__":
    main()
