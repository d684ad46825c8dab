"""Terminal prompt source and output sink."""

import asyncio
import logging
from pathlib import Path
from typing import Optional, Protocol

from chatfn.config import EXIT_COMMAND

logger = logging.getLogger(__name__)


class PromptSource(Protocol):
    """Supplies the system prompt and user turns, receives assistant output."""

    async def system_prompt(self) -> str: ...

    async def next_user_turn(self) -> str: ...

    def emit(self, text: str) -> None: ...


class ConsoleIO:
    """Line-based prompt/response over stdin and stdout.

    When ``system_prompt_file`` names an existing file, its text replaces the
    interactive system prompt.
    """

    def __init__(self, system_prompt_file: Optional[str] = None, prompt: str = "> "):
        self.system_prompt_file = system_prompt_file
        self.prompt = prompt
        self._turns = 0

    async def _read_line(self) -> str:
        try:
            line = await asyncio.to_thread(input, self.prompt)
        except (EOFError, KeyboardInterrupt):
            print()
            return EXIT_COMMAND
        return line.strip()

    async def system_prompt(self) -> str:
        if self.system_prompt_file:
            path = Path(self.system_prompt_file)
            if path.is_file():
                logger.info(f"Using system prompt from {path}")
                return path.read_text(encoding="utf-8")
            logger.warning(f"System prompt file {path} not found, asking instead")
        print("> Enter a system prompt:")
        return await self._read_line()

    async def next_user_turn(self) -> str:
        if not self._turns:
            print("> What is your first question?")
        self._turns += 1
        return await self._read_line()

    def emit(self, text: str) -> None:
        print(f"> {text}")
