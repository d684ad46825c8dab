"""Conversation transcript types."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    FUNCTION = "function"


@dataclass(frozen=True)
class FunctionCall:
    """A function-call request from the model: name plus raw JSON arguments."""

    name: str
    arguments: str = ""

    def to_dict(self) -> dict:
        return {"name": self.name, "arguments": self.arguments}


@dataclass(frozen=True)
class Message:
    """One transcript entry.

    ``name`` is only set for function results, ``function_call`` only on
    assistant turns that asked for a function.
    """

    role: Role
    content: str
    name: Optional[str] = None
    function_call: Optional[FunctionCall] = None

    def __post_init__(self):
        if self.role is Role.FUNCTION and not self.name:
            raise ValueError("function messages need the function name")
        if self.function_call is not None and self.role is not Role.ASSISTANT:
            raise ValueError("only assistant messages may carry a function call")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> "Message":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str, function_call: Optional[FunctionCall] = None) -> "Message":
        return cls(Role.ASSISTANT, content, function_call=function_call)

    @classmethod
    def function(cls, name: str, content: str) -> "Message":
        return cls(Role.FUNCTION, content, name=name)

    def to_dict(self) -> dict:
        """Chat-completion wire shape (role/content/name/function_call)."""
        data = {"role": self.role.value, "content": self.content}
        if self.name:
            data["name"] = self.name
        if self.function_call is not None:
            data["function_call"] = self.function_call.to_dict()
        return data


class Conversation:
    """Append-only transcript. The first message, if any, is the system prompt."""

    def __init__(self):
        self._messages: list[Message] = []

    def append(self, message: Message) -> Message:
        if not self._messages and message.role is not Role.SYSTEM:
            raise ValueError("a conversation must start with a system message")
        if self._messages and message.role is Role.SYSTEM:
            raise ValueError("only the first message may be a system message")
        self._messages.append(message)
        return message

    @property
    def last(self) -> Optional[Message]:
        return self._messages[-1] if self._messages else None

    @property
    def messages(self) -> tuple[Message, ...]:
        return tuple(self._messages)

    def __len__(self) -> int:
        return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(tuple(self._messages))

    def __getitem__(self, index):
        return self._messages[index]


@dataclass
class AssistantTurn:
    """One reply from the model transport."""

    content: Optional[str] = None
    function_call: Optional[FunctionCall] = None
    role: str = "assistant"
    raw: dict = field(default_factory=dict, repr=False)
