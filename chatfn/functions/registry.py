"""Central function registry and schema definitions."""

import copy
from dataclasses import dataclass
from typing import Callable, Optional

from chatfn.exceptions import ConfigurationError


@dataclass(frozen=True)
class FunctionMetadata:
    """Name, description and JSON Schema parameters advertised to the model."""

    name: str
    description: str
    parameters: dict  # JSON Schema for parameters

    def __post_init__(self):
        if not self.name:
            raise ConfigurationError("Function name must not be empty")
        if not isinstance(self.parameters, dict) or self.parameters.get("type") != "object":
            raise ConfigurationError(
                f"Parameters of {self.name} must be a JSON Schema of type 'object'"
            )
        params = copy.deepcopy(self.parameters)
        object.__setattr__(self, "parameters", params)
        properties = params.setdefault("properties", {})
        required = params.setdefault("required", [])
        if not isinstance(properties, dict):
            raise ConfigurationError(f"Properties of {self.name} must be a mapping")
        if not isinstance(required, list):
            raise ConfigurationError(f"Required parameters of {self.name} must be a list")
        unknown = [p for p in required if p not in properties]
        if unknown:
            raise ConfigurationError(
                f"Function {self.name} requires undeclared parameter(s): {', '.join(unknown)}"
            )

    @property
    def required(self) -> list[str]:
        return list(self.parameters["required"])

    def to_dict(self) -> dict:
        """Function metadata in the shape sent to the chat-completion API."""
        return {
            "name": self.name,
            "description": self.description,
            "parameters": copy.deepcopy(self.parameters),
        }

    def to_tool_schema(self) -> dict:
        """Convert to Ollama tool schema format."""
        return {"type": "function", "function": self.to_dict()}


@dataclass(frozen=True)
class FunctionDefinition:
    """A registered function with its schema and implementation."""

    metadata: FunctionMetadata
    handler: Callable  # Called with the declared arguments as keywords, may be async

    @property
    def name(self) -> str:
        return self.metadata.name


class FunctionRegistry:
    """Central registry for all callable functions.

    Filled once at startup and frozen; lookups keep registration order.
    """

    def __init__(self):
        self._functions: dict[str, FunctionDefinition] = {}
        self._frozen = False

    def register(self, func_def: FunctionDefinition):
        """Register a function definition."""
        if self._frozen:
            raise ConfigurationError(
                f"Cannot register {func_def.name}: the registry is frozen"
            )
        if func_def.name in self._functions:
            raise ConfigurationError(f"Function {func_def.name} is already registered")
        self._functions[func_def.name] = func_def

    def freeze(self):
        self._frozen = True

    def get(self, name: str) -> Optional[FunctionDefinition]:
        """Get a function by name."""
        return self._functions.get(name)

    lookup = get

    def list_metadata(self) -> list[FunctionMetadata]:
        """Metadata of every function, in registration order."""
        return [f.metadata for f in self._functions.values()]

    def get_all_names(self) -> list[str]:
        """Get all registered function names."""
        return list(self._functions.keys())

    def __contains__(self, name: str) -> bool:
        return name in self._functions

    def __len__(self) -> int:
        return len(self._functions)
