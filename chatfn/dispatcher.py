"""Validate and execute function calls requested by the model.

Every call ends in one of three outcomes:
- success: the resolver returned, its string is the message
- missing-required-parameters: required keys absent, resolver not invoked
- error: the resolver raised, the exception text is the message

Only an unregistered function name raises (UnknownFunctionError), since
the model can only know names we advertised.
"""

import inspect
import json
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from chatfn.exceptions import UnknownFunctionError
from chatfn.functions.registry import FunctionRegistry

logger = logging.getLogger(__name__)


class CallStatus(str, Enum):
    SUCCESS = "success"
    MISSING_PARAMETERS = "missing-required-parameters"
    ERROR = "error"


@dataclass(frozen=True)
class CallOutcome:
    """Result of dispatching one function call."""

    status: CallStatus
    message: str
    missing: tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def success(cls, message: str) -> "CallOutcome":
        return cls(CallStatus.SUCCESS, message)

    @classmethod
    def missing_parameters(cls, name: str, missing: list[str]) -> "CallOutcome":
        return cls(
            CallStatus.MISSING_PARAMETERS,
            f"Missing required parameter(s): {', '.join(missing)} for function {name}",
            tuple(missing),
        )

    @classmethod
    def error(cls, message: str) -> "CallOutcome":
        return cls(CallStatus.ERROR, message)


def parse_arguments(raw_arguments: str) -> dict[str, Any]:
    """Parse the model's raw argument string, falling back to an empty object."""
    if not raw_arguments or not raw_arguments.strip():
        return {}
    try:
        parsed = json.loads(raw_arguments)
    except (json.JSONDecodeError, ValueError):
        logger.warning(f"Unparsable function arguments, using {{}}: {raw_arguments!r}")
        return {}
    if not isinstance(parsed, dict):
        logger.warning(f"Function arguments are not an object, using {{}}: {raw_arguments!r}")
        return {}
    return parsed


class Dispatcher:
    """Runs registered functions on behalf of the model."""

    def __init__(self, registry: FunctionRegistry):
        self.registry = registry

    async def dispatch(self, name: str, raw_arguments: str) -> CallOutcome:
        """Validate arguments against the schema and invoke the resolver.

        Args:
            name: Function name from the model's function-call request
            raw_arguments: JSON text of the arguments as sent by the model

        Returns:
            CallOutcome describing success, missing parameters or failure

        Raises:
            UnknownFunctionError: If ``name`` is not in the registry
        """
        func_def = self.registry.get(name)
        if func_def is None:
            raise UnknownFunctionError(name)

        arguments = parse_arguments(raw_arguments)
        logger.debug(f"{name}.call({json.dumps(arguments)})")

        # Presence is what counts, a null value still satisfies the schema
        missing = [p for p in func_def.metadata.required if p not in arguments]
        if missing:
            outcome = CallOutcome.missing_parameters(name, missing)
        else:
            declared = func_def.metadata.parameters["properties"]
            undeclared = [k for k in arguments if k not in declared]
            if undeclared:
                logger.debug(f"Ignoring undeclared argument(s) for {name}: {', '.join(undeclared)}")
            kwargs = {k: v for k, v in arguments.items() if k in declared}
            try:
                result = func_def.handler(**kwargs)
                if inspect.isawaitable(result):
                    result = await result
                if not isinstance(result, str):
                    result = json.dumps(result)
                outcome = CallOutcome.success(result)
            except Exception as e:
                logger.info(f"Function {name} failed: {e!r}")
                outcome = CallOutcome.error(f"Error executing function {name}: {e}")

        logger.debug(f"{name} => {outcome.message}")
        return outcome
