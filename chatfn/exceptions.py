"""Exception hierarchy for chatfn.

Recoverable function failures never surface as exceptions; they become
CallOutcome values in the dispatcher. Everything here ends the run.
"""


class ChatFnError(Exception):
    """Base for all chatfn errors."""


class ConfigurationError(ChatFnError):
    """Invalid startup configuration (duplicate function, missing API key, ...)."""


class UnknownFunctionError(ChatFnError):
    """The model requested a function that was never advertised.

    Attributes:
        name: The function name the model asked for.
    """

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Function {name} requested by the model is not registered")


class TransportError(ChatFnError):
    """Failure talking to the model endpoint."""


class AuthenticationError(TransportError):
    """The model endpoint rejected the credential (401/403)."""
