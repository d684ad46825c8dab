"""Function registry initialization."""

from chatfn.functions.registry import (
    FunctionDefinition,
    FunctionMetadata,
    FunctionRegistry,
)

__all__ = [
    "FunctionDefinition",
    "FunctionMetadata",
    "FunctionRegistry",
    "create_registry",
]


def create_registry(transport) -> FunctionRegistry:
    """Register all built-in functions and freeze the registry.

    Args:
        transport: ModelTransport used by functions that ask the model
            for help themselves (convert_requirements_to_md).
    """
    from chatfn.functions import requirements, weather

    registry = FunctionRegistry()
    requirements.register(registry, transport)
    weather.register(registry)
    registry.freeze()
    return registry
