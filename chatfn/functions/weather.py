"""Weather lookup function."""

import json

from chatfn.functions.registry import (
    FunctionDefinition,
    FunctionMetadata,
    FunctionRegistry,
)

SCHEMA = {
    "type": "object",
    "properties": {
        "location": {
            "type": "string",
            "description": "The city and state, e.g. San Francisco, CA",
        },
        "unit": {"type": "string", "enum": ["celsius", "fahrenheit"]},
    },
    "required": ["location"],
}


async def get_current_weather(location: str, unit: str = "fahrenheit") -> str:
    """Mock handler for weather queries."""
    return json.dumps(
        {
            "location": location,
            "temperature": "72",
            "unit": unit,
            "forecast": ["sunny", "windy"],
        }
    )


def register(registry: FunctionRegistry):
    registry.register(
        FunctionDefinition(
            metadata=FunctionMetadata(
                name="get_current_weather",
                description="Get the current weather in a given location",
                parameters=SCHEMA,
            ),
            handler=get_current_weather,
        )
    )
