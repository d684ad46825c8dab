"""Turn free-form project requirements into a markdown table."""

from chatfn.config import FUNCTION_RESULT_TEMPERATURE
from chatfn.functions.registry import (
    FunctionDefinition,
    FunctionMetadata,
    FunctionRegistry,
)
from chatfn.messages import Message

SCHEMA = {
    "type": "object",
    "properties": {
        "requirements_text": {
            "type": "string",
            "description": "The large context of project requirements",
        },
    },
    "required": ["requirements_text"],
}

INSTRUCTIONS = (
    "You will be provided a set of project requirements. It is your job to "
    "convert the requirements into a markdown table with following "
    "considerations in mind: * Categories of work efforts * High level tasks, "
    "and their purpose."
)

NO_RESULT = "... error ..."


def make_handler(transport):
    """Bind the handler to the transport it forwards the requirements to."""

    async def convert_requirements_to_md(requirements_text: str) -> str:
        turn = await transport.complete(
            [Message.system(INSTRUCTIONS), Message.user(requirements_text)],
            functions=[],
            temperature=FUNCTION_RESULT_TEMPERATURE,
        )
        return turn.content or NO_RESULT

    return convert_requirements_to_md


def register(registry: FunctionRegistry, transport):
    registry.register(
        FunctionDefinition(
            metadata=FunctionMetadata(
                name="convert_requirements_to_md",
                description=(
                    "Convert a large text of project requirements into a markdown table"
                ),
                parameters=SCHEMA,
            ),
            handler=make_handler(transport),
        )
    )
