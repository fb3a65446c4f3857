"""System prompt composition.

The system prompt is rebuilt on every turn from the base prompt, the tools
currently active and the static request context of the conversation.
"""

from typing import Any, Sequence

import yaml

from api_chat_server.tools.catalog import FIND_API_SPEC_ACTION
from api_chat_server.tools.types import StaticRequestContext, Tool

CONTEXT_HEADER = (
    "The following information is available for you to use for calling functions:"
)


def make_base_system_prompt(personality: str) -> str:
    """Build the base prompt from a personality and the standing instructions."""
    return (
        f"{personality}\n"
        f"Use the {FIND_API_SPEC_ACTION} function to find an action in the API spec "
        "when the user asks you to perform an action.\n"
        "If none of the available functions match the user's query, use this function.\n"
        "Before performing an action, ask the user for any missing required parameters.\n"
        "Before performing a POST, DELETE, PUT, or PATCH function, ask the user to "
        "confirm that they want to perform the action.\n"
    )


def _to_yaml(value: Any) -> str:
    if isinstance(value, str):
        return value.strip()
    return yaml.safe_dump(
        value, sort_keys=False, default_flow_style=False, allow_unicode=True
    ).strip()


def make_context_prompt(context: StaticRequestContext) -> str:
    """Describe the static request context for the model.

    One labeled block per populated field, always in the order headers,
    request body, path parameters, query parameters.
    """
    fields = [
        ("Headers", context.headers),
        ("Request body", context.body),
        ("Path parameters", context.path_parameters),
        ("Query parameters", context.query_parameters),
    ]
    lines = [CONTEXT_HEADER]
    for label, value in fields:
        if value is not None and value not in ({}, [], ""):
            lines.append(f"{label}:\n{_to_yaml(value)}")
    return "\n".join(lines).rstrip()


def compose_system_prompt(
    base_prompt: str,
    active_tools: Sequence[Tool],
    context: StaticRequestContext | None = None,
) -> str:
    """Compose the system prompt for a turn.

    Args:
        base_prompt: Personality and general instructions
        active_tools: Tools visible to the model this turn
        context: Optional static request context of the conversation

    Returns:
        str: The system prompt; identical inputs give identical output
    """
    prompt = base_prompt

    dynamic_names = [tool.definition.name for tool in active_tools if tool.dynamic]
    if dynamic_names:
        separator = "" if prompt.endswith("\n") else "\n"
        prompt += (
            f"{separator}Call the functions {', '.join(dynamic_names)} only when you "
            "have all necessary parameters to complete the action.\n"
            "If you don't yet have all the necessary information, continue asking "
            "the user for more information until you have it all.\n"
            "If you have the necessary information, call the function and then "
            "append the function's response to the conversation."
        )

    if context is not None:
        prompt += "\n" + make_context_prompt(context)

    return prompt
