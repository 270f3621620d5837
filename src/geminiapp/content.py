"""Shape caller input into role-tagged content envelopes."""

from __future__ import annotations

import base64
from collections.abc import Mapping, Sequence
from typing import Any, Literal, TypedDict

from geminiapp.errors import ValidationError

Role = Literal["user", "model", "function"]
Part = dict[str, Any]


class Content(TypedDict):
    """One conversation turn: a role and its ordered parts."""

    role: Role
    parts: list[Part]


def text_part(text: str) -> Part:
    """Build a text part."""
    return {"text": text}


def inline_data_part(data: bytes, mime_type: str) -> Part:
    """Build an ``inlineData`` part from raw bytes (base64-encoded here)."""
    return {
        "inlineData": {
            "data": base64.b64encode(data).decode("ascii"),
            "mimeType": mime_type,
        }
    }


def format_new_content(request: str | Sequence[str | Mapping[str, Any]]) -> Content:
    """Turn a prompt or a list of prompts/parts into a single envelope.

    Strings become text parts; mappings pass through as already-formed parts.

    Raises:
        ValidationError: If an element is neither a string nor a mapping, or
            the resulting parts are empty or mix function responses with
            other part types.
    """
    if isinstance(request, str):
        return _assign_role_to_parts([text_part(request)])

    new_parts: list[Part] = []
    for i, part_or_string in enumerate(request):
        if isinstance(part_or_string, str):
            new_parts.append(text_part(part_or_string))
        elif isinstance(part_or_string, Mapping):
            new_parts.append(dict(part_or_string))
        else:
            raise ValidationError(
                f"parts[{i}] has unsupported type {type(part_or_string).__name__}",
                hint="Pass strings or part dicts such as {'text': ...}.",
            )
    return _assign_role_to_parts(new_parts)


def _assign_role_to_parts(parts: list[Part]) -> Content:
    user_parts: list[Part] = []
    function_parts: list[Part] = []
    for part in parts:
        if "functionResponse" in part:
            function_parts.append(part)
        else:
            user_parts.append(part)

    if user_parts and function_parts:
        raise ValidationError(
            "FunctionResponse cannot be mixed with other types of parts in the "
            "request for sending a chat message."
        )
    if not user_parts and not function_parts:
        raise ValidationError("No content is provided for sending a chat message.")

    if user_parts:
        return Content(role="user", parts=user_parts)
    return Content(role="function", parts=function_parts)


def format_generate_content_input(
    params: str | Sequence[str | Mapping[str, Any]] | Mapping[str, Any],
) -> dict[str, Any]:
    """Normalize ``generate_content`` input into a request body.

    A mapping that already carries ``contents`` passes through (shallow-copied);
    anything else is wrapped as a single user or function turn.
    """
    if isinstance(params, Mapping):
        if "contents" not in params:
            raise ValidationError(
                "Request mapping must include 'contents'",
                hint="Pass a prompt string, a list of parts, or {'contents': [...]}.",
            )
        return dict(params)
    return {"contents": [format_new_content(params)]}
