"""
Input Validation for the generation pipeline.

Validation runs before any upstream call, so a rejected request never
reaches the speech generator or the file host.

Validation Rules:
    - Text: at most 1003 characters (configurable). Length is Python
      len() on the raw string, i.e. code points; a user-perceived
      character built from several code points counts more than once.
    - Voice / vibe: must be strings.
    - Prompt: a mapping with string keys.

Error codes:
    - TEXT_TOO_LONG: text exceeds the bound
    - INVALID_INPUT: wrong type for a field
"""
from __future__ import annotations

from typing import Any, Dict, Mapping

from voicegen.core.config import Defaults
from voicegen.core.errors import ErrorCode, ValidationError
from voicegen.core.logging import get_logger, warn

_LOG = get_logger("voicegen.validators")


def validate_text(text: str, max_length: int = Defaults.MAX_TEXT_LENGTH) -> str:
    """
    Check the text bound. The text is returned unchanged (no stripping).

    Raises:
        ValidationError: TEXT_TOO_LONG if len(text) > max_length.
    """
    if not isinstance(text, str):
        raise ValidationError("Text must be a string", ErrorCode.INVALID_INPUT)

    if len(text) > max_length:
        warn(_LOG, "text_too_long", chars=len(text), max_length=max_length)
        raise ValidationError(
            f"Text exceeds maximum length of {max_length} characters",
            ErrorCode.TEXT_TOO_LONG,
            details={"length": len(text), "max_length": max_length},
        )
    return text


def validate_prompt(prompt: Any) -> Dict[str, Any]:
    """
    Check the prompt mapping, preserving the caller's key order.

    Raises:
        ValidationError: INVALID_INPUT if prompt is not a str-keyed mapping.
    """
    if prompt is None:
        return {}
    if not isinstance(prompt, Mapping):
        raise ValidationError("Prompt must be an object", ErrorCode.INVALID_INPUT)
    for key in prompt:
        if not isinstance(key, str):
            raise ValidationError("Prompt keys must be strings", ErrorCode.INVALID_INPUT)
    return dict(prompt)


def validate_name(value: Any, field_name: str) -> str:
    """Voice and vibe names are free-form strings."""
    if not isinstance(value, str):
        raise ValidationError(f"{field_name} must be a string", ErrorCode.INVALID_INPUT)
    return value
