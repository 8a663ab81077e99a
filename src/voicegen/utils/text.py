"""
Text helpers for the generation request.

Prompt Serialization:
    The upstream generator takes its style instructions as one text block.
    A prompt mapping is rendered entry by entry, in the caller's order, as
    "<Key>: <value>" with only the first character of the key upper-cased,
    and entries are separated by a blank line:

        {"identity": "x", "affect": "y"}  ->  "Identity: x\\n\\nAffect: y"

    Non-string values follow JavaScript string conversion: 1.0 -> "1",
    ["a", "b"] -> "a,b", nested objects -> "[object Object]".

Example:
    >>> from voicegen.utils.text import format_prompt
    >>> format_prompt({"identity": "A narrator", "tone": "calm"})
    'Identity: A narrator\\n\\nTone: calm'
"""
from __future__ import annotations

import math
from typing import Any, Mapping

PROMPT_SEPARATOR = "\n\n"


def capitalize_key(key: str) -> str:
    """Upper-case the first character only; "pause_time" -> "Pause_time"."""
    return key[:1].upper() + key[1:]


def _render_value(value: Any) -> str:
    """Render a prompt value the way a JavaScript template literal would."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    if isinstance(value, int):
        return str(value)
    if isinstance(value, (list, tuple)):
        # Array elements are comma-joined; null entries render empty
        return ",".join("" if item is None else _render_value(item) for item in value)
    return "[object Object]"


def format_prompt(prompt: Mapping[str, Any]) -> str:
    """Serialize a prompt mapping into the upstream instruction block."""
    return PROMPT_SEPARATOR.join(
        f"{capitalize_key(str(key))}: {_render_value(value)}"
        for key, value in prompt.items()
    )


def normalize_voice(voice: str) -> str:
    """Voices are sent lower-case ("Coral" -> "coral")."""
    return voice.lower()


def text_preview(text: str, max_chars: int) -> str:
    """Shorten text for log lines; 0 disables previews."""
    if max_chars <= 0:
        return ""
    if len(text) <= max_chars:
        return text
    return text[:max_chars] + "..."
