"""
Helpers for reading JSON out of LLM replies.

Models often wrap the payload in a markdown fence (```json ... ```), sometimes
without the closing fence when the reply was cut off.
"""
import json
import re
from typing import Any

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")


def strip_code_fence(text: str) -> str:
    """Return the body of a fenced reply, or the stripped text when unfenced."""
    text = text.strip()
    match = _OPENING_FENCE.match(text)
    if not match:
        return text

    body = text[match.end():]
    closing = body.find("```")
    if closing != -1:
        body = body[:closing]
    return body.strip()


def parse_llm_json(text: str) -> Any:
    """strip_code_fence + json.loads.

    Raises:
        json.JSONDecodeError: reply is not JSON
        RecursionError: reply nests deeper than the decoder allows
    """
    return json.loads(strip_code_fence(text))
