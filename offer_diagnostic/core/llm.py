"""Helpers for reading structured output from Claude responses."""

import json
import re
from typing import Any


def _strip_llm_fences(raw_output: str) -> str:
    """Strip markdown code fences from LLM output.

    Handles: ```json ... ```, ``` ... ```, leading/trailing whitespace.
    """
    cleaned = raw_output.strip()

    fence_match = re.search(r"```(?:json)?\s*\n?(.*?)```", cleaned, re.DOTALL)
    if fence_match:
        return fence_match.group(1).strip()

    if cleaned.startswith("```json"):
        cleaned = cleaned[7:]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def extract_tool_input(response: Any, tool_name: str) -> dict | None:
    """
    Return the input of the first tool_use block named ``tool_name``.

    Falls back to a JSON text block when the model answered in prose
    instead of calling the tool. Returns None when neither is present.
    """
    for block in response.content:
        if getattr(block, "type", None) == "tool_use" and block.name == tool_name:
            return block.input

    for block in response.content:
        if getattr(block, "type", None) == "text" and block.text.strip():
            try:
                parsed = json.loads(_strip_llm_fences(block.text))
            except json.JSONDecodeError:
                return None
            return parsed if isinstance(parsed, dict) else None

    return None
