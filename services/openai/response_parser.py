"""Helpers to parse Responses API outputs."""

from typing import Any, Dict, Optional


def find_function_call(response: Any, *, tool_name: str) -> Optional[Any]:
    """Return the first function_call output item for the specified tool name."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) == "function_call" and getattr(item, "name", None) == tool_name:
            return item
    return None


def parse_function_call(response: Any, *, tool_name: str) -> str:
    """Extract the raw JSON arguments of the function call for the specified tool name."""
    item = find_function_call(response, tool_name=tool_name)
    if item is None:
        raise RuntimeError(f"No function_call output for '{tool_name}' found in Responses API output.")
    return getattr(item, "arguments", None) or ""


def extract_refusal(response: Any) -> Optional[str]:
    """Return the model's refusal text, if it declined to answer."""
    for item in getattr(response, "output", None) or []:
        if getattr(item, "type", None) != "message":
            continue
        for content in getattr(item, "content", None) or []:
            if getattr(content, "type", None) == "refusal":
                return getattr(content, "refusal", None) or "Request declined."
    return None


def extract_usage(response: Any) -> Dict[str, Optional[int]]:
    """Return token usage information from the response, if present."""
    usage = getattr(response, "usage", None)
    return {
        "input_tokens": getattr(usage, "input_tokens", None) if usage else None,
        "output_tokens": getattr(usage, "output_tokens", None) if usage else None,
    }
