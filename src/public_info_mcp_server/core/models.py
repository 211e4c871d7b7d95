from dataclasses import dataclass
from typing import Any, Dict


@dataclass(frozen=True)
class ToolResult(object):
    """Represent the single text item a tool hands back to the caller."""

    text: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"content": [{"type": "text", "text": self.text}]}
        if self.is_error:
            result["isError"] = True
        return result


def text_result(text: str) -> ToolResult:
    return ToolResult(text=text)


def error_result(message: str) -> ToolResult:
    return ToolResult(text=message, is_error=True)


def fetch_error_result(fetch, not_found_message: str, resource: str) -> ToolResult:
    """Turn a failed fetch into a tool-level error result."""
    if fetch.not_found:
        return error_result(not_found_message)
    return error_result(f"Failed to fetch {resource}: {fetch.error}")
