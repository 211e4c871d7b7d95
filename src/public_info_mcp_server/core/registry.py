from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .tool_base import ToolSpec


class ToolRegistry(object):
    """Read-only, ordered set of tools built once at startup."""

    def __init__(self, tools: Iterable[ToolSpec]):
        self._tools: Tuple[ToolSpec, ...] = tuple(tools)
        self._by_name: Dict[str, ToolSpec] = {}
        for tool in self._tools:
            if tool.name in self._by_name:
                raise ValueError(f"Duplicate tool name: {tool.name}")
            self._by_name[tool.name] = tool

    def __iter__(self) -> Iterator[ToolSpec]:
        return iter(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._by_name

    @property
    def names(self) -> List[str]:
        return [tool.name for tool in self._tools]

    def get(self, name: str) -> Optional[ToolSpec]:
        """Return the tool registered under ``name``, if any."""
        return self._by_name.get(name)

    def list_descriptions(self) -> List[dict]:
        """Return tool descriptors in registration order for ``tools/list``."""
        return [tool.describe().to_dict() for tool in self._tools]
