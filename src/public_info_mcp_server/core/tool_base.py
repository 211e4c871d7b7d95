from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Type

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..mcp_protocol import MCPToolDescription
from .models import ToolResult

ToolHandler = Callable[[BaseModel], Awaitable[ToolResult]]


class ToolInput(BaseModel):
    """Strict base for tool arguments: optional fields may be absent, never ``null``."""

    model_config = ConfigDict(strict=True)

    @field_validator("*", mode="before")
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        if value is None:
            raise ValueError("null is not a valid value")
        return value


@dataclass(frozen=True)
class ToolSpec(object):
    """Pair a tool's public description with its validator and handler.

    ``args_model`` is a strict pydantic model mirroring ``input_schema``;
    :meth:`validate` is the pure predicate the dispatcher calls before
    :meth:`run`.
    """

    name: str
    description: str
    input_schema: Dict[str, Any]
    args_model: Type[BaseModel]
    handler: ToolHandler
    arguments_hint: str = ""

    @property
    def required(self) -> tuple:
        return tuple(self.input_schema.get("required", ()))

    def describe(self) -> MCPToolDescription:
        return MCPToolDescription(
            name=self.name,
            description=self.description,
            input_schema=self.input_schema,
        )

    def _coerce_bundle(self, arguments: Any) -> Any:
        # tools without required fields accept a missing bundle
        if not self.required and not isinstance(arguments, dict):
            return {}
        return arguments

    def validate(self, arguments: Any) -> bool:
        """Return True when ``arguments`` fits the declared contract."""
        bundle = self._coerce_bundle(arguments)
        if not isinstance(bundle, dict):
            return False
        try:
            self.args_model.model_validate(bundle)
        except ValidationError:
            return False
        return True

    async def run(self, arguments: Any) -> ToolResult:
        """Parse already validated ``arguments`` and invoke the handler."""
        parsed = self.args_model.model_validate(self._coerce_bundle(arguments))
        return await self.handler(parsed)
