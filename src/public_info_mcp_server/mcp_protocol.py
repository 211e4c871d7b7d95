#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""JSON-RPC 2.0 envelope helpers for the MCP dispatcher."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

JSONRPC_VERSION = "2.0"
PROTOCOL_VERSION = "2024-11-05"

NO_ID = object()


class ErrorCodes:
    """JSON-RPC error codes, plus one custom code for transport failures."""

    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603
    TRANSPORT_ERROR = -32000


class ProtocolError(Exception):
    """A malformed call, reported to the caller as a JSON-RPC error."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


@dataclass(frozen=True)
class MCPRequest:
    method: str
    request_id: Any = NO_ID
    params: Optional[Dict[str, Any]] = None


@dataclass(frozen=True)
class MCPToolDescription:
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


def is_request_id(value: Any) -> bool:
    # bool is an int subclass but never a valid id
    if isinstance(value, bool):
        return False
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, (str, int))


def parse_request(body: Any) -> MCPRequest:
    """Validate the outer envelope and return it as an :class:`MCPRequest`.

    Raises :class:`ProtocolError` with ``INVALID_REQUEST`` when the body is
    not an object, has no non-empty string ``method`` or carries an ``id``
    that is neither a string nor a number.
    """
    if not isinstance(body, dict):
        raise ProtocolError(ErrorCodes.INVALID_REQUEST, "Invalid MCP request format")
    method = body.get("method")
    if not isinstance(method, str) or not method:
        raise ProtocolError(ErrorCodes.INVALID_REQUEST, "Invalid MCP request format")
    request_id = body.get("id", NO_ID)
    if request_id is not NO_ID and not is_request_id(request_id):
        raise ProtocolError(ErrorCodes.INVALID_REQUEST, "Invalid MCP request format")
    params = body.get("params")
    return MCPRequest(method=method, request_id=request_id, params=params)


def recover_request_id(body: Any) -> Any:
    """Best-effort id lookup on a body that failed somewhere downstream."""
    if isinstance(body, dict):
        request_id = body.get("id", NO_ID)
        if request_id is not NO_ID and is_request_id(request_id):
            return request_id
    return NO_ID


def make_error_response(request_id: Any, message: str, code: int = ErrorCodes.INTERNAL_ERROR) -> Dict[str, Any]:
    response: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
    if request_id is not NO_ID:
        response["id"] = request_id
    response["error"] = {
        "code": code,
        "message": message,
    }
    return response


def make_result_response(request_id: Any, result: Dict[str, Any]) -> Dict[str, Any]:
    response: Dict[str, Any] = {"jsonrpc": JSONRPC_VERSION}
    if request_id is not NO_ID:
        response["id"] = request_id
    response["result"] = result
    return response


def make_transport_error(message: str, code: int = ErrorCodes.TRANSPORT_ERROR) -> Dict[str, Any]:
    return {
        "error": {
            "code": code,
            "message": message,
        },
    }
