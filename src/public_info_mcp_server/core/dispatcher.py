import logging
from typing import Any, Dict, Optional

from ..config_loader import ServerConfig
from ..mcp_protocol import (
    PROTOCOL_VERSION,
    ErrorCodes,
    MCPRequest,
    ProtocolError,
    make_error_response,
    make_result_response,
    parse_request,
    recover_request_id,
)
from .registry import ToolRegistry

log = logging.getLogger(__name__)

NOTIFICATION_INITIALIZED = "notifications/initialized"


class Dispatcher(object):
    """Route one JSON-RPC envelope to the server's methods and tools.

    :meth:`handle` is the only entry point. It never raises: routing and
    validation failures come back as JSON-RPC error envelopes, and a
    notification comes back as ``None`` so the transport can reply with an
    empty body.

    With ``flat_error_codes`` every protocol failure is reported as
    ``INTERNAL_ERROR``; otherwise the dedicated JSON-RPC codes are used.
    """

    def __init__(self, registry: ToolRegistry, config: ServerConfig):
        self._registry = registry
        self._config = config

    @property
    def registry(self) -> ToolRegistry:
        return self._registry

    async def handle(self, body: Any) -> Optional[Dict[str, Any]]:
        try:
            request = parse_request(body)
            log.debug("Dispatching method=%s", request.method)
            result = await self._route(request)
            if result is None:
                # notifications never receive a reply
                return None
            return make_result_response(request.request_id, result)
        except ProtocolError as exc:
            log.info("Protocol error (%s): %s", exc.code, exc.message)
            return make_error_response(recover_request_id(body), exc.message, code=self._code(exc.code))
        except Exception as exc:  # pylint: disable=broad-except
            log.exception("Unhandled error while dispatching request")
            return make_error_response(
                recover_request_id(body),
                f"Internal error: {exc}",
                code=ErrorCodes.INTERNAL_ERROR,
            )

    def _code(self, code: int) -> int:
        return ErrorCodes.INTERNAL_ERROR if self._config.flat_error_codes else code

    async def _route(self, request: MCPRequest) -> Optional[Dict[str, Any]]:
        method = request.method
        if method == "tools/list":
            return self._list_tools()
        if method == "tools/call":
            return await self._call_tool(request.params)
        if method == "initialize":
            return self._initialize()
        if method == NOTIFICATION_INITIALIZED:
            return None
        raise ProtocolError(ErrorCodes.METHOD_NOT_FOUND, f"Unknown method: {method}")

    def _initialize(self) -> Dict[str, Any]:
        return {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {
                "tools": {"listChanged": False},
                "prompts": {"listChanged": False},
                "resources": {"listChanged": False},
            },
            "serverInfo": {
                "name": self._config.server_name,
                "version": self._config.server_version,
            },
        }

    def _list_tools(self) -> Dict[str, Any]:
        return {"tools": self._registry.list_descriptions()}

    async def _call_tool(self, params: Any) -> Dict[str, Any]:
        if params is None:
            params = {}
        if not isinstance(params, dict):
            raise ProtocolError(ErrorCodes.INVALID_PARAMS, "Invalid params for tools/call: expected an object")
        name = params.get("name")
        if not name:
            raise ProtocolError(ErrorCodes.INVALID_PARAMS, "Missing tool name in request")
        if not isinstance(name, str):
            raise ProtocolError(ErrorCodes.INVALID_PARAMS, "Invalid tool name in request: expected a string")

        tool = self._registry.get(name)
        if tool is None:
            raise ProtocolError(ErrorCodes.INVALID_PARAMS, f"Unknown tool: {name}")

        arguments = params.get("arguments")
        if not tool.validate(arguments):
            message = f"Invalid arguments for {name} tool."
            if tool.arguments_hint:
                message += f" Expected: {tool.arguments_hint}"
            raise ProtocolError(ErrorCodes.INVALID_PARAMS, message)

        log.info("Calling tool %s", name)
        result = await tool.run(arguments)
        if result.is_error:
            log.info("Tool %s returned an error result: %s", name, result.text)
        return result.to_dict()
