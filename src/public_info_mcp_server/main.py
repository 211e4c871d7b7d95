#!/usr/bin/env python
import logging
import sys
from typing import Any, Dict, List, Optional

import anyio
import mcp.types as types
from mcp.server.lowlevel import Server
from mcp.server.stdio import stdio_server

from .config_loader import ServerConfig, load_config_from_env
from .core.dispatcher import Dispatcher
from .core.registry import ToolRegistry
from .infra.http_fetch import ResourceFetcher
from .tools.blog_tool import build_blog_tool
from .tools.github_tool import build_github_tool
from .tools.mastodon_tool import build_mastodon_tool
from .tools.wiki_tools import build_fetch_wiki_page_tool, build_wiki_listing_tool


def create_registry(config: Optional[ServerConfig] = None, fetcher: Optional[ResourceFetcher] = None) -> ToolRegistry:
    """Create the read-only registry with all tools, in listing order."""
    cfg = config or load_config_from_env()
    fetch = fetcher or ResourceFetcher(user_agent=cfg.user_agent, timeout=cfg.fetch_timeout)
    return ToolRegistry(
        [
            build_fetch_wiki_page_tool(cfg, fetch),
            build_wiki_listing_tool(cfg, fetch),
            build_blog_tool(cfg, fetch),
            build_github_tool(cfg, fetch),
            build_mastodon_tool(cfg, fetch),
        ]
    )


def create_dispatcher(config: Optional[ServerConfig] = None, fetcher: Optional[ResourceFetcher] = None) -> Dispatcher:
    cfg = config or load_config_from_env()
    return Dispatcher(create_registry(cfg, fetcher), cfg)


def create_mcp_server(config: Optional[ServerConfig] = None, registry: Optional[ToolRegistry] = None) -> Server:
    """Create an MCP SDK server exposing the same tools over stdio.

    Invalid calls and tool-level failures are raised from ``call_tool``;
    the SDK reports both to the client as ``isError`` results.
    """
    cfg = config or load_config_from_env()
    tools = registry or create_registry(cfg)
    server = Server(cfg.server_name, version=cfg.server_version)

    @server.list_tools()
    async def list_tools() -> List[types.Tool]:
        return [
            types.Tool(name=tool.name, description=tool.description, inputSchema=tool.input_schema)
            for tool in tools
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Dict[str, Any]) -> List[types.TextContent]:
        tool = tools.get(name)
        if tool is None:
            raise ValueError(f"Unknown tool: {name}")
        if not tool.validate(arguments):
            raise ValueError(f"Invalid arguments for {name} tool. Expected: {tool.arguments_hint or 'no arguments'}")
        result = await tool.run(arguments)
        if result.is_error:
            raise RuntimeError(result.text)
        return [types.TextContent(type="text", text=result.text)]

    return server


def run(config: Optional[ServerConfig] = None) -> None:
    """Run MCP server using stdio transport (MCP clients connect via pipes)."""

    cfg = config or load_config_from_env()
    # stdout carries the protocol, so logs go to stderr
    logging.basicConfig(level=cfg.log_level.upper(), stream=sys.stderr)
    server = create_mcp_server(cfg)

    async def _serve():
        async with stdio_server() as (read_stream, write_stream):
            await server.run(read_stream, write_stream, server.create_initialization_options())

    anyio.run(_serve)


if __name__ == "__main__":
    run()
