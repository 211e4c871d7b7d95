#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""Lightweight config loader for running the MCP server from the environment."""

from __future__ import annotations

import os
from dataclasses import dataclass


@dataclass(frozen=True)
class ServerConfig:
    server_host: str = "127.0.0.1"
    server_port: int = 8000
    server_name: str = "Casey's Public Info MCP"
    server_version: str = "1.0.0"
    user_agent: str = "CaseyMCP/1.0"
    fetch_timeout: float = 10.0
    flat_error_codes: bool = False
    wiki_base_url: str = "https://cag.wiki"
    blog_base_url: str = "https://blog.cag.wiki"
    blog_feed_path: str = "/feed.xml"
    github_api_url: str = "https://api.github.com"
    github_user: str = "caseyg"
    mastodon_instance: str = "https://social.coop"
    mastodon_account: str = "cag"
    log_level: str = "info"

    @property
    def blog_feed_url(self) -> str:
        return self.blog_base_url.rstrip("/") + "/" + self.blog_feed_path.lstrip("/")


def _env(name: str, default: str) -> str:
    value = (os.environ.get(name) or "").strip()
    return value or default


def _env_flag(name: str) -> bool:
    return _env(name, "").lower() in ("1", "true", "yes", "on")


def load_config_from_env() -> ServerConfig:
    port = int(_env("MCP_HTTP_PORT", "8000"))
    timeout = float(_env("MCP_FETCH_TIMEOUT", "10"))
    if timeout <= 0:
        raise ValueError(f"MCP_FETCH_TIMEOUT must be positive, got {timeout}")
    return ServerConfig(
        server_host=_env("MCP_HTTP_HOST", "127.0.0.1"),
        server_port=port,
        server_name=_env("MCP_SERVER_NAME", ServerConfig.server_name),
        server_version=_env("MCP_SERVER_VERSION", ServerConfig.server_version),
        user_agent=_env("MCP_USER_AGENT", ServerConfig.user_agent),
        fetch_timeout=timeout,
        flat_error_codes=_env_flag("MCP_FLAT_ERROR_CODES"),
        wiki_base_url=_env("WIKI_BASE_URL", ServerConfig.wiki_base_url),
        blog_base_url=_env("BLOG_BASE_URL", ServerConfig.blog_base_url),
        blog_feed_path=_env("BLOG_FEED_PATH", ServerConfig.blog_feed_path),
        github_api_url=_env("GITHUB_API_URL", ServerConfig.github_api_url),
        github_user=_env("GITHUB_USER", ServerConfig.github_user),
        mastodon_instance=_env("MASTODON_INSTANCE", ServerConfig.mastodon_instance),
        mastodon_account=_env("MASTODON_ACCOUNT", ServerConfig.mastodon_account),
        log_level=_env("MCP_LOG_LEVEL", ServerConfig.log_level).lower(),
    )
