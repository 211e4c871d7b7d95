from typing import Dict, List, Optional

import pytest

from public_info_mcp_server.config_loader import ServerConfig
from public_info_mcp_server.core.dispatcher import Dispatcher
from public_info_mcp_server.infra.http_fetch import FetchResult
from public_info_mcp_server.main import create_dispatcher, create_registry

WIKI = "https://wiki.example.org"
BLOG = "https://blog.example.org"
GITHUB = "https://api.github.test"
MASTODON = "https://social.example.org"


class FakeFetcher(object):
    """Serve canned FetchResults by URL and record every call."""

    def __init__(self, routes: Optional[Dict[str, FetchResult]] = None):
        self.routes: Dict[str, FetchResult] = dict(routes or {})
        self.calls: List[str] = []

    def ok(self, url: str, body: str) -> None:
        self.routes[url] = FetchResult(url=url, status=200, body=body)

    def fail(self, url: str, status: int, reason: str = "Not Found") -> None:
        self.routes[url] = FetchResult(url=url, status=status, error=f"HTTP {status}: {reason}")

    async def fetch(self, url: str, resource: str = "resource", accept: Optional[str] = None) -> FetchResult:
        self.calls.append(url)
        if url in self.routes:
            return self.routes[url]
        return FetchResult(url=url, status=404, error="HTTP 404: Not Found")


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture
def config() -> ServerConfig:
    return ServerConfig(
        wiki_base_url=WIKI,
        blog_base_url=BLOG,
        github_api_url=GITHUB,
        github_user="octo",
        mastodon_instance=MASTODON,
        mastodon_account="someone",
    )


@pytest.fixture
def fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def registry(config, fetcher):
    return create_registry(config, fetcher)


@pytest.fixture
def dispatcher(config, fetcher) -> Dispatcher:
    return create_dispatcher(config, fetcher)
