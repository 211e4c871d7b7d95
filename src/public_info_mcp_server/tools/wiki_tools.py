import logging
import re
from dataclasses import dataclass
from typing import List, Optional
from urllib.parse import urlparse

from pydantic import StrictStr

from ..config_loader import ServerConfig
from ..core.models import ToolResult, error_result, fetch_error_result, text_result
from ..core.renderer import render_html
from ..core.tool_base import ToolInput, ToolSpec
from ..infra.http_fetch import ResourceFetcher

logger = logging.getLogger(__name__)

_SITEMAP_URL_RE = re.compile(
    r"<url>\s*<loc>(.*?)</loc>(?:\s*<lastmod>(.*?)</lastmod>)?",
    re.DOTALL,
)


class FetchWikiPageInput(ToolInput):
    path: StrictStr


class WikiListingInput(ToolInput):
    """Takes no arguments."""


@dataclass(frozen=True)
class WikiPage(object):
    path: str
    url: str
    last_modified: Optional[str] = None


def wiki_page_url(base_url: str, path: str) -> str:
    """Join ``path`` onto the wiki origin, ignoring stray slashes."""
    return f"{base_url.rstrip('/')}/{path.strip('/')}"


def parse_sitemap(xml_text: str, base_url: str) -> List[WikiPage]:
    host = urlparse(base_url).netloc
    prefix_re = re.compile(r"^https?://" + re.escape(host) + r"/?")
    pages = []
    for match in _SITEMAP_URL_RE.finditer(xml_text):
        full_url = match.group(1).strip()
        last_modified = (match.group(2) or "").strip() or None
        path = prefix_re.sub("", full_url) or "/"
        pages.append(WikiPage(path=path, url=full_url, last_modified=last_modified))
    return pages


def format_listing(pages: List[WikiPage]) -> str:
    if not pages:
        return "Found 0 wiki pages."
    lines = [f"Found {len(pages)} wiki pages:"]
    for page in pages:
        line = f"- {page.path} ({page.url})"
        if page.last_modified:
            line += f", last modified {page.last_modified}"
        lines.append(line)
    return "\n".join(lines)


def build_fetch_wiki_page_tool(config: ServerConfig, fetcher: ResourceFetcher) -> ToolSpec:
    """Build the single-page wiki tool."""

    async def fetchwikipage(input: FetchWikiPageInput) -> ToolResult:
        url = wiki_page_url(config.wiki_base_url, input.path)
        logger.info("Wiki page request: path=%r url=%s", input.path, url)
        fetch = await fetcher.fetch(url, resource="wiki page")
        if not fetch.success:
            return fetch_error_result(fetch, f"Wiki page not found at path: {input.path}", "wiki page")
        return text_result(render_html(fetch.body or ""))

    return ToolSpec(
        name="fetchwikipage",
        description=(
            f"Fetch content from a wiki page at {urlparse(config.wiki_base_url).netloc}. "
            "Retrieves the specified page path and returns it as plain text."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "path": {
                    "type": "string",
                    "description": "The path of the wiki page to fetch (e.g., 'home', 'about', 'docs/guide')",
                },
            },
            "required": ["path"],
        },
        args_model=FetchWikiPageInput,
        handler=fetchwikipage,
        arguments_hint="path (string)",
    )


def build_wiki_listing_tool(config: ServerConfig, fetcher: ResourceFetcher) -> ToolSpec:
    """Build the sitemap-backed wiki listing tool."""

    async def getwikilisting(input: WikiListingInput) -> ToolResult:
        url = wiki_page_url(config.wiki_base_url, "sitemap.xml")
        fetch = await fetcher.fetch(url, resource="sitemap")
        if not fetch.success:
            return error_result(f"Failed to fetch wiki listing: {fetch.error}")
        pages = parse_sitemap(fetch.body or "", config.wiki_base_url)
        logger.info("Wiki listing: %d pages from %s", len(pages), url)
        return text_result(format_listing(pages))

    return ToolSpec(
        name="getwikilisting",
        description=(
            "Get a listing of all available wiki pages from the sitemap. "
            "Returns each page's path, URL and last-modified date."
        ),
        input_schema={
            "type": "object",
            "properties": {},
        },
        args_model=WikiListingInput,
        handler=getwikilisting,
    )
