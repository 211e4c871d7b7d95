import logging
from dataclasses import dataclass
from typing import List, Optional
from xml.etree import ElementTree

from pydantic import StrictStr

from ..config_loader import ServerConfig
from ..core.models import ToolResult, error_result, fetch_error_result, text_result
from ..core.renderer import render_html
from ..core.tool_base import ToolInput, ToolSpec
from ..infra.http_fetch import ResourceFetcher

logger = logging.getLogger(__name__)

_ATOM = "{http://www.w3.org/2005/Atom}"


class BlogPostsInput(ToolInput):
    slug: Optional[StrictStr] = None


@dataclass(frozen=True)
class BlogPost(object):
    title: str
    link: str
    published: Optional[str] = None


def _text(element, tag: str) -> str:
    return (element.findtext(tag) or "").strip()


def _atom_link(entry) -> str:
    links = entry.findall(_ATOM + "link")
    for link in links:
        if link.get("rel", "alternate") == "alternate":
            return link.get("href", "")
    return links[0].get("href", "") if links else ""


def parse_feed(xml_text: str) -> List[BlogPost]:
    """Read posts from an RSS 2.0 or Atom feed.

    Raises ``ElementTree.ParseError`` on malformed XML.
    """
    root = ElementTree.fromstring(xml_text)
    posts = []
    for item in root.iter("item"):
        posts.append(
            BlogPost(
                title=_text(item, "title") or "(untitled)",
                link=_text(item, "link"),
                published=_text(item, "pubDate") or None,
            )
        )
    for entry in root.iter(_ATOM + "entry"):
        posts.append(
            BlogPost(
                title=_text(entry, _ATOM + "title") or "(untitled)",
                link=_atom_link(entry),
                published=_text(entry, _ATOM + "published") or _text(entry, _ATOM + "updated") or None,
            )
        )
    return posts


def format_posts(posts: List[BlogPost]) -> str:
    if not posts:
        return "Found 0 blog posts."
    lines = [f"Found {len(posts)} blog posts:"]
    for post in posts:
        line = f"- {post.title} ({post.link})"
        if post.published:
            line += f", {post.published}"
        lines.append(line)
    return "\n".join(lines)


def build_blog_tool(config: ServerConfig, fetcher: ResourceFetcher) -> ToolSpec:
    """Build the blog tool: one post by slug, or the feed listing."""

    async def _fetch_post(slug: str) -> ToolResult:
        url = f"{config.blog_base_url.rstrip('/')}/{slug.strip('/')}"
        fetch = await fetcher.fetch(url, resource="blog post")
        if not fetch.success:
            return fetch_error_result(fetch, f"Blog post not found: {slug}", "blog post")
        return text_result(render_html(fetch.body or ""))

    async def _fetch_feed() -> ToolResult:
        fetch = await fetcher.fetch(config.blog_feed_url, resource="blog feed")
        if not fetch.success:
            return fetch_error_result(fetch, f"Blog feed not found at {config.blog_feed_url}", "blog feed")
        try:
            posts = parse_feed(fetch.body or "")
        except ElementTree.ParseError as exc:
            logger.warning("Unparseable blog feed at %s: %s", config.blog_feed_url, exc)
            return error_result(f"Failed to parse blog feed: {exc}")
        return text_result(format_posts(posts))

    async def getblogposts(input: BlogPostsInput) -> ToolResult:
        if input.slug is not None:
            return await _fetch_post(input.slug)
        return await _fetch_feed()

    return ToolSpec(
        name="getblogposts",
        description=(
            "Read the blog. With a slug, returns that post as plain text; "
            "without one, lists recent posts from the blog's feed."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "slug": {
                    "type": "string",
                    "description": "Optional post slug or path (e.g., '2024/05/hello-world')",
                },
            },
        },
        args_model=BlogPostsInput,
        handler=getblogposts,
        arguments_hint="slug (optional string)",
    )
