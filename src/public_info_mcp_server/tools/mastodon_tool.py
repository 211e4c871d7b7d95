import logging
import math
from typing import Any, Dict, List, Optional, Union
from urllib.parse import urlencode

from pydantic import StrictFloat, StrictInt, StrictStr

from ..config_loader import ServerConfig
from ..core.models import ToolResult, error_result, fetch_error_result, text_result
from ..core.renderer import render_html
from ..core.tool_base import ToolInput, ToolSpec
from ..infra.http_fetch import ResourceFetcher

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10
MIN_LIMIT = 1
MAX_LIMIT = 40


class MastodonPostsInput(ToolInput):
    id: Optional[StrictStr] = None
    limit: Optional[Union[StrictInt, StrictFloat]] = None


def clamp_limit(value: Optional[float]) -> int:
    """Bring a caller-supplied page size into ``[MIN_LIMIT, MAX_LIMIT]``."""
    if value is None or not math.isfinite(value):
        return DEFAULT_LIMIT
    return max(MIN_LIMIT, min(MAX_LIMIT, int(value)))


def render_status(status: Dict[str, Any]) -> str:
    shown = status.get("reblog") if isinstance(status.get("reblog"), dict) else status
    text = render_html(shown.get("content") or "")
    if shown.get("spoiler_text"):
        text = f"CW: {shown['spoiler_text']}\n{text}"
    if shown is not status:
        author = (shown.get("account") or {}).get("acct", "?")
        text = f"Boosted from @{author}:\n{text}"
    return text


def format_statuses(acct: str, statuses: List[Dict[str, Any]]) -> str:
    lines = [f"Found {len(statuses)} posts by @{acct}:"]
    for status in statuses:
        lines.append(f"- {status.get('created_at', '')} {status.get('url') or status.get('uri', '')}".rstrip())
        for text_line in render_status(status).splitlines():
            lines.append(f"  {text_line}" if text_line else "")
    return "\n".join(lines)


def build_mastodon_tool(config: ServerConfig, fetcher: ResourceFetcher) -> ToolSpec:
    """Build the social tool: one post by id, or the account's recent posts."""

    api = config.mastodon_instance.rstrip("/") + "/api/v1"
    account = config.mastodon_account

    async def _fetch_status(status_id: str) -> ToolResult:
        fetch = await fetcher.fetch(f"{api}/statuses/{status_id}", resource="post")
        if not fetch.success:
            return fetch_error_result(fetch, f"Post not found: {status_id}", "post")
        try:
            status = fetch.json()
        except ValueError as exc:
            return error_result(f"Invalid JSON from Mastodon: {exc}")
        if not isinstance(status, dict):
            return error_result("Unexpected response shape from Mastodon")
        return text_result(render_status(status))

    async def _fetch_timeline(limit: int) -> ToolResult:
        # statuses are keyed by the account id, so the lookup must finish first
        lookup = await fetcher.fetch(f"{api}/accounts/lookup?{urlencode({'acct': account})}", resource="account lookup")
        if not lookup.success:
            return fetch_error_result(lookup, f"Mastodon account not found: {account}", "account lookup")
        try:
            found = lookup.json()
        except ValueError as exc:
            return error_result(f"Invalid JSON from Mastodon: {exc}")
        if not isinstance(found, dict) or not found.get("id"):
            return error_result("Unexpected response shape from Mastodon")

        query = urlencode({"limit": limit, "exclude_replies": "true"})
        fetch = await fetcher.fetch(f"{api}/accounts/{found['id']}/statuses?{query}", resource="posts")
        if not fetch.success:
            return fetch_error_result(fetch, f"Posts not found for Mastodon account: {account}", "posts")
        try:
            statuses = fetch.json()
        except ValueError as exc:
            return error_result(f"Invalid JSON from Mastodon: {exc}")
        if not isinstance(statuses, list):
            return error_result("Unexpected response shape from Mastodon")
        acct = found.get("acct") or account
        logger.info("Mastodon timeline for %s: %d posts (limit %d)", acct, len(statuses), limit)
        return text_result(format_statuses(acct, [s for s in statuses if isinstance(s, dict)]))

    async def getmastodonposts(input: MastodonPostsInput) -> ToolResult:
        if input.id is not None:
            return await _fetch_status(input.id)
        return await _fetch_timeline(clamp_limit(input.limit))

    return ToolSpec(
        name="getmastodonposts",
        description=(
            f"Get posts from the Mastodon account @{account}. With an id, returns "
            "that post as plain text; without one, lists recent posts."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "id": {
                    "type": "string",
                    "description": "Optional post id",
                },
                "limit": {
                    "type": "number",
                    "description": (
                        f"Number of recent posts to list ({MIN_LIMIT}-{MAX_LIMIT}, default {DEFAULT_LIMIT})"
                    ),
                },
            },
        },
        args_model=MastodonPostsInput,
        handler=getmastodonposts,
        arguments_hint="id (optional string), limit (optional number)",
    )
