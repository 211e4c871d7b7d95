import logging
from typing import Any, Dict, List, Optional

import anyio
from pydantic import StrictStr

from ..config_loader import ServerConfig
from ..core.models import ToolResult, error_result, fetch_error_result, text_result
from ..core.renderer import render_html
from ..core.tool_base import ToolInput, ToolSpec
from ..infra.http_fetch import FetchResult, ResourceFetcher

logger = logging.getLogger(__name__)

GITHUB_JSON = "application/vnd.github+json"
GITHUB_HTML = "application/vnd.github.html"


class GithubProfileInput(ToolInput):
    repo: Optional[StrictStr] = None


def format_profile(profile: Dict[str, Any], repos: List[Dict[str, Any]]) -> str:
    login = profile.get("login") or ""
    name = profile.get("name") or login
    lines = [f"GitHub profile: {name} (@{login})"]
    if profile.get("bio"):
        lines.append(f"Bio: {profile['bio']}")
    lines.append(
        f"Followers: {profile.get('followers', 0)} | Public repos: {profile.get('public_repos', 0)}"
    )
    if profile.get("blog"):
        lines.append(f"Website: {profile['blog']}")
    if profile.get("html_url"):
        lines.append(f"Profile: {profile['html_url']}")
    lines.append("")
    lines.append(f"Found {len(repos)} repositories:")
    for repo in repos:
        details = [repo.get("language") or "unknown language", f"{repo.get('stargazers_count', 0)} stars"]
        if repo.get("fork"):
            details.append("fork")
        line = f"- {repo.get('name', '?')} [{', '.join(details)}]"
        if repo.get("description"):
            line += f": {repo['description']}"
        lines.append(line)
    return "\n".join(lines)


def build_github_tool(config: ServerConfig, fetcher: ResourceFetcher) -> ToolSpec:
    """Build the code-hosting tool: one repository README, or profile plus repositories."""

    api = config.github_api_url.rstrip("/")
    user = config.github_user

    async def _fetch_readme(repo: str) -> ToolResult:
        url = f"{api}/repos/{user}/{repo.strip('/')}/readme"
        fetch = await fetcher.fetch(url, resource="repository README", accept=GITHUB_HTML)
        if not fetch.success:
            return fetch_error_result(fetch, f"Repository or README not found: {repo}", "repository README")
        return text_result(render_html(fetch.body or ""))

    async def _fetch_overview() -> ToolResult:
        fetches: Dict[str, FetchResult] = {}

        async def _grab(key: str, url: str, resource: str) -> None:
            fetches[key] = await fetcher.fetch(url, resource=resource, accept=GITHUB_JSON)

        # profile and repositories are independent: fetch both, then merge
        async with anyio.create_task_group() as tg:
            tg.start_soon(_grab, "profile", f"{api}/users/{user}", "GitHub profile")
            tg.start_soon(_grab, "repos", f"{api}/users/{user}/repos?sort=updated&per_page=100", "repository list")

        profile_fetch, repos_fetch = fetches["profile"], fetches["repos"]
        if not profile_fetch.success:
            return fetch_error_result(profile_fetch, f"GitHub user not found: {user}", "GitHub profile")
        if not repos_fetch.success:
            return fetch_error_result(repos_fetch, f"Repositories not found for GitHub user: {user}", "repository list")
        try:
            profile = profile_fetch.json()
            repos = repos_fetch.json()
        except ValueError as exc:
            return error_result(f"Invalid JSON from GitHub: {exc}")
        if not isinstance(profile, dict) or not isinstance(repos, list):
            return error_result("Unexpected response shape from GitHub")
        logger.info("GitHub overview for %s: %d repositories", user, len(repos))
        return text_result(format_profile(profile, [r for r in repos if isinstance(r, dict)]))

    async def getgithubprofile(input: GithubProfileInput) -> ToolResult:
        if input.repo is not None:
            return await _fetch_readme(input.repo)
        return await _fetch_overview()

    return ToolSpec(
        name="getgithubprofile",
        description=(
            f"Get the GitHub profile of {user}. With a repo name, returns that "
            "repository's README as plain text; without one, summarizes the "
            "profile and lists public repositories."
        ),
        input_schema={
            "type": "object",
            "properties": {
                "repo": {
                    "type": "string",
                    "description": "Optional repository name (e.g., 'dotfiles')",
                },
            },
        },
        args_model=GithubProfileInput,
        handler=getgithubprofile,
        arguments_hint="repo (optional string)",
    )
