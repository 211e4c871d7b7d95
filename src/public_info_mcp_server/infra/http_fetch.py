#!/usr/bin/env python
# vim:fileencoding=UTF-8:ts=4:sw=4:sta:et:sts=4:ai

"""Bounded-time HTTP GET used by every tool to reach its external source."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Dict, Optional

import anyio
import requests

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class FetchResult:
    url: str
    status: int
    body: Optional[str] = None
    error: Optional[str] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def not_found(self) -> bool:
        return self.status == 404

    def json(self) -> Any:
        """Decode the body as JSON, raising ``ValueError`` when it is not."""
        return json.loads(self.body or "")


class ResourceFetcher(object):
    """Fetch external resources with a fixed timeout and client header.

    Failures never raise: timeouts, connection errors, non-2xx statuses and
    any other ``requests`` error are folded into a :class:`FetchResult` whose
    ``error`` carries a human-readable message.
    """

    def __init__(self, user_agent: str, timeout: float = 10.0, session: Optional[requests.Session] = None):
        self._user_agent = user_agent
        self._timeout = timeout
        self._session = session

    def _timeout_result(self, url: str, resource: str) -> FetchResult:
        log.warning("Timed out fetching %s after %ss", url, self._timeout)
        return FetchResult(
            url=url,
            status=0,
            error=f"Request timeout - the {resource} took too long to respond",
        )

    def fetch_sync(self, url: str, resource: str = "resource", accept: Optional[str] = None) -> FetchResult:
        headers: Dict[str, str] = {"User-Agent": self._user_agent}
        if accept:
            headers["Accept"] = accept
        getter = self._session.get if self._session is not None else requests.get
        log.debug("Fetching %s from %s", resource, url)
        try:
            response = getter(url, headers=headers, timeout=self._timeout)
        except requests.Timeout:
            return self._timeout_result(url, resource)
        except requests.ConnectionError as exc:
            log.warning("Network error fetching %s: %s", url, exc)
            return FetchResult(url=url, status=0, error=f"Network error: {exc}")
        except requests.RequestException as exc:
            log.warning("Fetching %s failed: %s", url, exc)
            return FetchResult(url=url, status=0, error=str(exc))

        if not response.ok:
            log.warning("Fetching %s returned HTTP %s", url, response.status_code)
            return FetchResult(
                url=url,
                status=response.status_code,
                error=f"HTTP {response.status_code}: {response.reason}",
            )
        return FetchResult(url=url, status=response.status_code, body=response.text)

    async def fetch(self, url: str, resource: str = "resource", accept: Optional[str] = None) -> FetchResult:
        """Run :meth:`fetch_sync` in a worker thread, bounded by the timeout as a whole.

        ``requests`` only bounds the connect and each read, so a server that
        trickles bytes is cut off here. The abandoned worker finishes on its own.
        """
        try:
            with anyio.fail_after(self._timeout):
                return await anyio.to_thread.run_sync(
                    partial(self.fetch_sync, url, resource, accept),
                    abandon_on_cancel=True,
                )
        except TimeoutError:
            return self._timeout_result(url, resource)
