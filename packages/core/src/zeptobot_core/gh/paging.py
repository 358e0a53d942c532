"""Traversal of paginated GitHub collections."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from zeptobot_core.errors import FetchAborted
from zeptobot_core.gh.client import GitHubClient
from zeptobot_core.gh.links import parse_link_header

logger = logging.getLogger(__name__)


@dataclass
class PageResult:
    """Entries gathered from every page that could be read.

    ``complete`` is False when a request failed part-way; ``entries`` then holds
    whatever was accumulated before the failure and ``error`` says why.
    """

    entries: list = field(default_factory=list)
    complete: bool = True
    error: str | None = None
    pages: int = 0

    def __len__(self) -> int:
        return len(self.entries)

    def __bool__(self) -> bool:
        return bool(self.entries)


def fetch_all_pages(client: GitHubClient, url: str, **params) -> PageResult:
    """GET ``url`` and follow rel="next" links until the collection is exhausted.

    ``page`` must not be passed: the traversal owns the cursor. Query parameters
    apply to the first request only, GitHub embeds them in the next links.
    """
    if "page" in params:
        raise ValueError("Don't pass a page argument, fetch_all_pages traverses every page")

    result = PageResult()
    next_url: str | None = url
    query: dict | None = params or None

    while next_url is not None:
        try:
            response = client.request("GET", next_url, params=query)
        except FetchAborted as e:
            logger.error("Aborting traversal of %s: %s", url, e)
            result.complete = False
            result.error = str(e)
            break

        if response.status_code >= 300:
            logger.error("Request to %s returned HTTP %d", next_url, response.status_code)
            result.complete = False
            result.error = f"HTTP {response.status_code} from {next_url}"
            break

        result.entries.extend(response.json())
        result.pages += 1
        query = None

        link_header = response.headers.get("Link")
        if not link_header:
            logger.debug("Single page document")
            break

        next_url = parse_link_header(link_header).get("next")
        if next_url is None:
            logger.debug("No more pages to read")
        else:
            logger.debug("Reading page %d of %s", result.pages + 1, url)

    return result
