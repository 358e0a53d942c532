"""Parsing of RFC 5988 ``Link`` headers returned by paginated GitHub endpoints."""

from __future__ import annotations

import re

from zeptobot_core.errors import MalformedPaginationHeader

_URL_RE = re.compile(r"<([^>]*)>")
_REL_RE = re.compile(r"rel=(\"[^\"]*\"|[^;\s]+)")


def parse_link_header(header: str) -> dict[str, str]:
    """Map each relation name in a Link header to its URL.

    Example input::

        <https://api.github.com/x?page=2>; rel="next", <https://api.github.com/x?page=5>; rel="last"
    """
    links: dict[str, str] = {}
    for segment in header.split(","):
        url_match = _URL_RE.search(segment)
        rel_match = _REL_RE.search(segment)
        if url_match is None or rel_match is None:
            raise MalformedPaginationHeader(f"Cannot parse Link header segment: {segment.strip()!r}")
        links[rel_match.group(1).strip('"')] = url_match.group(1).strip('"')
    return links
