"""Recovers link targets from the hrefs the editor emits.

The editor does not link to a destination directly. Every external link is wrapped in a redirect
through the editor's host, with the true destination carried in the `q` query parameter:

    https://www.google.com/url?q=http://example.com/page&sa=D&source=editors&ust=1700000000000

Other hrefs are either same-document anchors (comment and footnote markers, heading links), which
are not links in the published document, or schemes the editor leaves unwrapped like `mailto:`.
"""

from __future__ import annotations

import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

from gdocs_markup.errors import MalformedLinkError

COMMENT_MARKER_RE = re.compile(r"#cmnt\d+")
COMMENT_REFERENCE_RE = re.compile(r"#cmnt_ref\d+")
SCHEME_RE = re.compile(r"([A-Za-z][A-Za-z0-9+.-]*):")
REDIRECT_SCHEMES = ("http", "https")
DESTINATION_PARAM = "q"


def extract_link(href: str) -> str:
    """The destination URL of redirect-wrapped `href`.

    Raises `MalformedLinkError` when `href` has no query string or the query string has no `q`
    parameter; either means the link is not in a shape we know how to unwrap and publishing it
    would produce a broken link.
    """
    if "?" not in href:
        raise MalformedLinkError(href, "no query string")

    try:
        query = urlsplit(href).query
    except ValueError as e:
        raise MalformedLinkError(href, str(e)) from e

    destinations = parse_qs(query).get(DESTINATION_PARAM)
    if not destinations:
        raise MalformedLinkError(href, f"no {DESTINATION_PARAM!r} parameter")

    return destinations[0]


def is_comment_marker(href: Optional[str]) -> bool:
    """True for the in-text marker anchor of a comment, like `<a href="#cmnt1">[a]</a>`."""
    return bool(href) and COMMENT_MARKER_RE.fullmatch(href or "") is not None


def is_comment_reference(href: Optional[str]) -> bool:
    """True for the back-link that starts the body of a comment, like `href="#cmnt_ref1"`."""
    return bool(href) and COMMENT_REFERENCE_RE.fullmatch(href or "") is not None


def is_internal_anchor(href: Optional[str]) -> bool:
    """True for a same-document `#fragment` reference."""
    return bool(href) and (href or "").startswith("#")


def resolve_href(href: Optional[str]) -> Optional[str]:
    """The href a run should carry for an anchor with `href`, None when it is not a link.

    Only hrefs in the redirect-wrapper shape (an http or https URL) are unwrapped, strictly.
    Anything else that is not a same-document anchor, `mailto:` for example, is used verbatim.
    """
    if not href or not href.strip():
        return None

    href = href.strip()

    if is_internal_anchor(href):
        return None

    scheme = SCHEME_RE.match(href)
    if scheme and scheme.group(1).lower() in REDIRECT_SCHEMES:
        return extract_link(href)

    return href
