# essence/fetch/rewrite.py
"""
Pre-fetch URL handling: validation and raw-endpoint rewriting for paste sites.

Paste sites render the paste inside a full page; every one of them also has a
plain-text endpoint.  Rewriting before the fetch means the classifier gets the
paste bytes directly.  All paste rewrites are idempotent.  Playground links
are replaced by the gist holding the snippet.
"""
from __future__ import annotations

import posixpath
from typing import Callable, Dict, Optional
from urllib.parse import SplitResult, parse_qsl, quote, urlencode, urlsplit, urlunsplit

from essence.errors import UnsupportedURLError
from essence.logger import logger

__all__ = ("PASTE_HOSTS", "PLAYGROUND_HOSTS", "validate_url", "rewrite_url")


def validate_url(url: str) -> str:
    """Return *url* stripped, or raise UnsupportedURLError if it is not absolute http(s)."""
    url = url.strip()
    parts = urlsplit(url)
    if parts.scheme.lower() not in ("http", "https"):
        raise UnsupportedURLError(f"Unsupported URL scheme: {parts.scheme or '(none)'}")
    if not parts.hostname:
        raise UnsupportedURLError(f"Not an absolute URL: {url}")
    return url


# --------------------------------------------------------------------------- #
# Per-host rewriters                                                          #
# --------------------------------------------------------------------------- #

_Rewriter = Callable[[SplitResult], Optional[SplitResult]]


def _append_raw(parts: SplitResult) -> SplitResult:
    if parts.path.endswith("/raw"):
        return parts
    return parts._replace(path=parts.path.rstrip("/") + "/raw")


def _bpa_st(parts: SplitResult) -> SplitResult:
    if parts.path.startswith("/raw/"):
        return parts
    return _append_raw(parts)


def _dav1d(parts: SplitResult) -> SplitResult:
    # /<id>.<lang> -> /<id>
    return parts._replace(path=posixpath.splitext(parts.path)[0])


def _paste_debian(parts: SplitResult) -> Optional[SplitResult]:
    if parts.path.startswith("/plain"):
        return parts
    segments = [s for s in parts.path.split("/") if s]
    if not segments:
        return None
    return parts._replace(path=f"/plain/{segments[-1]}")


def _dpaste_com(parts: SplitResult) -> SplitResult:
    if parts.path.endswith(".txt"):
        return parts
    return parts._replace(path=parts.path.rstrip("/") + ".txt")


def _marc_info(parts: SplitResult) -> SplitResult:
    pairs = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "q"]
    pairs.append(("q", "mbox"))
    return parts._replace(query=urlencode(pairs))


def _pastebin_com(parts: SplitResult) -> SplitResult:
    if parts.path.startswith("/raw"):
        return parts
    return parts._replace(path="/raw" + parts.path)


_REWRITERS: Dict[str, _Rewriter] = {
    "bpa.st": _bpa_st,
    "p.dav1d.de": _dav1d,
    "paste.debian.net": _paste_debian,
    "dpaste.com": _dpaste_com,
    "dpaste.org": _append_raw,
    "marc.info": _marc_info,
    "paste.mozilla.org": _append_raw,
    "pastebin.mozilla.org": _append_raw,
    "pastebin.com": _pastebin_com,
}

PASTE_HOSTS = frozenset(_REWRITERS)

# code playgrounds that share a snippet as ?gist=<id>
PLAYGROUND_HOSTS = frozenset({"play.rust-lang.org", "play.integer32.com", "mypy-play.net"})


def _playground_gist(parts: SplitResult) -> Optional[SplitResult]:
    gist = dict(parse_qsl(parts.query)).get("gist", "").strip()
    if not gist:
        return None
    return urlsplit(f"https://gist.github.com/{quote(gist, safe='')}")


_ALL_REWRITERS: Dict[str, _Rewriter] = {**_REWRITERS, **dict.fromkeys(PLAYGROUND_HOSTS, _playground_gist)}


def rewrite_url(url: str) -> Optional[str]:
    """
    Return the raw-text endpoint for a paste URL, or the gist behind a playground link.

    ``None`` when the host is not known or the URL has no paste or gist id.
    """
    parts = urlsplit(url)
    rewriter = _ALL_REWRITERS.get((parts.hostname or "").lower())
    if rewriter is None:
        return None
    rewritten = rewriter(parts)
    if rewritten is None:
        return None
    result = urlunsplit(rewritten)
    if result != url:
        logger.debug("Rewrote %s -> %s", url, result)
    return result
