# essence/classifier/rules.py
"""
ClassificationRule: a matcher over (final URL, MIME type) paired with an extractor.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Collection, Optional
from urllib.parse import urlsplit

from essence.models import Content, ContentKind, FetchedResource

HTML_TYPES = ("text/html", "application/xhtml+xml")

Matcher = Callable[[str, str], bool]
Extractor = Callable[[FetchedResource, int], Optional[Content]]


@dataclass(frozen=True, slots=True)
class ClassificationRule:
    """
    One recognizable pattern.

    The extractor gets the resource and the wrap width; ``None`` means the
    page no longer has the expected structure.
    """

    name: str
    matcher: Matcher
    extractor: Extractor

    def matches(self, resource: FetchedResource) -> bool:
        return self.matcher(resource.final_url, resource.mime_type)

    def extract(self, resource: FetchedResource, wrap_width: int) -> Optional[Content]:
        return self.extractor(resource, wrap_width)


def host_of(url: str) -> str:
    return (urlsplit(url).hostname or "").lower()


def host_in(hosts: Collection[str]) -> Matcher:
    """Matcher accepting any URL whose host is one of *hosts*."""

    def _match(url: str, _mime: str) -> bool:
        return host_of(url) in hosts

    return _match


def mime_prefix(*prefixes: str, exclude: Collection[str] = ()) -> Matcher:
    """Matcher on the declared MIME type (exact types or ``type/`` prefixes)."""

    def _match(_url: str, mime: str) -> bool:
        return bool(mime) and mime.startswith(prefixes) and mime not in exclude

    return _match


def always(_url: str, _mime: str) -> bool:
    return True


def unknown_content(resource: FetchedResource) -> Content:
    """Raw bytes passthrough, left to a byte-sniffing viewer."""
    return Content(
        kind=ContentKind.UNKNOWN,
        url=resource.final_url,
        data=resource.body,
        content_type=resource.content_type,
    )
