# essence/classifier/generic.py
"""
Fallback rules: declared content type first, then generic HTML, then raw bytes.

The last rule matches everything, so the fallback always yields a Content.
"""
from __future__ import annotations

import base64
import binascii
import json
from typing import Callable, Optional, Tuple
from urllib.parse import quote, urljoin, urlsplit, urlunsplit

from bs4 import BeautifulSoup

from essence.classifier.rules import (
    HTML_TYPES,
    ClassificationRule,
    always,
    mime_prefix,
    unknown_content,
)
from essence.models import Content, ContentKind, DocumentType, FetchedResource
from essence.parser.html_parser import extract_article, parse_html, select_single

__all__ = ("TYPE_RULES", "HTML_RULE", "FALLBACK_RULES", "html_content")

# --------------------------------------------------------------------------- #
# Declared content type                                                       #
# --------------------------------------------------------------------------- #


def _plain_text(resource: FetchedResource, _wrap_width: int) -> Content:
    return Content(
        kind=ContentKind.PLAIN_TEXT,
        url=resource.final_url,
        text=resource.decode(),
        content_type=resource.content_type,
    )


def _image(resource: FetchedResource, _wrap_width: int) -> Content:
    return Content(
        kind=ContentKind.IMAGE,
        url=resource.final_url,
        data=resource.body,
        content_type=resource.content_type,
    )


def _document(document_type: DocumentType) -> Callable[[FetchedResource, int], Content]:
    def _extract(resource: FetchedResource, _wrap_width: int) -> Content:
        return Content(
            kind=ContentKind.DOCUMENT,
            url=resource.final_url,
            data=resource.body,
            content_type=resource.content_type,
            document_type=document_type,
        )

    return _extract


def _video(resource: FetchedResource, _wrap_width: int) -> Content:
    return Content(kind=ContentKind.VIDEO, url=resource.final_url, content_type=resource.content_type)


def _audio(resource: FetchedResource, _wrap_width: int) -> Content:
    return Content(kind=ContentKind.AUDIO, url=resource.final_url, content_type=resource.content_type)


# --------------------------------------------------------------------------- #
# Self-hosted software recognised by page structure                           #
# --------------------------------------------------------------------------- #

_Detector = Callable[[BeautifulSoup, str], Optional[str]]


def _meta_content(soup: BeautifulSoup, name: str) -> str:
    meta = select_single(soup, f'meta[name="{name}"]')
    content = meta.get("content") if meta is not None else None
    return content if isinstance(content, str) else ""


def _cgit_plain(soup: BeautifulSoup, url: str) -> Optional[str]:
    """cgit ``<repo>/tree/<path>`` -> ``<repo>/plain/<path>``."""
    if not _meta_content(soup, "generator").startswith("cgit "):
        return None
    summary = select_single(soup, "table.tabs a:first-child")
    href = summary.get("href") if summary is not None else None
    if not isinstance(href, str):
        return None

    repo = href.rstrip("/")
    parts = urlsplit(url)
    if not parts.path.startswith(repo):
        return None
    segments = parts.path[len(repo):].lstrip("/").split("/")
    if len(segments) < 2 or segments[0] != "tree" or not segments[1]:
        return None

    plain = urljoin(url, f"{repo}/plain/{'/'.join(segments[1:])}")
    return f"{plain}?{parts.query}" if parts.query else plain


def _gitweb_plain(soup: BeautifulSoup, url: str) -> Optional[str]:
    """gitweb ``a=blob`` view -> ``a=blob_plain``."""
    if not _meta_content(soup, "generator").startswith("gitweb/"):
        return None
    parts = urlsplit(url)
    params = parts.query.split(";")
    if "a=blob" not in params:
        return None
    query = ";".join("a=blob_plain" if p == "a=blob" else p for p in params)
    return urlunsplit(parts._replace(query=query))


def _nextcloud_download(soup: BeautifulSoup, url: str) -> Optional[str]:
    """Public share page -> file download URL."""
    if _meta_content(soup, "apple-itunes-app") != "app-id=1125420102":
        return None

    token_input = select_single(soup, "input#initial-state-files_sharing-sharingToken")
    if token_input is not None:
        value = token_input.get("value")
        if not isinstance(value, str):
            return None
        try:
            token = json.loads(base64.b64decode(value, validate=True).decode("utf-8"))
        except (binascii.Error, UnicodeDecodeError, ValueError):
            return None
        if not isinstance(token, str) or not token:
            return None
        return urljoin(url, "/public.php/dav/files/") + quote(token)

    download = select_single(soup, "input#downloadURL")
    value = download.get("value") if download is not None else None
    if not isinstance(value, str) or not value.strip():
        return None
    return urljoin(url, value.strip())


_DETECTORS: Tuple[_Detector, ...] = (_cgit_plain, _gitweb_plain, _nextcloud_download)


# --------------------------------------------------------------------------- #
# Generic HTML                                                                #
# --------------------------------------------------------------------------- #


def html_content(resource: FetchedResource, wrap_width: int) -> Content:
    """Recognised software gives a reference to its raw resource, anything else an article."""
    soup = parse_html(resource)
    for detector in _DETECTORS:
        target = detector(soup, resource.final_url)
        if target is not None:
            return Content(kind=ContentKind.UNKNOWN, url=target)

    article = extract_article(soup, wrap_width)
    return Content(
        kind=ContentKind.HTML_ARTICLE,
        url=resource.final_url,
        text=article.text,
        title=article.title,
        content_type=resource.content_type,
    )


TYPE_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("text", mime_prefix("text/", exclude=HTML_TYPES), _plain_text),
    ClassificationRule("image", mime_prefix("image/"), _image),
    ClassificationRule("pdf", mime_prefix("application/pdf"), _document(DocumentType.PDF)),
    ClassificationRule("epub", mime_prefix("application/epub+zip"), _document(DocumentType.EPUB)),
    ClassificationRule("video", mime_prefix("video/", "application/vnd.apple.mpegurl"), _video),
    ClassificationRule("audio", mime_prefix("audio/"), _audio),
)

HTML_RULE = ClassificationRule("html", mime_prefix(*HTML_TYPES), html_content)

UNKNOWN_RULE = ClassificationRule(
    "unknown", always, lambda resource, _wrap_width: unknown_content(resource)
)

FALLBACK_RULES: Tuple[ClassificationRule, ...] = (*TYPE_RULES, HTML_RULE, UNKNOWN_RULE)
