# essence/classifier/sites.py
"""
Site-specific rules, matched on the host of the final URL.

These are best-effort heuristics: when a page does not have the structure a
rule expects, the extractor returns ``None`` and the classifier falls back to
the generic handling of the same resource.
"""
from __future__ import annotations

from typing import Dict, Optional, Tuple
from urllib.parse import urljoin

from essence.classifier.rules import HTML_TYPES, ClassificationRule, host_in, host_of
from essence.fetch.rewrite import PASTE_HOSTS
from essence.models import Content, ContentKind, FetchedResource
from essence.parser.html_parser import parse_html, select_single

__all__ = ("GIST_HOSTS", "VIDEO_HOSTS", "AUDIO_HOSTS", "IMAGE_PAGE_SELECTORS", "SITE_RULES")

GIST_HOSTS = frozenset({"gist.github.com"})

VIDEO_HOSTS = frozenset(
    {
        "youtube.com",
        "www.youtube.com",
        "m.youtube.com",
        "music.youtube.com",
        "youtu.be",
        "twitch.tv",
        "www.twitch.tv",
        "vimeo.com",
    }
)

AUDIO_HOSTS = frozenset({"soundcloud.com", "m.soundcloud.com"})

# host -> selector of the single <img> holding the picture
IMAGE_PAGE_SELECTORS: Dict[str, str] = {
    "giphy.com": "figure img",
    "ibb.co": "#image-viewer-container > img",
    "imgbb.com": "#image-viewer-container > img",
    "postimg.cc": "#main-image",
    "tenor.com": ".main-container .Gif > img",
    "xkcd.com": "#comic > img",
    "m.xkcd.com": "#comic > img",
}


def _raw_paste(resource: FetchedResource, _wrap_width: int) -> Optional[Content]:
    if resource.mime_type in HTML_TYPES:
        # the raw endpoint answered with a page: layout changed
        return None
    return Content(
        kind=ContentKind.PLAIN_TEXT,
        url=resource.final_url,
        text=resource.decode(),
        content_type=resource.content_type,
    )


def _gist_raw(resource: FetchedResource, _wrap_width: int) -> Optional[Content]:
    """Gist page -> reference to the raw file behind its single "Raw" button."""
    if resource.mime_type not in HTML_TYPES:
        return None
    soup = parse_html(resource)
    buttons = [
        label
        for label in soup.select("a > span > span.Button-label")
        if label.get_text(strip=True) == "Raw"
    ]
    # gists with several files have no single raw view
    if len(buttons) != 1:
        return None
    href = buttons[0].parent.parent.get("href")
    if not isinstance(href, str) or not href.strip():
        return None
    return Content(kind=ContentKind.UNKNOWN, url=urljoin(resource.final_url, href.strip()))


def _video_page(resource: FetchedResource, _wrap_width: int) -> Content:
    return Content(kind=ContentKind.VIDEO, url=resource.final_url)


def _audio_page(resource: FetchedResource, _wrap_width: int) -> Content:
    return Content(kind=ContentKind.AUDIO, url=resource.final_url)


def _image_page(resource: FetchedResource, _wrap_width: int) -> Optional[Content]:
    if resource.mime_type.startswith("image/"):
        return Content(
            kind=ContentKind.IMAGE,
            url=resource.final_url,
            data=resource.body,
            content_type=resource.content_type,
        )
    if resource.mime_type not in HTML_TYPES:
        return None

    selector = IMAGE_PAGE_SELECTORS[host_of(resource.final_url)]
    img = select_single(parse_html(resource), selector)
    src = img.get("src") if img is not None else None
    if not isinstance(src, str) or not src.strip():
        return None
    return Content(kind=ContentKind.IMAGE, url=urljoin(resource.final_url, src.strip()))


SITE_RULES: Tuple[ClassificationRule, ...] = (
    ClassificationRule("raw_paste", host_in(PASTE_HOSTS), _raw_paste),
    ClassificationRule("gist", host_in(GIST_HOSTS), _gist_raw),
    ClassificationRule("video_site", host_in(VIDEO_HOSTS), _video_page),
    ClassificationRule("audio_site", host_in(AUDIO_HOSTS), _audio_page),
    ClassificationRule("image_page", host_in(IMAGE_PAGE_SELECTORS), _image_page),
)
