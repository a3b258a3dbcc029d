"""essence.engine: the fetch → classify → dispatch pipeline for one URL."""

from __future__ import annotations

from essence.classifier import classify
from essence.config import InputMode, ViewerConfig
from essence.fetch import fetch_url, rewrite_url, validate_url
from essence.logger import logger
from essence.models import Content, FetchedResource
from essence.viewer import dispatch, resolve_viewer

__all__ = ["resolve_content", "show_url"]


def _wants_bytes(content: Content, resource: FetchedResource, config: ViewerConfig) -> bool:
    """Content found inside a page, known only by URL, for a viewer that reads bytes."""
    if content.payload() is not None or content.url == resource.final_url:
        return False
    return resolve_viewer(content.kind, config).input_mode is not InputMode.URL


def resolve_content(config: ViewerConfig, url: str) -> Content:
    """Fetch and classify *url*, following one extracted link to the resource itself."""
    url = validate_url(url)
    url = rewrite_url(url) or url

    resource = fetch_url(url, config)
    content = classify(resource, config.wrap_width)
    if content.is_reference or _wants_bytes(content, resource, config):
        logger.info("Following %s -> %s", resource.final_url, content.url)
        content = classify(fetch_url(content.url, config), config.wrap_width)
    return content


def show_url(config: ViewerConfig, url: str) -> int:
    """Show the essential content of *url*; returns the viewer's exit status."""
    content = resolve_content(config, url)
    logger.info("Showing %s content from %s", content.kind.value, content.url)
    return dispatch(content, config)
