# essence/classifier/classifier.py
"""
classify(): ordered rules, first match wins, total.

Priority: site rules (host + path), then declared content type, then generic
HTML, then raw bytes.  A site rule that finds nothing where it expected
something degrades to the fallback rules for the same resource.
"""
from __future__ import annotations

from typing import Optional, Sequence

from essence.classifier.generic import FALLBACK_RULES
from essence.classifier.rules import ClassificationRule, unknown_content
from essence.classifier.sites import SITE_RULES
from essence.logger import logger
from essence.models import Content, FetchedResource

__all__ = ("RULES", "classify", "fallback")

RULES: tuple[ClassificationRule, ...] = (*SITE_RULES, *FALLBACK_RULES)


def _apply(rule: ClassificationRule, resource: FetchedResource, wrap_width: int) -> Optional[Content]:
    try:
        return rule.extract(resource, wrap_width)
    except Exception:
        logger.debug("Rule %s failed on %s", rule.name, resource.final_url, exc_info=True)
        return None


def _first(rules: Sequence[ClassificationRule], resource: FetchedResource, wrap_width: int) -> Content:
    for rule in rules:
        if not rule.matches(resource):
            continue
        content = _apply(rule, resource, wrap_width)
        if content is not None:
            logger.debug("%s classified as %s by rule %s", resource.final_url, content.kind.value, rule.name)
            return content
    return unknown_content(resource)


def fallback(resource: FetchedResource, wrap_width: int = 80) -> Content:
    """Classification ignoring site rules: content type, generic HTML, raw bytes."""
    return _first(FALLBACK_RULES, resource, wrap_width)


def classify(resource: FetchedResource, wrap_width: int = 80) -> Content:
    """Determine the kind of *resource* and extract its essential payload. Never raises."""
    for rule in SITE_RULES:
        if not rule.matches(resource):
            continue
        content = _apply(rule, resource, wrap_width)
        if content is not None:
            logger.debug("%s classified as %s by rule %s", resource.final_url, content.kind.value, rule.name)
            return content
        logger.debug("Rule %s found no content on %s, using generic handling", rule.name, resource.final_url)
        break
    return fallback(resource, wrap_width)
