# essence/models.py
"""
Data models passed between the fetch, classify and dispatch stages.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


@dataclass(frozen=True, slots=True)
class FetchedResource:
    """Raw response of a single GET: post-redirect URL, declared type and body."""

    final_url: str
    content_type: Optional[str]
    body: bytes

    @property
    def mime_type(self) -> str:
        """Declared type without parameters, lower-cased (``""`` if absent)."""
        if not self.content_type:
            return ""
        return self.content_type.split(";", 1)[0].strip().lower()

    @property
    def charset(self) -> Optional[str]:
        if not self.content_type:
            return None
        for param in self.content_type.split(";")[1:]:
            key, _, value = param.partition("=")
            if key.strip().lower() == "charset" and value.strip():
                return value.strip().strip("\"'")
        return None

    def decode(self) -> str:
        """Body as text using the declared charset, else UTF-8; never raises."""
        encoding = self.charset or "utf-8"
        try:
            return self.body.decode(encoding, errors="replace")
        except LookupError:
            return self.body.decode("utf-8", errors="replace")


class ContentKind(str, Enum):
    """Closed set of content categories; values double as config keys."""

    PLAIN_TEXT = "plain_text"
    IMAGE = "image"
    DOCUMENT = "document"
    VIDEO = "video"
    AUDIO = "audio"
    HTML_ARTICLE = "html_article"
    UNKNOWN = "unknown"


class DocumentType(str, Enum):
    PDF = "pdf"
    EPUB = "epub"


@dataclass(frozen=True, slots=True)
class Content:
    """Classified essential content of a URL.

    Which fields are set depends on *kind*:

    * ``plain_text`` / ``html_article`` – ``text`` (and maybe ``title``)
    * ``image`` / ``document`` / ``unknown`` – ``data`` when the bytes were fetched
    * ``video`` / ``audio`` and images found inside a page – only ``url``
    """

    kind: ContentKind
    url: str
    text: Optional[str] = None
    data: Optional[bytes] = None
    title: Optional[str] = None
    content_type: Optional[str] = None
    document_type: Optional[DocumentType] = None

    @property
    def is_reference(self) -> bool:
        """An unknown resource known only by URL, still to be fetched."""
        return self.kind is ContentKind.UNKNOWN and self.data is None and self.text is None

    def payload(self) -> Optional[bytes]:
        """Bytes handed to a viewer over stdin or a temporary file."""
        if self.text is not None:
            if self.title:
                return f"{self.title}\n\n{self.text}\n".encode("utf-8")
            return self.text.encode("utf-8")
        return self.data
