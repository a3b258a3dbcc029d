"""
Loading and validation of the essence configuration.

The file maps content kinds to viewer commands plus a few global options::

    wrap_width = 72

    [plain_text]
    command = "less"
    args = ["-R", "--", "%f"]

TOML is the primary format; YAML and JSON files are accepted as well.
Pydantic describes the schema and rejects unknown keys.
"""
from __future__ import annotations

import errno
import json
import os
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from essence import __version__
from essence.models import ContentKind

__all__ = ("InputMode", "ViewerSpec", "ViewerConfig", "DEFAULT_VIEWERS", "load_config")


class InputMode(str, Enum):
    """How the payload reaches the viewer."""

    STDIN = "stdin"
    TEMPFILE = "tempfile"
    URL = "url"


class ViewerSpec(BaseModel):
    """Command line used to show one content kind."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    command: str = Field(..., min_length=1, description="Program to run, or %p for the pager.")
    args: List[str] = Field(default_factory=list, description="Arguments; %u, %f and %p are replaced.")
    input_mode: InputMode = Field(
        InputMode.STDIN, description="stdin, tempfile or url. Inferred from the placeholders when omitted."
    )

    @model_validator(mode="before")
    @classmethod
    def _infer_input_mode(cls, data: Any) -> Any:
        if not isinstance(data, dict) or data.get("input_mode") is not None:
            return data
        args = data.get("args")
        argv = [data.get("command"), *(args if isinstance(args, list) else [])]
        if "%f" in argv:
            mode = InputMode.TEMPFILE
        elif "%u" in argv:
            mode = InputMode.URL
        else:
            mode = InputMode.STDIN
        return {**data, "input_mode": mode}


DEFAULT_VIEWERS: Dict[ContentKind, ViewerSpec] = {
    ContentKind.PLAIN_TEXT: ViewerSpec(command="%p", input_mode=InputMode.STDIN),
    ContentKind.HTML_ARTICLE: ViewerSpec(command="%p", input_mode=InputMode.STDIN),
    ContentKind.IMAGE: ViewerSpec(command="feh", args=["%u"]),
    ContentKind.DOCUMENT: ViewerSpec(command="mupdf", args=["--", "%f"]),
    ContentKind.VIDEO: ViewerSpec(command="mpv", args=["--", "%u"]),
    ContentKind.AUDIO: ViewerSpec(command="mpv", args=["--profile=builtin-pseudo-gui", "--", "%u"]),
    ContentKind.UNKNOWN: ViewerSpec(command="xdg-open", args=["%f"]),
}


class ViewerConfig(BaseModel):
    """Configuration for one run: per-kind viewer overrides and global options."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    plain_text: Optional[ViewerSpec] = None
    image: Optional[ViewerSpec] = None
    document: Optional[ViewerSpec] = None
    video: Optional[ViewerSpec] = None
    audio: Optional[ViewerSpec] = None
    html_article: Optional[ViewerSpec] = None
    unknown: Optional[ViewerSpec] = None

    wrap_width: int = Field(80, ge=0, description="Column width for extracted text, 0 to disable.")
    timeout: float = Field(30.0, gt=0, description="Request timeout (seconds).")
    user_agent: str = Field(f"essence/{__version__}", min_length=1, description="User-Agent header.")
    max_redirects: int = Field(10, ge=0, description="Redirects followed before giving up.")

    def override_for(self, kind: ContentKind) -> Optional[ViewerSpec]:
        """User-supplied viewer for *kind*, if any."""
        return getattr(self, kind.value)


def _read_toml(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as exc:
        raise ValueError(f"Invalid TOML in {path}: {exc}") from exc


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as exc:
        raise ValueError(f"Invalid YAML in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of YAML must be a mapping, got {type(data).__name__}")
    return data


def _read_json(path: Path) -> dict[str, Any]:
    try:
        data = json.loads(path.read_text(encoding="utf-8")) or {}
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise TypeError(f"Top level of JSON must be a mapping, got {type(data).__name__}")
    return data


_READERS = {
    ".toml": _read_toml,
    ".yaml": _read_yaml,
    ".yml": _read_yaml,
    ".json": _read_json,
}


def load_config(path: Union[str, Path, None]) -> ViewerConfig:
    """
    Read a TOML, YAML or JSON file and return a validated :class:`ViewerConfig`.
    ``None`` gives the built-in defaults. A missing file raises FileNotFoundError.
    """
    if path is None:
        return ViewerConfig()

    path_obj = Path(path).expanduser().resolve()
    if not path_obj.is_file():
        raise FileNotFoundError(errno.ENOENT, os.strerror(errno.ENOENT), str(path_obj))

    suffix = path_obj.suffix.lower()
    reader = _READERS.get(suffix)
    if reader is None:
        raise ValueError(f"Unsupported config format: {suffix or path_obj.name}")

    return ViewerConfig(**reader(path_obj))
