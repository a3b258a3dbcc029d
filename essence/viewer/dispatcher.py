# essence/viewer/dispatcher.py
"""
Viewer dispatch: pick the command for a content kind and run it in the foreground.

Placeholders must make up a whole argument:

====  ==========================================================
%u    URL of the content
%f    path of a temporary file holding the payload (tempfile mode)
%p    the pager: ``$PAGER`` split shell-style, ``less`` when unset
====  ==========================================================
"""
from __future__ import annotations

import contextlib
import mimetypes
import os
import shlex
import subprocess
import tempfile
from typing import Dict, Iterator, List, Optional

from essence.config import DEFAULT_VIEWERS, InputMode, ViewerConfig, ViewerSpec
from essence.errors import MissingPayloadError, PlaceholderError, SpawnFailedError, ViewerExitError
from essence.logger import logger
from essence.models import Content, ContentKind

__all__ = ("resolve_viewer", "pager_argv", "build_argv", "scoped_tempfile", "dispatch")

_DEFAULT_PAGER = "less"


def resolve_viewer(kind: ContentKind, config: ViewerConfig) -> ViewerSpec:
    """Configured viewer for *kind*, verbatim, else the built-in default."""
    override = config.override_for(kind)
    if override is not None:
        return override
    return DEFAULT_VIEWERS[kind]


def pager_argv() -> List[str]:
    return shlex.split(os.environ.get("PAGER") or "") or [_DEFAULT_PAGER]


def build_argv(spec: ViewerSpec, replacements: Dict[str, List[str]]) -> List[str]:
    """Expand placeholders in ``[command, *args]``; unknown ones raise PlaceholderError."""
    argv: List[str] = []
    for token in (spec.command, *spec.args):
        if len(token) == 2 and token.startswith("%"):
            if token not in replacements:
                raise PlaceholderError(f"{token} is not valid for this content")
            argv.extend(replacements[token])
        else:
            argv.append(token)
    return argv


def _suffix_for(content: Content) -> str:
    if content.text is not None:
        return ".txt"
    if content.document_type is not None:
        return f".{content.document_type.value}"
    mime = (content.content_type or "").split(";", 1)[0].strip().lower()
    return (mimetypes.guess_extension(mime) if mime else None) or ""


@contextlib.contextmanager
def scoped_tempfile(data: bytes, suffix: str = "") -> Iterator[str]:
    """
    Write *data* to a closed temporary file and yield its path.

    The file is removed when the block exits, whatever the outcome.
    """
    handle = tempfile.NamedTemporaryFile(prefix="essence-", suffix=suffix, delete=False)
    try:
        with handle:
            handle.write(data)
        yield handle.name
    finally:
        with contextlib.suppress(FileNotFoundError):
            os.unlink(handle.name)
        logger.debug("Removed %s", handle.name)


def _run(argv: List[str], stdin_data: Optional[bytes]) -> int:
    logger.debug("Running %s", shlex.join(argv))
    try:
        completed = subprocess.run(argv, input=stdin_data, check=False)
    except OSError as exc:
        raise SpawnFailedError(argv[0], exc.strerror or str(exc)) from exc

    code = completed.returncode
    if code < 0:
        # killed by a signal, shell convention
        code = 128 - code
    if code != 0:
        raise ViewerExitError(argv[0], code)
    return code


def dispatch(content: Content, config: ViewerConfig) -> int:
    """
    Show *content* with the viewer configured for its kind and wait for it.

    Returns 0 on a clean exit. Raises SpawnFailedError, ViewerExitError,
    PlaceholderError or MissingPayloadError.
    """
    spec = resolve_viewer(content.kind, config)
    replacements: Dict[str, List[str]] = {"%p": pager_argv()}
    if content.url:
        replacements["%u"] = [content.url]

    if spec.input_mode is InputMode.URL:
        return _run(build_argv(spec, replacements), None)

    payload = content.payload()
    if payload is None:
        raise MissingPayloadError(
            f"{content.kind.value} content from {content.url} has no data for {spec.input_mode.value} input"
        )

    if spec.input_mode is InputMode.STDIN:
        return _run(build_argv(spec, replacements), payload)

    with scoped_tempfile(payload, _suffix_for(content)) as path:
        replacements["%f"] = [path]
        return _run(build_argv(spec, replacements), None)
