"""essence.sandbox: one-time restriction of the process's OS capabilities.

On OpenBSD this is ``pledge(2)``: the promises cover the terminal, temporary
files, the network, DNS and spawning the viewer.  ``rpath`` stays because the
interpreter imports modules lazily.  Other platforms have no equivalent, the
request is logged and skipped.  Writing a log file adds ``wpath`` and ``cpath``.
"""

from __future__ import annotations

import ctypes
import os
import sys
from typing import Optional, Sequence

from essence.logger import logger

__all__: Sequence[str] = ("DEFAULT_PROMISES", "LOG_FILE_PROMISES", "restrict")

DEFAULT_PROMISES: tuple[str, ...] = ("stdio", "rpath", "tmppath", "inet", "dns", "proc", "exec")
# a rotating log file renames and recreates its files
LOG_FILE_PROMISES: tuple[str, ...] = ("wpath", "cpath")

_outcome: Optional[bool] = None


def _pledge(promises: str) -> None:
    libc = ctypes.CDLL(None, use_errno=True)
    libc.pledge.argtypes = (ctypes.c_char_p, ctypes.c_char_p)
    libc.pledge.restype = ctypes.c_int
    # NULL execpromises: the viewer itself runs unrestricted
    if libc.pledge(promises.encode("ascii"), None) != 0:
        err = ctypes.get_errno()
        raise OSError(err, os.strerror(err))


def restrict(promises: Sequence[str] = DEFAULT_PROMISES) -> bool:
    """Request the restriction once; later calls return the first outcome unchanged."""
    global _outcome
    if _outcome is not None:
        return _outcome

    if not sys.platform.startswith("openbsd"):
        logger.debug("No capability restriction available on %s", sys.platform)
        _outcome = False
        return _outcome

    _pledge(" ".join(promises))
    logger.debug("Pledged: %s", " ".join(promises))
    _outcome = True
    return _outcome
