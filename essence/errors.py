"""Exception hierarchy shared by the fetch and dispatch stages.

Classification has no error type of its own: it always degrades to a
fallback :class:`~essence.models.Content`.
"""
from __future__ import annotations

__all__ = (
    "EssenceError",
    "UnsupportedURLError",
    "FetchError",
    "NetworkError",
    "FetchTimeoutError",
    "HTTPStatusError",
    "DispatchError",
    "SpawnFailedError",
    "ViewerExitError",
    "PlaceholderError",
    "MissingPayloadError",
)


class EssenceError(Exception):
    """Base class for every error reported to the user."""


class UnsupportedURLError(EssenceError):
    """The input is not an absolute http(s) URL."""


# --------------------------------------------------------------------------- #
# Fetch                                                                       #
# --------------------------------------------------------------------------- #


class FetchError(EssenceError):
    """Retrieving the resource failed. Never retried."""

    def __init__(self, url: str, message: str) -> None:
        super().__init__(f"{url}: {message}")
        self.url = url


class NetworkError(FetchError):
    """Transport failure: DNS, connection, TLS, too many redirects."""


class FetchTimeoutError(FetchError):
    def __init__(self, url: str, timeout: float) -> None:
        super().__init__(url, f"no response within {timeout:g} seconds")
        self.timeout = timeout


class HTTPStatusError(FetchError):
    def __init__(self, url: str, status: int) -> None:
        super().__init__(url, f"server answered with status {status}")
        self.status = status


# --------------------------------------------------------------------------- #
# Dispatch                                                                    #
# --------------------------------------------------------------------------- #


class DispatchError(EssenceError):
    """Showing the content failed."""


class SpawnFailedError(DispatchError):
    def __init__(self, command: str, reason: str) -> None:
        super().__init__(f"Could not start {command!r}: {reason}")
        self.command = command


class ViewerExitError(DispatchError):
    """The viewer ran but exited non-zero; *code* becomes our exit status."""

    def __init__(self, command: str, code: int) -> None:
        super().__init__(f"{command!r} exited with status {code}")
        self.command = command
        self.code = code


class PlaceholderError(DispatchError):
    """An argv placeholder is not available for the content being shown."""


class MissingPayloadError(DispatchError):
    """The viewer wants bytes (stdin or temp file) but the content has none."""
