"""Launching viewer processes for classified content."""
from essence.viewer.dispatcher import build_argv, dispatch, resolve_viewer, scoped_tempfile

__all__ = ["build_argv", "dispatch", "resolve_viewer", "scoped_tempfile"]
