"""Retrieval of the resource behind a URL."""
from essence.fetch.fetcher import Fetcher, fetch_url
from essence.fetch.rewrite import PASTE_HOSTS, PLAYGROUND_HOSTS, rewrite_url, validate_url

__all__ = ["Fetcher", "fetch_url", "PASTE_HOSTS", "PLAYGROUND_HOSTS", "rewrite_url", "validate_url"]
