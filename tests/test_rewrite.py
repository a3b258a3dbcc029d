# File: tests/test_rewrite.py
import pytest

from essence.errors import UnsupportedURLError
from essence.fetch.rewrite import PASTE_HOSTS, rewrite_url, validate_url


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://bpa.st/example", "https://bpa.st/example/raw"),
        ("https://bpa.st/raw/example", "https://bpa.st/raw/example"),
        ("https://p.dav1d.de/example.rs", "https://p.dav1d.de/example"),
        ("https://paste.debian.net/1729/", "https://paste.debian.net/plain/1729"),
        ("https://dpaste.com/example", "https://dpaste.com/example.txt"),
        ("https://dpaste.org/example", "https://dpaste.org/example/raw"),
        ("https://marc.info/?l=example&m=1729&w=2", "https://marc.info/?l=example&m=1729&w=2&q=mbox"),
        ("https://marc.info/?l=example&q=raw", "https://marc.info/?l=example&q=mbox"),
        ("https://paste.mozilla.org/example", "https://paste.mozilla.org/example/raw"),
        ("https://pastebin.mozilla.org/example", "https://pastebin.mozilla.org/example/raw"),
        ("https://pastebin.com/example", "https://pastebin.com/raw/example"),
    ],
)
def test_rewrite_is_correct_and_idempotent(url, expected):
    rewritten = rewrite_url(url)
    assert rewritten == expected
    assert rewrite_url(rewritten) == expected


@pytest.mark.parametrize("url", ["https://example.com", "https://192.0.2.17/example"])
def test_unknown_hosts_are_left_alone(url):
    assert rewrite_url(url) is None


def test_paste_debian_without_id():
    assert rewrite_url("https://paste.debian.net/") is None


def test_paste_hosts_are_rewritten():
    for host in PASTE_HOSTS:
        assert rewrite_url(f"https://{host}/abc") is not None


@pytest.mark.parametrize("url", ["ftp://example.com/file", "example.com/page", "mailto:a@example.com", "https://"])
def test_validate_rejects_unsupported(url):
    with pytest.raises(UnsupportedURLError):
        validate_url(url)


def test_validate_strips_whitespace():
    assert validate_url("  https://example.com/a \n") == "https://example.com/a"


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://play.rust-lang.org/?version=stable&mode=debug&gist=abc123", "https://gist.github.com/abc123"),
        ("https://play.integer32.com/?gist=abc123", "https://gist.github.com/abc123"),
        ("https://mypy-play.net/?mypy=latest&python=3.12&gist=abc123", "https://gist.github.com/abc123"),
        ("https://play.rust-lang.org/?version=stable", None),
    ],
)
def test_playground_links_point_at_gist(url, expected):
    assert rewrite_url(url) == expected
