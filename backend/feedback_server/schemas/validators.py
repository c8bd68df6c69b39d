"""Field checks reused by several request schemas."""

from urllib.parse import urlparse

from feedback_server.services.access import Access


def check_urls(urls: list[str]) -> list[str]:
    for url in urls:
        parsed = urlparse(url)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"Not an http(s) URL: {url!r}")
    return urls


def check_access(raw: str) -> str:
    return str(Access.parse(raw))
