"""Utility functions — time formatting, domain extraction, text truncation."""

import time


def time_ago(timestamp: int | None) -> str:
    """Convert a unix timestamp to a short 'time ago' string."""
    if timestamp is None:
        return ""
    diff = int(time.time()) - timestamp
    if diff < 60:
        return "just now"
    elif diff < 3600:
        return f"{diff // 60}m ago"
    elif diff < 86400:
        return f"{diff // 3600}h ago"
    else:
        return f"{diff // 86400}d ago"


def extract_domain(url: str | None) -> str | None:
    """Return the host of a URL without scheme, port, path, query or fragment."""
    if not url:
        return None
    url = url.strip()
    if "://" in url:
        url = url.split("://", 1)[1]
    for sep in ("/", "?", "#"):
        url = url.split(sep, 1)[0]
    domain = url.split(":", 1)[0]
    return domain or None


def truncate(text: str, max_len: int = 200) -> str:
    """Truncate text to max_len characters, adding ellipsis if needed."""
    if len(text) <= max_len:
        return text
    return text[: max_len - 1].rsplit(" ", 1)[0] + "…"
