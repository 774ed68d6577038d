from __future__ import annotations

import urllib.parse


def split_csv(raw: str) -> tuple[str, ...]:
    return tuple(item.strip() for item in raw.split(",") if item.strip())


def path_segment(value: object) -> str:
    """Quote ``value`` so it stays a single URL path segment."""
    return urllib.parse.quote(str(value), safe="")
