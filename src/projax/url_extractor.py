"""Scan process output for the URLs a dev server announces."""

from __future__ import annotations

import re
from typing import Iterable, List

_ANSI_ESCAPE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_TRAILING_PUNCTUATION = ".,;:)]}>'\"/"

_URL_PATTERNS = (
    re.compile(r"(?:Local|Network):\s*(https?://\S+)", re.IGNORECASE),
    re.compile(r"(https?://localhost:\d+\S*)", re.IGNORECASE),
    re.compile(r"(https?://127\.0\.0\.1:\d+\S*)", re.IGNORECASE),
    re.compile(r"(https?://0\.0\.0\.0:\d+\S*)", re.IGNORECASE),
    re.compile(r"(https?://[^\s:/]+:\d+\S*)", re.IGNORECASE),
)


def _clean(url: str) -> str:
    return url.rstrip(_TRAILING_PUNCTUATION)


def extract_urls(text: str) -> List[str]:
    """Return URLs found in ``text`` in order of first appearance, without duplicates."""
    if not text:
        return []

    plain = _ANSI_ESCAPE.sub("", text)
    found: list[tuple[int, str]] = []
    for pattern in _URL_PATTERNS:
        for match in pattern.finditer(plain):
            url = _clean(match.group(1))
            if url:
                found.append((match.start(1), url))

    found.sort(key=lambda item: item[0])
    return merge_urls([], (url for _, url in found))


def merge_urls(existing: Iterable[str], additions: Iterable[str]) -> List[str]:
    """Append unseen URLs to ``existing`` while keeping the original order."""
    merged: list[str] = []
    seen: set[str] = set()
    for url in list(existing) + list(additions):
        if url in seen:
            continue
        seen.add(url)
        merged.append(url)
    return merged


def localhost_url(port: int) -> str:
    return f"http://localhost:{port}"


__all__ = ["extract_urls", "localhost_url", "merge_urls"]
