"""
Documentation-link classification.

The scoring engine depends on the ``LinkClassifier`` protocol only, so the
keyword matcher can be replaced without touching scoring or the workflow.
"""

import re
from typing import Protocol

URL_PATTERN = re.compile(r"https?://[^\s]+")


class LinkClassifier(Protocol):
    def extract_links(self, text: str | None) -> list[str]: ...


class KeywordLinkClassifier:
    """Keeps URLs whose text mentions a documentation host or path."""

    DEFAULT_KEYWORDS = ("confluence", "wiki", "docs", "documentation")

    def __init__(self, keywords: tuple[str, ...] = DEFAULT_KEYWORDS):
        self._keywords = tuple(k.lower() for k in keywords)

    def extract_links(self, text: str | None) -> list[str]:
        if not text:
            return []
        return [
            url
            for url in URL_PATTERN.findall(text)
            if any(keyword in url.lower() for keyword in self._keywords)
        ]


keyword_link_classifier = KeywordLinkClassifier()
