"""Keyword extraction and Jaccard similarity between free-text blobs."""

from __future__ import annotations

import re

from jira_insights.core.config import KEYWORD_MIN_LENGTH, STOP_WORDS

_STRIP_PATTERN = re.compile(r"[^\w\s-]")


def extract_keywords(text: str | None) -> list[str]:
    """Return unique keywords in first-occurrence order.

    Text is lower-cased, punctuation other than hyphens is replaced by spaces,
    and tokens of ``KEYWORD_MIN_LENGTH`` characters or fewer and stop words are
    dropped.

    Examples
    --------
    >>> extract_keywords("Login fails after the timeout, login again")
    ['login', 'fails', 'after', 'timeout', 'again']
    """
    if not text:
        return []
    cleaned = _STRIP_PATTERN.sub(" ", str(text).lower())
    seen: set[str] = set()
    out: list[str] = []
    for word in cleaned.split():
        if len(word) <= KEYWORD_MIN_LENGTH or word in STOP_WORDS:
            continue
        if word not in seen:
            seen.add(word)
            out.append(word)
    return out


def keyword_set(text: str | None) -> frozenset[str]:
    return frozenset(extract_keywords(text))


def similarity(text_a: str | None, text_b: str | None) -> float:
    """Jaccard index of the two keyword sets, 0.0 when both are empty."""
    words_a = keyword_set(text_a)
    words_b = keyword_set(text_b)
    union = words_a | words_b
    if not union:
        return 0.0
    return len(words_a & words_b) / len(union)
