"""Word splitting shared by the analyzers."""

from __future__ import annotations

import re

_NON_WORD = re.compile(r"[^\w\s]")


def tokenize(text: str) -> list[str]:
    """Return the words of *text* with punctuation removed, in order.

    Callers normalize case themselves.
    """
    return _NON_WORD.sub(" ", text).split()


def split_words(text: str) -> list[str]:
    """Lowercase *text* and split on whitespace, keeping punctuation attached."""
    return text.lower().split()
