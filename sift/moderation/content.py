"""Topic, mention and language extraction."""

from __future__ import annotations

import re

from sift.moderation.models import ContentMetadata
from sift.moderation.tokenizer import split_words

TOPIC_KEYWORDS: dict[str, tuple[str, ...]] = {
    "fitness": ("workout", "gym", "exercise", "training", "muscle", "cardio", "strength", "fitness", "health"),
    "food": ("food", "recipe", "cooking", "meal", "diet", "nutrition", "healthy", "delicious", "taste"),
    "travel": ("travel", "trip", "vacation", "destination", "adventure", "explore", "journey", "visit"),
    "technology": ("tech", "app", "software", "digital", "online", "internet", "computer", "mobile"),
    "lifestyle": ("life", "daily", "routine", "habit", "style", "living", "personal", "experience"),
    "entertainment": ("movie", "music", "show", "game", "fun", "entertainment", "enjoy", "watch"),
    "fashion": ("fashion", "style", "outfit", "clothing", "wear", "trend", "look", "design"),
    "business": ("business", "work", "career", "professional", "company", "success", "entrepreneur"),
}

# Languages in tie-break precedence order
STOPWORDS: dict[str, frozenset[str]] = {
    "en": frozenset({"the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by"}),
    "es": frozenset({"el", "la", "y", "o", "pero", "en", "a", "para", "de", "con", "por"}),
    "fr": frozenset({"le", "la", "et", "ou", "mais", "dans", "sur", "à", "pour", "de", "avec", "par"}),
}

FALLBACK_LANGUAGE = "en"

_MENTION = re.compile(r"@(\w+)")


def extract_topics(text: str) -> tuple[str, ...]:
    """Topics with at least one keyword contained in a word of *text*."""
    words = split_words(text)
    return tuple(
        topic
        for topic, keywords in TOPIC_KEYWORDS.items()
        if any(keyword in word for keyword in keywords for word in words)
    )


def extract_mentions(text: str) -> tuple[str, ...]:
    """@handles in first-seen order, duplicates removed."""
    return tuple(dict.fromkeys(_MENTION.findall(text)))


def detect_language(text: str) -> str:
    words = split_words(text)
    best, best_count = FALLBACK_LANGUAGE, 0
    for language, stopwords in STOPWORDS.items():
        count = sum(1 for word in words if word in stopwords)
        # strict > keeps the earlier language on ties
        if count > best_count:
            best, best_count = language, count
    return best


class ContentAnalyzer:
    def analyze(self, text: str) -> ContentMetadata:
        return ContentMetadata(
            topics=extract_topics(text),
            mentions=extract_mentions(text),
            language=detect_language(text),
        )
