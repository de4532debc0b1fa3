"""Toxicity detection from a tiered pattern catalog plus text heuristics.

Every check runs on every comment. The final score is the highest floor any
check raised (a comment is as toxic as its worst signal), not a sum.

Tiers, in the order their flags are reported:
1. Severe: violent extremism terms and slurs -> ``hate_speech``
2. Moderate: profanity, self-harm incitement, harassment -> ``toxicity``
3. Spam: URLs, bare domains, promotion and engagement bait -> ``spam``
4. Shouting: mostly-uppercase text -> ``inappropriate``
5. Repetition: runs of 3+ identical characters -> ``spam``
"""

from __future__ import annotations

import re

from sift.moderation.models import FlagKind, ModerationFlag, ToxicityResult

# ---------------------------------------------------------------------------
# Pattern catalog
# ---------------------------------------------------------------------------

_SEVERE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("extremism", re.compile(r"\b(terrorist|bomb|kill|murder|rape|nazi|hitler)\b", re.IGNORECASE)),
    # Slurs: matched only so they can be rejected
    ("slur", re.compile(r"\b(nigger|faggot|chink|spic|kike)\b", re.IGNORECASE)),
]

_MODERATE_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("profanity", re.compile(r"\b(f+u+c+k|s+h+i+t|d+a+m+n|b+i+t+c+h|a+s+s+h+o+l+e)\b", re.IGNORECASE)),
    ("self_harm", re.compile(r"\b(kill\s+yourself|kys|die|suicide)\b", re.IGNORECASE)),
    (
        "harassment",
        re.compile(
            r"\b(stupid|idiot|moron|retard|loser|pathetic)\s+(person|human|individual)",
            re.IGNORECASE,
        ),
    ),
]

_SPAM_PATTERNS: list[tuple[str, re.Pattern[str]]] = [
    ("url", re.compile(r"https?://[^\s]+", re.IGNORECASE)),
    ("domain", re.compile(r"\b\w+\.\w{2,}\b", re.IGNORECASE)),
    ("promotion", re.compile(r"\b(buy\s+now|click\s+here|free\s+money|get\s+rich)\b", re.IGNORECASE)),
    ("engagement_bait", re.compile(r"\b(follow\s+me|subscribe|like\s+and\s+share)\b", re.IGNORECASE)),
]

_REPEATED_CHARS = re.compile(r"(.)\1{2,}")

SEVERE_FLOOR = 0.9
SEVERE_CONFIDENCE = 0.95
MODERATE_FLOOR = 0.6
MODERATE_CONFIDENCE = 0.8
SPAM_WEIGHT = 0.2  # per match
SPAM_THRESHOLD = 0.5
SPAM_CAP = 0.9
SHOUTING_MIN_LENGTH = 20
SHOUTING_RATIO = 0.7
SHOUTING_FLOOR = 0.3
SHOUTING_CONFIDENCE = 0.6
REPETITION_RATIO = 0.3
REPETITION_FLOOR = 0.2
REPETITION_CONFIDENCE = 0.5


def _matches(pattern: re.Pattern[str], text: str) -> list[str]:
    return [m.group(0) for m in pattern.finditer(text)]


def caps_ratio(text: str) -> float:
    """Share of letters in *text* that are uppercase (0.0 with no letters)."""
    letters = [ch for ch in text if ch.isalpha()]
    if not letters:
        return 0.0
    return sum(1 for ch in letters if ch.isupper()) / len(letters)


def repetition_ratio(text: str) -> float:
    """Runs of 3+ identical characters per ten characters of text."""
    runs = sum(1 for _ in _REPEATED_CHARS.finditer(text))
    return runs / max(len(text) / 10, 1)


def spam_score(text: str) -> float:
    """Cumulative spam score: each matched pattern occurrence adds 0.2."""
    return sum(len(_matches(pattern, text)) * SPAM_WEIGHT for _, pattern in _SPAM_PATTERNS)


class ToxicityDetector:
    """Stateless detector; safe to share between threads."""

    def detect(self, text: str) -> ToxicityResult:
        flags: list[ModerationFlag] = []
        score = 0.0

        for _label, pattern in _SEVERE_PATTERNS:
            found = _matches(pattern, text)
            if found:
                score = max(score, SEVERE_FLOOR)
                terms = ", ".join(dict.fromkeys(t.lower() for t in found))
                flags.append(
                    ModerationFlag(
                        kind=FlagKind.HATE_SPEECH,
                        confidence=SEVERE_CONFIDENCE,
                        reason=f"Contains severe hate speech: {terms}",
                    )
                )

        for _label, pattern in _MODERATE_PATTERNS:
            found = _matches(pattern, text)
            if found:
                score = max(score, MODERATE_FLOOR)
                flags.append(
                    ModerationFlag(
                        kind=FlagKind.TOXICITY,
                        confidence=MODERATE_CONFIDENCE,
                        reason=f"Contains inappropriate language: {len(found)} violations",
                    )
                )

        spam = spam_score(text)
        if spam > SPAM_THRESHOLD:
            capped = min(spam, SPAM_CAP)
            score = max(score, capped)
            flags.append(
                ModerationFlag(
                    kind=FlagKind.SPAM,
                    confidence=capped,
                    reason="Contains spam-like content",
                )
            )

        if len(text) > SHOUTING_MIN_LENGTH and caps_ratio(text) > SHOUTING_RATIO:
            score = max(score, SHOUTING_FLOOR)
            flags.append(
                ModerationFlag(
                    kind=FlagKind.INAPPROPRIATE,
                    confidence=SHOUTING_CONFIDENCE,
                    reason="Excessive use of capital letters",
                )
            )

        if repetition_ratio(text) > REPETITION_RATIO:
            score = max(score, REPETITION_FLOOR)
            flags.append(
                ModerationFlag(
                    kind=FlagKind.SPAM,
                    confidence=REPETITION_CONFIDENCE,
                    reason="Excessive repeated characters",
                )
            )

        confidence = max((f.confidence for f in flags), default=0.0)
        return ToxicityResult(
            score=min(1.0, score),
            confidence=min(1.0, confidence),
            flags=tuple(flags),
        )
