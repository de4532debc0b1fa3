"""Lexicon-based sentiment scoring with intensifier and negator modifiers."""

from __future__ import annotations

from sift.moderation.models import SentimentResult, clamp
from sift.moderation.tokenizer import tokenize

# ---------------------------------------------------------------------------
# Lexicons
# ---------------------------------------------------------------------------

POSITIVE_WORDS: frozenset[str] = frozenset({
    "amazing", "awesome", "beautiful", "brilliant", "excellent", "fantastic",
    "great", "incredible", "love", "perfect", "wonderful", "outstanding",
    "spectacular", "superb", "magnificent", "marvelous", "phenomenal",
    "inspiring", "uplifting", "motivating", "encouraging", "supportive",
    "grateful", "thankful", "blessed", "happy", "joyful", "excited",
    "proud", "accomplished", "successful", "thriving", "flourishing",
})

NEGATIVE_WORDS: frozenset[str] = frozenset({
    "awful", "terrible", "horrible", "disgusting", "hate", "worst",
    "pathetic", "useless", "stupid", "idiotic", "annoying", "frustrating",
    "disappointing", "depressing", "sad", "angry", "furious", "outraged",
    "disgusted", "appalled", "shocked", "devastated", "heartbroken",
    "miserable", "hopeless", "worthless", "failure", "disaster",
})

INTENSIFIERS: frozenset[str] = frozenset({
    "very", "extremely", "incredibly", "absolutely", "totally", "completely",
    "utterly", "really", "truly", "definitely", "certainly", "particularly",
    "especially", "remarkably", "exceptionally", "tremendously",
})

NEGATORS: frozenset[str] = frozenset({
    "not", "no", "never", "none", "nothing", "nobody", "nowhere",
    "neither", "nor", "hardly", "scarcely", "barely", "seldom", "rarely",
})

BASE_CONFIDENCE = 0.8
INTENSIFIER_SCORE = 1.5
INTENSIFIER_CONFIDENCE = 1.2
NEGATOR_CONFIDENCE = 1.1


class SentimentAnalyzer:
    """Scores polarity as the mean of per-word lexicon scores."""

    def analyze(self, text: str) -> SentimentResult:
        words = tokenize(text.lower())
        score_sum = 0.0
        confidence_sum = 0.0
        matched = 0

        for i, word in enumerate(words):
            if word in POSITIVE_WORDS:
                word_score = 1.0
            elif word in NEGATIVE_WORDS:
                word_score = -1.0
            else:
                continue
            word_confidence = BASE_CONFIDENCE

            previous = words[i - 1] if i > 0 else None
            if previous in INTENSIFIERS:
                word_score *= INTENSIFIER_SCORE
                word_confidence *= INTENSIFIER_CONFIDENCE
            if previous in NEGATORS:
                word_score *= -1
                word_confidence *= NEGATOR_CONFIDENCE

            score_sum += word_score
            confidence_sum += word_confidence
            matched += 1

        score = clamp(score_sum / matched, -1.0, 1.0) if matched else 0.0
        confidence = min(1.0, confidence_sum / max(matched, 1))
        return SentimentResult(score=score, confidence=confidence)
