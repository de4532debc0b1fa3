"""Comment moderation — analyzers, decision policy and the engine that ties them together.

The engine runs three independent, rule-based analyzers over a comment:
- Sentiment: lexicon scoring with intensifier / negator modifiers
- Toxicity: tiered pattern catalog plus caps and repetition heuristics
- Content: topics, @mentions and stopword-vote language detection
"""

from sift.moderation.engine import ModerationEngine
from sift.moderation.models import (
    AIAnalysisResult,
    AnalysisInput,
    ContentMetadata,
    FlagKind,
    ModerationDecision,
    ModerationFlag,
    RecommendedAction,
    SentimentResult,
    ToxicityResult,
)
from sift.moderation.policy import DecisionPolicy, FailureMode, PolicyError, load_policy

__all__ = [
    "AIAnalysisResult",
    "AnalysisInput",
    "ContentMetadata",
    "DecisionPolicy",
    "FailureMode",
    "FlagKind",
    "ModerationDecision",
    "ModerationEngine",
    "ModerationFlag",
    "PolicyError",
    "RecommendedAction",
    "SentimentResult",
    "ToxicityResult",
    "load_policy",
]
