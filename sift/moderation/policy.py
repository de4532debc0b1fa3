"""Decision policy — the threshold ladder that turns scores into an action.

The ladder is evaluated top down and the first match wins:

    toxicity > reject_above                          -> reject
    toxicity > auto_hide_above                       -> auto_hide
    toxicity > review_above or sentiment < negative  -> review
    otherwise                                        -> approve

Thresholds can be loaded from a YAML file so deployments can tune them
without code changes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from pathlib import Path

import yaml

from sift.moderation.models import RecommendedAction


class PolicyError(ValueError):
    """Raised for an invalid decision policy."""


class FailureMode(Enum):
    """What the engine recommends when an analyzer fails."""

    OPEN = "open"  # approve: availability over safety
    CLOSED = "closed"  # hold for human review

    @property
    def action(self) -> RecommendedAction:
        if self is FailureMode.CLOSED:
            return RecommendedAction.REVIEW
        return RecommendedAction.APPROVE


@dataclass(frozen=True)
class DecisionPolicy:
    """Immutable decision thresholds plus the failure mode."""

    reject_above: float = 0.8
    auto_hide_above: float = 0.6
    review_above: float = 0.4
    negative_sentiment_below: float = -0.7
    failure_mode: FailureMode = FailureMode.OPEN

    def __post_init__(self) -> None:
        for name in ("reject_above", "auto_hide_above", "review_above"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise PolicyError(f"{name} must be within [0, 1], got {value}")
        if not -1.0 <= self.negative_sentiment_below <= 1.0:
            raise PolicyError(
                f"negative_sentiment_below must be within [-1, 1], got {self.negative_sentiment_below}"
            )
        if not self.reject_above >= self.auto_hide_above >= self.review_above:
            raise PolicyError(
                "thresholds must satisfy reject_above >= auto_hide_above >= review_above"
            )

    def decide(self, toxicity_score: float, sentiment_score: float) -> RecommendedAction:
        """Map scores to an action. Pure: depends only on the arguments and thresholds."""
        if toxicity_score > self.reject_above:
            return RecommendedAction.REJECT
        if toxicity_score > self.auto_hide_above:
            return RecommendedAction.AUTO_HIDE
        if toxicity_score > self.review_above or sentiment_score < self.negative_sentiment_below:
            return RecommendedAction.REVIEW
        return RecommendedAction.APPROVE

    def to_dict(self) -> dict:
        data = asdict(self)
        data["failure_mode"] = self.failure_mode.value
        return data


_POLICY_KEYS = {
    "reject_above",
    "auto_hide_above",
    "review_above",
    "negative_sentiment_below",
    "failure_mode",
}


def policy_from_dict(data: dict) -> DecisionPolicy:
    """Build a policy from a mapping, validating keys and values."""
    unknown = set(data) - _POLICY_KEYS
    if unknown:
        raise PolicyError(f"Unknown policy keys: {', '.join(sorted(unknown))}")

    kwargs: dict = {}
    for key in _POLICY_KEYS - {"failure_mode"}:
        if key in data:
            try:
                kwargs[key] = float(data[key])
            except (TypeError, ValueError):
                raise PolicyError(f"{key} must be a number, got {data[key]!r}") from None
    if "failure_mode" in data:
        try:
            kwargs["failure_mode"] = FailureMode(str(data["failure_mode"]).lower())
        except ValueError:
            raise PolicyError(
                f"failure_mode must be 'open' or 'closed', got {data['failure_mode']!r}"
            ) from None
    return DecisionPolicy(**kwargs)


def load_policy(path: str | Path) -> DecisionPolicy:
    """Load a decision policy from a YAML file.

    The file may hold the thresholds at top level or under a ``policy`` key.
    """
    try:
        with open(path) as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise PolicyError(f"Invalid YAML in {path}: {e}") from e
    if not isinstance(data, dict):
        raise PolicyError(f"Policy file {path} must contain a mapping")
    if "policy" in data and isinstance(data["policy"], dict):
        data = data["policy"]
    return policy_from_dict(data)
