"""Tests for the decision policy."""

import tempfile
from pathlib import Path

import pytest
import yaml

from sift.moderation.models import RecommendedAction
from sift.moderation.policy import (
    DecisionPolicy,
    FailureMode,
    PolicyError,
    load_policy,
    policy_from_dict,
)


def test_default_ladder():
    policy = DecisionPolicy()
    assert policy.decide(0.95, 0.0) == RecommendedAction.REJECT
    assert policy.decide(0.7, 0.0) == RecommendedAction.AUTO_HIDE
    assert policy.decide(0.5, 0.0) == RecommendedAction.REVIEW
    assert policy.decide(0.1, 0.0) == RecommendedAction.APPROVE


def test_thresholds_are_strict():
    policy = DecisionPolicy()
    assert policy.decide(0.8, 0.0) == RecommendedAction.AUTO_HIDE
    assert policy.decide(0.6, 0.0) == RecommendedAction.REVIEW
    assert policy.decide(0.4, 0.0) == RecommendedAction.APPROVE


def test_negative_sentiment_triggers_review():
    policy = DecisionPolicy()
    assert policy.decide(0.0, -0.71) == RecommendedAction.REVIEW
    assert policy.decide(0.0, -0.7) == RecommendedAction.APPROVE
    # toxicity rungs take priority over sentiment
    assert policy.decide(0.9, -1.0) == RecommendedAction.REJECT


def test_decision_is_monotonic_in_toxicity():
    policy = DecisionPolicy()
    for sentiment in (-1.0, -0.7, 0.0, 1.0):
        previous = -1
        for step in range(101):
            severity = policy.decide(step / 100, sentiment).severity
            assert severity >= previous
            previous = severity


def test_unordered_thresholds_rejected():
    with pytest.raises(PolicyError):
        DecisionPolicy(reject_above=0.5, auto_hide_above=0.6)


def test_out_of_range_thresholds_rejected():
    with pytest.raises(PolicyError):
        DecisionPolicy(reject_above=1.5)
    with pytest.raises(PolicyError):
        DecisionPolicy(negative_sentiment_below=-2.0)


def test_failure_mode_actions():
    assert FailureMode.OPEN.action == RecommendedAction.APPROVE
    assert FailureMode.CLOSED.action == RecommendedAction.REVIEW


def test_policy_from_dict_validates():
    policy = policy_from_dict({"review_above": "0.3", "failure_mode": "CLOSED"})
    assert policy.review_above == 0.3
    assert policy.failure_mode == FailureMode.CLOSED

    with pytest.raises(PolicyError):
        policy_from_dict({"reject_at": 0.9})
    with pytest.raises(PolicyError):
        policy_from_dict({"review_above": "lots"})
    with pytest.raises(PolicyError):
        policy_from_dict({"failure_mode": "sideways"})


def test_load_policy_from_yaml():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "policy.yaml"
        with open(path, "w") as f:
            yaml.dump({"policy": {"reject_above": 0.9, "auto_hide_above": 0.7}}, f)

        policy = load_policy(path)
        assert policy.reject_above == 0.9
        assert policy.auto_hide_above == 0.7
        assert policy.review_above == 0.4
        assert policy.decide(0.85, 0.0) == RecommendedAction.AUTO_HIDE


def test_to_dict_serializes_failure_mode():
    data = DecisionPolicy().to_dict()
    assert data["failure_mode"] == "open"
    assert data["reject_above"] == 0.8


def test_load_policy_rejects_malformed_yaml():
    with tempfile.TemporaryDirectory() as tmpdir:
        path = Path(tmpdir) / "policy.yaml"
        path.write_text("reject_above: [0.9\n", encoding="utf-8")
        with pytest.raises(PolicyError, match="Invalid YAML"):
            load_policy(path)
