"""Tests for the moderation engine."""

import hashlib
import json
import tempfile
from pathlib import Path

import pytest

from sift.audit.audit_log import AuditDispatcher, HttpAuditSink, JsonlAuditSink, MemoryAuditSink
from sift.config import SiftConfig
from sift.moderation.engine import ModerationEngine
from sift.moderation.models import AIAnalysisResult, AnalysisInput, FlagKind, RecommendedAction
from sift.moderation.policy import DecisionPolicy, FailureMode


class _BrokenAnalyzer:
    def analyze(self, text):
        raise RuntimeError("lexicon unavailable")


class _FailingSink:
    def write(self, record):
        raise OSError("disk full")


class _ExplodingDispatcher:
    def submit(self, record):
        raise RuntimeError("queue gone")

    def close(self):
        pass


# --- Analysis Tests ---


def test_empty_comment_is_approved():
    result = ModerationEngine().analyze_comment("")
    assert result.sentiment_score == 0.0
    assert result.toxicity_score == 0.0
    assert result.confidence == 0.0
    assert result.flags == ()
    assert result.recommended_action == RecommendedAction.APPROVE


def test_analysis_is_deterministic():
    engine = ModerationEngine()
    text = "Amazing workout @sam, but the music was awful!!!"
    assert engine.analyze_comment(text) == engine.analyze_comment(text)


def test_negation_changes_sign():
    engine = ModerationEngine()
    assert engine.analyze_comment("amazing").sentiment_score > 0
    assert engine.analyze_comment("not amazing").sentiment_score < 0


def test_severe_content_is_rejected():
    result = ModerationEngine().analyze_comment("I will bomb this place")
    assert result.toxicity_score >= 0.9
    assert any(f.kind == FlagKind.HATE_SPEECH for f in result.flags)
    assert result.recommended_action == RecommendedAction.REJECT


def test_shouting_is_flagged():
    result = ModerationEngine().analyze_comment("THIS IS ABSOLUTELY RIDICULOUS")
    assert result.toxicity_score >= 0.3
    assert any(f.kind == FlagKind.INAPPROPRIATE for f in result.flags)


def test_confidence_is_max_of_components():
    result = ModerationEngine().analyze_comment("this is shit")
    assert result.confidence == pytest.approx(max(result.sentiment.confidence, result.toxicity.confidence))
    assert result.confidence == pytest.approx(0.8)


def test_context_is_accepted_and_ignored():
    engine = ModerationEngine()
    with_context = engine.analyze(AnalysisInput(text="great job!", context={"post_id": "p1"}))
    assert with_context == engine.analyze_comment("great job!")


def test_scores_stay_in_range():
    engine = ModerationEngine()
    samples = [
        "very very amazing amazing",
        "extremely terrible awful worst",
        "FREE MONEY!!! http://a.io http://b.io http://c.io click here buy now",
        "kill yourself loser person",
        "ok",
    ]
    for result in engine.analyze_comments(samples):
        assert -1.0 <= result.sentiment_score <= 1.0
        assert 0.0 <= result.toxicity_score <= 1.0
        assert 0.0 <= result.confidence <= 1.0


def test_result_flattens_to_dict():
    data = ModerationEngine().analyze_comment("hi @alice, this is shit").to_dict()
    assert data["mentions"] == ["alice"]
    assert data["flags"][0]["type"] == "toxicity"
    assert data["recommended_action"] == "review"
    json.dumps(data)


# --- Batch Tests ---


def test_batch_scenario():
    results = ModerationEngine().analyze_comments(["great job!", "you are an idiot person"])
    assert len(results) == 2

    first, second = results
    assert first.recommended_action == RecommendedAction.APPROVE
    assert first.sentiment_score > 0

    assert second.toxicity_score >= 0.6
    assert {f.kind for f in second.flags} & {FlagKind.TOXICITY, FlagKind.HARASSMENT}
    assert second.recommended_action != RecommendedAction.APPROVE


def test_batch_with_workers_preserves_order():
    texts = [f"comment {i} is amazing" if i % 2 else f"comment {i} is shit" for i in range(20)]
    engine = ModerationEngine()
    assert engine.analyze_comments(texts, max_workers=4) == engine.analyze_comments(texts, max_workers=0)


def test_batch_empty():
    assert ModerationEngine().analyze_comments([]) == []


# --- Realtime Tests ---


def test_realtime_approves_clean_comment():
    decision = ModerationEngine().moderate_realtime("great job!")
    assert decision.approved
    assert decision.reason is None
    assert decision.analysis.recommended_action == RecommendedAction.APPROVE


def test_realtime_joins_flag_reasons():
    decision = ModerationEngine().moderate_realtime("kill yourself")
    assert not decision.approved
    assert decision.reason == (
        "Content flagged: Contains severe hate speech: kill, "
        "Contains inappropriate language: 1 violations"
    )


def test_realtime_reason_without_flags():
    decision = ModerationEngine().moderate_realtime("this is extremely terrible")
    assert decision.analysis.recommended_action == RecommendedAction.REVIEW
    assert decision.analysis.flags == ()
    assert decision.reason == "Content flagged: held for review"


# --- Failure Policy Tests ---


def test_analyzer_failure_fails_open():
    sink = MemoryAuditSink()
    dispatcher = AuditDispatcher(sink)
    engine = ModerationEngine(audit=dispatcher, sentiment=_BrokenAnalyzer())

    result = engine.analyze_comment("I will bomb this place")
    assert result == AIAnalysisResult.safe_default()
    assert result.recommended_action == RecommendedAction.APPROVE
    assert result.language == "en"

    engine.close()
    assert sink.records == []


def test_analyzer_failure_fails_closed():
    engine = ModerationEngine(
        policy=DecisionPolicy(failure_mode=FailureMode.CLOSED),
        content=_BrokenAnalyzer(),
    )
    decision = engine.moderate_realtime("hello")
    assert decision.analysis.recommended_action == RecommendedAction.REVIEW
    assert decision.analysis.toxicity_score == 0.0
    assert not decision.approved


# --- Audit Tests ---


def test_analysis_is_audited_without_raw_text():
    sink = MemoryAuditSink()
    engine = ModerationEngine(audit=AuditDispatcher(sink))
    text = "hi @alice, loved this recipe"

    result = engine.analyze_comment(text)
    engine.audit.flush()

    assert len(sink.records) == 1
    record = sink.records[0]
    assert record.content_hash == hashlib.sha256(text.encode("utf-8")).hexdigest()
    assert record.content_length == len(text)
    assert record.recommended_action == result.recommended_action.value
    assert record.topics == ["food"]
    serialized = json.dumps(record.to_dict())
    assert "alice" not in serialized
    assert "recipe" not in serialized
    engine.close()


def test_sink_failure_does_not_change_result():
    engine = ModerationEngine(audit=AuditDispatcher(_FailingSink()))
    baseline = ModerationEngine().analyze_comment("this is shit")

    assert engine.analyze_comment("this is shit") == baseline
    engine.audit.flush()
    engine.close()


def test_dispatcher_error_does_not_reach_caller():
    engine = ModerationEngine(audit=_ExplodingDispatcher())
    result = engine.analyze_comment("great job!")
    assert result.recommended_action == RecommendedAction.APPROVE


# --- Construction Tests ---


def test_from_config_uses_jsonl_sink():
    with tempfile.TemporaryDirectory() as tmpdir:
        engine = ModerationEngine.from_config(SiftConfig(audit_dir=tmpdir, batch_workers=2))
        assert isinstance(engine.audit.sink, JsonlAuditSink)
        assert engine.batch_workers == 2

        engine.analyze_comment("great job!")
        engine.close()
        assert len(list(Path(tmpdir).glob("*.jsonl"))) == 1


def test_from_config_uses_http_sink():
    engine = ModerationEngine.from_config(SiftConfig(audit_url="https://db.example.com", audit_api_key="k"))
    assert isinstance(engine.audit.sink, HttpAuditSink)
    engine.close()


def test_from_config_without_audit():
    engine = ModerationEngine.from_config(SiftConfig(audit_enabled=False, failure_mode="closed"))
    assert engine.audit is None
    assert engine.policy.failure_mode == FailureMode.CLOSED
    engine.close()
