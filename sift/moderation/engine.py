"""Moderation engine — runs the analyzers, aggregates and decides.

The engine is an explicitly constructed value: build it once at startup
(``ModerationEngine.from_config``) and pass it to whoever needs it. All
analyzer tables are immutable module constants, so one engine can serve
concurrent callers without locking.

A decision is always returned. Analyzer failures are caught here and
converted to the failure-mode default; audit failures are logged and never
reach the caller.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import TYPE_CHECKING, Any, Iterable, Optional

from sift.audit.audit_log import (
    AuditDispatcher,
    HttpAuditSink,
    JsonlAuditSink,
    build_audit_record,
)
from sift.moderation.content import ContentAnalyzer
from sift.moderation.models import (
    AIAnalysisResult,
    AnalysisInput,
    ModerationDecision,
    RecommendedAction,
)
from sift.moderation.policy import DecisionPolicy
from sift.moderation.sentiment import SentimentAnalyzer
from sift.moderation.toxicity import ToxicityDetector

if TYPE_CHECKING:
    from sift.config import SiftConfig

logger = logging.getLogger(__name__)

_ACTION_LABELS = {
    RecommendedAction.REVIEW: "held for review",
    RecommendedAction.AUTO_HIDE: "hidden pending review",
    RecommendedAction.REJECT: "rejected",
}


class ModerationEngine:
    """Single-shot, stateless comment moderation.

    Parameters
    ----------
    policy : DecisionPolicy | None
        Thresholds and failure mode. Defaults to :class:`DecisionPolicy`.
    audit : AuditDispatcher | None
        Receives one redacted record per analysis. ``None`` disables auditing.
    batch_workers : int
        Threads used by :meth:`analyze_comments`; ``0`` runs sequentially.
    """

    def __init__(
        self,
        policy: Optional[DecisionPolicy] = None,
        audit: Optional[AuditDispatcher] = None,
        batch_workers: int = 0,
        sentiment: Optional[SentimentAnalyzer] = None,
        toxicity: Optional[ToxicityDetector] = None,
        content: Optional[ContentAnalyzer] = None,
    ) -> None:
        self.policy = policy or DecisionPolicy()
        self.audit = audit
        self.batch_workers = batch_workers
        self._sentiment = sentiment or SentimentAnalyzer()
        self._toxicity = toxicity or ToxicityDetector()
        self._content = content or ContentAnalyzer()

    @classmethod
    def from_config(cls, config: SiftConfig) -> ModerationEngine:
        """Build an engine, its policy and its audit path from *config*."""
        audit = None
        if config.audit_enabled:
            if config.audit_url:
                sink = HttpAuditSink(
                    config.audit_url,
                    api_key=config.audit_api_key,
                    table=config.audit_table,
                )
            else:
                sink = JsonlAuditSink(config.audit_dir or None)
            audit = AuditDispatcher(sink, max_queue_size=config.audit_queue_size)
        return cls(
            policy=config.load_decision_policy(),
            audit=audit,
            batch_workers=config.batch_workers,
        )

    # -- analysis ------------------------------------------------------------

    def analyze(self, request: AnalysisInput) -> AIAnalysisResult:
        """Analyze one comment. ``request.context`` is accepted but unused."""
        text = request.text or ""
        try:
            sentiment = self._sentiment.analyze(text)
            toxicity = self._toxicity.detect(text)
            content = self._content.analyze(text)
        except Exception:
            logger.exception(
                "Analyzer failed (length=%d); returning %s default",
                len(text),
                self.policy.failure_mode.value,
            )
            return AIAnalysisResult.safe_default(self.policy.failure_mode.action)

        result = AIAnalysisResult(
            sentiment=sentiment,
            toxicity=toxicity,
            content=content,
            confidence=max(sentiment.confidence, toxicity.confidence),
            recommended_action=self.policy.decide(toxicity.score, sentiment.score),
        )
        self._record(text, result)
        return result

    def analyze_comment(self, text: str, context: Optional[dict[str, Any]] = None) -> AIAnalysisResult:
        return self.analyze(AnalysisInput(text=text, context=context))

    def analyze_comments(
        self, texts: Iterable[str], max_workers: Optional[int] = None
    ) -> list[AIAnalysisResult]:
        """Analyze each comment independently; output order matches input order."""
        texts = list(texts)
        workers = self.batch_workers if max_workers is None else max_workers
        if workers <= 1 or len(texts) <= 1:
            return [self.analyze_comment(t) for t in texts]
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(self.analyze_comment, texts))

    def moderate_realtime(self, text: str) -> ModerationDecision:
        """Pass/fail gate for a comment about to be posted."""
        analysis = self.analyze_comment(text)
        approved = analysis.recommended_action is RecommendedAction.APPROVE
        reason = None
        if not approved:
            reasons = [f.reason for f in analysis.flags]
            detail = ", ".join(reasons) if reasons else _ACTION_LABELS[analysis.recommended_action]
            reason = f"Content flagged: {detail}"
        return ModerationDecision(approved=approved, reason=reason, analysis=analysis)

    # -- audit ---------------------------------------------------------------

    def _record(self, text: str, result: AIAnalysisResult) -> None:
        if self.audit is None:
            return
        try:
            self.audit.submit(build_audit_record(text, result))
        except Exception:
            logger.warning("Could not queue audit record", exc_info=True)

    def close(self) -> None:
        """Flush and stop the audit dispatcher, if any."""
        if self.audit is not None:
            self.audit.close()
