"""Tests for the FastAPI moderation service."""

import json
import tempfile

from fastapi.testclient import TestClient

from sift.config import SiftConfig
from web.backend.app.main import create_app


def test_health_and_root():
    with TestClient(create_app(SiftConfig(audit_enabled=False))) as client:
        assert client.get("/health").json() == {"status": "healthy"}
        assert client.get("/").json()["name"] == "Sift API"


def test_analyze_endpoint():
    with TestClient(create_app(SiftConfig(audit_enabled=False))) as client:
        resp = client.post(
            "/api/moderation/analyze",
            json={"text": "hi @alice, this is shit", "context": {"post_id": "p1"}},
        )
        assert resp.status_code == 200
        data = resp.json()
        assert data["recommended_action"] == "review"
        assert data["mentions"] == ["alice"]
        assert data["flags"][0]["type"] == "toxicity"


def test_analyze_requires_text():
    with TestClient(create_app(SiftConfig(audit_enabled=False))) as client:
        assert client.post("/api/moderation/analyze", json={}).status_code == 422


def test_batch_endpoint_preserves_order():
    with TestClient(create_app(SiftConfig(audit_enabled=False))) as client:
        resp = client.post(
            "/api/moderation/batch",
            json={"texts": ["great job!", "you are an idiot person"]},
        )
        assert resp.status_code == 200
        assert [r["recommended_action"] for r in resp.json()] == ["approve", "review"]


def test_realtime_endpoint():
    with TestClient(create_app(SiftConfig(audit_enabled=False))) as client:
        ok = client.post("/api/moderation/realtime", json={"text": "great job!"}).json()
        assert ok["approved"] is True
        assert ok["reason"] is None

        blocked = client.post("/api/moderation/realtime", json={"text": "kill yourself"}).json()
        assert blocked["approved"] is False
        assert blocked["reason"].startswith("Content flagged: Contains severe hate speech: kill")
        assert blocked["analysis"]["recommended_action"] == "reject"


def test_policy_endpoint():
    config = SiftConfig(audit_enabled=False, failure_mode="closed")
    with TestClient(create_app(config)) as client:
        data = client.get("/api/moderation/policy").json()
        assert data["reject_above"] == 0.8
        assert data["failure_mode"] == "closed"


def test_audit_endpoints():
    with tempfile.TemporaryDirectory() as tmpdir:
        app = create_app(SiftConfig(audit_dir=tmpdir))
        with TestClient(app) as client:
            client.post("/api/moderation/analyze", json={"text": "great job!"})
            client.post("/api/moderation/analyze", json={"text": "I will bomb this place"})
            app.state.engine.audit.flush()

            records = client.get("/api/audit").json()
            assert len(records) == 2
            assert all("text" not in r for r in records)

            rejected = client.get("/api/audit", params={"action": "reject"}).json()
            assert len(rejected) == 1
            assert rejected[0]["flags"][0]["type"] == "hate_speech"

            stats = client.get("/api/audit/stats").json()
            assert stats == {"total": 2, "by_action": {"approve": 1, "reject": 1}}

            export = client.get("/api/audit/export", params={"format": "json"}).json()
            assert export["count"] == 2
            assert len(json.loads(export["content"])) == 2

            csv_export = client.get("/api/audit/export", params={"format": "csv"}).json()
            assert csv_export["content"].startswith("content_hash,")

            assert client.get("/api/audit", params={"action": "delete"}).status_code == 422


def test_audit_unavailable_without_local_log():
    with TestClient(create_app(SiftConfig(audit_enabled=False))) as client:
        assert client.get("/api/audit").status_code == 404
        assert client.get("/api/audit/stats").status_code == 404
