"""HTTP surface tests using FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from screener import memory
from screener.main import app

from .conftest import adhd_heavy_responses


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def clear_sessions():
    memory.list_sessions().clear()
    yield
    memory.list_sessions().clear()


# ============================================================================
# Configuration endpoints
# ============================================================================

class TestConfigEndpoints:

    def test_health(self, client):
        body = client.get("/health").json()
        assert body["ok"] is True

    def test_list_sections(self, client):
        sections = client.get("/questions").json()
        assert [s["id"] for s in sections] == ["demographics", "tier1", "tier2", "tier3", "tier4"]

    def test_single_section(self, client):
        section = client.get("/questions/tier4").json()
        assert [q["impairment_domain"] for q in section["questions"]] == ["academic", "social", "family", "emotional"]

    def test_unknown_section(self, client):
        assert client.get("/questions/tier9").status_code == 404

    def test_age_context(self, client):
        body = client.get("/age-context/7").json()
        assert body["norm_age"] == 6


# ============================================================================
# Stateless screening
# ============================================================================

class TestScreeningEndpoint:

    def test_full_screening(self, client, config):
        resp = client.post("/screenings", json={"responses": adhd_heavy_responses(config)})

        assert resp.status_code == 200
        body = resp.json()
        assert body["scores"]["adhd"] == 80
        assert body["recommendations"]["urgency"] == "urgent"
        assert body["features"]["variability"] == 4

    def test_rules_mode(self, client, config):
        resp = client.post(
            "/screenings",
            json={"responses": adhd_heavy_responses(config), "pattern_mode": "rules"},
        )

        assert resp.json()["pattern_matches"]["adhd"]["pattern_name"] == "ADHD Combined Type"

    def test_invalid_pattern_mode(self, client):
        resp = client.post("/screenings", json={"responses": {}, "pattern_mode": "fuzzy"})
        assert resp.status_code == 422

    def test_negative_age(self, client):
        resp = client.post("/screenings", json={"responses": {}, "age": -1})
        assert resp.status_code == 422


# ============================================================================
# Draft sessions
# ============================================================================

class TestSessionFlow:

    def test_answer_submit_result_reset(self, client, config):
        answers = adhd_heavy_responses(config)

        resp = client.post("/sessions/answer", json={"session_id": "s1", "answers": answers})
        assert resp.status_code == 200

        submitted = client.post("/sessions/submit", json={"session_id": "s1"}).json()
        assert submitted["missing_required"] == []
        assert submitted["result"]["confidence"] == "high"

        stored = client.get("/sessions/s1/result").json()
        assert stored["probabilities"] == submitted["result"]["probabilities"]

        reset = client.post("/sessions/reset", json={"session_id": "s1"}).json()
        assert reset["responses"] == {}
        assert client.get("/sessions/s1/result").status_code == 404

    def test_answers_merge_and_report_missing(self, client):
        client.post("/sessions/answer", json={"session_id": "s2", "answers": {"age": 9}})
        resp = client.post(
            "/sessions/answer",
            json={"session_id": "s2", "answers": {"family_history": ["ADHD"]}, "section_id": "demographics"},
        )

        body = resp.json()
        assert body["responses"] == {"age": 9, "family_history": ["ADHD"]}
        assert body["missing_required"] == ["gender"]

    def test_new_answers_discard_stored_result(self, client):
        client.post("/sessions/answer", json={"session_id": "s3", "answers": {"age": 9}})
        client.post("/sessions/submit", json={"session_id": "s3"})
        client.post("/sessions/answer", json={"session_id": "s3", "answers": {"gender": "Female"}})

        assert client.get("/sessions/s3/result").status_code == 404

    def test_submit_with_missing_answers_still_scores(self, client):
        client.post("/sessions/answer", json={"session_id": "s4", "answers": {"age": 12}})

        body = client.post("/sessions/submit", json={"session_id": "s4"}).json()

        assert "gender" in body["missing_required"]
        assert body["result"]["age"] == 12

    def test_submit_empty_session(self, client):
        assert client.post("/sessions/submit", json={"session_id": "empty"}).status_code == 400

    def test_unknown_section_on_answer(self, client):
        resp = client.post("/sessions/answer", json={"session_id": "s5", "answers": {}, "section_id": "nope"})
        assert resp.status_code == 404
