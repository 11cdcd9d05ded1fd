from __future__ import annotations

from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from leadership.application.result_cache import ResultCache
from leadership.domain.catalog import QUESTIONS
from leadership.infrastructure.config import DatabaseConfig, reset_settings
from leadership.infrastructure.csv_sink import CsvResultSink
from leadership.web.dependencies import (
    get_csv_sink,
    get_db_session,
    get_result_cache,
    get_submission_session_factory,
)
from leadership.web.main import create_application

SCORES = {
    "raising_expectations": 75,
    "increasing_urgency": 65,
    "intensifying_commitment": 95,
    "transforming_conversations": 30,
    "data_driven_leadership": 80,
}


class AppHarness:
    def __init__(self, tmp_path: Path, SessionLocal: sessionmaker[Session]):
        self.app = create_application()
        self.sink = CsvResultSink(tmp_path / "storage" / "results.csv")
        self.cache = ResultCache()

        def override_get_db_session():
            session = SessionLocal()
            try:
                yield session
            finally:
                session.close()

        self.app.dependency_overrides[get_db_session] = override_get_db_session
        self.app.dependency_overrides[get_submission_session_factory] = lambda: SessionLocal
        self.app.dependency_overrides[get_csv_sink] = lambda: self.sink
        self.app.dependency_overrides[get_result_cache] = lambda: self.cache
        self.client = TestClient(self.app)


@pytest.fixture
def harness(tmp_path: Path, SessionLocal) -> AppHarness:
    return AppHarness(tmp_path, SessionLocal)


@pytest.fixture
def client(harness: AppHarness) -> TestClient:
    return harness.client


@pytest.fixture
def csv_disabled(monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("CSV_ENABLED", "false")
    reset_settings()
    yield
    monkeypatch.delenv("CSV_ENABLED")
    reset_settings()


def test_health(client: TestClient, harness: AppHarness):
    response = client.get("/api/health")
    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "ok"
    assert payload["csvPath"] == str(harness.sink.path)
    assert "timestamp" in payload


def test_catalog_endpoints(client: TestClient):
    dims = client.get("/api/dimensions").json()
    assert [d["id"] for d in dims][:2] == ["raising_expectations", "increasing_urgency"]
    assert dims[0]["shortDescription"] == "Setting higher standards and promoting experimentation"
    assert len(dims[0]["resources"]) == 5

    questions = client.get("/api/questions").json()
    assert len(questions) == 20
    assert questions[0]["dimensionId"] == "raising_expectations"

    filtered = client.get("/api/questions", params={"dimensionId": "increasing_urgency"}).json()
    assert [q["id"] for q in filtered] == ["q2_1", "q2_2", "q2_3", "q2_4"]

    assert client.get("/api/questions", params={"dimensionId": "nope"}).status_code == 404


def test_score_endpoint(client: TestClient, mixed_answers):
    response = client.post("/api/score", json={"answers": mixed_answers})
    assert response.status_code == 200
    payload = response.json()
    assert payload["result"]["averageScore"] == 69
    assert payload["result"]["dimensionScores"] == SCORES
    bands = [r["band"] for r in payload["recommendations"]]
    assert bands == ["high", "medium", "high", "low", "high"]


def test_score_rejects_incomplete_and_invalid(client: TestClient, all_fours):
    partial = dict(all_fours)
    del partial["q4_4"]
    response = client.post("/api/score", json={"answers": partial})
    assert response.status_code == 422
    assert response.json()["detail"] == "Please answer all questions before continuing."

    all_fours["q1_1"] = 7
    assert client.post("/api/score", json={"answers": all_fours}).status_code == 422


def test_recommendations_endpoint(client: TestClient):
    payload = client.get("/api/recommendations/raising_expectations", params={"score": 35}).json()
    assert payload["band"] == "low"
    assert len(payload["recommendations"]) == 4

    generic = client.get("/api/recommendations/unknown", params={"score": 90}).json()
    assert len(generic["recommendations"]) == 6

    assert client.get("/api/recommendations/raising_expectations", params={"score": 150}).status_code == 422


def test_create_and_fetch_assessment(client: TestClient, mixed_answers):
    response = client.post(
        "/api/assessment", json={"answers": mixed_answers, "dimensionScores": SCORES}
    )
    assert response.status_code == 201
    created = response.json()
    assert set(created) == {"assessmentId", "userId", "averageScore", "dimensionScores"}
    assert created["averageScore"] == 69

    detail = client.get(f"/api/assessment/{created['assessmentId']}")
    assert detail.status_code == 200
    record = detail.json()
    assert record["userId"] == created["userId"]
    assert record["averageScore"] == 69
    assert record["dimensionScores"] == SCORES
    assert record["answers"] == mixed_answers

    figure = client.get(f"/api/assessment/{created['assessmentId']}/figure")
    assert figure.status_code == 200
    assert figure.json()["figure"]["data"]

    listing = client.get("/api/assessments").json()
    assert listing[0]["id"] == created["assessmentId"]
    assert listing[0]["name"] == "Anonymous"

    users = client.get("/api/users").json()
    assert users[0]["id"] == created["userId"]
    assert users[0]["email"].startswith("anonymous_")


@pytest.mark.parametrize("assessment_id", [999, 0, -3])
def test_assessment_not_found(client: TestClient, assessment_id: int):
    assert client.get(f"/api/assessment/{assessment_id}").status_code == 404
    assert client.get(f"/api/assessment/{assessment_id}/figure").status_code == 404


def test_assessment_unknown_user(client: TestClient):
    response = client.post("/api/assessment", json={"userId": 77, "answers": {"q1_1": 4}})
    assert response.status_code == 404


def test_assessment_invalid_answer(client: TestClient):
    response = client.post("/api/assessment", json={"answers": {"q1_1": 0}})
    assert response.status_code == 422


def test_assessment_database_unavailable(tmp_path: Path, broken_session_factory, all_fours):
    harness = AppHarness(tmp_path, broken_session_factory)
    response = harness.client.post("/api/assessment", json={"answers": all_fours})
    assert response.status_code == 503
    assert response.json()["detail"]


def test_save_and_read_results(client: TestClient, harness: AppHarness):
    response = client.post(
        "/api/save-results",
        json={
            "managerName": "Ana",
            "date": "2025-03-07T10:00:00",
            "averageScore": 69,
            "dimensionScores": SCORES,
            "answers": {"q1_1": 4, "q1_2": 5},
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["success"] is True
    assert payload["filePath"] == str(harness.sink.path)

    text = client.get("/api/results").text
    lines = text.splitlines()
    assert lines[0].startswith("Manager Name,Assessment Date,")
    assert lines[1] == 'Ana,3/7/2025,69%,75%,65%,95%,30%,80%,{"q1_1":4;"q1_2":5}'

    export = client.get("/api/results/export.xlsx")
    assert export.status_code == 200
    assert export.content[:2] == b"PK"


def test_save_results_accepts_nested_results(client: TestClient):
    response = client.post(
        "/api/save-results",
        json={
            "date": "2025-03-07T10:00:00",
            "results": {"averageScore": 80, "dimensionScores": SCORES, "answers": {"q1_1": 4}},
        },
    )
    assert response.status_code == 200
    assert client.get("/api/results").text.splitlines()[1].startswith("Anonymous,3/7/2025,80%,")


def test_save_results_requires_scores(client: TestClient):
    response = client.post("/api/save-results", json={"managerName": "Ana"})
    assert response.status_code == 400


def test_save_results_respects_disabled_csv(client: TestClient, harness: AppHarness, csv_disabled):
    response = client.post(
        "/api/save-results", json={"managerName": "Ana", "dimensionScores": SCORES}
    )
    assert response.status_code == 503
    assert not harness.sink.path.exists()


def test_submit_and_latest_result(client: TestClient, harness: AppHarness, all_fours):
    assert client.get("/api/results/latest").status_code == 404

    response = client.post("/api/submit", json={"answers": all_fours, "managerName": "Ana"})
    assert response.status_code == 200
    payload = response.json()
    assert payload["saved"] is True
    assert payload["savedToDatabase"] is True
    assert payload["savedToCsv"] is True
    assert payload["assessmentId"] is not None
    assert payload["result"]["averageScore"] == 80

    latest = client.get("/api/results/latest").json()
    assert latest["averageScore"] == 80
    assert latest["timestamp"] == payload["result"]["timestamp"]

    assert client.delete("/api/results/latest").json() == {"cleared": True}
    assert client.get("/api/results/latest").status_code == 404


def test_latest_result_is_kept_per_session_key(client: TestClient, all_fours):
    all_ones = {q.id: 1 for q in QUESTIONS}
    client.post("/api/submit", json={"answers": all_fours, "managerName": "Ana", "sessionKey": "ana"})
    client.post("/api/submit", json={"answers": all_ones, "managerName": "Bob", "sessionKey": "bob"})

    assert client.get("/api/results/latest", params={"key": "ana"}).json()["averageScore"] == 80
    assert client.get("/api/results/latest", params={"key": "bob"}).json()["averageScore"] == 20
    assert client.get("/api/results/latest").status_code == 404

    assert client.delete("/api/results/latest", params={"key": "bob"}).json() == {"cleared": True}
    assert client.get("/api/results/latest", params={"key": "bob"}).status_code == 404
    assert client.get("/api/results/latest", params={"key": "ana"}).json()["averageScore"] == 80


def test_submit_sanitizes_manager_name(client: TestClient, harness: AppHarness, all_fours):
    response = client.post(
        "/api/submit", json={"answers": all_fours, "managerName": "<b>Ana</b><script>x</script>"}
    )
    assert response.status_code == 200
    assert harness.sink.read_text().splitlines()[1].startswith("Ana,")


def test_submit_rejects_long_manager_name(client: TestClient, harness: AppHarness, all_fours):
    response = client.post("/api/submit", json={"answers": all_fours, "managerName": "x" * 101})
    assert response.status_code == 422
    assert not harness.sink.path.exists()
    assert client.get("/api/results/latest").status_code == 404


def test_submit_skips_disabled_csv(client: TestClient, harness: AppHarness, all_fours, csv_disabled):
    payload = client.post("/api/submit", json={"answers": all_fours}).json()
    assert payload["savedToDatabase"] is True
    assert payload["savedToCsv"] is False
    assert payload["saved"] is True
    assert not harness.sink.path.exists()


def test_questionnaire_page_advances(client: TestClient):
    answers = {"q1_1": 4, "q1_2": 4, "q1_3": 5, "q1_4": 3}
    response = client.post("/api/questionnaire/pages/0", json={"answers": answers})
    assert response.status_code == 200
    assert response.json() == {
        "pageIndex": 1,
        "dimensionId": "increasing_urgency",
        "progress": 40.0,
        "complete": False,
        "answers": None,
    }


def test_questionnaire_last_page_completes(client: TestClient, all_fours):
    response = client.post("/api/questionnaire/pages/4", json={"answers": all_fours})
    payload = response.json()
    assert payload["complete"] is True
    assert payload["progress"] == 100.0
    assert payload["answers"] == all_fours


def test_questionnaire_page_errors(client: TestClient):
    incomplete = client.post("/api/questionnaire/pages/0", json={"answers": {"q1_1": 4}})
    assert incomplete.status_code == 422
    assert incomplete.json()["detail"] == "Please answer all questions before continuing."

    out_of_range = client.post("/api/questionnaire/pages/0", json={"answers": {"q1_1": 6}})
    assert out_of_range.status_code == 422

    assert client.post("/api/questionnaire/pages/5", json={"answers": {}}).status_code == 404
    assert client.post("/api/questionnaire/pages/-1", json={"answers": {}}).status_code == 404


def test_submit_reports_failed_save(tmp_path: Path, broken_session_factory, all_fours):
    harness = AppHarness(tmp_path, broken_session_factory)
    response = harness.client.post("/api/submit", json={"answers": all_fours})
    assert response.status_code == 200
    payload = response.json()
    assert payload["saved"] is False
    assert payload["savedToDatabase"] is False
    assert payload["savedToCsv"] is True
    assert payload["errors"]
    assert payload["result"]["averageScore"] == 80


def test_submit_incomplete(client: TestClient):
    answers = {q.id: 3 for q in QUESTIONS[:5]}
    assert client.post("/api/submit", json={"answers": answers}).status_code == 422


def test_initialise_database(harness: AppHarness, tmp_path: Path):
    harness.app.state.db_config = DatabaseConfig(
        backend="sqlite", sqlite_path=str(tmp_path / "init" / "leadership.db")
    )
    first = harness.client.post("/api/settings/database/init").json()
    assert first["status"] == "ok"
    assert first["message"] == "Database tables created."

    second = harness.client.post("/api/settings/database/init").json()
    assert second["message"] == "Database tables already exist."
