import json
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from cache_manager import QuizCache
from conftest import ARTICLE_HTML, TURING_URL, make_generation
from errors import QuotaError, RateLimitError
from main import app, get_quiz_cache, get_store
from scraper import parse_article


@pytest.fixture
def llm():
    mock = MagicMock()
    mock.complete.return_value = json.dumps(make_generation(10))
    return mock


@pytest.fixture
def client(store, llm):
    scraper = MagicMock()
    scraper.scrape.return_value = parse_article(ARTICLE_HTML)
    cache = QuizCache(store, scraper, llm)
    app.dependency_overrides[get_store] = lambda: store
    app.dependency_overrides[get_quiz_cache] = lambda: cache
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_generate_then_cached(client, llm):
    first = client.post("/generate_quiz", json={"url": TURING_URL})
    assert first.status_code == 200
    body = first.json()
    assert body["cached"] is False
    assert body["url"] == TURING_URL
    assert body["title"] == "Alan Turing"
    assert len(body["quiz"]) == 10
    assert "raw_html" not in body
    assert "created_at" in body

    second = client.post("/generate_quiz", json={"url": TURING_URL, "forceRefresh": False})
    assert second.json()["cached"] is True
    assert second.json()["id"] == body["id"]
    assert llm.complete.call_count == 1


def test_force_refresh(client, llm):
    first = client.post("/generate_quiz", json={"url": TURING_URL}).json()
    second = client.post("/generate_quiz", json={"url": TURING_URL, "forceRefresh": True}).json()

    assert second["cached"] is False
    assert second["id"] != first["id"]
    assert llm.complete.call_count == 2


@pytest.mark.parametrize(
    "payload,error",
    [
        ({}, "Wikipedia URL is required"),
        ({"url": "  "}, "Wikipedia URL is required"),
        ({"url": "https://example.com/page"}, "Please enter a Wikipedia URL"),
        ({"url": "https://en.wikipedia.org/w/index.php"}, "Please enter a valid Wikipedia article URL"),
    ],
)
def test_bad_url_is_400(client, payload, error):
    resp = client.post("/generate_quiz", json=payload)
    assert resp.status_code == 400
    assert resp.json() == {"error": error}


@pytest.mark.parametrize(
    "exc,fragment",
    [(RateLimitError(), "Rate limit"), (QuotaError(), "credits")],
)
def test_model_exhaustion_is_500_with_message(client, llm, store, exc, fragment):
    llm.complete.side_effect = exc

    resp = client.post("/generate_quiz", json={"url": TURING_URL})

    assert resp.status_code == 500
    assert fragment in resp.json()["error"]
    assert store.count_quizzes() == 0


def test_malformed_output_is_generic_500(client, llm):
    llm.complete.return_value = "```json\n{\"summary\": \"x\"}\n```"

    resp = client.post("/generate_quiz", json={"url": TURING_URL})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Failed to parse AI response as a valid quiz"}


def test_unexpected_error_hides_details(client, llm):
    llm.complete.side_effect = RuntimeError("secret stack detail")

    resp = client.post("/generate_quiz", json={"url": TURING_URL})

    assert resp.status_code == 500
    assert resp.json() == {"error": "Unknown error occurred"}


def test_history_and_detail(client):
    created = client.post("/generate_quiz", json={"url": TURING_URL}).json()

    history = client.get("/history").json()
    assert [h["id"] for h in history] == [created["id"]]
    assert history[0]["title"] == "Alan Turing"

    detail = client.get(f"/quiz/{created['id']}")
    assert detail.status_code == 200
    assert detail.json()["quiz"] == created["quiz"]

    missing = client.get("/quiz/9999")
    assert missing.status_code == 404
    assert missing.json() == {"error": "Quiz not found"}


def test_submit_attempt(client):
    quiz = client.post("/generate_quiz", json={"url": TURING_URL}).json()
    questions = quiz["quiz"]
    answers = [questions[0]["answer"], questions[1]["options"][1], ""]

    resp = client.post(f"/quiz/{quiz['id']}/attempts", json={"answers": answers})

    assert resp.status_code == 200
    attempt = resp.json()
    assert attempt["score"] == 1
    assert attempt["total_questions"] == 10
    assert len(attempt["answers"]) == 10
    assert attempt["answers"][1] == {
        "questionIndex": 1,
        "selectedAnswer": questions[1]["options"][1],
        "isCorrect": False,
    }

    listed = client.get(f"/quiz/{quiz['id']}/attempts").json()
    assert [a["id"] for a in listed] == [attempt["id"]]


def test_attempt_validation(client):
    quiz = client.post("/generate_quiz", json={"url": TURING_URL}).json()

    too_many = client.post(f"/quiz/{quiz['id']}/attempts", json={"answers": ["x"] * 11})
    assert too_many.status_code == 400

    missing = client.post("/quiz/9999/attempts", json={"answers": []})
    assert missing.status_code == 404


def test_cache_stats(client):
    client.post("/generate_quiz", json={"url": TURING_URL})
    assert client.get("/cache/stats").json() == {
        "total_cached": 1,
        "recent_week": 1,
        "unique_urls": 1,
    }


def test_cors_preflight(client):
    resp = client.options(
        "/generate_quiz",
        headers={
            "Origin": "https://quiz.example",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "authorization, x-client-info, apikey, content-type",
        },
    )
    assert resp.status_code == 200
    assert resp.headers["access-control-allow-origin"] == "*"


@pytest.mark.parametrize(
    "payload,field",
    [
        ({"url": 123}, "url"),
        ({"url": ["https://en.wikipedia.org/wiki/Alan_Turing"]}, "url"),
        ({"url": TURING_URL, "forceRefresh": "maybe"}, "forceRefresh"),
    ],
)
def test_wrongly_typed_body_is_400_with_error_key(client, llm, payload, field):
    resp = client.post("/generate_quiz", json=payload)

    assert resp.status_code == 400
    assert list(resp.json()) == ["error"]
    assert field in resp.json()["error"]
    llm.complete.assert_not_called()


def test_non_json_body_is_400(client):
    resp = client.post(
        "/generate_quiz", content="url=nope", headers={"Content-Type": "application/json"}
    )
    assert resp.status_code == 400
    assert "error" in resp.json()
