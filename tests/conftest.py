import json
from typing import Any, List, Optional

import pytest

from database import init_db, make_engine, make_session_factory
from quiz_store import QuizStore

TURING_URL = "https://en.wikipedia.org/wiki/Alan_Turing"

ARTICLE_HTML = """<!DOCTYPE html>
<html><head><title>Alan Turing - Wikipedia</title>
<style>.x { color: red; }</style></head>
<body>
<h1 id="firstHeading" class="firstHeading"><span class="mw-page-title-main">Alan Turing</span></h1>
<div id="mw-content-text" class="mw-body-content">
<p>Alan Mathison Turing was an English mathematician and computer scientist.<sup>[1]</sup>[2]</p>
<script>var tracking = "do not index";</script>
<h2><span class="mw-headline" id="Early_life">Early life</span></h2>
<p>Turing was born in Maida Vale, London.</p>
<h2><span class="mw-headline" id="Bletchley_Park">Bletchley Park</span></h2>
<p>He worked at Bletchley Park during the Second World War.[12]</p>
<h2><span class="mw-headline" id="See_also">See also</span></h2>
<h2><span class="mw-headline" id="References">References</span></h2>
<h2><span class="mw-headline" id="External_links">External links</span></h2>
</div><!--/mw-content-text-->
</body></html>
"""


def make_question(n: int, difficulty: str = "medium", answer_index: int = 0) -> dict:
    options = [f"Q{n} option {c}" for c in "ABCD"]
    return {
        "question": f"Question {n}?",
        "options": options,
        "answer": options[answer_index],
        "difficulty": difficulty,
        "explanation": f"Stated in section {n}.",
    }


def make_generation(count: int = 8) -> dict:
    difficulties = ["easy", "medium", "hard"]
    return {
        "summary": "Alan Turing was an English mathematician.",
        "key_entities": {
            "people": ["Alan Turing"],
            "organizations": ["Bletchley Park"],
            "locations": ["London"],
        },
        "quiz": [make_question(i, difficulties[i % 3]) for i in range(count)],
        "related_topics": ["Enigma machine", "Turing test"],
    }


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "", json_data: Any = None):
        self.status_code = status_code
        self._json = json_data
        self.text = text if json_data is None else json.dumps(json_data)

    def json(self):
        if self._json is None:
            return json.loads(self.text)
        return self._json


class FakeSession:
    """Stands in for requests.Session, replaying queued responses."""

    def __init__(self, responses: Optional[List[Any]] = None):
        self.headers = {}
        self.responses = list(responses or [])
        self.calls = []

    def _next(self, method: str, url: str, **kwargs):
        self.calls.append((method, url, kwargs))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def get(self, url, **kwargs):
        return self._next("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._next("POST", url, **kwargs)


def chat_response(content: str, status_code: int = 200) -> FakeResponse:
    return FakeResponse(status_code, json_data={"choices": [{"message": {"content": content}}]})


@pytest.fixture
def store():
    engine = make_engine("sqlite://")
    init_db(engine)
    yield QuizStore(make_session_factory(engine))
    engine.dispose()


@pytest.fixture
def generation():
    return make_generation()


@pytest.fixture
def file_store(tmp_path):
    """File-backed store, so each thread gets its own connection."""
    engine = make_engine(f"sqlite:///{tmp_path / 'quiz.db'}")
    init_db(engine)
    yield QuizStore(make_session_factory(engine))
    engine.dispose()
