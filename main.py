import logging
from contextlib import asynccontextmanager
from functools import lru_cache

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from cache_manager import QuizCache
from config import Settings, configure_logging
from database import init_db, make_engine, make_session_factory
from errors import PersistenceError, QuizGenerationError, UrlValidationError
from grading import grade_answers
from llm_client import LLMClient
from models import AttemptBody, GenerateBody, QuizAttemptCreate
from quiz_store import QuizStore
from scraper import WikipediaScraper

logger = logging.getLogger(__name__)


@lru_cache
def get_settings() -> Settings:
    return Settings.from_env()


@lru_cache
def get_store() -> QuizStore:
    engine = make_engine(get_settings().database_url)
    init_db(engine)
    return QuizStore(make_session_factory(engine))


@lru_cache
def get_quiz_cache() -> QuizCache:
    settings = get_settings()
    scraper = WikipediaScraper(
        timeout=settings.fetch_timeout,
        max_chars=settings.max_article_chars,
        user_agent=settings.user_agent,
    )
    llm = LLMClient(
        api_key=settings.llm_api_key,
        model=settings.llm_model,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout,
    )
    return QuizCache(get_store(), scraper, llm)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(get_settings().log_level)
    logger.info("Initializing database...")
    get_store()
    yield
    logger.info("Shutting down...")


app = FastAPI(title="AI Wiki Quiz Generator API", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_settings().cors_origins,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["authorization", "x-client-info", "apikey", "content-type"],
)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@app.exception_handler(RequestValidationError)
async def request_validation_handler(request: Request, exc: RequestValidationError):
    # Malformed bodies use the same {"error": ...} shape as every other failure
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid request: {field or 'body'}: {first.get('msg', 'invalid value')}"
    else:
        message = "Invalid request"
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return error_response(400, message)


@app.get("/")
def root():
    """API root endpoint with basic information."""
    return {
        "name": "AI Wiki Quiz Generator API",
        "version": "1.0.0",
        "endpoints": [
            "/generate_quiz",
            "/history",
            "/quiz/{id}",
            "/quiz/{id}/attempts",
            "/cache/stats",
        ],
    }


@app.post("/generate_quiz")
def generate_quiz_endpoint(body: GenerateBody, cache: QuizCache = Depends(get_quiz_cache)):
    """
    Generate a quiz from a Wikipedia URL.
    Checks cache first unless forceRefresh is set.
    """
    if not body.url or not body.url.strip():
        return error_response(400, "Wikipedia URL is required")

    try:
        record = cache.get_or_create(body.url, force_refresh=body.force_refresh)
    except UrlValidationError as e:
        return error_response(400, str(e))
    except QuizGenerationError as e:
        logger.error("Error generating quiz for %s: %r", body.url, e)
        return error_response(500, str(e))
    except Exception:
        logger.exception("Unexpected error generating quiz for %s", body.url)
        return error_response(500, "Unknown error occurred")
    return record.model_dump(mode="json")


@app.get("/history")
def history(store: QuizStore = Depends(get_store)):
    """Get list of all generated quizzes, newest first."""
    return [q.model_dump(mode="json") for q in store.list_all()]


@app.get("/quiz/{quiz_id}")
def get_quiz(quiz_id: int, store: QuizStore = Depends(get_store)):
    """Get full quiz details by ID."""
    quiz = store.get_by_id(quiz_id)
    if quiz is None:
        return error_response(404, "Quiz not found")
    return quiz.model_dump(mode="json", exclude={"cached"})


@app.post("/quiz/{quiz_id}/attempts")
def submit_attempt(quiz_id: int, body: AttemptBody, store: QuizStore = Depends(get_store)):
    """Grade a finished quiz and record the attempt."""
    quiz = store.get_by_id(quiz_id)
    if quiz is None:
        return error_response(404, "Quiz not found")
    try:
        score, answers = grade_answers(quiz.quiz, body.answers)
    except ValueError as e:
        return error_response(400, str(e))

    try:
        attempt = store.insert_attempt(
            QuizAttemptCreate(
                quiz_id=quiz.id,
                score=score,
                total_questions=len(quiz.quiz),
                answers=answers,
            )
        )
    except PersistenceError as e:
        return error_response(500, str(e))
    return attempt.model_dump(mode="json", by_alias=True)


@app.get("/quiz/{quiz_id}/attempts")
def list_attempts(quiz_id: int, store: QuizStore = Depends(get_store)):
    return [a.model_dump(mode="json", by_alias=True) for a in store.attempts_for_quiz(quiz_id)]


@app.get("/cache/stats")
def cache_stats(cache: QuizCache = Depends(get_quiz_cache)):
    """Get cache statistics."""
    return cache.stats()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("main:app", host="0.0.0.0", port=8000)
