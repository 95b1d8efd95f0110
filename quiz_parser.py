import json
import logging
import re

from pydantic import ValidationError

from errors import MalformedResponseError
from models import QuizGenerationResult
from prompts import MAX_QUESTIONS, MIN_QUESTIONS

logger = logging.getLogger(__name__)

SAMPLE_CHARS = 500

FENCE_OPEN_RE = re.compile(r"^```[\w-]*[ \t]*\n?")
FENCE_CLOSE_RE = re.compile(r"\n?```\s*$")


def clean_json_text(text: str) -> str:
    """Strip code fences and surrounding chatter from model output."""
    text = (text or "").strip()
    if not text:
        return text
    text = FENCE_OPEN_RE.sub("", text)
    text = FENCE_CLOSE_RE.sub("", text).strip()
    if text and not (text.startswith("{") and text.endswith("}")):
        start = text.find("{")
        end = text.rfind("}")
        if start != -1 and end > start:
            text = text[start : end + 1]
    return text


def _fail(reason: str, raw: str) -> MalformedResponseError:
    sample = (raw or "")[:SAMPLE_CHARS]
    logger.error("Malformed AI response (%s). Raw content: %r", reason, sample)
    return MalformedResponseError(reason, sample)


def parse_quiz_response(raw: str) -> QuizGenerationResult:
    """
    Decode and validate the model output.

    Raises MalformedResponseError for undecodable text and for any record
    breaking the quiz schema (wrong option count, answer not among the
    options, unknown difficulty, empty question list).
    """
    text = clean_json_text(raw)
    if not text:
        raise _fail("empty after cleanup", raw)

    try:
        data = json.loads(text)
    except (ValueError, RecursionError) as e:
        # JSONDecodeError, oversized int literals and runaway nesting
        raise _fail(f"invalid JSON: {type(e).__name__}: {e}", raw) from e
    if not isinstance(data, dict):
        raise _fail(f"expected a JSON object, got {type(data).__name__}", raw)

    try:
        result = QuizGenerationResult.model_validate(data)
    except ValidationError as e:
        first = e.errors()[0]["msg"]
        raise _fail(f"schema violation: {e.error_count()} error(s): {first}", raw) from e

    count = len(result.quiz)
    if not MIN_QUESTIONS <= count <= MAX_QUESTIONS:
        logger.warning(
            "Model returned %d questions (requested %d-%d)", count, MIN_QUESTIONS, MAX_QUESTIONS
        )
    return result
