"""
Cache manager for Wikipedia quiz generation.
Serves stored quizzes by URL and runs the scrape -> prompt -> model -> parse
pipeline on a miss, so the same article is not generated twice.
"""
import logging
import threading
from concurrent.futures import Future
from datetime import timedelta
from typing import Dict, Optional

from database import utcnow
from errors import PersistenceError, UrlValidationError
from llm_client import LLMClient
from models import QuizCreate, QuizRecord
from prompts import build_prompt
from quiz_parser import parse_quiz_response
from quiz_store import QuizStore
from scraper import WikipediaScraper
from url_validator import validate_wikipedia_url

logger = logging.getLogger(__name__)


class QuizCache:
    def __init__(self, store: QuizStore, scraper: WikipediaScraper, llm: LLMClient):
        self.store = store
        self.scraper = scraper
        self.llm = llm
        self._lock = threading.Lock()
        self._inflight: Dict[str, Future] = {}

    def get_or_create(self, url: str, force_refresh: bool = False) -> QuizRecord:
        """
        Return the latest quiz for ``url``, generating one on a miss.

        Args:
            url: Wikipedia article URL (compared exactly, after trimming)
            force_refresh: skip the lookup and always generate a new quiz

        Returns:
            The stored quiz with ``cached`` set to whether it came from the store
        """
        url = (url or "").strip()
        check = validate_wikipedia_url(url)
        if not check.valid:
            raise UrlValidationError(check.error)

        if force_refresh:
            logger.info("Force refresh requested for %s", url)
            return self._generate(url)

        cached = self.check_cache(url)
        if cached:
            return cached
        return self._generate_shared(url)

    def check_cache(self, url: str) -> Optional[QuizRecord]:
        quiz = self.store.latest_by_url(url)
        if quiz is None:
            logger.info("Cache miss for %s", url)
            return None
        logger.info("Returning cached quiz %s for %s", quiz.id, url)
        return quiz.model_copy(update={"cached": True})

    def _generate_shared(self, url: str) -> QuizRecord:
        # Concurrent misses for one URL wait on the first caller's generation
        with self._lock:
            future = self._inflight.get(url)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[url] = future

        if not owner:
            logger.info("Joining in-flight generation for %s", url)
            return future.result()

        try:
            # Another request may have finished between our lookup and the lock
            record = self.check_cache(url) or self._generate(url)
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(record)
            return record
        finally:
            with self._lock:
                self._inflight.pop(url, None)

    def _generate(self, url: str) -> QuizRecord:
        article = self.scraper.scrape(url)
        prompt = build_prompt(article.text, article.title, article.sections)
        raw = self.llm.complete(prompt.system, prompt.user)
        result = parse_quiz_response(raw)

        data = QuizCreate(
            url=url,
            title=article.title,
            summary=result.summary,
            key_entities=result.key_entities,
            sections=article.sections,
            quiz=result.quiz,
            related_topics=result.related_topics,
            raw_html=article.html,
        )
        try:
            record = self.store.insert_quiz(data)
        except PersistenceError:
            logger.error("Quiz for %s was generated but could not be saved", url)
            raise
        logger.info("Quiz %s generated and saved for %s", record.id, url)
        return record.model_copy(update={"cached": False})

    def stats(self) -> dict:
        return {
            "total_cached": self.store.count_quizzes(),
            "recent_week": self.store.count_quizzes(since=utcnow() - timedelta(days=7)),
            "unique_urls": self.store.count_urls(),
        }
