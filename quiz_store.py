"""
Query surface over the quizzes and quiz_attempts tables.
Rows are only ever appended; nothing here updates or deletes.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from database import Quiz, QuizAttempt
from errors import PersistenceError
from models import (
    QuizAttemptCreate,
    QuizAttemptRecord,
    QuizCreate,
    QuizRecord,
    QuizSummary,
)

logger = logging.getLogger(__name__)


class QuizStore:
    def __init__(self, session_factory: sessionmaker):
        self.session_factory = session_factory

    def latest_by_url(self, url: str) -> Optional[QuizRecord]:
        """Most recently generated quiz for an exact URL, if any."""
        stmt = (
            select(Quiz)
            .where(Quiz.url == url)
            .order_by(Quiz.created_at.desc(), Quiz.id.desc())
            .limit(1)
        )
        with self.session_factory() as db:
            row = db.scalars(stmt).first()
            return QuizRecord.model_validate(row) if row else None

    def get_by_id(self, quiz_id: int) -> Optional[QuizRecord]:
        with self.session_factory() as db:
            row = db.get(Quiz, quiz_id)
            return QuizRecord.model_validate(row) if row else None

    def list_all(self) -> List[QuizSummary]:
        stmt = select(Quiz).order_by(Quiz.created_at.desc(), Quiz.id.desc())
        with self.session_factory() as db:
            return [QuizSummary.model_validate(r) for r in db.scalars(stmt)]

    def insert_quiz(self, data: QuizCreate) -> QuizRecord:
        record = Quiz(
            url=data.url,
            title=data.title,
            summary=data.summary,
            key_entities=data.key_entities.model_dump(),
            sections=list(data.sections),
            quiz=[q.model_dump() for q in data.quiz],
            related_topics=list(data.related_topics),
            raw_html=data.raw_html,
        )
        with self.session_factory() as db:
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Inserting quiz for %s failed: %s", data.url, e)
                raise PersistenceError() from e
            return QuizRecord.model_validate(record)

    def insert_attempt(self, data: QuizAttemptCreate) -> QuizAttemptRecord:
        record = QuizAttempt(
            quiz_id=data.quiz_id,
            score=data.score,
            total_questions=data.total_questions,
            answers=[a.model_dump(by_alias=True) for a in data.answers],
        )
        with self.session_factory() as db:
            try:
                db.add(record)
                db.commit()
                db.refresh(record)
            except SQLAlchemyError as e:
                db.rollback()
                logger.error("Inserting attempt for quiz %s failed: %s", data.quiz_id, e)
                raise PersistenceError("Failed to save quiz attempt") from e
            return QuizAttemptRecord.model_validate(record)

    def attempts_for_quiz(self, quiz_id: int) -> List[QuizAttemptRecord]:
        stmt = (
            select(QuizAttempt)
            .where(QuizAttempt.quiz_id == quiz_id)
            .order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc())
        )
        with self.session_factory() as db:
            return [QuizAttemptRecord.model_validate(r) for r in db.scalars(stmt)]

    def count_quizzes(self, since: Optional[datetime] = None) -> int:
        stmt = select(func.count(Quiz.id))
        if since is not None:
            stmt = stmt.where(Quiz.created_at >= since)
        with self.session_factory() as db:
            return db.scalar(stmt) or 0

    def count_urls(self) -> int:
        with self.session_factory() as db:
            return db.scalar(select(func.count(func.distinct(Quiz.url)))) or 0
