from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Difficulty = Literal["easy", "medium", "hard"]


class QuizItem(BaseModel):
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    answer: str
    difficulty: Difficulty
    explanation: str

    @field_validator("difficulty", mode="before")
    @classmethod
    def lower_difficulty(cls, v):
        return v.strip().lower() if isinstance(v, str) else v

    @field_validator("options")
    @classmethod
    def check_options(cls, v: List[str]) -> List[str]:
        if any(not o.strip() for o in v):
            raise ValueError("options must be non-empty")
        if len(set(v)) != len(v):
            raise ValueError("options must be distinct")
        return v

    @model_validator(mode="after")
    def answer_in_options(self):
        if self.answer not in self.options:
            raise ValueError(f"answer {self.answer!r} is not one of the options")
        return self


class KeyEntities(BaseModel):
    people: List[str] = []
    organizations: List[str] = []
    locations: List[str] = []


class QuizGenerationResult(BaseModel):
    """What the model is asked to produce for one article."""

    summary: Optional[str] = None
    key_entities: KeyEntities = Field(default_factory=KeyEntities)
    quiz: List[QuizItem] = Field(min_length=1)
    related_topics: List[str] = []


class QuizCreate(BaseModel):
    url: str
    title: str
    summary: Optional[str] = None
    key_entities: KeyEntities
    sections: List[str]
    quiz: List[QuizItem] = Field(min_length=1)
    related_topics: List[str]
    raw_html: Optional[str] = None


class QuizRecord(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    summary: Optional[str] = None
    key_entities: KeyEntities
    sections: List[str]
    quiz: List[QuizItem]
    related_topics: List[str]
    created_at: datetime
    cached: bool = False


class QuizSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    url: str
    title: str
    summary: Optional[str] = None
    created_at: datetime


class UserAnswer(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    question_index: int = Field(alias="questionIndex", ge=0)
    selected_answer: str = Field(alias="selectedAnswer")
    is_correct: bool = Field(alias="isCorrect")


class QuizAttemptCreate(BaseModel):
    quiz_id: int
    score: int = Field(ge=0)
    total_questions: int = Field(ge=0)
    answers: List[UserAnswer]

    @model_validator(mode="after")
    def check_indexes(self):
        for a in self.answers:
            if a.question_index >= self.total_questions:
                raise ValueError("questionIndex must be below total_questions")
        if self.score > self.total_questions:
            raise ValueError("score cannot exceed total_questions")
        return self


class QuizAttemptRecord(QuizAttemptCreate):
    model_config = ConfigDict(from_attributes=True)

    id: int
    completed_at: datetime


class GenerateBody(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: Optional[str] = None
    force_refresh: bool = Field(False, alias="forceRefresh")


class AttemptBody(BaseModel):
    answers: List[str] = []
