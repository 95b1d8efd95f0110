"""
Error types raised by the quiz generation pipeline.

The string form of every error is safe to show to the end user. Extra
details (status codes, response samples) live on attributes and are meant
for the logs only.
"""
from typing import Optional


class QuizGenerationError(Exception):
    """Base class for every pipeline failure."""


class UrlValidationError(QuizGenerationError):
    """The supplied URL is not a Wikipedia article URL."""


class FetchError(QuizGenerationError):
    def __init__(self, status_code: Optional[int] = None, message: Optional[str] = None):
        self.status_code = status_code
        if message is None:
            if status_code is None:
                message = "Failed to fetch Wikipedia page"
            else:
                message = f"Failed to fetch Wikipedia page: {status_code}"
        super().__init__(message)


class ConfigError(QuizGenerationError):
    """No credential is configured for the model endpoint."""

    def __init__(self, message: str = "LLM API key is not configured"):
        super().__init__(message)


class ModelError(QuizGenerationError):
    def __init__(self, status_code: Optional[int] = None, message: str = "AI generation failed"):
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(ModelError):
    def __init__(self):
        super().__init__(429, "Rate limit exceeded. Please try again in a moment.")


class QuotaError(ModelError):
    def __init__(self):
        super().__init__(402, "AI credits exhausted. Please add credits to continue.")


class EmptyResponseError(ModelError):
    def __init__(self):
        super().__init__(None, "No content returned from AI")


class MalformedResponseError(QuizGenerationError):
    """The model output could not be decoded or broke the quiz schema."""

    def __init__(self, reason: str, sample: str = ""):
        self.reason = reason
        self.sample = sample
        super().__init__("Failed to parse AI response as a valid quiz")


class PersistenceError(QuizGenerationError):
    def __init__(self, message: str = "Failed to save quiz to database"):
        super().__init__(message)
