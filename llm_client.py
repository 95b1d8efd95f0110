"""
Client for an OpenAI-compatible chat-completions endpoint.

No retries happen here: rate-limit and quota responses are turned into
their own error types so the caller can decide what to tell the user.
"""
import logging
from typing import Optional

import requests

from errors import ConfigError, EmptyResponseError, ModelError, QuotaError, RateLimitError

logger = logging.getLogger(__name__)

ERROR_SAMPLE_CHARS = 500


class LLMClient:
    def __init__(
        self,
        api_key: Optional[str],
        model: str,
        base_url: str,
        timeout: float = 60.0,
        session: Optional[requests.Session] = None,
    ):
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def complete(self, system_prompt: str, user_prompt: str) -> str:
        """Send one chat completion request and return the message text."""
        if not self.api_key:
            raise ConfigError()

        payload = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
        }
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        logger.info("Calling %s for quiz generation", self.model)
        try:
            resp = self.session.post(
                self.endpoint, json=payload, headers=headers, timeout=self.timeout
            )
        except requests.RequestException as e:
            logger.error("AI request failed: %s", e)
            raise ModelError() from e

        if resp.status_code == 429:
            logger.warning("AI API rate limited the request")
            raise RateLimitError()
        if resp.status_code == 402:
            logger.warning("AI API reported exhausted credits")
            raise QuotaError()
        if not 200 <= resp.status_code < 300:
            logger.error(
                "AI API error %s: %s", resp.status_code, (resp.text or "")[:ERROR_SAMPLE_CHARS]
            )
            raise ModelError(resp.status_code)

        try:
            data = resp.json()
        except ValueError as e:
            logger.error("AI API returned a non-JSON body")
            raise EmptyResponseError() from e

        content = _message_content(data)
        if not content or not content.strip():
            raise EmptyResponseError()
        logger.info("AI response received (%d chars)", len(content))
        return content


def _message_content(data) -> Optional[str]:
    try:
        content = data["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError):
        return None
    return content if isinstance(content, str) else None
