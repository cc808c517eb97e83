"""Text modernization through an OpenAI-compatible chat completion API."""
import logging
import math
from typing import Optional

import requests
from pydantic import BaseModel

from modernbook.clients.base import APIClient, validate_text
from modernbook.config import (
    DEFAULT_LLM_MODEL,
    DEFAULT_STYLE,
    GROQ_API_KEY_ENV,
    GROQ_API_URL,
    LLM_MAX_TOKENS_FACTOR,
    LLM_TEMPERATURE,
    MODERNIZE_MAX_CHARS,
    REQUEST_TIMEOUT,
)
from modernbook.converters.diff import ChangeStats, DiffOp, change_stats, simple_diff
from modernbook.exceptions import EmptyResponseError, UpstreamError
from modernbook.prompts.generator import PromptGenerator

logger = logging.getLogger(__name__)


class ModernizationResult(BaseModel):
    original: str
    modernized: str
    stats: ChangeStats
    diff: Optional[list[DiffOp]] = None


class ModernizeClient(APIClient):
    """Rewrite archaic text in modern English via Groq (or any compatible API).

    The API key is read from ``GROQ_API_KEY`` unless passed explicitly.
    """

    service = "modernization API"
    failure_message = "Text modernization failed"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_LLM_MODEL,
        base_url: str = GROQ_API_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
        prompts: Optional[PromptGenerator] = None,
        instructions: Optional[str] = None,
        style: str = DEFAULT_STYLE,
    ):
        super().__init__(base_url, api_key, GROQ_API_KEY_ENV, timeout, session)
        self.model = model
        self.prompts = prompts or PromptGenerator()
        self.instructions = instructions
        self.style = style

    def build_payload(
        self, text: str, style: str = DEFAULT_STYLE, instructions: Optional[str] = None
    ) -> dict:
        return {
            "model": self.model,
            "messages": [
                {"role": "system", "content": self.prompts.system_prompt(instructions)},
                {"role": "user", "content": self.prompts.user_prompt(text, style)},
            ],
            "temperature": LLM_TEMPERATURE,
            # leave room for the rewrite to run a little longer
            "max_tokens": math.ceil(len(text) * LLM_MAX_TOKENS_FACTOR),
        }

    def modernize(
        self,
        text: str,
        style: str = DEFAULT_STYLE,
        return_diff: bool = False,
        instructions: Optional[str] = None,
    ) -> ModernizationResult:
        """Send text to the LLM and return the rewrite with change stats."""
        validate_text(text, MODERNIZE_MAX_CHARS)

        resp = self._post(self.build_payload(text, style, instructions))
        try:
            data = resp.json()
        except ValueError as exc:
            raise UpstreamError(
                "Modernization API returned invalid JSON", status_code=resp.status_code
            ) from exc

        modernized = _first_message_content(data)
        if not modernized:
            raise EmptyResponseError("No text returned from API", status_code=resp.status_code)

        logger.debug("Modernized %d chars -> %d chars", len(text), len(modernized))
        return ModernizationResult(
            original=text,
            modernized=modernized,
            stats=change_stats(text, modernized),
            diff=simple_diff(text, modernized) if return_diff else None,
        )

    def __call__(self, text: str) -> str:
        """Modernize with the client defaults; lets the client act as a Library modernizer."""
        return self.modernize(text, self.style, instructions=self.instructions).modernized


def _first_message_content(data) -> str:
    if not isinstance(data, dict):
        return ""
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return ""
    message = choices[0].get("message") if isinstance(choices[0], dict) else None
    if not isinstance(message, dict):
        return ""
    content = message.get("content")
    return content if isinstance(content, str) else ""
