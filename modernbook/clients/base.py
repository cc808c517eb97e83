"""Shared HTTP plumbing for the LLM and TTS clients."""
import logging
from typing import Any, Optional

import requests

from modernbook.config import REQUEST_TIMEOUT, require_api_key
from modernbook.exceptions import InputError, TextTooLongError, UpstreamError

logger = logging.getLogger(__name__)


class APIClient:
    """Bearer-token JSON client around a ``requests.Session``."""

    service = "API"
    failure_message = "Request failed"

    def __init__(
        self,
        url: str,
        api_key: Optional[str],
        api_key_env: str,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.api_key = api_key.strip() if api_key else require_api_key(api_key_env)
        self.timeout = timeout
        self._session = session or requests.Session()

    def _post(self, payload: dict[str, Any]) -> requests.Response:
        try:
            resp = self._session.post(
                self.url,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=payload,
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            logger.error("Failed to contact %s: %s", self.service, exc)
            raise UpstreamError(
                f"{self.failure_message}: could not reach {self.service}",
                details={"error": str(exc)},
            ) from exc

        if not resp.ok:
            try:
                details = resp.json()
            except ValueError:
                details = {"error": "Unknown error"}
            logger.error("%s error (%s): %s", self.service, resp.status_code, details)
            raise UpstreamError(self.failure_message, status_code=resp.status_code, details=details)

        return resp


def validate_text(text: Any, max_chars: int) -> str:
    """Non-empty string within the service's character limit."""
    if not text or not isinstance(text, str):
        raise InputError("Text is required")
    if len(text) > max_chars:
        raise TextTooLongError(max_chars, len(text))
    return text
