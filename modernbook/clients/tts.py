"""Speech synthesis through the OpenAI audio API."""
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import requests

from modernbook.clients.base import APIClient, validate_text
from modernbook.config import (
    AUDIO_FORMATS,
    DEFAULT_TTS_MODEL,
    DEFAULT_VOICE,
    MAX_SPEED,
    MIN_SPEED,
    OPENAI_API_KEY_ENV,
    OPENAI_TTS_URL,
    REQUEST_TIMEOUT,
    TTS_MAX_CHARS,
)
from modernbook.exceptions import EmptyResponseError, InputError, InvalidVoiceError
from modernbook.models.voice import VOICE_IDS

logger = logging.getLogger(__name__)


@dataclass
class SpeechResult:
    audio: bytes
    format: str

    @property
    def content_type(self) -> str:
        return f"audio/{self.format}"

    @property
    def filename(self) -> str:
        return f"audio.{self.format}"

    def save(self, path: Path | str) -> Path:
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.audio)
        return path


class SpeechClient(APIClient):
    """Turn text into narration audio.

    The API key is read from ``OPENAI_API_KEY`` unless passed explicitly.
    """

    service = "TTS API"
    failure_message = "TTS generation failed"

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: str = DEFAULT_TTS_MODEL,
        base_url: str = OPENAI_TTS_URL,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ):
        super().__init__(base_url, api_key, OPENAI_API_KEY_ENV, timeout, session)
        self.model = model

    def synthesize(
        self,
        text: str,
        voice: str = DEFAULT_VOICE,
        format: str = "mp3",
        speed: float = 1.0,
    ) -> SpeechResult:
        validate_text(text, TTS_MAX_CHARS)
        if voice not in VOICE_IDS:
            raise InvalidVoiceError(voice, VOICE_IDS)
        if format not in AUDIO_FORMATS:
            raise InputError(f"Invalid format: {format}", {"validFormats": list(AUDIO_FORMATS)})
        if not MIN_SPEED <= speed <= MAX_SPEED:
            raise InputError(
                f"Speed must be between {MIN_SPEED} and {MAX_SPEED}", {"speed": speed}
            )

        resp = self._post({
            "model": self.model,
            "input": text,
            "voice": voice,
            "response_format": format,
            "speed": speed,
        })
        if not resp.content:
            raise EmptyResponseError("No audio returned from API", status_code=resp.status_code)

        logger.debug("Synthesized %d chars with %s -> %d bytes", len(text), voice, len(resp.content))
        return SpeechResult(audio=resp.content, format=format)
