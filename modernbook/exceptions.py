"""Exception hierarchy for modernbook."""
from typing import Any, Optional


class ModernbookError(Exception):
    """Base error for everything raised by modernbook."""


class ConfigurationError(ModernbookError):
    """A required API key or setting is missing."""


class InputError(ModernbookError, ValueError):
    """Caller supplied text or parameters that cannot be processed."""

    def __init__(self, message: str, details: Optional[dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class TextTooLongError(InputError):
    def __init__(self, max_chars: int, current_chars: int):
        super().__init__(
            "Text too long",
            {"maxChars": max_chars, "currentChars": current_chars},
        )
        self.max_chars = max_chars
        self.current_chars = current_chars


class InvalidVoiceError(InputError):
    def __init__(self, voice: str, valid_voices: list[str]):
        super().__init__(f"Invalid voice: {voice}", {"validVoices": valid_voices})
        self.valid_voices = valid_voices


class UnsupportedFileError(InputError):
    """File type cannot be loaded as book text."""


class UpstreamError(ModernbookError):
    """The LLM or TTS service rejected the request or could not be reached."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        details: Any = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class EmptyResponseError(UpstreamError):
    """The service answered successfully but returned no content."""


class NotFoundError(ModernbookError, KeyError):
    """Unknown book, chunk, edition, clip or segment id."""

    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class InvalidStateError(ModernbookError):
    """Operation is not allowed in the record's current status."""
