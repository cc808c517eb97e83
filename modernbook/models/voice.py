"""TTS voice catalog."""
from pydantic import BaseModel

from modernbook.config import TTS_COST_PER_CHAR
from modernbook.exceptions import InvalidVoiceError


class Voice(BaseModel):
    id: str
    name: str
    gender: str
    language: str = "English"
    style: str
    cost_per_char: float = TTS_COST_PER_CHAR


VOICE_CATALOG = [
    Voice(id="nova", name="Nova", gender="Female", style="Warm & Engaging"),
    Voice(id="alloy", name="Alloy", gender="Neutral", style="Versatile & Clear"),
    Voice(id="echo", name="Echo", gender="Male", style="Deep & Resonant"),
    Voice(id="fable", name="Fable", gender="Male", style="Expressive & Dynamic"),
    Voice(id="onyx", name="Onyx", gender="Male", style="Authoritative & Rich"),
    Voice(id="shimmer", name="Shimmer", gender="Female", style="Gentle & Soothing"),
]

VOICE_IDS = [v.id for v in VOICE_CATALOG]


def get_voice(voice_id: str) -> Voice:
    """Look up a catalog voice by id."""
    for voice in VOICE_CATALOG:
        if voice.id == voice_id:
            return voice
    raise InvalidVoiceError(voice_id, VOICE_IDS)
