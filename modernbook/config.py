"""Configuration for modernbook."""
import os
from pathlib import Path

from dotenv import load_dotenv

from modernbook.exceptions import ConfigurationError

load_dotenv()


# Packaged prompt templates
TEMPLATES_DIR = Path(__file__).resolve().parent / "prompts" / "templates"

# Chunking
CHUNK_MAX_CHARS = 2000
CHAPTER_FALLBACK_STRIDE = 5
MODERNIZE_BATCH_SIZE = 10

# Modernization API (Groq, OpenAI-compatible)
GROQ_API_URL = "https://api.groq.com/openai/v1/chat/completions"
GROQ_API_KEY_ENV = "GROQ_API_KEY"
DEFAULT_LLM_MODEL = "llama-3.1-70b-versatile"
DEFAULT_STYLE = "conversational"
LLM_TEMPERATURE = 0.7
LLM_MAX_TOKENS_FACTOR = 1.5
MODERNIZE_MAX_CHARS = 100_000

# Text-to-speech API
OPENAI_TTS_URL = "https://api.openai.com/v1/audio/speech"
OPENAI_API_KEY_ENV = "OPENAI_API_KEY"
DEFAULT_TTS_MODEL = "tts-1"
DEFAULT_VOICE = "alloy"
AUDIO_FORMATS = ("mp3", "opus", "aac", "flac", "wav", "pcm")
MIN_SPEED = 0.25
MAX_SPEED = 4.0
TTS_MAX_CHARS = 50_000

REQUEST_TIMEOUT = 120

# Pricing and pacing
CHARS_PER_TOKEN = 4
INPUT_COST_PER_1K_TOKENS = 0.01
OUTPUT_COST_PER_1K_TOKENS = 0.03
TTS_COST_PER_1M_CHARS = 15
TTS_COST_PER_CHAR = 0.000015
WORDS_PER_MINUTE = 150
TTS_CHARS_PER_SECOND = 15
TOKENS_PER_WORD = 1.3
BATCH_COST_PER_1K_TOKENS = 0.003
LLM_PREVIEW_FRACTIONS = (0.1, 0.25, 0.5, 1)

DEFAULT_INSTRUCTIONS = (
    "Modernize the language while preserving the original meaning and tone. "
    "Update archaic terms, simplify complex sentences, and make the text more "
    "accessible to contemporary readers. Maintain the author's voice and "
    "narrative style."
)

COVER_GRADIENTS = [
    "from-violet-500 via-purple-500 to-pink-500",
    "from-emerald-400 via-teal-500 to-cyan-500",
    "from-yellow-400 via-orange-500 to-red-500",
    "from-indigo-500 via-blue-500 to-cyan-500",
]

# Identity used for everything created locally
LOCAL_USER_ID = "me"
LOCAL_USER_HANDLE = "you"


def require_api_key(name: str) -> str:
    """Read an API key from the environment or fail loudly."""
    value = (os.environ.get(name) or "").strip()
    if not value:
        raise ConfigurationError(f"{name} not configured")
    return value
