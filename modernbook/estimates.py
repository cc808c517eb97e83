"""Cost and duration estimates for modernization and narration."""
import math
from dataclasses import dataclass
from typing import Sequence

from modernbook.config import (
    BATCH_COST_PER_1K_TOKENS,
    CHARS_PER_TOKEN,
    INPUT_COST_PER_1K_TOKENS,
    LLM_PREVIEW_FRACTIONS,
    OUTPUT_COST_PER_1K_TOKENS,
    TOKENS_PER_WORD,
    TTS_COST_PER_1M_CHARS,
    WORDS_PER_MINUTE,
)
from modernbook.exceptions import InputError
from modernbook.models.book import Chunk
from modernbook.models.voice import Voice


@dataclass
class ProjectEstimate:
    """What processing a (range of a) book is expected to cost."""
    total_words: int
    total_chars: int
    selected_words: int
    selected_chars: int
    input_tokens: int
    output_tokens: int
    total_tokens: int
    tts_chars: int
    modernization_cost: float
    tts_cost: float
    total_cost: float
    duration_minutes: int

    @property
    def duration(self) -> str:
        hours, minutes = divmod(self.duration_minutes, 60)
        return f"{hours}h {minutes}m" if hours > 0 else f"{minutes}m"


@dataclass
class LLMCostPreview:
    fraction: float
    chunk_count: int
    words: int
    tokens: int
    cost: float


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def count_words(text: str) -> int:
    return len(text.split())


def estimate_tokens(chars: int) -> int:
    """Roughly one token per four characters."""
    return math.ceil(chars / CHARS_PER_TOKEN)


def modernization_cost(input_tokens: int, output_tokens: int) -> float:
    return (
        input_tokens / 1000 * INPUT_COST_PER_1K_TOKENS
        + output_tokens / 1000 * OUTPUT_COST_PER_1K_TOKENS
    )


def chunk_modernization_cost(chars: int) -> float:
    # modernized output is about as long as the input
    tokens = estimate_tokens(chars)
    return modernization_cost(tokens, tokens)


def tts_cost(chars: int) -> float:
    return chars / 1_000_000 * TTS_COST_PER_1M_CHARS


def estimate_tts_cost(chars: int, voice: Voice) -> float:
    return chars * voice.cost_per_char


def narration_seconds(words: int) -> int:
    return math.ceil(words / WORDS_PER_MINUTE * 60)


def select_range(text: str, start_pct: float = 0, end_pct: float = 100) -> str:
    """Return the slice of text between two percentage positions."""
    if not 0 <= start_pct < end_pct <= 100:
        raise InputError(
            "Range must satisfy 0 <= start < end <= 100",
            {"start": start_pct, "end": end_pct},
        )
    total = len(text)
    start = math.floor(total * start_pct / 100)
    end = math.floor(total * end_pct / 100)
    return text[start:end]


def estimate_project(text: str, start_pct: float = 0, end_pct: float = 100) -> ProjectEstimate:
    """Estimate tokens, cost and listening time for a range of the book."""
    selected = select_range(text, start_pct, end_pct)
    selected_chars = len(selected)
    selected_words = count_words(selected)

    input_tokens = estimate_tokens(selected_chars)
    output_tokens = estimate_tokens(selected_chars)
    llm = modernization_cost(input_tokens, output_tokens)

    tts_chars = selected_chars
    tts = tts_cost(tts_chars)

    return ProjectEstimate(
        total_words=count_words(text),
        total_chars=len(text),
        selected_words=selected_words,
        selected_chars=selected_chars,
        input_tokens=input_tokens,
        output_tokens=output_tokens,
        total_tokens=input_tokens + output_tokens,
        tts_chars=tts_chars,
        modernization_cost=llm,
        tts_cost=tts,
        total_cost=llm + tts,
        duration_minutes=math.ceil(selected_words / WORDS_PER_MINUTE),
    )


def estimate_llm_cost(chunks: Sequence[Chunk], fraction: float) -> LLMCostPreview:
    """Cost of modernizing the first ``fraction`` of the pending chunks."""
    if not 0 < fraction <= 1:
        raise InputError("fraction must be in (0, 1]", {"fraction": fraction})
    pending = [c for c in chunks if c.status == "pending"]
    count = len(pending) if fraction == 1 else math.ceil(len(pending) * fraction)
    words = sum(c.word_count for c in pending[:count])
    tokens = round_half_up(words * TOKENS_PER_WORD)
    # input and output are both billed
    cost = tokens * 2 * BATCH_COST_PER_1K_TOKENS / 1000
    return LLMCostPreview(fraction=fraction, chunk_count=count, words=words, tokens=tokens, cost=cost)


def llm_cost_preview(chunks: Sequence[Chunk]) -> list[LLMCostPreview]:
    return [estimate_llm_cost(chunks, f) for f in LLM_PREVIEW_FRACTIONS]


def format_cost(cost: float) -> str:
    if cost < 0.01:
        return "<$0.01"
    return f"${cost:.2f}"


def format_duration(seconds: float) -> str:
    """1h 2m, 3m 4s or 5s."""
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}h {mins}m"
    if mins > 0:
        return f"{mins}m {secs}s"
    return f"{secs}s"


def format_timestamp(seconds: float) -> str:
    """m:ss, or h:mm:ss past the hour."""
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    mins, secs = divmod(rest, 60)
    if hours > 0:
        return f"{hours}:{mins:02d}:{secs:02d}"
    return f"{mins}:{secs:02d}"
