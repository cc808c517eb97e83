"""Group chunks into TTS segments and LLM batches."""
import logging
from dataclasses import dataclass
from typing import Sequence

from modernbook.config import TTS_CHARS_PER_SECOND
from modernbook.estimates import narration_seconds, tts_cost
from modernbook.exceptions import InputError, InvalidStateError
from modernbook.models.book import Batch, Chunk, Segment

logger = logging.getLogger(__name__)


@dataclass
class SegmentStats:
    total_segments: int
    completed: int
    processing: int
    pending: int
    failed: int
    total_duration: int
    total_cost: float
    total_words: int


@dataclass
class BatchStats:
    total: int
    min_chars: int
    avg_chars: int
    max_chars: int
    total_seconds: int
    over_limit: int


def build_segments(chunks: Sequence[Chunk], chunks_per_segment: int) -> list[Segment]:
    """Group consecutive modernized chunks into segments for synthesis.

    Only completed chunks with modernized text take part; everything else
    is still waiting on the LLM.
    """
    if chunks_per_segment < 1:
        raise InputError(
            "chunks_per_segment must be at least 1",
            {"chunksPerSegment": chunks_per_segment},
        )

    ready = [c for c in chunks if c.status == "completed" and c.modernized_text]
    segments: list[Segment] = []

    for i in range(0, len(ready), chunks_per_segment):
        group = ready[i:i + chunks_per_segment]
        total_chars = sum(c.char_count for c in group)
        total_words = sum(c.word_count for c in group)
        segments.append(Segment(
            id=len(segments),
            name=f"Segment {len(segments) + 1}",
            chunk_ids=[c.id for c in group],
            total_chars=total_chars,
            total_words=total_words,
            estimated_duration=narration_seconds(total_words),
            estimated_cost=tts_cost(total_chars),
        ))

    return segments


def segment_text(segment: Segment, chunks: Sequence[Chunk]) -> str:
    """Modernized text of a segment, chunks joined by blank lines."""
    by_id = {c.id: c for c in chunks}
    return "\n\n".join(by_id[cid].modernized_text for cid in segment.chunk_ids if cid in by_id)


def start_segment(segment: Segment) -> Segment:
    if segment.status not in ("pending", "failed"):
        raise InvalidStateError(f"{segment.name} is {segment.status}, cannot start")
    segment.status = "processing"
    segment.progress = 0
    segment.error_message = None
    return segment


def advance_segment(segment: Segment, step: int) -> Segment:
    """Move progress forward; reaching 100 completes the segment."""
    if segment.status != "processing":
        raise InvalidStateError(f"{segment.name} is {segment.status}, not processing")
    segment.progress = min(100, (segment.progress or 0) + step)
    if segment.progress >= 100:
        complete_segment(segment, segment.audio_url or f"segment-{segment.id}.mp3")
    return segment


def complete_segment(segment: Segment, audio_url: str) -> Segment:
    if segment.status != "processing":
        raise InvalidStateError(f"{segment.name} is {segment.status}, not processing")
    segment.status = "completed"
    segment.progress = 100
    segment.audio_url = audio_url
    logger.debug("%s completed -> %s", segment.name, audio_url)
    return segment


def fail_segment(segment: Segment, message: str) -> Segment:
    if segment.status != "processing":
        raise InvalidStateError(f"{segment.name} is {segment.status}, not processing")
    segment.status = "failed"
    segment.error_message = message
    segment.progress = None
    logger.warning("%s failed: %s", segment.name, message)
    return segment


def retry_segment(segment: Segment) -> Segment:
    if segment.status != "failed":
        raise InvalidStateError(f"{segment.name} has not failed")
    return start_segment(segment)


def segment_stats(segments: Sequence[Segment]) -> SegmentStats:
    return SegmentStats(
        total_segments=len(segments),
        completed=sum(1 for s in segments if s.status == "completed"),
        processing=sum(1 for s in segments if s.status == "processing"),
        pending=sum(1 for s in segments if s.status == "pending"),
        failed=sum(1 for s in segments if s.status == "failed"),
        total_duration=sum(s.estimated_duration for s in segments),
        total_cost=sum(s.estimated_cost for s in segments),
        total_words=sum(s.total_words for s in segments),
    )


def pack_batches(chunks: Sequence[Chunk], target_chars: int) -> list[Batch]:
    """Greedily pack consecutive chunks up to ``target_chars`` per batch.

    A chunk larger than the target still gets a batch of its own.
    """
    if target_chars < 1:
        raise InputError("target_chars must be at least 1", {"targetChars": target_chars})

    batches: list[Batch] = []
    start = 0
    chars = 0

    def _close(end: int) -> None:
        batches.append(Batch(
            id=len(batches),
            first_chunk=start,
            last_chunk=end,
            char_count=chars,
            estimated_seconds=chars // TTS_CHARS_PER_SECOND,
        ))

    for i, chunk in enumerate(chunks):
        if i > start and chars + chunk.char_count > target_chars:
            _close(i - 1)
            start = i
            chars = 0
        chars += chunk.char_count

    if chunks:
        _close(len(chunks) - 1)

    for batch in batches:
        for chunk in chunks[batch.first_chunk:batch.last_chunk + 1]:
            chunk.batch_id = batch.id

    return batches


def batch_stats(batches: Sequence[Batch], max_chars: int) -> BatchStats:
    if not batches:
        return BatchStats(0, 0, 0, 0, 0, 0)
    counts = [b.char_count for b in batches]
    return BatchStats(
        total=len(batches),
        min_chars=min(counts),
        avg_chars=sum(counts) // len(batches),
        max_chars=max(counts),
        total_seconds=sum(b.estimated_seconds for b in batches),
        over_limit=sum(1 for c in counts if c > max_chars),
    )
