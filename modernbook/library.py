"""In-memory library of books, editions and clips."""
import logging
import random
import uuid
from datetime import datetime
from pathlib import Path
from typing import Callable, Literal, Optional, Sequence

from modernbook.config import (
    CHUNK_MAX_CHARS,
    COVER_GRADIENTS,
    LOCAL_USER_HANDLE,
    LOCAL_USER_ID,
    MODERNIZE_BATCH_SIZE,
)
from modernbook.converters.archaic import replace_archaic_words
from modernbook.converters.segments import (
    build_segments,
    complete_segment,
    fail_segment,
    segment_text,
    start_segment,
)
from modernbook.estimates import ProjectEstimate, estimate_project, select_range
from modernbook.exceptions import InputError, InvalidStateError, ModernbookError, NotFoundError
from modernbook.extractors.chapter_detector import ChapterDetector
from modernbook.extractors.chunker import build_chunks
from modernbook.extractors.loader import load_book_text, title_from_filename
from modernbook.models.book import AudioSegment, Book, Chapter, Chunk, ProjectConfig, Segment
from modernbook.models.social import Clip, Edition, Visibility, parse_tags

logger = logging.getLogger(__name__)

Modernizer = Callable[[str], str]
Synthesizer = Callable[[str], bytes]
SortKey = Literal["trending", "recent", "popular"]

CLIP_QUOTE_CHARS = 150


class Library:
    """Holds everything the app knows about; nothing is persisted.

    Lists are kept newest first, the way they are shown.
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], datetime] = datetime.now,
        detector: Optional[ChapterDetector] = None,
    ):
        self.rng = rng or random.Random()
        self.clock = clock
        self.detector = detector or ChapterDetector()
        self.books: list[Book] = []
        self.editions: list[Edition] = []
        self.clips: list[Clip] = []
        self._chunks: dict[str, list[Chunk]] = {}
        self._configs: dict[str, ProjectConfig] = {}
        self._audio: dict[str, bytes] = {}

    # ── Books ────────────────────────────────────────────────

    def upload(self, filename: str, text: str) -> Book:
        """Register uploaded book text; the book starts out processing."""
        book = Book(
            id=uuid.uuid4().hex[:12],
            title=title_from_filename(filename),
            cover_color=f"hsl({self.rng.random() * 360:.0f}, 50%, 50%)",
            cover_gradient=self.rng.choice(COVER_GRADIENTS),
            uploaded_at=self.clock(),
            status="processing",
            original_text=text,
        )
        self.books.insert(0, book)
        logger.info("Uploaded %r (%d chars)", book.title, len(text))
        return book

    def upload_file(self, path: Path | str) -> Book:
        loaded = load_book_text(path)
        book = self.upload(Path(path).name, loaded.text)
        if loaded.title:
            book.title = loaded.title
        if loaded.author:
            book.author = loaded.author
        return book

    def get_book(self, book_id: str) -> Book:
        for book in self.books:
            if book.id == book_id:
                return book
        raise NotFoundError(f"Book not found: {book_id}")

    def configure_project(
        self,
        book_id: str,
        config: ProjectConfig,
        max_chars: int = CHUNK_MAX_CHARS,
    ) -> list[Chunk]:
        """Apply setup choices and chunk the selected range of the book."""
        book = self.get_book(book_id)
        if not book.original_text:
            raise InvalidStateError(f"Book {book.title!r} has no text to chunk")

        book.title = config.title or book.title
        if config.author:
            book.author = config.author

        selected = select_range(book.original_text, config.start_position, config.end_position)
        chunks = build_chunks(selected, max_chars)
        self._chunks[book_id] = chunks
        self._configs[book_id] = config
        logger.info("Configured %r: %d chunks", book.title, len(chunks))
        return chunks

    def chunks(self, book_id: str) -> list[Chunk]:
        self.get_book(book_id)
        return self._chunks.get(book_id, [])

    def get_chunk(self, book_id: str, chunk_id: int) -> Chunk:
        for chunk in self.chunks(book_id):
            if chunk.id == chunk_id:
                return chunk
        raise NotFoundError(f"Chunk not found: {chunk_id}")

    def chapters(self, book_id: str) -> list[Chapter]:
        return self.detector.detect(self.chunks(book_id))

    def estimate(self, book_id: str) -> ProjectEstimate:
        book = self.get_book(book_id)
        config = self._configs.get(book_id)
        if config:
            return estimate_project(book.original_text or "", config.start_position, config.end_position)
        return estimate_project(book.original_text or "")

    # ── Modernization ────────────────────────────────────────

    def modernize_next(
        self,
        book_id: str,
        count: int = MODERNIZE_BATCH_SIZE,
        modernizer: Optional[Modernizer] = None,
    ) -> list[Chunk]:
        """Modernize the next ``count`` pending chunks.

        A chunk whose call raises a ModernbookError is marked failed and the
        rest of the batch carries on. Any other error marks the chunk failed
        and propagates.
        """
        book = self.get_book(book_id)
        modernize = modernizer or replace_archaic_words
        pending = [c for c in self.chunks(book_id) if c.status == "pending"][:count]

        try:
            for chunk in pending:
                chunk.status = "processing"
                try:
                    chunk.modernized_text = modernize(chunk.original_text)
                except ModernbookError as exc:
                    chunk.status = "failed"
                    chunk.error_message = str(exc)
                    logger.warning("Chunk %d of %r failed: %s", chunk.id, book.title, exc)
                    continue
                except Exception as exc:
                    chunk.status = "failed"
                    chunk.error_message = str(exc) or type(exc).__name__
                    raise
                chunk.status = "completed"
                chunk.error_message = None
        finally:
            self._refresh_modernized(book)
        return pending

    def retry_failed(self, book_id: str) -> list[Chunk]:
        """Put failed chunks back in the pending queue."""
        failed = [c for c in self.chunks(book_id) if c.status == "failed"]
        for chunk in failed:
            chunk.status = "pending"
            chunk.error_message = None
        return failed

    def _refresh_modernized(self, book: Book) -> None:
        chunks = self._chunks.get(book.id, [])
        done = [c for c in chunks if c.status == "completed"]
        if done:
            book.modernized_text = "\n\n".join(c.modernized_text for c in done)
        if chunks and len(done) == len(chunks) and book.status == "processing":
            book.status = "modernized"
            logger.info("%r fully modernized", book.title)

    def edit_chunk(self, book_id: str, chunk_id: int, new_text: str) -> Chunk:
        chunk = self.get_chunk(book_id, chunk_id)
        chunk.modernized_text = new_text
        chunk.edited = True
        if chunk.status != "completed":
            chunk.status = "completed"
            chunk.error_message = None
        self._refresh_modernized(self.get_book(book_id))
        return chunk

    def flag_chunk(self, book_id: str, chunk_id: int, flagged: bool = True) -> Chunk:
        chunk = self.get_chunk(book_id, chunk_id)
        chunk.flagged = flagged
        return chunk

    def search_chunks(self, book_id: str, query: str = "", status: str = "all") -> list[Chunk]:
        """Filter by status ("all", "edited", "flagged" or a chunk status) and text."""
        result = self.chunks(book_id)
        if status == "edited":
            result = [c for c in result if c.edited]
        elif status == "flagged":
            result = [c for c in result if c.flagged]
        elif status != "all":
            result = [c for c in result if c.status == status]

        if query:
            q = query.lower()
            result = [
                c for c in result
                if q in c.modernized_text.lower() or q in c.original_text.lower()
            ]
        return result

    # ── Audio ────────────────────────────────────────────────

    def build_segments(self, book_id: str, chunks_per_segment: int) -> list[Segment]:
        return build_segments(self.chunks(book_id), chunks_per_segment)

    def generate_audio(
        self,
        book_id: str,
        segments: Sequence[Segment],
        synthesizer: Synthesizer,
        output_dir: Optional[Path | str] = None,
        audio_format: str = "mp3",
    ) -> list[Segment]:
        """Synthesize every segment that has no audio yet and attach it to the book.

        Pending and failed segments are started; a segment already put back to
        processing by ``retry_segment`` is synthesized as is. Audio from
        earlier calls stays attached.
        """
        book = self.get_book(book_id)
        chunks = self.chunks(book_id)
        if not segments:
            raise InputError("No segments to synthesize")

        try:
            for segment in segments:
                if segment.status == "completed":
                    continue
                if segment.status != "processing":
                    start_segment(segment)
                try:
                    audio = synthesizer(segment_text(segment, chunks))
                except ModernbookError as exc:
                    fail_segment(segment, str(exc))
                    continue
                except Exception as exc:
                    fail_segment(segment, str(exc) or type(exc).__name__)
                    raise
                complete_segment(segment, self._store_audio(book, segment, audio, output_dir, audio_format))
        finally:
            self._attach_audio(book, segments)
        return list(segments)

    def _attach_audio(self, book: Book, segments: Sequence[Segment]) -> None:
        """Merge completed segments into the book's audio, keyed by id."""
        completed = [s for s in segments if s.status == "completed"]
        if not completed:
            return
        merged = {a.id: a for a in book.audio_segments}
        for s in completed:
            merged[f"seg-{s.id}"] = AudioSegment(
                id=f"seg-{s.id}",
                chunk_index=s.chunk_ids[0],
                audio_url=s.audio_url,
                duration=s.estimated_duration,
            )
        book.audio_segments = sorted(merged.values(), key=lambda a: a.chunk_index)
        book.status = "audio-ready"
        logger.info("%r has %d audio segments", book.title, len(book.audio_segments))

    def _store_audio(
        self,
        book: Book,
        segment: Segment,
        audio: bytes,
        output_dir: Optional[Path | str],
        audio_format: str,
    ) -> str:
        filename = f"{book.slug}_segment_{segment.id + 1:03d}.{audio_format}"
        if output_dir:
            path = Path(output_dir) / filename
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_bytes(audio)
            return str(path)
        self._audio[filename] = audio
        return filename

    def audio_bytes(self, audio_url: str) -> bytes:
        if audio_url in self._audio:
            return self._audio[audio_url]
        path = Path(audio_url)
        if path.exists():
            return path.read_bytes()
        raise NotFoundError(f"Audio not found: {audio_url}")

    # ── Editions ─────────────────────────────────────────────

    def create_edition(
        self,
        book_id: str,
        title: Optional[str] = None,
        author: Optional[str] = None,
        summary: str = "",
        tags: str | list[str] | None = None,
        visibility: Visibility = "public",
    ) -> Edition:
        book = self.get_book(book_id)
        if not book.modernized_text:
            raise InvalidStateError(f"Book {book.title!r} has no modernized text yet")

        edition = Edition(
            id=f"e{uuid.uuid4().hex[:12]}",
            book_id=book.id,
            user_id=LOCAL_USER_ID,
            user_handle=LOCAL_USER_HANDLE,
            title=title or book.title,
            author=author or book.author,
            summary=summary,
            tags=parse_tags(tags),
            cover_gradient=book.cover_gradient,
            visibility=visibility,
            created_at=self.clock(),
            modernized_text=book.modernized_text,
            audio_segments=list(book.audio_segments),
        )
        self.editions.insert(0, edition)
        logger.info("Created %s edition %r", visibility, edition.title)
        return edition

    def get_edition(self, edition_id: str) -> Edition:
        for edition in self.editions:
            if edition.id == edition_id:
                return edition
        raise NotFoundError(f"Edition not found: {edition_id}")

    def my_editions(self) -> list[Edition]:
        return [e for e in self.editions if e.user_id == LOCAL_USER_ID]

    def public_editions(self, query: str = "", sort_by: SortKey = "trending") -> list[Edition]:
        """Public editions matching title, author or tag, best first."""
        editions = [e for e in self.editions if e.is_public]
        if query:
            q = query.lower()
            editions = [
                e for e in editions
                if q in e.title.lower()
                or q in e.author.lower()
                or any(q in tag.lower() for tag in e.tags)
            ]

        if sort_by == "trending":
            key = lambda e: e.listens
        elif sort_by == "recent":
            key = lambda e: e.created_at
        elif sort_by == "popular":
            key = lambda e: e.likes
        else:
            raise InputError(f"Unknown sort: {sort_by}", {"validSorts": ["trending", "recent", "popular"]})
        return sorted(editions, key=key, reverse=True)

    def like_edition(self, edition_id: str) -> Edition:
        edition = self.get_edition(edition_id)
        edition.likes += 1
        return edition

    def record_listen(self, edition_id: str) -> Edition:
        edition = self.get_edition(edition_id)
        edition.listens += 1
        return edition

    # ── Clips ────────────────────────────────────────────────

    def create_clip(
        self,
        edition_id: str,
        title: str,
        quote_text: Optional[str] = None,
        start_time: float = 0,
        end_time: float = 10,
        tags: str | list[str] | None = None,
    ) -> Clip:
        """Cut a clip from an edition; the quote defaults to its opening text."""
        edition = self.get_edition(edition_id)
        if start_time < 0 or end_time <= start_time:
            raise InputError(
                "Clip must satisfy 0 <= start_time < end_time",
                {"startTime": start_time, "endTime": end_time},
            )
        if quote_text is None:
            if not edition.modernized_text:
                raise InvalidStateError(f"Edition {edition.title!r} has no text to quote")
            quote_text = edition.modernized_text[:CLIP_QUOTE_CHARS]

        audio_url = edition.audio_segments[0].audio_url if edition.audio_segments else ""
        clip = Clip(
            id=f"c{uuid.uuid4().hex[:12]}",
            edition_id=edition.id,
            user_id=LOCAL_USER_ID,
            user_handle=LOCAL_USER_HANDLE,
            title=title,
            book_title=edition.title,
            quote_text=quote_text,
            audio_url=audio_url,
            start_time=start_time,
            end_time=end_time,
            duration=end_time - start_time,
            tags=parse_tags(tags),
            cover_gradient=edition.cover_gradient,
            created_at=self.clock(),
        )
        self.clips.insert(0, clip)
        logger.info("Created clip %r from %r", clip.title, edition.title)
        return clip

    def get_clip(self, clip_id: str) -> Clip:
        for clip in self.clips:
            if clip.id == clip_id:
                return clip
        raise NotFoundError(f"Clip not found: {clip_id}")

    def feed(self) -> list[Clip]:
        return list(self.clips)

    def like_clip(self, clip_id: str) -> Clip:
        clip = self.get_clip(clip_id)
        clip.likes += 1
        return clip

    def share_clip(self, clip_id: str) -> Clip:
        clip = self.get_clip(clip_id)
        clip.shares += 1
        return clip
