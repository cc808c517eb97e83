"""Data models for books and their working state."""
from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

from modernbook.config import DEFAULT_INSTRUCTIONS

BookStatus = Literal["uploaded", "processing", "modernized", "audio-ready"]
WorkStatus = Literal["pending", "processing", "completed", "failed"]


class AudioSegment(BaseModel):
    """A synthesized audio file attached to a book."""
    id: str
    chunk_index: int
    audio_url: str
    duration: float


class Book(BaseModel):
    """An uploaded book and its modernization progress."""
    id: str
    title: str
    author: str = "Unknown Author"
    cover_color: str = ""
    cover_gradient: str = ""
    uploaded_at: datetime = Field(default_factory=datetime.now)
    status: BookStatus = "uploaded"
    original_text: Optional[str] = None
    modernized_text: Optional[str] = None
    audio_segments: list[AudioSegment] = Field(default_factory=list)

    @property
    def slug(self) -> str:
        """Generate a filename-safe slug."""
        clean = self.title.lower()
        for char in ":/\\?*\"<>|'.,;!()[]{}":
            clean = clean.replace(char, "")
        clean = clean.replace(" ", "_").replace("--", "_").replace("__", "_")
        return clean[:50].strip("_") or f"book_{self.id}"

    @property
    def total_duration(self) -> float:
        return sum(seg.duration for seg in self.audio_segments)

    def to_json(self, path: Path | str) -> None:
        """Serialize book to JSON file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.model_dump_json(indent=2), encoding="utf-8")

    @classmethod
    def from_json(cls, path: Path | str) -> "Book":
        """Deserialize book from JSON file."""
        data = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(data)


class Chunk(BaseModel):
    """A bounded slice of book text, the unit of modernization."""
    id: int
    original_text: str
    modernized_text: str = ""
    char_count: int = 0
    token_count: int = 0
    word_count: int = 0
    estimated_cost: float = 0.0
    edited: bool = False
    flagged: bool = False
    batch_id: Optional[int] = None
    status: WorkStatus = "pending"
    error_message: Optional[str] = None


class Chapter(BaseModel):
    """A chapter heading found at the start of a chunk."""
    id: int
    title: str
    chunk_index: int
    number: Optional[int] = None


class Segment(BaseModel):
    """Consecutive modernized chunks synthesized in one TTS call."""
    id: int
    name: str
    chunk_ids: list[int]
    total_chars: int
    total_words: int
    estimated_duration: int
    estimated_cost: float
    status: WorkStatus = "pending"
    audio_url: Optional[str] = None
    progress: Optional[int] = None
    error_message: Optional[str] = None


class Batch(BaseModel):
    """A run of consecutive chunks packed up to a character target."""
    id: int
    first_chunk: int
    last_chunk: int
    char_count: int
    estimated_seconds: int

    @property
    def chunk_count(self) -> int:
        return self.last_chunk - self.first_chunk + 1


class ProjectConfig(BaseModel):
    """User choices made before a book is chunked."""
    title: str
    author: str = ""
    instructions: str = DEFAULT_INSTRUCTIONS
    start_position: float = Field(default=0, ge=0, le=100)
    end_position: float = Field(default=100, ge=0, le=100)

    @model_validator(mode="after")
    def _check_range(self) -> "ProjectConfig":
        if self.start_position >= self.end_position:
            raise ValueError("start_position must be below end_position")
        return self

    @property
    def is_range_modified(self) -> bool:
        return self.start_position > 0 or self.end_position < 100
