"""Shareable editions and clips."""
from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field

from modernbook.models.book import AudioSegment

Visibility = Literal["public", "private"]


class Edition(BaseModel):
    """A published modernized version of a book."""
    id: str
    book_id: str
    user_id: str
    user_handle: str
    user_avatar: Optional[str] = None
    title: str
    author: str
    summary: str = ""
    tags: list[str] = Field(default_factory=list)
    cover_gradient: str = ""
    visibility: Visibility = "public"
    listens: int = 0
    likes: int = 0
    created_at: datetime = Field(default_factory=datetime.now)
    modernized_text: Optional[str] = None
    audio_segments: list[AudioSegment] = Field(default_factory=list)

    @property
    def is_public(self) -> bool:
        return self.visibility == "public"


class Clip(BaseModel):
    """A short audio excerpt with its quoted text."""
    id: str
    edition_id: str
    user_id: str
    user_handle: str
    user_avatar: Optional[str] = None
    title: str
    book_title: str
    quote_text: str
    audio_url: str
    start_time: float
    end_time: float
    duration: float
    tags: list[str] = Field(default_factory=list)
    likes: int = 0
    shares: int = 0
    cover_gradient: str = ""
    created_at: datetime = Field(default_factory=datetime.now)


def parse_tags(tags: str | list[str] | None) -> list[str]:
    """Accept "a, b,,c" or a list; drop blanks."""
    if tags is None:
        return []
    items = tags.split(",") if isinstance(tags, str) else tags
    return [t.strip() for t in items if t and t.strip()]
