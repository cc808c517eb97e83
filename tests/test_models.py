from __future__ import annotations

import pytest
from pydantic import ValidationError

from modernbook.exceptions import InvalidVoiceError, NotFoundError
from modernbook.models.book import AudioSegment, Book, ProjectConfig
from modernbook.models.social import parse_tags
from modernbook.models.voice import get_voice


def test_book_defaults_and_slug():
    book = Book(id="7", title="Pride and Prejudice: A Novel")

    assert book.author == "Unknown Author"
    assert book.status == "uploaded"
    assert book.slug == "pride_and_prejudice_a_novel"
    assert Book(id="7", title="???").slug == "book_7"


def test_book_total_duration_and_json(tmp_path):
    book = Book(
        id="1",
        title="Emma",
        audio_segments=[
            AudioSegment(id="seg-0", chunk_index=0, audio_url="a.mp3", duration=4.5),
            AudioSegment(id="seg-1", chunk_index=3, audio_url="b.mp3", duration=2),
        ],
    )
    assert book.total_duration == 6.5

    path = tmp_path / "books" / "emma.json"
    book.to_json(path)
    assert Book.from_json(path) == book


def test_project_config_range():
    config = ProjectConfig(title="Emma")
    assert not config.is_range_modified
    assert ProjectConfig(title="Emma", start_position=10).is_range_modified

    with pytest.raises(ValidationError):
        ProjectConfig(title="Emma", start_position=60, end_position=40)
    with pytest.raises(ValidationError):
        ProjectConfig(title="Emma", end_position=120)


def test_parse_tags():
    assert parse_tags("romance, classic,, witty ") == ["romance", "classic", "witty"]
    assert parse_tags(["a", " ", "b "]) == ["a", "b"]
    assert parse_tags(None) == []


def test_voice_lookup():
    assert get_voice("onyx").name == "Onyx"
    with pytest.raises(InvalidVoiceError):
        get_voice("robot")


def test_not_found_message_is_plain():
    err = NotFoundError("Book not found: 9")

    assert str(err) == "Book not found: 9"
    assert isinstance(err, KeyError)
