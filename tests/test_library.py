from __future__ import annotations

import pytest

from modernbook.converters.segments import retry_segment
from modernbook.exceptions import (
    InputError,
    InvalidStateError,
    NotFoundError,
    UpstreamError,
)
from modernbook.models.book import Book, ProjectConfig
from modernbook.samples import seed_library

from conftest import FIXED_NOW

TEXT = "Thou art here.\n\nWhilst waiting."


def _configured(library, text=TEXT, max_chars=20):
    book = library.upload("the_raven.txt", text)
    library.configure_project(book.id, ProjectConfig(title=book.title), max_chars=max_chars)
    return book


def test_upload_starts_processing(library):
    first = library.upload("first.txt", "one")
    second = library.upload("moby-dick.txt", "Call me Ishmael.")

    assert second.title == "moby-dick"
    assert second.author == "Unknown Author"
    assert second.status == "processing"
    assert second.uploaded_at == FIXED_NOW
    assert second.original_text == "Call me Ishmael."
    assert library.books == [second, first]
    assert library.get_book(first.id) is first


def test_upload_file_uses_loader(library, tmp_path):
    path = tmp_path / "emma.txt"
    path.write_text("Emma Woodhouse, handsome, clever, and rich.", encoding="utf-8")

    book = library.upload_file(path)

    assert book.title == "emma"
    assert book.original_text.startswith("Emma Woodhouse")


def test_unknown_book(library):
    with pytest.raises(NotFoundError):
        library.get_book("missing")


def test_configure_project_applies_choices(library):
    book = library.upload("draft.txt", "a" * 100)

    chunks = library.configure_project(
        book.id,
        ProjectConfig(title="Final Title", author="Jane Doe", start_position=50, end_position=100),
    )

    assert book.title == "Final Title"
    assert book.author == "Jane Doe"
    assert [c.char_count for c in chunks] == [50]
    assert library.chunks(book.id) == chunks
    assert library.estimate(book.id).selected_chars == 50


def test_configure_project_needs_text(library):
    library.books.append(Book(id="empty", title="Empty"))

    with pytest.raises(InvalidStateError):
        library.configure_project("empty", ProjectConfig(title="Empty"))


def test_modernize_next_in_batches(library):
    book = _configured(library)

    done = library.modernize_next(book.id, count=1)

    assert [c.status for c in done] == ["completed"]
    assert done[0].modernized_text == "You art here."
    assert book.status == "processing"
    assert book.modernized_text == "You art here."

    library.modernize_next(book.id)

    assert book.status == "modernized"
    assert book.modernized_text == "You art here.\n\nWhile waiting."


def test_failed_chunks_can_be_retried(library):
    book = _configured(library)

    def _broken(text):
        raise UpstreamError("Text modernization failed", status_code=500)

    library.modernize_next(book.id, modernizer=_broken)

    failed = library.search_chunks(book.id, status="failed")
    assert len(failed) == 2
    assert failed[0].error_message == "Text modernization failed"
    assert book.status == "processing"

    assert library.retry_failed(book.id) == failed
    assert all(c.status == "pending" and c.error_message is None for c in failed)

    library.modernize_next(book.id, modernizer=str.upper)
    assert book.modernized_text == "THOU ART HERE.\n\nWHILST WAITING."
    assert book.status == "modernized"


def test_edit_and_flag_chunks(library):
    book = _configured(library)
    library.modernize_next(book.id, count=1)

    edited = library.edit_chunk(book.id, 1, "While we wait.")
    library.flag_chunk(book.id, 0)

    assert edited.edited
    assert edited.status == "completed"
    assert book.status == "modernized"
    assert book.modernized_text == "You art here.\n\nWhile we wait."
    assert [c.id for c in library.search_chunks(book.id, status="edited")] == [1]
    assert [c.id for c in library.search_chunks(book.id, status="flagged")] == [0]
    assert [c.id for c in library.search_chunks(book.id, query="WAIT")] == [1]
    assert library.search_chunks(book.id, query="here", status="edited") == []

    with pytest.raises(NotFoundError):
        library.get_chunk(book.id, 99)


def test_chapters_for_book(library):
    book = _configured(library, "CHAPTER I\nIt begins.\n\nCHAPTER II\nIt ends.", max_chars=25)

    assert [c.title for c in library.chapters(book.id)] == ["CHAPTER I", "CHAPTER II"]


def test_generate_audio_in_memory(library):
    book = _configured(library)
    library.modernize_next(book.id)
    segments = library.build_segments(book.id, 1)

    library.generate_audio(book.id, segments, lambda text: text.encode())

    assert [s.status for s in segments] == ["completed", "completed"]
    assert book.status == "audio-ready"
    assert [a.id for a in book.audio_segments] == ["seg-0", "seg-1"]
    assert [a.chunk_index for a in book.audio_segments] == [0, 1]
    assert book.audio_segments[0].audio_url == "the_raven_segment_001.mp3"
    assert library.audio_bytes("the_raven_segment_002.mp3") == b"While waiting."


def test_generate_audio_to_disk(library, tmp_path):
    book = _configured(library)
    library.modernize_next(book.id)
    segments = library.build_segments(book.id, 5)

    library.generate_audio(book.id, segments, lambda text: b"ID3", output_dir=tmp_path, audio_format="wav")

    path = tmp_path / "the_raven_segment_001.wav"
    assert path.read_bytes() == b"ID3"
    assert library.audio_bytes(str(path)) == b"ID3"


def test_generate_audio_failure_keeps_status(library):
    book = _configured(library)
    library.modernize_next(book.id)
    segments = library.build_segments(book.id, 1)

    def _broken(text):
        raise UpstreamError("TTS generation failed")

    library.generate_audio(book.id, segments, _broken)

    assert [s.status for s in segments] == ["failed", "failed"]
    assert book.status == "modernized"
    assert book.audio_segments == []
    with pytest.raises(NotFoundError):
        library.audio_bytes("the_raven_segment_001.mp3")


def test_generate_audio_needs_segments(library):
    book = _configured(library)

    with pytest.raises(InputError):
        library.generate_audio(book.id, [], lambda text: b"")


def test_create_edition(library):
    book = _configured(library)

    with pytest.raises(InvalidStateError):
        library.create_edition(book.id)

    library.modernize_next(book.id)
    edition = library.create_edition(book.id, summary="Short and sharp.", tags="poetry, gothic")

    assert edition.id.startswith("e")
    assert edition.title == "the_raven"
    assert edition.user_id == "me"
    assert edition.user_handle == "you"
    assert edition.tags == ["poetry", "gothic"]
    assert edition.visibility == "public"
    assert edition.created_at == FIXED_NOW
    assert edition.modernized_text == book.modernized_text
    assert library.my_editions() == [edition]
    assert library.get_edition(edition.id) is edition


def test_private_editions_are_not_listed(library):
    book = _configured(library)
    library.modernize_next(book.id)
    library.create_edition(book.id, visibility="private")

    assert library.public_editions() == []
    assert len(library.my_editions()) == 1


def test_public_editions_sorting():
    library = seed_library()

    def ids(**kwargs):
        return [e.id for e in library.public_editions(**kwargs)]

    assert ids() == ["pe3", "pe1", "pe2", "e1"]
    assert ids(sort_by="popular") == ["pe3", "pe1", "pe2", "e1"]
    assert ids(sort_by="recent") == ["e1", "pe1", "pe2", "pe3"]
    assert ids(query="gothic") == ["pe1", "pe2"]
    assert ids(query="WILDE") == ["pe2"]
    with pytest.raises(InputError):
        library.public_editions(sort_by="random")


def test_seeded_library_is_a_copy():
    library = seed_library()
    library.like_edition("pe1")
    library.record_listen("pe1")

    assert library.get_edition("pe1").likes == 235
    assert library.get_edition("pe1").listens == 3422
    assert seed_library().get_edition("pe1").likes == 234


def test_create_clip(library):
    seed_library(library)

    clip = library.create_clip("e1", "Opening", start_time=2, end_time=9, tags=["wit"])

    assert clip.edition_id == "e1"
    assert clip.book_title == "Pride and Prejudice"
    assert clip.quote_text == "Everyone knows that a wealthy single man must be looking for a wife."
    assert clip.duration == 7
    assert clip.created_at == FIXED_NOW
    assert library.feed()[0] is clip

    library.like_clip(clip.id)
    library.share_clip(clip.id)
    assert (clip.likes, clip.shares) == (1, 1)


def test_create_clip_validation(library):
    seed_library(library)

    with pytest.raises(InputError):
        library.create_clip("e1", "Backwards", start_time=5, end_time=5)
    with pytest.raises(InvalidStateError):
        library.create_clip("pe1", "No text")
    with pytest.raises(NotFoundError):
        library.create_clip("missing", "Nope")

    quoted = library.create_clip("pe1", "Quoted", quote_text="Listen to them.")
    assert quoted.quote_text == "Listen to them."


def test_unexpected_modernizer_error_leaves_chunk_retryable(library):
    book = _configured(library)

    def _crash(text):
        raise RuntimeError("connection pool exploded")

    with pytest.raises(RuntimeError):
        library.modernize_next(book.id, modernizer=_crash)

    chunks = library.chunks(book.id)
    assert [c.status for c in chunks] == ["failed", "pending"]
    assert chunks[0].error_message == "connection pool exploded"

    library.retry_failed(book.id)
    library.modernize_next(book.id)

    assert [c.status for c in chunks] == ["completed", "completed"]
    assert book.status == "modernized"


def _rate_limited_on(word):
    def _synthesize(text):
        if word in text:
            raise UpstreamError("TTS generation failed", status_code=429)
        return text.encode()
    return _synthesize


def test_retried_segment_is_synthesized(library):
    book = _configured(library)
    library.modernize_next(book.id)
    segments = library.build_segments(book.id, 1)

    library.generate_audio(book.id, segments, _rate_limited_on("While"))
    assert [s.status for s in segments] == ["completed", "failed"]
    assert [a.id for a in book.audio_segments] == ["seg-0"]

    retry_segment(segments[1])
    library.generate_audio(book.id, [segments[1]], lambda text: text.encode())

    assert [s.status for s in segments] == ["completed", "completed"]
    assert [a.id for a in book.audio_segments] == ["seg-0", "seg-1"]
    assert library.audio_bytes("the_raven_segment_002.mp3") == b"While waiting."


def test_failed_segments_are_picked_up_again(library):
    book = _configured(library)
    library.modernize_next(book.id)
    segments = library.build_segments(book.id, 1)

    library.generate_audio(book.id, segments, _rate_limited_on("You"))
    library.generate_audio(book.id, segments, lambda text: b"ok")

    assert [s.status for s in segments] == ["completed", "completed"]
    assert len(book.audio_segments) == 2
    assert library.audio_bytes("the_raven_segment_002.mp3") == b"While waiting."


def test_unexpected_synthesizer_error_fails_segment(library):
    book = _configured(library)
    library.modernize_next(book.id)
    segments = library.build_segments(book.id, 1)
    calls = []

    def _crash_second(text):
        calls.append(text)
        if len(calls) == 2:
            raise RuntimeError("disk full")
        return b"audio"

    with pytest.raises(RuntimeError):
        library.generate_audio(book.id, segments, _crash_second)

    assert [s.status for s in segments] == ["completed", "failed"]
    assert segments[1].error_message == "disk full"
    assert [a.id for a in book.audio_segments] == ["seg-0"]
    assert book.status == "audio-ready"
