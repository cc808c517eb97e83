from __future__ import annotations

import pytest

from modernbook.exceptions import InputError
from modernbook.extractors.chunker import build_chunks, chunk_text


def test_empty_text_has_no_chunks():
    assert chunk_text("") == []
    assert chunk_text("\n\n   \n\n") == []


def test_paragraphs_are_packed_while_they_fit():
    text = "a" * 10 + "\n\n" + "b" * 10

    assert chunk_text(text, 25) == ["a" * 10 + "\n\n" + "b" * 10]
    assert chunk_text(text, 15) == ["a" * 10, "b" * 10]


def test_blank_lines_with_spaces_still_break_paragraphs():
    assert chunk_text("first\n   \nsecond", 8) == ["first", "second"]


def test_long_paragraph_splits_on_sentences():
    text = "One two. Three four. Five six."

    assert chunk_text(text, 20) == ["One two. Three four.", "Five six."]


def test_long_sentence_splits_after_clause_punctuation():
    text = "alpha beta, gamma delta, epsilon"

    assert chunk_text(text, 15) == ["alpha beta,", "gamma delta,", "epsilon"]


def test_long_sentence_without_punctuation_splits_on_spaces():
    text = "one two three four five six"

    chunks = chunk_text(text, 10)

    assert chunks == ["one two", "three four", "five six"]


def test_single_overlong_word_is_hard_cut():
    assert chunk_text("x" * 25, 10) == ["x" * 10, "x" * 10, "x" * 5]


def test_every_chunk_respects_the_limit():
    paragraph = " ".join(
        f"Sentence {i} runs on, and on; then it stops." for i in range(40)
    )
    text = "\n\n".join([paragraph, "Short one.", paragraph])

    chunks = chunk_text(text, 120)

    assert chunks
    assert all(0 < len(c) <= 120 for c in chunks)
    assert "Short one." in " ".join(chunks)


def test_invalid_limit_raises():
    with pytest.raises(InputError):
        chunk_text("text", 0)


def test_build_chunks_attaches_stats():
    chunks = build_chunks("Hello world.\n\nSecond paragraph here.", 25)

    assert [c.id for c in chunks] == [0, 1]
    first = chunks[0]
    assert first.original_text == "Hello world."
    assert first.char_count == 12
    assert first.word_count == 2
    assert first.token_count == 3
    assert first.estimated_cost == pytest.approx(0.00012)
    assert first.status == "pending"
    assert first.modernized_text == ""


def test_newline_separated_words_are_not_cut():
    assert chunk_text("apple\nbanana\ncherry\ndamson\nelder", 15) == [
        "apple\nbanana",
        "cherry\ndamson",
        "elder",
    ]


@pytest.mark.parametrize(
    "text, max_chars",
    [
        ("apple\nbanana\ncherry\ndamson\nelder", 15),
        ("one\ttwo\tthree\tfour\tfive\tsix", 10),
        ("a\u00a0bb\u00a0ccc\u00a0dddd\u00a0eeeee", 8),
        ("first clause, second clause; third\nclause\tends here", 20),
        ("Verse one\nline two\n\nVerse two,\tline three; line four.", 12),
    ],
)
def test_words_survive_chunking(text, max_chars):
    chunks = chunk_text(text, max_chars)

    assert all(len(c) <= max_chars for c in chunks)
    assert " ".join(chunks).split() == text.split()


def test_only_overlong_words_are_cut():
    text = "short words then " + "x" * 30 + " more words"

    chunks = chunk_text(text, 12)

    assert " ".join(chunks).split() == [
        "short", "words", "then", "x" * 12, "x" * 12, "x" * 6, "more", "words",
    ]
