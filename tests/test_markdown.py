from __future__ import annotations

from datetime import datetime

from modernbook.converters.book_markdown import EditionMarkdownConverter
from modernbook.models.book import Chapter
from modernbook.models.social import Edition


def _edition(**overrides):
    fields = dict(
        id="e1",
        book_id="1",
        user_id="me",
        user_handle="you",
        title="Pride and Prejudice",
        author="Jane Austen",
        summary="A fresh take.",
        tags=["romance", "classic"],
        listens=12,
        likes=3,
        created_at=datetime(2024, 11, 2, 9, 30),
        modernized_text="Everyone knows this.\n\nThe end.\n",
    )
    fields.update(overrides)
    return Edition(**fields)


def test_convert_full_edition():
    chapters = [
        Chapter(id=0, title="CHAPTER I", chunk_index=0, number=1),
        Chapter(id=4, title="CHAPTER II", chunk_index=4, number=2),
    ]

    md = EditionMarkdownConverter().convert(_edition(), chapters)

    assert md.startswith(
        "---\n"
        "title: Pride and Prejudice\n"
        "author: Jane Austen\n"
        "tags: [romance, classic]\n"
        "visibility: public\n"
        "listens: 12\n"
        "likes: 3\n"
        "created: 2024-11-02\n"
        "---\n"
    )
    assert "# Pride and Prejudice\n\n**Author:** Jane Austen\n**Edition by:** @you" in md
    assert "## Summary\n\nA fresh take." in md
    assert "## Table of Contents\n\n- CHAPTER I\n- CHAPTER II" in md
    assert md.endswith("---\n\nEveryone knows this.\n\nThe end.\n")


def test_convert_minimal_edition():
    md = EditionMarkdownConverter().convert(_edition(summary="", tags=[], visibility="private"))

    assert "tags:" not in md
    assert "visibility: private" in md
    assert "## Summary" not in md
    assert "## Table of Contents" not in md


def test_convert_to_file(tmp_path):
    path = EditionMarkdownConverter().convert_to_file(_edition(), tmp_path / "out" / "pride.md")

    assert path.read_text(encoding="utf-8").endswith("The end.\n")
