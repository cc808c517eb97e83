from __future__ import annotations

import random
from datetime import datetime

import pytest

from modernbook.library import Library
from modernbook.models.book import Chunk

FIXED_NOW = datetime(2024, 11, 5, 12, 0)


def make_chunk(chunk_id: int, text: str = "", *, status: str = "pending", modernized: str = "", words: int | None = None) -> Chunk:
    return Chunk(
        id=chunk_id,
        original_text=text or f"Chunk number {chunk_id}.",
        modernized_text=modernized,
        char_count=len(text or f"Chunk number {chunk_id}."),
        word_count=words if words is not None else len((text or f"Chunk number {chunk_id}.").split()),
        status=status,
    )


@pytest.fixture
def library():
    return Library(rng=random.Random(0), clock=lambda: FIXED_NOW)
