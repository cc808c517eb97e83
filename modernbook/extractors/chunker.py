"""Split book text into bounded-size chunks on paragraph and sentence boundaries."""
import logging
import re

from modernbook.config import CHUNK_MAX_CHARS
from modernbook.estimates import chunk_modernization_cost, count_words, estimate_tokens
from modernbook.exceptions import InputError
from modernbook.models.book import Chunk

logger = logging.getLogger(__name__)

_PARAGRAPH_BREAK = re.compile(r"\n[ \t\r\f\v]*\n")
_SENTENCE_BREAK = re.compile(r"(?<=[.!?])\s+")
_CLAUSE_BREAKS = (re.compile(r";\s"), re.compile(r",\s"))
_WHITESPACE = re.compile(r"\s")


def chunk_text(text: str, max_chars: int = CHUNK_MAX_CHARS) -> list[str]:
    """Split text into chunks of at most ``max_chars`` characters.

    Paragraphs (blank-line separated) are packed together while they fit.
    A paragraph that is too long on its own is split into sentences, and a
    sentence that is still too long is split at the last clause break or
    space inside the window. Only a single word longer than ``max_chars``
    is ever cut mid-word.
    """
    if max_chars < 1:
        raise InputError("max_chars must be at least 1", {"maxChars": max_chars})

    chunks: list[str] = []
    current = ""

    for para in _PARAGRAPH_BREAK.split(text):
        para = para.strip()
        if not para:
            continue

        if len(para) > max_chars:
            if current:
                chunks.append(current)
                current = ""
            chunks.extend(_split_paragraph(para, max_chars))
            continue

        candidate = f"{current}\n\n{para}" if current else para
        if len(candidate) > max_chars:
            chunks.append(current)
            current = para
        else:
            current = candidate

    if current:
        chunks.append(current)
    return chunks


def _split_paragraph(paragraph: str, max_chars: int) -> list[str]:
    """Pack the sentences of an oversized paragraph into chunks."""
    pieces: list[str] = []
    current = ""

    for sentence in _SENTENCE_BREAK.split(paragraph):
        sentence = sentence.strip()
        if not sentence:
            continue

        if len(sentence) > max_chars:
            if current:
                pieces.append(current)
                current = ""
            pieces.extend(_split_long_sentence(sentence, max_chars))
            continue

        candidate = f"{current} {sentence}" if current else sentence
        if len(candidate) > max_chars:
            pieces.append(current)
            current = sentence
        else:
            current = candidate

    if current:
        pieces.append(current)
    return pieces


def _split_long_sentence(sentence: str, max_chars: int) -> list[str]:
    parts: list[str] = []

    while len(sentence) > max_chars:
        window = sentence[:max_chars]
        split_at = -1

        for pattern in _CLAUSE_BREAKS:
            idx = _last_match(pattern, window)
            if idx > 0:
                # keep the punctuation with the left-hand piece
                split_at = idx + 1
                break

        if split_at < 0:
            # newlines and tabs count as word breaks too
            idx = _last_match(_WHITESPACE, sentence[:max_chars + 1])
            split_at = idx if idx > 0 else max_chars

        parts.append(sentence[:split_at].strip())
        sentence = sentence[split_at:].strip()

    if sentence:
        parts.append(sentence)
    return parts


def _last_match(pattern: re.Pattern, text: str) -> int:
    return max((m.start() for m in pattern.finditer(text)), default=-1)


def build_chunks(text: str, max_chars: int = CHUNK_MAX_CHARS) -> list[Chunk]:
    """Chunk text and attach size and cost statistics to each piece."""
    chunks = []
    for i, piece in enumerate(chunk_text(text, max_chars)):
        chars = len(piece)
        chunks.append(Chunk(
            id=i,
            original_text=piece,
            char_count=chars,
            word_count=count_words(piece),
            token_count=estimate_tokens(chars),
            estimated_cost=chunk_modernization_cost(chars),
        ))
    logger.debug("Split %d chars into %d chunks (max %d)", len(text), len(chunks), max_chars)
    return chunks

