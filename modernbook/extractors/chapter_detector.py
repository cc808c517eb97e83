"""Chapter heading detection over chunked book text using regex patterns."""
import re
from dataclasses import dataclass
from typing import Optional, Sequence

from modernbook.config import CHAPTER_FALLBACK_STRIDE
from modernbook.models.book import Chapter, Chunk


# Number words for matching "Chapter One", "Part TWO", etc.
NUMBER_WORDS = {
    "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
}

ROMAN_VALUES = {"i": 1, "v": 5, "x": 10, "l": 50, "c": 100, "d": 500, "m": 1000}

_NUM = r"(?:[IVXLCDM]+|ONE|TWO|THREE|FOUR|FIVE|SIX|SEVEN|EIGHT|NINE|TEN|[0-9]+)\b"
_ROMAN_OR_DIGITS = r"(?:[IVXLCDM]+|[0-9]+)\b"

HEADING_LINES = 5
MAX_TITLE_LINE = 80
MAX_TITLE_CHARS = 50


@dataclass
class HeadingPattern:
    """A heading regex; ``whole_line`` titles use the full matched line."""
    regex: re.Pattern
    whole_line: bool = False


def _roman_to_int(text: str) -> Optional[int]:
    total = 0
    prev = 0
    for ch in reversed(text.lower()):
        value = ROMAN_VALUES.get(ch)
        if value is None:
            return None
        if value < prev:
            total -= value
        else:
            total += value
            prev = value
    return total or None


def _parse_number(text: str) -> Optional[int]:
    """Parse a number from text (digit, word or roman numeral)."""
    text = text.strip().rstrip(".:").lower()
    if text.isdigit():
        return int(text)
    if text in NUMBER_WORDS:
        return NUMBER_WORDS[text]
    return _roman_to_int(text)


class ChapterDetector:
    """Detect chapter headings at the start of chunks.

    Recognizes headings used by classical and modern texts:
    - "BOOK I", "CHAPTER ONE", "PART 3", "SECTION IV"
    - a bare roman numeral line such as "XII."
    - numbered headings such as "3. The Storm"
    - bracketed "[CHAPTER 2]" and "VOLUME II" / "VOL. 2"

    When no heading is found anywhere, sections are synthesized every
    ``fallback_stride`` chunks, titled from the chunk's first line.
    """

    DEFAULT_PATTERNS = [
        HeadingPattern(re.compile(rf"^BOOK\s+{_NUM}", re.I | re.M)),
        HeadingPattern(re.compile(rf"^CHAPTER\s+{_NUM}", re.I | re.M)),
        HeadingPattern(re.compile(rf"^PART\s+{_NUM}", re.I | re.M)),
        HeadingPattern(re.compile(rf"^SECTION\s+{_ROMAN_OR_DIGITS}", re.I | re.M)),
        HeadingPattern(re.compile(r"^[IVXLCDM]+\.[ \t]*$", re.M)),
        HeadingPattern(re.compile(r"^[0-9]+\.\s+[A-Z].*$", re.M), whole_line=True),
        HeadingPattern(re.compile(rf"^\[(?:BOOK|CHAPTER|PART)\s+{_ROMAN_OR_DIGITS}\]", re.I | re.M)),
        HeadingPattern(re.compile(r"^BOOK\s+[IVXLCDM]+:", re.I | re.M)),
        HeadingPattern(re.compile(rf"^(?:VOLUME|VOL\.?)\s+{_ROMAN_OR_DIGITS}", re.I | re.M)),
    ]

    SUBSECTION_PATTERN = re.compile(r"^([IVXLCDM]+)\.\s+", re.M)

    def __init__(
        self,
        patterns: list[HeadingPattern] | None = None,
        fallback_stride: int = CHAPTER_FALLBACK_STRIDE,
    ):
        self.patterns = patterns or self.DEFAULT_PATTERNS
        self.fallback_stride = fallback_stride

    def detect(self, chunks: Sequence[Chunk]) -> list[Chapter]:
        """Detect chapters from chunk text.

        Args:
            chunks: Chunks in book order.

        Returns:
            One chapter per chunk that opens with a heading, or evenly
            spaced sections when the book has no recognizable headings.
        """
        chapters: list[Chapter] = []

        for index, chunk in enumerate(chunks):
            chapter = self._match_heading(chunk, index)
            if chapter:
                chapters.append(chapter)

        if not chapters:
            chapters = self._fallback_sections(chunks)

        return chapters

    def _match_heading(self, chunk: Chunk, index: int) -> Optional[Chapter]:
        """Try the heading patterns against the first lines of a chunk."""
        first_lines = "\n".join(chunk.original_text.split("\n")[:HEADING_LINES])

        for pattern in self.patterns:
            m = pattern.regex.search(first_lines)
            if not m:
                continue
            title = re.sub(r"[\[\]]", "", m.group(0).strip())
            title = re.sub(r"\s+", " ", title)
            if pattern.whole_line:
                title = _truncate(title)
            if re.fullmatch(r"(?:[IVXLCDM]+|[0-9]+)\.", title):
                title = f"Section {title}"
            return Chapter(
                id=chunk.id,
                title=title,
                chunk_index=index,
                number=self._heading_number(title),
            )

        m = self.SUBSECTION_PATTERN.search(first_lines)
        if m and len(m.group(1)) <= 4:
            numeral = m.group(1)
            return Chapter(
                id=chunk.id,
                title=f"Section {numeral}",
                chunk_index=index,
                number=_roman_to_int(numeral),
            )
        return None

    @staticmethod
    def _heading_number(title: str) -> Optional[int]:
        for token in title.replace(":", " ").split():
            if token.lower() in ("book", "chapter", "part", "section", "volume", "vol", "vol."):
                continue
            return _parse_number(token)
        return None

    def _fallback_sections(self, chunks: Sequence[Chunk]) -> list[Chapter]:
        sections: list[Chapter] = []
        for i in range(0, len(chunks), self.fallback_stride):
            chunk = chunks[i]
            lines = [line.strip() for line in chunk.original_text.split("\n")]
            first_line = next((line for line in lines if line), "")

            title = f"Section {i // self.fallback_stride + 1}"
            if 0 < len(first_line) < MAX_TITLE_LINE:
                cleaned = re.sub(r"^[*_\"']+|[*_\"']+$", "", first_line).strip()
                if cleaned:
                    title = _truncate(cleaned)

            sections.append(Chapter(id=chunk.id, title=title, chunk_index=i))
        return sections


def _truncate(title: str) -> str:
    if len(title) > MAX_TITLE_CHARS:
        return title[:MAX_TITLE_CHARS - 3] + "..."
    return title
