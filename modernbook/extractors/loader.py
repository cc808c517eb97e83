"""Load book text from plain text or PDF files."""
import logging
import re
from collections import Counter
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import pdfplumber

from modernbook.exceptions import UnsupportedFileError

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".txt", ".md"}
PDF_SUFFIXES = {".pdf"}


@dataclass
class LoadedText:
    title: str
    author: Optional[str]
    text: str


def title_from_filename(name: str) -> str:
    """Strip the last extension: "moby-dick.txt" -> "moby-dick"."""
    return re.sub(r"\.[^/.]+$", "", Path(name).name)


def load_book_text(path: Path | str) -> LoadedText:
    """Read a book file into text plus whatever metadata it carries."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Book file not found: {path}")

    suffix = path.suffix.lower()
    if suffix in TEXT_SUFFIXES:
        text = path.read_text(encoding="utf-8", errors="replace")
        return LoadedText(title=title_from_filename(path.name), author=None, text=text)
    if suffix in PDF_SUFFIXES:
        return PDFTextExtractor(path).extract()

    raise UnsupportedFileError(
        f"Unsupported file type: {path.suffix or path.name}",
        {"supported": sorted(TEXT_SUFFIXES | PDF_SUFFIXES)},
    )


class PDFTextExtractor:
    """Extract running text from a PDF.

    Handles:
    - Page-by-page text extraction via pdfplumber
    - Recurring header/footer removal
    - Hyphenated word rejoining at line breaks
    """

    def __init__(self, path: Path | str):
        self.path = Path(path)
        if not self.path.exists():
            raise FileNotFoundError(f"PDF file not found: {self.path}")
        if not self.path.suffix.lower() == ".pdf":
            raise UnsupportedFileError(f"File is not a PDF: {self.path}")
        self.title: Optional[str] = None
        self.author: Optional[str] = None

    def extract(self) -> LoadedText:
        raw_pages = self._extract_raw_pages()
        cleaned = self._clean_pages(raw_pages)
        text = "\n\n".join(p.strip() for p in cleaned if p.strip())
        logger.info("Extracted %d pages from %s", len(raw_pages), self.path.name)
        return LoadedText(
            title=self.title or title_from_filename(self.path.name),
            author=self.author or None,
            text=text,
        )

    def _extract_raw_pages(self) -> list[str]:
        """Extract raw text from each page."""
        pages = []
        with pdfplumber.open(self.path) as pdf:
            if pdf.metadata:
                self.title = (pdf.metadata.get("Title") or "").strip() or None
                self.author = (pdf.metadata.get("Author") or "").strip() or None

            for page in pdf.pages:
                pages.append(page.extract_text() or "")
        return pages

    def _clean_pages(self, pages: list[str]) -> list[str]:
        """Clean extracted pages: remove headers/footers, fix hyphenation."""
        recurring = self._detect_recurring_lines(pages)

        cleaned = []
        for page_text in pages:
            filtered = []
            for line in page_text.split("\n"):
                stripped = line.strip()
                if stripped in recurring:
                    continue
                # standalone page numbers
                if re.match(r"^\d{1,4}$", stripped):
                    continue
                filtered.append(line)

            text = "\n".join(filtered)
            # "word-\nrest" -> "wordrest"
            text = re.sub(r"(\w)-\n(\w)", r"\1\2", text)
            cleaned.append(text)

        return cleaned

    def _detect_recurring_lines(self, pages: list[str], threshold: float = 0.3) -> set[str]:
        """Find lines that appear on many pages (headers/footers)."""
        line_counts: Counter = Counter()
        for page_text in pages:
            # Only check first 3 and last 3 lines of each page
            lines = page_text.split("\n")
            seen = set()
            for line in lines[:3] + lines[-3:]:
                stripped = line.strip()
                if stripped and stripped not in seen:
                    seen.add(stripped)
                    line_counts[stripped] += 1

        return {
            line for line, count in line_counts.items()
            if count >= max(2, len(pages) * threshold) and len(line) < 100
        }
