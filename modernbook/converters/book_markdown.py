"""Convert an Edition to Markdown."""
from pathlib import Path
from typing import Optional, Sequence

from modernbook.models.book import Chapter
from modernbook.models.social import Edition


class EditionMarkdownConverter:
    """Produce a single Markdown file for a published edition.

    - YAML frontmatter
    - Header and summary
    - Table of Contents (when chapters are known)
    - The modernized text
    """

    def convert(self, edition: Edition, chapters: Optional[Sequence[Chapter]] = None) -> str:
        """Convert an Edition to a full Markdown string."""
        sections = [
            self._frontmatter(edition),
            self._header(edition),
        ]
        if edition.summary:
            sections.append("## Summary\n\n" + edition.summary.strip())
        if chapters:
            sections.append(self._toc(chapters))
        sections.append("---")
        sections.append((edition.modernized_text or "").strip())

        return "\n\n".join(s for s in sections if s).rstrip() + "\n"

    def convert_to_file(
        self,
        edition: Edition,
        output_path: Path | str,
        chapters: Optional[Sequence[Chapter]] = None,
    ) -> Path:
        """Write edition markdown to file."""
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.convert(edition, chapters), encoding="utf-8")
        return path

    def _frontmatter(self, edition: Edition) -> str:
        lines = ["---"]
        lines.append(f"title: {edition.title}")
        lines.append(f"author: {edition.author}")
        if edition.tags:
            lines.append(f"tags: [{', '.join(edition.tags)}]")
        lines.append(f"visibility: {edition.visibility}")
        lines.append(f"listens: {edition.listens}")
        lines.append(f"likes: {edition.likes}")
        lines.append(f"created: {edition.created_at.date().isoformat()}")
        lines.append("---")
        return "\n".join(lines)

    def _header(self, edition: Edition) -> str:
        lines = [f"# {edition.title}"]
        lines.append(f"\n**Author:** {edition.author}")
        lines.append(f"**Edition by:** @{edition.user_handle}")
        return "\n".join(lines)

    def _toc(self, chapters: Sequence[Chapter]) -> str:
        lines = ["## Table of Contents", ""]
        for ch in chapters:
            lines.append(f"- {ch.title}")
        return "\n".join(lines)
