"""Prompt generation for modernization calls."""
from pathlib import Path
from typing import Optional

from modernbook.config import DEFAULT_STYLE, TEMPLATES_DIR


class PromptGenerator:
    """Build the system and user messages sent to the LLM."""

    def __init__(self, templates_dir: Path | str | None = None):
        self.templates_dir = Path(templates_dir) if templates_dir else TEMPLATES_DIR

    def _load(self, name: str) -> str:
        path = self.templates_dir / name
        if not path.exists():
            raise FileNotFoundError(f"Template not found: {path}")
        return path.read_text(encoding="utf-8").strip()

    def system_prompt(self, instructions: Optional[str] = None) -> str:
        """Generate the system prompt, with project instructions appended."""
        prompt = self._load("modernize_system.md")
        if instructions and instructions.strip():
            prompt += f"\n\nAdditional instructions:\n{instructions.strip()}"
        return prompt

    def user_prompt(self, text: str, style: str = DEFAULT_STYLE) -> str:
        template = self._load("modernize_user.md")
        return template.format(style=style, text=text)
