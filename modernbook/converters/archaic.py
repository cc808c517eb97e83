"""Offline word substitutions for archaic English."""
import re

ARCHAIC_REPLACEMENTS = {
    "whilst": "while",
    "thou": "you",
    "thee": "you",
    "hath": "has",
    "doth": "does",
}

_ARCHAIC_PATTERN = re.compile(
    r"\b(" + "|".join(ARCHAIC_REPLACEMENTS) + r")\b",
    re.IGNORECASE,
)


def _replace(match: re.Match) -> str:
    word = match.group(0)
    replacement = ARCHAIC_REPLACEMENTS[word.lower()]
    if word[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def replace_archaic_words(text: str) -> str:
    """Swap a handful of archaic words for modern ones, keeping capitals.

    Used when no LLM is configured; it does not touch sentence structure.
    """
    return _ARCHAIC_PATTERN.sub(_replace, text)
