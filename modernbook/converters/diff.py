"""Word-level diff between original and modernized text."""
import re
from typing import Literal

from pydantic import BaseModel

from modernbook.estimates import round_half_up

DiffType = Literal["added", "removed", "unchanged"]

_WHITESPACE_SPLIT = re.compile(r"(\s+)")


class DiffOp(BaseModel):
    type: DiffType
    text: str


class ChangeStats(BaseModel):
    original_length: int
    modernized_length: int
    change_percent: int


def simple_diff(original: str, modernized: str) -> list[DiffOp]:
    """Positional token comparison, whitespace runs included.

    Tokens are compared index by index rather than aligned, which is enough
    to highlight substitutions when the rewrite keeps sentence shape.
    """
    original_words = _WHITESPACE_SPLIT.split(original)
    modernized_words = _WHITESPACE_SPLIT.split(modernized)
    diff: list[DiffOp] = []

    for i in range(max(len(original_words), len(modernized_words))):
        orig = original_words[i] if i < len(original_words) else None
        mod = modernized_words[i] if i < len(modernized_words) else None

        if orig == mod:
            diff.append(DiffOp(type="unchanged", text=orig))
        elif orig is None:
            diff.append(DiffOp(type="added", text=mod))
        elif not mod:
            diff.append(DiffOp(type="removed", text=orig))
        elif not orig:
            diff.append(DiffOp(type="added", text=mod))
        else:
            diff.append(DiffOp(type="removed", text=orig))
            diff.append(DiffOp(type="added", text=mod))

    return diff


def change_stats(original: str, modernized: str) -> ChangeStats:
    if not original:
        percent = 0
    else:
        percent = round_half_up((len(modernized) - len(original)) / len(original) * 100)
    return ChangeStats(
        original_length=len(original),
        modernized_length=len(modernized),
        change_percent=percent,
    )
