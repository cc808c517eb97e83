from __future__ import annotations

from modernbook.converters.diff import change_stats, simple_diff


def _ops(diff):
    return [(op.type, op.text) for op in diff]


def test_substitutions_are_removed_then_added():
    assert _ops(simple_diff("thou art", "you are")) == [
        ("removed", "thou"),
        ("added", "you"),
        ("unchanged", " "),
        ("removed", "art"),
        ("added", "are"),
    ]


def test_identical_text_is_unchanged():
    diff = simple_diff("It is late.", "It is late.")

    assert all(op.type == "unchanged" for op in diff)
    assert "".join(op.text for op in diff) == "It is late."


def test_extra_tokens_are_added():
    assert _ops(simple_diff("a", "a b")) == [
        ("unchanged", "a"),
        ("added", " "),
        ("added", "b"),
    ]


def test_missing_tokens_are_removed():
    assert _ops(simple_diff("a b", "a")) == [
        ("unchanged", "a"),
        ("removed", " "),
        ("removed", "b"),
    ]


def test_empty_original():
    assert _ops(simple_diff("", "x")) == [("added", "x")]


def test_change_stats():
    stats = change_stats("abcd", "abcdef")

    assert stats.original_length == 4
    assert stats.modernized_length == 6
    assert stats.change_percent == 50
    assert change_stats("abc", "ab").change_percent == -33
    assert change_stats("", "abc").change_percent == 0
