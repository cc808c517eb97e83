from __future__ import annotations

from modernbook.converters.archaic import replace_archaic_words


def test_replaces_archaic_words():
    text = "thou hast seen thee whilst it doth rain, and he hath gone"

    assert replace_archaic_words(text) == "you hast seen you while it does rain, and he has gone"


def test_keeps_leading_capital():
    assert replace_archaic_words("Thou art. Whilst. Hath.") == "You art. While. Has."


def test_leaves_longer_words_alone():
    text = "A thousand theses doth not make"

    assert replace_archaic_words(text) == "A thousand theses does not make"
