"""Shared helpers for word normalization."""

from __future__ import annotations

import re
import unicodedata

# Letters that do not decompose under NFKD.
SPECIAL_FOLDS = {
    "ß": "SS",
    "Æ": "AE",
    "æ": "AE",
    "Œ": "OE",
    "œ": "OE",
    "Ø": "O",
    "ø": "O",
    "Ł": "L",
    "ł": "L",
}

WORD_RE = re.compile(r"[^A-Za-z]")


def clean_word(text: str) -> str:
    """Return a normalized uppercase ASCII representation of ``text``."""

    if not text:
        return ""
    transformed = []
    for char in text:
        if char in SPECIAL_FOLDS:
            transformed.append(SPECIAL_FOLDS[char])
        elif char.isalpha():
            transformed.append(unicodedata.normalize("NFKD", char))
    ascii_word = WORD_RE.sub("", "".join(transformed))
    return ascii_word.upper()


__all__ = ["clean_word", "SPECIAL_FOLDS"]
