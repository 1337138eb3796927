"""
Filler-word detection on streamed transcript fragments.
"""
from __future__ import annotations
from typing import Iterable, List

DEFAULT_FILLERS = ("umm", "ahh", "like", "oh", "basically", "actually")


def match_fillers(fragment: str, vocabulary: Iterable[str] = DEFAULT_FILLERS) -> List[str]:
    """
    Return the vocabulary words contained in a transcript fragment.

    Matching is a case-insensitive substring test, so each word is reported at
    most once per fragment ("like" also matches "likely").
    """
    text = (fragment or "").lower()
    if not text:
        return []
    return [w for w in vocabulary if w and w.lower() in text]
