"""Word-overlap title similarity."""

from typing import Set

from .config import MIN_TOKEN_LENGTH


def title_tokens(text) -> Set[str]:
    """Lower-cased whitespace tokens, dropping short low-signal words."""
    if not text or not isinstance(text, str):
        return set()
    return {w for w in text.lower().split() if len(w) >= MIN_TOKEN_LENGTH}


def word_overlap_similarity(a, b) -> float:
    """
    Percentage (0-100) of shared words between two titles.

    Shared words are divided by the larger of the two word sets, so the
    score is symmetric and a short title cannot fully match a long one.
    """
    words_a = title_tokens(a)
    words_b = title_tokens(b)
    if not words_a and not words_b:
        return 0.0
    common = words_a & words_b
    return 100.0 * len(common) / max(len(words_a), len(words_b))
