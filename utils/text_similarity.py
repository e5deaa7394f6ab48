"""Text normalization and guess matching."""

import re
from typing import Dict, Iterable
from difflib import SequenceMatcher

import config

# Words that are written differently but mean the same in a title
EQUIVALENT_WORDS: Dict[str, str] = {
    'and': 'and',
    'n': 'and',
    'pt': 'part',
    'part': 'part',
    'feat': 'feat',
    'ft': 'feat',
    'featuring': 'feat',
    'ver': 'version',
    'version': 'version',
}


def normalize_text(text: str) -> str:
    """
    Normalize text for comparison.

    - Convert to lowercase
    - Drop bracketed parts like "(Korean Ver.)"
    - Replace "&" with "and"
    - Remove punctuation (except spaces)
    - Collapse multiple spaces
    - Strip leading/trailing spaces
    """
    if not text:
        return ""

    text = text.lower()
    text = re.sub(r'\([^)]*\)|\[[^\]]*\]', ' ', text)
    text = text.replace('&', ' and ')
    text = re.sub(r'[^\w\s]', '', text)
    text = re.sub(r'\s+', ' ', text)
    text = text.strip()

    words = [EQUIVALENT_WORDS.get(word, word) for word in text.split()]
    return ' '.join(words)


def compact(text: str) -> str:
    """Normalized text without spaces, so 'ddu du' matches 'dudu'."""
    return normalize_text(text).replace(' ', '')


def similarity(guess: str, answer: str) -> float:
    """Character similarity between two strings, 0.0 to 1.0."""
    guess_compact = compact(guess)
    answer_compact = compact(answer)
    if not guess_compact or not answer_compact:
        return 0.0

    return SequenceMatcher(None, guess_compact, answer_compact).ratio()


def is_exact_match(guess: str, answer: str) -> bool:
    guess_compact = compact(guess)
    return bool(guess_compact) and guess_compact == compact(answer)


def is_typo_match(guess: str, answer: str) -> bool:
    """
    Whether a guess is close enough to the answer to count with typos allowed.

    Short answers must match exactly, since a single wrong letter changes
    too much of them.
    """
    if is_exact_match(guess, answer):
        return True

    if len(compact(answer)) < config.TYPO_MIN_ANSWER_LENGTH:
        return False

    return similarity(guess, answer) >= config.TYPO_SIMILARITY_THRESHOLD


def matches_any(guess: str, answers: Iterable[str], typos_allowed: bool = False) -> bool:
    check = is_typo_match if typos_allowed else is_exact_match
    return any(check(guess, answer) for answer in answers)
