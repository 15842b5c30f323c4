# src/cmdlang_shell/core/similarity.py
"""
Key Distance Comparison.

Scores every registered command against a mistyped name by the distance
between the keys of a qwerty layout. Slower than a plain character
comparison but predicts better: for the commands 'horse' and 'house' and the
input 'hoese', only 'horse' is close on the keyboard.
"""
import math
import re
from typing import Iterable, Optional, Tuple

# Only consider words with score lower than this limit
SCORE_LIMIT = 50
# Columns per key and rows per key
COLS_PER_KEY = 10
ROWS_PER_KEY = 3
MAX_DIST = math.sqrt(COLS_PER_KEY + ROWS_PER_KEY)

# NOTE: '_' and '-' positions are only valid for a spanish layout
KEYMAP = (
    "q", "w", "e", "r", "t", "y", "u", "i", "o", "p",
    "a", "s", "d", "f", "g", "h", "j", "k", "l", None,
    "z", "x", "c", "v", "b", "n", "m", "_", "-", None,
)
_EDGE_NON_LETTERS = re.compile(r"^[^a-z]+|[^a-z]+$")


def _key_position(key: str) -> Tuple[float, float]:
    # Kept as the historical (index / cols, index % rows) projection; scores depend on it.
    try:
        i = KEYMAP.index(key)
    except ValueError:
        return float(COLS_PER_KEY), float(ROWS_PER_KEY)
    return i / COLS_PER_KEY, float(i % ROWS_PER_KEY)


def key_distance(from_key: str, to_key: str) -> float:
    from_x, from_y = _key_position(from_key)
    to_x, to_y = _key_position(to_key)
    return math.sqrt((to_x - from_x) ** 2 + (to_y - from_y) ** 2)


def sanitize_name(name: str) -> str:
    return _EDGE_NON_LETTERS.sub("", name.lower()).strip()


def score_candidate(name: str, candidate: str) -> float:
    """Lower is more similar. `name` must already be sanitized."""
    if candidate in name:
        return abs(len(name) - len(candidate)) / 2

    # Penalize word length diff
    score = abs(len(name) - len(candidate)) / 2 + MAX_DIST
    for in_char, cand_char in zip(name, candidate):
        dist = key_distance(in_char, cand_char)
        if dist == 0:
            score -= 1
        else:
            score += dist
    # Using all letters?
    if set(name) <= set(candidate):
        score -= MAX_DIST
    return score


def find_similar_command(name: str, command_names: Iterable[str]) -> Optional[str]:
    """
    Returns the registered command closest to `name`, or None.

    Names shorter than three characters are never matched. Ties keep the
    first candidate in lexicographic order.
    """
    if len(name) < 3:
        return None
    sanitized = sanitize_name(name)
    best_score: Optional[float] = None
    best_name: Optional[str] = None
    for candidate in sorted(command_names):
        score = score_candidate(sanitized, candidate)
        if best_score is None or score < best_score:
            best_score, best_name = score, candidate
            if best_score == 0.0:
                break
    if best_score is not None and best_score < SCORE_LIMIT:
        return best_name
    return None
