"""
Text normalisation and edit distance used by relevance scoring.

Both functions work on Python str, so lengths, indexing and edit operations
are counted in Unicode code points.
"""
import re
from typing import List, Optional

# Anything that is not a letter, digit or whitespace. \w also admits "_",
# which is treated as punctuation here.
_NON_ALNUM_RE = re.compile(r"[^\w\s]|_")

MIN_TOKEN_LENGTH = 3


# ---------------------------------------------------------------------------
# Tokenizer
# ---------------------------------------------------------------------------
def tokenize(text: Optional[str]) -> List[str]:
    """
    Split text into matchable lexemes.

    Lowercases, strips punctuation, splits on whitespace and drops tokens
    shorter than three characters.

    >>> tokenize("Hello, World!!")
    ['hello', 'world']
    """
    if not text:
        return []
    cleaned = _NON_ALNUM_RE.sub("", text.lower())
    return [token for token in cleaned.split() if len(token) >= MIN_TOKEN_LENGTH]


# ---------------------------------------------------------------------------
# Levenshtein distance
# ---------------------------------------------------------------------------
def levenshtein_distance(a: str, b: str) -> int:
    """
    Minimum number of single-character insertions, deletions or
    substitutions that turn ``a`` into ``b``.

    Fills the (len(b)+1) x (len(a)+1) DP table one row at a time, keeping
    only the previous row.
    """
    if not a:
        return len(b)
    if not b:
        return len(a)

    previous = list(range(len(a) + 1))
    for i, b_char in enumerate(b, start=1):
        current = [i] + [0] * len(a)
        for j, a_char in enumerate(a, start=1):
            if a_char == b_char:
                current[j] = previous[j - 1]
            else:
                current[j] = 1 + min(
                    previous[j - 1],  # substitution
                    current[j - 1],   # insertion
                    previous[j],      # deletion
                )
        previous = current

    return previous[len(a)]
