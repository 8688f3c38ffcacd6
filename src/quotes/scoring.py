"""
Quote Scoring
=============

Relevance score for a candidate sentence. Higher is better.

    +10  per query keyword (longer than 3 characters) found in the sentence
     +3  per philosophical vocabulary term found
     -5  if shorter than 100 characters
    +10  if 100-300 characters long
     -5  if more than 2 numeric tokens (citation residue)
"""

import re
from typing import List, Sequence

from .vocabulary import PHILOSOPHICAL_KEYWORDS

_QUERY_WORD = re.compile(r"\w+")
_NUMERIC_TOKEN = re.compile(r"\b\d+\b")


def query_keywords(query: str) -> List[str]:
    """Distinct lowercase query words longer than 3 characters, in order."""
    keywords: List[str] = []
    for word in _QUERY_WORD.findall(query.lower()):
        if len(word) > 3 and word not in keywords:
            keywords.append(word)
    return keywords


def score_sentence(
    sentence: str,
    keywords: Sequence[str],
    vocabulary: Sequence[str] = PHILOSOPHICAL_KEYWORDS,
) -> float:
    lowered = sentence.lower()
    score = 0.0

    score += 10 * sum(1 for keyword in keywords if keyword in lowered)
    score += 3 * sum(1 for term in vocabulary if term in lowered)

    length = len(sentence)
    if length < 100:
        score -= 5
    elif length <= 300:
        score += 10

    if len(_NUMERIC_TOKEN.findall(sentence)) > 2:
        score -= 5

    return score
