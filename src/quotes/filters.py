"""
Quote Filters
=============

Predicates that reject sentences unsuitable for attribution:
incomplete sentences, sentences of the wrong size, citation fragments
and markup residue.
"""

import re

from .vocabulary import (
    ABBREVIATIONS,
    ARTIFACT_CHARACTERS,
    CLOSING_QUOTES,
    MARKUP_RESIDUE,
    TERMINAL_MARKS,
)

MAX_QUOTE_LENGTH = 500
MIN_QUOTE_WORDS = 8
MAX_ARTIFACT_CHARACTERS = 5

CITATION_PATTERNS = (
    # Section and chapter headers: "Chapter 9", "Section IV", "§ 12"
    re.compile(r"^(chapter|section|part|book|volume|vol\.|ch\.|sec\.|§)\s*[\divxlc]+\b", re.IGNORECASE),
    # Numbered headings: "9.2 The problem of induction"
    re.compile(r"^\d+(\.\d+)+\s"),
    # Sentences opening with a citation marker
    re.compile(
        r"^(see|cf\.|e\.g\.|i\.e\.|ibid\.?|op\.\s*cit\.?|loc\.\s*cit\.?|viz\.)(\s|,|$)",
        re.IGNORECASE,
    ),
    # Citation markers anywhere
    re.compile(r"\b(ibid|op\.\s*cit|loc\.\s*cit)\b", re.IGNORECASE),
    re.compile(r"\(\s*(see|cf\.)\s", re.IGNORECASE),
    re.compile(
        r"\bsee\s+(also\s+)?(chapter|section|page|note|part|fn\.?|p\.|pp\.|vol\.)\s*[\divx]",
        re.IGNORECASE,
    ),
    # Inline year citations: "(1921)", "(Smith, 1921)", "(Smith 1921, p. 4)"
    re.compile(r"\([^()]*\b(1\d|20)\d{2}[a-z]?\b[^()]*\)"),
    # Dash-prefixed attribution lines: "-- Kant", "— Critique"
    re.compile(r"^\s*(-{1,2}|[—–])\s*\S"),
    # Trailing page references: "... p. 12.", "... pages 4-"
    re.compile(r"\b(p|pp|page|pages)\.?\s*\d+(\s*[-–]\s*\d*)?[.!?]?[\"'”’]?$", re.IGNORECASE),
)


def is_complete(sentence: str) -> bool:
    """
    True if the sentence ends in . ! or ? (optionally followed by one
    closing quote), without a double period or an abbreviation ending.
    """
    s = sentence.rstrip()
    if s and s[-1] in CLOSING_QUOTES:
        s = s[:-1]
    if not s or s[-1] not in TERMINAL_MARKS:
        return False
    if s.endswith(".."):
        return False

    if s.endswith("."):
        last = s.split()[-1][:-1].lstrip("(\"'“‘[").lower()
        if last in ABBREVIATIONS:
            return False
        if len(last) == 1 and last.isalpha():
            return False

    return True


def has_valid_size(
    sentence: str,
    min_length: int,
    max_length: int = MAX_QUOTE_LENGTH,
    min_words: int = MIN_QUOTE_WORDS,
) -> bool:
    length = len(sentence)
    if length < min_length or length > max_length:
        return False
    return len(sentence.split()) >= min_words


def is_citation_fragment(sentence: str) -> bool:
    return any(pattern.search(sentence) for pattern in CITATION_PATTERNS)


def has_artifacts(sentence: str) -> bool:
    """True if the sentence carries markup residue."""
    lowered = sentence.lower()
    if any(residue in lowered for residue in MARKUP_RESIDUE):
        return True
    return sum(1 for ch in sentence if ch in ARTIFACT_CHARACTERS) > MAX_ARTIFACT_CHARACTERS
