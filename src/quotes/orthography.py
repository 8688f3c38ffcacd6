"""
Orthographic Correction
=======================

Repairs a fixed set of OCR artifacts and spacing problems in scanned
texts. Only whole words listed in the vocabulary tables are replaced;
no other word is ever changed.
"""

import re
from typing import Mapping

from .vocabulary import CONTRACTIONS, OCR_SUBSTITUTIONS

_WORD = re.compile(r"\b[A-Za-z]+\b")
_SPACE_BEFORE_PUNCT = re.compile(r"\s+([,;:!?.])(?=\s|$)")
_MISSING_SPACE_AFTER = re.compile(r"([,;])(?=[A-Za-z])")
_WHITESPACE = re.compile(r"\s+")


def _match_case(original: str, replacement: str) -> str:
    if len(original) > 1 and original.isupper():
        return replacement.upper()
    if original[0].isupper():
        return replacement[0].upper() + replacement[1:]
    return replacement


def _replace_words(text: str, table: Mapping[str, str]) -> str:
    def substitute(match: re.Match) -> str:
        word = match.group(0)
        replacement = table.get(word.lower())
        return _match_case(word, replacement) if replacement else word

    return _WORD.sub(substitute, text)


def repair_ocr(text: str) -> str:
    """Fix known OCR misreads ("tbe" -> "the", "vvith" -> "with")."""
    return _replace_words(text, OCR_SUBSTITUTIONS)


def restore_apostrophes(text: str) -> str:
    """Restore apostrophes in contractions ("dont" -> "don't")."""
    return _replace_words(text, CONTRACTIONS)


def normalize_spacing(text: str) -> str:
    """Collapse whitespace and fix spacing around punctuation."""
    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _MISSING_SPACE_AFTER.sub(r"\1 ", text)
    return _WHITESPACE.sub(" ", text).strip()


def correct_text(text: str) -> str:
    """Apply every correction in a fixed order."""
    return normalize_spacing(restore_apostrophes(repair_ocr(text)))
