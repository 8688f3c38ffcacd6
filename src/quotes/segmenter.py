"""
Sentence Segmenter
==================

Character scanner that splits passages into sentences.

A terminal mark (. ! ?) closes a sentence only when:
- it is followed by whitespace or the end of the text, optionally after
  one closing quote character
- it is not immediately followed by another period
- for a period, the token before it is not a known abbreviation
- the next non-space character is not a lowercase letter

Decimal numbers ("9.2"), initialisms ("i.e.") and ellipses inside a
sentence therefore do not split it.
"""

from enum import Enum
from typing import Iterable, List, Optional

from .vocabulary import ABBREVIATIONS, CLOSING_QUOTES, TERMINAL_MARKS

_OPENING_PUNCTUATION = "(\"'“‘["


class _State(Enum):
    SCANNING = "scanning"
    AT_MARK = "at_mark"


class SentenceScanner:
    """Finite-state sentence splitter with an auditable abbreviation list."""

    def __init__(self, abbreviations: Optional[Iterable[str]] = None):
        self.abbreviations = frozenset(
            a.lower().rstrip(".") for a in (abbreviations if abbreviations is not None else ABBREVIATIONS)
        )

    def split(self, text: str) -> List[str]:
        """Split text into stripped, non-empty sentences in order."""
        sentences: List[str] = []
        start = 0
        state = _State.SCANNING
        i = 0
        n = len(text)

        while i < n:
            if state is _State.SCANNING:
                if text[i] in TERMINAL_MARKS:
                    state = _State.AT_MARK
                else:
                    i += 1
                continue

            # AT_MARK: decide whether text[i] closes the sentence
            end = self._boundary_end(text, i)
            if end is None:
                i += 1
            else:
                sentence = text[start:end].strip()
                if sentence:
                    sentences.append(sentence)
                start = end
                i = end
            state = _State.SCANNING

        tail = text[start:].strip()
        if tail:
            sentences.append(tail)
        return sentences

    def _boundary_end(self, text: str, i: int) -> Optional[int]:
        """Return the sentence end index if the mark at i is a boundary."""
        n = len(text)
        j = i + 1

        if j < n and text[j] == ".":
            return None

        if j < n and text[j] in CLOSING_QUOTES:
            j += 1

        if j >= n:
            return j

        if not text[j].isspace():
            return None

        if text[i] == "." and self._preceding_token(text, i) in self.abbreviations:
            return None

        k = j
        while k < n and text[k].isspace():
            k += 1
        if k < n and text[k].islower():
            return None

        return j

    @staticmethod
    def _preceding_token(text: str, i: int) -> str:
        k = i
        while k > 0 and not text[k - 1].isspace():
            k -= 1
        return text[k:i].lstrip(_OPENING_PUNCTUATION).lower()


_default_scanner = SentenceScanner()


def split_sentences(text: str) -> List[str]:
    """Split text with the default abbreviation list."""
    return _default_scanner.split(text)
