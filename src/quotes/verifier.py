"""
Quote Verifier
==============

Checks that quotations in generated text actually occur in the source
passages the text was generated from.
"""

import re
from typing import Iterable, Union

from ..rag.models import QuoteVerification

MIN_VERIFIABLE_LENGTH = 10
MIN_WINDOW_WORDS = 3
WINDOW_RATIO = 0.7

_QUOTED = re.compile(r"[\"“]([^\"“”]+)[\"”]")

_NORMALIZATIONS = (
    (re.compile(r"\s+"), " "),
    (re.compile(r"[—–−]"), "-"),
    (re.compile(r"\s*-\s*"), " - "),
    (re.compile(r"[“”]"), '"'),
    (re.compile(r"[‘’]"), "'"),
    (re.compile(r"…"), "..."),
    (re.compile(r"[•·]"), "*"),
    (re.compile(r"\.{2,}"), ""),
    (re.compile(r"\s+"), " "),
)


def normalize_for_matching(text: str) -> str:
    for pattern, replacement in _NORMALIZATIONS:
        text = pattern.sub(replacement, text)
    return text.strip().lower()


def verify_quotes(text: str, sources: Union[str, Iterable[str]]) -> QuoteVerification:
    """
    Verify every double-quoted span of `text` against `sources`.

    A quote is verified if it occurs verbatim after normalization, or,
    for quotes of three or more words, if a run of 70% of its words
    occurs. Quotes under 10 characters are counted but not judged.

    Args:
        text: Generated text containing quotations
        sources: Source passage text, or several passages

    Returns:
        QuoteVerification with fabricated quotes truncated to 100 characters
    """
    if not isinstance(sources, str):
        sources = "\n".join(sources)
    haystack = normalize_for_matching(sources)

    quotes = _QUOTED.findall(text)
    verified = 0
    fabricated = []

    for quote in quotes:
        if len(quote.strip()) < MIN_VERIFIABLE_LENGTH:
            continue

        needle = normalize_for_matching(quote)
        if needle in haystack:
            verified += 1
            continue

        words = needle.split(" ")
        if len(words) >= MIN_WINDOW_WORDS:
            window = max(MIN_WINDOW_WORDS, int(len(words) * WINDOW_RATIO))
            if any(
                " ".join(words[i:i + window]) in haystack
                for i in range(len(words) - window + 1)
            ):
                verified += 1
                continue

        fabricated.append(quote[:100])

    return QuoteVerification(verified=verified, total=len(quotes), fabricated=fabricated)
