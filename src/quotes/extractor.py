"""
Quote Extractor
===============

Mines retrieved passages for verbatim, citation-clean sentences.

Pipeline per passage:
1. Split into sentences (abbreviation-aware scanner)
2. Apply the fixed orthographic corrections
3. Keep complete sentences only
4. Keep sentences within the length and word-count bounds
5. Drop citation fragments
6. Drop markup residue
7. Score against the query

Then across passages: deduplicate by corrected text, rank by score,
truncate. Every returned quote is a substring of its corrected source
passage; a candidate that is not is discarded.
"""

import logging
from typing import List, Optional, Sequence, Tuple

from ..rag.models import Quote
from .filters import (
    MAX_QUOTE_LENGTH,
    MIN_QUOTE_WORDS,
    has_artifacts,
    has_valid_size,
    is_citation_fragment,
    is_complete,
)
from .orthography import correct_text
from .scoring import query_keywords, score_sentence
from .segmenter import SentenceScanner

logger = logging.getLogger(__name__)

DEFAULT_MIN_LENGTH = 50
DEFAULT_MAX_QUOTES = 10


def extract_quotes(
    passages: Sequence,
    query: str,
    min_length: int = DEFAULT_MIN_LENGTH,
    max_quotes: int = DEFAULT_MAX_QUOTES,
    max_length: int = MAX_QUOTE_LENGTH,
    min_words: int = MIN_QUOTE_WORDS,
    scanner: Optional[SentenceScanner] = None,
) -> List[Quote]:
    """
    Extract ranked quotes from passages.

    Args:
        passages: Objects with `content`, `work` and `chunk_index`
            (ScoredChunk or Chunk)
        query: The query the passages were retrieved for
        min_length: Minimum quote length in characters
        max_quotes: Maximum number of quotes returned
        max_length: Maximum quote length in characters
        min_words: Minimum quote word count
        scanner: Sentence scanner (default abbreviation list if omitted)

    Returns:
        Quotes sorted by descending score; ties keep passage order
    """
    if max_quotes <= 0:
        return []

    scanner = scanner or SentenceScanner()
    keywords = query_keywords(query or "")

    candidates: List[Tuple[float, int, Quote]] = []
    seen = set()
    order = 0

    for passage in passages:
        content = getattr(passage, "content", None)
        if not content:
            continue

        corrected_source = correct_text(content)

        for raw in scanner.split(content):
            sentence = correct_text(raw)

            if not is_complete(sentence):
                continue
            if not has_valid_size(sentence, min_length, max_length, min_words):
                continue
            if is_citation_fragment(sentence):
                continue
            if has_artifacts(sentence):
                continue
            if sentence not in corrected_source:
                logger.warning(f"Discarding sentence not found verbatim in its passage: {sentence[:60]!r}")
                continue
            if sentence in seen:
                continue

            seen.add(sentence)
            quote = Quote(
                text=sentence,
                source_work=getattr(passage, "work", ""),
                chunk_index=getattr(passage, "chunk_index", -1),
                score=score_sentence(sentence, keywords),
            )
            candidates.append((quote.score, order, quote))
            order += 1

    candidates.sort(key=lambda c: (-c[0], c[1]))
    quotes = [quote for _, _, quote in candidates[:max_quotes]]

    logger.debug(f"Extracted {len(quotes)} quotes from {len(passages)} passages")
    return quotes
