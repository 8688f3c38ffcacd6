"""
Philosearch Quotes Module
=========================

Extraction of verbatim, citation-clean quotes from retrieved passages,
and verification of quotations in generated text.
"""

from .extractor import extract_quotes
from .orthography import correct_text
from .segmenter import SentenceScanner, split_sentences
from .verifier import verify_quotes

__all__ = [
    "extract_quotes",
    "correct_text",
    "SentenceScanner",
    "split_sentences",
    "verify_quotes",
]
