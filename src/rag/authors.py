"""
Author Resolver
===============

Normalizes free-form author names to the canonical names stored in the
corpus, and detects which known author a piece of text is asking about.

Detection is verified against the corpus: a name that appears in the
text but has no chunks is never returned.
"""

import logging
import re
import unicodedata
from typing import Mapping, Optional, Sequence

from .author_aliases import AUTHOR_ALIASES, CANDIDATE_AUTHORS
from .corpus_store import CorpusStore, CorpusUnavailable

logger = logging.getLogger(__name__)

_TOKEN_SPLIT = re.compile(r"[\s\-]+")


def fold(text: str) -> str:
    """Lowercase, strip diacritics and collapse whitespace."""
    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return " ".join(stripped.lower().split())


def normalize_author_name(name: str, aliases: Mapping[str, str] = AUTHOR_ALIASES) -> str:
    """
    Map a free-form author name to its canonical form.

    Lookup is case and accent insensitive. On a miss the last token
    longer than two characters is taken as the surname and capitalized.
    Applying the function to its own output returns the same value.

    Examples:
        "john-michael kuczynski" -> "Kuczynski"
        "Niccolò Machiavelli"    -> "Machiavelli"
        "albert camus"           -> "Camus"
    """
    if not name or not name.strip():
        return ""

    canonical = aliases.get(fold(name))
    if canonical:
        return canonical

    tokens = [t for t in _TOKEN_SPLIT.split(name.strip()) if len(t) > 2]
    if not tokens:
        return name.strip()

    guess = tokens[-1]
    guess = guess[0].upper() + guess[1:]

    # A guessed surname may itself be a known variant ("... rambam")
    return aliases.get(fold(guess), guess)


class AuthorResolver:
    """Resolves author names against the corpus."""

    def __init__(
        self,
        store: CorpusStore,
        aliases: Mapping[str, str] = AUTHOR_ALIASES,
        candidates: Sequence[str] = CANDIDATE_AUTHORS,
    ):
        self.store = store
        self.aliases = aliases
        self.candidates = tuple(candidates)

    def normalize(self, name: str) -> str:
        return normalize_author_name(name, self.aliases)

    def detect_from_text(self, text: str, timeout: Optional[float] = None) -> Optional[str]:
        """
        Find the first candidate author mentioned in `text` that has
        content in the corpus.

        Args:
            text: Free text, e.g. a user query
            timeout: Deadline in seconds for each corpus check

        Returns:
            Canonical author name, or None
        """
        if not text:
            return None

        haystack = fold(text)
        for candidate in self.candidates:
            if fold(candidate) not in haystack:
                continue

            try:
                verified = self.store.has_author(candidate, timeout=timeout)
            except CorpusUnavailable as e:
                logger.warning(f"Could not verify author '{candidate}': {e}")
                return None

            if verified:
                logger.debug(f"Detected author '{candidate}' in query")
                return candidate

            logger.warning(f"Author '{candidate}' mentioned but not present in corpus")

        return None


def detect_author_from_query(text: str, store: CorpusStore, timeout: Optional[float] = None) -> Optional[str]:
    """Detect a verified author mention using the default tables."""
    return AuthorResolver(store).detect_from_text(text, timeout=timeout)
