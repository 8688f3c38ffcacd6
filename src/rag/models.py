"""
RAG Data Models
===============

Dataclasses shared by the retrieval coordinator, the corpus stores and
the quote extractor.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Tuple


class PoolTag(str, Enum):
    """Provenance of a candidate during quota merging."""
    OWN = "own"          # The author's private pool
    COMMON = "common"    # The shared pool


@dataclass(frozen=True)
class Chunk:
    """A stored segment of a source work with its embedding."""
    author: str
    work: str
    content: str
    chunk_index: int
    pool_id: str
    embedding: Optional[Tuple[float, ...]] = None


@dataclass(frozen=True)
class ScoredChunk:
    """A chunk returned by a similarity query."""
    author: str
    work: str
    content: str
    chunk_index: int
    pool_id: str
    distance: float  # Cosine distance, lower = more similar
    pool: PoolTag = PoolTag.COMMON

    @property
    def word_count(self) -> int:
        return len(self.content.split())

    @property
    def estimated_tokens(self) -> int:
        return math.ceil(self.word_count * 1.3)

    def with_pool(self, pool: PoolTag) -> "ScoredChunk":
        """Return a copy tagged with another pool."""
        return ScoredChunk(
            author=self.author,
            work=self.work,
            content=self.content,
            chunk_index=self.chunk_index,
            pool_id=self.pool_id,
            distance=self.distance,
            pool=pool,
        )

    @classmethod
    def from_row(cls, row: Mapping[str, Any], pool: PoolTag) -> "ScoredChunk":
        """
        Build from a database row.

        Raises:
            ValueError: If a required field is missing or unusable
        """
        missing = [
            key for key in ("author", "work", "content", "chunk_index", "pool_id", "distance")
            if row.get(key) is None
        ]
        if missing:
            raise ValueError(f"Chunk row missing fields: {', '.join(missing)}")

        return cls(
            author=str(row["author"]),
            work=str(row["work"]),
            content=str(row["content"]),
            chunk_index=int(row["chunk_index"]),
            pool_id=str(row["pool_id"]),
            distance=float(row["distance"]),
            pool=pool,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "author": self.author,
            "work": self.work,
            "content": self.content,
            "chunk_index": self.chunk_index,
            "pool_id": self.pool_id,
            "distance": self.distance,
            "pool": self.pool.value,
            "estimated_tokens": self.estimated_tokens,
        }


@dataclass(frozen=True)
class Quote:
    """A verbatim sentence mined from a retrieved passage."""
    text: str
    source_work: str
    chunk_index: int
    score: float


@dataclass
class QuoteVerification:
    """Outcome of checking generated text against its sources."""
    verified: int
    total: int
    fabricated: List[str]

    @property
    def all_verified(self) -> bool:
        return not self.fabricated
