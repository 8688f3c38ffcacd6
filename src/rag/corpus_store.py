"""
RAG Corpus Store
================

Query interface over the pre-embedded corpus.

Two implementations:
- PgVectorCorpusStore: PostgreSQL + pgvector, cosine distance operator `<=>`
- InMemoryCorpusStore: brute-force cosine distance with numpy, for local
  corpora and tests

Both return ScoredChunk lists ordered by ascending distance.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Union

import numpy as np
import psycopg2
from psycopg2.extras import RealDictCursor

from ..core.config import DatabaseConfig
from .models import Chunk, PoolTag, ScoredChunk

logger = logging.getLogger(__name__)


class CorpusUnavailable(Exception):
    """The corpus store failed or timed out."""

    def __init__(self, message: str, pool_id: Optional[str] = None):
        self.message = message
        self.pool_id = pool_id
        super().__init__(self.message)


def like_pattern(fragment: str) -> str:
    """Build an ILIKE substring pattern with LIKE metacharacters escaped."""
    escaped = (
        fragment.replace("\\", "\\\\")
        .replace("%", "\\%")
        .replace("_", "\\_")
    )
    return f"%{escaped}%"


def vector_literal(embedding: Sequence[float]) -> str:
    """Render a vector in pgvector's text input format."""
    return "[" + ",".join(repr(float(x)) for x in embedding) + "]"


class CorpusStore(ABC):
    """Similarity search over stored chunks."""

    @abstractmethod
    def query(
        self,
        pool_id: str,
        embedding: Sequence[float],
        limit: int,
        author_like: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """
        Return up to `limit` chunks of `pool_id` closest to `embedding`.

        Args:
            pool_id: Pool to search
            embedding: Query vector
            limit: Maximum number of results
            author_like: Optional case-insensitive author substring
            timeout: Optional deadline in seconds

        Returns:
            ScoredChunk list ordered by ascending distance
        """
        pass

    @abstractmethod
    def has_author(self, author_like: str, timeout: Optional[float] = None) -> bool:
        """True if at least one chunk's author contains `author_like`."""
        pass


class PgVectorCorpusStore(CorpusStore):
    """
    Corpus stored in PostgreSQL with a pgvector `embedding` column.

    Expected columns: figure_id (pool), author, paper_title, content,
    chunk_index, embedding.
    """

    def __init__(
        self,
        db_url: Optional[str] = None,
        table: Optional[str] = None,
        config: Optional[DatabaseConfig] = None,
    ):
        config = config or DatabaseConfig()
        self.db_url = db_url or config.url
        self.table = table or config.table
        self.connect_timeout = config.connect_timeout

        if not self.db_url:
            raise ValueError("DATABASE_URL required for corpus store")
        if not self.table.replace("_", "").isalnum():
            raise ValueError(f"Invalid table name: {self.table}")

    def _get_connection(self, timeout: Optional[float] = None):
        """Get database connection, bounding statements by `timeout`."""
        options = None
        if timeout is not None:
            options = f"-c statement_timeout={max(1, int(timeout * 1000))}"
        return psycopg2.connect(
            self.db_url,
            connect_timeout=self.connect_timeout,
            options=options,
        )

    def _fetch(self, sql: str, params: tuple, timeout: Optional[float], pool_id: Optional[str] = None):
        conn = None
        try:
            conn = self._get_connection(timeout)
            with conn.cursor(cursor_factory=RealDictCursor) as cur:
                cur.execute(sql, params)
                return cur.fetchall()
        except psycopg2.Error as e:
            logger.error(f"Corpus query failed (pool={pool_id}): {e}")
            raise CorpusUnavailable(f"Corpus query failed: {e}", pool_id=pool_id) from e
        finally:
            if conn is not None:
                conn.close()

    def query(
        self,
        pool_id: str,
        embedding: Sequence[float],
        limit: int,
        author_like: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[ScoredChunk]:
        if limit <= 0:
            return []

        conditions = ["figure_id = %s", "embedding IS NOT NULL"]
        params: List[Any] = [vector_literal(embedding), pool_id]
        if author_like:
            conditions.append("author ILIKE %s ESCAPE '\\'")
            params.append(like_pattern(author_like))
        params.append(limit)

        sql = f"""
            SELECT author,
                   paper_title AS work,
                   content,
                   chunk_index,
                   figure_id AS pool_id,
                   embedding <=> %s::vector AS distance
            FROM {self.table}
            WHERE {' AND '.join(conditions)}
            ORDER BY distance
            LIMIT %s
        """

        rows = self._fetch(sql, tuple(params), timeout, pool_id=pool_id)
        results = rows_to_chunks(rows, PoolTag.COMMON)

        logger.debug(
            f"Corpus query pool={pool_id} author={author_like or '-'} "
            f"limit={limit} -> {len(results)} rows"
        )
        return results

    def has_author(self, author_like: str, timeout: Optional[float] = None) -> bool:
        sql = f"""
            SELECT 1 AS found
            FROM {self.table}
            WHERE author ILIKE %s ESCAPE '\\'
            LIMIT 1
        """
        rows = self._fetch(sql, (like_pattern(author_like),), timeout)
        return len(rows) > 0


def rows_to_chunks(rows: Iterable[Mapping[str, Any]], pool: PoolTag) -> List[ScoredChunk]:
    """Convert rows, skipping malformed records."""
    results = []
    for row in rows:
        try:
            results.append(ScoredChunk.from_row(row, pool))
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed chunk record: {e}")
    return results


class InMemoryCorpusStore(CorpusStore):
    """
    Brute-force cosine search over chunks held in memory.

    Records may be Chunk instances or mappings with the Chunk field names;
    records that cannot be used are skipped with a warning.
    """

    def __init__(self, records: Iterable[Union[Chunk, Mapping[str, Any]]] = ()):
        self._chunks: List[Chunk] = []
        self._dimensions: Optional[int] = None
        for record in records:
            self.add(record)

    def __len__(self) -> int:
        return len(self._chunks)

    def add(self, record: Union[Chunk, Mapping[str, Any]]) -> bool:
        """Add one record. Returns False if it was skipped."""
        try:
            chunk = record if isinstance(record, Chunk) else _chunk_from_mapping(record)
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Skipping malformed chunk record: {e}")
            return False

        if not chunk.embedding:
            logger.warning(f"Skipping chunk without embedding: {chunk.work}#{chunk.chunk_index}")
            return False

        if self._dimensions is None:
            self._dimensions = len(chunk.embedding)
        elif len(chunk.embedding) != self._dimensions:
            logger.warning(
                f"Skipping chunk {chunk.work}#{chunk.chunk_index}: "
                f"{len(chunk.embedding)} dimensions, expected {self._dimensions}"
            )
            return False

        self._chunks.append(chunk)
        return True

    def query(
        self,
        pool_id: str,
        embedding: Sequence[float],
        limit: int,
        author_like: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[ScoredChunk]:
        if limit <= 0:
            return []

        needle = author_like.lower() if author_like else None
        candidates = [
            c for c in self._chunks
            if c.pool_id == pool_id and (needle is None or needle in c.author.lower())
        ]
        if not candidates:
            return []

        query_vec = np.asarray(embedding, dtype=float)
        if query_vec.shape != (self._dimensions,):
            raise CorpusUnavailable(
                f"Query vector has shape {query_vec.shape}, corpus uses {self._dimensions} dimensions",
                pool_id=pool_id,
            )

        matrix = np.asarray([c.embedding for c in candidates], dtype=float)
        norms = np.linalg.norm(matrix, axis=1) * np.linalg.norm(query_vec)
        similarities = np.divide(
            matrix @ query_vec,
            norms,
            out=np.zeros(len(candidates)),
            where=norms > 0,
        )
        distances = 1.0 - similarities
        order = np.argsort(distances, kind="stable")[:limit]

        return [
            ScoredChunk(
                author=candidates[i].author,
                work=candidates[i].work,
                content=candidates[i].content,
                chunk_index=candidates[i].chunk_index,
                pool_id=candidates[i].pool_id,
                distance=float(distances[i]),
            )
            for i in order
        ]

    def has_author(self, author_like: str, timeout: Optional[float] = None) -> bool:
        needle = author_like.lower()
        return any(needle in c.author.lower() for c in self._chunks)


def _chunk_from_mapping(record: Mapping[str, Any]) -> Chunk:
    for key in ("author", "work", "content", "chunk_index", "pool_id", "embedding"):
        if record.get(key) is None:
            raise ValueError(f"missing field '{key}'")
    return Chunk(
        author=str(record["author"]),
        work=str(record["work"]),
        content=str(record["content"]),
        chunk_index=int(record["chunk_index"]),
        pool_id=str(record["pool_id"]),
        embedding=tuple(float(x) for x in record["embedding"]),
    )
