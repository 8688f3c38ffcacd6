"""
RAG Retriever
=============

Selects passages for a query from the pre-embedded corpus.

Two modes:
1. Strict author: shared pool restricted to one author, never backfilled
2. Dual pool: the author's own pool plus the shared pool, each guaranteed
   a minimum share, remaining slots filled by the globally best matches

The embedding call and the corpus queries run under one deadline. Any
collaborator failure or timeout surfaces as RetrievalUnavailable.
"""

import logging
import time
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeout
from typing import List, Optional, Sequence

from ..core.config import RetrievalConfig
from .authors import normalize_author_name
from .corpus_store import CorpusStore, CorpusUnavailable
from .embedder import EmbeddingFailure, EmbeddingProvider
from .models import PoolTag, ScoredChunk
from .quotas import compute_pool_quotas, select_with_quotas

logger = logging.getLogger(__name__)


class RetrievalUnavailable(Exception):
    """Retrieval could not complete; the caller should degrade gracefully."""

    def __init__(self, message: str, stage: Optional[str] = None):
        self.message = message
        self.stage = stage
        super().__init__(self.message)


class CorpusRetriever:
    """
    Retrieval coordinator over an embedding provider and a corpus store.

    Stateless between calls: each retrieve() gets its own deadline and
    worker threads, so one instance can serve concurrent requests.
    """

    def __init__(
        self,
        embedder: Optional[EmbeddingProvider] = None,
        store: Optional[CorpusStore] = None,
        config: Optional[RetrievalConfig] = None,
    ):
        if embedder is None:
            from .embedder import CorpusEmbedder
            embedder = CorpusEmbedder()
        if store is None:
            from .corpus_store import PgVectorCorpusStore
            store = PgVectorCorpusStore()

        self.embedder = embedder
        self.store = store
        self.config = config or RetrievalConfig()

    def retrieve(
        self,
        query: str,
        top_k: Optional[int] = None,
        own_pool_id: Optional[str] = None,
        author_filter: Optional[str] = None,
        timeout: Optional[float] = None,
    ) -> List[ScoredChunk]:
        """
        Retrieve passages relevant to a query.

        Args:
            query: Query text
            top_k: Maximum number of passages (default from config)
            own_pool_id: Pool holding the speaking author's own works
            author_filter: If set, strict mode restricted to this author
            timeout: Deadline in seconds for the whole call

        Returns:
            ScoredChunk list ordered by ascending distance, at most top_k long

        Raises:
            ValueError: On an empty query or negative top_k
            RetrievalUnavailable: If embedding or corpus access fails or times out
        """
        if not query or not query.strip():
            raise ValueError("Query cannot be empty")

        k = self.config.default_top_k if top_k is None else top_k
        if k < 0:
            raise ValueError("top_k cannot be negative")
        if k == 0:
            return []

        if not author_filter and not own_pool_id:
            raise ValueError("own_pool_id is required without an author filter")

        timeout = timeout if timeout is not None else self.config.timeout_seconds
        deadline = time.monotonic() + timeout
        started = time.monotonic()

        executor = ThreadPoolExecutor(max_workers=2, thread_name_prefix="retrieval")
        try:
            vector = self._await(
                executor.submit(self.embedder.embed_query, query, timeout),
                deadline,
                stage="embedding",
            )

            if author_filter:
                results = self._retrieve_strict(executor, vector, k, author_filter, deadline)
            else:
                results = self._retrieve_dual(executor, vector, k, own_pool_id, deadline)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(
            f"Retrieved {len(results)}/{k} passages in {time.monotonic() - started:.2f}s "
            f"(mode={'strict' if author_filter else 'dual'}, query={query[:50]!r})"
        )
        return results

    def _retrieve_strict(
        self,
        executor: ThreadPoolExecutor,
        vector: Sequence[float],
        top_k: int,
        author_filter: str,
        deadline: float,
    ) -> List[ScoredChunk]:
        """Shared pool restricted to one author. Fewer than top_k is fine."""
        author = normalize_author_name(author_filter) or author_filter.strip()
        pool_id = self.config.common_pool_id

        rows = self._await(
            executor.submit(self._query, pool_id, vector, top_k, author, deadline),
            deadline,
            stage="corpus",
        )

        needle = author.lower()
        results = []
        for chunk in rows:
            if needle not in chunk.author.lower():
                logger.warning(
                    f"Dropping chunk by '{chunk.author}' returned for author filter '{author}'"
                )
                continue
            results.append(chunk.with_pool(PoolTag.COMMON))

        results.sort(key=lambda c: c.distance)
        return results[:top_k]

    def _retrieve_dual(
        self,
        executor: ThreadPoolExecutor,
        vector: Sequence[float],
        top_k: int,
        own_pool_id: str,
        deadline: float,
    ) -> List[ScoredChunk]:
        """Own pool + shared pool with guaranteed minimum representation."""
        common_pool_id = self.config.common_pool_id

        if own_pool_id == common_pool_id:
            rows = self._await(
                executor.submit(self._query, common_pool_id, vector, top_k, None, deadline),
                deadline,
                stage="corpus",
            )
            return sorted(
                (c.with_pool(PoolTag.COMMON) for c in rows),
                key=lambda c: c.distance,
            )[:top_k]

        quotas = compute_pool_quotas(top_k, self.config.own_pool_ratio)
        limits = quotas.fetch_limits(self.config.overfetch_factor)

        own_future = executor.submit(self._query, own_pool_id, vector, limits["own"], None, deadline)
        common_future = None
        if limits["common"] > 0:
            common_future = executor.submit(
                self._query, common_pool_id, vector, limits["common"], None, deadline
            )

        own_rows = self._await(own_future, deadline, stage="corpus")
        common_rows = self._await(common_future, deadline, stage="corpus") if common_future else []

        # Own-pool candidates first so equal distances keep pool-then-rank order
        merged = [c.with_pool(PoolTag.OWN) for c in own_rows]
        merged += [c.with_pool(PoolTag.COMMON) for c in common_rows]
        merged.sort(key=lambda c: c.distance)

        picked = select_with_quotas(
            merged,
            group_of=lambda c: c.pool,
            quotas={
                PoolTag.OWN: quotas.own_minimum,
                PoolTag.COMMON: quotas.common_minimum,
            },
            top_k=top_k,
        )
        results = sorted((merged[i] for i in picked), key=lambda c: c.distance)

        own_count = sum(1 for c in results if c.pool is PoolTag.OWN)
        logger.debug(
            f"Dual-pool merge: {own_count} own ({own_pool_id}), "
            f"{len(results) - own_count} common from {len(merged)} candidates"
        )
        return results

    def _query(
        self,
        pool_id: str,
        vector: Sequence[float],
        limit: int,
        author_like: Optional[str],
        deadline: float,
    ) -> List[ScoredChunk]:
        remaining = max(deadline - time.monotonic(), 0.001)
        return self.store.query(pool_id, vector, limit, author_like=author_like, timeout=remaining)

    def _await(self, future: Future, deadline: float, stage: str):
        """Wait for a collaborator call, converting any failure."""
        remaining = deadline - time.monotonic()
        try:
            return future.result(timeout=max(remaining, 0.0))
        except FuturesTimeout:
            future.cancel()
            logger.error(f"Retrieval {stage} step timed out")
            raise RetrievalUnavailable(f"{stage} step timed out", stage=stage)
        except (EmbeddingFailure, CorpusUnavailable) as e:
            raise RetrievalUnavailable(f"{stage} step failed: {e}", stage=stage) from e
        except Exception as e:
            logger.error(f"Retrieval {stage} step failed: {e}")
            raise RetrievalUnavailable(f"{stage} step failed: {e}", stage=stage) from e


def format_context(results: List[ScoredChunk], max_tokens: int = 2000) -> str:
    """
    Format retrieved passages as reference material for an LLM.

    Args:
        results: Retrieved passages, best first
        max_tokens: Approximate max tokens for the whole context

    Returns:
        Formatted context string, empty if there are no results
    """
    if not results:
        return ""

    context_parts = []
    estimated_tokens = 0

    for i, result in enumerate(results, 1):
        label = "[OWN WORK]" if result.pool is PoolTag.OWN else "[COMMON KNOWLEDGE]"
        part = f"""
{label} Reference {i}: {result.work} ({result.author}, distance: {result.distance:.3f})
{result.content}
"""
        part_tokens = result.estimated_tokens + 12

        if estimated_tokens + part_tokens > max_tokens:
            break

        context_parts.append(part)
        estimated_tokens += part_tokens

    return "\n".join(context_parts)
