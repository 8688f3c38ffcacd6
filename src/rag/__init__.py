"""
Philosearch RAG Module
======================

Semantic retrieval over a pre-embedded corpus of philosophical texts.

Pools:
- Own: each author's private collection (figure_id = author pool id)
- Common: the shared collection (figure_id = "common")

Architecture:
- pgvector for vector storage (cosine distance)
- OpenAI text-embedding-ada-002 for query embeddings
- Dual-pool quota merge, or strict single-author retrieval
"""

from .authors import AuthorResolver, detect_author_from_query, normalize_author_name
from .corpus_store import CorpusStore, CorpusUnavailable, InMemoryCorpusStore, PgVectorCorpusStore
from .embedder import CorpusEmbedder, EmbeddingFailure, EmbeddingProvider
from .models import Chunk, PoolTag, Quote, QuoteVerification, ScoredChunk
from .quotas import PoolQuotas, compute_pool_quotas, select_with_quotas
from .retriever import CorpusRetriever, RetrievalUnavailable, format_context

__all__ = [
    "AuthorResolver",
    "detect_author_from_query",
    "normalize_author_name",
    "CorpusStore",
    "CorpusUnavailable",
    "InMemoryCorpusStore",
    "PgVectorCorpusStore",
    "CorpusEmbedder",
    "EmbeddingFailure",
    "EmbeddingProvider",
    "Chunk",
    "PoolTag",
    "Quote",
    "QuoteVerification",
    "ScoredChunk",
    "PoolQuotas",
    "compute_pool_quotas",
    "select_with_quotas",
    "CorpusRetriever",
    "RetrievalUnavailable",
    "format_context",
]
