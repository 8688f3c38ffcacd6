"""
Tests for the corpus stores.

PostgreSQL access is mocked at psycopg2.connect; the in-memory store is
exercised directly.

Usage:
    pytest tests/test_corpus_store.py -v
"""

from unittest.mock import MagicMock, patch

import psycopg2
import pytest

from src.core.config import DatabaseConfig
from src.rag.corpus_store import (
    CorpusUnavailable,
    InMemoryCorpusStore,
    PgVectorCorpusStore,
    like_pattern,
    rows_to_chunks,
    vector_literal,
)
from src.rag.models import Chunk, PoolTag


# ============================================================================
# TEST HELPERS
# ============================================================================

def make_row(**overrides):
    row = {
        "author": "J.-M. Kuczynski",
        "work": "Analytic Philosophy",
        "content": "The mind is a battlefield.",
        "chunk_index": 3,
        "pool_id": "jmk",
        "distance": 0.25,
    }
    row.update(overrides)
    return row


def make_store() -> PgVectorCorpusStore:
    config = DatabaseConfig(url="postgresql://localhost/corpus", table="paper_chunks", connect_timeout=5)
    return PgVectorCorpusStore(config=config)


def cursor_of(mock_connect) -> MagicMock:
    return mock_connect.return_value.cursor.return_value.__enter__.return_value


def make_chunk(author: str, pool_id: str, embedding, index: int = 0) -> Chunk:
    return Chunk(
        author=author,
        work=f"{author} collected works",
        content=f"Passage {index} by {author}.",
        chunk_index=index,
        pool_id=pool_id,
        embedding=tuple(embedding),
    )


# ============================================================================
# HELPERS
# ============================================================================

class TestSqlHelpers:
    """Tests for SQL parameter helpers."""

    def test_like_pattern_escapes_metacharacters(self):
        assert like_pattern("Kuczynski") == "%Kuczynski%"
        assert like_pattern("50%_a\\b") == "%50\\%\\_a\\\\b%"

    def test_vector_literal(self):
        assert vector_literal([1, 0.5, -0.25]) == "[1.0,0.5,-0.25]"

    def test_rows_to_chunks_skips_malformed(self):
        rows = [make_row(), make_row(content=None), make_row(distance=None), make_row(chunk_index=4)]
        chunks = rows_to_chunks(rows, PoolTag.COMMON)

        assert [c.chunk_index for c in chunks] == [3, 4]
        assert all(c.pool is PoolTag.COMMON for c in chunks)


# ============================================================================
# PGVECTOR STORE
# ============================================================================

class TestPgVectorCorpusStore:
    """Tests for PgVectorCorpusStore with a mocked connection."""

    def test_requires_database_url(self):
        with pytest.raises(ValueError):
            PgVectorCorpusStore(config=DatabaseConfig(url=None, table="paper_chunks", connect_timeout=5))

    def test_rejects_unsafe_table_name(self):
        with pytest.raises(ValueError):
            PgVectorCorpusStore(db_url="postgresql://localhost/corpus", table="chunks; DROP TABLE x")

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_query_parameters(self, mock_connect):
        cur = cursor_of(mock_connect)
        cur.fetchall.return_value = [make_row()]

        results = make_store().query("jmk", [0.1, 0.2], limit=6)

        sql, params = cur.execute.call_args[0]
        assert "figure_id = %s" in sql
        assert "embedding <=> %s::vector" in sql
        assert "ORDER BY distance" in sql
        assert "ILIKE" not in sql
        assert params == ("[0.1,0.2]", "jmk", 6)

        assert len(results) == 1
        assert results[0].author == "J.-M. Kuczynski"
        assert results[0].distance == 0.25

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_query_with_author_filter(self, mock_connect):
        cur = cursor_of(mock_connect)
        cur.fetchall.return_value = []

        make_store().query("common", [0.1, 0.2], limit=10, author_like="Kuczynski")

        sql, params = cur.execute.call_args[0]
        assert "author ILIKE %s ESCAPE" in sql
        assert params == ("[0.1,0.2]", "common", "%Kuczynski%", 10)

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_statement_timeout(self, mock_connect):
        cursor_of(mock_connect).fetchall.return_value = []

        make_store().query("jmk", [0.1], limit=2, timeout=1.5)

        kwargs = mock_connect.call_args[1]
        assert kwargs["options"] == "-c statement_timeout=1500"
        assert kwargs["connect_timeout"] == 5

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_malformed_rows_skipped(self, mock_connect):
        cursor_of(mock_connect).fetchall.return_value = [make_row(), make_row(author=None)]

        results = make_store().query("jmk", [0.1], limit=5)

        assert len(results) == 1

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_database_error_wrapped(self, mock_connect):
        cursor_of(mock_connect).execute.side_effect = psycopg2.OperationalError("server closed")

        with pytest.raises(CorpusUnavailable) as exc_info:
            make_store().query("jmk", [0.1], limit=5)

        assert exc_info.value.pool_id == "jmk"
        mock_connect.return_value.close.assert_called_once()

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_connection_error_wrapped(self, mock_connect):
        mock_connect.side_effect = psycopg2.OperationalError("could not connect")

        with pytest.raises(CorpusUnavailable):
            make_store().query("jmk", [0.1], limit=5)

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_zero_limit_skips_database(self, mock_connect):
        assert make_store().query("jmk", [0.1], limit=0) == []
        mock_connect.assert_not_called()

    @patch("src.rag.corpus_store.psycopg2.connect")
    def test_has_author(self, mock_connect):
        cur = cursor_of(mock_connect)
        cur.fetchall.return_value = [{"found": 1}]

        assert make_store().has_author("Kuczynski") is True
        sql, params = cur.execute.call_args[0]
        assert "LIMIT 1" in sql
        assert params == ("%Kuczynski%",)

        cur.fetchall.return_value = []
        assert make_store().has_author("Nobody") is False


# ============================================================================
# IN-MEMORY STORE
# ============================================================================

class TestInMemoryCorpusStore:
    """Tests for the numpy brute-force store."""

    def test_cosine_ordering(self):
        store = InMemoryCorpusStore([
            make_chunk("Russell", "common", (0.0, 1.0), 0),
            make_chunk("Russell", "common", (1.0, 0.0), 1),
            make_chunk("Russell", "common", (1.0, 1.0), 2),
        ])
        results = store.query("common", [1.0, 0.0], limit=3)

        assert [r.chunk_index for r in results] == [1, 2, 0]
        assert results[0].distance == pytest.approx(0.0)
        assert results[1].distance == pytest.approx(1 - 2 ** -0.5)
        assert results[2].distance == pytest.approx(1.0)

    def test_pool_and_limit(self):
        store = InMemoryCorpusStore([
            make_chunk("Kuczynski", "jmk", (1.0, 0.0), 0),
            make_chunk("Kuczynski", "jmk", (0.9, 0.1), 1),
            make_chunk("Russell", "common", (1.0, 0.0), 2),
        ])
        results = store.query("jmk", [1.0, 0.0], limit=1)

        assert [r.chunk_index for r in results] == [0]
        assert store.query("missing", [1.0, 0.0], limit=5) == []

    def test_author_filter_case_insensitive(self):
        store = InMemoryCorpusStore([
            make_chunk("J.-M. Kuczynski", "common", (1.0, 0.0), 0),
            make_chunk("Bertrand Russell", "common", (1.0, 0.0), 1),
        ])
        results = store.query("common", [1.0, 0.0], limit=5, author_like="KUCZYNSKI")

        assert [r.author for r in results] == ["J.-M. Kuczynski"]

    def test_skips_unusable_records(self):
        store = InMemoryCorpusStore([
            make_chunk("Russell", "common", (1.0, 0.0), 0),
            {"author": "Russell", "work": "W", "content": None, "chunk_index": 1,
             "pool_id": "common", "embedding": [1.0, 0.0]},
            {"author": "Russell", "work": "W", "content": "Text.", "chunk_index": 2,
             "pool_id": "common", "embedding": [1.0, 0.0, 0.0]},
            {"author": "Russell", "work": "W", "content": "Text.", "chunk_index": 3,
             "pool_id": "common", "embedding": [0.5, 0.5]},
        ])

        assert len(store) == 2

    def test_dimension_mismatch_on_query(self):
        store = InMemoryCorpusStore([make_chunk("Russell", "common", (1.0, 0.0))])
        with pytest.raises(CorpusUnavailable):
            store.query("common", [1.0, 0.0, 0.0], limit=1)

    def test_has_author(self):
        store = InMemoryCorpusStore([make_chunk("J.-M. Kuczynski", "jmk", (1.0, 0.0))])
        assert store.has_author("kuczynski") is True
        assert store.has_author("Plato") is False
