"""
RAG CLI
=======

Command-line interface for retrieval and quote extraction.

Usage:
    python -m src.rag.cli search "query" --pool jmk -k 6
    python -m src.rag.cli search "query" --author Kuczynski
    python -m src.rag.cli quotes "query" --pool jmk --max-quotes 5
    python -m src.rag.cli normalize "john-michael kuczynski"
    python -m src.rag.cli detect "give me kuczynski quotes"
"""

import argparse
import logging
import sys

from src.core.config import get_settings
from src.core.logging_config import setup_logging
from src.quotes.extractor import extract_quotes
from src.rag.authors import AuthorResolver, normalize_author_name
from src.rag.corpus_store import CorpusUnavailable, PgVectorCorpusStore
from src.rag.retriever import CorpusRetriever, RetrievalUnavailable, format_context

logger = logging.getLogger(__name__)


def run_search(query: str, pool: str, author: str, k: int, show_context: bool) -> bool:
    """Retrieve and print passages."""
    try:
        retriever = CorpusRetriever()
        results = retriever.retrieve(query, k, own_pool_id=pool, author_filter=author)
    except (ValueError, RetrievalUnavailable) as e:
        logger.error(f"Search failed: {e}")
        return False

    print(f"\n{'='*60}")
    print(f"Query: {query}")
    print(f"Mode: {'author=' + author if author else 'pool=' + str(pool)}")
    print(f"Results: {len(results)}")
    print('='*60)

    for i, r in enumerate(results, 1):
        print(f"\n[{i}] Distance: {r.distance:.4f} ({r.pool.value})")
        print(f"    Author: {r.author}")
        print(f"    Work: {r.work} #{r.chunk_index}")
        print(f"    Tokens: ~{r.estimated_tokens}")
        print(f"    Content: {r.content[:200]}...")

    if show_context:
        print(f"\n{'='*60}")
        print("FORMATTED CONTEXT FOR LLM:")
        print('='*60)
        print(format_context(results))

    return True


def run_quotes(query: str, pool: str, author: str, k: int, max_quotes: int) -> bool:
    """Retrieve passages and print the extracted quotes."""
    settings = get_settings()
    try:
        retriever = CorpusRetriever()
        passages = retriever.retrieve(query, k, own_pool_id=pool, author_filter=author)
    except (ValueError, RetrievalUnavailable) as e:
        logger.error(f"Retrieval failed: {e}")
        return False

    quotes = extract_quotes(
        passages,
        query,
        min_length=settings.quotes.min_length,
        max_quotes=max_quotes or settings.quotes.max_quotes,
        max_length=settings.quotes.max_length,
        min_words=settings.quotes.min_words,
    )

    print(f"\n{len(quotes)} quote(s) from {len(passages)} passage(s)\n")
    for i, quote in enumerate(quotes, 1):
        print(f"[{i}] ({quote.score:+.0f}) \"{quote.text}\"")
        print(f"     -- {quote.source_work}, chunk {quote.chunk_index}")

    return True


def run_detect(text: str) -> bool:
    """Detect a verified author mention."""
    try:
        resolver = AuthorResolver(PgVectorCorpusStore())
        detected = resolver.detect_from_text(text)
    except (ValueError, CorpusUnavailable) as e:
        logger.error(f"Detection failed: {e}")
        return False

    print(detected or "NONE")
    return True


def main():
    parser = argparse.ArgumentParser(description="Philosophical corpus retrieval CLI")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", help="Command")

    search_parser = subparsers.add_parser("search", help="Retrieve passages")
    search_parser.add_argument("query", help="Search query")
    search_parser.add_argument("--pool", default=None, help="Own pool id (figure id)")
    search_parser.add_argument("--author", default=None, help="Strict author filter")
    search_parser.add_argument("-k", type=int, default=None, help="Number of passages")
    search_parser.add_argument("--context", action="store_true", help="Print LLM context")

    quotes_parser = subparsers.add_parser("quotes", help="Extract quotes")
    quotes_parser.add_argument("query", help="Search query")
    quotes_parser.add_argument("--pool", default=None, help="Own pool id (figure id)")
    quotes_parser.add_argument("--author", default=None, help="Strict author filter")
    quotes_parser.add_argument("-k", type=int, default=None, help="Number of passages")
    quotes_parser.add_argument("--max-quotes", type=int, default=None, help="Number of quotes")

    normalize_parser = subparsers.add_parser("normalize", help="Normalize an author name")
    normalize_parser.add_argument("name", help="Author name")

    detect_parser = subparsers.add_parser("detect", help="Detect an author in text")
    detect_parser.add_argument("text", help="Free text")

    args = parser.parse_args()

    setup_logging(level=args.log_level)

    if args.command == "search":
        success = run_search(args.query, args.pool, args.author, args.k, args.context)
    elif args.command == "quotes":
        success = run_quotes(args.query, args.pool, args.author, args.k, args.max_quotes)
    elif args.command == "normalize":
        print(normalize_author_name(args.name))
        success = True
    elif args.command == "detect":
        success = run_detect(args.text)
    else:
        parser.print_help()
        return

    sys.exit(0 if success else 1)


if __name__ == "__main__":
    main()
