"""
Query Embedder
==============

Maps query text to the vector space of the pre-embedded corpus.

The corpus was embedded with OpenAI text-embedding-ada-002 (1536
dimensions), so queries must use the same model.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..core.config import EmbeddingConfig

logger = logging.getLogger(__name__)


class EmbeddingFailure(Exception):
    """The embedding provider failed, timed out, or returned a bad vector."""

    def __init__(self, message: str, model: Optional[str] = None):
        self.message = message
        self.model = model
        super().__init__(self.message)


@dataclass
class EmbeddingResult:
    """One vector plus its share of the request's token usage."""
    embedding: List[float]
    token_count: int
    model: str


class EmbeddingProvider(ABC):
    """Maps text to a fixed-length vector."""

    @abstractmethod
    def embed_query(self, text: str, timeout: Optional[float] = None) -> List[float]:
        """Embed a single text and return the vector."""
        pass

    def embed_batch(self, texts: List[str], timeout: Optional[float] = None) -> List[List[float]]:
        """Embed several texts, one vector per input."""
        return [self.embed_query(text, timeout=timeout) for text in texts]


class CorpusEmbedder(EmbeddingProvider):
    """
    Generates query embeddings using the OpenAI embeddings endpoint.

    Keeps running token and request counts for cost reporting.
    """

    def __init__(
        self,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        dimensions: Optional[int] = None,
        config: Optional[EmbeddingConfig] = None,
    ):
        config = config or EmbeddingConfig()
        self.api_key = api_key or config.api_key
        if not self.api_key:
            raise ValueError("OpenAI API key required for embeddings")

        self.model = model or config.model
        self.dimensions = dimensions or config.dimensions

        self._client = None
        self._total_tokens = 0
        self._total_requests = 0

    @property
    def client(self):
        if self._client is None:
            from openai import OpenAI
            self._client = OpenAI(api_key=self.api_key, max_retries=0)
        return self._client

    def embed(self, text: str, timeout: Optional[float] = None) -> EmbeddingResult:
        """
        Embed one text with usage metadata.

        Args:
            text: Non-empty text
            timeout: Request timeout in seconds

        Returns:
            EmbeddingResult for the text

        Raises:
            ValueError: If text is empty
            EmbeddingFailure: If the provider fails or the vector is malformed
        """
        if not text.strip():
            raise ValueError("Cannot embed empty text")

        results = self._create([text], timeout)
        return results[0]

    def embed_query(self, text: str, timeout: Optional[float] = None) -> List[float]:
        """Embed a search query and return the bare vector."""
        return self.embed(text, timeout=timeout).embedding

    def embed_batch(
        self,
        texts: List[str],
        timeout: Optional[float] = None,
        batch_size: int = 100,
    ) -> List[List[float]]:
        """
        Embed many texts, batch_size per request.

        Args:
            texts: List of texts to embed (none may be empty)
            timeout: Per-request timeout in seconds
            batch_size: Texts per request

        Returns:
            One vector per input text, in input order
        """
        if any(not t.strip() for t in texts):
            raise ValueError("Cannot embed empty text")

        vectors = []
        for i in range(0, len(texts), batch_size):
            batch = texts[i:i + batch_size]
            vectors.extend(r.embedding for r in self._create(batch, timeout))
        return vectors

    def _create(self, inputs: List[str], timeout: Optional[float]) -> List[EmbeddingResult]:
        """Call the API and validate the response."""
        from openai import OpenAIError

        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=inputs if len(inputs) > 1 else inputs[0],
                timeout=timeout,
            )
        except OpenAIError as e:
            logger.error(f"Embedding request failed ({self.model}): {e}")
            raise EmbeddingFailure(f"Embedding request failed: {e}", model=self.model) from e

        if len(response.data) != len(inputs):
            raise EmbeddingFailure(
                f"Expected {len(inputs)} embeddings, got {len(response.data)}",
                model=self.model,
            )

        token_count = response.usage.total_tokens
        self._total_tokens += token_count
        self._total_requests += 1

        results = []
        for data in response.data:
            if len(data.embedding) != self.dimensions:
                raise EmbeddingFailure(
                    f"Embedding has {len(data.embedding)} dimensions, expected {self.dimensions}",
                    model=self.model,
                )
            results.append(EmbeddingResult(
                embedding=list(data.embedding),
                token_count=token_count // len(inputs),  # Approx per text
                model=self.model,
            ))

        logger.debug(f"Embedded {len(inputs)} text(s) ({token_count} tokens)")
        return results

    @property
    def total_tokens(self) -> int:
        return self._total_tokens

    @property
    def total_requests(self) -> int:
        return self._total_requests

    @property
    def estimated_cost(self) -> float:
        """USD spent so far at the ada-002 rate."""
        # text-embedding-ada-002: $0.0001 per 1K tokens
        return (self._total_tokens / 1000) * 0.0001
