"""Embedding gateway contract plus vector and search-text helpers.

The core never produces vectors itself; it validates their shape and, for
debugging or client-side filtering, compares them.
"""

import logging
import math
import os
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_DIMENSIONS = 1536


class EmbeddingGateway(ABC):
    """Base class that every embedding backend must implement."""

    @property
    @abstractmethod
    def dimensions(self) -> int:
        """Length of every vector this gateway returns."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single text."""

    @abstractmethod
    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        """Embed several texts in one request, preserving order."""


class OpenAIEmbeddingGateway(EmbeddingGateway):
    """Embedding gateway backed by the OpenAI embeddings endpoint."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        dimensions: int = DEFAULT_DIMENSIONS,
    ) -> None:
        self._model = model
        self._dimensions = dimensions

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def _client(self) -> Any:
        api_key = os.environ.get("OPENAI_API_KEY")
        if not api_key:
            msg = "OPENAI_API_KEY environment variable is required"
            raise ValueError(msg)

        try:
            import openai
        except ImportError:
            msg = (
                "openai is required for embeddings. "
                "Install with: pip install 'event-package-search[openai]'"
            )
            raise ImportError(msg) from None

        return openai.OpenAI(api_key=api_key)

    def embed(self, text: str) -> list[float]:
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: list[str]) -> list[list[float]]:
        client = self._client()
        logger.debug("Embedding %d texts with %s", len(texts), self._model)
        response = client.embeddings.create(
            model=self._model, input=texts, encoding_format="float"
        )
        return [list(item.embedding) for item in response.data]


def validate_embedding(embedding: Sequence[float], dimensions: int = DEFAULT_DIMENSIONS) -> bool:
    """True when ``embedding`` is a sequence of exactly ``dimensions`` numbers."""
    if isinstance(embedding, (str, bytes)) or not isinstance(embedding, Sequence):
        return False
    return len(embedding) == dimensions


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two equal-length vectors.

    Raises:
        ValueError: If the vectors differ in length.
    """
    if len(a) != len(b):
        msg = f"Embeddings must have same dimensions ({len(a)} != {len(b)})"
        raise ValueError(msg)

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def _joined(value: Any) -> str:
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value)
    return str(value)


def build_search_description(package: Mapping[str, Any]) -> str:
    """Build the denormalised text that is embedded and keyword-matched."""
    parts: list[str] = [str(package.get("name") or ""), str(package.get("description") or "")]

    venue = package.get("venue_details") or {}
    if venue.get("name"):
        parts.append(f"Venue: {venue['name']}")
    if venue.get("type"):
        parts.append(f"{venue['type']} venue")
    if venue.get("amenities"):
        parts.append(f"Amenities: {_joined(venue['amenities'])}")

    catering = package.get("catering_details") or {}
    if catering.get("menu_options"):
        parts.append(f"Food: {_joined(catering['menu_options'])}")
    if catering.get("dietary_accommodations"):
        parts.append(f"Dietary options: {_joined(catering['dietary_accommodations'])}")
    if catering.get("cuisine_type"):
        parts.append(f"{catering['cuisine_type']} cuisine")

    entertainment = package.get("entertainment_details") or {}
    if entertainment.get("type"):
        parts.append(f"Entertainment: {entertainment['type']}")
    if entertainment.get("equipment"):
        parts.append(f"Equipment: {_joined(entertainment['equipment'])}")

    parts.append(f"Capacity: {package.get('capacity', 0)} people")
    parts.append(
        f"Price range: ${package.get('price_min', 0)} to ${package.get('price_max', 0)}"
    )

    return ". ".join(p for p in parts if p)
