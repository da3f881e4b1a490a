"""Sentence-transformers embedding client (local, no API calls)."""

import asyncio
from typing import Any

import numpy as np

from finrecall.embeddings.client import EmbeddingError


class SentenceTransformerEmbedding:
    """Local embedding generation using sentence-transformers.

    Meant for offline development and tests against real vectors; the model
    is loaded on first use and encoding runs in the default executor so the
    event loop is never blocked.
    """

    def __init__(
        self,
        model_name: str = "sentence-transformers/all-MiniLM-L6-v2",
        device: str | None = None,
        normalize: bool = True,
    ):
        """Initialize sentence-transformers client.

        Args:
            model_name: HuggingFace model identifier
            device: Device to run on ("cuda", "mps", "cpu", or None for auto)
            normalize: L2-normalize vectors so dot product equals cosine
        """
        self._model_name = model_name
        self._device = device
        self._normalize = normalize
        self._model: Any = None

    def _load_model(self) -> Any:
        """Load the model lazily."""
        if self._model is None:
            try:
                from sentence_transformers import SentenceTransformer
            except ImportError as e:
                msg = (
                    "sentence-transformers is required for local embeddings. "
                    "Install with: pip install 'finrecall[local]'"
                )
                raise ImportError(msg) from e

            self._model = SentenceTransformer(self._model_name, device=self._device)
        return self._model

    def _encode(self, texts: list[str]) -> np.ndarray:
        model = self._load_model()
        return model.encode(texts, normalize_embeddings=self._normalize)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a list of texts.

        Raises:
            EmbeddingError: If encoding fails
        """
        if not texts:
            return []

        loop = asyncio.get_running_loop()
        try:
            vectors = await loop.run_in_executor(None, self._encode, texts)
        except ImportError:
            raise
        except Exception as e:
            raise EmbeddingError(f"Local embedding failed: {e}") from e

        return np.asarray(vectors, dtype=float).tolist()

    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        embeddings = await self.embed([text])
        return embeddings[0]

    @property
    def model_name(self) -> str:
        """Get the name of the embedding model."""
        return self._model_name
