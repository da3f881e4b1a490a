"""Ollama embedding client (local, via Ollama API)."""

import httpx

from finrecall.embeddings.client import EmbeddingError


class OllamaEmbedding:
    """Embedding generation using Ollama's batch embed endpoint.

    Useful for development setups that already run Ollama and should not
    send conversation text to a hosted provider.
    """

    def __init__(
        self,
        model: str = "nomic-embed-text",
        host: str = "http://localhost:11434",
        timeout: int = 30,
    ):
        """Initialize Ollama embedding client.

        Args:
            model: Ollama model name (e.g., "nomic-embed-text")
            host: Ollama server URL
            timeout: Request timeout in seconds
        """
        self._model = model
        self._host = host.rstrip("/")
        self._timeout = timeout

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a list of texts in one request.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors

        Raises:
            EmbeddingError: On HTTP failure or a malformed response
        """
        if not texts:
            return []

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    f"{self._host}/api/embed",
                    json={"model": self._model, "input": texts},
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Ollama embedding request failed: {e}") from e

        embeddings = data.get("embeddings")
        if not isinstance(embeddings, list) or len(embeddings) != len(texts):
            msg = f"Ollama returned {len(embeddings or [])} embeddings for {len(texts)} inputs"
            raise EmbeddingError(msg)

        return embeddings

    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        embeddings = await self.embed([text])
        return embeddings[0]

    @property
    def model_name(self) -> str:
        """Get the name of the embedding model."""
        return self._model
