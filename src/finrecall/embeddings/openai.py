"""OpenAI embedding client."""

import logging

from openai import AsyncOpenAI, OpenAIError

from finrecall.embeddings.client import EmbeddingError

logger = logging.getLogger(__name__)


class OpenAIEmbedding:
    """Embedding generation through the OpenAI embeddings endpoint.

    Works against any OpenAI-compatible server by overriding ``base_url``.
    """

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        api_key: str | None = None,
        base_url: str | None = None,
        timeout: int = 30,
    ):
        """Initialize OpenAI embedding client.

        Args:
            model: Embedding model name
            api_key: API key (falls back to OPENAI_API_KEY when None)
            base_url: Optional OpenAI-compatible endpoint
            timeout: Request timeout in seconds
        """
        self._model = model
        self.client = AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout)

    async def embed(self, texts: list[str]) -> list[list[float]]:
        """Generate embeddings for a list of texts.

        Args:
            texts: List of text strings to embed

        Returns:
            List of embedding vectors, in input order

        Raises:
            EmbeddingError: If the API call fails
        """
        if not texts:
            return []

        try:
            response = await self.client.embeddings.create(model=self._model, input=texts)
        except OpenAIError as e:
            logger.error("OpenAI embedding request failed: %s", e)
            raise EmbeddingError(f"OpenAI embedding request failed: {e}") from e

        # The API may return items out of order; index restores it
        items = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in items]

    async def embed_single(self, text: str) -> list[float]:
        """Generate embedding for a single text."""
        embeddings = await self.embed([text])
        return embeddings[0]

    @property
    def model_name(self) -> str:
        """Get the name of the embedding model."""
        return self._model
