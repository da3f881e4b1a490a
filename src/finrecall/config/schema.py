"""Pydantic models for finrecall.yaml configuration."""

from typing import Literal

from pydantic import BaseModel, Field


class EmbeddingsConfig(BaseModel):
    """Embedding provider configuration."""

    provider: Literal["openai", "ollama", "sentence-transformers"] = Field(
        default="openai",
        description=(
            "Embedding provider: 'openai' (hosted), "
            "'ollama' or 'sentence-transformers' (local)"
        ),
    )
    model: str = Field(
        default="text-embedding-3-small",
        description="Embedding model name for the selected provider",
    )
    host: str | None = Field(
        default=None,
        description="Provider base URL (Ollama host or OpenAI-compatible endpoint)",
    )
    api_key: str | None = Field(
        default=None,
        description="API key for hosted providers (OpenAI falls back to OPENAI_API_KEY)",
    )
    timeout: int = Field(default=30, description="Request timeout in seconds", ge=1)


class EphemeralStoreConfig(BaseModel):
    """In-process memory store for unregistered users."""

    min_score: float = Field(
        default=0.7,
        description="Default minimum similarity for search results (0.0-1.0)",
        ge=0.0,
        le=1.0,
    )
    max_results: int = Field(default=10, description="Default search limit", ge=1)


class PersistentStoreConfig(BaseModel):
    """Durable memory store for registered users."""

    host: str | None = Field(
        default="localhost",
        description="Vector database host (None = embedded client, development only)",
    )
    port: int = Field(default=8000, description="Vector database port", ge=1, le=65535)
    ssl: bool = Field(default=False, description="Connect over HTTPS")
    headers: dict[str, str] = Field(
        default_factory=dict,
        description="Extra HTTP headers sent to the database (e.g. auth tokens)",
    )
    persist_directory: str | None = Field(
        default=None,
        description="Embedded storage directory when host is None (None = in-memory)",
    )
    collection_name: str = Field(
        default="financial_memory",
        description="Collection holding memory records",
    )
    min_score: float = Field(
        default=0.7,
        description="Default minimum similarity for search results (0.0-1.0)",
        ge=0.0,
        le=1.0,
    )
    max_results: int = Field(default=10, description="Default search limit", ge=1)


class CoordinatorConfig(BaseModel):
    """Per-turn retrieval, injection and history bounds."""

    max_messages: int = Field(
        default=10,
        description="Hard cap on history length after deduplication",
        ge=1,
    )
    prune_max: int = Field(
        default=15,
        description="Soft bound on history length applied by pruning",
        ge=1,
    )
    context_limit: int = Field(
        default=3,
        description="Number of memories considered for prompt context",
        ge=1,
        le=20,
    )
    context_min_score: float = Field(
        default=0.8,
        description="Minimum similarity for a memory to enter prompt context",
        ge=0.0,
        le=1.0,
    )
    search_limit: int = Field(
        default=5,
        description="Result cap for relevant-memory searches",
        ge=1,
        le=50,
    )


class FinrecallConfig(BaseModel):
    """Root configuration schema for finrecall."""

    embeddings: EmbeddingsConfig = Field(default_factory=EmbeddingsConfig)
    ephemeral: EphemeralStoreConfig = Field(default_factory=EphemeralStoreConfig)
    persistent: PersistentStoreConfig = Field(default_factory=PersistentStoreConfig)
    coordinator: CoordinatorConfig = Field(default_factory=CoordinatorConfig)
