"""finrecall - Conversational memory for a multi-agent financial assistant.

finrecall lets a multi-turn conversation pipeline recall facts, preferences
and past actions across turns and sessions. Unregistered users get an
in-process semantic store that dies with the process; registered users get a
durable vector store backed by an external database.

Key modules:

- :mod:`finrecall.memory` - Memory stores, manager and per-turn coordinator
- :mod:`finrecall.embeddings` - Embedding clients (OpenAI, Ollama, sentence-transformers)
- :mod:`finrecall.vector` - In-process vector index and external database adapters
- :mod:`finrecall.config` - YAML configuration with pydantic validation
- :mod:`finrecall.cli` - Admin commands for the persistent store
"""

__version__ = "0.1.0"
