"""
Embedding generation: remote provider with a deterministic local fallback.
"""

from codectx.embeddings.fallback import fallback_embedding, fallback_vector, preprocess_text
from codectx.embeddings.generator import EmbeddingGenerator
from codectx.embeddings.models import (
    FALLBACK_MODEL_ID,
    Embedding,
    FallbackEmbedding,
    RemoteEmbedding,
    parse_embedding,
)
from codectx.embeddings.provider import EmbeddingProvider, OpenAIEmbeddingProvider
from codectx.embeddings.similarity import cosine_similarity

__all__ = [
    "EmbeddingGenerator",
    "EmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "Embedding",
    "RemoteEmbedding",
    "FallbackEmbedding",
    "FALLBACK_MODEL_ID",
    "parse_embedding",
    "fallback_embedding",
    "fallback_vector",
    "preprocess_text",
    "cosine_similarity",
]
