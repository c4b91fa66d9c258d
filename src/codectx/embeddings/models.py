"""
Embedding models.

An Embedding is either provider-sourced (RemoteEmbedding) or the deterministic
local feature hash (FallbackEmbedding). The ``source`` tag survives
persistence so ranking can discount fallback similarity.
"""

from typing import Annotated, Literal, Union

from pydantic import Field, TypeAdapter

from codectx.shared.domain.base_model import BaseDomainModel

FALLBACK_MODEL_ID = "codectx-feature-hash-v1"


class RemoteEmbedding(BaseDomainModel):
    """Vector returned by the remote embedding provider."""

    source: Literal["remote"] = "remote"
    vector: list[float]
    model: str

    @property
    def is_fallback(self) -> bool:
        return False


class FallbackEmbedding(BaseDomainModel):
    """Deterministic local vector used while the provider is unavailable."""

    source: Literal["fallback"] = "fallback"
    vector: list[float]
    model: str = FALLBACK_MODEL_ID

    @property
    def is_fallback(self) -> bool:
        return True


Embedding = Annotated[Union[RemoteEmbedding, FallbackEmbedding], Field(discriminator="source")]

embedding_adapter: TypeAdapter[Embedding] = TypeAdapter(Embedding)


def parse_embedding(data: dict) -> RemoteEmbedding | FallbackEmbedding:
    """Rebuild an Embedding from its stored dict form."""
    return embedding_adapter.validate_python(data)
