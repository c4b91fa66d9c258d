"""
Language-model gateway contract.

The engine formats retrieved context and hands it to a gateway; which model
runs and how it is called (retries included) is the gateway's business.
"""

from typing import Protocol, runtime_checkable

from pydantic import Field

from codectx.shared.domain.base_model import BaseDomainModel


class GatewayResponse(BaseDomainModel):
    text: str
    usage: dict[str, int] = Field(default_factory=dict)


@runtime_checkable
class LanguageModelGateway(Protocol):
    """Protocol for language-model gateways."""

    async def complete_async(self, prompt: str, context: str, model_id: str) -> GatewayResponse:
        """Complete *prompt* with *context* prepended by the gateway as it sees fit."""
        ...
