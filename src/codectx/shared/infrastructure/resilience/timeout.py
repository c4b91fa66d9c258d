"""Timeout Resilience Pattern."""

import asyncio
from typing import Any

from codectx.shared.domain.exceptions import OperationTimeoutError
from codectx.shared.infrastructure.logging import get_logger

logger = get_logger(__name__)


async def with_timeout_async(
    coro,
    timeout_seconds: float,
    operation_name: str = "operation",
    error_cls: type[OperationTimeoutError] = OperationTimeoutError,
) -> Any:
    """
    Execute a coroutine with a timeout.

    Raises:
        error_cls: When the deadline passes (OperationTimeoutError by default)
    """
    try:
        return await asyncio.wait_for(coro, timeout=timeout_seconds)
    except asyncio.TimeoutError:
        logger.warning(
            "operation_timeout",
            operation=operation_name,
            timeout=timeout_seconds,
        )
        raise error_cls(operation_name, timeout_seconds)
