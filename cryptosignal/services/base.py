"""
Service Contracts and Errors

Engine components (market data, signal orchestration) share one async
shape: a name for log lines, one entry point and a reachability check.
Failures are reported as ServiceError subclasses tagged with a code.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Awaitable, Generic, Optional, TypeVar

InputT = TypeVar("InputT")
OutputT = TypeVar("OutputT")
ResultT = TypeVar("ResultT")


class BaseService(ABC, Generic[InputT, OutputT]):
    """
    Async engine component turning an InputT into an OutputT.

    health_check() reports upstream reachability only; components that
    degrade to fallbacks stay usable when it returns False.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Component name used in log lines and error prefixes."""
        pass

    @abstractmethod
    async def execute(self, input_data: InputT) -> OutputT:
        """Run the component on one request."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """True when the upstreams this component depends on answer."""
        pass


class ServiceError(Exception):
    """Base exception for service errors."""

    code = "SERVICE_ERROR"

    def __init__(self, service_name: str, message: str, details: Optional[dict] = None):
        self.service_name = service_name
        self.message = message
        self.details = details or {}
        super().__init__(f"[{service_name}] {message}")


class UnknownStrategyError(ServiceError):
    """Strategy key is not part of the panel. Caller defect - always propagated."""

    code = "UNKNOWN_STRATEGY"

    def __init__(self, service_name: str, strategy_key: str, valid_keys: list[str]):
        self.strategy_key = strategy_key
        self.valid_keys = list(valid_keys)
        super().__init__(
            service_name,
            f"Unknown strategy: {strategy_key}. "
            f"Available strategies: {', '.join(self.valid_keys)}",
            {"code": self.code, "valid_keys": self.valid_keys},
        )


class UpstreamUnavailableError(ServiceError):
    """Market feed or sentiment service failed or timed out."""

    code = "UPSTREAM_UNAVAILABLE"


class InvalidResponseError(ServiceError):
    """Sentiment/AI payload did not pass validation."""

    code = "INVALID_RESPONSE"


class InvalidMarketDataError(ServiceError):
    """Market feed returned a non-finite, non-positive or inconsistent quote."""

    code = "INVALID_MARKET_DATA"


async def run_cancellable(
    awaitable: Awaitable[ResultT],
    cancel_event: Optional[asyncio.Event],
    service_name: str,
    operation: str,
) -> ResultT:
    """
    Await an upstream call unless the caller's cancel event fires first.

    The losing side is cancelled. A fired event raises
    UpstreamUnavailableError, so callers fall back as on any upstream failure.
    """
    if cancel_event is None:
        return await awaitable

    work = asyncio.ensure_future(awaitable)
    cancelled = asyncio.ensure_future(cancel_event.wait())
    try:
        await asyncio.wait({work, cancelled}, return_when=asyncio.FIRST_COMPLETED)
    finally:
        pending = [task for task in (work, cancelled) if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    if cancel_event.is_set():
        if not work.cancelled():
            # Result or error of the abandoned call is discarded
            work.exception()
        raise UpstreamUnavailableError(service_name, f"{operation} cancelled")
    return work.result()
