"""
Read queries against the chain.

A QueryOperation is a DeferredResult resolved by exactly one RPC round
trip. It must be issued from inside a running event loop; the request runs
as a background task and the caller is never blocked.

Example:
    >>> op = QueryOperation.issue(backend, FunctionMessage("symbol", output_types=["string"]), token)
    >>> op.on_success(print).on_error(lambda e: print("read failed:", e))
"""

from __future__ import annotations

import asyncio
from typing import Any, Awaitable, Callable, Optional, TypeVar

from hope_ethereum.abi import FunctionMessage
from hope_ethereum.backend import RpcBackend
from hope_ethereum.deferred import DeferredResult, spawn
from hope_ethereum.errors import (
    EthereumError,
    InconclusiveResultError,
    TransportError,
    ValidationError,
)
from hope_ethereum.utils.logging import get_logger
from hope_ethereum.utils.validation import validate_address

T = TypeVar("T")

_logger = get_logger(__name__)


class QueryOperation(DeferredResult[T]):
    """
    Eventual result of a single read request.

    Attributes:
        description: What is being read, used in messages and logs
    """

    def __init__(self, description: str = "query") -> None:
        super().__init__()
        self.description = description
        self._task: Optional[asyncio.Task[Any]] = None

    @classmethod
    def run(
        cls,
        fetch: Callable[[], Awaitable[T]],
        *,
        description: str = "query",
    ) -> "QueryOperation[T]":
        """
        Start a query from an awaitable factory.

        ``fetch`` performs the round trip and returns the decoded value.
        A None value is inconclusive and resolves to an error.
        """
        op: QueryOperation[T] = cls(description)
        op._task = spawn(op._execute(fetch))
        return op

    @classmethod
    def issue(
        cls,
        backend: RpcBackend,
        function: FunctionMessage,
        target_address: str,
        sender_address: Optional[str] = None,
    ) -> "QueryOperation[Any]":
        """
        Call a contract function and decode its output.

        Args:
            backend: RPC backend to send the eth_call through
            function: Function message to encode
            target_address: Contract address
            sender_address: Optional ``from`` address of the call

        Returns:
            QueryOperation resolving to the decoded value. Invalid addresses
            and unencodable arguments resolve it to a ValidationError before
            any request is sent.
        """
        try:
            validate_address(target_address, "target_address")
            if sender_address is not None:
                validate_address(sender_address, "sender_address")
            data = function.encode()
        except ValidationError as e:
            return cls.failed(e, description=function.signature)

        async def _fetch() -> Any:
            raw = await backend.call(data, target_address, sender_address)
            return function.decode_output(raw)

        return cls.run(_fetch, description=function.signature)

    @classmethod
    def failed(cls, error: EthereumError, *, description: str = "query") -> "QueryOperation[Any]":
        """Query that failed before any request was sent."""
        op: QueryOperation[Any] = cls(description)
        op.resolve_error(error)
        return op

    @property
    def task(self) -> Optional[asyncio.Task[Any]]:
        return self._task

    async def _execute(self, fetch: Callable[[], Awaitable[T]]) -> None:
        try:
            value = await fetch()
        except EthereumError as e:
            self.resolve_error(e)
            return
        except asyncio.CancelledError:
            self.resolve_error(EthereumError(f"{self.description} cancelled", code="CANCELLED"))
            raise
        except Exception as e:
            _logger.debug(
                "Query transport failure",
                extra={"query": self.description, "error": str(e)},
            )
            self.resolve_error(TransportError(str(e) or type(e).__name__))
            return

        if value is None:
            self.resolve_error(InconclusiveResultError(f"{self.description} returned no data"))
            return
        self.resolve_success(value)

    def __repr__(self) -> str:
        return f"QueryOperation({self.description!r}, state={self.state.value})"
