"""
Single-shot deferred results.

A DeferredResult holds at most one terminal outcome, either a success
value or an EthereumError, and notifies any number of observers exactly
once. Observers registered after resolution fire immediately, from the
registering call, with the stored outcome.

Example:
    >>> result = DeferredResult[int]()
    >>> result.on_success(print).on_error(lambda e: print("failed:", e))
    >>> result.resolve_success(42)
    42
    >>> result.on_success(lambda v: print("late", v))
    late 42
"""

from __future__ import annotations

import asyncio
import threading
from dataclasses import dataclass
from typing import Any, Callable, Coroutine, Generic, List, Optional, Set, TypeVar, Union

from hope_ethereum.errors import EthereumError
from hope_ethereum.models import ResultState
from hope_ethereum.utils.logging import get_logger

T = TypeVar("T")
U = TypeVar("U")

SuccessCallback = Callable[[T], Any]
ErrorCallback = Callable[[EthereumError], Any]
CompletionCallback = Callable[[], Any]

_logger = get_logger(__name__)

# The event loop only keeps weak references to tasks.
_background_tasks: Set["asyncio.Task[Any]"] = set()


def spawn(coro: Coroutine[Any, Any, Any]) -> "asyncio.Task[Any]":
    """Schedule a coroutine on the running loop and keep it alive until done."""
    task = asyncio.get_running_loop().create_task(coro)
    _background_tasks.add(task)
    task.add_done_callback(_background_tasks.discard)
    return task


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome."""

    value: T


@dataclass(frozen=True)
class Err:
    """Failed outcome."""

    error: EthereumError

    @property
    def message(self) -> str:
        return self.error.message


Outcome = Union[Ok[T], Err]


def as_error(error: Union[str, BaseException]) -> EthereumError:
    """Coerce a message or foreign exception into an EthereumError."""
    if isinstance(error, EthereumError):
        return error
    if isinstance(error, BaseException):
        wrapped = EthereumError(str(error) or type(error).__name__, details={"cause": type(error).__name__})
        wrapped.__cause__ = error
        return wrapped
    return EthereumError(str(error))


class DeferredResult(Generic[T]):
    """
    Eventual success value of type T, or an error.

    The operation that creates a DeferredResult is the only code that
    resolves it. Resolution is guarded by a lock so observers may be
    registered from other threads; observers are invoked outside the lock,
    in registration order, on the thread that resolves (or, for late
    registrations, on the registering thread).
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcome: Optional[Outcome] = None
        self._success_observers: List[SuccessCallback] = []
        self._error_observers: List[ErrorCallback] = []
        self._completion_observers: List[CompletionCallback] = []

    # ------------------------------------------------------------------
    # Inspection
    # ------------------------------------------------------------------
    @property
    def state(self) -> ResultState:
        outcome = self._outcome
        if outcome is None:
            return ResultState.PENDING
        if isinstance(outcome, Ok):
            return ResultState.SUCCEEDED
        return ResultState.FAILED

    @property
    def done(self) -> bool:
        return self._outcome is not None

    @property
    def outcome(self) -> Optional[Outcome]:
        return self._outcome

    @property
    def value(self) -> Optional[T]:
        """Success value, or None while pending or after a failure."""
        outcome = self._outcome
        return outcome.value if isinstance(outcome, Ok) else None

    @property
    def error(self) -> Optional[EthereumError]:
        """Error, or None while pending or after a success."""
        outcome = self._outcome
        return outcome.error if isinstance(outcome, Err) else None

    def unwrap(self) -> T:
        """
        Return the success value or raise the stored error.

        Raises:
            EthereumError: The error the result failed with
            RuntimeError: If the result is still pending
        """
        outcome = self._outcome
        if outcome is None:
            raise RuntimeError("DeferredResult is still pending")
        if isinstance(outcome, Err):
            raise outcome.error
        return outcome.value

    # ------------------------------------------------------------------
    # Subscription
    # ------------------------------------------------------------------
    def on_success(self, callback: SuccessCallback) -> "DeferredResult[T]":
        """Call ``callback(value)`` once the result succeeds."""
        with self._lock:
            outcome = self._outcome
            if outcome is None:
                self._success_observers.append(callback)
                return self
        if isinstance(outcome, Ok):
            self._notify(callback, outcome.value)
        return self

    def on_error(self, callback: ErrorCallback) -> "DeferredResult[T]":
        """Call ``callback(error)`` once the result fails."""
        with self._lock:
            outcome = self._outcome
            if outcome is None:
                self._error_observers.append(callback)
                return self
        if isinstance(outcome, Err):
            self._notify(callback, outcome.error)
        return self

    def on_completion(self, callback: CompletionCallback) -> "DeferredResult[T]":
        """Call ``callback()`` once the result succeeds or fails."""
        with self._lock:
            if self._outcome is None:
                self._completion_observers.append(callback)
                return self
        self._notify(callback)
        return self

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------
    def resolve_success(self, value: T) -> bool:
        """
        Resolve with a success value.

        Returns:
            True if this call resolved the result, False if it was already
            terminal (logged as a defect in the caller).
        """
        return self._resolve(Ok(value))

    def resolve_error(self, error: Union[str, BaseException]) -> bool:
        """
        Resolve with an error.

        Args:
            error: EthereumError, foreign exception (wrapped) or message

        Returns:
            True if this call resolved the result, False otherwise.
        """
        return self._resolve(Err(as_error(error)))

    def _resolve(self, outcome: Outcome, *, quiet: bool = False) -> bool:
        with self._lock:
            if self._outcome is not None:
                if quiet:
                    return False
                _logger.error(
                    "DeferredResult resolved more than once; ignoring",
                    extra={
                        "result": repr(self),
                        "ignored": type(outcome).__name__,
                    },
                    stack_info=True,
                )
                return False
            self._outcome = outcome
            success_observers = self._success_observers
            error_observers = self._error_observers
            completion_observers = self._completion_observers
            self._success_observers = []
            self._error_observers = []
            self._completion_observers = []

        if isinstance(outcome, Ok):
            for callback in success_observers:
                self._notify(callback, outcome.value)
        else:
            for callback in error_observers:
                self._notify(callback, outcome.error)
        for callback in completion_observers:
            self._notify(callback)
        return True

    def _notify(self, callback: Callable[..., Any], *args: Any) -> None:
        # One failing observer must not starve the others.
        try:
            callback(*args)
        except Exception:
            _logger.exception(
                "DeferredResult observer raised",
                extra={"result": repr(self), "observer": getattr(callback, "__qualname__", repr(callback))},
            )

    # ------------------------------------------------------------------
    # Composition
    # ------------------------------------------------------------------
    def map(self, fn: Callable[[T], U]) -> "DeferredResult[U]":
        """
        Derive a result by transforming the success value.

        Errors pass through unchanged. If ``fn`` raises, the derived result
        fails with that exception.
        """
        derived: DeferredResult[U] = DeferredResult()

        def _on_success(value: T) -> None:
            try:
                mapped = fn(value)
            except Exception as e:
                derived.resolve_error(e)
                return
            derived.resolve_success(mapped)

        self.on_success(_on_success)
        self.on_error(derived.resolve_error)
        return derived

    async def wait(self, timeout: Optional[float] = None) -> T:
        """
        Await resolution from a coroutine.

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            The success value

        Raises:
            EthereumError: The error the result failed with
            asyncio.TimeoutError: If ``timeout`` elapses first; the
                result itself is left untouched
        """
        if self._outcome is None:
            loop = asyncio.get_running_loop()
            settled = loop.create_future()

            def _settle() -> None:
                if not settled.done():
                    settled.set_result(None)

            self.on_completion(lambda: loop.call_soon_threadsafe(_settle))
            await asyncio.wait_for(settled, timeout=timeout)
        return self.unwrap()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(state={self.state.value})"
