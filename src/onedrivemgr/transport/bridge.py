"""Blocking handoff of one asynchronous response to a caller thread."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future
from typing import Generic, Optional, TypeVar

from onedrivemgr.errors import InternalConsistencyError, InterruptedWaitError

logger = logging.getLogger(__name__)

T = TypeVar("T")

_thread_state = threading.local()


def mark_network_thread() -> None:
    """Executor initializer: tag the current thread as a network worker."""
    _thread_state.network = True


def is_network_thread() -> bool:
    return getattr(_thread_state, "network", False)


class ResponseBridge(Generic[T]):
    """
    Single-assignment slot for the outcome of exactly one async request.

    The request's completion callback stores a result or an error and
    signals once; `wait()` blocks the caller until then. Completing twice
    is an error. A cancelled request, or an explicit `interrupt()`, makes
    `wait()` raise InterruptedWaitError instead of returning.
    """

    def __init__(self, future: Optional[Future] = None) -> None:
        self._future = future
        self._lock = threading.Lock()
        self._done = threading.Event()
        self._completed = False
        self._interrupted = False
        self._result: Optional[T] = None
        self._error: Optional[BaseException] = None

    @classmethod
    def attach(cls, future: Future) -> ResponseBridge[T]:
        """Bridge an already submitted future."""
        bridge: ResponseBridge[T] = cls(future)
        future.add_done_callback(bridge._on_done)
        return bridge

    def done(self) -> bool:
        return self._done.is_set()

    def set_result(self, value: T) -> None:
        if not self._try_complete(value, None):
            raise InternalConsistencyError("ResponseBridge completed more than once")

    def set_error(self, error: BaseException) -> None:
        if not self._try_complete(None, error):
            raise InternalConsistencyError("ResponseBridge completed more than once")

    def interrupt(self) -> bool:
        """Wake the waiter with InterruptedWaitError. False if already completed."""
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            self._interrupted = True
        self._done.set()
        return True

    def cancel(self) -> None:
        """Abandon the request; a response arriving later is discarded."""
        if self._future is not None:
            self._future.cancel()
        self.interrupt()

    def wait(self) -> T:
        """
        Block until the response is available and return it.

        Raises:
            InternalConsistencyError: when called on a network worker thread.
            InterruptedWaitError: when the request was cancelled or interrupted.
            Any error the request completed with.
        """
        if is_network_thread():
            raise InternalConsistencyError(
                "ResponseBridge.wait() must not block a network worker thread"
            )

        self._done.wait()

        if self._interrupted:
            raise InterruptedWaitError("Wait for an asynchronous response was interrupted")
        if self._error is not None:
            raise self._error
        return self._result  # type: ignore[return-value]

    def _try_complete(self, value: Optional[T], error: Optional[BaseException]) -> bool:
        with self._lock:
            if self._completed:
                return False
            self._completed = True
            self._result = value
            self._error = error
        self._done.set()
        return True

    def _on_done(self, future: Future) -> None:
        if future.cancelled():
            self.interrupt()
            return

        error = future.exception()
        if error is not None:
            accepted = self._try_complete(None, error)
        else:
            accepted = self._try_complete(future.result(), None)

        if not accepted:
            logger.debug("Discarding response that arrived after interruption")
