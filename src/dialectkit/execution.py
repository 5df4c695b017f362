"""
Cancellable execution context threaded through every blocking call.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager
from typing import Generator, Protocol

from .errors import ExecutionCancelledError
from .utils import get_logger


class Cancellable(Protocol):
    def cancel(self) -> None: ...


class Execution:
    """
    One in-flight logical operation.

    Providers call :meth:`running` around each backend round trip. A
    :meth:`cancel` from another thread flags the execution and cancels every
    statement registered at that moment, so nothing keeps running on the
    backend once the blocked call returns.
    """

    def __init__(self, *, timeout: float | None = None, label: str | None = None) -> None:
        if timeout is not None and timeout <= 0:
            raise ValueError("timeout must be positive")
        self.timeout = timeout
        self.label = label or "execution"
        self.logger = get_logger("execution")
        self._lock = threading.Lock()
        self._cancelled = threading.Event()
        self._timed_out = False
        self._running: list[Cancellable] = []
        self._timer: threading.Timer | None = None

    def __enter__(self) -> "Execution":
        self.start()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def is_cancelled(self) -> bool:
        return self._cancelled.is_set()

    @property
    def timed_out(self) -> bool:
        return self._timed_out

    def start(self) -> None:
        """Arm the timeout timer, if one was requested."""
        if self.timeout is None or self._timer is not None:
            return
        self._timer = threading.Timer(self.timeout, self._on_timeout)
        self._timer.daemon = True
        self._timer.start()

    def close(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def cancel(self) -> None:
        with self._lock:
            if self._cancelled.is_set():
                return
            self._cancelled.set()
            running = list(self._running)
        self.logger.info("Cancelling %s (%s statement(s) running)", self.label, len(running))
        for target in running:
            try:
                target.cancel()
            except Exception:
                self.logger.debug("Statement cancel failed for %s", self.label, exc_info=True)

    def check_cancelled(self) -> None:
        if self._cancelled.is_set():
            raise ExecutionCancelledError(self._reason())

    @contextmanager
    def running(self, target: Cancellable) -> Generator[None, None, None]:
        """
        Register ``target`` as running a statement for the duration of the block.
        """

        with self._lock:
            self.check_cancelled()
            self._running.append(target)
        try:
            yield
        except ExecutionCancelledError:
            raise
        except Exception as exc:
            if self._cancelled.is_set():
                raise ExecutionCancelledError(self._reason()) from exc
            raise
        finally:
            with self._lock:
                self._running.remove(target)
        self.check_cancelled()

    def _on_timeout(self) -> None:
        self._timed_out = True
        self.cancel()

    def _reason(self) -> str:
        if self._timed_out:
            return f"{self.label} timed out after {self.timeout}s"
        return f"{self.label} was cancelled"
