"""Run gateway calls off the UI path and complete them on the UI loop.

A runner executes submitted callables and queues their outcomes; nothing is
applied to explorer state until the owning loop calls ``drain()``. This keeps
every state mutation on one thread while file-system calls may block.
"""

from __future__ import annotations

import logging
import threading
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Protocol

LOGGER = logging.getLogger(__name__)

CompletionHandler = Callable[["PendingCall"], None]


class PendingCall:
    """Handle for one submitted call; filled in when the loop drains it."""

    def __init__(self, label: str = "") -> None:
        self.label = label
        self.done = False
        self.value: Any = None
        self.error: BaseException | None = None

    @property
    def ok(self) -> bool:
        return self.done and self.error is None

    def result(self) -> Any:
        """Return the call's value, re-raising its error."""
        if not self.done:
            raise RuntimeError(f"call {self.label!r} has not completed")
        if self.error is not None:
            raise self.error
        return self.value

    def __repr__(self) -> str:
        state = "pending" if not self.done else ("failed" if self.error is not None else "ok")
        return f"PendingCall({self.label!r}, {state})"


@dataclass(frozen=True)
class _Completion:
    call: PendingCall
    value: Any
    error: BaseException | None
    on_done: CompletionHandler | None


def _run(job: Callable[[], Any]) -> tuple[Any, BaseException | None]:
    try:
        return job(), None
    except Exception as exc:
        return None, exc


def _apply(completion: _Completion) -> None:
    call = completion.call
    call.value = completion.value
    call.error = completion.error
    call.done = True
    if completion.error is not None:
        LOGGER.debug("call %s failed: %s", call.label, completion.error)
    if completion.on_done is not None:
        completion.on_done(call)


class TaskRunner(Protocol):
    def submit(
        self,
        job: Callable[[], Any],
        on_done: CompletionHandler | None = None,
        label: str = "",
    ) -> PendingCall: ...

    def drain(self) -> int: ...

    def has_pending(self) -> bool: ...


class InlineTaskRunner:
    """Run jobs at submit time but defer completions until ``drain()``.

    Deterministic: the window between "issued" and "resolved" is exactly the
    time until the next drain.
    """

    def __init__(self) -> None:
        self._completions: deque[_Completion] = deque()

    def submit(
        self,
        job: Callable[[], Any],
        on_done: CompletionHandler | None = None,
        label: str = "",
    ) -> PendingCall:
        call = PendingCall(label)
        value, error = _run(job)
        self._completions.append(_Completion(call, value, error, on_done))
        return call

    def drain(self) -> int:
        """Apply queued completions, including ones queued by handlers."""
        applied = 0
        while self._completions:
            _apply(self._completions.popleft())
            applied += 1
        return applied

    def has_pending(self) -> bool:
        return bool(self._completions)


class ThreadedTaskRunner:
    """Single background worker executing jobs in submission order."""

    def __init__(self, name: str = "foldering-file-ops") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._jobs: Queue[tuple[Callable[[], Any], PendingCall, CompletionHandler | None] | None] = Queue()
        self._results: Queue[_Completion] = Queue()
        self._outstanding = 0
        self._worker: threading.Thread | None = None

    def _work(self) -> None:
        while True:
            item = self._jobs.get()
            if item is None:
                return
            job, call, on_done = item
            value, error = _run(job)
            self._results.put(_Completion(call, value, error, on_done))

    def submit(
        self,
        job: Callable[[], Any],
        on_done: CompletionHandler | None = None,
        label: str = "",
    ) -> PendingCall:
        call = PendingCall(label)
        with self._lock:
            self._outstanding += 1
            if self._worker is None:
                self._worker = threading.Thread(target=self._work, name=self._name, daemon=True)
                self._worker.start()
        self._jobs.put((job, call, on_done))
        return call

    def drain(self) -> int:
        """Apply every completion that has arrived so far."""
        applied = 0
        while True:
            try:
                completion = self._results.get_nowait()
            except Empty:
                break
            with self._lock:
                self._outstanding -= 1
            _apply(completion)
            applied += 1
        return applied

    def has_pending(self) -> bool:
        with self._lock:
            return self._outstanding > 0

    def close(self) -> None:
        with self._lock:
            worker = self._worker
            self._worker = None
        if worker is not None:
            self._jobs.put(None)
            worker.join(timeout=1.0)


__all__ = [
    "PendingCall",
    "TaskRunner",
    "InlineTaskRunner",
    "ThreadedTaskRunner",
]
