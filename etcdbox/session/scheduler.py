"""Background workers for connect/search network calls.

Each submitted task runs on its own daemon thread; completed work is handed
back through one queue and applied by whoever drains it (the coordinating
thread), so tree state is only ever mutated there.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from queue import Empty, Queue

from ..errors import SessionStateError


class TaskKind(Enum):
    CONNECT = "connect"
    SEARCH = "search"


class CancellationToken:
    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()


@dataclass(frozen=True)
class TaskRequest:
    """One background job for a root."""

    request_id: int
    root_name: str
    kind: TaskKind
    prefix: str = ""


@dataclass(frozen=True)
class TaskHandle:
    request: TaskRequest
    token: CancellationToken

    def cancel(self) -> None:
        self.token.cancel()

    @property
    def cancelled(self) -> bool:
        return self.token.cancelled


@dataclass(frozen=True)
class TaskResult:
    """Completed job: exactly one of ``value``/``error`` is meaningful."""

    handle: TaskHandle
    value: object = None
    error: BaseException | None = None

    @property
    def request(self) -> TaskRequest:
        return self.handle.request

    @property
    def cancelled(self) -> bool:
        return self.handle.cancelled


class SessionTaskScheduler:
    """Runs at most one in-flight task per root; roots run independently.

    A root stays busy until its result has been drained, so the coordinator
    always applies results for one root in submission order.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._in_flight: dict[str, TaskHandle] = {}
        self._next_request_id = 1
        self._results: Queue[TaskResult] = Queue()

    def is_busy(self, root_name: str) -> bool:
        with self._lock:
            return root_name in self._in_flight

    def submit(
        self,
        root_name: str,
        kind: TaskKind,
        work: Callable[[], object],
        *,
        prefix: str = "",
    ) -> TaskHandle:
        with self._lock:
            if root_name in self._in_flight:
                raise SessionStateError(f"root {root_name!r} already has a task in flight")
            request = TaskRequest(
                request_id=self._next_request_id,
                root_name=root_name,
                kind=kind,
                prefix=prefix,
            )
            self._next_request_id += 1
            handle = TaskHandle(request=request, token=CancellationToken())
            self._in_flight[root_name] = handle

        worker = threading.Thread(
            target=self._worker,
            args=(handle, work),
            name=f"etcdbox-{kind.value}-{root_name}",
            daemon=True,
        )
        worker.start()
        return handle

    def _worker(self, handle: TaskHandle, work: Callable[[], object]) -> None:
        try:
            value = work()
        except Exception as exc:
            self._results.put(TaskResult(handle=handle, error=exc))
            return
        self._results.put(TaskResult(handle=handle, value=value))

    def _release(self, result: TaskResult) -> None:
        with self._lock:
            if self._in_flight.get(result.request.root_name) is result.handle:
                del self._in_flight[result.request.root_name]

    def drain_results(self) -> list[TaskResult]:
        """Drain all completed results without blocking."""
        out: list[TaskResult] = []
        while True:
            try:
                result = self._results.get_nowait()
            except Empty:
                break
            self._release(result)
            out.append(result)
        return out

    def wait_result(self, timeout: float | None = None) -> TaskResult | None:
        """Block for the next completed result; ``None`` on timeout."""
        try:
            result = self._results.get(timeout=timeout)
        except Empty:
            return None
        self._release(result)
        return result


__all__ = [
    "TaskKind",
    "CancellationToken",
    "TaskRequest",
    "TaskHandle",
    "TaskResult",
    "SessionTaskScheduler",
]
