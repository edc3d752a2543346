from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, QThread, Signal, Slot

from welfaredesk.app.request_runner import FailureCallback, SuccessCallback, Task


class _RequestWorker(QObject):
    succeeded = Signal(int, object)
    failed = Signal(int, object)
    finished = Signal(int)

    def __init__(self, request_id: int, task: Task) -> None:
        super().__init__()
        self._request_id = request_id
        self._task = task

    @Slot()
    def run(self) -> None:
        try:
            result = self._task()
        except Exception as exc:
            self.failed.emit(self._request_id, exc)
        else:
            self.succeeded.emit(self._request_id, result)
        self.finished.emit(self._request_id)


class QtRequestRunner(QObject):
    """Runs each API call on its own ``QThread``.

    The runner lives on the UI thread, so the worker's signals are queued and
    both callbacks always execute on the UI thread.
    """

    def __init__(
        self,
        parent: Optional[QObject] = None,
        *,
        logger: logging.Logger | None = None,
    ) -> None:
        super().__init__(parent)
        self._logger = logger or logging.getLogger("welfaredesk.requests")
        self._next_request_id = 0
        self._callbacks: dict[int, tuple[SuccessCallback, FailureCallback]] = {}
        self._threads: dict[int, tuple[QThread, _RequestWorker]] = {}

    def run(
        self,
        task: Task,
        on_success: SuccessCallback,
        on_failure: FailureCallback,
    ) -> None:
        self._next_request_id += 1
        request_id = self._next_request_id
        worker = _RequestWorker(request_id, task)
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.succeeded.connect(self._handle_succeeded)
        worker.failed.connect(self._handle_failed)
        worker.finished.connect(self._handle_finished)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._callbacks[request_id] = (on_success, on_failure)
        self._threads[request_id] = (thread, worker)
        thread.start()

    def shutdown(self, *, timeout_ms: int = 3000) -> None:
        """Drop pending callbacks and wait for running requests to return."""
        self._callbacks.clear()
        for thread, _worker in list(self._threads.values()):
            thread.quit()
            if not thread.wait(max(0, int(timeout_ms))):
                self._logger.warning("Request thread did not stop within %s ms.", timeout_ms)
        self._threads.clear()

    @Slot(int, object)
    def _handle_succeeded(self, request_id: int, result: object) -> None:
        callbacks = self._callbacks.pop(request_id, None)
        if callbacks is None:
            return
        callbacks[0](result)

    @Slot(int, object)
    def _handle_failed(self, request_id: int, exc: object) -> None:
        callbacks = self._callbacks.pop(request_id, None)
        if callbacks is None:
            return
        if not isinstance(exc, Exception):
            exc = RuntimeError(str(exc))
        callbacks[1](exc)

    @Slot(int)
    def _handle_finished(self, request_id: int) -> None:
        self._threads.pop(request_id, None)
