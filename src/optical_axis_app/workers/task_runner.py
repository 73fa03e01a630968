"""Running generation requests off the render thread."""
from __future__ import annotations

import traceback
from typing import Any, Callable

from loguru import logger
from PyQt6.QtCore import QObject, QRunnable, QThreadPool, pyqtSignal


class TaskSignals(QObject):
    """Signals emitted back on the GUI thread."""

    finished = pyqtSignal(object)
    failed = pyqtSignal(str)


class FunctionTask(QRunnable):
    """Wrap a callable for execution in the Qt thread pool."""

    def __init__(self, label: str, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> None:
        super().__init__()
        self.label = label
        self.fn = fn
        self.args = args
        self.kwargs = kwargs
        self.signals = TaskSignals()

    def run(self) -> None:
        logger.debug("Task started: {}", self.label)
        try:
            result = self.fn(*self.args, **self.kwargs)
        except Exception as exc:  # noqa: BLE001
            logger.debug("Task {} raised:\n{}", self.label, traceback.format_exc())
            self.signals.failed.emit(str(exc))
        else:
            self.signals.finished.emit(result)


class TaskRunner:
    """Keeps submitted tasks alive until they report back."""

    def __init__(self, max_threads: int | None = None) -> None:
        self._pool = QThreadPool.globalInstance()
        if max_threads is not None:
            self._pool.setMaxThreadCount(max_threads)
        self._active: set[FunctionTask] = set()

    def submit(
        self,
        task: FunctionTask,
        on_success: Callable[[Any], None],
        on_failure: Callable[[str], None],
    ) -> None:
        self._active.add(task)

        def _finished(result: Any, t: FunctionTask = task) -> None:
            self._active.discard(t)
            on_success(result)

        def _failed(message: str, t: FunctionTask = task) -> None:
            self._active.discard(t)
            logger.error("Task {} failed: {}", t.label, message)
            on_failure(message)

        task.signals.finished.connect(_finished)
        task.signals.failed.connect(_failed)
        self._pool.start(task)
