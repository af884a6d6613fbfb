"""Background export runner.

`ExportWorker` runs `export_batch` on its own QThread. Its signals reach
receivers on the GUI thread through queued connections, so the worker never
waits on the UI; queued signals from one thread keep their order, so the last
`progress` always arrives before `completed`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING

from PySide6.QtCore import QObject, QThread, Signal

from kirinuki.logger import get_logger

from .batch import ExportSummary, export_batch
from .options import ExportOptions

if TYPE_CHECKING:
    from kirinuki.app.page_registry import Page, RegistrySnapshot
    from kirinuki.app.state.export_state import ExportState

_logger = get_logger("export_worker")


class ExportWorker(QThread):
    """Worker thread that runs one sequential export."""

    progress = Signal(float)  # fraction of pages done
    completed = Signal(str)  # summary text
    summary_ready = Signal(object)  # ExportSummary

    def __init__(self, pages: Sequence[Page], source_folder: str | Path, options: ExportOptions):
        super().__init__()
        # Private copies: the registry may be edited while we run
        self.pages = [p.copy() for p in pages]
        self.source_folder = Path(source_folder)
        self.options = options
        self.summary: ExportSummary | None = None

    def run(self) -> None:
        try:
            summary = export_batch(self.pages, self.source_folder, self.options, self.progress.emit)
        except Exception as ex:  # keep worker resilient
            _logger.error("export crashed: %s", ex, exc_info=True)
            summary = ExportSummary(
                output_folder=self.options.resolve_output_folder(self.source_folder),
                error=str(ex),
            )
        self.summary = summary
        self.summary_ready.emit(summary)
        self.completed.emit(summary.message)


class ExportController(QObject):
    """Starts exports and relays their progress; allows one run at a time."""

    progress = Signal(float)
    finished = Signal(str)
    summary_ready = Signal(object)

    def __init__(self, state: ExportState | None = None, parent: QObject | None = None):
        super().__init__(parent)
        self._state = state
        self._worker: ExportWorker | None = None
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    def start_snapshot(self, snapshot: RegistrySnapshot) -> bool:
        if snapshot.source_folder is None:
            _logger.debug("export requested without a source folder")
            return False
        return self.start(snapshot.pages, snapshot.source_folder, snapshot.export_options)

    def start(self, pages: Sequence[Page], source_folder: str | Path, options: ExportOptions) -> bool:
        """Start an export. Returns False if one is already running."""
        if self._running:
            _logger.debug("export already running; request rejected")
            return False

        worker = ExportWorker(pages, source_folder, options)
        worker.progress.connect(self._on_progress)
        worker.summary_ready.connect(self._on_summary_ready)
        worker.completed.connect(self._on_worker_completed)

        previous = self._worker
        if previous is not None:
            # Already reported completion; let its run() return
            previous.wait()
        self._worker = worker
        self._running = True
        if self._state is not None:
            self._state._set_running(True)
            self._state._set_progress(0.0)
            self._state._set_status_message("Processing...")
        worker.start()
        return True

    def wait(self, msecs: int = 5000) -> bool:
        """Block until the worker thread exits (tests and CLI shutdown)."""
        worker = self._worker
        if worker is None:
            return True
        return worker.wait(msecs)

    def _on_progress(self, fraction: float) -> None:
        if self._state is not None:
            self._state._set_progress(fraction)
        self.progress.emit(fraction)

    def _on_summary_ready(self, summary: ExportSummary) -> None:
        self.summary_ready.emit(summary)

    def _on_worker_completed(self, message: str) -> None:
        self._running = False
        if self._state is not None:
            self._state._set_running(False)
            self._state._set_status_message(message)
        _logger.info("export finished: %s", message)
        self.finished.emit(message)
