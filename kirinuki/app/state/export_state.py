from __future__ import annotations

from PySide6.QtCore import Property, QObject, Signal


class ExportState(QObject):
    """Bindable state for a running batch export.

    Mutated only by `ExportController` on the GUI thread; views bind to the
    read-only properties.
    """

    runningChanged = Signal(bool)
    progressChanged = Signal(float)
    percentChanged = Signal(int)
    statusMessageChanged = Signal(str)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._running = False
        self._progress = 0.0
        self._status_message = ""

    # ---- read-only properties ----
    def _get_running(self) -> bool:
        return bool(self._running)

    running = Property(bool, _get_running, notify=runningChanged)  # type: ignore[arg-type]

    def _get_progress(self) -> float:
        return float(self._progress)

    progress = Property(float, _get_progress, notify=progressChanged)  # type: ignore[arg-type]

    def _get_percent(self) -> int:
        return int(self._progress * 100)

    percent = Property(int, _get_percent, notify=percentChanged)  # type: ignore[arg-type]

    def _get_status_message(self) -> str:
        return str(self._status_message)

    statusMessage = Property(str, _get_status_message, notify=statusMessageChanged)  # type: ignore[arg-type]

    # ---- internal mutation helpers (called by the controller) ----
    def _set_running(self, running: bool) -> None:
        v = bool(running)
        if v == self._running:
            return
        self._running = v
        self.runningChanged.emit(v)

    def _set_progress(self, fraction: float) -> None:
        p = float(max(0.0, min(1.0, float(fraction))))
        if p == self._progress:
            return
        old_percent = self._get_percent()
        self._progress = p
        self.progressChanged.emit(p)
        if self._get_percent() != old_percent:
            self.percentChanged.emit(self._get_percent())

    def _set_status_message(self, message: str) -> None:
        m = str(message)
        if m == self._status_message:
            return
        self._status_message = m
        self.statusMessageChanged.emit(m)
