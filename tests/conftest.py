"""Pytest configuration.

The export worker tests run a real QThread, so a single `QCoreApplication` is
created for the entire session as early as possible and shut down at the end.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

_APP: Any | None = None


def pytest_configure(config) -> None:  # noqa: ARG001
    """Ensure a Qt application exists before collecting/running tests."""

    # Import lazily so non-Qt environments can still import this conftest.
    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    global _APP

    app = QCoreApplication.instance()
    # Keep a strong ref so it isn't GC'd mid-session.
    _APP = app if app is not None else QCoreApplication([])


def pytest_sessionfinish(session, exitstatus) -> None:  # noqa: ARG001
    """Attempt a clean Qt shutdown to avoid lingering threads at interpreter exit."""

    try:
        from PySide6.QtCore import QCoreApplication
    except ImportError:
        return

    app = QCoreApplication.instance()
    if app is None:
        return

    app.quit()
    app.processEvents()


@pytest.fixture
def make_image():
    """Write an RGB test image and return its path.

    Each quadrant gets its own color so crops can be checked by pixel value.
    """
    np = pytest.importorskip("numpy")
    Image = pytest.importorskip("PIL.Image")

    def _make(path: Path, width: int = 100, height: int = 80) -> Path:
        arr = np.zeros((height, width, 3), dtype=np.uint8)
        arr[: height // 2, : width // 2] = (255, 0, 0)
        arr[: height // 2, width // 2 :] = (0, 255, 0)
        arr[height // 2 :, : width // 2] = (0, 0, 255)
        arr[height // 2 :, width // 2 :] = (255, 255, 255)
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.fromarray(arr).save(path)
        return path

    return _make
