"""Application layer: page registry and bindable state objects.

- `PageRegistry` owns the pages, their crop states and the selection.
- State QObjects under `kirinuki.app.state` expose progress to a UI.
"""

from .page_registry import FolderScanError, Page, PageRegistry, RegistrySnapshot

__all__ = ["FolderScanError", "Page", "PageRegistry", "RegistrySnapshot"]
