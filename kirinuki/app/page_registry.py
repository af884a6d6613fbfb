"""Ordered collection of source pages and the current selection.

The registry is owned and mutated by the interactive side only. An export run
gets a private copy through `snapshot()`.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field, replace
from pathlib import Path

from kirinuki.crop import CropRect, CropState, clamp_to_container, nudge
from kirinuki.export.options import ExportOptions
from kirinuki.logger import get_logger

_logger = get_logger("page_registry")

IMAGE_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp"}


class FolderScanError(OSError):
    """Raised when a source folder cannot be listed."""


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class Page:
    source_path: Path
    crop_state: CropState = field(default_factory=CropState)
    id: str = field(default_factory=_new_id)

    @property
    def name(self) -> str:
        return self.source_path.name

    @property
    def stem(self) -> str:
        return self.source_path.stem

    def copy(self) -> Page:
        return Page(self.source_path, self.crop_state.copy(), self.id)


@dataclass(frozen=True, slots=True)
class RegistrySnapshot:
    """Immutable view of what an export run needs."""

    pages: tuple[Page, ...]
    source_folder: Path | None
    export_options: ExportOptions


def scan_image_files(folder: str | Path) -> list[Path]:
    """List supported images in `folder` (non-recursive), sorted by file name.

    Raises:
        FolderScanError: If the directory cannot be listed
    """
    p = Path(folder)
    try:
        children = list(p.iterdir())
    except OSError as e:
        raise FolderScanError(e.errno, e.strerror or str(e), str(p)) from e

    files = [c for c in children if c.suffix.lower() in IMAGE_EXTENSIONS and c.is_file()]
    files.sort(key=lambda c: c.name)
    return files


class PageRegistry:
    def __init__(self, export_options: ExportOptions | None = None) -> None:
        self.source_folder: Path | None = None
        self.pages: list[Page] = []
        self.selected_page_id: str | None = None
        self.selected_crop_id: str | None = None
        self.export_options = export_options or ExportOptions()
        self.status_message = "Please select a folder"

    # ---- folder loading ----
    def load_from_folder(self, path: str | Path) -> int:
        """Replace the page list with the images found in `path`.

        Every page gets its own default crop state. On failure the previous
        pages and selection are kept.

        Returns:
            Number of pages loaded

        Raises:
            FolderScanError: If the directory cannot be listed
        """
        folder = Path(path)
        try:
            files = scan_image_files(folder)
        except FolderScanError as e:
            self.status_message = f"Error: {e.strerror or e}"
            _logger.error("folder scan failed: %s: %s", folder, e)
            raise

        self.source_folder = folder
        self.pages = [Page(f) for f in files]
        self.selected_crop_id = None
        if self.pages:
            self.selected_page_id = self.pages[0].id
            self.status_message = f"{len(self.pages)} images loaded"
        else:
            self.selected_page_id = None
            self.status_message = "No image files found"
        _logger.info("loaded %d pages from %s", len(self.pages), folder)
        return len(self.pages)

    # ---- lookups ----
    def index_of(self, page_id: str | None) -> int | None:
        if page_id is None:
            return None
        for i, page in enumerate(self.pages):
            if page.id == page_id:
                return i
        return None

    def page(self, page_id: str | None) -> Page | None:
        idx = self.index_of(page_id)
        return None if idx is None else self.pages[idx]

    def selected_page(self) -> Page | None:
        return self.page(self.selected_page_id)

    def selected_crop(self) -> CropRect | None:
        page = self.selected_page()
        if page is None:
            return None
        return page.crop_state.find(self.selected_crop_id)

    # ---- selection ----
    def select_page(self, page_id: str) -> bool:
        if self.index_of(page_id) is None:
            return False
        if page_id != self.selected_page_id:
            self.selected_page_id = page_id
            self.selected_crop_id = None
        return True

    def select_next(self) -> None:
        idx = self.index_of(self.selected_page_id)
        if idx is not None and idx < len(self.pages) - 1:
            self.select_page(self.pages[idx + 1].id)

    def select_previous(self) -> None:
        idx = self.index_of(self.selected_page_id)
        if idx is not None and idx > 0:
            self.select_page(self.pages[idx - 1].id)

    def select_crop(self, rect_id: str | None) -> bool:
        """Select a rect on the current page; None clears the selection."""
        if rect_id is None:
            self.selected_crop_id = None
            return True
        page = self.selected_page()
        if page is None or page.crop_state.find(rect_id) is None:
            return False
        self.selected_crop_id = rect_id
        return True

    # ---- crop editing ----
    def remove_crop(self, page_id: str, rect_id: str) -> bool:
        """Remove a rect from a page, clearing the crop selection if it pointed at it."""
        page = self.page(page_id)
        if page is None:
            return False
        removed = page.crop_state.remove_rect(rect_id)
        if removed and self.selected_crop_id == rect_id:
            self.selected_crop_id = None
        return removed

    def nudge_selected_crop(self, dx: int, dy: int, image_width: int, image_height: int) -> bool:
        """Move the selected rect by whole pixels of the displayed image."""
        page = self.selected_page()
        target = self.selected_crop()
        if page is None or target is None or image_width <= 0 or image_height <= 0:
            return False
        moved = clamp_to_container(nudge(target.rect, dx, dy, image_width, image_height))
        return page.crop_state.update_rect(target.id, moved)

    def apply_settings_to_all(self, source_page_id: str) -> bool:
        """Copy one page's crop state by value onto every page, itself included."""
        source = self.page(source_page_id)
        if source is None:
            return False
        template = source.crop_state.copy()
        for page in self.pages:
            page.crop_state = template.copy()
        # Rects on the selected page now carry the template's ids.
        if self.selected_crop() is None:
            self.selected_crop_id = None
        _logger.debug("applied crop settings of %s to %d pages", source.name, len(self.pages))
        return True

    def update_export_options(self, **changes) -> ExportOptions:
        self.export_options = replace(self.export_options, **changes)
        return self.export_options

    def snapshot(self) -> RegistrySnapshot:
        return RegistrySnapshot(
            pages=tuple(p.copy() for p in self.pages),
            source_folder=self.source_folder,
            export_options=self.export_options,
        )
