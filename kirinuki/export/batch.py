"""Batch export pipeline using pyvips.

Pure functions, no Qt dependencies. Pages are processed strictly one at a
time; a page's decoded pixels are dropped before the next page is opened.
"""

from __future__ import annotations

import contextlib
import os
from collections.abc import Callable, Iterator, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from kirinuki.crop import denormalize, to_pixel_box
from kirinuki.logger import get_logger

from .options import JPEG_QUALITY, ExportOptions, ImageFormat

if TYPE_CHECKING:
    from kirinuki.app.page_registry import Page

_logger = get_logger("batch")

ProgressCallback = Callable[[float], None]

_pyvips: Any | None = None


def _get_pyvips_module() -> Any:
    global _pyvips
    if _pyvips is None:
        import pyvips  # type: ignore

        _pyvips = pyvips
    return _pyvips


class ExportError(Exception):
    """Base class for export failures."""


class OutputFolderError(ExportError):
    """The destination folder could not be created."""


class CropError(ExportError):
    """A crop rect covers no pixels of its source image."""


@dataclass
class ExportSummary:
    output_folder: Path
    saved: int = 0
    pages_failed: int = 0
    rects_failed: int = 0
    written: list[Path] = field(default_factory=list)
    # Set when the run was aborted before any page was processed
    error: str | None = None

    @property
    def failed(self) -> int:
        return self.pages_failed + self.rects_failed

    @property
    def ok(self) -> bool:
        return self.error is None and self.failed == 0

    @property
    def message(self) -> str:
        if self.error is not None:
            return f"Failed to create output folder: {self.error}"
        return f"Completed: {self.saved} images saved (Failed: {self.failed})"

    def __str__(self) -> str:
        return self.message

    def raise_for_status(self) -> None:
        if self.error is not None:
            raise OutputFolderError(self.message)


@contextlib.contextmanager
def decoded_image(path: str | Path) -> Iterator[Any]:
    """Decode a source image fully into memory for the duration of the block.

    Raises:
        pyvips.Error: If the file cannot be opened or decoded
    """
    pyvips = _get_pyvips_module()
    # Keep the operation cache from pinning decoded images across pages
    with contextlib.suppress(Exception):
        pyvips.cache_set_max(0)
        pyvips.cache_set_max_mem(0)
        pyvips.cache_set_max_files(0)

    image = pyvips.Image.new_from_file(str(path), access="sequential").copy_memory()
    try:
        yield image
    finally:
        del image


def crop_image(image: Any, crop: tuple[int, int, int, int]) -> Any:
    left, top, width, height = crop
    return image.crop(left, top, width, height)


def save_image(image: Any, output_path: str | Path, image_format: ImageFormat) -> None:
    """Encode `image` to `output_path`. JPEG at fixed quality, PNG with defaults."""
    if ImageFormat(image_format) is ImageFormat.JPEG:
        if image.hasalpha():
            image = image.flatten(background=[255, 255, 255])
        image.jpegsave(str(output_path), Q=JPEG_QUALITY)
    else:
        image.pngsave(str(output_path))


def _export_page(
    page: Page,
    output_folder: Path,
    options: ExportOptions,
    sequence: int,
    summary: ExportSummary,
) -> int:
    """Export all rects of one page and return the next sequence number.

    The decoded image only lives in this frame, so it is released on return.
    """
    try:
        with decoded_image(page.source_path) as image:
            width, height = image.width, image.height
            for crop_rect in page.crop_state.sorted_rects():
                try:
                    out_path = output_folder / options.make_filename(page.stem, sequence)
                    box = to_pixel_box(denormalize(crop_rect.rect, width, height), width, height)
                    if box is None:
                        raise CropError(f"crop {crop_rect.rect} is empty for image size {width}x{height}")
                    save_image(crop_image(image, box), out_path, options.format)
                except Exception as e:
                    summary.rects_failed += 1
                    _logger.warning("crop/write failed for %s (%s): %s", page.name, crop_rect.role.name, e)
                    continue
                sequence += 1
                summary.written.append(out_path)
                _logger.debug("written: %s", out_path)
    except Exception as e:
        summary.pages_failed += 1
        _logger.warning("decode failed for %s: %s", page.source_path, e, exc_info=True)
    return sequence


def export_batch(
    pages: Sequence[Page],
    source_folder: str | Path,
    options: ExportOptions,
    on_progress: ProgressCallback | None = None,
) -> ExportSummary:
    """Crop every rect of every page and write the results.

    `pages` must be a private copy (see `PageRegistry.snapshot`). Per-page and
    per-rect problems are counted in the summary, never raised.

    Args:
        pages: Pages in export order
        source_folder: Folder the pages were loaded from
        options: Format, naming and destination
        on_progress: Called once per page with the completed fraction (0..1]

    Returns:
        Summary with saved/failed counts
    """
    output_folder = options.resolve_output_folder(source_folder)
    summary = ExportSummary(output_folder=output_folder)

    try:
        os.makedirs(output_folder, exist_ok=True)
    except OSError as e:
        summary.error = e.strerror or str(e)
        _logger.error("cannot create output folder %s: %s", output_folder, e)
        return summary

    total = len(pages)
    sequence = 1
    _logger.info("export start: %d pages -> %s", total, output_folder)

    for index, page in enumerate(pages):
        sequence = _export_page(page, output_folder, options, sequence, summary)
        if on_progress is not None:
            on_progress((index + 1) / total)

    if total == 0 and on_progress is not None:
        on_progress(1.0)

    summary.saved = sequence - 1
    _logger.info("export done: %s", summary.message)
    return summary
