from __future__ import annotations

from pathlib import Path

import pytest

from kirinuki.app.page_registry import FolderScanError, PageRegistry, scan_image_files
from kirinuki.crop import CropMode, CropRole, NormalizedRect
from kirinuki.export.options import FilenameMode, ImageFormat


def _touch(folder: Path, *names: str) -> None:
    folder.mkdir(parents=True, exist_ok=True)
    for name in names:
        (folder / name).write_bytes(b"x")


def test_load_filters_and_sorts(tmp_path: Path) -> None:
    _touch(tmp_path, "b.jpg", "c.gif", "a.png")
    registry = PageRegistry()

    count = registry.load_from_folder(tmp_path)

    assert count == 2
    assert [p.name for p in registry.pages] == ["a.png", "b.jpg"]
    assert registry.source_folder == tmp_path
    assert registry.status_message == "2 images loaded"


def test_load_extensions_case_insensitive_and_non_recursive(tmp_path: Path) -> None:
    _touch(tmp_path, "X.JPEG", "y.WebP", "notes.txt", "z.Png")
    _touch(tmp_path / "sub", "inner.jpg")
    (tmp_path / "folder.jpg").mkdir()

    files = scan_image_files(tmp_path)

    assert [f.name for f in files] == ["X.JPEG", "y.WebP", "z.Png"]


def test_load_selects_first_page(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg", "2.jpg")
    registry = PageRegistry()

    registry.load_from_folder(tmp_path)

    assert registry.selected_page_id == registry.pages[0].id
    assert registry.selected_crop_id is None


def test_load_empty_folder_clears_selection(tmp_path: Path) -> None:
    _touch(tmp_path / "full", "1.jpg")
    (tmp_path / "empty").mkdir()
    registry = PageRegistry()
    registry.load_from_folder(tmp_path / "full")

    assert registry.load_from_folder(tmp_path / "empty") == 0
    assert registry.selected_page_id is None
    assert registry.status_message == "No image files found"


def test_load_failure_keeps_previous_state(tmp_path: Path) -> None:
    _touch(tmp_path / "ok", "1.jpg", "2.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path / "ok")
    pages = list(registry.pages)
    selected = registry.selected_page_id

    with pytest.raises(FolderScanError):
        registry.load_from_folder(tmp_path / "missing")

    assert registry.pages == pages
    assert registry.selected_page_id == selected
    assert registry.source_folder == tmp_path / "ok"
    assert registry.status_message.startswith("Error:")


def test_each_page_has_independent_crop_state(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg", "2.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)

    registry.pages[0].crop_state.update_mode(CropMode.SPLIT)

    assert registry.pages[0].crop_state is not registry.pages[1].crop_state
    assert registry.pages[1].crop_state.mode is CropMode.SINGLE
    assert len(registry.pages[1].crop_state.rects) == 1


def test_apply_settings_to_all_copies_by_value(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg", "2.jpg", "3.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    source = registry.pages[1]
    source.crop_state.update_mode(CropMode.SPLIT)
    source.crop_state.align(to_right=True)

    assert registry.apply_settings_to_all(source.id) is True

    for page in registry.pages:
        assert page.crop_state == source.crop_state
    # Editing one page afterwards does not leak into the others
    first = registry.pages[0].crop_state
    first.update_rect(first.rects[0].id, NormalizedRect(0.0, 0.0, 0.5, 0.5))
    assert registry.pages[2].crop_state.rects[0].rect == NormalizedRect(0.1, 0.1, 0.8, 0.8)


def test_apply_settings_to_all_unknown_id_is_noop(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    before = registry.pages[0].crop_state.copy()

    assert registry.apply_settings_to_all("missing") is False
    assert registry.pages[0].crop_state == before


def test_select_next_and_previous_do_not_wrap(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg", "2.jpg", "3.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    ids = [p.id for p in registry.pages]

    registry.select_previous()
    assert registry.selected_page_id == ids[0]

    registry.select_next()
    registry.select_next()
    assert registry.selected_page_id == ids[2]

    registry.select_next()
    assert registry.selected_page_id == ids[2]

    registry.select_previous()
    assert registry.selected_page_id == ids[1]


def test_select_next_without_selection_is_noop() -> None:
    registry = PageRegistry()

    registry.select_next()
    registry.select_previous()

    assert registry.selected_page_id is None


def test_select_crop_must_exist_on_selected_page(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg", "2.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    other_rect = registry.pages[1].crop_state.rects[0]
    own_rect = registry.pages[0].crop_state.rects[0]

    assert registry.select_crop(other_rect.id) is False
    assert registry.select_crop(own_rect.id) is True
    assert registry.selected_crop() is own_rect


def test_changing_page_clears_crop_selection(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg", "2.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    registry.select_crop(registry.pages[0].crop_state.rects[0].id)

    registry.select_next()

    assert registry.selected_crop_id is None
    assert registry.selected_crop() is None


def test_remove_crop_clears_selection(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    page = registry.pages[0]
    page.crop_state.update_mode(CropMode.SPLIT)
    primary = page.crop_state.rect_for_role(CropRole.PRIMARY)
    secondary = page.crop_state.rect_for_role(CropRole.SECONDARY)
    registry.select_crop(primary.id)

    assert registry.remove_crop(page.id, secondary.id) is True
    assert registry.selected_crop_id == primary.id

    assert registry.remove_crop(page.id, primary.id) is True
    assert registry.selected_crop_id is None
    assert registry.remove_crop(page.id, primary.id) is False


def test_nudge_selected_crop(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)
    rect = registry.pages[0].crop_state.rects[0]

    assert registry.nudge_selected_crop(1, 0, 100, 100) is False

    registry.select_crop(rect.id)
    assert registry.nudge_selected_crop(5, -3, 100, 100) is True
    assert rect.rect.x == pytest.approx(0.15)
    assert rect.rect.y == pytest.approx(0.07)

    # Clamped at the container edge
    registry.nudge_selected_crop(0, -50, 100, 100)
    assert rect.rect.y == 0.0


def test_snapshot_is_isolated_from_later_edits(tmp_path: Path) -> None:
    _touch(tmp_path, "1.jpg")
    registry = PageRegistry()
    registry.load_from_folder(tmp_path)

    snap = registry.snapshot()
    page = registry.pages[0]
    page.crop_state.update_rect(page.crop_state.rects[0].id, NormalizedRect(0.0, 0.0, 0.1, 0.1))
    registry.update_export_options(format=ImageFormat.PNG)

    assert snap.pages[0].crop_state.rects[0].rect == NormalizedRect(0.1, 0.1, 0.8, 0.8)
    assert snap.export_options.format is ImageFormat.JPEG
    assert snap.source_folder == tmp_path


def test_update_export_options_replaces_fields() -> None:
    registry = PageRegistry()

    opts = registry.update_export_options(filename_mode=FilenameMode.CUSTOM, custom_prefix="Book")

    assert opts.filename_mode is FilenameMode.CUSTOM
    assert opts.custom_prefix == "Book"
    assert registry.export_options is opts
