import argparse
import os
import sys
from pathlib import Path

from PySide6.QtCore import QCoreApplication

from kirinuki.app.page_registry import FolderScanError, PageRegistry
from kirinuki.app.state.export_state import ExportState
from kirinuki.crop import AlignResult, CropMode
from kirinuki.export.batch import ExportSummary
from kirinuki.export.options import FilenameMode, ImageFormat
from kirinuki.export.worker import ExportController
from kirinuki.logger import get_logger
from kirinuki.settings_manager import SettingsManager, default_settings_path

EXIT_OK = 0
EXIT_PARTIAL = 1
EXIT_ERROR = 2


def _apply_cli_logging_options(argv: list[str]) -> list[str]:
    """Map --log-level/--log-cats onto env vars and strip them from argv."""
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--log-level", help="Set log level")
    parser.add_argument("--log-cats", help="Set log categories")
    args, remaining = parser.parse_known_args(argv)
    if args.log_level:
        os.environ["KIRINUKI_LOG_LEVEL"] = args.log_level
    if args.log_cats:
        os.environ["KIRINUKI_LOG_CATS"] = args.log_cats
    return remaining


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="kirinuki", description="Crop scanned pages and export the regions.")
    parser.add_argument("folder", help="Folder containing jpg/jpeg/png/webp pages")
    parser.add_argument("--mode", choices=[m.value for m in CropMode], default=CropMode.SINGLE.value)
    parser.add_argument("--align", choices=["left", "right"], help="Place the second frame next to the first")
    parser.add_argument("--format", choices=[f.value for f in ImageFormat], help="Output encoding")
    parser.add_argument("--filename-mode", choices=[m.value for m in FilenameMode], help="Output naming")
    parser.add_argument("--prefix", help="Custom text for custom naming modes")
    parser.add_argument("--output", help="Output folder (default: <folder>/Output)")
    parser.add_argument("--settings", default=None, help="Settings file path")
    parser.add_argument("--save-settings", action="store_true", help="Remember the export options")
    return parser


def run(argv: list[str] | None = None) -> int:
    """Command line entrypoint: load a folder, apply one crop layout to all pages, export."""
    if argv is None:
        argv = sys.argv[1:]
    args = build_parser().parse_args(_apply_cli_logging_options(list(argv)))
    logger = get_logger("main")

    settings = SettingsManager(args.settings or default_settings_path())
    registry = PageRegistry(settings.export_options())

    changes = {}
    if args.format:
        changes["format"] = ImageFormat(args.format)
    if args.filename_mode:
        changes["filename_mode"] = FilenameMode(args.filename_mode)
    if args.prefix is not None:
        changes["custom_prefix"] = args.prefix
    if args.output:
        changes["output_folder"] = Path(args.output)
    if changes:
        registry.update_export_options(**changes)
    if args.save_settings:
        settings.store_export_options(registry.export_options)

    try:
        count = registry.load_from_folder(args.folder)
    except FolderScanError:
        print(registry.status_message, file=sys.stderr)
        return EXIT_ERROR
    settings.remember_source_dir(args.folder)
    print(registry.status_message)
    if count == 0:
        return EXIT_OK

    first = registry.pages[0]
    first.crop_state.update_mode(CropMode(args.mode))
    if args.align and first.crop_state.align(to_right=args.align == "right") is AlignResult.NOT_APPLICABLE:
        logger.warning("align skipped: both frames are required")
    registry.apply_settings_to_all(first.id)

    app = QCoreApplication.instance() or QCoreApplication([sys.argv[0]])
    state = ExportState()
    controller = ExportController(state)
    result: list[ExportSummary] = []

    state.percentChanged.connect(lambda pct: print(f"\r{pct:3d}%", end="", flush=True))
    controller.summary_ready.connect(lambda v: result.append(v))
    controller.finished.connect(lambda _msg: app.quit())

    if not controller.start_snapshot(registry.snapshot()):
        return EXIT_ERROR
    app.exec()
    controller.wait()
    print()

    summary = result[0] if result else None
    print(state.statusMessage)
    if summary is None or summary.error is not None:
        return EXIT_ERROR
    return EXIT_OK if summary.ok else EXIT_PARTIAL


if __name__ == "__main__":
    sys.exit(run())
