from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

from .export.options import ExportOptions, FilenameMode, ImageFormat
from .logger import get_logger

_logger = get_logger("settings")


def default_settings_path() -> str:
    base = os.getenv("KIRINUKI_CONFIG_DIR") or os.path.join(os.path.expanduser("~"), ".kirinuki")
    return os.path.join(base, "settings.json")


class SettingsManager:
    def __init__(self, settings_path: str):
        self.settings_path = settings_path
        self._settings: dict[str, Any] = {}
        self.load()

    DEFAULTS: dict[str, Any] = {
        "export_format": ImageFormat.JPEG.value,
        "filename_mode": FilenameMode.SEQUENCE.value,
        "custom_prefix": "",
        "output_folder": None,
    }

    def load(self) -> None:
        try:
            if os.path.exists(self.settings_path):
                with open(self.settings_path, encoding="utf-8") as f:
                    data = json.load(f)
                    if isinstance(data, dict):
                        self._settings = data
                        _logger.debug("settings loaded: %s", self.settings_path)
                        return
        except Exception as e:
            _logger.warning("settings load failed: %s", e)
        self._settings = {}

    def save(self) -> None:
        try:
            os.makedirs(os.path.dirname(self.settings_path), exist_ok=True)
            with open(self.settings_path, "w", encoding="utf-8") as f:
                json.dump(self._settings, f, ensure_ascii=False, indent=2)
            _logger.debug("settings saved: %s", self.settings_path)
        except Exception as e:
            _logger.error("settings save failed: %s", e)

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._settings:
            return self._settings[key]
        if default is not None:
            return default
        return self.DEFAULTS.get(key)

    def has(self, key: str) -> bool:
        return key in self._settings

    def set(self, key: str, value: Any) -> None:
        self._settings[key] = value
        self.save()

    @property
    def data(self) -> dict[str, Any]:
        return self._settings

    @property
    def last_source_dir(self) -> str | None:
        val = self.get("last_source_dir")
        return val if isinstance(val, str) and os.path.isdir(val) else None

    def remember_source_dir(self, folder: str | Path) -> None:
        self.set("last_source_dir", str(Path(folder).resolve()))

    def export_options(self) -> ExportOptions:
        """Build export options from stored values, falling back to defaults per field."""
        try:
            fmt = ImageFormat(self.get("export_format"))
        except ValueError:
            _logger.warning("saved export_format invalid: %s", self.get("export_format"))
            fmt = ImageFormat(self.DEFAULTS["export_format"])
        try:
            mode = FilenameMode(self.get("filename_mode"))
        except ValueError:
            _logger.warning("saved filename_mode invalid: %s", self.get("filename_mode"))
            mode = FilenameMode(self.DEFAULTS["filename_mode"])
        prefix = self.get("custom_prefix")
        out = self.get("output_folder")
        return ExportOptions(
            format=fmt,
            filename_mode=mode,
            custom_prefix=prefix if isinstance(prefix, str) else "",
            output_folder=Path(out) if isinstance(out, str) and out else None,
        )

    def store_export_options(self, options: ExportOptions) -> None:
        self._settings.update(
            {
                "export_format": ImageFormat(options.format).value,
                "filename_mode": FilenameMode(options.filename_mode).value,
                "custom_prefix": options.custom_prefix,
                "output_folder": str(options.output_folder) if options.output_folder is not None else None,
            }
        )
        self.save()
