from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path

OUTPUT_SUBFOLDER = "Output"
DEFAULT_CUSTOM_PREFIX = "Image"
JPEG_QUALITY = 90


class ImageFormat(str, Enum):
    JPEG = "jpg"
    PNG = "png"

    @property
    def extension(self) -> str:
        return self.value


class FilenameMode(str, Enum):
    SEQUENCE = "sequence"
    ORIGINAL = "original"
    CUSTOM = "custom"
    ORIGINAL_AND_CUSTOM = "original-custom"


@dataclass(frozen=True, slots=True)
class ExportOptions:
    """Output format, naming strategy and destination for a batch export."""

    format: ImageFormat = ImageFormat.JPEG
    filename_mode: FilenameMode = FilenameMode.SEQUENCE
    custom_prefix: str = ""
    # None means "<source folder>/Output"
    output_folder: Path | None = None

    def resolve_output_folder(self, source_folder: str | Path) -> Path:
        if self.output_folder is not None:
            return Path(self.output_folder)
        return Path(source_folder) / OUTPUT_SUBFOLDER

    def make_filename(self, original_stem: str, sequence: int) -> str:
        """Build the output file name for one written crop.

        Args:
            original_stem: Source file name without extension
            sequence: Current global sequence number (1-based)
        """
        seq = f"{sequence:03d}"
        ext = ImageFormat(self.format).extension
        mode = FilenameMode(self.filename_mode)
        prefix = self.custom_prefix

        if mode is FilenameMode.SEQUENCE:
            return f"{seq}.{ext}"
        if mode is FilenameMode.ORIGINAL:
            return f"{original_stem}_{seq}.{ext}"
        if mode is FilenameMode.CUSTOM:
            return f"{prefix or DEFAULT_CUSTOM_PREFIX}_{seq}.{ext}"
        suffix = f"_{prefix}" if prefix else ""
        return f"{original_stem}{suffix}_{seq}.{ext}"
