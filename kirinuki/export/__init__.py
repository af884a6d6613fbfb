"""Export package public API.

Pure-backend export helpers, exposed as `kirinuki.export`.

Keep this module lightweight: do NOT import the Qt worker here.
For background runs import it directly:
    - `from kirinuki.export.worker import ExportController`
"""

from .batch import CropError, ExportError, ExportSummary, OutputFolderError, export_batch
from .options import ExportOptions, FilenameMode, ImageFormat

__all__ = [
    "CropError",
    "ExportError",
    "ExportOptions",
    "ExportSummary",
    "FilenameMode",
    "ImageFormat",
    "OutputFolderError",
    "export_batch",
]
