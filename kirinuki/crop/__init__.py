"""Crop package public API.

Crop geometry and per-page crop state, exposed as `kirinuki.crop`.
Keep this module lightweight: no Qt imports.
"""

from .crop_state import (
    AddResult,
    AlignResult,
    CropMode,
    CropRect,
    CropRole,
    CropState,
)
from .geometry import (
    MIN_FRACTION,
    NormalizedRect,
    PixelRect,
    clamp_min_size,
    clamp_to_container,
    denormalize,
    nudge,
    to_pixel_box,
)

__all__ = [
    "MIN_FRACTION",
    "AddResult",
    "AlignResult",
    "CropMode",
    "CropRect",
    "CropRole",
    "CropState",
    "NormalizedRect",
    "PixelRect",
    "clamp_min_size",
    "clamp_to_container",
    "denormalize",
    "nudge",
    "to_pixel_box",
]
