"""Normalized rectangle math.

Pure functions, no Qt dependencies. All rects are expressed as fractions of an
image's width/height with a top-left origin.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

MIN_FRACTION = 0.01


@dataclass(frozen=True, slots=True)
class NormalizedRect:
    """Normalized rect (0..1) in (x, y, width, height) form.

    `x + width` and `y + height` may exceed 1; export crops whatever pixel
    rectangle results.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def min_x(self) -> float:
        return self.x

    @property
    def min_y(self) -> float:
        return self.y

    @property
    def max_x(self) -> float:
        return self.x + self.width

    @property
    def max_y(self) -> float:
        return self.y + self.height

    def moved_to(self, x: float, y: float) -> NormalizedRect:
        return NormalizedRect(float(x), float(y), self.width, self.height)


@dataclass(frozen=True, slots=True)
class PixelRect:
    """Rect in source-image pixels, unrounded."""

    x: float
    y: float
    width: float
    height: float


def denormalize(rect: NormalizedRect, container_width: float, container_height: float) -> PixelRect:
    """Scale a normalized rect to a container. Exact float math, no rounding."""
    return PixelRect(
        x=rect.x * container_width,
        y=rect.y * container_height,
        width=rect.width * container_width,
        height=rect.height * container_height,
    )


def clamp_min_size(rect: NormalizedRect, min_fraction: float = MIN_FRACTION) -> NormalizedRect:
    """Force width/height up to `min_fraction`.

    A negative size (a drag past the opposite edge) is replaced by the
    minimum; the origin is never moved, so the rect does not flip.
    """
    w = rect.width if rect.width >= min_fraction else min_fraction
    h = rect.height if rect.height >= min_fraction else min_fraction
    if w == rect.width and h == rect.height:
        return rect
    return NormalizedRect(rect.x, rect.y, w, h)


def clamp_to_container(rect: NormalizedRect) -> NormalizedRect:
    """Clamp the origin of a moved rect so it stays inside [0..1].

    Size is preserved. A rect wider/taller than the container gets a negative
    upper bound and is pinned at 0.
    """
    x = max(0.0, min(rect.x, 1.0 - rect.width))
    y = max(0.0, min(rect.y, 1.0 - rect.height))
    return rect.moved_to(x, y)


def _round_half_up(v: float) -> int:
    return math.floor(v + 0.5)


def to_pixel_box(rect: PixelRect, image_width: int, image_height: int) -> tuple[int, int, int, int] | None:
    """Round a pixel rect to whole pixels and intersect it with the image.

    Each edge is rounded to the nearest pixel independently, halves up.

    Returns:
        (left, top, width, height), or None if nothing of the image is covered.
    """
    left = max(0, _round_half_up(rect.x))
    top = max(0, _round_half_up(rect.y))
    right = min(int(image_width), _round_half_up(rect.x + rect.width))
    bottom = min(int(image_height), _round_half_up(rect.y + rect.height))
    if right <= left or bottom <= top:
        return None
    return left, top, right - left, bottom - top


def nudge(rect: NormalizedRect, dx: int, dy: int, image_width: int, image_height: int) -> NormalizedRect:
    """Move a rect by whole source-image pixels (arrow-key step).

    No clamping is applied; callers clamp explicitly.
    """
    if image_width <= 0 or image_height <= 0:
        return rect
    return rect.moved_to(rect.x + dx / image_width, rect.y + dy / image_height)
