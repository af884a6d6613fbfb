"""Per-page crop configuration.

Design:
- Rects are stored in normalized coordinates (0..1) relative to the full image.
- Each rect carries a role (primary/secondary); a state never holds two rects
  with the same role, and in single mode it holds at most the primary rect.
- Misuse (duplicate add, align without both roles, unknown id) is reported by
  return value, never raised.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum, IntEnum

from .geometry import NormalizedRect


class CropRole(IntEnum):
    # Value is the output order within a page.
    PRIMARY = 0
    SECONDARY = 1


class CropMode(str, Enum):
    SINGLE = "single"
    SPLIT = "split"


class AddResult(Enum):
    ADDED = "added"
    ALREADY_EXISTS = "already_exists"
    NOT_ALLOWED = "not_allowed"


class AlignResult(Enum):
    ALIGNED = "aligned"
    NOT_APPLICABLE = "not_applicable"


SINGLE_DEFAULT = NormalizedRect(0.1, 0.1, 0.8, 0.8)
SPLIT_DEFAULTS: dict[CropRole, NormalizedRect] = {
    CropRole.PRIMARY: NormalizedRect(0.05, 0.1, 0.4, 0.8),
    CropRole.SECONDARY: NormalizedRect(0.55, 0.1, 0.4, 0.8),
}


def _new_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True)
class CropRect:
    rect: NormalizedRect
    role: CropRole
    id: str = field(default_factory=_new_id)


class CropState:
    """Crop mode plus an ordered list of role-unique crop rects."""

    def __init__(self, mode: CropMode = CropMode.SINGLE, rects: list[CropRect] | None = None) -> None:
        self._mode = CropMode(mode)
        self._rects: list[CropRect] = []
        if rects is None:
            # Fresh state: default geometry for the mode
            self.update_mode(self._mode)
            return
        for r in rects:
            if self.rect_for_role(r.role) is not None:
                raise ValueError(f"duplicate crop role: {r.role.name}")
            if self._mode is CropMode.SINGLE and r.role is not CropRole.PRIMARY:
                raise ValueError("single mode holds only the primary rect")
            self._rects.append(r)

    def __repr__(self) -> str:
        return f"CropState(mode={self._mode.value}, rects={self._rects!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CropState):
            return NotImplemented
        return self._mode == other._mode and self._rects == other._rects

    @property
    def mode(self) -> CropMode:
        return self._mode

    @property
    def rects(self) -> tuple[CropRect, ...]:
        return tuple(self._rects)

    def copy(self) -> CropState:
        """Independent copy; rect ids are kept so selections stay meaningful."""
        return CropState(self._mode, [CropRect(r.rect, r.role, r.id) for r in self._rects])

    # ---- lookups ----
    def find(self, rect_id: str | None) -> CropRect | None:
        if rect_id is None:
            return None
        for r in self._rects:
            if r.id == rect_id:
                return r
        return None

    def rect_for_role(self, role: CropRole) -> CropRect | None:
        for r in self._rects:
            if r.role is role:
                return r
        return None

    def sorted_rects(self) -> list[CropRect]:
        """Rects in output order: primary before secondary."""
        return sorted(self._rects, key=lambda r: r.role)

    # ---- mutations ----
    def update_mode(self, new_mode: CropMode) -> None:
        mode = CropMode(new_mode)
        self._mode = mode
        primary = self.rect_for_role(CropRole.PRIMARY)
        if mode is CropMode.SINGLE:
            self._rects = [primary if primary is not None else CropRect(SINGLE_DEFAULT, CropRole.PRIMARY)]
            return

        secondary = self.rect_for_role(CropRole.SECONDARY)
        self._rects = [
            primary if primary is not None else CropRect(SPLIT_DEFAULTS[CropRole.PRIMARY], CropRole.PRIMARY),
            secondary if secondary is not None else CropRect(SPLIT_DEFAULTS[CropRole.SECONDARY], CropRole.SECONDARY),
        ]

    def add_rect(self, role: CropRole) -> AddResult:
        role = CropRole(role)
        if self.rect_for_role(role) is not None:
            return AddResult.ALREADY_EXISTS
        if self._mode is CropMode.SINGLE:
            if role is not CropRole.PRIMARY:
                return AddResult.NOT_ALLOWED
            self._rects.append(CropRect(SINGLE_DEFAULT, role))
        else:
            self._rects.append(CropRect(SPLIT_DEFAULTS[role], role))
        return AddResult.ADDED

    def remove_rect(self, rect_id: str) -> bool:
        target = self.find(rect_id)
        if target is None:
            return False
        self._rects.remove(target)
        return True

    def update_rect(self, rect_id: str, rect: NormalizedRect) -> bool:
        """Replace the geometry of an existing rect.

        Callers clamp first (`clamp_min_size` for resizes, `clamp_to_container`
        for moves); the value is stored as given.
        """
        target = self.find(rect_id)
        if target is None:
            return False
        target.rect = rect
        return True

    def align(self, to_right: bool) -> AlignResult:
        """Place the secondary rect right next to the primary one.

        The secondary takes the primary's y and size. The primary never moves.
        """
        primary = self.rect_for_role(CropRole.PRIMARY)
        secondary = self.rect_for_role(CropRole.SECONDARY)
        if primary is None or secondary is None:
            return AlignResult.NOT_APPLICABLE

        p = primary.rect
        x = p.max_x if to_right else p.min_x - p.width
        secondary.rect = NormalizedRect(x, p.y, p.width, p.height)
        return AlignResult.ALIGNED
