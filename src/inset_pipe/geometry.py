"""Geometry and style primitives shared by every pipeline stage.

Keep this module free of NumPy: these are plain values handed in by the
interactive shell (a drawn rectangle, a shape choice, a colour) and passed
between stages unchanged.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import math


def round_half_up(v: float) -> int:
    """Round to the nearest integer, halves away from -inf (pixel snapping)."""
    return int(math.floor(v + 0.5))


class Shape(str, Enum):
    """Inset shape. Every stage branches on this closed set."""

    RECTANGULAR = "Rectangular"
    CIRCULAR = "Circular"

    @classmethod
    def parse(cls, value: "Shape | str | None") -> "Shape":
        """Accept enum members and UI labels (case-insensitive).

        ``None`` and empty strings resolve to :attr:`RECTANGULAR`, matching how
        metadata without a shape card is interpreted.
        """
        if isinstance(value, Shape):
            return value
        s = str(value or "").strip().strip("'\"").lower()
        if s in {"circular", "circle"}:
            return cls.CIRCULAR
        if s in {"", "rectangular", "rect", "rectangle"}:
            return cls.RECTANGULAR
        raise ValueError(f"Unknown inset shape: {value!r}")

    @property
    def is_circular(self) -> bool:
        return self is Shape.CIRCULAR


@dataclass(frozen=True)
class Point:
    x: float
    y: float


@dataclass(frozen=True)
class Position:
    """Integer top-left placement of an inset."""

    x: int
    y: int


@dataclass(frozen=True)
class Rect:
    """Axis-aligned integer box, half-open: ``[x0, x1) x [y0, y1)``."""

    x0: int
    y0: int
    x1: int
    y1: int

    @classmethod
    def from_xywh(cls, x: int, y: int, width: int, height: int) -> "Rect":
        return cls(int(x), int(y), int(x) + int(width), int(y) + int(height))

    @property
    def width(self) -> int:
        return self.x1 - self.x0

    @property
    def height(self) -> int:
        return self.y1 - self.y0

    @property
    def is_empty(self) -> bool:
        return self.x1 <= self.x0 or self.y1 <= self.y0

    @property
    def center(self) -> Point:
        return Point((self.x0 + self.x1) / 2, (self.y0 + self.y1) / 2)

    def intersection(self, other: "Rect") -> "Rect":
        """Overlap of two boxes; disjoint boxes yield an empty rect."""
        x0 = max(self.x0, other.x0)
        y0 = max(self.y0, other.y0)
        x1 = min(self.x1, other.x1)
        y1 = min(self.y1, other.y1)
        if x1 <= x0 or y1 <= y0:
            return Rect(x0, y0, x0, y0)
        return Rect(x0, y0, x1, y1)

    def translated(self, dx: int, dy: int) -> "Rect":
        return Rect(self.x0 + dx, self.y0 + dy, self.x1 + dx, self.y1 + dy)

    def contains_rect(self, other: "Rect") -> bool:
        return (
            other.x0 >= self.x0
            and other.y0 >= self.y0
            and other.x1 <= self.x1
            and other.y1 <= self.y1
        )


@dataclass(frozen=True)
class Color:
    """RGB in [0, 1] plus alpha (opacity) in [0, 1]."""

    r: float
    g: float
    b: float
    a: float = 1.0

    @classmethod
    def from_rgb255(cls, r: int, g: int, b: int, opacity_pct: float = 100.0) -> "Color":
        """Build from 8-bit components and an opacity percentage (UI units)."""
        return cls(r / 255.0, g / 255.0, b / 255.0, float(opacity_pct) / 100.0)

    def channel(self, c: int) -> float:
        """Value written to channel ``c``; channels past RGB get 1.0."""
        if c == 0:
            return self.r
        if c == 1:
            return self.g
        if c == 2:
            return self.b
        return 1.0

    def with_alpha(self, a: float) -> "Color":
        return Color(self.r, self.g, self.b, float(a))
