"""Border synthesis.

:func:`add_border` enlarges a region by ``2 * border_width`` and always
returns a mask, for both shapes, so compositing has one code path:

Circular mask zones (``outer = min(W, H) / 2``, ``inner = outer - b``)::

    dist > outer + 0.5            -> 0                          corners
    outer - 0.5 < dist            -> a * (outer + 0.5 - dist)   AA outer edge
    inner < dist <= outer - 0.5   -> a                          border ring
    dist <= inner                 -> 1                          content

Rectangular mask: ``a`` everywhere, ``1`` over the content rectangle.

The region also carries a boolean ``content`` map (``dist <= inner`` or the
content rectangle). Content is told apart by geometry, not by mask value,
because an opaque border has the same mask value as the content.

``a`` is the border colour alpha. The content is opaque in the mask; any
global opacity is applied later by the compositor.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from inset_pipe.extract import ExtractedRegion
from inset_pipe.geometry import Color, Shape
from inset_pipe.resample import radial_distance


@dataclass(frozen=True)
class BorderedRegion:
    pixels: list[np.ndarray]
    width: int
    height: int
    mask: np.ndarray
    shape: Shape = Shape.RECTANGULAR
    border_width: int = 0
    content: np.ndarray | None = None

    @property
    def channels(self) -> int:
        return len(self.pixels)


def ring_mask(width: int, height: int, border_width: float, border_alpha: float) -> np.ndarray:
    dist = radial_distance(width, height)
    outer = min(width, height) / 2
    inner = outer - border_width
    m = np.where(
        dist > outer + 0.5,
        0.0,
        np.where(
            dist > outer - 0.5,
            border_alpha * (outer + 0.5 - dist),
            np.where(dist > inner, border_alpha, 1.0),
        ),
    )
    return m.astype(np.float32)


def frame_mask(width: int, height: int, border_width: int, border_alpha: float) -> np.ndarray:
    m = np.full((height, width), border_alpha, dtype=np.float32)
    b = int(border_width)
    m[b : height - b, b : width - b] = 1.0
    return m


def content_map(width: int, height: int, border_width: int, shape: Shape) -> np.ndarray:
    """Pixels inside the border. Without a border the whole block is content."""
    b = int(border_width)
    if b <= 0:
        return np.ones((height, width), dtype=bool)
    if shape is Shape.CIRCULAR:
        return radial_distance(width, height) <= min(width, height) / 2 - b
    inside = np.zeros((height, width), dtype=bool)
    inside[b : height - b, b : width - b] = True
    return inside


def add_border(region: ExtractedRegion, border_width: int, color: Color) -> BorderedRegion:
    b = int(border_width)
    if b < 0:
        raise ValueError(f"border_width must be >= 0 (got {border_width})")

    w, h = region.width, region.height
    out_w, out_h = w + 2 * b, h + 2 * b
    src_mask = region.mask

    pixels: list[np.ndarray] = []
    for c, src in enumerate(region.pixels):
        border_val = np.float32(color.channel(c))
        canvas = np.full((out_h, out_w), border_val, dtype=np.float32)
        content = np.asarray(src, dtype=np.float32)
        if src_mask is not None:
            content = content * src_mask + border_val * (1.0 - src_mask)
        canvas[b : b + h, b : b + w] = np.clip(content, 0.0, 1.0)
        pixels.append(canvas)

    if region.shape is Shape.CIRCULAR:
        mask = ring_mask(out_w, out_h, b, color.a)
    else:
        mask = frame_mask(out_w, out_h, b, color.a)

    return BorderedRegion(
        pixels=pixels,
        width=out_w,
        height=out_h,
        mask=mask,
        shape=region.shape,
        border_width=b,
        content=content_map(out_w, out_h, b, region.shape),
    )
