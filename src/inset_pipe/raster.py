"""Anti-aliased primitives drawn directly into a destination buffer.

Coverage model
--------------
Coverage is evaluated at pixel centres ``(x + 0.5, y + 0.5)``.

- Thick line: ``d`` = distance to the closest point of the segment.
  ``1`` for ``d <= t/2 - 0.5``, ``t/2 + 0.5 - d`` up to ``t/2 + 0.5``, else 0.
- Ring: ``d`` = distance to the centre; the minimum of the outer falloff
  ``outer + 0.5 - d`` and the inner falloff ``d - (inner - 0.5)``, both
  clipped to [0, 1].

Blending uses ``alpha = color.a * coverage`` on the RGB channels only
(``min(3, channels)``). Lines and rings read and write only covered pixels
of the destination, so drawing off-canvas is a no-op.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
import logging
import math

import numpy as np

from inset_pipe.buffers import SampleTarget
from inset_pipe.geometry import Color, Point, Rect, Shape, round_half_up


log = logging.getLogger(__name__)

# Above this alpha a box fill is written without reading the destination.
OPAQUE_ALPHA = 0.99
# Segments shorter than this are drawn as a dot.
MIN_SEGMENT = 1e-3


@dataclass(frozen=True)
class SourceAnchors:
    """Angles (radians) of the two connection-line anchors on a circle.

    0 points right, pi points left; y grows downwards.
    """

    left: float = math.pi
    right: float = 0.0

    def dragged(self, which: str, angle: float) -> "SourceAnchors":
        """Move one anchor; the other stays diametrically opposite."""
        if which == "left":
            return replace(self, left=angle, right=angle + math.pi)
        if which == "right":
            return replace(self, right=angle, left=angle + math.pi)
        raise ValueError(f"Unknown anchor {which!r} (expected 'left' or 'right')")


def line_coverage(px, py, x0: float, y0: float, x1: float, y1: float, thickness: float):
    """Coverage of a thick segment at points ``(px, py)`` (broadcast)."""
    half = thickness / 2
    dx = x1 - x0
    dy = y1 - y0
    length = math.hypot(dx, dy)
    if length < MIN_SEGMENT:
        length, dx, dy = 1.0, 1.0, 0.0
    ndx = dx / length
    ndy = dy / length

    px = np.asarray(px, dtype=float)
    py = np.asarray(py, dtype=float)
    t = np.clip((px - x0) * ndx + (py - y0) * ndy, 0.0, length)
    dist = np.hypot(px - (x0 + t * ndx), py - (y0 + t * ndy))
    cov = np.where(dist <= half - 0.5, 1.0, np.where(dist <= half + 0.5, half + 0.5 - dist, 0.0))
    return float(cov) if cov.ndim == 0 else cov


def ring_coverage(dist, inner_radius: float, outer_radius: float):
    """Dual-edge coverage of a ring at radial distances ``dist``."""
    d = np.asarray(dist, dtype=float)
    outer_a = np.clip(outer_radius + 0.5 - d, 0.0, 1.0)
    inner_a = np.clip(d - (inner_radius - 0.5), 0.0, 1.0)
    band = (d >= inner_radius - 0.5) & (d <= outer_radius + 0.5)
    cov = np.where(band, np.minimum(outer_a, inner_a), 0.0)
    return float(cov) if cov.ndim == 0 else cov


def _covered_runs(cov: np.ndarray):
    """Yield ``(row, col0, col1)`` for each horizontal run of covered pixels."""
    for r in np.flatnonzero(cov.max(axis=1) > 0.0):
        cols = np.flatnonzero(cov[r] > 0.0)
        breaks = np.flatnonzero(np.diff(cols) > 1)
        starts = np.concatenate(([cols[0]], cols[breaks + 1]))
        ends = np.concatenate((cols[breaks], [cols[-1]])) + 1
        for c0, c1 in zip(starts, ends):
            yield int(r), int(c0), int(c1)


def _blend_coverage(dest: SampleTarget, block: Rect, cov: np.ndarray, color: Color) -> bool:
    """Blend ``color`` into ``block`` weighted by ``cov``.

    Only covered runs are written, so uncovered pixels (the hole of a ring)
    are left exactly as stored.
    """
    drawn = False
    channels = min(3, dest.channels)
    for r, c0, c1 in _covered_runs(cov):
        run = Rect(block.x0 + c0, block.y0 + r, block.x0 + c1, block.y0 + r + 1)
        a = float(color.a) * cov[r : r + 1, c0:c1]
        for c in range(channels):
            tgt = np.asarray(dest.get_samples(run, c), dtype=float)
            dest.set_samples(color.channel(c) * a + tgt * (1.0 - a), run, c)
        drawn = True
    return drawn


def stroke_line(
    dest: SampleTarget,
    x0: float,
    y0: float,
    x1: float,
    y1: float,
    color: Color,
    thickness: float,
) -> bool:
    """Draw an anti-aliased thick segment. Returns False if nothing was drawn."""
    pad = thickness / 2 + 1.5
    bx0 = max(0, math.floor(min(x0, x1) - pad))
    bx1 = min(dest.width, math.ceil(max(x0, x1) + pad))
    by0 = max(0, math.floor(min(y0, y1) - pad))
    by1 = min(dest.height, math.ceil(max(y0, y1) + pad))
    if bx1 <= bx0 or by1 <= by0:
        return False

    px = np.arange(bx0, bx1, dtype=float) + 0.5
    py = np.arange(by0, by1, dtype=float) + 0.5
    cov = line_coverage(px[None, :], py[:, None], x0, y0, x1, y1, thickness)
    return _blend_coverage(dest, Rect(bx0, by0, bx1, by1), cov, color)


def stroke_ring(
    dest: SampleTarget,
    center: Point,
    radius: float,
    color: Color,
    thickness: float,
    *,
    inner: float | None = None,
    outer: float | None = None,
) -> bool:
    """Draw a stroked circle centred on ``radius`` (``inner``/``outer`` override the band)."""
    if inner is None:
        inner = radius - thickness / 2
    if outer is None:
        outer = radius + thickness / 2

    reach = max(radius + thickness, outer + 1.5)
    bx0 = max(0, math.floor(center.x - reach))
    by0 = max(0, math.floor(center.y - reach))
    bx1 = min(dest.width, math.ceil(center.x + reach))
    by1 = min(dest.height, math.ceil(center.y + reach))
    if bx1 <= bx0 or by1 <= by0:
        return False

    dx = np.arange(bx0, bx1, dtype=float) - center.x + 0.5
    dy = np.arange(by0, by1, dtype=float) - center.y + 0.5
    dist = np.hypot(dx[None, :], dy[:, None])
    cov = ring_coverage(dist, inner, outer)
    return _blend_coverage(dest, Rect(bx0, by0, bx1, by1), cov, color)


def stroke_rect(
    dest: SampleTarget,
    rect: Rect,
    color: Color,
    thickness: float,
    *,
    inset: float = 0.0,
) -> None:
    """Outline ``rect`` with four thick lines, edges pulled in by ``inset``."""
    x0 = rect.x0 + inset
    y0 = rect.y0 + inset
    x1 = rect.x1 - inset
    y1 = rect.y1 - inset
    stroke_line(dest, x0, y0, x1, y0, color, thickness)
    stroke_line(dest, x0, y1, x1, y1, color, thickness)
    stroke_line(dest, x0, y0, x0, y1, color, thickness)
    stroke_line(dest, x1, y0, x1, y1, color, thickness)


def stroke_box(dest: SampleTarget, rect: Rect, color: Color) -> Rect:
    """Fill ``rect`` (clipped to ``dest``) with ``color`` on the RGB channels."""
    safe = rect.intersection(Rect(0, 0, dest.width, dest.height))
    if safe.is_empty:
        return safe

    alpha = float(color.a)
    for c in range(min(3, dest.channels)):
        val = color.channel(c)
        if alpha >= OPAQUE_ALPHA:
            dest.set_samples(np.full((safe.height, safe.width), val, dtype=np.float32), safe, c)
        else:
            tgt = np.asarray(dest.get_samples(safe, c), dtype=float)
            dest.set_samples(val * alpha + tgt * (1.0 - alpha), safe, c)
    return safe


def draw_source_indicator(
    dest: SampleTarget,
    source_rect: Rect,
    color: Color,
    thickness: int,
    shape: Shape | str = Shape.RECTANGULAR,
) -> None:
    """Outline the source region on ``dest``.

    The circular stroke straddles the region edge: ``floor(t/2)`` inside,
    the rest outside.
    """
    if Shape.parse(shape) is Shape.CIRCULAR:
        radius = min(source_rect.width, source_rect.height) / 2
        half_in = thickness // 2
        stroke_ring(
            dest,
            source_rect.center,
            radius,
            color,
            thickness,
            inner=radius - half_in,
            outer=radius + (thickness - half_in),
        )
    else:
        stroke_rect(dest, source_rect, color, thickness)


def draw_inset_border(
    dest: SampleTarget,
    inset_rect: Rect,
    color: Color,
    thickness: float,
    shape: Shape | str = Shape.RECTANGULAR,
) -> None:
    """Stroke a border that stays inside ``inset_rect``."""
    if thickness <= 0:
        return
    half = thickness / 2
    if Shape.parse(shape) is Shape.CIRCULAR:
        radius = min(inset_rect.width, inset_rect.height) / 2 - half
        if radius <= 0:
            return
        stroke_ring(dest, inset_rect.center, radius, color, thickness)
    else:
        stroke_rect(dest, inset_rect, color, thickness, inset=half)


def connection_segments(
    source_rect: Rect,
    inset_rect: Rect,
    thickness: float,
    shape: Shape | str = Shape.RECTANGULAR,
    anchors: SourceAnchors | None = None,
) -> list[tuple[float, float, float, float]]:
    """Endpoints ``(x0, y0, x1, y1)`` of the lines joining source and inset.

    The inset end of every line is pulled ``floor(t/2)`` inside the inset, so
    a thick stroke drawn before the inset is hidden under it.
    """
    offset = math.floor(thickness / 2)

    if Shape.parse(shape) is Shape.CIRCULAR:
        anchors = anchors or SourceAnchors()
        sc = source_rect.center
        ic = inset_rect.center
        src_r = min(source_rect.width, source_rect.height) / 2
        ins_r = max(1.0, min(inset_rect.width, inset_rect.height) / 2 - offset)
        segments = []
        for angle in (anchors.left, anchors.right):
            ca, sa = math.cos(angle), math.sin(angle)
            segments.append(
                (
                    float(round_half_up(sc.x + ca * src_r)),
                    float(round_half_up(sc.y + sa * src_r)),
                    float(round_half_up(ic.x + ca * ins_r)),
                    float(round_half_up(ic.y + sa * ins_r)),
                )
            )
        return segments

    s, i = source_rect, inset_rect
    return [
        (s.x0, s.y0, i.x0 + offset, i.y0 + offset),  # NW
        (s.x1 - 1, s.y0, i.x1 - 1 - offset, i.y0 + offset),  # NE
        (s.x0, s.y1 - 1, i.x0 + offset, i.y1 - 1 - offset),  # SW
        (s.x1 - 1, s.y1 - 1, i.x1 - 1 - offset, i.y1 - 1 - offset),  # SE
    ]


def draw_connection_lines(
    dest: SampleTarget,
    source_rect: Rect,
    inset_rect: Rect,
    color: Color,
    thickness: float,
    shape: Shape | str = Shape.RECTANGULAR,
    anchors: SourceAnchors | None = None,
) -> int:
    """Draw connection lines; returns how many touched the destination."""
    drawn = 0
    for x0, y0, x1, y1 in connection_segments(source_rect, inset_rect, thickness, shape, anchors):
        if stroke_line(dest, x0, y0, x1, y1, color, thickness):
            drawn += 1
    log.debug("Drew %d connection line(s)", drawn)
    return drawn
