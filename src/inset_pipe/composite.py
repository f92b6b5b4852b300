"""Alpha compositing onto a destination buffer.

Blend rule, per channel and pixel::

    dest = src * alpha + dest * (1 - alpha)

Opacity compounding
-------------------
The bordered mask already stores the border opacity in the ring. Multiplying
by a separate global opacity therefore fades the ring twice when both are
below 1. :class:`OpacityMode` makes the choice explicit:

- ``COMPOUND`` (default): ``alpha = global_opacity * mask`` everywhere.
- ``CONTENT_ONLY``: global opacity only inside the content area
  (``BorderedRegion.content``); the ring and its anti-aliased edge keep the
  mask value, even when the border is opaque.
"""

from __future__ import annotations

from enum import Enum
import logging

import numpy as np

from inset_pipe.border import BorderedRegion
from inset_pipe.buffers import SampleTarget
from inset_pipe.extract import ExtractedRegion
from inset_pipe.geometry import Position, Rect


log = logging.getLogger(__name__)


class OpacityMode(str, Enum):
    COMPOUND = "compound"
    CONTENT_ONLY = "content_only"


def effective_alpha(
    mask: np.ndarray | None,
    shape: tuple[int, int],
    global_opacity: float,
    mode: OpacityMode = OpacityMode.COMPOUND,
    content: np.ndarray | None = None,
) -> np.ndarray:
    """Per-pixel blend alpha for a block of ``shape`` (rows, cols).

    ``content`` marks the pixels inside the border; ``None`` means the whole
    block is content.
    """
    g = float(global_opacity)
    if mask is None:
        return np.full(shape, g, dtype=float)
    m = np.asarray(mask, dtype=float)
    if OpacityMode(mode) is OpacityMode.CONTENT_ONLY:
        if content is None:
            return g * m
        return np.where(np.asarray(content, dtype=bool), g * m, m)
    return g * m


def composite_inset(
    dest: SampleTarget,
    inset: BorderedRegion | ExtractedRegion,
    position: Position,
    global_opacity: float = 1.0,
    *,
    opacity_mode: OpacityMode = OpacityMode.COMPOUND,
) -> Rect:
    """Blend ``inset`` onto ``dest`` with its top-left at ``position``.

    Returns the destination rect actually written (empty when the inset lies
    entirely off-canvas, which is a no-op rather than an error).
    """

    dest_rect = Rect.from_xywh(position.x, position.y, inset.width, inset.height)
    safe = dest_rect.intersection(Rect(0, 0, dest.width, dest.height))
    if safe.is_empty:
        log.debug("Inset at %d,%d does not overlap destination; skipped", position.x, position.y)
        return safe

    ox = safe.x0 - dest_rect.x0
    oy = safe.y0 - dest_rect.y0
    rows = slice(oy, oy + safe.height)
    cols = slice(ox, ox + safe.width)

    mask = inset.mask[rows, cols] if inset.mask is not None else None
    content = getattr(inset, "content", None)
    if content is not None:
        content = content[rows, cols]
    alpha = effective_alpha(mask, (safe.height, safe.width), global_opacity, opacity_mode, content)
    if not np.any(alpha > 0.0):
        return safe

    channels = min(inset.channels, dest.channels)
    for c in range(channels):
        src = np.asarray(inset.pixels[c], dtype=float)[rows, cols]
        tgt = np.asarray(dest.get_samples(safe, c), dtype=float)
        dest.set_samples(src * alpha + tgt * (1.0 - alpha), safe, c)
    return safe
