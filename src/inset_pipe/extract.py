"""Region extraction and scaling.

An :class:`ExtractedRegion` is a self-contained copy of a sub-region of the
source: one 2D array per channel plus, for circular regions, a soft coverage
mask. Rectangular regions carry no mask (implicitly full coverage).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging

import numpy as np

from inset_pipe.buffers import SampleSource
from inset_pipe.errors import OutOfBoundsError, RegionTooSmallError
from inset_pipe.geometry import Point, Rect, Shape, round_half_up
from inset_pipe.resample import ResampleMethod, circular_mask, resample


log = logging.getLogger(__name__)

MIN_REGION_SIZE = 10


@dataclass(frozen=True)
class ExtractedRegion:
    pixels: list[np.ndarray]
    width: int
    height: int
    mask: np.ndarray | None = None
    shape: Shape = Shape.RECTANGULAR

    @property
    def channels(self) -> int:
        return len(self.pixels)


def validate_region(source: SampleSource, rect: Rect) -> None:
    """Raise if ``rect`` cannot be extracted from ``source``."""
    if rect.x0 < 0 or rect.y0 < 0 or rect.x1 > source.width or rect.y1 > source.height:
        raise OutOfBoundsError(
            f"Selected region {rect.width}x{rect.height} at {rect.x0},{rect.y0} "
            f"exceeds image bounds {source.width}x{source.height}"
        )
    if rect.width < MIN_REGION_SIZE or rect.height < MIN_REGION_SIZE:
        raise RegionTooSmallError(
            f"Region must be at least {MIN_REGION_SIZE}x{MIN_REGION_SIZE} pixels "
            f"(got {rect.width}x{rect.height})"
        )


def extract_rectangular(source: SampleSource, rect: Rect) -> ExtractedRegion:
    validate_region(source, rect)
    pixels = [
        np.asarray(source.get_samples(rect, c), dtype=np.float32).reshape(rect.height, rect.width)
        for c in range(source.channels)
    ]
    log.debug("Extracted %dx%d region at %d,%d", rect.width, rect.height, rect.x0, rect.y0)
    return ExtractedRegion(pixels=pixels, width=rect.width, height=rect.height)


def circle_bounds(center: Point, diameter: float, width: int, height: int) -> Rect:
    """Bounding square of a circle, rounded and clamped to ``width x height``."""
    r = diameter / 2
    x0 = max(0, round_half_up(center.x - r))
    y0 = max(0, round_half_up(center.y - r))
    x1 = min(int(width), round_half_up(center.x + r))
    y1 = min(int(height), round_half_up(center.y + r))
    return Rect(x0, y0, x1, y1)


def extract_circular(source: SampleSource, center: Point, diameter: float) -> ExtractedRegion:
    """Extract the bounding square of a circle plus its coverage mask.

    The square is clamped to the source. The mask keeps the requested radius
    but is centred on the clamped square, not on ``center``, so near an image
    edge the circle moves inwards with the square.
    """
    rect = circle_bounds(center, diameter, source.width, source.height)
    data = extract_rectangular(source, rect)
    mask = circular_mask(data.width, data.height, radius=diameter / 2)
    return ExtractedRegion(
        pixels=data.pixels,
        width=data.width,
        height=data.height,
        mask=mask,
        shape=Shape.CIRCULAR,
    )


def extract_shape(source: SampleSource, rect: Rect, shape: Shape | str) -> ExtractedRegion:
    """Extract ``rect`` as the given shape; circles are inscribed by width."""
    if Shape.parse(shape) is Shape.CIRCULAR:
        return extract_circular(source, rect.center, rect.width)
    return extract_rectangular(source, rect)


def scale_region(
    region: ExtractedRegion,
    width: int,
    height: int,
    method: ResampleMethod | str = ResampleMethod.BICUBIC,
) -> ExtractedRegion:
    """Resample every channel to ``width x height``.

    The circular mask is rebuilt at the target size (radius = half the smaller
    side) rather than interpolated.
    """
    width = int(width)
    height = int(height)
    pixels = [resample(p, width, height, method) for p in region.pixels]
    mask = None
    if region.shape is Shape.CIRCULAR:
        mask = circular_mask(width, height)
    log.debug(
        "Scaled %dx%d -> %dx%d (%s)",
        region.width,
        region.height,
        width,
        height,
        ResampleMethod.parse(method).value,
    )
    return ExtractedRegion(pixels=pixels, width=width, height=height, mask=mask, shape=region.shape)
