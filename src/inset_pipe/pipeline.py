"""High-level inset workflows.

Each entry point is stateless and runs the stages in a fixed order::

    extract -> resample -> border -> position -> annotate -> composite

Annotations (source indicator, connection lines) are drawn before the inset
is composited so the inset covers the line ends. Every validation happens
before the first write to a destination buffer.

Three workflows exist:

- :func:`create_inset` magnifies a region onto the same image.
- :func:`extract_to_image` writes the magnified region to a new buffer and
  returns :class:`~inset_pipe.metadata.ExtractionMetadata` for it.
- :func:`finalize` places a (possibly edited) extracted image back next to
  its source on a canvas grown to fit.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import logging

from inset_pipe.border import BorderedRegion, add_border
from inset_pipe.buffers import ImageBuffer
from inset_pipe.composite import OpacityMode, composite_inset
from inset_pipe.extract import extract_circular, extract_rectangular, extract_shape, scale_region, validate_region
from inset_pipe.geometry import Color, Point, Position, Rect, Shape, round_half_up
from inset_pipe.log import timer
from inset_pipe.metadata import ExtractionMetadata
from inset_pipe.position import PlacementMode, calculate_position
from inset_pipe.raster import SourceAnchors, draw_connection_lines, draw_inset_border, draw_source_indicator
from inset_pipe.resample import ResampleMethod, circular_mask, resample
from inset_pipe.schema import InsetParams
from inset_pipe.version import as_header_cards


log = logging.getLogger(__name__)

MIN_ZOOM = 1.5
MAX_ZOOM = 10.0
MAX_OUTPUT_DIMENSION = 8000
FINALIZE_PADDING = 20
FINALIZE_MARGIN = 20


# ------------------------------ zoom limits ------------------------------


def max_zoom_for_region(width: int, height: int) -> float:
    """Largest zoom keeping ``max(width, height) * zoom`` within the output cap."""
    largest = max(int(width), int(height))
    if largest <= 0:
        return MAX_ZOOM
    return max(MIN_ZOOM, min(MAX_ZOOM, MAX_OUTPUT_DIMENSION / largest))


def clamp_zoom(width: int, height: int, zoom: float) -> float:
    return max(MIN_ZOOM, min(max_zoom_for_region(width, height), float(zoom)))


# ------------------------------ single-shot ------------------------------


@dataclass(frozen=True)
class InsetResult:
    inset_rect: Rect
    position: Position
    region: BorderedRegion
    lines_drawn: int = 0


def create_inset(image: ImageBuffer, params: InsetParams) -> InsetResult:
    """Magnify ``params.region_rect`` and composite it onto ``image`` in place.

    Raises :class:`~inset_pipe.errors.OutOfBoundsError` or
    :class:`~inset_pipe.errors.RegionTooSmallError` before touching ``image``.
    """
    rect = params.region_rect
    shape = params.shape_enum
    method = params.method
    border_color = params.border_color()
    indicator_color = params.indicator_color_value()

    with timer("extract", log):
        validate_region(image, rect)
        extracted = extract_shape(image, rect, shape)

    with timer("resample", log):
        scaled = scale_region(
            extracted,
            round_half_up(extracted.width * params.zoom),
            round_half_up(extracted.height * params.zoom),
            method,
        )

    bordered = add_border(scaled, params.effective_border_width, border_color)

    position = calculate_position(
        image.width,
        image.height,
        bordered.width,
        bordered.height,
        params.position,
        params.margin,
        Position(params.custom_x, params.custom_y),
        mode=PlacementMode.CLAMP_TO_CANVAS,
    )
    inset_rect = Rect.from_xywh(position.x, position.y, bordered.width, bordered.height)
    log.info(
        "Inset %dx%d -> %dx%d at %d,%d",
        rect.width,
        rect.height,
        bordered.width,
        bordered.height,
        position.x,
        position.y,
    )

    lines = 0
    with timer("composite", log):
        if params.draw_connection_line:
            lines = draw_connection_lines(
                image,
                rect,
                inset_rect,
                indicator_color,
                params.indicator_border_width,
                shape,
                params.source_anchors,
            )
        if params.draw_source_indicator:
            draw_source_indicator(image, rect, indicator_color, params.indicator_border_width, shape)

        opacity = indicator_color.a if params.apply_opacity_to_image else 1.0
        composite_inset(image, bordered, position, opacity, opacity_mode=params.opacity_mode_enum)

    return InsetResult(inset_rect=inset_rect, position=position, region=bordered, lines_drawn=lines)


# ------------------------------ extract mode ------------------------------


@dataclass(frozen=True)
class ExtractionResult:
    image: ImageBuffer
    metadata: ExtractionMetadata

    def keywords(self, prefix: str = "INSET") -> dict[str, str]:
        """Metadata cards plus the engine version that produced the image."""
        return {**self.metadata.to_cards(prefix), **as_header_cards(prefix)}


def extract_to_image(
    image: ImageBuffer,
    params: InsetParams,
    source_id: str | None = None,
) -> ExtractionResult:
    """Resample the selected region into a new buffer.

    Circular selections give a square output (the larger scaled side) whose
    pixels are pre-multiplied by the circular mask, so the corners are black.
    """
    rect = params.region_rect
    shape = params.shape_enum
    validate_region(image, rect)

    out_w = round_half_up(rect.width * params.zoom)
    out_h = round_half_up(rect.height * params.zoom)
    if shape is Shape.CIRCULAR:
        out_w = out_h = max(out_w, out_h)

    out = ImageBuffer.blank(out_w, out_h, channels=image.channels)
    with timer("extract", log):
        for c in range(image.channels):
            resample(image.get_samples(rect, c), out_w, out_h, params.method, out=out.data[c])
        if shape is Shape.CIRCULAR:
            out.data[:] *= circular_mask(out_w, out_h)[None, :, :]

    meta = ExtractionMetadata(region=rect, shape=shape, zoom=float(params.zoom), source_id=source_id)
    log.info("Extracted %dx%d region to %dx%d (%s)", rect.width, rect.height, out_w, out_h, shape.value)
    return ExtractionResult(image=out, metadata=meta)


# ------------------------------ finalize mode ------------------------------


@dataclass(frozen=True)
class FinalizeStyle:
    """Appearance of the finalized composition.

    The inset border, source indicator and connection lines share
    ``color`` and ``border_width``.
    """

    color: Color = field(default_factory=lambda: Color.from_rgb255(255, 255, 0))
    border_width: int = 2
    draw_source_indicator: bool = True
    draw_connection_line: bool = True
    draw_inset_border: bool = False
    apply_opacity_to_image: bool = False
    opacity_mode: OpacityMode = OpacityMode.COMPOUND
    interpolation: ResampleMethod = ResampleMethod.BICUBIC
    anchors: SourceAnchors = field(default_factory=SourceAnchors)

    @classmethod
    def from_params(cls, params: InsetParams) -> "FinalizeStyle":
        return cls(
            color=params.indicator_color_value(),
            border_width=params.indicator_border_width,
            draw_source_indicator=params.draw_source_indicator,
            draw_connection_line=params.draw_connection_line,
            apply_opacity_to_image=params.apply_opacity_to_image,
            opacity_mode=params.opacity_mode_enum,
            interpolation=params.method,
            anchors=params.source_anchors,
        )


def initial_placement(
    src_w: int,
    src_h: int,
    inset_w: int,
    inset_h: int,
    margin: int = FINALIZE_MARGIN,
) -> Rect:
    """Default inset box: a third of the source width, bottom-left."""
    width = round_half_up(src_w / 3)
    height = round_half_up(width * (inset_h / inset_w)) if inset_w > 0 else width
    x = max(0, margin)
    y = max(0, src_h - height - margin)
    return Rect.from_xywh(x, y, width, height)


def canvas_bounds(source_w: int, source_h: int, placement: Rect, padding: int = FINALIZE_PADDING) -> Rect:
    """Source-space box of the output canvas.

    Equal to the source bounds, extended by ``padding`` beyond the inset on
    every side where the inset overhangs.
    """
    x0 = placement.x0 - padding if placement.x0 < 0 else 0
    y0 = placement.y0 - padding if placement.y0 < 0 else 0
    x1 = placement.x1 + padding if placement.x1 > source_w else source_w
    y1 = placement.y1 + padding if placement.y1 > source_h else source_h
    return Rect(x0, y0, x1, y1)


def _reextract(inset_image: ImageBuffer, shape: Shape):
    if shape is Shape.CIRCULAR:
        center = Point(inset_image.width / 2, inset_image.height / 2)
        return extract_circular(inset_image, center, inset_image.width)
    return extract_rectangular(inset_image, inset_image.bounds)


def finalize(
    source: ImageBuffer,
    inset_image: ImageBuffer,
    metadata: ExtractionMetadata | None,
    placement: Rect,
    style: FinalizeStyle | None = None,
) -> ImageBuffer:
    """Compose ``source`` and ``inset_image`` (placed at ``placement``) on a new canvas.

    ``placement`` is in source coordinates and may hang off the source; the
    canvas grows to fit. Without ``metadata`` the source region is unknown,
    so neither indicator nor connection lines are drawn.
    """
    style = style or FinalizeStyle()
    if placement.is_empty:
        raise ValueError(f"Inset placement must be non-empty (got {placement})")
    if metadata is not None:
        metadata.check_fits_source(source.width, source.height)
    shape = metadata.shape if metadata is not None else Shape.RECTANGULAR

    with timer("prepare inset", log):
        extracted = _reextract(inset_image, shape)
        b = int(style.border_width)
        content_w = max(1, placement.width - 2 * b)
        content_h = max(1, placement.height - 2 * b)
        scaled = scale_region(extracted, content_w, content_h, style.interpolation)
        bordered = add_border(scaled, b, style.color)

    bounds = canvas_bounds(source.width, source.height, placement)
    dx, dy = -bounds.x0, -bounds.y0
    canvas = ImageBuffer.blank(bounds.width, bounds.height, channels=source.channels)
    canvas.paste(source, dx, dy)
    inset_rect = placement.translated(dx, dy)
    log.info("Finalize canvas %dx%d (source offset %d,%d)", canvas.width, canvas.height, dx, dy)

    with timer("compose", log):
        if metadata is not None:
            src_rect = metadata.region.translated(dx, dy)
            if style.draw_source_indicator:
                draw_source_indicator(canvas, src_rect, style.color, b, shape)
            if style.draw_connection_line:
                draw_connection_lines(canvas, src_rect, inset_rect, style.color, b, shape, style.anchors)

        opacity = style.color.a if style.apply_opacity_to_image else 1.0
        composite_inset(
            canvas,
            bordered,
            Position(inset_rect.x0, inset_rect.y0),
            opacity,
            opacity_mode=style.opacity_mode,
        )
        if style.draw_inset_border:
            drawn = Rect.from_xywh(inset_rect.x0, inset_rect.y0, bordered.width, bordered.height)
            draw_inset_border(canvas, drawn, style.color, b, shape)

    return canvas


__all__ = [
    "ExtractionResult",
    "FinalizeStyle",
    "InsetResult",
    "canvas_bounds",
    "clamp_zoom",
    "create_inset",
    "extract_to_image",
    "finalize",
    "initial_placement",
    "max_zoom_for_region",
]
