import math

import numpy as np
import pytest

from inset_pipe.buffers import ImageBuffer
from inset_pipe.geometry import Color, Point, Rect
from inset_pipe.raster import (
    SourceAnchors,
    connection_segments,
    draw_connection_lines,
    draw_inset_border,
    draw_source_indicator,
    line_coverage,
    ring_coverage,
    stroke_box,
    stroke_line,
    stroke_ring,
)

YELLOW = Color(1.0, 1.0, 0.0, 1.0)


def test_line_coverage_profile() -> None:
    t = 3.0
    assert line_coverage(5.0, 5.0, 0.0, 5.0, 10.0, 5.0, t) == 1.0
    assert line_coverage(5.0, 5.0 + t / 2 + 1.0, 0.0, 5.0, 10.0, 5.0, t) == 0.0
    # half-way through the anti-aliased edge
    assert line_coverage(5.0, 6.25, 0.0, 5.0, 10.0, 5.0, t) == pytest.approx(0.75)
    # beyond the end cap the distance is measured to the endpoint
    assert line_coverage(14.0, 5.0, 0.0, 5.0, 10.0, 5.0, t) == 0.0


def test_thickness_four_midpoint_and_falloff() -> None:
    assert line_coverage(50.0, 20.0, 0.0, 20.0, 100.0, 20.0, 4.0) == 1.0
    assert line_coverage(50.0, 23.0, 0.0, 20.0, 100.0, 20.0, 4.0) == 0.0
    assert line_coverage(50.0, 17.0, 0.0, 20.0, 100.0, 20.0, 4.0) == 0.0


def test_degenerate_segment_is_a_dot() -> None:
    assert line_coverage(2.0, 2.0, 2.0, 2.0, 2.0, 2.0, 2.0) == 1.0
    assert line_coverage(6.0, 2.0, 2.0, 2.0, 2.0, 2.0, 2.0) == 0.0


def test_ring_coverage_profile() -> None:
    assert ring_coverage(10.0, 9.0, 11.0) == 1.0
    assert ring_coverage(12.0, 9.0, 11.0) == 0.0
    assert ring_coverage(7.5, 9.0, 11.0) == 0.0
    assert ring_coverage(11.25, 9.0, 11.0) == pytest.approx(0.25)
    d = np.array([0.0, 10.0, 20.0])
    np.testing.assert_allclose(ring_coverage(d, 9.0, 11.0), [0.0, 1.0, 0.0])


def test_stroke_line_draws_and_off_canvas_is_noop() -> None:
    dest = ImageBuffer.blank(20, 20)
    assert stroke_line(dest, 2, 10, 18, 10, YELLOW, 3)
    assert dest.data[0, 9, 10] == pytest.approx(1.0)
    assert dest.data[2].max() == 0.0

    blank = ImageBuffer.blank(20, 20)
    assert not stroke_line(blank, 100, 100, 140, 120, YELLOW, 3)
    assert blank.data.max() == 0.0


def test_stroke_ring_and_box() -> None:
    dest = ImageBuffer.blank(40, 40)
    assert stroke_ring(dest, Point(20, 20), 10, YELLOW, 2)
    assert dest.data[0, 19, 29] == pytest.approx(1.0)
    assert dest.data[0, 20, 20] == 0.0

    safe = stroke_box(dest, Rect(35, 35, 50, 50), Color(0.0, 0.5, 1.0, 1.0))
    assert safe == Rect(35, 35, 40, 40)
    assert np.all(dest.data[1, 35:, 35:] == 0.5)

    half = stroke_box(ImageBuffer.blank(4, 4), Rect(0, 0, 2, 2), Color(1.0, 1.0, 1.0, 0.5))
    assert half == Rect(0, 0, 2, 2)


def test_stroke_ring_leaves_uncovered_pixels_untouched() -> None:
    dest = ImageBuffer(np.full((3, 40, 40), 2.0, dtype=np.float32))
    assert stroke_ring(dest, Point(20, 20), 10, YELLOW, 2)
    # hole of the ring and the block corners keep their stored values
    assert dest.data[0, 20, 20] == 2.0
    assert dest.data[2, 11, 11] == 2.0
    # covered pixels are blended and clipped
    assert dest.data[0, 19, 29] == pytest.approx(1.0)


def test_source_indicator_rectangular_and_circular() -> None:
    rect = Rect(10, 10, 30, 30)
    dest = ImageBuffer.blank(40, 40)
    draw_source_indicator(dest, rect, YELLOW, 2, "Rectangular")
    assert dest.data[0, 20, 10] == pytest.approx(1.0)
    assert dest.data[0, 20, 20] == 0.0

    dest = ImageBuffer.blank(40, 40)
    draw_source_indicator(dest, rect, YELLOW, 2, "Circular")
    assert dest.data[0, 10, 20] == pytest.approx(1.0)
    assert dest.data[0, 10, 10] == 0.0


def test_inset_border_stays_inside() -> None:
    dest = ImageBuffer.blank(40, 40)
    draw_inset_border(dest, Rect(10, 10, 30, 30), YELLOW, 4)
    assert dest.data[0, 20, 11] == pytest.approx(1.0)
    assert dest.data[0, 20, 8] == 0.0

    # a radius that collapses to nothing draws nothing
    tiny = ImageBuffer.blank(10, 10)
    draw_inset_border(tiny, Rect(0, 0, 4, 4), YELLOW, 6, "Circular")
    assert tiny.data.max() == 0.0
    draw_inset_border(tiny, Rect(0, 0, 10, 10), YELLOW, 0)
    assert tiny.data.max() == 0.0


def test_rectangular_connection_segments() -> None:
    segs = connection_segments(Rect(10, 10, 30, 30), Rect(100, 100, 160, 160), 4)
    assert segs == [
        (10, 10, 102, 102),
        (29, 10, 157, 102),
        (10, 29, 102, 157),
        (29, 29, 157, 157),
    ]


def test_circular_connection_segments_follow_anchors() -> None:
    segs = connection_segments(Rect(10, 10, 30, 30), Rect(100, 100, 160, 160), 4, "Circular")
    assert segs == [(10.0, 20.0, 102.0, 130.0), (30.0, 20.0, 158.0, 130.0)]

    up = SourceAnchors().dragged("left", -math.pi / 2)
    assert up.right == pytest.approx(math.pi / 2)
    segs = connection_segments(Rect(10, 10, 30, 30), Rect(100, 100, 160, 160), 4, "Circular", up)
    assert segs[0][:2] == (20.0, 10.0)
    assert segs[1][:2] == (20.0, 30.0)

    with pytest.raises(ValueError):
        SourceAnchors().dragged("top", 0.0)


def test_draw_connection_lines_counts_visible_lines() -> None:
    dest = ImageBuffer.blank(200, 200)
    n = draw_connection_lines(dest, Rect(10, 10, 30, 30), Rect(100, 100, 160, 160), YELLOW, 2)
    assert n == 4
    assert dest.data[0].max() == pytest.approx(1.0)

    far = ImageBuffer.blank(50, 50)
    n = draw_connection_lines(far, Rect(300, 300, 320, 320), Rect(400, 400, 450, 450), YELLOW, 2)
    assert n == 0
    assert far.data.max() == 0.0
