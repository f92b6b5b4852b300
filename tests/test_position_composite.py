import numpy as np
import pytest

from inset_pipe.border import add_border
from inset_pipe.buffers import ImageBuffer
from inset_pipe.composite import OpacityMode, composite_inset, effective_alpha
from inset_pipe.extract import ExtractedRegion
from inset_pipe.geometry import Color, Position, Rect, Shape
from inset_pipe.position import PlacementMode, PositionPreset, calculate_position
from inset_pipe.resample import circular_mask


def _region(w: int, h: int, value: float = 1.0, channels: int = 3) -> ExtractedRegion:
    pixels = [np.full((h, w), value, dtype=np.float32) for _ in range(channels)]
    return ExtractedRegion(pixels=pixels, width=w, height=h)


@pytest.mark.parametrize(
    "preset, expected",
    [
        ("Top-Left", (10, 10)),
        ("Top-Right", (790, 10)),
        ("Bottom-Left", (10, 640)),
        ("Bottom-Right", (790, 640)),
        (PositionPreset.BOTTOM_RIGHT, (790, 640)),
    ],
)
def test_presets(preset, expected) -> None:
    pos = calculate_position(1000, 800, 200, 150, preset, 10)
    assert (pos.x, pos.y) == expected


def test_oversized_inset_clamps_to_origin() -> None:
    pos = calculate_position(100, 100, 150, 120, "Bottom-Right", 10)
    assert pos == Position(0, 0)
    wide = calculate_position(1000, 800, 1200, 150, "Bottom-Right", 10)
    assert wide == Position(0, 640)


def test_custom_and_unknown_presets() -> None:
    assert calculate_position(1000, 800, 200, 150, "Custom", 10, (300, 250)) == Position(300, 250)
    assert calculate_position(1000, 800, 200, 150, "Custom", 10) == Position(10, 10)
    assert calculate_position(1000, 800, 200, 150, "Middle", 10) == Position(10, 10)
    # custom positions are clamped too
    assert calculate_position(1000, 800, 200, 150, "Custom", 10, Position(950, -5)) == Position(800, 0)


def test_unclamped_placement_may_leave_canvas() -> None:
    pos = calculate_position(
        100, 100, 150, 120, "Bottom-Right", 10, mode=PlacementMode.UNCLAMPED
    )
    assert pos == Position(-60, -30)
    pos = calculate_position(100, 100, 10, 10, "Custom", 0, (-40, 95), mode="unclamped")
    assert pos == Position(-40, 95)


def test_opacity_zero_leaves_destination_unchanged() -> None:
    dest = ImageBuffer(np.random.default_rng(1).uniform(0, 1, (3, 30, 40)))
    before = dest.data.copy()
    composite_inset(dest, _region(10, 10, 0.2), Position(5, 5), 0.0)
    np.testing.assert_array_equal(dest.data, before)


def test_full_opacity_copies_pixels_exactly() -> None:
    dest = ImageBuffer.blank(40, 30, fill=0.5)
    reg = _region(10, 8, 0.0)
    reg.pixels[1][:] = 0.25
    written = composite_inset(dest, reg, Position(3, 4), 1.0)
    assert written == Rect(3, 4, 13, 12)
    assert np.all(dest.data[0, 4:12, 3:13] == 0.0)
    assert np.all(dest.data[1, 4:12, 3:13] == 0.25)
    assert np.all(dest.data[:, 12:, :] == 0.5)


def test_composite_is_clipped_to_destination() -> None:
    dest = ImageBuffer.blank(20, 20)
    written = composite_inset(dest, _region(10, 10), Position(-5, 15), 1.0)
    assert written == Rect(0, 15, 5, 20)
    assert dest.data[0].sum() == pytest.approx(25.0)

    off = composite_inset(dest, _region(10, 10), Position(50, 50), 1.0)
    assert off.is_empty


def test_half_opacity_blends() -> None:
    dest = ImageBuffer.blank(10, 10, fill=0.0)
    composite_inset(dest, _region(10, 10, 1.0), Position(0, 0), 0.5)
    np.testing.assert_allclose(dest.data, 0.5, atol=1e-6)


def test_opacity_modes_differ_on_the_border() -> None:
    bordered = add_border(_region(6, 6, 1.0), 2, Color(1.0, 1.0, 1.0, 0.5))

    comp = ImageBuffer.blank(10, 10)
    composite_inset(comp, bordered, Position(0, 0), 0.5, opacity_mode=OpacityMode.COMPOUND)
    only = ImageBuffer.blank(10, 10)
    composite_inset(only, bordered, Position(0, 0), 0.5, opacity_mode=OpacityMode.CONTENT_ONLY)

    # content: global opacity only
    assert comp.data[0, 5, 5] == pytest.approx(0.5)
    assert only.data[0, 5, 5] == pytest.approx(0.5)
    # border ring: compounded vs border alpha only
    assert comp.data[0, 0, 0] == pytest.approx(0.25)
    assert only.data[0, 0, 0] == pytest.approx(0.5)


@pytest.mark.parametrize("shape", [Shape.RECTANGULAR, Shape.CIRCULAR])
def test_content_only_keeps_opaque_border(shape) -> None:
    region = _region(20, 20, 1.0)
    if shape is Shape.CIRCULAR:
        region = ExtractedRegion(region.pixels, 20, 20, mask=circular_mask(20, 20), shape=Shape.CIRCULAR)
    bordered = add_border(region, 3, Color(1.0, 1.0, 1.0, 1.0))

    comp = ImageBuffer.blank(26, 26)
    composite_inset(comp, bordered, Position(0, 0), 0.5, opacity_mode=OpacityMode.COMPOUND)
    only = ImageBuffer.blank(26, 26)
    composite_inset(only, bordered, Position(0, 0), 0.5, opacity_mode=OpacityMode.CONTENT_ONLY)

    # ring pixel on the left edge, centre row
    assert comp.data[0, 13, 1] == pytest.approx(0.5)
    assert only.data[0, 13, 1] == pytest.approx(1.0)
    assert only.data[0, 13, 13] == pytest.approx(0.5)


def test_content_map_follows_border_geometry() -> None:
    rect = add_border(_region(4, 4), 2, Color(0.0, 0.0, 0.0, 1.0))
    assert rect.content.sum() == 16
    assert rect.content[2:6, 2:6].all()
    assert not rect.content[0].any()

    plain = add_border(_region(4, 4), 0, Color(0.0, 0.0, 0.0, 1.0))
    assert plain.content.all()


def test_effective_alpha_content_only_without_content_map() -> None:
    a = effective_alpha(np.array([[1.0, 0.5]]), (1, 2), 0.5, OpacityMode.CONTENT_ONLY)
    np.testing.assert_allclose(a, [[0.5, 0.25]])


def test_effective_alpha_without_mask() -> None:
    a = effective_alpha(None, (2, 3), 0.7)
    assert a.shape == (2, 3)
    np.testing.assert_allclose(a, 0.7)


def test_circular_inset_corners_keep_destination() -> None:
    reg = _region(20, 20, 1.0)
    circ = ExtractedRegion(
        pixels=reg.pixels, width=20, height=20, mask=None, shape=Shape.CIRCULAR
    )
    bordered = add_border(circ, 2, Color(1.0, 1.0, 1.0))
    dest = ImageBuffer.blank(24, 24, fill=0.3)
    composite_inset(dest, bordered, Position(0, 0))
    assert dest.data[0, 0, 0] == pytest.approx(0.3)
    assert dest.data[0, 12, 12] == pytest.approx(1.0)
