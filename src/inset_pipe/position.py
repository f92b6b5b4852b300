"""Inset placement.

Presets resolve to a top-left corner at ``margin`` from the named image
corner. Two placement modes exist because the two workflows disagree:

- :attr:`PlacementMode.CLAMP_TO_CANVAS` (single-shot inset): each axis is
  clamped into ``[0, image - inset]``; an inset larger than the image lands
  at 0.
- :attr:`PlacementMode.UNCLAMPED` (finalize): the inset may hang outside the
  canvas, which is grown to fit it.
"""

from __future__ import annotations

from enum import Enum

from inset_pipe.geometry import Position


class PositionPreset(str, Enum):
    TOP_LEFT = "Top-Left"
    TOP_RIGHT = "Top-Right"
    BOTTOM_LEFT = "Bottom-Left"
    BOTTOM_RIGHT = "Bottom-Right"
    CUSTOM = "Custom"


class PlacementMode(str, Enum):
    CLAMP_TO_CANVAS = "clamp"
    UNCLAMPED = "unclamped"


def _preset_value(preset: PositionPreset | str | None) -> str:
    if isinstance(preset, PositionPreset):
        return preset.value
    return str(preset or "")


def calculate_position(
    img_w: int,
    img_h: int,
    inset_w: int,
    inset_h: int,
    preset: PositionPreset | str | None,
    margin: int,
    custom_pos: Position | tuple[int, int] | None = None,
    *,
    mode: PlacementMode = PlacementMode.CLAMP_TO_CANVAS,
) -> Position:
    """Top-left corner for an inset of ``inset_w x inset_h``.

    Unrecognised presets behave like Top-Left. ``Custom`` without
    ``custom_pos`` falls back to ``(margin, margin)``.
    """

    p = _preset_value(preset)
    right = img_w - inset_w - margin
    bottom = img_h - inset_h - margin

    if p == PositionPreset.TOP_RIGHT.value:
        x, y = right, margin
    elif p == PositionPreset.BOTTOM_LEFT.value:
        x, y = margin, bottom
    elif p == PositionPreset.BOTTOM_RIGHT.value:
        x, y = right, bottom
    elif p == PositionPreset.CUSTOM.value and custom_pos is not None:
        if isinstance(custom_pos, Position):
            x, y = custom_pos.x, custom_pos.y
        else:
            x, y = custom_pos
    else:
        x, y = margin, margin

    if PlacementMode(mode) is PlacementMode.CLAMP_TO_CANVAS:
        x = max(0, min(img_w - inset_w, x))
        y = max(0, min(img_h - inset_h, y))

    return Position(int(x), int(y))
