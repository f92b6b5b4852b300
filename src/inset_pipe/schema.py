"""Pydantic schema for inset parameter files (YAML).

The engine itself works on typed values (:class:`~inset_pipe.geometry.Rect`,
:class:`~inset_pipe.geometry.Color`, enums). This schema sits between a plain
YAML dict and those values: it fills the interactive defaults, checks types
and flags likely typos.

Notes
-----
- Extra keys are allowed by the model; `find_unknown_keys()` reports them.
- `schema_validate()` returns a small report object (ok/errors/warnings).
- Colours are ``[r, g, b]`` in 0..255, opacities are percentages 0..100.
"""


from __future__ import annotations


from dataclasses import dataclass
import math
from typing import Any, Dict, List

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from inset_pipe.composite import OpacityMode
from inset_pipe.geometry import Color, Rect, Shape
from inset_pipe.position import PositionPreset
from inset_pipe.raster import SourceAnchors
from inset_pipe.resample import ResampleMethod


# ---------------------------- report objects ----------------------------


@dataclass(frozen=True)
class SchemaIssue:
    code: str
    message: str
    hint: str = ""


@dataclass(frozen=True)
class SchemaReport:
    ok: bool
    errors: List[SchemaIssue]
    warnings: List[SchemaIssue]


# ------------------------------ pydantic ------------------------------


def _rgb(v: Any) -> List[int]:
    if isinstance(v, str):
        v = [p for p in v.replace(",", " ").split() if p]
    if not isinstance(v, (list, tuple)):
        raise ValueError(f"expected [r, g, b], got {v!r}")
    vals = [int(x) for x in v]
    if len(vals) != 3:
        raise ValueError(f"expected [r, g, b], got {v!r}")
    for x in vals:
        if not 0 <= x <= 255:
            raise ValueError(f"colour component {x} outside 0..255")
    return vals


class AnchorsBlock(BaseModel):
    """Connection-line anchor angles on a circular source (radians)."""

    model_config = ConfigDict(extra="allow")

    left: float = math.pi
    right: float = 0.0


class InsetParams(BaseModel):
    """All knobs of a single inset run.

    Defaults match a freshly opened dialog: a 100x100 region at the origin,
    2x bicubic zoom, Bottom-Right placement and a yellow 2px indicator.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    # source region
    region_x: int = 0
    region_y: int = 0
    region_width: int = Field(default=100, ge=1)
    region_height: int = Field(default=100, ge=1)
    shape: str = Shape.RECTANGULAR.value

    # magnification
    zoom: float = Field(default=2.0, gt=0)
    interpolation: str = ResampleMethod.BICUBIC.value

    # placement
    position: str = PositionPreset.BOTTOM_RIGHT.value
    custom_x: int = 0
    custom_y: int = 0
    margin: int = 10

    # source indicator (and connection lines)
    indicator_border_width: int = Field(default=2, ge=0)
    indicator_color: List[int] = Field(default_factory=lambda: [255, 255, 0])
    indicator_opacity: float = Field(default=100.0, ge=0, le=100)

    # inset border; ignored while link_border_options is on
    inset_border_width: int = Field(default=3, ge=0)
    inset_color: List[int] = Field(default_factory=lambda: [255, 255, 0])
    inset_opacity: float = Field(default=100.0, ge=0, le=100)
    link_border_options: bool = True

    draw_connection_line: bool = True
    draw_source_indicator: bool = True
    apply_opacity_to_image: bool = False
    opacity_mode: str = OpacityMode.COMPOUND.value

    anchors: AnchorsBlock = Field(default_factory=AnchorsBlock)

    @field_validator("indicator_color", "inset_color", mode="before")
    @classmethod
    def _coerce_rgb(cls, v: Any) -> Any:
        return _rgb(v)

    @field_validator("shape")
    @classmethod
    def _check_shape(cls, v: str) -> str:
        return Shape.parse(v).value

    @field_validator("opacity_mode")
    @classmethod
    def _check_opacity_mode(cls, v: str) -> str:
        return OpacityMode(str(v).strip().lower()).value

    @model_validator(mode="before")
    @classmethod
    def _coerce_region(cls, data: Any) -> Any:
        # Accept a compact ``region: [x, y, w, h]`` as well as the flat keys.
        if not isinstance(data, dict):
            return data
        out = dict(data)
        reg = out.pop("region", None)
        if isinstance(reg, (list, tuple)) and len(reg) == 4:
            for k, v in zip(("region_x", "region_y", "region_width", "region_height"), reg):
                out.setdefault(k, v)
        elif reg is not None:
            out["region"] = reg
        return out

    # ---- typed accessors ----

    @property
    def region_rect(self) -> Rect:
        return Rect.from_xywh(self.region_x, self.region_y, self.region_width, self.region_height)

    @property
    def shape_enum(self) -> Shape:
        return Shape.parse(self.shape)

    @property
    def method(self) -> ResampleMethod:
        return ResampleMethod.parse(self.interpolation)

    @property
    def opacity_mode_enum(self) -> OpacityMode:
        return OpacityMode(self.opacity_mode)

    @property
    def source_anchors(self) -> SourceAnchors:
        return SourceAnchors(left=self.anchors.left, right=self.anchors.right)

    @property
    def effective_border_width(self) -> int:
        if self.link_border_options:
            return self.indicator_border_width
        return self.inset_border_width

    def indicator_color_value(self) -> Color:
        r, g, b = self.indicator_color
        return Color.from_rgb255(r, g, b, self.indicator_opacity)

    def border_color(self) -> Color:
        """Colour of the inset border (the indicator colour while linked)."""
        if self.link_border_options:
            return self.indicator_color_value()
        r, g, b = self.inset_color
        return Color.from_rgb255(r, g, b, self.inset_opacity)


_PARAM_KEYS = set(InsetParams.model_fields) | {"region"}
_ANCHOR_KEYS = set(AnchorsBlock.model_fields)

# Keys a config file may carry besides the parameters themselves.
_META_KEYS = {"config_path", "config_dir", "image", "output", "source_id"}


def find_unknown_keys(cfg: Dict[str, Any]) -> Dict[str, List[str]]:
    """Return unknown keys grouped by section."""

    unknown: Dict[str, List[str]] = {}

    top_unknown = sorted(str(k) for k in cfg.keys() if str(k) not in _PARAM_KEYS | _META_KEYS)
    if top_unknown:
        unknown["top"] = top_unknown

    a = cfg.get("anchors")
    if isinstance(a, dict):
        u = sorted(str(k) for k in a.keys() if str(k) not in _ANCHOR_KEYS)
        if u:
            unknown["anchors"] = u

    return unknown


def schema_validate(cfg: Dict[str, Any]) -> SchemaReport:
    """Validate a parameter dict; unknown keys are reported as warnings."""

    try:
        InsetParams.model_validate(cfg)
    except ValueError as e:
        # pydantic's ValidationError is a ValueError; keep the text short.
        msg = str(e)
        if len(msg) > 2000:
            msg = msg[:2000] + "…"
        return SchemaReport(
            ok=False,
            errors=[SchemaIssue(code="SCHEMA", message=msg, hint="Check parameter names and types")],
            warnings=[],
        )

    warnings: List[SchemaIssue] = []
    unknown = find_unknown_keys(cfg)
    if unknown:
        items: List[str] = []
        for sec, keys in unknown.items():
            for k in keys:
                items.append(f"{sec}: {k}")
        warnings.append(
            SchemaIssue(
                code="UNKNOWN_KEYS",
                message="Unknown parameter keys:\n" + "\n".join(items),
                hint="Check for typos; unknown keys are ignored",
            )
        )
    return SchemaReport(ok=True, errors=[], warnings=warnings)

