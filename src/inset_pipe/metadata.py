"""Extraction metadata stored next to an extracted inset image.

Extract mode writes the source region, shape and zoom into key/value cards so
a later Finalize run can find where the inset came from. Cards are plain
strings; string values may arrive quoted (FITS-style ``'Circular'``).
"""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Mapping

from inset_pipe.errors import OutOfBoundsError
from inset_pipe.geometry import Rect, Shape


log = logging.getLogger(__name__)

DEFAULT_PREFIX = "INSET"
DEFAULT_ZOOM = 2.0


def _unquote(v: object) -> str:
    return str(v).strip().strip("'\"").strip()


def _card_int(cards: Mapping[str, object], key: str, default: int = 0) -> int:
    raw = cards.get(key)
    if raw is None:
        return default
    try:
        return int(float(_unquote(raw)))
    except (ValueError, OverflowError):
        log.warning("Ignoring non-numeric card %s=%r", key, raw)
        return default


@dataclass(frozen=True)
class ExtractionMetadata:
    region: Rect
    shape: Shape = Shape.RECTANGULAR
    zoom: float = DEFAULT_ZOOM
    source_id: str | None = None

    def to_cards(self, prefix: str = DEFAULT_PREFIX) -> dict[str, str]:
        r = self.region
        cards = {
            f"{prefix}_RX": str(r.x0),
            f"{prefix}_RY": str(r.y0),
            f"{prefix}_RW": str(r.width),
            f"{prefix}_RH": str(r.height),
            f"{prefix}_SHAPE": self.shape.value,
            f"{prefix}_ZOOM": f"{float(self.zoom):g}",
        }
        if self.source_id:
            cards[f"{prefix}_SRC"] = str(self.source_id)
        return cards

    @classmethod
    def from_cards(
        cls, cards: Mapping[str, object], prefix: str = DEFAULT_PREFIX
    ) -> "ExtractionMetadata | None":
        """Parse cards written by :meth:`to_cards`.

        Returns None when the region origin/width cards are missing (the image
        was not produced by Extract mode).
        """
        if f"{prefix}_RX" not in cards or f"{prefix}_RW" not in cards:
            return None

        region = Rect.from_xywh(
            _card_int(cards, f"{prefix}_RX"),
            _card_int(cards, f"{prefix}_RY"),
            _card_int(cards, f"{prefix}_RW"),
            _card_int(cards, f"{prefix}_RH"),
        )

        try:
            shape = Shape.parse(cards.get(f"{prefix}_SHAPE"))
        except ValueError:
            log.warning("Unknown shape card %r; using rectangular", cards.get(f"{prefix}_SHAPE"))
            shape = Shape.RECTANGULAR

        zoom = DEFAULT_ZOOM
        raw_zoom = cards.get(f"{prefix}_ZOOM")
        if raw_zoom is not None:
            try:
                zoom = float(_unquote(raw_zoom))
            except ValueError:
                log.warning("Ignoring non-numeric zoom card %r", raw_zoom)

        src = cards.get(f"{prefix}_SRC")
        source_id = _unquote(src) if src is not None else None
        return cls(region=region, shape=shape, zoom=zoom, source_id=source_id or None)

    def check_fits_source(self, width: int, height: int) -> None:
        """Raise :class:`OutOfBoundsError` if the region does not fit ``width x height``."""
        r = self.region
        if r.x0 < 0 or r.y0 < 0 or r.x1 > width or r.y1 > height:
            raise OutOfBoundsError(
                f"Metadata region {r.width}x{r.height} at {r.x0},{r.y0} "
                f"does not fit source image {width}x{height}"
            )
