"""Addressable multi-channel sample buffers.

The engine never touches an image directly: it reads and writes rectangular
blocks of one channel at a time. :class:`ImageBuffer` is the in-memory
implementation used by the pipeline and the tests; anything exposing the same
``width``/``height``/``channels`` attributes and ``get_samples``/``set_samples``
methods can be used as a source or destination.

Sample convention
-----------------
- one channel of a block is a 2D ``float32`` array of shape ``(height, width)``
  (row-major, so ``buf.size == width * height``)
- reads return values as stored (no clamping)
- every write clips to ``[0, 1]``
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

import numpy as np

from inset_pipe.geometry import Rect


@runtime_checkable
class SampleSource(Protocol):
    width: int
    height: int
    channels: int

    def get_samples(self, rect: Rect, channel: int) -> np.ndarray: ...


@runtime_checkable
class SampleTarget(SampleSource, Protocol):
    def set_samples(self, samples: np.ndarray, rect: Rect, channel: int) -> None: ...


class ImageBuffer:
    """Float image stored as ``(channels, height, width)``.

    The destination image is owned by the caller; stages only read and write
    sub-rectangles of it.
    """

    def __init__(self, data: np.ndarray):
        a = np.asarray(data, dtype=np.float32)
        if a.ndim == 2:
            a = a[None, :, :]
        if a.ndim != 3:
            raise ValueError(f"ImageBuffer expects (C, H, W) or (H, W) data, got shape {a.shape}")
        self._data = a

    @classmethod
    def blank(cls, width: int, height: int, channels: int = 3, fill: float = 0.0) -> "ImageBuffer":
        return cls(np.full((int(channels), int(height), int(width)), float(fill), dtype=np.float32))

    @property
    def data(self) -> np.ndarray:
        return self._data

    @property
    def channels(self) -> int:
        return int(self._data.shape[0])

    @property
    def height(self) -> int:
        return int(self._data.shape[1])

    @property
    def width(self) -> int:
        return int(self._data.shape[2])

    @property
    def bounds(self) -> Rect:
        return Rect(0, 0, self.width, self.height)

    def _check_rect(self, rect: Rect) -> None:
        if rect.is_empty or not self.bounds.contains_rect(rect):
            raise ValueError(f"Sample rect {rect} outside image {self.width}x{self.height}")

    def get_samples(self, rect: Rect, channel: int) -> np.ndarray:
        """Copy of one channel of ``rect``."""
        self._check_rect(rect)
        return self._data[channel, rect.y0 : rect.y1, rect.x0 : rect.x1].copy()

    def set_samples(self, samples: np.ndarray, rect: Rect, channel: int) -> None:
        """Write one channel of ``rect``; values are clipped to [0, 1]."""
        self._check_rect(rect)
        s = np.asarray(samples, dtype=np.float32).reshape(rect.height, rect.width)
        self._data[channel, rect.y0 : rect.y1, rect.x0 : rect.x1] = np.clip(s, 0.0, 1.0)

    def paste(self, src: SampleSource, x: int, y: int) -> None:
        """Copy ``src`` with its top-left at ``(x, y)``, clipped to this buffer."""
        dst_rect = Rect.from_xywh(x, y, src.width, src.height).intersection(self.bounds)
        if dst_rect.is_empty:
            return
        src_rect = dst_rect.translated(-x, -y)
        for c in range(min(self.channels, src.channels)):
            self.set_samples(src.get_samples(src_rect, c), dst_rect, c)

    def copy(self) -> "ImageBuffer":
        return ImageBuffer(self._data.copy())

    def __repr__(self) -> str:
        return f"ImageBuffer({self.width}x{self.height}x{self.channels})"
