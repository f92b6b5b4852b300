"""Single-channel resampling kernels.

Every method maps destination pixel ``x`` to the source coordinate
``x * src_w / dst_w`` (same for ``y``) and samples a clamp-to-edge
neighbourhood around ``floor`` of that coordinate:

========  =====  ===========================================================
method    taps   weights
========  =====  ===========================================================
nearest   1      the floor sample
bilinear  2      ``1 - f``, ``f`` (upper tap clamped to ``n - 1``)
bicubic   4      cubic convolution, offsets -1..2, normalised
lanczos   6      Lanczos-3 window, offsets -2..3, normalised
========  =====  ===========================================================

Implementation notes
--------------------
All four kernels are separable. We build a ``(dst_len, taps)`` index/weight
table per axis and apply X then Y with NumPy fancy indexing. Dividing each
axis by its own weight sum is the same as dividing the 2D sum by the product
weight sum, so edge-clamped taps are normalised exactly as a full 2D loop would.

Results are clipped to [0, 1]. The source is never modified.
"""

from __future__ import annotations

import logging
from enum import Enum

import numpy as np


log = logging.getLogger(__name__)

LANCZOS_A = 3


class ResampleMethod(str, Enum):
    NEAREST = "nearest"
    BILINEAR = "bilinear"
    BICUBIC = "bicubic"
    LANCZOS = "lanczos"

    @classmethod
    def parse(cls, value: "ResampleMethod | str | None") -> "ResampleMethod":
        """Resolve config/UI names; unknown names fall back to bicubic."""
        if isinstance(value, ResampleMethod):
            return value
        s = str(value or "").strip().lower().replace("_", " ").replace("-", " ")
        aliases = {
            "nearest": cls.NEAREST,
            "nearest neighbor": cls.NEAREST,
            "nearest neighbour": cls.NEAREST,
            "bilinear": cls.BILINEAR,
            "bicubic": cls.BICUBIC,
            "lanczos": cls.LANCZOS,
            "lanczos 3": cls.LANCZOS,
            "lanczos3": cls.LANCZOS,
        }
        if s in aliases:
            return aliases[s]
        log.warning("Unknown interpolation method %r; using bicubic", value)
        return cls.BICUBIC


def cubic_weight(t):
    """Cubic convolution kernel (a = -0.5)."""
    t = np.abs(np.asarray(t, dtype=float))
    t2 = t * t
    t3 = t2 * t
    w = np.where(
        t <= 1.0,
        1.5 * t3 - 2.5 * t2 + 1.0,
        np.where(t <= 2.0, -0.5 * t3 + 2.5 * t2 - 4.0 * t + 2.0, 0.0),
    )
    return float(w) if w.ndim == 0 else w


def lanczos_kernel(x, a: int = LANCZOS_A):
    """Lanczos window: ``a*sin(pi x)*sin(pi x / a) / (pi x)^2`` on ``|x| < a``."""
    x = np.asarray(x, dtype=float)
    with np.errstate(divide="ignore", invalid="ignore"):
        pix = np.pi * x
        val = a * np.sin(pix) * np.sin(pix / a) / (pix * pix)
    w = np.where(x == 0.0, 1.0, np.where(np.abs(x) < a, val, 0.0))
    return float(w) if w.ndim == 0 else w


def _normalise(w: np.ndarray) -> np.ndarray:
    s = w.sum(axis=1, keepdims=True)
    safe = np.where(s != 0.0, s, 1.0)
    return np.where(s != 0.0, w / safe, 0.0)


def _axis_taps(src_len: int, dst_len: int, method: ResampleMethod) -> tuple[np.ndarray, np.ndarray]:
    """Index and weight tables of shape ``(dst_len, taps)`` for one axis."""
    pos = np.arange(dst_len, dtype=float) * (src_len / dst_len)
    i0 = np.floor(pos).astype(np.int64)
    frac = pos - i0
    last = src_len - 1

    if method is ResampleMethod.NEAREST:
        idx = np.minimum(i0, last)[:, None]
        return idx, np.ones_like(idx, dtype=float)

    if method is ResampleMethod.BILINEAR:
        i1 = np.minimum(i0 + 1, last)
        idx = np.stack([np.minimum(i0, last), i1], axis=1)
        w = np.stack([1.0 - frac, frac], axis=1)
        return idx, w

    if method is ResampleMethod.BICUBIC:
        offsets = np.arange(-1, 3)
        w = cubic_weight(offsets[None, :] - frac[:, None])
    else:
        offsets = np.arange(-LANCZOS_A + 1, LANCZOS_A + 1)
        w = lanczos_kernel(frac[:, None] - offsets[None, :])

    idx = np.clip(i0[:, None] + offsets[None, :], 0, last)
    return idx, _normalise(np.asarray(w, dtype=float))


def resample(
    src: np.ndarray,
    dst_width: int,
    dst_height: int,
    method: ResampleMethod | str = ResampleMethod.BICUBIC,
    *,
    out: np.ndarray | None = None,
) -> np.ndarray:
    """Resample a 2D channel to ``(dst_height, dst_width)``.

    Parameters
    ----------
    src:
        2D array ``(src_height, src_width)``.
    dst_width, dst_height:
        Target size in pixels (>= 1).
    method:
        :class:`ResampleMethod` or its name.
    out:
        Optional preallocated destination of shape ``(dst_height, dst_width)``.

    Returns
    -------
    The destination array (``out`` itself when given).
    """

    a = np.asarray(src)
    if a.ndim != 2 or a.size == 0:
        raise ValueError(f"src must be a non-empty 2D array (got shape {a.shape})")
    dst_width = int(dst_width)
    dst_height = int(dst_height)
    if dst_width < 1 or dst_height < 1:
        raise ValueError(f"Invalid target size {dst_width}x{dst_height}")
    if out is not None and out.shape != (dst_height, dst_width):
        raise ValueError(f"out must have shape {(dst_height, dst_width)} (got {out.shape})")

    m = ResampleMethod.parse(method)
    src_h, src_w = a.shape
    ix, wx = _axis_taps(src_w, dst_width, m)
    iy, wy = _axis_taps(src_h, dst_height, m)

    a = a.astype(float, copy=False)
    # X pass: (src_h, dst_w)
    tmp = (a[:, ix] * wx[None, :, :]).sum(axis=2)
    # Y pass: (dst_h, dst_w)
    res = (tmp[iy] * wy[:, :, None]).sum(axis=1)
    np.clip(res, 0.0, 1.0, out=res)

    if out is None:
        return res.astype(np.float32)
    out[...] = res
    return out


def radial_distance(width: int, height: int) -> np.ndarray:
    """Distance from each pixel centre to the centre of a ``width x height`` box."""
    dx = np.arange(width, dtype=float) - width / 2 + 0.5
    dy = np.arange(height, dtype=float) - height / 2 + 0.5
    return np.hypot(dx[None, :], dy[:, None])


def circular_mask(width: int, height: int, radius: float | None = None) -> np.ndarray:
    """Circular coverage mask with a one-pixel anti-aliased edge.

    ``coverage = clip(radius + 0.5 - dist, 0, 1)``. The default radius fits
    the smaller side, so a mask rebuilt at a new size stays crisp instead of
    being interpolated.
    """
    if radius is None:
        radius = min(width, height) / 2
    dist = radial_distance(int(width), int(height))
    return np.clip(float(radius) + 0.5 - dist, 0.0, 1.0).astype(np.float32)
