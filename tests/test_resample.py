import numpy as np
import pytest

from inset_pipe.resample import (
    ResampleMethod,
    circular_mask,
    cubic_weight,
    lanczos_kernel,
    resample,
)


def _image(h: int = 12, w: int = 16) -> np.ndarray:
    rng = np.random.default_rng(7)
    return rng.uniform(0.0, 1.0, (h, w)).astype(np.float32)


def test_kernels_interpolate_at_integers() -> None:
    assert cubic_weight(0.0) == 1.0
    assert cubic_weight(1.0) == 0.0
    assert cubic_weight(2.0) == 0.0
    assert cubic_weight(2.5) == 0.0
    assert lanczos_kernel(0.0) == 1.0
    assert abs(lanczos_kernel(1.0)) < 1e-12
    assert lanczos_kernel(3.0) == 0.0
    assert lanczos_kernel(-4.0) == 0.0


def test_nearest_identity_is_exact() -> None:
    a = _image()
    out = resample(a, 16, 12, ResampleMethod.NEAREST)
    assert out.dtype == np.float32
    np.testing.assert_array_equal(out, a)


@pytest.mark.parametrize("method", ["bilinear", "bicubic", "lanczos"])
def test_identity_resample_is_close(method: str) -> None:
    a = _image()
    out = resample(a, 16, 12, method)
    assert np.max(np.abs(out - a)) < 1e-4


@pytest.mark.parametrize("method", list(ResampleMethod))
def test_constant_image_stays_constant(method: ResampleMethod) -> None:
    a = np.full((10, 10), 0.37, dtype=np.float32)
    out = resample(a, 23, 17, method)
    assert out.shape == (17, 23)
    np.testing.assert_allclose(out, 0.37, atol=1e-6)


def test_overshoot_is_clipped() -> None:
    a = np.zeros((10, 10), dtype=np.float32)
    a[:, 5:] = 1.0
    for method in (ResampleMethod.BICUBIC, ResampleMethod.LANCZOS):
        out = resample(a, 37, 37, method)
        assert out.min() >= 0.0
        assert out.max() <= 1.0


def test_resample_into_preallocated_out() -> None:
    a = _image()
    out = np.empty((24, 32), dtype=np.float32)
    res = resample(a, 32, 24, "bilinear", out=out)
    assert res is out
    with pytest.raises(ValueError):
        resample(a, 32, 24, out=np.empty((10, 10), dtype=np.float32))


def test_resample_rejects_bad_sizes() -> None:
    with pytest.raises(ValueError):
        resample(_image(), 0, 5)
    with pytest.raises(ValueError):
        resample(np.zeros((0, 3)), 5, 5)


def test_method_names() -> None:
    assert ResampleMethod.parse("Nearest Neighbor") is ResampleMethod.NEAREST
    assert ResampleMethod.parse("Lanczos-3") is ResampleMethod.LANCZOS
    assert ResampleMethod.parse("BILINEAR") is ResampleMethod.BILINEAR
    assert ResampleMethod.parse("sinc-ish") is ResampleMethod.BICUBIC


def test_circular_mask_profile() -> None:
    m = circular_mask(21, 21)
    assert m.dtype == np.float32
    assert m[10, 10] == 1.0
    assert m[0, 0] == 0.0

    # monotone non-increasing along a ray from the centre
    row = m[10, 10:]
    assert np.all(np.diff(row) <= 0)

    yy, xx = np.mgrid[0:21, 0:21]
    dist = np.hypot(xx + 0.5 - 10.5, yy + 0.5 - 10.5)
    assert np.all(m[dist > 10.5 + 0.5] == 0.0)
    assert np.all(m[dist <= 10.5 - 0.5] == 1.0)
