import numpy as np
import pytest
from psd_tools.composite import blend as psd_blend

from psd_run.composite import blend
from psd_run.composite.blend import BLEND_FUNC, get_blend_func
from psd_run.constants import BlendMode


def color(*rgb):
    return np.array(rgb, dtype=np.float32).reshape((1, 1, 3))


def test_blend_func_table():
    assert set(BLEND_FUNC) == set(BlendMode)
    assert get_blend_func(BlendMode.PASS_THROUGH) is blend.normal
    assert get_blend_func(BlendMode.NORMAL) is psd_blend.normal
    assert get_blend_func(BlendMode.MULTIPLY) is psd_blend.multiply
    assert get_blend_func(BlendMode.LUMINOSITY) is psd_blend.luminosity


@pytest.mark.parametrize("blend_mode", [None, "multiply", 42])
def test_unsupported_blend_mode(blend_mode):
    assert get_blend_func(blend_mode) is blend.normal


@pytest.mark.parametrize("blend_mode", list(BlendMode))
def test_blend_shape(blend_mode):
    rng = np.random.RandomState(0)
    Cb = rng.rand(4, 4, 3).astype(np.float32)
    Cs = rng.rand(4, 4, 3).astype(np.float32)
    B = get_blend_func(blend_mode)(Cb, Cs)
    assert B.shape == Cb.shape
    assert np.isfinite(B).all()


def test_multiply_by_white_is_identity():
    Cb = color(1.0, 0.0, 0.0)
    B = get_blend_func(BlendMode.MULTIPLY)(Cb, color(1.0, 1.0, 1.0))
    assert B == pytest.approx(Cb)
