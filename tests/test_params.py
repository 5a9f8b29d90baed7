import math

import pytest

from pose_fusion.params import (
    MAX_POSE_DIVERGENCE_M, STDDEV_POWER, STDDEV_SLOPE, VISION_POSE_THRESHOLD, ParameterStore,
)


def test_defaults():
    params = ParameterStore()
    assert params.get(VISION_POSE_THRESHOLD) == 0.5
    assert params.get(STDDEV_SLOPE) == 0.10
    assert params.get(STDDEV_POWER) == 2.0
    assert params.get(MAX_POSE_DIVERGENCE_M) == 1000.0


def test_overrides_and_set():
    params = ParameterStore({STDDEV_SLOPE: 0.3})
    assert params.get(STDDEV_SLOPE) == 0.3
    params.set(VISION_POSE_THRESHOLD, 1)
    assert params.get(VISION_POSE_THRESHOLD) == 1.0
    assert params.snapshot()[VISION_POSE_THRESHOLD] == 1.0


def test_unknown_name_rejected():
    params = ParameterStore()
    with pytest.raises(KeyError):
        params.set("max_ambiguity", 0.2)
    with pytest.raises(KeyError):
        params.get("nope")


def test_non_finite_rejected():
    params = ParameterStore()
    with pytest.raises(ValueError):
        params.set(STDDEV_POWER, math.nan)
    with pytest.raises(ValueError):
        ParameterStore({STDDEV_SLOPE: math.inf})
    assert params.get(STDDEV_POWER) == 2.0
