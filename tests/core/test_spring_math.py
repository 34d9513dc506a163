import math

import numpy as np
import pytest

from dialkit.core.spring_math import (
    convert_spring,
    generate_spring_curve,
    infer_spring_mode,
    resolve_spring_physics,
    spring_preview_curve,
    spring_simple_from_physics,
)


def test_simple_mode_physics_matches_closed_form():
    physics = resolve_spring_physics({"type": "spring", "visualDuration": 0.3, "bounce": 0.2}, True)
    expected_k = (2.0 * math.pi / 0.3) ** 2
    assert physics.mass == 1.0
    assert physics.stiffness == pytest.approx(expected_k)
    assert physics.stiffness == pytest.approx(438.6, abs=0.1)
    assert physics.damping == pytest.approx(2.0 * 0.8 * math.sqrt(expected_k))
    assert physics.damping == pytest.approx(33.5, abs=0.05)


def test_advanced_mode_uses_values_with_defaults():
    physics = resolve_spring_physics({"type": "spring", "stiffness": 200}, False)
    assert (physics.stiffness, physics.damping, physics.mass) == (200.0, 17.0, 1.0)


def test_simple_mode_rejects_non_positive_duration():
    with pytest.raises(ValueError):
        resolve_spring_physics({"visualDuration": 0.0, "bounce": 0.2}, True)


@pytest.mark.parametrize("visual_duration", [0.05, 0.3, 1.0, 2.0])
@pytest.mark.parametrize("bounce", [0.0, 0.2, 0.5, 0.95])
def test_simple_advanced_simple_round_trip(visual_duration, bounce):
    physics = resolve_spring_physics({"visualDuration": visual_duration, "bounce": bounce}, True)
    timing = spring_simple_from_physics(physics.stiffness, physics.damping, physics.mass)
    assert timing.visual_duration == pytest.approx(visual_duration, abs=1e-9)
    assert timing.bounce == pytest.approx(bounce, abs=1e-9)


def test_overdamped_physics_maps_to_zero_bounce():
    timing = spring_simple_from_physics(100.0, 100.0, 1.0)
    assert timing.bounce == 0.0


def test_infer_spring_mode():
    assert infer_spring_mode({"type": "spring", "visualDuration": 0.3}) == "simple"
    assert infer_spring_mode({"type": "spring", "stiffness": 300, "damping": 20}) == "advanced"
    assert infer_spring_mode({"type": "spring"}) == "simple"
    assert infer_spring_mode({"type": "spring"}, default="advanced") == "advanced"


def test_convert_spring_swaps_representation_and_keeps_other_keys():
    spring = {"type": "spring", "visualDuration": 0.3, "bounce": 0.2, "restDelta": 0.01}

    advanced = convert_spring(spring, "advanced")
    assert set(advanced) == {"type", "restDelta", "stiffness", "damping", "mass"}
    assert advanced["mass"] == 1.0
    assert advanced["restDelta"] == 0.01

    simple = convert_spring(advanced, "simple")
    assert set(simple) == {"type", "restDelta", "visualDuration", "bounce"}
    assert simple["visualDuration"] == pytest.approx(0.3)
    assert simple["bounce"] == pytest.approx(0.2)

    # 入力は変更しない
    assert spring == {"type": "spring", "visualDuration": 0.3, "bounce": 0.2, "restDelta": 0.01}


def test_convert_spring_rejects_unknown_mode():
    with pytest.raises(ValueError):
        convert_spring({"type": "spring"}, "bouncy")  # type: ignore[arg-type]


def test_generate_spring_curve_is_deterministic():
    a = generate_spring_curve(400.0, 17.0, 1.0, 2.0)
    b = generate_spring_curve(400.0, 17.0, 1.0, 2.0)
    assert a.shape == (101, 2)
    assert a.dtype == np.float64
    assert np.array_equal(a, b)
    assert tuple(a[0]) == (0.0, 0.0)
    assert a[-1, 0] == pytest.approx(2.0)


def test_generate_spring_curve_settles_near_target():
    curve = generate_spring_curve(400.0, 40.0, 1.0, 2.0)
    assert curve[-1, 1] == pytest.approx(1.0, abs=1e-3)


def test_generate_spring_curve_rejects_invalid_arguments():
    with pytest.raises(ValueError):
        generate_spring_curve(400.0, 17.0, 0.0, 2.0)
    with pytest.raises(ValueError):
        generate_spring_curve(400.0, 17.0, 1.0, -1.0)


def test_spring_preview_curve_uses_mode():
    spring = {"type": "spring", "visualDuration": 0.3, "bounce": 0.2}
    simple = spring_preview_curve(spring, "simple")
    physics = resolve_spring_physics(spring, True)
    expected = generate_spring_curve(physics.stiffness, physics.damping, physics.mass, 2.0)
    assert np.array_equal(simple, expected)

    advanced = spring_preview_curve(spring, "advanced", duration=1.0)
    assert advanced.shape == (101, 2)
    assert advanced[-1, 0] == pytest.approx(1.0)


@pytest.mark.parametrize("value", [5, None, "spring", [0.3, 0.2]])
def test_convert_spring_rejects_non_mapping(value):
    with pytest.raises(ValueError):
        convert_spring(value, "advanced")
