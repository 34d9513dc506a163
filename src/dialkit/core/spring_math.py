# どこで: `src/dialkit/core/spring_math.py`。
# 何を: spring の 2 つの表現（visualDuration/bounce と stiffness/damping/mass）の相互変換と応答曲線の生成を提供する。
# なぜ: モード切替時に見た目の動きを保ったまま値を置き換え、プレビュー描画でも同じ式を使うため。

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

import numpy as np

SpringMode = Literal["simple", "advanced"]
SPRING_MODES: tuple[SpringMode, ...] = ("simple", "advanced")

DEFAULT_VISUAL_DURATION = 0.3
DEFAULT_BOUNCE = 0.2
DEFAULT_STIFFNESS = 400.0
DEFAULT_DAMPING = 17.0
DEFAULT_MASS = 1.0

SIMPLE_KEYS = ("visualDuration", "bounce")
ADVANCED_KEYS = ("stiffness", "damping", "mass")

CURVE_STEPS = 100
PREVIEW_DURATION = 2.0


@dataclass(frozen=True, slots=True)
class SpringPhysics:
    """物理表現（stiffness, damping, mass）。"""

    stiffness: float
    damping: float
    mass: float


@dataclass(frozen=True, slots=True)
class SpringTiming:
    """時間表現（visual_duration 秒, bounce 0..1）。"""

    visual_duration: float
    bounce: float


def _get_float(spring: Mapping[str, Any], key: str, default: float) -> float:
    value = spring.get(key)
    if value is None:
        return float(default)
    return float(value)


def resolve_spring_physics(spring: Mapping[str, Any], is_simple_mode: bool) -> SpringPhysics:
    """spring の設定から物理パラメータを求めて返す。

    Parameters
    ----------
    spring : Mapping[str, Any]
        `{"type": "spring", ...}` 形式の値。欠けているキーは既定値で補う。
    is_simple_mode : bool
        True なら visualDuration/bounce から計算し、False なら物理値をそのまま返す。

    Notes
    -----
    simple モードは mass=1 固定で、固有角振動数 2π/visualDuration と
    減衰比 ζ = 1 - bounce から stiffness/damping を決める。
    bounce=0 で臨界減衰、1 に近づくほど振動的になる。
    """

    if is_simple_mode:
        visual_duration = _get_float(spring, "visualDuration", DEFAULT_VISUAL_DURATION)
        bounce = _get_float(spring, "bounce", DEFAULT_BOUNCE)
        if visual_duration <= 0.0:
            raise ValueError(f"visualDuration は正の値である必要があります: got={visual_duration!r}")
        mass = DEFAULT_MASS
        stiffness = ((2.0 * math.pi) / visual_duration) ** 2
        damping_ratio = 1.0 - bounce
        damping = 2.0 * damping_ratio * math.sqrt(stiffness * mass)
        return SpringPhysics(stiffness=stiffness, damping=damping, mass=mass)

    return SpringPhysics(
        stiffness=_get_float(spring, "stiffness", DEFAULT_STIFFNESS),
        damping=_get_float(spring, "damping", DEFAULT_DAMPING),
        mass=_get_float(spring, "mass", DEFAULT_MASS),
    )


def spring_simple_from_physics(stiffness: float, damping: float, mass: float) -> SpringTiming:
    """物理パラメータから visualDuration/bounce を逆算して返す。

    `resolve_spring_physics(..., is_simple_mode=True)` の逆変換。
    mass≠1 の場合も運動方程式（x'' = -(k/m)x - (c/m)x'）が一致する値を返す。
    過減衰（ζ > 1）は bounce=0 に丸める。
    """

    k = float(stiffness)
    c = float(damping)
    m = float(mass)
    if k <= 0.0 or m <= 0.0:
        raise ValueError(f"stiffness/mass は正の値である必要があります: got=({k!r}, {m!r})")
    visual_duration = 2.0 * math.pi * math.sqrt(m / k)
    damping_ratio = c / (2.0 * math.sqrt(k * m))
    bounce = max(0.0, 1.0 - damping_ratio)
    return SpringTiming(visual_duration=visual_duration, bounce=bounce)


def infer_spring_mode(spring: Mapping[str, Any], default: SpringMode = "simple") -> SpringMode:
    """spring の値に含まれるキーからモードを推定して返す。"""

    has_simple = any(spring.get(k) is not None for k in SIMPLE_KEYS)
    has_advanced = any(spring.get(k) is not None for k in ADVANCED_KEYS)
    if has_simple and not has_advanced:
        return "simple"
    if has_advanced and not has_simple:
        return "advanced"
    return default


def convert_spring(spring: Mapping[str, Any], to_mode: SpringMode) -> dict[str, Any]:
    """spring を to_mode の表現へ変換した新しい dict を返す。

    変換元のモードは to_mode の反対側とみなし、非アクティブ側のキーは取り除く。
    それ以外のキー（type など）は保持する。
    """

    if to_mode not in SPRING_MODES:
        raise ValueError(f"未知の spring モードです: got={to_mode!r}")
    if not isinstance(spring, Mapping):
        raise ValueError(f"spring は mapping である必要があります: got={spring!r}")

    rest = {k: v for k, v in spring.items() if k not in SIMPLE_KEYS and k not in ADVANCED_KEYS}
    rest["type"] = "spring"

    if to_mode == "advanced":
        physics = resolve_spring_physics(spring, is_simple_mode=True)
        rest["stiffness"] = physics.stiffness
        rest["damping"] = physics.damping
        rest["mass"] = physics.mass
        return rest

    physics = resolve_spring_physics(spring, is_simple_mode=False)
    timing = spring_simple_from_physics(physics.stiffness, physics.damping, physics.mass)
    rest["visualDuration"] = timing.visual_duration
    rest["bounce"] = timing.bounce
    return rest


def generate_spring_curve(
    stiffness: float,
    damping: float,
    mass: float,
    duration: float,
) -> np.ndarray:
    """静止状態から目標 1 へ向かう減衰振動のステップ応答をサンプルする。

    Returns
    -------
    np.ndarray
        shape (101, 2), float64。各行は (time, position)。先頭は (0, 0)。

    Notes
    -----
    固定 100 ステップの半陰的 Euler 法（速度→位置の順に更新）。
    内部状態を持たないため、同じ引数なら常にビット単位で同じ配列を返す。
    """

    k = float(stiffness)
    c = float(damping)
    m = float(mass)
    d = float(duration)
    if m <= 0.0:
        raise ValueError(f"mass は正の値である必要があります: got={mass!r}")
    if d < 0.0:
        raise ValueError(f"duration は 0 以上である必要があります: got={duration!r}")

    dt = d / CURVE_STEPS
    target = 1.0
    position = 0.0
    velocity = 0.0

    out = np.empty((CURVE_STEPS + 1, 2), dtype=np.float64)
    for i in range(CURVE_STEPS + 1):
        out[i, 0] = i * dt
        out[i, 1] = position

        force = -k * (position - target) - c * velocity
        acceleration = force / m
        velocity += acceleration * dt
        position += velocity * dt

    return out


def spring_preview_curve(
    spring: Mapping[str, Any],
    mode: SpringMode,
    *,
    duration: float = PREVIEW_DURATION,
) -> np.ndarray:
    """現在の spring 値からプレビュー用の応答曲線を返す（永続化しない）。"""

    physics = resolve_spring_physics(spring, is_simple_mode=(mode == "simple"))
    return generate_spring_curve(physics.stiffness, physics.damping, physics.mass, duration)


__all__ = [
    "SpringMode",
    "SPRING_MODES",
    "SpringPhysics",
    "SpringTiming",
    "resolve_spring_physics",
    "spring_simple_from_physics",
    "infer_spring_mode",
    "convert_spring",
    "generate_spring_curve",
    "spring_preview_curve",
]
