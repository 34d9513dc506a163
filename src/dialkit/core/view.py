# どこで: `src/dialkit/core/view.py`。
# 何を: 描画アダプタから来た入力を ControlMeta に従って正規化/検証する純粋関数群を提供する。
# なぜ: imgui 依存部と切り離し、型変換・クランプ・丸めを単体テスト可能に保つため。

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .meta import ControlMeta
from .primitives import decimals_for_step, is_finite_number, is_hex_color, round_value, snap_to_decile


@dataclass(frozen=True, slots=True)
class SliderRange:
    """spring の各パラメータを編集するスライダーのレンジ。"""

    label: str
    min: float
    max: float
    step: float


SPRING_FIELD_RANGES: dict[str, SliderRange] = {
    "visualDuration": SliderRange("Duration", 0.1, 1.0, 0.05),
    "bounce": SliderRange("Bounce", 0.0, 1.0, 0.05),
    "stiffness": SliderRange("Stiffness", 1.0, 1000.0, 10.0),
    "damping": SliderRange("Damping", 1.0, 100.0, 1.0),
    "mass": SliderRange("Mass", 0.1, 10.0, 0.1),
}


def slider_format(step: float) -> str:
    """step の小数桁に合わせた printf 形式の表示フォーマットを返す。"""

    return f"%.{decimals_for_step(step)}f"


def _slider_bounds(control: ControlMeta) -> tuple[float, float, float]:
    if control.min is None or control.max is None or control.step is None:
        raise ValueError(f"slider には min/max/step が必要です: path={control.path!r}")
    return float(control.min), float(control.max), float(control.step)


def commit_slider_drag(raw: float, control: ControlMeta, *, snap: bool = True) -> float:
    """ドラッグ中の生の値を、確定値（decile スナップ → step 丸め）へ変換して返す。"""

    lo, hi, step = _slider_bounds(control)
    value = min(max(float(raw), lo), hi)
    if snap:
        value = snap_to_decile(value, lo, hi)
    return round_value(value, step)


def _parse_float(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        value = text
    try:
        out = float(value)
    except (TypeError, ValueError):
        return None
    return out if is_finite_number(out) else None


def normalize_input(value: Any, control: ControlMeta) -> tuple[Any | None, str | None]:
    """kind に応じて UI 入力を正規化し、(正規化値, エラー種別) を返す。

    エラー時は (None, エラー種別)。呼び出し側は直前の有効値を保ち、store を呼ばない。
    slider の入力は [min, max] にクランプしてから step で丸める。
    """

    kind = control.kind

    if kind == "slider":
        number = _parse_float(value)
        if number is None:
            return None, "invalid_number"
        lo, hi, step = _slider_bounds(control)
        return round_value(min(max(number, lo), hi), step), None

    if kind == "toggle":
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in {"true", "1", "on", "yes"}:
                return True, None
            if lowered in {"false", "0", "off", "no"}:
                return False, None
            return None, "invalid_bool"
        return bool(value), None

    if kind == "text":
        if value is None:
            return "", None
        return str(value), None

    if kind == "color":
        text = str(value).strip() if value is not None else ""
        if not is_hex_color(text):
            return None, "invalid_color"
        return text, None

    if kind == "select":
        text = str(value)
        options = control.options or ()
        if not any(opt.value == text for opt in options):
            return None, "invalid_choice"
        return text, None

    if kind == "spring":
        if not isinstance(value, Mapping):
            return None, "invalid_spring"
        out: dict[str, Any] = dict(value)
        for name in SPRING_FIELD_RANGES:
            if name not in out or out[name] is None:
                continue
            number = _parse_float(out[name])
            if number is None:
                return None, "invalid_spring"
            out[name] = number
        out["type"] = "spring"
        return out, None

    # folder / action は値を持たない
    return None, "not_settable"


__all__ = [
    "SliderRange",
    "SPRING_FIELD_RANGES",
    "slider_format",
    "commit_slider_drag",
    "normalize_input",
]
