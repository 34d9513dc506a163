# どこで: `src/dialkit/core/primitives.py`。
# 何を: step 由来の丸め・デシル吸着・hex カラー判定・select 選択肢の正規化を提供する。
# なぜ: 状態を持たない小さな規則を 1 箇所に集め、store/resolver/GUI で同じ判定を使うため。

from __future__ import annotations

import math
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from typing import Any

DECILE_SNAP_THRESHOLD = 0.03125

_HEX_COLOR_RE = re.compile(r"^#([0-9A-Fa-f]{3}|[0-9A-Fa-f]{6}|[0-9A-Fa-f]{8})$")
_WORD_START_RE = re.compile(r"\b\w")


@dataclass(frozen=True, slots=True)
class SelectOption:
    """select コントロールの選択肢（値と表示ラベル）。"""

    value: str
    label: str


def decimals_for_step(step: float) -> int:
    """step の文字列表現から小数点以下の桁数を返す（`0.05` → 2, `1` → 0）。"""

    text = repr(float(step)) if isinstance(step, float) else str(step)
    if "e" in text or "E" in text:
        # 1e-05 のような指数表記は仮数部の桁と指数から桁数を求める。
        mantissa, _, exponent = text.lower().partition("e")
        exp = int(exponent)
        frac = mantissa.partition(".")[2].rstrip("0")
        return max(0, len(frac) - exp)
    if "." not in text:
        return 0
    frac = text.partition(".")[2]
    if frac == "0":
        # repr(1.0) == "1.0" は整数 step とみなす。
        return 0
    return len(frac)


def round_value(value: float, step: float) -> float:
    """value を step の倍数に丸め、step の桁数で再量子化して返す。

    再量子化で浮動小数点の残差（0.30000000000000004 など）を消すため、
    `round_value(round_value(x, s), s) == round_value(x, s)` が成り立つ。
    """

    step_f = float(step)
    if step_f <= 0.0:
        raise ValueError(f"step は正の値である必要があります: got={step!r}")
    raw = round(float(value) / step_f) * step_f
    return round(raw, decimals_for_step(step))


def snap_to_decile(raw: float, min_value: float, max_value: float) -> float:
    """raw がレンジの 1/10 刻みに十分近ければ、その刻みへ吸着した値を返す。

    正規化位置と最寄りの 1/10 との差が `DECILE_SNAP_THRESHOLD` 以下なら吸着し、
    それ以外は raw をそのまま返す。
    """

    span = float(max_value) - float(min_value)
    if span == 0.0:
        return raw
    normalized = (float(raw) - float(min_value)) / span
    nearest = round(normalized * 10.0) / 10.0
    if abs(normalized - nearest) <= DECILE_SNAP_THRESHOLD:
        return float(min_value) + nearest * span
    return raw


def is_hex_color(value: Any) -> bool:
    """`#` + 3/6/8 桁の hex カラー文字列なら True を返す。"""

    if not isinstance(value, str):
        return False
    return _HEX_COLOR_RE.match(value) is not None


def expand_shorthand_hex(value: str) -> str:
    """3 桁の短縮 hex（`#abc`）を 6 桁（`#aabbcc`）に展開する。それ以外はそのまま返す。"""

    if len(value) != 4 or not value.startswith("#"):
        return value
    r, g, b = value[1], value[2], value[3]
    return f"#{r}{r}{g}{g}{b}{b}"


def to_title_case(text: str) -> str:
    """各単語の先頭文字を大文字にして返す。"""

    return _WORD_START_RE.sub(lambda m: m.group(0).upper(), str(text))


def _as_select_option(option: Any) -> SelectOption:
    if isinstance(option, SelectOption):
        return option
    if isinstance(option, str):
        return SelectOption(value=option, label=to_title_case(option))
    if isinstance(option, Mapping):
        try:
            value = str(option["value"])
        except KeyError as exc:
            raise ValueError(f"select 選択肢に value がありません: got={option!r}") from exc
        label = option.get("label")
        return SelectOption(value=value, label=to_title_case(value) if label is None else str(label))
    raise ValueError(f"select 選択肢は str か {{value, label}} である必要があります: got={option!r}")


def normalize_select_options(options: Sequence[Any]) -> tuple[SelectOption, ...]:
    """選択肢列（str / {value, label}）を SelectOption のタプルへ正規化する。"""

    return tuple(_as_select_option(opt) for opt in options)


def get_first_option_value(options: Sequence[Any]) -> str:
    """正規化後の先頭選択肢の value を返す（select の暗黙既定値）。"""

    normalized = normalize_select_options(options)
    if not normalized:
        raise ValueError("select の選択肢が空です")
    return normalized[0].value


def is_finite_number(value: Any) -> bool:
    """bool を除く有限の数値なら True を返す。"""

    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(float(value))


__all__ = [
    "DECILE_SNAP_THRESHOLD",
    "SelectOption",
    "decimals_for_step",
    "round_value",
    "snap_to_decile",
    "is_hex_color",
    "expand_shorthand_hex",
    "to_title_case",
    "normalize_select_options",
    "get_first_option_value",
    "is_finite_number",
]
