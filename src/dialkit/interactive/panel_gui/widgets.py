# どこで: `src/dialkit/interactive/panel_gui/widgets.py`。
# 何を: ControlMeta.kind を pyimgui の値ウィジェットへ対応付けて描画する。
# なぜ: kind ごとの UI 実装を閉じ込め、パネル描画（panel_view）から分離するため。

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

import numpy as np

from dialkit.core.meta import ControlMeta
from dialkit.core.primitives import expand_shorthand_hex, is_hex_color
from dialkit.core.spring_math import SIMPLE_KEYS, ADVANCED_KEYS, SpringMode, spring_preview_curve
from dialkit.core.view import SPRING_FIELD_RANGES, commit_slider_drag, normalize_input, slider_format

_logger = logging.getLogger(__name__)

SPRING_MODE_LABELS: dict[SpringMode, str] = {"simple": "Time", "advanced": "Physics"}
SPRING_PLOT_HEIGHT = 60.0


@dataclass(frozen=True, slots=True)
class WidgetRow:
    """1 コントロールぶんの描画入力。"""

    control: ControlMeta
    value: Any
    decile_snap: bool = True
    spring_mode: SpringMode = "simple"
    preview_duration: float = 2.0


WidgetFn = Callable[[WidgetRow], tuple[bool, Any]]


def hex_to_rgba01(value: str) -> tuple[float, float, float, float]:
    """`#rgb` / `#rrggbb` / `#rrggbbaa` を 0..1 の RGBA へ変換して返す。"""

    if not is_hex_color(value):
        raise ValueError(f"hex カラーではありません: got={value!r}")
    text = expand_shorthand_hex(str(value))[1:]
    channels = [int(text[i : i + 2], 16) / 255.0 for i in range(0, len(text), 2)]
    if len(channels) == 3:
        channels.append(1.0)
    r, g, b, a = channels
    return r, g, b, a


def rgba01_to_hex(r: float, g: float, b: float, a: float | None = None) -> str:
    """0..1 の RGB(A) を小文字の `#rrggbb`（a 指定時は `#rrggbbaa`）へ変換して返す。"""

    def channel(v: float) -> str:
        iv = int(round(float(v) * 255.0))
        return f"{max(0, min(255, iv)):02x}"

    out = "#" + channel(r) + channel(g) + channel(b)
    if a is not None:
        out += channel(a)
    return out


def spring_preview_points(
    spring: Mapping[str, Any],
    mode: SpringMode,
    *,
    duration: float = 2.0,
) -> np.ndarray:
    """プレビュー描画用に、応答曲線の位置列を float32 で返す。"""

    curve = spring_preview_curve(spring, mode, duration=duration)
    return np.ascontiguousarray(curve[:, 1], dtype=np.float32)


def spring_plot_range(points: np.ndarray) -> tuple[float, float]:
    """プレビューの縦軸レンジを返す（0..1 を必ず含み、オーバーシュートも収める）。"""

    if points.size == 0:
        return 0.0, 1.0
    lo = min(0.0, float(np.min(points)))
    hi = max(1.0, float(np.max(points)))
    return lo, hi


def widget_slider(row: WidgetRow) -> tuple[bool, float]:
    """kind=slider のスライダーを描画し、(changed, value) を返す。

    Notes
    -----
    ドラッグ値は decile スナップ → step 丸めで確定する。
    Ctrl+クリックでの直接入力もクランプ → 丸めを通る。
    """

    import imgui  # type: ignore[import-untyped]

    control = row.control
    if control.min is None or control.max is None or control.step is None:
        raise ValueError(f"slider には min/max/step が必要です: path={control.path!r}")

    try:
        value = float(row.value)
    except (TypeError, ValueError):
        _logger.warning("slider の値が数値ではありません: path=%s got=%r", control.path, row.value)
        value = float(control.min)

    changed, out = imgui.slider_float(
        f"{control.label}##{control.path}",
        value,
        float(control.min),
        float(control.max),
        format=slider_format(control.step),
        flags=imgui.SLIDER_FLAGS_ALWAYS_CLAMP,
    )
    if not changed:
        return False, value
    committed = commit_slider_drag(float(out), control, snap=row.decile_snap)
    return committed != value, committed


def widget_toggle(row: WidgetRow) -> tuple[bool, bool]:
    """kind=toggle のチェックボックスを描画し、(changed, value) を返す。"""

    import imgui  # type: ignore[import-untyped]

    control = row.control
    clicked, state = imgui.checkbox(f"{control.label}##{control.path}", bool(row.value))
    return clicked, bool(state)


def widget_text(row: WidgetRow) -> tuple[bool, str]:
    """kind=text のテキスト入力を描画し、(changed, value) を返す。"""

    import imgui  # type: ignore[import-untyped]

    control = row.control
    value = "" if row.value is None else str(row.value)
    changed, out = imgui.input_text(f"{control.label}##{control.path}", value, 1024)
    if not value and control.placeholder and not imgui.is_item_active():
        imgui.same_line()
        imgui.text_disabled(str(control.placeholder))
    return changed, str(out)


def widget_color(row: WidgetRow) -> tuple[bool, str]:
    """kind=color のカラーピッカー + hex 入力を描画し、(changed, value) を返す。

    hex 入力が不正な間は直前の有効値を保つ（store は呼ばない）。
    """

    import imgui  # type: ignore[import-untyped]

    control = row.control
    current = str(row.value) if is_hex_color(row.value) else "#000000"
    r, g, b, a = hex_to_rgba01(current)
    has_alpha = len(expand_shorthand_hex(current)) == 9

    if has_alpha:
        changed, out = imgui.color_edit4(f"##{control.path}_picker", r, g, b, a, imgui.COLOR_EDIT_NO_INPUTS)
    else:
        changed, out = imgui.color_edit3(f"##{control.path}_picker", r, g, b, imgui.COLOR_EDIT_NO_INPUTS)
    if changed:
        return True, rgba01_to_hex(*out)

    imgui.same_line()
    text_changed, text = imgui.input_text(
        f"{control.label}##{control.path}",
        current,
        16,
        imgui.INPUT_TEXT_ENTER_RETURNS_TRUE,
    )
    if not text_changed:
        return False, current
    normalized, err = normalize_input(text, control)
    if err is not None:
        return False, current
    return normalized != current, str(normalized)


def widget_select(row: WidgetRow) -> tuple[bool, str]:
    """kind=select のコンボボックスを描画し、(changed, value) を返す。"""

    import imgui  # type: ignore[import-untyped]

    control = row.control
    options = control.options or ()
    if not options:
        raise ValueError(f"select には空でない options が必要です: path={control.path!r}")

    current = str(row.value)
    preview = next((opt.label for opt in options if opt.value == current), current)
    value_out = current
    changed = False
    if imgui.begin_combo(f"{control.label}##{control.path}", str(preview)):
        try:
            for i, opt in enumerate(options):
                selected = opt.value == current
                clicked, _selected_now = imgui.selectable(f"{opt.label}##{i}", selected)
                if clicked and not selected:
                    value_out = opt.value
                    changed = True
                if selected:
                    imgui.set_item_default_focus()
        finally:
            imgui.end_combo()
    return changed, value_out


def widget_action(row: WidgetRow) -> tuple[bool, None]:
    """kind=action のボタンを描画し、(clicked, None) を返す。"""

    import imgui  # type: ignore[import-untyped]

    control = row.control
    clicked = imgui.button(f"{control.label}##{control.path}", -1, 0)
    return bool(clicked), None


def widget_spring_mode(row: WidgetRow) -> tuple[bool, SpringMode]:
    """spring の Time/Physics 切替を描画し、(changed, mode) を返す。"""

    import imgui  # type: ignore[import-untyped]

    control = row.control
    mode_out: SpringMode = row.spring_mode
    imgui.text(control.label)
    for mode, label in SPRING_MODE_LABELS.items():
        imgui.same_line()
        if imgui.radio_button(f"{label}##{control.path}_{mode}", row.spring_mode == mode):
            mode_out = mode
    return mode_out != row.spring_mode, mode_out


def widget_spring(row: WidgetRow) -> tuple[bool, dict[str, Any]]:
    """spring のパラメータスライダーとプレビュー曲線を描画し、(changed, value) を返す。

    Notes
    -----
    表示するスライダーは現在のモードのキーだけ。モード切替は `widget_spring_mode()` が担当する。
    """

    import imgui  # type: ignore[import-untyped]

    control = row.control
    spring = dict(row.value) if isinstance(row.value, Mapping) else {"type": "spring"}
    keys = SIMPLE_KEYS if row.spring_mode == "simple" else ADVANCED_KEYS

    try:
        points = spring_preview_points(spring, row.spring_mode, duration=row.preview_duration)
    except ValueError:
        _logger.warning("spring のプレビューを計算できません: path=%s got=%r", control.path, spring)
        points = np.zeros(0, dtype=np.float32)
    if points.size:
        lo, hi = spring_plot_range(points)
        imgui.plot_lines(
            f"##{control.path}_preview",
            points,
            scale_min=lo,
            scale_max=hi,
            graph_size=(0, SPRING_PLOT_HEIGHT),
        )

    changed_any = False
    for key in keys:
        rng = SPRING_FIELD_RANGES[key]
        sub = ControlMeta(
            kind="slider",
            path=f"{control.path}.{key}",
            label=rng.label,
            min=rng.min,
            max=rng.max,
            step=rng.step,
        )
        current = spring.get(key)
        changed, out = widget_slider(
            WidgetRow(
                control=sub,
                value=rng.min if current is None else current,
                decile_snap=row.decile_snap,
            )
        )
        if changed:
            spring[key] = out
            changed_any = True
    spring["type"] = "spring"
    return changed_any, spring


_KIND_TO_WIDGET: dict[str, WidgetFn] = {
    "slider": widget_slider,
    "toggle": widget_toggle,
    "text": widget_text,
    "color": widget_color,
    "select": widget_select,
    "action": widget_action,
    "spring": widget_spring,
}


def render_value_widget(row: WidgetRow) -> tuple[bool, Any]:
    """row.control.kind に応じたウィジェットを描画し、(changed, value) を返す。

    Raises
    ------
    ValueError
        folder や未知 kind の場合。
    """

    fn = _KIND_TO_WIDGET.get(row.control.kind)
    if fn is None:
        raise ValueError(f"unknown kind: {row.control.kind}")
    return fn(row)


__all__ = [
    "WidgetRow",
    "WidgetFn",
    "hex_to_rgba01",
    "rgba01_to_hex",
    "spring_preview_points",
    "spring_plot_range",
    "render_value_widget",
    "widget_spring_mode",
]
