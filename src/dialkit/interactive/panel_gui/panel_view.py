# どこで: `src/dialkit/interactive/panel_gui/panel_view.py`。
# 何を: 1 パネルぶん（プリセットツールバー / folder ツリー / 各コントロール）を描画し、編集結果を DialStore へ反映する。
# なぜ: 「描画」と「store 更新」の対応をパネル単位に閉じ込め、GUI 本体をライフサイクル管理だけに保つため。

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from dialkit.core.meta import ControlMeta, Preset
from dialkit.core.store import DialStore

from .snippet import next_preset_name, values_snippet
from .widgets import WidgetRow, render_value_widget, widget_spring_mode

_logger = logging.getLogger(__name__)

BASE_PRESET_LABEL = "Version 1"


@dataclass
class PanelViewState:
    """フレームをまたいで保持する、パネル描画だけの状態（store には入れない）。"""

    last_snippet: str | None = None
    copy_failed: bool = False


def _copy_to_clipboard(imgui: Any, gui_window: Any, text: str) -> bool:
    setter = getattr(imgui, "set_clipboard_text", None)
    if callable(setter):
        setter(text)
        return True
    setter = getattr(gui_window, "set_clipboard_text", None)
    if callable(setter):
        setter(text)
        return True
    return False


def _preset_label(presets: tuple[Preset, ...], active_id: str | None) -> str:
    for preset in presets:
        if preset.id == active_id:
            return preset.name
    return BASE_PRESET_LABEL


def render_preset_toolbar(imgui: Any, store: DialStore, panel_id: str) -> bool:
    """プリセット選択 / 追加 / 削除のツールバーを描画する。store を変更したら True。"""

    presets = store.get_presets(panel_id)
    active_id = store.get_active_preset_id(panel_id)
    changed = False

    imgui.push_item_width(-90)
    if imgui.begin_combo("##presets", _preset_label(presets, active_id)):
        try:
            clicked, _ = imgui.selectable(f"{BASE_PRESET_LABEL}##base", active_id is None)
            if clicked and active_id is not None:
                store.clear_active_preset_id(panel_id)
                changed = True
            for preset in presets:
                clicked, _ = imgui.selectable(f"{preset.name}##{preset.id}", preset.id == active_id)
                if clicked and preset.id != active_id:
                    store.load_preset(panel_id, preset.id)
                    changed = True
        finally:
            imgui.end_combo()
    imgui.pop_item_width()

    imgui.same_line()
    if imgui.button("+##add_preset"):
        store.save_preset(panel_id, next_preset_name(presets))
        changed = True

    if active_id is not None:
        imgui.same_line()
        if imgui.button("Delete##delete_preset"):
            store.delete_preset(panel_id, active_id)
            changed = True
    return changed


def _render_control(
    imgui: Any,
    store: DialStore,
    panel_id: str,
    control: ControlMeta,
    values: dict[str, Any],
    *,
    decile_snap: bool,
    preview_duration: float,
) -> bool:
    if control.kind == "folder":
        flags = imgui.TREE_NODE_DEFAULT_OPEN if control.default_open else 0
        opened = imgui.tree_node(f"{control.label}##{control.path}", flags)
        if not opened:
            return False
        changed = False
        try:
            for child in control.children:
                changed = (
                    _render_control(
                        imgui,
                        store,
                        panel_id,
                        child,
                        values,
                        decile_snap=decile_snap,
                        preview_duration=preview_duration,
                    )
                    or changed
                )
        finally:
            imgui.tree_pop()
        return changed

    if control.kind == "action":
        clicked, _ = render_value_widget(WidgetRow(control=control, value=None))
        if clicked:
            store.trigger_action(panel_id, control.path)
        return False

    if control.kind == "spring":
        mode = store.get_spring_mode(panel_id, control.path)
        row = WidgetRow(
            control=control,
            value=values.get(control.path),
            decile_snap=decile_snap,
            spring_mode=mode,
            preview_duration=preview_duration,
        )
        mode_changed, new_mode = widget_spring_mode(row)
        if mode_changed:
            store.update_spring_mode(panel_id, control.path, new_mode)
            return True
        changed, value = render_value_widget(row)
        if changed:
            store.update_value(panel_id, control.path, value)
        return changed

    row = WidgetRow(control=control, value=values.get(control.path), decile_snap=decile_snap)
    changed, value = render_value_widget(row)
    if changed:
        store.update_value(panel_id, control.path, value)
    return changed


def render_panel(
    imgui: Any,
    store: DialStore,
    panel_id: str,
    *,
    state: PanelViewState,
    gui_window: Any = None,
    decile_snap: bool = True,
    preview_duration: float = 2.0,
) -> bool:
    """パネル 1 つを collapsing header として描画する。store を変更したら True。"""

    panel = store.get_panel(panel_id)
    changed = False

    imgui.push_id(panel.id)
    try:
        expanded, _visible = imgui.collapsing_header(
            f"{panel.name}##panel_header",
            None,
            flags=imgui.TREE_NODE_DEFAULT_OPEN,
        )
        if not expanded:
            return False

        changed = render_preset_toolbar(imgui, store, panel.id) or changed
        imgui.same_line()
        if imgui.button("Copy##copy_values"):
            snippet = values_snippet(panel.name, store.get_values(panel.id))
            state.last_snippet = snippet
            state.copy_failed = not _copy_to_clipboard(imgui, gui_window, snippet)
            if state.copy_failed:
                _logger.warning("クリップボードへコピーできません: panel_id=%s", panel.id)
        if state.copy_failed and state.last_snippet is not None:
            imgui.input_text_multiline(
                "##snippet",
                state.last_snippet,
                -1,
                -1,
                120,
                imgui.INPUT_TEXT_READ_ONLY,
            )

        # 値はツールバー操作の後に読み直す（プリセット読み込みを同じフレームで反映するため）。
        values = store.get_values(panel.id)
        for control in panel.controls:
            changed = (
                _render_control(
                    imgui,
                    store,
                    panel.id,
                    control,
                    values,
                    decile_snap=decile_snap,
                    preview_duration=preview_duration,
                )
                or changed
            )
    finally:
        imgui.pop_id()
    return changed


__all__ = ["BASE_PRESET_LABEL", "PanelViewState", "render_preset_toolbar", "render_panel"]
