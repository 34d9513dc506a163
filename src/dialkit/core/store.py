# どこで: `src/dialkit/core/store.py`。
# 何を: DialStore（全パネルの schema/値/プリセット/spring モード/購読者を持つレジストリ）を定義する。
# なぜ: 共有される可変状態の変更と通知をこのクラスだけに通し、描画アダプタを内部表現から切り離すため。

from __future__ import annotations

import copy
import itertools
import logging
import uuid
from collections.abc import Callable, Mapping
from typing import Any

from .codec import StoredPresets, encode_preset
from .errors import InvalidPathError, PanelNotFoundError, PresetNotFoundError
from .listeners import ListenerSet, Unsubscribe
from .meta import ControlMeta, PanelSummary, Preset
from .panel import PanelState
from .persistence import PresetStorage
from .primitives import is_finite_number, round_value
from .resolver import resolve_schema
from .schema import (
    ActionNode,
    GroupNode,
    LeafNode,
    LiteralNode,
    SelectNode,
    SliderNode,
    SpringNode,
    iter_leaves,
    parse_schema,
)
from .spring_math import SPRING_MODES, SpringMode, convert_spring, infer_spring_mode

_logger = logging.getLogger(__name__)

PanelListener = Callable[[], None]
ActionListener = Callable[[str], None]


def _new_preset_id() -> str:
    return f"preset-{uuid.uuid4().hex[:12]}"


def _carries_over(old: LeafNode | None, new: LeafNode, value: Any) -> bool:
    """再登録時に旧値を引き継げるなら True を返す。"""

    if old is None or type(old) is not type(new):
        return False
    if isinstance(new, LiteralNode):
        # literal は単独で設定できないので常に新しい schema に従う。
        return False
    if isinstance(new, SelectNode):
        return any(opt.value == value for opt in new.options)
    return True


def _values_equal(node: LeafNode, a: Any, b: Any) -> bool:
    """プリセット値との一致判定。slider は step で丸めた値同士を比べる。"""

    if isinstance(node, SliderNode) and is_finite_number(a) and is_finite_number(b):
        return round_value(a, node.step) == round_value(b, node.step)
    return a == b


class DialStore:
    """宣言されたパネルを保持する中央レジストリ。

    Notes
    -----
    - 全操作は同期的で、変更と通知を終えてから戻る。
    - 外部へは値のコピーだけを渡す（返した dict を書き換えても store は変わらない）。
    - スレッド安全ではない。複数スレッドから使う場合は呼び出し側で直列化する。
    """

    def __init__(self, storage: PresetStorage | None = None) -> None:
        self._panels: dict[str, PanelState] = {}
        self._global_listeners = ListenerSet("global")
        self._storage = storage
        self._panel_counter = itertools.count(1)

    # --- 登録 ---
    def next_panel_id(self, name: str) -> str:
        """name と通し番号から panel_id を作って返す。"""

        while True:
            candidate = f"{name}-{next(self._panel_counter)}"
            if candidate not in self._panels:
                return candidate

    def register_panel(self, panel_id: str, name: str, schema: Mapping[str, Any] | GroupNode) -> None:
        """パネルを登録する。既に登録済みなら schema を差し替える（値はパス単位で引き継ぐ）。

        Notes
        -----
        - 新しい schema にも残るパスの値は保持し、新しいパスは既定値、消えたパスは削除する。
        - プリセットとアクティブ preset_id は保持する。
        - 初回登録時に storage があれば、保存済みプリセットとアクティブ状態を復元する。
        """

        panel_id = str(panel_id)
        group = parse_schema(schema)
        resolved = resolve_schema(group)
        leaves = dict(iter_leaves(group))

        panel = self._panels.get(panel_id)
        if panel is None:
            panel = PanelState(
                panel_id=panel_id,
                name=str(name),
                schema=group,
                values=dict(resolved.defaults),
                controls=resolved.controls,
                leaves=leaves,
                listeners=ListenerSet(f"panel:{panel_id}"),
                action_listeners=ListenerSet(f"actions:{panel_id}"),
            )
            panel.spring_modes = {
                path: infer_spring_mode(node.default)
                for path, node in leaves.items()
                if isinstance(node, SpringNode)
            }
            self._panels[panel_id] = panel
            self._restore_presets(panel)
            _logger.debug("パネルを登録しました: panel_id=%s paths=%d", panel_id, len(panel.values))
            self._global_listeners.notify()
            return

        values: dict[str, Any] = {}
        for path, default in resolved.defaults.items():
            if path in panel.values and _carries_over(panel.leaves.get(path), leaves[path], panel.values[path]):
                values[path] = panel.values[path]
            else:
                values[path] = default

        spring_modes: dict[str, SpringMode] = {}
        for path, node in leaves.items():
            if not isinstance(node, SpringNode):
                continue
            previous = panel.spring_modes.get(path)
            if previous is not None and isinstance(panel.leaves.get(path), SpringNode):
                spring_modes[path] = previous
            else:
                spring_modes[path] = infer_spring_mode(node.default)

        panel.name = str(name)
        panel.schema = group
        panel.values = values
        panel.controls = resolved.controls
        panel.leaves = leaves
        panel.spring_modes = spring_modes
        _logger.debug("パネルを再登録しました: panel_id=%s paths=%d", panel_id, len(values))
        self._global_listeners.notify()
        panel.listeners.notify()

    def unregister_panel(self, panel_id: str) -> None:
        """パネルとそのプリセット/購読者を取り除く。未登録なら何もしない。"""

        panel = self._panels.pop(str(panel_id), None)
        if panel is None:
            return
        panel.listeners.clear()
        panel.action_listeners.clear()
        _logger.debug("パネルを登録解除しました: panel_id=%s", panel_id)
        self._global_listeners.notify()

    # --- 読み出し ---
    def has_panel(self, panel_id: str) -> bool:
        return str(panel_id) in self._panels

    def _panel(self, panel_id: str) -> PanelState:
        panel = self._panels.get(str(panel_id))
        if panel is None:
            raise PanelNotFoundError(str(panel_id))
        return panel

    def _summary(self, panel: PanelState) -> PanelSummary:
        return PanelSummary(
            id=panel.panel_id,
            name=panel.name,
            controls=panel.controls,
            values=copy.deepcopy(panel.values),
        )

    def get_panels(self) -> tuple[PanelSummary, ...]:
        """登録順のパネル要約を返す。"""

        return tuple(self._summary(panel) for panel in self._panels.values())

    def get_panel(self, panel_id: str) -> PanelSummary:
        return self._summary(self._panel(panel_id))

    def get_values(self, panel_id: str) -> dict[str, Any]:
        """フラット値マップのコピーを返す。"""

        return copy.deepcopy(self._panel(panel_id).values)

    def get_controls(self, panel_id: str) -> tuple[ControlMeta, ...]:
        return self._panel(panel_id).controls

    def get_schema(self, panel_id: str) -> GroupNode:
        """登録済み schema（解析済み・不変）を返す。"""

        return self._panel(panel_id).schema

    def get_presets(self, panel_id: str) -> tuple[Preset, ...]:
        return tuple(
            Preset(id=p.id, name=p.name, values=copy.deepcopy(dict(p.values)))
            for p in self._panel(panel_id).presets
        )

    def get_active_preset_id(self, panel_id: str) -> str | None:
        return self._panel(panel_id).active_preset_id

    # --- 値の更新 ---
    def _leaf(self, panel: PanelState, path: str) -> LeafNode:
        node = panel.leaves.get(str(path))
        if node is None:
            raise InvalidPathError(panel.panel_id, str(path))
        return node

    def _settable_leaf(self, panel: PanelState, path: str) -> LeafNode:
        node = self._leaf(panel, path)
        if isinstance(node, ActionNode):
            raise InvalidPathError(panel.panel_id, str(path), "action は値を持ちません")
        if isinstance(node, LiteralNode):
            raise InvalidPathError(panel.panel_id, str(path), "読み取り専用の値です")
        return node

    def _spring_leaf(self, panel: PanelState, path: str) -> SpringNode:
        node = self._leaf(panel, path)
        if not isinstance(node, SpringNode):
            raise InvalidPathError(panel.panel_id, str(path), "spring ではないパスです")
        return node

    def _assign(self, panel: PanelState, path: str, node: LeafNode, value: Any) -> None:
        """値を 1 つ書き込む（通知はしない）。spring はモードも値に合わせる。"""

        stored = copy.deepcopy(value)
        panel.values[path] = stored
        if isinstance(node, SpringNode) and isinstance(stored, Mapping):
            current = panel.spring_modes.get(path, "simple")
            panel.spring_modes[path] = infer_spring_mode(stored, default=current)

    def update_value(self, panel_id: str, path: str, value: Any) -> None:
        """葉の値を 1 つ更新し、パネルの購読者へ通知する。

        アクティブなプリセットがあり、そのプリセットの値と異なる値になった場合は
        アクティブ状態を解除する（slider は step で丸めた値で比べる）。
        spring のパスに mapping 以外を渡すと ValueError（状態は変えない）。
        """

        panel = self._panel(panel_id)
        path = str(path)
        node = self._settable_leaf(panel, path)
        if isinstance(node, SpringNode) and not isinstance(value, Mapping):
            raise ValueError(f"spring の値は mapping である必要があります: path={path!r} got={value!r}")
        self._assign(panel, path, node, value)

        if panel.active_preset_id is not None:
            preset = panel.find_preset(panel.active_preset_id)
            if (
                preset is None
                or path not in preset.values
                or not _values_equal(node, value, preset.values[path])
            ):
                panel.active_preset_id = None
                self._persist(panel)

        panel.listeners.notify()

    def trigger_action(self, panel_id: str, path: str) -> None:
        """action の購読者へ path を配送する（値は変更しない）。"""

        panel = self._panel(panel_id)
        node = self._leaf(panel, path)
        if not isinstance(node, ActionNode):
            raise InvalidPathError(panel.panel_id, str(path), "action ではないパスです")
        panel.action_listeners.emit(str(path))

    # --- 購読 ---
    def subscribe(self, panel_id: str, listener: PanelListener) -> Unsubscribe:
        """パネル単位の変更購読。値/プリセット/spring モードの変更で呼ばれる。"""

        return self._panel(panel_id).listeners.add(listener)

    def subscribe_actions(self, panel_id: str, listener: ActionListener) -> Unsubscribe:
        """action トリガーの購読。listener は action の path を受け取る。"""

        return self._panel(panel_id).action_listeners.add(listener)

    def subscribe_global(self, listener: PanelListener) -> Unsubscribe:
        """パネルの登録/登録解除だけを購読する。"""

        return self._global_listeners.add(listener)

    # --- プリセット ---
    def save_preset(self, panel_id: str, name: str) -> Preset:
        """現在のフラット値をプリセットとして末尾に追加し、アクティブにする。"""

        panel = self._panel(panel_id)
        preset = Preset(id=_new_preset_id(), name=str(name), values=copy.deepcopy(panel.values))
        if self._storage is not None:
            # JSON にできない値を含む場合は、状態を変える前に TypeError にする。
            encode_preset(preset)
        panel.presets.append(preset)
        panel.active_preset_id = preset.id
        self._persist(panel)
        _logger.debug("プリセットを保存しました: panel_id=%s preset_id=%s", panel.panel_id, preset.id)
        panel.listeners.notify()
        return preset

    def _overlay(self, panel: PanelState, preset: Preset) -> None:
        # プリセットは部分上書き: 現在の schema で設定可能なパスだけを書き戻し、
        # プリセット保存後に増えたパスは今の値のまま残す。
        for path, value in preset.values.items():
            node = panel.leaves.get(path)
            if node is None or path not in panel.values:
                continue
            if isinstance(node, (ActionNode, LiteralNode)):
                continue
            if isinstance(node, SpringNode) and not isinstance(value, Mapping):
                continue
            self._assign(panel, path, node, value)
        panel.active_preset_id = preset.id

    def load_preset(self, panel_id: str, preset_id: str) -> None:
        """プリセットの値を重ね、アクティブにする。通知は 1 回。"""

        panel = self._panel(panel_id)
        preset = panel.find_preset(str(preset_id))
        if preset is None:
            raise PresetNotFoundError(panel.panel_id, str(preset_id))
        self._overlay(panel, preset)
        self._persist(panel)
        panel.listeners.notify()

    def delete_preset(self, panel_id: str, preset_id: str) -> None:
        """プリセットを削除する。アクティブだった場合は解除する。値は変えない。"""

        panel = self._panel(panel_id)
        preset = panel.find_preset(str(preset_id))
        if preset is None:
            raise PresetNotFoundError(panel.panel_id, str(preset_id))
        panel.presets.remove(preset)
        if panel.active_preset_id == preset.id:
            panel.active_preset_id = None
        self._persist(panel)
        panel.listeners.notify()

    def clear_active_preset_id(self, panel_id: str) -> None:
        """値を変えずにアクティブなプリセットを解除する（ベース状態の表現）。"""

        panel = self._panel(panel_id)
        if panel.active_preset_id is not None:
            panel.active_preset_id = None
            self._persist(panel)
        panel.listeners.notify()

    def _persist(self, panel: PanelState) -> None:
        if self._storage is None:
            return
        self._storage.save(
            panel.panel_id,
            StoredPresets(presets=tuple(panel.presets), active_preset_id=panel.active_preset_id),
        )

    def _restore_presets(self, panel: PanelState) -> None:
        if self._storage is None:
            return
        stored = self._storage.load(panel.panel_id)
        if stored is None:
            return
        panel.presets = list(stored.presets)
        if stored.active_preset_id is not None:
            preset = panel.find_preset(stored.active_preset_id)
            if preset is not None:
                self._overlay(panel, preset)
        _logger.debug(
            "プリセットを復元しました: panel_id=%s count=%d active=%s",
            panel.panel_id,
            len(panel.presets),
            panel.active_preset_id,
        )

    # --- spring モード ---
    def get_spring_mode(self, panel_id: str, path: str) -> SpringMode:
        panel = self._panel(panel_id)
        self._spring_leaf(panel, path)
        return panel.spring_modes.get(str(path), "simple")

    def update_spring_mode(self, panel_id: str, path: str, mode: SpringMode) -> None:
        """spring の表現を mode に切り替える。

        現在の値を spring_math で変換し、切替の瞬間の動きを保ったまま
        update_value と同じ経路で保存する（通知は 1 回）。同じモードなら何もしない。
        """

        if mode not in SPRING_MODES:
            raise ValueError(f"未知の spring モードです: got={mode!r}")
        panel = self._panel(panel_id)
        path = str(path)
        self._spring_leaf(panel, path)

        if panel.spring_modes.get(path, "simple") == mode:
            return
        converted = convert_spring(panel.values[path], mode)
        panel.spring_modes[path] = mode
        self.update_value(panel.panel_id, path, converted)


__all__ = ["DialStore", "PanelListener", "ActionListener"]
