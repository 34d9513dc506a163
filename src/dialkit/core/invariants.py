# どこで: `src/dialkit/core/invariants.py`。
# 何を: DialStore の不変条件をテストで検証する関数を提供する。
# なぜ: 登録/更新/プリセット操作をまたぐ整合性の知識を 1 箇所へ固定し、踏み抜きを早期検知するため。

from __future__ import annotations

from .meta import ControlMeta, Preset, iter_controls
from .panel import PanelState
from .schema import ActionNode, LiteralNode, SpringNode, iter_leaves
from .spring_math import SPRING_MODES
from .store import DialStore


def _assert_panel(panel_id: str, panel: PanelState) -> None:
    assert isinstance(panel, PanelState)
    assert panel.panel_id == panel_id

    # values のキー集合 = action 以外の葉のパス（schema 順）
    value_paths = [path for path, node in iter_leaves(panel.schema) if not isinstance(node, ActionNode)]
    assert list(panel.values) == value_paths
    assert dict(iter_leaves(panel.schema)) == panel.leaves

    # ControlMeta は literal 以外の葉と folder を 1 つずつ持つ
    control_paths = {c.path for c in iter_controls(panel.controls) if c.kind != "folder"}
    expected = {path for path, node in panel.leaves.items() if not isinstance(node, LiteralNode)}
    assert control_paths == expected
    for control in iter_controls(panel.controls):
        assert isinstance(control, ControlMeta)
        if control.kind == "slider":
            assert control.min is not None and control.max is not None
            assert control.min <= control.max
            assert control.step is not None and control.step > 0

    # spring モードは spring 葉ちょうどに対して存在する
    spring_paths = {path for path, node in panel.leaves.items() if isinstance(node, SpringNode)}
    assert set(panel.spring_modes) == spring_paths
    for mode in panel.spring_modes.values():
        assert mode in SPRING_MODES

    preset_ids = [p.id for p in panel.presets]
    assert len(set(preset_ids)) == len(preset_ids)
    for preset in panel.presets:
        assert isinstance(preset, Preset)
    if panel.active_preset_id is not None:
        assert panel.active_preset_id in preset_ids


def assert_invariants(store: DialStore) -> None:
    """DialStore の不変条件を検査する。

    Notes
    -----
    テスト専用の検査関数。実行時に常時呼ぶことは想定しない。
    """

    for panel_id, panel in store._panels.items():
        assert isinstance(panel_id, str)
        _assert_panel(panel_id, panel)


__all__ = ["assert_invariants"]
