# どこで: `src/dialkit/core/panel.py`。
# 何を: 登録済みパネル 1 つぶんの可変状態（PanelState）を定義する。
# なぜ: DialStore の内部表現をまとめ、外部へはコピーだけを渡す前提を型で明示するため。

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .listeners import ListenerSet
from .meta import ControlMeta, Preset
from .schema import GroupNode, LeafNode
from .spring_math import SpringMode


@dataclass
class PanelState:
    """パネルの schema / 値 / プリセット / spring モード / 購読者。

    DialStore だけが保持・変更する。values の挿入順は schema の走査順。
    """

    panel_id: str
    name: str
    schema: GroupNode
    values: dict[str, Any]
    controls: tuple[ControlMeta, ...]
    leaves: dict[str, LeafNode]
    presets: list[Preset] = field(default_factory=list)
    active_preset_id: str | None = None
    spring_modes: dict[str, SpringMode] = field(default_factory=dict)
    listeners: ListenerSet = field(default_factory=ListenerSet)
    action_listeners: ListenerSet = field(default_factory=ListenerSet)

    def find_preset(self, preset_id: str) -> Preset | None:
        for preset in self.presets:
            if preset.id == preset_id:
                return preset
        return None


__all__ = ["PanelState"]
