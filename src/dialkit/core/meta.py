# どこで: `src/dialkit/core/meta.py`。
# 何を: ControlMeta（GUI 描画のためのコントロール記述）と Preset を提供する。
# なぜ: 描画アダプタが schema を直接読まずに済むよう、描画用の情報を一元管理するため。

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, Mapping

from .primitives import SelectOption

ControlKind = Literal["slider", "toggle", "spring", "folder", "action", "select", "color", "text"]


@dataclass(frozen=True, slots=True)
class ControlMeta:
    """1 つの schema 葉（または folder）の描画用メタ情報。

    min/max/step は slider、options は select、placeholder は text、
    children/default_open は folder のみが使う。
    """

    kind: ControlKind
    path: str
    label: str
    min: float | None = None
    max: float | None = None
    step: float | None = None
    options: tuple[SelectOption, ...] | None = None
    placeholder: str | None = None
    children: tuple["ControlMeta", ...] = ()
    default_open: bool = True


@dataclass(frozen=True, slots=True)
class Preset:
    """フラット値マップの名前付きスナップショット。"""

    id: str
    name: str
    values: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class PanelSummary:
    """パネル一覧の描画に使う読み取り専用の要約。"""

    id: str
    name: str
    controls: tuple[ControlMeta, ...]
    values: Mapping[str, Any]


def iter_controls(controls: tuple[ControlMeta, ...]):
    """folder を深さ優先で展開し、全 ControlMeta を順に返す。"""

    for control in controls:
        yield control
        if control.children:
            yield from iter_controls(control.children)


__all__ = ["ControlKind", "ControlMeta", "Preset", "PanelSummary", "iter_controls"]
