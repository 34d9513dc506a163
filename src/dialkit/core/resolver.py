# どこで: `src/dialkit/core/resolver.py`。
# 何を: schema からフラット既定値マップと ControlMeta ツリーを作り、逆にフラット値から入れ子の resolved values を組み立てる。
# なぜ: 登録時の 1 回の走査で描画用/保存用の 2 つの形を確定し、読み出し時は schema の形に戻すため。

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .meta import ControlMeta
from .schema import (
    ActionNode,
    ColorNode,
    GroupNode,
    LiteralNode,
    SchemaNode,
    SelectNode,
    SliderNode,
    SpringNode,
    TextNode,
    ToggleNode,
    join_path,
    node_default,
    parse_schema,
)


@dataclass(frozen=True, slots=True)
class ResolvedSchema:
    """resolve_schema の結果。"""

    defaults: dict[str, Any]
    controls: tuple[ControlMeta, ...]


def _control_for(node: SchemaNode, path: str) -> ControlMeta | None:
    """ノード 1 つぶんの ControlMeta を返す。literal は描画対象外なので None。"""

    if isinstance(node, LiteralNode):
        return None
    if isinstance(node, SliderNode):
        return ControlMeta(
            kind="slider",
            path=path,
            label=node.label,
            min=node.min,
            max=node.max,
            step=node.step,
        )
    if isinstance(node, ToggleNode):
        return ControlMeta(kind="toggle", path=path, label=node.label)
    if isinstance(node, SpringNode):
        return ControlMeta(kind="spring", path=path, label=node.label)
    if isinstance(node, ActionNode):
        return ControlMeta(kind="action", path=path, label=node.label)
    if isinstance(node, SelectNode):
        return ControlMeta(kind="select", path=path, label=node.label, options=node.options)
    if isinstance(node, ColorNode):
        return ControlMeta(kind="color", path=path, label=node.label)
    if isinstance(node, TextNode):
        return ControlMeta(kind="text", path=path, label=node.label, placeholder=node.placeholder)
    if isinstance(node, GroupNode):
        raise TypeError("GroupNode は _walk が処理する")
    raise TypeError(f"未知の schema ノードです: {node!r}")


def _walk(
    group: GroupNode,
    prefix: str,
    defaults: dict[str, Any],
) -> tuple[ControlMeta, ...]:
    controls: list[ControlMeta] = []
    for key, node in group.entries:
        path = join_path(prefix, key)
        if isinstance(node, GroupNode):
            children = _walk(node, path, defaults)
            controls.append(
                ControlMeta(
                    kind="folder",
                    path=path,
                    label=node.label,
                    children=children,
                    default_open=not node.collapsed,
                )
            )
            continue

        if not isinstance(node, ActionNode):
            defaults[path] = node_default(node)
        control = _control_for(node, path)
        if control is not None:
            controls.append(control)
    return tuple(controls)


def resolve_schema(schema: Mapping[str, Any] | GroupNode) -> ResolvedSchema:
    """schema を 1 回走査し、フラット既定値と ControlMeta ツリーを返す。

    Notes
    -----
    - フラット既定値のキーは schema の葉のドット区切りパス（action を除く）。
    - literal は既定値だけを持ち、ControlMeta は作らない。
    - folder は子の ControlMeta を children に持つ。
    """

    group = parse_schema(schema)
    defaults: dict[str, Any] = {}
    controls = _walk(group, "", defaults)
    return ResolvedSchema(defaults=defaults, controls=controls)


def _resolved_leaf(node: SchemaNode, value: Any) -> Any:
    if isinstance(node, SpringNode) and isinstance(value, Mapping):
        # spring は物理値を読むために dict 全体を返す（呼び出し側の変更が store に漏れないようコピー）。
        return dict(value)
    return value


def build_resolved_values(
    schema: Mapping[str, Any] | GroupNode,
    flat_values: Mapping[str, Any],
    path_prefix: str = "",
) -> dict[str, Any]:
    """フラット値マップから schema と同じ入れ子形の値を組み立てて返す。

    flat_values に無いパスは schema の既定値で補い、schema に無いキーは無視する。
    古い schema で保存したプリセットの値マップを渡しても壊れない。
    action は値を持たないので結果に含めない。
    """

    group = parse_schema(schema)
    out: dict[str, Any] = {}
    for key, node in group.entries:
        path = join_path(path_prefix, key)
        if isinstance(node, GroupNode):
            out[key] = build_resolved_values(node, flat_values, path)
            continue
        if isinstance(node, ActionNode):
            continue
        if path in flat_values:
            out[key] = _resolved_leaf(node, flat_values[path])
        else:
            out[key] = node_default(node)
    return out


__all__ = ["ResolvedSchema", "resolve_schema", "build_resolved_values"]
