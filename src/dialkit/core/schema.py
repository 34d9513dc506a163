# どこで: `src/dialkit/core/schema.py`。
# 何を: ホストが渡す省略記法だらけの schema を、閉じたノード型（タグ付き union）へ変換する。
# なぜ: 形の判定（タプル/typed dict/入れ子）を宣言境界で 1 回だけ行い、resolver/store を網羅的な分岐だけで書くため。

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias, Union

from .errors import SchemaError
from .primitives import (
    SelectOption,
    get_first_option_value,
    is_finite_number,
    is_hex_color,
    normalize_select_options,
    to_title_case,
)

PATH_SEPARATOR = "."
COLLAPSED_KEY = "_collapsed"
DEFAULT_SLIDER_STEP = 0.01
DEFAULT_COLOR = "#000000"

TYPED_KINDS = frozenset({"action", "select", "color", "text", "spring"})

_CAMEL_BOUNDARY_RE = re.compile(r"(?<=[a-z0-9])(?=[A-Z])")


@dataclass(frozen=True, slots=True)
class LiteralNode:
    """単独では設定できない既定値（数値/文字列）。"""

    value: Any


@dataclass(frozen=True, slots=True)
class ToggleNode:
    default: bool
    label: str


@dataclass(frozen=True, slots=True)
class SliderNode:
    default: float
    min: float
    max: float
    step: float
    label: str


@dataclass(frozen=True, slots=True)
class ActionNode:
    """値を持たず、トリガーだけを持つコントロール。"""

    label: str


@dataclass(frozen=True, slots=True)
class SelectNode:
    options: tuple[SelectOption, ...]
    default: str
    label: str


@dataclass(frozen=True, slots=True)
class ColorNode:
    default: str
    label: str


@dataclass(frozen=True, slots=True)
class TextNode:
    default: str
    label: str
    placeholder: str | None = None


@dataclass(frozen=True, slots=True)
class SpringNode:
    """spring の宣言。default は宣言された dict そのもの（コピー）。"""

    default: Mapping[str, Any] = field(hash=False)
    label: str = ""


@dataclass(frozen=True, slots=True)
class GroupNode:
    """入れ子の folder。entries は宣言順の (key, node)。"""

    entries: tuple[tuple[str, "SchemaNode"], ...]
    label: str = ""
    collapsed: bool = False


LeafNode: TypeAlias = Union[
    LiteralNode, ToggleNode, SliderNode, ActionNode, SelectNode, ColorNode, TextNode, SpringNode
]
SchemaNode: TypeAlias = Union[LeafNode, GroupNode]


def label_for_key(key: str) -> str:
    """schema のキーから表示ラベルを作る（`blurRadius` / `blur_radius` → `Blur Radius`）。"""

    text = _CAMEL_BOUNDARY_RE.sub(" ", str(key))
    text = text.replace("_", " ").replace("-", " ")
    return to_title_case(" ".join(text.split()))


def join_path(prefix: str, key: str) -> str:
    return f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)


def _explicit_label(raw: Mapping[str, Any], key: str) -> str:
    label = raw.get("label")
    return label_for_key(key) if label is None else str(label)


def _parse_slider(value: list | tuple, *, key: str, path: str) -> SliderNode:
    if len(value) not in (3, 4):
        raise SchemaError(
            f"slider は [default, min, max, step?] である必要があります: path={path!r}, got={value!r}"
        )
    if not all(is_finite_number(v) for v in value):
        raise SchemaError(f"slider の要素は数値である必要があります: path={path!r}, got={value!r}")

    lo, hi = float(value[1]), float(value[2])
    step = value[3] if len(value) == 4 else DEFAULT_SLIDER_STEP
    if lo > hi:
        raise SchemaError(f"slider の min が max より大きい: path={path!r}, got={value!r}")
    if float(step) <= 0.0:
        raise SchemaError(f"slider の step は正の値である必要があります: path={path!r}, got={value!r}")

    # 宣言された default/step は型を保つ（resolved values で 1 が 1.0 にならないように）。
    return SliderNode(default=value[0], min=lo, max=hi, step=step, label=label_for_key(key))


def _parse_typed(raw: Mapping[str, Any], *, key: str, path: str) -> LeafNode:
    kind = raw.get("type")
    if kind not in TYPED_KINDS:
        raise SchemaError(f"未知の type です: path={path!r}, got={kind!r}")

    if kind == "action":
        return ActionNode(label=_explicit_label(raw, key))

    if kind == "select":
        options_raw = raw.get("options")
        if not isinstance(options_raw, (list, tuple)) or not options_raw:
            raise SchemaError(f"select には空でない options が必要です: path={path!r}")
        try:
            options = normalize_select_options(options_raw)
        except ValueError as exc:
            raise SchemaError(f"select の options が不正です: path={path!r}") from exc
        default = raw.get("default")
        return SelectNode(
            options=options,
            default=get_first_option_value(options) if default is None else str(default),
            label=_explicit_label(raw, key),
        )

    if kind == "color":
        default = raw.get("default", DEFAULT_COLOR)
        if not is_hex_color(default):
            raise SchemaError(f"color の default は hex カラーである必要があります: path={path!r}, got={default!r}")
        return ColorNode(default=str(default), label=_explicit_label(raw, key))

    if kind == "text":
        placeholder = raw.get("placeholder")
        return TextNode(
            default=str(raw.get("default", "")),
            label=_explicit_label(raw, key),
            placeholder=None if placeholder is None else str(placeholder),
        )

    # spring
    for name in ("visualDuration", "bounce", "stiffness", "damping", "mass"):
        v = raw.get(name)
        if v is not None and not is_finite_number(v):
            raise SchemaError(f"spring の {name} は数値である必要があります: path={path!r}, got={v!r}")
    return SpringNode(default=dict(raw), label=_explicit_label(raw, key))


def _parse_value(value: Any, *, key: str, path: str) -> SchemaNode:
    # bool は int のサブクラスなので数値より先に判定する。
    if isinstance(value, bool):
        return ToggleNode(default=value, label=label_for_key(key))
    if isinstance(value, (int, float)):
        return LiteralNode(value=value)
    if isinstance(value, str):
        if is_hex_color(value):
            return ColorNode(default=value, label=label_for_key(key))
        return LiteralNode(value=value)
    if isinstance(value, (list, tuple)):
        return _parse_slider(value, key=key, path=path)
    if isinstance(value, Mapping):
        if "type" in value:
            return _parse_typed(value, key=key, path=path)
        return _parse_group(value, key=key, path=path)
    raise SchemaError(f"解釈できない schema 値です: path={path!r}, got={value!r}")


def _parse_group(raw: Mapping[str, Any], *, key: str, path: str) -> GroupNode:
    entries: list[tuple[str, SchemaNode]] = []
    collapsed = False
    for child_key, child_value in raw.items():
        child_key = str(child_key)
        if child_key == COLLAPSED_KEY:
            collapsed = bool(child_value)
            continue
        if not child_key or PATH_SEPARATOR in child_key:
            raise SchemaError(
                f"schema のキーは空でなく '{PATH_SEPARATOR}' を含まない必要があります: got={child_key!r}"
            )
        child_path = join_path(path, child_key)
        entries.append((child_key, _parse_value(child_value, key=child_key, path=child_path)))
    return GroupNode(entries=tuple(entries), label=label_for_key(key) if key else "", collapsed=collapsed)


def parse_schema(raw: Mapping[str, Any] | GroupNode) -> GroupNode:
    """ホストの schema をルート GroupNode へ変換して返す。解析済みならそのまま返す。"""

    if isinstance(raw, GroupNode):
        return raw
    if not isinstance(raw, Mapping):
        raise SchemaError(f"schema のルートは mapping である必要があります: got={type(raw).__name__}")
    return _parse_group(raw, key="", path="")


def iter_leaves(group: GroupNode, prefix: str = "") -> Iterator[tuple[str, LeafNode]]:
    """(path, leaf) を schema 順に深さ優先で返す。"""

    for key, node in group.entries:
        path = join_path(prefix, key)
        if isinstance(node, GroupNode):
            yield from iter_leaves(node, path)
        else:
            yield path, node


def find_node(group: GroupNode, path: str) -> SchemaNode | None:
    """ドット区切り path のノードを返す。無ければ None。"""

    node: SchemaNode = group
    for part in str(path).split(PATH_SEPARATOR):
        if not isinstance(node, GroupNode):
            return None
        for key, child in node.entries:
            if key == part:
                node = child
                break
        else:
            return None
    return node


def node_default(node: LeafNode) -> Any:
    """ノードの既定値を返す。spring は dict のコピーを返す。"""

    if isinstance(node, LiteralNode):
        return node.value
    if isinstance(node, SpringNode):
        return dict(node.default)
    if isinstance(node, ActionNode):
        raise ValueError("action は値を持ちません")
    return node.default


__all__ = [
    "PATH_SEPARATOR",
    "COLLAPSED_KEY",
    "DEFAULT_SLIDER_STEP",
    "LiteralNode",
    "ToggleNode",
    "SliderNode",
    "ActionNode",
    "SelectNode",
    "ColorNode",
    "TextNode",
    "SpringNode",
    "GroupNode",
    "LeafNode",
    "SchemaNode",
    "label_for_key",
    "join_path",
    "parse_schema",
    "iter_leaves",
    "find_node",
    "node_default",
]
