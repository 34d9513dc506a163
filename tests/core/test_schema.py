import pytest

from dialkit.core.errors import SchemaError
from dialkit.core.primitives import SelectOption
from dialkit.core.schema import (
    ActionNode,
    ColorNode,
    GroupNode,
    LiteralNode,
    SelectNode,
    SliderNode,
    SpringNode,
    TextNode,
    ToggleNode,
    find_node,
    iter_leaves,
    label_for_key,
    node_default,
    parse_schema,
)


def _entries(group: GroupNode) -> dict:
    return dict(group.entries)


def test_parse_schema_classifies_shorthand_values():
    group = parse_schema(
        {
            "opacity": [1, 0, 1],
            "blur": [24, 0, 100, 1],
            "enabled": True,
            "tint": "#ff0000",
            "title": "Hello",
            "count": 3,
        }
    )
    entries = _entries(group)
    assert entries["opacity"] == SliderNode(default=1, min=0.0, max=1.0, step=0.01, label="Opacity")
    assert entries["blur"] == SliderNode(default=24, min=0.0, max=100.0, step=1, label="Blur")
    assert entries["enabled"] == ToggleNode(default=True, label="Enabled")
    assert entries["tint"] == ColorNode(default="#ff0000", label="Tint")
    assert entries["title"] == LiteralNode(value="Hello")
    assert entries["count"] == LiteralNode(value=3)


def test_parse_schema_keeps_declaration_order():
    group = parse_schema({"b": 1, "a": 2, "c": {"z": 3, "y": 4}})
    assert [path for path, _node in iter_leaves(group)] == ["b", "a", "c.z", "c.y"]


def test_parse_schema_typed_controls():
    group = parse_schema(
        {
            "reset": {"type": "action", "label": "Reset All"},
            "easing": {"type": "select", "options": ["linear", {"value": "ease", "label": "Ease"}]},
            "fill": {"type": "color"},
            "caption": {"type": "text", "placeholder": "Type here"},
            "motion": {"type": "spring", "visualDuration": 0.3, "bounce": 0.2},
        }
    )
    entries = _entries(group)
    assert entries["reset"] == ActionNode(label="Reset All")
    assert entries["easing"] == SelectNode(
        options=(SelectOption("linear", "Linear"), SelectOption("ease", "Ease")),
        default="linear",
        label="Easing",
    )
    assert entries["fill"] == ColorNode(default="#000000", label="Fill")
    assert entries["caption"] == TextNode(default="", label="Caption", placeholder="Type here")
    motion = entries["motion"]
    assert isinstance(motion, SpringNode)
    assert dict(motion.default) == {"type": "spring", "visualDuration": 0.3, "bounce": 0.2}


def test_parse_schema_collapsed_flag_marks_group():
    group = parse_schema({"fx": {"_collapsed": True, "blur": [1, 0, 10]}})
    fx = _entries(group)["fx"]
    assert isinstance(fx, GroupNode)
    assert fx.collapsed is True
    assert fx.label == "Fx"
    assert [key for key, _ in fx.entries] == ["blur"]


@pytest.mark.parametrize(
    "schema",
    [
        {"bad": [1, 0]},
        {"bad": [1, 0, 1, 0.1, 5]},
        {"bad": [1, 2, 0]},
        {"bad": [1, 0, 1, 0]},
        {"bad": ["1", 0, 1]},
        {"bad": {"type": "unknown"}},
        {"bad": {"type": "select", "options": []}},
        {"bad": {"type": "color", "default": "red"}},
        {"bad": {"type": "spring", "stiffness": "stiff"}},
        {"a.b": 1},
        {"": 1},
        {"bad": None},
    ],
)
def test_parse_schema_rejects_malformed_values(schema):
    with pytest.raises(SchemaError):
        parse_schema(schema)


def test_parse_schema_rejects_non_mapping_root():
    with pytest.raises(SchemaError):
        parse_schema([1, 2, 3])  # type: ignore[arg-type]


def test_parse_schema_returns_parsed_group_as_is():
    group = parse_schema({"x": [0, 0, 1]})
    assert parse_schema(group) is group


def test_label_for_key():
    assert label_for_key("blurRadius") == "Blur Radius"
    assert label_for_key("blur_radius") == "Blur Radius"
    assert label_for_key("x") == "X"


def test_find_node():
    group = parse_schema({"fx": {"blur": [1, 0, 10]}})
    assert isinstance(find_node(group, "fx.blur"), SliderNode)
    assert isinstance(find_node(group, "fx"), GroupNode)
    assert find_node(group, "fx.nope") is None
    assert find_node(group, "fx.blur.deeper") is None


def test_node_default_copies_spring_and_rejects_action():
    group = parse_schema({"m": {"type": "spring", "stiffness": 100}, "go": {"type": "action"}})
    entries = _entries(group)
    default = node_default(entries["m"])
    default["stiffness"] = 1
    assert node_default(entries["m"])["stiffness"] == 100
    with pytest.raises(ValueError):
        node_default(entries["go"])
