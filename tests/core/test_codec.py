import json

import pytest

from dialkit.core.codec import (
    CODEC_VERSION,
    StoredPresets,
    decode_presets,
    encode_preset,
    dumps_presets,
    loads_presets,
    to_plain,
)
from dialkit.core.meta import Preset


def test_dumps_presets_wire_format():
    stored = StoredPresets(
        presets=(Preset(id="preset-1", name="Version 2", values={"x": 0.5, "m": {"type": "spring", "bounce": 0.2}}),),
        active_preset_id="preset-1",
    )
    payload = json.loads(dumps_presets(stored))
    assert payload == {
        "version": CODEC_VERSION,
        "active_preset_id": "preset-1",
        "presets": [
            {"id": "preset-1", "name": "Version 2", "values": {"x": 0.5, "m": {"type": "spring", "bounce": 0.2}}}
        ],
    }
    assert loads_presets(dumps_presets(stored)) == stored


def test_decode_presets_skips_malformed_and_duplicate_records():
    stored = decode_presets(
        {
            "version": 1,
            "active_preset_id": "b",
            "presets": [
                {"id": "a", "name": "A", "values": {"x": 1}},
                {"id": "a", "name": "dup", "values": {"x": 2}},
                {"name": "no id", "values": {}},
                {"id": "c", "name": "no values"},
                "garbage",
                {"id": "b", "name": "B", "values": {}},
            ],
        }
    )
    assert [(p.id, p.name) for p in stored.presets] == [("a", "A"), ("b", "B")]
    assert stored.active_preset_id == "b"


def test_decode_presets_drops_dangling_active_id():
    stored = decode_presets({"presets": [], "active_preset_id": "missing"})
    assert stored == StoredPresets()


def test_decode_presets_rejects_unsupported_version_and_shape():
    with pytest.raises(ValueError):
        decode_presets({"version": 99, "presets": []})
    with pytest.raises(TypeError):
        decode_presets(["not", "a", "dict"])


def test_to_plain_converts_tuples_and_rejects_non_json_values():
    assert to_plain({"a": (1, 2), "b": [True, None, "s"]}) == {"a": [1, 2], "b": [True, None, "s"]}

    with pytest.raises(TypeError):
        to_plain({"f": lambda: None})
    with pytest.raises(TypeError):
        to_plain({"n": float("nan")})
    with pytest.raises(TypeError):
        to_plain({1: "non-str key"})

    cyclic: dict = {}
    cyclic["self"] = cyclic
    with pytest.raises(TypeError):
        to_plain(cyclic)


def test_to_plain_allows_shared_non_cyclic_references():
    shared = {"v": 1}
    assert to_plain({"a": shared, "b": shared}) == {"a": {"v": 1}, "b": {"v": 1}}


def test_encode_preset_copies_values_as_plain_data():
    values = {"opacity": 0.5, "motion": {"type": "spring", "bounce": 0.2}, "tags": ("a", "b")}
    out = encode_preset(Preset(id="preset-1", name="Version 2", values=values))

    assert out == {
        "id": "preset-1",
        "name": "Version 2",
        "values": {"opacity": 0.5, "motion": {"type": "spring", "bounce": 0.2}, "tags": ["a", "b"]},
    }
    assert out["values"]["motion"] is not values["motion"]
    with pytest.raises(TypeError):
        encode_preset(Preset(id="p", name="P", values={"bad": float("nan")}))


def test_payload_records_owner_panel_and_rejects_other_owner():
    stored = StoredPresets(presets=(Preset(id="a", name="A", values={"x": 1}),), active_preset_id="a")
    payload = dumps_presets(stored, panel_id="色")

    assert json.loads(payload)["panel_id"] == "色"
    assert loads_presets(payload, panel_id="色") == stored
    assert loads_presets(payload) == stored
    with pytest.raises(ValueError):
        loads_presets(payload, panel_id="ぼかし")
