# どこで: `src/dialkit/core/codec.py`。
# 何を: プリセット一覧（+ アクティブ preset_id）の JSON encode/decode を提供する。
# なぜ: 永続化形式を DialStore 本体から分離し、形式変更の影響範囲を局所化するため。

from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from .meta import Preset

CODEC_VERSION = 1


@dataclass(frozen=True, slots=True)
class StoredPresets:
    """1 パネルぶんの永続化単位。"""

    presets: tuple[Preset, ...] = ()
    active_preset_id: str | None = None


def to_plain(value: Any, *, _seen: set[int] | None = None) -> Any:
    """値を JSON 互換の素のデータ（dict/list/str/数値/bool/None）へ変換して返す。

    関数値や循環参照など JSON にできない値は TypeError にする。
    """

    if value is None or isinstance(value, (bool, int, str)):
        return value
    if isinstance(value, float):
        if value != value or value in (float("inf"), float("-inf")):
            raise TypeError(f"JSON にできない数値です: got={value!r}")
        return value

    seen = set() if _seen is None else _seen
    if id(value) in seen:
        raise TypeError("循環参照を含む値は JSON にできません")

    if isinstance(value, Mapping):
        seen.add(id(value))
        try:
            out: dict[str, Any] = {}
            for k, v in value.items():
                if not isinstance(k, str):
                    raise TypeError(f"JSON オブジェクトのキーは str である必要があります: got={k!r}")
                out[k] = to_plain(v, _seen=seen)
            return out
        finally:
            seen.discard(id(value))
    if isinstance(value, (list, tuple)):
        seen.add(id(value))
        try:
            return [to_plain(v, _seen=seen) for v in value]
        finally:
            seen.discard(id(value))
    raise TypeError(f"JSON にできない値です: got={type(value).__name__}")


def encode_preset(preset: Preset) -> dict[str, Any]:
    """Preset を JSON 化可能な dict に変換して返す。"""

    return {
        "id": str(preset.id),
        "name": str(preset.name),
        "values": to_plain(dict(preset.values)),
    }


def encode_presets(stored: StoredPresets, *, panel_id: str | None = None) -> dict[str, Any]:
    """StoredPresets を JSON 化可能な dict に変換して返す。panel_id 指定時は持ち主として埋め込む。"""

    out: dict[str, Any] = {"version": CODEC_VERSION}
    if panel_id is not None:
        out["panel_id"] = str(panel_id)
    out["active_preset_id"] = stored.active_preset_id
    out["presets"] = [encode_preset(p) for p in stored.presets]
    return out


def dumps_presets(stored: StoredPresets, *, panel_id: str | None = None) -> str:
    """StoredPresets を JSON 文字列へ変換して返す。"""

    return json.dumps(encode_presets(stored, panel_id=panel_id), ensure_ascii=False, indent=2)


def decode_presets(obj: object, *, panel_id: str | None = None) -> StoredPresets:
    """JSON 由来の dict から StoredPresets を復元して返す。壊れたレコードは読み飛ばす。

    panel_id を渡すと、payload に埋め込まれた持ち主と食い違う場合に ValueError にする。
    """

    if not isinstance(obj, dict):
        raise TypeError("preset payload must be a dict")
    owner = obj.get("panel_id")
    if panel_id is not None and owner is not None and str(owner) != str(panel_id):
        raise ValueError(f"別パネルの preset payload です: expected={panel_id!r} got={owner!r}")

    version = obj.get("version", CODEC_VERSION)
    if version != CODEC_VERSION:
        raise ValueError(f"未対応の preset 形式 version です: got={version!r}")

    presets: list[Preset] = []
    seen_ids: set[str] = set()
    for item in obj.get("presets", []):
        if not isinstance(item, dict):
            continue
        try:
            preset_id = str(item["id"])
            name = str(item["name"])
        except KeyError:
            continue
        values = item.get("values")
        if not isinstance(values, dict) or preset_id in seen_ids:
            continue
        seen_ids.add(preset_id)
        presets.append(Preset(id=preset_id, name=name, values=dict(values)))

    active = obj.get("active_preset_id")
    active_id = str(active) if active is not None and str(active) in seen_ids else None
    return StoredPresets(presets=tuple(presets), active_preset_id=active_id)


def loads_presets(payload: str, *, panel_id: str | None = None) -> StoredPresets:
    """JSON 文字列から StoredPresets を復元して返す。"""

    return decode_presets(json.loads(payload), panel_id=panel_id)


__all__ = [
    "CODEC_VERSION",
    "StoredPresets",
    "to_plain",
    "encode_preset",
    "encode_presets",
    "dumps_presets",
    "decode_presets",
    "loads_presets",
]
