# どこで: `src/dialkit/core/__init__.py`。
# 何を: パネル状態バックエンド（schema 解決 / store / spring 変換）の公開エイリアスをまとめる。
# なぜ: API 層や描画アダプタから最小インポートで使えるようにするため。

from .context import current_dial_store, dial_store_context
from .errors import InvalidPathError, PanelNotFoundError, PresetNotFoundError, SchemaError
from .meta import ControlMeta, PanelSummary, Preset, iter_controls
from .persistence import JsonFilePresetStorage, MemoryPresetStorage, PresetStorage
from .resolver import ResolvedSchema, build_resolved_values, resolve_schema
from .schema import parse_schema
from .spring_math import SpringMode, convert_spring, generate_spring_curve, spring_preview_curve
from .store import DialStore
from .view import normalize_input

__all__ = [
    "current_dial_store",
    "dial_store_context",
    "InvalidPathError",
    "PanelNotFoundError",
    "PresetNotFoundError",
    "SchemaError",
    "ControlMeta",
    "PanelSummary",
    "Preset",
    "iter_controls",
    "JsonFilePresetStorage",
    "MemoryPresetStorage",
    "PresetStorage",
    "ResolvedSchema",
    "build_resolved_values",
    "resolve_schema",
    "parse_schema",
    "SpringMode",
    "convert_spring",
    "generate_spring_curve",
    "spring_preview_curve",
    "DialStore",
    "normalize_input",
]
