# どこで: `src/dialkit/core/runtime_config.py`。
# 何を: config.yaml による実行時設定（探索・層の重ね合わせ・検証・キャッシュ）を提供する。
# なぜ: プリセット保存先や GUI ウィンドウ設定を、コードを書き換えずにユーザーが指定できるようにするため。

from __future__ import annotations

import os
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import Any, TypeVar

_T = TypeVar("_T")

SUPPORTED_CONFIG_VERSION = 1
PACKAGED_CONFIG = ("resource", "default_config.yaml")


@dataclass(frozen=True, slots=True)
class RuntimeConfig:
    """dialkit の実行時設定。

    Attributes
    ----------
    config_path : Path | None
        最後に重ねたユーザー config（同梱デフォルトだけなら None）。
    preset_dir : Path
        `JsonFilePresetStorage` の既定保存先。
    panel_gui_window_size, panel_gui_window_position : tuple[int, int]
        パネル GUI ウィンドウの初期サイズ / 位置。
    spring_preview_duration : float
        spring プレビュー曲線のサンプル区間（秒）。
    decile_snap : bool
        スライダーのドラッグを 1/10 刻みへ吸着するか。
    """

    config_path: Path | None
    preset_dir: Path
    panel_gui_window_size: tuple[int, int]
    panel_gui_window_position: tuple[int, int]
    spring_preview_duration: float
    decile_snap: bool


_explicit_path: Path | None = None
_cached: RuntimeConfig | None = None


def set_config_path(path: str | Path | None) -> None:
    """明示 config パスを設定し、キャッシュを捨てる。None で明示指定を解除する。"""

    global _explicit_path, _cached
    _explicit_path = None if path is None else Path(str(path)).expanduser()
    _cached = None


def _discovery_candidates() -> tuple[Path, ...]:
    return (
        Path.cwd() / ".dialkit" / "config.yaml",
        Path.home() / ".config" / "dialkit" / "config.yaml",
    )


def _parse_yaml(text: str, *, source: str) -> dict[str, Any]:
    import yaml

    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise RuntimeError(f"config.yaml の読み込みに失敗しました: source={source}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise RuntimeError(f"config.yaml は mapping である必要があります: source={source}")
    return data


def _packaged_layer() -> dict[str, Any]:
    try:
        text = resources.files("dialkit").joinpath(*PACKAGED_CONFIG).read_text(encoding="utf-8")
    except Exception as exc:  # pragma: no cover
        raise RuntimeError(
            "同梱 default_config.yaml の読み込みに失敗しました（package-data を確認してください）"
        ) from exc
    return _parse_yaml(text, source="dialkit/" + "/".join(PACKAGED_CONFIG))


def _user_layers() -> list[Path]:
    """重ねる順（後勝ち）にユーザー config のパスを返す。"""

    if _explicit_path is not None and not _explicit_path.is_file():
        raise FileNotFoundError(f"config.yaml が見つかりません: {_explicit_path}")
    layers = [next((p for p in _discovery_candidates() if p.is_file()), None), _explicit_path]
    return [p for p in layers if p is not None]


def _overlay(base: Mapping[str, Any], top: Mapping[str, Any]) -> dict[str, Any]:
    """top を base に重ねた dict を返す（両方が mapping のキーは再帰的に重ねる）。"""

    out = dict(base)
    for key, value in top.items():
        below = out.get(key)
        if isinstance(value, Mapping) and isinstance(below, Mapping):
            out[key] = _overlay(below, value)
        else:
            out[key] = value
    return out


def _lookup(payload: Mapping[str, Any], dotted: str) -> Any:
    """`a.b.c` 形式のキーを辿って値を返す。途中が mapping でなければ RuntimeError。"""

    node: Any = payload
    walked: list[str] = []
    for part in dotted.split("."):
        if node is None:
            break
        if not isinstance(node, Mapping):
            raise RuntimeError(f"{'.'.join(walked)} は mapping である必要があります: got={node!r}")
        node = node.get(part)
        walked.append(part)
    if node is None:
        raise RuntimeError(f"{dotted} が未設定です（同梱 default_config.yaml を確認してください）")
    return node


def _setting(payload: Mapping[str, Any], dotted: str, convert: Callable[[Any], _T], expected: str) -> _T:
    value = _lookup(payload, dotted)
    try:
        return convert(value)
    except (TypeError, ValueError) as exc:
        raise RuntimeError(f"{dotted} は {expected} である必要があります: got={value!r}") from exc


def _to_path(value: Any) -> Path:
    text = str(value).strip()
    if not text:
        raise ValueError("empty path")
    return Path(os.path.expandvars(os.path.expanduser(text)))


def _to_int_pair(value: Any) -> tuple[int, int]:
    if isinstance(value, (str, bytes)) or len(value) != 2:
        raise ValueError("not a pair")
    return int(value[0]), int(value[1])


def _to_positive_float(value: Any) -> float:
    out = float(value)
    if not out > 0.0:
        raise ValueError("not positive")
    return out


def _to_bool(value: Any) -> bool:
    if not isinstance(value, bool):
        raise TypeError("not a bool")
    return value


def runtime_config() -> RuntimeConfig:
    """実行時設定をロードして返す（`set_config_path()` まではキャッシュを返す）。

    重ね順（後勝ち）:
    1) 同梱 default_config.yaml
    2) `./.dialkit/config.yaml`（無ければ `~/.config/dialkit/config.yaml`）
    3) `set_config_path(...)` で指定した config
    """

    global _cached
    if _cached is not None:
        return _cached

    user_paths = _user_layers()
    payload = _packaged_layer()
    for path in user_paths:
        payload = _overlay(payload, _parse_yaml(path.read_text(encoding="utf-8"), source=str(path)))

    version = _setting(payload, "version", int, "整数")
    if version != SUPPORTED_CONFIG_VERSION:
        raise RuntimeError(f"未対応の config.yaml version です: got={version}")

    _cached = RuntimeConfig(
        config_path=user_paths[-1] if user_paths else None,
        preset_dir=_setting(payload, "paths.preset_dir", _to_path, "空でないパス"),
        panel_gui_window_size=_setting(payload, "ui.panel_gui.window_size", _to_int_pair, "[x, y] の整数配列"),
        panel_gui_window_position=_setting(
            payload, "ui.panel_gui.window_position", _to_int_pair, "[x, y] の整数配列"
        ),
        spring_preview_duration=_setting(
            payload, "ui.spring_preview.duration", _to_positive_float, "正の数値"
        ),
        decile_snap=_setting(payload, "ui.panel_gui.decile_snap", _to_bool, "true/false"),
    )
    return _cached


def preset_root_dir() -> Path:
    """プリセット JSON を保存する既定ディレクトリを返す。"""

    return Path(runtime_config().preset_dir)


__all__ = ["RuntimeConfig", "preset_root_dir", "runtime_config", "set_config_path"]
