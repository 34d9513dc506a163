# どこで: `src/dialkit/core/persistence.py`。
# 何を: プリセットの保存先（差し替え可能なストレージ）と JSON ファイル実装を提供する。
# なぜ: DialStore を保存方式から切り離し、テストではメモリ、実行時はファイルを使えるようにするため。

from __future__ import annotations

import hashlib
import json
import logging
import re
from pathlib import Path
from typing import Protocol

from .codec import StoredPresets, dumps_presets, loads_presets
from .runtime_config import preset_root_dir

_logger = logging.getLogger(__name__)


class PresetStorage(Protocol):
    """パネル id をキーにプリセット一覧を保存/復元するストレージ。"""

    def load(self, panel_id: str) -> StoredPresets | None:
        """保存済みの内容を返す。無ければ None。"""
        ...

    def save(self, panel_id: str, stored: StoredPresets) -> None:
        """内容を保存する（上書き）。"""
        ...


class MemoryPresetStorage:
    """プロセス内だけで保持するストレージ。

    保存時に JSON 文字列へ変換して持つため、JSON にできない値はここで弾かれ、
    読み出し側が保存済みの値を書き換えても影響しない。
    """

    def __init__(self) -> None:
        self._payloads: dict[str, str] = {}

    def load(self, panel_id: str) -> StoredPresets | None:
        payload = self._payloads.get(str(panel_id))
        if payload is None:
            return None
        return loads_presets(payload)

    def save(self, panel_id: str, stored: StoredPresets) -> None:
        self._payloads[str(panel_id)] = dumps_presets(stored)

    def panel_ids(self) -> tuple[str, ...]:
        return tuple(self._payloads)


def _sanitize_filename_fragment(text: str) -> str:
    """ファイル名に埋め込めるように text を正規化して返す（読みやすさ用で、一意ではない）。"""

    normalized = re.sub(r"[^A-Za-z0-9._-]+", "_", str(text))
    normalized = normalized.strip("._-")
    return normalized or "panel"


def panel_file_stem(panel_id: str) -> str:
    """panel_id ごとに異なるファイル名（拡張子なし）を返す。

    正規化した id に、元の id の sha1 先頭 12 桁を付ける。
    正規化で潰れる id（非 ASCII、記号違いなど）も別ファイルになる。
    """

    digest = hashlib.sha1(str(panel_id).encode("utf-8")).hexdigest()[:12]
    return f"{_sanitize_filename_fragment(panel_id)}-{digest}"


class JsonFilePresetStorage:
    """`{root_dir}/{panel_file_stem(panel_id)}.json` にプリセットを保存するストレージ。

    ファイルには持ち主の panel_id も書き込み、読み出し時に一致しなければ無視する。
    """

    def __init__(self, root_dir: str | Path | None = None) -> None:
        self._root_dir = None if root_dir is None else Path(root_dir)

    @property
    def root_dir(self) -> Path:
        # 未指定なら runtime_config の preset_dir を使う（呼び出し時点の設定に従う）。
        if self._root_dir is None:
            return preset_root_dir()
        return self._root_dir

    def path_for(self, panel_id: str) -> Path:
        return self.root_dir / f"{panel_file_stem(panel_id)}.json"

    def load(self, panel_id: str) -> StoredPresets | None:
        path = self.path_for(panel_id)
        try:
            payload = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError:
            _logger.warning("プリセットファイルを読めません: path=%s", path, exc_info=True)
            return None

        try:
            return loads_presets(payload, panel_id=str(panel_id))
        except (json.JSONDecodeError, TypeError, ValueError) as exc:
            # 破損したファイルや別パネルのファイルは無視して起動する。
            _logger.warning("プリセットファイルを無視します: path=%s reason=%s", path, exc)
            return None

    def save(self, panel_id: str, stored: StoredPresets) -> None:
        path = self.path_for(panel_id)
        payload = dumps_presets(stored, panel_id=str(panel_id))
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(payload + "\n", encoding="utf-8")
        _logger.debug("プリセットを保存しました: path=%s count=%d", path, len(stored.presets))


__all__ = ["PresetStorage", "MemoryPresetStorage", "JsonFilePresetStorage", "panel_file_stem"]
