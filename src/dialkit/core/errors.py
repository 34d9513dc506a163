# どこで: `src/dialkit/core/errors.py`。
# 何を: DialStore / schema 解析が送出する例外型を定義する。
# なぜ: 呼び出し側が「未知パネル」「未知パス」「不正 schema」を区別して扱えるようにするため。

from __future__ import annotations


class PanelNotFoundError(KeyError):
    """未登録の panel_id が渡された。"""

    def __init__(self, panel_id: str) -> None:
        super().__init__(panel_id)
        self.panel_id = panel_id

    def __str__(self) -> str:
        return f"パネルが登録されていません: panel_id={self.panel_id!r}"


class PresetNotFoundError(KeyError):
    """パネルに存在しない preset_id が渡された。"""

    def __init__(self, panel_id: str, preset_id: str) -> None:
        super().__init__(preset_id)
        self.panel_id = panel_id
        self.preset_id = preset_id

    def __str__(self) -> str:
        return f"プリセットが見つかりません: panel_id={self.panel_id!r}, preset_id={self.preset_id!r}"


class InvalidPathError(KeyError):
    """schema に無い、または操作対象にできないパスが渡された。"""

    def __init__(self, panel_id: str, path: str, reason: str = "未知のパス") -> None:
        super().__init__(path)
        self.panel_id = panel_id
        self.path = path
        self.reason = reason

    def __str__(self) -> str:
        return f"{self.reason}: panel_id={self.panel_id!r}, path={self.path!r}"


class SchemaError(ValueError):
    """schema の値の形が解釈できない。"""


__all__ = ["PanelNotFoundError", "PresetNotFoundError", "InvalidPathError", "SchemaError"]
