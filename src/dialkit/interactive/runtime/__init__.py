# どこで: `src/dialkit/interactive/runtime/__init__.py`。
# 何を: interactive 実行時の「ループ/サブシステム」実装をまとめるパッケージ定義。
# なぜ: 宣言 API（`dialkit.api`）から GUI の初期化と後始末を分離するため。

from __future__ import annotations

__all__ = []
