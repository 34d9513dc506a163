# どこで: `src/dialkit/__init__.py`。
# 何を: ルート `dialkit` パッケージを定義する。
# なぜ: import 起点を `dialkit` に統一するため。

from __future__ import annotations

from dialkit.api import DialKit, create_dial_kit, run_panel_gui
from dialkit.core.context import dial_store_context
from dialkit.core.store import DialStore

__all__ = ["DialKit", "DialStore", "create_dial_kit", "dial_store_context", "run_panel_gui"]
