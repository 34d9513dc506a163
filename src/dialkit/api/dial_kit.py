# どこで: `src/dialkit/api/dial_kit.py`。
# 何を: ホストアプリがパネルを宣言し、入れ子の値を読む/購読するための DialKit ハンドルを提供する。
# なぜ: UI フレームワークに依存しない宣言 API を store の上に薄く重ね、パネルの寿命をハンドルに結び付けるため。

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from dialkit.core.context import current_dial_store
from dialkit.core.listeners import Unsubscribe
from dialkit.core.resolver import build_resolved_values
from dialkit.core.store import DialStore

ValuesListener = Callable[[dict[str, Any]], None]


class DialKit:
    """登録済みパネル 1 つへのハンドル。

    `get_values()` は schema と同じ入れ子形の resolved values を返す。
    `destroy()` 後の読み出しは PanelNotFoundError になる。
    """

    def __init__(self, store: DialStore, panel_id: str, name: str) -> None:
        self._store = store
        self._panel_id = str(panel_id)
        self._name = str(name)
        self._destroyed = False

    @property
    def panel_id(self) -> str:
        return self._panel_id

    @property
    def name(self) -> str:
        return self._name

    @property
    def store(self) -> DialStore:
        return self._store

    def get_values(self) -> dict[str, Any]:
        """現在の値を schema の形（入れ子 dict）で返す。"""

        schema = self._store.get_schema(self._panel_id)
        return build_resolved_values(schema, self._store.get_values(self._panel_id))

    def subscribe(self, listener: ValuesListener) -> Unsubscribe:
        """値/プリセット/spring モードが変わるたびに、入れ子の値で listener を呼ぶ。"""

        def on_change() -> None:
            listener(self.get_values())

        return self._store.subscribe(self._panel_id, on_change)

    def on_action(self, listener: Callable[[str], None]) -> Unsubscribe:
        """action がトリガーされるたびに、その path で listener を呼ぶ。"""

        return self._store.subscribe_actions(self._panel_id, listener)

    def destroy(self) -> None:
        """パネルを store から登録解除する。二重呼び出しは何もしない。"""

        if self._destroyed:
            return
        self._destroyed = True
        self._store.unregister_panel(self._panel_id)


def create_dial_kit(
    name: str,
    schema: Mapping[str, Any],
    *,
    store: DialStore | None = None,
    panel_id: str | None = None,
) -> DialKit:
    """schema をパネルとして登録し、DialKit ハンドルを返す。

    Parameters
    ----------
    name : str
        パネルの表示名。
    schema : Mapping[str, Any]
        省略記法を含む宣言（`[default, min, max, step?]` / `{"type": ...}` / 入れ子 dict など）。
    store : DialStore | None
        登録先。None なら `dial_store_context(...)` で束縛された store を使う。
    panel_id : str | None
        パネル id。None なら `"{name}-{n}"` を払い出す。同じ id を渡すと schema を差し替える。

    Raises
    ------
    RuntimeError
        store が渡されず、束縛された store も無い場合。
    """

    target = store if store is not None else current_dial_store()
    if target is None:
        raise RuntimeError(
            "DialStore が指定されていません（store= を渡すか dial_store_context(...) の中で呼んでください）"
        )
    pid = target.next_panel_id(str(name)) if panel_id is None else str(panel_id)
    target.register_panel(pid, str(name), schema)
    return DialKit(target, pid, str(name))


__all__ = ["DialKit", "ValuesListener", "create_dial_kit"]
