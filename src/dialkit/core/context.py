# どこで: `src/dialkit/core/context.py`。
# 何を: with ブロックの間だけ DialStore を「現在の store」として束縛するコンテキストマネージャを提供する。
# なぜ: 隠れたグローバル singleton を持たずに、宣言側が store を引数で回さなくても登録できるようにするため。

from __future__ import annotations

import contextlib
import contextvars
from typing import Iterator

from .store import DialStore

_store_var: contextvars.ContextVar[DialStore | None] = contextvars.ContextVar(
    "dial_store", default=None
)


def current_dial_store() -> DialStore | None:
    """現在束縛されている DialStore を返す（無ければ None）。"""
    return _store_var.get()


@contextlib.contextmanager
def dial_store_context(store: DialStore) -> Iterator[DialStore]:
    """ブロックの間 store を現在の DialStore として束縛する。入れ子にできる。"""

    token = _store_var.set(store)
    try:
        yield store
    finally:
        _store_var.reset(token)


__all__ = ["current_dial_store", "dial_store_context"]
