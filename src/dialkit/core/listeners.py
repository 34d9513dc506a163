# どこで: `src/dialkit/core/listeners.py`。
# 何を: 購読者の登録/解除と、スナップショットを取ってから配送する通知処理を提供する。
# なぜ: 配送中の購読解除や listener からの再入した更新でも、配送ループを壊さず有限回で終えるため。

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable
from typing import Any

_logger = logging.getLogger(__name__)

# 1 回の外側の変更につき、再入で追加される配送パスの上限。
MAX_NOTIFY_PASSES = 32

Unsubscribe = Callable[[], None]


class ListenerSet:
    """登録順を保つ listener 集合。

    Notes
    -----
    - `add()` が返す解除関数は何度呼んでも安全（2 回目以降は何もしない）。
    - 配送は開始時点の listener 列のスナップショットに対して行う。
      配送中に解除された listener も、そのパスでは呼ばれる。
    """

    def __init__(self, name: str = "") -> None:
        self._name = str(name)
        self._listeners: dict[int, Callable[..., Any]] = {}
        self._tokens = itertools.count()
        self._delivering = False
        self._pending = False
        self._emit_depth = 0

    def __len__(self) -> int:
        return len(self._listeners)

    def add(self, listener: Callable[..., Any]) -> Unsubscribe:
        """listener を末尾に登録し、解除関数を返す。"""

        if not callable(listener):
            raise TypeError(f"listener は callable である必要があります: got={listener!r}")
        token = next(self._tokens)
        self._listeners[token] = listener

        def unsubscribe() -> None:
            self._listeners.pop(token, None)

        return unsubscribe

    def clear(self) -> None:
        self._listeners.clear()

    def snapshot(self) -> tuple[Callable[..., Any], ...]:
        return tuple(self._listeners.values())

    def notify(self) -> None:
        """引数なし listener へ変更を通知する。

        配送中に再び notify() された場合はその場で再帰せず、現在のパスの後に
        1 パスへまとめて配送し直す（最大 MAX_NOTIFY_PASSES パス）。
        """

        if self._delivering:
            self._pending = True
            return

        self._delivering = True
        try:
            passes = 0
            while True:
                self._pending = False
                for listener in self.snapshot():
                    listener()
                passes += 1
                if not self._pending:
                    break
                if passes >= MAX_NOTIFY_PASSES:
                    _logger.warning(
                        "listener からの再入更新が止まらないため通知を打ち切りました: name=%s passes=%d",
                        self._name,
                        passes,
                    )
                    break
        finally:
            self._delivering = False
            self._pending = False

    def emit(self, *args: Any) -> None:
        """引数付きで 1 回だけ配送する（まとめない）。再入の深さは MAX_NOTIFY_PASSES まで。"""

        if self._emit_depth >= MAX_NOTIFY_PASSES:
            _logger.warning(
                "listener からの再入が深すぎるため配送を破棄しました: name=%s args=%r",
                self._name,
                args,
            )
            return

        self._emit_depth += 1
        try:
            for listener in self.snapshot():
                listener(*args)
        finally:
            self._emit_depth -= 1


__all__ = ["MAX_NOTIFY_PASSES", "Unsubscribe", "ListenerSet"]
