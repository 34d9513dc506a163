# どこで: `src/dialkit/api/__init__.py`。
# 何を: 公開 API パッケージのエントリポイントとして create_dial_kit / DialKit / run_panel_gui を再エクスポートする。
# なぜ: ユーザーコードからシンプルに API を import できるようにするため。

from __future__ import annotations

from .dial_kit import DialKit, create_dial_kit

__all__ = ["DialKit", "create_dial_kit", "run_panel_gui"]


def run_panel_gui(*args, **kwargs):
    """GUI ランナーへのラッパ（遅延インポートで GUI 依存を後回しにする）。"""

    from dialkit.interactive.runtime.panel_gui_system import run_panel_gui as _run

    return _run(*args, **kwargs)
