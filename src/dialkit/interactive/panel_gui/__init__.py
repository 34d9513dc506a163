# どこで: `src/dialkit/interactive/panel_gui/__init__.py`。
# 何を: パネル GUI の公開 API を集約する。
# なぜ: 実装を責務ごとに分割しつつ、利用側の import パスを安定させるため。

from __future__ import annotations

from .gui import DialGUI
from .panel_view import render_panel
from .pyglet_backend import create_panel_gui_window
from .snippet import next_preset_name, values_snippet

__all__ = [
    "DialGUI",
    "create_panel_gui_window",
    "next_preset_name",
    "render_panel",
    "values_snippet",
]
