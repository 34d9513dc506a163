# どこで: `src/dialkit/interactive/runtime/panel_gui_system.py`。
# 何を: パネル GUI を「1フレーム描画できるサブシステム」として提供し、単独で回す run_panel_gui を定義する。
# なぜ: ホストが GUI 初期化/描画/後始末を意識せずに、store を渡すだけでパネルを開けるようにするため。

from __future__ import annotations

import logging

from dialkit.core.runtime_config import runtime_config
from dialkit.core.store import DialStore
from dialkit.interactive.panel_gui import DialGUI, create_panel_gui_window

_logger = logging.getLogger(__name__)


class PanelGUIWindowSystem:
    """パネル GUI（別ウィンドウ）のサブシステム。"""

    def __init__(self, *, store: DialStore, title: str = "DialKit") -> None:
        """GUI 用の window と DialGUI を初期化する。"""

        cfg = runtime_config()
        w, h = cfg.panel_gui_window_size
        self.window = create_panel_gui_window(
            width=w,
            height=h,
            position=cfg.panel_gui_window_position,
            caption=title,
            vsync=False,
        )
        self._gui = DialGUI(self.window, store=store, title=title)

    def draw_frame(self) -> None:
        """1 フレーム分の GUI を描画する（`flip()` は呼ばない）。"""

        self._gui.draw_frame()

    def close(self) -> None:
        """GUI を終了し、ウィンドウを破棄する。"""

        self._gui.close()


def run_panel_gui(store: DialStore, *, fps: float = 60.0, title: str = "DialKit") -> None:
    """store の全パネルを編集する GUI ウィンドウを開き、閉じられるまでブロックする。

    Notes
    -----
    描画は `pyglet.app.run(interval=1/fps)` の再描画（on_draw → flip）に任せる。
    `fps<=0` の場合はスロットリングしない。
    """

    import pyglet

    system = PanelGUIWindowSystem(store=store, title=title)
    fps_f = float(fps)
    interval = 1.0 / fps_f if fps_f > 0 else 0.0

    def request_exit(*_: object) -> bool:
        # ウィンドウは system.close() が renderer の後に閉じる。
        pyglet.app.exit()
        return pyglet.event.EVENT_HANDLED

    system.window.push_handlers(on_close=request_exit, on_draw=system.draw_frame)
    _logger.debug("パネル GUI を開始します: panels=%d fps=%s", len(store.get_panels()), fps_f)
    try:
        pyglet.app.run(interval=interval)
    finally:
        system.close()


__all__ = ["PanelGUIWindowSystem", "run_panel_gui"]
