# どこで: `src/dialkit/interactive/panel_gui/gui.py`。
# 何を: DialStore の全パネルを 1 枚の imgui ウィンドウへ描く DialGUI（初期化 / 1 フレーム描画 / 破棄）を提供する。
# なぜ: imgui コンテキストと renderer の寿命を 1 箇所に閉じ込め、panel_view を純粋な描画に保つため。

from __future__ import annotations

import logging
import time
from typing import Any

from dialkit.core.runtime_config import runtime_config
from dialkit.core.store import DialStore

from .panel_view import PanelViewState, render_panel
from .pyglet_backend import create_imgui_renderer, sync_imgui_io

_logger = logging.getLogger(__name__)

CLEAR_COLOR = (0.12, 0.12, 0.12, 1.0)


class DialGUI:
    """pyimgui で DialStore を編集する GUI。

    パネル一覧は毎フレーム store から読み直すので、パネルの追加/削除に購読は要らない。
    `flip()` は呼ばない（ウィンドウループ側が担当する）。
    """

    def __init__(
        self,
        gui_window: Any,
        *,
        store: DialStore,
        title: str = "DialKit",
        decile_snap: bool | None = None,
        preview_duration: float | None = None,
    ) -> None:
        import imgui  # type: ignore[import-untyped]

        cfg = runtime_config()
        self._imgui = imgui
        self._window = gui_window
        self._store = store
        self._title = str(title)
        self._decile_snap = cfg.decile_snap if decile_snap is None else bool(decile_snap)
        self._preview_duration = (
            cfg.spring_preview_duration if preview_duration is None else float(preview_duration)
        )
        self._view_states: dict[str, PanelViewState] = {}

        # imgui は current context を前提にするため、自前のコンテキストへ切り替えてから使う。
        self._context = imgui.create_context()
        imgui.set_current_context(self._context)
        imgui.style_colors_dark()
        self._renderer = create_imgui_renderer(gui_window)

        self._last_frame = time.monotonic()
        self._closed = False

    @property
    def store(self) -> DialStore:
        return self._store

    def _states_for(self, panel_ids: list[str]) -> dict[str, PanelViewState]:
        """表示中パネルの view state を返し、消えたパネルの state を捨てる。"""

        for stale in set(self._view_states) - set(panel_ids):
            del self._view_states[stale]
        return {pid: self._view_states.setdefault(pid, PanelViewState()) for pid in panel_ids}

    def _draw_panels(self) -> bool:
        imgui = self._imgui
        panel_ids = [panel.id for panel in self._store.get_panels()]
        states = self._states_for(panel_ids)
        if not panel_ids:
            imgui.text_disabled("No panels registered")

        changed = False
        for panel_id in panel_ids:
            changed = (
                render_panel(
                    imgui,
                    self._store,
                    panel_id,
                    state=states[panel_id],
                    gui_window=self._window,
                    decile_snap=self._decile_snap,
                    preview_duration=self._preview_duration,
                )
                or changed
            )
        return changed

    def draw_frame(self) -> bool:
        """1 フレーム分の GUI を描く。store を変更したら True。"""

        if self._closed:
            return False

        imgui = self._imgui
        now = time.monotonic()
        dt, self._last_frame = now - self._last_frame, now

        imgui.set_current_context(self._context)
        imgui.new_frame()
        sync_imgui_io(imgui, self._window, dt=dt)

        # ウィンドウ全面に固定した 1 枚の imgui ウィンドウへ全パネルを並べる。
        imgui.set_next_window_position(0, 0)
        imgui.set_next_window_size(self._window.width, self._window.height)
        imgui.begin(
            self._title,
            flags=imgui.WINDOW_NO_RESIZE | imgui.WINDOW_NO_COLLAPSE | imgui.WINDOW_NO_TITLE_BAR,
        )
        try:
            changed = self._draw_panels()
        finally:
            imgui.end()
        imgui.render()

        import pyglet

        pyglet.gl.glClearColor(*CLEAR_COLOR)
        self._window.clear()
        self._renderer.render(imgui.get_draw_data())
        if changed:
            _logger.debug("GUI から store を更新しました")
        return changed

    def close(self) -> None:
        """renderer / コンテキスト / ウィンドウを破棄する。二重呼び出しは何もしない。"""

        if self._closed:
            return
        self._closed = True
        shutdown = getattr(self._renderer, "shutdown", None)
        if callable(shutdown):
            shutdown()
        self._imgui.destroy_context(self._context)
        self._window.close()


__all__ = ["DialGUI"]
