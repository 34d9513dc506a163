# どこで: `src/dialkit/interactive/panel_gui/pyglet_backend.py`。
# 何を: パネル GUI 用の pyglet ウィンドウ生成と、imgui の pyglet renderer / IO 同期を提供する。
# なぜ: DialGUI をフレーム描画に専念させ、backend 固有の差異をここへ寄せるため。

from __future__ import annotations

from typing import Any

DEFAULT_WINDOW_SIZE = (360, 720)
MIN_DELTA_TIME = 1e-4


def create_imgui_renderer(gui_window: Any) -> Any:
    """gui_window に描く imgui renderer を返す。

    pyimgui の版によって `create_renderer()` が無い場合は `PygletRenderer` を直接使う。
    """

    try:
        from imgui.integrations import pyglet as imgui_pyglet  # type: ignore[import-untyped]
    except ImportError as exc:
        raise RuntimeError(f"imgui.integrations.pyglet を import できません: {exc}") from exc

    factory = getattr(imgui_pyglet, "create_renderer", None)
    if callable(factory):
        return factory(gui_window)
    renderer_cls = getattr(imgui_pyglet, "PygletRenderer", None)
    if renderer_cls is None:
        raise RuntimeError("imgui.integrations.pyglet に renderer がありません")
    return renderer_cls(gui_window)


def sync_imgui_io(imgui_mod: Any, gui_window: Any, *, dt: float) -> None:
    """imgui の IO（Δt / 論理サイズ / framebuffer 倍率）をウィンドウに合わせる。"""

    io = imgui_mod.get_io()
    io.delta_time = max(float(dt), MIN_DELTA_TIME)

    width, height = int(gui_window.width), int(gui_window.height)
    fb_width, fb_height = gui_window.get_framebuffer_size()
    io.display_size = (float(width), float(height))
    io.display_fb_scale = (fb_width / max(1, width), fb_height / max(1, height))


def create_panel_gui_window(
    *,
    width: int = DEFAULT_WINDOW_SIZE[0],
    height: int = DEFAULT_WINDOW_SIZE[1],
    position: tuple[int, int] | None = None,
    caption: str = "DialKit",
    vsync: bool = False,
) -> Any:
    """パネル GUI 用のリサイズ可能な pyglet ウィンドウを作って返す。"""

    import pyglet

    config = pyglet.gl.Config(double_buffer=True, sample_buffers=1, samples=4)  # type: ignore[abstract]
    window = pyglet.window.Window(  # type: ignore[abstract]
        width=int(width),
        height=int(height),
        caption=str(caption),
        resizable=True,
        vsync=bool(vsync),
        config=config,
    )
    if position is not None:
        x, y = position
        window.set_location(int(x), int(y))
    return window


__all__ = ["create_imgui_renderer", "create_panel_gui_window", "sync_imgui_io"]
