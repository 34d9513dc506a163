import sys

import pytest

from dialkit.core.store import DialStore
from dialkit.interactive.panel_gui.panel_view import PanelViewState, render_panel
from dialkit.interactive.panel_gui.snippet import values_snippet


def _item_id(label: str) -> str:
    return label.split("##", 1)[-1]


class _FakeImgui:
    """描画呼び出しを記録し、指定されたクリック/ドラッグだけを返す imgui の代役。"""

    TREE_NODE_DEFAULT_OPEN = 1 << 5
    SLIDER_FLAGS_ALWAYS_CLAMP = 1 << 4
    COLOR_EDIT_NO_INPUTS = 1 << 5
    INPUT_TEXT_ENTER_RETURNS_TRUE = 1 << 5
    INPUT_TEXT_READ_ONLY = 1 << 14

    def __init__(self, *, clicks=(), slider_moves=None, clipboard=True) -> None:
        self.clicks = set(clicks)
        self.slider_moves = dict(slider_moves or {})
        self.drawn: list[str] = []
        self.clipboard: str | None = None
        if clipboard:
            self.set_clipboard_text = self._set_clipboard_text

    def _set_clipboard_text(self, text: str) -> None:
        self.clipboard = text

    def collapsing_header(self, label, visible=None, flags=0):
        return True, None

    def tree_node(self, label, flags=0):
        self.drawn.append(_item_id(label))
        return bool(flags & self.TREE_NODE_DEFAULT_OPEN)

    def slider_float(self, label, value, lo, hi, format="%.3f", flags=0):
        key = _item_id(label)
        self.drawn.append(key)
        if key in self.slider_moves:
            return True, self.slider_moves[key]
        return False, value

    def button(self, label, *args):
        key = _item_id(label)
        self.drawn.append(key)
        return key in self.clicks

    def radio_button(self, label, active):
        key = _item_id(label)
        self.drawn.append(key)
        return key in self.clicks

    def checkbox(self, label, state):
        self.drawn.append(_item_id(label))
        return False, state

    def input_text(self, label, value, buffer_length, flags=0):
        self.drawn.append(_item_id(label))
        return False, value

    def input_text_multiline(self, label, value, *args):
        self.drawn.append(_item_id(label))
        return False, value

    def color_edit3(self, label, r, g, b, flags=0):
        return False, (r, g, b)

    def color_edit4(self, label, r, g, b, a, flags=0):
        return False, (r, g, b, a)

    def begin_combo(self, label, preview):
        self.drawn.append(_item_id(label))
        return False

    def selectable(self, label, selected):
        return False, selected

    def is_item_active(self):
        return False

    def plot_lines(self, label, values, **kwargs):
        self.drawn.append(_item_id(label))

    def _noop(self, *args, **kwargs):
        return None

    push_id = pop_id = tree_pop = end_combo = _noop
    push_item_width = pop_item_width = same_line = _noop
    text = text_disabled = set_item_default_focus = _noop


def _render(fake: _FakeImgui, store: DialStore, panel_id: str = "card", **kwargs) -> bool:
    kwargs.setdefault("state", PanelViewState())
    return render_panel(fake, store, panel_id, **kwargs)


@pytest.fixture
def store() -> DialStore:
    s = DialStore()
    s.register_panel(
        "card",
        "Card",
        {
            "opacity": [1, 0, 1, 0.01],
            "fx": {"_collapsed": True, "blur": [24, 0, 100]},
            "motion": {"type": "spring", "visualDuration": 0.3, "bounce": 0.2},
            "reset": {"type": "action", "label": "Reset"},
        },
    )
    return s


def _install(monkeypatch: pytest.MonkeyPatch, fake: _FakeImgui) -> _FakeImgui:
    monkeypatch.setitem(sys.modules, "imgui", fake)
    return fake


def test_slider_drag_commits_snapped_value(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(slider_moves={"opacity": 0.51}))

    assert _render(fake, store) is True
    assert store.get_values("card")["opacity"] == 0.5


def test_slider_drag_without_snap_keeps_step_rounding(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(slider_moves={"opacity": 0.513}))

    _render(fake, store, decile_snap=False)
    assert store.get_values("card")["opacity"] == 0.51


def test_collapsed_folder_hides_children(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui())

    assert _render(fake, store) is False
    assert "fx" in fake.drawn
    assert "fx.blur" not in fake.drawn
    assert "opacity" in fake.drawn


def test_add_preset_button_saves_next_version(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(clicks={"add_preset"}))

    _render(fake, store)
    presets = store.get_presets("card")
    assert [p.name for p in presets] == ["Version 2"]
    assert store.get_active_preset_id("card") == presets[0].id


def test_delete_button_only_shown_for_active_preset(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui())
    _render(fake, store)
    assert "delete_preset" not in fake.drawn

    store.save_preset("card", "Version 2")
    fake = _install(monkeypatch, _FakeImgui(clicks={"delete_preset"}))
    _render(fake, store)
    assert store.get_presets("card") == ()
    assert store.get_active_preset_id("card") is None


def test_copy_button_writes_snippet_to_clipboard(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(clicks={"copy_values"}))
    state = PanelViewState()

    _render(fake, store, state=state)
    assert fake.clipboard == values_snippet("Card", store.get_values("card"))
    assert state.copy_failed is False
    assert "snippet" not in fake.drawn


def test_copy_without_clipboard_shows_snippet_text(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(clicks={"copy_values"}, clipboard=False))
    state = PanelViewState()

    _render(fake, store, state=state, gui_window=None)
    assert state.copy_failed is True
    assert state.last_snippet == values_snippet("Card", store.get_values("card"))
    assert "snippet" in fake.drawn


def test_action_button_triggers_action(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(clicks={"reset"}))
    fired: list[str] = []
    store.subscribe_actions("card", fired.append)

    assert _render(fake, store) is False
    assert fired == ["reset"]


def test_spring_mode_radio_switches_to_physics(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(clicks={"motion_advanced"}))

    assert _render(fake, store) is True
    assert store.get_spring_mode("card", "motion") == "advanced"
    assert "stiffness" in store.get_values("card")["motion"]


def test_spring_sliders_follow_mode(monkeypatch, store):
    fake = _install(monkeypatch, _FakeImgui(slider_moves={"motion.bounce": 0.43}))

    _render(fake, store)
    assert "motion.visualDuration" in fake.drawn
    assert "motion.stiffness" not in fake.drawn
    assert "motion_preview" in fake.drawn
    assert store.get_values("card")["motion"]["bounce"] == 0.4
