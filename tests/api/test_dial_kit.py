import pytest

from dialkit import DialStore, create_dial_kit, dial_store_context
from dialkit.core.context import current_dial_store
from dialkit.core.errors import PanelNotFoundError


def test_create_dial_kit_returns_nested_values():
    store = DialStore()
    dial = create_dial_kit(
        "Card",
        {
            "opacity": [1, 0, 1],
            "shadow": {"blur": [24, 0, 100], "visible": True},
            "reset": {"type": "action"},
        },
        store=store,
    )

    assert dial.panel_id == "Card-1"
    assert dial.name == "Card"
    assert dial.store is store
    assert dial.get_values() == {
        "opacity": 1,
        "shadow": {"blur": 24, "visible": True},
    }
    assert store.get_values("Card-1") == {"opacity": 1, "shadow.blur": 24, "shadow.visible": True}


def test_create_dial_kit_without_store_raises():
    assert current_dial_store() is None
    with pytest.raises(RuntimeError):
        create_dial_kit("Card", {"x": [0, 0, 1]})


def test_create_dial_kit_uses_bound_store():
    store = DialStore()
    with dial_store_context(store) as bound:
        assert bound is store
        dial = create_dial_kit("Card", {"x": [0, 0, 1]})
    assert current_dial_store() is None
    assert dial.store is store
    assert store.has_panel(dial.panel_id)


def test_auto_panel_ids_do_not_collide():
    store = DialStore()
    first = create_dial_kit("Card", {"x": [0, 0, 1]}, store=store)
    second = create_dial_kit("Card", {"x": [0, 0, 1]}, store=store)
    assert first.panel_id != second.panel_id
    assert [p.id for p in store.get_panels()] == [first.panel_id, second.panel_id]


def test_subscribe_receives_nested_values_once_per_change():
    store = DialStore()
    dial = create_dial_kit("Card", {"shadow": {"blur": [24, 0, 100]}}, store=store)
    seen: list[dict] = []
    unsubscribe = dial.subscribe(seen.append)

    store.update_value(dial.panel_id, "shadow.blur", 40)
    assert seen == [{"shadow": {"blur": 40}}]

    unsubscribe()
    store.update_value(dial.panel_id, "shadow.blur", 50)
    assert len(seen) == 1


def test_on_action_receives_path():
    store = DialStore()
    dial = create_dial_kit("Card", {"fx": {"reset": {"type": "action"}}}, store=store)
    fired: list[str] = []
    dial.on_action(fired.append)

    store.trigger_action(dial.panel_id, "fx.reset")
    assert fired == ["fx.reset"]


def test_destroy_unregisters_and_is_idempotent():
    store = DialStore()
    dial = create_dial_kit("Card", {"x": [0, 0, 1]}, store=store)

    dial.destroy()
    dial.destroy()
    assert not store.has_panel(dial.panel_id)
    with pytest.raises(PanelNotFoundError):
        dial.get_values()


def test_explicit_panel_id_replaces_schema_and_keeps_values():
    store = DialStore()
    first = create_dial_kit("Card", {"x": [0, 0, 1]}, store=store, panel_id="card")
    store.update_value("card", "x", 0.7)

    second = create_dial_kit("Card", {"x": [0, 0, 1], "y": [5, 0, 10]}, store=store, panel_id="card")
    assert second.panel_id == first.panel_id == "card"
    assert second.get_values() == {"x": 0.7, "y": 5}
    assert len(store.get_panels()) == 1
