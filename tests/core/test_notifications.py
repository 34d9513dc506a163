import logging

import pytest

from dialkit.core.listeners import MAX_NOTIFY_PASSES, ListenerSet
from dialkit.core.store import DialStore


def _store() -> DialStore:
    store = DialStore()
    store.register_panel("p", "Panel", {"x": [0, 0, 100, 1], "y": [0, 0, 100, 1]})
    return store


def test_listeners_fire_in_registration_order():
    store = _store()
    order: list[str] = []
    store.subscribe("p", lambda: order.append("a"))
    store.subscribe("p", lambda: order.append("b"))
    store.subscribe("p", lambda: order.append("c"))
    store.update_value("p", "x", 1)
    assert order == ["a", "b", "c"]


def test_listener_sees_post_mutation_state():
    store = _store()
    seen: list[int] = []
    store.subscribe("p", lambda: seen.append(store.get_values("p")["x"]))
    store.update_value("p", "x", 42)
    assert seen == [42]


def test_unsubscribe_is_idempotent():
    store = _store()
    calls: list[int] = []
    unsubscribe = store.subscribe("p", lambda: calls.append(1))
    unsubscribe()
    unsubscribe()
    store.update_value("p", "x", 1)
    assert calls == []


def test_unsubscribe_during_delivery_keeps_current_pass_intact():
    store = _store()
    calls: list[str] = []
    unsubscribers: dict[str, object] = {}

    def first() -> None:
        calls.append("first")
        unsubscribers["second"]()  # type: ignore[operator]
        unsubscribers["first"]()  # type: ignore[operator]

    def second() -> None:
        calls.append("second")

    def third() -> None:
        calls.append("third")

    unsubscribers["first"] = store.subscribe("p", first)
    unsubscribers["second"] = store.subscribe("p", second)
    store.subscribe("p", third)

    store.update_value("p", "x", 1)
    assert calls == ["first", "second", "third"]

    calls.clear()
    store.update_value("p", "x", 2)
    assert calls == ["third"]


def test_reentrant_update_is_coalesced_into_one_more_pass():
    store = _store()
    seen: list[tuple[int, int]] = []

    def mirror() -> None:
        values = store.get_values("p")
        seen.append((values["x"], values["y"]))
        if values["y"] != values["x"]:
            store.update_value("p", "y", values["x"])

    store.subscribe("p", mirror)
    store.update_value("p", "x", 5)

    assert seen == [(5, 0), (5, 5)]
    assert store.get_values("p") == {"x": 5, "y": 5}


def test_unbounded_reentrant_updates_are_capped(caplog: pytest.LogCaptureFixture):
    store = _store()
    calls: list[int] = []

    def runaway() -> None:
        calls.append(1)
        store.update_value("p", "x", store.get_values("p")["x"] + 1)

    store.subscribe("p", runaway)
    with caplog.at_level(logging.WARNING, logger="dialkit.core.listeners"):
        store.update_value("p", "x", 1)

    assert len(calls) == MAX_NOTIFY_PASSES
    assert any("打ち切りました" in r.getMessage() for r in caplog.records)


def test_listener_exception_propagates_and_store_stays_usable():
    store = _store()
    calls: list[int] = []

    def boom() -> None:
        raise RuntimeError("listener failed")

    unsubscribe = store.subscribe("p", boom)
    store.subscribe("p", lambda: calls.append(1))

    with pytest.raises(RuntimeError):
        store.update_value("p", "x", 1)
    assert store.get_values("p")["x"] == 1

    unsubscribe()
    store.update_value("p", "x", 2)
    assert calls == [1]


def test_panels_notify_independently():
    store = _store()
    store.register_panel("q", "Other", {"z": [0, 0, 1]})
    calls: list[str] = []
    store.subscribe("p", lambda: calls.append("p"))
    store.subscribe("q", lambda: calls.append("q"))
    store.update_value("q", "z", 1)
    assert calls == ["q"]


def test_emit_passes_arguments_and_caps_recursion(caplog: pytest.LogCaptureFixture):
    listeners = ListenerSet("test")
    received: list[str] = []

    def recurse(path: str) -> None:
        received.append(path)
        listeners.emit(path)

    listeners.add(recurse)
    with caplog.at_level(logging.WARNING, logger="dialkit.core.listeners"):
        listeners.emit("go")

    assert received == ["go"] * MAX_NOTIFY_PASSES
    assert caplog.records


def test_listener_set_rejects_non_callable():
    with pytest.raises(TypeError):
        ListenerSet().add("not callable")  # type: ignore[arg-type]
