"""Tests for ScopeTree, ChangeEvents and PropertyLocation."""

import pytest
from pydantic import BaseModel, ValidationError

from livevars import ChangeEvents, PropertyLocation, ScopeTree
from livevars._events import CallbackSubscription


@pytest.fixture
def tree() -> ScopeTree:
    """dashboard -> (widget -> cell, sidebar)."""
    tree = ScopeTree()
    tree.add_scope("dashboard")
    tree.add_scope("widget", parent="dashboard")
    tree.add_scope("cell", parent="widget")
    tree.add_scope("sidebar", parent="dashboard")
    return tree


class TestScopeTree:
    def test_hierarchy(self, tree: ScopeTree) -> None:
        assert tree.get_parent("cell") == "widget"
        assert tree.get_parent("dashboard") is None
        assert tree.get_root("cell") == "dashboard"
        assert tree.get_root("dashboard") == "dashboard"
        assert tree.children("dashboard") == ("widget", "sidebar")
        assert len(tree) == 4
        assert "cell" in tree

    def test_is_descendant(self, tree: ScopeTree) -> None:
        assert tree.is_descendant("cell", "dashboard") is True
        assert tree.is_descendant("cell", "widget") is True
        assert tree.is_descendant("widget", "widget") is False
        assert tree.is_descendant("sidebar", "widget") is False
        assert tree.is_descendant("dashboard", "cell") is False

    def test_non_string_scopes(self) -> None:
        tree = ScopeTree()
        root = tree.add_scope(("page", 1))
        child = tree.add_scope(("page", 1, "chart"), parent=root)

        assert tree.get_root(child) == ("page", 1)

    def test_duplicate_scope_raises(self, tree: ScopeTree) -> None:
        with pytest.raises(ValueError, match="already tracked"):
            tree.add_scope("widget")

    def test_unknown_parent_raises(self, tree: ScopeTree) -> None:
        with pytest.raises(ValueError, match="not tracked"):
            tree.add_scope("orphan", parent="missing")

    def test_unknown_scope_raises(self, tree: ScopeTree) -> None:
        with pytest.raises(ValueError, match="not tracked"):
            tree.get_parent("missing")


class TestScopeDestruction:
    def test_destroy_removes_subtree(self, tree: ScopeTree) -> None:
        tree.destroy("widget")

        assert "widget" not in tree
        assert "cell" not in tree
        assert tree.children("dashboard") == ("sidebar",)
        assert len(tree) == 2

    def test_callbacks_fire_descendants_first(self, tree: ScopeTree) -> None:
        fired: list[str] = []
        tree.on_before_destroy("widget", lambda: fired.append("widget"))
        tree.on_before_destroy("cell", lambda: fired.append("cell"))
        tree.on_before_destroy("sidebar", lambda: fired.append("sidebar"))

        tree.destroy("dashboard")

        assert fired == ["cell", "widget", "sidebar"]
        assert len(tree) == 0

    def test_callbacks_see_intact_tree(self, tree: ScopeTree) -> None:
        seen: list[object] = []
        tree.on_before_destroy("cell", lambda: seen.append(tree.get_root("cell")))

        tree.destroy("widget")

        assert seen == ["dashboard"]

    def test_callback_fires_once(self, tree: ScopeTree) -> None:
        fired: list[str] = []
        subscription = tree.on_before_destroy("cell", lambda: fired.append("cell"))

        tree.destroy("cell")
        subscription.unsubscribe()

        assert fired == ["cell"]
        assert subscription.closed is True

    def test_unsubscribed_callback_does_not_fire(self, tree: ScopeTree) -> None:
        fired: list[str] = []
        subscription = tree.on_before_destroy("cell", lambda: fired.append("cell"))

        subscription.unsubscribe()
        tree.destroy("widget")

        assert fired == []

    def test_callback_may_unsubscribe_others(self, tree: ScopeTree) -> None:
        fired: list[str] = []
        second: list[CallbackSubscription] = []

        def first_callback() -> None:
            fired.append("first")
            second[0].unsubscribe()

        tree.on_before_destroy("cell", first_callback)
        second.append(tree.on_before_destroy("cell", lambda: fired.append("second")))

        tree.destroy("cell")

        assert fired == ["first"]


class TestCallbackSubscription:
    def test_unsubscribe_is_idempotent(self) -> None:
        cancelled: list[CallbackSubscription] = []
        subscription = CallbackSubscription(cancelled.append)

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert cancelled == [subscription]
        assert subscription.closed is True


class TestChangeEvents:
    def test_changes_bubble_to_ancestors(self, tree: ScopeTree) -> None:
        events = ChangeEvents(tree)
        heard: list[tuple[str, object]] = []
        events.subscribe("dashboard", lambda scope: heard.append(("dashboard", scope)))
        events.subscribe("widget", lambda scope: heard.append(("widget", scope)))
        events.subscribe("sidebar", lambda scope: heard.append(("sidebar", scope)))

        events.publish_change("cell")

        assert heard == [("widget", "cell"), ("dashboard", "cell")]

    def test_unsubscribe(self, tree: ScopeTree) -> None:
        events = ChangeEvents(tree)
        heard: list[object] = []
        subscription = events.subscribe("widget", heard.append)

        events.publish_change("widget")
        subscription.unsubscribe()
        events.publish_change("widget")

        assert heard == ["widget"]

    def test_listeners_in_subscription_order(self, tree: ScopeTree) -> None:
        events = ChangeEvents(tree)
        heard: list[int] = []
        for index in range(3):
            events.subscribe("widget", lambda _scope, index=index: heard.append(index))

        events.publish_change("widget")

        assert heard == [0, 1, 2]


class Chart(BaseModel):
    title: str | None = None
    series: list[str] = []


class TestPropertyLocation:
    def test_for_item(self) -> None:
        widget: dict[str, object] = {"title": "old"}
        location = PropertyLocation.for_item(widget, "title", owning_scope="widget")

        location.write("new")

        assert widget == {"title": "new"}
        assert location.read() == "new"
        assert location.stable_key() == "title"
        assert location.owning_scope == "widget"

    def test_for_item_in_list(self) -> None:
        labels = ["a", "b"]
        location = PropertyLocation.for_item(labels, 1, owning_scope="widget")

        location.write("c")

        assert labels == ["a", "c"]
        assert location.stable_key() == "1"

    def test_for_attribute(self) -> None:
        chart = Chart()
        location = PropertyLocation.for_attribute(chart, "title", owning_scope="widget")

        location.write("Revenue")

        assert chart.title == "Revenue"
        assert location.read() == "Revenue"

    def test_child(self) -> None:
        chart = Chart(series=["x", "y"])
        parent = PropertyLocation.for_attribute(chart, "series", owning_scope="widget")
        location = parent.child(chart.series, 0)

        location.write("z")

        assert chart.series == ["z", "y"]
        assert location.stable_key() == "series:0"
        assert location.owning_scope == "widget"

    def test_validator_runs_before_write(self) -> None:
        chart = Chart(title="ok")
        location = PropertyLocation.for_attribute(chart, "title", owning_scope="widget").with_validator(
            lambda value: Chart.model_validate({"title": value}),
        )

        with pytest.raises(ValidationError):
            location.write(42)  # type: ignore[arg-type]

        assert chart.title == "ok"

    def test_repr(self) -> None:
        location = PropertyLocation.for_item({}, "title", owning_scope="widget")

        assert repr(location) == "PropertyLocation('title', owning_scope='widget')"
        assert str(location) == "title"
