"""Capabilities the variable manager needs from its host.

The manager never owns the scope tree, the change notification mechanism or the
destinations it writes to. Hosts supply them through these protocols. Ready-made
implementations live in ``_scopes``, ``_events`` and ``_location``.
"""

from __future__ import annotations

from collections.abc import Callable, Hashable
from typing import Protocol

# Scopes are opaque to the engine. Equal scopes are the same scope.
type Scope = Hashable


class Subscription(Protocol):
    """Handle for cancelling a callback registration."""

    def unsubscribe(self) -> None: ...


class ScopeHierarchy(Protocol):
    """Parent/child relationships between scopes."""

    def get_parent(self, scope: Scope) -> Scope | None:
        """Return the parent of ``scope``, or None for a root."""
        ...

    def get_root(self, scope: Scope) -> Scope:
        """Return the root of the tree containing ``scope`` (itself if it is a root)."""
        ...

    def is_descendant(self, candidate: Scope, ancestor: Scope) -> bool:
        """Check if ``candidate`` is a strict descendant of ``ancestor``."""
        ...


class ChangeNotifier(Protocol):
    """Tells observers that something in a scope changed."""

    def publish_change(self, scope: Scope) -> None: ...


class DestructionSignal(Protocol):
    """Fires once per scope, right before the scope is torn down."""

    def on_before_destroy(self, scope: Scope, callback: Callable[[], None]) -> Subscription:
        """Call ``callback`` once when ``scope`` is about to be destroyed."""
        ...


class Location[T](Protocol):
    """A readable and writable destination owned by a scope."""

    @property
    def owning_scope(self) -> Scope: ...

    def write(self, value: T | None) -> None: ...

    def read(self) -> T | None: ...

    def stable_key(self) -> str:
        """Identify this location uniquely among the locations of its owning scope."""
        ...
