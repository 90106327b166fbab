"""A simple scope tree for hosts that do not bring their own."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._events import CallbackSubscription

if TYPE_CHECKING:
    from collections.abc import Callable, Generator

    from ._interfaces import Scope

logger = logging.getLogger(__name__)


class ScopeTree:
    """Tracks parent/child relationships between scopes and their teardown.

    Implements both ``ScopeHierarchy`` and ``DestructionSignal``, so one tree can
    be handed to ``VariableManager`` for both roles.

    Example:
        >>> tree = ScopeTree()
        >>> dashboard = tree.add_scope("dashboard")
        >>> widget = tree.add_scope("widget", parent=dashboard)
        >>> tree.get_root(widget)
        'dashboard'

    """

    def __init__(self) -> None:
        self._parents: dict[Scope, Scope | None] = {}
        self._children: dict[Scope, list[Scope]] = {}
        self._destroy_callbacks: dict[Scope, dict[CallbackSubscription, Callable[[], None]]] = {}

    def __contains__(self, scope: Scope) -> bool:
        return scope in self._parents

    def __len__(self) -> int:
        return len(self._parents)

    def add_scope(self, scope: Scope, parent: Scope | None = None) -> Scope:
        """Start tracking ``scope`` as a child of ``parent`` (a root if None).

        Raises:
            ValueError: If ``scope`` is already tracked or ``parent`` is not.

        """
        if scope in self._parents:
            msg = f"Scope {scope!r} is already tracked"
            raise ValueError(msg)
        if parent is not None:
            self._check_tracked(parent)
            self._children[parent].append(scope)

        self._parents[scope] = parent
        self._children[scope] = []
        return scope

    def get_parent(self, scope: Scope) -> Scope | None:
        self._check_tracked(scope)
        return self._parents[scope]

    def get_root(self, scope: Scope) -> Scope:
        current = scope
        parent = self.get_parent(current)
        while parent is not None:
            current = parent
            parent = self.get_parent(current)
        return current

    def is_descendant(self, candidate: Scope, ancestor: Scope) -> bool:
        """Check if ``ancestor`` is a strict ancestor of ``candidate``."""
        current = self.get_parent(candidate)
        while current is not None:
            if current == ancestor:
                return True
            current = self.get_parent(current)
        return False

    def children(self, scope: Scope) -> tuple[Scope, ...]:
        self._check_tracked(scope)
        return tuple(self._children[scope])

    def on_before_destroy(self, scope: Scope, callback: Callable[[], None]) -> CallbackSubscription:
        self._check_tracked(scope)
        callbacks = self._destroy_callbacks.setdefault(scope, {})
        subscription = CallbackSubscription(lambda sub: callbacks.pop(sub, None))
        callbacks[subscription] = callback
        return subscription

    def destroy(self, scope: Scope) -> None:
        """Destroy ``scope`` and its descendants.

        Before-destroy callbacks fire once each, descendants before ancestors,
        while the whole subtree is still intact. Only then are the scopes forgotten.
        """
        subtree = list(self._iter_subtree_post_order(scope))
        logger.debug("Destroying %d scope(s) under %r", len(subtree), scope)

        for current in subtree:
            callbacks = self._destroy_callbacks.pop(current, {})
            for subscription, callback in list(callbacks.items()):
                # An earlier callback may have cancelled this one
                if subscription.closed:
                    continue
                subscription.closed = True
                callback()

        parent = self._parents[scope]
        if parent is not None:
            self._children[parent].remove(scope)
        for current in subtree:
            del self._parents[current]
            del self._children[current]

    def _iter_subtree_post_order(self, scope: Scope) -> Generator[Scope]:
        self._check_tracked(scope)
        for child in self._children[scope]:
            yield from self._iter_subtree_post_order(child)
        yield scope

    def _check_tracked(self, scope: Scope) -> None:
        if scope not in self._parents:
            msg = f"Scope {scope!r} is not tracked"
            raise ValueError(msg)
