"""Change notification between scopes."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

    from ._interfaces import Scope, ScopeHierarchy

logger = logging.getLogger(__name__)


@dataclass(eq=False, slots=True)
class CallbackSubscription:
    """A cancellable callback registration. Cancelling twice is harmless."""

    _cancel: Callable[[CallbackSubscription], None]
    closed: bool = field(default=False, init=False)

    def unsubscribe(self) -> None:
        if self.closed:
            return
        self.closed = True
        self._cancel(self)


type ChangeListener = Callable[[Scope], None]


class ChangeEvents:
    """Publishes scope changes to listeners.

    Changes bubble up: a listener on a scope hears about changes in that scope
    and in every descendant. Listeners receive the scope that changed.
    """

    def __init__(self, hierarchy: ScopeHierarchy) -> None:
        self._hierarchy = hierarchy
        self._listeners: dict[Scope, dict[CallbackSubscription, ChangeListener]] = {}

    def subscribe(self, scope: Scope, listener: ChangeListener) -> CallbackSubscription:
        """Call ``listener`` whenever ``scope`` or one of its descendants changes."""
        listeners = self._listeners.setdefault(scope, {})
        subscription = CallbackSubscription(lambda sub: listeners.pop(sub, None))
        listeners[subscription] = listener
        return subscription

    def publish_change(self, scope: Scope) -> None:
        logger.debug("Change published for scope %r", scope)
        current: Scope | None = scope
        while current is not None:
            # Listeners may unsubscribe while being notified
            for listener in list(self._listeners.get(current, {}).values()):
                listener(scope)
            current = self._hierarchy.get_parent(current)
