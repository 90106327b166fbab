"""Locations that variable references write their resolved values to."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Self

if TYPE_CHECKING:
    from collections.abc import Callable, MutableMapping, MutableSequence

    from ._interfaces import Scope


class PropertyLocation[T]:
    """A property of some object in a scope, identified by a key unique within that scope.

    Example:
        >>> widget = {"title": None}
        >>> location = PropertyLocation.for_item(widget, "title", owning_scope="widget")
        >>> location.write("Hello")
        >>> widget
        {'title': 'Hello'}

    """

    def __init__(
        self,
        owning_scope: Scope,
        property_key: str,
        setter: Callable[[T | None], None],
        getter: Callable[[], T | None],
    ) -> None:
        self._owning_scope = owning_scope
        self._property_key = property_key
        self._setter = setter
        self._getter = getter
        self._validator: Callable[[T | None], None] | None = None

    @classmethod
    def for_item(
        cls,
        container: MutableMapping[Any, Any] | MutableSequence[Any],
        key: Any,
        owning_scope: Scope,
    ) -> PropertyLocation[Any]:
        """Location of ``container[key]``."""
        return cls(
            owning_scope,
            str(key),
            lambda value: container.__setitem__(key, value),
            lambda: container[key],
        )

    @classmethod
    def for_attribute(cls, obj: object, name: str, owning_scope: Scope) -> PropertyLocation[Any]:
        """Location of ``obj.<name>``, e.g. a field of a pydantic model."""
        return cls(
            owning_scope,
            name,
            lambda value: setattr(obj, name, value),
            lambda: getattr(obj, name),
        )

    def child(
        self,
        container: MutableMapping[Any, Any] | MutableSequence[Any],
        key: Any,
    ) -> PropertyLocation[Any]:
        """Location nested inside this one, e.g. an item of a list stored here.

        The owning scope is kept and the key becomes ``"<this key>:<key>"``.
        """
        return PropertyLocation(
            self._owning_scope,
            f"{self._property_key}:{key}",
            lambda value: container.__setitem__(key, value),
            lambda: container[key],
        )

    def with_validator(self, validator: Callable[[T | None], None]) -> Self:
        """Run ``validator`` before every write. It should raise to reject a value."""
        self._validator = validator
        return self

    @property
    def owning_scope(self) -> Scope:
        return self._owning_scope

    def write(self, value: T | None) -> None:
        if self._validator is not None:
            self._validator(value)
        self._setter(value)

    def read(self) -> T | None:
        return self._getter()

    def stable_key(self) -> str:
        return self._property_key

    def __str__(self) -> str:
        return self._property_key

    def __repr__(self) -> str:
        return f"PropertyLocation({self._property_key!r}, owning_scope={self._owning_scope!r})"
