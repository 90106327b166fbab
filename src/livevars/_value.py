"""Variable storage entries."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ._reference import VariableReference


@dataclass(slots=True, eq=False)
class VariableValue[T]:
    """A variable assigned in one scope, and the references currently reading it.

    Attributes:
        key: The variable name, i.e. ``"a"`` for ``${a}``.
        current_value: The assigned value. None marks a placeholder.
        references: References subscribed to this value, in subscription order.
            The references are owned by the manager's registries, not by this entry.

    """

    key: str
    current_value: T | None
    references: dict[VariableReference[Any], None] = field(default_factory=dict)

    def add_reference(self, reference: VariableReference[Any]) -> None:
        self.references[reference] = None

    def remove_reference(self, reference: VariableReference[Any]) -> None:
        del self.references[reference]


type VariableDictionary = dict[str, VariableValue[Any]]
