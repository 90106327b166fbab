"""Binding of one variable expression to one location."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ._evaluator import EvaluationResult, VariableEvaluator

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._interfaces import Location, Scope, Subscription


class VariableReference[T]:
    """A live reference to one or more variables at a specific location.

    The reference owns its evaluator, so the names read by the last resolve
    belong to this binding alone.
    """

    def __init__(
        self,
        expression: str,
        location: Location[T],
        cleanup_subscription: Subscription | None = None,
    ) -> None:
        self.location = location
        self.cleanup_subscription = cleanup_subscription
        self._evaluator: VariableEvaluator[T] = VariableEvaluator(expression)

    def __repr__(self) -> str:
        return f"VariableReference({self.expression!r}, at={self.location.stable_key()!r})"

    @property
    def expression(self) -> str:
        """The original variable expression."""
        return self._evaluator.expression

    @property
    def owning_scope(self) -> Scope:
        return self.location.owning_scope

    @property
    def variable_names(self) -> tuple[str, ...]:
        """Variable names read by the last resolve."""
        return self._evaluator.variable_names

    def evaluate(self, dictionary: Mapping[str, Any]) -> EvaluationResult[T]:
        """Evaluate against ``dictionary`` without writing the location."""
        return self._evaluator.evaluate(dictionary)

    def resolve(self, dictionary: Mapping[str, Any]) -> EvaluationResult[T]:
        """Evaluate against ``dictionary`` and write the value (None on error) to the location."""
        result = self.evaluate(dictionary)
        self.location.write(result.value)

        return result

    def unresolve(self) -> EvaluationResult[str]:
        """Return the original variable expression. Does not write the location."""
        return self._evaluator.unevaluate()

    def dispose(self) -> None:
        """Cancel the automatic cleanup subscription, if any."""
        if self.cleanup_subscription is not None:
            self.cleanup_subscription.unsubscribe()
            self.cleanup_subscription = None
