"""Exceptions raised by livevars."""

from __future__ import annotations


class VariableError(Exception):
    """Base class for livevars errors."""


class ExpressionEvaluationError(VariableError):
    """An expression could not be evaluated against a dictionary.

    Raised while walking a parse tree and caught by the evaluator, which reports
    the message through ``EvaluationResult.error``. It never escapes ``evaluate``.
    """

    @classmethod
    def combine(cls, errors: list[ExpressionEvaluationError]) -> ExpressionEvaluationError:
        """Merge sibling failures into one error, keeping encounter order."""
        return cls("; ".join(str(error) for error in errors))


class ReferenceIntegrityError(VariableError):
    """The reference API was used in a way that violates its contract.

    Examples are deregistering a location that holds no reference, or removing a
    reference from a dependency set that does not contain it.
    """
