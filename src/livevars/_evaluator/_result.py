"""Result of evaluating a variable expression."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class EvaluationResult[T]:
    """The outcome of one evaluation of a variable expression.

    Attributes:
        value: The resolved value, or None if evaluation failed.
        error: Why evaluation failed, or None on success.
        variable_names_added: Variable names read in this evaluation but not in
            the previous one, in the order they were first read.
        variable_names_removed: Variable names read in the previous evaluation
            but not in this one.

    """

    value: T | None = None
    error: str | None = None
    variable_names_added: tuple[str, ...] = ()
    variable_names_removed: tuple[str, ...] = ()

    @property
    def success(self) -> bool:
        """Check if evaluation completed without errors."""
        return self.error is None
