"""Stateful evaluation of a parsed variable expression."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, cast

from livevars._errors import ExpressionEvaluationError
from livevars._parser import ExpressionParser, ParseNode, ParseNodeType
from livevars._path import lookup_variable

from ._result import EvaluationResult

if TYPE_CHECKING:
    from collections.abc import Mapping

logger = logging.getLogger(__name__)


class VariableEvaluator[T]:
    """Re-evaluates one variable expression against changing variable values.

    The evaluator remembers which variable names the previous evaluation read,
    so every result reports the names that were added or dropped since then.
    Names count as read whether or not their lookup succeeded.

    Example:
        >>> evaluator = VariableEvaluator("${a} and ${b}")
        >>> evaluator.evaluate({"a": 1, "b": 2}).value
        '1 and 2'
        >>> evaluator.evaluate({"a": 1}).error
        'Could not lookup variable value: b'

    """

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self._parser = ExpressionParser(expression)
        # Insertion ordered set of names read by the last evaluation
        self._variable_names_from_last_evaluate: dict[str, None] = {}

    @property
    def variable_names(self) -> tuple[str, ...]:
        """Variable names read by the last evaluation."""
        return tuple(self._variable_names_from_last_evaluate)

    def evaluate(self, dictionary: Mapping[str, Any]) -> EvaluationResult[T]:
        """Evaluate the expression, using ``dictionary`` for all variable lookups.

        Evaluation never raises. Missing variables and parse errors are reported
        through ``EvaluationResult.error``.
        """
        variables_before_evaluate = self._variable_names_from_last_evaluate
        self._variable_names_from_last_evaluate = {}

        value: T | None = None
        error: str | None = None
        try:
            value = cast("T", self._convert_node_to_value(self._parser.parse(), dictionary))
        except ExpressionEvaluationError as e:
            error = str(e)
            logger.debug("Could not evaluate %r: %s", self.expression, error)

        variables_after_evaluate = self._variable_names_from_last_evaluate
        return EvaluationResult(
            value=value,
            error=error,
            variable_names_added=tuple(name for name in variables_after_evaluate if name not in variables_before_evaluate),
            variable_names_removed=tuple(
                name for name in variables_before_evaluate if name not in variables_after_evaluate
            ),
        )

    def unevaluate(self) -> EvaluationResult[str]:
        """Return a result describing the state before any evaluation.

        The value is the original expression and every previously read name is
        reported as removed. The remembered names are cleared.
        """
        variable_names_from_last_evaluate = tuple(self._variable_names_from_last_evaluate)
        self._variable_names_from_last_evaluate = {}

        return EvaluationResult(value=self.expression, variable_names_removed=variable_names_from_last_evaluate)

    def _convert_node_to_value(self, node: ParseNode, dictionary: Mapping[str, Any]) -> Any:
        if node.error is not None:
            raise ExpressionEvaluationError(node.error)

        match node.type:
            case ParseNodeType.ROOT:
                return self._convert_root_to_value(node, dictionary)
            case ParseNodeType.ESCAPED_CHARACTER:
                return self.expression[node.end - 1]
            case ParseNodeType.TEXT:
                return node.source(self.expression)
            case ParseNodeType.EXPRESSION:
                return self._convert_expression_to_value(node, dictionary)
            case _:
                msg = f"Unknown parse node type: {node.type}"
                raise TypeError(msg)

    def _convert_root_to_value(self, node: ParseNode, dictionary: Mapping[str, Any]) -> Any:
        if len(node.children) == 1:
            # A lone child keeps its native type, so "${count}" can yield an int
            return self._convert_node_to_value(node.children[0], dictionary)

        return self._map_and_join_children(node, dictionary)

    def _convert_expression_to_value(self, node: ParseNode, dictionary: Mapping[str, Any]) -> Any:
        name = self._map_and_join_children(node, dictionary).strip()

        variable_name, value = lookup_variable(dictionary, name)
        self._variable_names_from_last_evaluate[variable_name] = None

        if value is None:
            # None means unassigned, it can never be a resolved value
            msg = f"Could not lookup variable value: {name}"
            raise ExpressionEvaluationError(msg)
        return value

    def _map_and_join_children(self, node: ParseNode, dictionary: Mapping[str, Any]) -> str:
        caught_errors: list[ExpressionEvaluationError] = []
        mapped_values: list[str] = []
        for child in node.children:
            try:
                mapped_values.append(str(self._convert_node_to_value(child, dictionary)))
            except ExpressionEvaluationError as e:
                caught_errors.append(e)

        if caught_errors:
            raise ExpressionEvaluationError.combine(caught_errors)

        return "".join(mapped_values)
