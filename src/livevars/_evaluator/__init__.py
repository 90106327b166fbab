"""Evaluation of variable expressions.

Key types:
- EvaluationResult: Value or error of one evaluation, plus dependency changes
- VariableEvaluator: Re-evaluates one expression and diffs the names it reads
"""

from ._evaluator import VariableEvaluator
from ._result import EvaluationResult

__all__ = ["EvaluationResult", "VariableEvaluator"]
