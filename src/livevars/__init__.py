"""Live-updating, scope-aware variable substitution."""

__all__ = [
    "ChangeEvents",
    "ChangeNotifier",
    "DestructionSignal",
    "EvaluationResult",
    "ExpressionParser",
    "Location",
    "ParseNode",
    "ParseNodeType",
    "PropertyLocation",
    "PropertyPath",
    "ReferenceIntegrityError",
    "Scope",
    "ScopeHierarchy",
    "ScopeTree",
    "Subscription",
    "VariableError",
    "VariableEvaluator",
    "VariableManager",
    "VariableReference",
    "VariableValue",
    "is_variable_expression",
]

from ._errors import ReferenceIntegrityError, VariableError
from ._evaluator import EvaluationResult, VariableEvaluator
from ._events import ChangeEvents
from ._interfaces import ChangeNotifier, DestructionSignal, Location, Scope, ScopeHierarchy, Subscription
from ._location import PropertyLocation
from ._manager import VariableManager
from ._parser import ExpressionParser, ParseNode, ParseNodeType, is_variable_expression
from ._path import PropertyPath
from ._reference import VariableReference
from ._scopes import ScopeTree
from ._value import VariableValue
