"""Expression parsing for livevars.

Key types:
- ParseNodeType: Enum for node kinds (ROOT, EXPRESSION, TEXT, ESCAPED_CHARACTER)
- ParseNode: Immutable node of a parse tree
- ExpressionParser: Memoizing parser from source string to parse tree
"""

from ._node import ParseNode, ParseNodeType
from ._parser import ExpressionParser, is_variable_expression

__all__ = ["ExpressionParser", "ParseNode", "ParseNodeType", "is_variable_expression"]
