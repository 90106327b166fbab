"""Parse tree nodes for variable expressions."""

from __future__ import annotations

from enum import StrEnum

from pydantic import BaseModel, ConfigDict


class ParseNodeType(StrEnum):
    """The kind of source text a ParseNode covers."""

    ROOT = "root"  # Whole expression
    EXPRESSION = "expression"  # ${...}, possibly nested
    TEXT = "text"  # Literal run, possibly inside an expression
    ESCAPED_CHARACTER = "escape"  # Backslash plus the character it escapes


class ParseNode(BaseModel):
    """A node in the parse tree of a variable expression.

    Attributes:
        type: The kind of node.
        start: Index of the first source character covered by this node.
        length: Number of source characters covered, including all children.
        children: Child nodes in source order.
        error: Parse error for this node, or None. A node whose descendant failed
            carries a generic error, the failing node keeps the specific one.

    """

    model_config = ConfigDict(frozen=True)

    type: ParseNodeType
    start: int
    length: int
    children: tuple[ParseNode, ...] = ()
    error: str | None = None

    @property
    def end(self) -> int:
        """Index one past the last source character covered by this node."""
        return self.start + self.length

    def source(self, expression: str) -> str:
        """Return the slice of ``expression`` covered by this node."""
        return expression[self.start : self.end]
