"""Recursive-descent parser for variable expressions."""

from typing import ClassVar

from ._node import ParseNode, ParseNodeType


class ExpressionParser:
    """Parses a variable expression into a tree of ParseNodes.

    The grammar has three node kinds below the root, matched left to right:
    escaped characters (a backslash and the character after it), expressions
    (``${`` up to the matching ``}``, nesting allowed) and text (everything else).
    Parsing never raises. Problems are reported through ``ParseNode.error``.

    The tree is built on the first call to ``parse`` and cached afterwards.

    Example:
        >>> root = ExpressionParser("Hello ${user.name}").parse()
        >>> [child.type for child in root.children]
        [<ParseNodeType.TEXT: 'text'>, <ParseNodeType.EXPRESSION: 'expression'>]

    """

    ESCAPE: ClassVar[str] = "\\"
    OPEN: ClassVar[str] = "${"
    CLOSE: ClassVar[str] = "}"

    CHILD_ERROR: ClassVar[str] = "Parse error in child node"
    TRAILING_ESCAPE_ERROR: ClassVar[str] = "Cannot end with escape character"
    UNTERMINATED_ERROR: ClassVar[str] = "Reached end of expression without completing parsing"

    def __init__(self, expression: str) -> None:
        self.expression = expression
        self._parsed: ParseNode | None = None

    def parse(self) -> ParseNode:
        """Transform the source string into a parse tree."""
        if self._parsed is None:
            children, error, end = self._parse_sequence(0, inside_expression=False)
            self._parsed = ParseNode(
                type=ParseNodeType.ROOT,
                start=0,
                length=end,
                children=children,
                error=error,
            )
        return self._parsed

    def _parse_sequence(
        self,
        index: int,
        *,
        inside_expression: bool,
    ) -> tuple[tuple[ParseNode, ...], str | None, int]:
        """Parse children from ``index`` until end of input or a closing brace.

        Returns:
            The children, the error for the enclosing node (if a child failed),
            and the index just past the last consumed character.

        """
        children: list[ParseNode] = []
        while index < len(self.expression):
            if inside_expression and self._is_close(index):
                break
            child = self._parse_child(index, inside_expression=inside_expression)
            children.append(child)
            index = child.end
            if child.error is not None:
                # Stop at the first failure, the rest of the input is not parsed
                return tuple(children), self.CHILD_ERROR, index
        return tuple(children), None, index

    def _parse_child(self, index: int, *, inside_expression: bool) -> ParseNode:
        if self._is_escape(index):
            return self._parse_escaped_character(index)
        if self._is_open(index):
            return self._parse_expression(index)
        return self._parse_text(index, inside_expression=inside_expression)

    def _parse_escaped_character(self, start: int) -> ParseNode:
        if start + len(self.ESCAPE) >= len(self.expression):
            return ParseNode(
                type=ParseNodeType.ESCAPED_CHARACTER,
                start=start,
                length=len(self.ESCAPE),
                error=self.TRAILING_ESCAPE_ERROR,
            )
        return ParseNode(type=ParseNodeType.ESCAPED_CHARACTER, start=start, length=len(self.ESCAPE) + 1)

    def _parse_expression(self, start: int) -> ParseNode:
        children, error, index = self._parse_sequence(start + len(self.OPEN), inside_expression=True)
        if error is None and index >= len(self.expression):
            error = self.UNTERMINATED_ERROR
        if error is not None:
            return ParseNode(
                type=ParseNodeType.EXPRESSION,
                start=start,
                length=index - start,
                children=children,
                error=error,
            )
        return ParseNode(
            type=ParseNodeType.EXPRESSION,
            start=start,
            length=index + len(self.CLOSE) - start,
            children=children,
        )

    def _parse_text(self, start: int, *, inside_expression: bool) -> ParseNode:
        # The first character never starts another node, otherwise we would not be here
        index = start + 1
        while index < len(self.expression) and not self._ends_text(index, inside_expression=inside_expression):
            index += 1
        return ParseNode(type=ParseNodeType.TEXT, start=start, length=index - start)

    def _ends_text(self, index: int, *, inside_expression: bool) -> bool:
        return self._is_escape(index) or self._is_open(index) or (inside_expression and self._is_close(index))

    def _is_escape(self, index: int) -> bool:
        return self.expression.startswith(self.ESCAPE, index)

    def _is_open(self, index: int) -> bool:
        return self.expression.startswith(self.OPEN, index)

    def _is_close(self, index: int) -> bool:
        return self.expression.startswith(self.CLOSE, index)


def is_variable_expression(text: str) -> bool:
    """Check whether ``text`` should be treated as a variable expression.

    True when the top level of the parsed text contains at least one expression,
    even a malformed one such as ``"some ${bad"``.
    """
    root = ExpressionParser(text).parse()
    return any(child.type == ParseNodeType.EXPRESSION for child in root.children)
