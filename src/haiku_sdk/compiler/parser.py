"""
Haiku Template Parser
=====================

Recursive descent parser turning the template token stream into a
concrete syntax tree (see haiku_sdk.compiler.cst).

Grammar
-------
    Program            := ScriptStatement? NodeStatement*
    ScriptStatement    := SCRIPT
    NodeStatement      := '<' NodeName AttributeStatement*
                          ( '/>' | '>' NodeStatement* '</' NodeName '>' )
    AttributeStatement := NodeAttribute ( '=' (StringLiteral | DataBinding) )?

A closing tag must repeat the opening tag's name; a mismatch is recorded
as MismatchedTagError but does not stop parsing.

Error Handling
--------------
The parser never raises. Grammar violations are collected in ``errors``;
after an error the parser skips to the next top-level ``<`` and carries
on, so one run reports every broken top-level node.

Example Usage
-------------
>>> from haiku_sdk.compiler.lexer import HaikuLexer
>>> from haiku_sdk.compiler.parser import HaikuParser
>>> parser = HaikuParser(HaikuLexer().scan('<Group><Label/></Group>').tokens)
>>> program = parser.program_statement()
>>> parser.errors
[]
>>> program.nodes[0].children[0].name.text
'Label'
"""

from typing import Optional

from haiku_sdk.compiler.lexer import Token, TokenKind
from haiku_sdk.compiler.cst import (
    NodeAttributeStatement,
    NodeStatement,
    ProgramStatement,
    ScriptStatement,
)
from haiku_sdk.compiler.errors import (
    MismatchedTagError,
    MissingTokenError,
    TemplateSyntaxError,
    UnexpectedTokenError,
)


class HaikuParser:
    """
    Recursive descent parser for Haiku templates.

    Attributes:
        tokens: Token list from HaikuLexer (must end with EOF)
        filename: Source filename for error reporting
        errors: Grammar violations found while parsing
    """

    def __init__(
        self,
        tokens: list[Token],
        filename: str = "<input>",
        source_lines: Optional[list[str]] = None,
    ):
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self.errors: list[TemplateSyntaxError] = []
        self._pos = 0

    def program_statement(self) -> ProgramStatement:
        """
        Parse the whole token stream.

        Returns:
            ProgramStatement covering every node that parsed cleanly
        """
        program = ProgramStatement()

        if self._check(TokenKind.SCRIPT):
            program.script = ScriptStatement(script=self._advance())

        while not self._at_end():
            try:
                if self._check(TokenKind.SCRIPT):
                    raise UnexpectedTokenError(
                        "<script>",
                        "'<' (the <script> block must come before every node)",
                        self._location(self._peek()),
                        self._source_line(self._peek()),
                    )
                program.nodes.append(self._node_statement())
            except TemplateSyntaxError as e:
                self.errors.append(e)
                self._synchronize()

        return program

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
        return self._peek().kind == TokenKind.EOF

    def _peek(self, offset: int = 0) -> Token:
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> Token:
        token = self._peek()
        if not self._at_end():
            self._pos += 1
        return token

    def _check(self, *kinds: TokenKind) -> bool:
        return self._peek().kind in kinds

    def _match(self, *kinds: TokenKind) -> Optional[Token]:
        if self._check(*kinds):
            return self._advance()
        return None

    def _expect(self, kind: TokenKind, expected: str) -> Token:
        """
        Consume a token of the given kind.

        Raises:
            MissingTokenError: At end of input
            UnexpectedTokenError: On any other token
        """
        if self._check(kind):
            return self._advance()

        current = self._peek()
        if current.kind == TokenKind.EOF:
            raise MissingTokenError(expected, self._location(current), self._source_line(current))
        raise UnexpectedTokenError(current.text, expected, self._location(current), self._source_line(current))

    def _location(self, token: Token):
        return token.location(self.filename)

    def _source_line(self, token: Token) -> Optional[str]:
        line = token.range.start.line
        if 0 <= line < len(self.source_lines):
            return self.source_lines[line]
        return None

    def _synchronize(self) -> None:
        """Skip ahead to the next '<' that could start a node."""
        self._advance()
        while not self._at_end() and not self._check(TokenKind.LESS):
            self._advance()

    # =========================================================================
    # Grammar Rules
    # =========================================================================

    def _node_statement(self) -> NodeStatement:
        node = NodeStatement()
        node.less = self._expect(TokenKind.LESS, "'<'")
        node.name = self._expect(TokenKind.NODE_NAME, "node name")

        while self._check(TokenKind.NODE_ATTRIBUTE):
            node.attributes.append(self._attribute_statement())

        node.slash_greater = self._match(TokenKind.SLASH_GREATER)
        if node.slash_greater is not None:
            return node

        node.greater = self._expect(TokenKind.GREATER, "'>' or '/>'")
        while self._check(TokenKind.LESS):
            node.children.append(self._node_statement())

        node.less_slash = self._expect(TokenKind.LESS_SLASH, f"'</{node.name.text}>'")
        node.closing_name = self._expect(TokenKind.NODE_NAME, "node name")
        if node.closing_name.text != node.name.text:
            self.errors.append(
                MismatchedTagError(
                    node.name.text,
                    node.closing_name.text,
                    self._location(node.closing_name),
                    self._source_line(node.closing_name),
                    opened_at=self._location(node.name),
                )
            )
        node.closing_greater = self._expect(TokenKind.GREATER, "'>'")
        return node

    def _attribute_statement(self) -> NodeAttributeStatement:
        statement = NodeAttributeStatement(attribute=self._advance())
        statement.equal = self._match(TokenKind.EQUAL)
        if statement.equal is not None:
            if self._check(TokenKind.STRING_LITERAL, TokenKind.DATA_BINDING):
                statement.value = self._advance()
            else:
                current = self._peek()
                raise UnexpectedTokenError(
                    current.text or "end of input",
                    "string literal or {data binding}",
                    self._location(current),
                    self._source_line(current),
                )
        return statement
