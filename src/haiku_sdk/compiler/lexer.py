"""
Haiku Template Lexer
====================

Converts Haiku template source into a flat token stream.

The template grammar changes meaning with context, so the lexer keeps a
stack of modes; each mode has its own character dispatch table mapping a
character to the routine that scans the token starting there.

Modes
-----
- NODE: between tags. ``<`` opens a tag, ``</`` a closing tag, and a whole
  ``<script>...</script>`` span becomes one SCRIPT token.
- NODE_OPEN: after ``<``. Expects the node name.
- NODE_ATTRIBUTES: after the node name. Attributes, ``=``, string
  literals and ``{...}`` data bindings.
- NODE_CLOSE: after ``</``. Expects the node name and ``>``.

``>`` and ``/>`` pop back to NODE mode.

Whitespace and ``'`` comments are never emitted. They are collected into
the ``leading_whitespace`` of the next token, so token ranges stay exact.

Scanning never raises. Problems are recorded as diagnostics and scanning
continues with the next character.

Example Usage
-------------
>>> from haiku_sdk.compiler.lexer import HaikuLexer
>>> result = HaikuLexer().scan('<Label text="hi"/>')
>>> [token.kind.value for token in result.tokens]
['Less', 'NodeName', 'NodeAttribute', 'Equal', 'StringLiteral', 'SlashGreater', 'Eof']
"""

import logging
import string
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Optional

from haiku_sdk.errors import SourceLocation
from haiku_sdk.compiler.diagnostics import (
    Diagnostic,
    DiagnosticMessages,
    Position,
    Range,
)

logger = logging.getLogger(__name__)

SCRIPT_OPEN = "<script>"
SCRIPT_CLOSE = "</script>"


# =============================================================================
# Token Definitions
# =============================================================================

class TokenKind(Enum):
    """Template token kinds."""
    LESS = "Less"                       # <
    LESS_SLASH = "LessSlash"            # </
    GREATER = "Greater"                 # >
    SLASH_GREATER = "SlashGreater"      # />
    NODE_NAME = "NodeName"
    NODE_ATTRIBUTE = "NodeAttribute"    # text, on:focusedChild, :focus
    EQUAL = "Equal"
    STRING_LITERAL = "StringLiteral"    # "..." (may hold {expr} spans)
    DATA_BINDING = "DataBinding"        # {expr}
    SCRIPT = "Script"                   # <script>...</script>
    EOF = "Eof"


@dataclass(frozen=True)
class Token:
    """
    A single template token.

    Attributes:
        kind: TokenKind
        text: Exact source text
        range: Zero-based source range
        leading_whitespace: Skipped whitespace and comments before the token
    """
    kind: TokenKind
    text: str
    range: Range
    leading_whitespace: str = ""

    def __repr__(self) -> str:
        start = self.range.start
        return f"Token({self.kind.value}, {self.text!r}, {start.line}:{start.character})"

    def location(self, filename: str) -> SourceLocation:
        """One-based location of the token start, for error messages."""
        return SourceLocation(filename, self.range.start.line + 1, self.range.start.character + 1)


class LexerMode(Enum):
    NODE = "Node"
    NODE_OPEN = "NodeOpen"
    NODE_ATTRIBUTES = "NodeAttributes"
    NODE_CLOSE = "NodeClose"


@dataclass
class LexResult:
    tokens: list[Token] = field(default_factory=list)
    diagnostics: list[Diagnostic] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return any(diagnostic.is_error for diagnostic in self.diagnostics)


# =============================================================================
# Lexer Implementation
# =============================================================================

class HaikuLexer:
    """
    Mode-stacked, dispatch-table driven template lexer.

    Usage:
        result = HaikuLexer().scan(source)

    or, one token at a time:

        lexer = HaikuLexer(source)
        while not lexer.at_end():
            lexer.scan_token()
    """

    NAME_START = string.ascii_letters + "_"
    NAME_CHARS = string.ascii_letters + string.digits + "-_."
    ATTRIBUTE_START = string.ascii_letters + "_:"
    ATTRIBUTE_CHARS = string.ascii_letters + string.digits + "_"
    WHITESPACE = " \t\r\n"
    COMMENT = "'"

    def __init__(self, source: str = ""):
        self._dispatch = self._build_dispatch()
        self.reset(source)

    def _build_dispatch(self) -> dict[LexerMode, dict[str, Callable[[], Optional[Token]]]]:
        node = {"<": self._less}
        node_open = {"/": self._slash_greater, ">": self._greater}
        node_attributes = {
            "/": self._slash_greater,
            ">": self._greater,
            "=": self._equal,
            '"': self._string,
            "{": self._data_binding,
        }
        node_close = {">": self._greater}

        for char in self.NAME_START:
            node_open[char] = self._node_name
            node_close[char] = self._node_name
        for char in self.ATTRIBUTE_START:
            node_attributes[char] = self._attribute

        return {
            LexerMode.NODE: node,
            LexerMode.NODE_OPEN: node_open,
            LexerMode.NODE_ATTRIBUTES: node_attributes,
            LexerMode.NODE_CLOSE: node_close,
        }

    def reset(self, source: str) -> None:
        """Start over on new source text."""
        self.source = source
        self.tokens: list[Token] = []
        self.diagnostics: list[Diagnostic] = []
        self._modes = [LexerMode.NODE]
        self._pos = 0
        self._line = 0
        self._column = 0
        self._start = 0
        self._start_position = Position(0, 0)
        self._leading_whitespace = ""

    @property
    def mode(self) -> LexerMode:
        return self._modes[-1]

    def scan(self, source: Optional[str] = None) -> LexResult:
        """
        Scan the whole input.

        Args:
            source: Text to scan; when omitted the text given to the
                constructor (or reset) is used

        Returns:
            LexResult with the tokens (always ending in EOF) and diagnostics
        """
        if source is not None:
            self.reset(source)

        while not self.at_end():
            self.scan_token()

        self._mark_start()
        self._add(TokenKind.EOF)
        logger.debug(f"scanned {len(self.tokens)} tokens, {len(self.diagnostics)} diagnostics")
        return LexResult(list(self.tokens), list(self.diagnostics))

    def scan_token(self) -> Optional[Token]:
        """
        Skip whitespace and comments, then scan at most one token.

        Returns:
            The token appended to ``tokens``, or None at end of input or
            when the character produced a diagnostic instead
        """
        self._skip_trivia()
        if self.at_end():
            return None

        self._mark_start()
        char = self._peek()
        handler = self._dispatch[self.mode].get(char)
        if handler is None:
            self._advance()
            self._diagnose(DiagnosticMessages.unexpected_character(char, self._range()))
            return None
        return handler()

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def at_end(self) -> bool:
        return self._pos >= len(self.source)

    def _peek(self, offset: int = 0) -> str:
        pos = self._pos + offset
        if pos >= len(self.source):
            return ""
        return self.source[pos]

    def _advance(self) -> str:
        char = self.source[self._pos]
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 0
        else:
            self._column += 1
        return char

    def _advance_to(self, index: int) -> None:
        while self._pos < index and not self.at_end():
            self._advance()

    def _skip_trivia(self) -> None:
        start = self._pos
        while not self.at_end():
            char = self._peek()
            if char in self.WHITESPACE:
                self._advance()
            elif char == self.COMMENT:
                while not self.at_end() and self._peek() != "\n":
                    self._advance()
            else:
                break
        self._leading_whitespace += self.source[start:self._pos]

    # =========================================================================
    # Token Construction
    # =========================================================================

    def _mark_start(self) -> None:
        self._start = self._pos
        self._start_position = Position(self._line, self._column)

    def _range(self) -> Range:
        return Range(self._start_position, Position(self._line, self._column))

    def _add(self, kind: TokenKind) -> Token:
        token = Token(
            kind=kind,
            text=self.source[self._start:self._pos],
            range=self._range(),
            leading_whitespace=self._leading_whitespace,
        )
        self._leading_whitespace = ""
        self.tokens.append(token)
        return token

    def _diagnose(self, diagnostic: Diagnostic) -> None:
        self.diagnostics.append(diagnostic)

    def _push(self, mode: LexerMode) -> None:
        self._modes.append(mode)

    def _pop_to_node(self) -> None:
        del self._modes[1:]

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _less(self) -> Token:
        if self.source.startswith(SCRIPT_OPEN, self._pos):
            return self._script()
        self._advance()
        if self._peek() == "/":
            self._advance()
            token = self._add(TokenKind.LESS_SLASH)
            self._push(LexerMode.NODE_CLOSE)
            return token
        token = self._add(TokenKind.LESS)
        self._push(LexerMode.NODE_OPEN)
        return token

    def _script(self) -> Token:
        end = self.source.find(SCRIPT_CLOSE, self._pos + len(SCRIPT_OPEN))
        if end == -1:
            self._advance_to(len(self.source))
            self._diagnose(DiagnosticMessages.unterminated_script(self._range()))
        else:
            self._advance_to(end + len(SCRIPT_CLOSE))
        return self._add(TokenKind.SCRIPT)

    def _greater(self) -> Token:
        self._advance()
        token = self._add(TokenKind.GREATER)
        self._pop_to_node()
        return token

    def _slash_greater(self) -> Optional[Token]:
        self._advance()
        if self._peek() != ">":
            self._diagnose(DiagnosticMessages.unexpected_character("/", self._range()))
            return None
        self._advance()
        token = self._add(TokenKind.SLASH_GREATER)
        self._pop_to_node()
        return token

    def _equal(self) -> Token:
        self._advance()
        return self._add(TokenKind.EQUAL)

    def _node_name(self) -> Token:
        while self._peek() and self._peek() in self.NAME_CHARS:
            self._advance()
        token = self._add(TokenKind.NODE_NAME)
        if self.mode == LexerMode.NODE_OPEN:
            self._push(LexerMode.NODE_ATTRIBUTES)
        return token

    def _attribute(self) -> Token:
        # [prefix:]name where the prefix is "on" or empty
        while self._peek() and self._peek() in self.ATTRIBUTE_CHARS:
            self._advance()
        if self._peek() == ":":
            self._advance()
            while self._peek() and self._peek() in self.ATTRIBUTE_CHARS:
                self._advance()
        return self._add(TokenKind.NODE_ATTRIBUTE)

    def _string(self) -> Token:
        """
        Scan a string literal attribute value.

        ``""`` is an escaped quote. ``{...}`` interpolation spans are kept
        in the literal and may contain quotes; ``\\{`` and ``\\}`` are
        literal braces.
        """
        self._advance()  # opening "
        while not self.at_end():
            char = self._peek()
            if char == "\\" and self._peek(1) in ("{", "}"):
                self._advance()
                self._advance()
            elif char == "{":
                if not self._skip_interpolation():
                    break
            elif char == '"':
                self._advance()
                if self._peek() != '"':
                    return self._add(TokenKind.STRING_LITERAL)
                self._advance()
            elif char in "\r\n":
                self._diagnose(DiagnosticMessages.unterminated_string_at_end_of_line(self._range()))
                return self._add(TokenKind.STRING_LITERAL)
            else:
                self._advance()

        if self.at_end():
            self._diagnose(DiagnosticMessages.unterminated_string_at_end_of_file(self._range()))
        else:
            self._diagnose(DiagnosticMessages.unterminated_string_at_end_of_line(self._range()))
        return self._add(TokenKind.STRING_LITERAL)

    def _skip_interpolation(self) -> bool:
        """Skip a ``{...}`` span inside a string; False if a line break or EOF comes first."""
        self._advance()  # {
        while not self.at_end():
            char = self._peek()
            if char == "}":
                self._advance()
                return True
            if char in "\r\n":
                return False
            self._advance()
        return False

    def _data_binding(self) -> Token:
        """
        Scan a ``{...}`` data binding.

        Braces are balanced and string literals inside the binding are
        skipped, so ``{ {a: "}"} }`` is a single token.
        """
        depth = 0
        while not self.at_end():
            char = self._advance()
            if char == "{":
                depth += 1
            elif char == "}":
                depth -= 1
                if depth == 0:
                    break
            elif char == '"':
                self._skip_host_string()
        else:
            self._diagnose(DiagnosticMessages.unterminated_data_binding(self._range()))
            return self._add(TokenKind.DATA_BINDING)

        token = self._add(TokenKind.DATA_BINDING)
        if not token.text[1:-1].strip():
            self._diagnose(DiagnosticMessages.empty_data_binding(token.range))
        return token

    def _skip_host_string(self) -> None:
        while not self.at_end():
            char = self._advance()
            if char == '"':
                if self._peek() == '"':
                    self._advance()
                    continue
                return
            if char == "\n":
                return
