"""
BrightScript Lexer (Tokenizer)
==============================

Converts BrightScript source into a stream of tokens for the parser.
Only the subset of the language that appears in Haiku <script> blocks
and data bindings is supported.

Token Categories
----------------
- Keywords: sub, function, if, then, else, for, while, ... (case-insensitive)
- Identifiers: names with an optional type suffix ($ % ! # &)
- Numbers: decimal, float (1.5, 2e3), hexadecimal (&hFF)
- Strings: "double quoted", with "" as the escaped quote
- Operators: + - * / \\ ^ = <> < > <= >= << >> ++ -- and compound assignments
- Separators: newline and ':' end a statement

Comments
--------
- ' comment to end of line
- REM comment to end of line

Example Usage
-------------
>>> from haiku_sdk.brs.lexer import BrsLexer
>>> for token in BrsLexer('x = 1').tokenize():
...     print(token)
Token(IDENTIFIER, 'x', 1:1)
Token(EQUAL, '=', 1:3)
Token(NUMBER, '1', 1:5)
Token(EOF, '', 1:6)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterator
import string

from haiku_sdk.errors import SourceLocation, ScriptSyntaxError


# =============================================================================
# Token Type Enumeration
# =============================================================================

class BrsTokenType(Enum):
    """Token types for the BrightScript subset."""

    # === Structural Tokens ===
    EOF = auto()
    NEWLINE = auto()        # Statement separator

    # === Identifiers and Literals ===
    IDENTIFIER = auto()
    NUMBER = auto()
    STRING = auto()

    # === Keywords ===
    SUB = auto()
    FUNCTION = auto()
    END = auto()
    IF = auto()
    THEN = auto()
    ELSE = auto()
    ELSE_IF = auto()        # elseif
    END_IF = auto()         # endif
    FOR = auto()
    TO = auto()
    STEP = auto()
    EACH = auto()
    IN = auto()
    NEXT = auto()
    END_FOR = auto()        # endfor
    WHILE = auto()
    END_WHILE = auto()      # endwhile
    END_SUB = auto()        # endsub
    END_FUNCTION = auto()   # endfunction
    EXIT = auto()
    EXIT_WHILE = auto()     # exitwhile
    RETURN = auto()
    PRINT = auto()
    AS = auto()
    GOTO = auto()
    STOP = auto()
    DIM = auto()
    THROW = auto()
    TRY = auto()
    CATCH = auto()
    END_TRY = auto()        # endtry
    TRUE = auto()
    FALSE = auto()
    INVALID = auto()
    AND = auto()
    OR = auto()
    NOT = auto()
    MOD = auto()

    # === Operators ===
    PLUS = auto()           # +
    MINUS = auto()          # -
    STAR = auto()           # *
    SLASH = auto()          # /
    BACKSLASH = auto()      # \ (integer division)
    CARET = auto()          # ^
    EQUAL = auto()          # = (assignment or comparison)
    NOT_EQUAL = auto()      # <>
    LESS = auto()           # <
    GREATER = auto()        # >
    LESS_EQUAL = auto()     # <=
    GREATER_EQUAL = auto()  # >=
    LEFT_SHIFT = auto()     # <<
    RIGHT_SHIFT = auto()    # >>
    PLUS_PLUS = auto()      # ++
    MINUS_MINUS = auto()    # --

    # === Compound Assignment ===
    PLUS_EQUAL = auto()
    MINUS_EQUAL = auto()
    STAR_EQUAL = auto()
    SLASH_EQUAL = auto()
    BACKSLASH_EQUAL = auto()
    LEFT_SHIFT_EQUAL = auto()
    RIGHT_SHIFT_EQUAL = auto()

    # === Delimiters ===
    LPAREN = auto()
    RPAREN = auto()
    LBRACKET = auto()
    RBRACKET = auto()
    LBRACE = auto()
    RBRACE = auto()
    COMMA = auto()
    DOT = auto()
    SEMICOLON = auto()
    COLON = auto()          # Statement separator, AA key separator, ternary
    QUESTION = auto()       # Print shorthand or ternary


KEYWORDS: dict[str, BrsTokenType] = {
    "sub": BrsTokenType.SUB,
    "function": BrsTokenType.FUNCTION,
    "end": BrsTokenType.END,
    "if": BrsTokenType.IF,
    "then": BrsTokenType.THEN,
    "else": BrsTokenType.ELSE,
    "elseif": BrsTokenType.ELSE_IF,
    "endif": BrsTokenType.END_IF,
    "for": BrsTokenType.FOR,
    "to": BrsTokenType.TO,
    "step": BrsTokenType.STEP,
    "each": BrsTokenType.EACH,
    "in": BrsTokenType.IN,
    "next": BrsTokenType.NEXT,
    "endfor": BrsTokenType.END_FOR,
    "while": BrsTokenType.WHILE,
    "endwhile": BrsTokenType.END_WHILE,
    "endsub": BrsTokenType.END_SUB,
    "endfunction": BrsTokenType.END_FUNCTION,
    "exit": BrsTokenType.EXIT,
    "exitwhile": BrsTokenType.EXIT_WHILE,
    "return": BrsTokenType.RETURN,
    "print": BrsTokenType.PRINT,
    "as": BrsTokenType.AS,
    "goto": BrsTokenType.GOTO,
    "stop": BrsTokenType.STOP,
    "dim": BrsTokenType.DIM,
    "throw": BrsTokenType.THROW,
    "try": BrsTokenType.TRY,
    "catch": BrsTokenType.CATCH,
    "endtry": BrsTokenType.END_TRY,
    "true": BrsTokenType.TRUE,
    "false": BrsTokenType.FALSE,
    "invalid": BrsTokenType.INVALID,
    "and": BrsTokenType.AND,
    "or": BrsTokenType.OR,
    "not": BrsTokenType.NOT,
    "mod": BrsTokenType.MOD,
}

# Tokens that may be followed by '=' to form a compound assignment
COMPOUND_ASSIGNMENTS: dict[BrsTokenType, BrsTokenType] = {
    BrsTokenType.PLUS: BrsTokenType.PLUS_EQUAL,
    BrsTokenType.MINUS: BrsTokenType.MINUS_EQUAL,
    BrsTokenType.STAR: BrsTokenType.STAR_EQUAL,
    BrsTokenType.SLASH: BrsTokenType.SLASH_EQUAL,
    BrsTokenType.BACKSLASH: BrsTokenType.BACKSLASH_EQUAL,
    BrsTokenType.LEFT_SHIFT: BrsTokenType.LEFT_SHIFT_EQUAL,
    BrsTokenType.RIGHT_SHIFT: BrsTokenType.RIGHT_SHIFT_EQUAL,
}

ASSIGNMENT_OPERATORS = frozenset(
    [BrsTokenType.EQUAL, *COMPOUND_ASSIGNMENTS.values()]
)


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class BrsToken:
    """
    A single BrightScript token.

    Attributes:
        type: The BrsTokenType classification
        text: Exact source text of the token (keywords keep their casing)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
        filename: Name of the source file
    """
    type: BrsTokenType
    text: str
    line: int
    column: int
    filename: str = "<script>"

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {self.text!r}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.filename, self.line, self.column)


# =============================================================================
# Lexer Implementation
# =============================================================================

class BrsLexer:
    """
    Tokenizes BrightScript source code.

    Usage:
        tokens = list(BrsLexer(source, "App.haiku", line_number=3).tokenize())
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"
    TYPE_SUFFIXES = "$%!#&"

    SINGLE_TOKENS = {
        "(": BrsTokenType.LPAREN,
        ")": BrsTokenType.RPAREN,
        "[": BrsTokenType.LBRACKET,
        "]": BrsTokenType.RBRACKET,
        "{": BrsTokenType.LBRACE,
        "}": BrsTokenType.RBRACE,
        ",": BrsTokenType.COMMA,
        ".": BrsTokenType.DOT,
        ";": BrsTokenType.SEMICOLON,
        "?": BrsTokenType.QUESTION,
        "+": BrsTokenType.PLUS,
        "-": BrsTokenType.MINUS,
        "*": BrsTokenType.STAR,
        "/": BrsTokenType.SLASH,
        "\\": BrsTokenType.BACKSLASH,
        "^": BrsTokenType.CARET,
        "=": BrsTokenType.EQUAL,
    }

    def __init__(self, source: str, filename: str = "<script>", line_number: int = 1):
        """
        Args:
            source: BrightScript source to tokenize
            filename: Name of the source file (for error messages)
            line_number: Line the source starts on (for embedded scripts)
        """
        self.source = source
        self.filename = filename
        self._pos = 0
        self._line = line_number
        self._column = 1
        self._line_start_pos = 0

    def tokenize(self) -> Iterator[BrsToken]:
        """
        Generate tokens from the source code.

        Raises:
            ScriptSyntaxError: On an unterminated string or unknown character
        """
        while not self._at_end():
            char = self._peek()

            if char in " \t\r":
                self._advance()
                continue

            if char == "'" or self._at_rem():
                while not self._at_end() and self._peek() != "\n":
                    self._advance()
                continue

            if char == "\n":
                line, column = self._line, self._column
                self._advance()
                yield BrsToken(BrsTokenType.NEWLINE, "\n", line, column, self.filename)
                continue

            yield self._scan_token()

        yield BrsToken(BrsTokenType.EOF, "", self._line, self._column, self.filename)

    # =========================================================================
    # Character Access Methods
    # =========================================================================

    def _at_end(self) -> bool:
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
            self._column = 1
            self._line_start_pos = self._pos
        else:
            self._column += 1
        return char

    def _match(self, expected: str) -> bool:
        if self._peek() == expected:
            self._advance()
            return True
        return False

    def _at_rem(self) -> bool:
        """True when a REM comment starts at the current position."""
        if self.source[self._pos:self._pos + 3].lower() != "rem":
            return False
        if self._pos > 0 and self.source[self._pos - 1] in self.IDENT_CHARS + ".":
            return False
        following = self._peek(3)
        return following == "" or following not in self.IDENT_CHARS

    def _current_line(self) -> str:
        line_end = self.source.find("\n", self._line_start_pos)
        if line_end == -1:
            line_end = len(self.source)
        return self.source[self._line_start_pos:line_end]

    def _error(self, message: str, line: int, column: int, hint: str = None) -> ScriptSyntaxError:
        return ScriptSyntaxError(
            message,
            SourceLocation(self.filename, line, column),
            hint=hint,
            source_line=self._current_line(),
        )

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _make(self, token_type: BrsTokenType, start: int, line: int, column: int) -> BrsToken:
        return BrsToken(token_type, self.source[start:self._pos], line, column, self.filename)

    def _scan_token(self) -> BrsToken:
        start = self._pos
        line, column = self._line, self._column
        char = self._peek()

        if char in self.IDENT_START:
            return self._scan_identifier(start, line, column)

        if char.isdigit() or (char == "." and self._peek(1).isdigit()):
            return self._scan_number(start, line, column)

        if char == "&" and self._peek(1) and self._peek(1) in "hH":
            return self._scan_hex(start, line, column)

        if char == '"':
            return self._scan_string(start, line, column)

        self._advance()

        if char == ":":
            return self._make(BrsTokenType.COLON, start, line, column)

        if char == "<":
            if self._match(">"):
                return self._make(BrsTokenType.NOT_EQUAL, start, line, column)
            if self._match("="):
                return self._make(BrsTokenType.LESS_EQUAL, start, line, column)
            if self._match("<"):
                if self._match("="):
                    return self._make(BrsTokenType.LEFT_SHIFT_EQUAL, start, line, column)
                return self._make(BrsTokenType.LEFT_SHIFT, start, line, column)
            return self._make(BrsTokenType.LESS, start, line, column)

        if char == ">":
            if self._match("="):
                return self._make(BrsTokenType.GREATER_EQUAL, start, line, column)
            if self._match(">"):
                if self._match("="):
                    return self._make(BrsTokenType.RIGHT_SHIFT_EQUAL, start, line, column)
                return self._make(BrsTokenType.RIGHT_SHIFT, start, line, column)
            return self._make(BrsTokenType.GREATER, start, line, column)

        if char in "+-" and self._match(char):
            token_type = BrsTokenType.PLUS_PLUS if char == "+" else BrsTokenType.MINUS_MINUS
            return self._make(token_type, start, line, column)

        if char in self.SINGLE_TOKENS:
            token_type = self.SINGLE_TOKENS[char]
            if token_type in COMPOUND_ASSIGNMENTS and self._match("="):
                token_type = COMPOUND_ASSIGNMENTS[token_type]
            return self._make(token_type, start, line, column)

        raise self._error(f"unexpected character '{char}'", line, column)

    def _scan_identifier(self, start: int, line: int, column: int) -> BrsToken:
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._advance()

        word = self.source[start:self._pos].lower()

        # Two-word keywords ("end if", "else if") are combined by the parser;
        # the single-word forms are recognized here.
        if word in KEYWORDS:
            return self._make(KEYWORDS[word], start, line, column)

        if self._peek() and self._peek() in self.TYPE_SUFFIXES:
            self._advance()
        return self._make(BrsTokenType.IDENTIFIER, start, line, column)

    def _scan_number(self, start: int, line: int, column: int) -> BrsToken:
        while self._peek().isdigit():
            self._advance()
        if self._peek() == "." and self._peek(1).isdigit():
            self._advance()
            while self._peek().isdigit():
                self._advance()
        if self._peek() in ("e", "E") and (
            self._peek(1).isdigit() or (self._peek(1) in "+-" and self._peek(2).isdigit())
        ):
            self._advance()
            if self._peek() in "+-":
                self._advance()
            while self._peek().isdigit():
                self._advance()
        if self._peek() and self._peek() in self.TYPE_SUFFIXES:
            self._advance()
        return self._make(BrsTokenType.NUMBER, start, line, column)

    def _scan_hex(self, start: int, line: int, column: int) -> BrsToken:
        self._advance()  # &
        self._advance()  # h
        digits = 0
        while self._peek() and self._peek() in string.hexdigits:
            self._advance()
            digits += 1
        if digits == 0:
            raise self._error("expected hexadecimal digits after '&h'", line, column)
        if self._peek() == "&":
            self._advance()
        return self._make(BrsTokenType.NUMBER, start, line, column)

    def _scan_string(self, start: int, line: int, column: int) -> BrsToken:
        self._advance()  # opening "
        while not self._at_end():
            char = self._peek()
            if char == '"':
                self._advance()
                if self._peek() == '"':
                    # "" is an escaped quote
                    self._advance()
                    continue
                return self._make(BrsTokenType.STRING, start, line, column)
            if char == "\n":
                break
            self._advance()

        raise self._error(
            "unterminated string literal",
            line,
            column,
            hint="add closing '\"' to complete the string",
        )
