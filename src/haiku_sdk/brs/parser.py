"""
BrightScript Recursive Descent Parser
=====================================

Parses the token stream produced by BrsLexer into the AST defined in
haiku_sdk.brs.ast.

Grammar (Simplified EBNF)
-------------------------
script          ::= (statement separator)*
separator       ::= NEWLINE | ':'
statement       ::= function_decl | if_stmt | for_stmt | while_stmt | try_stmt
                  | exit_stmt | return_stmt | print_stmt | goto_stmt
                  | dim_stmt | throw_stmt
                  | label | 'end' | 'stop' | set_or_call
function_decl   ::= ('sub' | 'function') IDENTIFIER params ('as' TYPE)? block end_routine
params          ::= '(' (param (',' param)*)? ')'
param           ::= IDENTIFIER ('=' expr)? ('as' TYPE)?
if_stmt         ::= 'if' expr 'then'? (inline_if | block_if)
for_stmt        ::= 'for' IDENTIFIER '=' expr 'to' expr ('step' expr)? block end_for
                  | 'for' 'each' IDENTIFIER 'in' expr block end_for
while_stmt      ::= 'while' expr block end_while
try_stmt        ::= 'try' block 'catch' IDENTIFIER block end_try
dim_stmt        ::= 'dim' IDENTIFIER '[' expr (',' expr)* ']'
throw_stmt      ::= 'throw' expr
set_or_call     ::= postfix (ASSIGN_OP expr | '++' | '--')?

Expression Precedence (lowest to highest)
-----------------------------------------
1. ternary          ? :
2. logical or       or
3. logical and      and
4. logical not      not
5. comparison       = <> < > <= >=
6. shift            << >>
7. additive         + -
8. multiplicative   * / \\ mod
9. exponent         ^
10. unary           - +
11. postfix         () [] .
12. primary         literal, name, (expr), [array], {aa}, sub/function literal

Example Usage
-------------
>>> from haiku_sdk.brs.parser import parse_script, parse_expression
>>> statements = parse_script('x = 1\\nsub foo()\\n  print x\\nend sub')
>>> [type(s).__name__ for s in statements]
['AssignmentStatement', 'FunctionStatement']
>>> parse_expression('m.count + 1')
BinaryExpression(left=DottedGetExpression(...), operator='+', right=...)
"""

from typing import Callable, Optional

from haiku_sdk.errors import SourceLocation, ScriptSyntaxError
from haiku_sdk.brs.lexer import (
    ASSIGNMENT_OPERATORS,
    KEYWORDS,
    BrsLexer,
    BrsToken,
    BrsTokenType,
)
from haiku_sdk.brs.ast import (
    AALiteralExpression,
    AAMember,
    ArrayLiteralExpression,
    AssignmentStatement,
    BinaryExpression,
    Block,
    CallExpression,
    DimStatement,
    DottedGetExpression,
    DottedSetStatement,
    ElseIfClause,
    EndStatement,
    ExitStatement,
    Expression,
    ExpressionStatement,
    ForEachStatement,
    ForStatement,
    FunctionExpression,
    FunctionStatement,
    GotoStatement,
    GroupingExpression,
    IfStatement,
    IncrementStatement,
    IndexedGetExpression,
    IndexedSetStatement,
    LabelStatement,
    LiteralExpression,
    Parameter,
    PrintStatement,
    ReturnStatement,
    Statement,
    StopStatement,
    TernaryExpression,
    ThrowStatement,
    TryCatchStatement,
    UnaryExpression,
    VariableExpression,
    WhileStatement,
)

T = BrsTokenType

# Name of the synthetic variable used to parse a bare expression
EXPRESSION_PLACEHOLDER = "__haiku_expr__"

COMPARISON_OPERATORS = {
    T.EQUAL, T.NOT_EQUAL, T.LESS, T.GREATER, T.LESS_EQUAL, T.GREATER_EQUAL,
}
KEYWORD_TOKENS = frozenset(KEYWORDS.values())


class BrsParser:
    """
    Recursive descent parser for the BrightScript subset.

    Parsing stops at the first error; host-script errors are fatal for the
    compilation unit that embeds them.

    Attributes:
        tokens: Token list from BrsLexer (must end with EOF)
        filename: Source filename for error reporting
    """

    def __init__(
        self,
        tokens: list[BrsToken],
        filename: str = "<script>",
        source_lines: Optional[list[str]] = None,
        first_line: int = 1,
    ):
        """
        Args:
            tokens: Tokens to parse
            filename: Source filename for error messages
            source_lines: Source lines for error context
            first_line: Line number of source_lines[0]
        """
        self.tokens = tokens
        self.filename = filename
        self.source_lines = source_lines or []
        self.first_line = first_line
        self._pos = 0

    def parse(self) -> list[Statement]:
        """
        Parse all tokens into a list of top-level statements.

        Raises:
            ScriptSyntaxError: On the first grammar violation
        """
        statements = []
        self._skip_separators()
        while not self._check(T.EOF):
            statements.append(self._statement())
            self._end_of_statement()
            self._skip_separators()
        return statements

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    def _peek(self, offset: int = 0) -> BrsToken:
        pos = self._pos + offset
        if pos >= len(self.tokens):
            return self.tokens[-1]
        return self.tokens[pos]

    def _advance(self) -> BrsToken:
        token = self._peek()
        if token.type != T.EOF:
            self._pos += 1
        return token

    def _check(self, *types: BrsTokenType) -> bool:
        return self._peek().type in types

    def _match(self, *types: BrsTokenType) -> Optional[BrsToken]:
        if self._check(*types):
            return self._advance()
        return None

    def _expect(self, token_type: BrsTokenType, expected: str) -> BrsToken:
        if self._check(token_type):
            return self._advance()
        raise self._error(self._peek(), expected)

    def _error(self, token: BrsToken, expected: Optional[str] = None) -> ScriptSyntaxError:
        found = "end of script" if token.type == T.EOF else (
            "end of line" if token.type == T.NEWLINE else f"'{token.text}'"
        )
        source_line = None
        index = token.line - self.first_line
        if 0 <= index < len(self.source_lines):
            source_line = self.source_lines[index]
        return ScriptSyntaxError(
            f"unexpected {found}",
            SourceLocation(self.filename, token.line, token.column),
            hint=f"expected {expected}" if expected else None,
            source_line=source_line,
        )

    def _skip_separators(self) -> None:
        while self._match(T.NEWLINE, T.COLON):
            pass

    def _skip_newlines(self) -> None:
        while self._match(T.NEWLINE):
            pass

    def _end_of_statement(self) -> None:
        if not self._check(T.NEWLINE, T.COLON, T.EOF):
            raise self._error(self._peek(), "end of statement")

    def _at_terminator(self) -> bool:
        return self._check(T.NEWLINE, T.COLON, T.EOF, T.ELSE)

    def _at_end_of(self, single: BrsTokenType, keyword: BrsTokenType) -> bool:
        """True at ``endif``-style single tokens or ``end if``-style pairs."""
        if self._check(single):
            return True
        return self._check(T.END) and self._peek(1).type == keyword

    def _consume_end(self, single: BrsTokenType, keyword: BrsTokenType, expected: str) -> None:
        if self._match(single):
            return
        if self._check(T.END) and self._peek(1).type == keyword:
            self._advance()
            self._advance()
            return
        raise self._error(self._peek(), expected)

    def _name_token(self, expected: str) -> BrsToken:
        """Identifier, or a keyword used as a member/key name."""
        if self._check(T.IDENTIFIER) or self._peek().type in KEYWORD_TOKENS:
            return self._advance()
        raise self._error(self._peek(), expected)

    def _loc(self, token: BrsToken) -> SourceLocation:
        return SourceLocation(self.filename, token.line, token.column)

    # =========================================================================
    # Statements
    # =========================================================================

    def _statement(self) -> Statement:
        token = self._peek()

        if token.type in (T.SUB, T.FUNCTION) and self._peek(1).type == T.IDENTIFIER:
            return self._function_declaration()
        if token.type == T.IF:
            return self._if_statement()
        if token.type == T.FOR:
            return self._for_statement()
        if token.type == T.WHILE:
            return self._while_statement()
        if token.type == T.TRY:
            return self._try_statement()
        if token.type == T.DIM:
            return self._dim_statement()
        if token.type == T.THROW:
            self._advance()
            return ThrowStatement(location=self._loc(token), value=self._expression())
        if token.type in (T.EXIT, T.EXIT_WHILE):
            return self._exit_statement()
        if token.type == T.RETURN:
            self._advance()
            value = None if self._at_terminator() else self._expression()
            return ReturnStatement(location=self._loc(token), value=value)
        if token.type in (T.PRINT, T.QUESTION):
            return self._print_statement()
        if token.type == T.GOTO:
            self._advance()
            label = self._expect(T.IDENTIFIER, "label name")
            return GotoStatement(location=self._loc(token), label=label.text)
        if token.type == T.STOP:
            self._advance()
            return StopStatement(location=self._loc(token))
        if token.type == T.END:
            if self._peek(1).type in (T.SUB, T.FUNCTION, T.IF, T.FOR, T.WHILE, T.TRY):
                raise self._error(token, "statement")
            self._advance()
            return EndStatement(location=self._loc(token))
        if (
            token.type == T.IDENTIFIER
            and self._peek(1).type == T.COLON
            and self._peek(2).type in (T.NEWLINE, T.EOF)
        ):
            self._advance()
            self._advance()
            return LabelStatement(location=self._loc(token), name=token.text)

        return self._set_or_call_statement()

    def _set_or_call_statement(self) -> Statement:
        token = self._peek()
        target = self._postfix()

        operator = self._peek()
        if operator.type in ASSIGNMENT_OPERATORS:
            self._advance()
            value = self._expression()
            loc = self._loc(token)
            if isinstance(target, VariableExpression):
                return AssignmentStatement(location=loc, target=target, operator=operator.text, value=value)
            if isinstance(target, DottedGetExpression):
                return DottedSetStatement(
                    location=loc, obj=target.obj, name=target.name, operator=operator.text, value=value
                )
            if isinstance(target, IndexedGetExpression):
                return IndexedSetStatement(
                    location=loc, obj=target.obj, index=target.index, operator=operator.text, value=value
                )
            raise self._error(token, "assignable expression")

        if operator.type in (T.PLUS_PLUS, T.MINUS_MINUS):
            if not isinstance(target, (VariableExpression, DottedGetExpression, IndexedGetExpression)):
                raise self._error(operator, "assignable expression before '++'/'--'")
            self._advance()
            return IncrementStatement(location=self._loc(token), value=target, operator=operator.text)

        if isinstance(target, CallExpression):
            return ExpressionStatement(location=self._loc(token), expression=target)

        raise self._error(self._peek(), "assignment or call")

    def _block(self, is_terminator: Callable[[], bool], expected: str) -> Block:
        statements = []
        self._skip_separators()
        while not is_terminator():
            if self._check(T.EOF):
                raise self._error(self._peek(), expected)
            statements.append(self._statement())
            # "sub () m.a = 1 end sub" needs no separator before the end
            if not is_terminator():
                self._end_of_statement()
            self._skip_separators()
        return Block(statements=statements)

    def _function_declaration(self) -> FunctionStatement:
        keyword = self._peek()
        name = self._peek(1)
        self._advance()
        self._advance()
        func = self._function_rest(keyword)
        return FunctionStatement(location=self._loc(keyword), name=name.text, func=func)

    def _function_rest(self, keyword: BrsToken) -> FunctionExpression:
        """Parse parameters, return type and body after ``sub``/``function``."""
        kind = "sub" if keyword.type == T.SUB else "function"

        self._expect(T.LPAREN, "'('")
        parameters = []
        self._skip_newlines()
        while not self._check(T.RPAREN):
            param_token = self._expect(T.IDENTIFIER, "parameter name")
            default = None
            type_name = None
            if self._match(T.EQUAL):
                default = self._expression()
            if self._match(T.AS):
                type_name = self._name_token("type name").text
            parameters.append(
                Parameter(location=self._loc(param_token), name=param_token.text, default=default, type_name=type_name)
            )
            self._skip_newlines()
            if not self._match(T.COMMA):
                break
            self._skip_newlines()
        self._expect(T.RPAREN, "')'")

        return_type = None
        if self._match(T.AS):
            return_type = self._name_token("return type").text

        end_single = T.END_SUB if kind == "sub" else T.END_FUNCTION
        end_keyword = T.SUB if kind == "sub" else T.FUNCTION
        body = self._block(lambda: self._at_end_of(end_single, end_keyword), f"'end {kind}'")
        self._consume_end(end_single, end_keyword, f"'end {kind}'")

        return FunctionExpression(
            location=self._loc(keyword),
            kind=kind,
            parameters=parameters,
            return_type=return_type,
            body=body,
        )

    def _if_statement(self) -> IfStatement:
        keyword = self._advance()
        condition = self._expression()
        self._match(T.THEN)

        if not self._check(T.NEWLINE, T.EOF):
            return self._inline_if(keyword, condition)

        def at_branch_end() -> bool:
            return (
                self._check(T.ELSE, T.ELSE_IF)
                or self._at_end_of(T.END_IF, T.IF)
            )

        then_branch = self._block(at_branch_end, "'end if'")
        else_ifs = []
        else_branch = None

        while True:
            if self._check(T.ELSE_IF) or (self._check(T.ELSE) and self._peek(1).type == T.IF):
                clause_token = self._advance()
                if clause_token.type == T.ELSE:
                    self._advance()
                clause_condition = self._expression()
                self._match(T.THEN)
                body = self._block(at_branch_end, "'end if'")
                else_ifs.append(ElseIfClause(location=self._loc(clause_token), condition=clause_condition, body=body))
                continue
            if self._match(T.ELSE):
                else_branch = self._block(lambda: self._at_end_of(T.END_IF, T.IF), "'end if'")
            break

        self._consume_end(T.END_IF, T.IF, "'end if'")
        return IfStatement(
            location=self._loc(keyword),
            condition=condition,
            then_branch=then_branch,
            else_ifs=else_ifs,
            else_branch=else_branch,
        )

    def _inline_statements(self) -> Block:
        statements = [self._statement()]
        while self._match(T.COLON):
            if self._check(T.NEWLINE, T.EOF, T.ELSE):
                break
            statements.append(self._statement())
        return Block(statements=statements)

    def _inline_if(self, keyword: BrsToken, condition: Expression) -> IfStatement:
        then_branch = self._inline_statements()
        else_branch = None
        if self._match(T.ELSE):
            if self._check(T.IF):
                else_branch = Block(statements=[self._if_statement()])
            else:
                else_branch = self._inline_statements()
        return IfStatement(
            location=self._loc(keyword),
            condition=condition,
            then_branch=then_branch,
            else_branch=else_branch,
        )

    def _at_for_end(self) -> bool:
        return self._check(T.NEXT) or self._at_end_of(T.END_FOR, T.FOR)

    def _consume_for_end(self) -> None:
        if self._match(T.NEXT):
            self._match(T.IDENTIFIER)
            return
        self._consume_end(T.END_FOR, T.FOR, "'end for'")

    def _for_statement(self) -> Statement:
        keyword = self._advance()

        if self._match(T.EACH):
            item = self._expect(T.IDENTIFIER, "loop variable")
            self._expect(T.IN, "'in'")
            target = self._expression()
            body = self._block(self._at_for_end, "'end for'")
            self._consume_for_end()
            return ForEachStatement(location=self._loc(keyword), item=item.text, target=target, body=body)

        counter = self._expect(T.IDENTIFIER, "loop counter")
        self._expect(T.EQUAL, "'='")
        start = self._expression()
        self._expect(T.TO, "'to'")
        end = self._expression()
        step = self._expression() if self._match(T.STEP) else None
        body = self._block(self._at_for_end, "'end for'")
        self._consume_for_end()
        return ForStatement(
            location=self._loc(keyword), counter=counter.text, start=start, end=end, step=step, body=body
        )

    def _while_statement(self) -> WhileStatement:
        keyword = self._advance()
        condition = self._expression()
        body = self._block(lambda: self._at_end_of(T.END_WHILE, T.WHILE), "'end while'")
        self._consume_end(T.END_WHILE, T.WHILE, "'end while'")
        return WhileStatement(location=self._loc(keyword), condition=condition, body=body)

    def _try_statement(self) -> TryCatchStatement:
        keyword = self._advance()
        try_block = self._block(
            lambda: self._check(T.CATCH) or self._at_end_of(T.END_TRY, T.TRY), "'catch'"
        )
        self._expect(T.CATCH, "'catch'")
        exception = self._expect(T.IDENTIFIER, "exception variable")
        catch_block = self._block(lambda: self._at_end_of(T.END_TRY, T.TRY), "'end try'")
        self._consume_end(T.END_TRY, T.TRY, "'end try'")
        return TryCatchStatement(
            location=self._loc(keyword),
            try_block=try_block,
            exception=exception.text,
            catch_block=catch_block,
        )

    def _dim_statement(self) -> DimStatement:
        keyword = self._advance()
        name = self._expect(T.IDENTIFIER, "array name")
        self._expect(T.LBRACKET, "'['")
        dimensions = [self._expression()]
        while self._match(T.COMMA):
            dimensions.append(self._expression())
        self._expect(T.RBRACKET, "']'")
        return DimStatement(location=self._loc(keyword), name=name.text, dimensions=dimensions)

    def _exit_statement(self) -> ExitStatement:
        keyword = self._advance()
        if keyword.type == T.EXIT_WHILE:
            return ExitStatement(location=self._loc(keyword), loop="while")
        if self._match(T.WHILE):
            return ExitStatement(location=self._loc(keyword), loop="while")
        self._expect(T.FOR, "'for' or 'while'")
        return ExitStatement(location=self._loc(keyword), loop="for")

    def _print_statement(self) -> PrintStatement:
        keyword = self._advance()
        items = []
        while not self._at_terminator():
            if self._match(T.SEMICOLON):
                items.append(";")
            elif self._match(T.COMMA):
                items.append(",")
            else:
                items.append(self._expression())
        return PrintStatement(location=self._loc(keyword), items=items)

    # =========================================================================
    # Expressions
    # =========================================================================

    def _expression(self) -> Expression:
        return self._ternary()

    def _ternary(self) -> Expression:
        condition = self._or()
        question = self._match(T.QUESTION)
        if question is None:
            return condition
        self._skip_newlines()
        consequent = self._expression()
        self._skip_newlines()
        self._expect(T.COLON, "':' in ternary expression")
        self._skip_newlines()
        alternate = self._expression()
        return TernaryExpression(
            location=self._loc(question), condition=condition, consequent=consequent, alternate=alternate
        )

    def _binary(self, operand: Callable[[], Expression], *operators: BrsTokenType) -> Expression:
        left = operand()
        while self._check(*operators):
            op = self._advance()
            right = operand()
            text = op.text.lower() if op.type in KEYWORD_TOKENS else op.text
            left = BinaryExpression(location=left.location, left=left, operator=text, right=right)
        return left

    def _or(self) -> Expression:
        return self._binary(self._and, T.OR)

    def _and(self) -> Expression:
        return self._binary(self._not, T.AND)

    def _not(self) -> Expression:
        token = self._match(T.NOT)
        if token is not None:
            return UnaryExpression(location=self._loc(token), operator="not", operand=self._not())
        return self._comparison()

    def _comparison(self) -> Expression:
        return self._binary(self._shift, *COMPARISON_OPERATORS)

    def _shift(self) -> Expression:
        return self._binary(self._additive, T.LEFT_SHIFT, T.RIGHT_SHIFT)

    def _additive(self) -> Expression:
        return self._binary(self._multiplicative, T.PLUS, T.MINUS)

    def _multiplicative(self) -> Expression:
        return self._binary(self._exponent, T.STAR, T.SLASH, T.BACKSLASH, T.MOD)

    def _exponent(self) -> Expression:
        return self._binary(self._unary, T.CARET)

    def _unary(self) -> Expression:
        token = self._match(T.MINUS, T.PLUS)
        if token is not None:
            return UnaryExpression(location=self._loc(token), operator=token.text, operand=self._unary())
        return self._postfix()

    def _postfix(self) -> Expression:
        expr = self._primary()
        while True:
            if self._match(T.DOT):
                name = self._name_token("member name")
                expr = DottedGetExpression(location=expr.location, obj=expr, name=name.text)
            elif self._match(T.LBRACKET):
                self._skip_newlines()
                index = self._expression()
                self._skip_newlines()
                self._expect(T.RBRACKET, "']'")
                expr = IndexedGetExpression(location=expr.location, obj=expr, index=index)
            elif self._match(T.LPAREN):
                args = self._arguments()
                expr = CallExpression(location=expr.location, callee=expr, args=args)
            else:
                return expr

    def _arguments(self) -> list[Expression]:
        args = []
        self._skip_newlines()
        while not self._check(T.RPAREN):
            args.append(self._expression())
            self._skip_newlines()
            if not self._match(T.COMMA):
                break
            self._skip_newlines()
        self._expect(T.RPAREN, "')'")
        return args

    def _primary(self) -> Expression:
        token = self._peek()

        if token.type in (T.NUMBER, T.STRING, T.TRUE, T.FALSE, T.INVALID):
            self._advance()
            text = token.text.lower() if token.type in KEYWORD_TOKENS else token.text
            return LiteralExpression(location=self._loc(token), text=text)

        if token.type == T.IDENTIFIER:
            self._advance()
            return VariableExpression(location=self._loc(token), name=token.text)

        if token.type == T.LPAREN:
            self._advance()
            self._skip_newlines()
            inner = self._expression()
            self._skip_newlines()
            self._expect(T.RPAREN, "')'")
            return GroupingExpression(location=self._loc(token), expression=inner)

        if token.type == T.LBRACKET:
            return self._array_literal()

        if token.type == T.LBRACE:
            return self._aa_literal()

        if token.type in (T.SUB, T.FUNCTION):
            self._advance()
            return self._function_rest(token)

        raise self._error(token, "expression")

    def _array_literal(self) -> ArrayLiteralExpression:
        bracket = self._advance()
        elements = []
        self._skip_newlines()
        while not self._check(T.RBRACKET):
            elements.append(self._expression())
            self._skip_newlines()
            self._match(T.COMMA)
            self._skip_newlines()
        self._expect(T.RBRACKET, "']'")
        return ArrayLiteralExpression(location=self._loc(bracket), elements=elements)

    def _aa_literal(self) -> AALiteralExpression:
        brace = self._advance()
        members = []
        self._skip_newlines()
        while not self._check(T.RBRACE):
            if self._check(T.STRING):
                key = self._advance()
            else:
                key = self._name_token("key")
            self._expect(T.COLON, "':'")
            self._skip_newlines()
            value = self._expression()
            members.append(AAMember(location=self._loc(key), key=key.text, value=value))
            self._skip_newlines()
            self._match(T.COMMA)
            self._skip_newlines()
        self._expect(T.RBRACE, "'}'")
        return AALiteralExpression(location=self._loc(brace), members=members)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_script(source: str, filename: str = "<script>", line_number: int = 1) -> list[Statement]:
    """
    Parse BrightScript source into a list of top-level statements.

    Args:
        source: BrightScript source
        filename: Name used in error messages
        line_number: Line on which ``source`` starts in ``filename``

    Raises:
        ScriptSyntaxError: If the source is malformed
    """
    tokens = list(BrsLexer(source, filename, line_number).tokenize())
    parser = BrsParser(tokens, filename, source.splitlines(), first_line=line_number)
    return parser.parse()


def parse_expression(source: str, filename: str = "<binding>", line_number: int = 1) -> Expression:
    """
    Parse a bare expression.

    The expression is wrapped in a synthetic assignment, parsed as a
    statement, and the right-hand side is returned.

    Raises:
        ScriptSyntaxError: If ``source`` is not exactly one expression
    """
    statements = parse_script(f"{EXPRESSION_PLACEHOLDER} = {source}", filename, line_number)
    if (
        len(statements) != 1
        or not isinstance(statements[0], AssignmentStatement)
        or statements[0].operator != "="
    ):
        raise ScriptSyntaxError(
            f"expected a single expression, got '{source.strip()}'",
            SourceLocation(filename, line_number, 1),
        )
    return statements[0].value
