"""
BrightScript Service Test Suite
===============================

Tests for the BrightScript lexer, parser, printer and tree walker used for
<script> blocks and data bindings.

Test Organization
-----------------
- TestBrsLexer: Token generation
- TestBrsParser: Statement and expression parsing
- TestParseExpression: Bare expression parsing
- TestBrsPrinter: Rendering back to source
- TestWalker: Instance-scope reference discovery
"""

import pytest

from haiku_sdk.brs import (
    BrsLexer,
    BrsPrinter,
    BrsTokenType,
    assigned_name,
    instance_references,
    instance_target,
    parse_expression,
    parse_script,
    render,
)
from haiku_sdk.brs.ast import (
    AALiteralExpression,
    AssignmentStatement,
    BinaryExpression,
    DimStatement,
    DottedGetExpression,
    DottedSetStatement,
    ExitStatement,
    ForEachStatement,
    ForStatement,
    FunctionExpression,
    FunctionStatement,
    IfStatement,
    IncrementStatement,
    IndexedGetExpression,
    IndexedSetStatement,
    LiteralExpression,
    PrintStatement,
    TernaryExpression,
    ThrowStatement,
    TryCatchStatement,
    UnaryExpression,
    VariableExpression,
    WhileStatement,
)
from haiku_sdk.errors import ScriptSyntaxError


def token_types(source: str) -> list:
    """Token types without the trailing EOF."""
    return [t.type for t in BrsLexer(source).tokenize() if t.type != BrsTokenType.EOF]


# =============================================================================
# Lexer Tests
# =============================================================================

class TestBrsLexer:
    """Tests for the BrightScript tokenizer."""

    def test_empty_source(self):
        """Empty source should produce only EOF."""
        tokens = list(BrsLexer("").tokenize())
        assert len(tokens) == 1
        assert tokens[0].type == BrsTokenType.EOF

    def test_simple_assignment(self):
        """Assignment tokens carry text and one-based positions."""
        tokens = list(BrsLexer("x = 1").tokenize())
        assert [t.type for t in tokens] == [
            BrsTokenType.IDENTIFIER,
            BrsTokenType.EQUAL,
            BrsTokenType.NUMBER,
            BrsTokenType.EOF,
        ]
        assert tokens[2].text == "1"
        assert (tokens[2].line, tokens[2].column) == (1, 5)

    def test_keywords_are_case_insensitive(self):
        """END SUB and end sub lex to the same keywords."""
        assert token_types("END SUB") == [BrsTokenType.END, BrsTokenType.SUB]
        assert token_types("end sub") == [BrsTokenType.END, BrsTokenType.SUB]

    def test_keyword_keeps_source_casing(self):
        """Keyword text is not normalized."""
        tokens = list(BrsLexer("True").tokenize())
        assert tokens[0].type == BrsTokenType.TRUE
        assert tokens[0].text == "True"

    def test_identifier_type_suffix(self):
        """Type suffixes belong to the identifier."""
        tokens = list(BrsLexer("name$").tokenize())
        assert tokens[0].type == BrsTokenType.IDENTIFIER
        assert tokens[0].text == "name$"

    def test_hex_number(self):
        """&h literals are numbers."""
        tokens = list(BrsLexer("&hFF").tokenize())
        assert tokens[0].type == BrsTokenType.NUMBER
        assert tokens[0].text == "&hFF"

    def test_float_number(self):
        """Floats with exponents are a single number."""
        tokens = list(BrsLexer("1.5e3").tokenize())
        assert tokens[0].type == BrsTokenType.NUMBER
        assert tokens[0].text == "1.5e3"

    def test_string_with_escaped_quote(self):
        """A doubled quote does not end the string."""
        tokens = list(BrsLexer('"say ""hi"""').tokenize())
        assert tokens[0].type == BrsTokenType.STRING
        assert tokens[0].text == '"say ""hi"""'

    def test_compound_assignment_operators(self):
        """Compound assignments are single tokens."""
        assert token_types("x += 1") == [
            BrsTokenType.IDENTIFIER, BrsTokenType.PLUS_EQUAL, BrsTokenType.NUMBER,
        ]
        assert token_types("x <<= 1")[1] == BrsTokenType.LEFT_SHIFT_EQUAL
        assert token_types("x \\= 2")[1] == BrsTokenType.BACKSLASH_EQUAL

    def test_comparison_operators(self):
        """Two-character comparison operators."""
        assert token_types("a <> b")[1] == BrsTokenType.NOT_EQUAL
        assert token_types("a <= b")[1] == BrsTokenType.LESS_EQUAL
        assert token_types("a >= b")[1] == BrsTokenType.GREATER_EQUAL

    def test_increment_operators(self):
        """++ and -- are single tokens; spaced signs are not."""
        assert token_types("x++") == [BrsTokenType.IDENTIFIER, BrsTokenType.PLUS_PLUS]
        assert token_types("x--") == [BrsTokenType.IDENTIFIER, BrsTokenType.MINUS_MINUS]
        assert token_types("a - -1") == [
            BrsTokenType.IDENTIFIER, BrsTokenType.MINUS, BrsTokenType.MINUS, BrsTokenType.NUMBER,
        ]

    def test_exception_keywords(self):
        assert token_types("try catch throw dim") == [
            BrsTokenType.TRY, BrsTokenType.CATCH, BrsTokenType.THROW, BrsTokenType.DIM,
        ]
        assert token_types("endtry") == [BrsTokenType.END_TRY]

    def test_apostrophe_comment(self):
        """' comments run to the end of the line."""
        assert token_types("x = 1 ' set x") == [
            BrsTokenType.IDENTIFIER, BrsTokenType.EQUAL, BrsTokenType.NUMBER,
        ]

    def test_rem_comment(self):
        """REM starts a comment only as a whole word."""
        assert token_types("rem nothing here") == []
        tokens = list(BrsLexer("remaining = 1").tokenize())
        assert tokens[0].type == BrsTokenType.IDENTIFIER
        assert tokens[0].text == "remaining"

    def test_separators(self):
        """Newlines and colons separate statements."""
        assert token_types("a = 1: b = 2\n") == [
            BrsTokenType.IDENTIFIER, BrsTokenType.EQUAL, BrsTokenType.NUMBER,
            BrsTokenType.COLON,
            BrsTokenType.IDENTIFIER, BrsTokenType.EQUAL, BrsTokenType.NUMBER,
            BrsTokenType.NEWLINE,
        ]

    def test_starting_line_number(self):
        """Embedded scripts report lines of the enclosing file."""
        tokens = list(BrsLexer("\nx", line_number=5).tokenize())
        assert tokens[0].type == BrsTokenType.NEWLINE
        assert tokens[0].line == 5
        assert (tokens[1].line, tokens[1].column) == (6, 1)

    def test_unterminated_string(self):
        """Strings may not span lines."""
        with pytest.raises(ScriptSyntaxError, match="unterminated string"):
            list(BrsLexer('x = "abc\n').tokenize())

    def test_unexpected_character(self):
        """Unknown characters are errors."""
        with pytest.raises(ScriptSyntaxError, match="unexpected character '@'"):
            list(BrsLexer("x = @").tokenize())


# =============================================================================
# Parser Tests
# =============================================================================

class TestBrsParser:
    """Tests for BrightScript statement parsing."""

    def test_empty_script(self):
        """Blank lines and comments produce no statements."""
        assert parse_script("\n\n' nothing\n") == []

    def test_assignment(self):
        """Plain assignment to a local."""
        assert parse_script("x = 1") == [
            AssignmentStatement(
                target=VariableExpression(name="x"),
                operator="=",
                value=LiteralExpression(text="1"),
            )
        ]

    def test_dotted_compound_assignment(self):
        """m.count += 1 is a dotted set with a compound operator."""
        statement = parse_script("m.count += 1")[0]
        assert statement == DottedSetStatement(
            obj=VariableExpression(name="m"),
            name="count",
            operator="+=",
            value=LiteralExpression(text="1"),
        )

    def test_indexed_set(self):
        """m.items[0] = 2 is an indexed set."""
        statement = parse_script("m.items[0] = 2")[0]
        assert isinstance(statement, IndexedSetStatement)
        assert statement.obj == DottedGetExpression(obj=VariableExpression(name="m"), name="items")

    def test_bare_expression_is_not_a_statement(self):
        """Only calls may stand alone."""
        with pytest.raises(ScriptSyntaxError, match="expected assignment or call"):
            parse_script("m.count")

    def test_print(self):
        """print keeps its separators."""
        statement = parse_script('print "a"; b')[0]
        assert isinstance(statement, PrintStatement)
        assert statement.items[1] == ";"

    def test_sub_declaration(self):
        """Parameters may have defaults and types."""
        statement = parse_script("sub foo(a, b = 2 as integer)\n  print a\nend sub")[0]
        assert isinstance(statement, FunctionStatement)
        assert statement.name == "foo"
        assert statement.func.kind == "sub"
        assert [p.name for p in statement.func.parameters] == ["a", "b"]
        assert statement.func.parameters[1].default == LiteralExpression(text="2")
        assert statement.func.parameters[1].type_name == "integer"
        assert len(statement.func.body.statements) == 1

    def test_function_with_return_type(self):
        """function ... as string ... end function"""
        statement = parse_script('function title() as string\n  return "x"\nend function')[0]
        assert statement.func.kind == "function"
        assert statement.func.return_type == "string"

    def test_single_word_end(self):
        """endsub closes a sub like end sub."""
        statement = parse_script("sub foo()\nendsub")[0]
        assert statement.func.body.statements == []

    def test_missing_end_sub(self):
        """A routine must be closed."""
        with pytest.raises(ScriptSyntaxError, match="end of script") as exc_info:
            parse_script("sub foo()\n  x = 1\n")
        assert "expected 'end sub'" in str(exc_info.value)

    def test_block_if(self):
        """if / else if / else / end if"""
        source = (
            "if a = 1 then\n"
            "  x = 1\n"
            "else if a = 2 then\n"
            "  x = 2\n"
            "else\n"
            "  x = 3\n"
            "end if"
        )
        statement = parse_script(source)[0]
        assert isinstance(statement, IfStatement)
        assert len(statement.else_ifs) == 1
        assert statement.else_branch is not None
        assert isinstance(statement.condition, BinaryExpression)
        assert statement.condition.operator == "="

    def test_inline_if(self):
        """Single-line if with else."""
        statement = parse_script("if ready then x = 1 else x = 2")[0]
        assert isinstance(statement, IfStatement)
        assert len(statement.then_branch.statements) == 1
        assert len(statement.else_branch.statements) == 1

    def test_for_loop(self):
        """for with step, closed by end for."""
        statement = parse_script("for i = 0 to 10 step 2\n  print i\nend for")[0]
        assert isinstance(statement, ForStatement)
        assert statement.counter == "i"
        assert statement.step == LiteralExpression(text="2")

    def test_for_each_next(self):
        """for each closed by next."""
        statement = parse_script("for each item in m.items\n  print item\nnext")[0]
        assert isinstance(statement, ForEachStatement)
        assert statement.item == "item"

    def test_while_with_exit(self):
        """while ... exit while ... end while"""
        statement = parse_script("while true\n  exit while\nend while")[0]
        assert isinstance(statement, WhileStatement)
        assert statement.body.statements == [ExitStatement(loop="while")]

    def test_error_line_is_offset(self):
        """Errors report the line in the enclosing file."""
        with pytest.raises(ScriptSyntaxError) as exc_info:
            parse_script("\nx = = 1", "App.haiku", line_number=3)
        assert exc_info.value.location.filename == "App.haiku"
        assert exc_info.value.location.line == 4

    def test_increment(self):
        """x++ and m.count-- are increment statements."""
        assert parse_script("x++") == [
            IncrementStatement(value=VariableExpression(name="x"), operator="++")
        ]
        statement = parse_script("m.count--")[0]
        assert statement == IncrementStatement(
            value=DottedGetExpression(obj=VariableExpression(name="m"), name="count"),
            operator="--",
        )

    def test_indexed_increment(self):
        statement = parse_script("m.items[0]++")[0]
        assert isinstance(statement, IncrementStatement)
        assert isinstance(statement.value, IndexedGetExpression)

    def test_increment_needs_assignable_target(self):
        with pytest.raises(ScriptSyntaxError, match="assignable expression before"):
            parse_script("f()++")

    def test_dim(self):
        statement = parse_script("dim grid[5, 2]")[0]
        assert statement == DimStatement(
            name="grid",
            dimensions=[LiteralExpression(text="5"), LiteralExpression(text="2")],
        )

    def test_throw(self):
        assert parse_script('throw "bad state"') == [
            ThrowStatement(value=LiteralExpression(text='"bad state"'))
        ]

    def test_try_catch(self):
        source = "try\n  load()\ncatch e\n  print e\nend try"
        statement = parse_script(source)[0]
        assert isinstance(statement, TryCatchStatement)
        assert statement.exception == "e"
        assert len(statement.try_block.statements) == 1
        assert isinstance(statement.catch_block.statements[0], PrintStatement)

    def test_try_single_word_end(self):
        statement = parse_script("try\nx = 1\ncatch err\nx = 2\nendtry")[0]
        assert isinstance(statement, TryCatchStatement)
        assert statement.exception == "err"

    def test_try_without_catch(self):
        with pytest.raises(ScriptSyntaxError, match="'catch'"):
            parse_script("try\nx = 1\nend try")

    def test_catch_needs_variable(self):
        with pytest.raises(ScriptSyntaxError, match="exception variable"):
            parse_script("try\nx = 1\ncatch\nend try")


# =============================================================================
# Expression Tests
# =============================================================================

class TestParseExpression:
    """Tests for bare expression parsing."""

    def test_precedence(self):
        """Multiplication binds tighter than addition."""
        expr = parse_expression("1 + 2 * 3")
        assert expr == BinaryExpression(
            left=LiteralExpression(text="1"),
            operator="+",
            right=BinaryExpression(
                left=LiteralExpression(text="2"),
                operator="*",
                right=LiteralExpression(text="3"),
            ),
        )

    def test_not_binds_tighter_than_and(self):
        """not a and b is (not a) and b."""
        expr = parse_expression("NOT a AND b")
        assert expr == BinaryExpression(
            left=UnaryExpression(operator="not", operand=VariableExpression(name="a")),
            operator="and",
            right=VariableExpression(name="b"),
        )

    def test_ternary(self):
        """c ? a : b"""
        expr = parse_expression('m.a ? "x" : "y"')
        assert isinstance(expr, TernaryExpression)
        assert expr.consequent == LiteralExpression(text='"x"')

    def test_associative_array(self):
        """Keys may be names or strings."""
        expr = parse_expression('{a: 1, "b": 2}')
        assert isinstance(expr, AALiteralExpression)
        assert [member.key for member in expr.members] == ["a", '"b"']

    def test_anonymous_sub(self):
        """A sub literal spanning lines."""
        expr = parse_expression("sub ()\n  m.count += 1\nend sub")
        assert isinstance(expr, FunctionExpression)
        assert len(expr.body.statements) == 1

    def test_anonymous_sub_on_one_line(self):
        """end sub may follow the last statement directly."""
        expr = parse_expression("sub () m.a = {x: 1} end sub")
        assert isinstance(expr, FunctionExpression)
        assert len(expr.body.statements) == 1

    def test_trailing_tokens(self):
        """Two expressions are an error."""
        with pytest.raises(ScriptSyntaxError):
            parse_expression("1 2")

    def test_empty_expression(self):
        """Nothing to parse is an error."""
        with pytest.raises(ScriptSyntaxError):
            parse_expression("")

    def test_several_statements(self):
        """A second statement is rejected."""
        with pytest.raises(ScriptSyntaxError, match="expected a single expression"):
            parse_expression("1: x = 2")


# =============================================================================
# Printer Tests
# =============================================================================

class TestBrsPrinter:
    """Tests for rendering the AST back to source."""

    def test_assignment(self):
        assert render(parse_script("x=1")) == "x = 1"

    def test_if_block_indentation(self):
        """Blocks are indented with tabs."""
        source = "if a > 1 then\nx = 1\nelse\nx = 2\nend if"
        assert render(parse_script(source)) == "if a > 1 then\n\tx = 1\nelse\n\tx = 2\nend if"

    def test_custom_indent(self):
        """The indent string is configurable."""
        source = "while true\nexit while\nend while"
        assert render(parse_script(source), indent="    ") == "while true\n    exit while\nend while"

    def test_sub_declaration(self):
        source = "sub foo(a, b = 2 as integer) as void\nprint a\nend sub"
        assert render(parse_script(source)) == (
            "sub foo(a, b = 2 as integer) as void\n\tprint a\nend sub"
        )

    def test_function_literal_in_assignment(self):
        """A sub literal is rendered inline after the '='."""
        assert render(parse_script("m.f = sub ()\nprint 1\nend sub")) == (
            "m.f = sub ()\n\tprint 1\nend sub"
        )

    def test_keyword_operators_lowercase(self):
        assert render(parse_expression("a AND NOT b MOD 2")) == "a and not b mod 2"

    def test_print_separators(self):
        assert render(parse_script('print "a"; b')) == 'print "a"; b'

    def test_aa_literal(self):
        assert render(parse_expression("{}")) == "{}"
        assert render(parse_expression("{a: 1, b: [1, 2]}")) == "{ a: 1, b: [1, 2] }"

    def test_ternary_uses_runtime_helper(self):
        """Ternaries become bslib_ternary calls and are recorded."""
        printer = BrsPrinter()
        text = printer.render(parse_expression('m.a ? "x" : "y"'))
        assert text == 'bslib_ternary(m.a, "x", "y")'
        assert printer.helpers_used == {"bslib_ternary"}

    def test_helper_calls_recorded(self):
        printer = BrsPrinter()
        printer.render(parse_expression("bslib_toString(1)"))
        assert printer.helpers_used == {"bslib_tostring"}

    def test_no_helpers(self):
        printer = BrsPrinter()
        printer.render(parse_script("x = len(y)"))
        assert printer.helpers_used == set()

    def test_increment(self):
        assert render(parse_script("m.count++")) == "m.count++"

    def test_dim_and_throw(self):
        assert render(parse_script("dim a[5,2]\nthrow msg")) == "dim a[5, 2]\nthrow msg"

    def test_try_catch(self):
        source = "try\nload()\ncatch e\nprint e\nendtry"
        assert render(parse_script(source)) == "try\n\tload()\ncatch e\n\tprint e\nend try"


# =============================================================================
# Walker Tests
# =============================================================================

class TestWalker:
    """Tests for instance-scope reference discovery."""

    def test_references_through_index(self):
        expr = parse_expression("m.items[m.index].title")
        assert instance_references(expr) == {"items", "index"}

    def test_references_skip_runtime_fields(self):
        """m.top and m.global are not component state."""
        expr = parse_expression("m.top.width + m.global.theme + m.w")
        assert instance_references(expr) == {"w"}

    def test_references_in_call_arguments(self):
        expr = parse_expression("bslib_toString(m.count)")
        assert instance_references(expr) == {"count"}

    def test_plain_variable_is_not_a_reference(self):
        assert instance_references(parse_expression("count + 1")) == set()

    def test_instance_target(self):
        assert instance_target(parse_script("m.a = 1")[0]) == "a"
        assert instance_target(parse_script("m.a.b += 1")[0]) == "a"
        assert instance_target(parse_script("m.a[0] = 1")[0]) == "a"

    def test_increment_is_a_write(self):
        assert instance_target(parse_script("m.count++")[0]) == "count"
        assert instance_target(parse_script("m.items[0]--")[0]) == "items"
        assert instance_target(parse_script("count++")[0]) is None
        assert instance_target(parse_script("m.top.width++")[0]) is None

    def test_instance_target_ignores_others(self):
        assert instance_target(parse_script("m.top.width = 1")[0]) is None
        assert instance_target(parse_script("x = 1")[0]) is None
        assert instance_target(parse_script("node.text = 1")[0]) is None

    def test_assigned_name(self):
        assert assigned_name(parse_script("total = 0")[0]) == "total"
        assert assigned_name(parse_script("m.total = 0")[0]) is None
        assert assigned_name(parse_script("dim cells[3]")[0]) == "cells"
