"""
Parser tests for SimCL: grammar, precedence, error policy.

Run with:
  pytest tests/parser_test.py
"""
from __future__ import annotations
import sys
from pathlib import Path

import pytest

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT))

from simcl.ast_nodes import (
    BinaryExpr,
    Block,
    CallExpr,
    ExprStmt,
    Function,
    Identifier,
    Let,
    NumberLiteral,
    Program,
    Return,
    Simulate,
    StringLiteral,
    UnaryExpr,
    While,
)
from simcl.enums import NodeTypes, TokenTypes
from simcl.errors import ParserError
from simcl.lexer import Lexer
from simcl.parser import Parser


def parse(src: str) -> Program:
    return Parser(Lexer(src), "<test>").parse()


def parse_expr(src: str):
    program = parse(src)
    assert len(program.statements) == 1
    stmt = program.statements[0]
    assert isinstance(stmt, ExprStmt)
    return stmt.expression


def test_statement_count_and_order():
    program = parse(
        """
let a = 1;
function f(x) { return x; }
simulate { a = f(a) }
while a < 3 { a = a + 1 }
a;
"""
    )
    assert [s.node_type for s in program.statements] == [
        NodeTypes.LET,
        NodeTypes.FUNCTION,
        NodeTypes.SIMULATE,
        NodeTypes.WHILE,
        NodeTypes.EXPR_STMT,
    ]


def test_empty_program():
    assert parse("") == Program([], 1)
    assert parse("// only a comment\n/* and another */") == Program([], 1)


def test_multiplication_binds_tighter_than_addition():
    assert parse_expr("1 + 2 * 3") == BinaryExpr(
        "+",
        NumberLiteral("1", 1),
        BinaryExpr("*", NumberLiteral("2", 1), NumberLiteral("3", 1), 1),
        1,
    )


def test_assignment_is_right_associative():
    assert parse_expr("a = b = 3") == BinaryExpr(
        "=",
        Identifier("a", 1),
        BinaryExpr("=", Identifier("b", 1), NumberLiteral("3", 1), 1),
        1,
    )


def test_binary_operators_are_left_associative():
    expr = parse_expr("8 - 4 - 2")
    assert expr == BinaryExpr(
        "-",
        BinaryExpr("-", NumberLiteral("8", 1), NumberLiteral("4", 1), 1),
        NumberLiteral("2", 1),
        1,
    )
    assert parse_expr("a / b % c").left.op == "/"


def test_equality_is_below_relational():
    expr = parse_expr("a < b == c >= d")
    assert expr.op == "=="
    assert expr.left.op == "<"
    assert expr.right.op == ">="


def test_relational_is_below_additive():
    expr = parse_expr("a + 1 <= b * 2")
    assert expr.op == "<="
    assert expr.left.op == "+"
    assert expr.right.op == "*"


def test_unary_operators():
    assert parse_expr("-x * +2") == BinaryExpr(
        "*",
        UnaryExpr("-", Identifier("x", 1), 1),
        UnaryExpr("+", NumberLiteral("2", 1), 1),
        1,
    )
    assert parse_expr("--x") == UnaryExpr("-", UnaryExpr("-", Identifier("x", 1), 1), 1)


def test_parentheses_override_precedence():
    expr = parse_expr("(1 + 2) * 3")
    assert expr.op == "*"
    assert expr.left == BinaryExpr("+", NumberLiteral("1", 1), NumberLiteral("2", 1), 1)


def test_function_declaration():
    program = parse("function f(a, b) { return a + b; }")
    assert program.statements == [
        Function(
            "f",
            [Identifier("a", 1), Identifier("b", 1)],
            Block(
                [
                    Return(
                        BinaryExpr("+", Identifier("a", 1), Identifier("b", 1), 1),
                        1,
                    )
                ],
                1,
            ),
            1,
        )
    ]


def test_function_without_parameters():
    func = parse("function tick() { }").statements[0]
    assert func.name == "tick"
    assert func.params == []
    assert func.body.statements == []


def test_call_expression():
    assert parse_expr("f(1, 2)") == CallExpr(
        Identifier("f", 1), [NumberLiteral("1", 1), NumberLiteral("2", 1)], 1
    )
    assert parse_expr("f()") == CallExpr(Identifier("f", 1), [], 1)


def test_nested_calls_keep_argument_order():
    call = parse_expr('f(g(1), "s", x = 2)')
    assert [arg.node_type for arg in call.args] == [
        NodeTypes.CALL_EXPR,
        NodeTypes.STRING_LITERAL,
        NodeTypes.BINARY_EXPR,
    ]
    assert call.args[0].callee.name == "g"


def test_semicolons_are_optional():
    assert parse("let a = 1 let b = 2") == parse("let a = 1; let b = 2;")
    program = parse("let a = 1 let b = 2")
    assert [s.name for s in program.statements] == ["a", "b"]


def test_stray_semicolons_are_empty_statements():
    parser = Parser(Lexer(";;; let a = 1;; function f() {};"))
    program = parser.parse()
    assert [s.node_type for s in program.statements] == [
        NodeTypes.LET,
        NodeTypes.FUNCTION,
    ]
    assert parser.warnings == []


def test_while_and_simulate():
    program = parse("while i < 10 { i = i + 1 }\nsimulate { let t = 0 }")
    loop, sim = program.statements
    assert isinstance(loop, While)
    assert loop.condition == BinaryExpr("<", Identifier("i", 1), NumberLiteral("10", 1), 1)
    assert len(loop.body.statements) == 1
    assert isinstance(sim, Simulate)
    assert sim.line == 2
    assert sim.body == Block([Let("t", NumberLiteral("0", 2), 2)], 2)


def test_string_expression_statement():
    program = parse('"hello";')
    assert program.statements == [ExprStmt(StringLiteral("hello", 1), 1)]


def test_nodes_carry_source_lines():
    program = parse("let a = 1\n\nfunction f(x)\n{\n  return x\n}")
    let, func = program.statements
    assert let.line == 1
    assert func.line == 3
    assert func.body.line == 4
    assert func.body.statements[0].line == 5


def test_missing_identifier_after_let_is_fatal(caplog):
    with pytest.raises(ParserError) as excinfo:
        parse("let = 5;")
    err = excinfo.value
    assert err.line == 1
    assert err.expected == "identifier"
    assert err.found.type == TokenTypes.ASSIGN
    assert "expected identifier" in str(err).lower()
    assert str(err).startswith("Parser error (line 1): ")
    assert "Parser error (line 1)" in caplog.text


def test_fatal_error_reports_line_expected_and_found():
    with pytest.raises(ParserError) as excinfo:
        parse("\n\nlet x 5")
    err = excinfo.value
    assert err.line == 3
    assert err.expected == "'='"
    assert "NUMBER '5'" in err.message


def test_invalid_assignment_target_is_fatal():
    for src in ("1 = 2", "a + b = 3", "f(x) = 1"):
        with pytest.raises(ParserError) as excinfo:
            parse(src)
        assert "Invalid assignment target" in excinfo.value.message


def test_parenthesised_identifier_is_a_valid_target():
    assert parse_expr("(a) = 1").left == Identifier("a", 1)


def test_missing_closing_paren_is_fatal():
    with pytest.raises(ParserError) as excinfo:
        parse("f(1, 2")
    assert excinfo.value.expected == "')'"
    assert "end of input" in excinfo.value.message


def test_missing_closing_brace_is_fatal():
    with pytest.raises(ParserError) as excinfo:
        parse("simulate {\n let a = 1\n")
    assert excinfo.value.expected == "'}'"
    assert excinfo.value.found.type == TokenTypes.EOF


def test_block_is_required_after_while():
    with pytest.raises(ParserError) as excinfo:
        parse("while x a = 1")
    assert excinfo.value.expected == "'{'"


def test_missing_expression_is_fatal():
    for src in ("let a = ;", "return;", "a = ", "1 + * 2"):
        with pytest.raises(ParserError) as excinfo:
            parse(src)
        assert excinfo.value.expected == "expression"


def test_bad_parameter_list_is_fatal():
    with pytest.raises(ParserError):
        parse("function f(a,) { }")
    with pytest.raises(ParserError):
        parse("function (a) { }")


def test_unexpected_top_level_tokens_are_skipped(caplog):
    parser = Parser(Lexer("let a = 1; } @ let b = 2"))
    program = parser.parse()
    assert [s.name for s in program.statements] == ["a", "b"]
    assert [w[1] for w in parser.warnings] == [1, 1]
    assert "Skipping unexpected token" in caplog.text


def test_unexpected_tokens_in_blocks_are_skipped():
    parser = Parser(Lexer("simulate {\n int let a = 1\n}"))
    program = parser.parse()
    body = program.statements[0].body
    assert [s.name for s in body.statements] == ["a"]
    assert parser.warnings == [("Skipping unexpected token INT 'int'", 2)]


def test_parsing_twice_gives_equal_but_distinct_trees():
    src = "function f(a) { while a > 0 { a = a - 1 } return a }\nf(3)"
    first = parse(src)
    second = parse(src)
    assert first == second
    assert first is not second
    assert first.statements[0] is not second.statements[0]


def test_error_column_points_at_the_offending_token(caplog):
    with pytest.raises(ParserError) as excinfo:
        parse("let a = 1\n  let = 2")
    assert excinfo.value.line == 2
    assert excinfo.value.column == 6
    assert "(<test>:2:6)" in caplog.text


def test_unicode_spaces_are_skipped_as_unexpected_tokens():
    parser = Parser(Lexer("let a = 1\u00a0\nlet b = 2"))
    program = parser.parse()
    assert [s.name for s in program.statements] == ["a", "b"]
    assert parser.warnings == [("Skipping unexpected token UNKNOWN '\u00a0'", 1)]


def test_long_operator_chains_parse_without_recursion():
    expr = parse_expr("1" + " + 1" * 5000)
    assert sum(1 for n in expr.walk() if n.node_type == NodeTypes.BINARY_EXPR) == 5000

    expr = parse_expr("-" * 5000 + "x")
    assert sum(1 for n in expr.walk() if n.node_type == NodeTypes.UNARY_EXPR) == 5000

    names = [f"v{i}" for i in range(2000)]
    expr = parse_expr(" = ".join(names) + " = 0")
    assert expr.left.name == "v0"
    assert expr.right.left.name == "v1"


def test_nesting_up_to_the_limit_parses():
    depth = Parser.MAX_NESTING_DEPTH - 1
    assert parse_expr("(" * depth + "x" + ")" * depth) == Identifier("x", 1)

    blocks = parse("simulate {" + " while 1 {" * (depth - 1) + " }" * depth)
    assert len([n for n in blocks.walk() if n.node_type == NodeTypes.WHILE]) == depth - 1


def test_deep_parentheses_are_fatal(caplog):
    for src in ("(" * 200 + "1", "(" * 200 + "1" + ")" * 200, "f(" * 200 + ")" * 200):
        with pytest.raises(ParserError) as excinfo:
            parse(src)
        assert "Nested too deeply" in excinfo.value.message
        assert excinfo.value.line == 1
    assert "Nested too deeply" in caplog.text


def test_deep_blocks_are_fatal():
    src = "simulate {\n" + "while 1 {\n" * 100 + "}\n" * 101
    with pytest.raises(ParserError) as excinfo:
        parse(src)
    assert "Nested too deeply" in excinfo.value.message
    # the while on that line is the first whose condition goes past the limit
    assert excinfo.value.line == Parser.MAX_NESTING_DEPTH + 1


def test_stack_exhaustion_becomes_a_parser_error():
    parser = Parser(Lexer("(" * 5000 + "1" + ")" * 5000), "<test>")
    parser.MAX_NESTING_DEPTH = 10**6
    with pytest.raises(ParserError) as excinfo:
        parser.parse()
    assert excinfo.value.message == "Program nested too deeply"
