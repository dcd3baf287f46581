"""
Test suite for the watc parser.

Tests cover:
- Function definitions, parameters and type annotations
- Statements and optional semicolons
- Operator precedence and associativity
- Syntax error positions and messages
- Error recovery

Author: watc developers
"""

import tempfile
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from watc.lexer import tokenize_string, TokenType
from watc.parser import (
    Parser, parse_string, parse_file, dump_ast, FunctionDef, LetStatement, ReturnStatement,
    ExpressionStatement, NumberLiteral, StringLiteral, Identifier, BinaryOp,
    FunctionCall,
)
from watc.diagnostics import ParseError


def parse_expr(expr_source: str):
    """Parse ``expr_source`` as the value of a return statement."""
    program = parse_string(f"fn f() {{ return {expr_source}; }}")
    return program.functions[0].body[0].value


def shape(expr):
    """Compact nested-tuple view of an expression tree."""
    if isinstance(expr, NumberLiteral):
        return expr.value
    if isinstance(expr, Identifier):
        return expr.name
    if isinstance(expr, BinaryOp):
        return (expr.operator, shape(expr.left), shape(expr.right))
    if isinstance(expr, FunctionCall):
        return ("call", expr.name, [shape(a) for a in expr.args])
    return expr


class TestParser(unittest.TestCase):
    """Test cases for successful parses."""

    def test_function_definition(self):
        program = parse_string("fn add(a: int, b: int) -> int { return a + b; }")

        self.assertEqual(len(program.functions), 1)
        func = program.functions[0]
        self.assertIsInstance(func, FunctionDef)
        self.assertEqual(func.name, "add")
        self.assertEqual([p.name for p in func.params], ["a", "b"])
        self.assertEqual([p.type_annotation.name for p in func.params], ["int", "int"])
        self.assertEqual(func.return_type.name, "int")

        self.assertEqual(len(func.body), 1)
        self.assertIsInstance(func.body[0], ReturnStatement)
        self.assertEqual(shape(func.body[0].value), ("+", "a", "b"))

    def test_function_without_params_or_return_type(self):
        func = parse_string("fn main() {}").functions[0]
        self.assertEqual(func.params, [])
        self.assertIsNone(func.return_type)
        self.assertEqual(func.body, [])

    def test_untyped_parameters(self):
        func = parse_string("fn f(x, y) { }").functions[0]
        self.assertEqual([p.name for p in func.params], ["x", "y"])
        self.assertTrue(all(p.type_annotation is None for p in func.params))

    def test_multiple_functions_keep_order(self):
        program = parse_string("fn a() {} fn b() {} fn c() {}")
        self.assertEqual([f.name for f in program.functions], ["a", "b", "c"])

    def test_statements(self):
        func = parse_string("""
        fn main() -> int {
            let x: int = 1;
            let y = x * 2;
            print(y);
            return;
        }
        """).functions[0]

        self.assertEqual(
            [type(s) for s in func.body],
            [LetStatement, LetStatement, ExpressionStatement, ReturnStatement],
        )
        self.assertEqual(func.body[0].name, "x")
        self.assertEqual(func.body[0].type_annotation.name, "int")
        self.assertIsNone(func.body[1].type_annotation)
        self.assertEqual(shape(func.body[2].expression), ("call", "print", ["y"]))
        self.assertIsNone(func.body[3].value)

    def test_semicolons_are_optional(self):
        func = parse_string("fn f() { let x = 1 let y = 2 return x + y }").functions[0]
        self.assertEqual(len(func.body), 3)

    def test_precedence(self):
        self.assertEqual(shape(parse_expr("2 + 3 * 4")), ("+", 2, ("*", 3, 4)))
        self.assertEqual(shape(parse_expr("2 * 3 + 4")), ("+", ("*", 2, 3), 4))
        self.assertEqual(shape(parse_expr("(2 + 3) * 4")), ("*", ("+", 2, 3), 4))
        self.assertEqual(shape(parse_expr("a % b - c")), ("-", ("%", "a", "b"), "c"))

    def test_left_associativity(self):
        self.assertEqual(shape(parse_expr("1 - 2 - 3")), ("-", ("-", 1, 2), 3))
        self.assertEqual(shape(parse_expr("8 / 4 / 2")), ("/", ("/", 8, 4), 2))

    def test_comparison_binds_loosest(self):
        self.assertEqual(shape(parse_expr("a < b + 1")), ("<", "a", ("+", "b", 1)))
        self.assertEqual(shape(parse_expr("a * 2 == b")), ("==", ("*", "a", 2), "b"))

    def test_calls(self):
        self.assertEqual(shape(parse_expr("f()")), ("call", "f", []))
        self.assertEqual(
            shape(parse_expr("add(1, x * 2, g(y))")),
            ("call", "add", [1, ("*", "x", 2), ("call", "g", ["y"])]),
        )

    def test_string_literal_expression(self):
        value = parse_expr('"hi"')
        self.assertIsInstance(value, StringLiteral)
        self.assertEqual(value.value, "hi")

    def test_spans_point_at_source(self):
        func = parse_string("fn f() {\n  return 1 + 22;\n}").functions[0]
        ret = func.body[0]
        self.assertEqual((ret.span.start.line, ret.span.start.column), (2, 3))
        right = ret.value.right
        self.assertEqual((right.span.start.line, right.span.start.column), (2, 14))

    def test_long_operator_chain(self):
        source = "fn f() -> int { return " + " + ".join(["1"] * 2000) + "; }"
        value = parse_string(source).functions[0].body[0].value
        self.assertIsInstance(value, BinaryOp)

    def test_parser_stops_at_eof(self):
        tokens = tokenize_string("fn f() { return 1; }")
        parser = Parser(tokens)
        parser.parse()
        self.assertEqual(parser.current, len(tokens) - 1)
        self.assertEqual(tokens[parser.current].type, TokenType.EOF)

    def test_requires_eof_terminated_stream(self):
        with self.assertRaises(ValueError):
            Parser([])

    def test_walk_visits_every_node(self):
        program = parse_string("fn f(a: int) { let b = a * g(a, 2); }")
        names = [n.name for n in program.walk() if isinstance(n, Identifier)]
        self.assertEqual(names, ["a", "a"])
        self.assertEqual(sum(isinstance(n, NumberLiteral) for n in program.walk()), 1)

    def test_parse_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "main.wc")
            with open(path, "w", encoding="utf-8") as f:
                f.write("fn main() -> int { return 0; }\n")

            program = parse_file(path)

        self.assertEqual(program.functions[0].name, "main")
        self.assertEqual(program.functions[0].span.start.filename, path)

    def test_dump_ast(self):
        program = parse_string("fn add(a: int, b) -> int { let c = a + b; return c; }")
        self.assertEqual(
            dump_ast(program),
            "Program\n"
            "  FunctionDef add(a: int, b) -> int\n"
            "    Let c\n"
            "      BinaryOp +\n"
            "        Identifier a\n"
            "        Identifier b\n"
            "    Return\n"
            "      Identifier c",
        )


class TestParserErrors(unittest.TestCase):
    """Test cases for syntax errors in fail-fast mode."""

    def assertParseError(self, source: str):
        with self.assertRaises(ParseError) as cm:
            parse_string(source)
        return cm.exception

    def test_number_as_function_name(self):
        error = self.assertParseError("fn 123 {}")
        self.assertEqual((error.line, error.column), (1, 4))
        self.assertIn("function name", error.message)
        self.assertEqual(error.message, "Expected function name, found number '123'")
        self.assertEqual(error.code, "P001")
        self.assertEqual(error.token.lexeme, "123")

    def test_top_level_statement(self):
        error = self.assertParseError("let x = 1;")
        self.assertEqual(error.message, "Expected function definition ('fn'), found keyword 'let'")

    def test_misspelled_keyword_suggestion(self):
        error = self.assertParseError("fun main() {}")
        self.assertEqual(error.help_text, "Did you mean 'fn'?")

    def test_missing_closing_brace(self):
        error = self.assertParseError("fn f() { return 1;")
        self.assertEqual(error.code, "P010")
        self.assertIn("Unexpected end of input", error.message)

    def test_missing_initializer(self):
        error = self.assertParseError("fn f() { let x; }")
        self.assertEqual(error.message, "Expected '=' after variable name, found ';'")
        self.assertEqual(error.column, 15)

    def test_invalid_expression(self):
        error = self.assertParseError("fn f() { return 1 + ; }")
        self.assertEqual(error.code, "P005")
        self.assertEqual(error.message, "Expected expression, found ';'")

    def test_comparison_is_not_chained(self):
        error = self.assertParseError("fn f() { return a < b < c; }")
        self.assertEqual(error.message, "Expected expression, found operator '<'")

    def test_unclosed_parenthesis(self):
        error = self.assertParseError("fn f() { return (1 + 2; }")
        self.assertIn("')'", error.message)
        self.assertEqual(error.help_text, "Add a closing parenthesis ')'")

    def test_nesting_limit(self):
        source = "fn f() { return " + "(" * 150 + "1" + ")" * 150 + "; }"
        error = self.assertParseError(source)
        self.assertEqual(error.code, "P011")

    def test_first_error_only(self):
        error = self.assertParseError("fn 1() {} fn 2() {}")
        self.assertEqual(error.column, 4)


class TestParserRecovery(unittest.TestCase):
    """Test cases for parse_with_recovery."""

    def parse(self, source: str):
        return Parser(tokenize_string(source)).parse_with_recovery()

    def test_valid_program_has_no_errors(self):
        program, errors = self.parse("fn f() { return 1; }")
        self.assertEqual(errors, [])
        self.assertEqual(len(program.functions), 1)

    def test_collects_errors_in_order(self):
        source = (
            "fn a() { let = 1; return 2; }\n"
            "fn 5() {}\n"
            "fn ok() { return 1; }\n"
        )
        program, errors = self.parse(source)

        self.assertEqual(len(errors), 2)
        self.assertEqual([e.line for e in errors], [1, 2])
        self.assertIn("variable name", errors[0].message)
        self.assertIn("function name", errors[1].message)
        self.assertEqual([f.name for f in program.functions], ["a", "ok"])
        self.assertEqual(len(program.functions[0].body), 1)

    def test_multiple_errors_in_one_body(self):
        source = "fn f() {\n  let = 1;\n  let z = +;\n  let y = 2;\n}"
        program, errors = self.parse(source)

        self.assertEqual([e.line for e in errors], [2, 3])
        self.assertEqual([type(s) for s in program.functions[0].body], [LetStatement])

    def test_recovery_terminates_at_eof(self):
        program, errors = self.parse("fn f() { let x = ")
        self.assertEqual(len(errors), 2)
        self.assertEqual(errors[0].code, "P010")

    def test_parse_resets_recovery_flag(self):
        parser = Parser(tokenize_string("fn 1() {}"))
        parser.parse_with_recovery()
        with self.assertRaises(ParseError):
            parser.parse()


if __name__ == '__main__':
    unittest.main()
