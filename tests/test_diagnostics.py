"""
Tests for compile errors and diagnostic rendering.

Author: watc developers
"""

import dataclasses
import io
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from watc.lexer import SourceLocation
from watc.diagnostics import (
    CompileError, LexError, ParseError, FoldError, CodegenError, LoweringError,
    format_error, format_errors, report_errors,
)


def loc(line: int, column: int) -> SourceLocation:
    return SourceLocation("<string>", line, column, 0)


class TestCompileError(unittest.TestCase):
    """Test cases for the error hierarchy."""

    def test_hierarchy(self):
        for cls in (LexError, ParseError, LoweringError, FoldError, CodegenError):
            with self.subTest(cls=cls.__name__):
                self.assertTrue(issubclass(cls, CompileError))
                self.assertTrue(issubclass(cls, Exception))

    def test_position_accessors(self):
        error = LexError("Invalid character '@'", loc(3, 7), code="L001")
        self.assertEqual(error.message, "Invalid character '@'")
        self.assertEqual(error.line, 3)
        self.assertEqual(error.column, 7)
        self.assertEqual(error.code, "L001")
        self.assertIsNone(error.help_text)

    def test_without_position(self):
        error = FoldError("Division by zero in constant expression", function="f")
        self.assertIsNone(error.location)
        self.assertIsNone(error.line)
        self.assertEqual(error.function, "f")

    def test_with_help_returns_same_error(self):
        error = ParseError("Expected '}'", loc(1, 1))
        original = error.diagnostic

        result = error.with_help("Add a closing brace '}'")

        self.assertIs(result, error)
        self.assertEqual(error.help_text, "Add a closing brace '}'")
        self.assertIsNone(original.help_text)

    def test_diagnostic_is_immutable(self):
        error = LexError("Unterminated string literal", loc(1, 1))
        with self.assertRaises(dataclasses.FrozenInstanceError):
            error.diagnostic.message = "changed"


class TestRendering(unittest.TestCase):
    """Test cases for the diagnostic block format."""

    def test_render_with_location_and_help(self):
        error = ParseError(
            "Expected function name, found number '123'", loc(1, 4),
            code="P001", help_text="Function names must be valid identifiers",
        )
        self.assertEqual(
            format_error(error),
            "Error[P001]: Expected function name, found number '123'\n"
            " → line 1, column 4\n"
            " Help: Function names must be valid identifiers",
        )

    def test_render_without_code_or_help(self):
        error = LexError("Invalid character '@'", loc(2, 5))
        self.assertEqual(str(error), "Error: Invalid character '@'\n → line 2, column 5")

    def test_render_function_when_no_location(self):
        error = CodegenError("Cannot generate WebAssembly for IR instruction 'jump l'", function="main")
        self.assertEqual(
            format_error(error),
            "Error: Cannot generate WebAssembly for IR instruction 'jump l'\n"
            " → in function 'main'",
        )

    def test_format_errors_keeps_order(self):
        first = LexError("first", loc(1, 1))
        second = LexError("second", loc(2, 1))
        rendered = format_errors([first, second])
        self.assertEqual(rendered, format_error(first) + "\n\n" + format_error(second))
        self.assertLess(rendered.index("first"), rendered.index("second"))

    def test_report_errors_writes_to_stream(self):
        stream = io.StringIO()
        count = report_errors([LexError("bad", loc(1, 2))], stream)

        self.assertEqual(count, 1)
        self.assertEqual(stream.getvalue(), "Error: bad\n → line 1, column 2\n")

    def test_report_nothing(self):
        stream = io.StringIO()
        self.assertEqual(report_errors([], stream), 0)
        self.assertEqual(stream.getvalue(), "")


if __name__ == '__main__':
    unittest.main()
