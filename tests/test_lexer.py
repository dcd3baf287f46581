"""
Test suite for the watc lexer.

Tests cover:
- Token kinds, lexemes and literal values
- Line/column tracking
- Comments and whitespace
- Lexical error reporting and recovery

Author: watc developers
"""

import tempfile
import unittest
import sys
import os

# Add the project root to the Python path
project_root = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
sys.path.insert(0, project_root)

from watc.lexer import Lexer, TokenType, tokenize_string, tokenize_file
from watc.diagnostics import LexError


def token_types(source: str):
    return [t.type for t in tokenize_string(source)]


class TestLexer(unittest.TestCase):
    """Test cases for the lexer."""

    def test_empty_source_yields_only_eof(self):
        tokens = tokenize_string("")
        self.assertEqual(len(tokens), 1)
        self.assertEqual(tokens[0].type, TokenType.EOF)
        self.assertEqual((tokens[0].location.line, tokens[0].location.column), (1, 1))

    def test_function_definition(self):
        """Test tokenizing a complete function."""
        self.assertEqual(
            token_types("fn add(a: int) -> int { return a + 1; }"),
            [
                TokenType.FN, TokenType.IDENTIFIER, TokenType.LEFT_PAREN,
                TokenType.IDENTIFIER, TokenType.COLON, TokenType.IDENTIFIER,
                TokenType.RIGHT_PAREN, TokenType.ARROW, TokenType.IDENTIFIER,
                TokenType.LEFT_BRACE, TokenType.RETURN, TokenType.IDENTIFIER,
                TokenType.PLUS, TokenType.INTEGER, TokenType.SEMICOLON,
                TokenType.RIGHT_BRACE, TokenType.EOF,
            ],
        )

    def test_keywords_and_identifiers(self):
        tokens = tokenize_string("fn let return fnord _tmp x1")
        self.assertEqual(
            [t.type for t in tokens[:-1]],
            [TokenType.FN, TokenType.LET, TokenType.RETURN,
             TokenType.IDENTIFIER, TokenType.IDENTIFIER, TokenType.IDENTIFIER],
        )
        self.assertEqual(tokens[3].lexeme, "fnord")

    def test_longest_operator_match(self):
        self.assertEqual(
            token_types("a<=b==c->d!=e>=f<g>h=i%j"),
            [
                TokenType.IDENTIFIER, TokenType.LESS_EQUAL, TokenType.IDENTIFIER,
                TokenType.EQUAL, TokenType.IDENTIFIER, TokenType.ARROW,
                TokenType.IDENTIFIER, TokenType.NOT_EQUAL, TokenType.IDENTIFIER,
                TokenType.GREATER_EQUAL, TokenType.IDENTIFIER, TokenType.LESS_THAN,
                TokenType.IDENTIFIER, TokenType.GREATER_THAN, TokenType.IDENTIFIER,
                TokenType.ASSIGN, TokenType.IDENTIFIER, TokenType.MODULO,
                TokenType.IDENTIFIER, TokenType.EOF,
            ],
        )

    def test_integer_literals(self):
        tokens = tokenize_string("0 42 9223372036854775807")
        self.assertEqual([t.value for t in tokens[:-1]], [0, 42, 9223372036854775807])
        self.assertEqual(tokens[1].lexeme, "42")

    def test_integer_out_of_range(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string("let x = 9223372036854775808")
        self.assertEqual(cm.exception.code, "L003")
        self.assertEqual(cm.exception.column, 9)

    def test_string_literal_with_escapes(self):
        tokens = tokenize_string('"a\\nb\\t\\"c\\"\\\\"')
        self.assertEqual(tokens[0].type, TokenType.STRING)
        self.assertEqual(tokens[0].value, 'a\nb\t"c"\\')

    def test_unterminated_string(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string('let s = "abc\nreturn')
        error = cm.exception
        self.assertEqual(error.code, "L002")
        self.assertEqual((error.line, error.column), (1, 9))

    def test_invalid_escape(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string('"bad \\q"')
        self.assertEqual(cm.exception.code, "L005")
        self.assertIn("\\q", cm.exception.message)

    def test_scanning_resumes_after_invalid_escape(self):
        lexer = Lexer('"a\\q b\\z" @ x')
        tokens = lexer.tokenize()

        self.assertEqual([(e.code, e.column) for e in lexer.errors],
                         [("L005", 3), ("L005", 7), ("L001", 11)])
        self.assertEqual([t.type for t in tokens],
                         [TokenType.STRING, TokenType.IDENTIFIER, TokenType.EOF])
        self.assertEqual(tokens[1].lexeme, "x")

    def test_backslash_before_end_of_input(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string('"abc\\')
        self.assertEqual(cm.exception.code, "L002")

    def test_line_and_column_tracking(self):
        tokens = tokenize_string("fn\n  main\n\n    (")
        locations = [(t.location.line, t.location.column) for t in tokens]
        self.assertEqual(locations, [(1, 1), (2, 3), (4, 5), (4, 6)])
        self.assertEqual(tokens[1].location.offset, 5)

    def test_comments_are_skipped(self):
        source = """
        // line comment
        fn /* inline */ main() {
            /* multi
               line */
            return 1; // trailing
        }
        """
        self.assertEqual(
            token_types(source),
            [
                TokenType.FN, TokenType.IDENTIFIER, TokenType.LEFT_PAREN,
                TokenType.RIGHT_PAREN, TokenType.LEFT_BRACE, TokenType.RETURN,
                TokenType.INTEGER, TokenType.SEMICOLON, TokenType.RIGHT_BRACE,
                TokenType.EOF,
            ],
        )

    def test_unterminated_block_comment(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string("fn main() { /* never closed")
        self.assertEqual(cm.exception.code, "L004")
        self.assertEqual(cm.exception.column, 13)

    def test_invalid_character(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string("let x = 1 @ 2")
        error = cm.exception
        self.assertEqual(error.code, "L001")
        self.assertEqual((error.line, error.column), (1, 11))
        self.assertIn("'@'", error.message)

    def test_invalid_character_suggestion(self):
        with self.assertRaises(LexError) as cm:
            tokenize_string("a ! b")
        self.assertIn("'!='", cm.exception.help_text)

    def test_non_ascii_digits_are_rejected(self):
        with self.assertRaises(LexError):
            tokenize_string("return 2²")

    def test_lexer_collects_all_errors(self):
        """The lexer keeps scanning after an error."""
        lexer = Lexer("fn @ main # () $")
        tokens = lexer.tokenize()

        self.assertTrue(lexer.has_errors())
        self.assertEqual(len(lexer.errors), 3)
        self.assertEqual([e.column for e in lexer.errors], [4, 11, 16])
        self.assertEqual(
            [t.type for t in tokens],
            [TokenType.FN, TokenType.IDENTIFIER, TokenType.LEFT_PAREN,
             TokenType.RIGHT_PAREN, TokenType.EOF],
        )

    def test_tokenize_resets_state(self):
        lexer = Lexer("fn main ( )")
        first = lexer.tokenize()
        second = lexer.tokenize()
        self.assertEqual(first, second)

    def test_token_stream_always_ends_in_eof(self):
        for source in ["", "   ", "fn", "@@@", '"open', "/* open", "1 2 3"]:
            with self.subTest(source=source):
                tokens = Lexer(source).tokenize()
                self.assertEqual(tokens[-1].type, TokenType.EOF)
                self.assertEqual(sum(t.type == TokenType.EOF for t in tokens), 1)

    def test_token_categories(self):
        number, string, keyword, operator, paren, name = tokenize_string('1 "s" let -> ( x')[:6]
        self.assertTrue(number.is_literal and string.is_literal)
        self.assertTrue(keyword.is_keyword)
        self.assertTrue(operator.is_operator)
        self.assertFalse(paren.is_operator or paren.is_literal or paren.is_keyword)
        self.assertFalse(name.is_keyword)

    def test_tokenize_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "main.wc")
            with open(path, "w", encoding="utf-8") as f:
                f.write("fn main() {}\n")

            tokens = tokenize_file(path)

        self.assertEqual(tokens[0].location.filename, path)
        self.assertEqual(tokens[-1].location.line, 2)

    def test_token_descriptions(self):
        tokens = tokenize_string('123 "s" name fn + ( ')
        self.assertEqual(
            [t.describe() for t in tokens],
            ["number '123'", "string literal", "identifier 'name'",
             "keyword 'fn'", "operator '+'", "'('", "end of input"],
        )


if __name__ == '__main__':
    unittest.main()
