#!/usr/bin/env python3
"""
watc command line interface.

Exit codes:
    0  success
    1  compile error (diagnostics on stderr, no module text)
    2  usage or I/O error

Author: watc developers
"""

import argparse
import logging
import sys
from typing import List, Optional

from . import __version__
from .config import CompilerOptions
from .diagnostics import report_errors
from .lexer import Token
from .parser import dump_ast
from .pipeline import CompilationResult, compile_source

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_COMPILE_ERROR = 1
EXIT_IO_ERROR = 2

EMIT_CHOICES = ("wat", "ir", "tokens", "ast")


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="watc",
        description="Compile a watc source file to a WebAssembly text module",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    watc add.wc                     # Print the WAT module
    watc add.wc -o add.wat          # Write the WAT module to a file
    watc add.wc --emit ir           # Show the optimized IR
    watc broken.wc --recover        # Report every syntax error
        """
    )

    parser.add_argument('source', help='Source file to compile ("-" reads stdin)')
    parser.add_argument('-o', '--output', metavar='OUT',
                        help='Write output to OUT instead of stdout')
    parser.add_argument('--no-optimize', action='store_true',
                        help='Skip constant folding and dead-code elimination')
    parser.add_argument('--recover', action='store_true',
                        help='Report all lexical/syntax errors instead of only the first')
    parser.add_argument('--emit', choices=EMIT_CHOICES, default='wat',
                        help='Artifact to output (default: wat)')
    parser.add_argument('-v', '--verbose', action='count', default=0,
                        help='Increase log verbosity (-v info, -vv debug)')
    parser.add_argument('--version', action='version', version=f"%(prog)s {__version__}")

    return parser


def format_tokens(tokens: List[Token]) -> str:
    lines = []
    for token in tokens:
        lexeme = f" {token.lexeme}" if token.lexeme else ""
        lines.append(f"{token.location.line}:{token.location.column} {token.type.name}{lexeme}")
    return "\n".join(lines) + "\n"


def render_artifact(result: CompilationResult, emit: str) -> str:
    """Text for the requested artifact of a successful compilation."""
    if emit == "tokens":
        return format_tokens(result.tokens)
    if emit == "ast":
        return dump_ast(result.ast) + "\n"
    if emit == "ir":
        return str(result.ir)
    return result.wat


def _read_source(path: str) -> str:
    if path == "-":
        return sys.stdin.read()
    with open(path, 'r', encoding='utf-8') as f:
        return f.read()


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)

    try:
        options = CompilerOptions.from_env(filename="<stdin>" if args.source == "-" else args.source)
    except ValueError as e:
        parser.error(str(e))

    if args.no_optimize:
        options.optimize = False
    if args.recover:
        options.recover = True
    if args.verbose:
        options.log_level = "DEBUG" if args.verbose > 1 else "INFO"

    logging.basicConfig(
        level=options.log_level_value,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        source = _read_source(args.source)
    except (OSError, UnicodeDecodeError) as e:
        print(f"watc: error: cannot read {args.source}: {e}", file=sys.stderr)
        return EXIT_IO_ERROR

    result = compile_source(source, options)
    if result.has_errors():
        report_errors(result.errors)
        return EXIT_COMPILE_ERROR

    output = render_artifact(result, args.emit)

    if args.output:
        try:
            with open(args.output, 'w', encoding='utf-8') as f:
                f.write(output)
        except OSError as e:
            print(f"watc: error: cannot write {args.output}: {e}", file=sys.stderr)
            return EXIT_IO_ERROR
        logger.info("wrote %s", args.output)
    else:
        sys.stdout.write(output)

    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
