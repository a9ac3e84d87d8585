"""
Pratt CLI Entrypoint.

This module provides the command-line interface for folding expressions with
the example expression grammar.

Features:
    - Read source from `.pratt` files or inline strings (anything else is inline).
    - Lex, fold and print the resulting expression tree.
    - Choose the output format: rendered tree, repr, or JSON.
    - Load a custom operator table from JSON.
    - Launch an interactive REPL with optional verbosity.

Example usage:
    pratt "1+2*3"
    pratt -s "-1?*!2^3+3/2?-1"
    pratt expr.pratt -f json
    pratt -s "a % b" --operators ops.json
    pratt --repl --verbose

Functions:
    run_pratt(source: str, is_string: bool = False, fmt: str = "tree",
              operators: str | None = None, strict: bool = True,
              verbose: bool = False) -> Expr:
        Executes the full pipeline (lex → token trees → fold → print).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action (REPL or parse).
"""

import argparse
import json
import sys

from pratt.pratt_ast import Expr
from pratt.pratt_errors import PrattError
from pratt.pratt_expr import ExprGrammar
from pratt.pratt_lexer import ExprSyntaxError, token_trees
from pratt.pratt_operators import OperatorTable, OperatorTableError

FORMATS = ("tree", "repr", "json")


def format_expr(expr: Expr, fmt: str = "tree") -> str:
    """Formats an expression tree for display ('tree', 'repr' or 'json')."""
    if fmt == "json":
        return json.dumps(expr.to_dict(), indent=2, ensure_ascii=False)
    if fmt == "repr":
        return repr(expr)
    return str(expr)


def load_table(operators: str | None = None) -> OperatorTable:
    """Returns the default operator table, extended from a JSON file if given."""
    table = OperatorTable.default()
    if operators:
        table.load_from_json(operators, override=True)
    return table


def run_pratt(
    source: str,
    is_string: bool = False,
    fmt: str = "tree",
    operators: str | None = None,
    strict: bool = True,
    verbose: bool = False,
) -> Expr:
    """
    Run the toolchain: lex, build token trees, fold, and print the result.

    Args:
        source (str): Expression source or path to a `.pratt` file.
        is_string (bool): If True, treats `source` as raw text instead of a file path.
        fmt (str): Output format, one of 'tree', 'repr', 'json'. Defaults to 'tree'.
        operators (str | None): Optional path to a JSON operator table.
        strict (bool): Reject input left over after the expression. Defaults to True.
        verbose (bool): Print the token trees before folding.

    Returns:
        Expr: The parsed expression.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.pratt'.
        ExprSyntaxError, PrattError, OperatorTableError: On invalid input.
    """
    if fmt not in FORMATS:
        raise ValueError(f"Unknown output format: {fmt!r}")
    if not is_string and not source.endswith(".pratt"):
        raise ValueError("Only .pratt files are supported.")
    # 1. Read source
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    # 2. Lexing
    table = load_table(operators)
    trees = token_trees(source, table)
    if verbose:
        print(f"[tokens] >>> {trees}")

    # 3. Folding
    expr = ExprGrammar(table).parse(trees, strict=strict)

    # 4. Output result
    print(format_expr(expr, fmt))
    return expr


def main() -> None:
    """
    Entry point for the Pratt CLI.

    Parses command-line arguments and dispatches to the appropriate mode:
    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise, parses the given source and prints the tree. A source ending
      in `.pratt` is read from disk; any other source is folded as inline text.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string even if it ends in `.pratt`.
        - `-f`, `--format`: Output format ('tree', 'repr', 'json'), default is 'tree'.
        - `--operators`: JSON file with extra or overriding operator definitions.
        - `--lenient`: Ignore input left over after the first full expression.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: Print token trees before folding.

    Exits with status 1 after printing `[error] >>> ...` to stderr when the
    input cannot be parsed.
    """
    if len(sys.argv) == 1:
        # No args passed: open REPL instead
        from pratt.pratt_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="pratt")
    parser.add_argument("source", nargs="?", help="A .pratt file or inline source")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "-f",
        "--format",
        dest="fmt",
        choices=FORMATS,
        default="tree",
        help="Output format (default: tree)",
    )
    parser.add_argument(
        "--operators", metavar="JSON", help="Load operator definitions from a JSON file"
    )
    parser.add_argument(
        "--lenient",
        action="store_true",
        help="Ignore input left over after the first full expression",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL instead of parsing",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Print token trees before folding"
    )

    args = parser.parse_args()

    if args.repl or args.source is None:
        from pratt.pratt_repl import start_repl

        start_repl(operators=args.operators, verbose=args.verbose)
        return

    try:
        run_pratt(
            source=args.source,
            is_string=args.string or not args.source.endswith(".pratt"),
            fmt=args.fmt,
            operators=args.operators,
            strict=not args.lenient,
            verbose=args.verbose,
        )
    except (ExprSyntaxError, PrattError, OperatorTableError, ValueError, OSError) as e:
        print(f"[error] >>> {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
