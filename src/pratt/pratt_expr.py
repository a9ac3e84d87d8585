"""
Example grammar: arithmetic expressions over numbers and identifiers.

`ExprGrammar` implements the `Grammar` protocol over the token trees produced
by `pratt_lexer` and builds `Expr` nodes. Operator roles, precedences and node
names come from an `OperatorTable`, so the language can be reconfigured
without touching the engine.

Parenthesized groups are handled here, not in the engine: `build_operand` on
a `GROUP` token folds the group's children with a fresh engine call and
requires the whole group to be consumed.

Functions:
    parse_expression(source, table=None, strict=True) -> Expr
        Lex, fold and (in strict mode) reject trailing input.

Example:
    >>> str(parse_expression("1*2+3"))
    '(1 * 2) + 3'
    >>> parse_expression("1=2=3")
    Traceback (most recent call last):
    ...
    pratt.pratt_lexer.ExprSyntaxError: Unexpected trailing token '=' in input at line 1, col 4
    >>> str(parse_expression("1=2=3", strict=False))
    '1 = 2'
"""

from __future__ import annotations

from pratt.pratt_affix import Affix, Nilfix
from pratt.pratt_ast import Expr
from pratt.pratt_engine import TokenStream, fold_top_level
from pratt.pratt_lexer import ExprSyntaxError, Token, token_trees
from pratt.pratt_operators import OperatorTable

OPERAND_TYPES = {"NUMBER": "number", "FLOAT": "float", "IDENT": "ident"}

# where to look when a symbol's positional role has no entry in the table
FALLBACK_ROLES = {
    "PREFIX": ("prefix", "infix", "postfix"),
    "POSTFIX": ("postfix",),
    "INFIX": ("infix", "prefix"),
}


class ExprGrammar:
    """
    Grammar capability building `Expr` trees from token trees.

    Construction failures are recorded in `errors` before being raised, so a
    driver can report every problem a parse ran into. Use one instance per parse.

    Attributes:
        table (OperatorTable): Operator definitions.
        errors (list[str]): Messages of every failed grammar call.
    """

    def __init__(self, table: OperatorTable | None = None) -> None:
        self.table = table or OperatorTable.default()
        self.errors: list[str] = []

    def _fail(self, message: str) -> ExprSyntaxError:
        self.errors.append(message)
        return ExprSyntaxError(message)

    def _operator(self, token: Token) -> tuple[Affix, str] | None:
        for role in FALLBACK_ROLES.get(token.type, ()):
            found = self.table.lookup(role, token.text)
            if found is not None:
                return found
        return None

    def _node_name(self, role: str, token: Token) -> str:
        found = self.table.lookup(role, token.text)
        if found is None:
            raise self._fail(
                f"'{token.text}' is not a {role} operator (line {token.line}, col {token.col})"
            )
        return found[1]

    def classify(self, token: Token) -> Affix:
        if token.type in OPERAND_TYPES or token.type == "GROUP":
            return Nilfix()
        if token.type not in FALLBACK_ROLES:
            raise self._fail(f"Unexpected token {token!r}")
        found = self._operator(token)
        if found is None:
            raise self._fail(
                f"Unknown operator '{token.text}' at line {token.line}, col {token.col}"
            )
        return found[0]

    def build_operand(self, token: Token) -> Expr:
        if token.type == "GROUP":
            assert isinstance(token.value, list)
            return self.parse(token.value, strict=True, where="group")
        if token.type not in OPERAND_TYPES:
            raise self._fail(f"Expected an operand, found {token!r}")
        assert isinstance(token.value, str)
        return Expr.leaf(OPERAND_TYPES[token.type], token.value, token.line, token.col)

    def build_prefix(self, op: Token, operand: Expr) -> Expr:
        return Expr.unary(
            self._node_name("prefix", op), operand, op.text, op.line, op.col
        )

    def build_infix(self, left: Expr, op: Token, right: Expr) -> Expr:
        return Expr.binary(
            left, self._node_name("infix", op), right, op.text, op.line, op.col
        )

    def build_postfix(self, operand: Expr, op: Token) -> Expr:
        return Expr.unary(
            self._node_name("postfix", op), operand, op.text, op.line, op.col
        )

    def parse(self, trees: list[Token], strict: bool = True, where: str = "input") -> Expr:
        """
        Folds a list of token trees into one expression.

        Args:
            trees: Token trees, e.g. from `token_trees()` or a group's children.
            strict: Reject tokens left over after the expression.
            where: Used in the trailing-input message ("input" or "group").

        Returns:
            Expr: The folded expression.

        Raises:
            ExprSyntaxError: In strict mode, if tokens are left over.
            PrattError: If the engine or a grammar call fails.
        """
        stream = TokenStream(trees)
        expr = fold_top_level(stream, self)
        if strict and not stream.end_of_file():
            tok = stream.peek()
            assert tok is not None
            raise self._fail(
                f"Unexpected trailing token '{tok.text}' in {where} at line {tok.line}, col {tok.col}"
            )
        return expr


def parse_expression(
    source: str, table: OperatorTable | None = None, strict: bool = True
) -> Expr:
    """
    Parses expression source text into an `Expr` tree.

    Args:
        source (str): Expression text, e.g. `"-1? * !2^3"`.
        table (OperatorTable, optional): Operator set; defaults to `OperatorTable.default()`.
        strict (bool): If True, text left over after one full expression is an error.
            If False it is silently ignored.

    Returns:
        Expr: The root of the expression tree.

    Raises:
        ExprSyntaxError: On lexing errors, unbalanced parentheses, or trailing input.
        PrattError: On engine failures (`UnexpectedEndOfInput`, `UnexpectedOperator`,
            `GrammarError`).
    """
    grammar = ExprGrammar(table)
    return grammar.parse(token_trees(source, grammar.table), strict=strict)


__all__ = ["ExprGrammar", "parse_expression"]
