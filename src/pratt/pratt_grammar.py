"""
Grammar capability interface consulted by the folding engine.

A grammar tells the engine what role each token plays and builds the output
nodes. It is the whole contract between the engine and a concrete language:
the engine never looks inside tokens or output values, it only threads them
between these calls.

Any state a grammar needs (error logs, symbol tables, nesting counters) lives
on the grammar instance itself. One instance is used by exactly one parse at
a time.

Classes:
    Grammar (Protocol): Five methods, see below. Any method may raise; the
        engine wraps the exception in `GrammarError` and aborts.

Example:
    >>> class Calc:
    ...     def classify(self, token): return Nilfix()
    ...     def build_operand(self, token): return int(token)
    ...     ...
    >>> fold_top_level(["1"], Calc())
    1
"""

from typing import Protocol, TypeVar

from pratt.pratt_affix import Affix

TokenT = TypeVar("TokenT", contravariant=True)
OutputT = TypeVar("OutputT")


class Grammar(Protocol[TokenT, OutputT]):  # pragma: no cover
    """Protocol for grammars driven by `fold`.

    Methods:
        classify(token): Role of `token` at this position. Returning `None`
            means "not an operator": the token is built as an operand where an
            operand is expected, and ends the expression elsewhere.
        build_operand(token): Leaf node for a nilfix token.
        build_prefix(op, operand): Unary prefix node.
        build_infix(left, op, right): Binary node.
        build_postfix(operand, op): Unary postfix node.
    """

    def classify(self, token: TokenT) -> Affix | None: ...  # pragma: no cover

    def build_operand(self, token: TokenT) -> OutputT: ...  # pragma: no cover

    def build_prefix(self, op: TokenT, operand: OutputT) -> OutputT: ...  # pragma: no cover

    def build_infix(
        self, left: OutputT, op: TokenT, right: OutputT
    ) -> OutputT: ...  # pragma: no cover

    def build_postfix(self, operand: OutputT, op: TokenT) -> OutputT: ...  # pragma: no cover


__all__ = ["Grammar", "OutputT", "TokenT"]
