"""
Pratt expression folding engine.

Folds a flat sequence of opaque tokens into one output value, consulting a
`Grammar` for each token's operator role and for node construction. The
algorithm is top-down operator precedence ("Pratt") parsing generalized to
prefix, postfix and non-associative infix operators, with one token of
lookahead and no backtracking.

Algorithm
---------
`fold(tokens, grammar, min_bp)`:

1. Pull one token and build the left operand:
    * nilfix (or unclassified) -> `build_operand`
    * `Prefix(p)` -> fold the operand with `min_bp = p`, then `build_prefix`
    * infix/postfix -> `UnexpectedOperator`
2. While the next token is an operator whose precedence is at least `min_bp`:
    * `Postfix(p)` -> `build_postfix` and keep looping
    * `Infix(p, LEFT)` -> right operand folded with `p + 1`, keep looping
    * `Infix(p, RIGHT)` -> right operand folded with `p`, keep looping
    * `Infix(p, NEITHER)` -> right operand folded with `p + 1`, then return
      at once, so `a = b = c` stops after `a = b`.

Anything that is not consumed (a nilfix or prefix token in operator position,
a weaker operator, the tail after a non-associative operator) stays in the
stream for the caller. Trailing tokens after a successful parse are not an
error here; callers that need the whole input consumed check
`TokenStream.end_of_file()` themselves.

Grouping is not special-cased: a grammar that sees a group token folds the
group's contents with a fresh call and returns the result from
`build_operand`.

Recursion depth equals expression nesting depth.

Entry Points
------------
- `fold()`: fold with an explicit minimum binding power.
- `fold_top_level()`: fold one maximal expression from the start of the input.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator
from typing import Any, Generic, TypeVar

from pratt.pratt_affix import (
    MIN_BINDING_POWER,
    Affix,
    Associativity,
    Infix,
    Postfix,
    Prefix,
)
from pratt.pratt_errors import (
    GrammarError,
    PrattError,
    UnexpectedEndOfInput,
    UnexpectedOperator,
)
from pratt.pratt_grammar import Grammar

T = TypeVar("T")
O = TypeVar("O")


class TokenStream(Generic[T]):
    """
    Forward-only token sequence with one token of lookahead.

    Wraps any iterable. Tokens are pulled lazily, at most one is buffered by
    `peek()`, and nothing is ever pushed back.

    Attributes:
        consumed (int): Number of tokens handed out by `next()` so far.
    """

    def __init__(self, tokens: Iterable[T]) -> None:
        self._source: Iterator[T] = iter(tokens)
        self._lookahead: list[T] = []
        self.consumed: int = 0

    def _fill(self) -> bool:
        if self._lookahead:
            return True
        for token in self._source:
            self._lookahead.append(token)
            return True
        return False

    def end_of_file(self) -> bool:
        """Checks whether every token has been consumed.

        Returns:
            bool: True if no tokens remain.
        """
        return not self._fill()

    def peek(self) -> T | None:
        """Returns the next token without consuming it, or None at the end."""
        if not self._fill():
            return None
        return self._lookahead[0]

    def next(self) -> T:
        """
        Consumes and returns the next token.

        Returns:
            T: The next token.

        Raises:
            StopIteration: If the stream is exhausted.
        """
        if not self._fill():
            raise StopIteration(
                f"TokenStream exhausted after {self.consumed} token(s)"
            )
        self.consumed += 1
        return self._lookahead.pop()

    def remaining(self) -> list[T]:
        """Consumes and returns every token left in the stream."""
        return list(self)

    def __iter__(self) -> TokenStream[T]:
        return self

    def __next__(self) -> T:
        return self.next()

    def __repr__(self) -> str:
        state = "exhausted" if self.end_of_file() else f"next={self.peek()!r}"
        return f"TokenStream(consumed={self.consumed}, {state})"


def _call_grammar(method: Callable[..., Any], token: Any, *args: Any) -> Any:
    # nested fold() failures and stack exhaustion keep their own type
    try:
        return method(*args)
    except (PrattError, RecursionError):
        raise
    except Exception as e:
        raise GrammarError(e, token) from e


def _classify(grammar: Grammar[T, O], token: T) -> Affix | None:
    affix = _call_grammar(grammar.classify, token, token)
    if affix is not None and not isinstance(affix, Affix):
        error = TypeError(f"classify() must return an Affix or None, got {affix!r}")
        raise GrammarError(error, token) from error
    return affix


def fold(
    tokens: TokenStream[T],
    grammar: Grammar[T, O],
    min_bp: float = MIN_BINDING_POWER,
) -> O:
    """
    Folds the longest expression whose operators all bind at least `min_bp`.

    Args:
        tokens: The stream to pull from. Left positioned on the first token
            that was not part of the expression.
        grammar: Classifies tokens and builds output nodes.
        min_bp: Minimum binding power an operator needs to be consumed here.

    Returns:
        The output value built by the grammar.

    Raises:
        UnexpectedEndOfInput: If an operand is needed and the stream is empty.
        UnexpectedOperator: If an infix or postfix operator starts an operand.
        GrammarError: If a grammar call raises anything but a `PrattError`
            or `RecursionError`.
    """
    if tokens.end_of_file():
        raise UnexpectedEndOfInput(top_level=min_bp == MIN_BINDING_POWER)

    # 1. Left operand
    head = tokens.next()
    affix = _classify(grammar, head)
    lhs: O
    if affix is None or not affix.is_operator:
        lhs = _call_grammar(grammar.build_operand, head, head)
    elif isinstance(affix, Prefix):
        assert affix.precedence is not None
        operand = fold(tokens, grammar, affix.precedence)
        lhs = _call_grammar(grammar.build_prefix, head, head, operand)
    else:
        raise UnexpectedOperator(head, affix)

    # 2. Postfix and infix applications
    while not tokens.end_of_file():
        head = tokens.peek()  # type: ignore[assignment]
        affix = _classify(grammar, head)
        if not isinstance(affix, (Postfix, Infix)):
            break
        assert affix.precedence is not None
        if affix.precedence < min_bp:
            break
        tokens.next()

        if isinstance(affix, Postfix):
            lhs = _call_grammar(grammar.build_postfix, head, lhs, head)
            continue

        rhs = fold(tokens, grammar, affix.right_binding_power())
        lhs = _call_grammar(grammar.build_infix, head, lhs, head, rhs)
        if affix.associativity is Associativity.NEITHER:
            return lhs

    return lhs


def fold_top_level(tokens: Iterable[T], grammar: Grammar[T, O]) -> O:
    """
    Folds one maximal expression from the start of `tokens`.

    Pass a `TokenStream` to inspect the unconsumed remainder afterwards; any
    other iterable is wrapped and its remainder is not reachable.

    Args:
        tokens: A `TokenStream` or any iterable of tokens.
        grammar: Classifies tokens and builds output nodes.

    Returns:
        The output value built by the grammar.
    """
    stream = tokens if isinstance(tokens, TokenStream) else TokenStream(tokens)
    return fold(stream, grammar, MIN_BINDING_POWER)


__all__ = ["TokenStream", "fold", "fold_top_level"]
