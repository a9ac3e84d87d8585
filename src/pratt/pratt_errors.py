"""
Error taxonomy raised by the Pratt folding engine.

Classes:
    PrattError: Base class for every failure surfaced by `fold`.
    UnexpectedEndOfInput: An operand was required but the stream was exhausted.
    UnexpectedOperator: An infix or postfix operator appeared in operand position.
    GrammarError: A grammar capability call failed; wraps the original exception.

The first error aborts the whole parse. Tokens consumed before the failure are
not put back into the stream.
"""

from typing import Any

from pratt.pratt_affix import Affix


class PrattError(Exception):
    """Base exception for the folding engine.

    Attributes:
        token (Any): The token the engine was looking at, if any.
    """

    def __init__(self, message: str, token: Any = None) -> None:
        super().__init__(message)
        self.token = token


class UnexpectedEndOfInput(PrattError):
    """Raised when an operand is required but no tokens remain."""

    def __init__(self, top_level: bool = False) -> None:
        if top_level:
            message = "Pratt parser was called with empty input."
        else:
            message = "Expected an operand, found end of input"
        super().__init__(message)
        self.top_level = top_level


class UnexpectedOperator(PrattError):
    """Raised when a token classified `Infix` or `Postfix` starts an operand.

    Attributes:
        token (Any): The offending token (already consumed).
        affix (Affix): Its classification.
    """

    def __init__(self, token: Any, affix: Affix) -> None:
        super().__init__(
            f"Expected Nilfix or Prefix, found {type(affix).__name__} {token!r}",
            token,
        )
        self.affix = affix


class GrammarError(PrattError):
    """Wraps an exception raised by a grammar capability call.

    The engine never interprets the wrapped error; it is reachable as
    `error` and as `__cause__`.

    Attributes:
        error (Exception): The exception raised by the grammar.
        token (Any): Token involved in the failing call, if any.
    """

    def __init__(self, error: Exception, token: Any = None) -> None:
        super().__init__(str(error), token)
        self.error = error


__all__ = ["GrammarError", "PrattError", "UnexpectedEndOfInput", "UnexpectedOperator"]
