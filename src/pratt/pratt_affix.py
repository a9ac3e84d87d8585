"""
Operator descriptors for the Pratt folding engine.

This module defines the value types that describe how a single token behaves
when the engine meets it: whether it is a plain operand or an operator, which
side(s) it takes operands from, how tightly it binds, and how two adjacent
infix operators of equal strength combine.

Classes:
    Associativity: Tie-break rule for equal-precedence infix operators.
    Affix: Base class of the four operator roles.
    Nilfix: The token is a plain operand.
    Prefix: Unary operator written before its operand.
    Postfix: Unary operator written after its operand.
    Infix: Binary operator written between its operands.

Precedence is a plain `int`; higher binds tighter and only the relative order
between operators matters.

Example:
    >>> Infix(3, Associativity.LEFT)
    Infix(3, left)
"""

from enum import Enum
from typing import Any

Precedence = int
"""Alias for an operator's binding strength (higher binds tighter)."""

MIN_BINDING_POWER: float = float("-inf")
"""Lowest possible minimum binding power; every operator meets it."""


def _check_precedence(precedence: Any) -> Precedence:
    # bool is an int subclass but never a meaningful precedence
    if isinstance(precedence, bool) or not isinstance(precedence, int):
        raise TypeError(f"Precedence must be an int, got {precedence!r}")
    return precedence


class Associativity(Enum):
    """How two adjacent infix operators of equal precedence combine.

    Members:
        LEFT: `a - b - c` folds as `(a - b) - c`.
        RIGHT: `a ^ b ^ c` folds as `a ^ (b ^ c)`.
        NEITHER: the operator combines its operands once; a second one at
            the same level is left unconsumed for the caller.
    """

    LEFT = "left"
    RIGHT = "right"
    NEITHER = "neither"


class Affix:
    """Positional role of a token for the current parse.

    Subclasses carry the data each role needs. Instances are immutable by
    convention and compare by value, so they can be used as dictionary keys
    and in test assertions.

    Attributes:
        kind (str): Role name ("nilfix", "prefix", "postfix", "infix").
        precedence (Precedence | None): Binding strength, `None` for nilfix.
        associativity (Associativity | None): Only set for infix operators.
    """

    kind = "affix"

    def __init__(
        self,
        precedence: Precedence | None = None,
        associativity: Associativity | None = None,
    ) -> None:
        self.precedence = precedence
        self.associativity = associativity

    @property
    def is_operator(self) -> bool:
        return self.kind != Nilfix.kind

    def __repr__(self) -> str:
        parts: list[str] = []
        if self.precedence is not None:
            parts.append(str(self.precedence))
        if self.associativity is not None:
            parts.append(self.associativity.value)
        return f"{type(self).__name__}({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Affix)
            and self.kind == other.kind
            and self.precedence == other.precedence
            and self.associativity == other.associativity
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.precedence, self.associativity))


class Nilfix(Affix):
    """A plain operand (number, identifier, parenthesized group)."""

    kind = "nilfix"

    def __init__(self) -> None:
        super().__init__()


class Prefix(Affix):
    """Unary operator before its operand, e.g. `-x`.

    The precedence is the minimum binding power used for the operand only.
    """

    kind = "prefix"

    def __init__(self, precedence: Precedence) -> None:
        super().__init__(_check_precedence(precedence))


class Postfix(Affix):
    """Unary operator after its operand, e.g. `x?`."""

    kind = "postfix"

    def __init__(self, precedence: Precedence) -> None:
        super().__init__(_check_precedence(precedence))


class Infix(Affix):
    """Binary operator between its operands, e.g. `a + b`.

    Args:
        precedence (Precedence): Binding strength of the operator.
        associativity (Associativity): Tie-break for equal precedence.

    Raises:
        TypeError: If `precedence` is not an int or `associativity` is not
            an `Associativity` member.
    """

    kind = "infix"

    def __init__(self, precedence: Precedence, associativity: Associativity) -> None:
        if not isinstance(associativity, Associativity):
            raise TypeError(
                f"Infix associativity must be an Associativity, got {associativity!r}"
            )
        super().__init__(_check_precedence(precedence), associativity)

    def right_binding_power(self) -> Precedence:
        """Minimum binding power for this operator's right operand.

        Returns:
            Precedence: `p` for right-associative operators, `p + 1` otherwise.
        """
        assert self.precedence is not None
        if self.associativity is Associativity.RIGHT:
            return self.precedence
        return self.precedence + 1


__all__ = [
    "MIN_BINDING_POWER",
    "Affix",
    "Associativity",
    "Infix",
    "Nilfix",
    "Postfix",
    "Precedence",
    "Prefix",
]
