"""Operator-precedence (Pratt) expression folding."""

from pratt.pratt_affix import (
    MIN_BINDING_POWER,
    Affix,
    Associativity,
    Infix,
    Nilfix,
    Postfix,
    Precedence,
    Prefix,
)
from pratt.pratt_engine import TokenStream, fold, fold_top_level
from pratt.pratt_errors import (
    GrammarError,
    PrattError,
    UnexpectedEndOfInput,
    UnexpectedOperator,
)
from pratt.pratt_grammar import Grammar

__version__ = "0.1.0"

__all__ = [
    "MIN_BINDING_POWER",
    "Affix",
    "Associativity",
    "Grammar",
    "GrammarError",
    "Infix",
    "Nilfix",
    "Postfix",
    "PrattError",
    "Precedence",
    "Prefix",
    "TokenStream",
    "UnexpectedEndOfInput",
    "UnexpectedOperator",
    "fold",
    "fold_top_level",
]
