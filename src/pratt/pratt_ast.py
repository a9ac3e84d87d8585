"""
Defines the expression tree produced by the example expression grammar.

The folding engine itself never looks at output values; this module is only
the concrete tree `ExprGrammar` builds.

Classes:
    Expr:
        A node of the expression tree: a literal, an identifier, or a unary
        or binary operator application.

    ExprDict:
        TypedDict representation for serializing Expr instances to plain
        Python dictionaries, suitable for JSON output.

Each Expr tracks:
    kind (str): "number", "float", "ident", "unary" or "binary".
    value (str): Literal text for leaves, node name ("Add", "Neg") for operators.
    symbol (str, optional): The operator symbol as written ("+", "-").
    children (list[Expr]): One operand for unary nodes, two for binary nodes.
    line (int), col (int): Source position of the token the node came from.

Rendering (`str(expr)`) fully parenthesizes binary nodes, writes unary nodes
as calls, and writes `Pow` as a call with two arguments:

    >>> str(parse_expression("-1?*!2^3+3/2?-1"))
    '((Try(Neg(1)) * Not(Pow(2,3))) + (3 / Try(2))) - 1'
"""

from typing import Any, TypedDict

LEAF_KINDS = ("number", "float", "ident")


class ExprDict(TypedDict, total=False):
    """Serialized form of an Expr."""

    kind: str
    value: str
    symbol: str | None
    line: int
    col: int
    children: list["ExprDict"]


class Expr:
    """
    A node of the expression tree.

    Equality is structural and ignores source positions and operator
    spelling, so `1+2` and `1 + 2` (or `4/2` and `4÷2`) give equal trees.

    Args:
        kind (str): Node kind, see module docstring.
        value (str): Literal text or operator node name.
        children (list[Expr], optional): Operand nodes.
        symbol (str, optional): Operator symbol as written in the source.
        line (int): Source line number (default is 0).
        col (int): Source column number (default is 0).
    """

    function_style: frozenset[str] = frozenset({"Pow"})

    def __init__(
        self,
        kind: str,
        value: str,
        children: list["Expr"] | None = None,
        symbol: str | None = None,
        line: int = 0,
        col: int = 0,
    ):
        self.kind = kind
        self.value = value
        self.children: list["Expr"] = children or []
        self.symbol = symbol
        self.line = line
        self.col = col

    @classmethod
    def leaf(cls, kind: str, value: str, line: int = 0, col: int = 0) -> "Expr":
        return cls(kind, value, line=line, col=col)

    @classmethod
    def unary(
        cls, name: str, operand: "Expr", symbol: str | None = None, line: int = 0, col: int = 0
    ) -> "Expr":
        return cls("unary", name, [operand], symbol, line, col)

    @classmethod
    def binary(
        cls,
        left: "Expr",
        name: str,
        right: "Expr",
        symbol: str | None = None,
        line: int = 0,
        col: int = 0,
    ) -> "Expr":
        return cls("binary", name, [left, right], symbol, line, col)

    @property
    def is_leaf(self) -> bool:
        return self.kind in LEAF_KINDS

    def depth(self) -> int:
        """Number of nodes on the longest root-to-leaf path."""
        return 1 + max((child.depth() for child in self.children), default=0)

    def render(self, top: bool = False) -> str:
        """Renders the node in the canonical parenthesized notation.

        Args:
            top: Omit the parentheses around a top-level binary node.

        Returns:
            str: e.g. `"(1 + Neg(2))"`.
        """
        if self.is_leaf:
            return self.value
        args = [child.render() for child in self.children]
        if self.kind == "unary":
            return f"{self.value}({args[0]})"
        if self.value in self.function_style:
            return f"{self.value}({','.join(args)})"
        inner = f"{args[0]} {self.symbol or self.value} {args[1]}"
        return inner if top else f"({inner})"

    def __str__(self) -> str:
        return self.render(top=True)

    def __repr__(self) -> str:
        parts = [f"{self.kind}", f"value={self.value!r}"]
        if self.symbol is not None:
            parts.append(f"symbol={self.symbol!r}")
        if self.children:
            preview = ", ".join(repr(c) for c in self.children)
            parts.append(f"children=[{preview}]")
        return f"Expr({', '.join(parts)})"

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Expr):
            return False
        return (
            self.kind == other.kind
            and self.value == other.value
            and self.children == other.children
        )

    def __hash__(self) -> int:
        return hash((self.kind, self.value, tuple(self.children)))

    def to_dict(self) -> ExprDict:
        return {
            "kind": self.kind,
            "value": self.value,
            "symbol": self.symbol,
            "line": self.line,
            "col": self.col,
            "children": [c.to_dict() for c in self.children],
        }


__all__ = ["LEAF_KINDS", "Expr", "ExprDict"]
