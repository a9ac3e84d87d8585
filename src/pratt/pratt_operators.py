"""
Provides the `OperatorTable` class, the configurable operator set used by the
example expression grammar.

Each entry maps an operator role and symbol (for example `("infix", "+")`) to
the `Affix` the engine sees and the node name the grammar builds (`"Add"`).
The same symbol can appear under several roles; `-` is both prefix `Neg` and
infix `Sub` in the default table.

Classes:
    - OperatorTable: Role/symbol to affix and node-name mapping.
    - OperatorTableError: Raised when configuration is invalid or conflicts.

Features:
    - `OperatorTable.default()` preloads the standard arithmetic table
    - Dict-mode configuration keyed by symbol groups (str, list, tuple, set)
    - Conflict detection across and within configuration calls
    - Loads tables from JSON configuration files
    - Generates a report sorted by precedence

Usage:
    >>> table = OperatorTable.default()
    >>> table.configure({"%": {"role": "infix", "precedence": 4, "assoc": "left", "name": "Mod"}})
    >>> table.lookup("infix", "%")
    (Infix(4, left), 'Mod')

Default table:

    ====  =======  ==========  =========  =====
    sym   role     precedence  assoc      name
    ====  =======  ==========  =========  =====
    =     infix    2           neither    Eq
    + -   infix    3           left       Add Sub
    * / ÷ infix    4           left       Mul Div Div
    ?     postfix  5                      Try
    - !   prefix   6                      Neg Not
    ^     infix    7           right      Pow
    ====  =======  ==========  =========  =====
"""

import json
from typing import Any

from pratt.pratt_affix import Affix, Associativity, Infix, Postfix, Prefix

ROLES = ("prefix", "postfix", "infix")

DEFAULT_OPERATORS: dict[Any, Any] = {
    "=": {"role": "infix", "precedence": 2, "assoc": "neither", "name": "Eq"},
    "+": {"role": "infix", "precedence": 3, "assoc": "left", "name": "Add"},
    "-": [
        {"role": "infix", "precedence": 3, "assoc": "left", "name": "Sub"},
        {"role": "prefix", "precedence": 6, "name": "Neg"},
    ],
    "*": {"role": "infix", "precedence": 4, "assoc": "left", "name": "Mul"},
    ("/", "÷"): {"role": "infix", "precedence": 4, "assoc": "left", "name": "Div"},
    "?": {"role": "postfix", "precedence": 5, "name": "Try"},
    "!": {"role": "prefix", "precedence": 6, "name": "Not"},
    "^": {"role": "infix", "precedence": 7, "assoc": "right", "name": "Pow"},
}


class OperatorTableError(Exception):
    """Raised when an operator table configuration is invalid.

    Attributes:
        conflicts (list[str]): Human-readable conflict descriptions, e.g.
            `"infix '+' → conflict between Add and Plus"`.
    """

    def __init__(self, message: str, conflicts: list[str] | None = None):
        super().__init__(message)
        self.conflicts = conflicts or []


class OperatorTable:
    """Maps `(role, symbol)` pairs to an engine `Affix` and a node name.

    Attributes:
        operators (dict[tuple[str, str], tuple[Affix, str]]): The table.
    """

    def __init__(self) -> None:
        self.operators: dict[tuple[str, str], tuple[Affix, str]] = {}

    def lookup(self, role: str, symbol: str) -> tuple[Affix, str] | None:
        """Returns the affix and node name for `symbol` in `role`, if defined."""
        return self.operators.get((role, symbol))

    def has(self, role: str, symbol: str) -> bool:
        return (role, symbol) in self.operators

    def symbols(self) -> set[str]:
        """All operator symbols in any role (used by the lexer)."""
        return {symbol for _, symbol in self.operators}

    def report(self) -> str:
        """Generates a formatted listing of the table, weakest operators first.

        Returns:
            A newline-separated string, one operator per line.
        """
        lines: list[str] = []
        entries = sorted(
            self.operators.items(),
            key=lambda item: (item[1][0].precedence, item[0][0], item[0][1]),
        )
        for (role, symbol), (affix, name) in entries:
            assoc = affix.associativity.value if affix.associativity else ""
            lines.append(
                f"{symbol:>4} {role:<8} {affix.precedence:>3} {assoc:<8} → {name}"
            )
        return "\n".join(lines)

    def _extract_symbols(self, entry: Any) -> list[str]:
        """Flattens a symbol group (str, number, iterable, dict keys) to strings."""
        if entry is None:
            return []
        if isinstance(entry, str):
            return [entry]
        if isinstance(entry, (int, float)):
            return [str(entry)]
        if isinstance(entry, (list, tuple, set)):
            symbols: list[str] = []
            for item in entry:
                symbols.extend(self._extract_symbols(item))
            return symbols
        if isinstance(entry, dict):
            return [str(k) for k in entry.keys()]
        return []

    @staticmethod
    def _make_affix(spec: dict[str, Any]) -> tuple[str, Affix, str]:
        role = spec.get("role")
        if role not in ROLES:
            raise OperatorTableError(f"Unknown operator role: {role!r}")
        name = spec.get("name")
        if not isinstance(name, str) or not name:
            raise OperatorTableError(f"Operator entry needs a node name: {spec!r}")
        precedence = spec.get("precedence")
        try:
            if role == "prefix":
                return role, Prefix(precedence), name  # type: ignore[arg-type]
            if role == "postfix":
                return role, Postfix(precedence), name  # type: ignore[arg-type]
            assoc = Associativity(spec.get("assoc", "left"))
            return role, Infix(precedence, assoc), name  # type: ignore[arg-type]
        except (TypeError, ValueError) as e:
            raise OperatorTableError(f"Invalid operator entry {spec!r}: {e}") from e

    @classmethod
    def default(cls) -> "OperatorTable":
        """
        Constructs an `OperatorTable` preloaded with `DEFAULT_OPERATORS`.

        Returns:
            A configured `OperatorTable` instance.
        """
        instance = cls()
        instance.configure(DEFAULT_OPERATORS)
        return instance

    def load_from_json(self, path: str, override: bool = False) -> None:
        """
        Loads operator definitions from a JSON file and applies them via `configure`.

        Each key is a comma-separated list of symbols sharing one definition.

        Example JSON structure:
            {
                "%,mod": {"role": "infix", "precedence": 4, "assoc": "left", "name": "Mod"},
                "~": {"role": "prefix", "precedence": 6, "name": "Inv"}
            }

        Args:
            path: Path to the JSON file.
            override: Passed through to `configure`.

        Raises:
            OperatorTableError: If the file cannot be loaded or the configuration is invalid.
        """
        try:
            with open(path, encoding="utf-8") as f:
                raw_cfg = json.load(f)

            parsed_cfg: dict[tuple[Any, ...], Any] = {}
            for key, value in raw_cfg.items():
                symbols = [symbol.strip() for symbol in key.split(",")]
                parsed_cfg[tuple(symbols)] = value

            self.configure(parsed_cfg, override=override)

        except OperatorTableError:
            raise
        except Exception as e:
            raise OperatorTableError(f"Failed to load operator file: {e}") from e

    def configure(self, cfg: dict[Any, Any], override: bool = False) -> None:
        """
        Applies operator definitions to the table.

        Keys are symbol groups, values are a dict (or a list of dicts, one per
        role) with `role`, `precedence`, `name` and, for infix operators,
        `assoc` ("left", "right" or "neither", default "left"). A symbol may be
        defined once per role.

        Args:
            cfg: Mapping of symbol groups to operator definitions.
            override: Replace existing definitions instead of reporting conflicts.

        Raises:
            OperatorTableError: If any of the following occur:
                - The configuration is not a dict
                - An entry has an unknown role, missing name, or bad precedence
                - A role/symbol pair is defined twice with different meanings
        """
        if not isinstance(cfg, dict):
            raise OperatorTableError("Configuration must be a dict")

        new_operators: dict[tuple[str, str], tuple[Affix, str]] = {}
        conflicts: list[str] = []

        for symbol_group, specs in cfg.items():
            if isinstance(specs, dict):
                specs = [specs]
            if not isinstance(specs, list) or not all(
                isinstance(spec, dict) for spec in specs
            ):
                raise OperatorTableError(
                    f"Operator entry must be a dict or a list of dicts: {specs!r}"
                )
            for spec in specs:
                role, affix, name = self._make_affix(spec)
                for symbol in self._extract_symbols(symbol_group):
                    if not symbol or symbol[0].isdigit() or any(
                        ch.isspace() or ch in "()" for ch in symbol
                    ):
                        raise OperatorTableError(f"Invalid operator symbol: {symbol!r}")
                    key = (role, symbol)
                    existing = new_operators.get(key) or (
                        None if override else self.operators.get(key)
                    )
                    if existing is not None and existing != (affix, name):
                        conflicts.append(
                            f"{role} '{symbol}' → conflict between {existing[1]} and {name}"
                        )
                    else:
                        new_operators[key] = (affix, name)

        if conflicts:
            raise OperatorTableError("Operator collision(s) detected", conflicts)

        self.operators.update(new_operators)


__all__ = ["DEFAULT_OPERATORS", "ROLES", "OperatorTable", "OperatorTableError"]
