import os
from collections.abc import Callable
from typing import Any

import pytest

from pratt.pratt_affix import Affix

# Monkeypatch coverage to bypass teardown crash in act/docker
if os.getenv("COVERAGE_PROCESS_START"):
    import coverage

    coverage.process_startup()

    # Nukes the teardown assertion that fails in act
    import coverage.collector

    def safe_stop(self: Any) -> None:
        if self in getattr(self, "_collectors", []):
            self._collectors.remove(self)

    coverage.collector.Collector.stop = safe_stop


class TupleGrammar:
    """Builds nested tuples so tests can assert tree shape directly.

    Tokens are strings; `table` maps operator tokens to their affix and every
    other token is an operand (classify returns None for it).
    """

    def __init__(self, table: dict[str, Affix]) -> None:
        self.table = table
        self.calls: list[tuple[Any, ...]] = []

    def classify(self, token: str) -> Affix | None:
        self.calls.append(("classify", token))
        return self.table.get(token)

    def build_operand(self, token: str) -> Any:
        self.calls.append(("operand", token))
        return token

    def build_prefix(self, op: str, operand: Any) -> Any:
        self.calls.append(("prefix", op))
        return (op, operand)

    def build_infix(self, left: Any, op: str, right: Any) -> Any:
        self.calls.append(("infix", op))
        return (left, op, right)

    def build_postfix(self, operand: Any, op: str) -> Any:
        self.calls.append(("postfix", op))
        return (operand, op)


@pytest.fixture  # type: ignore[misc]
def tuple_grammar() -> Callable[[dict[str, Affix]], TupleGrammar]:
    return TupleGrammar
