from collections.abc import Callable
from functools import reduce
from typing import Any

import pytest
from hypothesis import HealthCheck, given, settings
from hypothesis import strategies as st

from pratt.pratt_affix import Affix, Associativity, Infix, Nilfix, Postfix, Prefix
from pratt.pratt_engine import TokenStream, fold, fold_top_level
from pratt.pratt_errors import (
    GrammarError,
    PrattError,
    UnexpectedEndOfInput,
    UnexpectedOperator,
)

L, R, N = Associativity.LEFT, Associativity.RIGHT, Associativity.NEITHER

ARITH: dict[str, Affix] = {
    "=": Infix(2, N),
    "+": Infix(3, L),
    "-": Infix(3, L),
    "*": Infix(4, L),
    "/": Infix(4, L),
    "?": Postfix(5),
    "~": Prefix(6),
    "!": Prefix(6),
    "^": Infix(7, R),
}

GrammarFactory = Callable[[dict[str, Affix]], Any]

operands = st.text(alphabet="abcdefxyz0123456789", min_size=1, max_size=3)


def fold_all(tokens: list[Any], grammar: Any) -> tuple[Any, list[Any]]:
    stream = TokenStream(tokens)
    return fold_top_level(stream, grammar), stream.remaining()


# Tree shape


def test_single_operand(tuple_grammar: GrammarFactory) -> None:
    result, rest = fold_all(["a"], tuple_grammar(ARITH))
    assert result == "a"
    assert rest == []


def test_left_associative_chain(tuple_grammar: GrammarFactory) -> None:
    result, rest = fold_all(["a", "-", "b", "-", "c"], tuple_grammar(ARITH))
    assert result == (("a", "-", "b"), "-", "c")
    assert rest == []


def test_right_associative_chain(tuple_grammar: GrammarFactory) -> None:
    result, rest = fold_all(["a", "^", "b", "^", "c"], tuple_grammar(ARITH))
    assert result == ("a", "^", ("b", "^", "c"))
    assert rest == []


def test_non_associative_stops_after_one_application(
    tuple_grammar: GrammarFactory,
) -> None:
    result, rest = fold_all(["a", "=", "b", "=", "c"], tuple_grammar(ARITH))
    assert result == ("a", "=", "b")
    assert rest == ["=", "c"]


def test_non_associative_right_operand_takes_tighter_operators(
    tuple_grammar: GrammarFactory,
) -> None:
    result, rest = fold_all(["a", "=", "b", "+", "c"], tuple_grammar(ARITH))
    assert result == ("a", "=", ("b", "+", "c"))
    assert rest == []


def test_non_associative_returns_even_before_weaker_operator(
    tuple_grammar: GrammarFactory,
) -> None:
    table = {"=": Infix(2, N), "?": Postfix(1)}
    result, rest = fold_all(["a", "=", "b", "?"], tuple_grammar(table))
    assert result == ("a", "=", "b")
    assert rest == ["?"]


def test_precedence_ordering(tuple_grammar: GrammarFactory) -> None:
    g = tuple_grammar(ARITH)
    assert fold_all(["a", "*", "b", "+", "c"], g)[0] == (("a", "*", "b"), "+", "c")
    assert fold_all(["a", "+", "b", "*", "c"], g)[0] == ("a", "+", ("b", "*", "c"))


def test_prefix_binds_tighter_than_weaker_postfix(tuple_grammar: GrammarFactory) -> None:
    table = {"-": Prefix(6), "?": Postfix(5)}
    result, _ = fold_all(["-", "a", "?"], tuple_grammar(table))
    assert result == (("-", "a"), "?")


def test_stronger_postfix_binds_inside_prefix(tuple_grammar: GrammarFactory) -> None:
    table = {"-": Prefix(5), "?": Postfix(6)}
    result, _ = fold_all(["-", "a", "?"], tuple_grammar(table))
    assert result == ("-", ("a", "?"))


def test_postfix_chain(tuple_grammar: GrammarFactory) -> None:
    result, _ = fold_all(["a", "?", "?"], tuple_grammar(ARITH))
    assert result == (("a", "?"), "?")


def test_prefix_chain(tuple_grammar: GrammarFactory) -> None:
    result, _ = fold_all(["~", "!", "a"], tuple_grammar(ARITH))
    assert result == ("~", ("!", "a"))


def test_prefix_operand_stops_at_weaker_infix(tuple_grammar: GrammarFactory) -> None:
    result, _ = fold_all(["~", "a", "*", "b"], tuple_grammar(ARITH))
    assert result == (("~", "a"), "*", "b")


def test_prefix_operand_takes_stronger_infix(tuple_grammar: GrammarFactory) -> None:
    result, _ = fold_all(["!", "a", "^", "b"], tuple_grammar(ARITH))
    assert result == ("!", ("a", "^", "b"))


def test_mixed_worked_example(tuple_grammar: GrammarFactory) -> None:
    tokens = ["~", "1", "?", "*", "!", "2", "^", "3", "+", "3", "/", "2", "?", "-", "1"]
    result, rest = fold_all(tokens, tuple_grammar(ARITH))
    assert result == (
        (
            ((("~", "1"), "?"), "*", ("!", ("2", "^", "3"))),
            "+",
            ("3", "/", ("2", "?")),
        ),
        "-",
        "1",
    )
    assert rest == []


def test_explicit_nilfix_classification(tuple_grammar: GrammarFactory) -> None:
    table = dict(ARITH, x=Nilfix())
    result, _ = fold_all(["x", "+", "x"], tuple_grammar(table))
    assert result == ("x", "+", "x")


# Trailing input belongs to the caller


def test_operand_after_operand_is_left_in_stream(tuple_grammar: GrammarFactory) -> None:
    result, rest = fold_all(["a", "b", "+", "c"], tuple_grammar(ARITH))
    assert result == "a"
    assert rest == ["b", "+", "c"]


def test_prefix_in_operator_position_is_left_in_stream(
    tuple_grammar: GrammarFactory,
) -> None:
    result, rest = fold_all(["a", "~", "b"], tuple_grammar(ARITH))
    assert result == "a"
    assert rest == ["~", "b"]


def test_fold_with_explicit_min_bp(tuple_grammar: GrammarFactory) -> None:
    stream = TokenStream(["a", "+", "b", "*", "c"])
    assert fold(stream, tuple_grammar(ARITH), 4) == "a"
    assert stream.remaining() == ["+", "b", "*", "c"]


def test_fold_min_bp_equal_to_operator_consumes_it(
    tuple_grammar: GrammarFactory,
) -> None:
    stream = TokenStream(["a", "*", "b", "+", "c"])
    assert fold(stream, tuple_grammar(ARITH), 4) == ("a", "*", "b")
    assert stream.remaining() == ["+", "c"]


def test_fold_top_level_accepts_plain_iterables(tuple_grammar: GrammarFactory) -> None:
    tokens = iter(["a", "+", "b"])
    assert fold_top_level(tokens, tuple_grammar(ARITH)) == ("a", "+", "b")


def test_each_token_is_built_once(tuple_grammar: GrammarFactory) -> None:
    g = tuple_grammar(ARITH)
    fold_all(["a", "+", "b", "*", "c", "?"], g)
    built = [call for call in g.calls if call[0] != "classify"]
    assert built == [
        ("operand", "a"),
        ("operand", "b"),
        ("operand", "c"),
        ("postfix", "?"),
        ("infix", "*"),
        ("infix", "+"),
    ]


# Errors


def test_empty_input_raises_unexpected_end(tuple_grammar: GrammarFactory) -> None:
    with pytest.raises(UnexpectedEndOfInput, match="empty input") as e:
        fold_top_level([], tuple_grammar(ARITH))
    assert e.value.top_level


def test_dangling_infix_raises_unexpected_end(tuple_grammar: GrammarFactory) -> None:
    with pytest.raises(UnexpectedEndOfInput, match="Expected an operand") as e:
        fold_top_level(["a", "+"], tuple_grammar(ARITH))
    assert not e.value.top_level


def test_dangling_prefix_raises_unexpected_end(tuple_grammar: GrammarFactory) -> None:
    with pytest.raises(UnexpectedEndOfInput):
        fold_top_level(["~"], tuple_grammar(ARITH))


def test_leading_infix_raises_before_building(tuple_grammar: GrammarFactory) -> None:
    g = tuple_grammar(ARITH)
    with pytest.raises(UnexpectedOperator, match="found Infix") as e:
        fold_top_level(["*", "a"], g)
    assert e.value.token == "*"
    assert e.value.affix == Infix(4, L)
    assert g.calls == [("classify", "*")]


def test_leading_postfix_raises(tuple_grammar: GrammarFactory) -> None:
    with pytest.raises(UnexpectedOperator, match="found Postfix"):
        fold_top_level(["?"], tuple_grammar(ARITH))


def test_operator_after_infix_raises(tuple_grammar: GrammarFactory) -> None:
    with pytest.raises(UnexpectedOperator) as e:
        fold_top_level(["a", "+", "*", "b"], tuple_grammar(ARITH))
    assert e.value.token == "*"


def test_errors_share_base_class() -> None:
    assert issubclass(UnexpectedEndOfInput, PrattError)
    assert issubclass(UnexpectedOperator, PrattError)
    assert issubclass(GrammarError, PrattError)


def test_failed_parse_leaves_stream_partially_consumed(
    tuple_grammar: GrammarFactory,
) -> None:
    stream = TokenStream(["a", "+", "?", "b"])
    with pytest.raises(UnexpectedOperator):
        fold_top_level(stream, tuple_grammar(ARITH))
    assert stream.remaining() == ["b"]


class FailingGrammar:
    def __init__(self, fail_on: str) -> None:
        self.fail_on = fail_on

    def classify(self, token: str) -> Affix | None:
        if self.fail_on == "classify" and token == "bad":
            raise KeyError(token)
        if self.fail_on == "type" and token == "bad":
            return "not an affix"  # type: ignore[return-value]
        return ARITH.get(token)

    def build_operand(self, token: str) -> str:
        return token

    def build_prefix(self, op: str, operand: Any) -> Any:
        return (op, operand)

    def build_infix(self, left: Any, op: str, right: Any) -> Any:
        if self.fail_on == "infix":
            raise ValueError(f"no infix {op}")
        return (left, op, right)

    def build_postfix(self, operand: Any, op: str) -> Any:
        return (operand, op)


def test_grammar_build_error_is_wrapped() -> None:
    with pytest.raises(GrammarError, match="no infix \\+") as e:
        fold_top_level(["a", "+", "b"], FailingGrammar("infix"))
    assert isinstance(e.value.error, ValueError)
    assert e.value.__cause__ is e.value.error
    assert e.value.token == "+"


def test_grammar_classify_error_is_wrapped() -> None:
    with pytest.raises(GrammarError) as e:
        fold_top_level(["a", "+", "bad"], FailingGrammar("classify"))
    assert isinstance(e.value.error, KeyError)
    assert e.value.token == "bad"


def test_classify_must_return_affix() -> None:
    with pytest.raises(GrammarError, match="must return an Affix or None") as e:
        fold_top_level(["bad"], FailingGrammar("type"))
    assert isinstance(e.value.error, TypeError)


class GroupGrammar(FailingGrammar):
    """Treats list tokens as parenthesized groups folded by a nested call."""

    def __init__(self) -> None:
        super().__init__("")

    def classify(self, token: Any) -> Affix | None:
        if isinstance(token, list):
            return Nilfix()
        return super().classify(token)

    def build_operand(self, token: Any) -> Any:
        if isinstance(token, list):
            stream = TokenStream(token)
            inner = fold_top_level(stream, self)
            if not stream.end_of_file():
                raise SyntaxError("trailing tokens in group")
            return inner
        return token


def test_groups_are_folded_by_the_grammar() -> None:
    result = fold_top_level(["a", "*", ["b", "+", "c"]], GroupGrammar())
    assert result == ("a", "*", ("b", "+", "c"))


def test_group_allows_chaining_non_associative() -> None:
    result = fold_top_level([["a", "=", "b"], "=", "c"], GroupGrammar())
    assert result == (("a", "=", "b"), "=", "c")


def test_nested_engine_error_is_not_wrapped() -> None:
    with pytest.raises(UnexpectedEndOfInput):
        fold_top_level(["a", "+", []], GroupGrammar())


def test_grammar_error_inside_group_is_wrapped() -> None:
    with pytest.raises(GrammarError, match="trailing tokens in group"):
        fold_top_level([["a", "b"]], GroupGrammar())


def test_recursion_error_from_grammar_is_not_wrapped() -> None:
    class DeepGrammar(FailingGrammar):
        def build_operand(self, token: str) -> str:
            raise RecursionError("maximum recursion depth exceeded")

    with pytest.raises(RecursionError):
        fold_top_level(["a"], DeepGrammar(""))


def test_deeply_nested_groups_raise_recursion_error() -> None:
    tokens: list[Any] = ["a"]
    for _ in range(5000):
        tokens = [tokens]
    with pytest.raises(RecursionError):
        fold_top_level(tokens, GroupGrammar())


# TokenStream


def test_token_stream_peek_does_not_consume() -> None:
    stream = TokenStream(["a", "b"])
    assert stream.peek() == "a"
    assert stream.peek() == "a"
    assert stream.consumed == 0
    assert stream.next() == "a"
    assert stream.consumed == 1


def test_token_stream_exhaustion() -> None:
    stream = TokenStream(["a"])
    stream.next()
    assert stream.end_of_file()
    assert stream.peek() is None
    with pytest.raises(StopIteration):
        stream.next()


def test_token_stream_pulls_lazily() -> None:
    pulled: list[int] = []

    def source() -> Any:
        for i in range(3):
            pulled.append(i)
            yield i

    stream = TokenStream(source())
    assert pulled == []
    stream.peek()
    assert pulled == [0]


def test_token_stream_is_iterable() -> None:
    stream = TokenStream("abc")
    stream.next()
    assert list(stream) == ["b", "c"]


def test_token_stream_repr() -> None:
    stream = TokenStream(["a"])
    assert repr(stream) == "TokenStream(consumed=0, next='a')"
    stream.next()
    assert repr(stream) == "TokenStream(consumed=1, exhausted)"


# Properties


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(operands)  # type: ignore[misc]
def test_lone_operand_is_built_and_consumed(
    tuple_grammar: GrammarFactory, token: str
) -> None:
    stream = TokenStream([token])
    assert fold_top_level(stream, tuple_grammar(ARITH)) == token
    assert stream.end_of_file()


def _chain(items: list[str], op: str) -> list[str]:
    tokens: list[str] = []
    for i, item in enumerate(items):
        if i:
            tokens.append(op)
        tokens.append(item)
    return tokens


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(st.lists(operands, min_size=1, max_size=12))  # type: ignore[misc]
def test_left_chain_folds_left(
    tuple_grammar: GrammarFactory, items: list[str]
) -> None:
    expected = reduce(lambda acc, x: (acc, "-", x), items[1:], items[0])
    assert fold_top_level(_chain(items, "-"), tuple_grammar(ARITH)) == expected


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(st.lists(operands, min_size=1, max_size=12))  # type: ignore[misc]
def test_right_chain_folds_right(
    tuple_grammar: GrammarFactory, items: list[str]
) -> None:
    rev = items[::-1]
    expected = reduce(lambda acc, x: (x, "^", acc), rev[1:], rev[0])
    assert fold_top_level(_chain(items, "^"), tuple_grammar(ARITH)) == expected


@settings(suppress_health_check=[HealthCheck.function_scoped_fixture])  # type: ignore[misc]
@given(st.lists(operands, min_size=2, max_size=12))  # type: ignore[misc]
def test_non_associative_chain_folds_first_pair(
    tuple_grammar: GrammarFactory, items: list[str]
) -> None:
    stream = TokenStream(_chain(items, "="))
    assert fold_top_level(stream, tuple_grammar(ARITH)) == (items[0], "=", items[1])
    assert stream.remaining() == _chain(items, "=")[3:]
