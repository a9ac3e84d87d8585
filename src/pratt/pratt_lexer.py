"""
Lexical analyzer for the example expression language.

This module turns raw source text into the token trees the expression grammar
feeds to the folding engine:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Represents a single token with type, value, and source location.
    Lexer: Converts a CharacterStream into a sequence of flat tokens.
    ExprSyntaxError: Raised for malformed source text or trailing input.

Functions:
    build_token_trees: Nests parenthesized groups and resolves operator roles.
    tokenize: Source text to flat tokens.
    token_trees: Source text to token trees (what the engine consumes).

Features:
    - Skips whitespace
    - Longest-match recognition of the operator symbols known to an `OperatorTable`
    - Recognizes:
        * Identifiers (alphabetic symbols in the table become operators)
        * Numbers (integer and float)
        * Parentheses
    - Unknown characters produce an `ERROR` token; `build_token_trees` rejects them

Operator roles are decided by position, not by the engine: a symbol where an
operand is expected becomes `PREFIX`; after an operand it becomes `POSTFIX` if
the table defines it as postfix, otherwise `INFIX`. This is what lets `-` be
negation in `-1` and subtraction in `2-1`.

Example:
    >>> [t.type for t in token_trees("-(1+2)?")]
    ['PREFIX', 'GROUP', 'POSTFIX']
"""

from typing import Any

from pratt.pratt_operators import OperatorTable


class ExprSyntaxError(SyntaxError):
    """Malformed expression source: bad characters, brackets or trailing input."""


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The next character.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Returns the character at the given offset from the current position without advancing.

        Args:
            offset (int, optional): Number of characters to look ahead. Defaults to 0.

        Returns:
            str: The character at the offset, or an empty string if out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token or token tree.

    Attributes:
        type (str): The token type (e.g. 'NUMBER', 'SYMBOL', 'INFIX', 'GROUP').
        value (str | list[Token]): The raw text, or the children of a GROUP.
        line (int): The 1-based line number where the token appears.
        col (int): The 1-based column number where the token starts.
    """

    def __init__(
        self, type_: str, value: "str | list[Token]", line: int = 0, col: int = 0
    ):
        self.type = type_
        self.value = value
        self.line = line
        self.col = col

    @property
    def text(self) -> str:
        """Source-like text of the token; groups are re-wrapped in parentheses."""
        if isinstance(self.value, list):
            return "(" + " ".join(child.text for child in self.value) + ")"
        return self.value

    def __repr__(self) -> str:
        if isinstance(self.value, list):
            return f"Token({self.type}, {self.value!r})"
        return f"Token({self.type}, {self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        value = tuple(self.value) if isinstance(self.value, list) else self.value
        return hash((self.type, value, self.line, self.col))


class Lexer:
    """Lexical analyzer for expression source.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
        symbols (set[str]): Operator symbols to recognize.
    """

    def __init__(self, stream: CharacterStream, table: OperatorTable | None = None) -> None:
        self.stream = stream
        self.symbols: set[str] = (table or OperatorTable.default()).symbols()
        self._longest = max((len(s) for s in self.symbols), default=0)

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in " \t\r\n":
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator symbol from the current position.

        Returns:
            Token | None: A SYMBOL token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_symbol = None
        candidate = ""

        for i in range(self._longest):
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in self.symbols:
                max_symbol = candidate

        if max_symbol:
            for _ in range(len(max_symbol)):
                self.advance()
            return Token("SYMBOL", max_symbol, line, col)

        return None

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token; `EOF` once the source is exhausted.

        Raises:
            ExprSyntaxError: On a malformed number such as `1.2.3`.
        """
        self.skip_whitespace()

        if self.stream.end_of_file():
            return Token("EOF", "EOF", self.stream.line, self.stream.column)

        ch = self.peek()
        line, col = self.stream.line, self.stream.column

        # 1. Identifier, or an alphabetic operator such as `mod`
        if ch.isalpha() or ch == "_":
            ident = ""
            while not self.stream.end_of_file() and (
                self.peek().isalnum() or self.peek() == "_"
            ):
                ident += self.advance()
            if ident in self.symbols:
                return Token("SYMBOL", ident, line, col)
            return Token("IDENT", ident, line, col)

        # 2. Number or float
        if ch.isdigit():
            num = ""
            has_dot = False
            while not self.stream.end_of_file() and (
                self.peek().isdigit() or self.peek() == "."
            ):
                if self.peek() == ".":
                    if has_dot:
                        raise ExprSyntaxError(
                            f"Invalid float format at line {line}, col {col}"
                        )
                    has_dot = True
                num += self.advance()
            return Token("FLOAT" if has_dot else "NUMBER", num, line, col)

        # 3. Brackets
        if ch == "(":
            return Token("LPAREN", self.advance(), line, col)
        if ch == ")":
            return Token("RPAREN", self.advance(), line, col)

        # 4. Operator symbol
        token = self.match_operator()
        if token:
            return token

        # 5. Unknown character → error
        return Token("ERROR", self.advance(), line, col)


def build_token_trees(tokens: list[Token], table: OperatorTable) -> list[Token]:
    """
    Nests parenthesized groups and tags each operator symbol with its role.

    Args:
        tokens: Flat tokens from `Lexer.next_token()`; an `EOF` token ends the input.
        table: Decides which symbols may act as postfix operators.

    Returns:
        list[Token]: Top-level token trees. Groups are `GROUP` tokens whose
        value is the list of their own token trees.

    Raises:
        ExprSyntaxError: On unknown characters or unbalanced parentheses.
    """
    stack: list[tuple[Token | None, list[Token]]] = [(None, [])]
    expect_operand = True

    for tok in tokens:
        if tok.type == "EOF":
            break
        if tok.type == "ERROR":
            raise ExprSyntaxError(
                f"Unexpected character {tok.value!r} at line {tok.line}, col {tok.col}"
            )
        if tok.type == "LPAREN":
            stack.append((tok, []))
            expect_operand = True
            continue
        if tok.type == "RPAREN":
            if len(stack) == 1:
                raise ExprSyntaxError(
                    f"Unmatched ')' at line {tok.line}, col {tok.col}"
                )
            opener, children = stack.pop()
            assert opener is not None
            stack[-1][1].append(Token("GROUP", children, opener.line, opener.col))
            expect_operand = False
            continue

        current = stack[-1][1]
        if tok.type == "SYMBOL":
            assert isinstance(tok.value, str)
            if expect_operand:
                role = "PREFIX"
            elif table.has("postfix", tok.value):
                role = "POSTFIX"
            else:
                role = "INFIX"
                expect_operand = True
            current.append(Token(role, tok.value, tok.line, tok.col))
            continue

        current.append(tok)
        expect_operand = False

    if len(stack) > 1:
        opener = stack[-1][0]
        assert opener is not None
        raise ExprSyntaxError(
            f"Unclosed '(' at line {opener.line}, col {opener.col}"
        )
    return stack[0][1]


def tokenize(source: str, table: OperatorTable | None = None) -> list[Token]:
    """Lexes `source` into flat tokens, without the trailing EOF."""
    lexer = Lexer(CharacterStream(source, 0, 1, 1), table)
    tokens: list[Token] = []
    while True:
        tok = lexer.next_token()
        if tok.type == "EOF":
            break
        tokens.append(tok)
    return tokens


def token_trees(source: str, table: OperatorTable | None = None) -> list[Token]:
    """Lexes `source` and builds the token trees consumed by `ExprGrammar`."""
    table = table or OperatorTable.default()
    return build_token_trees(tokenize(source, table), table)


__all__ = [
    "CharacterStream",
    "ExprSyntaxError",
    "Lexer",
    "Token",
    "build_token_trees",
    "token_trees",
    "tokenize",
]
