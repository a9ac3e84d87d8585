import io
import traceback

from pratt.pratt_expr import ExprGrammar
from pratt.pratt_lexer import token_trees
from pratt.pratt_operators import OperatorTable, OperatorTableError


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def handle_operators_command(src: str, table: OperatorTable) -> bool:
    parts = src.split(maxsplit=1)
    if not parts or parts[0].upper() != "OPERATORS":
        return False
    command = parts[1].strip() if len(parts) > 1 else ""
    # `operators + 1` is an expression over an identifier, not a command
    if command and not command[0].isalpha():
        return False
    if command == "":
        print(table.report())
        return True
    if command.upper().startswith("LOAD "):
        path = command[5:].strip().strip('"').strip("'")
        try:
            table.load_from_json(path, override=True)
            print(f"[ok] >>> Operators loaded from {path}")
        except OperatorTableError as e:
            print("[error] >>> Failed to load operators:")
            print(e)
            for conflict in e.conflicts:
                print(f"  {conflict}")
        return True
    print(f"[error] >>> Unknown OPERATORS command: {command}")
    return True


def start_repl(operators: str | None = None, verbose: bool = False) -> None:
    print("Pratt REPL. Type 'exit' or 'quit' to leave.")
    table = OperatorTable.default()
    if operators:
        try:
            table.load_from_json(operators, override=True)
        except OperatorTableError:
            print_traceback()

    while True:
        try:
            src = input(">>> ").strip()
            if src in ("exit", "quit"):
                print("Exiting Pratt REPL.")
                return
            if not src or src.startswith("#"):
                continue
            if src.lower() == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue
            if handle_operators_command(src, table):
                continue

            try:
                trees = token_trees(src, table)
                if verbose:
                    print(f"[tokens] >>> {trees}")
                expr = ExprGrammar(table).parse(trees, strict=True)
            except Exception:
                print_traceback()
                continue
            print(expr)
            if verbose:
                print(f"[repr] >>> {expr!r}")

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Pratt REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
