"""Line-oriented front end for the evaluator.

Reads one expression per line and prints either ``= <value>`` or a caret
under the error column followed by ``ERROR: <message>``.

Usage:
    mathrepl [-v|-vv] [-D NAME=VALUE ...] [--prompt TEXT] [FILE]
"""

import argparse
import logging
import sys
from typing import Iterable, Optional, TextIO

from mathrepl.errors import CapacityError, EvaluationError
from mathrepl.evaluator import evaluate
from mathrepl.symbols import SymbolTable
from mathrepl.tokenizer import TokenType, next_token, tokenize
from mathrepl.utils import is_identifier
from mathrepl.value import Real, Value

logger = logging.getLogger(__name__)


def format_result(value: Value) -> Optional[str]:
    """``= <value>`` for reals, nothing for a ``Void`` stored in the symbol table"""
    if isinstance(value, Real):
        return f"= {value.v:f}"
    return None


def format_error(error: EvaluationError, echo_line: bool = True, indent: int = 0) -> str:
    """Renders an error as a caret under its column followed by ``ERROR: <message>``.

    On a terminal the typed line is already on screen after the prompt, so the
    caret is shifted by ``indent`` and the line is not repeated. Otherwise the
    line is echoed above the caret.
    """
    caret = " " * (indent + error.column) + "^\nERROR: " + error.errmsg
    if echo_line:
        return error.line.rstrip("\n") + "\n" + caret
    return caret


def run_repl(lines: Iterable[str], output: TextIO, symbols: SymbolTable, prompt: str = "") -> int:
    """Evaluates every line, returns the number of lines that failed"""
    failures = 0
    if prompt:
        output.write(prompt)
        output.flush()
    for line in lines:
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("tokens: %s", " ".join(str(t) for t in tokenize(line)))
        try:
            value = evaluate(line, symbols)
        except EvaluationError as e:
            failures += 1
            print(format_error(e, echo_line=not prompt, indent=len(prompt)), file=output)
        else:
            formatted = format_result(value)
            if formatted is not None:
                print(formatted, file=output)
        if prompt:
            output.write(prompt)
            output.flush()
    return failures


def parse_definition(definition: str) -> tuple[str, float]:
    """Parses ``NAME=VALUE`` as given to ``--define``"""
    name, sep, raw_value = definition.partition("=")
    name = name.strip()
    if not sep or not is_identifier(name):
        raise ValueError(f"Expected NAME=VALUE with an alphanumeric NAME, got {definition!r}")
    digits = raw_value.strip()
    negative = digits.startswith("-")
    if negative:
        digits = digits[1:]
    token, end = next_token(digits, 0)
    rest, _ = next_token(digits, end)
    if token.type is not TokenType.NUMBER or token.number is None or rest.type is not TokenType.EOL:
        raise ValueError(f"Expected a number for {name!r}, got {raw_value!r}")
    return name, -token.number if negative else token.number


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(prog="mathrepl", description="Line-oriented arithmetic expression evaluator")
    parser.add_argument("-v", action="count", default=0, help="increase logging verbosity (can be repeated)")
    parser.add_argument(
        "-D",
        "--define",
        action="append",
        default=[],
        metavar="NAME=VALUE",
        help="add a named constant to the symbol table (can be repeated)",
    )
    parser.add_argument("--prompt", default=None, help="prompt printed before each line (default: '> ' on a terminal)")
    parser.add_argument("file", nargs="?", help="read expressions from this file instead of stdin")
    args = parser.parse_args(argv)

    logging.basicConfig(
        stream=sys.stderr,
        level={0: logging.WARNING, 1: logging.INFO}.get(args.v, logging.DEBUG),
        format="%(levelname)s %(name)s: %(message)s",
    )

    symbols = SymbolTable()
    for definition in args.define:
        try:
            name, number = parse_definition(definition)
            symbols.assign(name, Real(number))
        except (ValueError, CapacityError) as e:
            parser.error(str(e))
    logger.info("Symbols: %s", ", ".join(symbols.names()))

    if args.file is not None:
        with open(args.file, "r", encoding="utf-8") as f:
            failures = run_repl(f, sys.stdout, symbols, prompt=args.prompt or "")
    else:
        prompt = args.prompt if args.prompt is not None else ("> " if sys.stdin.isatty() else "")
        failures = run_repl(sys.stdin, sys.stdout, symbols, prompt=prompt)
    logger.info("Done, %d line(s) failed", failures)
    return 0
