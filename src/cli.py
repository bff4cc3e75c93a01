import logging
from argparse import ArgumentParser
from os.path import isfile
import sys
from sys import exit
from typing import Optional

from common.errors import FlinqError
from flinq import Session, split_statements
from parse.lexer import LINE_SEPARATOR
from runtime.values import format_value

PROMPT = "> "


def normalize_newlines(src: str):
    return src.replace("\r\n", LINE_SEPARATOR).replace("\n", LINE_SEPARATOR)


def build_arg_parser():
    arg_parser = ArgumentParser(description="Evaluate Flinq source code")
    arg_parser.add_argument(
        "path", nargs="?", help="path to the code to evaluate; omit for a REPL"
    )
    arg_parser.add_argument(
        "-a", "--ast", action="store_true", help="whether or not to show the ast"
    )
    arg_parser.add_argument(
        "-t", "--tokens", action="store_true", help="whether or not to show the tokens"
    )
    arg_parser.add_argument(
        "-i", "--interactive", action="store_true", help="start a REPL after the file"
    )
    arg_parser.add_argument(
        "-v", "--verbose", action="store_true", help="enable debug logging"
    )
    return arg_parser


def run_statement(session: Session, statement: str, show_tokens: bool, show_ast: bool):
    try:
        if show_tokens:
            print(" ".join(map(str, session.tokenize(statement))))
        ast = session.parse(statement)
        if show_ast:
            print(ast)

        output = format_value(session.execute(ast))
        if output:
            print(output)
        return True
    except FlinqError as e:
        print(f"{e.stage} error: {e}", file=sys.stderr)
        return False


def run_file(session: Session, path: str, show_tokens: bool, show_ast: bool):
    with open(path, newline="") as f:
        src = normalize_newlines(f.read())

    ok = True
    for statement in split_statements(src):
        ok = run_statement(session, statement, show_tokens, show_ast) and ok
    return ok


def repl(session: Session, show_tokens: bool, show_ast: bool):
    while True:
        try:
            line = input(PROMPT)
        except EOFError:
            print()
            return
        if not line.strip():
            return
        run_statement(session, line, show_tokens, show_ast)


def main(argv: Optional[list[str]] = None):
    args = build_arg_parser().parse_args(argv)
    input_path: Optional[str] = args.path
    show_tokens: bool = args.tokens
    show_ast: bool = args.ast

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    session = Session()
    ok = True
    if input_path is not None:
        if not isfile(input_path):
            print("the path specified does not exist", file=sys.stderr)
            return 1
        ok = run_file(session, input_path, show_tokens, show_ast)

    if input_path is None or args.interactive:
        repl(session, show_tokens, show_ast)
    return 0 if ok else 1


if __name__ == "__main__":
    exit(main())
