import logging
from collections.abc import Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Optional

from common.errors import FlinqError, NestingDepthError
from parse import nodes
from parse.errors import LexError, ParseError
from parse.lexer import LINE_SEPARATOR, Lexer
from parse.parser import Parser
from parse.registry import Registry
from parse.tokens import Token
from runtime.builtins import BUILT_IN_FNS, BuiltInFnCollection
from runtime.errors import EvalError
from runtime.interpreter import Interpreter, RuntimeEnv
from runtime.values import Value, format_value

logger = logging.getLogger(__name__)

STATEMENT_TERMINATOR = ";" + LINE_SEPARATOR


def split_statements(src: str) -> list[str]:
    """Split source text into statements, dropping blank ones."""
    return [stmt for stmt in src.split(STATEMENT_TERMINATOR) if stmt.strip()]


# Lexing nested print arguments, parsing and evaluation recurse with
# expression depth (and with user function calls), so a deep enough
# statement exhausts the Python stack.
@contextmanager
def nesting_guard(stage: str):
    try:
        yield
    except RecursionError:
        raise NestingDepthError(stage) from None


@dataclass(frozen=True)
class Outcome:
    statement: str
    value: Value = None
    error: Optional[FlinqError] = None

    @property
    def ok(self):
        return self.error is None

    def __str__(self):
        if self.error is not None:
            return f"{self.error.stage} error: {self.error}"
        return format_value(self.value)


class Session:
    """
    One interpreter run. Functions and constants declared by a statement
    stay visible to every later statement evaluated by the same session;
    separate sessions share nothing.
    """

    def __init__(
        self,
        built_in_fns: BuiltInFnCollection = BUILT_IN_FNS,
        constants: Optional[Mapping[str, float]] = None,
    ):
        self.registry = Registry(built_in_fns, constants)

    def tokenize(self, statement: str) -> list[Token]:
        with nesting_guard(LexError.stage):
            return Lexer().lex(statement)

    def parse(self, statement: str) -> nodes.ExprNode:
        with nesting_guard(ParseError.stage):
            return Parser(self.registry).parse(self.tokenize(statement))

    def execute(self, ast: nodes.ExprNode) -> Value:
        with nesting_guard(EvalError.stage):
            return Interpreter(self.registry).evaluate(ast, RuntimeEnv())

    def evaluate(self, statement: str) -> Value:
        """
        Lex, parse and evaluate a single statement. Raises a FlinqError
        subclass if any stage fails. Declarations are registered once the
        statement parses, so a statement that fails to lex or parse
        registers nothing, while one that fails during evaluation keeps
        its declarations.
        """
        logger.debug("evaluating statement %r", statement)
        return self.execute(self.parse(statement))

    def run(self, src: str) -> list[Outcome]:
        outcomes: list[Outcome] = []
        for statement in split_statements(src):
            try:
                outcomes.append(Outcome(statement, self.evaluate(statement)))
            except FlinqError as e:
                logger.warning("statement failed: %s", e)
                outcomes.append(Outcome(statement, error=e))
        return outcomes

    def interpret(self, src: str) -> list[str]:
        """
        Evaluate every statement of src in order and return one output line
        per statement that produced a value or failed. Statements that
        evaluate to nothing (declarations, print) produce no line.
        """
        return [line for line in map(str, self.run(src)) if line]


def evaluate(src: str, built_in_fns: BuiltInFnCollection = BUILT_IN_FNS):
    return Session(built_in_fns).interpret(src)
