"""
Shared fixtures for the Flinq test suite
"""

import pytest

from flinq import Session
from parse.lexer import Lexer
from parse.parser import Parser
from parse.registry import Registry
from runtime.builtins import BUILT_IN_FNS


@pytest.fixture
def session():
    """A fresh session, so declarations never leak between tests"""
    return Session()


@pytest.fixture
def registry():
    return Registry(BUILT_IN_FNS)


@pytest.fixture
def parse(registry):
    """Parse one statement against the test's registry"""

    def parse_src(src: str):
        return Parser(registry).parse(Lexer().lex(src))

    return parse_src
