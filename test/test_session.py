"""
Statement driver tests: splitting, output collection, error recovery and
session isolation
"""

import pytest

from flinq import Session, evaluate, split_statements
from parse.errors import LexError, ParseError
from runtime.values import format_value


class TestSplitting:
    def test_splits_on_semicolon_carriage_return(self):
        assert split_statements("1 + 1;\r2;\r") == ["1 + 1", "2"]

    def test_drops_blank_statements(self):
        assert split_statements("1;\r  ;\r\r;\r") == ["1"]

    def test_semicolon_inside_line_does_not_split(self):
        assert split_statements("1; 2;\r") == ["1; 2"]


class TestInterpret:
    def test_one_line_per_result(self, session):
        assert session.interpret("1 + 1;\r2 * 3;\r") == ["2", "6"]

    def test_declarations_produce_no_output(self, session):
        src = 'function inc(x) => x + 1;\rconst Ten = 10;\rprint("x");\rinc(Ten);\r'
        assert session.interpret(src) == ["11"]

    def test_error_aborts_only_its_statement(self, session):
        lines = session.interpret("1 / ;\r2;\r")
        assert lines[0] == "parse error: 1:5: unexpected token EOF at start of expression"
        assert lines[1] == "2"

    def test_run_reports_typed_outcomes(self, session):
        first, second = session.run('"a" + "b";\rmissing;\r')
        assert first.ok and first.value == "ab"
        assert not second.ok
        assert str(second) == "runtime error: 1:1: undefined variable: missing"

    def test_failed_declaration_is_not_registered(self, session):
        lines = session.interpret("function f(x) => x 1;\rf(2);\r")
        assert lines[0].startswith("parse error:")
        assert lines[1] == "parse error: 1:1: undefined function: f"

    def test_declaration_survives_evaluation_error(self, session):
        lines = session.interpret('(const A = 1) + "x";\rA;\r')
        assert lines[0].startswith("runtime error:")
        assert lines[1] == "1"

    def test_module_level_evaluate(self):
        assert evaluate("function sq(x) => x * x;\rsq(3);\r") == ["9"]


class TestSessions:
    def test_declarations_persist_across_statements(self, session):
        session.evaluate("function sq(x) => x * x")
        session.evaluate("const Nine = sq(3)")
        assert session.evaluate("Nine + 1") == 10.0

    def test_sessions_are_isolated(self):
        first, second = Session(), Session()
        first.evaluate("function sq(x) => x * x")
        first.evaluate("const PI = 3")
        with pytest.raises(ParseError):
            second.evaluate("sq(2)")
        assert second.evaluate("PI") != 3.0

    def test_extra_constants(self):
        session = Session(constants={"C": 299792458})
        assert session.evaluate("C") == 299792458.0

    def test_lex_errors_surface(self, session):
        with pytest.raises(LexError):
            session.evaluate("1 $ 2")

    def test_multiline_statement(self, session):
        assert session.interpret("let x = 2\rin x * 3;\r") == ["6"]


class TestFormatting:
    @pytest.mark.parametrize(
        "val, expected",
        [
            (14.0, "14"),
            (-3.0, "-3"),
            (2.5, "2.5"),
            (True, "True"),
            (False, "False"),
            ("abc", "abc"),
            (None, ""),
            (float("inf"), "inf"),
            (1e20, "1e+20"),
        ],
    )
    def test_format_value(self, val, expected):
        assert format_value(val) == expected
