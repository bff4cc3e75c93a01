"""
Evaluation tests: operators, bindings, conditionals, calls and constants
"""

import math

import pytest

from common.errors import NestingDepthError
from parse import nodes
from parse.errors import ParseError
from parse.registry import Registry
from runtime.builtins import BUILT_IN_FNS
from runtime.errors import (
    ArityError,
    ConditionTypeError,
    OperandTypeError,
    UndefinedFunctionError,
    UndefinedVariableError,
    UnknownOperatorError,
)
from runtime.interpreter import Interpreter, RuntimeEnv


def lit(val):
    return nodes.LitExpr(1, 1, val)


class TestArithmetic:
    @pytest.mark.parametrize(
        "src, expected",
        [
            ("2 + 3 * 4", 14.0),
            ("2 ^ 3", 8.0),
            ("-5 + 2", -3.0),
            ("- 5 + 2", -3.0),
            ("10 / 4", 2.5),
            ("(2 + 3) * 4", 20.0),
            ("7 - 2 - 1", 4.0),
            ("2 ^ -1", 0.5),
        ],
    )
    def test_numeric_results(self, session, src, expected):
        assert session.evaluate(src) == expected

    def test_division_by_zero_follows_ieee(self, session):
        assert session.evaluate("1 / 0") == math.inf
        assert session.evaluate("-1 / 0") == -math.inf
        assert math.isnan(session.evaluate("0 / 0"))

    def test_power_overflow(self, session):
        assert session.evaluate("10 ^ 400") == math.inf


class TestStrings:
    def test_concatenation(self, session):
        assert session.evaluate('"ab" + "cd"') == "abcd"

    def test_equality_by_content(self, session):
        assert session.evaluate('if ("ab" == "ab") then 1 else 0') == 1.0
        assert session.evaluate('if ("ab" != "ab") then 1 else 0') == 0.0

    def test_mixed_operands_do_not_coerce(self, session):
        with pytest.raises(OperandTypeError, match="string and number"):
            session.evaluate('"1" + 1')

    def test_strings_only_support_plus_and_equality(self, session):
        with pytest.raises(OperandTypeError):
            session.evaluate('"ab" - "cd"')


class TestBindings:
    def test_let(self, session):
        assert session.evaluate("let x = 5 in x * x") == 25.0

    def test_let_group(self, session):
        assert session.evaluate("let -> { a = 1, b = 2 } in a + b") == 3.0

    def test_let_group_last_write_wins(self, session):
        assert session.evaluate("let -> { a = 1, a = 2 } in a") == 2.0

    def test_let_group_sees_earlier_bindings(self, session):
        assert session.evaluate("let -> { a = 2, b = a * 3 } in b") == 6.0

    def test_let_binding_stays_visible_in_statement(self, session):
        assert session.evaluate("(let x = 1 in x) + x") == 2.0

    def test_bindings_do_not_outlive_statement(self, session):
        session.evaluate("let x = 1 in x")
        with pytest.raises(UndefinedVariableError, match="undefined variable: x"):
            session.evaluate("x")


class TestConditionals:
    def test_branches(self, session):
        assert session.evaluate("if (3 > 2) then 1 else 0") == 1.0
        assert session.evaluate("if (3 <= 2) then 1 else 0") == 0.0

    def test_untaken_branch_is_not_evaluated(self, session):
        assert session.evaluate("if (1 < 2) then 1 else missing") == 1.0

    def test_condition_must_be_boolean(self):
        ast = nodes.IfExpr(1, 1, lit(1.0), lit(1.0), lit(0.0))
        with pytest.raises(ConditionTypeError, match="got number"):
            Interpreter(Registry(BUILT_IN_FNS)).evaluate(ast)

    def test_string_comparison_is_a_type_error(self, session):
        with pytest.raises(OperandTypeError):
            session.evaluate('if ("a" < "b") then 1 else 0')


class TestFunctions:
    def test_declare_then_call(self, session):
        assert session.evaluate("function square(x) => x ^ 2") is None
        assert session.evaluate("square(4)") == 16.0

    def test_wrong_argument_count(self, session):
        session.evaluate("function square(x) => x ^ 2")
        with pytest.raises(ArityError, match="want 1, got 2"):
            session.evaluate("square(1, 2)")

    def test_undefined_function_at_parse_time(self, session):
        with pytest.raises(ParseError, match="undefined function: nope"):
            session.evaluate("nope(1)")

    def test_undefined_function_at_evaluation(self):
        call = nodes.UserCallExpr(1, 1, "ghost", ())
        with pytest.raises(UndefinedFunctionError, match="undefined function: ghost"):
            Interpreter(Registry(BUILT_IN_FNS)).evaluate(call)

    def test_recursion(self, session):
        session.evaluate("function fact(n) => if (n <= 1) then 1 else n * fact(n - 1)")
        assert session.evaluate("fact(5)") == 120.0

    def test_body_sees_caller_bindings(self, session):
        session.evaluate("function addY(x) => x + y")
        assert session.evaluate("let y = 10 in addY(1)") == 11.0

    def test_call_restores_caller_environment(self, session):
        session.evaluate("function double(x) => x * 2")
        assert session.evaluate("let x = 1 in double(5) + x") == 11.0

    def test_later_arguments_see_earlier_parameters(self, session):
        session.evaluate("function pair(x, y) => x * 10 + y")
        assert session.evaluate("let x = 7 in pair(1, x)") == 11.0
        assert session.evaluate("let y = 7 in pair(y, 2)") == 72.0

    def test_environment_restored_after_error(self):
        registry = Registry(BUILT_IN_FNS)
        body = nodes.AccessExpr(1, 1, "missing")
        registry.define_fn(nodes.FnDefinition(1, 1, "broken", ("x",), body))
        env = RuntimeEnv({"x": 1.0})
        call = nodes.UserCallExpr(1, 1, "broken", (lit(5.0),))
        with pytest.raises(UndefinedVariableError):
            Interpreter(registry).evaluate(call, env)
        assert env.lookup("x") == 1.0

    def test_runaway_recursion(self, session):
        session.evaluate("function loop(n) => loop(n)")
        with pytest.raises(NestingDepthError) as exc:
            session.evaluate("loop(1)")
        assert exc.value.stage == "runtime"
        assert session.evaluate("1 + 1") == 2.0


class TestConstants:
    def test_seeded_constants(self, session):
        assert session.evaluate("PI") == math.pi
        assert session.evaluate("E") == math.e
        assert session.evaluate("G") == 6.67430

    def test_declared_constant(self, session):
        assert session.evaluate("const Tau = PI * 2") is None
        assert session.evaluate("Tau") == 2 * math.pi

    def test_redeclared_constant_wins(self, session):
        session.evaluate("const A = 1")
        session.evaluate("const A = 2")
        assert session.evaluate("A") == 2.0

    def test_variable_shadows_constant(self, session):
        assert session.evaluate("let PI = 3 in PI") == 3.0

    def test_constant_is_evaluated_at_each_use(self, session):
        session.evaluate("const Scaled = k * 2")
        assert session.evaluate("let k = 3 in Scaled") == 6.0
        with pytest.raises(UndefinedVariableError, match="undefined variable: k"):
            session.evaluate("Scaled")

    def test_undefined_identifier(self, session):
        with pytest.raises(UndefinedVariableError):
            session.evaluate("x + 1")


class TestMisc:
    def test_print_produces_nothing(self, session):
        assert session.evaluate('print("hello")') is None

    def test_unknown_operator(self):
        ast = nodes.BinaryOpExpr(1, 1, lit(5.0), "%", lit(2.0))
        with pytest.raises(UnknownOperatorError, match="unknown operator: %"):
            Interpreter(Registry(BUILT_IN_FNS)).evaluate(ast)

    def test_deep_nesting(self, session):
        src = "(" * 5000 + "1" + ")" * 5000
        with pytest.raises(NestingDepthError) as exc:
            session.evaluate(src)
        assert exc.value.stage == "parse"

    def test_deep_print_nesting(self, session):
        src = "print(" * 3000 + "1" + ")" * 3000
        with pytest.raises(NestingDepthError) as exc:
            session.evaluate(src)
        assert exc.value.stage == "lex"

    def test_error_position(self, session):
        with pytest.raises(OperandTypeError) as exc:
            session.evaluate('1 +\r"a"')
        assert str(exc.value) == "1:3: invalid operands for operator +: number and string"
