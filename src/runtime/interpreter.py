import math
import operator
from contextlib import contextmanager
from typing import Callable, Optional

from common.errors import InternalError
from parse import nodes
from parse.registry import Registry

from runtime.builtins import BuiltInFn, power
from runtime.errors import (
    ArityError,
    BuiltInError,
    ConditionTypeError,
    OperandTypeError,
    UndefinedFunctionError,
    UndefinedVariableError,
    UnknownOperatorError,
)
from runtime.values import Value, is_number, type_name


def _divide(a: float, b: float):
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        # the sign of a zero divisor still counts
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


NUMERIC_OPS: dict[str, Callable[[float, float], Value]] = {
    "+": operator.add,
    "-": operator.sub,
    "*": operator.mul,
    "/": _divide,
    "^": power,
    "<": operator.lt,
    ">": operator.gt,
    "<=": operator.le,
    ">=": operator.ge,
    "==": operator.eq,
    "!=": operator.ne,
}

STRING_OPS: dict[str, Callable[[str, str], Value]] = {
    "+": operator.add,
    "==": operator.eq,
    "!=": operator.ne,
}


class RuntimeEnv:
    """
    Variables visible to one top-level evaluation. There is a single flat
    mapping: let bindings write into it and function calls temporarily
    extend it, so a function body sees whatever the caller had bound
    (dynamic scoping).
    """

    def __init__(self, variables: Optional[dict[str, Value]] = None):
        self._vars: dict[str, Value] = variables or {}

    @contextmanager
    def enter_call(self):
        saved = self._vars.copy()
        try:
            yield
        finally:
            self._vars = saved

    def lookup(self, name: str):
        return self._vars[name]

    def bind(self, name: str, val: Value):
        self._vars[name] = val

    def has(self, name: str):
        return name in self._vars


class Interpreter:
    def __init__(self, registry: Registry):
        self._registry = registry

    def evaluate(self, node: nodes.ExprNode, env: Optional[RuntimeEnv] = None):
        return self._evaluate_expr(node, env if env is not None else RuntimeEnv())

    def _evaluate_expr(self, expr: nodes.ExprNode, env: RuntimeEnv) -> Value:
        if isinstance(expr, nodes.LitExpr):
            return expr.val
        elif isinstance(expr, nodes.BinaryOpExpr):
            return self._evaluate_binary_op_expr(expr, env)
        elif isinstance(expr, nodes.AccessExpr):
            return self._evaluate_access_expr(expr, env)
        elif isinstance(expr, nodes.IfExpr):
            return self._evaluate_if_expr(expr, env)
        elif isinstance(expr, nodes.LetExpr):
            return self._evaluate_let_expr(expr, env)
        elif isinstance(expr, nodes.LetGroupExpr):
            return self._evaluate_let_group_expr(expr, env)
        elif isinstance(expr, nodes.UserCallExpr):
            return self._evaluate_user_call_expr(expr, env)
        elif isinstance(expr, nodes.BuiltInCallExpr):
            return self._evaluate_built_in_call_expr(expr, env)
        elif isinstance(expr, (nodes.EndMarker, nodes.FnDefinition)):
            return None
        else:
            raise InternalError(f"unhandled expr node type: {type(expr).__name__}")

    def _evaluate_binary_op_expr(self, expr: nodes.BinaryOpExpr, env: RuntimeEnv):
        left = self._evaluate_expr(expr.left, env)
        right = self._evaluate_expr(expr.right, env)
        if isinstance(left, str) and isinstance(right, str) and expr.op in STRING_OPS:
            return STRING_OPS[expr.op](left, right)
        elif is_number(left) and is_number(right):
            try:
                op = NUMERIC_OPS[expr.op]
            except KeyError:
                raise UnknownOperatorError(
                    f"unknown operator: {expr.op}", expr.line, expr.col
                )
            return op(left, right)
        else:
            raise OperandTypeError(
                f"invalid operands for operator {expr.op}: "
                f"{type_name(left)} and {type_name(right)}",
                expr.line,
                expr.col,
            )

    def _evaluate_access_expr(self, access: nodes.AccessExpr, env: RuntimeEnv):
        if env.has(access.name):
            return env.lookup(access.name)
        const = self._registry.lookup_const(access.name)
        if const is None:
            raise UndefinedVariableError(
                f"undefined variable: {access.name}", access.line, access.col
            )
        # constants are stored unevaluated and computed on every access
        return self._evaluate_expr(const, env)

    def _evaluate_if_expr(self, if_expr: nodes.IfExpr, env: RuntimeEnv):
        cond = self._evaluate_expr(if_expr.cond, env)
        if not isinstance(cond, bool):
            raise ConditionTypeError(
                f"if condition must be a boolean, got {type_name(cond)}",
                if_expr.line,
                if_expr.col,
            )
        if cond:
            return self._evaluate_expr(if_expr.then_branch, env)
        return self._evaluate_expr(if_expr.else_branch, env)

    def _evaluate_let_expr(self, let: nodes.LetExpr, env: RuntimeEnv):
        env.bind(let.name, self._evaluate_expr(let.val, env))
        return self._evaluate_expr(let.body, env)

    def _evaluate_let_group_expr(self, let: nodes.LetGroupExpr, env: RuntimeEnv):
        # each binding sees the ones before it; a repeated name is rebound
        for name, val in let.bindings:
            env.bind(name, self._evaluate_expr(val, env))
        return self._evaluate_expr(let.body, env)

    def _evaluate_user_call_expr(self, call: nodes.UserCallExpr, env: RuntimeEnv):
        decl = self._registry.lookup_fn(call.name)
        if decl is None:
            raise UndefinedFunctionError(
                f"undefined function: {call.name}", call.line, call.col
            )
        if (want := len(decl.param_names)) != (got := len(call.args)):
            raise ArityError(
                f"call {call.name}: want {want}, got {got} args", call.line, call.col
            )

        with env.enter_call():
            # bound one at a time, so later arguments see earlier parameters
            for param, arg in zip(decl.param_names, call.args):
                env.bind(param, self._evaluate_expr(arg, env))
            return self._evaluate_expr(decl.body, env)

    def _evaluate_built_in_call_expr(
        self, call: nodes.BuiltInCallExpr, env: RuntimeEnv
    ):
        fn: Optional[BuiltInFn] = self._registry.built_in_fns.get(call.name)
        if fn is None:
            raise UndefinedFunctionError(
                f"undefined function: {call.name}", call.line, call.col
            )
        if len(call.args) not in fn.arities:
            want = " or ".join(map(str, fn.arities))
            raise ArityError(
                f"call {call.name}: want {want}, got {len(call.args)} args",
                call.line,
                call.col,
            )

        args: list[float] = []
        for arg in call.args:
            val = self._evaluate_expr(arg, env)
            if not is_number(val):
                raise OperandTypeError(
                    f"call {call.name}: arguments must be numbers, got {type_name(val)}",
                    call.line,
                    call.col,
                )
            args.append(val)

        try:
            return fn(*args)
        except BuiltInError as e:
            raise BuiltInError(e.msg, call.line, call.col)
