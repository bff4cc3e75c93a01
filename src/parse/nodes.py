from dataclasses import dataclass
from json import dumps
from typing import Tuple, Union

Value = Union[float, str, bool, None]

ExprNode = Union[
    "LitExpr",
    "AccessExpr",
    "BinaryOpExpr",
    "IfExpr",
    "LetExpr",
    "LetGroupExpr",
    "UserCallExpr",
    "BuiltInCallExpr",
    "FnDefinition",
    "EndMarker",
]


@dataclass(frozen=True)
class Node:
    line: int
    col: int


@dataclass(frozen=True)
class LitExpr(Node):
    val: Value

    def __str__(self):
        if isinstance(self.val, str):
            return dumps(self.val)
        elif isinstance(self.val, float) and self.val.is_integer():
            return str(int(self.val))
        return repr(self.val)

    __repr__ = __str__


@dataclass(frozen=True)
class AccessExpr(Node):
    name: str

    def __str__(self):
        return self.name

    __repr__ = __str__


@dataclass(frozen=True)
class BinaryOpExpr(Node):
    left: ExprNode
    op: str
    right: ExprNode

    def __str__(self):
        return f"({self.left} {self.op} {self.right})"

    __repr__ = __str__


@dataclass(frozen=True)
class IfExpr(Node):
    cond: ExprNode
    then_branch: ExprNode
    else_branch: ExprNode

    def __str__(self):
        return f"if {self.cond} then {self.then_branch} else {self.else_branch}"

    __repr__ = __str__


@dataclass(frozen=True)
class LetExpr(Node):
    name: str
    val: ExprNode
    body: ExprNode

    def __str__(self):
        return f"let {self.name} = {self.val} in {self.body}"

    __repr__ = __str__


@dataclass(frozen=True)
class LetGroupExpr(Node):
    bindings: Tuple[Tuple[str, ExprNode], ...]
    body: ExprNode

    def __str__(self):
        binding_list = ", ".join(f"{name} = {val}" for name, val in self.bindings)
        return f"let -> {{ {binding_list} }} in {self.body}"

    __repr__ = __str__


@dataclass(frozen=True)
class UserCallExpr(Node):
    name: str
    args: Tuple[ExprNode, ...]

    def __str__(self):
        args = ", ".join(map(str, self.args))
        return f"{self.name}({args})"

    __repr__ = __str__


@dataclass(frozen=True)
class BuiltInCallExpr(Node):
    name: str
    args: Tuple[ExprNode, ...]

    def __str__(self):
        args = ", ".join(map(str, self.args))
        return f"{self.name}({args})"

    __repr__ = __str__


@dataclass(frozen=True)
class FnDefinition(Node):
    name: str
    param_names: Tuple[str, ...]
    body: ExprNode

    def __str__(self):
        params = ", ".join(self.param_names)
        return f"function {self.name}({params}) => {self.body}"

    __repr__ = __str__


# Result of declaration-only statements (function, const, print).
@dataclass(frozen=True)
class EndMarker(Node):
    def __str__(self):
        return "<end>"

    __repr__ = __str__
