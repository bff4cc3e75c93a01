import math
from collections.abc import Mapping
from typing import Any, Optional

from parse import nodes

BUILT_IN_CONSTANTS: dict[str, float] = {
    "PI": math.pi,
    "E": math.e,
    "G": 6.67430,
}


class Registry:
    """
    Declarations that outlive a single statement: user functions and
    constants, plus the table of built-in functions calls resolve against.

    One registry belongs to one session. The parser reads it to resolve
    calls and writes to it when a statement declares something; the
    interpreter only reads it.
    """

    def __init__(
        self,
        built_in_fns: Mapping[str, Any],
        constants: Optional[Mapping[str, float]] = None,
    ):
        self.built_in_fns = built_in_fns
        self.functions: dict[str, nodes.FnDefinition] = {}
        self.constants: dict[str, nodes.ExprNode] = {}
        seeded = {**BUILT_IN_CONSTANTS, **(constants or {})}
        for name, val in seeded.items():
            self.constants[name] = nodes.LitExpr(-1, -1, float(val))

    def is_built_in(self, name: str):
        return name in self.built_in_fns

    def is_defined_fn(self, name: str):
        return name in self.built_in_fns or name in self.functions

    def define_fn(self, decl: nodes.FnDefinition):
        self.functions[decl.name] = decl

    # a later declaration of the same name replaces the earlier one
    def define_const(self, name: str, val: nodes.ExprNode):
        self.constants[name] = val

    def lookup_fn(self, name: str) -> Optional[nodes.FnDefinition]:
        return self.functions.get(name)

    def lookup_const(self, name: str) -> Optional[nodes.ExprNode]:
        return self.constants.get(name)
