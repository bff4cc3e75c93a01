from typing import Optional

from common.errors import FlinqError


class EvalError(FlinqError):
    stage = "runtime"

    def __init__(self, msg: str, line: Optional[int] = -1, column: Optional[int] = -1):
        super().__init__(
            msg if line == -1 or column == -1 else f"{line}:{column}: {msg}"
        )
        self.msg = msg
        self.line = line
        self.column = column


class UndefinedVariableError(EvalError):
    pass


class UndefinedFunctionError(EvalError):
    pass


class ArityError(EvalError):
    pass


class ConditionTypeError(EvalError):
    pass


class OperandTypeError(EvalError):
    pass


class UnknownOperatorError(EvalError):
    pass


class BuiltInError(EvalError):
    pass