import math

from parse.nodes import Value

__all__ = ["Value", "format_value", "is_number", "type_name"]


def is_number(val: Value):
    # bool is a subclass of int, never of float
    return type(val) is float


def type_name(val: Value):
    if val is None:
        return "none"
    elif isinstance(val, bool):
        return "boolean"
    elif isinstance(val, str):
        return "string"
    elif is_number(val):
        return "number"
    return type(val).__name__


def format_value(val: Value) -> str:
    """
    Render a value the way statement results are printed. Integral numbers
    drop their fractional part, so 14.0 prints as "14"; None renders as the
    empty string, which the driver treats as "no output".
    """
    if val is None:
        return ""
    elif isinstance(val, bool):
        return "True" if val else "False"
    elif is_number(val):
        if math.isfinite(val) and val.is_integer() and abs(val) < 1e16:
            return str(int(val))
        return repr(val)
    return str(val)
