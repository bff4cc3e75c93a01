import math
import random
from dataclasses import dataclass
from typing import Callable, Optional

from runtime.errors import BuiltInError


@dataclass(frozen=True)
class BuiltInFn:
    fn: Callable[..., float]
    arities: tuple[int, ...]

    def __call__(self, *args: float) -> float:
        return self.fn(*args)


BuiltInFnCollection = dict[str, BuiltInFn]

# largest n whose factorial is a finite double
MAX_FACT = 170


# The helpers below return the IEEE-754 result where Python's math module
# raises instead (domain errors give nan, poles give -inf, overflow inf).


def _guarded(fn: Callable[[float], float]):
    def call(x: float):
        try:
            return fn(x)
        except ValueError:
            return math.nan

    return call


def _sqrt(x: float):
    return math.nan if x < 0 else math.sqrt(x)


def _exp(x: float):
    try:
        return math.exp(x)
    except OverflowError:
        return math.inf


def _log(x: float, base: Optional[float] = None):
    if math.isnan(x) or x < 0:
        return math.nan
    if x == 0:
        ln = -math.inf
    else:
        ln = math.log(x)
    if base is None:
        return ln
    if math.isnan(base) or base < 0 or base == 1:
        return math.nan
    if x != 1 and (base == 0 or base == math.inf):
        return math.nan
    ln_base = -math.inf if base == 0 else math.log(base)
    return ln / ln_base


def _log10(x: float):
    if math.isnan(x) or x < 0:
        return math.nan
    return -math.inf if x == 0 else math.log10(x)


def power(x: float, y: float):
    try:
        return math.pow(x, y)
    except OverflowError:
        # only odd integral exponents keep the sign of a negative base
        if x < 0 and y.is_integer() and int(y) % 2 == 1:
            return -math.inf
        return math.inf
    except ValueError:
        # 0 raised to a negative power, or a negative base with a
        # fractional exponent
        if x != 0:
            return math.nan
        if y.is_integer() and int(y) % 2 == 1:
            return math.copysign(math.inf, x)
        return math.inf


def _fact(n: float):
    if math.isnan(n) or math.isinf(n):
        raise BuiltInError(f"Fact: cannot take the factorial of {n}")
    n = int(n)
    if n < 0:
        raise BuiltInError(f"Fact: cannot take the factorial of {n}")
    elif n > MAX_FACT:
        return math.inf
    product = 1
    for i in range(1, n + 1):
        product *= i
    return float(product)


def _random(lo: float, hi: float):
    if math.isnan(lo) or math.isnan(hi) or math.isinf(lo) or math.isinf(hi):
        raise BuiltInError("Random: bounds must be finite numbers")
    lo, hi = int(lo), int(hi)
    if lo > hi:
        raise BuiltInError(f"Random: lower bound {lo} is greater than upper bound {hi}")
    elif lo == hi:
        return float(lo)
    return float(random.randrange(lo, hi))


BUILT_IN_FNS: BuiltInFnCollection = {
    # trigonometry
    "Sin": BuiltInFn(_guarded(math.sin), (1,)),
    "Cos": BuiltInFn(_guarded(math.cos), (1,)),
    "Tan": BuiltInFn(_guarded(math.tan), (1,)),

    # powers and roots
    "Sqrt": BuiltInFn(_sqrt, (1,)),
    "Pow": BuiltInFn(power, (2,)),
    "Exp": BuiltInFn(_exp, (1,)),
    "Abs": BuiltInFn(abs, (1,)),

    # logarithms
    "Log": BuiltInFn(_log, (1, 2)),
    "Log10": BuiltInFn(_log10, (1,)),

    # misc
    "Fact": BuiltInFn(_fact, (1,)),
    "Random": BuiltInFn(_random, (2,)),
}  # fmt: skip
