from __future__ import annotations

import math
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import List, Tuple

import structlog

from modules.unitconvert.core.units import DEGRADED, ConversionResult, lookup

logger = structlog.get_logger(__name__)

MULTIPLY = "*"
DIVIDE = "/"
SIGNIFICANT_DIGITS = 14


def multiply(left: ConversionResult, right: ConversionResult) -> ConversionResult:
    return ConversionResult(
        left.unit_name + MULTIPLY + right.unit_name,
        left.factor * right.factor,
    )


def divide(numerator: ConversionResult, denominator: ConversionResult) -> ConversionResult:
    return ConversionResult(
        numerator.unit_name + DIVIDE + denominator.unit_name,
        _quotient(numerator.factor, denominator.factor),
    )


def _quotient(numerator: float, denominator: float) -> float:
    # Factors can underflow to 0.0; follow IEEE division instead of raising.
    if denominator != 0.0:
        return numerator / denominator
    if numerator == 0.0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def matching_paren(expr: str) -> int | None:
    """Index of the ``)`` closing the ``(`` at ``expr[0]``, or None if unbalanced.

    Neither the first nor the last ``)`` works in general: "((a))" and
    "(a)*(b)" break those. Count unmatched ``(`` instead.
    """
    unmatched = 0
    for index in range(1, len(expr)):
        char = expr[index]
        if char == "(":
            unmatched += 1
        elif char == ")":
            if unmatched == 0:
                return index
            unmatched -= 1
    return None


def split_point(expr: str) -> Tuple[int, str] | None:
    """First ``*`` or ``/`` in ``expr``, whichever comes first."""
    mul_index = expr.find(MULTIPLY)
    div_index = expr.find(DIVIDE)
    if mul_index != -1 and (div_index == -1 or mul_index < div_index):
        return mul_index, MULTIPLY
    if div_index != -1:
        return div_index, DIVIDE
    return None


def _combine(op: str, left: ConversionResult, right: ConversionResult) -> ConversionResult:
    if op == MULTIPLY:
        return multiply(left, right)
    return divide(left, right)


def evaluate(expr: str) -> ConversionResult:
    """Evaluate a whitespace-free unit expression.

    Recognized shapes, where ``U`` is itself an expression: a base unit,
    ``U*U``, ``U/U``, ``(U)``, ``(U)*U`` and ``(U)/U``. Only the first
    operator splits, so ``a/b/c`` evaluates as ``a/(b/c)``.
    Malformed input never raises; it degrades to ``("", 1.0)``.

    The right-hand operand chain is walked in a loop and folded from the
    right, so only parenthesized groups recurse.
    """
    terms: List[ConversionResult] = []
    ops: List[str] = []
    rest = expr
    while True:
        if rest.startswith("("):
            close = matching_paren(rest)
            if close is None:
                terms.append(DEGRADED)
                break
            inner = evaluate(rest[1:close])
            grouped = ConversionResult("(" + inner.unit_name + ")", inner.factor)
            if close == len(rest) - 1:
                terms.append(grouped)
                break
            op = rest[close + 1]
            if op not in (MULTIPLY, DIVIDE):
                terms.append(DEGRADED)
                break
            terms.append(grouped)
            ops.append(op)
            rest = rest[close + 2:]
            continue

        split = split_point(rest)
        if split is None:
            terms.append(lookup(rest))
            break
        # Text before the first operator holds no operator and no leading "(".
        index, op = split
        terms.append(lookup(rest[:index]))
        ops.append(op)
        rest = rest[index + 1:]

    result = terms.pop()
    while ops:
        result = _combine(ops.pop(), terms.pop(), result)
    return result


_ROUNDING = Context(prec=SIGNIFICANT_DIGITS, rounding=ROUND_HALF_UP)


def round_significant(value: float) -> float:
    # Decimal(float) is exact, so rounding sees the true binary value.
    return float(_ROUNDING.plus(Decimal(value)))


def convert(expr: str) -> ConversionResult:
    result = evaluate(expr)
    return ConversionResult(result.unit_name, round_significant(result.factor))


def strip_whitespace(raw: str) -> str:
    return "".join(raw.split())


def convert_units(raw: str) -> ConversionResult:
    expr = strip_whitespace(raw)
    result = convert(expr)
    logger.debug(
        "units_converted",
        expression=expr,
        unit_name=result.unit_name,
        multiplication_factor=result.factor,
    )
    return result
