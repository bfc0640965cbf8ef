"""Inline calculator: tokenizer, shunting-yard parser and RPN evaluator.

Only single arithmetic expressions are supported. Anything that fails to
tokenize, parse or evaluate is simply "not a calculation".
"""

import math
from dataclasses import dataclass
from decimal import Decimal

OPERATORS = "+-*/%^"

# Characters that mark a query as a candidate expression ("x" is an alias for "*")
OPERATOR_HINTS = OPERATORS + "x"

PRECEDENCE = {
    "^": 4,
    "*": 3,
    "/": 3,
    "%": 3,
    "+": 2,
    "-": 2,
}


class CalculationError(ValueError):
    """Raised when input is not a well-formed arithmetic expression."""


@dataclass(frozen=True)
class Token:
    """A calculator token.

    kind is one of "number", "op", "lparen", "rparen".
    """

    kind: str
    value: float = 0.0
    op: str = ""


LPAREN = Token("lparen")
RPAREN = Token("rparen")


def _is_number_char(c: str) -> bool:
    return c.isascii() and (c.isdigit() or c == ".")


def tokenize(expr: str) -> list[Token]:
    """Split an expression into tokens.

    A "-" at the start, after an operator or after "(" is unary and is folded
    into the number that follows it.
    """
    tokens: list[Token] = []
    i = 0
    n = len(expr)

    while i < n:
        c = expr[i]
        if c.isspace():
            i += 1
            continue

        prev = tokens[-1] if tokens else None
        unary_minus = c == "-" and (prev is None or prev.kind in ("op", "lparen"))

        if _is_number_char(c) or unary_minus:
            start = i
            if unary_minus:
                i += 1
            while i < n and _is_number_char(expr[i]):
                i += 1
            literal = expr[start:i]
            try:
                value = float(literal)
            except ValueError as e:
                raise CalculationError(f"Invalid number '{literal}'") from e
            tokens.append(Token("number", value=value))
            continue

        if c in OPERATORS:
            tokens.append(Token("op", op=c))
        elif c == "(":
            tokens.append(LPAREN)
        elif c == ")":
            tokens.append(RPAREN)
        else:
            raise CalculationError(f"Unexpected character '{c}'")
        i += 1

    if not tokens:
        raise CalculationError("Empty expression")
    return tokens


def _is_left_assoc(op: str) -> bool:
    return op != "^"


def to_rpn(tokens: list[Token]) -> list[Token]:
    """Convert infix tokens to postfix order (shunting-yard)."""
    output: list[Token] = []
    stack: list[Token] = []

    for token in tokens:
        if token.kind == "number":
            output.append(token)
        elif token.kind == "op":
            op1 = token.op
            while stack and stack[-1].kind == "op":
                op2 = stack[-1].op
                lower_or_equal = PRECEDENCE[op1] <= PRECEDENCE[op2] and _is_left_assoc(op1)
                strictly_lower = PRECEDENCE[op1] < PRECEDENCE[op2] and not _is_left_assoc(op1)
                if not (lower_or_equal or strictly_lower):
                    break
                output.append(stack.pop())
            stack.append(token)
        elif token.kind == "lparen":
            stack.append(token)
        else:
            while stack:
                top = stack.pop()
                if top.kind == "lparen":
                    break
                if top.kind != "op":
                    raise CalculationError("Mismatched parentheses")
                output.append(top)
            else:
                raise CalculationError("Mismatched parentheses")

    while stack:
        top = stack.pop()
        if top.kind != "op":
            raise CalculationError("Mismatched parentheses")
        output.append(top)

    return output


def apply_operator(left: float, right: float, op: str) -> float:
    """Apply a binary operator with IEEE-754 results for edge cases.

    Division or modulo by zero yields inf/nan instead of raising.
    """
    if op == "+":
        return left + right
    if op == "-":
        return left - right
    if op == "*":
        return left * right
    if op == "/":
        if right == 0:
            if left == 0 or math.isnan(left):
                return math.nan
            return math.copysign(math.inf, left) * math.copysign(1.0, right)
        return left / right
    if op == "%":
        try:
            return math.fmod(left, right)
        except ValueError:
            return math.nan
    if op == "^":
        try:
            return math.pow(left, right)
        except OverflowError:
            return math.inf
        except ValueError:
            return math.nan
    raise CalculationError(f"Unknown operator '{op}'")


def eval_rpn(tokens: list[Token]) -> float:
    """Evaluate postfix tokens with a value stack."""
    stack: list[float] = []
    for token in tokens:
        if token.kind == "number":
            stack.append(token.value)
        elif token.kind == "op":
            if len(stack) < 2:
                raise CalculationError("Missing operand")
            right = stack.pop()
            left = stack.pop()
            stack.append(apply_operator(left, right, token.op))
        else:
            raise CalculationError("Unexpected parenthesis in postfix")

    if len(stack) != 1:
        raise CalculationError("Malformed expression")
    return stack[0]


def evaluate_expression(expr: str) -> float:
    """Tokenize, parse and evaluate an expression.

    Raises:
        CalculationError: If expr is not a well-formed expression.
    """
    return eval_rpn(to_rpn(tokenize(expr)))


def format_number(value: float) -> str:
    """Render a result in positional notation, without ".0" for whole numbers."""
    if value.is_integer():
        return str(int(value))
    # Shortest round-trip digits, never exponent form (1e-07 -> 0.0000001)
    return format(Decimal(repr(value)), "f")


def try_calculate(expr: str) -> str | None:
    """Evaluate expr if it looks like arithmetic.

    Returns:
        "<expr> = <result>" for a finite result, otherwise None.
    """
    cleaned = "".join(c for c in expr if not c.isspace() or c == " ")
    if not cleaned:
        return None
    if not any(c in cleaned for c in OPERATOR_HINTS):
        return None

    try:
        result = evaluate_expression(cleaned.replace("x", "*"))
    except CalculationError:
        return None

    if not math.isfinite(result):
        return None
    return f"{expr} = {format_number(result)}"
