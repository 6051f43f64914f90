"""Arithmetic intent plugin backed by a restricted recursive-descent evaluator.

Detection (any pattern claims the message; the argument is the whole message):
    - explicit `<number> <op> <number>`
    - `calculate <anything>`
    - `what is <x> <op> <y>`

Expression extraction:
    Leading verbal phrases (`calculate`, `what is`, `solve`) are removed, then the
    leftmost run of arithmetic characters is taken as the expression. A run that
    trims to nothing (the message continues with words) means no expression.

Evaluation:
    Grammar, evaluated with floats and no generic code execution:

        expr   := term (("+" | "-") term)*
        term   := factor (("*" | "/") factor)*
        factor := ("+" | "-") factor | NUMBER | "(" expr ")"

    Any character outside digits, `.`, `+ - * /`, parentheses and whitespace is
    rejected before tokenizing. Division by zero and non-finite results are
    evaluation failures.
"""

import logging
import math
import re

from convo_agent.core.types import PluginResult


logger = logging.getLogger(__name__)


DETECTION_PATTERNS = [
    re.compile(r"(\d+(?:\.\d+)?)\s*[+\-*/]\s*(\d+(?:\.\d+)?)"),
    re.compile(r"calculate\s+(.+)", re.IGNORECASE),
    re.compile(r"what\s+is\s+(.+)\s*[+\-*/]\s*(.+)", re.IGNORECASE),
]

LEADING_PHRASES = [
    re.compile(r"calculate\s+", re.IGNORECASE),
    re.compile(r"what\s+is\s+", re.IGNORECASE),
    re.compile(r"solve\s+", re.IGNORECASE),
]

EXPRESSION_RUN = re.compile(r"[\d.+\-*/()\s]+")
ALLOWED_EXPRESSION = re.compile(r"[\d.+\-*/()\s]+")
TOKEN_PATTERN = re.compile(r"(\d+\.?\d*|\.\d+)|(\S)")

NO_EXPRESSION_MESSAGE = "No valid mathematical expression found"
EVALUATION_ERROR_MESSAGE = "Error evaluating mathematical expression"


class ExpressionError(ValueError):
    """Raised for malformed or non-evaluable arithmetic expressions."""


# =========================================================
# TOKENIZER / PARSER
# =========================================================

def tokenize(expression: str) -> list[tuple[str, object]]:
    if not ALLOWED_EXPRESSION.fullmatch(expression):
        raise ExpressionError("Expression contains forbidden characters")

    tokens: list[tuple[str, object]] = []
    for number, symbol in TOKEN_PATTERN.findall(expression):
        if number:
            tokens.append(("num", float(number)))
        elif symbol:
            if symbol not in "+-*/()":
                raise ExpressionError(f"Unexpected character {symbol!r}")
            tokens.append(("op", symbol))
    return tokens


class _Parser:
    def __init__(self, tokens: list[tuple[str, object]]):
        self.tokens = tokens
        self.pos = 0

    def _peek(self) -> tuple[str, object] | None:
        return self.tokens[self.pos] if self.pos < len(self.tokens) else None

    def _take_op(self, *ops: str) -> str | None:
        token = self._peek()
        if token is not None and token[0] == "op" and token[1] in ops:
            self.pos += 1
            return token[1]
        return None

    def parse(self) -> float:
        if not self.tokens:
            raise ExpressionError("Empty expression")
        value = self._expr()
        if self._peek() is not None:
            raise ExpressionError("Unexpected trailing input")
        return value

    def _expr(self) -> float:
        value = self._term()
        while True:
            op = self._take_op("+", "-")
            if op is None:
                return value
            rhs = self._term()
            value = value + rhs if op == "+" else value - rhs

    def _term(self) -> float:
        value = self._factor()
        while True:
            op = self._take_op("*", "/")
            if op is None:
                return value
            rhs = self._factor()
            if op == "*":
                value = value * rhs
            else:
                if rhs == 0:
                    raise ExpressionError("Division by zero")
                value = value / rhs

    def _factor(self) -> float:
        op = self._take_op("+", "-")
        if op is not None:
            operand = self._factor()
            return operand if op == "+" else -operand

        token = self._peek()
        if token is None:
            raise ExpressionError("Unexpected end of expression")

        if token[0] == "num":
            self.pos += 1
            return token[1]

        if self._take_op("("):
            value = self._expr()
            if not self._take_op(")"):
                raise ExpressionError("Missing closing parenthesis")
            return value

        raise ExpressionError(f"Unexpected token {token[1]!r}")


def evaluate_expression(expression: str) -> float:
    """Evaluate a restricted arithmetic expression.

    Raises:
        ExpressionError: Forbidden characters, syntax errors, division by zero,
            excessive nesting, or non-finite results.
    """
    try:
        value = _Parser(tokenize(expression)).parse()
    except RecursionError as err:
        raise ExpressionError("Expression nested too deeply") from err

    if not math.isfinite(value):
        raise ExpressionError("Result is not finite")
    return value


def format_number(value: float) -> str:
    """Render integral floats without a decimal part (`4.0` -> `4`).

    Integral values below `1e21` print in full; larger magnitudes use exponent
    notation.
    """
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def extract_expression(text: str) -> str | None:
    """Pull the arithmetic portion out of a natural-language message."""
    cleaned = text or ""
    for phrase in LEADING_PHRASES:
        cleaned = phrase.sub("", cleaned, count=1)
    cleaned = cleaned.strip()

    run = EXPRESSION_RUN.search(cleaned)
    if run is None:
        return None
    return run.group(0).strip() or None


# =========================================================
# PLUGIN
# =========================================================

class ArithmeticPlugin:
    """Serves calculation requests."""

    kind = "math"

    def matches(self, text: str) -> str | None:
        if not text:
            return None
        if any(pattern.search(text) for pattern in DETECTION_PATTERNS):
            return text
        return None

    def execute(self, text: str) -> PluginResult:
        expression = extract_expression(text)
        if not expression:
            return PluginResult(kind=self.kind, input=text, output=NO_EXPRESSION_MESSAGE, success=False)

        try:
            value = evaluate_expression(expression)
        except ExpressionError as err:
            logger.info("Arithmetic evaluation failed for %r: %s", expression, err)
            return PluginResult(kind=self.kind, input=text, output=EVALUATION_ERROR_MESSAGE, success=False)

        return PluginResult(
            kind=self.kind,
            input=text,
            output=f"{expression} = {format_number(value)}",
            success=True,
        )
