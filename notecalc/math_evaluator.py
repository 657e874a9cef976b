"""
NoteCalc Math Expression Evaluator
Default arithmetic backend: turns an arithmetic string into a number.

The engine only decides what string to hand over; any object with an
``evaluate(text) -> float`` method can replace this one.
"""

import ast
import math
import re

from notecalc.constants import MATH_FUNCS, MATH_NAMES, MAX_EXPONENT, MAX_FACTORIAL, MAX_POWER_DIGITS


class MathEvaluationError(Exception):
    """Raised when a string is not valid, finite arithmetic"""
    pass


_BINARY_OPERATORS = {
    ast.Add: lambda a, b: a + b,
    ast.Sub: lambda a, b: a - b,
    ast.Mult: lambda a, b: a * b,
    ast.Div: lambda a, b: a / b,
    ast.FloorDiv: lambda a, b: a // b,
    ast.Mod: lambda a, b: a % b,
    ast.Pow: lambda a, b: a ** b,
}

_UNARY_OPERATORS = {
    ast.UAdd: lambda a: +a,
    ast.USub: lambda a: -a,
}


class MathEvaluator:
    """
    Evaluates arithmetic with standard precedence and parentheses.
    """

    def __init__(self, functions=None, names=None):
        self.functions = dict(MATH_FUNCS if functions is None else functions)
        self.names = dict(MATH_NAMES if names is None else names)

    def evaluate(self, text):
        """
        Evaluate an arithmetic string.

        Args:
            text (str): e.g. ``2 * (3 + 4) ^ 2``

        Returns:
            float: Finite result

        Raises:
            MathEvaluationError: malformed input, unknown names, domain errors
            and non-finite results
        """
        expr = text.strip()
        if not expr:
            raise MathEvaluationError("Empty expression")

        # Convert ^ to ** for proper exponentiation
        expr = expr.replace('^', '**')
        expr = re.sub(r'\bmod\b', '%', expr)

        try:
            tree = ast.parse(expr, mode='eval')
        except (SyntaxError, ValueError, RecursionError) as e:
            raise MathEvaluationError(f"Invalid expression: {text}") from e

        try:
            result = self._eval_node(tree.body)
        except MathEvaluationError:
            raise
        except (ArithmeticError, ValueError, TypeError, RecursionError, MemoryError) as e:
            raise MathEvaluationError(str(e)) from e

        if isinstance(result, bool) or not isinstance(result, (int, float)):
            raise MathEvaluationError(f"Non-numeric result: {result!r}")
        try:
            result = float(result)
        except OverflowError as e:
            raise MathEvaluationError("Result too large") from e
        if not math.isfinite(result):
            raise MathEvaluationError("Result is not finite")
        return result

    @staticmethod
    def _check_power(base, exponent):
        """Reject powers whose result could not fit in a float"""
        if abs(exponent) > MAX_EXPONENT:
            raise MathEvaluationError("Exponent too large")
        if base != 0 and exponent * math.log10(abs(base)) > MAX_POWER_DIGITS:
            raise MathEvaluationError("Result too large")

    def _eval_node(self, node):
        if isinstance(node, ast.Constant):
            if isinstance(node.value, (int, float)) and not isinstance(node.value, bool):
                return node.value
            raise MathEvaluationError("Constant must be a number")

        if isinstance(node, ast.Name):
            if node.id in self.names:
                return self.names[node.id]
            raise MathEvaluationError(f"Unknown name: {node.id}")

        if isinstance(node, ast.UnaryOp):
            op = _UNARY_OPERATORS.get(type(node.op))
            if op is None:
                raise MathEvaluationError("Unsupported unary operator")
            return op(self._eval_node(node.operand))

        if isinstance(node, ast.BinOp):
            op = _BINARY_OPERATORS.get(type(node.op))
            if op is None:
                raise MathEvaluationError("Unsupported operator")
            left = self._eval_node(node.left)
            right = self._eval_node(node.right)
            if isinstance(node.op, ast.Pow):
                self._check_power(left, right)
            return op(left, right)

        if isinstance(node, ast.Call):
            if not isinstance(node.func, ast.Name) or node.keywords:
                raise MathEvaluationError("Unsupported function call")
            func = self.functions.get(node.func.id)
            if func is None:
                raise MathEvaluationError(f"Unknown function: {node.func.id}")
            args = [self._eval_node(arg) for arg in node.args]
            if func is math.factorial and args and abs(args[0]) > MAX_FACTORIAL:
                raise MathEvaluationError("Factorial argument too large")
            return func(*args)

        raise MathEvaluationError(f"Unsupported expression: {type(node).__name__}")
