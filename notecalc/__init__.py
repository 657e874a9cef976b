"""
NoteCalc - a notepad calculator.
Every line of a document is a comment, a variable assignment or an expression.
"""

from notecalc.constants import APP_VERSION
from notecalc.engine import NoteCalcEngine
from notecalc.math_evaluator import MathEvaluationError, MathEvaluator
from notecalc.tokens import Comment, DisplayRecord, Error, Expression, Newline, Variable

__version__ = APP_VERSION

__all__ = [
    "NoteCalcEngine",
    "MathEvaluator",
    "MathEvaluationError",
    "Newline",
    "Comment",
    "Variable",
    "Expression",
    "Error",
    "DisplayRecord",
]
