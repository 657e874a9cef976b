"""
NoteCalc Core Engine - incremental line evaluation.
Keeps one token per line and re-evaluates only the lines a new text affects.
"""

import heapq
import logging
import math
from typing import Dict, List, Optional, Set

from notecalc.abbreviations import expand_abbreviations
from notecalc.classifier import LineKind, classify_line, remove_tabs
from notecalc.constants import (
    BARE_NUMBER_PATTERN, CONSTANT_VALUES, DIGIT_PATTERN,
    ERROR_DUPLICATE_VARIABLE, ERROR_INVALID_VARIABLE, RESERVED_IDENTIFIERS,
)
from notecalc.math_evaluator import MathEvaluator
from notecalc.projector import project_tokens
from notecalc.substitution import SymbolSubstituter, contains_word
from notecalc.tokens import (
    Comment, Error, Expression, Newline, Token, Variable, token_name,
)

logger = logging.getLogger(__name__)


class NoteCalcEngine:
    """
    Evaluation engine for one document.

    Owns the token array, the snapshot of the last evaluated text per line,
    and the per-pass set of edited variable names. Each call to ``evaluate``
    runs one complete pass; passes never overlap.
    """

    def __init__(self, text="", evaluator=None, constants=None, reserved=None):
        self.evaluator = evaluator if evaluator is not None else MathEvaluator()
        self.constants = dict(CONSTANT_VALUES if constants is None else constants)
        if reserved is None:
            reserved = RESERVED_IDENTIFIERS | set(self.constants)
        self.reserved = frozenset(reserved)
        self.substituter = SymbolSubstituter(self.constants)

        self.tokens: List[Token] = []
        self.snapshot: List[str] = []
        self.edited_names: Set[str] = set()
        self.evaluated = False

        self.evaluate(text, is_initial_load=True)

    # =========================================================================
    # ENTRY POINTS
    # =========================================================================

    def evaluate(self, full_text, is_initial_load=False):
        """
        Run one evaluation pass over the complete document text.

        Args:
            full_text (str): Whole document, not a patch
            is_initial_load (bool): Treat every line as changed

        Returns:
            list: DisplayRecord per line
        """
        lines = [remove_tabs(line) for line in full_text.split('\n')]
        initial = is_initial_load or not self.evaluated

        self._resize(len(lines))
        self.edited_names = set()

        queue = [
            i for i, line in enumerate(lines)
            if initial or i >= len(self.snapshot) or line != self.snapshot[i]
        ]
        heapq.heapify(queue)
        queued = set(queue)
        evaluated_count = 0

        while queue:
            i = heapq.heappop(queue)
            queued.discard(i)

            old_token = self.tokens[i]
            new_token = self._evaluate_line(i, lines[i])
            self.tokens[i] = new_token
            evaluated_count += 1

            for name in self._touched_names(old_token, new_token):
                if name not in self.edited_names:
                    # newly edited name: every user, above or below
                    self.edited_names.add(name)
                    targets = [j for j in self._lines_referencing(lines, name) if j != i]
                elif old_token != new_token:
                    # known name whose definition changed again: users below only
                    targets = [j for j in self._lines_referencing(lines, name) if j > i]
                else:
                    continue
                for j in targets:
                    if j not in queued:
                        heapq.heappush(queue, j)
                        queued.add(j)

        self.snapshot = lines
        self.evaluated = True

        logger.debug(
            "Evaluated %d of %d lines, edited names: %s",
            evaluated_count, len(lines), sorted(self.edited_names)
        )
        return self.project()

    def project(self):
        """Display records for the current tokens, without re-evaluating"""
        return project_tokens(self.tokens)

    # =========================================================================
    # PASS HELPERS
    # =========================================================================

    def _resize(self, line_count):
        """Keep exactly one token and one snapshot entry per line"""
        if len(self.tokens) > line_count:
            del self.tokens[line_count:]
        else:
            self.tokens.extend(Newline() for _ in range(line_count - len(self.tokens)))
        if len(self.snapshot) > line_count:
            del self.snapshot[line_count:]

    @staticmethod
    def _touched_names(old_token, new_token):
        names = []
        new_name = token_name(new_token)
        old_name = token_name(old_token)
        if new_name is not None:
            names.append(new_name)
        if old_name is not None and old_name != new_name:
            names.append(old_name)
        return names

    @staticmethod
    def _lines_referencing(lines, name):
        return [
            j for j, line in enumerate(lines)
            if contains_word(line, name)
        ]

    def _lookup_variable(self, name, index) -> Optional[Variable]:
        """First Variable named ``name`` in the current tokens, other than line ``index``"""
        for j, token in enumerate(self.tokens):
            if j == index:
                continue
            if isinstance(token, Variable) and token.name == name:
                return token
        return None

    def _defined_above(self, name, index) -> bool:
        return any(
            isinstance(token, Variable) and token.name == name
            for token in self.tokens[:index]
        )

    # =========================================================================
    # LINE EVALUATION
    # =========================================================================

    def _evaluate_line(self, index, text) -> Token:
        line = classify_line(text)

        if line.kind == LineKind.BLANK:
            return Newline()
        if line.kind == LineKind.COMMENT:
            return Comment(line.text)
        if line.kind == LineKind.ASSIGNMENT:
            return self._resolve_variable(index, line.name, line.rhs)
        return self._resolve_expression(index, line.text)

    def _resolve_variable(self, index, name, rhs) -> Token:
        name = name.strip()

        if name in self.reserved:
            return Error(ERROR_INVALID_VARIABLE, name)

        if self._defined_above(name, index):
            return Error(ERROR_DUPLICATE_VARIABLE, name)

        value = expand_abbreviations(rhs)
        value = self.substituter.substitute(
            value, lambda word: self._lookup_variable(word, index), drop_unresolved=True
        ).strip()

        if BARE_NUMBER_PATTERN.match(value):
            number = float(value)
        else:
            number = self._run_evaluator(value)

        return Variable(name, number)

    def _resolve_expression(self, index, text) -> Token:
        value = expand_abbreviations(text)
        value = self.substituter.substitute(
            value, lambda word: self._lookup_variable(word, index)
        ).strip()

        if not DIGIT_PATTERN.search(value):
            return Comment(value)

        return Expression(value, self._run_evaluator(value))

    def _run_evaluator(self, text) -> Optional[float]:
        """Evaluator result as a finite float, or None on any failure"""
        try:
            result = self.evaluator.evaluate(text)
        except Exception as e:
            logger.debug("Could not evaluate '%s': %s", text, e)
            return None

        try:
            result = float(result)
        except (TypeError, ValueError, OverflowError):
            return None
        if not math.isfinite(result):
            return None
        return result

    # =========================================================================
    # INSPECTION
    # =========================================================================

    def variables(self) -> Dict[str, Optional[float]]:
        """Bound variables by name, first definition only"""
        bound = {}
        for token in self.tokens:
            if isinstance(token, Variable) and token.name not in bound:
                bound[token.name] = token.value
        return bound
