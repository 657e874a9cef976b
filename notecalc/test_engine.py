"""
Tests for the NoteCalc evaluation engine.
Covers change detection, variables, duplicates, renames and projection.
"""

import pytest

from notecalc.engine import NoteCalcEngine
from notecalc.math_evaluator import MathEvaluator
from notecalc.tokens import Comment, Error, Expression, Newline, Variable


class CountingEvaluator:
    """Records every string handed to the evaluator"""

    def __init__(self):
        self.calls = []
        self.inner = MathEvaluator()

    def evaluate(self, text):
        self.calls.append(text)
        return self.inner.evaluate(text)


class BrokenEvaluator:
    def evaluate(self, text):
        raise RuntimeError("evaluator offline")


def test_basic_expressions():
    """Test plain arithmetic lines"""
    test_cases = [
        ("2 + 3", 5),
        ("10 * 5", 50),
        ("100 / 4", 25),
        ("2 ^ 3", 8),
        ("(1 + 2) * 3", 9),
    ]

    for expr, expected in test_cases:
        engine = NoteCalcEngine(expr)
        token = engine.tokens[0]
        assert isinstance(token, Expression), f"Failed: {expr}"
        assert token.result == pytest.approx(expected), f"Failed: {expr}"


def test_text_without_digits_is_comment():
    engine = NoteCalcEngine("just some words\nGroceries:\n// 5 apples")

    assert engine.tokens == [
        Comment("just some words"),
        Comment("Groceries:"),
        Comment("// 5 apples"),
    ]
    assert [r.type for r in engine.project()] == ["null", "null", "null"]


def test_blank_lines_and_token_count():
    engine = NoteCalcEngine("1\n\n3")
    assert engine.tokens[1] == Newline()
    assert len(engine.tokens) == 3

    engine.evaluate("1")
    assert len(engine.tokens) == 1
    assert len(engine.project()) == 1

    engine.evaluate("1\n2\n3\n4")
    assert len(engine.tokens) == 4
    assert engine.tokens[3] == Expression("4", 4.0)


def test_idempotent_evaluation():
    text = "price = 12\nqty = 3\nprice * qty\nnotes here"
    engine = NoteCalcEngine()

    first = engine.evaluate(text)
    second = engine.evaluate(text)

    assert first == second
    assert first[2].value == pytest.approx(36)


def test_duplicate_variable():
    engine = NoteCalcEngine("x = 1\nx = 2\ny = x + 1")

    assert engine.tokens[0] == Variable("x", 1.0)
    assert engine.tokens[1] == Error("duplicate variable", "x")
    assert engine.tokens[2] == Variable("y", 2.0)

    records = engine.project()
    assert records[1].type == "error"
    assert records[1].value == "duplicate variable"


def test_reserved_name_rejected():
    engine = NoteCalcEngine("pi = 5\n2 * pi")

    assert engine.tokens[0] == Error("invalid variable name", "pi")
    assert engine.tokens[1].result == pytest.approx(6.283185307)


def test_custom_reserved_names():
    engine = NoteCalcEngine("total = 5", reserved={"total"})
    assert engine.tokens[0] == Error("invalid variable name", "total")


def test_abbreviation_expansion():
    engine = NoteCalcEngine("2k + 1\nsalary = 50k\nsalary / 2")

    assert engine.tokens[0] == Expression("2000 + 1", 2001.0)
    assert engine.tokens[1] == Variable("salary", 50000.0)
    assert engine.tokens[2].result == pytest.approx(25000)


def test_constant_substitution():
    engine = NoteCalcEngine("2 * pi")
    assert engine.tokens[0].text == "2 * 3.1415926535"
    assert engine.tokens[0].result == pytest.approx(6.283185307)


def test_word_boundaries():
    engine = NoteCalcEngine("pie = 2\npie + pi\ne2 + e")

    assert engine.tokens[1].result == pytest.approx(5.1415926535)
    # e2 is a word of its own and is left alone
    assert engine.tokens[2].text == "e2 + 2.7182818284"
    assert engine.tokens[2].result is None


def test_display_marker_is_removed():
    engine = NoteCalcEngine("2 + 2 =")
    assert engine.tokens[0] == Expression("2 + 2", 4.0)


def test_unresolved_words_on_assignment_are_dropped():
    engine = NoteCalcEngine("apples = 3 apples\nx = foo")

    assert engine.tokens[0] == Variable("apples", 3.0)
    assert engine.tokens[1] == Variable("x", None)
    assert engine.project()[1].value == ""


def test_unresolved_words_on_expression_are_kept():
    engine = NoteCalcEngine("x * 2")

    assert engine.tokens[0] == Expression("x * 2", None)
    assert engine.project()[0].type == "null"


def test_line_above_definition_is_revisited():
    engine = NoteCalcEngine("x * 2\nx = 3\nx * 2")

    assert engine.tokens[0].result == pytest.approx(6)
    assert engine.tokens[1] == Variable("x", 3.0)
    assert engine.tokens[2].result == pytest.approx(6)


def test_negative_values_keep_precedence():
    engine = NoteCalcEngine("x = 0 - 3\nx ^ 2")

    assert engine.tokens[0] == Variable("x", -3.0)
    assert engine.tokens[1].result == pytest.approx(9)


def test_only_changed_lines_are_evaluated():
    evaluator = CountingEvaluator()
    engine = NoteCalcEngine("1 + 1\n2 + 2", evaluator=evaluator)
    assert evaluator.calls == ["1 + 1", "2 + 2"]

    evaluator.calls.clear()
    engine.evaluate("1 + 1\n3 + 3")
    assert evaluator.calls == ["3 + 3"]

    evaluator.calls.clear()
    engine.evaluate("1 + 1\n3 + 3")
    assert evaluator.calls == []


def test_initial_load_reevaluates_everything():
    evaluator = CountingEvaluator()
    engine = NoteCalcEngine("1 + 1\n2 + 2", evaluator=evaluator)
    evaluator.calls.clear()

    engine.evaluate("1 + 1\n2 + 2", is_initial_load=True)
    assert evaluator.calls == ["1 + 1", "2 + 2"]


def test_tabs_are_ignored():
    evaluator = CountingEvaluator()
    engine = NoteCalcEngine("\t2 + 2", evaluator=evaluator)
    assert engine.tokens[0] == Expression("2 + 2", 4.0)

    evaluator.calls.clear()
    engine.evaluate("2 + 2\t")
    assert evaluator.calls == []


def test_value_change_propagates():
    engine = NoteCalcEngine("price = 10\ntotal = price * 2\ntotal + 1")
    assert engine.tokens[2].result == pytest.approx(21)

    engine.evaluate("price = 20\ntotal = price * 2\ntotal + 1")

    assert engine.tokens[1] == Variable("total", 40.0)
    assert engine.tokens[2].result == pytest.approx(41)


def test_rename_reevaluates_users_of_old_name():
    engine = NoteCalcEngine("a = 1\nb = a + 1")
    assert engine.tokens[1] == Variable("b", 2.0)

    engine.evaluate("z = 1\nb = a + 1")

    assert engine.tokens[0] == Variable("z", 1.0)
    # a no longer resolves and is dropped from the right-hand side
    assert engine.tokens[1] == Variable("b", 1.0)
    assert {"a", "z"} <= engine.edited_names


def test_rename_reaches_lines_above():
    engine = NoteCalcEngine("a * 2\nb = 1")
    assert engine.tokens[0].result is None

    engine.evaluate("a * 2\na = 1")

    assert engine.tokens[1] == Variable("a", 1.0)
    assert engine.tokens[0] == Expression("1 * 2", 2.0)


def test_edited_line_sees_definition_below():
    engine = NoteCalcEngine("b = a + 1\na = 1")
    assert engine.tokens[0] == Variable("b", 2.0)

    engine.evaluate("b = a + 2\na = 1")

    assert engine.tokens[0] == Variable("b", 3.0)


def test_mutual_references_terminate():
    engine = NoteCalcEngine("a = b + 1\nb = a + 1")

    assert engine.tokens == [Variable("a", 3.0), Variable("b", 4.0)]
    assert engine.evaluate("a = b + 1\nb = a + 1") == engine.project()


def test_line_never_reads_its_own_binding():
    engine = NoteCalcEngine("total = total + 1")
    assert engine.tokens[0] == Variable("total", 1.0)

    engine.evaluate("total = total + 1", is_initial_load=True)
    assert engine.tokens[0] == Variable("total", 1.0)


def test_number_glued_to_name_is_not_substituted():
    engine = NoteCalcEngine("x = 2\n2pi\n3x")

    assert engine.tokens[1] == Expression("2pi", None)
    assert engine.tokens[2] == Expression("3x", None)


def test_removing_definition_revives_duplicate():
    engine = NoteCalcEngine("x = 1\nx = 2\nx + 1")
    assert isinstance(engine.tokens[1], Error)

    engine.evaluate("\nx = 2\nx + 1")

    assert engine.tokens[0] == Newline()
    assert engine.tokens[1] == Variable("x", 2.0)
    assert engine.tokens[2].result == pytest.approx(3)


def test_inserted_definition_above_makes_later_one_duplicate():
    engine = NoteCalcEngine("x = 1")
    engine.evaluate("x = 5\nx = 1\nx * 2")

    assert engine.tokens[0] == Variable("x", 5.0)
    assert engine.tokens[1] == Error("duplicate variable", "x")
    assert engine.tokens[2].result == pytest.approx(10)


def test_evaluator_failures_are_not_fatal():
    engine = NoteCalcEngine("1 / 0\n2 +\ny = 1 / 0")

    assert engine.tokens[0] == Expression("1 / 0", None)
    assert engine.tokens[1] == Expression("2 +", None)
    assert engine.tokens[2] == Variable("y", None)

    broken = NoteCalcEngine("1 + 1\nx = 2 * 3", evaluator=BrokenEvaluator())
    assert broken.tokens[0] == Expression("1 + 1", None)
    assert broken.tokens[1] == Variable("x", None)


def test_project_does_not_reevaluate():
    evaluator = CountingEvaluator()
    engine = NoteCalcEngine("x = 4\nx * x", evaluator=evaluator)
    evaluator.calls.clear()

    records = engine.project()

    assert evaluator.calls == []
    assert records[0].type == "variable"
    assert records[0].name == "x"
    assert records[1].type == "result"
    assert records[1].value == pytest.approx(16)


def test_variables_lookup():
    engine = NoteCalcEngine("a = 1\nb = 2\na = 3")
    assert engine.variables() == {"a": 1.0, "b": 2.0}
