"""
NoteCalc Line Classifier
Sorts a single line of text into blank, comment/heading, assignment or expression.
"""

from enum import Enum
from typing import NamedTuple, Optional

from notecalc.constants import COMMENT_PATTERN, HEADING_PATTERN, VARIABLE_PATTERN


class LineKind(str, Enum):
    BLANK = 'blank'
    COMMENT = 'comment'
    ASSIGNMENT = 'assignment'
    EXPRESSION = 'expression'


class ClassifiedLine(NamedTuple):
    kind: LineKind
    text: str = ''
    name: Optional[str] = None
    rhs: Optional[str] = None


def remove_tabs(text: str) -> str:
    """Tabs are layout only and never take part in matching"""
    return text.replace('\t', '')


def is_word(text: str) -> bool:
    """True if text is one or more letters or underscores"""
    return bool(text) and all(ch.isalpha() or ch == '_' for ch in text)


def classify_line(text: str) -> ClassifiedLine:
    """
    Classify a line of text.

    Args:
        text (str): Raw line, tabs included or not

    Returns:
        ClassifiedLine: kind plus payload. Comments carry the trimmed text,
        assignments carry the trimmed name and right-hand side, expressions
        carry the text with a display-only ``=`` marker removed.
    """
    text = remove_tabs(text)

    if len(text) == 0:
        return ClassifiedLine(LineKind.BLANK)

    if COMMENT_PATTERN.match(text) or HEADING_PATTERN.match(text):
        return ClassifiedLine(LineKind.COMMENT, text.strip())

    match = VARIABLE_PATTERN.match(text)
    if match and is_word(match.group(1)):
        return ClassifiedLine(
            LineKind.ASSIGNMENT,
            text,
            name=match.group(1).strip(),
            rhs=match.group(3).strip(),
        )

    return ClassifiedLine(LineKind.EXPRESSION, text.replace('=', '', 1))
