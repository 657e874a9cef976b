"""
NoteCalc Abbreviation Expander
Rewrites numbers written with a magnitude suffix (2k, 1.5M, 3B) as plain numerals.
"""

from decimal import Decimal

from notecalc.constants import SUFFIX_MULTIPLIERS, SUFFIX_PATTERN


def format_decimal(value: Decimal) -> str:
    """Plain decimal text without exponent or trailing zeros"""
    text = format(value.normalize(), 'f')
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    return text


def expand_abbreviations(text: str) -> str:
    """
    Expand every ``<number><suffix>`` in text.

    Matches are found on the original text and then replaced one by one,
    each replacing the first remaining literal occurrence of the matched
    substring, so identical matches expand independently in scan order.
    """
    for match in SUFFIX_PATTERN.finditer(text):
        multiplier = SUFFIX_MULTIPLIERS.get(match.group(2))
        if multiplier is None:
            continue
        expanded = format_decimal(Decimal(match.group(1)) * multiplier)
        text = text.replace(match.group(0), expanded, 1)
    return text
