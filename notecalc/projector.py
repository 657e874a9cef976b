"""
NoteCalc Result Projector
Maps tokens to display-neutral records for whatever renders the results.
"""

from typing import List, Optional, Sequence

from notecalc.constants import ERROR_LABEL, MAX_FRACTION_DIGITS
from notecalc.tokens import DisplayRecord, Error, Expression, Token, Variable


def format_value(value: Optional[float]) -> str:
    """en-US style number: thousands separators, at most 15 fraction digits"""
    if value is None or value == '':
        return ''
    text = f"{value:,.{MAX_FRACTION_DIGITS}f}"
    if '.' in text:
        text = text.rstrip('0').rstrip('.')
    if text in ('-0', ''):
        text = '0'
    return text


def project_token(token: Token) -> DisplayRecord:
    if isinstance(token, Variable):
        value = '' if token.value is None else token.value
        return DisplayRecord('variable', value, name=token.name, display=format_value(token.value))

    if isinstance(token, Error):
        return DisplayRecord('error', token.message, display=ERROR_LABEL)

    if isinstance(token, Expression) and token.result is not None:
        return DisplayRecord('result', token.result, display=format_value(token.result))

    # Newline, Comment and failed expressions show nothing
    return DisplayRecord('null')


def project_tokens(tokens: Sequence[Token]) -> List[DisplayRecord]:
    """One record per token, in line order. Tokens are not modified."""
    return [project_token(token) for token in tokens]
