"""
NoteCalc Tokens - one token per document line.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Union


@dataclass(frozen=True)
class Newline:
    """Blank line"""
    kind: str = field(default='newline', init=False)


@dataclass(frozen=True)
class Comment:
    """Free text, comment or heading; never evaluated"""
    text: str
    kind: str = field(default='comment', init=False)


@dataclass(frozen=True)
class Variable:
    """Assignment; value is None when the right-hand side did not resolve"""
    name: str
    value: Optional[float]
    kind: str = field(default='variable', init=False)


@dataclass(frozen=True)
class Expression:
    """Plain expression; result is None when evaluation failed"""
    text: str
    result: Optional[float]
    kind: str = field(default='expression', init=False)


@dataclass(frozen=True)
class Error:
    """Rejected assignment"""
    message: str
    name: Optional[str] = None
    kind: str = field(default='error', init=False)


Token = Union[Newline, Comment, Variable, Expression, Error]


def token_name(token: Token) -> Optional[str]:
    """Return the variable name a token carries, if any."""
    if isinstance(token, (Variable, Error)):
        return token.name
    return None


@dataclass(frozen=True)
class DisplayRecord:
    """
    Display-neutral result for one line.

    ``type`` is one of ``null``, ``variable``, ``result`` or ``error``.
    """
    type: str
    value: Any = ''
    name: Optional[str] = None
    display: str = ''

    def to_dict(self) -> Dict[str, Any]:
        data = {'type': self.type, 'value': self.value, 'display': self.display}
        if self.name is not None:
            data['name'] = self.name
        return data
