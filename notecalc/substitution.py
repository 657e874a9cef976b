"""
NoteCalc Symbol Substituter
Replaces named constants and variables inside a line with their numeric values.

Words are found with an explicit scan rather than regex lookarounds: a word
starts with a letter or underscore and runs through letters, digits and
underscores, so ``pie`` never matches ``pi`` and ``e2`` never matches ``e``.
"""

import logging
from typing import Callable, Dict, List, Optional, Tuple

from notecalc.constants import CONSTANT_VALUES

logger = logging.getLogger(__name__)

# (start, end, word)
WordSpan = Tuple[int, int, str]


def _starts_word(ch: str) -> bool:
    return ch.isalpha() or ch == '_'


def _continues_word(ch: str) -> bool:
    return ch.isalnum() or ch == '_'


def find_words(text: str) -> List[WordSpan]:
    """Return every word in text, left to right, with its span."""
    words = []
    i = 0
    length = len(text)
    while i < length:
        if _starts_word(text[i]) and (i == 0 or not _continues_word(text[i - 1])):
            start = i
            i += 1
            while i < length and _continues_word(text[i]):
                i += 1
            words.append((start, i, text[start:i]))
        else:
            i += 1
    return words


def contains_word(text: str, name: str) -> bool:
    """True if name occurs in text as a whole word"""
    return any(word == name for _, _, word in find_words(text))


def replace_words(text: str, resolver: Callable[[str], Optional[str]]) -> str:
    """
    Rebuild text with each word replaced by ``resolver(word)``.

    Spans are collected first and the string is rebuilt from the untouched
    segments, so replacements of a different length never shift later matches.
    A resolver result of None keeps the word as is.
    """
    parts = []
    position = 0
    for start, end, word in find_words(text):
        replacement = resolver(word)
        if replacement is None:
            continue
        parts.append(text[position:start])
        parts.append(replacement)
        position = end
    if not parts:
        return text
    parts.append(text[position:])
    return ''.join(parts)


def format_number(value: Optional[float]) -> str:
    """Numeric text safe to drop into an arithmetic expression."""
    if value is None:
        return ''
    if isinstance(value, float) and value.is_integer() and abs(value) < 1e15:
        text = str(int(value))
    else:
        text = repr(value)
    if value < 0:
        return '(' + text + ')'
    return text


class SymbolSubstituter:
    """
    Substitutes constants and resolved variables into a text fragment.
    """

    def __init__(self, constants: Optional[Dict[str, float]] = None):
        self.constants = dict(CONSTANT_VALUES if constants is None else constants)

    def substitute(self, text, lookup, drop_unresolved=False):
        """
        Replace every known word in text with its value.

        Args:
            text (str): Fragment to rewrite
            lookup (callable): name -> Variable token or None; only variables
                visible to the current line should be returned
            drop_unresolved (bool): Remove words that are neither a constant nor
                a variable (assignment right-hand sides) instead of keeping them

        Returns:
            str: Rewritten fragment
        """
        def resolve(word):
            if word in self.constants:
                return format_number(self.constants[word])
            variable = lookup(word)
            if variable is not None:
                return format_number(variable.value)
            if drop_unresolved:
                logger.debug("Dropping unresolved word '%s'", word)
                return ''
            return None

        return replace_words(text, resolve)
