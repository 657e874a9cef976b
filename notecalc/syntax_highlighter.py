"""
NoteCalc Syntax Highlighter - highlight ranges for the editor.
Produces CSS class information instead of any toolkit-specific formatting.
"""

import re
from typing import Any, Dict, List

from notecalc.classifier import LineKind, classify_line
from notecalc.constants import COLORS, CONSTANT_VALUES, FUNCTION_NAMES, VARIABLE_PATTERN


class SyntaxHighlighter:
    """
    Syntax highlighter that generates CSS class information for frontend.
    """

    def __init__(self, constants=None):
        self.function_names = FUNCTION_NAMES
        self.constant_names = set(CONSTANT_VALUES if constants is None else constants)

        # CSS class mappings
        self.css_classes = {
            'number': 'syntax-number',
            'operator': 'syntax-operator',
            'function': 'syntax-function',
            'constant': 'syntax-constant',
            'variable': 'syntax-variable',
            'paren': 'syntax-paren',
            'unmatched': 'syntax-unmatched',
            'comment': 'syntax-comment',
        }

    def _highlight(self, start: int, length: int, kind: str) -> Dict[str, Any]:
        return {
            "start": start,
            "length": length,
            "class": self.css_classes[kind],
            "color": COLORS[kind],
        }

    def highlight_text(self, text: str) -> List[Dict[str, Any]]:
        """
        Generate syntax highlighting data for text.

        Args:
            text (str): Whole document

        Returns:
            list: Highlight ranges with CSS classes and colors, offsets
            relative to the start of text
        """
        highlights = []

        if not text.strip():
            return highlights

        current_pos = 0
        for line in text.split('\n'):
            line_kind = classify_line(line).kind

            if line_kind == LineKind.COMMENT:
                highlights.append(self._highlight(current_pos, len(line), 'comment'))
            elif line_kind != LineKind.BLANK:
                highlights.extend(self.highlight_line(line, current_pos))

            # Move to next line (including newline character)
            current_pos += len(line) + 1

        return highlights

    def highlight_line(self, line, line_start):
        """
        Highlight a single non-comment line
        """
        highlights = []

        # Numbers, with an optional magnitude suffix
        for match in re.finditer(r"\b\d+(?:\.\d+)?(?:[KkMB]\b)?", line):
            highlights.append(self._highlight(line_start + match.start(), match.end() - match.start(), 'number'))

        for match in re.finditer(r"\bmod\b|[+\-*/%^=]", line):
            highlights.append(self._highlight(line_start + match.start(), match.end() - match.start(), 'operator'))

        for match in re.finditer(r"\b(\w+)\b(?=\s*\()", line):
            if match.group(1) in self.function_names:
                highlights.append(self._highlight(line_start + match.start(), len(match.group(1)), 'function'))

        for match in re.finditer(r"(?<![\w.])([^\W\d]+)(?![\w(])", line):
            if match.group(1) in self.constant_names:
                highlights.append(self._highlight(line_start + match.start(), len(match.group(1)), 'constant'))

        variable = VARIABLE_PATTERN.match(line)
        if variable:
            highlights.append(self._highlight(line_start + variable.start(1), len(variable.group(1)), 'variable'))

        highlights.extend(self._highlight_parentheses_in_line(line, line_start))

        # Sort highlights by start position to ensure proper ordering
        highlights.sort(key=lambda x: x['start'])

        return highlights

    def _highlight_parentheses_in_line(self, line: str, line_start: int) -> List[Dict[str, Any]]:
        """Highlight parentheses in a single line"""
        highlights = []
        stack = []
        pairs = []
        stray = []

        # Find matching parentheses
        for i, ch in enumerate(line):
            if ch == '(':
                stack.append(i)
            elif ch == ')':
                if stack:
                    pairs.append((stack.pop(), i))
                else:
                    stray.append(i)

        for start, end in pairs:
            highlights.append(self._highlight(line_start + start, 1, 'paren'))
            highlights.append(self._highlight(line_start + end, 1, 'paren'))

        # Highlight unmatched parentheses of either kind
        for pos in sorted(stack + stray):
            highlights.append(self._highlight(line_start + pos, 1, 'unmatched'))

        return highlights

    def get_css_styles(self) -> str:
        """
        Generate CSS styles for syntax highlighting.

        Returns:
            str: CSS stylesheet for syntax highlighting
        """
        rules = []
        for kind, css_class in self.css_classes.items():
            rule = f".{css_class} {{\n    color: {COLORS[kind]};\n"
            if kind == 'comment':
                rule += "    font-style: italic;\n"
            elif kind == 'unmatched':
                rule += "    background-color: rgba(248, 81, 73, 0.2);\n"
            elif kind == 'variable':
                rule += "    font-weight: bold;\n"
            rules.append(rule + "}\n")
        return "/* NoteCalc Syntax Highlighting Styles */\n" + "\n".join(rules)
