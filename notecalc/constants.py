"""
NoteCalc Constants Module
Contains all global constants, lookup tables, patterns and configuration data.
"""

import math
import re


# =============================================================================
# NAMED CONSTANTS
# =============================================================================

# Constants that may appear by name inside any line
CONSTANTS = [
    {'name': 'Pi', 'identifier': 'pi', 'value': 3.1415926535},
    {'name': 'Eulers Number', 'identifier': 'e', 'value': 2.7182818284},
    {'name': 'Eulers Constant', 'identifier': 'g', 'value': 0.5772156649},
    {'name': 'Golden Ratio', 'identifier': 'phi', 'value': 1.6180339887},
]

# Identifier -> value lookup built from the table above
CONSTANT_VALUES = {c['identifier']: c['value'] for c in CONSTANTS}


# =============================================================================
# MATHEMATICAL FUNCTIONS
# =============================================================================

def lcm(a, b):
    """Calculate the Least Common Multiple of two numbers"""
    return abs(a * b) // math.gcd(a, b)

# All math functions available in expressions
MATH_FUNCS = {
    # Trigonometric functions
    'sin': math.sin, 'cos': math.cos, 'tan': math.tan,
    'asin': math.asin, 'acos': math.acos, 'atan': math.atan,
    'sinh': math.sinh, 'cosh': math.cosh, 'tanh': math.tanh,
    'asinh': math.asinh, 'acosh': math.acosh, 'atanh': math.atanh,
    'degrees': math.degrees, 'radians': math.radians,
    # Power and logarithmic functions
    'sqrt': math.sqrt, 'pow': math.pow, 'exp': math.exp,
    'log': math.log10, 'ln': math.log, 'log10': math.log10, 'log2': math.log2,
    # Other mathematical functions
    'ceil': math.ceil, 'floor': math.floor, 'abs': abs, 'round': round,
    'factorial': math.factorial, 'gcd': math.gcd, 'lcm': lcm,
    'min': min, 'max': max,
}

# Names the evaluator resolves on its own
MATH_NAMES = {'pi': math.pi, 'e': math.e}

# Largest exponent accepted by the evaluator
MAX_EXPONENT = 10000
# Largest power, in decimal digits, accepted by the evaluator (float range)
MAX_POWER_DIGITS = 308
# Largest factorial argument whose result still fits in a float
MAX_FACTORIAL = 170

# Names that cannot be used as variable names
RESERVED_IDENTIFIERS = frozenset(
    set(MATH_FUNCS) | set(CONSTANT_VALUES) | set(MATH_NAMES) | {'mod'}
)


# =============================================================================
# LINE PATTERNS
# =============================================================================

COMMENT_PATTERN = re.compile(r'^/{2}(.*?)$')
HEADING_PATTERN = re.compile(r'^(.*?):$')
# Name, assignment operator (spaces required on both sides), right-hand side
VARIABLE_PATTERN = re.compile(r'^\s*(\w+) +(=) +([^=]+)$')
SUFFIX_PATTERN = re.compile(r'(\d+(?:\.\d+)?)([KkMB])\b')
BARE_NUMBER_PATTERN = re.compile(r'^\d+(?:\.\d+)?$')
DIGIT_PATTERN = re.compile(r'\d')

# Magnitude suffixes
SUFFIX_MULTIPLIERS = {
    'k': 1000,
    'K': 1000,
    'M': 1000000,
    'B': 1000000000,
}


# =============================================================================
# MESSAGES
# =============================================================================

ERROR_INVALID_VARIABLE = 'invalid variable name'
ERROR_DUPLICATE_VARIABLE = 'duplicate variable'
ERROR_LABEL = 'Error'
DEFAULT_TITLE = 'New document'


# =============================================================================
# UI CONSTANTS
# =============================================================================

# Theme colors
COLORS = {
    'comment': '#7ED321',
    'number': '#ffffff',
    'operator': '#4DA6FF',
    'function': '#4DA6FF',
    'constant': '#F5A623',
    'variable': '#BD10E0',
    'paren': '#6FCF97',
    'unmatched': '#FF5C5C',
    'error': '#FF5C5C',
}

# Function names for highlighting
FUNCTION_NAMES = set(MATH_FUNCS)


# =============================================================================
# CONFIGURATION
# =============================================================================

# Documents
TITLE_MAX_LENGTH = 30
DOCUMENT_ID_LENGTH = 8

# Result formatting
MAX_FRACTION_DIGITS = 15

# API server
API_HOST = '127.0.0.1'
API_PORT = 8000

# Application metadata
APP_NAME = "NoteCalc"
APP_VERSION = "1.0.0"
