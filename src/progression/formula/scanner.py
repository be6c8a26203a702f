"""Identifier scanning for formulas.

Finds the variable-like names a formula refers to. Numeric literals never
match the identifier pattern because identifiers cannot start with a digit.
"""

import re

from progression.formula.functions import is_function_name

IDENTIFIER_PATTERN = re.compile(r"[A-Za-z_][A-Za-z0-9_]*")


def scan_identifiers(formula: str) -> list[str]:
    """
    Return every identifier in the formula, in order, duplicates included.

    Function names are included; callers filter them as needed.

    Args:
        formula: Formula text

    Returns:
        List of identifier substrings
    """
    if not formula:
        return []
    return IDENTIFIER_PATTERN.findall(formula)


def extract_variables(formula: str) -> list[str]:
    """
    Return the variable names a formula references.

    Built-in function names are dropped. Each name appears once, in order of
    first appearance, with the spelling it first had.

    Args:
        formula: Formula text

    Returns:
        List of referenced variable names
    """
    if not formula or formula.isspace():
        return []

    seen: set[str] = set()
    variables: list[str] = []
    for identifier in scan_identifiers(formula):
        if is_function_name(identifier) or identifier in seen:
            continue
        seen.add(identifier)
        variables.append(identifier)
    return variables


def is_identifier(text: str) -> bool:
    """Return True if the whole string is a single identifier."""
    return IDENTIFIER_PATTERN.fullmatch(text or "") is not None
