"""
Error Message Utilities

Turns PostgreSQL failures raised while reading a view or calling a function
into readable text for tool-level error results.
"""

import re


def enhance_error_message(error: Exception) -> str:
    """
    Enhance database error messages with human-readable explanations.

    Handles:
    - Check, unique, foreign key and not-null violations
    - Permission errors on the scanned schema
    - Calls that no longer match a function signature
    - Values PostgreSQL could not parse for a column or parameter type

    Returns the enhanced error message string.
    """
    error_str = str(error)

    # Check for constraint violations
    constraint_match = re.search(r'violates check constraint "(\w+)"', error_str)
    if constraint_match:
        constraint_name = constraint_match.group(1)
        return f"Constraint violation: {constraint_name}. {error_str}"

    # Check for unique constraint violations (before the generic FK check)
    unique_match = re.search(r'duplicate key value violates unique constraint "(\w+)"', error_str)
    if unique_match:
        constraint_name = unique_match.group(1)
        return f"Duplicate entry: A record with this value already exists ({constraint_name})."

    # Check for foreign key violations
    fk_match = re.search(r'violates foreign key constraint "(\w+)"', error_str)
    if fk_match:
        constraint_name = fk_match.group(1)
        return (
            f"Foreign key violation ({constraint_name}): "
            f"The referenced record does not exist. {error_str}"
        )

    # Check for not-null violations
    null_match = re.search(r'null value in column "(\w+)".* violates not-null constraint', error_str)
    if null_match:
        column_name = null_match.group(1)
        return f"Required field missing: '{column_name}' cannot be null."

    # Privileges
    permission_match = re.search(r'permission denied for (\w+) (\S+)', error_str)
    if permission_match:
        object_kind, object_name = permission_match.groups()
        return (
            f"Permission denied: the database role cannot access {object_kind} {object_name}. "
            f"Grant the required privileges on the scanned schema."
        )

    # Function dropped or re-created with another signature since discovery
    function_match = re.search(r'function (\S+\(.*?\)) does not exist', error_str)
    if function_match:
        return (
            f"Function not found: {function_match.group(1)}. "
            f"The schema may have changed since tools were discovered."
        )

    # Value PostgreSQL could not parse
    syntax_match = re.search(r'invalid input syntax for type (\w+(?: \w+)*): "([^"]*)"', error_str)
    if syntax_match:
        type_name, value = syntax_match.groups()
        return f"Invalid value '{value}' for type {type_name}."

    # Return original error if no enhancement found
    return error_str
