"""
Statement Builder

Generates ``CALL name(?, ?, ...)`` text with one positional marker per
bound field. Pure functions, no I/O.
"""

import re

from procmap.core.errors import InvalidProcedureNameError

# Plain identifier, optionally schema-qualified (schema.proc)
_IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_$]*(\.[A-Za-z_][A-Za-z0-9_$]*)?$")

# DB-API paramstyle -> marker understood by build_statement
_PARAMSTYLE_MARKERS = {
    "qmark": "?",
    "format": "%s",
    "pyformat": "%s",
    "numeric": ":n",
}


def placeholder_for(paramstyle: str) -> str:
    """
    Map a DB-API paramstyle to a positional marker.

    Args:
        paramstyle: Driver paramstyle (qmark, format, pyformat, numeric)

    Returns:
        "?", "%s" or ":n"

    Raises:
        ValueError: For "named" or unknown styles, which cannot take
            positional arguments
    """
    try:
        return _PARAMSTYLE_MARKERS[paramstyle]
    except KeyError:
        raise ValueError(f"Paramstyle {paramstyle!r} does not support positional arguments") from None


def validate_identifier(name: str) -> str:
    """Reject anything that is not safe to splice into call text."""
    if not isinstance(name, str) or not _IDENTIFIER.match(name):
        raise InvalidProcedureNameError(f"Invalid procedure or table name: {name!r}")
    return name


def build_statement(procedure_name: str, parameter_count: int, placeholder: str = "?") -> str:
    """
    Build the call text for a stored procedure.

    Args:
        procedure_name: Procedure to call, optionally schema-qualified
        parameter_count: Number of positional markers
        placeholder: "?", "%s" or ":n" (numbered :1, :2, ...)

    Returns:
        Call text, e.g. ``CALL create_user(?, ?, ?)``

    Raises:
        InvalidProcedureNameError: If the procedure name is not an identifier
        ValueError: If parameter_count is negative

    Example:
        >>> build_statement("create_user", 3)
        'CALL create_user(?, ?, ?)'
        >>> build_statement("create_user", 2, placeholder=":n")
        'CALL create_user(:1, :2)'
    """
    validate_identifier(procedure_name)
    if parameter_count < 0:
        raise ValueError(f"parameter_count must be >= 0, got {parameter_count}")

    if placeholder == ":n":
        markers = [f":{i}" for i in range(1, parameter_count + 1)]
    else:
        markers = [placeholder] * parameter_count

    return f"CALL {procedure_name}({', '.join(markers)})"
