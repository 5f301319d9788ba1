# Type names and the compatibility relation used by the semantic analyzer

INT = "INT"
FLOAT = "FLOAT"
TEXT = "TEXT"
BOOLEAN = "BOOLEAN"
NULL = "NULL"
UNKNOWN = "UNKNOWN"

# Marker written on table-name nodes and on column type nodes
TABLE = "TABLE"
TYPE = "TYPE"

# Pseudo type for a bare word supplied where a value was expected
IDENTIFIER = "IDENTIFIER"

VALID_TYPES = (
    "INT", "FLOAT", "TEXT", "VARCHAR", "CHAR",
    "DATE", "DATETIME", "BOOLEAN", "BIGINT",
)

_WIDENING = {INT, FLOAT}


def is_valid_type(name):
    return name is not None and name.upper() in VALID_TYPES


def number_type(lexeme):
    """FLOAT when the numeric literal has a decimal point, INT otherwise."""
    return FLOAT if "." in lexeme else INT


def compatible(type1, type2):
    """
    Check whether values of two types may be compared or assigned.

    UNKNOWN and NULL match anything, equal names match regardless of case,
    and INT / FLOAT widen to each other. The relation is not transitive, so
    it must only ever be evaluated on a concrete pair.
    """
    if type1 in (UNKNOWN, NULL) or type2 in (UNKNOWN, NULL):
        return True
    if type1.upper() == type2.upper():
        return True
    if type1.upper() in _WIDENING and type2.upper() in _WIDENING:
        return True
    return False
