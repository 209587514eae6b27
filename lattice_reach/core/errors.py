# lattice_reach/core/errors.py
#!/usr/bin/env python3
from typing import Optional


class LatticeReachError(Exception):
    pass


class ParseError(LatticeReachError, ValueError):
    """Malformed grid text. `line`/`column` are 1-based when known."""

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.line = line
        self.column = column
        where = ""
        if line is not None:
            where = f" (line {line}" + (f", column {column})" if column is not None else ")")
        super().__init__(message + where)


class UnsupportedInputError(LatticeReachError):
    """The tile breaks a structural assumption of the lattice or closed-form path."""


class LatticeInvariantError(LatticeReachError, RuntimeError):
    pass
