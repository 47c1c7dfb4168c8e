"""
Error taxonomy for reading Massif profiles.

The data model never raises for well-typed values. These errors belong to
the producers at the boundary: the text parser and the dict/JSON/YAML
decoder.

    MalformedInputError:
        The input cannot be mapped onto the model at all
        (missing keys, non-numeric counts, tree lines out of place).

    InconsistentInputError:
        The input maps onto the model but breaks one of its invariants
        (declared child count differs from children found,
        snapshots out of order).
"""

from typing import Optional


class MassifError(Exception):
    """Base class for all Massif input errors."""
    pass


class MalformedInputError(MassifError):
    """Raised when input cannot be mapped onto the Massif model."""

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class InconsistentInputError(MassifError):
    """Raised when input maps onto the model but violates an invariant."""
    pass


__all__ = ["MassifError", "MalformedInputError", "InconsistentInputError"]
