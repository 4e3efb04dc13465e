"""Error taxonomy for the constraint-graph core.

All core errors are raised synchronously and never swallowed inside the
core. The service layer maps each class to a ``ServiceError`` code.
"""

from __future__ import annotations


class NclError(Exception):
    """Base class for every error raised by the core."""

    code = "NCL_ERROR"


class DuplicateIdError(NclError):
    """An ``add_*`` call used an id that is already registered."""

    code = "DUPLICATE_ID"


class NotFoundError(NclError, KeyError):
    """A ``get_*`` / ``remove_*`` call referenced an unknown id."""

    code = "NOT_FOUND"

    def __str__(self) -> str:
        # KeyError quotes its argument; keep the plain message.
        return str(self.args[0]) if self.args else ""


class ReferentialError(NclError):
    """An edge or direction query referenced a missing or non-incident vertex."""

    code = "REFERENTIAL"


class FormatError(NclError, ValueError):
    """Malformed CNF string, QBF string, or graph description."""

    code = "FORMAT"
