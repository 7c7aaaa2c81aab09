"""Error taxonomy for splitting and combining."""

from __future__ import annotations


class SquadError(Exception):
    """Base class for all squad errors."""


class InvalidInput(SquadError, ValueError):
    """Malformed parameters (empty secret, k < 2, n < k, index out of range)."""


class TagVerificationFailed(SquadError):
    """Tag bytes did not interpolate to zero.

    Raised when too few shares were supplied, the shares were produced under
    different field parameters, or share data is corrupted.
    """


class ReconstructionFailed(SquadError):
    """The field engine could not interpolate the supplied shares."""


class FieldError(SquadError, ArithmeticError):
    """Invalid field parameters or undefined field operation."""


class EntropyError(SquadError):
    """The random source returned fewer bytes than requested."""
