"""Exception and warning types raised by the solvers."""

from dataclasses import dataclass

import numpy as np


class DiodeNetError(Exception):
    """Base class for all errors raised by diodenet."""
    pass


@dataclass(eq=False)
class ValidationError(DiodeNetError, ValueError):
    """Malformed conductance matrix, voltage vector or node pair.

    Attributes:
        condition: Short name of the failed check, e.g. "square",
            "nonnegative", "symmetric", "node_range", "distinct_nodes".
        details: Human readable description.
    """
    condition: str
    details: str

    def __str__(self):
        return f"{self.details} [{self.condition}]"


@dataclass(eq=False)
class SolverError(DiodeNetError, np.linalg.LinAlgError):
    """The nodal system is singular or has no path from source to sink.

    Catchable both as a DiodeNetError and as numpy's LinAlgError.
    """
    details: str

    def __str__(self):
        return f"Voltage solve failed: {self.details}"


class ZeroCurrentError(DiodeNetError, ZeroDivisionError):
    """No net current reaches the sink, so resistance is undefined."""
    pass


class ConvergenceWarning(UserWarning):
    """The diode fixed-point iteration cycled, stalled or gained energy."""
    pass
