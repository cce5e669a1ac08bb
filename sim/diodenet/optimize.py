"""Resistor-diode voltages by direct minimization of dissipated energy.

An alternative to the fixed-point iteration in `solver`: the free node
voltages are found with scipy's unconstrained minimizers, using the
analytic energy gradient.
"""

import logging

import numpy as np
from scipy.optimize import minimize

from .energy import energy, energy_gradient
from .network import (V_SINK, V_SOURCE, find_voltages,
                      resistance_from_voltages, validate_conductance)
from .errors import ValidationError
from .solver import DEFAULT_PARAMS

logger = logging.getLogger(__name__)


def symmetrized(C):
    """(C + C.T) / 2 with a zero diagonal: the network with diodes removed."""
    C = np.asarray(C, dtype=float)
    C0 = 0.5 * (C + C.T)
    np.fill_diagonal(C0, 0.0)
    return C0


def _pinned(x, s, t):
    y = np.array(x, dtype=float)
    y[s] = V_SOURCE
    y[t] = V_SINK
    return y


def find_voltages_opt(C, s, t, x0=None, method=None, options=None,
                      params=DEFAULT_PARAMS):
    """Voltages of a resistor-diode network by energy minimization.

    Args:
        C: Square nonnegative conductance matrix (may be asymmetric).
        s: Source node, held at 1 V.
        t: Sink node, held at 0 V.
        x0: Optional initial voltages. Defaults to the exact solution of
            the symmetrized (diode-free) network.
        method: scipy.optimize.minimize method name or a callable custom
            minimizer. Defaults to params.optimizer_method.
        options: Extra options passed to the minimizer.
        params: Solver settings (method and tolerance defaults).

    Returns:
        Minimizing voltage vector with source and sink re-pinned.
    """
    A = validate_conductance(C, s, t)
    n = A.shape[0]
    if x0 is None:
        x0 = find_voltages(symmetrized(A), s, t)
    x0 = np.asarray(x0, dtype=float)
    if x0.shape != (n,):
        raise ValidationError(
            "voltage_length",
            f"Initial voltage vector must have length {n}, got shape {x0.shape}",
        )

    def objective(x):
        return energy(A, _pinned(x, s, t))

    def gradient(x):
        g = energy_gradient(A, _pinned(x, s, t))
        g[s] = 0.0
        g[t] = 0.0
        return g

    result = minimize(
        objective, _pinned(x0, s, t), jac=gradient,
        method=method or params.optimizer_method,
        tol=params.optimizer_tol,
        options=options,
    )
    if not result.get("success", True):
        logger.warning(f"Energy minimization stopped early: {result.get('message')}")
    logger.debug(f"Energy minimization: {result.get('nit')} iterations, "
                 f"energy={result.fun:.6g}")

    return _pinned(result.x, s, t)


def resistance_opt(C, s, t, x0=None, method=None, options=None,
                   params=DEFAULT_PARAMS):
    """Effective resistance from s to t via energy minimization."""
    v = find_voltages_opt(C, s, t, x0, method, options, params)
    return resistance_from_voltages(C, v, t)
