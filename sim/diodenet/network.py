"""Conductance-matrix validation and the exact nodal voltage solver.

Nodes are numbered 0..n-1. The source node is clamped to 1 V and the sink
node to 0 V; every other node is free and is found by solving the
Laplacian system of the (symmetric) conductance matrix.
"""

import logging

import numpy as np
from scipy.sparse import csr_matrix
from scipy.sparse.csgraph import connected_components

from .errors import SolverError, ValidationError, ZeroCurrentError

logger = logging.getLogger(__name__)

V_SOURCE = 1.0   # Source node clamp (V)
V_SINK = 0.0     # Sink node clamp (V)


def validate_conductance(C, s=None, t=None, symmetric=False):
    """Check a conductance matrix and source/sink pair.

    Args:
        C: n-by-n array-like of nonnegative conductances.
        s: Optional source node index.
        t: Optional sink node index.
        symmetric: Also require C == C.T.

    Returns:
        A float copy of C.

    Raises:
        ValidationError: naming the first check that failed.
    """
    A = np.array(C, dtype=float)
    if A.ndim != 2 or A.shape[0] != A.shape[1]:
        raise ValidationError("square", f"Matrix must be square, got shape {A.shape}")
    if not np.all(np.isfinite(A)):
        raise ValidationError("finite", "Matrix entries must be finite")
    if np.any(A < 0):
        raise ValidationError("nonnegative", "Matrix entries must be nonnegative")
    if symmetric and not np.array_equal(A, A.T):
        raise ValidationError("symmetric", "Matrix must be symmetric")

    n = A.shape[0]
    if s is not None or t is not None:
        for name, node in (("source", s), ("sink", t)):
            if node is None or not 0 <= node < n:
                raise ValidationError(
                    "node_range",
                    f"The {name} node must be between 0 and {n - 1}, got {node}",
                )
        if s == t:
            raise ValidationError("distinct_nodes", "Source and sink must be different")
    return A


def laplacian(C):
    """Weighted graph Laplacian of C, ignoring the diagonal of C."""
    A = np.array(C, dtype=float)
    np.fill_diagonal(A, 0.0)
    L = -A
    np.fill_diagonal(L, A.sum(axis=1))
    return L


def check_path(A, s, t):
    """Raise SolverError unless every node is joined to s or t.

    Nodes cut off from both s and t leave the nodal matrix singular.
    """
    adjacency = csr_matrix(A > 0)
    _, labels = connected_components(adjacency, directed=False)
    if labels[s] != labels[t]:
        logger.error(f"Nodes {s} and {t} lie in different components")
        raise SolverError(details=f"no conducting path between nodes {s} and {t}")

    floating = np.flatnonzero(labels != labels[s])
    if floating.size:
        nodes = floating.tolist()
        logger.error(f"Nodes {nodes} are not connected to the source or sink")
        raise SolverError(details=f"floating nodes {nodes} have no path to source or sink")


def find_voltages(C, s, t):
    """Solve for all node voltages in a resistor network.

    Rows s and t of the Laplacian are replaced by identity rows so that
    V[s] = 1 and V[t] = 0 hold exactly.

    Args:
        C: Symmetric, nonnegative conductance matrix (diagonal ignored).
        s: Source node, held at 1 V.
        t: Sink node, held at 0 V.

    Returns:
        Array of length n with the voltage at every node.

    Raises:
        ValidationError: C or the node pair is malformed.
        SolverError: The system is singular (floating subnetwork, or no
            path from s to t).
    """
    A = validate_conductance(C, s, t, symmetric=True)
    np.fill_diagonal(A, 0.0)
    n = A.shape[0]
    check_path(A, s, t)

    M = laplacian(A)
    M[s, :] = 0.0
    M[s, s] = 1.0
    M[t, :] = 0.0
    M[t, t] = 1.0

    rhs = np.zeros(n)
    rhs[s] = V_SOURCE
    rhs[t] = V_SINK

    logger.debug(f"Solving {n}-node nodal system (s={s}, t={t})")
    try:
        v = np.linalg.solve(M, rhs)
    except np.linalg.LinAlgError as e:
        logger.error(f"Nodal system is singular: {e}")
        raise SolverError(details=f"singular nodal matrix ({e})") from e

    if not np.all(np.isfinite(v)):
        logger.error("NaN or Inf detected in voltage solution")
        raise SolverError(details="solution contains NaN/Inf values")

    v[s] = V_SOURCE
    v[t] = V_SINK
    return v


def sink_current(C, v, t):
    """Net current flowing into node t: dot(C[:, t], v).

    Relies on v[t] == 0, so no self term needs to be subtracted.
    """
    return float(np.dot(np.asarray(C, dtype=float)[:, t], v))


def resistance_from_voltages(C, v, t):
    """Effective resistance given solved voltages with 1 V across s and t."""
    current = sink_current(C, v, t)
    if current == 0.0:
        raise ZeroCurrentError(f"No current flows into sink node {t}")
    return 1.0 / current


def resistance(C, s, t):
    """Effective resistance between nodes s and t of a resistor network."""
    v = find_voltages(C, s, t)
    return resistance_from_voltages(C, v, t)
