"""Ideal diode resolution: directed conductances to a symmetric network."""

import numpy as np


def simplify(C, v):
    """Symmetric conductance matrix consistent with voltages v.

    For each pair i < j the current flows from the higher-voltage node,
    so the pair gets C[j, i] when v[j] > v[i] and C[i, j] otherwise
    (equal voltages resolve to the lower-index node's outgoing
    conductance). The diagonal is zero.
    """
    C = np.asarray(C, dtype=float)
    v = np.asarray(v, dtype=float)
    forward = v[None, :] > v[:, None]           # forward[i, j]: v[j] > v[i]
    upper = np.triu(np.where(forward, C.T, C), k=1)
    return upper + upper.T


def fingerprint(v):
    """Node ranking induced by voltages, ties broken by node index."""
    return tuple(int(k) for k in np.argsort(v, kind="stable"))
