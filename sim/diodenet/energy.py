"""Dissipated energy of a resistor-diode network and its voltage gradient.

For each pair of nodes the conductance that counts is the one pointing
from the higher-voltage node to the lower one, which makes the energy
well defined for asymmetric (diode-bearing) conductance matrices.
"""

import numpy as np


def edge_weights(C, v):
    """Directed conductance selected by the voltage drop.

    W[i, j] = C[i, j] if v[i] > v[j] else C[j, i]. The diagonal is zero.
    """
    C = np.asarray(C, dtype=float)
    v = np.asarray(v, dtype=float)
    W = np.where(v[:, None] > v[None, :], C, C.T)
    np.fill_diagonal(W, 0.0)
    return W


def energy(C, v):
    """Energy dissipated by the network at voltages v.

    Sums w(i, j) * (v[i] - v[j])**2 once for every unordered pair {i, j}.
    """
    v = np.asarray(v, dtype=float)
    W = edge_weights(C, v)
    dv = v[:, None] - v[None, :]
    # W[i, j] == W[j, i] wherever dv != 0, so each pair appears twice
    return 0.5 * float(np.sum(W * dv ** 2))


def energy_gradient(C, v):
    """Gradient of `energy` with respect to every node voltage.

    g[k] = sum_j 2 * w(k, j) * (v[k] - v[j]). Callers that hold the source
    and sink fixed must zero those entries themselves.
    """
    v = np.asarray(v, dtype=float)
    W = edge_weights(C, v)
    dv = v[:, None] - v[None, :]
    return 2.0 * np.sum(W * dv, axis=1)
