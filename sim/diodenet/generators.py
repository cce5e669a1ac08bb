"""Conductance matrices for grids, hypercubes and arbitrary graphs.

Every edge {u, v} of the graph gets two independent draws, one for
C[u, v] and one for C[v, u], so the resulting networks carry diodes
unless the fill is constant.
"""

from enum import Enum

import networkx as nx
import numpy as np

from .errors import ValidationError


class Fill(Enum):
    """How nonzero conductances are drawn."""
    ONE = "one"          # all 1.0
    UNIFORM = "unif"     # uniform on [0, 1)
    EXP = "exp"          # exponential with mean 1
    USER = "user"        # caller-supplied func(rng) -> float


def _sampler(fill, func, rng):
    fill = Fill(fill)
    if fill is Fill.USER:
        if func is None:
            raise ValidationError("fill", "Fill.USER requires a sampling function")
        return lambda: float(func(rng))
    if func is not None:
        raise ValidationError("fill", f"A sampling function needs Fill.USER, got {fill}")
    if fill is Fill.ONE:
        return lambda: 1.0
    if fill is Fill.UNIFORM:
        return rng.uniform
    return lambda: -np.log(1.0 - rng.uniform())


def graph_network(graph, fill=Fill.ONE, func=None, seed=None):
    """Conductance matrix of a networkx graph.

    Args:
        graph: Undirected networkx graph; node order follows graph.nodes.
        fill: A Fill member (or its string value).
        func: Sampling function taking a numpy RandomState, for Fill.USER.
        seed: Seed for the random fills.

    Returns:
        n-by-n conductance matrix with a zero diagonal.
    """
    rng = np.random.RandomState(seed)
    draw = _sampler(fill, func, rng)
    index = {node: k for k, node in enumerate(graph.nodes)}
    C = np.zeros((len(index), len(index)))
    for u, v in graph.edges:
        a, b = index[u], index[v]
        if a == b:
            continue
        C[a, b] = draw()
        C[b, a] = draw()
    return C


def grid_network(n, m, fill=Fill.ONE, func=None, seed=None):
    """Conductance matrix of an n-by-m grid, nodes (i, j) in row-major order."""
    grid = nx.grid_2d_graph(n, m)
    ordered = nx.Graph()
    ordered.add_nodes_from(range(n * m))
    ordered.add_edges_from(sorted(
        tuple(sorted((i * m + j, k * m + l))) for (i, j), (k, l) in grid.edges
    ))
    return graph_network(ordered, fill, func, seed)


def hypercube_network(d, fill=Fill.ONE, func=None, seed=None):
    """Conductance matrix of the d-dimensional hypercube (2**d nodes)."""
    graph = nx.convert_node_labels_to_integers(
        nx.hypercube_graph(d), ordering="sorted")
    return graph_network(graph, fill, func, seed)
