"""Tests for the exact nodal voltage solver.

Checks pinned boundary values, analytical series/parallel networks,
reciprocity, and the validation and singular-system error paths.
"""

import numpy as np
import pytest

from diodenet.errors import (DiodeNetError, SolverError, ValidationError,
                             ZeroCurrentError)
from diodenet.network import (find_voltages, laplacian, resistance,
                              resistance_from_voltages, validate_conductance)


# ─── Helpers ────────────────────────────────────────────────

def _random_symmetric(n, seed):
    rng = np.random.RandomState(seed)
    C = rng.uniform(0.1, 2.0, (n, n))
    C = 0.5 * (C + C.T)
    np.fill_diagonal(C, 0.0)
    return C


def _chain(conductances):
    """Series chain 0 - 1 - ... - n with the given link conductances."""
    n = len(conductances) + 1
    C = np.zeros((n, n))
    for k, g in enumerate(conductances):
        C[k, k + 1] = C[k + 1, k] = g
    return C


# ─── Analytical Tests ──────────────────────────────────────

class TestAnalytical:
    def test_series_chain(self):
        """Series conductances 1, 2, 4: R = 1 + 0.5 + 0.25."""
        C = _chain([1.0, 2.0, 4.0])
        assert resistance(C, 0, 3) == pytest.approx(1.75)

    def test_series_chain_voltages(self):
        """Equal links divide the voltage evenly."""
        v = find_voltages(_chain([1.0, 1.0, 1.0, 1.0]), 0, 4)
        assert v == pytest.approx([1.0, 0.75, 0.5, 0.25, 0.0])

    def test_parallel_paths(self):
        """Square with unit links: two 2-ohm paths in parallel."""
        C = np.array([
            [0, 1, 1, 0],
            [1, 0, 0, 1],
            [1, 0, 0, 1],
            [0, 1, 1, 0],
        ], dtype=float)
        assert resistance(C, 0, 3) == pytest.approx(1.0)

    def test_diagonal_ignored(self):
        """Self-conductance on the diagonal has no effect."""
        C = _chain([1.0, 1.0])
        D = C.copy()
        np.fill_diagonal(D, 9.0)
        assert find_voltages(D, 0, 2) == pytest.approx(find_voltages(C, 0, 2))

    def test_laplacian_rows_sum_to_zero(self):
        C = _random_symmetric(5, seed=1)
        np.fill_diagonal(C, 3.0)
        L = laplacian(C)
        assert L.sum(axis=1) == pytest.approx(np.zeros(5), abs=1e-12)
        assert L[0, 1] == -C[0, 1]


class TestProperties:
    @pytest.mark.parametrize("seed", [0, 1, 2, 3])
    def test_pinned_exactly(self, seed):
        C = _random_symmetric(7, seed)
        v = find_voltages(C, 2, 5)
        assert v[2] == 1.0
        assert v[5] == 0.0

    @pytest.mark.parametrize("seed", [0, 1, 2])
    def test_reciprocity(self, seed):
        """R(s, t) == R(t, s) for a symmetric network."""
        C = _random_symmetric(6, seed)
        assert resistance(C, 0, 5) == pytest.approx(resistance(C, 5, 0))

    def test_voltages_bounded(self):
        """Interior voltages lie between sink and source (maximum principle)."""
        v = find_voltages(_random_symmetric(8, seed=4), 0, 7)
        assert np.all(v >= 0.0) and np.all(v <= 1.0)

    def test_input_not_mutated(self):
        C = _random_symmetric(4, seed=5)
        np.fill_diagonal(C, 2.0)
        before = C.copy()
        find_voltages(C, 0, 3)
        assert np.array_equal(C, before)

    def test_accepts_nested_lists(self):
        assert resistance([[0, 2], [2, 0]], 0, 1) == pytest.approx(0.5)


# ─── Error Paths ───────────────────────────────────────────

class TestValidation:
    @pytest.mark.parametrize("C,s,t,condition", [
        ([[0, 1, 0], [1, 0, 1]], 0, 1, "square"),
        ([[0, -1], [-1, 0]], 0, 1, "nonnegative"),
        ([[0, np.inf], [np.inf, 0]], 0, 1, "finite"),
        ([[0, 1], [2, 0]], 0, 1, "symmetric"),
        ([[0, 1], [1, 0]], 0, 2, "node_range"),
        ([[0, 1], [1, 0]], -1, 1, "node_range"),
        ([[0, 1], [1, 0]], 1, 1, "distinct_nodes"),
    ])
    def test_find_voltages_rejects(self, C, s, t, condition):
        with pytest.raises(ValidationError) as excinfo:
            find_voltages(C, s, t)
        assert excinfo.value.condition == condition

    def test_validation_error_is_value_error(self):
        with pytest.raises(ValueError):
            validate_conductance([[0, 1, 0], [1, 0, 1]])

    def test_asymmetric_allowed_when_not_required(self):
        A = validate_conductance([[0, 1], [2, 0]], 0, 1)
        assert A[1, 0] == 2.0


class TestSingular:
    def test_no_path_between_source_and_sink(self):
        C = np.zeros((4, 4))
        C[0, 1] = C[1, 0] = 1.0
        C[2, 3] = C[3, 2] = 1.0
        with pytest.raises(SolverError):
            find_voltages(C, 0, 3)

    def test_floating_node(self):
        """An isolated node makes the nodal matrix singular."""
        C = np.zeros((3, 3))
        C[0, 2] = C[2, 0] = 1.0
        with pytest.raises(SolverError) as excinfo:
            find_voltages(C, 0, 2)
        assert isinstance(excinfo.value, np.linalg.LinAlgError)
        assert isinstance(excinfo.value, DiodeNetError)

    @pytest.mark.parametrize("seed", range(10))
    def test_floating_island(self, seed):
        """A connected group cut off from both s and t is reported by name."""
        rng = np.random.RandomState(seed)
        C = np.zeros((5, 5))
        C[0, 1] = C[1, 0] = 1.0
        island = rng.uniform(0.1, 2.0, (3, 3))
        island = island + island.T
        np.fill_diagonal(island, 0.0)
        C[2:, 2:] = island
        with pytest.raises(SolverError, match=r"floating nodes \[2, 3, 4\]"):
            find_voltages(C, 0, 1)

    def test_node_hanging_off_sink_is_solved(self):
        """A dead-end node attached only to t is not floating."""
        C = _chain([1.0, 1.0])
        C = np.pad(C, ((0, 1), (0, 1)))
        C[2, 3] = C[3, 2] = 1.0
        v = find_voltages(C, 0, 2)
        assert v == pytest.approx([1.0, 0.5, 0.0, 0.0])

    def test_zero_sink_current(self):
        with pytest.raises(ZeroCurrentError):
            resistance_from_voltages(np.zeros((2, 2)), np.array([1.0, 0.0]), 1)

    def test_zero_current_is_zero_division(self):
        with pytest.raises(ZeroDivisionError):
            resistance_from_voltages(np.zeros((2, 2)), np.array([1.0, 0.0]), 1)
