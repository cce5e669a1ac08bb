"""Worked examples: a diode 4-cycle and a random resistor-diode grid.

Entry point: python -m diodenet.demo [--verbose]
"""

import logging
import sys

import numpy as np

from .generators import Fill, grid_network
from .log_config import setup_logging
from .network import resistance
from .optimize import resistance_opt, symmetrized
from .solver import diode_resistance, find_diode_voltages

# ─── 4-cycle ────────────────────────────────────────────────
# Forward conductance 2 around 0 -> 1 -> 2 -> 3 -> 0, reverse conductance 1.
CYCLE_4 = np.array([
    [0.0, 2.0, 0.0, 1.0],
    [1.0, 0.0, 2.0, 0.0],
    [0.0, 1.0, 0.0, 2.0],
    [2.0, 0.0, 1.0, 0.0],
])


def show_cycle(verbose=False):
    print("=" * 60)
    print("4-CYCLE (forward conductance 2, reverse 1)")
    print("=" * 60)
    for s, t in [(0, 3), (3, 0)]:
        v = find_diode_voltages(CYCLE_4, s, t, verbose=verbose, seed=0)
        r = diode_resistance(CYCLE_4, s, t, verbose=verbose, seed=0)
        v_str = " ".join(f"{x:.4f}" for x in v)
        print(f"  s={s} t={t}: V=[{v_str}]  R={r:.4f}")


def show_grid(n=4, m=4, seed=7, verbose=False):
    C = grid_network(n, m, fill=Fill.EXP, seed=seed)
    s, t = 0, n * m - 1

    print("=" * 60)
    print(f"{n}x{m} GRID (exponential fill, seed={seed}), s={s} t={t}")
    print("=" * 60)
    r_sym = resistance(symmetrized(C), s, t)
    r_iter = diode_resistance(C, s, t, verbose=verbose, seed=seed)
    r_opt = resistance_opt(C, s, t)
    print(f"  Symmetrized (no diodes):  R={r_sym:.6f}")
    print(f"  Fixed-point iteration:    R={r_iter:.6f}")
    print(f"  Energy minimization:      R={r_opt:.6f}")
    return r_iter, r_opt


def main():
    verbose = "--verbose" in sys.argv[1:]
    setup_logging(logging.INFO if verbose else logging.WARNING)

    show_cycle(verbose)
    print()
    r_iter, r_opt = show_grid(verbose=verbose)

    agree = abs(r_iter - r_opt) <= 1e-3 * abs(r_iter)
    print(f"\n  Solvers agree: {'YES' if agree else 'NO'}")
    sys.exit(0 if agree else 1)


if __name__ == "__main__":
    main()
