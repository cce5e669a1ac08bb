"""Fixed-point iteration for voltages in resistor-diode networks.

Each step picks, for every pair of nodes, the directed conductance that
agrees with the current voltage ordering, then solves the resulting
symmetric network exactly. The loop stops when the node ranking stops
changing. Convergence is not guaranteed: if a ranking seen earlier comes
back the loop reports a cycle and returns what it has.
"""

import logging
import warnings
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np

from .diode import fingerprint, simplify
from .energy import energy
from .errors import ConvergenceWarning, ValidationError
from .network import (V_SINK, V_SOURCE, find_voltages,
                      resistance_from_voltages, validate_conductance)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SolverParams:
    """Tunable settings for the diode solvers."""
    max_iterations: Optional[int] = 10000   # None disables the cap
    init_low: float = 0.0                    # Random initial guess range (V)
    init_high: float = 1.0
    optimizer_method: str = "BFGS"           # scipy.optimize.minimize method
    optimizer_tol: float = 1e-8


DEFAULT_PARAMS = SolverParams()


class EventKind(Enum):
    ITERATION = "iteration"
    CYCLE_DETECTED = "cycle_detected"
    ENERGY_INCREASED = "energy_increased"
    ITERATION_LIMIT = "iteration_limit"


@dataclass(frozen=True)
class SolverEvent:
    """Diagnostic emitted by `iterate`: iteration report or warning."""
    kind: EventKind
    iteration: int
    energy: float
    message: str = ""


@dataclass
class IterationResult:
    """Outcome of a fixed-point run.

    Attributes:
        voltages: Final voltage vector (source 1 V, sink 0 V).
        converged: The last step reproduced the previous node ranking.
        cycled: The last step returned to an earlier, different ranking.
        iterations: Number of resolve-and-solve steps taken.
        energies: Energy after each step that produced a new ranking,
            starting with the initial guess.
        fingerprints: Node rankings in the order they were visited.
        events: Every SolverEvent emitted during the run.
    """
    voltages: np.ndarray
    converged: bool
    cycled: bool
    iterations: int
    energies: List[float] = field(default_factory=list)
    fingerprints: List[Tuple[int, ...]] = field(default_factory=list)
    events: List[SolverEvent] = field(default_factory=list)

    @property
    def anomalies(self):
        return [e for e in self.events if e.kind is not EventKind.ITERATION]


def initial_voltages(n, s, t, v0=None, seed=None, params=DEFAULT_PARAMS):
    """Starting vector with source and sink pinned.

    A uniform random vector in [init_low, init_high) is drawn when v0 is
    not given.
    """
    if v0 is None:
        rng = np.random.RandomState(seed)
        v = rng.uniform(params.init_low, params.init_high, n)
    else:
        v = np.array(v0, dtype=float)
        if v.shape != (n,):
            raise ValidationError(
                "voltage_length",
                f"Initial voltage vector must have length {n}, got shape {v.shape}",
            )
    v[s] = V_SOURCE
    v[t] = V_SINK
    return v


def diode_step(C, s, t, v):
    """One resolve-and-solve step from voltages v."""
    return find_voltages(simplify(C, v), s, t)


def iterate(
    C,
    s: int,
    t: int,
    v0=None,
    verbose: bool = False,
    log_fn: Optional[Callable[[SolverEvent], None]] = None,
    seed: Optional[int] = None,
    params: SolverParams = DEFAULT_PARAMS,
) -> IterationResult:
    """Iterate diode resolution until the node ranking is stable.

    Args:
        C: Square nonnegative conductance matrix; C[i, j] is the
            conductance for current flowing from i to j.
        s: Source node, held at 1 V.
        t: Sink node, held at 0 V.
        v0: Optional initial voltages (length n). Random if omitted.
        verbose: Log an INFO line with the energy at every iteration.
        log_fn: Optional callback receiving every SolverEvent. Replaces
            the verbose logging when given.
        seed: Seed for the random initial guess.
        params: Iteration cap and initial guess range.

    Returns:
        IterationResult. Cycles, energy increases and hitting the
        iteration cap are reported as ConvergenceWarning, not raised.

    Raises:
        ValidationError: Malformed C, node pair or v0.
        SolverError: A resolved network could not be solved.
    """
    A = validate_conductance(C, s, t)
    n = A.shape[0]
    v = initial_voltages(n, s, t, v0, seed, params)

    events = []

    def emit(kind, iteration, en, message=""):
        event = SolverEvent(kind, iteration, en, message)
        events.append(event)
        if log_fn is not None:
            log_fn(event)
        if kind is EventKind.ITERATION:
            if verbose and log_fn is None:
                logger.info(f"Iteration {iteration}\tEnergy = {en}")
        else:
            logger.warning(f"Iteration {iteration}: {message}")
            warnings.warn(message, ConvergenceWarning, stacklevel=3)

    en = energy(A, v)
    energies = [en]
    fingerprints = [fingerprint(v)]
    converged = cycled = False
    iteration = 0

    while True:
        emit(EventKind.ITERATION, iteration, en)
        if params.max_iterations is not None and iteration >= params.max_iterations:
            emit(EventKind.ITERATION_LIMIT, iteration, en,
                 f"No fixed point after {iteration} iterations")
            break

        iteration += 1
        v = diode_step(A, s, t, v)
        p = fingerprint(v)

        if p == fingerprints[-1]:
            converged = True
            break

        if p in fingerprints:
            cycled = True
            emit(EventKind.CYCLE_DETECTED, iteration, energy(A, v),
                 "Non-fixed-point cycle detected")
            break

        fingerprints.append(p)

        en = energy(A, v)
        if en > energies[-1]:
            emit(EventKind.ENERGY_INCREASED, iteration, en,
                 f"Energy level increased from {energies[-1]:.6g} to {en:.6g}")
        energies.append(en)

    logger.debug(f"Diode iteration stopped after {iteration} steps "
                 f"(converged={converged}, cycled={cycled})")
    return IterationResult(v, converged, cycled, iteration,
                           energies, fingerprints, events)


def find_diode_voltages(C, s, t, v0=None, verbose=False, log_fn=None,
                        seed=None, params=DEFAULT_PARAMS):
    """Voltages at every node of a resistor-diode network."""
    return iterate(C, s, t, v0, verbose, log_fn, seed, params).voltages


def diode_resistance(C, s, t, v0=None, verbose=False, log_fn=None,
                     seed=None, params=DEFAULT_PARAMS):
    """Effective resistance from s to t in a resistor-diode network.

    Raises:
        ZeroCurrentError: No current reaches t.
    """
    v = find_diode_voltages(C, s, t, v0, verbose, log_fn, seed, params)
    return resistance_from_voltages(C, v, t)
