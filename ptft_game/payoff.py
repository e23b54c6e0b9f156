# payoff.py
"""
Payoff engine for the iterated Prisoner's Dilemma between two reactive
strategies.

Every game is summarised by a 2x2 outcome count array `counts[my][opp]`
(index 1 = Cooperate, 0 = Defect) holding how many rounds ended in each
joint move. Scores and cooperation counts for both sides follow from it:
the acting side reads `counts`, the opponent reads `counts.T`.

Two ways of producing the counts are provided and must agree exactly:
  - `simulate_outcomes`: plays the rounds one by one.
  - `closed_form_outcomes`: uses the joint-move orbit of the pairing. A pair of
    reactive strategies is a deterministic map on the four joint moves, so the
    sequence is a short prefix followed by a cycle of length 1, 2 or 4.
    Counts for any number of rounds are prefix + full cycles + partial cycle,
    which is exact for every round count (no parity requirement).
"""

import functools
import math
import numbers
from collections import namedtuple

import numpy as np

from .errors import ConfigurationError, InvariantViolation
from .strategies import REACTIVE_STRATEGIES, STRATEGY_BITS, is_canonical, is_reactive

PAYOFF_KEYS = ("cc", "cd", "dc", "dd")
PAYOFF_METHODS = ("closed_form", "simulation")

GameResult = namedtuple("GameResult", ["score", "cooperated", "opponent_score", "opponent_cooperated"])


def payoff_matrix(payoffs):
    """
    Row player's payoff: matrix[my_move][opponent_move]
    C=1, D=0
          D    C
    D   [[dd, dc],
    C    [cd, cc]]
    """
    missing = [k for k in PAYOFF_KEYS if k not in payoffs]
    if missing:
        raise ConfigurationError(f"payoff matrix is missing {missing}")
    return np.array([
        [payoffs["dd"], payoffs["dc"]],
        [payoffs["cd"], payoffs["cc"]],
    ], dtype=float)


def finite_real(value, name, minimum=None):
    if isinstance(value, bool) or not isinstance(value, numbers.Real) or not math.isfinite(value):
        raise ConfigurationError(f"{name} must be a finite number, got {value!r}")
    if minimum is not None and value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}")
    return value


def validate_payoffs(payoffs):
    """Copy of `payoffs` with exactly the keys cc, cd, dc, dd, all finite numbers."""
    if not hasattr(payoffs, "keys"):
        raise ConfigurationError(f"payoffs must be a mapping of {PAYOFF_KEYS}, got {payoffs!r}")
    keys = set(payoffs.keys())
    if keys != set(PAYOFF_KEYS):
        raise ConfigurationError(f"payoffs must have exactly the keys {PAYOFF_KEYS}, got {sorted(keys)}")
    return {key: finite_real(payoffs[key], f"payoff {key}") for key in PAYOFF_KEYS}


def check_rounds(rounds):
    if isinstance(rounds, bool) or not isinstance(rounds, numbers.Integral):
        raise ConfigurationError(f"rounds must be an integer, got {rounds!r}")
    if rounds <= 0:
        raise ConfigurationError(f"rounds must be positive, got {rounds}")


def _check_resolved(strategy):
    if is_reactive(strategy):
        return
    if is_canonical(strategy):
        raise InvariantViolation("PTFT must be resolved against its opponent before scoring")
    raise InvariantViolation(f"strategy {strategy!r} is not a canonical reactive strategy")


def _reply(bits, opponent_last):
    return bits[1] if opponent_last == 1 else bits[2]


def simulate_outcomes(s1, s2, rounds):
    """Outcome counts from playing `rounds` rounds of s1 against s2."""
    _check_resolved(s1)
    _check_resolved(s2)
    check_rounds(rounds)
    bits1, bits2 = STRATEGY_BITS[s1], STRATEGY_BITS[s2]

    counts = np.zeros((2, 2), dtype=np.int64)
    m1, m2 = bits1[0], bits2[0]
    for i in range(rounds):
        if i > 0:
            # both replies read the previous round's moves
            m1, m2 = _reply(bits1, m2), _reply(bits2, m1)
        counts[m1, m2] += 1
    return counts


@functools.lru_cache(maxsize=None)
def pairing_orbit(s1, s2):
    """
    Joint-move orbit of a reactive pairing as (prefix, cycle), both tuples of
    (my_move, opponent_move) states. At most four distinct states exist.
    """
    _check_resolved(s1)
    _check_resolved(s2)
    bits1, bits2 = STRATEGY_BITS[s1], STRATEGY_BITS[s2]

    seen = []
    state = (bits1[0], bits2[0])
    while state not in seen:
        seen.append(state)
        state = (_reply(bits1, state[1]), _reply(bits2, state[0]))
    start = seen.index(state)
    return tuple(seen[:start]), tuple(seen[start:])


def closed_form_outcomes(s1, s2, rounds):
    """Outcome counts of s1 against s2 from the pairing's orbit."""
    check_rounds(rounds)
    prefix, cycle = pairing_orbit(s1, s2)

    counts = np.zeros((2, 2), dtype=np.int64)
    head = prefix[:rounds]
    for state in head:
        counts[state] += 1

    remaining = rounds - len(head)
    if remaining:
        full_cycles, partial = divmod(remaining, len(cycle))
        for state in cycle:
            counts[state] += full_cycles
        for state in cycle[:partial]:
            counts[state] += 1
    return counts


_OUTCOME_FUNCTIONS = {
    "closed_form": closed_form_outcomes,
    "simulation": simulate_outcomes,
}


def game_outcomes(s1, s2, rounds, method="closed_form"):
    try:
        outcome_func = _OUTCOME_FUNCTIONS[method]
    except KeyError:
        raise ConfigurationError(f"unknown payoff method {method!r}, expected one of {PAYOFF_METHODS}") from None
    return outcome_func(s1, s2, rounds)


def score_outcomes(counts, matrix):
    """GameResult for both sides of one game given its outcome counts."""
    return GameResult(
        score=float((counts * matrix).sum()),
        cooperated=int(counts[1].sum()),
        opponent_score=float((counts.T * matrix).sum()),
        opponent_cooperated=int(counts[:, 1].sum()),
    )


def play_game(s1, s2, rounds, payoffs, method="closed_form"):
    """Plays one iterated game between two resolved reactive strategies."""
    check_rounds(rounds)
    matrix = payoff_matrix(payoffs)
    return score_outcomes(game_outcomes(s1, s2, rounds, method), matrix)


def payoff(s1, s2, rounds, payoffs, method="closed_form"):
    """Acting side's (total payoff, rounds cooperated) over `rounds` rounds."""
    result = play_game(s1, s2, rounds, payoffs, method)
    return result.score, result.cooperated


class PayoffTable:
    """
    Results of all 8x8 reactive pairings for one game configuration.
    Built once per generation; lookups are keyed on resolved strategies.
    """

    def __init__(self, rounds, payoffs, method="closed_form"):
        check_rounds(rounds)
        payoffs = validate_payoffs(payoffs)
        self.rounds = rounds
        self.method = method
        matrix = payoff_matrix(payoffs)
        self._results = {
            (s1, s2): score_outcomes(game_outcomes(s1, s2, rounds, method), matrix)
            for s1 in REACTIVE_STRATEGIES
            for s2 in REACTIVE_STRATEGIES
        }

    def lookup(self, s1, s2):
        try:
            return self._results[(s1, s2)]
        except (KeyError, TypeError):
            _check_resolved(s1)
            _check_resolved(s2)
            raise

    def __getitem__(self, pairing):
        return self.lookup(*pairing)
