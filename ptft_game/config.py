# config.py

import numbers

from .errors import ConfigurationError
from .payoff import PAYOFF_METHODS, check_rounds, finite_real, validate_payoffs

# ==============================================================================
# GAME PARAMETERS - passed to every step, never mutated by the model
# ==============================================================================
DEFAULT_GAME_CONFIG = {
    "rounds": 200,  # Rounds per pairwise iterated game
    # Row player's payoff for (my move, opponent move)
    "payoffs": {"cc": 3, "cd": 0, "dc": 5, "dd": 1},
    "imitation_radius": 1.5,  # Euclidean radius of the comparison neighborhood
    "interaction": "directional",  # "directional" or "pairwise"
    "payoff_method": "closed_form",  # "closed_form" or "simulation"
    "social_bonus": 0,  # Extra score for PTFT per same-group pairing
}

INTERACTIONS = ("directional", "pairwise")

# ==============================================================================
# INITIALIZATION PARAMETERS
# ==============================================================================
DEFAULT_INIT_PARAMETERS = {
    "grid_size": 64,
    "group_policy": "segregated",  # "segregated", "random" or "checkerboard"
    "strategy_policy": "uniform",
    "include_prejudicial": True,
}

GROUP_POLICIES = ("segregated", "random", "checkerboard")
STRATEGY_POLICIES = ("uniform",)


def validate_game_config(config=None):
    """
    Merges `config` over DEFAULT_GAME_CONFIG and checks every value.
    Returns a new dict; raises ConfigurationError on the first bad entry.
    """
    config = dict(config or {})
    unknown = set(config) - set(DEFAULT_GAME_CONFIG)
    if unknown:
        raise ConfigurationError(f"unknown game parameters: {sorted(unknown)}")

    params = dict(DEFAULT_GAME_CONFIG)
    params.update(config)

    check_rounds(params["rounds"])
    params["rounds"] = int(params["rounds"])
    params["payoffs"] = validate_payoffs(params["payoffs"])
    params["imitation_radius"] = finite_real(params["imitation_radius"], "imitation_radius", minimum=0)
    params["social_bonus"] = finite_real(params["social_bonus"], "social_bonus", minimum=0)

    if params["interaction"] not in INTERACTIONS:
        raise ConfigurationError(f"interaction must be one of {INTERACTIONS}, got {params['interaction']!r}")
    if params["payoff_method"] not in PAYOFF_METHODS:
        raise ConfigurationError(f"payoff_method must be one of {PAYOFF_METHODS}, got {params['payoff_method']!r}")
    return params


def validate_grid_size(grid_size):
    if isinstance(grid_size, bool) or not isinstance(grid_size, numbers.Integral) or grid_size < 1:
        raise ConfigurationError(f"grid_size must be a positive integer, got {grid_size!r}")
    return int(grid_size)
