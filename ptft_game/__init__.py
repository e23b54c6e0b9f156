from .config import DEFAULT_GAME_CONFIG, validate_game_config
from .errors import ConfigurationError, InvariantViolation
from .model import PrejudiceAgent, PrejudiceGameModel
from .payoff import PayoffTable, closed_form_outcomes, payoff, play_game, simulate_outcomes
from .strategies import (ALL_C, ALL_D, ALL_STRATEGIES, PTFT, REACTIVE_STRATEGIES, STRATEGY_NAMES, TFT,
                         resolve_acting, resolve_opponent)
from .world import ToroidalWorld

__version__ = "0.1.0"
