# model.py

import logging

import mesa
import numpy as np

from .config import (DEFAULT_INIT_PARAMETERS, GROUP_POLICIES, STRATEGY_POLICIES,
                     validate_game_config, validate_grid_size)
from .errors import ConfigurationError, InvariantViolation
from .payoff import PayoffTable
from .strategies import (ALL_STRATEGIES, GROUPS, NUM_STRATEGIES, PTFT, REACTIVE_STRATEGIES,
                         STRATEGY_NAMES, is_canonical, resolve_acting, resolve_opponent)
from .world import ToroidalWorld

logger = logging.getLogger(__name__)


class PrejudiceAgent(mesa.Agent):
    """
    One grid cell: a group label (0 or 1) and a strategy id (0..8).
    """

    def __init__(self, model, group, strategy):
        super().__init__(model)
        self.group = group
        self.strategy = strategy
        self.next_strategy = strategy  # Buffer, committed by advance()
        self.score = 0.0
        self.cooperated = 0
        self.defected = 0

    def reset_counters(self):
        self.score = 0.0
        self.cooperated = 0
        self.defected = 0

    def _credit(self, score, cooperated, rounds, opponent, social_bonus):
        self.score += score
        self.cooperated += cooperated
        self.defected += rounds - cooperated
        if social_bonus and self.strategy == PTFT and self.group == opponent.group:
            self.score += social_bonus

    def play(self, opponent, table, social_bonus=0):
        """Directional game: only this agent is credited."""
        result = table.lookup(resolve_acting(self, opponent), resolve_opponent(opponent, self))
        self._credit(result.score, result.cooperated, table.rounds, opponent, social_bonus)

    def play_pair(self, opponent, table, social_bonus=0):
        """Single game credited to both sides."""
        result = table.lookup(resolve_acting(self, opponent), resolve_opponent(opponent, self))
        self._credit(result.score, result.cooperated, table.rounds, opponent, social_bonus)
        opponent._credit(result.opponent_score, result.opponent_cooperated, table.rounds, self, social_bonus)

    def decide_strategy(self, neighborhood):
        """
        Picks the fittest member of `neighborhood` (random among ties, self
        included) and copies its strategy only if it scored strictly more.
        Reads scores and strategies of the current generation only.
        """
        best_score = max(agent.score for agent in neighborhood)
        candidates = [agent for agent in neighborhood if agent.score == best_score]
        fittest = self.random.choice(candidates)
        if self.score < fittest.score:
            self.next_strategy = fittest.strategy
        else:
            self.next_strategy = self.strategy

    def advance(self):
        self.strategy = self.next_strategy


def _segregated(x, y, rng, size):
    return 0 if x < size / 2 else 1


def _random_group(x, y, rng, size):
    return rng.randrange(2)


def _checkerboard(x, y, rng, size):
    return (x + y) % 2


_GROUP_POLICIES = {
    "segregated": _segregated,
    "random": _random_group,
    "checkerboard": _checkerboard,
}


class PrejudiceGameModel(mesa.Model):
    """
    Spatial iterated Prisoner's Dilemma with imitate-the-best updating on an
    L x L torus. Each generation is four ordered phases over the whole grid:
    reset, interaction, imitation, commit.
    """

    def __init__(self, grid_size=DEFAULT_INIT_PARAMETERS["grid_size"],
                 group_policy=DEFAULT_INIT_PARAMETERS["group_policy"],
                 strategy_policy=DEFAULT_INIT_PARAMETERS["strategy_policy"],
                 include_prejudicial=DEFAULT_INIT_PARAMETERS["include_prejudicial"],
                 seed=None):
        super().__init__(seed=seed)
        self.world = None
        self.grid = None
        self.running = True
        self.initialize(grid_size, group_policy, strategy_policy, include_prejudicial)

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------
    def _group_func(self, group_policy, size):
        if callable(group_policy):
            return group_policy
        try:
            policy = _GROUP_POLICIES[group_policy]
        except (KeyError, TypeError):
            raise ConfigurationError(
                f"group policy must be one of {GROUP_POLICIES} or a callable, got {group_policy!r}") from None
        return lambda x, y, rng: policy(x, y, rng, size)

    def _strategy_func(self, strategy_policy, include_prejudicial):
        if callable(strategy_policy):
            return strategy_policy
        if strategy_policy not in STRATEGY_POLICIES:
            raise ConfigurationError(
                f"strategy policy must be one of {STRATEGY_POLICIES} or a callable, got {strategy_policy!r}")
        choices = ALL_STRATEGIES if include_prejudicial else REACTIVE_STRATEGIES
        return lambda x, y, rng: rng.choice(choices)

    @staticmethod
    def _check_group(group, x, y):
        if type(group) is not int or group not in GROUPS:
            raise ConfigurationError(f"group at ({x}, {y}) must be 0 or 1, got {group!r}")

    def initialize(self, grid_size, group_policy="segregated", strategy_policy="uniform", include_prejudicial=True):
        """
        (Re)builds the grid. Group and strategy policies are either a named
        policy or a callable (x, y, rng) -> value drawing from the model's rng.
        """
        grid_size = validate_grid_size(grid_size)
        group_func = self._group_func(group_policy, grid_size)
        strategy_func = self._strategy_func(strategy_policy, include_prejudicial)

        # Build the new grid completely before touching the old one
        world = ToroidalWorld(grid_size)
        created = []
        try:
            for x, y in world.coords():
                group = group_func(x, y, self.random)
                self._check_group(group, x, y)
                strategy = strategy_func(x, y, self.random)
                if not is_canonical(strategy):
                    raise ConfigurationError(
                        f"strategy at ({x}, {y}) must be one of {ALL_STRATEGIES}, got {strategy!r}")
                if strategy == PTFT and not include_prejudicial:
                    raise ConfigurationError(f"strategy at ({x}, {y}) is PTFT but PTFT is disabled")
                agent = PrejudiceAgent(self, group, strategy)
                created.append(agent)
                world.place(agent, x, y)
        except Exception:
            for agent in created:
                agent.remove()
            raise

        if self.world is not None:
            for agent in self.world.agents():
                agent.remove()

        self.world = world
        self.grid = world.grid
        self.generation = 0
        self.total_cooperated = 0
        self.total_defected = 0
        self.last_summary = None

        model_reporters = {"Generation": lambda m: m.generation}
        for strategy in ALL_STRATEGIES:
            model_reporters[STRATEGY_NAMES[strategy]] = lambda m, s=strategy: m.population_counts()[s]
        model_reporters["Cooperated"] = lambda m: m.total_cooperated
        model_reporters["Defected"] = lambda m: m.total_defected
        self.datacollector = mesa.DataCollector(model_reporters=model_reporters)
        self.datacollector.collect(self)  # Collect initial state

        logger.debug("Initialized %dx%d grid, counts %s", grid_size, grid_size, self.population_counts())

    def reassign_groups(self, group_policy):
        """Re-draws every group label, keeping strategies and the generation counter."""
        group_func = self._group_func(group_policy, self.world.size)
        groups = []
        for x, y in self.world.coords():
            group = group_func(x, y, self.random)
            self._check_group(group, x, y)
            groups.append(group)
        for agent, group in zip(self.world.agents(), groups):
            agent.group = group

    # ------------------------------------------------------------------
    # Generation step
    # ------------------------------------------------------------------
    def _check_invariants(self, agents):
        for agent in agents:
            if not is_canonical(agent.strategy):
                raise InvariantViolation(f"agent at {agent.pos} holds non-canonical strategy {agent.strategy!r}")
            if agent.group not in GROUPS:
                raise InvariantViolation(f"agent at {agent.pos} holds group {agent.group!r}")

    def run_generation(self, config=None):
        """
        Advances exactly one generation and returns its summary:
        {"generation", "strategy_counts", "cooperated", "defected"}.
        Bad input is rejected before mesa's step counter moves, so
        `steps` always equals `generation`.
        """
        params = validate_game_config(config)
        self._check_invariants(self.world.agents())
        self.step(params)
        return self.last_summary

    def step(self, config=None):
        """Mesa entry point. The summary is left in `last_summary`."""
        params = validate_game_config(config)
        table = PayoffTable(params["rounds"], params["payoffs"], params["payoff_method"])
        agents = self.world.agents()
        self._check_invariants(agents)

        # Phase 1: reset
        for agent in agents:
            agent.reset_counters()

        # Phase 2: interaction, scores only
        social_bonus = params["social_bonus"]
        if params["interaction"] == "directional":
            for agent in agents:
                for neighbor in self.world.fixed_neighbors(*agent.pos):
                    agent.play(neighbor, table, social_bonus)
        else:
            for agent, neighbor in self.world.neighbor_pairs():
                agent.play_pair(neighbor, table, social_bonus)

        # Phase 3: imitation, writes next_strategy only
        radius = params["imitation_radius"]
        for agent in agents:
            agent.decide_strategy(self.world.neighbors_in_radius(*agent.pos, radius))

        # Phase 4: commit
        for agent in agents:
            agent.advance()

        self.generation += 1
        self.total_cooperated = sum(agent.cooperated for agent in agents)
        self.total_defected = sum(agent.defected for agent in agents)
        self.last_summary = {
            "generation": self.generation,
            "strategy_counts": self.population_counts(),
            "cooperated": self.total_cooperated,
            "defected": self.total_defected,
        }
        self.datacollector.collect(self)
        logger.debug("Generation %d: %s", self.generation, self.last_summary)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    def query_agent(self, x, y):
        agent = self.world.agent_at(x, y)
        return {"group": agent.group, "strategy": agent.strategy, "score": agent.score}

    def population_counts(self):
        strategies = [agent.strategy for agent in self.world.agents()]
        return np.bincount(strategies, minlength=NUM_STRATEGIES).tolist()

    def get_history(self):
        """In-memory time series, one row per collection, indexed by generation."""
        return self.datacollector.get_model_vars_dataframe().set_index("Generation")

    def _grid_state(self, attribute, dtype):
        L = self.world.size
        grid_states = np.zeros((L, L), dtype=dtype)
        for x, y in self.world.coords():
            # numpy array is row=y, col=x
            grid_states[y][x] = getattr(self.world.agent_at(x, y), attribute)
        return grid_states

    def get_strategy_grid(self):
        return self._grid_state("strategy", int)

    def get_group_grid(self):
        return self._grid_state("group", int)

    def get_score_grid(self):
        return self._grid_state("score", float)
