# world.py

import functools
import math

from mesa.space import SingleGrid

from .errors import ConfigurationError

# Fixed interaction neighborhood, clockwise from north. The order is part of
# the model: it fixes the order of random draws downstream.
NEIGHBOR_OFFSETS = (
    (0, 1),
    (1, 1),
    (1, 0),
    (1, -1),
    (0, -1),
    (-1, -1),
    (-1, 0),
    (-1, 1),
)


@functools.lru_cache(maxsize=None)
def radius_offsets(radius):
    """
    Offsets (dx, dy) within Euclidean distance `radius` of the origin,
    origin included, scanned over the bounding square of half-width ceil(radius).
    """
    if radius < 0:
        raise ConfigurationError(f"radius must be non-negative, got {radius}")
    reach = math.ceil(radius)
    return tuple(
        (dx, dy)
        for dx in range(-reach, reach + 1)
        for dy in range(-reach, reach + 1)
        if math.sqrt(dx * dx + dy * dy) <= radius
    )


class ToroidalWorld:
    """An L x L torus holding exactly one agent per cell."""

    def __init__(self, size):
        self.size = size
        self.grid = SingleGrid(size, size, torus=True)  # Toroidal grid for wrap-around
        self._neighbor_pairs = None

    def place(self, agent, x, y):
        self.grid.place_agent(agent, (x, y))

    def wrap(self, coordinate):
        # Python's modulo is already non-negative for a positive size
        return coordinate % self.size

    def agent_at(self, x, y):
        return self.grid[self.wrap(x), self.wrap(y)]

    def coords(self):
        """All cells, x-major. Every per-agent pass iterates in this order."""
        for x in range(self.size):
            for y in range(self.size):
                yield x, y

    def agents(self):
        return [self.agent_at(x, y) for x, y in self.coords()]

    def fixed_neighbors(self, x, y):
        """The 8 Moore neighbors. On grids smaller than 3 a cell may repeat."""
        return [self.agent_at(x + dx, y + dy) for dx, dy in NEIGHBOR_OFFSETS]

    def neighbors_in_radius(self, x, y, radius):
        """
        Agents within Euclidean `radius` of (x, y), the agent itself included.
        Each cell appears once, in scan order, even when the radius reaches
        around the torus onto a cell already seen.
        """
        neighborhood = []
        seen = set()
        for dx, dy in radius_offsets(radius):
            cell = (self.wrap(x + dx), self.wrap(y + dy))
            if cell not in seen:
                seen.add(cell)
                neighborhood.append(self.agent_at(*cell))
        return neighborhood

    def neighbor_pairs(self):
        """
        Every unordered pair of distinct fixed neighbors exactly once,
        as (agent_a, agent_b) with agent_a at the lexicographically smaller cell.
        """
        if self._neighbor_pairs is None:
            seen = set()
            pairs = []
            for x, y in self.coords():
                for dx, dy in NEIGHBOR_OFFSETS:
                    other = (self.wrap(x + dx), self.wrap(y + dy))
                    if other <= (x, y) or ((x, y), other) in seen:
                        continue
                    seen.add(((x, y), other))
                    pairs.append((self.agent_at(x, y), self.agent_at(*other)))
            self._neighbor_pairs = pairs
        return self._neighbor_pairs
