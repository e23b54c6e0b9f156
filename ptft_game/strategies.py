# strategies.py

from .errors import InvariantViolation

# -------------------------------------
# Strategy ids
# -------------------------------------
# Ids 0..7 are reactive strategies. The bit triple (first, if_c, if_d) is the
# binary expansion of the id: first move, reply to a cooperation, reply to a
# defection. 1 = Cooperate, 0 = Defect.
ALL_D = 0         # 000
SUSP_PERV = 1     # 001 Suspicious perverse
STFT = 2          # 010 Suspicious tit-for-tat
D_THEN_ALL_C = 3  # 011
C_THEN_ALL_D = 4  # 100
PERVERSE = 5      # 101
TFT = 6           # 110
ALL_C = 7         # 111
PTFT = 8          # Prejudicial tit-for-tat, resolved per pairing

REACTIVE_STRATEGIES = tuple(range(8))
ALL_STRATEGIES = REACTIVE_STRATEGIES + (PTFT,)
NUM_STRATEGIES = len(ALL_STRATEGIES)

GROUPS = (0, 1)

STRATEGY_NAMES = {
    ALL_D: "ALL_D",
    SUSP_PERV: "SUSP_PERV",
    STFT: "STFT",
    D_THEN_ALL_C: "D_THEN_ALL_C",
    C_THEN_ALL_D: "C_THEN_ALL_D",
    PERVERSE: "PERVERSE",
    TFT: "TFT",
    ALL_C: "ALL_C",
    PTFT: "PTFT",
}

STRATEGY_BITS = {s: ((s >> 2) & 1, (s >> 1) & 1, s & 1) for s in REACTIVE_STRATEGIES}


def is_canonical(strategy):
    # bool is an int subclass but never a strategy id
    return type(strategy) is int and strategy in ALL_STRATEGIES


def is_reactive(strategy):
    return type(strategy) is int and strategy in REACTIVE_STRATEGIES


def strategy_from_bits(first, if_c, if_d):
    """Returns the reactive strategy id for a (first, if_c, if_d) triple."""
    for bit in (first, if_c, if_d):
        if bit not in (0, 1):
            raise ValueError(f"strategy bits must be 0 or 1, got {(first, if_c, if_d)}")
    return (first << 2) | (if_c << 1) | if_d


def strategy_bits(strategy):
    """Bit triple of a reactive strategy. PTFT has no bits of its own."""
    if not is_reactive(strategy):
        raise InvariantViolation(f"strategy {strategy!r} is not a reactive strategy")
    return STRATEGY_BITS[strategy]


def resolve_strategy(strategy, group, other_group):
    """
    Effective reactive strategy of a player with `strategy` and `group`
    facing a player of `other_group`.
    PTFT plays TFT inside its own group and ALL_D against the other one.
    """
    if strategy != PTFT:
        return strategy
    return TFT if group == other_group else ALL_D


def resolve_acting(agent, opponent):
    """What `agent` plays against `opponent` in this pairing."""
    return resolve_strategy(agent.strategy, agent.group, opponent.group)


def resolve_opponent(opponent, agent):
    """What `opponent` plays back against `agent` in this pairing."""
    return resolve_strategy(opponent.strategy, opponent.group, agent.group)
