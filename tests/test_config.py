import math

import pytest

from ptft_game.config import DEFAULT_GAME_CONFIG, validate_game_config, validate_grid_size
from ptft_game.errors import ConfigurationError


def test_defaults():
    params = validate_game_config()
    assert params == DEFAULT_GAME_CONFIG
    assert params is not DEFAULT_GAME_CONFIG


def test_merges_over_defaults_without_mutating_input():
    config = {"rounds": 10, "imitation_radius": 1}
    params = validate_game_config(config)
    assert params["rounds"] == 10
    assert params["imitation_radius"] == 1
    assert params["payoffs"] == DEFAULT_GAME_CONFIG["payoffs"]
    assert config == {"rounds": 10, "imitation_radius": 1}


@pytest.mark.parametrize("rounds", [0, -3, 2.5, True, None])
def test_bad_rounds(rounds):
    with pytest.raises(ConfigurationError):
        validate_game_config({"rounds": rounds})


@pytest.mark.parametrize("radius", [-1, -0.01, math.nan, math.inf, "1"])
def test_bad_radius(radius):
    with pytest.raises(ConfigurationError):
        validate_game_config({"imitation_radius": radius})


@pytest.mark.parametrize("payoffs", [
    {"cc": 3, "cd": 0, "dc": 5},
    {"cc": 3, "cd": 0, "dc": 5, "dd": 1, "xx": 2},
    {"cc": 3, "cd": 0, "dc": "5", "dd": 1},
    {"cc": 3, "cd": 0, "dc": math.nan, "dd": 1},
    [3, 0, 5, 1],
])
def test_bad_payoffs(payoffs):
    with pytest.raises(ConfigurationError):
        validate_game_config({"payoffs": payoffs})


def test_bad_choices():
    with pytest.raises(ConfigurationError):
        validate_game_config({"interaction": "global"})
    with pytest.raises(ConfigurationError):
        validate_game_config({"payoff_method": "table"})
    with pytest.raises(ConfigurationError):
        validate_game_config({"social_bonus": -1})


def test_unknown_key():
    with pytest.raises(ConfigurationError):
        validate_game_config({"radius": 1})


def test_grid_size():
    assert validate_grid_size(4) == 4
    for bad in (0, -2, 2.0, True):
        with pytest.raises(ConfigurationError):
            validate_grid_size(bad)
