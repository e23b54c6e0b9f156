# run_simulation.py

import argparse
import logging
import sys

from tqdm import tqdm

from .config import DEFAULT_GAME_CONFIG, DEFAULT_INIT_PARAMETERS, GROUP_POLICIES, INTERACTIONS
from .errors import ConfigurationError
from .model import PrejudiceGameModel
from .payoff import PAYOFF_METHODS


def build_game_config(args):
    return {
        "rounds": args.rounds,
        "payoffs": {"cc": args.cc, "cd": args.cd, "dc": args.dc, "dd": args.dd},
        "imitation_radius": args.radius,
        "interaction": args.interaction,
        "payoff_method": args.payoff_method,
        "social_bonus": args.social_bonus,
    }


def run_simulation(args):
    """
    Runs a single simulation with the given parameters and returns the model.
    """
    game_config = build_game_config(args)

    model = PrejudiceGameModel(
        grid_size=args.L,
        group_policy=args.groups,
        include_prejudicial=not args.no_ptft,
        seed=args.seed,
    )

    for _ in tqdm(range(args.num_steps), desc="Generations", disable=args.quiet):
        model.step(game_config)

    history = model.get_history()
    print(f"\n--- Population after {model.generation} generations ---")
    print(history.tail(args.tail).to_string())
    return model


def main(argv=None):
    parser = argparse.ArgumentParser(description="Run a spatial prejudicial tit-for-tat simulation.")

    # 核心参数
    parser.add_argument("--L", type=int, default=DEFAULT_INIT_PARAMETERS["grid_size"],
                        help="Grid size (L x L).")
    parser.add_argument("--num_steps", type=int, default=100,
                        help="Number of generations to run.")
    parser.add_argument("--seed", type=int, default=42,
                        help="Random seed for reproducibility.")
    parser.add_argument("--groups", type=str, default=DEFAULT_INIT_PARAMETERS["group_policy"],
                        choices=GROUP_POLICIES,
                        help="How group labels are laid out on the grid.")
    parser.add_argument("--no_ptft", action="store_true",
                        help="Only seed the 8 reactive strategies.")

    # 博弈参数
    defaults = DEFAULT_GAME_CONFIG
    parser.add_argument("--rounds", type=int, default=defaults["rounds"],
                        help="Rounds per pairwise iterated game.")
    parser.add_argument("--cc", type=float, default=defaults["payoffs"]["cc"], help="Payoff for C vs C.")
    parser.add_argument("--cd", type=float, default=defaults["payoffs"]["cd"], help="Payoff for C vs D.")
    parser.add_argument("--dc", type=float, default=defaults["payoffs"]["dc"], help="Payoff for D vs C.")
    parser.add_argument("--dd", type=float, default=defaults["payoffs"]["dd"], help="Payoff for D vs D.")
    parser.add_argument("--radius", type=float, default=defaults["imitation_radius"],
                        help="Imitation radius (Euclidean).")
    parser.add_argument("--interaction", type=str, default=defaults["interaction"], choices=INTERACTIONS,
                        help="directional: every agent plays its 8 neighbors; pairwise: each pair plays once.")
    parser.add_argument("--payoff_method", type=str, default=defaults["payoff_method"], choices=PAYOFF_METHODS,
                        help="How game payoffs are computed.")
    parser.add_argument("--social_bonus", type=float, default=defaults["social_bonus"],
                        help="Extra score for PTFT per same-group pairing.")

    # 输出
    parser.add_argument("--tail", type=int, default=10,
                        help="Number of final generations to print.")
    parser.add_argument("--quiet", action="store_true", help="Hide the progress bar.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")

    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(asctime)s %(name)s %(levelname)s %(message)s")

    print("Starting simulation with the following parameters:")
    for arg_name, arg_value in vars(args).items():
        print(f"  {arg_name}: {arg_value}")

    try:
        run_simulation(args)
    except ConfigurationError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
