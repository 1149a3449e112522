"""Evaluation arena pitting two agents against each other over many games."""
from __future__ import annotations

import argparse
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Sequence

import numpy as np

from .ai import HeuristicAI, ScoreWeights
from .config import load_config
from .game import Move, Player, UltimateTicTacToe, index_to_action
from .utils import configure_logging, make_rng

__all__ = ["Agent", "Arena", "ArenaResult", "HeuristicAgent", "RandomAgent", "main", "play_game"]

logger = logging.getLogger(__name__)


class Agent(Protocol):
    def select_move(self, game: UltimateTicTacToe) -> Optional[Move]:
        ...


@dataclass
class HeuristicAgent:
    ai: HeuristicAI = field(default_factory=HeuristicAI)

    def select_move(self, game: UltimateTicTacToe) -> Optional[Move]:
        return self.ai.select_move(game, game.current_player)


@dataclass
class RandomAgent:
    rng: Optional[np.random.Generator] = None

    def __post_init__(self) -> None:
        if self.rng is None:
            self.rng = np.random.default_rng()

    def select_move(self, game: UltimateTicTacToe) -> Optional[Move]:
        legal_indices = np.flatnonzero(game.legal_action_mask())
        if legal_indices.size == 0:
            return None
        return index_to_action(int(self.rng.choice(legal_indices)))


@dataclass
class ArenaResult:
    wins: int
    losses: int
    draws: int

    @property
    def total(self) -> int:
        return self.wins + self.losses + self.draws

    @property
    def win_rate(self) -> float:
        return self.wins / self.total if self.total else 0.0


def play_game(x_agent: Agent, o_agent: Agent) -> UltimateTicTacToe:
    """Play one full game and return the finished state."""

    game = UltimateTicTacToe()
    agents = {"X": x_agent, "O": o_agent}
    while not game.terminal:
        player = game.current_player
        move = agents[player].select_move(game)
        if move is None:
            raise RuntimeError(f"Agent for {player} returned no move in an unfinished game")
        game.make_move(player, move)
    return game


@dataclass
class Arena:
    challenger: Agent
    baseline: Agent

    def play_matches(self, num_games: int = 20) -> ArenaResult:
        results = ArenaResult(wins=0, losses=0, draws=0)

        for game_index in range(num_games):
            challenger_first = game_index % 2 == 0
            challenger_mark: Player = "X" if challenger_first else "O"
            if challenger_first:
                game = play_game(self.challenger, self.baseline)
            else:
                game = play_game(self.baseline, self.challenger)

            if game.winner is None:
                results.draws += 1
            elif game.winner.winner == challenger_mark:
                results.wins += 1
            else:
                results.losses += 1
            logger.debug(
                "Game %d: challenger as %s, winner %s",
                game_index + 1,
                challenger_mark,
                "draw" if game.winner is None else game.winner.winner,
            )

        return results


def _build_baseline(kind: str, weights: ScoreWeights, rng: np.random.Generator) -> Agent:
    if kind == "random":
        return RandomAgent(rng=rng)
    if kind == "heuristic":
        return HeuristicAgent(HeuristicAI(weights=weights, rng=rng))
    raise ValueError(f"unknown opponent '{kind}'")


def main(argv: Optional[Sequence[str]] = None) -> None:
    parser = argparse.ArgumentParser(
        description="Pit the heuristic Ultimate Tic-Tac-Toe AI against a baseline"
    )
    parser.add_argument("--config", type=Path, default=None)
    parser.add_argument("--games", type=int, default=None)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--opponent", choices=("random", "heuristic"), default=None)
    parser.add_argument("--log-level", default=None)
    args = parser.parse_args(argv)

    config = load_config(args.config)
    arena_cfg = config["arena"]
    configure_logging(args.log_level or config["logging"].get("level", "INFO"))

    seed = args.seed if args.seed is not None else int(arena_cfg.get("seed", 0))
    games = args.games if args.games is not None else int(arena_cfg.get("games", 20))
    opponent = args.opponent or str(arena_cfg.get("opponent", "random"))

    weights = ScoreWeights.from_config(config["evaluator"])
    challenger = HeuristicAgent(HeuristicAI(weights=weights, rng=make_rng(seed)))
    baseline = _build_baseline(opponent, weights, make_rng(seed + 1))

    result = Arena(challenger=challenger, baseline=baseline).play_matches(games)
    logger.info(
        "Heuristic vs %s over %d games: %d wins, %d losses, %d draws (win rate %.2f)",
        opponent,
        result.total,
        result.wins,
        result.losses,
        result.draws,
        result.win_rate,
    )


if __name__ == "__main__":
    main()
