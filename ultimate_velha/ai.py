"""Greedy one-ply heuristic opponent for Ultimate Tic-Tac-Toe.

Every legal move is simulated on a private copy of the board and scored by a
composite of immediate sub-board and meta-board wins, line pressure inside the
sub-board, cell position and whether the move hands the opponent a sub-board
they can win straight away.  The best score wins; ties keep the first move in
scan order (sub-boards then cells, both ascending).
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

import numpy as np

from .game import (
    CENTER_INDEX,
    CORNER_INDICES,
    EMPTY,
    WIN_LINES,
    LineWin,
    Move,
    Player,
    UltimateTicTacToe,
    check_line_winner,
    destination_for_cell,
    opponent_of,
)

logger = logging.getLogger(__name__)


@dataclass
class ScoreWeights:
    sub_board_win: float = 100.0
    meta_win: float = 1000.0
    two_in_line: float = 5.0
    one_in_line: float = 1.0
    center: float = 3.0
    corner: float = 2.0
    threat_penalty: float = 50.0
    early_bonus: float = 5.0
    early_mark_limit: int = 6

    @classmethod
    def from_config(cls, cfg: Optional[Mapping[str, Any]]) -> "ScoreWeights":
        cfg = cfg or {}
        defaults = cls()
        return cls(
            sub_board_win=float(cfg.get("sub_board_win", defaults.sub_board_win)),
            meta_win=float(cfg.get("meta_win", defaults.meta_win)),
            two_in_line=float(cfg.get("two_in_line", defaults.two_in_line)),
            one_in_line=float(cfg.get("one_in_line", defaults.one_in_line)),
            center=float(cfg.get("center", defaults.center)),
            corner=float(cfg.get("corner", defaults.corner)),
            threat_penalty=float(cfg.get("threat_penalty", defaults.threat_penalty)),
            early_bonus=float(cfg.get("early_bonus", defaults.early_bonus)),
            early_mark_limit=int(cfg.get("early_mark_limit", defaults.early_mark_limit)),
        )


DEFAULT_WEIGHTS = ScoreWeights()


@dataclass(frozen=True)
class ScoredMove:
    move: Move
    score: float


def evaluate_sub_board_pressure(
    board: Sequence[str],
    player: Player,
    weights: ScoreWeights = DEFAULT_WEIGHTS,
) -> float:
    """Score how close ``player`` is to completing lines in one sub-board."""

    score = 0.0
    for a, b, c in WIN_LINES:
        line = (board[a], board[b], board[c])
        owned = line.count(player)
        has_gap = EMPTY in line
        if owned == 2 and has_gap:
            score += weights.two_in_line
        elif owned == 1 and has_gap:
            score += weights.one_in_line
    return score


def opponent_immediate_threat(
    boards: Sequence[Sequence[str]],
    outcomes: Sequence[Optional[LineWin]],
    target_board_index: int,
    opponent: Player,
) -> bool:
    """True when ``opponent`` could win the target sub-board with one mark."""

    if outcomes[target_board_index] is not None:
        return False
    board = boards[target_board_index]
    for idx, value in enumerate(board):
        if value != EMPTY:
            continue
        trial = list(board)
        trial[idx] = opponent
        result = check_line_winner(trial)
        if result is not None and result.winner == opponent:
            return True
    return False


class HeuristicAI:
    """Scores every candidate move one ply deep and keeps the best.

    ``rng`` supplies the early-game tie-breaking bonus; pass a seeded
    ``numpy.random.Generator`` for reproducible play or ``randomize=False``
    to drop the bonus entirely.
    """

    def __init__(
        self,
        weights: Optional[ScoreWeights] = None,
        rng: Optional[np.random.Generator] = None,
        randomize: bool = True,
    ) -> None:
        self.weights = weights or ScoreWeights()
        self.rng = rng or np.random.default_rng()
        self.randomize = randomize

    def score_move(
        self,
        game: UltimateTicTacToe,
        move: Move,
        player: Player,
        opponent: Player,
    ) -> float:
        """Deterministic part of a move's score, computed on a copy of the board."""

        w = self.weights
        board_idx, cell_idx = move
        board = game.board.clone()
        sub_win = board.place(board_idx, cell_idx, player)

        score = 0.0
        if sub_win is not None and sub_win.winner == player:
            score += w.sub_board_win
            meta = board.meta_winner()
            if meta is not None and meta.winner == player:
                score += w.meta_win

        local = board.boards[board_idx]
        score += evaluate_sub_board_pressure(local, player, w)
        score -= evaluate_sub_board_pressure(local, opponent, w)

        if cell_idx == CENTER_INDEX:
            score += w.center
        elif cell_idx in CORNER_INDICES:
            score += w.corner

        destination = destination_for_cell(cell_idx)
        if opponent_immediate_threat(board.boards, board.outcomes, destination, opponent):
            score -= w.threat_penalty
        return score

    def rank_moves(
        self,
        game: UltimateTicTacToe,
        player: Player,
        opponent: Optional[Player] = None,
    ) -> List[ScoredMove]:
        """All candidates with their deterministic scores, best first."""

        opponent = opponent or opponent_of(player)
        scored = [
            ScoredMove(move, self.score_move(game, move, player, opponent))
            for move in game.available_moves()
        ]
        return sorted(scored, key=lambda item: -item.score)

    def select_move(
        self,
        game: UltimateTicTacToe,
        player: Player,
        opponent: Optional[Player] = None,
    ) -> Optional[Move]:
        opponent = opponent or opponent_of(player)
        early = game.board.mark_count() < self.weights.early_mark_limit

        best_score = -float("inf")
        best_move: Optional[Move] = None
        for move in game.available_moves():
            score = self.score_move(game, move, player, opponent)
            if early and self.randomize:
                score += float(self.rng.uniform(0.0, self.weights.early_bonus))
            if score > best_score:
                best_score = score
                best_move = move

        if best_move is None:
            logger.warning("No move available for %s", player)
        else:
            logger.debug("%s selects %s (score %.2f)", player, best_move, best_score)
        return best_move


def select_move(
    game: UltimateTicTacToe,
    player: Player,
    opponent: Optional[Player] = None,
    rng: Optional[np.random.Generator] = None,
    weights: Optional[ScoreWeights] = None,
) -> Optional[Move]:
    return HeuristicAI(weights=weights, rng=rng).select_move(game, player, opponent)


__all__ = [
    "DEFAULT_WEIGHTS",
    "HeuristicAI",
    "ScoreWeights",
    "ScoredMove",
    "evaluate_sub_board_pressure",
    "opponent_immediate_threat",
    "select_move",
]
