"""Ultimate Tic-Tac-Toe rules engine with a greedy heuristic opponent."""
from .ai import HeuristicAI, ScoreWeights, evaluate_sub_board_pressure, opponent_immediate_threat, select_move
from .arena import Arena, ArenaResult, HeuristicAgent, RandomAgent
from .game import (
    InvalidMoveError,
    LineWin,
    MetaBoard,
    Move,
    UltimateTicTacToe,
    check_line_winner,
    check_meta_winner,
    destination_for_cell,
)
from .session import GameMode, GameSession
from .timer import TurnTimer

__all__ = [
    "HeuristicAI",
    "ScoreWeights",
    "evaluate_sub_board_pressure",
    "opponent_immediate_threat",
    "select_move",
    "Arena",
    "ArenaResult",
    "HeuristicAgent",
    "RandomAgent",
    "InvalidMoveError",
    "LineWin",
    "MetaBoard",
    "Move",
    "UltimateTicTacToe",
    "check_line_winner",
    "check_meta_winner",
    "destination_for_cell",
    "GameMode",
    "GameSession",
    "TurnTimer",
]
