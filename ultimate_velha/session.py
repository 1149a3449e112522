"""Game session tying the rules engine, the heuristic opponent and the timer.

A front-end drives a :class:`GameSession`: it forwards the player's moves,
asks for the AI's reply when :attr:`GameSession.is_ai_turn` is set, and feeds
elapsed time to the turn timer in local mode.
"""
from __future__ import annotations

import enum
import logging
from typing import Any, Mapping, Optional

from .ai import HeuristicAI, ScoreWeights
from .game import InvalidMoveError, LineWin, Move, Player, UltimateTicTacToe, opponent_of
from .timer import TurnTimer

logger = logging.getLogger(__name__)


class GameMode(str, enum.Enum):
    LOCAL = "local"
    AI = "ai"


class GameSession:
    def __init__(
        self,
        mode: GameMode = GameMode.LOCAL,
        ai_player: Player = "O",
        ai: Optional[HeuristicAI] = None,
        timer: Optional[TurnTimer] = None,
    ) -> None:
        if ai_player not in ("X", "O"):
            raise ValueError("ai_player must be 'X' or 'O'")
        self.mode = GameMode(mode)
        self.ai_player = ai_player
        self.ai = ai or HeuristicAI()
        self.timer = timer or TurnTimer()
        self.game = UltimateTicTacToe()

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> "GameSession":
        session_cfg = config.get("session", {}) or {}
        return cls(
            mode=GameMode(session_cfg.get("mode", GameMode.LOCAL.value)),
            ai_player=str(session_cfg.get("ai_player", "O")),
            ai=HeuristicAI(weights=ScoreWeights.from_config(config.get("evaluator"))),
            timer=TurnTimer.from_config(config.get("timer")),
        )

    @property
    def human_player(self) -> Player:
        return opponent_of(self.ai_player)

    @property
    def is_ai_turn(self) -> bool:
        return (
            self.mode is GameMode.AI
            and not self.game.terminal
            and self.game.current_player == self.ai_player
        )

    def play(self, move: Move) -> Optional[LineWin]:
        """Apply a human move for whoever is to play."""

        if self.is_ai_turn:
            raise InvalidMoveError("It is the AI's turn")
        return self._apply(move)

    def play_ai_turn(self) -> Move:
        if not self.is_ai_turn:
            raise InvalidMoveError("It is not the AI's turn")
        move = self.ai.select_move(self.game, self.ai_player, self.human_player)
        if move is None:
            raise RuntimeError("Heuristic AI found no move in an unfinished game")
        self._apply(move)
        return move

    def _apply(self, move: Move) -> Optional[LineWin]:
        player = self.game.current_player
        result = self.game.make_move(player, move)
        logger.debug("%s played %s\n%s", player, move, self.game.render_ascii())
        self.timer.reset()
        return result

    def tick(self, seconds: float = 1.0) -> bool:
        """Feed elapsed time; in local mode an expired turn passes to the opponent."""

        if self.mode is not GameMode.LOCAL or self.game.terminal:
            return False
        if not self.timer.tick(seconds):
            return False
        logger.info("%s ran out of time", self.game.current_player)
        self.game.pass_turn()
        return True

    def undo(self) -> bool:
        undone = self.game.undo()
        if undone:
            self.timer.reset()
        return undone

    def redo(self) -> bool:
        redone = self.game.redo()
        if redone:
            self.timer.reset()
        return redone

    def reset(self) -> None:
        self.game.reset()
        self.timer.reset()

    def set_mode(self, mode: GameMode) -> None:
        self.mode = GameMode(mode)
        self.reset()
