"""Rules engine and authoritative game state for Ultimate Tic-Tac-Toe.

The board is organised as nine 3x3 sub-boards.  Each move is represented as a
tuple ``(sub_board_index, cell_index)`` where both values are in the range
``0..8``.  The ``sub_board_index`` selects one of the nine local boards and the
``cell_index`` selects a cell inside the local board using row-major order.

Win detection works identically at both levels: a sub-board is won by the
first of the eight canonical triples holding three equal marks, and the game is
won when the sub-board winners themselves line up on the meta-board.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

import numpy as np

logger = logging.getLogger(__name__)

Player = str  # Either "X" or "O"
Move = Tuple[int, int]
Line = Tuple[int, int, int]

EMPTY = " "
PLAYERS: Tuple[Player, Player] = ("X", "O")
DRAW = "T"

WIN_LINES: Tuple[Line, ...] = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

CENTER_INDEX = 4
CORNER_INDICES = frozenset({0, 2, 6, 8})


class InvalidMoveError(RuntimeError):
    """Raised when a move is attempted that is not legal in the current state."""


@dataclass(frozen=True)
class LineWin:
    """A decided 3x3 grid: who won it and through which triple."""

    winner: Player
    line: Line


def check_line_winner(cells: Sequence[str]) -> Optional[LineWin]:
    """Return the first completed triple in scan order, if any.

    Rows are scanned top-to-bottom, then columns left-to-right, then the two
    diagonals, so a move completing several lines reports the earliest one.
    """

    for line in WIN_LINES:
        a, b, c = line
        if cells[a] != EMPTY and cells[a] == cells[b] == cells[c]:
            return LineWin(winner=cells[a], line=line)
    return None


def project_outcomes(outcomes: Sequence[Optional[LineWin]]) -> List[str]:
    """Map sub-board outcomes to meta-board cells (``EMPTY`` when undecided)."""

    return [EMPTY if outcome is None else outcome.winner for outcome in outcomes]


def check_meta_winner(outcomes: Sequence[Optional[LineWin]]) -> Optional[LineWin]:
    return check_line_winner(project_outcomes(outcomes))


def sub_board_status(cells: Sequence[str]) -> str:
    """Return the winner, ``DRAW`` for a full board without a line, else ``EMPTY``."""

    result = check_line_winner(cells)
    if result is not None:
        return result.winner
    if all(cell != EMPTY for cell in cells):
        return DRAW
    return EMPTY


def destination_for_cell(cell_index: int) -> int:
    """Sub-board the opponent is sent to after a mark in ``cell_index``."""

    return cell_index


@dataclass
class MetaBoard:
    """Nine sub-boards plus the outcome recorded for each of them."""

    boards: List[List[str]] = field(
        default_factory=lambda: [[EMPTY] * 9 for _ in range(9)]
    )
    outcomes: List[Optional[LineWin]] = field(default_factory=lambda: [None] * 9)

    def clone(self) -> "MetaBoard":
        return MetaBoard(
            boards=[row[:] for row in self.boards],
            outcomes=self.outcomes[:],
        )

    def place(self, board_index: int, cell_index: int, player: Player) -> Optional[LineWin]:
        """Mark an empty cell and return the sub-board win it produced, if new."""

        board = self.boards[board_index]
        if board[cell_index] != EMPTY:
            raise InvalidMoveError(
                f"cell {cell_index} of sub-board {board_index} is already taken"
            )
        board[cell_index] = player
        if self.outcomes[board_index] is not None:
            return None
        result = check_line_winner(board)
        if result is not None:
            self.outcomes[board_index] = result
        return result

    def status(self, index: int) -> str:
        outcome = self.outcomes[index]
        if outcome is not None:
            return outcome.winner
        return sub_board_status(self.boards[index])

    def is_decided(self, index: int) -> bool:
        return self.status(index) != EMPTY

    def is_playable(self, index: int) -> bool:
        return not self.is_decided(index)

    def mark_count(self) -> int:
        return sum(cell != EMPTY for board in self.boards for cell in board)

    def meta_winner(self) -> Optional[LineWin]:
        return check_meta_winner(self.outcomes)


@dataclass
class _Snapshot:
    board: MetaBoard
    current_player: Player
    active_board: Optional[int]
    winner: Optional[LineWin]
    last_move: Optional[Move]


@dataclass
class UltimateTicTacToe:
    """Authoritative state of a single Ultimate Tic-Tac-Toe game."""

    board: MetaBoard = field(default_factory=MetaBoard)
    current_player: Player = "X"
    active_board: Optional[int] = None
    winner: Optional[LineWin] = None
    last_move: Optional[Move] = None
    _history: List[_Snapshot] = field(default_factory=list, repr=False)
    _redo: List[_Snapshot] = field(default_factory=list, repr=False)

    def clone(self) -> "UltimateTicTacToe":
        copy = UltimateTicTacToe(
            board=self.board.clone(),
            current_player=self.current_player,
            active_board=self.active_board,
            winner=self.winner,
            last_move=self.last_move,
        )
        return copy

    @property
    def boards(self) -> List[List[str]]:
        return self.board.boards

    @property
    def outcomes(self) -> List[Optional[LineWin]]:
        return self.board.outcomes

    @property
    def terminal(self) -> bool:
        if self.winner is not None:
            return True
        return all(self.board.is_decided(index) for index in range(9))

    @property
    def is_draw(self) -> bool:
        return self.terminal and self.winner is None

    def reset(self) -> None:
        self.board = MetaBoard()
        self.current_player = "X"
        self.active_board = None
        self.winner = None
        self.last_move = None
        self._history.clear()
        self._redo.clear()

    def playable_boards(self) -> List[int]:
        if self.terminal:
            return []
        if self.active_board is not None:
            return [self.active_board]
        return [index for index in range(9) if self.board.is_playable(index)]

    def available_moves(self) -> List[Move]:
        moves: List[Move] = []
        for sub_idx in self.playable_boards():
            for cell_idx, value in enumerate(self.board.boards[sub_idx]):
                if value == EMPTY:
                    moves.append((sub_idx, cell_idx))
        return moves

    def make_move(self, player: Player, move: Move) -> Optional[LineWin]:
        """Apply ``move`` for ``player`` and return the sub-board win it caused."""

        if player not in PLAYERS:
            raise ValueError("player must be 'X' or 'O'")
        if self.terminal:
            raise InvalidMoveError("Game has already finished")
        if player != self.current_player:
            raise InvalidMoveError(f"It is {self.current_player}'s turn, not {player}'s")

        move = (int(move[0]), int(move[1]))
        if move not in self.available_moves():
            raise InvalidMoveError("Move is not legal in the current state")

        self._history.append(self._snapshot())
        self._redo.clear()

        board_idx, cell_idx = move
        sub_win = self.board.place(board_idx, cell_idx, player)
        self.last_move = move
        if sub_win is not None:
            logger.debug("%s won sub-board %d along %s", player, board_idx, sub_win.line)

        self.winner = self.board.meta_winner()
        if self.winner is not None:
            self.active_board = None
            logger.debug("%s won the game along %s", self.winner.winner, self.winner.line)
            return sub_win

        destination = destination_for_cell(cell_idx)
        self.active_board = destination if self.board.is_playable(destination) else None
        self.current_player = opponent_of(player)
        if self.terminal:
            logger.debug("Game ended in a draw")
        return sub_win

    def pass_turn(self) -> None:
        """Forfeit the current turn; the opponent moves next with a free choice."""

        if self.terminal:
            raise InvalidMoveError("Game has already finished")
        self._history.append(self._snapshot())
        self._redo.clear()
        self.active_board = None
        self.current_player = opponent_of(self.current_player)

    def undo(self) -> bool:
        if self.winner is not None or not self._history:
            return False
        self._redo.append(self._snapshot())
        self._restore(self._history.pop())
        return True

    def redo(self) -> bool:
        if not self._redo:
            return False
        self._history.append(self._snapshot())
        self._restore(self._redo.pop())
        return True

    @property
    def can_undo(self) -> bool:
        return self.winner is None and bool(self._history)

    @property
    def can_redo(self) -> bool:
        return bool(self._redo)

    def _snapshot(self) -> _Snapshot:
        return _Snapshot(
            board=self.board.clone(),
            current_player=self.current_player,
            active_board=self.active_board,
            winner=self.winner,
            last_move=self.last_move,
        )

    def _restore(self, snapshot: _Snapshot) -> None:
        self.board = snapshot.board
        self.current_player = snapshot.current_player
        self.active_board = snapshot.active_board
        self.winner = snapshot.winner
        self.last_move = snapshot.last_move

    def legal_action_mask(self) -> np.ndarray:
        """Return a boolean mask over the 81 global actions that are legal."""

        mask = np.zeros(81, dtype=bool)
        for sub_idx, cell_idx in self.available_moves():
            mask[sub_idx * 9 + cell_idx] = True
        return mask

    def render_ascii(self) -> str:
        def cell_value(board: Sequence[str], idx: int) -> str:
            value = board[idx]
            return value if value != EMPTY else "."

        rows: List[str] = []
        for big_row in range(3):
            for inner_row in range(3):
                row_cells: List[str] = []
                for big_col in range(3):
                    board = self.board.boards[big_row * 3 + big_col]
                    start = inner_row * 3
                    row_cells.append(
                        " ".join(
                            cell_value(board, start + offset) for offset in range(3)
                        )
                    )
                rows.append(" || ".join(row_cells))
            if big_row < 2:
                rows.append("======++=======++======")
        return "\n".join(rows)


def opponent_of(player: Player) -> Player:
    return "O" if player == "X" else "X"


def action_to_index(move: Move) -> int:
    sub_idx, cell_idx = move
    if not 0 <= sub_idx < 9 or not 0 <= cell_idx < 9:
        raise ValueError("move components must be in range 0..8")
    return sub_idx * 9 + cell_idx


def index_to_action(index: int) -> Move:
    if not 0 <= index < 81:
        raise ValueError("action index must be in range 0..80")
    return divmod(index, 9)
