import numpy as np
import pytest

from ultimate_velha.game import (
    DRAW,
    EMPTY,
    WIN_LINES,
    InvalidMoveError,
    LineWin,
    MetaBoard,
    UltimateTicTacToe,
    action_to_index,
    check_line_winner,
    check_meta_winner,
    destination_for_cell,
    index_to_action,
    project_outcomes,
    sub_board_status,
)

# X O X / X O O / O X X: full, no line
DRAWN = list("XOXXOOOXX")


def cells(text: str) -> list:
    return [EMPTY if ch == "." else ch for ch in text]


@pytest.mark.parametrize("mark", ["X", "O"])
@pytest.mark.parametrize("line", WIN_LINES)
def test_every_canonical_triple_is_detected(line, mark) -> None:
    board = [EMPTY] * 9
    for index in line:
        board[index] = mark
    assert check_line_winner(board) == LineWin(winner=mark, line=line)


def test_empty_board_has_no_winner() -> None:
    assert check_line_winner([EMPTY] * 9) is None


def test_top_row_win() -> None:
    result = check_line_winner(cells("XXXOO...."))
    assert result == LineWin(winner="X", line=(0, 1, 2))


def test_full_board_without_line_is_a_draw() -> None:
    assert check_line_winner(DRAWN) is None
    assert sub_board_status(DRAWN) == DRAW
    assert sub_board_status(cells("XX.......")) == EMPTY
    assert sub_board_status(cells("OOO......")) == "O"


def test_rows_take_priority_over_columns_and_diagonals() -> None:
    board = cells("XXXXX.X.X")
    assert check_line_winner(board).line == (0, 1, 2)
    board = cells("X..XX.X.X")
    assert check_line_winner(board).line == (0, 3, 6)


def test_meta_winner_on_diagonal() -> None:
    outcomes = [None] * 9
    for index in (0, 4, 8):
        outcomes[index] = LineWin("O", (0, 1, 2))
    assert check_meta_winner(outcomes) == LineWin(winner="O", line=(0, 4, 8))


def test_meta_winner_matches_projected_line_check() -> None:
    rng = np.random.default_rng(7)
    for _ in range(200):
        outcomes = []
        for value in rng.integers(0, 3, size=9):
            outcomes.append(None if value == 0 else LineWin("XO"[value - 1], (2, 4, 6)))
        assert check_meta_winner(outcomes) == check_line_winner(project_outcomes(outcomes))


def test_boards_without_a_full_line_have_no_winner() -> None:
    rng = np.random.default_rng(13)
    checked = 0
    for _ in range(500):
        board = [[EMPTY, "X", "O"][v] for v in rng.integers(0, 3, size=9)]
        if any(board[a] != EMPTY and board[a] == board[b] == board[c] for a, b, c in WIN_LINES):
            continue
        checked += 1
        assert check_line_winner(board) is None
    assert checked > 0


def test_win_checks_are_pure() -> None:
    board = cells("OX.OX.O..")
    snapshot = list(board)
    first = check_line_winner(board)
    assert first == check_line_winner(board) == LineWin("O", (0, 3, 6))
    assert board == snapshot


def test_destination_is_the_played_cell() -> None:
    assert [destination_for_cell(i) for i in range(9)] == list(range(9))


def test_outcome_is_never_overwritten() -> None:
    board = MetaBoard()
    for cell in (0, 1):
        assert board.place(0, cell, "X") is None
    assert board.place(0, 2, "X") == LineWin("X", (0, 1, 2))
    for cell in (3, 4):
        board.place(0, cell, "O")
    assert board.place(0, 5, "O") is None
    assert board.outcomes[0] == LineWin("X", (0, 1, 2))


def test_place_rejects_taken_cell() -> None:
    board = MetaBoard()
    board.place(3, 3, "X")
    with pytest.raises(InvalidMoveError):
        board.place(3, 3, "O")


def test_clone_is_independent() -> None:
    board = MetaBoard()
    copy = board.clone()
    copy.place(0, 0, "X")
    assert board.boards[0][0] == EMPTY
    assert board.mark_count() == 0
    assert copy.mark_count() == 1


def test_drawn_board_is_decided_but_has_no_outcome() -> None:
    board = MetaBoard()
    board.boards[5] = list(DRAWN)
    assert board.is_decided(5)
    assert not board.is_playable(5)
    assert board.outcomes[5] is None
    assert board.meta_winner() is None


def test_first_move_is_free_and_routes_opponent() -> None:
    game = UltimateTicTacToe()
    assert len(game.available_moves()) == 81
    game.make_move("X", (0, 7))
    assert game.active_board == 7
    assert game.current_player == "O"
    assert game.playable_boards() == [7]
    assert all(move[0] == 7 for move in game.available_moves())


def test_rejects_wrong_turn_and_wrong_board() -> None:
    game = UltimateTicTacToe()
    with pytest.raises(InvalidMoveError):
        game.make_move("O", (0, 0))
    game.make_move("X", (0, 3))
    with pytest.raises(InvalidMoveError):
        game.make_move("O", (4, 4))
    with pytest.raises(ValueError):
        game.make_move("Z", (3, 0))


def test_won_destination_gives_free_choice() -> None:
    game = UltimateTicTacToe()
    game.board.boards[4] = cells("XXX.OO...")
    game.board.outcomes[4] = LineWin("X", (0, 1, 2))
    game.make_move("X", (0, 4))
    assert game.active_board is None
    assert 4 not in game.playable_boards()
    assert 0 in game.playable_boards()


def test_drawn_destination_gives_free_choice() -> None:
    game = UltimateTicTacToe()
    game.board.boards[5] = list(DRAWN)
    game.make_move("X", (0, 5))
    assert game.active_board is None
    assert 5 not in game.playable_boards()
    assert all(move[0] != 5 for move in game.available_moves())


def test_meta_win_ends_the_game() -> None:
    game = UltimateTicTacToe()
    for index in (0, 1):
        game.board.boards[index] = cells("XXX......")
        game.board.outcomes[index] = LineWin("X", (0, 1, 2))
    game.board.boards[2] = cells("XX.OO....")
    game.active_board = 2

    result = game.make_move("X", (2, 2))

    assert result == LineWin("X", (0, 1, 2))
    assert game.winner == LineWin("X", (0, 1, 2))
    assert game.terminal
    assert not game.is_draw
    assert game.available_moves() == []
    assert not game.legal_action_mask().any()
    assert not game.undo()
    with pytest.raises(InvalidMoveError):
        game.make_move("O", (3, 0))


def test_no_moves_left_without_line_is_a_draw() -> None:
    game = UltimateTicTacToe()
    for index in range(8):
        game.board.boards[index] = list(DRAWN)
    game.board.boards[8] = cells("XOXXOOOX.")
    assert not game.terminal
    assert game.available_moves() == [(8, 8)]

    game.make_move("X", (8, 8))

    assert game.terminal
    assert game.is_draw
    assert game.winner is None


def test_undo_and_redo_restore_snapshots() -> None:
    game = UltimateTicTacToe()
    game.make_move("X", (4, 4))
    game.make_move("O", (4, 0))

    assert game.undo()
    assert game.current_player == "O"
    assert game.active_board == 4
    assert game.boards[4][0] == EMPTY
    assert game.can_redo

    assert game.redo()
    assert game.boards[4][0] == "O"
    assert game.current_player == "X"
    assert game.active_board == 0

    game.undo()
    game.make_move("O", (4, 8))
    assert not game.can_redo
    assert not game.redo()


def test_undo_on_fresh_game_does_nothing() -> None:
    game = UltimateTicTacToe()
    assert not game.can_undo
    assert not game.undo()


def test_pass_turn_frees_the_board() -> None:
    game = UltimateTicTacToe()
    game.make_move("X", (2, 6))
    game.pass_turn()
    assert game.current_player == "X"
    assert game.active_board is None
    assert game.undo()
    assert game.current_player == "O"
    assert game.active_board == 6


def test_reset_clears_everything() -> None:
    game = UltimateTicTacToe()
    game.make_move("X", (1, 1))
    game.reset()
    assert game.board.mark_count() == 0
    assert game.current_player == "X"
    assert game.last_move is None
    assert not game.can_undo


def test_legal_action_mask_matches_available_moves() -> None:
    game = UltimateTicTacToe()
    game.make_move("X", (0, 3))
    mask = game.legal_action_mask()
    assert mask.sum() == 9
    assert set(np.flatnonzero(mask)) == {action_to_index(m) for m in game.available_moves()}


def test_action_index_round_trip_bounds() -> None:
    assert index_to_action(action_to_index((8, 8))) == (8, 8)
    with pytest.raises(ValueError):
        action_to_index((9, 0))
    with pytest.raises(ValueError):
        index_to_action(81)


def test_render_ascii_shows_marks() -> None:
    game = UltimateTicTacToe()
    game.make_move("X", (0, 0))
    lines = game.render_ascii().splitlines()
    assert len(lines) == 11
    assert lines[0].startswith("X . .")
