import pathlib
import sys

import numpy as np
import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1] / "src"
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from game2048 import game_core
from game2048.board import Board, Side
from game2048.game_core import (
    at_least_one_move_exists,
    empty_space_exists,
    is_game_over,
    max_tile_exists,
    tilt,
)


def _tilt(rows, side):
    board = Board.from_rows(rows)
    changed, reward = tilt(board, side)
    return board.rows(), changed, reward


def _random_board(rng, size=4):
    exps = rng.integers(0, 6, size=(size, size))
    return np.where(exps == 0, 0, 2 ** exps).tolist()


def test_slide_north_without_merge():
    rows, changed, reward = _tilt([
        [0, 0, 0, 0],
        [2, 0, 0, 0],
        [0, 0, 4, 0],
        [8, 0, 0, 0],
    ], Side.NORTH)
    assert rows == [
        [2, 0, 4, 0],
        [8, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ]
    assert changed
    assert reward == 0


def test_triple_merges_leading_pair_only():
    rows, changed, reward = _tilt([
        [2, 0, 0],
        [2, 0, 0],
        [2, 0, 0],
    ], Side.NORTH)
    assert [r[0] for r in rows] == [4, 2, 0]
    assert changed
    assert reward == 4


def test_quadruple_merges_two_pairs():
    rows, changed, reward = _tilt([
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [2, 2, 2, 2],
    ], Side.EAST)
    assert rows[3] == [0, 0, 4, 4]
    assert reward == 8
    assert changed


def test_merged_tile_does_not_merge_again():
    rows, _, reward = _tilt([
        [2, 0, 0, 0],
        [2, 0, 0, 0],
        [4, 0, 0, 0],
        [0, 0, 0, 0],
    ], Side.NORTH)
    assert [r[0] for r in rows] == [4, 4, 0, 0]
    assert reward == 4


def test_merge_across_gaps():
    rows, changed, reward = _tilt([
        [2, 0, 2, 2],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ], Side.EAST)
    assert rows[0] == [0, 0, 2, 4]
    assert changed
    assert reward == 4


def test_west_and_south_directions():
    rows, _, reward = _tilt([
        [0, 4, 0, 4],
        [0, 0, 0, 0],
        [2, 0, 0, 0],
        [2, 0, 0, 0],
    ], Side.WEST)
    assert rows[0] == [8, 0, 0, 0]
    assert reward == 8

    rows, _, reward = _tilt([
        [2, 0, 0, 0],
        [2, 0, 0, 0],
        [2, 0, 0, 0],
        [0, 0, 0, 0],
    ], Side.SOUTH)
    assert [r[0] for r in rows] == [0, 0, 2, 4]
    assert reward == 4


def test_no_op_tilt_leaves_board_untouched():
    start = [
        [2, 4, 8, 16],
        [4, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ]
    rows, changed, reward = _tilt(start, Side.NORTH)
    assert not changed
    assert reward == 0
    assert rows == start


def test_single_tile_moves_to_edge():
    rows, changed, _ = _tilt([
        [0, 0],
        [0, 2],
    ], Side.NORTH)
    assert rows == [[0, 2], [0, 0]]
    assert changed


def test_one_by_one_board_never_moves():
    for side in Side:
        rows, changed, reward = _tilt([[2]], side)
        assert rows == [[2]]
        assert not changed
        assert reward == 0


def test_invalid_side_does_not_touch_board():
    board = Board.from_rows([[0, 2], [2, 0]])
    with pytest.raises(ValueError):
        tilt(board, 9)
    assert board.rows() == [[0, 2], [2, 0]]
    assert board.side is Side.NORTH


def test_perspective_reset_when_column_fails(monkeypatch):
    def boom(board, col):
        raise RuntimeError("column failed")

    monkeypatch.setattr(game_core, "tilt_column", boom)
    board = Board.from_rows([[0, 2], [2, 0]])
    with pytest.raises(RuntimeError):
        tilt(board, Side.EAST)
    assert board.side is Side.NORTH


def _reference_move_left(line):
    filtered = [x for x in line if x != 0]
    reward = 0
    i = 0
    out = []
    while i < len(filtered):
        if i + 1 < len(filtered) and filtered[i] == filtered[i + 1]:
            out.append(filtered[i] * 2)
            reward += filtered[i] * 2
            i += 2
        else:
            out.append(filtered[i])
            i += 1
    return out + [0] * (len(line) - len(out)), reward


# 逆时针旋转次数，使 side 方向转到左边
_TURNS_TO_WEST = {Side.WEST: 0, Side.NORTH: 1, Side.EAST: 2, Side.SOUTH: -1}


def _reference_tilt(start, side):
    turned = np.rot90(np.array(start), _TURNS_TO_WEST[side])
    out_rows, reward = [], 0
    for line in turned.tolist():
        out, r = _reference_move_left(line)
        out_rows.append(out)
        reward += r
    return np.rot90(np.array(out_rows), -_TURNS_TO_WEST[side]).tolist(), reward


def test_every_side_matches_line_reference():
    rng = np.random.default_rng(3)
    for _ in range(50):
        start = _random_board(rng)
        for side in Side:
            board = Board.from_rows(start)
            changed, reward = tilt(board, side)

            expected_rows, expected_reward = _reference_tilt(start, side)
            assert board.rows() == expected_rows
            assert reward == expected_reward
            assert changed == (expected_rows != start)


def test_tilt_conserves_total_value_and_scores_exact_merges():
    rng = np.random.default_rng(7)
    for _ in range(50):
        start = _random_board(rng)
        for side in Side:
            board = Board.from_rows(start)
            before = board.values()
            _, reward = tilt(board, side)
            after = board.values()
            # 合并两个 v 得到一个 2v：总和不变，得分为新方块值之和
            assert int(after.sum()) == int(before.sum())
            assert reward == _reference_tilt(start, side)[1]
            merges = int(np.count_nonzero(before)) - int(np.count_nonzero(after))
            assert (reward == 0) == (merges == 0)


def test_rotation_symmetry():
    rng = np.random.default_rng(11)
    for _ in range(30):
        start = np.array(_random_board(rng))
        east = Board.from_rows(start.tolist())
        _, east_reward = tilt(east, Side.EAST)

        # 逆时针转 90° 后东边在上
        rotated = Board.from_rows(np.rot90(start, 1).tolist())
        _, north_reward = tilt(rotated, Side.NORTH)

        assert np.array_equal(np.rot90(rotated.values(), -1), east.values())
        assert north_reward == east_reward


def test_max_tile_ends_game():
    board = Board.from_rows([
        [2048, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
        [0, 0, 0, 0],
    ])
    assert max_tile_exists(board)
    assert is_game_over(board)
    assert not is_game_over(board, max_piece=4096)


def test_full_board_stalemate():
    rows = [
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 2, 4],
        [4, 2, 4, 2],
    ]
    board = Board.from_rows(rows)
    assert not empty_space_exists(board)
    assert not at_least_one_move_exists(board)
    assert is_game_over(board)

    rows[1][2] = 0
    board = Board.from_rows(rows)
    assert empty_space_exists(board)
    assert not is_game_over(board)


def test_full_board_with_adjacent_pair_is_not_over():
    vertical = Board.from_rows([
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 8, 4],
        [4, 2, 8, 2],
    ])
    horizontal = Board.from_rows([
        [2, 4, 2, 4],
        [4, 2, 4, 2],
        [2, 4, 2, 4],
        [4, 2, 2, 8],
    ])
    assert not is_game_over(vertical)
    assert not is_game_over(horizontal)


def test_detector_ignores_active_perspective():
    board = Board.from_rows([[2, 4], [4, 2]])
    with board.viewed_from(Side.EAST):
        assert is_game_over(board)


def test_one_by_one_terminal_states():
    assert not is_game_over(Board(1))
    assert is_game_over(Board.from_rows([[2]]))
