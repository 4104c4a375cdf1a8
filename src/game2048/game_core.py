from __future__ import annotations
from typing import Optional, Tuple, Union

import numpy as np

from .board import Board, Side, Tile


# 最大方块值，出现即结束
MAX_PIECE: int = 2048


def tilt_column(board: Board, col: int) -> Tuple[bool, int]:
    """
    在当前视角下把一列向上（row 增大方向）滑动并合并。

    从最上方开始向下扫描，leader 为尚未落位的最近方块，target 为下一个输出格。
    与 leader 同值的方块与之合并，合并结果立即落位且不再参与本次合并；
    三个同值相邻时只有靠前的两个合并。
    返回 (是否变化, 合并得分)。
    """
    changed = False
    reward = 0
    target = board.size - 1
    leader: Optional[Tile] = None

    for row in range(board.size - 1, -1, -1):
        tile = board.get(col, row)
        if tile is None:
            continue
        if leader is None:
            leader = tile
            continue
        if leader.value == tile.value:
            board.move(col, target, leader)
            board.move(col, target, tile)
            reward += 2 * tile.value
            changed = True
            leader = None
        else:
            if leader.row != target:
                board.move(col, target, leader)
                changed = True
            leader = tile
        target -= 1

    if leader is not None and leader.row != target:
        board.move(col, target, leader)
        changed = True

    return changed, reward


def tilt(board: Board, side: Union[Side, int, str]) -> Tuple[bool, int]:
    """向 side 倾斜整个棋盘，返回 (是否变化, 合并得分)。"""
    side = Side.parse(side)
    changed = False
    total_reward = 0
    with board.viewed_from(side):
        for col in range(board.size):
            col_changed, reward = tilt_column(board, col)
            if col_changed:
                changed = True
            total_reward += reward
    return changed, total_reward


def empty_space_exists(board: Board) -> bool:
    return bool(np.any(board.values() == 0))


def max_tile_exists(board: Board, max_piece: int = MAX_PIECE) -> bool:
    return bool(np.any(board.values() == max_piece))


def at_least_one_move_exists(board: Board) -> bool:
    # 任一空格
    if empty_space_exists(board):
        return True
    # 任一相邻可合并
    cells = board.values()
    if np.any(cells[:, :-1] == cells[:, 1:]):
        return True
    return bool(np.any(cells[:-1, :] == cells[1:, :]))


def is_game_over(board: Board, max_piece: int = MAX_PIECE) -> bool:
    return max_tile_exists(board, max_piece) or not at_least_one_move_exists(board)
