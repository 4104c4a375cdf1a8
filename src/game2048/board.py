from __future__ import annotations
from contextlib import contextmanager
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterator, List, Optional, Sequence, Tuple, Union

import numpy as np


class Side(IntEnum):
    # 与动作编号一致：0=上, 1=右, 2=下, 3=左
    NORTH = 0
    EAST = 1
    SOUTH = 2
    WEST = 3

    @classmethod
    def parse(cls, value: Union["Side", int, str]) -> "Side":
        if isinstance(value, cls):
            return value
        if isinstance(value, bool):
            raise ValueError(f"Invalid side: {value!r}")
        if isinstance(value, (int, np.integer)):
            try:
                return cls(int(value))
            except ValueError:
                raise ValueError(f"Invalid side: {value!r}") from None
        if isinstance(value, str):
            key = value.strip().upper()
            if key in _SIDE_ALIASES:
                return _SIDE_ALIASES[key]
        raise ValueError(f"Invalid side: {value!r}")


_SIDE_ALIASES = {
    "N": Side.NORTH, "NORTH": Side.NORTH, "U": Side.NORTH, "UP": Side.NORTH,
    "E": Side.EAST, "EAST": Side.EAST, "R": Side.EAST, "RIGHT": Side.EAST,
    "S": Side.SOUTH, "SOUTH": Side.SOUTH, "D": Side.SOUTH, "DOWN": Side.SOUTH,
    "W": Side.WEST, "WEST": Side.WEST, "L": Side.WEST, "LEFT": Side.WEST,
}


def to_physical(side: Side, col: int, row: int, size: int) -> Tuple[int, int]:
    """视角坐标 -> 棋盘实际坐标。视角下的“上”即实际的 side 方向。"""
    last = size - 1
    if side == Side.NORTH:
        return col, row
    if side == Side.EAST:
        return row, last - col
    if side == Side.SOUTH:
        return last - col, last - row
    return last - row, col


def to_logical(side: Side, col: int, row: int, size: int) -> Tuple[int, int]:
    """to_physical 的逆映射。"""
    last = size - 1
    if side == Side.NORTH:
        return col, row
    if side == Side.EAST:
        return last - row, col
    if side == Side.SOUTH:
        return last - col, last - row
    return row, last - col


def _is_tile_value(value) -> bool:
    # 只接受整数（不含 bool），且为 >= 2 的 2 的幂
    if isinstance(value, (bool, np.bool_)) or not isinstance(value, (int, np.integer)):
        return False
    value = int(value)
    return value >= 2 and value & (value - 1) == 0


@dataclass(frozen=True)
class Tile:
    value: int
    col: int
    row: int

    def __post_init__(self) -> None:
        if not _is_tile_value(self.value):
            raise ValueError(f"Tile value must be a power of two >= 2, got {self.value!r}")

    def at(self, col: int, row: int) -> "Tile":
        return Tile(self.value, col, row)


class Board:
    """
    N×N 棋盘，(col, row) 寻址，row 0 为底边，col 0 为左边。
    内部以 numpy 数组 cells[col, row] 存储数值，0 表示空。
    所有读写都经过当前视角（viewing perspective）的坐标映射。
    """

    def __init__(self, size: int = 4):
        if isinstance(size, bool) or not isinstance(size, int) or size < 1:
            raise ValueError(f"Board size must be a positive integer, got {size!r}")
        self._size = size
        self._cells = np.zeros((size, size), dtype=np.int64)
        self._side = Side.NORTH

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "Board":
        # rows 按显示顺序给出：第一行为最上方
        size = len(rows)
        if size == 0:
            raise ValueError("Board snapshot must have at least one row")
        for i, row in enumerate(rows):
            if len(row) != size:
                raise ValueError(f"Board snapshot must be square: row {i} has {len(row)} cells, expected {size}")
        board = cls(size)
        for i, row in enumerate(rows):
            for c, v in enumerate(row):
                is_int = isinstance(v, (int, np.integer)) and not isinstance(v, (bool, np.bool_))
                if is_int and v == 0:
                    continue
                if not _is_tile_value(v):
                    raise ValueError(f"Invalid tile value {v!r} at row {i}, column {c}")
                board._cells[c, size - 1 - i] = int(v)
        return board

    @property
    def size(self) -> int:
        return self._size

    @property
    def side(self) -> Side:
        return self._side

    def copy(self) -> "Board":
        other = Board(self._size)
        other._cells[...] = self._cells
        other._side = self._side
        return other

    # ---- 视角 ----
    def set_viewing_perspective(self, side: Union[Side, int, str]) -> None:
        self._side = Side.parse(side)

    @contextmanager
    def viewed_from(self, side: Union[Side, int, str]) -> Iterator["Board"]:
        self.set_viewing_perspective(side)
        try:
            yield self
        finally:
            self._side = Side.NORTH

    def _physical(self, col: int, row: int) -> Tuple[int, int]:
        if not (0 <= col < self._size and 0 <= row < self._size):
            raise IndexError(f"Position ({col}, {row}) is outside a {self._size}x{self._size} board")
        return to_physical(self._side, col, row, self._size)

    # ---- 读写 ----
    def get(self, col: int, row: int) -> Optional[Tile]:
        pc, pr = self._physical(col, row)
        v = int(self._cells[pc, pr])
        return Tile(v, col, row) if v else None

    def set(self, col: int, row: int, tile: Optional[Tile]) -> None:
        pc, pr = self._physical(col, row)
        self._cells[pc, pr] = 0 if tile is None else tile.value

    def add_tile(self, tile: Tile) -> None:
        if self.get(tile.col, tile.row) is not None:
            raise ValueError(f"Cell ({tile.col}, {tile.row}) is already occupied")
        self.set(tile.col, tile.row, tile)

    def move(self, col: int, row: int, tile: Tile) -> bool:
        """
        把 tile 从它所在的格子移到 (col, row)，并清空原格子。
        目标格已有同值方块时合并为两倍值并返回 True。
        """
        source = self.get(tile.col, tile.row)
        if source is None or source.value != tile.value:
            raise ValueError(f"No tile of value {tile.value} at ({tile.col}, {tile.row})")
        if (col, row) == (tile.col, tile.row):
            return False
        target = self.get(col, row)
        if target is not None and target.value != tile.value:
            raise ValueError(
                f"Cannot merge {tile.value} into ({col}, {row}) holding {target.value}"
            )
        self.set(tile.col, tile.row, None)
        if target is None:
            self.set(col, row, tile.at(col, row))
            return False
        self.set(col, row, Tile(2 * tile.value, col, row))
        return True

    def clear(self) -> None:
        self._cells[...] = 0

    # ---- 快照 ----
    def values(self) -> np.ndarray:
        """自然方向（不受视角影响）的数值副本，按显示顺序：第一行为最上方。"""
        return np.flipud(self._cells.T).copy()

    def rows(self) -> List[List[int]]:
        return self.values().tolist()

    def __iter__(self) -> Iterator[Optional[Tile]]:
        for col in range(self._size):
            for row in range(self._size):
                v = int(self._cells[col, row])
                yield Tile(v, col, row) if v else None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Board):
            return NotImplemented
        return self._size == other._size and np.array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return f"Board({self.rows()!r})"
