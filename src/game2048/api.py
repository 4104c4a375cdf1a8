from __future__ import annotations
import random
from typing import Callable, Dict, List, Optional, Sequence, Tuple, Union

from .board import Board, Side, Tile
from .config import GameConfig
from .game_core import is_game_over, tilt as tilt_board


# 行为定义：0=上, 1=右, 2=下, 3=左
ACTIONS: Tuple[Side, Side, Side, Side] = (Side.NORTH, Side.EAST, Side.SOUTH, Side.WEST)
ACTION_NAMES: Dict[int, str] = {0: "UP", 1: "RIGHT", 2: "DOWN", 3: "LEFT"}

ChangeCallback = Callable[["Model"], None]


class Model:
    """
    一局 2048 的状态：
    - tilt(side) -> bool       倾斜并合并，返回棋盘是否变化
    - add_tile(tile) -> bool   放置方块（目标格必须为空）
    - clear() -> bool          清空棋盘与得分
    - game_over                每次读取时由棋盘重新推导
    - subscribe(callback)      棋盘变化时回调 callback(model)
    """

    def __init__(self, size: int = 4, config: Optional[GameConfig] = None):
        self.config = config or GameConfig(size=size)
        self.board = Board(self.config.size)
        self.rng = random.Random(self.config.seed)
        self._score = 0
        self._max_score = 0
        self._listeners: List[ChangeCallback] = []

    @classmethod
    def from_values(
        cls,
        rows: Sequence[Sequence[int]],
        score: int = 0,
        max_score: int = 0,
        config: Optional[GameConfig] = None,
    ) -> "Model":
        board = Board.from_rows(rows)
        if config is None:
            config = GameConfig(size=board.size)
        elif config.size != board.size:
            raise ValueError(f"config.size={config.size} does not match a {board.size}x{board.size} snapshot")
        if score < 0 or max_score < 0:
            raise ValueError("score and max_score must be non-negative")
        model = cls(config=config)
        model.board = board
        model._score = score
        model._max_score = max_score
        return model

    # ---- 查询 ----
    @property
    def size(self) -> int:
        return self.board.size

    @property
    def score(self) -> int:
        return self._score

    @property
    def max_score(self) -> int:
        return self._max_score

    @property
    def game_over(self) -> bool:
        over = is_game_over(self.board, self.config.max_piece)
        if over:
            self._max_score = max(self._score, self._max_score)
        return over

    def tile(self, col: int, row: int) -> Optional[Tile]:
        return self.board.get(col, row)

    def get_state(self) -> List[List[int]]:
        return self.board.rows()

    def max_tile(self) -> int:
        return int(self.board.values().max())

    # ---- 变化通知 ----
    def subscribe(self, callback: ChangeCallback) -> None:
        self._listeners.append(callback)

    def unsubscribe(self, callback: ChangeCallback) -> None:
        self._listeners.remove(callback)

    def _notify(self) -> None:
        for callback in list(self._listeners):
            callback(self)

    # ---- 修改 ----
    def clear(self) -> bool:
        self._score = 0
        self.board.clear()
        self._notify()
        return True

    def add_tile(self, tile: Tile) -> bool:
        self.board.add_tile(tile)
        self._notify()
        return True

    def add_random_tile(self, rng: Optional[random.Random] = None) -> Optional[Tile]:
        rng = rng or self.rng
        empties = [(c, r) for r in range(self.size) for c in range(self.size) if self.board.get(c, r) is None]
        if not empties:
            return None
        c, r = rng.choice(empties)
        value = 4 if rng.random() < self.config.four_probability else 2
        tile = Tile(value, c, r)
        self.add_tile(tile)
        return tile

    def tilt(self, side: Union[Side, int, str]) -> bool:
        changed, reward = tilt_board(self.board, side)
        self._score += reward
        if changed:
            self._notify()
        return changed

    def legal_moves(self) -> List[Side]:
        # 在副本上试走，返回会产生变化的方向
        legal = []
        for side in ACTIONS:
            changed, _ = tilt_board(self.board.copy(), side)
            if changed:
                legal.append(side)
        return legal

    def step(self, side: Union[Side, int, str]) -> Tuple[List[List[int]], int, bool, Dict]:
        if self.game_over:
            return self.get_state(), 0, True, {}

        before = self._score
        moved = self.tilt(side)
        if moved:
            self.add_random_tile()
        reward = self._score - before
        return self.get_state(), reward, self.game_over, {"score": self._score}

    def reset(self) -> List[List[int]]:
        self.clear()
        self.add_random_tile()
        self.add_random_tile()
        return self.get_state()

    # ---- 调试输出 ----
    def __str__(self) -> str:
        over = "over" if self.game_over else "not over"
        lines = ["", "["]
        for row in self.get_state():
            lines.append("".join("|    " if v == 0 else f"|{v:4d}" for v in row) + "|")
        lines.append(f"] {self._score} (max: {self._max_score}) (game is {over}) ")
        return "\n".join(lines) + "\n"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Model):
            return NotImplemented
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(str(self))
