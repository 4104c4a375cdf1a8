from dataclasses import dataclass
from typing import Optional

from .game_core import MAX_PIECE


@dataclass
class GameConfig:
    size: int = 4
    max_piece: int = MAX_PIECE
    four_probability: float = 0.1  # 新方块为 4 的概率，否则为 2
    seed: Optional[int] = None

    def __post_init__(self):
        if self.size < 1:
            raise ValueError(f"size must be >= 1, got {self.size}")
        if self.max_piece < 2 or self.max_piece & (self.max_piece - 1):
            raise ValueError(f"max_piece must be a power of two >= 2, got {self.max_piece}")
        if not 0.0 <= self.four_probability <= 1.0:
            raise ValueError(f"four_probability must be within [0, 1], got {self.four_probability}")
