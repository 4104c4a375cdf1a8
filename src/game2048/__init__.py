"""2048 rules engine: tilt/merge, game-over detection and a thin game model."""

from .board import Board, Side, Tile, to_logical, to_physical
from .game_core import (
    MAX_PIECE,
    at_least_one_move_exists,
    empty_space_exists,
    is_game_over,
    max_tile_exists,
    tilt,
    tilt_column,
)
from .config import GameConfig
from .api import ACTIONS, ACTION_NAMES, Model

__all__ = [
    "Board",
    "Side",
    "Tile",
    "to_logical",
    "to_physical",
    "MAX_PIECE",
    "at_least_one_move_exists",
    "empty_space_exists",
    "is_game_over",
    "max_tile_exists",
    "tilt",
    "tilt_column",
    "GameConfig",
    "ACTIONS",
    "ACTION_NAMES",
    "Model",
]
