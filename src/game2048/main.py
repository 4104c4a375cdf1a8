import argparse
from typing import List, Optional

import numpy as np
from tqdm import trange

from .api import ACTION_NAMES, Model
from .board import Side
from .config import GameConfig
from .game_core import MAX_PIECE


def parse_moves(text: str) -> List[Side]:
    # 支持 "NNESW" / "URDL" 或逗号分隔的 "up,left,north"
    text = text.strip()
    if not text:
        return []
    if "," in text:
        tokens = [t.strip() for t in text.split(",") if t.strip()]
    else:
        tokens = [ch for ch in text if not ch.isspace()]
    return [Side.parse(t) for t in tokens]


def play_cycle(model: Model, moves: List[Side], max_steps: int = 100_000) -> int:
    """
    循环执行 moves 直到游戏结束，或连续一整轮方向都没有改变棋盘。
    返回实际生效的步数。
    """
    steps = 0
    idle = 0
    i = 0
    while moves and not model.game_over and idle < len(moves) and i < max_steps:
        side = moves[i % len(moves)]
        i += 1
        if model.tilt(side):
            model.add_random_tile()
            steps += 1
            idle = 0
        else:
            idle += 1
    return steps


def run_single(config: GameConfig, moves: List[Side]) -> Model:
    model = Model(config=config)
    model.reset()
    print(model)
    for side in moves:
        if model.game_over:
            break
        changed = model.tilt(side)
        if changed:
            model.add_random_tile()
        print(f"{ACTION_NAMES[side]}: {'moved' if changed else 'no change'}")
        print(model)
    return model


def run_batch(config: GameConfig, moves: List[Side], games: int) -> List[int]:
    scores: List[int] = []
    max_tiles: List[int] = []
    finished = 0
    for g in trange(games, desc="Simulating"):
        seed = None if config.seed is None else config.seed + g
        model = Model(config=GameConfig(
            size=config.size,
            max_piece=config.max_piece,
            four_probability=config.four_probability,
            seed=seed,
        ))
        model.reset()
        play_cycle(model, moves)
        if model.game_over:
            finished += 1
        scores.append(model.score)
        max_tiles.append(model.max_tile())

    print(f"Games: {games} ({finished} over), mean score: {np.mean(scores):.1f}, best score: {max(scores)}")
    values, counts = np.unique(max_tiles, return_counts=True)
    for v, n in zip(values.tolist(), counts.tolist()):
        print(f"  max tile {v:>5d}: {n}")
    return scores


def main(argv: Optional[List[str]] = None):
    parser = argparse.ArgumentParser(description="2048 rules engine driver")
    parser.add_argument("--size", type=int, default=4)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--max-piece", type=int, default=MAX_PIECE)
    parser.add_argument("--four-probability", type=float, default=0.1)
    parser.add_argument("--moves", type=str, default="", help="方向序列，如 NESW、URDL 或 up,left")
    parser.add_argument("--games", type=int, default=0, help=">0 时批量模拟：循环执行 --moves 直到结束")
    args = parser.parse_args(argv)

    try:
        config = GameConfig(
            size=args.size,
            max_piece=args.max_piece,
            four_probability=args.four_probability,
            seed=args.seed,
        )
        moves = parse_moves(args.moves)
    except ValueError as exc:
        parser.error(str(exc))

    if args.games > 0:
        if not moves:
            parser.error("--games requires --moves")
        run_batch(config, moves, args.games)
    else:
        run_single(config, moves)


if __name__ == "__main__":
    main()
