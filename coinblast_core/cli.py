from __future__ import annotations

import argparse
import logging
from typing import List, Optional, Tuple

from .config import STALL_POLICIES, GameConfig, format_spawn_weights
from .coords import Coordinate, Direction
from .tile import tile_symbol
from .turn import (
    GameOver,
    Notification,
    TileExploded,
    TileMoved,
    TileSpawned,
    TilesMerged,
    TurnCompleted,
    TurnController,
)

logger = logging.getLogger(__name__)

LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR')


def parse_move(text: str) -> Tuple[Coordinate, Direction]:
    """Parses 'x y dir' or 'x,y,dir' into a move request."""
    sep = ',' if ',' in text else None
    parts = [t.strip() for t in text.split(sep) if t.strip() != '']
    if len(parts) != 3:
        raise ValueError(f'Expected "x y direction", got {text!r}')
    x_s, y_s, d_s = parts
    return Coordinate(int(x_s), int(y_s)), Direction.parse(d_s)


def describe(note: Notification) -> str:
    if isinstance(note, TileMoved):
        return f'moved ({note.source.x},{note.source.y}) -> ({note.target.x},{note.target.y})'
    if isinstance(note, TilesMerged):
        return (f'merged ({note.source.x},{note.source.y}) into ({note.target.x},{note.target.y})'
                f' = {tile_symbol(note.resulting_tile)}')
    if isinstance(note, TileExploded):
        return f'explosion at ({note.center.x},{note.center.y})'
    if isinstance(note, TileSpawned):
        return f'spawned {tile_symbol(note.tile)} at ({note.coordinate.x},{note.coordinate.y})'
    if isinstance(note, TurnCompleted):
        return f'turn completed, score {note.score}'
    if isinstance(note, GameOver):
        return f'GAME OVER, final score {note.final_score}'
    return repr(note)


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description='Coinblast: slide coins, merge them, pair bombs to blast')
    parser.add_argument('--size', type=int, default=None, help='Playable grid size (NxN)')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for spawns')
    parser.add_argument('--stall-policy', choices=STALL_POLICIES, default=None,
                        help='What happens when no move exists but cells are free')
    parser.add_argument('--bomb-points', type=int, default=None, help='Points scored per detonated bomb')
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS, default='WARNING',
                        help='Logging level')
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format='%(levelname)s %(name)s: %(message)s')

    config = GameConfig.from_env().with_overrides(
        grid_size=args.size,
        seed=args.seed,
        stall_policy=args.stall_policy,
        bomb_points=args.bomb_points,
    )
    logger.info('Config: size=%d weights=%s stall=%s', config.grid_size,
                format_spawn_weights(config.spawn_table()), config.stall_policy)
    controller = TurnController(config)
    print('Initial board:')
    print(controller.board.pretty())

    while True:
        try:
            text = input('Move as "x y dir" (q to quit): ').strip()
        except EOFError:
            break
        if text.lower() in ('q', 'quit', 'exit'):
            break
        try:
            origin, direction = parse_move(text)
        except ValueError:
            print('Could not parse. Try again.')
            continue
        notes = controller.request_move(origin, direction)
        if not notes:
            print('Illegal move. Try again.')
            continue
        for note in notes:
            print(describe(note))
        print(controller.board.pretty())
        print('Score:', controller.score.value)

    print(f'Final score: {controller.score.value}')


if __name__ == '__main__':
    main()
