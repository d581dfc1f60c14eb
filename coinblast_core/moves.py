from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple, Union

from .coords import Coordinate, Direction
from .tile import Explode, MergeInto, Tile

if TYPE_CHECKING:
    from .board import Board


@dataclass(frozen=True)
class Move:
    source: Coordinate
    target: Coordinate


@dataclass(frozen=True)
class Merge:
    source: Coordinate
    target: Coordinate
    resulting_tile: Optional[Tile]


@dataclass(frozen=True)
class Explosion:
    center: Coordinate


Effect = Union[Move, Merge, Explosion]


@dataclass(frozen=True)
class MoveOutcome:
    """Result of validating a move. Invalid outcomes carry no effects."""
    valid: bool
    effects: Tuple[Effect, ...] = ()

    @classmethod
    def with_effects(cls, effects: Sequence[Effect]) -> 'MoveOutcome':
        return cls(valid=True, effects=tuple(effects))


INVALID_MOVE = MoveOutcome(valid=False)


def _resolved(walked: List[Effect]) -> MoveOutcome:
    # Effects are collected from the source outward; the one nearest the
    # resolution point must be applied first.
    return MoveOutcome.with_effects(list(reversed(walked)))


def validate(board: 'Board', source: Coordinate, direction: Direction) -> MoveOutcome:
    """
    Resolves a swipe of the tile at ``source`` toward ``direction``.

    The walk pushes every movable tile in line. It resolves on the first tile
    that either faces an empty cell (the whole chain slides one step) or
    combines with the tile ahead of it (merge, or a pair of explosions for two
    bombs). Reaching a wall, an immovable tile, the edge of the board extent
    or an empty source makes the move invalid. The board is only read.
    """
    walked: List[Effect] = []
    for coord in source.candidates_toward(direction, board.size):
        tile = board.get(coord)
        if tile is None or not tile.is_movable():
            break
        target = coord.after_move(direction)
        if not board.in_extent(target):
            return INVALID_MOVE
        ahead = board.get(target)
        if ahead is None:
            walked.append(Move(coord, target))
            return _resolved(walked)
        outcome = tile.combine_with(ahead)
        if isinstance(outcome, MergeInto):
            walked.append(Merge(coord, target, outcome.tile))
            return _resolved(walked)
        if isinstance(outcome, Explode):
            walked.append(Explosion(target))
            walked.append(Explosion(coord))
            return _resolved(walked)
        if not ahead.is_movable():
            return INVALID_MOVE
        # Provisional: only holds if the tile ahead can move too.
        walked.append(Move(coord, target))
    return INVALID_MOVE


def legal_moves(board: 'Board') -> List[Tuple[Coordinate, Direction]]:
    """Lists every (coordinate, direction) pair that validates on ``board``."""
    out: List[Tuple[Coordinate, Direction]] = []
    for coord, _ in sorted(board.tiles(), key=lambda item: (item[0].y, item[0].x)):
        for direction in Direction:
            if validate(board, coord, direction).valid:
                out.append((coord, direction))
    return out
