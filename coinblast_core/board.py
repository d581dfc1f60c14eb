from __future__ import annotations

import logging
import random
from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .coords import Coordinate, Direction
from .moves import Effect, Explosion, Merge, Move, validate
from .tile import Tile, Wall, tile_symbol

logger = logging.getLogger(__name__)

GRID_SIZE = 4
MIN_GRID_SIZE = 2


class BoardInvariantError(RuntimeError):
    """The board was driven in a way correct callers never do."""


class BoardFullError(BoardInvariantError):
    """A spawn was requested while no free coordinate exists."""


class Board:
    """
    Authoritative mapping from coordinate to tile for a ``size`` x ``size``
    interior surrounded by a one-cell wall ring (coordinates -1 and ``size``).

    Alongside the occupied cells the board keeps the free-set: every interior
    coordinate without a tile. It is stored as a list plus a position index so
    that insert/remove are O(1) (swap-remove) and a random free cell can be
    picked without scanning.
    """

    def __init__(self, size: int = GRID_SIZE, rng: Optional[random.Random] = None) -> None:
        if size < MIN_GRID_SIZE:
            raise ValueError(f'Board size must be at least {MIN_GRID_SIZE}, got {size!r}')
        self.size = size
        self._rng = rng if rng is not None else random.Random()
        self._tiles: Dict[Coordinate, Tile] = {}
        self._free: List[Coordinate] = []
        self._free_pos: Dict[Coordinate, int] = {}
        self.reset()

    def reset(self) -> None:
        """Empties the board; every interior coordinate becomes free again."""
        self._tiles = {}
        self._free = list(self.interior_coords())
        self._free_pos = {c: i for i, c in enumerate(self._free)}

    # ---- geometry

    def is_interior(self, coord: Coordinate) -> bool:
        return 0 <= coord.x < self.size and 0 <= coord.y < self.size

    def in_extent(self, coord: Coordinate) -> bool:
        """True for interior and wall-ring coordinates."""
        return -1 <= coord.x <= self.size and -1 <= coord.y <= self.size

    def interior_coords(self) -> Iterator[Coordinate]:
        for y in range(self.size):
            for x in range(self.size):
                yield Coordinate(x, y)

    def coords(self) -> Iterator[Coordinate]:
        """Iterates over the full extent, wall ring included."""
        for y in range(-1, self.size + 1):
            for x in range(-1, self.size + 1):
                yield Coordinate(x, y)

    def ring_coords(self) -> Iterator[Coordinate]:
        return (c for c in self.coords() if not self.is_interior(c))

    def build_wall_ring(self) -> None:
        for coord in self.ring_coords():
            self.insert(coord, Wall())

    # ---- cell access

    def get(self, coord: Coordinate) -> Optional[Tile]:
        return self._tiles.get(coord)

    def insert(self, coord: Coordinate, tile: Tile) -> Optional[Tile]:
        """Places a tile and returns the previous occupant, if any."""
        previous = self._tiles.get(coord)
        self._tiles[coord] = tile
        self._take_free(coord)
        return previous

    def remove(self, coord: Coordinate) -> Optional[Tile]:
        """Removes and returns the tile at ``coord``; a no-op on an empty cell."""
        tile = self._tiles.pop(coord, None)
        if tile is not None:
            self._give_free(coord)
        return tile

    def tiles(self) -> List[Tuple[Coordinate, Tile]]:
        return list(self._tiles.items())

    # ---- free-set

    def _take_free(self, coord: Coordinate) -> None:
        idx = self._free_pos.pop(coord, None)
        if idx is None:
            return
        last = self._free.pop()
        if idx < len(self._free):
            self._free[idx] = last
            self._free_pos[last] = idx

    def _give_free(self, coord: Coordinate) -> None:
        if not self.is_interior(coord) or coord in self._free_pos:
            return
        self._free_pos[coord] = len(self._free)
        self._free.append(coord)

    def free_coordinate(self) -> Optional[Coordinate]:
        """Picks a random free coordinate without reserving it."""
        if not self._free:
            return None
        return self._rng.choice(self._free)

    def has_free_coordinate(self) -> bool:
        return bool(self._free)

    def free_coordinates(self) -> Set[Coordinate]:
        return set(self._free)

    def spawn(self, tile: Tile) -> Coordinate:
        """Inserts ``tile`` on a random free coordinate and returns it."""
        coord = self.free_coordinate()
        if coord is None:
            raise BoardFullError('Cannot spawn a tile: no free coordinate left')
        self.insert(coord, tile)
        logger.debug('Spawned %s at %s', tile, coord)
        return coord

    # ---- turn resolution

    def apply(self, effects: Iterable[Effect]) -> List[Tuple[Coordinate, Tile]]:
        """
        Applies a resolved effect batch in order and returns the tiles destroyed
        by explosions. The batch is all-or-nothing: if an effect breaks a board
        invariant, tiles and free-set are restored and the error propagates.
        """
        snapshot = (dict(self._tiles), list(self._free), dict(self._free_pos))
        try:
            return self._apply(effects)
        except BoardInvariantError:
            self._tiles, self._free, self._free_pos = snapshot
            raise

    def _apply(self, effects: Iterable[Effect]) -> List[Tuple[Coordinate, Tile]]:
        destroyed: List[Tuple[Coordinate, Tile]] = []
        blasted: Set[Coordinate] = set()
        for effect in effects:
            if isinstance(effect, Move):
                tile = self._tiles.get(effect.source)
                if tile is None:
                    # The pushing tile was caught in an earlier blast of this batch.
                    if effect.source in blasted:
                        continue
                    raise BoardInvariantError(f'No tile to move at {effect.source}')
                if not tile.is_movable():
                    raise BoardInvariantError(f'Tile at {effect.source} is immovable')
                if effect.target in self._tiles:
                    raise BoardInvariantError(f'Move target {effect.target} is occupied')
                self.remove(effect.source)
                self.insert(effect.target, tile)
            elif isinstance(effect, Merge):
                for coord in (effect.source, effect.target):
                    tile = self._tiles.get(coord)
                    if tile is None or not tile.is_movable():
                        raise BoardInvariantError(f'Cannot merge tile at {coord}')
                self.remove(effect.source)
                self.remove(effect.target)
                if effect.resulting_tile is not None:
                    self.insert(effect.target, effect.resulting_tile)
            elif isinstance(effect, Explosion):
                for coord in effect.center.explosion_radius():
                    tile = self._tiles.get(coord)
                    if tile is None or tile.explosion_yield() is None:
                        continue
                    self.remove(coord)
                    blasted.add(coord)
                    destroyed.append((coord, tile))
            else:
                raise BoardInvariantError(f'Unknown effect: {effect!r}')
        return destroyed

    def any_legal_move_exists(self) -> bool:
        """True as soon as one occupied cell validates in some direction."""
        for coord in self.coords():
            if coord not in self._tiles:
                continue
            for direction in Direction:
                if validate(self, coord, direction).valid:
                    return True
        return False

    def pretty(self) -> str:
        """Generates a text dump of the board, highest row first."""
        lines: List[str] = []
        for y in range(self.size, -2, -1):
            row = [tile_symbol(self._tiles.get(Coordinate(x, y))) for x in range(-1, self.size + 1)]
            lines.append(' '.join(row))
        return '\n'.join(lines)
