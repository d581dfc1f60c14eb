from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

COIN_VALUES = (1, 2, 4, 8)
MAX_COIN_VALUE = 8
BOMB_POINTS = 10  # placeholder yield of a detonated bomb


@dataclass(frozen=True)
class Coin:
    """A movable coin carrying a power-of-two value."""
    value: int

    def __post_init__(self) -> None:
        if self.value not in COIN_VALUES:
            raise ValueError(f'Invalid coin value: {self.value!r}')

    def is_movable(self) -> bool:
        return True

    def combine_with(self, other: 'Tile') -> Optional['CombinationOutcome']:
        if isinstance(other, Coin) and other.value == self.value and self.value < MAX_COIN_VALUE:
            return MergeInto(Coin(self.value * 2))
        return None

    def explosion_yield(self) -> Optional[int]:
        return self.value


@dataclass(frozen=True)
class Wall:
    """Immovable, never combines and survives explosions."""

    def is_movable(self) -> bool:
        return False

    def combine_with(self, other: 'Tile') -> Optional['CombinationOutcome']:
        return None

    def explosion_yield(self) -> Optional[int]:
        return None


@dataclass(frozen=True)
class Bomb:
    """Movable; two bombs pushed together detonate."""
    points: int = BOMB_POINTS

    def is_movable(self) -> bool:
        return True

    def combine_with(self, other: 'Tile') -> Optional['CombinationOutcome']:
        if isinstance(other, Bomb):
            return Explode()
        return None

    def explosion_yield(self) -> Optional[int]:
        return self.points


Tile = Union[Coin, Wall, Bomb]


@dataclass(frozen=True)
class MergeInto:
    tile: Tile


@dataclass(frozen=True)
class Explode:
    pass


CombinationOutcome = Union[MergeInto, Explode]

SpawnWeights = Sequence[Tuple[Tile, int]]

# 45% one-coin, 20% two-coin, 30% bomb, 5% wall
SPAWN_WEIGHTS: Tuple[Tuple[Tile, int], ...] = (
    (Coin(1), 45),
    (Coin(2), 20),
    (Bomb(), 30),
    (Wall(), 5),
)


def random_tile(rng: random.Random, weights: SpawnWeights = SPAWN_WEIGHTS) -> Tile:
    """Draws a tile from a weighted table. Deterministic for a seeded ``rng``."""
    if not weights:
        raise ValueError('Spawn weights must not be empty')
    tiles = [t for t, _ in weights]
    w = [int(n) for _, n in weights]
    return rng.choices(tiles, weights=w, k=1)[0]


def tile_symbol(tile: Optional[Tile]) -> str:
    """One-character symbol used by text dumps and the JSON host."""
    if tile is None:
        return '.'
    if isinstance(tile, Coin):
        return str(tile.value)
    if isinstance(tile, Bomb):
        return 'B'
    return '#'


def tile_from_symbol(symbol: str, bomb_points: int = BOMB_POINTS) -> Optional[Tile]:
    """Inverse of ``tile_symbol``. Accepts 'W' as an alias for a wall."""
    s = str(symbol).strip().upper()
    if s == '.':
        return None
    if s == 'B':
        return Bomb(bomb_points)
    if s in ('#', 'W'):
        return Wall()
    try:
        return Coin(int(s))
    except ValueError:
        raise ValueError(f'Unknown tile symbol: {symbol!r}') from None
