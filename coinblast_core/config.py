from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Mapping, Optional, Tuple

from .board import GRID_SIZE, MIN_GRID_SIZE
from .tile import BOMB_POINTS, SPAWN_WEIGHTS, Bomb, Tile, tile_from_symbol, tile_symbol

STALL_RESPAWN = 'respawn'
STALL_GAME_OVER = 'game_over'
STALL_POLICIES = (STALL_RESPAWN, STALL_GAME_OVER)


@dataclass(frozen=True)
class GameConfig:
    """Tunable game constants supplied by the host."""
    grid_size: int = GRID_SIZE
    spawn_weights: Tuple[Tuple[Tile, int], ...] = SPAWN_WEIGHTS
    bomb_points: int = BOMB_POINTS
    # What to do when no move exists but free cells remain.
    stall_policy: str = STALL_RESPAWN
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.grid_size < MIN_GRID_SIZE:
            raise ValueError(f'grid_size must be at least {MIN_GRID_SIZE}, got {self.grid_size!r}')
        if self.bomb_points < 0:
            raise ValueError(f'bomb_points must not be negative, got {self.bomb_points!r}')
        if self.stall_policy not in STALL_POLICIES:
            raise ValueError(f'Unknown stall policy: {self.stall_policy!r}')
        if not self.spawn_weights:
            raise ValueError('spawn_weights must not be empty')
        if any(int(w) <= 0 for _, w in self.spawn_weights):
            raise ValueError('spawn weights must be positive')

    def spawn_table(self) -> Tuple[Tuple[Tile, int], ...]:
        """Spawn weights with bombs carrying the configured yield."""
        return tuple(
            (Bomb(self.bomb_points) if isinstance(t, Bomb) else t, w)
            for t, w in self.spawn_weights
        )

    def with_overrides(self, **changes) -> 'GameConfig':
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'GameConfig':
        """Reads COINBLAST_* variables, falling back to defaults."""
        env = os.environ if environ is None else environ
        kwargs = {}
        try:
            if env.get('COINBLAST_GRID_SIZE'):
                kwargs['grid_size'] = int(env['COINBLAST_GRID_SIZE'])
            if env.get('COINBLAST_BOMB_POINTS'):
                kwargs['bomb_points'] = int(env['COINBLAST_BOMB_POINTS'])
            if env.get('COINBLAST_SEED'):
                kwargs['seed'] = int(env['COINBLAST_SEED'])
        except ValueError as exc:
            raise ValueError(f'Invalid COINBLAST_* integer setting: {exc}') from exc
        if env.get('COINBLAST_STALL_POLICY'):
            kwargs['stall_policy'] = env['COINBLAST_STALL_POLICY'].strip().lower()
        if env.get('COINBLAST_SPAWN_WEIGHTS'):
            kwargs['spawn_weights'] = parse_spawn_weights(env['COINBLAST_SPAWN_WEIGHTS'])
        return cls(**kwargs)


def parse_spawn_weights(text: str) -> Tuple[Tuple[Tile, int], ...]:
    """Parses ``"1:45,2:20,B:30,W:5"`` into a spawn table."""
    out = []
    for part in text.split(','):
        part = part.strip()
        if not part:
            continue
        try:
            sym, weight = part.split(':')
            tile = tile_from_symbol(sym)
            n = int(weight)
        except ValueError:
            raise ValueError(f'Invalid spawn weight entry: {part!r}') from None
        if tile is None:
            raise ValueError(f'Spawn weight entry needs a tile: {part!r}')
        out.append((tile, n))
    return tuple(out)


def format_spawn_weights(weights) -> str:
    return ','.join(f'{tile_symbol(t)}:{w}' for t, w in weights)
