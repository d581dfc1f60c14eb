from __future__ import annotations

# Facade module that re-exports the Coinblast engine.
# Kept so the Flask app, the CLI and the tests share one import surface.
# Single-responsibility modules live under coinblast_core/*.

from coinblast_core.coords import Coordinate, Direction
from coinblast_core.tile import (
    BOMB_POINTS,
    SPAWN_WEIGHTS,
    Bomb,
    Coin,
    Explode,
    MergeInto,
    Tile,
    Wall,
    random_tile,
    tile_from_symbol,
    tile_symbol,
)
from coinblast_core.board import Board, BoardFullError, BoardInvariantError, GRID_SIZE
from coinblast_core.moves import (
    INVALID_MOVE,
    Effect,
    Explosion,
    Merge,
    Move,
    MoveOutcome,
    legal_moves,
    validate,
)
from coinblast_core.config import (
    STALL_GAME_OVER,
    STALL_RESPAWN,
    GameConfig,
    parse_spawn_weights,
)
from coinblast_core.turn import (
    GameOver,
    Notification,
    RequestMove,
    Score,
    TileCoordinateAssigned,
    TileExploded,
    TileMoved,
    TileSpawned,
    TilesMerged,
    TurnCompleted,
    TurnController,
    TurnPhase,
)


def new_controller(size: int | None = None, seed: int | None = None) -> TurnController:
    """Builds a controller from the environment config with optional overrides."""
    config = GameConfig.from_env().with_overrides(grid_size=size, seed=seed)
    return TurnController(config)


def main() -> None:
    # CLI driver delegated to coinblast_core.cli
    from coinblast_core.cli import main as _main
    _main()


if __name__ == '__main__':
    main()
