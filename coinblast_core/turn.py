from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Deque, List, Optional, Union

from .board import Board, BoardInvariantError
from .config import STALL_RESPAWN, GameConfig
from .coords import Coordinate, Direction
from .moves import Effect, Explosion, Merge, Move, validate
from .tile import Coin, Tile, Wall, random_tile

logger = logging.getLogger(__name__)


class TurnPhase(Enum):
    AWAITING_INPUT = 'awaiting_input'
    RESOLVING_MOVE = 'resolving_move'
    SPAWNING = 'spawning'
    CHECKING_TERMINAL = 'checking_terminal'
    GAME_OVER = 'game_over'


class Score:
    """Monotonically increasing score of the current session."""

    def __init__(self) -> None:
        self._value = 0

    def add(self, points: int) -> None:
        if points < 0:
            raise ValueError(f'Score can only grow, got {points!r}')
        self._value += points

    def reset(self) -> None:
        self._value = 0

    @property
    def value(self) -> int:
        return self._value


# Inbound events

@dataclass(frozen=True)
class RequestMove:
    origin: Coordinate
    direction: Direction


@dataclass(frozen=True)
class TileCoordinateAssigned:
    coordinate: Coordinate
    tile: Tile


# Outbound notifications

@dataclass(frozen=True)
class TileMoved:
    source: Coordinate
    target: Coordinate


@dataclass(frozen=True)
class TilesMerged:
    source: Coordinate
    target: Coordinate
    resulting_tile: Optional[Tile]


@dataclass(frozen=True)
class TileExploded:
    center: Coordinate


@dataclass(frozen=True)
class TileSpawned:
    coordinate: Coordinate
    tile: Tile


@dataclass(frozen=True)
class TurnCompleted:
    score: int


@dataclass(frozen=True)
class GameOver:
    final_score: int


Notification = Union[TileMoved, TilesMerged, TileExploded, TileSpawned, TurnCompleted, GameOver]
Listener = Callable[[Notification], None]


def notification_for(effect: Effect) -> Notification:
    if isinstance(effect, Move):
        return TileMoved(effect.source, effect.target)
    if isinstance(effect, Merge):
        return TilesMerged(effect.source, effect.target, effect.resulting_tile)
    if isinstance(effect, Explosion):
        return TileExploded(effect.center)
    raise TypeError(f'Unknown effect: {effect!r}')


class TurnController:
    """
    Owns the board and the score and runs one full turn per accepted move:
    validate, apply, spawn, terminal check. Notifications raised during a step
    are queued, then handed to subscribed listeners in order and returned to
    the caller once the step is complete.
    """

    def __init__(self, config: Optional[GameConfig] = None, rng: Optional[random.Random] = None) -> None:
        self.config = config or GameConfig()
        self._rng = rng if rng is not None else random.Random(self.config.seed)
        self.board = Board(self.config.grid_size, rng=self._rng)
        self.score = Score()
        self.phase = TurnPhase.AWAITING_INPUT
        self.games_played = 0
        self.last_notifications: List[Notification] = []
        self._listeners: List[Listener] = []
        self._outbox: Deque[Notification] = deque()
        self._start_session()
        self._flush()

    # ---- listeners

    def subscribe(self, listener: Listener) -> None:
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        self._listeners.remove(listener)

    def _emit(self, notification: Notification) -> None:
        self._outbox.append(notification)

    def _flush(self) -> List[Notification]:
        out: List[Notification] = list(self._outbox)
        self._outbox.clear()
        # The turn is over once drained; a failing listener must not carry
        # this turn's notifications into the next one.
        self.last_notifications = out
        for note in out:
            for listener in list(self._listeners):
                listener(note)
        return out

    # ---- inbound

    def dispatch(self, event: Union[RequestMove, TileCoordinateAssigned]) -> List[Notification]:
        if isinstance(event, RequestMove):
            return self.request_move(event.origin, event.direction)
        if isinstance(event, TileCoordinateAssigned):
            self.assign_tile(event.coordinate, event.tile)
            return []
        raise TypeError(f'Unknown event: {event!r}')

    def assign_tile(self, coordinate: Coordinate, tile: Tile) -> Optional[Tile]:
        """
        Registers a tile placed outside the spawn path (layout construction).
        Only walls may sit on the ring; nothing may sit beyond it.
        """
        if not self.board.in_extent(coordinate):
            raise ValueError(f'{coordinate} is outside the board')
        if not self.board.is_interior(coordinate) and not isinstance(tile, Wall):
            raise ValueError(f'Only walls may be placed on the ring, got {tile!r} at {coordinate}')
        return self.board.insert(coordinate, tile)

    def request_move(self, origin: Coordinate, direction: Direction) -> List[Notification]:
        """Runs one turn. Returns its notifications; empty when the move is illegal."""
        if self.phase is not TurnPhase.AWAITING_INPUT:
            raise RuntimeError(f'Move requested while {self.phase.value}')
        self.phase = TurnPhase.RESOLVING_MOVE
        outcome = validate(self.board, origin, direction)
        if not outcome.valid:
            logger.debug('Rejected move %s %s', origin, direction.name)
            self.phase = TurnPhase.AWAITING_INPUT
            self.last_notifications = []
            return []

        try:
            destroyed = self.board.apply(outcome.effects)
        except BoardInvariantError:
            self._outbox.clear()
            self.phase = TurnPhase.AWAITING_INPUT
            raise
        for effect in outcome.effects:
            self._emit(notification_for(effect))
        points = sum(tile.explosion_yield() or 0 for _, tile in destroyed)
        if points:
            self.score.add(points)

        terminal = self._spawn_until_playable()
        self._emit(TurnCompleted(self.score.value))
        if terminal:
            self._game_over()
        else:
            self.phase = TurnPhase.AWAITING_INPUT
        return self._flush()

    # ---- lifecycle

    def _spawn_until_playable(self) -> bool:
        """Spawns, then rechecks while stalled. Returns True when the game is over."""
        while True:
            self.phase = TurnPhase.SPAWNING
            if self.board.has_free_coordinate():
                self._spawn(random_tile(self._rng, self.config.spawn_table()))
            self.phase = TurnPhase.CHECKING_TERMINAL
            if self.board.any_legal_move_exists():
                return False
            if self.config.stall_policy != STALL_RESPAWN or not self.board.has_free_coordinate():
                return True
            logger.debug('No legal move left with free cells, forcing another spawn')

    def _spawn(self, tile: Tile) -> Coordinate:
        coord = self.board.spawn(tile)
        self._emit(TileSpawned(coord, tile))
        return coord

    def _game_over(self) -> None:
        self.phase = TurnPhase.GAME_OVER
        final = self.score.value
        self._emit(GameOver(final))
        self.games_played += 1
        logger.info('Game over with score %d after %d game(s)', final, self.games_played)
        self._start_session()

    def _start_session(self) -> None:
        self.board.reset()
        self.board.build_wall_ring()
        self.score.reset()
        self._spawn(Coin(1))
        self.phase = TurnPhase.AWAITING_INPUT
        logger.info('New %dx%d session started', self.board.size, self.board.size)

    def new_game(self) -> List[Notification]:
        """Abandons the current session and starts a fresh one."""
        self._start_session()
        return self._flush()
