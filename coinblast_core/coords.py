from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import List


class Direction(Enum):
    """The four swipe directions. ``Up`` increases ``y``."""
    UP = (0, 1)
    DOWN = (0, -1)
    LEFT = (-1, 0)
    RIGHT = (1, 0)

    @property
    def dx(self) -> int:
        return self.value[0]

    @property
    def dy(self) -> int:
        return self.value[1]

    @classmethod
    def parse(cls, text: str) -> 'Direction':
        """Parses a direction name ('up', 'Left', 'R', ...)."""
        key = str(text).strip().upper()
        for d in cls:
            if d.name == key or d.name[0] == key:
                return d
        raise ValueError(f'Unknown direction: {text!r}')


@dataclass(frozen=True)
class Coordinate:
    """An integer grid position. Used as a mapping key only."""
    x: int
    y: int

    def after_move(self, direction: Direction) -> 'Coordinate':
        """Translates by exactly one cell along the direction's axis."""
        return Coordinate(self.x + direction.dx, self.y + direction.dy)

    def explosion_radius(self) -> List['Coordinate']:
        """The coordinate itself plus its four orthogonal neighbors."""
        return [
            self,
            self.after_move(Direction.UP),
            self.after_move(Direction.DOWN),
            self.after_move(Direction.LEFT),
            self.after_move(Direction.RIGHT),
        ]

    def candidates_toward(self, direction: Direction, bound: int) -> List['Coordinate']:
        """
        Lists the coordinates from self toward the edge of a ``bound`` x ``bound``
        interior, ending on the wall-ring cell just past the last interior cell.
        Self is always the first element.
        """
        if direction is Direction.RIGHT:
            return [Coordinate(x, self.y) for x in range(self.x, max(self.x, bound) + 1)]
        if direction is Direction.LEFT:
            return [Coordinate(x, self.y) for x in range(self.x, min(self.x, -1) - 1, -1)]
        if direction is Direction.UP:
            return [Coordinate(self.x, y) for y in range(self.y, max(self.y, bound) + 1)]
        return [Coordinate(self.x, y) for y in range(self.y, min(self.y, -1) - 1, -1)]
