"""
Coinblast core Python package.

This package contains the grid/turn resolution engine of the coin-and-bomb
sliding puzzle, kept free of any presentation concerns so it can be driven by
the CLI, the Flask host or tests alike.
Modules:
- coords.py: Direction, Coordinate
- tile.py: Coin, Wall, Bomb and their combination rules
- board.py: Board (occupied cells + free-set)
- moves.py: effects and move validation
- turn.py: TurnController, Score, notifications
- config.py: GameConfig
"""
