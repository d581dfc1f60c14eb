from __future__ import annotations

import logging
import os
import threading
import uuid
from collections import OrderedDict
from typing import Any, Dict, List, Optional, Tuple

from flask import Flask, jsonify, request

from game import (
    Board,
    Coordinate,
    Direction,
    GameOver,
    Notification,
    TileCoordinateAssigned,
    TileExploded,
    TileMoved,
    TileSpawned,
    TilesMerged,
    TurnCompleted,
    TurnController,
    legal_moves,
    new_controller,
    tile_from_symbol,
    tile_symbol,
)

logger = logging.getLogger(__name__)

app = Flask(__name__)

# Largest board a client may request.
MAX_GRID_SIZE = int(os.getenv("COINBLAST_MAX_GRID_SIZE", "10"))
# Oldest games are evicted once this many are live.
MAX_GAMES = int(os.getenv("COINBLAST_MAX_GAMES", "256"))

# Games are driven one request at a time: the lock makes each turn run to
# completion before another request touches any controller.
_GAMES: "OrderedDict[str, TurnController]" = OrderedDict()
_GAMES_LOCK = threading.Lock()


# ---------- JSON helpers ----------

def coord_to_json(c: Coordinate) -> Dict[str, int]:
    return {"x": int(c.x), "y": int(c.y)}


def board_to_json(b: Board) -> Dict[str, Any]:
    cells = [
        {"x": int(c.x), "y": int(c.y), "tile": tile_symbol(t)}
        for c, t in sorted(b.tiles(), key=lambda item: (item[0].y, item[0].x))
    ]
    return {"size": int(b.size), "cells": cells, "free": len(b.free_coordinates())}


def notification_to_json(n: Notification) -> Dict[str, Any]:
    if isinstance(n, TileMoved):
        return {"type": "moved", "source": coord_to_json(n.source), "target": coord_to_json(n.target)}
    if isinstance(n, TilesMerged):
        return {
            "type": "merged",
            "source": coord_to_json(n.source),
            "target": coord_to_json(n.target),
            "tile": tile_symbol(n.resulting_tile) if n.resulting_tile is not None else None,
        }
    if isinstance(n, TileExploded):
        return {"type": "exploded", "center": coord_to_json(n.center)}
    if isinstance(n, TileSpawned):
        return {"type": "spawned", "coordinate": coord_to_json(n.coordinate), "tile": tile_symbol(n.tile)}
    if isinstance(n, TurnCompleted):
        return {"type": "turnCompleted", "score": int(n.score)}
    if isinstance(n, GameOver):
        return {"type": "gameOver", "finalScore": int(n.final_score)}
    raise TypeError(f"Unknown notification: {n!r}")


def legal_moves_to_json(b: Board) -> List[Dict[str, Any]]:
    return [{"x": int(c.x), "y": int(c.y), "direction": d.name.lower()} for c, d in legal_moves(b)]


def game_to_json(game_id: str, ctrl: TurnController) -> Dict[str, Any]:
    return {
        "gameId": game_id,
        "board": board_to_json(ctrl.board),
        "score": int(ctrl.score.value),
        "phase": ctrl.phase.value,
        "gamesPlayed": int(ctrl.games_played),
    }


def _lookup(game_id: Optional[str]) -> Tuple[Optional[TurnController], Any]:
    ctrl = _GAMES.get(str(game_id)) if game_id else None
    if ctrl is None:
        return None, (jsonify({"ok": False, "error": f"unknown game: {game_id}"}), 404)
    return ctrl, None


# ---------- Game API ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        size = int(body["size"]) if body.get("size") is not None else None
        seed = int(body["seed"]) if body.get("seed") is not None else None
        if size is not None and size > MAX_GRID_SIZE:
            raise ValueError(f"size must be at most {MAX_GRID_SIZE}, got {size}")
        ctrl = new_controller(size, seed)
    except (TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad config: {e}"}), 400
    game_id = uuid.uuid4().hex
    with _GAMES_LOCK:
        _GAMES[game_id] = ctrl
        while len(_GAMES) > MAX_GAMES:
            evicted, _ = _GAMES.popitem(last=False)
            logger.info("Evicted game %s", evicted)
    logger.info("Created game %s (%dx%d)", game_id, ctrl.board.size, ctrl.board.size)
    return jsonify({
        "ok": True,
        "state": game_to_json(game_id, ctrl),
        "notifications": [notification_to_json(n) for n in ctrl.last_notifications],
        "legalMoves": legal_moves_to_json(ctrl.board),
    })


@app.post("/api/move")
def api_move() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        origin = Coordinate(int(body["x"]), int(body["y"]))
        direction = Direction.parse(str(body["direction"]))
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad move: {e}"}), 400
    with _GAMES_LOCK:
        ctrl, err = _lookup(body.get("gameId"))
        if err is not None:
            return err
        notes = ctrl.request_move(origin, direction)
        return jsonify({
            "ok": True,
            "valid": bool(notes),
            "state": game_to_json(str(body["gameId"]), ctrl),
            "notifications": [notification_to_json(n) for n in notes],
            "legalMoves": legal_moves_to_json(ctrl.board),
        })


@app.post("/api/assign")
def api_assign() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    try:
        coord = Coordinate(int(body["x"]), int(body["y"]))
        tile = tile_from_symbol(str(body["tile"]))
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad tile: {e}"}), 400
    if tile is None:
        return jsonify({"ok": False, "error": "tile required"}), 400
    with _GAMES_LOCK:
        ctrl, err = _lookup(body.get("gameId"))
        if err is not None:
            return err
        try:
            ctrl.dispatch(TileCoordinateAssigned(coord, tile))
        except ValueError as e:
            return jsonify({"ok": False, "error": f"bad tile: {e}"}), 400
        return jsonify({"ok": True, "state": game_to_json(str(body["gameId"]), ctrl)})


@app.get("/api/state/<game_id>")
def api_state(game_id: str) -> Any:
    with _GAMES_LOCK:
        ctrl, err = _lookup(game_id)
        if err is not None:
            return err
        return jsonify({"ok": True, "state": game_to_json(game_id, ctrl)})


@app.get("/api/legal/<game_id>")
def api_legal(game_id: str) -> Any:
    with _GAMES_LOCK:
        ctrl, err = _lookup(game_id)
        if err is not None:
            return err
        return jsonify({"ok": True, "legalMoves": legal_moves_to_json(ctrl.board)})


@app.delete("/api/game/<game_id>")
def api_delete(game_id: str) -> Any:
    with _GAMES_LOCK:
        _, err = _lookup(game_id)
        if err is not None:
            return err
        del _GAMES[game_id]
    logger.info("Deleted game %s", game_id)
    return jsonify({"ok": True, "gameId": game_id})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO").upper())
    debug = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="127.0.0.1", port=int(os.getenv("PORT", "5000")), debug=debug)
