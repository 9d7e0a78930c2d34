from __future__ import annotations

import math
import os
import sys
import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from flask import Flask, jsonify, request

# Ensure package imports work when executed directly from repo root
if __package__ in (None, ""):
    sys.path.insert(0, os.path.abspath(os.path.dirname(__file__)))

from game import (  # noqa: E402
    Board,
    ConfigError,
    HISTORY_LIMIT,
    MutationType,
    Piece,
    Session,
    load_config,
)
from mutation_core.config import debug  # noqa: E402

app = Flask(__name__)

MODIFIER_FIELDS = {
    "fortune": "fortune",
    "chips": "chips",
    "ghUpgradeLevel": "gh_upgrade_level",
    "uniqueBuffLevel": "unique_buff_level",
    "additiveBuffBase": "additive_buff_base",
    "multiplicativeBuffBase": "multiplicative_buff_base",
}


@dataclass
class _Entry:
    session: Session
    lock: threading.Lock = field(default_factory=threading.Lock)


# In-memory registry; one lock per session so every player action is exclusive.
_SESSIONS: Dict[str, _Entry] = {}
_REGISTRY_LOCK = threading.Lock()


# ---------- JSON helpers ----------

def piece_to_json(p: Piece) -> Dict[str, Any]:
    return {
        "typeId": int(p.type_id),
        "origin": [int(p.origin[0]), int(p.origin[1])],
        "size": int(p.size),
        "isPlayerPlaced": bool(p.is_player_placed),
        "growthStage": int(p.growth_stage),
        "placementId": int(p.placement_id),
    }


def board_to_json(b: Board) -> Dict[str, Any]:
    return {
        "size": int(b.size),
        "pieces": [piece_to_json(p) for p in b.iter_pieces()],
        # Placement id per cell, row-major; null for empty cells.
        "cells": [[b.grid[b.index(r, c)] for c in range(b.size)] for r in range(b.size)],
    }


def mutation_to_json(t: MutationType) -> Dict[str, Any]:
    return {
        "id": t.id,
        "name": t.name,
        "image": t.image,
        "size": t.size,
        "params": list(t.params),
        "conditions": [{"id": c.type_id, "amount": c.min_count} for c in t.conditions],
        "category": t.category,
        "maxGrowthStage": t.max_growth_stage,
        "specialEffect": t.special_effect,
    }


def state_to_json(session_id: str, s: Session) -> Dict[str, Any]:
    score = s.score()
    m = s.modifiers
    return {
        "sessionId": session_id,
        "board": board_to_json(s.board),
        "placementIdCounter": s.placement_id_counter,
        "scoreParam": {"index": s.score_param_index, "name": s.score_param_name},
        "score": {
            "base": score.base_yield,
            "final": score.final_yield,
            "pieces": [{"origin": list(o), "typeId": t, "score": v} for (o, t, v) in score.breakdown],
        },
        "settings": {
            "simulationMode": s.settings.simulation_mode,
            "evaluationMode": s.settings.evaluation_mode,
            "spawnProbability": s.settings.spawn_probability,
            "spawnPolicy": s.settings.spawn_policy,
        },
        "modifiers": {name: getattr(m, attr) for name, attr in MODIFIER_FIELDS.items()},
        "canUndo": s.can_undo(),
        "canRedo": s.can_redo(),
    }


def _coord(value: Any) -> Tuple[int, int]:
    r, c = value
    return (int(r), int(c))


def _lookup(body: Dict[str, Any]) -> Tuple[Optional[str], Optional[_Entry]]:
    sid = body.get("sessionId")
    if not isinstance(sid, str):
        return None, None
    with _REGISTRY_LOCK:
        return sid, _SESSIONS.get(sid)


def _not_found() -> Any:
    return jsonify({"ok": False, "error": "unknown session"}), 404


def _parse_settings(body: Dict[str, Any]) -> Tuple[Dict[str, Any], Optional[str]]:
    """Converts recognised setting keys to typed values without touching any session."""
    parsed: Dict[str, Any] = {}
    if "simulationMode" in body:
        parsed["simulationMode"] = bool(body["simulationMode"])
    if "evaluationMode" in body:
        parsed["evaluationMode"] = bool(body["evaluationMode"])
    if "spawnProbability" in body:
        try:
            parsed["spawnProbability"] = float(body["spawnProbability"])
        except (TypeError, ValueError, OverflowError):
            return {}, "spawnProbability must be a number"
    if "spawnPolicy" in body:
        parsed["spawnPolicy"] = str(body["spawnPolicy"])
    if "scoreParamIndex" in body:
        try:
            parsed["scoreParamIndex"] = int(body["scoreParamIndex"])
        except (TypeError, ValueError, OverflowError):
            return {}, "scoreParamIndex must be an integer"
    mods = body.get("modifiers") or {}
    if not isinstance(mods, dict):
        return {}, "modifiers must be an object"
    changes: Dict[str, float] = {}
    for name, attr in MODIFIER_FIELDS.items():
        if name in mods:
            try:
                value = float(mods[name])
            except (TypeError, ValueError, OverflowError):
                return {}, f"{name} must be a number"
            if not math.isfinite(value):
                return {}, f"{name} must be finite"
            changes[attr] = value
    if changes:
        parsed["modifiers"] = changes
    return parsed, None


def _apply_settings(s: Session, body: Dict[str, Any]) -> Optional[str]:
    """Applies every recognised setting key or none of them; returns an error message for bad values."""
    parsed, err = _parse_settings(body)
    if err:
        return err
    saved = (s.settings, s.modifiers, s.score_param_index)
    if "simulationMode" in parsed:
        s.set_simulation_mode(parsed["simulationMode"])
    if "evaluationMode" in parsed:
        s.set_evaluation_mode(parsed["evaluationMode"])
    if "spawnProbability" in parsed and not s.set_spawn_probability(parsed["spawnProbability"]):
        err = "spawnProbability must be within [0, 1]"
    elif "spawnPolicy" in parsed and not s.set_spawn_policy(parsed["spawnPolicy"]):
        err = f"unknown spawnPolicy {parsed['spawnPolicy']!r}"
    elif "scoreParamIndex" in parsed and not s.set_score_param(parsed["scoreParamIndex"]):
        err = f"no score parameter {parsed['scoreParamIndex']}"
    elif "modifiers" in parsed and not s.set_modifiers(**parsed["modifiers"]):
        err = "invalid modifiers"
    if err:
        s.settings, s.modifiers, s.score_param_index = saved
    return err


# ---------- Session API ----------

@app.post("/api/new")
def api_new() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    config = body.get("config")
    if not isinstance(config, dict):
        try:
            config = load_config(body.get("configPath") or None)
        except ConfigError as e:
            return jsonify({"ok": False, "error": str(e)}), 500
    seed = body.get("seed", None)
    session = Session.from_config(config, seed=seed if isinstance(seed, int) else None)
    err = _apply_settings(session, body)
    if err:
        return jsonify({"ok": False, "error": err}), 400
    sid = uuid.uuid4().hex
    with _REGISTRY_LOCK:
        _SESSIONS[sid] = _Entry(session=session)
    debug("app", f"new session {sid} with {len(session.catalog)} mutation types")
    return jsonify({
        "ok": True,
        "state": state_to_json(sid, session),
        "catalog": [mutation_to_json(t) for t in session.mutation_types()],
    })


@app.post("/api/catalog")
def api_catalog() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    _, entry = _lookup(body)
    if entry is None:
        return _not_found()
    cat = entry.session.catalog
    return jsonify({
        "ok": True,
        "scoreParams": [{"key": k, "name": cat.param_name(i)} for i, k in enumerate(cat.score_params)],
        "mutations": [mutation_to_json(t) for t in cat.types],
    })


@app.post("/api/state")
def api_state() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    with entry.lock:
        return jsonify({"ok": True, "state": state_to_json(sid, entry.session)})


@app.post("/api/place")
def api_place() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    try:
        origin = _coord(body["origin"])
        type_id = int(body["typeId"])
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad placement: {e}"}), 400
    with entry.lock:
        if not entry.session.place(origin, type_id):
            return jsonify({"ok": False, "error": "Illegal placement", "state": state_to_json(sid, entry.session)}), 400
        return jsonify({"ok": True, "state": state_to_json(sid, entry.session)})


@app.post("/api/destroy")
def api_destroy() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    try:
        coord = _coord(body["coord"])
    except (KeyError, TypeError, ValueError) as e:
        return jsonify({"ok": False, "error": f"bad coord: {e}"}), 400
    with entry.lock:
        removed = entry.session.destroy(coord)
        return jsonify({"ok": True, "removed": removed, "state": state_to_json(sid, entry.session)})


@app.post("/api/tick")
def api_tick() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    try:
        count = int(body.get("count", 1))
    except (TypeError, ValueError, OverflowError):
        return jsonify({"ok": False, "error": "count must be an integer"}), 400
    if not 1 <= count <= HISTORY_LIMIT:
        return jsonify({"ok": False, "error": f"count must be within [1, {HISTORY_LIMIT}]"}), 400
    with entry.lock:
        spawned = []
        for _ in range(count):
            spawned.extend(entry.session.tick())
        return jsonify({
            "ok": True,
            "spawned": [piece_to_json(p) for p in spawned],
            "state": state_to_json(sid, entry.session),
        })


@app.post("/api/undo")
def api_undo() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    with entry.lock:
        moved = entry.session.undo()
        return jsonify({"ok": True, "moved": moved, "state": state_to_json(sid, entry.session)})


@app.post("/api/redo")
def api_redo() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    with entry.lock:
        moved = entry.session.redo()
        return jsonify({"ok": True, "moved": moved, "state": state_to_json(sid, entry.session)})


@app.post("/api/export")
def api_export() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    with entry.lock:
        result = entry.session.export_board()
    warnings = [f"piece at {list(o)} has a type id too large to export" for o in result.dropped]
    return jsonify({"ok": True, "code": result.code, "warnings": warnings})


@app.post("/api/import")
def api_import() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    code = body.get("code")
    with entry.lock:
        if not isinstance(code, str) or not entry.session.import_board(code):
            return jsonify({"ok": False, "error": "invalid board string"}), 400
        return jsonify({"ok": True, "state": state_to_json(sid, entry.session)})


@app.post("/api/settings")
def api_settings() -> Any:
    body = request.get_json(force=True, silent=True) or {}
    sid, entry = _lookup(body)
    if entry is None:
        return _not_found()
    with entry.lock:
        err = _apply_settings(entry.session, body)
        if err:
            return jsonify({"ok": False, "error": err}), 400
        return jsonify({"ok": True, "state": state_to_json(sid, entry.session)})


# Entrypoint for "python app.py"
if __name__ == "__main__":
    debug_flag = os.getenv("FLASK_DEBUG", os.getenv("DEBUG", "0")).lower() in ("1", "true", "yes", "on")
    app.run(host="0.0.0.0", port=int(os.getenv("PORT", "5000")), debug=debug_flag)
