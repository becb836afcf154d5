"""
Pointer events from a browser surface, replayed onto an InteractionController.

The page batches DOM events into one JSON payload::

    {"seq": 12, "events": [{"type": "down", "x": 310.5, "y": 402.0, "pointer": 1, "primary": true}, ...]}

Coordinates are canvas (SVG viewBox) space. Types: ``down``, ``move``, ``up``,
``cancel``, ``click``, ``leave``, ``wheel`` (with ``delta``).
"""
from __future__ import annotations

import json
import logging
import math
from typing import Any, Dict, Iterable, List, Optional

from skillmap.interaction.controller import InteractionController

logger = logging.getLogger(__name__)

_NEEDS_POINT = {"down", "move", "click", "wheel"}


def parse_pointer_payload(raw: Any) -> List[Dict[str, Any]]:
    """Event dicts from a payload string; anything unreadable yields []."""
    if not raw:
        return []
    try:
        obj = json.loads(raw) if isinstance(raw, str) else raw
    except json.JSONDecodeError as e:
        logger.debug("[ui] dropped pointer payload: %s", e)
        return []
    if isinstance(obj, dict):
        obj = obj.get("events")
    if not isinstance(obj, list):
        return []
    return [ev for ev in obj if isinstance(ev, dict)]


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


def _pointer_id(value: Any) -> int:
    return value if isinstance(value, int) and not isinstance(value, bool) else 0


def apply_pointer_events(ctrl: InteractionController, events: Iterable[Dict[str, Any]]) -> int:
    """Replay ``events`` in order; returns how many were applied."""
    applied = 0
    for ev in events:
        kind = ev.get("type")
        x, y = _number(ev.get("x")), _number(ev.get("y"))
        if kind in _NEEDS_POINT and (x is None or y is None):
            continue
        pointer = _pointer_id(ev.get("pointer"))

        if kind == "down":
            ctrl.pointer_down(x, y, pointer_id=pointer, is_primary=ev.get("primary", True) is not False)
        elif kind == "move":
            if ctrl.view.drag is not None:
                ctrl.pointer_move(x, y, pointer_id=pointer)
            else:
                ctrl.hover_at(x, y)
        elif kind == "up":
            ctrl.pointer_up(pointer)
        elif kind == "cancel":
            ctrl.pointer_cancel(pointer)
        elif kind == "click":
            ctrl.click(x, y)
        elif kind == "leave":
            ctrl.pointer_leave()
        elif kind == "wheel":
            delta = _number(ev.get("delta"))
            if delta is None or delta == 0:
                continue
            ctrl.wheel(delta, x, y)
        else:
            continue
        applied += 1
    return applied
