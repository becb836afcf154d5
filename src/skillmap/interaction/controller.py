"""
Pointer/zoom state machine for the skills graph.

``GraphState`` (graph + base layout) is immutable and shared; ``ViewState`` is
the per-session mutable part. ``InteractionController`` owns one ViewState and
exposes one method per UI event, so any surface (SVG in a browser, a gradio
page, a test) can drive it with plain coordinates in canvas space.

Modes::

    idle --pointer_down(background)--> panning  --pointer_up/cancel--> idle
    idle --pointer_down(node)-------->  dragging --pointer_up/cancel--> idle

A drag that moved more than ``drag_threshold`` pixels swallows the click that
follows it, so dropping a node never toggles its focus.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from skillmap.interaction.viewport import (
    BUTTON_IN, BUTTON_OUT, IDENTITY, WHEEL_IN, WHEEL_OUT,
    Viewport, ViewportBounds, pan_to, zoom_at,
)
from skillmap.layout.projection import ProjectedNode, ProjectionConfig, project_frame
from skillmap.skills.query import incident_edge_ids, neighbor_ids
from skillmap.skills.service import GraphState
from skillmap.utils.config import settings
from skillmap.utils.numeric import clamp

logger = logging.getLogger(__name__)

ACTIVE_RING = 2.6


@dataclass
class DragSession:
    mode: str                                   # "pan" | "node"
    pointer_id: int
    start_screen: Tuple[float, float]
    start_world: Tuple[float, float]
    node_id: Optional[str] = None
    start_node: Tuple[float, float] = (0.0, 0.0)
    start_translate: Tuple[float, float] = (0.0, 0.0)


@dataclass
class ViewState:
    viewport: Viewport = IDENTITY
    hovered_node_id: Optional[str] = None
    locked_node_id: Optional[str] = None
    dragging_node_id: Optional[str] = None
    manual_positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    drag: Optional[DragSession] = None
    drag_moved: bool = False
    elapsed_ms: float = 0.0

    @property
    def mode(self) -> str:
        if self.drag is None:
            return "idle"
        return "panning" if self.drag.mode == "pan" else "dragging"

    @property
    def active_node_id(self) -> Optional[str]:
        return self.locked_node_id or self.hovered_node_id


def hit_test(
    frame: Sequence[ProjectedNode],
    x: float,
    y: float,
    active_node_id: Optional[str] = None,
) -> Optional[str]:
    """Front-most node whose rendered disc contains world point (x, y)."""
    for p in reversed(frame):
        r = p.radius + (ACTIVE_RING if p.id == active_node_id else 0.0)
        dx, dy = x - p.x, y - p.y
        if dx * dx + dy * dy <= r * r:
            return p.id
    return None


class InteractionController:
    def __init__(
        self,
        state: GraphState,
        view: Optional[ViewState] = None,
        *,
        min_zoom: Optional[float] = None,
        max_zoom: Optional[float] = None,
        padding: Optional[float] = None,
        drag_threshold: float = 1.0,
        projection: Optional[ProjectionConfig] = None,
    ):
        pad = settings.NODE_PADDING if padding is None else padding
        self.padding = pad
        self.drag_threshold = drag_threshold
        self.projection = projection or ProjectionConfig(padding=pad)
        self.bounds = ViewportBounds(
            width=state.layout.width,
            height=state.layout.height,
            min_zoom=settings.MIN_ZOOM if min_zoom is None else min_zoom,
            max_zoom=settings.MAX_ZOOM if max_zoom is None else max_zoom,
            margin=pad,
        )
        self.view = view or ViewState(viewport=self.bounds.clamp(IDENTITY))
        self._frame: List[ProjectedNode] = []
        self._bind(state)

    # ---------- graph binding ----------
    def _bind(self, state: GraphState):
        self.state = state
        self.graph = state.graph
        self.layout = state.layout
        self.node_ids = [n.id for n in state.graph.nodes]
        self.degrees = state.graph.degrees()
        self._reproject()

    def rebind(self, state: GraphState):
        """Swap in a rebuilt graph, keeping view state that still applies."""
        ids = {n.id for n in state.graph.nodes}
        v = self.view
        v.manual_positions = {
            nid: self._clamp_to_canvas(*pos, state.layout.width, state.layout.height)
            for nid, pos in v.manual_positions.items() if nid in ids
        }
        if v.hovered_node_id not in ids:
            v.hovered_node_id = None
        if v.locked_node_id not in ids:
            v.locked_node_id = None
        if v.drag is not None and v.drag.node_id is not None and v.drag.node_id not in ids:
            v.drag = None
            v.dragging_node_id = None
        self.bounds = ViewportBounds(state.layout.width, state.layout.height,
                                     self.bounds.min_zoom, self.bounds.max_zoom, self.bounds.margin)
        v.viewport = self.bounds.clamp(v.viewport)
        self._bind(state)

    # ---------- animation ----------
    def tick(self, elapsed_ms: float) -> List[ProjectedNode]:
        """Advance to ``elapsed_ms`` and re-project. Never rebuilds graph or layout."""
        self.view.elapsed_ms = float(elapsed_ms)
        return self._reproject()

    def _reproject(self) -> List[ProjectedNode]:
        self._frame = project_frame(self.layout, self.node_ids, self.view.elapsed_ms,
                                    self.view.manual_positions, self.projection)
        return self._frame

    @property
    def frame(self) -> List[ProjectedNode]:
        return self._frame

    def projected(self, node_id: str) -> Optional[ProjectedNode]:
        for p in self._frame:
            if p.id == node_id:
                return p
        return None

    # ---------- geometry ----------
    def _clamp_to_canvas(self, x: float, y: float, width=None, height=None) -> Tuple[float, float]:
        w = self.layout.width if width is None else width
        h = self.layout.height if height is None else height
        return clamp(x, self.padding, w - self.padding), clamp(y, self.padding, h - self.padding)

    def screen_to_world(self, x: float, y: float) -> Tuple[float, float]:
        return self.view.viewport.screen_to_world(x, y)

    def node_at(self, x: float, y: float) -> Optional[str]:
        """Hit-test a canvas-space (screen) point against the current frame."""
        wx, wy = self.screen_to_world(x, y)
        return hit_test(self._frame, wx, wy, self.view.active_node_id)

    # ---------- pointer ----------
    def pointer_down(self, x: float, y: float, pointer_id: int = 0, is_primary: bool = True) -> Optional[str]:
        """Start a node drag (over a node) or a pan (over background)."""
        if not is_primary:
            return None
        v = self.view
        world = self.screen_to_world(x, y)
        node_id = hit_test(self._frame, world[0], world[1], v.active_node_id)
        v.drag_moved = False

        if node_id is not None:
            p = self.projected(node_id)
            v.drag = DragSession("node", pointer_id, (x, y), world, node_id=node_id,
                                 start_node=(p.x, p.y))
            v.dragging_node_id = node_id
            v.hovered_node_id = node_id
        else:
            v.drag = DragSession("pan", pointer_id, (x, y), world,
                                 start_translate=(v.viewport.tx, v.viewport.ty))
            v.dragging_node_id = None
            v.hovered_node_id = None
        return node_id

    def pointer_move(self, x: float, y: float, pointer_id: int = 0):
        v = self.view
        drag = v.drag
        if drag is None or drag.pointer_id != pointer_id:
            return

        sx, sy = drag.start_screen
        if not v.drag_moved and (abs(x - sx) > self.drag_threshold or abs(y - sy) > self.drag_threshold):
            v.drag_moved = True

        if drag.mode == "pan":
            tx0, ty0 = drag.start_translate
            v.viewport = pan_to(v.viewport, tx0 + (x - sx), ty0 + (y - sy), self.bounds)
            return

        wx, wy = self.screen_to_world(x, y)
        nx, ny = drag.start_node
        target = self._clamp_to_canvas(nx + (wx - drag.start_world[0]), ny + (wy - drag.start_world[1]))
        current = v.manual_positions.get(drag.node_id)
        if current and abs(current[0] - target[0]) < 0.2 and abs(current[1] - target[1]) < 0.2:
            return
        v.manual_positions[drag.node_id] = target
        self._reproject()

    def pointer_up(self, pointer_id: Optional[int] = None):
        """End a pan/drag. Hosts should route window-level pointerup here too."""
        v = self.view
        if v.drag is None:
            return
        if pointer_id is not None and v.drag.pointer_id != pointer_id:
            return
        if v.drag.mode == "node" and v.drag_moved:
            logger.debug("[ui] pinned %s at %s", v.drag.node_id, v.manual_positions.get(v.drag.node_id))
        v.drag = None
        v.dragging_node_id = None

    pointer_cancel = pointer_up

    def pointer_enter(self, node_id: str):
        if node_id in self.degrees:
            self.view.hovered_node_id = node_id

    def pointer_leave(self):
        if self.view.drag is None:
            self.view.hovered_node_id = None

    def hover_at(self, x: float, y: float) -> Optional[str]:
        """Hover by hit-testing, for surfaces without per-node enter/leave events."""
        if self.view.drag is not None:
            return self.view.hovered_node_id
        self.view.hovered_node_id = self.node_at(x, y)
        return self.view.hovered_node_id

    def click(self, x: float, y: float) -> Optional[str]:
        """Toggle lock on the clicked node, or clear it on background. Returns the locked id."""
        v = self.view
        if v.drag_moved:
            v.drag_moved = False
            return v.locked_node_id
        node_id = self.node_at(x, y)
        if node_id is None:
            v.locked_node_id = None
        else:
            self.toggle_lock(node_id)
        return v.locked_node_id

    def toggle_lock(self, node_id: str) -> Optional[str]:
        if node_id not in self.degrees:
            return self.view.locked_node_id
        v = self.view
        v.locked_node_id = None if v.locked_node_id == node_id else node_id
        return v.locked_node_id

    # ---------- zoom ----------
    def zoom(self, factor: float, anchor: Optional[Tuple[float, float]] = None) -> Viewport:
        self.view.viewport = zoom_at(self.view.viewport, factor, self.bounds, anchor)
        return self.view.viewport

    def wheel(self, delta_y: float, x: float, y: float) -> Viewport:
        return self.zoom(WHEEL_IN if delta_y < 0 else WHEEL_OUT, (x, y))

    def zoom_in(self) -> Viewport:
        return self.zoom(BUTTON_IN)

    def zoom_out(self) -> Viewport:
        return self.zoom(BUTTON_OUT)

    # ---------- resets ----------
    def reset_focus(self):
        self.view.locked_node_id = None

    def reset_layout(self):
        self.view.manual_positions = {}
        self._reproject()

    def reset_view(self):
        self.view.viewport = self.bounds.clamp(IDENTITY)

    # ---------- highlight ----------
    @property
    def active_node_id(self) -> Optional[str]:
        return self.view.active_node_id

    def highlighted_node_ids(self) -> Set[str]:
        return neighbor_ids(self.graph, self.active_node_id)

    def highlighted_edge_ids(self) -> Set[str]:
        return incident_edge_ids(self.graph, self.active_node_id)
