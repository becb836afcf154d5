from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional

from skillmap.interaction.controller import ACTIVE_RING, InteractionController
from skillmap.interaction.viewport import Viewport
from skillmap.layout.hashing import hash_number
from skillmap.layout.projection import by_id
from skillmap.skills.themes import DEFAULT_COLOR, theme_color
from skillmap.utils.numeric import clamp

LABEL_ZOOM = 1.16
HUB_LABEL_ZOOM = 1.02
HUB_DEGREE = 10
LABEL_EDGE_ZONE = 168


@dataclass(frozen=True)
class RenderedEdge:
    id: str
    path: str
    color: str
    width: float
    opacity: float
    dash: Optional[str]
    active: bool
    bridge: bool


@dataclass(frozen=True)
class RenderedNode:
    id: str
    label: str
    x: float
    y: float
    radius: float
    fill: str
    stroke: str
    stroke_width: float
    opacity: float
    active: bool
    dimmed: bool
    dragging: bool
    show_label: bool
    label_dx: float
    label_dy: float
    label_anchor: str
    label_baseline: str
    label_opacity: float


@dataclass(frozen=True)
class RenderFrame:
    width: int
    height: int
    viewport: Viewport
    active_node_id: Optional[str]
    edges: List[RenderedEdge]
    nodes: List[RenderedNode]       # paint order, back to front


def _edge_path(sx, sy, tx, ty, edge_id: str) -> str:
    curve = ((hash_number(edge_id) % 19) - 9) * 1.4
    mx = (sx + tx) / 2 + curve
    my = (sy + ty) / 2 - curve * 0.7
    return f"M {sx:.2f} {sy:.2f} Q {mx:.2f} {my:.2f} {tx:.2f} {ty:.2f}"


def build_render_frame(ctrl: InteractionController) -> RenderFrame:
    """Style every edge and node of the controller's current frame."""
    projected = ctrl.frame
    pos = by_id(projected)
    view = ctrl.view
    scale = view.viewport.scale
    active = ctrl.active_node_id if ctrl.active_node_id in pos else None
    neighbors = ctrl.highlighted_node_ids()
    active_edges = ctrl.highlighted_edge_ids()
    nodes_by_id = ctrl.graph.node_by_id()

    edges = []
    for e in ctrl.graph.edges:
        s, t = pos.get(e.source), pos.get(e.target)
        if s is None or t is None:
            continue
        is_active = e.id in active_edges
        depth_mix = (s.depth + t.depth) / 2
        depth_fade = 0.62 + (depth_mix + 1) * 0.2
        visibility = 0.72 if depth_mix < -0.08 else 1.0
        if active is None:
            base = 0.2 if e.bridge else 0.28
        else:
            base = 0.88 if is_active else 0.06
        edges.append(RenderedEdge(
            id=e.id,
            path=_edge_path(s.x, s.y, t.x, t.y, e.id),
            color=theme_color(e.shared_themes[0]) if e.shared_themes else DEFAULT_COLOR,
            width=2.2 if is_active else (1.6 if e.bridge else 1.3),
            opacity=clamp(base * depth_fade * visibility, 0.04, 0.95),
            dash="4 7" if e.bridge else None,
            active=is_active,
            bridge=e.bridge,
        ))

    nodes = []
    right_zone = ctrl.layout.width - LABEL_EDGE_ZONE
    for p in projected:
        node = nodes_by_id[p.id]
        is_active = p.id == active
        is_neighbor = p.id in neighbors
        dimmed = active is not None and not is_neighbor
        color = theme_color(node.primary_theme)
        show_label = (
            is_active or is_neighbor or scale >= LABEL_ZOOM
            or (active is None and ctrl.degrees.get(p.id, 0) >= HUB_DEGREE and scale >= HUB_LABEL_ZOOM)
        )
        near_right = p.x > right_zone
        near_left = p.x < LABEL_EDGE_ZONE
        near_top = p.y < ctrl.padding + 6
        nodes.append(RenderedNode(
            id=p.id,
            label=node.label,
            x=p.x,
            y=p.y,
            radius=p.radius + (ACTIVE_RING if is_active else 0.0),
            fill="#ffffff" if len(node.domains) > 1 else f"{color}dd",
            stroke=color,
            stroke_width=2.6 if is_active else 1.5,
            opacity=0.14 if dimmed else p.opacity,
            active=is_active,
            dimmed=dimmed,
            dragging=view.dragging_node_id == p.id,
            show_label=show_label,
            label_dx=-(p.radius + 8) if near_right else (p.radius + 8 if near_left else 0.0),
            label_dy=p.radius + 9 if near_top else -(p.radius + 9),
            label_anchor="end" if near_right else ("start" if near_left else "middle"),
            label_baseline="hanging" if near_top else "baseline",
            label_opacity=0.24 if dimmed else clamp(p.opacity + 0.05, 0.45, 0.98),
        ))

    return RenderFrame(
        width=ctrl.layout.width,
        height=ctrl.layout.height,
        viewport=view.viewport,
        active_node_id=active,
        edges=edges,
        nodes=nodes,
    )
