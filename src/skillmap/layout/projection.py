"""Per-frame projection of sphere slots to canvas coordinates.

Everything here is a pure function of (layout, node, elapsed time, overrides):
no timers, no state. The animation loop only chooses which ``elapsed_ms`` to
pass in.
"""
from __future__ import annotations
import math
from dataclasses import dataclass
from typing import Dict, List, Mapping, NamedTuple, Optional, Tuple

from skillmap.layout.sphere import Point3, SphereLayout
from skillmap.utils.numeric import clamp


@dataclass(frozen=True)
class ProjectionConfig:
    camera_distance: float = 2.75
    yaw_rate: float = 0.000065          # radians per ms
    pitch: float = 0.36
    pitch_wobble: float = 0.05
    pitch_wobble_rate: float = 0.00002
    orb_radius_ratio: float = 0.37
    float_amplitude: float = 0.014
    float_y_speed_ratio: float = 0.92
    min_render_radius: float = 4.3
    padding: float = 90.0


DEFAULT_PROJECTION = ProjectionConfig()


class ProjectedNode(NamedTuple):
    id: str
    x: float
    y: float
    depth: float
    scale: float
    radius: float
    opacity: float
    pinned: bool = False


def rotate(point: Point3, elapsed_ms: float, config: ProjectionConfig = DEFAULT_PROJECTION) -> Point3:
    """Apply the time-based yaw, then the (slowly wobbling) pitch tilt."""
    yaw = elapsed_ms * config.yaw_rate
    pitch = config.pitch + math.sin(elapsed_ms * config.pitch_wobble_rate) * config.pitch_wobble
    cy, sy = math.cos(yaw), math.sin(yaw)
    cp, sp = math.cos(pitch), math.sin(pitch)

    x_yaw = point.x * cy + point.z * sy
    z_yaw = -point.x * sy + point.z * cy
    y_pitch = point.y * cp - z_yaw * sp
    z_pitch = point.y * sp + z_yaw * cp
    return Point3(x_yaw, y_pitch, z_pitch)


def depth_opacity(depth: float) -> float:
    return clamp(0.76 + (depth + 1) * 0.17, 0.45, 1.0)


def project_node(
    layout: SphereLayout,
    node_id: str,
    elapsed_ms: float,
    override: Optional[Tuple[float, float]] = None,
    config: ProjectionConfig = DEFAULT_PROJECTION,
) -> ProjectedNode:
    """Canvas position, depth, radius and opacity of one node at ``elapsed_ms``.

    A node with a manual ``override`` is pinned there: it skips rotation,
    float and perspective and is drawn in front at its base radius.
    """
    base_radius = layout.radii.get(node_id, 5.0)
    if override is not None:
        return ProjectedNode(node_id, override[0], override[1], 1.0, 1.0,
                             max(config.min_render_radius, base_radius), 1.0, True)

    slot = layout.slots.get(node_id, Point3(0.0, 0.0, 1.0))
    rotated = rotate(slot, elapsed_ms, config)

    drift_x = drift_y = 0.0
    meta = layout.float_meta.get(node_id)
    if meta is not None:
        drift_x = math.cos(elapsed_ms * meta.speed + meta.phase_a) * config.float_amplitude
        drift_y = math.sin(elapsed_ms * meta.speed * config.float_y_speed_ratio + meta.phase_b) * config.float_amplitude

    depth = rotated.z
    perspective = config.camera_distance / (config.camera_distance - depth)
    scale = perspective * (0.9 + (depth + 1) * 0.18)

    cx, cy = layout.width / 2, layout.height / 2
    orb_radius = min(layout.width, layout.height) * config.orb_radius_ratio
    pad = config.padding
    x = clamp(cx + (rotated.x + drift_x) * orb_radius * perspective, pad, layout.width - pad)
    y = clamp(cy + (rotated.y + drift_y) * orb_radius * perspective, pad, layout.height - pad)

    return ProjectedNode(
        node_id, x, y, depth, scale,
        max(config.min_render_radius, base_radius * scale),
        depth_opacity(depth),
    )


def project_frame(
    layout: SphereLayout,
    node_ids,
    elapsed_ms: float,
    overrides: Optional[Mapping[str, Tuple[float, float]]] = None,
    config: ProjectionConfig = DEFAULT_PROJECTION,
) -> List[ProjectedNode]:
    """Project every node; result is back-to-front (paint order)."""
    overrides = overrides or {}
    projected = [project_node(layout, nid, elapsed_ms, overrides.get(nid), config) for nid in node_ids]
    return sorted(projected, key=lambda p: p.depth)


def by_id(projected: List[ProjectedNode]) -> Dict[str, ProjectedNode]:
    return {p.id: p for p in projected}
