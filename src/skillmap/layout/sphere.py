from __future__ import annotations
import math
from dataclasses import dataclass, field
from typing import Dict, List, NamedTuple, Sequence, Tuple

from skillmap.layout.hashing import hash_number
from skillmap.skills.models import SkillGraph, SkillNode
from skillmap.utils.numeric import clamp

GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))
BASE_SPREAD = 0.31          # base 2D position = center + slot * spread * canvas size
DEFAULT_LEVEL = 6


class Point3(NamedTuple):
    x: float
    y: float
    z: float


@dataclass(frozen=True)
class FloatMeta:
    speed: float        # radians per ms
    phase_a: float
    phase_b: float


@dataclass(frozen=True)
class SphereLayout:
    width: int
    height: int
    slots: Dict[str, Point3] = field(default_factory=dict)
    base_positions: Dict[str, Tuple[float, float]] = field(default_factory=dict)
    float_meta: Dict[str, FloatMeta] = field(default_factory=dict)
    radii: Dict[str, float] = field(default_factory=dict)


def order_by_hash(nodes: Sequence[SkillNode]) -> List[SkillNode]:
    return sorted(nodes, key=lambda n: hash_number(n.id))


def fibonacci_slots(node_ids: Sequence[str]) -> Dict[str, Point3]:
    """Spread ids evenly over the unit sphere along a golden-angle spiral."""
    total = len(node_ids)
    if total == 0:
        return {}
    if total == 1:
        return {node_ids[0]: Point3(0.0, 0.0, 1.0)}

    slots = {}
    for i, nid in enumerate(node_ids):
        y = 1 - 2 * ((i + 0.5) / total)
        radius = math.sqrt(max(0.0, 1 - y * y))
        theta = i * GOLDEN_ANGLE
        slots[nid] = Point3(math.cos(theta) * radius, y, math.sin(theta) * radius)
    return slots


def build_float_meta(nodes: Sequence[SkillNode]) -> Dict[str, FloatMeta]:
    out = {}
    for index, node in enumerate(nodes):
        seed = hash_number(f"{node.id}-{index}-float")
        out[node.id] = FloatMeta(
            speed=0.0001 + ((seed % 18) / 18) * 0.00007,
            phase_a=math.radians(seed % 360),
            phase_b=math.radians((seed >> 3) % 360),
        )
    return out


def node_radius(level) -> float:
    lvl = DEFAULT_LEVEL if level is None else level
    return 5 + (clamp(lvl, 0, 10) / 10) * 8


def build_sphere_layout(graph: SkillGraph, width: int = 1024, height: int = 1024) -> SphereLayout:
    # slots follow id-hash order, not document order
    slots = fibonacci_slots([n.id for n in order_by_hash(graph.nodes)])
    cx, cy = width / 2, height / 2
    base = {
        nid: (cx + p.x * width * BASE_SPREAD, cy + p.y * height * BASE_SPREAD)
        for nid, p in slots.items()
    }
    return SphereLayout(
        width=width,
        height=height,
        slots=slots,
        base_positions=base,
        float_meta=build_float_meta(graph.nodes),
        radii={n.id: node_radius(n.level) for n in graph.nodes},
    )
