# src/skillmap/skills/query.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, List, Optional, Set

from skillmap.skills.models import DOMAIN_META, Edge, SkillGraph, SkillNode
from skillmap.skills.themes import theme_label


@dataclass(frozen=True)
class CorrelatedSkill:
    edge_id: str
    node_id: str
    label: str
    weight: float
    reason: str
    bridge: bool = False


def correlation_reason(edge: Edge) -> str:
    """Human-readable why for an edge: category first, then up to two themes."""
    if edge.shared_categories:
        return f"Shared category: {edge.shared_categories[0]}"
    if edge.shared_themes:
        return " + ".join(theme_label(t) for t in edge.shared_themes[:2])
    return "Related through graph proximity"


def neighbor_ids(graph: SkillGraph, node_id: Optional[str]) -> Set[str]:
    """The node itself plus everything one edge away; empty for no/unknown node."""
    if not node_id or node_id not in graph.node_by_id():
        return set()
    ids = {node_id}
    for e in graph.edges:
        if e.source == node_id:
            ids.add(e.target)
        elif e.target == node_id:
            ids.add(e.source)
    return ids


def incident_edge_ids(graph: SkillGraph, node_id: Optional[str]) -> Set[str]:
    if not node_id:
        return set()
    return {e.id for e in graph.edges if node_id in (e.source, e.target)}


def correlated_skills(graph: SkillGraph, node_id: str, limit: int = 8) -> List[CorrelatedSkill]:
    """Neighbors of ``node_id`` by descending edge weight (ties keep edge order)."""
    by_id = graph.node_by_id()
    if node_id not in by_id:
        return []
    linked = sorted(graph.adjacency().get(node_id, []), key=lambda e: -e.weight)
    out = []
    for e in linked[:limit]:
        other = by_id.get(e.other(node_id))
        out.append(CorrelatedSkill(
            edge_id=e.id,
            node_id=e.other(node_id),
            label=other.label if other else "Unknown skill",
            weight=e.weight,
            reason=correlation_reason(e),
            bridge=e.bridge,
        ))
    return out


def domain_labels(node: SkillNode) -> List[str]:
    return [DOMAIN_META.get(d, {}).get("short", d) for d in node.domains]


def find_node(graph: SkillGraph, query: str) -> Optional[SkillNode]:
    """Look a node up by id, or by label case-insensitively."""
    by_id: Dict[str, SkillNode] = graph.node_by_id()
    if query in by_id:
        return by_id[query]
    q = query.strip().lower()
    for n in graph.nodes:
        if n.label.lower() == q:
            return n
    return None
