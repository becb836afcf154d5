import json
import logging
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Dict, Optional

from skillmap.layout.sphere import SphereLayout, build_sphere_layout
from skillmap.skills.correlate import build_edges, find_connected_components
from skillmap.skills.extract import coerce_document, collect_skill_nodes
from skillmap.skills.models import SkillGraph, SkillsSection
from skillmap.utils.config import CorrelationConfig, settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GraphState:
    """Everything derived from one skills document: the graph and its base layout."""
    graph: SkillGraph
    layout: SphereLayout


def build_correlation_graph(skills: Any, config: Optional[CorrelationConfig] = None) -> SkillGraph:
    """Extractor → Classifier → Correlation Engine over a ``skills`` section."""
    config = config or settings.CORRELATION
    nodes = collect_skill_nodes(skills)
    edges = build_edges(nodes, config)
    components = find_connected_components([n.id for n in nodes], edges)
    graph = SkillGraph(nodes=tuple(nodes), edges=tuple(edges), component_count=len(components))
    logger.info("[graph] %d skills, %d correlations (%d bridges)",
                len(graph.nodes), len(graph.edges), sum(1 for e in graph.edges if e.bridge))
    return graph


def _canonical(section: SkillsSection) -> str:
    return json.dumps(section.model_dump(), sort_keys=True)


@lru_cache(maxsize=16)
def _build_cached(canonical: str, config: CorrelationConfig, width: int, height: int) -> GraphState:
    graph = build_correlation_graph(json.loads(canonical), config)
    return GraphState(graph=graph, layout=build_sphere_layout(graph, width, height))


def build_graph_state(
    document: Any,
    config: Optional[CorrelationConfig] = None,
    width: Optional[int] = None,
    height: Optional[int] = None,
) -> GraphState:
    """Full pipeline for a portfolio document (``{"skills": {...}}``).

    Memoized on the normalized skills section, so re-rendering with an equal
    document returns the same GraphState object without recomputing.
    """
    section = coerce_document(document).skills
    return _build_cached(
        _canonical(section),
        config or settings.CORRELATION,
        int(width or settings.CANVAS_WIDTH),
        int(height or settings.CANVAS_HEIGHT),
    )


def graph_to_dict(state: GraphState) -> Dict[str, Any]:
    """JSON-friendly dump of nodes, edges and base layout."""
    layout = state.layout
    degrees = state.graph.degrees()
    nodes = []
    for n in state.graph.nodes:
        item = n.model_dump()
        slot = layout.slots.get(n.id)
        item["degree"] = degrees.get(n.id, 0)
        item["radius"] = layout.radii.get(n.id)
        item["sphere"] = list(slot) if slot else None
        item["base_position"] = list(layout.base_positions.get(n.id, ()))
        nodes.append(item)
    return {
        "nodes": nodes,
        "edges": [e.model_dump() for e in state.graph.edges],
        "component_count": state.graph.component_count,
        "width": layout.width,
        "height": layout.height,
    }


def clear_cache():
    _build_cached.cache_clear()
