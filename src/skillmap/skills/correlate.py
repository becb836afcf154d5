"""
Correlation engine: pairwise relatedness scores → sparse, connected edge set.

Pipeline (every step is deterministic for a given node order):

1. score every unordered pair (shared categories/themes/domains, label token
   overlap, proficiency closeness)
2. drop pairs under ``candidate_threshold``
3. keep an edge if it is among the ``max_edges_per_node`` best of either endpoint
4. backfill nodes below ``min_degree`` from their remaining candidates
5. backfill "weak ties" (no shared theme, or cross-domain) up to ``min_cross_theme_links``
6. give any still-isolated node its best candidate
7. bridge connected components until one remains, forcing a link when no pair
   clears ``bridge_threshold``
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from skillmap.skills.extract import normalize_key
from skillmap.skills.models import Edge, SkillNode
from skillmap.utils.config import CorrelationConfig
from skillmap.utils.numeric import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_CONFIG = CorrelationConfig()


@dataclass(frozen=True)
class PairScore:
    score: float
    shared_categories: Tuple[str, ...]
    shared_themes: Tuple[str, ...]
    shared_domains: Tuple[str, ...]

    @property
    def cross_domain(self) -> bool:
        return not self.shared_domains


def _intersection(a: Sequence[str], b: Sequence[str]) -> Tuple[str, ...]:
    bset = set(b)
    return tuple(x for x in a if x in bset)


def _tokens(label: str) -> Set[str]:
    return {t for t in normalize_key(label).split(" ") if len(t) > 2}


def token_similarity(a: str, b: str) -> float:
    """Jaccard overlap of label tokens longer than two characters."""
    ta, tb = _tokens(a), _tokens(b)
    if not ta or not tb:
        return 0.0
    return len(ta & tb) / len(ta | tb)


def edge_score(a: SkillNode, b: SkillNode, config: CorrelationConfig = DEFAULT_CONFIG) -> PairScore:
    shared_categories = _intersection(a.categories, b.categories)
    shared_themes = _intersection(a.themes, b.themes)
    shared_domains = _intersection(a.domains, b.domains)
    lexical = token_similarity(a.label, b.label)

    score = 0.0
    if shared_categories:
        score += config.category_base + (len(shared_categories) - 1) * config.category_extra
    if shared_themes:
        score += len(shared_themes) * config.theme_bonus
    if shared_domains:
        score += config.domain_bonus
    if not shared_domains and shared_themes:
        score += config.cross_domain_theme_bonus
    if lexical > config.lexical_high:
        score += config.lexical_high_bonus
    elif lexical > config.lexical_medium:
        score += config.lexical_medium_bonus

    if a.level is not None and b.level is not None:
        gap = abs(a.level - b.level)
        if gap <= config.level_close_gap:
            score += config.level_close_bonus
        if gap >= config.level_far_gap:
            score -= config.level_far_penalty

    if not shared_categories and not shared_themes:
        score -= config.unrelated_penalty

    return PairScore(score, shared_categories, shared_themes, shared_domains)


def pair_key(a: str, b: str) -> str:
    return f"{a}|{b}" if a < b else f"{b}|{a}"


def find_connected_components(node_ids: Sequence[str], edges: Iterable[Edge]) -> List[List[str]]:
    """Components in node order; each component lists ids in DFS visit order."""
    adjacency: Dict[str, List[str]] = {nid: [] for nid in node_ids}
    for e in edges:
        if e.source in adjacency:
            adjacency[e.source].append(e.target)
        if e.target in adjacency:
            adjacency[e.target].append(e.source)

    visited: Set[str] = set()
    components: List[List[str]] = []
    for nid in node_ids:
        if nid in visited:
            continue
        stack = [nid]
        visited.add(nid)
        component = []
        while stack:
            current = stack.pop()
            component.append(current)
            for neighbor in adjacency.get(current, []):
                if neighbor not in visited:
                    visited.add(neighbor)
                    stack.append(neighbor)
        components.append(component)
    return components


def _by_weight(edges: Iterable[Edge]) -> List[Edge]:
    # stable: equal weights keep candidate order
    return sorted(edges, key=lambda e: -e.weight)


def _is_weak_tie(edge: Edge) -> bool:
    return not edge.shared_themes or edge.cross_domain


class _EdgeSet:
    """Ordered edge list that refuses a second edge for the same unordered pair."""

    def __init__(self, edges: Iterable[Edge] = ()):
        self.edges: List[Edge] = []
        self.pairs: Set[str] = set()
        for e in edges:
            self.add(e)

    def add(self, edge: Edge) -> bool:
        key = pair_key(edge.source, edge.target)
        if key in self.pairs:
            return False
        self.pairs.add(key)
        self.edges.append(edge)
        return True

    def touching(self, node_id: str) -> List[Edge]:
        return [e for e in self.edges if e.source == node_id or e.target == node_id]


def score_candidates(nodes: Sequence[SkillNode], config: CorrelationConfig = DEFAULT_CONFIG) -> List[Edge]:
    out: List[Edge] = []
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            a, b = nodes[i], nodes[j]
            result = edge_score(a, b, config)
            if result.score < config.candidate_threshold:
                continue
            out.append(Edge(
                id=f"edge-{a.id}-{b.id}",
                source=a.id,
                target=b.id,
                weight=round_half_up(result.score, config.weight_precision),
                shared_categories=result.shared_categories,
                shared_themes=result.shared_themes,
                cross_domain=result.cross_domain,
            ))
    return out


def _bridge_edge(source: str, target: str, result: PairScore, config: CorrelationConfig) -> Edge:
    key = pair_key(source, target)
    return Edge(
        id="bridge-" + key.replace("|", "-", 1),
        source=source,
        target=target,
        weight=round_half_up(max(config.min_bridge_weight, result.score), config.weight_precision),
        shared_categories=result.shared_categories,
        shared_themes=result.shared_themes,
        cross_domain=result.cross_domain,
        bridge=True,
    )


def _best_pair(
    left: Sequence[str],
    right: Sequence[str],
    by_id: Dict[str, SkillNode],
    taken: Set[str],
    config: CorrelationConfig,
    threshold: Optional[float],
) -> Optional[Tuple[float, str, str, PairScore]]:
    best = None
    for source in left:
        for target in right:
            if pair_key(source, target) in taken:
                continue
            result = edge_score(by_id[source], by_id[target], config)
            if threshold is not None and result.score < threshold:
                continue
            if best is None or result.score > best[0]:
                best = (result.score, source, target, result)
    return best


def connect_components(
    nodes: Sequence[SkillNode],
    edge_set: _EdgeSet,
    config: CorrelationConfig = DEFAULT_CONFIG,
) -> int:
    """Add bridge edges until the graph is a single component; returns bridges added.

    Each round either adds the best cross-component pair scoring at least
    ``bridge_threshold`` or, failing that, force-links the first component to
    every other one. Every round merges components, so the loop terminates.
    """
    by_id = {n.id: n for n in nodes}
    node_ids = [n.id for n in nodes]
    components = find_connected_components(node_ids, edge_set.edges)
    added = 0

    while len(components) > 1:
        best = None
        for ci in range(len(components)):
            for cj in range(ci + 1, len(components)):
                found = _best_pair(components[ci], components[cj], by_id, edge_set.pairs,
                                   config, config.bridge_threshold)
                if found and (best is None or found[0] > best[0]):
                    best = found

        if best is not None:
            _, source, target, result = best
            edge_set.add(_bridge_edge(source, target, result, config))
            added += 1
        else:
            base, *rest = components
            logger.debug("[correlate] no bridge above %.2f, forcing %d link(s)",
                         config.bridge_threshold, len(rest))
            for other in rest:
                forced = _best_pair(base, other, by_id, edge_set.pairs, config, None)
                if forced is None:
                    continue
                _, source, target, result = forced
                if edge_set.add(_bridge_edge(source, target, result, config)):
                    added += 1

        previous = len(components)
        components = find_connected_components(node_ids, edge_set.edges)
        if len(components) >= previous:
            logger.error("[correlate] bridging made no progress; %d components remain", len(components))
            break

    return added


def build_edges(nodes: Sequence[SkillNode], config: CorrelationConfig = DEFAULT_CONFIG) -> List[Edge]:
    """Select the final edge list for ``nodes``.

    The returned edges form a single connected component over all nodes (when
    there are any) and hold at most one edge per unordered node pair.
    """
    if len(nodes) < 2:
        return []

    candidates = score_candidates(nodes, config)
    per_node: Dict[str, List[Edge]] = {n.id: [] for n in nodes}
    for e in candidates:
        per_node[e.source].append(e)
        per_node[e.target].append(e)

    keep: Set[str] = set()
    for edges_for_node in per_node.values():
        for e in _by_weight(edges_for_node)[: config.max_edges_per_node]:
            keep.add(e.id)
    edge_set = _EdgeSet(e for e in candidates if e.id in keep)

    for node in nodes:
        degree = len(edge_set.touching(node.id))
        if degree >= config.min_degree:
            continue
        for e in _by_weight(per_node[node.id]):
            if degree >= config.min_degree:
                break
            if edge_set.add(e):
                degree += 1

    for node in nodes:
        weak = sum(1 for e in edge_set.touching(node.id) if _is_weak_tie(e))
        if weak >= config.min_cross_theme_links:
            continue
        for e in _by_weight(e for e in per_node[node.id] if _is_weak_tie(e)):
            if weak >= config.min_cross_theme_links:
                break
            if edge_set.add(e):
                weak += 1

    connected: Set[str] = set()
    for e in edge_set.edges:
        connected.update((e.source, e.target))
    for node in nodes:
        if node.id in connected:
            continue
        ranked = _by_weight(per_node[node.id])
        if ranked and edge_set.add(ranked[0]):
            connected.update((ranked[0].source, ranked[0].target))

    bridges = connect_components(nodes, edge_set, config)
    logger.debug("[correlate] %d candidates, %d kept, %d bridges",
                 len(candidates), len(edge_set.edges) - bridges, bridges)
    return edge_set.edges
