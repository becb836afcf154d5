from __future__ import annotations
import math
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

DOMAINS: Tuple[str, ...] = ("nontechnical", "technical")

DOMAIN_META: Dict[str, Dict[str, str]] = {
    "nontechnical": {"label": "Product Leadership & Strategy", "short": "Leadership"},
    "technical": {"label": "Technical Foundation", "short": "Technical"},
}


# --- input document (lenient: malformed parts collapse to empty) ---

class SkillRecord(BaseModel):
    name: str = ""
    level: Optional[float] = Field(None, description="Self-rated proficiency, 1-10")

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, v: Any) -> str:
        return v.strip() if isinstance(v, str) else ""

    @field_validator("level", mode="before")
    @classmethod
    def _level(cls, v: Any) -> Optional[float]:
        if isinstance(v, bool) or not isinstance(v, (int, float)):
            return None
        try:
            level = float(v)
        except OverflowError:
            return None
        return level if math.isfinite(level) else None


class SkillCategory(BaseModel):
    category: Optional[str] = None
    items: List[SkillRecord] = Field(default_factory=list)

    @field_validator("category", mode="before")
    @classmethod
    def _category(cls, v: Any) -> Optional[str]:
        if isinstance(v, str) and v.strip():
            return v.strip()
        return None

    @field_validator("items", mode="before")
    @classmethod
    def _items(cls, v: Any) -> list:
        # "Python, SQL, Docker" is accepted as shorthand for a list
        if isinstance(v, str):
            v = [seg.strip() for seg in v.split(",") if seg.strip()]
        if not isinstance(v, (list, tuple)):
            return []
        out = []
        for item in v:
            if isinstance(item, str):
                out.append({"name": item})
            elif isinstance(item, (dict, SkillRecord)):
                out.append(item)
        return out


class SkillsSection(BaseModel):
    nontechnical: List[SkillCategory] = Field(default_factory=list)
    technical: List[SkillCategory] = Field(default_factory=list)

    @field_validator("nontechnical", "technical", mode="before")
    @classmethod
    def _domain(cls, v: Any) -> list:
        if not isinstance(v, (list, tuple)):
            return []
        # keep positions so fallback labels ("<domain> 3") stay stable
        return [c if isinstance(c, (dict, SkillCategory)) else {} for c in v]


class SkillsDocument(BaseModel):
    skills: SkillsSection = Field(default_factory=SkillsSection)

    @field_validator("skills", mode="before")
    @classmethod
    def _skills(cls, v: Any) -> Any:
        return v if isinstance(v, (dict, SkillsSection)) else {}


# --- derived graph (immutable, rebuilt per document) ---

class SkillNode(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Stable id, e.g. 'skill-machine-learning'")
    key: str = Field(..., description="Normalized dedup key")
    label: str
    domains: Tuple[str, ...] = ()
    categories: Tuple[str, ...] = ()
    themes: Tuple[str, ...] = ()
    primary_theme: str = "execution"
    level: Optional[float] = None


class Edge(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    source: str
    target: str
    weight: float
    shared_categories: Tuple[str, ...] = ()
    shared_themes: Tuple[str, ...] = ()
    cross_domain: bool = False
    bridge: bool = False

    def other(self, node_id: str) -> str:
        return self.target if self.source == node_id else self.source


class SkillGraph(BaseModel):
    model_config = ConfigDict(frozen=True)

    nodes: Tuple[SkillNode, ...] = ()
    edges: Tuple[Edge, ...] = ()
    component_count: int = 0

    def node_by_id(self) -> Dict[str, SkillNode]:
        return {n.id: n for n in self.nodes}

    def adjacency(self) -> Dict[str, List[Edge]]:
        adj: Dict[str, List[Edge]] = {n.id: [] for n in self.nodes}
        for e in self.edges:
            adj.setdefault(e.source, []).append(e)
            adj.setdefault(e.target, []).append(e)
        return adj

    def degrees(self) -> Dict[str, int]:
        return {nid: len(edges) for nid, edges in self.adjacency().items()}
