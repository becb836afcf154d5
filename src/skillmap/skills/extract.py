import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

from pydantic import ValidationError

from skillmap.skills.models import DOMAIN_META, DOMAINS, SkillNode, SkillsDocument, SkillsSection
from skillmap.skills.themes import infer_themes
from skillmap.utils.numeric import round_half_up

logger = logging.getLogger(__name__)

_NON_WORD = re.compile(r"[^\w\s]")
_SPACES = re.compile(r"\s+")


def normalize_key(value: str) -> str:
    """Dedup key: lowercase, punctuation to spaces, whitespace collapsed."""
    return _SPACES.sub(" ", _NON_WORD.sub(" ", value.lower())).strip()


def node_id_for_key(key: str) -> str:
    return "skill-" + _SPACES.sub("-", key)


@dataclass
class _Accumulated:
    id: str
    key: str
    label: str
    domains: List[str] = field(default_factory=list)
    categories: List[str] = field(default_factory=list)
    levels: List[float] = field(default_factory=list)

    def add(self, domain: str, category: str, level):
        if domain not in self.domains:
            self.domains.append(domain)
        if category not in self.categories:
            self.categories.append(category)
        if level is not None:
            self.levels.append(level)


def coerce_skills_section(raw: Any) -> SkillsSection:
    """Turn whatever the document holds under ``skills`` into a SkillsSection.

    Never raises; anything unusable becomes empty.
    """
    if isinstance(raw, SkillsSection):
        return raw
    if not isinstance(raw, dict):
        if raw is not None:
            logger.warning("[extract] skills section is %s, expected an object", type(raw).__name__)
        return SkillsSection()
    try:
        return SkillsSection.model_validate(raw)
    except ValidationError as e:
        logger.warning("[extract] skills section unreadable, treating as empty: %s", e)
        return SkillsSection()


def coerce_document(raw: Any) -> SkillsDocument:
    if isinstance(raw, SkillsDocument):
        return raw
    if not isinstance(raw, dict):
        return SkillsDocument()
    return SkillsDocument(skills=coerce_skills_section(raw.get("skills")))


def collect_skill_nodes(skills: Union[SkillsSection, Dict[str, Any], None]) -> List[SkillNode]:
    """Flatten both domains into unique, theme-tagged nodes (document order)."""
    section = coerce_skills_section(skills)
    acc: Dict[str, _Accumulated] = {}

    for domain in DOMAINS:
        for index, category in enumerate(getattr(section, domain)):
            category_label = category.category or f"{DOMAIN_META[domain]['label']} {index + 1}"
            for record in category.items:
                if not record.name:
                    continue
                key = normalize_key(record.name)
                if not key:
                    logger.debug("[extract] dropped skill without usable characters: %r", record.name)
                    continue
                if key not in acc:
                    acc[key] = _Accumulated(id=node_id_for_key(key), key=key, label=record.name)
                acc[key].add(domain, category_label, record.level)

    nodes = []
    for entry in acc.values():
        themes = infer_themes(entry.label, entry.categories)
        level = None
        if entry.levels:
            level = round_half_up(sum(entry.levels) / len(entry.levels), 1)
        nodes.append(SkillNode(
            id=entry.id,
            key=entry.key,
            label=entry.label,
            domains=tuple(entry.domains),
            categories=tuple(entry.categories),
            themes=themes,
            primary_theme=themes[0],
            level=level,
        ))
    return nodes


def load_skills_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a portfolio JSON document from disk.

    A missing file propagates ``FileNotFoundError``; bad JSON becomes ``ValueError``.
    """
    text = Path(path).read_text(encoding="utf-8")
    try:
        obj = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError(f"Failed to parse skills document {path}: {e}") from e
    if not isinstance(obj, dict):
        raise ValueError(f"Skills document {path} must be a JSON object, got {type(obj).__name__}")
    return obj
