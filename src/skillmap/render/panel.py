from __future__ import annotations
from html import escape as _esc
from typing import Optional

import bleach
import markdown as _md

from skillmap.skills.models import SkillGraph
from skillmap.skills.query import correlated_skills, domain_labels
from skillmap.skills.themes import THEME_RULES, theme_label

_ALLOWED_TAGS = bleach.sanitizer.ALLOWED_TAGS.union({
    "p", "h2", "h3", "h4", "ul", "ol", "li", "em", "strong", "code", "br", "hr",
    "table", "thead", "tbody", "tr", "th", "td", "span", "div",
})
_ALLOWED_ATTRS = {
    **bleach.sanitizer.ALLOWED_ATTRIBUTES,
    "span": ["class"],
    "div": ["class"],
}


def _cell(text: str) -> str:
    return _esc(text).replace("|", "\\|")


def md_to_html(text: str) -> str:
    html = _md.markdown(text or "", extensions=["tables"])
    return bleach.clean(html, tags=_ALLOWED_TAGS, attributes=_ALLOWED_ATTRS, strip=True)


def panel_markdown(graph: SkillGraph, active_node_id: Optional[str], top_n: int = 8) -> str:
    """Side panel: graph summary + legend, or the active skill and its correlations."""
    node = graph.node_by_id().get(active_node_id) if active_node_id else None

    if node is None:
        lines = [
            f"**{len(graph.nodes)} skills** · **{len(graph.edges)} correlations**",
            "",
            "#### Themes",
        ]
        lines += [f"- {t.label} `{t.color}`" for t in THEME_RULES]
        return "\n".join(lines)

    lines = [
        "Selected Skill",
        "",
        f"## {_esc(node.label)}",
        "",
        " · ".join(f"`{d}`" for d in domain_labels(node)),
        "",
    ]
    if node.level is not None:
        lines += [f"Proficiency score: {node.level:g}/10", ""]
    lines += ["#### Themes", ", ".join(theme_label(t) for t in node.themes), ""]
    lines += ["_Clear focus: click the skill again, click empty space, or press **Reset Focus**._", ""]

    matches = correlated_skills(graph, node.id, limit=top_n)
    lines.append("#### Correlated Skills")
    if not matches:
        lines.append("_No correlations._")
    else:
        lines += ["", "| Skill | Why | Score |", "|---|---|---|"]
        for m in matches:
            lines.append(f"| {_cell(m.label)} | {_cell(m.reason)} | {m.weight:.1f} |")
    return "\n".join(lines)


def panel_html(graph: SkillGraph, active_node_id: Optional[str], top_n: int = 8) -> str:
    return md_to_html(panel_markdown(graph, active_node_id, top_n))
