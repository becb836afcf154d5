# src/skillmap/skills/themes.py
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Dict, Iterable, List, Pattern, Sequence, Tuple

FALLBACK_THEME = "execution"
DEFAULT_COLOR = "#4a90e2"


@dataclass(frozen=True)
class Theme:
    id: str
    label: str
    color: str
    patterns: Tuple[Pattern[str], ...]

    def matches(self, text: str) -> bool:
        return any(p.search(text) for p in self.patterns)


def _theme(id: str, label: str, color: str, patterns: Iterable[str]) -> Theme:
    return Theme(id, label, color, tuple(re.compile(p, re.IGNORECASE) for p in patterns))


# Order matters: the first match becomes the node's primary theme (its color).
THEME_RULES: Tuple[Theme, ...] = (
    _theme("strategy", "Strategy", "#2c5282",
           [r"roadmap", r"priorit", r"\bokr", r"market", r"product", r"stakeholder", r"vision"]),
    _theme("execution", "Execution", "#4a90e2",
           [r"agile", r"planning", r"team", r"documentation", r"reporting", r"critical",
            r"continuous learning", r"presentation"]),
    _theme("ai_ml", "AI / ML", "#6f58c9",
           [r"llm", r"\brag\b", r"tensorflow", r"pytorch", r"keras", r"scikit", r"xgboost",
            r"langchain", r"hugging", r"mlflow", r"model"]),
    _theme("data", "Data Systems", "#14919b",
           [r"data", r"\bsql\b", r"mongodb", r"analytics", r"bigquery", r"spark", r"hadoop",
            r"tableau", r"powerbi", r"plotly", r"matplotlib", r"seaborn", r"excel"]),
    _theme("engineering", "Engineering", "#257179",
           [r"python", r"\bbash\b", r"\bc#\b", r"\bjava\b", r"c\+\+", r"fastapi", r"flask",
            r"pytest", r"selenium", r"docker", r"kubernetes", r"ci/cd", r"git", r"postman",
            r"html", r"css", r"xaml", r"matlab", r"\.net"]),
    _theme("cloud", "Cloud & Platform", "#ef5675",
           [r"\baws\b", r"\bgcp\b", r"cloud", r"databricks", r"ec2", r"lambda", r"redshift",
            r"s3", r"dynamodb"]),
    _theme("governance", "Governance", "#ffa600",
           [r"ethic", r"regulatory", r"fda", r"iso", r"medical", r"healthcare"]),
    _theme("experimentation", "Experimentation", "#bc5090",
           [r"a/b", r"evaluation", r"user research", r"root cause", r"\bkpi"]),
)

THEME_BY_ID: Dict[str, Theme] = {t.id: t for t in THEME_RULES}


def theme_color(theme_id: str) -> str:
    theme = THEME_BY_ID.get(theme_id)
    return theme.color if theme else DEFAULT_COLOR


def theme_label(theme_id: str) -> str:
    theme = THEME_BY_ID.get(theme_id)
    return theme.label if theme else theme_id


def infer_themes(
    label: str,
    categories: Sequence[str],
    rules: Sequence[Theme] = THEME_RULES,
    fallback: str = FALLBACK_THEME,
) -> Tuple[str, ...]:
    """Theme ids matching the label plus its category labels, in rule order.

    Never empty: a skill nothing matches gets ``(fallback,)``.
    """
    text = f"{label} {' '.join(categories)}".lower()
    matched: List[str] = []
    for theme in rules:
        if theme.id not in matched and theme.matches(text):
            matched.append(theme.id)
    return tuple(matched) if matched else (fallback,)
