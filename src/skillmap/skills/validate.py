from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, List

from skillmap.skills.models import DOMAINS


@dataclass
class ValidationReport:
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value.strip())


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value


def _validate_domain(report: ValidationReport, domain: str, value: Any):
    if not isinstance(value, list):
        report.errors.append(f"skills.{domain} must be an array.")
        return

    for ci, category in enumerate(value):
        prefix = f"skills.{domain}[{ci}]"
        if not isinstance(category, dict):
            report.errors.append(f"{prefix} must be an object.")
            continue
        if not _non_empty_str(category.get("category")):
            report.errors.append(f"{prefix}.category must be a non-empty string.")

        items = category.get("items")
        if isinstance(items, str):
            report.warnings.append(f"{prefix}.items is a comma-separated string; an array is preferred.")
            continue
        if not isinstance(items, list):
            report.errors.append(f"{prefix}.items must be an array.")
            continue
        if not items:
            report.warnings.append(f"{prefix}.items is empty.")

        for ii, item in enumerate(items):
            ip = f"{prefix}.items[{ii}]"
            if isinstance(item, str):
                if not item.strip():
                    report.errors.append(f"{ip} string skill must be non-empty.")
                continue
            if not isinstance(item, dict):
                report.errors.append(f"{ip} must be a string or object.")
                continue
            if not _non_empty_str(item.get("name")):
                report.errors.append(f"{ip}.name must be a non-empty string.")
            level = item.get("level")
            if level is None:
                continue
            if not _is_number(level):
                report.errors.append(f"{ip}.level must be a number between 1 and 10.")
            elif level < 1 or level > 10:
                report.errors.append(f"{ip}.level must be between 1 and 10.")


def validate_skills_document(document: Any) -> ValidationReport:
    """Diagnose the ``skills`` section of a portfolio document. Never raises."""
    report = ValidationReport()
    if not isinstance(document, dict):
        report.errors.append("document must be an object.")
        return report
    skills = document.get("skills")
    if not isinstance(skills, dict):
        report.errors.append("skills must be an object.")
        return report
    for domain in DOMAINS:
        _validate_domain(report, domain, skills.get(domain))
    return report
