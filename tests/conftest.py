"""Shared sample documents for the skillmap tests."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from skillmap.interaction.controller import InteractionController
from skillmap.skills.service import build_graph_state, clear_cache

SAMPLE_PATH = Path(__file__).resolve().parents[1] / "data" / "portfolio-data.json"


@pytest.fixture(autouse=True)
def _fresh_cache():
    clear_cache()
    yield
    clear_cache()


@pytest.fixture
def shared_python_doc():
    """Python appears in both domains under different categories."""
    return {
        "skills": {
            "technical": [{"category": "A", "items": ["Python", "SQL"]}],
            "nontechnical": [{"category": "B", "items": ["Python", "Leadership"]}],
        }
    }


@pytest.fixture
def split_clusters_doc():
    """Two tight clusters with nothing in common across them."""
    return {
        "skills": {
            "nontechnical": [{"category": "Alpha", "items": ["Roadmapping", "Stakeholder Management"]}],
            "technical": [{"category": "Beta", "items": ["SQL", "MongoDB"]}],
        }
    }


@pytest.fixture
def sample_doc():
    return json.loads(SAMPLE_PATH.read_text(encoding="utf-8"))


@pytest.fixture
def sample_state(sample_doc):
    return build_graph_state(sample_doc, width=1024, height=1024)


@pytest.fixture
def controller(sample_state):
    ctrl = InteractionController(sample_state, min_zoom=0.75, max_zoom=2.6, padding=90)
    ctrl.tick(0)
    return ctrl
