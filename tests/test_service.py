from __future__ import annotations

import json
from dataclasses import replace

from skillmap.skills.service import build_graph_state, graph_to_dict
from skillmap.utils.config import CorrelationConfig, _correlation_from_env


class TestBuildGraphState:
    def test_memoized_for_equal_documents(self, sample_doc):
        first = build_graph_state(sample_doc, width=1024, height=1024)
        second = build_graph_state(json.loads(json.dumps(sample_doc)), width=1024, height=1024)
        assert first is second

    def test_ignores_non_skill_fields(self, sample_doc):
        first = build_graph_state(sample_doc, width=1024, height=1024)
        second = build_graph_state({**sample_doc, "name": "Somebody Else"}, width=1024, height=1024)
        assert first is second

    def test_new_state_for_changed_inputs(self, sample_doc, shared_python_doc):
        base = build_graph_state(sample_doc, width=1024, height=1024)
        assert build_graph_state(shared_python_doc, width=1024, height=1024) is not base
        assert build_graph_state(sample_doc, width=800, height=600) is not base
        tuned = replace(CorrelationConfig(), max_edges_per_node=3)
        assert build_graph_state(sample_doc, config=tuned, width=1024, height=1024) is not base

    def test_malformed_document_is_empty_graph(self):
        for doc in (None, [], "x", {"skills": 3}, {"skills": {"technical": "nope"}}):
            state = build_graph_state(doc, width=1024, height=1024)
            assert state.graph.nodes == ()
            assert state.graph.edges == ()

    def test_layout_covers_every_node(self, sample_state):
        ids = {n.id for n in sample_state.graph.nodes}
        assert set(sample_state.layout.slots) == ids
        assert set(sample_state.layout.base_positions) == ids
        assert set(sample_state.layout.radii) == ids


class TestGraphToDict:
    def test_shape(self, sample_state):
        data = graph_to_dict(sample_state)
        assert data["width"] == data["height"] == 1024
        assert data["component_count"] == 1
        assert len(data["nodes"]) == len(sample_state.graph.nodes)
        node = data["nodes"][0]
        assert {"id", "label", "themes", "degree", "radius", "sphere", "base_position"} <= set(node)
        json.dumps(data)


class TestCorrelationEnv:
    def test_empty_uses_defaults(self):
        assert _correlation_from_env("") == CorrelationConfig()

    def test_overrides(self):
        config = _correlation_from_env('{"max_edges_per_node": 4, "bridge_threshold": "0.5"}')
        assert config.max_edges_per_node == 4
        assert config.bridge_threshold == 0.5

    def test_bad_input_falls_back(self, caplog):
        assert _correlation_from_env("{oops") == CorrelationConfig()
        assert _correlation_from_env("[1]") == CorrelationConfig()
        assert _correlation_from_env('{"nope": 1}') == CorrelationConfig()
        assert "unknown correlation setting" in caplog.text
