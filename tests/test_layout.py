from __future__ import annotations

import math

import pytest

from skillmap.layout.hashing import hash_number
from skillmap.layout.projection import (
    DEFAULT_PROJECTION,
    depth_opacity,
    project_frame,
    project_node,
    rotate,
)
from skillmap.layout.sphere import (
    Point3,
    build_float_meta,
    build_sphere_layout,
    fibonacci_slots,
    node_radius,
    order_by_hash,
)
from skillmap.skills.models import SkillGraph, SkillNode
from skillmap.skills.service import build_correlation_graph


def _graph(labels):
    nodes = tuple(SkillNode(id=f"skill-{x}", key=x, label=x) for x in labels)
    return SkillGraph(nodes=nodes, edges=(), component_count=len(nodes))


class TestHashNumber:
    @pytest.mark.parametrize("value, expected", [
        ("", 0),
        ("a", 97),
        ("ab", 3105),
        ("abc", 96354),
        ("hello", 99162322),
    ])
    def test_known_values(self, value, expected):
        assert hash_number(value) == expected

    def test_wraps_to_int32_and_is_non_negative(self):
        h = hash_number("skill-machine-learning-and-a-very-long-label")
        assert 0 <= h <= 2 ** 31

    def test_utf16_code_units(self):
        # astral characters hash as two surrogate units
        assert hash_number("\U0001F600") == abs(((0xD83D * 31) + 0xDE00))


class TestFibonacciSlots:
    def test_empty_and_single(self):
        assert fibonacci_slots([]) == {}
        assert fibonacci_slots(["a"]) == {"a": Point3(0.0, 0.0, 1.0)}

    def test_unit_sphere(self):
        slots = fibonacci_slots([f"n{i}" for i in range(25)])
        for p in slots.values():
            assert math.sqrt(p.x ** 2 + p.y ** 2 + p.z ** 2) == pytest.approx(1.0)

    def test_y_descends(self):
        slots = fibonacci_slots(["a", "b", "c", "d"])
        ys = [slots[k].y for k in "abcd"]
        assert ys == sorted(ys, reverse=True)
        assert ys[0] == pytest.approx(0.75)


class TestSphereLayout:
    def test_order_independent_of_document_order(self):
        forward = build_sphere_layout(_graph(["a", "b", "c", "d"]))
        backward = build_sphere_layout(_graph(["d", "c", "b", "a"]))
        assert forward.slots == backward.slots
        assert forward.base_positions == backward.base_positions

    def test_order_by_hash(self):
        graph = _graph(["a", "b", "c"])
        ordered = order_by_hash(graph.nodes)
        hashes = [hash_number(n.id) for n in ordered]
        assert hashes == sorted(hashes)

    def test_base_positions_around_center(self):
        layout = build_sphere_layout(_graph(["a"]), 1000, 800)
        assert layout.base_positions["skill-a"] == pytest.approx((500.0, 400.0))

    def test_float_meta_ranges(self, sample_doc):
        graph = build_correlation_graph(sample_doc["skills"])
        for meta in build_float_meta(graph.nodes).values():
            assert 0.0001 <= meta.speed < 0.00017
            assert 0 <= meta.phase_a < 2 * math.pi
            assert 0 <= meta.phase_b < 2 * math.pi

    def test_node_radius(self):
        assert node_radius(None) == pytest.approx(5 + 0.6 * 8)
        assert node_radius(10) == pytest.approx(13.0)
        assert node_radius(25) == pytest.approx(13.0)
        assert node_radius(0) == pytest.approx(5.0)


class TestProjection:
    @pytest.fixture
    def layout(self, sample_doc):
        return build_sphere_layout(build_correlation_graph(sample_doc["skills"]), 1024, 1024)

    def test_rotate_preserves_length(self):
        p = rotate(Point3(0.3, -0.4, math.sqrt(1 - 0.25)), 12345.0)
        assert math.sqrt(p.x ** 2 + p.y ** 2 + p.z ** 2) == pytest.approx(1.0)

    def test_depth_opacity_bounds(self):
        assert depth_opacity(-1) == pytest.approx(0.76)
        assert depth_opacity(1) == 1.0
        assert depth_opacity(-5) == 0.45

    def test_within_padded_canvas(self, layout):
        pad = DEFAULT_PROJECTION.padding
        for t in (0, 1000, 50000, 777777):
            for p in project_frame(layout, list(layout.slots), t):
                assert pad <= p.x <= layout.width - pad
                assert pad <= p.y <= layout.height - pad
                assert p.radius >= DEFAULT_PROJECTION.min_render_radius

    def test_paint_order_back_to_front(self, layout):
        frame = project_frame(layout, list(layout.slots), 4200)
        depths = [p.depth for p in frame]
        assert depths == sorted(depths)

    def test_pure_function_of_time(self, layout):
        nid = next(iter(layout.slots))
        assert project_node(layout, nid, 900) == project_node(layout, nid, 900)
        assert project_node(layout, nid, 900) != project_node(layout, nid, 9000)

    def test_override_pins_node(self, layout):
        nid = next(iter(layout.slots))
        p = project_node(layout, nid, 5000, override=(200.0, 300.0))
        assert (p.x, p.y, p.depth, p.scale, p.opacity, p.pinned) == (200.0, 300.0, 1.0, 1.0, 1.0, True)
        assert p.radius == max(DEFAULT_PROJECTION.min_render_radius, layout.radii[nid])
