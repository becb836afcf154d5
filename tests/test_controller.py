from __future__ import annotations

import pytest

from skillmap.interaction.controller import InteractionController, hit_test
from skillmap.layout.projection import ProjectedNode, project_node
from skillmap.skills.service import build_graph_state

BACKGROUND = (5.0, 5.0)


def _front(ctrl):
    """Front-most node and a drag delta pointing toward the canvas center."""
    p = ctrl.frame[-1]
    dx = 30.0 if p.x < ctrl.layout.width / 2 else -30.0
    dy = 20.0 if p.y < ctrl.layout.height / 2 else -20.0
    return p, dx, dy


class TestHitTest:
    def test_front_most_wins(self):
        frame = [
            ProjectedNode("back", 100, 100, -0.5, 1, 10, 1),
            ProjectedNode("front", 105, 100, 0.5, 1, 10, 1),
        ]
        assert hit_test(frame, 102, 100) == "front"
        assert hit_test(frame, 92, 100) == "back"
        assert hit_test(frame, 300, 300) is None

    def test_active_ring_extends_hit_area(self):
        frame = [ProjectedNode("a", 0, 0, 0, 1, 10, 1)]
        assert hit_test(frame, 12, 0) is None
        assert hit_test(frame, 12, 0, active_node_id="a") == "a"


class TestPan:
    def test_background_drag_pans(self, controller):
        assert controller.node_at(*BACKGROUND) is None
        controller.pointer_down(*BACKGROUND)
        assert controller.view.mode == "panning"
        controller.pointer_move(55.0, 35.0)
        assert (controller.view.viewport.tx, controller.view.viewport.ty) == (50.0, 30.0)
        controller.pointer_up()
        assert controller.view.mode == "idle"

    def test_click_after_pan_is_swallowed(self, controller):
        p, _, _ = _front(controller)
        controller.toggle_lock(p.id)
        controller.pointer_down(*BACKGROUND)
        controller.pointer_move(40.0, 40.0)
        controller.pointer_up()
        assert controller.click(*BACKGROUND) == p.id
        # the next click is a real one
        assert controller.click(*BACKGROUND) is None

    def test_other_pointer_ignored(self, controller):
        controller.pointer_down(*BACKGROUND, pointer_id=1)
        controller.pointer_move(80.0, 80.0, pointer_id=2)
        assert controller.view.viewport.tx == 0.0
        controller.pointer_up(pointer_id=2)
        assert controller.view.mode == "panning"
        controller.pointer_cancel(pointer_id=1)
        assert controller.view.mode == "idle"

    def test_non_primary_pointer_ignored(self, controller):
        assert controller.pointer_down(*BACKGROUND, is_primary=False) is None
        assert controller.view.mode == "idle"


class TestNodeDrag:
    def test_drag_pins_node(self, controller):
        p, dx, dy = _front(controller)
        assert controller.pointer_down(p.x, p.y) == p.id
        assert controller.view.mode == "dragging"
        assert controller.view.dragging_node_id == p.id
        controller.pointer_move(p.x + dx, p.y + dy)
        assert controller.view.manual_positions[p.id] == pytest.approx((p.x + dx, p.y + dy))
        pinned = controller.projected(p.id)
        assert pinned.pinned
        assert (pinned.x, pinned.y) == pytest.approx((p.x + dx, p.y + dy))
        controller.pointer_up()
        assert controller.view.dragging_node_id is None

    def test_pinned_node_ignores_time(self, controller):
        p, dx, dy = _front(controller)
        controller.pointer_down(p.x, p.y)
        controller.pointer_move(p.x + dx, p.y + dy)
        controller.pointer_up()
        controller.tick(60000)
        moved = controller.projected(p.id)
        assert (moved.x, moved.y) == pytest.approx((p.x + dx, p.y + dy))

    def test_drag_clamped_to_padded_canvas(self, controller):
        p, _, _ = _front(controller)
        controller.pointer_down(p.x, p.y)
        controller.pointer_move(p.x - 5000, p.y + 5000)
        assert controller.view.manual_positions[p.id] == (90, 1024 - 90)

    def test_drop_does_not_toggle_lock(self, controller):
        p, dx, dy = _front(controller)
        controller.pointer_down(p.x, p.y)
        controller.pointer_move(p.x + dx, p.y + dy)
        controller.pointer_up()
        assert controller.click(p.x + dx, p.y + dy) is None
        assert controller.view.locked_node_id is None

    def test_drag_in_zoomed_view_follows_world_delta(self, controller):
        controller.zoom(2.0, anchor=(0.0, 0.0))
        p, dx, dy = _front(controller)
        sx, sy = controller.view.viewport.world_to_screen(p.x, p.y)
        controller.pointer_down(sx, sy)
        controller.pointer_move(sx + dx, sy + dy)
        assert controller.view.manual_positions[p.id] == pytest.approx((p.x + dx / 2, p.y + dy / 2))

    def test_reset_layout_returns_to_projection(self, controller):
        p, dx, dy = _front(controller)
        controller.pointer_down(p.x, p.y)
        controller.pointer_move(p.x + dx, p.y + dy)
        controller.pointer_up()
        controller.reset_layout()
        assert controller.view.manual_positions == {}
        expected = project_node(controller.layout, p.id, controller.view.elapsed_ms, config=controller.projection)
        assert controller.projected(p.id) == expected


class TestFocus:
    def test_click_toggles_lock(self, controller):
        p, _, _ = _front(controller)
        assert controller.click(p.x, p.y) == p.id
        assert controller.active_node_id == p.id
        assert controller.click(p.x, p.y) is None

    def test_background_click_clears_lock(self, controller):
        p, _, _ = _front(controller)
        controller.toggle_lock(p.id)
        assert controller.click(*BACKGROUND) is None

    def test_lock_beats_hover(self, controller):
        a, b = controller.frame[-1].id, controller.frame[0].id
        controller.toggle_lock(a)
        controller.pointer_enter(b)
        assert controller.active_node_id == a
        controller.reset_focus()
        assert controller.active_node_id == b
        controller.pointer_leave()
        assert controller.active_node_id is None

    def test_unknown_node_ignored(self, controller):
        assert controller.toggle_lock("skill-nope") is None
        controller.pointer_enter("skill-nope")
        assert controller.view.hovered_node_id is None

    def test_highlight_sets(self, controller):
        p, _, _ = _front(controller)
        controller.toggle_lock(p.id)
        neighbors = controller.highlighted_node_ids()
        edges = controller.highlighted_edge_ids()
        assert p.id in neighbors
        assert len(neighbors) == controller.degrees[p.id] + 1
        assert len(edges) == controller.degrees[p.id]

    def test_no_highlight_when_idle(self, controller):
        assert controller.highlighted_node_ids() == set()
        assert controller.highlighted_edge_ids() == set()


class TestZoomControls:
    def test_buttons(self, controller):
        assert controller.zoom_in().scale == pytest.approx(1.12)
        controller.reset_view()
        assert controller.zoom_out().scale == pytest.approx(0.88)

    def test_wheel_zooms_at_cursor(self, controller):
        before = controller.screen_to_world(300.0, 420.0)
        vp = controller.wheel(-120, 300.0, 420.0)
        assert vp.scale == pytest.approx(1.1)
        assert controller.screen_to_world(300.0, 420.0) == pytest.approx(before)
        assert controller.wheel(120, 300.0, 420.0).scale == pytest.approx(0.99)

    def test_reset_view(self, controller):
        controller.zoom_in()
        controller.pointer_down(*BACKGROUND)
        controller.pointer_move(100.0, 100.0)
        controller.pointer_up()
        controller.reset_view()
        assert controller.view.viewport.scale == 1.0
        assert (controller.view.viewport.tx, controller.view.viewport.ty) == (0.0, 0.0)


class TestTickAndRebind:
    def test_tick_reprojects_without_rebuilding(self, controller):
        graph, layout = controller.graph, controller.layout
        first = list(controller.frame)
        controller.tick(20000)
        assert controller.graph is graph
        assert controller.layout is layout
        assert controller.frame != first

    def test_rebind_keeps_surviving_state(self, controller, sample_doc):
        p, dx, dy = _front(controller)
        controller.pointer_down(p.x, p.y)
        controller.pointer_move(p.x + dx, p.y + dy)
        controller.pointer_up()
        controller.toggle_lock(p.id)

        controller.rebind(build_graph_state(sample_doc, width=1024, height=1024))
        assert controller.view.locked_node_id == p.id
        assert controller.view.manual_positions[p.id] == pytest.approx((p.x + dx, p.y + dy))

    def test_rebind_drops_missing_nodes(self, controller):
        p, dx, dy = _front(controller)
        controller.pointer_down(p.x, p.y)
        controller.pointer_move(p.x + dx, p.y + dy)
        controller.pointer_up()
        controller.toggle_lock(p.id)

        other = {"skills": {"technical": [{"category": "X", "items": ["Zig", "Elixir"]}]}}
        controller.rebind(build_graph_state(other, width=1024, height=1024))
        assert controller.view.locked_node_id is None
        assert controller.view.manual_positions == {}
        assert {n.id for n in controller.graph.nodes} == {"skill-zig", "skill-elixir"}

    def test_empty_graph(self):
        ctrl = InteractionController(build_graph_state({}, width=1024, height=1024))
        assert ctrl.tick(100) == []
        assert ctrl.click(500.0, 500.0) is None
