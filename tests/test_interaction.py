"""
Module: test_interaction.py

Author: Michael Economou
Date: 2026-02-08

Tests for the InteractionSession gesture state machine: connecting,
dragging, panning, zooming, keyboard handling and palette drops.
"""

import pytest

from flowcanvas.config import ZOOM_MAX
from flowcanvas.core.interaction import (
    ConnectingFrom,
    Dragging,
    Hit,
    HitKind,
    Idle,
    Key,
    Panning,
    PointerButton,
)
from flowcanvas.core.palette import TOOL_ITEMS, encode_drag_payload
from flowcanvas.core.transform import Point


class TestHitTest:
    def test_body_handle_background(self, session, two_nodes):
        a_id, b_id = two_nodes
        assert session.hit_test(80, 32) == Hit(HitKind.NODE_BODY, a_id)
        assert session.hit_test(160, 32) == Hit(HitKind.NODE_HANDLE, a_id)
        assert session.hit_test(180, 100).kind is HitKind.BACKGROUND

    def test_handle_radius_is_screen_sized(self, session, two_nodes):
        a_id, _ = two_nodes
        session.zoom = 2.0
        # Handle of A sits at screen (320, 64); 8 px on screen is 4 graph units
        assert session.hit_test(326, 64) == Hit(HitKind.NODE_HANDLE, a_id)
        assert session.hit_test(330, 64).kind is HitKind.BACKGROUND


class TestConnecting:
    def test_handle_drag_to_other_node_connects(self, session, model, two_nodes):
        """Test A(0,0) handle dragged to (260,30) inside B creates A -> B."""
        a_id, b_id = two_nodes

        session.pointer_down(160, 32)
        assert isinstance(session.state, ConnectingFrom)
        assert session.state.anchor == Point(80, 32)

        session.pointer_move(260, 30)
        assert session.rubber_band == (Point(80, 32), Point(260, 30))

        session.pointer_up(260, 30)

        assert [conn.key for conn in model.connections] == [(a_id, b_id)]
        assert model.connections[0].label == ""
        assert session.is_idle
        assert session.rubber_band is None

    def test_release_on_background_discards(self, session, model, two_nodes):
        session.pointer_down(160, 32)
        session.pointer_move(180, 200)
        session.pointer_up(180, 200)

        assert model.connections == []
        assert session.is_idle

    def test_release_on_origin_does_not_self_connect(self, session, model, two_nodes):
        session.pointer_down(160, 32)
        session.pointer_up(80, 32)
        assert model.connections == []

    def test_escape_discards_rubber_band(self, session, model, two_nodes):
        session.pointer_down(160, 32)
        session.pointer_move(260, 30)
        session.key_press(Key.ESCAPE)

        assert session.is_idle
        assert session.rubber_band is None
        session.pointer_up(260, 30)
        assert model.connections == []

    def test_connecting_does_not_change_selection(self, session, model, two_nodes):
        _, b_id = two_nodes
        model.select_only(b_id)
        session.pointer_down(160, 32)
        assert model.selected_ids == [b_id]


class TestDragging:
    def test_drag_single_node_snaps(self, session, model, two_nodes):
        a_id, _ = two_nodes
        session.pointer_down(10, 10)
        assert isinstance(session.state, Dragging)
        assert model.selected_ids == [a_id]

        session.pointer_move(53, 38)
        assert model.get_node(a_id).position == Point(40, 20)

        session.pointer_up(53, 38)
        assert session.is_idle
        assert model.get_node(a_id).position == Point(40, 20)

    def test_multi_drag_preserves_relative_offsets(self, session, model, two_nodes):
        a_id, b_id = two_nodes
        session.pointer_down(10, 10)
        session.pointer_up(10, 10)
        session.pointer_down(210, 10, modifier=True)
        assert model.selected_ids == [a_id, b_id]

        session.pointer_down(10, 10)
        assert session.state.node_ids == (a_id, b_id)
        session.pointer_move(50, 30)
        session.pointer_up(50, 30)

        a = model.get_node(a_id).position
        b = model.get_node(b_id).position
        assert a == Point(40, 20)
        assert b - a == Point(200, 0)

    def test_click_unselected_node_replaces_selection(self, session, model, two_nodes):
        a_id, b_id = two_nodes
        model.select_only(a_id)
        session.pointer_down(210, 10)
        assert model.selected_ids == [b_id]
        assert session.state.node_ids == (b_id,)

    def test_modifier_click_toggles_without_dragging(self, session, model, two_nodes):
        a_id, _ = two_nodes
        session.pointer_down(10, 10, modifier=True)
        assert model.selected_ids == [a_id]
        assert session.is_idle

        session.pointer_down(10, 10, modifier=True)
        assert model.selected_ids == []

    def test_drag_uses_graph_space_when_zoomed(self, session, model, two_nodes):
        a_id, _ = two_nodes
        session.zoom = 2.0
        session.pan = Point(100, 0)
        # Screen (120, 20) is graph (10, 10), inside A
        session.pointer_down(120, 20)
        session.pointer_move(200, 60)
        assert model.get_node(a_id).position == Point(40, 20)

    def test_drag_marks_model_modified(self, session, model, two_nodes):
        session.pointer_down(10, 10)
        session.pointer_move(100, 100)
        assert model.has_been_modified


class TestBackground:
    def test_background_click_clears_selection(self, session, model, two_nodes):
        a_id, _ = two_nodes
        model.select_only(a_id)
        session.pointer_down(180, 200)
        assert model.selected_ids == []
        assert session.is_idle

    def test_stale_hit_treated_as_background(self, session, model, two_nodes):
        a_id, _ = two_nodes
        model.select_only(a_id)
        session.pointer_down(10, 10, hit=Hit(HitKind.NODE_BODY, "gone"))
        assert model.selected_ids == []
        assert session.is_idle


class TestPanning:
    def test_middle_button_pans(self, session):
        session.pointer_down(100, 100, button=PointerButton.MIDDLE)
        assert isinstance(session.state, Panning)

        session.pointer_move(130, 90)
        assert session.pan == Point(30, -10)
        session.pointer_move(160, 100)
        assert session.pan == Point(60, 0)

        session.pointer_up(160, 100, button=PointerButton.MIDDLE)
        assert session.is_idle
        assert session.pan == Point(60, 0)

    def test_pan_starts_from_current_pan(self, session):
        session.pan = Point(10, 10)
        session.pointer_down(0, 0, button=PointerButton.MIDDLE)
        session.pointer_move(5, 5)
        assert session.pan == Point(15, 15)

    def test_left_release_does_not_end_pan(self, session):
        session.pointer_down(0, 0, button=PointerButton.MIDDLE)
        session.pointer_up(0, 0, button=PointerButton.LEFT)
        assert isinstance(session.state, Panning)

    def test_right_button_is_ignored(self, session, two_nodes):
        session.pointer_down(10, 10, button=PointerButton.RIGHT)
        assert session.is_idle


class TestGesturePriority:
    def test_drag_preempts_connecting(self, session, model, two_nodes):
        _, b_id = two_nodes
        session.pointer_down(160, 32)
        session.pointer_down(210, 10)

        assert isinstance(session.state, Dragging)
        assert session.rubber_band is None
        session.pointer_up(210, 10)
        assert model.connections == []

    def test_drag_preempts_panning(self, session, two_nodes):
        session.pointer_down(500, 500, button=PointerButton.MIDDLE)
        session.pointer_down(10, 10)
        assert isinstance(session.state, Dragging)

    def test_pan_ignored_while_dragging(self, session, two_nodes):
        session.pointer_down(10, 10)
        session.pointer_down(10, 10, button=PointerButton.MIDDLE)
        assert isinstance(session.state, Dragging)

    def test_connect_ignored_while_panning(self, session, two_nodes):
        session.pointer_down(500, 500, button=PointerButton.MIDDLE)
        session.pointer_down(160, 32)
        assert isinstance(session.state, Panning)

    def test_press_during_drag_keeps_selection(self, session, model, two_nodes):
        a_id, b_id = two_nodes
        session.pointer_down(10, 10)
        session.pointer_down(210, 10)

        assert model.selected_ids == [a_id]
        assert session.state.node_ids == (a_id,)

        session.pointer_move(50, 10)
        session.pointer_up(50, 10)
        assert model.get_node(a_id).position == Point(40, 0)
        assert model.get_node(b_id).position == Point(200, 0)

    def test_only_one_gesture_at_a_time(self, session, two_nodes):
        session.pointer_down(160, 32)
        session.pointer_down(0, 0, button=PointerButton.MIDDLE)
        assert isinstance(session.state, ConnectingFrom)


class TestWheel:
    def test_zoom_in_and_out(self, session):
        session.wheel(120)
        assert session.zoom == pytest.approx(1.1)
        session.wheel(-120)
        assert session.zoom == pytest.approx(0.99)

    def test_zero_delta_ignored(self, session):
        session.wheel(0)
        assert session.zoom == 1.0

    def test_clamped(self, session):
        for _ in range(50):
            session.wheel(120)
        assert session.zoom == ZOOM_MAX

    def test_view_listener(self, session):
        calls = []
        session.add_view_changed_listener(lambda: calls.append(1))
        session.wheel(120)
        assert calls == [1]


class TestKeyboard:
    @pytest.mark.parametrize("key", [Key.DELETE, Key.BACKSPACE])
    def test_delete_removes_selected_nodes(self, session, model, two_nodes, key):
        a_id, b_id = two_nodes
        c_id = model.add_node("task", position=Point(0, 200))
        model.add_connection(a_id, b_id)
        model.add_connection(b_id, c_id)
        model.select_only(a_id)
        model.toggle_selection(b_id)

        session.key_press(key)

        assert [node.id for node in model.nodes] == [c_id]
        assert model.connections == []
        assert model.selected_ids == []

    def test_delete_with_empty_selection(self, session, model, two_nodes):
        assert session.delete_selected() == 0
        assert len(model.nodes) == 2


class TestInspectedNode:
    def test_first_selected(self, session, model, two_nodes):
        a_id, b_id = two_nodes
        model.toggle_selection(b_id)
        model.toggle_selection(a_id)
        assert session.inspected_node().id == b_id

    def test_none_after_removal(self, session, model, two_nodes):
        a_id, _ = two_nodes
        model.select_only(a_id)
        model.remove_node(a_id)
        assert session.inspected_node() is None


class TestDrop:
    def test_drop_creates_snapped_node(self, session, model):
        node_id = session.drop(105, 47, encode_drag_payload(TOOL_ITEMS[0]))

        node = model.get_node(node_id)
        assert node.type == "task"
        assert node.label == "Task"
        assert node.position == Point(100, 40)
        assert node.status == "draft"

    def test_drop_under_pan_and_zoom(self, session, model):
        session.pan = Point(50, 50)
        session.zoom = 2.0
        node_id = session.drop(250, 150, {"id": "decision", "label": "Decision"})
        assert model.get_node(node_id).position == Point(100, 60)

    def test_drop_carries_item_data(self, session, model):
        ai_item = next(item for item in TOOL_ITEMS if item.id == "ai")
        node_id = session.drop(0, 0, encode_drag_payload(ai_item))
        assert model.get_node(node_id).data == {"prompt": "", "input": ""}

    @pytest.mark.parametrize("payload", [None, b"", b"not json", b"[1, 2]", b'{"label": "x"}'])
    def test_malformed_payload_ignored(self, session, model, payload):
        assert session.drop(10, 10, payload) is None
        assert model.nodes == []


def test_initial_state(session):
    assert isinstance(session.state, Idle)
    assert session.pan == Point(0, 0)
    assert session.zoom == 1.0
