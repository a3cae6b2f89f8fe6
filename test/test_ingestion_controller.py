"""
Tests for the ingestion controller.

Warm-up gating, per-ring grouping in arrival order, stable empty rings and
silent exclusion of out-of-FOV / non-finite points.
"""

import numpy as np
import pytest

from conftest import points_at_angles
from ring_registration.frontend.scan.ingestion_controller import (
    ControllerState,
    Dispatched,
    Frame,
    IngestionController,
    Skipped,
    vertical_angles_deg,
)


def _frame(angles, stamp=1.0, azimuths=None):
    return Frame.from_points(stamp, points_at_angles(angles, azimuths))


class TestVerticalAngle:

    def test_recovers_elevation(self):
        angles = np.array([-30.0, -15.0, 0.0, 2.5, 15.0, 45.0])
        pts = points_at_angles(angles, azimuths_deg=[0.0, 45.0, 90.0, 180.0, 270.0, 359.0])
        np.testing.assert_allclose(vertical_angles_deg(pts), angles, atol=1e-9)

    def test_independent_of_range(self):
        pts = points_at_angles([5.0, 5.0, 5.0], ranges_m=[0.5, 10.0, 120.0])
        np.testing.assert_allclose(vertical_angles_deg(pts), 5.0, atol=1e-9)


class TestWarmup:

    def test_negative_warmup_rejected(self, linear16_mapper):
        with pytest.raises(ValueError):
            IngestionController(linear16_mapper, warmup_frames=-1)

    def test_first_k_frames_skipped(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=3)
        assert controller.state == ControllerState.WARMUP

        outcomes = [controller.on_frame(_frame([0.0], stamp=float(i))) for i in range(6)]

        assert [type(o) for o in outcomes[:3]] == [Skipped, Skipped, Skipped]
        assert [o.warmup_remaining for o in outcomes[:3]] == [2, 1, 0]
        assert all(isinstance(o, Dispatched) for o in outcomes[3:])
        assert [o.stamp_sec for o in outcomes[3:]] == [3.0, 4.0, 5.0]
        assert controller.state == ControllerState.ACTIVE
        assert controller.warmup_remaining == 0

    def test_zero_warmup_dispatches_immediately(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        assert controller.state == ControllerState.ACTIVE
        assert isinstance(controller.on_frame(_frame([0.0])), Dispatched)

    def test_skipped_frames_not_inspected(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=1)
        outcome = controller.on_frame(Frame.from_points(0.0, np.full((4, 3), np.nan)))
        assert isinstance(outcome, Skipped)
        assert controller.stats()["points_in"] == 0


class TestDispatch:

    def test_reference_frame(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        outcome = controller.on_frame(_frame([-15.0, -13.0, 0.0, 15.0], stamp=12.5))

        assert isinstance(outcome, Dispatched)
        assert outcome.stamp_sec == 12.5
        assert len(outcome.ring_groups) == 16
        sizes = [g.shape[0] for g in outcome.ring_groups]
        expected = [0] * 16
        for ring in (0, 1, 8, 15):
            expected[ring] = 1
        assert sizes == expected
        assert outcome.n_points == 4

    def test_order_within_ring_preserved(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        angles = [0.1, -13.0, 0.9, 0.0, 14.9, 0.3, -12.8]
        azimuths = [10.0, 20.0, 30.0, 40.0, 50.0, 60.0, 70.0]
        pts = points_at_angles(angles, azimuths)
        outcome = controller.on_frame(Frame.from_points(0.0, pts))

        np.testing.assert_array_equal(outcome.ring_groups[8], pts[[0, 2, 3, 5]])
        np.testing.assert_array_equal(outcome.ring_groups[1], pts[[1, 6]])
        np.testing.assert_array_equal(outcome.ring_groups[15], pts[[4]])

    def test_empty_rings_present(self, preset_mapper):
        controller = IngestionController(preset_mapper, warmup_frames=0)
        outcome = controller.on_frame(_frame([float(preset_mapper.ring_angles[0])]))
        assert len(outcome.ring_groups) == preset_mapper.ring_count
        for group in outcome.ring_groups[1:]:
            assert group.shape == (0, 3)
        assert outcome.ring_groups[0].shape == (1, 3)

    def test_empty_frame(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        outcome = controller.on_frame(Frame.from_points(3.0, np.zeros((0, 3))))
        assert isinstance(outcome, Dispatched)
        assert len(outcome.ring_groups) == 16
        assert outcome.n_points == 0

    def test_out_of_fov_points_dropped(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        outcome = controller.on_frame(_frame([-40.0, 0.0, 25.0, 89.0]))
        assert outcome.n_points == 1
        assert outcome.ring_groups[8].shape == (1, 3)
        assert controller.stats()["points_out_of_fov"] == 3

    def test_non_finite_points_dropped(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        pts = points_at_angles([0.0, 0.0, 0.0])
        pts[1, 2] = np.nan
        pts = np.vstack([pts, [[np.inf, 0.0, 0.0]]])
        outcome = controller.on_frame(Frame.from_points(0.0, pts))
        assert outcome.n_points == 2
        np.testing.assert_array_equal(outcome.ring_groups[8], pts[[0, 2]])
        assert controller.stats()["points_non_finite"] == 2

    def test_only_warmup_counter_changes_frame_result(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=0)
        frame = _frame([-11.0, 3.0, 9.0])
        first = controller.on_frame(frame)
        second = controller.on_frame(frame)
        for a, b in zip(first.ring_groups, second.ring_groups):
            np.testing.assert_array_equal(a, b)

    def test_stats(self, linear16_mapper):
        controller = IngestionController(linear16_mapper, warmup_frames=2)
        for _ in range(4):
            controller.on_frame(_frame([0.0, 50.0]))
        stats = controller.stats()
        assert stats["state"] == "active"
        assert stats["frames_received"] == 4
        assert stats["frames_skipped"] == 2
        assert stats["frames_dispatched"] == 2
        assert stats["points_in"] == 4
        assert stats["points_out_of_fov"] == 2
