"""Tests for blogsmith.diagrams.viewport."""

import pytest

from blogsmith.diagrams.viewport import Box, IntersectionWatcher, Viewport, intersection_ratio


class TestIntersectionRatio:
    def test_fully_inside(self):
        assert intersection_ratio(Box(100, 50), Viewport(0, 500)) == 1.0

    def test_fully_outside(self):
        assert intersection_ratio(Box(1000, 50), Viewport(0, 500)) == 0.0

    def test_partial(self):
        assert intersection_ratio(Box(450, 100), Viewport(0, 500)) == pytest.approx(0.5)

    def test_root_margin_extends_viewport(self):
        box = Box(520, 100)
        assert intersection_ratio(box, Viewport(0, 500)) == 0.0
        assert intersection_ratio(box, Viewport(0, 500), root_margin=50) == pytest.approx(0.3)

    def test_margin_applies_above(self):
        box = Box(0, 100)
        assert intersection_ratio(box, Viewport(130, 500), root_margin=50) == pytest.approx(0.2)

    def test_zero_height_box(self):
        assert intersection_ratio(Box(10, 0), Viewport(0, 100)) == 1.0
        assert intersection_ratio(Box(200, 0), Viewport(0, 100)) == 0.0


class TestIntersectionWatcher:
    def test_scan_reports_visible_targets(self):
        watcher = IntersectionWatcher(root_margin=0, threshold=0.1)
        near, far = object(), object()
        watcher.observe(near, Box(100, 100))
        watcher.observe(far, Box(5000, 100))

        entries = watcher.scan(Viewport(0, 500))
        assert [e.target for e in entries] == [near]
        assert entries[0].ratio == 1.0

    def test_threshold_gates_small_overlap(self):
        watcher = IntersectionWatcher(root_margin=0, threshold=0.1)
        target = object()
        watcher.observe(target, Box(495, 100))
        assert watcher.scan(Viewport(0, 500)) == []
        assert len(watcher.scan(Viewport(0, 520))) == 1

    def test_zero_threshold_still_needs_overlap(self):
        watcher = IntersectionWatcher(root_margin=0, threshold=0.0)
        watcher.observe(object(), Box(600, 10))
        assert watcher.scan(Viewport(0, 500)) == []

    def test_default_margin_prefetches(self):
        watcher = IntersectionWatcher()
        target = object()
        watcher.observe(target, Box(530, 100))
        assert [e.target for e in watcher.scan(Viewport(0, 500))] == [target]

    def test_unobserve_and_disconnect(self):
        watcher = IntersectionWatcher()
        a, b = object(), object()
        watcher.observe(a, Box(0, 10))
        watcher.observe(b, Box(0, 10))
        assert len(watcher) == 2

        watcher.unobserve(a)
        assert not watcher.is_observing(a)
        assert watcher.is_observing(b)
        watcher.unobserve(a)

        watcher.disconnect()
        assert len(watcher) == 0
        assert watcher.scan(Viewport(0, 100)) == []

    def test_equal_targets_tracked_separately(self):
        watcher = IntersectionWatcher()
        a, b = [], []
        watcher.observe(a, Box(0, 10))
        watcher.observe(b, Box(0, 10))
        assert len(watcher) == 2

    def test_reobserve_updates_box(self):
        watcher = IntersectionWatcher(root_margin=0)
        target = object()
        watcher.observe(target, Box(5000, 10))
        watcher.observe(target, Box(10, 10))
        assert len(watcher) == 1
        assert len(watcher.scan(Viewport(0, 100))) == 1
