"""Tests for time fence construction and matching."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from DnsdbFlex.core.query import TimeFence, build_fence

T = 1_600_000_000


def fence_admits(fence: TimeFence, *, time_first: int, time_last: int) -> bool:
    """Apply a fence to one observation the way the server does, with strict bounds."""
    if fence.first_after is not None and time_first <= fence.first_after:
        return False
    if fence.first_before is not None and time_first >= fence.first_before:
        return False
    if fence.last_after is not None and time_last <= fence.last_after:
        return False
    if fence.last_before is not None and time_last >= fence.last_before:
        return False
    return True


class TestBuildFence(unittest.TestCase):
    def test_no_bounds_gives_empty_fence(self) -> None:
        self.assertEqual(build_fence(after=None, before=None, complete=False), TimeFence())

    def test_overlap_mode_maps_after_to_last_after(self) -> None:
        fence = build_fence(after=T, before=T + 100, complete=False)
        self.assertEqual(fence, TimeFence(last_after=T, first_before=T + 100))

    def test_complete_mode_maps_after_to_first_after(self) -> None:
        fence = build_fence(after=T, before=T + 100, complete=True)
        self.assertEqual(fence, TimeFence(first_after=T, last_before=T + 100))

    def test_complete_with_single_bound(self) -> None:
        self.assertEqual(build_fence(after=None, before=T, complete=True), TimeFence(last_before=T))

    def test_inverted_bounds_rejected(self) -> None:
        with self.assertRaises(ValueError):
            build_fence(after=T + 1, before=T, complete=False)

    def test_equal_bounds_allowed(self) -> None:
        fence = build_fence(after=T, before=T, complete=False)
        self.assertEqual(fence.last_after, T)
        self.assertEqual(fence.first_before, T)

    def test_complete_without_bounds_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "makes no sense"):
            build_fence(after=None, before=None, complete=True)


class TestFenceAdmits(unittest.TestCase):
    def test_overlap_admits_tuple_that_started_before_after(self) -> None:
        fence = build_fence(after=T, before=None, complete=False)
        self.assertTrue(fence_admits(fence, time_first=T - 50, time_last=T + 50))

    def test_complete_excludes_tuple_that_started_before_after(self) -> None:
        fence = build_fence(after=T, before=None, complete=True)
        self.assertFalse(fence_admits(fence, time_first=T - 50, time_last=T + 50))

    def test_complete_admits_contained_tuple(self) -> None:
        fence = build_fence(after=T, before=T + 100, complete=True)
        self.assertTrue(fence_admits(fence, time_first=T + 10, time_last=T + 90))

    def test_overlap_excludes_tuple_that_started_after_before(self) -> None:
        fence = build_fence(after=None, before=T, complete=False)
        self.assertFalse(fence_admits(fence, time_first=T + 1, time_last=T + 5))

    def test_empty_fence_admits_everything(self) -> None:
        self.assertTrue(fence_admits(TimeFence(), time_first=1, time_last=2))


if __name__ == "__main__":
    unittest.main()
