"""Tests for canonical ranges and the borrow tracker."""

import threading

import pytest

from tensor_accessor import BorrowError, CanonicalRange, ValidationError
from tensor_accessor.borrow import BorrowTracker


class TestCanonicalRange:

    def test_basic(self):
        r = CanonicalRange(1, 4)
        assert len(r) == 3
        assert r.to_slice() == slice(1, 4)
        assert r.contains(1) and r.contains(3) and not r.contains(4)
        assert repr(r) == "CanonicalRange([1, 4))"

    @pytest.mark.parametrize("start,stop", [(-1, 2), (3, 2), (0.0, 1)])
    def test_invalid(self, start, stop):
        with pytest.raises(ValidationError):
            CanonicalRange(start, stop)

    def test_scalar(self):
        assert CanonicalRange.scalar(4) == CanonicalRange(4, 5)

    @pytest.mark.parametrize("a,b,expected", [
        ((0, 2), (1, 3), True),
        ((0, 2), (2, 4), False),
        ((1, 4), (2, 3), True),
        ((2, 2), (0, 5), False),
        ((2, 2), (2, 2), False),
    ])
    def test_overlaps(self, a, b, expected):
        assert CanonicalRange(*a).overlaps(CanonicalRange(*b)) is expected
        assert CanonicalRange(*b).overlaps(CanonicalRange(*a)) is expected


class TestBorrowTracker:

    def test_acquire_release(self):
        tracker = BorrowTracker()
        borrow = tracker.acquire(CanonicalRange(0, 2), exclusive=True)
        assert tracker.live == (borrow,)
        tracker.release(borrow)
        assert len(tracker) == 0

    def test_double_release(self):
        tracker = BorrowTracker()
        borrow = tracker.acquire(CanonicalRange(0, 2))
        tracker.release(borrow)
        with pytest.raises(BorrowError):
            tracker.release(borrow)

    def test_exclusive_conflicts(self):
        tracker = BorrowTracker()
        with tracker.borrow(CanonicalRange(2, 4), exclusive=True):
            with pytest.raises(BorrowError, match="already borrowed exclusively"):
                tracker.acquire(CanonicalRange(3, 5))
            tracker.check(CanonicalRange(4, 5), exclusive=True)
        tracker.check(CanonicalRange(0, 5), exclusive=True)

    def test_shared_does_not_conflict_with_shared(self):
        tracker = BorrowTracker()
        with tracker.borrow(CanonicalRange(0, 5)):
            tracker.check(CanonicalRange(0, 5))
            with pytest.raises(BorrowError):
                tracker.check(CanonicalRange(0, 1), exclusive=True)

    def test_failed_acquire_is_not_registered(self):
        tracker = BorrowTracker()
        with tracker.borrow(CanonicalRange(0, 1), exclusive=True):
            with pytest.raises(BorrowError):
                tracker.acquire(CanonicalRange(0, 1))
            assert len(tracker) == 1

    def test_threads_share_table(self):
        tracker = BorrowTracker()
        errors = []

        def worker():
            try:
                tracker.acquire(CanonicalRange(0, 1), exclusive=True)
            except BorrowError as e:
                errors.append(e)

        with tracker.borrow(CanonicalRange(0, 3), exclusive=True):
            thread = threading.Thread(target=worker)
            thread.start()
            thread.join()
        assert len(errors) == 1
