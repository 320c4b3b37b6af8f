"""Dynamic borrow tracking for tensor accessors.

Views handed out by an accessor alias the container's storage. Python has
no compile-time borrow checking, so each accessor keeps a BorrowTracker
recording which regions of its axis are currently borrowed and how:

- Shared borrows (reads) may overlap other shared borrows.
- An exclusive borrow (write) may not overlap any other live borrow.

A conflicting request raises BorrowError immediately instead of waiting.
All accesses are synchronous, so blocking would only ever deadlock the
thread that holds the conflicting borrow.
"""

import itertools
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from tensor_accessor.canonical_range import CanonicalRange
from tensor_accessor.errors import BORROW_ERROR_MSG, BorrowError

logger = logging.getLogger(__name__)


def _mode(exclusive: bool) -> str:
    return 'exclusively' if exclusive else 'shared'


@dataclass(frozen=True)
class Borrow:
    """A live borrow of a region of one axis."""

    borrow_id: int
    region: CanonicalRange
    exclusive: bool


class BorrowTracker:
    """Per-accessor table of live borrows."""

    def __init__(self):
        self._lock = threading.Lock()
        self._live: dict[int, Borrow] = {}
        self._ids = itertools.count()

    def __len__(self) -> int:
        return len(self._live)

    @property
    def live(self) -> tuple[Borrow, ...]:
        return tuple(self._live.values())

    def _find_conflict(self, region: CanonicalRange, exclusive: bool) -> Borrow | None:
        for held in self._live.values():
            if not (exclusive or held.exclusive):
                continue
            if held.region.overlaps(region):
                return held
        return None

    def _raise_conflict(self, region: CanonicalRange, exclusive: bool, held: Borrow) -> None:
        raise BorrowError(BORROW_ERROR_MSG.format(
            region=region, mode=_mode(exclusive), held_mode=_mode(held.exclusive), held=held.region))

    def check(self, region: CanonicalRange, exclusive: bool = False) -> None:
        """Validate that region could be borrowed right now, without registering it.

        Raises:
            BorrowError: If a live borrow conflicts with the request
        """
        with self._lock:
            held = self._find_conflict(region, exclusive)
        if held is not None:
            self._raise_conflict(region, exclusive, held)

    def acquire(self, region: CanonicalRange, exclusive: bool = False) -> Borrow:
        """Register a borrow of region.

        Args:
            region: Canonical region of the axis being borrowed
            exclusive: True for write access, False for shared read access

        Returns:
            Borrow: Handle to pass to release()

        Raises:
            BorrowError: If a live borrow conflicts with the request
        """
        with self._lock:
            held = self._find_conflict(region, exclusive)
            if held is None:
                borrow = Borrow(next(self._ids), region, exclusive)
                self._live[borrow.borrow_id] = borrow
        if held is not None:
            self._raise_conflict(region, exclusive, held)
        logger.debug(f"Acquired {_mode(exclusive)} borrow {borrow.borrow_id} of {region}")
        return borrow

    def release(self, borrow: Borrow) -> None:
        with self._lock:
            if self._live.pop(borrow.borrow_id, None) is None:
                raise BorrowError(f"Borrow {borrow.borrow_id} of {borrow.region} is not live")
        logger.debug(f"Released borrow {borrow.borrow_id} of {borrow.region}")

    @contextmanager
    def borrow(self, region: CanonicalRange, exclusive: bool = False) -> Iterator[Borrow]:
        """Hold a borrow of region for the duration of a ``with`` block."""
        borrow = self.acquire(region, exclusive)
        try:
            yield borrow
        finally:
            self.release(borrow)
