from dataclasses import dataclass

from tensor_accessor.errors import ValidationError


@dataclass(frozen=True)
class CanonicalRange:
    """A normalized half-open range ``[start, stop)`` along one axis.

    This is the only range shape that container primitives ever receive.
    Both bounds are non-negative and ``start <= stop``; a range with
    ``start == stop`` is empty.

    Attributes:
        start: First position included in the range
        stop: First position past the end of the range
    """

    start: int
    stop: int

    def __post_init__(self):
        if not isinstance(self.start, int) or not isinstance(self.stop, int):
            raise ValidationError(f"Range bounds must be integers, got {self.start!r} and {self.stop!r}")
        if self.start < 0:
            raise ValidationError(f"Range start must be non-negative, got {self.start}")
        if self.stop < self.start:
            raise ValidationError(f"Range stop {self.stop} must not be smaller than start {self.start}")

    @classmethod
    def scalar(cls, position: int) -> "CanonicalRange":
        """Unit range covering a single, already wrapped, position."""
        return cls(position, position + 1)

    def __len__(self) -> int:
        return self.stop - self.start

    @property
    def empty(self) -> bool:
        return self.stop == self.start

    def to_slice(self) -> slice:
        """Equivalent Python slice, usable directly on numpy arrays and torch tensors."""
        return slice(self.start, self.stop)

    def contains(self, position: int) -> bool:
        return self.start <= position < self.stop

    def overlaps(self, other: "CanonicalRange") -> bool:
        """Check whether two ranges share at least one position.

        Empty ranges never overlap anything, including themselves.
        """
        if self.empty or other.empty:
            return False
        return self.start < other.stop and other.start < self.stop

    # Keep repr close to the math notation used in error messages
    def __repr__(self) -> str:
        return f"CanonicalRange([{self.start}, {self.stop}))"
