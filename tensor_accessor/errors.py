"""Exceptions raised by tensor accessors.

Every error derives from TensorAccessorError. Where a built-in exception
already describes the failure (IndexError, TypeError, ValueError) the
package error also subclasses it, so callers can catch either.
"""

# ERROR MESSAGES
OUT_OF_BOUNDS_ERROR_MSG = ("index {index} is out of bounds for {bound}: the size {size} "
                           "allows for indices between [{low}, {high}]")
UNSUPPORTED_INDEX_ERROR_MSG = "Unsupported index {key!r}: {reason}"
BORROW_ERROR_MSG = "Cannot borrow {region} {mode}: already borrowed {held_mode} as {held}"


class TensorAccessorError(Exception):
    """Base exception for tensor accessor operations."""
    pass


class OutOfBoundsError(TensorAccessorError, IndexError):
    """Raised when a position or range bound lies outside the legal window.

    Attributes:
        index: The offending position or bound, as requested
        size: Size of the indexed dimension
        low: Lowest legal value (inclusive)
        high: Highest legal value (inclusive)
        bound: Which kind of bound failed: 'position', 'start' or 'end'
    """

    def __init__(self, index: int, size: int, low: int, high: int, bound: str = 'position'):
        self.index = index
        self.size = size
        self.low = low
        self.high = high
        self.bound = bound
        super().__init__(OUT_OF_BOUNDS_ERROR_MSG.format(
            index=index, bound=bound, size=size, low=low, high=high))

    @property
    def window(self) -> tuple[int, int]:
        """Legal inclusive window as a (low, high) pair."""
        return (self.low, self.high)


class UnsupportedIndexError(TensorAccessorError, TypeError):
    """Raised for index keys outside the supported shapes (steps, tuples, masks...)."""

    def __init__(self, key, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(UNSUPPORTED_INDEX_ERROR_MSG.format(key=key, reason=reason))


class BorrowError(TensorAccessorError):
    """Raised when an access would alias a live exclusive (write) borrow."""
    pass


class DtypeError(TensorAccessorError, TypeError):
    """Raised for ineligible element types or lossy conversions."""
    pass


class ValidationError(TensorAccessorError, ValueError):
    """Raised when parameter validation fails."""
    pass
