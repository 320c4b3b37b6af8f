"""Utility functions for tensor index processing.

This module contains the range normalization rules shared by every
accessor. These functions turn the index keys users write (``t[2]``,
``t[1:3]``, ``t[-2:]``, ``t[:-1]``, ``t[:]``) into either a raw scalar
position or a CanonicalRange that storage primitives can use directly.
"""

import enum
import operator

from tensor_accessor.canonical_range import CanonicalRange
from tensor_accessor.errors import OutOfBoundsError, UnsupportedIndexError, ValidationError


class IndexKind(enum.Enum):
    """Shape of an index key along a single axis."""
    SCALAR = 'scalar'          # t[a]
    RANGE = 'range'            # t[a:b]
    RANGE_FROM = 'range_from'  # t[a:]
    RANGE_TO = 'range_to'      # t[:b]
    RANGE_FULL = 'range_full'  # t[:]


def _validate_size(size: int) -> None:
    if size < 0:
        raise ValidationError(f"Dimension size must be non-negative, got {size}")


def _as_int(value, key) -> int:
    """Coerce an integer-like bound (int, numpy integer, 0-d index tensor) to int."""
    if isinstance(value, bool):
        raise UnsupportedIndexError(key, "boolean indexing is not supported")
    try:
        return operator.index(value)
    except TypeError:
        raise UnsupportedIndexError(key, f"bounds must be integers, got {type(value).__name__}") from None


def check_position(position: int, size: int) -> int:
    """Validate a scalar position and wrap it into ``[0, size)``.

    Scalar access never goes through normalize_range, so container
    primitives call this before touching storage.

    Args:
        position: Requested position, possibly negative (-1 is the last element)
        size: Size of the indexed dimension

    Returns:
        int: The wrapped, non-negative position

    Raises:
        OutOfBoundsError: If position is outside ``[-size, size - 1]``
    """
    _validate_size(size)
    if position < -size or position >= size:
        raise OutOfBoundsError(position, size, -size, size - 1, bound='position')
    return position + size if position < 0 else position


def normalize_axis(axis: int, ndim: int) -> int:
    """Wrap a possibly negative axis number into ``[0, ndim)``.

    Raises:
        UnsupportedIndexError: If the container has no axes (0-d)
        ValidationError: If axis is not an integer or is out of range
    """
    if isinstance(axis, bool) or not isinstance(axis, int):
        raise ValidationError(f"Axis must be an integer, got {type(axis).__name__}")
    if ndim == 0:
        raise UnsupportedIndexError(axis, "a 0-d tensor has no axis to index")
    if axis < -ndim or axis >= ndim:
        raise ValidationError(f"Axis {axis} is out of range for a tensor with {ndim} dimensions")
    return axis + ndim if axis < 0 else axis


def normalize_range(start: int, end: int, size: int) -> CanonicalRange:
    """Convert a requested range into a canonical range for a dimension.

    Both bounds may be negative, meaning "count from the end". The start is
    inclusive and the end exclusive, so ``normalize_range(0, -1, size)``
    selects everything but the last element.

    Args:
        start: Inclusive start bound, legal in ``[-size, size - 1]``
        end: Exclusive end bound, legal in ``[-size, size]``
        size: Size of the indexed dimension, must be non-negative

    Returns:
        CanonicalRange: Range with both bounds in ``[0, size]``

    Examples:
        normalize_range(1, 3, 5) -> [1, 3)
        normalize_range(-2, 5, 5) -> [3, 5)
        normalize_range(0, -1, 5) -> [0, 4)
        normalize_range(3, 1, 5) -> [3, 3)  # Inverted ranges are empty

    Raises:
        OutOfBoundsError: If either bound lies outside its legal window.
            The start is checked first.
        ValidationError: If size is negative
    """
    _validate_size(size)
    if start < -size or start >= size:
        raise OutOfBoundsError(start, size, -size, size - 1, bound='start')
    if end < -size or end > size:
        raise OutOfBoundsError(end, size, -size, size, bound='end')

    start = start + size if start < 0 else start
    end = end + size if end < 0 else end
    # An inverted range selects nothing
    return CanonicalRange(start, max(start, end))


def classify_index(key) -> IndexKind:
    """Determine which of the five supported shapes an index key has.

    Args:
        key: Index key as passed to ``__getitem__``

    Returns:
        IndexKind: The shape of the key

    Raises:
        UnsupportedIndexError: For keys outside the supported shapes, such as
            stepped slices, tuples, Ellipsis, None, booleans or sequences
    """
    if isinstance(key, slice):
        if key.step is not None and _as_int(key.step, key) != 1:
            raise UnsupportedIndexError(key, "ranges with a step are not supported")
        if key.start is None and key.stop is None:
            return IndexKind.RANGE_FULL
        if key.stop is None:
            return IndexKind.RANGE_FROM
        if key.start is None:
            return IndexKind.RANGE_TO
        return IndexKind.RANGE
    if isinstance(key, tuple):
        raise UnsupportedIndexError(key, "index one axis at a time, e.g. t[i][j] or t.axis(1)[j]")
    if key is Ellipsis or key is None:
        raise UnsupportedIndexError(key, "Ellipsis and None are not supported")
    if isinstance(key, bool):
        raise UnsupportedIndexError(key, "boolean indexing is not supported")
    if hasattr(key, '__index__'):
        return IndexKind.SCALAR
    raise UnsupportedIndexError(key, "only integers and contiguous slices are supported")


def resolve_range(kind: IndexKind, key: slice, size: int) -> CanonicalRange:
    """Resolve a range-shaped key against a dimension size.

    Missing bounds default to 0 for the start and ``size`` for the end. The
    full range ``[:]`` is always valid and skips normalization, so it also
    works on zero-size dimensions.

    Args:
        kind: Shape of the key, as returned by classify_index
        key: The slice key
        size: Size of the indexed dimension

    Returns:
        CanonicalRange: The normalized range
    """
    if kind is IndexKind.RANGE_FULL:
        _validate_size(size)
        return CanonicalRange(0, size)
    if kind is IndexKind.RANGE:
        return normalize_range(_as_int(key.start, key), _as_int(key.stop, key), size)
    if kind is IndexKind.RANGE_FROM:
        return normalize_range(_as_int(key.start, key), size, size)
    if kind is IndexKind.RANGE_TO:
        return normalize_range(0, _as_int(key.stop, key), size)
    raise ValueError(f"{kind} is not a range shape")


def standardize_index(key, size: int) -> tuple[IndexKind, int | CanonicalRange]:
    """Convert an index key into the argument for a storage primitive.

    Scalars are passed through raw (possibly negative); the scalar primitive
    is responsible for validating them. Ranges are normalized here, before
    any primitive is invoked.

    Returns:
        Tuple of the key's IndexKind and either the raw position or the
        CanonicalRange
    """
    kind = classify_index(key)
    if kind is IndexKind.SCALAR:
        return kind, _as_int(key, key)
    return kind, resolve_range(kind, key, size)
