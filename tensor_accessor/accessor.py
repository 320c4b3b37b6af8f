import abc
import logging
from contextlib import contextmanager
from typing import Any, Generic, Iterator, Protocol, TypeVar, runtime_checkable

from tensor_accessor.borrow import BorrowTracker
from tensor_accessor.canonical_range import CanonicalRange
from tensor_accessor.errors import ValidationError
from tensor_accessor.utils import IndexKind, check_position, standardize_index

# INDEXING MODEL:
# axis - one indexable degree of freedom of a container
# scalar slice - result of indexing an axis by a single position (usually drops the axis)
# range slice - result of indexing an axis by a canonical range (keeps the axis)
# Higher-rank indexing is composed one axis at a time through the returned slices.

logger = logging.getLogger(__name__)

ScalarSliceT = TypeVar('ScalarSliceT')
RangeSliceT = TypeVar('RangeSliceT')
_ScalarSliceT_co = TypeVar('_ScalarSliceT_co', covariant=True)
_RangeSliceT_co = TypeVar('_RangeSliceT_co', covariant=True)


@runtime_checkable
class SupportsAxisAccess(Protocol[_ScalarSliceT_co, _RangeSliceT_co]):
    """The primitives a container supplies to be indexable along one axis.

    Range primitives only ever receive canonical, in-bounds ranges. Scalar
    primitives receive the raw requested position, which may be negative,
    and must validate it themselves (see utils.check_position) before
    touching storage.
    """

    def dim_size(self) -> int: ...

    def read_scalar(self, position: int) -> _ScalarSliceT_co: ...

    def write_scalar(self, position: int) -> _ScalarSliceT_co: ...

    def read_range(self, index_range: CanonicalRange) -> _RangeSliceT_co: ...

    def write_range(self, index_range: CanonicalRange) -> _RangeSliceT_co: ...


def _dispatch(accessor: SupportsAxisAccess, key, write: bool) -> tuple[CanonicalRange, Any]:
    """Route an index key to the matching primitive.

    Returns:
        Tuple of the canonical region touched by the access and the view
        returned by the primitive
    """
    size = accessor.dim_size()
    kind, target = standardize_index(key, size)
    mode = 'write' if write else 'read'
    logger.debug(f"Dispatching {mode} {kind.value} index {key!r} on axis of size {size}")

    if kind is IndexKind.SCALAR:
        view = accessor.write_scalar(target) if write else accessor.read_scalar(target)
        # The primitive accepted the position, so wrapping it cannot fail
        return CanonicalRange.scalar(check_position(target, size)), view

    view = accessor.write_range(target) if write else accessor.read_range(target)
    return target, view


def read_index(accessor: SupportsAxisAccess, key):
    """Index any object implementing SupportsAxisAccess for reading.

    Supports the five index shapes: ``a``, ``a:b``, ``a:``, ``:b`` and ``:``.

    Args:
        accessor: Container providing the axis primitives
        key: Integer position or contiguous slice

    Returns:
        The scalar slice or range slice returned by the container

    Raises:
        OutOfBoundsError: If the key lies outside the dimension
        UnsupportedIndexError: If the key is not one of the five shapes
    """
    return _dispatch(accessor, key, write=False)[1]


def write_index(accessor: SupportsAxisAccess, key):
    """Index any object implementing SupportsAxisAccess for writing.

    Same as read_index, but routed to the write primitives.
    """
    return _dispatch(accessor, key, write=True)[1]


class TensorAccessor(abc.ABC, Generic[ScalarSliceT, RangeSliceT]):
    """Base class giving a container the full indexing surface for one axis.

    Subclasses implement dim_size and the four read/write primitives; this
    class provides:

    - ``t[key]``: read access for all five index shapes
    - ``t[key] = value``: write access, delegated to assign()
    - ``with t.read(key) as view``: shared borrow held for the block
    - ``with t.write(key) as view``: exclusive borrow held for the block
    - ``len(t)``: the dimension size

    Because out-of-bounds access raises OutOfBoundsError (an IndexError),
    iterating over an accessor yields its scalar slices in order.

    Borrows are tracked per accessor object. Two accessors over the same
    storage (for example a tensor and a view of it) track independently.
    Every view returned by indexing is a new accessor with its own empty
    tracker, so chained writes are not checked against the parent:

        with m.read(1):
            m[1] = 0        # BorrowError, same tracker
            m[1][0] = -5    # allowed, writes through the view of row 1
    """

    def __init__(self):
        self._borrows = BorrowTracker()

    @property
    def borrows(self) -> BorrowTracker:
        return self._borrows

    @abc.abstractmethod
    def dim_size(self) -> int:
        """Current extent of the indexed axis."""
        raise NotImplementedError

    @abc.abstractmethod
    def read_scalar(self, position: int) -> ScalarSliceT:
        raise NotImplementedError

    @abc.abstractmethod
    def write_scalar(self, position: int) -> ScalarSliceT:
        raise NotImplementedError

    @abc.abstractmethod
    def read_range(self, index_range: CanonicalRange) -> RangeSliceT:
        raise NotImplementedError

    @abc.abstractmethod
    def write_range(self, index_range: CanonicalRange) -> RangeSliceT:
        raise NotImplementedError

    def assign(self, target: ScalarSliceT | RangeSliceT, value) -> None:
        """Store value into a writable view returned by a write primitive.

        Containers without item assignment keep this default.
        """
        raise TypeError(f"{type(self).__name__} does not support item assignment")

    def __len__(self) -> int:
        return self.dim_size()

    def __getitem__(self, key) -> ScalarSliceT | RangeSliceT:
        region, view = _dispatch(self, key, write=False)
        self._borrows.check(region)
        return view

    def __setitem__(self, key, value) -> None:
        with self.write(key) as target:
            self.assign(target, value)

    @contextmanager
    def read(self, key) -> Iterator[ScalarSliceT | RangeSliceT]:
        """Borrow a region for reading until the ``with`` block exits.

        Raises:
            BorrowError: If the region overlaps a live write borrow
        """
        region, view = _dispatch(self, key, write=False)
        with self._borrows.borrow(region):
            yield view

    @contextmanager
    def write(self, key) -> Iterator[ScalarSliceT | RangeSliceT]:
        """Borrow a region exclusively for writing until the ``with`` block exits.

        Raises:
            BorrowError: If the region overlaps any live borrow
        """
        region, view = _dispatch(self, key, write=True)
        with self._borrows.borrow(region, exclusive=True):
            yield view


class AxisAccessor(TensorAccessor[ScalarSliceT, RangeSliceT]):
    """Type-erased adapter exposing the indexing surface over any SupportsAxisAccess.

    Useful at API boundaries that receive heterogeneous containers which do
    not subclass TensorAccessor. If the wrapped object defines an
    ``assign(target, value)`` method, item assignment is forwarded to it.
    """

    def __init__(self, target: SupportsAxisAccess[ScalarSliceT, RangeSliceT]):
        if not isinstance(target, SupportsAxisAccess):
            raise ValidationError(f"{type(target).__name__} does not implement the axis access primitives")
        super().__init__()
        self._target = target

    @property
    def target(self) -> SupportsAxisAccess[ScalarSliceT, RangeSliceT]:
        return self._target

    def dim_size(self) -> int:
        return self._target.dim_size()

    def read_scalar(self, position: int) -> ScalarSliceT:
        return self._target.read_scalar(position)

    def write_scalar(self, position: int) -> ScalarSliceT:
        return self._target.write_scalar(position)

    def read_range(self, index_range: CanonicalRange) -> RangeSliceT:
        return self._target.read_range(index_range)

    def write_range(self, index_range: CanonicalRange) -> RangeSliceT:
        return self._target.write_range(index_range)

    def assign(self, target, value) -> None:
        assign = getattr(self._target, 'assign', None)
        if assign is None:
            super().assign(target, value)
        else:
            assign(target, value)

    def __repr__(self) -> str:
        return f"AxisAccessor({self._target!r})"


def as_accessor(target) -> TensorAccessor:
    """Return target itself if it is a TensorAccessor, else wrap it in an AxisAccessor."""
    if isinstance(target, TensorAccessor):
        return target
    return AxisAccessor(target)
