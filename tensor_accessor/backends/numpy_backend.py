"""NumPy-backed dense array implementing the axis access primitives.

ArrayTensor mirrors DenseTensor for code that already holds NumPy arrays.
Results are NumPy basic-slicing views, so they share memory with the
parent array and writes through them are visible in the parent.
"""

import logging
from typing import Any

import numpy as np

from tensor_accessor.accessor import TensorAccessor
from tensor_accessor.canonical_range import CanonicalRange
from tensor_accessor.errors import DtypeError
from tensor_accessor.utils import check_position, normalize_axis

# Integer (signed and unsigned) and floating point kinds
ELIGIBLE_KINDS = 'iuf'

logger = logging.getLogger(__name__)


def _convert_values(values: Any, dtype: np.dtype) -> np.ndarray:
    """Convert assigned values to dtype, raising DtypeError if any would change.

    Arrays follow NumPy's safe casting table. Python numbers and nested
    lists are checked by value, the same way DenseTensor checks them.
    """
    if isinstance(values, np.ndarray):
        if values.dtype.kind not in ELIGIBLE_KINDS or not np.can_cast(values.dtype, dtype, casting='safe'):
            raise DtypeError(f"Casting {values.dtype} to {dtype} may lose information")
        return values

    array = np.asarray(values)
    if array.dtype.kind not in ELIGIBLE_KINDS:
        raise DtypeError(f"Cannot assign values of type {array.dtype} to a {dtype} array")
    with np.errstate(invalid='ignore', over='ignore'):
        converted = array.astype(dtype)
        if array.dtype.kind == 'f' and dtype.kind == 'f':
            lost = np.isinf(converted) & ~np.isinf(array)
        else:
            lost = converted.astype(array.dtype) != array
    if np.any(lost):
        raise DtypeError(f"Values do not fit in {dtype} without losing information")
    return converted


class ArrayTensor(TensorAccessor["ArrayTensor", "ArrayTensor"]):
    """A NumPy-backed array indexable one axis at a time.

    Args:
        data: A numpy array (wrapped without copying) or anything
              np.asarray accepts
        dtype: Optional element type to convert to

    Raises:
        DtypeError: If the element type is not an integer or float kind
    """

    def __init__(self, data: Any, dtype: np.dtype | str | None = None):
        super().__init__()
        values = np.asarray(data, dtype=dtype)
        if values.dtype.kind not in ELIGIBLE_KINDS:
            raise DtypeError(f"{values.dtype} is not an eligible element type")
        self._values = values
        self._axes: dict[int, ArrayAxisAccessor] = {}
        if self.ndim > 0:
            self._borrows = self.axis(0).borrows

    @property
    def shape(self) -> tuple[int, ...]:
        return self._values.shape

    @property
    def ndim(self) -> int:
        return self._values.ndim

    @property
    def dtype(self) -> np.dtype:
        return self._values.dtype

    def to_numpy(self) -> np.ndarray:
        return self._values

    def item(self) -> int | float:
        return self._values.item()

    def tolist(self) -> Any:
        return self._values.tolist()

    def axis(self, axis: int) -> "ArrayAxisAccessor":
        axis = normalize_axis(axis, self.ndim)
        if axis not in self._axes:
            self._axes[axis] = ArrayAxisAccessor(self, axis)
        return self._axes[axis]

    def dim_size(self) -> int:
        return self.axis(0).dim_size()

    def read_scalar(self, position: int) -> "ArrayTensor":
        return self.axis(0).read_scalar(position)

    def write_scalar(self, position: int) -> "ArrayTensor":
        return self.axis(0).write_scalar(position)

    def read_range(self, index_range: CanonicalRange) -> "ArrayTensor":
        return self.axis(0).read_range(index_range)

    def write_range(self, index_range: CanonicalRange) -> "ArrayTensor":
        return self.axis(0).write_range(index_range)

    def assign(self, target: "ArrayTensor", value) -> None:
        if isinstance(value, ArrayTensor):
            value = value.to_numpy()
        value = _convert_values(value, target.dtype)
        np.copyto(target.to_numpy(), value, casting='safe')

    def __bool__(self) -> bool:
        return bool(self._values)

    def __repr__(self) -> str:
        return f"ArrayTensor(shape={self.shape}, dtype={self.dtype})"


class ArrayAxisAccessor(TensorAccessor[ArrayTensor, ArrayTensor]):
    """Accessor for one axis of an ArrayTensor."""

    def __init__(self, array: ArrayTensor, axis: int):
        super().__init__()
        self._array = array
        self._axis = axis

    def _view(self, index) -> ArrayTensor:
        key = (slice(None),) * self._axis + (index,)
        # A scalar index on a 1-d array returns a numpy scalar, not a view
        view = self._array.to_numpy()[key]
        if not isinstance(view, np.ndarray):
            view = self._array.to_numpy()[key + (Ellipsis,)]
        return ArrayTensor(view)

    def dim_size(self) -> int:
        return self._array.shape[self._axis]

    def read_scalar(self, position: int) -> ArrayTensor:
        return self._view(check_position(position, self.dim_size()))

    def write_scalar(self, position: int) -> ArrayTensor:
        return self.read_scalar(position)

    def read_range(self, index_range: CanonicalRange) -> ArrayTensor:
        logger.debug(f"Slicing axis {self._axis} to {index_range}")
        return self._view(index_range.to_slice())

    def write_range(self, index_range: CanonicalRange) -> ArrayTensor:
        return self.read_range(index_range)

    def assign(self, target: ArrayTensor, value) -> None:
        self._array.assign(target, value)

    def __repr__(self) -> str:
        return f"ArrayAxisAccessor(axis={self._axis}, size={self.dim_size()})"
