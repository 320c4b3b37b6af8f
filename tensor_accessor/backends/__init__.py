"""Storage backends implementing the axis access primitives.

This module provides concrete containers that receive the generic indexing
surface from TensorAccessor. Storage layout is entirely the backend's
concern; the accessor layer only ever sees views.

- DenseTensor: torch-backed dense tensor (default)
- ArrayTensor: NumPy-backed dense array
"""

import logging
from typing import Any

import numpy as np
import torch

from tensor_accessor.accessor import TensorAccessor
from tensor_accessor.canonical_range import CanonicalRange
from tensor_accessor.dtype import cast, convert_values, dtype_to_str, validate_dtype
from tensor_accessor.utils import check_position, normalize_axis

# CONSTANTS
DEFAULT_DTYPE = torch.float32

logger = logging.getLogger(__name__)


class DenseTensor(TensorAccessor["DenseTensor", "DenseTensor"]):
    """A dense, torch-backed tensor indexable one axis at a time.

    The tensor itself is an accessor for its first axis; ``axis(k)``
    returns an accessor for any other axis. Every result is a DenseTensor
    sharing storage with its parent, so writes through a view are visible
    in the parent:

        m = DenseTensor([[1, 2, 3], [4, 5, 6]])
        m[1]              # row 1, shape (3,)
        m[1][0:2]         # first two elements of row 1
        m.axis(1)[-1]     # last column, shape (2,)
        m[0][-1] = 9      # writes through to m

    A scalar index drops the indexed axis; a range index keeps it.
    """

    def __init__(self, data: Any, dtype: torch.dtype | str | None = None):
        """Initialize a DenseTensor.

        Args:
            data: A torch.Tensor (wrapped without copying when dtype matches),
                  or anything torch.as_tensor accepts (nested lists, numpy arrays)
            dtype: Element type. Defaults to the input's own dtype for torch
                   and numpy input, and to DEFAULT_DTYPE otherwise.

        Raises:
            DtypeError: If the element type is not eligible
        """
        super().__init__()
        if isinstance(data, np.ndarray):
            data = torch.as_tensor(data)
        if dtype is None:
            dtype = data.dtype if isinstance(data, torch.Tensor) else DEFAULT_DTYPE
        dtype = validate_dtype(dtype)
        self._values = torch.as_tensor(data, dtype=dtype)
        self._axes: dict[int, DenseAxisAccessor] = {}
        if self.ndim > 0:
            # Indexing the tensor directly and through axis(0) share one borrow table
            self._borrows = self.axis(0).borrows

    @classmethod
    def zeros(cls, shape: tuple[int, ...], dtype: torch.dtype | str = DEFAULT_DTYPE) -> "DenseTensor":
        return cls(torch.zeros(shape, dtype=validate_dtype(dtype)))

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(self._values.shape)

    @property
    def ndim(self) -> int:
        return self._values.dim()

    @property
    def dtype(self) -> torch.dtype:
        return self._values.dtype

    def to_torch(self) -> torch.Tensor:
        """Underlying tensor. Shares storage with this DenseTensor."""
        return self._values

    def item(self) -> int | float:
        return self._values.item()

    def tolist(self) -> Any:
        return self._values.tolist()

    def cast(self, dtype: torch.dtype | str) -> "DenseTensor":
        """Owning copy converted to dtype.

        Raises:
            DtypeError: If the conversion could lose information
        """
        converted = cast(self._values, dtype)
        if converted is self._values:
            converted = converted.clone()
        return DenseTensor(converted)

    def axis(self, axis: int) -> "DenseAxisAccessor":
        """Accessor for the given axis (negative axes count from the last).

        The accessor is created once per axis, so borrows taken through it
        are tracked for the lifetime of this tensor.
        """
        axis = normalize_axis(axis, self.ndim)
        if axis not in self._axes:
            self._axes[axis] = DenseAxisAccessor(self, axis)
        return self._axes[axis]

    # Axis 0 primitives
    def dim_size(self) -> int:
        return self.axis(0).dim_size()

    def read_scalar(self, position: int) -> "DenseTensor":
        return self.axis(0).read_scalar(position)

    def write_scalar(self, position: int) -> "DenseTensor":
        return self.axis(0).write_scalar(position)

    def read_range(self, index_range: CanonicalRange) -> "DenseTensor":
        return self.axis(0).read_range(index_range)

    def write_range(self, index_range: CanonicalRange) -> "DenseTensor":
        return self.axis(0).write_range(index_range)

    def assign(self, target: "DenseTensor", value) -> None:
        """Copy value into target, broadcasting and converting to the tensor dtype.

        Raises:
            DtypeError: If the conversion would lose information
        """
        if isinstance(value, DenseTensor):
            value = value.to_torch()
        value = convert_values(value, target.dtype)
        target.to_torch().copy_(value)

    def __eq__(self, other) -> bool:
        if isinstance(other, DenseTensor):
            other = other.to_torch()
        elif not isinstance(other, torch.Tensor):
            return NotImplemented
        return self.shape == tuple(other.shape) and bool(torch.equal(self._values, other.to(self.dtype)))

    __hash__ = None

    def __bool__(self) -> bool:
        # Truth value of the contents as torch defines it, not of len()
        return bool(self._values)

    def __repr__(self) -> str:
        return f"DenseTensor(shape={self.shape}, dtype={dtype_to_str(self.dtype)})"


class DenseAxisAccessor(TensorAccessor[DenseTensor, DenseTensor]):
    """Accessor for one axis of a DenseTensor.

    Views are created with torch.select and torch.narrow, so they always
    share storage with the parent tensor.
    """

    def __init__(self, tensor: DenseTensor, axis: int):
        super().__init__()
        self._tensor = tensor
        self._axis = axis

    @property
    def axis_index(self) -> int:
        return self._axis

    def dim_size(self) -> int:
        return self._tensor.shape[self._axis]

    def read_scalar(self, position: int) -> DenseTensor:
        position = check_position(position, self.dim_size())
        return DenseTensor(self._tensor.to_torch().select(self._axis, position))

    def write_scalar(self, position: int) -> DenseTensor:
        return self.read_scalar(position)

    def read_range(self, index_range: CanonicalRange) -> DenseTensor:
        logger.debug(f"Narrowing axis {self._axis} to {index_range}")
        values = self._tensor.to_torch().narrow(self._axis, index_range.start, len(index_range))
        return DenseTensor(values)

    def write_range(self, index_range: CanonicalRange) -> DenseTensor:
        return self.read_range(index_range)

    def assign(self, target: DenseTensor, value) -> None:
        self._tensor.assign(target, value)

    def __repr__(self) -> str:
        return f"DenseAxisAccessor(axis={self._axis}, size={self.dim_size()})"


__all__ = ["DenseTensor", "DenseAxisAccessor"]
