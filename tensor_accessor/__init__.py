from .accessor import AxisAccessor, SupportsAxisAccess, TensorAccessor, as_accessor, read_index, write_index
from .backends import DenseTensor
from .backends.numpy_backend import ArrayTensor
from .canonical_range import CanonicalRange
from .errors import (
    BorrowError,
    DtypeError,
    OutOfBoundsError,
    TensorAccessorError,
    UnsupportedIndexError,
    ValidationError,
)
from .utils import check_position, normalize_range
from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("tensor-accessor")
except PackageNotFoundError:
    __version__ = "0.0.0"

__all__ = [
    'TensorAccessor',
    'AxisAccessor',
    'SupportsAxisAccess',
    'as_accessor',
    'read_index',
    'write_index',
    'DenseTensor',
    'ArrayTensor',
    'CanonicalRange',
    'normalize_range',
    'check_position',
    'TensorAccessorError',
    'OutOfBoundsError',
    'UnsupportedIndexError',
    'BorrowError',
    'DtypeError',
    'ValidationError',
]
