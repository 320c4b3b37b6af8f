"""Element types admissible as tensor contents.

Eligible element types are the integer and floating point torch dtypes:
they support the basic arithmetic operations and have additive and
multiplicative identities. Conversions between them are only allowed when
no information can be lost.
"""

import math
from typing import Any

import numpy as np
import torch

from tensor_accessor.errors import DtypeError

ELIGIBLE_DTYPES = frozenset({
    torch.uint8,
    torch.int8,
    torch.int16,
    torch.int32,
    torch.int64,
    torch.float16,
    torch.bfloat16,
    torch.float32,
    torch.float64,
})


def dtype_to_str(dtype: torch.dtype) -> str:
    """Serialize a torch.dtype to a compact string (e.g., 'float32')."""
    s = str(dtype)
    if s.startswith("torch."):
        return s.split(".")[-1]
    return s


def str_to_dtype(name: str) -> torch.dtype:
    """Deserialize a dtype string back to torch.dtype."""
    dt = getattr(torch, name, None)
    if not isinstance(dt, torch.dtype):
        raise DtypeError(f"Unknown torch dtype: {name}")
    return dt


def validate_dtype(dtype: torch.dtype | str) -> torch.dtype:
    """Check that dtype is an eligible element type.

    Args:
        dtype: A torch.dtype or its compact string name

    Returns:
        torch.dtype: The validated dtype

    Raises:
        DtypeError: If dtype is not an integer or floating point dtype
    """
    if isinstance(dtype, str):
        dtype = str_to_dtype(dtype)
    if dtype not in ELIGIBLE_DTYPES:
        raise DtypeError(f"{dtype} is not an eligible element type; "
                         f"expected one of {sorted(dtype_to_str(d) for d in ELIGIBLE_DTYPES)}")
    return dtype


def _significand_bits(dtype: torch.dtype) -> int:
    # eps is 2**-(stored mantissa bits); add the implicit leading bit
    return int(round(-math.log2(torch.finfo(dtype).eps))) + 1


def is_lossless_cast(src: torch.dtype, dst: torch.dtype) -> bool:
    """Check whether every value of src is exactly representable in dst.

    Rules:
        - integer -> integer: the source range is contained in the destination range
        - integer -> float: every source integer fits in the destination significand
        - float -> float: both precision and exponent range are contained
        - float -> integer: never lossless
    """
    src = validate_dtype(src)
    dst = validate_dtype(dst)
    if src == dst:
        return True

    if not src.is_floating_point:
        src_info = torch.iinfo(src)
        if not dst.is_floating_point:
            dst_info = torch.iinfo(dst)
            return dst_info.min <= src_info.min and src_info.max <= dst_info.max
        largest = max(abs(src_info.min), src_info.max)
        return largest <= 2 ** _significand_bits(dst)

    if not dst.is_floating_point:
        return False
    src_info, dst_info = torch.finfo(src), torch.finfo(dst)
    return (_significand_bits(src) <= _significand_bits(dst)
            and src_info.max <= dst_info.max
            and dst_info.tiny <= src_info.tiny)


def cast(values: torch.Tensor, dtype: torch.dtype | str) -> torch.Tensor:
    """Convert a tensor to another eligible element type without losing information.

    Args:
        values: Tensor to convert
        dtype: Target dtype or its compact string name

    Returns:
        torch.Tensor: The converted tensor. A new tensor unless dtype already matches.

    Raises:
        DtypeError: If the conversion could lose information
    """
    dtype = validate_dtype(dtype)
    if not is_lossless_cast(values.dtype, dtype):
        raise DtypeError(f"Casting {dtype_to_str(values.dtype)} to {dtype_to_str(dtype)} may lose information")
    return values.to(dtype)


def convert_values(values: Any, dtype: torch.dtype | str) -> torch.Tensor:
    """Convert values being assigned into a tensor of the given dtype.

    Tensors and NumPy arrays carry their own element type and follow the
    is_lossless_cast rules. Python numbers and nested lists have no declared
    type, so they are checked by value instead: integers must come through
    the conversion unchanged, floats stored into an integer dtype must be
    integral and in range, and floats stored into a floating dtype may round
    but must not overflow.

    Args:
        values: A tensor, a NumPy array, a number or a nested list of numbers
        dtype: Target dtype or its compact string name

    Returns:
        torch.Tensor: values at dtype, ready to be copied into a view

    Raises:
        DtypeError: If any value would change in the conversion
    """
    dtype = validate_dtype(dtype)
    if isinstance(values, (torch.Tensor, np.ndarray)):
        return cast(torch.as_tensor(values), dtype)

    array = np.asarray(values)
    if array.dtype.kind not in "iuf":
        raise DtypeError(f"Cannot assign values of type {array.dtype} to a {dtype_to_str(dtype)} tensor")
    natural = torch.as_tensor(array)
    converted = natural.to(dtype)
    if natural.dtype.is_floating_point and dtype.is_floating_point:
        lost = torch.isinf(converted) & ~torch.isinf(natural)
    else:
        lost = converted.to(natural.dtype) != natural
    if bool(lost.any()):
        raise DtypeError(f"Values do not fit in {dtype_to_str(dtype)} without losing information")
    return converted
