"""Tests for element type eligibility and lossless conversion."""

import numpy as np
import pytest
import torch

from tensor_accessor import DtypeError
from tensor_accessor.dtype import (
    ELIGIBLE_DTYPES,
    cast,
    convert_values,
    dtype_to_str,
    is_lossless_cast,
    str_to_dtype,
    validate_dtype,
)


class TestDtypeNames:

    @pytest.mark.parametrize("dtype", sorted(ELIGIBLE_DTYPES, key=str))
    def test_names_round_trip(self, dtype):
        assert str_to_dtype(dtype_to_str(dtype)) == dtype

    def test_unknown_name(self):
        with pytest.raises(DtypeError):
            str_to_dtype("float128x")
        with pytest.raises(DtypeError):
            str_to_dtype("zeros")


class TestValidateDtype:

    @pytest.mark.parametrize("dtype", [torch.bool, torch.complex64, "complex128"])
    def test_ineligible(self, dtype):
        with pytest.raises(DtypeError):
            validate_dtype(dtype)

    def test_accepts_string(self):
        assert validate_dtype("bfloat16") == torch.bfloat16


class TestLosslessCast:

    @pytest.mark.parametrize("src,dst", [
        (torch.int8, torch.int16),
        (torch.uint8, torch.int16),
        (torch.int32, torch.int64),
        (torch.uint8, torch.float16),
        (torch.int8, torch.bfloat16),
        (torch.int16, torch.float32),
        (torch.int32, torch.float64),
        (torch.float16, torch.float32),
        (torch.bfloat16, torch.float32),
        (torch.float32, torch.float64),
        (torch.float64, torch.float64),
    ])
    def test_lossless(self, src, dst):
        assert is_lossless_cast(src, dst)

    @pytest.mark.parametrize("src,dst", [
        (torch.int16, torch.int8),
        (torch.int8, torch.uint8),
        (torch.uint8, torch.int8),
        (torch.int16, torch.float16),
        (torch.int32, torch.float32),
        (torch.int64, torch.float64),
        (torch.float16, torch.bfloat16),
        (torch.bfloat16, torch.float16),
        (torch.float64, torch.float32),
        (torch.float32, torch.int64),
    ])
    def test_lossy(self, src, dst):
        assert not is_lossless_cast(src, dst)

    def test_cast_tensor(self):
        values = torch.tensor([1, 2, 3], dtype=torch.int16)
        assert cast(values, "float32").dtype == torch.float32

    def test_cast_rejects_lossy(self):
        with pytest.raises(DtypeError, match="may lose information"):
            cast(torch.tensor([0.5]), torch.int32)


class TestConvertValues:
    """Assigned values convert only when nothing is lost."""

    @pytest.mark.parametrize("values,dtype,expected", [
        (3, torch.float32, [3.0]),
        (1.0, torch.int64, [1.0]),
        ([0.1, 2.5], torch.float32, [0.1, 2.5]),
        ([-128, 127], torch.int8, [-128, 127]),
        (2 ** 24, torch.float32, [2.0 ** 24]),
    ])
    def test_exact_values_accepted(self, values, dtype, expected):
        converted = convert_values(values, dtype)
        assert converted.dtype == dtype
        assert converted.reshape(-1).tolist() == pytest.approx(expected)

    @pytest.mark.parametrize("values,dtype", [
        (1.7, torch.int64),
        (300, torch.int8),
        (-1, torch.uint8),
        (2 ** 24 + 1, torch.float32),
        (1e300, torch.float32),
        (float("nan"), torch.int32),
        ([1, 2, 3.5], torch.int16),
    ])
    def test_changed_values_rejected(self, values, dtype):
        with pytest.raises(DtypeError):
            convert_values(values, dtype)

    def test_tensors_follow_cast_rules(self):
        assert convert_values(torch.arange(3, dtype=torch.int16), torch.float32).dtype == torch.float32
        with pytest.raises(DtypeError, match="may lose information"):
            convert_values(torch.arange(3), torch.float64)

    def test_numpy_arrays_follow_cast_rules(self):
        assert convert_values(np.arange(3, dtype=np.int32), torch.float64).tolist() == [0.0, 1.0, 2.0]
        with pytest.raises(DtypeError):
            convert_values(np.array([0.5]), torch.int64)

    def test_non_numeric_rejected(self):
        with pytest.raises(DtypeError):
            convert_values(True, torch.int64)
        with pytest.raises(DtypeError):
            convert_values("7", torch.int64)
