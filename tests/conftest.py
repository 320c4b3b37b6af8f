"""Shared test fixtures and configuration for tensor accessor tests."""

import pytest
import torch
import numpy as np

from tensor_accessor import ArrayTensor, DenseTensor, TensorAccessor
from tensor_accessor.utils import check_position


class RecordingAccessor(TensorAccessor):
    """Accessor that records which primitive was called with which argument."""

    def __init__(self, size: int):
        super().__init__()
        self.size = size
        self.calls = []

    def dim_size(self):
        return self.size

    def read_scalar(self, position):
        check_position(position, self.size)
        self.calls.append(('read_scalar', position))
        return ('scalar', position)

    def write_scalar(self, position):
        check_position(position, self.size)
        self.calls.append(('write_scalar', position))
        return ('scalar', position)

    def read_range(self, index_range):
        self.calls.append(('read_range', index_range))
        return ('range', index_range)

    def write_range(self, index_range):
        self.calls.append(('write_range', index_range))
        return ('range', index_range)


class ListAxis:
    """Plain list container with the axis primitives, not subclassing TensorAccessor."""

    def __init__(self, items):
        self.items = list(items)

    def dim_size(self):
        return len(self.items)

    def read_scalar(self, position):
        return self.items[check_position(position, len(self.items))]

    def write_scalar(self, position):
        return check_position(position, len(self.items))

    def read_range(self, index_range):
        return self.items[index_range.to_slice()]

    def write_range(self, index_range):
        return index_range

    def assign(self, target, value):
        if isinstance(target, int):
            self.items[target] = value
        else:
            self.items[target.to_slice()] = value


@pytest.fixture
def recorder():
    """Recording accessor over an axis of size 5."""
    return RecordingAccessor(5)


@pytest.fixture
def empty_recorder():
    """Recording accessor over an empty axis."""
    return RecordingAccessor(0)


@pytest.fixture
def list_axis():
    return ListAxis([10, 20, 30, 40, 50])


@pytest.fixture
def vector():
    """DenseTensor [0, 1, 2, 3, 4] (int64)."""
    return DenseTensor(torch.arange(5))


@pytest.fixture
def matrix():
    """3x4 DenseTensor holding 0..11 row by row (int64)."""
    return DenseTensor(torch.arange(12).reshape(3, 4))


@pytest.fixture
def array_matrix():
    """3x4 ArrayTensor holding 0..11 row by row (int64)."""
    return ArrayTensor(np.arange(12, dtype=np.int64).reshape(3, 4))
