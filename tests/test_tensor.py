"""
Tests for sdcore.Tensor, dtype tags and memory placement.
"""
import numpy as np
import pytest

import sdcore
from sdcore import kernel as K
from sdcore.errors import ShapeMismatchError, UnsupportedDtypeError


def test_tensor_basic_info():
    t = sdcore.tensor([[1.0, 2.0], [3.0, 4.0]], dtype=sdcore.float32)
    assert t.shape == (2, 2)
    assert t.ndim == 2
    assert t.numel() == 4
    assert t.element_count() == 4
    assert t.dtype == sdcore.float32
    assert t.type_name() == 'float32'
    assert t.memory_info == sdcore.MemoryInfo.cpu()
    assert len(t) == 2


def test_numpy_returns_copy():
    t = K.create((3,), [1.0, 2.0, 3.0])
    arr = t.numpy()
    arr[0] = 100.0
    assert t.tolist() == [1.0, 2.0, 3.0]


def test_empty_has_no_value():
    e = sdcore.empty()
    assert e.shape == (0,)
    assert not e.has_value()
    assert K.zeros((1, 1)).has_value()


def test_reshape():
    t = K.create((2, 3), range(6))
    assert t.reshape(3, 2).shape == (3, 2)
    assert t.reshape((6,)).tolist() == [0.0, 1.0, 2.0, 3.0, 4.0, 5.0]
    with pytest.raises(ShapeMismatchError):
        t.reshape(4, 2)


def test_copy_fills_placeholder_in_place():
    out = K.zeros((1, 2, 2))
    out.copy_(np.arange(4, dtype=np.float64))
    assert out.tolist() == [[[0.0, 1.0], [2.0, 3.0]]]
    assert out.dtype == sdcore.float32
    with pytest.raises(ShapeMismatchError):
        out.copy_(np.zeros(5))


def test_unsupported_buffer_rejected():
    with pytest.raises(UnsupportedDtypeError):
        sdcore.Tensor(np.array(['a', 'b']))
    with pytest.raises(UnsupportedDtypeError):
        sdcore.Tensor(np.array([object()], dtype=object))


def test_every_dtype_has_a_name():
    for tag in sdcore.dtype:
        assert isinstance(tag.type_name(), str)
        assert tag.type_name()
    assert sdcore.dtype.bfloat16.type_name() == 'bfloat16'


def test_dtype_numpy_round_trip():
    for tag in (sdcore.float16, sdcore.float32, sdcore.float64,
                sdcore.int32, sdcore.int64):
        assert sdcore.dtype.from_numpy(tag.to_numpy()) is tag


def test_dtype_without_storage():
    with pytest.raises(UnsupportedDtypeError):
        sdcore.dtype.string.to_numpy()
    with pytest.raises(UnsupportedDtypeError):
        sdcore.dtype.undefined.to_numpy()


def test_memory_info_parsing_and_equality():
    a = sdcore.MemoryInfo('cuda:0', allocator='device')
    assert a.device == 'cuda'
    assert a.index == 0
    assert a == sdcore.MemoryInfo('cuda', 0, allocator='device')
    assert a != sdcore.MemoryInfo.cpu()
    assert len({a, sdcore.MemoryInfo('cuda', 0, allocator='device')}) == 1


def test_memory_info_validation():
    with pytest.raises(ValueError):
        sdcore.MemoryInfo(allocator='bump')
    with pytest.raises(ValueError):
        sdcore.MemoryInfo(mem_type='pinned')
