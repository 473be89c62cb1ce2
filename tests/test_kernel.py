"""
Tests for sdcore.kernel — elementwise and structural tensor operations.
"""
import numpy as np
import pytest

import sdcore
from sdcore import kernel as K
from sdcore.errors import ShapeMismatchError
from sdcore.rng import RandomGenerator


def _rand(shape, seed=0):
    rng = np.random.default_rng(seed)
    return K.create(shape, rng.standard_normal(int(np.prod(shape))))


def test_create_wraps_values():
    t = K.create((2, 3), [1, 2, 3, 4, 5, 6])
    assert t.shape == (2, 3)
    assert t.dtype == sdcore.float32
    assert t.tolist() == [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]


def test_create_rejects_wrong_length():
    with pytest.raises(ShapeMismatchError):
        K.create((2, 2), [1.0, 2.0, 3.0])


def test_random_shape_and_factor():
    a = K.random((1, 4, 8, 8), RandomGenerator(seed=3), 1.0)
    b = K.random((1, 4, 8, 8), RandomGenerator(seed=3), 2.0)
    assert a.shape == (1, 4, 8, 8)
    np.testing.assert_allclose(b.numpy(), 2.0 * a.numpy(), rtol=1e-6)


def test_divide_and_multiple():
    x = K.create((2,), [2.0, 4.0])
    assert K.divide(x, 2.0, 1.0).tolist() == [2.0, 3.0]
    assert K.multiple(x, 3.0, -1.0).tolist() == [5.0, 11.0]
    assert K.divide(x, 2.0).shape == x.shape


def test_duplicate_reinterprets_shape_and_type():
    x = K.create((1, 4), [1.5, 2.5, 3.5, 4.5])
    d = K.duplicate(x, (2, 2))
    assert d.shape == (2, 2)
    np.testing.assert_array_equal(d.numpy().ravel(), x.numpy().ravel())

    i = K.duplicate(x, dtype=sdcore.int64)
    assert i.dtype == sdcore.int64
    assert i.tolist() == [[1, 2, 3, 4]]

    with pytest.raises(ShapeMismatchError):
        K.duplicate(x, (3, 2))


def test_split_halves_batch():
    x = _rand((2, 3, 4, 5))
    left, right = K.split(x)
    assert left.shape == (1, 3, 4, 5)
    assert right.shape == (1, 3, 4, 5)
    np.testing.assert_array_equal(left.numpy()[0], x.numpy()[0])
    np.testing.assert_array_equal(right.numpy()[0], x.numpy()[1])


def test_split_odd_batch():
    left, right = K.split(_rand((3, 2, 2, 2)))
    assert left.shape[0] == 1
    assert right.shape[0] == 2


def test_split_requires_4d():
    with pytest.raises(ShapeMismatchError):
        K.split(_rand((2, 3, 4)))


def test_merge_concatenates_from_first_element():
    a = K.create((1, 3), [1.0, 2.0, 3.0])
    b = K.create((1, 3), [4.0, 5.0, 6.0])
    m = K.merge([a, b], 0)
    assert m.shape == (2, 3)
    assert m.numpy().ravel().tolist() == [1.0, 2.0, 3.0, 4.0, 5.0, 6.0]


def test_merge_multiplies_offset_dimension():
    parts = [_rand((1, 2, 3), seed=s) for s in range(3)]
    assert K.merge(parts, 1).shape == (1, 6, 3)


def test_merge_size_mismatch():
    with pytest.raises(ShapeMismatchError):
        K.merge([_rand((1, 2)), _rand((1, 3))], 0)


def test_merge_split_round_trip():
    a = _rand((1, 4, 8, 8), seed=1)
    b = _rand((1, 4, 8, 8), seed=2)
    left, right = K.split(K.merge([a, b], 0))
    np.testing.assert_array_equal(left.numpy(), a.numpy())
    np.testing.assert_array_equal(right.numpy(), b.numpy())


def test_guidance_endpoints():
    a = _rand((1, 4, 4, 4), seed=1)
    b = _rand((1, 4, 4, 4), seed=2)
    np.testing.assert_array_equal(K.guidance(a, b, 0.0).numpy(), a.numpy())
    np.testing.assert_allclose(K.guidance(a, b, 1.0).numpy(), b.numpy(),
                               rtol=1e-6, atol=1e-6)


def test_guidance_extrapolates():
    neg = K.create((2,), [1.0, 1.0])
    pos = K.create((2,), [3.0, 2.0])
    assert K.guidance(neg, pos, 7.5).tolist() == [16.0, 8.5]


def test_guidance_size_mismatch():
    with pytest.raises(ShapeMismatchError):
        K.guidance(_rand((1, 4)), _rand((1, 5)), 7.5)


def test_weight_identity_with_renormalise():
    a = _rand((2, 4, 3, 3), seed=5)
    ones = K.create((2,), [1.0, 1.0])
    np.testing.assert_array_equal(K.weight(a, ones, 3, True).numpy(), a.numpy())


def test_weight_per_batch_slice():
    a = K.create((2, 1, 2, 2), np.ones(8))
    w = K.create((2,), [2.0, 3.0])
    out = K.weight(a, w, 3).numpy()
    assert np.all(out[0] == 2.0)
    assert np.all(out[1] == 3.0)

    norm = K.weight(a, w, 3, re_normalize=True).numpy()
    np.testing.assert_allclose(norm[0], 0.8, rtol=1e-6)
    np.testing.assert_allclose(norm[1], 1.2, rtol=1e-6)
    assert norm.mean() == pytest.approx(1.0)


def test_weight_needs_enough_weights():
    with pytest.raises(ShapeMismatchError):
        K.weight(_rand((3, 2)), K.create((2,), [1.0, 1.0]), 1)


def test_add_zero_identity_and_sub_self():
    a = _rand((1, 4, 4, 4), seed=7)
    z = K.zeros(a.shape)
    np.testing.assert_array_equal(K.add(a, z, a.shape).numpy(), a.numpy())
    assert not K.sub(a, a, a.shape).numpy().any()


def test_add_reshapes_to_requested_shape():
    a = _rand((4,))
    assert K.add(a, a, (2, 2)).shape == (2, 2)


def test_add_sub_size_mismatch():
    with pytest.raises(ShapeMismatchError):
        K.add(_rand((4,)), _rand((5,)), (4,))
    with pytest.raises(ShapeMismatchError):
        K.sub(_rand((4,)), _rand((5,)), (4,))


def test_sum_folds_add():
    parts = [K.create((2,), [i, 2 * i]) for i in (1.0, 2.0, 3.0)]
    assert K.sum(parts, 3, (2,)).tolist() == [6.0, 12.0]
    assert K.sum(parts, 2, (1, 2)).tolist() == [[3.0, 6.0]]


def test_operations_do_not_mutate_inputs():
    a = _rand((2, 2, 2, 2), seed=3)
    b = _rand((2, 2, 2, 2), seed=4)
    before_a, before_b = a.numpy(), b.numpy()
    K.guidance(a, b, 3.0)
    K.add(a, b, a.shape)
    K.weight(a, K.create((2,), [2.0, 0.5]), 3, True)
    K.split(a)
    K.merge([a, b], 0)
    np.testing.assert_array_equal(a.numpy(), before_a)
    np.testing.assert_array_equal(b.numpy(), before_b)


def test_results_inherit_memory_info():
    info = sdcore.MemoryInfo('cuda:1', allocator='device')
    a = sdcore.Tensor(np.ones((2,), dtype=np.float32), memory_info=info)
    assert K.multiple(a, 2.0).memory_info == info
    assert K.add(a, a).memory_info == info


def test_type_name():
    assert K.type_name(K.zeros((1,))) == 'float32'
    assert K.type_name(sdcore.int64) == 'int64'


def test_weight_zero_mean_skips_renormalise(caplog):
    a = K.create((2, 1, 1, 1), [1.0, 1.0])
    w = K.create((2,), [1.0, -1.0])
    with caplog.at_level('WARNING', logger='sdcore.kernel'):
        out = K.weight(a, w, 3, re_normalize=True)
    assert out.numpy().ravel().tolist() == [1.0, -1.0]
    assert any('weighted mean is zero' in r.message for r in caplog.records)
