# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Tensor kernel — elementwise and structural operations on tensors.

Every operation reads its operands and allocates a fresh result; no
input buffer is ever written.  Results inherit the memory placement of
their first operand.

- ``create`` / ``zeros`` / ``empty`` / ``random`` — construction.
- ``divide`` / ``multiple``  — affine transforms.
- ``duplicate``              — cast-and-reshape copy.
- ``split`` / ``merge``      — batch split and flat concatenation.
- ``guidance``               — classifier-free guidance blend.
- ``weight``                 — per-slice scalar weighting.
- ``add`` / ``sub`` / ``sum`` — elementwise arithmetic.
"""
from __future__ import annotations

import logging
import math
import numpy as np
from typing import Sequence

from .dtype import dtype as Dtype
from .errors import ShapeMismatchError
from .memory import MemoryInfo
from .rng import RandomGenerator
from .tensor import Tensor, zeros, empty

logger = logging.getLogger(__name__)


def _check_same_size(l: Tensor, r: Tensor, what: str) -> None:
    if l.numel() != r.numel():
        raise ShapeMismatchError(
            f"2 tensors {what} without match: {l.shape} vs {r.shape}")


def _as_shape(shape: Sequence[int] | None, default: tuple, size: int) -> tuple:
    if shape is None:
        return tuple(default)
    shape = tuple(int(d) for d in shape)
    if math.prod(shape) != size:
        raise ShapeMismatchError(
            f"{size} elements do not fit shape {shape}")
    return shape


# ═════════════════════════════════════════════════════════════════════
#  Construction
# ═════════════════════════════════════════════════════════════════════

def create(shape: Sequence[int], values, dtype: Dtype = Dtype.float32,
           memory_info: MemoryInfo | None = None) -> Tensor:
    """Wrap an explicit value buffer as a tensor of ``shape``."""
    arr = np.asarray(values, dtype=dtype.to_numpy()).ravel()
    shape = _as_shape(shape, arr.shape, arr.size)
    return Tensor._wrap(arr.reshape(shape), memory_info)


def random(shape: Sequence[int], generator: RandomGenerator,
           factor: float = 1.0) -> Tensor:
    """Tensor of ``generator.next() * factor`` samples."""
    shape = tuple(int(d) for d in shape)
    data = generator.sample(math.prod(shape)) * np.float32(factor)
    return Tensor._wrap(data.reshape(shape), MemoryInfo.cpu())


# ═════════════════════════════════════════════════════════════════════
#  Affine transforms & copies
# ═════════════════════════════════════════════════════════════════════

def divide(x: Tensor, denominator: float, offset: float = 0.0) -> Tensor:
    out = x._data.astype(np.float32) / np.float32(denominator) + np.float32(offset)
    return Tensor._wrap(out.astype(np.float32), x.memory_info)


def multiple(x: Tensor, multiplier: float, offset: float = 0.0) -> Tensor:
    out = x._data.astype(np.float32) * np.float32(multiplier) + np.float32(offset)
    return Tensor._wrap(out.astype(np.float32), x.memory_info)


def duplicate(x: Tensor, shape: Sequence[int] | None = None,
              dtype: Dtype = Dtype.float32) -> Tensor:
    """Copy ``x`` cast to ``dtype`` and reinterpreted as ``shape``.

    This is a reinterpretation, not a resample: ``x`` must hold exactly
    ``prod(shape)`` elements.
    """
    shape = _as_shape(shape, x.shape, x.numel())
    out = x._data.astype(dtype.to_numpy()).reshape(shape)
    return Tensor._wrap(out, x.memory_info)


# ═════════════════════════════════════════════════════════════════════
#  Structural
# ═════════════════════════════════════════════════════════════════════

def split(x: Tensor) -> list[Tensor]:
    """Split a (N, C, H, W) tensor into batch halves ``[0, N//2)`` and
    ``[N//2, N)``, each keeping its (C, H, W) layout.
    """
    if x.ndim != 4:
        raise ShapeMismatchError(
            f"split expects a 4-D (N, C, H, W) tensor, got shape {x.shape}")
    at = x.shape[0] // 2
    return [
        Tensor._wrap(x._data[:at].astype(np.float32), x.memory_info),
        Tensor._wrap(x._data[at:].astype(np.float32), x.memory_info),
    ]


def merge(tensors: Sequence[Tensor], offset: int) -> Tensor:
    """Concatenate equally-sized tensors back to back.

    Output element ``i * input_size + k`` is element ``k`` of
    ``tensors[i]``; dimension ``offset`` of the first tensor's shape is
    multiplied by ``len(tensors)``.
    """
    if not tensors:
        raise ValueError("merge needs at least one tensor")
    first = tensors[0]
    for t in tensors[1:]:
        _check_same_size(first, t, "merging")
    shape = list(first.shape)
    shape[offset] *= len(tensors)
    flat = np.concatenate([t._data.astype(np.float32).ravel() for t in tensors])
    return Tensor._wrap(flat.reshape(shape), first.memory_info)


# ═════════════════════════════════════════════════════════════════════
#  Guidance & weighting
# ═════════════════════════════════════════════════════════════════════

def guidance(l: Tensor, r: Tensor, guidance_scale: float) -> Tensor:
    """Classifier-free guidance: ``l + guidance_scale * (r - l)``.

    ``l`` is the unconditional (or negative) prediction and ``r`` the
    conditional one.  The result takes ``l``'s shape.
    """
    _check_same_size(l, r, "guidance")
    a = l._data.astype(np.float32).ravel()
    b = r._data.astype(np.float32).ravel()
    out = a + np.float32(guidance_scale) * (b - a)
    return Tensor._wrap(out.reshape(l.shape), l.memory_info)


def weight(l: Tensor, r: Tensor, offset: int,
           re_normalize: bool = False) -> Tensor:
    """Scale slices of ``l`` by scalar weights taken from ``r``.

    ``l`` is viewed as ``count`` slices, where ``count`` is the product of
    its leading ``l.ndim - offset`` dimensions; slice ``i`` is multiplied
    by ``r.flat[i]``.  With ``re_normalize`` the result is divided by
    ``weighted_mean / original_mean`` so it keeps ``l``'s mean.
    """
    weight_at_dim = l.ndim - offset
    if not 0 <= weight_at_dim <= l.ndim:
        raise ShapeMismatchError(
            f"offset {offset} out of range for shape {l.shape}")
    count = math.prod(l.shape[:weight_at_dim])
    if r.numel() < count:
        raise ShapeMismatchError(
            f"{count} weights needed, {r.numel()} given")

    single_size = l.numel() // count if count else 0
    data = l._data.astype(np.float32).reshape(count, single_size)
    weights = r._data.astype(np.float32).ravel()[:count, None]
    out = data * weights

    if re_normalize:
        original_mean = float(data.sum()) / single_size
        weighted_mean = float(out.sum()) / single_size
        if weighted_mean == 0.0:
            logger.warning("weight: weighted mean is zero, "
                           "skipping re-normalisation")
        else:
            out = out * np.float32(original_mean / weighted_mean)

    return Tensor._wrap(out.astype(np.float32).reshape(l.shape), l.memory_info)


# ═════════════════════════════════════════════════════════════════════
#  Elementwise arithmetic
# ═════════════════════════════════════════════════════════════════════

def add(l: Tensor, r: Tensor, shape: Sequence[int] | None = None) -> Tensor:
    _check_same_size(l, r, "adding with data")
    shape = _as_shape(shape, l.shape, l.numel())
    out = l._data.astype(np.float32).ravel() + r._data.astype(np.float32).ravel()
    return Tensor._wrap(out.reshape(shape), l.memory_info)


def sub(l: Tensor, r: Tensor, shape: Sequence[int] | None = None) -> Tensor:
    _check_same_size(l, r, "subtract with data")
    shape = _as_shape(shape, l.shape, l.numel())
    out = l._data.astype(np.float32).ravel() - r._data.astype(np.float32).ravel()
    return Tensor._wrap(out.reshape(shape), l.memory_info)


def sum(tensors: Sequence[Tensor], count: int | None = None,
        shape: Sequence[int] | None = None) -> Tensor:
    """Fold ``add`` over the first ``count`` tensors."""
    if not tensors:
        raise ValueError("sum needs at least one tensor")
    count = len(tensors) if count is None else count
    result = duplicate(tensors[0], shape)
    for t in tensors[1:count]:
        result = add(result, t, result.shape)
    return result


# ═════════════════════════════════════════════════════════════════════
#  Diagnostics
# ═════════════════════════════════════════════════════════════════════

def type_name(x: Tensor | Dtype) -> str:
    """Printable element type name of a tensor or dtype tag."""
    if isinstance(x, Tensor):
        x = x.dtype
    return x.type_name()


__all__ = [
    'create', 'zeros', 'empty', 'random',
    'divide', 'multiple', 'duplicate',
    'split', 'merge',
    'guidance', 'weight',
    'add', 'sub', 'sum',
    'type_name',
]
