# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Element types carried by tensors.

The set is closed: every tag maps to a printable name, and only the
tags with a NumPy storage type can back a tensor buffer.  Unknown NumPy
dtypes are rejected when a buffer is wrapped, never deeper in the
kernel.
"""
from __future__ import annotations

import enum
import numpy as np

from .errors import UnsupportedDtypeError


class dtype(enum.Enum):
    """Tensor element type tags (ONNX element type order)."""
    undefined = 0
    float32 = 1
    uint8 = 2
    int8 = 3
    uint16 = 4
    int16 = 5
    int32 = 6
    int64 = 7
    string = 8
    bool = 9
    float16 = 10
    float64 = 11
    uint32 = 12
    uint64 = 13
    complex64 = 14
    complex128 = 15
    bfloat16 = 16

    def type_name(self) -> str:
        """Printable name, e.g. ``'float32'``."""
        return _NAMES[self]

    def to_numpy(self) -> np.dtype:
        """Convert to the NumPy storage dtype."""
        try:
            return np.dtype(_TO_NUMPY[self])
        except KeyError:
            raise UnsupportedDtypeError(
                f"{self.type_name()} has no numpy storage type") from None

    @staticmethod
    def from_numpy(np_dtype) -> 'dtype':
        """Convert a NumPy dtype to an element type tag."""
        try:
            return _FROM_NUMPY[np.dtype(np_dtype)]
        except (KeyError, TypeError):
            raise UnsupportedDtypeError(
                f"Unsupported tensor type: {np_dtype!r}") from None

    def __repr__(self) -> str:
        return f"sdcore.{self.name}"


_NAMES = {
    dtype.undefined: 'undefined',
    dtype.float32: 'float32',
    dtype.uint8: 'uint8',
    dtype.int8: 'int8',
    dtype.uint16: 'uint16',
    dtype.int16: 'int16',
    dtype.int32: 'int32',
    dtype.int64: 'int64',
    dtype.string: 'string',
    dtype.bool: 'bool',
    dtype.float16: 'float16',
    dtype.float64: 'float64',
    dtype.uint32: 'uint32',
    dtype.uint64: 'uint64',
    dtype.complex64: 'complex64',
    dtype.complex128: 'complex128',
    dtype.bfloat16: 'bfloat16',
}

_TO_NUMPY = {
    dtype.float16: np.float16,
    dtype.float32: np.float32,
    dtype.float64: np.float64,
    dtype.bfloat16: np.float32,  # numpy has no bfloat16; use float32
    dtype.int8: np.int8,
    dtype.int16: np.int16,
    dtype.int32: np.int32,
    dtype.int64: np.int64,
    dtype.uint8: np.uint8,
    dtype.uint16: np.uint16,
    dtype.uint32: np.uint32,
    dtype.uint64: np.uint64,
    dtype.bool: np.bool_,
    dtype.complex64: np.complex64,
    dtype.complex128: np.complex128,
}

_FROM_NUMPY = {
    np.dtype(np.float16): dtype.float16,
    np.dtype(np.float32): dtype.float32,
    np.dtype(np.float64): dtype.float64,
    np.dtype(np.int8): dtype.int8,
    np.dtype(np.int16): dtype.int16,
    np.dtype(np.int32): dtype.int32,
    np.dtype(np.int64): dtype.int64,
    np.dtype(np.uint8): dtype.uint8,
    np.dtype(np.uint16): dtype.uint16,
    np.dtype(np.uint32): dtype.uint32,
    np.dtype(np.uint64): dtype.uint64,
    np.dtype(np.bool_): dtype.bool,
    np.dtype(np.complex64): dtype.complex64,
    np.dtype(np.complex128): dtype.complex128,
}


# Convenience aliases (sdcore.float32, sdcore.int64, etc.)
float16 = dtype.float16
float32 = dtype.float32
float64 = dtype.float64
int32 = dtype.int32
int64 = dtype.int64
