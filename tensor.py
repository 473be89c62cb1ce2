# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Core Tensor value type backed by a contiguous NumPy buffer."""
from __future__ import annotations

import math
import numpy as np
from typing import Any, Sequence

from .dtype import dtype as Dtype
from .errors import ShapeMismatchError
from .memory import MemoryInfo


class Tensor:
    """Shaped, contiguous buffer with an element type and placement.

    Tensors are values: kernel operations read them and allocate new
    results.  The only mutating method is :meth:`copy_`, used by
    execution engines to fill output placeholders.
    """

    __slots__ = ('_data', '_memory_info')

    # ------------------------------------------------------------------ #
    #  Construction                                                      #
    # ------------------------------------------------------------------ #

    def __init__(
        self,
        data: Any,
        dtype: Dtype | np.dtype | None = None,
        memory_info: MemoryInfo | None = None,
    ):
        if isinstance(data, Tensor):
            arr = data._data.copy()
        else:
            arr = np.asarray(data)

        if dtype is not None:
            if isinstance(dtype, Dtype):
                arr = arr.astype(dtype.to_numpy())
            else:
                arr = arr.astype(dtype)

        # Reject unknown element types at the boundary
        Dtype.from_numpy(arr.dtype)

        self._data: np.ndarray = np.ascontiguousarray(arr)
        self._memory_info: MemoryInfo = memory_info or MemoryInfo.cpu()

    @staticmethod
    def _wrap(data: np.ndarray,
              memory_info: MemoryInfo | None = None) -> 'Tensor':
        t = Tensor.__new__(Tensor)
        t._data = data
        t._memory_info = memory_info if memory_info is not None else MemoryInfo.cpu()
        return t

    # ------------------------------------------------------------------ #
    #  Properties                                                        #
    # ------------------------------------------------------------------ #

    @property
    def shape(self) -> tuple:
        return self._data.shape

    @property
    def ndim(self) -> int:
        return self._data.ndim

    @property
    def dtype(self) -> Dtype:
        return Dtype.from_numpy(self._data.dtype)

    @property
    def memory_info(self) -> MemoryInfo:
        return self._memory_info

    # ------------------------------------------------------------------ #
    #  Basic info methods                                                #
    # ------------------------------------------------------------------ #

    def numel(self) -> int:
        return self._data.size

    def element_count(self) -> int:
        return self._data.size

    def has_value(self) -> bool:
        """True when the tensor holds at least one element."""
        return self._data.size != 0

    def type_name(self) -> str:
        return self.dtype.type_name()

    def item(self) -> float | int:
        return self._data.item()

    def numpy(self) -> np.ndarray:
        return self._data.copy()

    def tolist(self):
        return self._data.tolist()

    def reshape(self, *shape) -> 'Tensor':
        if len(shape) == 1 and isinstance(shape[0], (tuple, list)):
            shape = tuple(shape[0])
        if math.prod(shape) != self._data.size:
            raise ShapeMismatchError(
                f"cannot reshape {self._data.size} elements into {shape}")
        return Tensor._wrap(self._data.reshape(shape).copy(), self._memory_info)

    # ---- Output placeholder fill ----

    def copy_(self, src: 'Tensor | np.ndarray') -> 'Tensor':
        data = src._data if isinstance(src, Tensor) else np.asarray(src)
        if data.size != self._data.size:
            raise ShapeMismatchError(
                f"cannot copy {data.size} elements into a tensor "
                f"of shape {self.shape}")
        np.copyto(self._data, data.reshape(self._data.shape),
                  casting='unsafe')
        return self

    def __len__(self) -> int:
        return self.shape[0]

    def __repr__(self) -> str:
        return (f"tensor({self._data!r}, dtype={self.dtype!r}, "
                f"memory_info={self._memory_info!r})")


# ====================================================================
# Module-level factory functions
# ====================================================================

def tensor(data: Any, dtype: Dtype | None = None,
           memory_info: MemoryInfo | None = None) -> Tensor:
    return Tensor(data, dtype=dtype, memory_info=memory_info)


def zeros(shape: Sequence[int], dtype: Dtype = Dtype.float32,
          memory_info: MemoryInfo | None = None) -> Tensor:
    return Tensor._wrap(np.zeros(tuple(shape), dtype=dtype.to_numpy()),
                        memory_info)


def empty(dtype: Dtype = Dtype.float32,
          memory_info: MemoryInfo | None = None) -> Tensor:
    """Zero-element tensor of shape ``(0,)``, the "absent" value."""
    return Tensor._wrap(np.zeros((0,), dtype=dtype.to_numpy()), memory_info)
