# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Memory placement descriptor attached to every tensor.

Mirrors an ONNX Runtime ``MemoryInfo``: where a buffer lives and which
allocator produced it.  Kernel outputs inherit the descriptor of their
first operand.
"""
from __future__ import annotations

_ALLOCATORS = ('arena', 'device')
_MEM_TYPES = ('default', 'cpu_input', 'cpu_output')


class MemoryInfo:
    """Placement of a tensor buffer (``cpu``, ``cuda:0``, ...)."""

    __slots__ = ('_device', '_index', '_allocator', '_mem_type')

    def __init__(self, device: str = 'cpu', index: int | None = None,
                 allocator: str = 'arena', mem_type: str = 'default'):
        if ':' in device:
            device, idx = device.split(':', 1)
            index = int(idx)
        if allocator not in _ALLOCATORS:
            raise ValueError(f"Unknown allocator: {allocator!r}")
        if mem_type not in _MEM_TYPES:
            raise ValueError(f"Unknown memory type: {mem_type!r}")
        self._device = device
        self._index = index
        self._allocator = allocator
        self._mem_type = mem_type

    @classmethod
    def cpu(cls) -> 'MemoryInfo':
        """Default arena-allocated CPU placement."""
        return _CPU

    @property
    def device(self) -> str:
        return self._device

    @property
    def index(self) -> int | None:
        return self._index

    @property
    def allocator(self) -> str:
        return self._allocator

    @property
    def mem_type(self) -> str:
        return self._mem_type

    def _key(self) -> tuple:
        return (self._device, self._index, self._allocator, self._mem_type)

    def __eq__(self, other) -> bool:
        if not isinstance(other, MemoryInfo):
            return NotImplemented
        return self._key() == other._key()

    def __hash__(self) -> int:
        return hash(self._key())

    def __repr__(self) -> str:
        where = self._device if self._index is None else f"{self._device}:{self._index}"
        return (f"MemoryInfo('{where}', allocator='{self._allocator}', "
                f"mem_type='{self._mem_type}')")


_CPU = MemoryInfo('cpu')
