# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Execution engines — run a network forward pass on tensors.

An engine takes an ordered list of input tensors and an ordered list of
pre-allocated output placeholders, and fills the placeholders in place
(``Tensor.copy_``).  The UNet loop always passes three inputs
(latent, timestep, conditioning) and one output of latent shape.
"""
from __future__ import annotations

import logging
import numpy as np
from typing import Protocol, Sequence, runtime_checkable

from sdcore.tensor import Tensor

logger = logging.getLogger(__name__)


@runtime_checkable
class ExecutionEngine(Protocol):
    def execute(self, inputs: Sequence[Tensor],
                outputs: Sequence[Tensor]) -> None:
        ...


# ONNX element type strings -> numpy storage types
_ORT_TYPES = {
    'tensor(float)': np.float32,
    'tensor(float16)': np.float16,
    'tensor(double)': np.float64,
    'tensor(int32)': np.int32,
    'tensor(int64)': np.int64,
}


class OrtEngine:
    """Execution engine backed by an ONNX Runtime ``InferenceSession``.

    Inputs are matched to the session's inputs by position and cast to the
    element type each session input declares.

    Requires the ``onnx`` extra (``pip install sdcore[onnx]``).

    Args:
        model_path:      Path to the ``.onnx`` model file.
        providers:       Execution providers, default CPU only.
        session_options: Optional ``onnxruntime.SessionOptions``.
    """

    def __init__(self, model_path: str, providers: Sequence[str] | None = None,
                 session_options=None):
        import onnxruntime as ort

        self.model_path = model_path
        self.session = ort.InferenceSession(
            model_path,
            sess_options=session_options,
            providers=list(providers or ['CPUExecutionProvider']),
        )
        self._inputs = [(i.name, _ORT_TYPES.get(i.type))
                        for i in self.session.get_inputs()]
        self._output_names = [o.name for o in self.session.get_outputs()]
        logger.info("Loaded %s (inputs=%s, outputs=%s)", model_path,
                    [name for name, _ in self._inputs], self._output_names)

    def execute(self, inputs: Sequence[Tensor],
                outputs: Sequence[Tensor]) -> None:
        if len(inputs) != len(self._inputs):
            raise ValueError(
                f"{self.model_path} expects {len(self._inputs)} inputs, "
                f"got {len(inputs)}")
        feeds = {}
        for (name, np_type), t in zip(self._inputs, inputs):
            arr = t.numpy()
            feeds[name] = arr.astype(np_type) if np_type is not None else arr
        results = self.session.run(self._output_names[:len(outputs)], feeds)
        for out, res in zip(outputs, results):
            out.copy_(res)

    def __repr__(self) -> str:
        return f"OrtEngine({self.model_path!r})"


__all__ = ['ExecutionEngine', 'OrtEngine']
