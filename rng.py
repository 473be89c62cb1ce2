# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Seedable standard-normal sampler using the Box–Muller transform."""
from __future__ import annotations

import math
import numpy as np


class RandomGenerator:
    """Standard-normal samples drawn from a NumPy ``Generator``.

    Each sample consumes two uniform draws ``u1 ∈ (0, 1]`` and
    ``u2 ∈ [0, 1)``::

        radius = sqrt(-2 ln u1)
        theta  = 2π u2
        sample = mean + stddev * radius * cos(theta)

    ``seed(0)`` leaves the stream untouched; any other value restarts it
    deterministically.

    Args:
        mean:   Mean of the produced samples.
        stddev: Standard deviation of the produced samples.
        seed:   Optional initial seed.  ``None`` seeds from OS entropy.
    """

    def __init__(self, mean: float = 0.0, stddev: float = 1.0,
                 seed: int | None = None):
        self.mean = mean
        self.stddev = stddev
        self._rng = np.random.default_rng(seed)

    def seed(self, seed: int) -> None:
        if seed == 0:
            return
        self._rng = np.random.default_rng(seed)

    def next(self) -> float:
        """Draw one sample."""
        u1 = 1.0 - self._rng.random()
        u2 = self._rng.random()
        radius = math.sqrt(-2.0 * math.log(u1))
        theta = 2.0 * math.pi * u2
        return self.mean + self.stddev * radius * math.cos(theta)

    def sample(self, count: int) -> np.ndarray:
        """Draw ``count`` samples as a float32 array.

        Consumes the stream in the same (u1, u2) order as ``count``
        calls to :meth:`next`.
        """
        u = self._rng.random((count, 2))
        radius = np.sqrt(-2.0 * np.log(1.0 - u[:, 0]))
        theta = 2.0 * np.pi * u[:, 1]
        out = self.mean + self.stddev * radius * np.cos(theta)
        return out.astype(np.float32)

    def __repr__(self) -> str:
        return f"RandomGenerator(mean={self.mean}, stddev={self.stddev})"
