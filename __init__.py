# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""
Sdcore — the numerical core of a latent-diffusion sampling pipeline.

A small tensor kernel over NumPy buffers, a seedable Box–Muller noise
source, and a UNet denoising loop that drives a pluggable execution
engine through scheduler-defined steps with classifier-free guidance.

Usage::

    import sdcore
    from sdcore import kernel as K
    from sdcore.diffusion import SchedulerRegistry, UNet

    a = K.create((1, 4), [1.0, 2.0, 3.0, 4.0])
    b = K.zeros((1, 4))
    guided = K.guidance(b, a, 7.5)
"""
from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Pictofeed, LLC"

# ── Errors ──
from .errors import (
    SdCoreError,
    ShapeMismatchError,
    UnsupportedDtypeError,
    SchedulerStateError,
    ConfigError,
)

# ── Dtypes & placement ──
from .dtype import dtype, float16, float32, float64, int32, int64
from .memory import MemoryInfo

# ── Core tensor class & factory functions ──
from .tensor import Tensor, tensor, zeros, empty
from .rng import RandomGenerator
from . import kernel

# ── Configuration ──
from .config import (
    SchedulerConfig,
    ModelUNetConfig,
    DEFAULT_SCHEDULER_CONFIG,
    DEFAULT_UNET_CONFIG,
)

__all__ = [
    "__version__",
    "__author__",

    # Errors
    'SdCoreError', 'ShapeMismatchError', 'UnsupportedDtypeError',
    'SchedulerStateError', 'ConfigError',
    # Dtypes & placement
    'dtype', 'float16', 'float32', 'float64', 'int32', 'int64',
    'MemoryInfo',
    # Tensor
    'Tensor', 'tensor', 'zeros', 'empty', 'RandomGenerator', 'kernel',
    # Configuration
    'SchedulerConfig', 'ModelUNetConfig',
    'DEFAULT_SCHEDULER_CONFIG', 'DEFAULT_UNET_CONFIG',
]
