# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Exception types raised by sdcore."""
from __future__ import annotations


class SdCoreError(Exception):
    """Base class for all sdcore errors."""


class ShapeMismatchError(SdCoreError, ValueError):
    """Operand element counts or shapes do not agree."""


class UnsupportedDtypeError(SdCoreError, TypeError):
    """An element type has no mapping in :class:`sdcore.dtype.dtype`."""


class SchedulerStateError(SdCoreError, RuntimeError):
    """A scheduler method was called out of state-machine order."""


class ConfigError(SdCoreError, ValueError):
    """A run configuration value is out of range."""


__all__ = [
    'SdCoreError',
    'ShapeMismatchError',
    'UnsupportedDtypeError',
    'SchedulerStateError',
    'ConfigError',
]
