# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Scheduler registry: algorithm name -> factory, plus an instance pool.

A registry is an ordinary object handed to each UNet; there is no
process-wide instance.  Pooled schedulers are keyed by their full
:class:`~sdcore.config.SchedulerConfig`, so only an identically
configured UNet reuses an instance.
"""
from __future__ import annotations

import logging
import threading
from collections import defaultdict
from typing import Callable, Dict, List

from sdcore.config import SchedulerConfig
from sdcore.diffusion.schedulers import (
    SchedulerBase,
    SchedulerState,
    DDIMScheduler,
    EulerDiscreteScheduler,
)

logger = logging.getLogger(__name__)

SchedulerFactory = Callable[[SchedulerConfig], SchedulerBase]

BUILTIN_SCHEDULERS: Dict[str, SchedulerFactory] = {
    'ddim': DDIMScheduler,
    'euler': EulerDiscreteScheduler,
}


class SchedulerRegistry:
    """Builds, pools and recycles scheduler instances.

    ``request_scheduler`` and ``recycle_scheduler`` are serialised by a
    lock, so one registry can back UNets on several threads.  Each
    checked-out scheduler belongs to exactly one caller until it is
    recycled.

    Args:
        max_pool_size: Idle instances kept per config; surplus recycled
                       instances are dropped.
        builtins:      Register ``'ddim'`` and ``'euler'`` up front.
    """

    def __init__(self, max_pool_size: int = 4, builtins: bool = True) -> None:
        self.max_pool_size = max_pool_size
        self._lock = threading.Lock()
        self._factories: Dict[str, SchedulerFactory] = {}
        self._pool: Dict[SchedulerConfig, List[SchedulerBase]] = defaultdict(list)
        if builtins:
            for name, factory in BUILTIN_SCHEDULERS.items():
                self.register(name, factory)

    def register(self, algorithm: str, factory: SchedulerFactory) -> None:
        if not algorithm or not algorithm.strip():
            raise ValueError("algorithm must be non-empty")
        with self._lock:
            self._factories[algorithm.strip()] = factory

    def request_scheduler(self, config: SchedulerConfig) -> SchedulerBase:
        """Check out a scheduler for ``config``, reusing a pooled one."""
        with self._lock:
            idle = self._pool.get(config)
            if idle:
                logger.debug("Reusing pooled %r scheduler", config.algorithm)
                return idle.pop()
            factory = self._factories.get(config.algorithm)
            if factory is None:
                available = ", ".join(sorted(self._factories))
                raise KeyError(
                    f"Unknown scheduler algorithm: {config.algorithm!r}. "
                    f"Registered: {available}")
        logger.debug("Building new %r scheduler", config.algorithm)
        return factory(config)

    def recycle_scheduler(self, scheduler: SchedulerBase | None) -> None:
        """Return ``scheduler`` to the pool.

        Always returns ``None``; callers overwrite their handle with it::

            sched = registry.recycle_scheduler(sched)
        """
        if scheduler is None:
            return None
        if getattr(scheduler, 'state', None) is not SchedulerState.UNINITIALIZED:
            scheduler.uninit()
        with self._lock:
            idle = self._pool[scheduler.config]
            if any(s is scheduler for s in idle):
                raise ValueError("scheduler was already recycled")
            if len(idle) < self.max_pool_size:
                idle.append(scheduler)
            else:
                logger.debug("Pool for %r full, dropping scheduler",
                             scheduler.config.algorithm)
        return None

    def pooled(self, config: SchedulerConfig) -> int:
        """Number of idle instances pooled under ``config``."""
        with self._lock:
            return len(self._pool.get(config, ()))

    def clear(self) -> None:
        with self._lock:
            self._pool.clear()

    def __contains__(self, algorithm: str) -> bool:
        return algorithm in self._factories


__all__ = ['SchedulerRegistry', 'SchedulerFactory', 'BUILTIN_SCHEDULERS']
