# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""sdcore.diffusion — Schedulers, scheduler registry and the UNet loop.

Usage::

    from sdcore.config import ModelUNetConfig, SchedulerConfig
    from sdcore.diffusion import SchedulerRegistry, UNet

    registry = SchedulerRegistry()
    config = ModelUNetConfig(
        scheduler_config=SchedulerConfig(algorithm='euler', seed=42),
        inference_steps=20, input_width=64, input_height=64,
    )
    with UNet('unet.onnx', config, registry=registry) as unet:
        latent = unet.inference(embs_positive, embs_negative)
"""
from __future__ import annotations

# ── Schedulers ──
from .schedulers import (
    SchedulerState,
    SchedulerBase,
    DDIMScheduler,
    EulerDiscreteScheduler,
    get_betas,
)

# ── Registry ──
from .registry import SchedulerRegistry, BUILTIN_SCHEDULERS

# ── Engines & models ──
from .engine import ExecutionEngine, OrtEngine
from .unet import ModelBase, UNet

__all__ = [
    # Schedulers
    'SchedulerState',
    'SchedulerBase',
    'DDIMScheduler',
    'EulerDiscreteScheduler',
    'get_betas',
    # Registry
    'SchedulerRegistry',
    'BUILTIN_SCHEDULERS',
    # Engines & models
    'ExecutionEngine',
    'OrtEngine',
    'ModelBase',
    'UNet',
]
