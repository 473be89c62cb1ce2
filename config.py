# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝
"""Run configuration for schedulers and the UNet sampling loop."""
from __future__ import annotations

from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

from .errors import ConfigError

_PREDICTION_TYPES = ('epsilon', 'v_prediction', 'sample')
_BETA_SCHEDULES = ('linear', 'scaled_linear', 'cosine', 'squaredcos_cap_v2')


def _known_fields(cls, mapping: Mapping[str, Any]) -> dict[str, Any]:
    names = {f.name for f in fields(cls)}
    unknown = sorted(set(mapping) - names)
    if unknown:
        raise ConfigError(f"Unknown {cls.__name__} keys: {unknown}")
    return dict(mapping)


@dataclass(frozen=True)
class SchedulerConfig:
    """Scheduler selection plus algorithm parameters.

    Instances are hashable and double as the scheduler pool key, so two
    UNets with equal configs can share pooled scheduler instances.

    Args:
        algorithm:           Registry name, e.g. ``'ddim'`` or ``'euler'``.
        num_train_timesteps: Length of the training noise curve.
        beta_start / beta_end: Beta range.
        beta_schedule:       One of ``'linear'``, ``'scaled_linear'``,
                             ``'cosine'``, ``'squaredcos_cap_v2'``.
        prediction_type:     ``'epsilon'``, ``'v_prediction'`` or ``'sample'``.
        clip_sample:         Clip predicted x₀ to [-1, 1].
        set_alpha_to_one:    Use ᾱ = 1 after the final step (DDIM).
        use_karras_sigmas:   Karras sigma ramp (Euler).
        seed:                Noise seed; 0 keeps the generator's own stream.
    """
    algorithm: str = 'ddim'
    num_train_timesteps: int = 1000
    beta_start: float = 0.00085
    beta_end: float = 0.012
    beta_schedule: str = 'scaled_linear'
    prediction_type: str = 'epsilon'
    clip_sample: bool = False
    set_alpha_to_one: bool = True
    use_karras_sigmas: bool = False
    seed: int = 0

    def __post_init__(self):
        if not self.algorithm or not self.algorithm.strip():
            raise ConfigError("algorithm must be non-empty")
        if self.num_train_timesteps <= 0:
            raise ConfigError(
                f"num_train_timesteps must be positive, got {self.num_train_timesteps}")
        if self.prediction_type not in _PREDICTION_TYPES:
            raise ConfigError(f"Unknown prediction_type: {self.prediction_type!r}")
        if self.beta_schedule not in _BETA_SCHEDULES:
            raise ConfigError(f"Unknown beta_schedule: {self.beta_schedule!r}")
        if self.seed < 0:
            raise ConfigError(f"seed must be non-negative, got {self.seed}")

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> 'SchedulerConfig':
        return cls(**_known_fields(cls, mapping))


DEFAULT_SCHEDULER_CONFIG = SchedulerConfig()


@dataclass(frozen=True)
class ModelUNetConfig:
    """Configuration of one UNet sampling run.

    Args:
        scheduler_config: Scheduler selection and parameters.
        inference_steps:  Number of denoising steps (0 returns the
                          initial latent untouched).
        input_width / input_height / input_channel: Latent dimensions.
        scale_positive:   Classifier-free guidance scale.
    """
    scheduler_config: SchedulerConfig = field(default_factory=SchedulerConfig)
    inference_steps: int = 3
    input_width: int = 512
    input_height: int = 512
    input_channel: int = 4
    scale_positive: float = 7.5

    def __post_init__(self):
        if self.inference_steps < 0:
            raise ConfigError(
                f"inference_steps must be >= 0, got {self.inference_steps}")
        for name in ('input_width', 'input_height', 'input_channel'):
            value = getattr(self, name)
            if value <= 0:
                raise ConfigError(f"{name} must be > 0, got {value}")

    @property
    def latent_shape(self) -> tuple[int, int, int, int]:
        """(1, C, H, W) shape of the latent being denoised."""
        return (1, self.input_channel, self.input_height, self.input_width)

    @classmethod
    def from_dict(cls, mapping: Mapping[str, Any]) -> 'ModelUNetConfig':
        """Build from plain data; ``scheduler_config`` may be a mapping."""
        values = _known_fields(cls, mapping)
        sched = values.get('scheduler_config')
        if isinstance(sched, Mapping):
            values['scheduler_config'] = SchedulerConfig.from_dict(sched)
        return cls(**values)

    def replace(self, **changes) -> 'ModelUNetConfig':
        return replace(self, **changes)


DEFAULT_UNET_CONFIG = ModelUNetConfig()


__all__ = [
    'SchedulerConfig',
    'ModelUNetConfig',
    'DEFAULT_SCHEDULER_CONFIG',
    'DEFAULT_UNET_CONFIG',
]
