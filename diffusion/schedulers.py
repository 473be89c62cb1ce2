# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝

"""Noise schedulers driven by the UNet sampling loop.

Every scheduler follows the same state machine::

    UNCONFIGURED ──init──▶ INITIALIZED ──mask──▶ STEPPING(k) ──step──▶ STEPPING(k+1)
          any state ──uninit──▶ UNINITIALIZED ──init──▶ INITIALIZED

and the same latent convention: the loop feeds the network
``latent + scale(mask, k)``, so ``step`` returns the next noisy sample
minus the next noise term ``scale(mask, k + 1)``.  The latent returned
after the final step is the clean sample.

- **DDIMScheduler** — Denoising Diffusion Implicit Models (Song et al. 2020), eta = 0
- **EulerDiscreteScheduler** — Euler method on the probability-flow ODE (Karras et al. 2022)
"""
from __future__ import annotations

import enum
import logging
import math
import numpy as np
from typing import Sequence

from sdcore import kernel as K
from sdcore.config import SchedulerConfig
from sdcore.dtype import int64
from sdcore.errors import SchedulerStateError, ShapeMismatchError
from sdcore.rng import RandomGenerator
from sdcore.tensor import Tensor

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
#  Helpers
# ═════════════════════════════════════════════════════════════════════

def _linear_beta_schedule(num_timesteps: int, beta_start: float,
                          beta_end: float) -> np.ndarray:
    return np.linspace(beta_start, beta_end, num_timesteps, dtype=np.float64)


def _cosine_beta_schedule(num_timesteps: int, s: float = 0.008,
                          max_beta: float = 0.9999) -> np.ndarray:
    steps = np.arange(num_timesteps + 1, dtype=np.float64) / num_timesteps
    alpha_bar = np.cos((steps + s) / (1 + s) * math.pi / 2) ** 2
    alpha_bar = alpha_bar / alpha_bar[0]
    betas = 1 - alpha_bar[1:] / alpha_bar[:-1]
    return np.clip(betas, 0.0001, max_beta)


def _scaled_linear_beta_schedule(num_timesteps: int, beta_start: float,
                                 beta_end: float) -> np.ndarray:
    """Scaled-linear schedule (square-root spacing, as in Stable Diffusion)."""
    return np.linspace(beta_start ** 0.5, beta_end ** 0.5,
                       num_timesteps, dtype=np.float64) ** 2


def get_betas(schedule: str, num_timesteps: int,
              beta_start: float, beta_end: float) -> np.ndarray:
    if schedule == 'linear':
        return _linear_beta_schedule(num_timesteps, beta_start, beta_end)
    elif schedule == 'cosine':
        return _cosine_beta_schedule(num_timesteps)
    elif schedule == 'scaled_linear':
        return _scaled_linear_beta_schedule(num_timesteps, beta_start, beta_end)
    elif schedule == 'squaredcos_cap_v2':
        return _cosine_beta_schedule(num_timesteps, max_beta=0.999)
    else:
        raise ValueError(f"Unknown beta schedule: {schedule!r}")


def _alphas_cumprod(config: SchedulerConfig) -> np.ndarray:
    betas = get_betas(config.beta_schedule, config.num_train_timesteps,
                      config.beta_start, config.beta_end)
    return np.cumprod(1.0 - betas)


class SchedulerState(enum.Enum):
    UNCONFIGURED = 'unconfigured'
    INITIALIZED = 'initialized'
    STEPPING = 'stepping'
    UNINITIALIZED = 'uninitialized'


# ═════════════════════════════════════════════════════════════════════
#  SchedulerBase — contract & state machine
# ═════════════════════════════════════════════════════════════════════

class SchedulerBase:
    """Shared state machine for sampling-loop schedulers.

    Subclasses fill in the curve math through four hooks:

    - ``_build_curves(step_count)`` — timesteps and per-step coefficients.
    - ``_noise_level(k)``           — coefficient of the mask at step k
                                      (k == step_count is the terminal level).
    - ``_predict_x0(x, pred, k)``   — clean-sample estimate and the
                                      matching noise estimate.
    - ``_advance(x, x0, eps, k)``   — next noisy sample.

    Args:
        config: Scheduler parameters; ``config.seed`` seeds the noise mask
                generator each time the scheduler is initialised.
    """

    init_noise_sigma: float = 1.0

    def __init__(self, config: SchedulerConfig):
        self.config = config
        self.generator = RandomGenerator()
        self.state = SchedulerState.UNCONFIGURED
        self.num_inference_steps: int | None = None
        self.timesteps: np.ndarray | None = None
        self.current_step = 0
        self._mask: Tensor | None = None

    # ---- contract ----

    def init(self, step_count: int) -> None:
        if self.state not in (SchedulerState.UNCONFIGURED,
                              SchedulerState.UNINITIALIZED):
            raise SchedulerStateError(
                f"init() called in state {self.state.value}; call uninit() first")
        if step_count < 0:
            raise ValueError(f"step_count must be >= 0, got {step_count}")
        self.generator.seed(self.config.seed)
        self._build_curves(step_count)
        self.num_inference_steps = step_count
        self.current_step = 0
        self.state = SchedulerState.INITIALIZED
        logger.debug("%s initialised for %d steps",
                     type(self).__name__, step_count)

    def mask(self, shape: Sequence[int]) -> Tensor:
        if self.state not in (SchedulerState.INITIALIZED,
                              SchedulerState.STEPPING):
            raise SchedulerStateError(
                f"mask() called in state {self.state.value}")
        self._mask = K.random(shape, self.generator, self.init_noise_sigma)
        self.current_step = 0
        self.state = SchedulerState.STEPPING
        return self._mask

    def scale(self, mask: Tensor, step_index: int) -> Tensor:
        self._check_index(step_index, 'scale')
        return K.multiple(mask, self._noise_level(step_index))

    def time(self, step_index: int) -> Tensor:
        self._check_index(step_index, 'time')
        return K.create((1,), [int(self.timesteps[step_index])], dtype=int64)

    def step(self, model_latent: Tensor, guided_pred: Tensor,
             step_index: int) -> Tensor:
        self._check_index(step_index, 'step')
        if step_index != self.current_step:
            raise SchedulerStateError(
                f"step({step_index}) called while at step {self.current_step}")

        x = model_latent.numpy().astype(np.float64)
        if guided_pred.has_value():
            if guided_pred.numel() != model_latent.numel():
                raise ShapeMismatchError(
                    f"prediction {guided_pred.shape} does not match "
                    f"latent {model_latent.shape}")
            pred = guided_pred.numpy().astype(np.float64).reshape(x.shape)
        else:
            # No conditioning branch ran; treat as a zero prediction.
            pred = np.zeros_like(x)

        x0, eps = self._predict_x0(x, pred, step_index)
        if self.config.clip_sample:
            x0 = np.clip(x0, -1.0, 1.0)
        prev = self._advance(x, x0, eps, step_index)
        prev = prev - self._noise_level(step_index + 1) * self._mask.numpy()

        self.current_step += 1
        return Tensor._wrap(prev.astype(np.float32), model_latent.memory_info)

    def uninit(self) -> None:
        self.timesteps = None
        self.num_inference_steps = None
        self._mask = None
        self.current_step = 0
        self._release_curves()
        self.state = SchedulerState.UNINITIALIZED

    # ---- helpers ----

    def _check_index(self, step_index: int, method: str) -> None:
        if self.state is not SchedulerState.STEPPING:
            raise SchedulerStateError(
                f"{method}() called in state {self.state.value}")
        if not 0 <= step_index < self.num_inference_steps:
            raise SchedulerStateError(
                f"{method}(): step index {step_index} outside "
                f"[0, {self.num_inference_steps})")

    def _build_curves(self, step_count: int) -> None:
        raise NotImplementedError

    def _release_curves(self) -> None:
        raise NotImplementedError

    def _noise_level(self, step_index: int) -> float:
        raise NotImplementedError

    def _predict_x0(self, x: np.ndarray, pred: np.ndarray,
                    step_index: int) -> tuple[np.ndarray, np.ndarray]:
        raise NotImplementedError

    def _advance(self, x: np.ndarray, x0: np.ndarray, eps: np.ndarray,
                 step_index: int) -> np.ndarray:
        raise NotImplementedError

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(state={self.state.value}, "
                f"step={self.current_step}/{self.num_inference_steps})")


# ═════════════════════════════════════════════════════════════════════
#  DDIMScheduler
# ═════════════════════════════════════════════════════════════════════

class DDIMScheduler(SchedulerBase):
    """Deterministic DDIM (eta = 0).

    With ``alpha_k = sqrt(ᾱ(t_k))`` and ``sigma_k = sqrt(1 − ᾱ(t_k))`` the
    network sees ``x_k = alpha_k x₀ + sigma_k ε`` and the update is::

        x₀      = (x_k − sigma_k ε̂) / alpha_k          (epsilon)
        x_{k+1} = alpha_{k+1} x₀ + sigma_{k+1} ε̂

    Timesteps use "leading" spacing, ``t_k = (n − 1 − k) · (T // n)``.
    """

    def __init__(self, config: SchedulerConfig):
        super().__init__(config)
        self.alphas_cumprod = _alphas_cumprod(config)
        self.final_alpha_cumprod = (1.0 if config.set_alpha_to_one
                                    else float(self.alphas_cumprod[0]))
        self._alpha: np.ndarray | None = None
        self._sigma: np.ndarray | None = None

    def _build_curves(self, step_count: int) -> None:
        T = self.config.num_train_timesteps
        if step_count > T:
            raise ValueError(
                f"{step_count} inference steps exceed {T} training timesteps")
        step_ratio = T // step_count if step_count else 0
        self.timesteps = (
            np.arange(0, step_count)[::-1] * step_ratio
        ).astype(np.int64)
        alpha_bar = np.append(self.alphas_cumprod[self.timesteps],
                              self.final_alpha_cumprod)
        self._alpha = np.sqrt(alpha_bar)
        self._sigma = np.sqrt(1.0 - alpha_bar)

    def _release_curves(self) -> None:
        self._alpha = None
        self._sigma = None

    def _noise_level(self, step_index: int) -> float:
        return float(self._sigma[step_index])

    def _predict_x0(self, x, pred, step_index):
        a = self._alpha[step_index]
        s = self._sigma[step_index]
        if self.config.prediction_type == 'epsilon':
            return (x - s * pred) / a, pred
        elif self.config.prediction_type == 'v_prediction':
            return a * x - s * pred, a * pred + s * x
        else:  # sample
            return pred, (x - a * pred) / max(s, 1e-8)

    def _advance(self, x, x0, eps, step_index):
        a_next = self._alpha[step_index + 1]
        s_next = self._sigma[step_index + 1]
        return a_next * x0 + s_next * eps


# ═════════════════════════════════════════════════════════════════════
#  EulerDiscreteScheduler
# ═════════════════════════════════════════════════════════════════════

class EulerDiscreteScheduler(SchedulerBase):
    """Euler method on the ODE probability flow (Karras et al. 2022).

    Sigmas live in variance-exploding space, ``x_ve = x₀ + σ ε``.  The
    loop works in variance-preserving coordinates
    ``x = x_ve / sqrt(σ² + 1)`` so the network always receives a
    unit-variance input without a separate ``scale_model_input`` pass.

    Timesteps are ``linspace(T − 1, 0, n)``; with ``use_karras_sigmas``
    the sigma ramp is remapped (rho = 7) and timesteps follow the sigmas.
    """

    def __init__(self, config: SchedulerConfig):
        super().__init__(config)
        alphas_cumprod = _alphas_cumprod(config)
        self.sigmas_full = np.sqrt((1.0 - alphas_cumprod) / alphas_cumprod)
        self.sigmas: np.ndarray | None = None

    @staticmethod
    def _karras_sigmas(sigmas: np.ndarray, n: int,
                       rho: float = 7.0) -> np.ndarray:
        """Karras et al. sigma ramp."""
        s_min = float(sigmas[-1])
        s_max = float(sigmas[0])
        ramp = np.linspace(0, 1, n, dtype=np.float64)
        min_inv = s_min ** (1.0 / rho)
        max_inv = s_max ** (1.0 / rho)
        return (max_inv + ramp * (min_inv - max_inv)) ** rho

    def _sigma_to_t(self, sigmas: np.ndarray) -> np.ndarray:
        log_full = np.log(self.sigmas_full)
        return np.interp(np.log(sigmas), log_full,
                         np.arange(len(log_full), dtype=np.float64))

    def _build_curves(self, step_count: int) -> None:
        T = self.config.num_train_timesteps
        timesteps = np.linspace(T - 1, 0, step_count)
        sigmas = np.interp(timesteps, np.arange(T), self.sigmas_full)
        if self.config.use_karras_sigmas and step_count > 1:
            sigmas = self._karras_sigmas(sigmas, step_count)
            timesteps = self._sigma_to_t(sigmas)
        self.timesteps = np.round(timesteps).astype(np.int64)
        self.sigmas = np.append(sigmas, 0.0)

    def _release_curves(self) -> None:
        self.sigmas = None

    def _noise_level(self, step_index: int) -> float:
        sigma = float(self.sigmas[step_index])
        return sigma / math.sqrt(sigma ** 2 + 1)

    def _predict_x0(self, x, pred, step_index):
        sigma = float(self.sigmas[step_index])
        x_ve = x * math.sqrt(sigma ** 2 + 1)
        if self.config.prediction_type == 'epsilon':
            x0 = x_ve - sigma * pred
        elif self.config.prediction_type == 'v_prediction':
            x0 = pred * (-sigma / math.sqrt(sigma ** 2 + 1)) + \
                 x_ve / (sigma ** 2 + 1)
        else:  # sample
            x0 = pred
        return x0, (x_ve - x0) / max(sigma, 1e-8)

    def _advance(self, x, x0, eps, step_index):
        sigma = float(self.sigmas[step_index])
        sigma_next = float(self.sigmas[step_index + 1])
        x_ve = x0 + sigma * eps
        prev_ve = x_ve + eps * (sigma_next - sigma)
        return prev_ve / math.sqrt(sigma_next ** 2 + 1)


__all__ = [
    'SchedulerState',
    'SchedulerBase',
    'DDIMScheduler',
    'EulerDiscreteScheduler',
    'get_betas',
]
