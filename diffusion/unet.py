# ╔══════════════════════════════════════════════════════════════════════╗
# ║  Sdcore — Latent Diffusion Sampling Core                             ║
# ║  Copyright © 2026 Pictofeed, LLC. All rights reserved.               ║
# ╚══════════════════════════════════════════════════════════════════════╝

"""UNet sampling loop — iterative denoising with classifier-free guidance.

- **ModelBase** — owns an execution engine and the output placeholders
  a forward pass fills.
- **UNet** — checks a scheduler out of a registry and drives it through
  ``inference_steps`` denoising steps, running the engine once per
  non-empty conditioning branch and blending the two predictions.
"""
from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from tqdm.auto import tqdm

from sdcore import kernel as K
from sdcore.config import ModelUNetConfig, DEFAULT_UNET_CONFIG
from sdcore.dtype import int64
from sdcore.errors import SchedulerStateError, ShapeMismatchError
from sdcore.tensor import Tensor
from sdcore.diffusion.engine import ExecutionEngine, OrtEngine
from sdcore.diffusion.registry import SchedulerRegistry

logger = logging.getLogger(__name__)


def _present(t: Optional[Tensor]) -> bool:
    return t is not None and t.has_value()


# ═════════════════════════════════════════════════════════════════════
#  ModelBase
# ═════════════════════════════════════════════════════════════════════

class ModelBase:
    """A network run through an execution engine.

    Subclasses implement ``generate_output`` to append the placeholder
    tensors the engine fills.

    Args:
        model_path: Model file; used to build an :class:`OrtEngine` when
                    ``engine`` is not given.
        engine:     Any object with ``execute(inputs, outputs)``.
    """

    def __init__(self, model_path: str,
                 engine: Optional[ExecutionEngine] = None):
        self.model_path = model_path
        self.engine = engine if engine is not None else OrtEngine(model_path)

    def generate_output(self, output_tensors: list[Tensor]) -> None:
        raise NotImplementedError("Subclasses must implement generate_output")

    def execute(self, inputs: Sequence[Tensor],
                outputs: Sequence[Tensor]) -> None:
        self.engine.execute(inputs, outputs)

    def run(self, inputs: Sequence[Tensor]) -> list[Tensor]:
        """Allocate outputs, execute, and return the filled outputs."""
        outputs: list[Tensor] = []
        self.generate_output(outputs)
        self.execute(inputs, outputs)
        return outputs


# ═════════════════════════════════════════════════════════════════════
#  UNet
# ═════════════════════════════════════════════════════════════════════

class UNet(ModelBase):
    """Noise-prediction UNet driven through a scheduler.

    The scheduler is checked out of ``registry`` and initialised for
    ``config.inference_steps`` on construction, and handed back by
    :meth:`close`.  Use the UNet as a context manager so the scheduler is
    returned even when a run fails::

        with UNet('unet.onnx', config, registry=registry) as unet:
            latent = unet.inference(embs_positive, embs_negative)

    Args:
        model_path:    Model file for the default ONNX Runtime engine.
        config:        Run configuration.
        registry:      Scheduler registry; a private one when omitted.
        engine:        Execution engine; overrides ``model_path``.
        show_progress: Show a tqdm bar over the denoising steps.
    """

    def __init__(
        self,
        model_path: str,
        config: ModelUNetConfig = DEFAULT_UNET_CONFIG,
        registry: Optional[SchedulerRegistry] = None,
        engine: Optional[ExecutionEngine] = None,
        show_progress: bool = False,
    ):
        super().__init__(model_path, engine)
        self.config = config
        self.show_progress = show_progress
        self.registry = registry if registry is not None else SchedulerRegistry()
        self.scheduler = self.registry.request_scheduler(config.scheduler_config)
        try:
            self.scheduler.init(config.inference_steps)
        except Exception:
            self.scheduler = self.registry.recycle_scheduler(self.scheduler)
            raise

    # ---- lifecycle ----

    @property
    def closed(self) -> bool:
        return self.scheduler is None

    def close(self) -> None:
        """Uninitialise the scheduler and return it to the registry."""
        if self.scheduler is None:
            return
        self.scheduler.uninit()
        self.scheduler = self.registry.recycle_scheduler(self.scheduler)

    def __enter__(self) -> 'UNet':
        return self

    def __exit__(self, *args) -> None:
        self.close()

    # ---- forward pass ----

    def generate_output(self, output_tensors: list[Tensor]) -> None:
        output_tensors.append(K.zeros(self.config.latent_shape))

    def _predict(self, model_latent: Tensor, timestep: Tensor,
                 embs: Tensor) -> Tensor:
        inputs = [
            K.duplicate(model_latent),
            K.duplicate(timestep, dtype=int64),
            K.duplicate(embs),
        ]
        outputs = self.run(inputs)
        if not outputs or outputs[0].shape != self.config.latent_shape:
            got = outputs[0].shape if outputs else None
            raise ShapeMismatchError(
                f"engine output {got} does not match latent "
                f"{self.config.latent_shape}")
        return outputs[0]

    def inference(
        self,
        embs_positive: Optional[Tensor],
        embs_negative: Optional[Tensor] = None,
        encoded_img: Optional[Tensor] = None,
        callback: Optional[Callable[[int, Tensor, Tensor], None]] = None,
    ) -> Tensor:
        """Denoise a latent through ``config.inference_steps`` steps.

        Args:
            embs_positive: Conditioning to pull toward; ``None`` or an
                           empty tensor skips the positive pass.
            embs_negative: Conditioning to push away from; ``None`` or an
                           empty tensor skips the negative pass and
                           disables guidance.
            encoded_img:   Starting latent (reinterpreted to
                           ``(1, C, H, W)``); ``None`` or empty starts
                           from zeros.
            callback:      Called as ``callback(step_index, timestep,
                           latent)`` after every step.

        Returns:
            The final latent, shape ``(1, C, H, W)``.
        """
        if self.closed:
            raise SchedulerStateError("inference() called on a closed UNet")

        cfg = self.config
        scheduler = self.scheduler
        latent_shape = cfg.latent_shape

        latent = (K.duplicate(encoded_img, latent_shape)
                  if _present(encoded_img) else K.zeros(latent_shape))
        init_mask = scheduler.mask(latent_shape)

        logger.info("Sampling %d steps at %s (guidance %.2f, %s)",
                    cfg.inference_steps, latent_shape, cfg.scale_positive,
                    cfg.scheduler_config.algorithm)

        steps = tqdm(range(cfg.inference_steps), desc='UNet',
                     disable=not self.show_progress)
        for i in steps:
            noise = scheduler.scale(init_mask, i)
            model_latent = (K.add(latent, noise, latent_shape)
                            if _present(latent) else noise)
            timestep = scheduler.time(i)

            pred_positive = K.empty()
            if _present(embs_positive):
                pred_positive = self._predict(model_latent, timestep,
                                              embs_positive)

            pred_negative = K.empty()
            if _present(embs_negative):
                pred_negative = self._predict(model_latent, timestep,
                                              embs_negative)

            if pred_negative.has_value():
                guided_pred = K.guidance(pred_negative, pred_positive,
                                         cfg.scale_positive)
            elif pred_positive.has_value():
                guided_pred = K.duplicate(pred_positive, latent_shape)
            else:
                guided_pred = pred_positive

            latent = scheduler.step(model_latent, guided_pred, i)
            logger.debug("step %d/%d timestep=%s", i + 1,
                         cfg.inference_steps, timestep.tolist())

            if callback is not None:
                callback(i, timestep, latent)

        return latent

    def __repr__(self) -> str:
        return (f"UNet({self.model_path!r}, steps={self.config.inference_steps}, "
                f"scheduler={self.scheduler!r})")


__all__ = ['ModelBase', 'UNet']
