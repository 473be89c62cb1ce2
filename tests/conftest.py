"""
Shared fixtures: stub execution engines and a stub scheduler.
"""
import numpy as np
import pytest

from sdcore import kernel as K
from sdcore.config import SchedulerConfig
from sdcore.diffusion import SchedulerRegistry


class EchoEngine:
    """Returns the input latent unchanged and records every call."""

    def __init__(self):
        self.calls = []

    def execute(self, inputs, outputs):
        self.calls.append([t.numpy() for t in inputs])
        outputs[0].copy_(inputs[0])


class ConditioningEngine:
    """Predicts a constant equal to the first conditioning value."""

    def __init__(self):
        self.calls = []

    def execute(self, inputs, outputs):
        self.calls.append([t.numpy() for t in inputs])
        value = float(inputs[2].numpy().ravel()[0])
        outputs[0].copy_(np.full(outputs[0].shape, value, dtype=np.float32))


class NoiseEngine:
    """Predicts a fixed noise tensor, whatever the input."""

    def __init__(self, noise):
        self.noise = noise
        self.calls = 0

    def execute(self, inputs, outputs):
        self.calls += 1
        outputs[0].copy_(self.noise)


class StubScheduler:
    """``mask`` is a constant, ``scale`` echoes it, ``step`` echoes the
    model latent and records the guided prediction it was given.
    """

    def __init__(self, config, mask_value=0.5):
        self.config = config
        self.mask_value = mask_value
        self.state = None
        self.guided = []
        self.events = []

    def init(self, step_count):
        self.events.append(('init', step_count))

    def mask(self, shape):
        self.events.append(('mask', tuple(shape)))
        return K.create(shape, np.full(int(np.prod(shape)), self.mask_value))

    def scale(self, mask, step_index):
        return K.duplicate(mask)

    def time(self, step_index):
        return K.create((1,), [step_index * 10])

    def step(self, model_latent, guided_pred, step_index):
        self.guided.append(guided_pred)
        return model_latent

    def uninit(self):
        self.events.append(('uninit',))


@pytest.fixture
def registry():
    reg = SchedulerRegistry()
    reg.register('stub', StubScheduler)
    return reg


@pytest.fixture
def stub_config():
    return SchedulerConfig(algorithm='stub')


@pytest.fixture
def echo_engine():
    return EchoEngine()


@pytest.fixture
def conditioning_engine():
    return ConditioningEngine()
