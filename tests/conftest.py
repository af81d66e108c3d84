import numpy as np
import pytest

from vadseg.config import DetectorConfig, ModelVariant
from vadseg.engine import PairedState, UnifiedState


class ScriptedEngine:
    """Deterministic engine replaying a fixed probability script.

    Each call returns the next probability and a state with every element
    incremented by one, so tests can see how many calls the state went
    through.
    """

    def __init__(self, probabilities, variant: ModelVariant = ModelVariant.UNIFIED):
        self.variant = variant
        self._script = list(probabilities)
        self._pos = 0
        self.windows: list[np.ndarray] = []
        self.states: list = []
        self.close_calls = 0

    def rewind(self) -> None:
        self._pos = 0

    def infer(self, window, sample_rate, state):
        if self._pos >= len(self._script):
            raise RuntimeError("script exhausted")
        self.windows.append(np.array(window, copy=True))
        self.states.append(state)
        prob = self._script[self._pos]
        self._pos += 1
        if isinstance(state, PairedState):
            return prob, PairedState(h=state.h + 1, c=state.c + 1)
        return prob, UnifiedState(state=state.state + 1)

    def close(self) -> None:
        self.close_calls += 1


@pytest.fixture
def make_config():
    def _make(**overrides) -> DetectorConfig:
        fields = {
            "model_path": "silero_vad.onnx",
            "sample_rate": 16000,
            "window_size": 512,
            "threshold": 0.5,
        }
        fields.update(overrides)
        return DetectorConfig(**fields)
    return _make


@pytest.fixture
def scripted_engine():
    return ScriptedEngine


@pytest.fixture
def rng():
    return np.random.default_rng(1234)
