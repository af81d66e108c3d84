"""Inference engine contract and the ONNX Runtime Silero binding."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Union

import numpy as np
import onnxruntime as ort

from vadseg.config import ModelVariant
from vadseg.errors import EngineError
from vadseg.logging import get_logger

if TYPE_CHECKING:
    from vadseg.config import DetectorConfig

logger = get_logger(__name__)

LEGACY_STATE_SHAPE = (2, 1, 64)
UNIFIED_STATE_SHAPE = (2, 1, 128)


@dataclass(frozen=True)
class PairedState:
    """Separate hidden and cell vectors of the legacy LSTM."""

    h: np.ndarray
    c: np.ndarray

    @classmethod
    def zeros(cls) -> PairedState:
        return cls(
            h=np.zeros(LEGACY_STATE_SHAPE, dtype=np.float32),
            c=np.zeros(LEGACY_STATE_SHAPE, dtype=np.float32),
        )


@dataclass(frozen=True)
class UnifiedState:
    """Single concatenated state tensor of the unified model."""

    state: np.ndarray

    @classmethod
    def zeros(cls) -> UnifiedState:
        return cls(state=np.zeros(UNIFIED_STATE_SHAPE, dtype=np.float32))


RecurrentState = Union[PairedState, UnifiedState]


def initial_state(variant: ModelVariant) -> RecurrentState:
    """All-zero recurrent state for ``variant``."""
    if variant is ModelVariant.LEGACY:
        return PairedState.zeros()
    return UnifiedState.zeros()


class InferenceEngine(Protocol):
    """Scores one window of audio given the previous recurrent state.

    Implementations must be deterministic: the same window, sample rate and
    state always give the same probability and new state.
    """

    variant: ModelVariant

    def infer(
        self, window: np.ndarray, sample_rate: int, state: RecurrentState
    ) -> tuple[float, RecurrentState]: ...

    def close(self) -> None: ...


class OnnxSileroEngine:
    """Silero VAD scored through an onnxruntime InferenceSession."""

    def __init__(self, model_path: str, variant: ModelVariant = ModelVariant.UNIFIED) -> None:
        self.variant = variant
        self._log = logger.bind(model=model_path, variant=variant.value)

        opts = ort.SessionOptions()
        opts.intra_op_num_threads = 1
        opts.inter_op_num_threads = 1
        opts.graph_optimization_level = ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        try:
            self._session = ort.InferenceSession(
                model_path, sess_options=opts, providers=["CPUExecutionProvider"]
            )
        except Exception as e:
            raise EngineError(f"failed to create session for {model_path}: {e}") from e
        self._log.info("ONNX session created")

    def infer(
        self, window: np.ndarray, sample_rate: int, state: RecurrentState
    ) -> tuple[float, RecurrentState]:
        if self._session is None:
            raise EngineError("session is closed")

        x = np.asarray(window, dtype=np.float32).reshape(1, -1)
        sr = np.array(sample_rate, dtype=np.int64)

        if self.variant is ModelVariant.LEGACY:
            if not isinstance(state, PairedState):
                raise EngineError("legacy model requires a PairedState")
            out, hn, cn = self._session.run(
                ["output", "hn", "cn"],
                {"input": x, "sr": sr, "h": state.h, "c": state.c},
            )
            new_state: RecurrentState = PairedState(
                h=np.asarray(hn, dtype=np.float32), c=np.asarray(cn, dtype=np.float32)
            )
        else:
            if not isinstance(state, UnifiedState):
                raise EngineError("unified model requires a UnifiedState")
            out, state_n = self._session.run(
                ["output", "stateN"],
                {"input": x, "state": state.state, "sr": sr},
            )
            new_state = UnifiedState(state=np.asarray(state_n, dtype=np.float32))

        prob = float(np.asarray(out).reshape(-1)[0])
        return prob, new_state

    def close(self) -> None:
        """Drop the session. Safe to call more than once."""
        if self._session is not None:
            self._log.info("ONNX session released")
        self._session = None


def create_engine(config: DetectorConfig) -> InferenceEngine:
    """Build the default engine for an already validated config."""
    return OnnxSileroEngine(config.model_path, config.model_variant)
