import numpy as np
import pytest
from unittest.mock import MagicMock, patch

from vadseg.config import ModelVariant
from vadseg.engine import (
    LEGACY_STATE_SHAPE,
    UNIFIED_STATE_SHAPE,
    OnnxSileroEngine,
    PairedState,
    UnifiedState,
    create_engine,
    initial_state,
)
from vadseg.errors import EngineError


class TestInitialState:
    def test_legacy_is_zero_pair(self):
        state = initial_state(ModelVariant.LEGACY)
        assert isinstance(state, PairedState)
        assert state.h.shape == LEGACY_STATE_SHAPE
        assert state.c.shape == LEGACY_STATE_SHAPE
        assert not state.h.any() and not state.c.any()

    def test_unified_is_single_zero_tensor(self):
        state = initial_state(ModelVariant.UNIFIED)
        assert isinstance(state, UnifiedState)
        assert state.state.shape == UNIFIED_STATE_SHAPE
        assert state.state.dtype == np.float32
        assert not state.state.any()


class TestOnnxSileroEngine:
    @pytest.fixture(autouse=True)
    def _mock_ort(self):
        """Mock onnxruntime so no model file is needed."""
        with patch("vadseg.engine.ort") as mock_ort:
            self._ort = mock_ort
            self._session = MagicMock()
            mock_ort.InferenceSession.return_value = self._session
            yield

    def test_session_pinned_to_one_thread(self):
        OnnxSileroEngine("model.onnx")
        opts = self._ort.SessionOptions.return_value
        assert opts.intra_op_num_threads == 1
        assert opts.inter_op_num_threads == 1
        assert opts.graph_optimization_level == self._ort.GraphOptimizationLevel.ORT_ENABLE_ALL
        args, kwargs = self._ort.InferenceSession.call_args
        assert args[0] == "model.onnx"
        assert kwargs["sess_options"] is opts

    def test_session_failure_raises_engine_error(self):
        self._ort.InferenceSession.side_effect = RuntimeError("no such file")
        with pytest.raises(EngineError, match="no such file"):
            OnnxSileroEngine("missing.onnx")

    def test_unified_infer(self):
        new_state = np.full(UNIFIED_STATE_SHAPE, 0.5, dtype=np.float32)
        self._session.run.return_value = [np.array([[0.75]], dtype=np.float32), new_state]
        engine = OnnxSileroEngine("model.onnx", ModelVariant.UNIFIED)

        window = np.ones(576, dtype=np.float32)
        prob, state = engine.infer(window, 16000, UnifiedState.zeros())

        assert prob == pytest.approx(0.75)
        assert isinstance(state, UnifiedState)
        np.testing.assert_array_equal(state.state, new_state)
        outputs, feeds = self._session.run.call_args.args
        assert outputs == ["output", "stateN"]
        assert set(feeds) == {"input", "state", "sr"}
        assert feeds["input"].shape == (1, 576)
        assert int(feeds["sr"]) == 16000

    def test_legacy_infer(self):
        hn = np.ones(LEGACY_STATE_SHAPE, dtype=np.float32)
        cn = np.full(LEGACY_STATE_SHAPE, 2.0, dtype=np.float32)
        self._session.run.return_value = [np.array([[0.1]], dtype=np.float32), hn, cn]
        engine = OnnxSileroEngine("model.onnx", ModelVariant.LEGACY)

        prob, state = engine.infer(np.zeros(256, dtype=np.float32), 8000, PairedState.zeros())

        assert prob == pytest.approx(0.1)
        assert isinstance(state, PairedState)
        np.testing.assert_array_equal(state.h, hn)
        np.testing.assert_array_equal(state.c, cn)
        outputs, feeds = self._session.run.call_args.args
        assert outputs == ["output", "hn", "cn"]
        assert set(feeds) == {"input", "sr", "h", "c"}

    def test_state_variant_mismatch(self):
        engine = OnnxSileroEngine("model.onnx", ModelVariant.LEGACY)
        with pytest.raises(EngineError, match="PairedState"):
            engine.infer(np.zeros(512, dtype=np.float32), 16000, UnifiedState.zeros())

    def test_closed_engine_refuses_infer(self):
        engine = OnnxSileroEngine("model.onnx")
        engine.close()
        engine.close()
        with pytest.raises(EngineError, match="closed"):
            engine.infer(np.zeros(512, dtype=np.float32), 16000, UnifiedState.zeros())

    def test_create_engine_uses_config(self, make_config):
        engine = create_engine(make_config(model_path="vad.onnx", model_variant=ModelVariant.LEGACY))
        assert isinstance(engine, OnnxSileroEngine)
        assert engine.variant is ModelVariant.LEGACY
        assert self._ort.InferenceSession.call_args.args[0] == "vad.onnx"
