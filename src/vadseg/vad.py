from __future__ import annotations

import numpy as np

from vadseg.audio import as_samples
from vadseg.config import DetectorConfig
from vadseg.context import ContextBuffer
from vadseg.engine import InferenceEngine, RecurrentState, create_engine, initial_state
from vadseg.errors import (
    ConfigError,
    DetectorClosedError,
    EngineError,
    InputError,
    InvariantError,
)
from vadseg.logging import detection_pass, get_logger, logged
from vadseg.segments import RealtimeSegment, Segment, check_coverage
from vadseg.state import Edge, HysteresisTracker, StreamTracker

logger = get_logger(__name__)


class Detector:
    """Speech segmentation driven by a per-window speech probability engine.

    One instance per audio stream. Not safe for concurrent use: recurrent
    state, look-back context and counters are mutated by every call.
    """

    def __init__(self, config: DetectorConfig, engine: InferenceEngine | None = None) -> None:
        config.is_valid()
        if engine is not None and engine.variant is not config.model_variant:
            raise ConfigError(
                f"invalid model_variant: engine is {engine.variant.value}, "
                f"config is {config.model_variant.value}"
            )

        self._cfg = config
        self._engine: InferenceEngine | None = engine if engine is not None else create_engine(config)
        self._state: RecurrentState = initial_state(config.model_variant)
        self._context = ContextBuffer(config.model_variant.context_size(config.sample_rate))
        self._tracker = HysteresisTracker(
            threshold=config.threshold,
            window_size=config.window_size,
            min_silence_samples=config.min_silence_samples,
        )
        logger.debug(
            "Detector created",
            sample_rate=config.sample_rate,
            window=config.window_size,
            threshold=config.threshold,
            variant=config.model_variant.value,
        )

    @property
    def config(self) -> DetectorConfig:
        return self._cfg

    @property
    def closed(self) -> bool:
        return self._engine is None

    def __enter__(self) -> Detector:
        return self

    def __exit__(self, *exc) -> None:
        if not self.closed:
            self.destroy()

    def _check_open(self) -> InferenceEngine:
        if self._engine is None:
            raise DetectorClosedError("detector has been destroyed")
        return self._engine

    def _check_length(self, pcm: np.ndarray) -> None:
        if pcm.size < self._cfg.window_size:
            raise InputError("not enough samples")

    def _infer(self, engine: InferenceEngine, window: np.ndarray) -> float:
        """Score one window, threading recurrent state and look-back context."""
        try:
            prob, self._state = engine.infer(
                self._context.prepend(window), self._cfg.sample_rate, self._state
            )
        except EngineError:
            raise
        except Exception as e:
            raise EngineError(f"infer failed: {e}") from e
        self._context.update(window)
        return prob

    @logged()
    def detect(self, samples) -> list[Segment]:
        """Return speech segments, timestamps in seconds.

        Sample positions keep counting across calls until reset(), so
        consecutive buffers of one stream yield stream-relative timestamps.
        Segments are not carried between calls: speech still open when a
        buffer ends stays open in that result, and if the next call then
        confirms its end it raises InvariantError("unexpected speech end").
        Reset between buffers, or pass the whole stream, to avoid it.
        A trailing partial window is not scored.
        """
        engine = self._check_open()
        pcm = as_samples(samples)
        self._check_length(pcm)

        ws = self._cfg.window_size
        sr = self._cfg.sample_rate
        pad = self._cfg.speech_pad_samples
        stream_end = self._tracker.current_sample + pcm.size

        with detection_pass("batch"):
            logger.debug("Starting speech detection", samples=pcm.size)
            segments: list[Segment] = []
            for offset in range(0, pcm.size - ws + 1, ws):
                edge = self._tracker.advance(self._infer(engine, pcm[offset:offset + ws]))
                if edge is None:
                    continue

                if edge.edge is Edge.START:
                    # Padding may reach before the stream start.
                    start_at = max(edge.sample - pad, 0) / sr
                    logger.debug("Speech start", start_at=start_at)
                    segments.append(Segment(speech_start_at=start_at))
                    continue

                if not segments or not segments[-1].is_open:
                    raise InvariantError("unexpected speech end")
                end_at = min(edge.sample + pad, stream_end) / sr
                logger.debug("Speech end", end_at=end_at)
                segments[-1].speech_end_at = end_at

            logger.debug("Speech detection done", segments=len(segments))
            return segments

    @logged()
    def detect_realtime(self, samples) -> tuple[np.ndarray, list[RealtimeSegment]]:
        """Return a cleaned copy of ``samples`` and its speech/silence segments.

        Silence runs are zeroed in the copy. The segments alternate kind and
        tile ``[0, len(samples))`` exactly; positions are relative to this
        buffer.
        """
        engine = self._check_open()
        pcm = as_samples(samples)
        self._check_length(pcm)

        ws = self._cfg.window_size
        total = pcm.size
        cleaned = pcm.copy()
        stream = StreamTracker(
            threshold=self._cfg.threshold,
            window_size=ws,
            total=total,
            min_silence_samples=self._cfg.min_silence_samples,
            min_speech_samples=self._cfg.min_speech_samples,
            speech_pad_samples=self._cfg.speech_pad_samples,
        )

        with detection_pass("realtime"):
            logger.debug("Starting realtime detection", samples=total)
            segments: list[RealtimeSegment] = []
            for offset in range(0, total - ws + 1, ws):
                edge = stream.advance(self._infer(engine, pcm[offset:offset + ws]), offset)
                if edge is None:
                    continue

                if edge.edge is Edge.START:
                    self._open_speech(stream, edge.sample, cleaned, segments)
                    logger.debug("Speech start", sample=stream.curr_start_speech)
                else:
                    segments.append(RealtimeSegment(stream.curr_start_speech, edge.sample))
                    stream.curr_start_silence = edge.sample
                    logger.debug("Speech end", sample=edge.sample)

            if stream.triggered:
                segments.append(RealtimeSegment(stream.curr_start_speech, total))
            elif stream.curr_start_silence < total:
                cleaned[stream.curr_start_silence:] = 0
                segments.append(RealtimeSegment(stream.curr_start_silence, total, silence=True))

            check_coverage(segments, total)
            logger.debug("Realtime detection done", segments=len(segments))
            return cleaned, segments

    def _open_speech(
        self,
        stream: StreamTracker,
        start: int,
        cleaned: np.ndarray,
        segments: list[RealtimeSegment],
    ) -> None:
        silence_start = stream.curr_start_silence
        gap = start - silence_start
        if gap > 0 and gap >= self._cfg.min_silence_samples:
            cleaned[silence_start:start] = 0
            segments.append(RealtimeSegment(silence_start, start, silence=True))
            stream.curr_start_speech = start
        elif segments and not segments[-1].silence:
            # Silence too short to report: the previous speech segment continues.
            stream.curr_start_speech = segments.pop().start
        else:
            stream.curr_start_speech = silence_start

    @logged()
    def reset(self) -> None:
        """Zero recurrent state, context and counters; keep the engine."""
        self._check_open()
        self._state = initial_state(self._cfg.model_variant)
        self._context.clear()
        self._tracker.reset()

    def destroy(self) -> None:
        """Release the engine. Any later call raises DetectorClosedError."""
        engine = self._check_open()
        self._engine = None
        engine.close()
        logger.debug("Detector destroyed")
