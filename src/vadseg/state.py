"""Hysteresis state machines deciding where speech starts and ends.

Speech opens when a window's probability reaches ``threshold`` and only
closes once probabilities stay below ``threshold - HYSTERESIS_GAP`` for the
configured silence run. The gap keeps the decision from toggling on
probabilities that hover around the threshold.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

HYSTERESIS_GAP = 0.15


class Edge(Enum):
    START = "start"
    END = "end"


@dataclass(frozen=True)
class SpeechEdge:
    """A confirmed transition at an absolute sample position."""

    edge: Edge
    sample: int


class HysteresisTracker:
    """Batch-mode decisions over a sample position that persists across calls."""

    def __init__(self, threshold: float, window_size: int, min_silence_samples: int) -> None:
        self._threshold = threshold
        self._window_size = window_size
        self._min_silence_samples = min_silence_samples
        self.current_sample = 0
        self.triggered = False
        self.temp_end: int | None = None

    @property
    def low_threshold(self) -> float:
        return self._threshold - HYSTERESIS_GAP

    def advance(self, prob: float) -> SpeechEdge | None:
        """Consume the probability of the next window.

        START carries the first sample of the window that crossed the
        threshold; END carries the sample where the silence run began.
        """
        self.current_sample += self._window_size

        if prob >= self._threshold:
            # Speech resumed before the silence run was confirmed.
            self.temp_end = None
            if not self.triggered:
                self.triggered = True
                return SpeechEdge(Edge.START, self.current_sample - self._window_size)
            return None

        if prob < self.low_threshold and self.triggered:
            if self.temp_end is None:
                self.temp_end = self.current_sample
            if self.current_sample - self.temp_end < self._min_silence_samples:
                return None
            end = self.temp_end
            self.temp_end = None
            self.triggered = False
            return SpeechEdge(Edge.END, end)

        return None

    def reset(self) -> None:
        self.current_sample = 0
        self.triggered = False
        self.temp_end = None


class StreamTracker:
    """Streaming-mode decisions over positions within a single buffer.

    Unlike batch mode, speech must stay above the threshold for
    ``min_speech_samples`` before a start is confirmed. Padding is applied
    here: START is already shifted left (clamped at 0) and END right
    (clamped at ``total``).
    """

    def __init__(
        self,
        threshold: float,
        window_size: int,
        total: int,
        min_silence_samples: int = 0,
        min_speech_samples: int = 0,
        speech_pad_samples: int = 0,
    ) -> None:
        self._threshold = threshold
        self._window_size = window_size
        self._total = total
        self._min_silence_samples = min_silence_samples
        self._min_speech_samples = min_speech_samples
        self._speech_pad_samples = speech_pad_samples
        self.triggered = False
        self.temp_start: int | None = None
        self.temp_end: int | None = None
        self.curr_start_speech = 0
        self.curr_start_silence = 0

    @property
    def low_threshold(self) -> float:
        return self._threshold - HYSTERESIS_GAP

    def advance(self, prob: float, window_start: int) -> SpeechEdge | None:
        window_end = window_start + self._window_size

        if prob >= self._threshold:
            if self.temp_start is None:
                self.temp_start = window_start
            # Not enough speech yet to open a segment.
            if window_end - self.temp_start < self._min_speech_samples:
                return None
            self.temp_end = None
            if not self.triggered:
                self.triggered = True
                start = max(self.temp_start - self._speech_pad_samples, 0)
                return SpeechEdge(Edge.START, start)
            return None

        if not self.triggered:
            # The run above threshold broke before it was confirmed.
            self.temp_start = None
            return None

        if prob < self.low_threshold:
            if self.temp_end is None:
                self.temp_end = window_start
            if window_end - self.temp_end < self._min_silence_samples:
                return None
            end = min(self.temp_end + self._speech_pad_samples, self._total)
            self.triggered = False
            self.temp_start = None
            self.temp_end = None
            return SpeechEdge(Edge.END, end)

        return None
