"""Speech segment types returned by the detector."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from vadseg.errors import InvariantError


@dataclass
class Segment:
    """A speech segment found by batch detection, in seconds.

    ``speech_end_at == 0`` marks a segment still open when the analysed
    buffer ended.
    """

    speech_start_at: float
    speech_end_at: float = 0.0

    @property
    def is_open(self) -> bool:
        return self.speech_end_at == 0

    @property
    def duration(self) -> float | None:
        """Segment length in seconds, or None while the segment is open."""
        if self.is_open:
            return None
        return self.speech_end_at - self.speech_start_at


@dataclass(frozen=True)
class RealtimeSegment:
    """A half-open ``[start, end)`` sample range from streaming detection."""

    start: int
    end: int
    silence: bool = False

    @property
    def length(self) -> int:
        return self.end - self.start


def check_coverage(segments: Sequence[RealtimeSegment], total: int) -> None:
    """Verify segments tile ``[0, total)`` with alternating kinds."""
    expected = 0
    prev: RealtimeSegment | None = None
    for seg in segments:
        if seg.start != expected or seg.end <= seg.start:
            raise InvariantError(
                f"segment [{seg.start}, {seg.end}) breaks coverage at sample {expected}"
            )
        if prev is not None and prev.silence == seg.silence:
            raise InvariantError(
                f"adjacent segments of the same kind at sample {seg.start}"
            )
        expected = seg.end
        prev = seg
    if expected != total:
        raise InvariantError(f"segments end at {expected}, expected {total}")
