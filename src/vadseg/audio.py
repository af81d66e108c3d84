"""Sample decoding helpers: the detector only accepts mono float32 PCM."""

from __future__ import annotations

from pathlib import Path

import numpy as np

from vadseg.errors import InputError
from vadseg.logging import get_logger

logger = get_logger(__name__)


def as_samples(samples) -> np.ndarray:
    """Return ``samples`` as a 1-D float32 array.

    Integer input is rejected rather than silently rescaled; decode it with
    pcm16_to_float32 first.
    """
    arr = np.asarray(samples)
    if arr.ndim != 1:
        raise InputError(f"samples must be mono, got shape {arr.shape}")
    if arr.size and not np.issubdtype(arr.dtype, np.floating):
        raise InputError(f"samples must be float PCM, got dtype {arr.dtype}")
    return arr.astype(np.float32, copy=False)


def pcm16_to_float32(pcm_bytes: bytes) -> np.ndarray:
    """Convert little-endian int16 PCM bytes to float32 in [-1, 1)."""
    if len(pcm_bytes) % 2:
        raise InputError("int16 PCM must have an even number of bytes")
    raw = np.frombuffer(pcm_bytes, dtype="<i2")
    return raw.astype(np.float32) / 32768.0


def load_pcm(path: Path | str) -> np.ndarray:
    """Read a raw little-endian float32 PCM file."""
    data = Path(path).read_bytes()
    if len(data) % 4:
        raise InputError(f"{path}: size {len(data)} is not a multiple of 4 bytes")
    samples = np.frombuffer(data, dtype="<f4").astype(np.float32)
    logger.debug("Loaded PCM", path=str(path), samples=samples.size)
    return samples
