"""Logging constants: module map, colors, abbreviations."""

from __future__ import annotations

import os
import re

# ---------------------------------------------------------------------------
# Module color / abbreviation map
# ---------------------------------------------------------------------------

MODULE_MAP: dict[str, tuple[str, str]] = {
    "vad":      ("VAD", "\033[91m"),
    "engine":   ("ENG", "\033[94m"),
    "state":    ("HYS", "\033[92m"),
    "context":  ("CTX", "\033[96m"),
    "segments": ("SEG", "\033[93m"),
    "audio":    ("AUD", "\033[97m"),
    "config":   ("CFG", "\033[95m"),
}

RESET = "\033[0m"
DIM = "\033[2m"

LEVEL_COLORS: dict[str, str] = {
    "DEBUG":    "\033[37m",
    "INFO":     "\033[97m",
    "WARNING":  "\033[93m",
    "ERROR":    "\033[91m",
    "CRITICAL": "\033[91;1m",
}

# ---------------------------------------------------------------------------
# Abbreviation dictionary
# ---------------------------------------------------------------------------

ABBREVIATIONS: dict[str, str] = {
    # General
    "detection": "det", "segment": "seg", "segments": "segs",
    "session": "sess", "config": "cfg", "context": "ctx",
    "probability": "prob", "threshold": "thr", "window": "win",
    "samples": "smp", "sample": "smp", "milliseconds": "ms",
    "seconds": "sec", "length": "len", "error": "err",
    # Actions
    "created": "new", "released": "rel", "destroyed": "gone",
    "started": "start", "starting": "start", "finished": "fin",
    "completed": "done", "failure": "fail",
    # Technical
    "inference": "inf", "recurrent": "rec", "model": "mdl",
    "duration": "dur", "variant": "var",
}

_ABBREV_PATTERN: re.Pattern | None = None


def _get_abbrev_pattern() -> re.Pattern:
    global _ABBREV_PATTERN
    if _ABBREV_PATTERN is None:
        escaped = [re.escape(k) for k in sorted(ABBREVIATIONS, key=len, reverse=True)]
        _ABBREV_PATTERN = re.compile(
            r"\b(" + "|".join(escaped) + r")\b", re.IGNORECASE
        )
    return _ABBREV_PATTERN


def abbreviate(msg: str) -> str:
    """Replace known words with abbreviations. Disabled by NO_ABBREV=1."""
    if not msg or os.environ.get("NO_ABBREV"):
        return msg
    return _get_abbrev_pattern().sub(
        lambda m: ABBREVIATIONS[m.group(0).lower()], msg
    )


def module_key(name: str) -> str:
    """Extract last dotted segment: 'vadseg.engine' -> 'engine'."""
    return name.rsplit(".", 1)[-1]
