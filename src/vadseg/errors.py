"""Exception taxonomy for vadseg."""


class VADError(Exception):
    """Base class for all detector errors."""


class ConfigError(VADError):
    """Raised when a DetectorConfig field is out of range."""


class InputError(VADError):
    """Raised when the samples handed to a detection call are unusable."""


class EngineError(VADError):
    """Raised when the inference engine fails to load or score a window.

    The recurrent state and counters may be partially advanced afterwards;
    the detector should be destroyed.
    """


class InvariantError(VADError):
    """Raised when the segmentation state is inconsistent."""


class DetectorClosedError(VADError):
    """Raised when a destroyed detector is used."""
