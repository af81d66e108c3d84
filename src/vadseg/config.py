from dataclasses import dataclass
from enum import Enum

from pydantic_settings import BaseSettings

from vadseg.errors import ConfigError

SAMPLE_RATES = (8000, 16000)
WINDOW_SIZES = {
    8000: (256, 512, 768),
    16000: (512, 1024, 1536),
}


class ModelVariant(Enum):
    """Silero model generations, which differ in state layout and look-back."""

    LEGACY = "legacy"
    UNIFIED = "unified"

    @property
    def uses_context(self) -> bool:
        return self is ModelVariant.UNIFIED

    def context_size(self, sample_rate: int) -> int:
        """Number of trailing samples prepended to the next window."""
        if not self.uses_context:
            return 0
        return 64 if sample_rate == 16000 else 32


@dataclass(frozen=True)
class DetectorConfig:
    model_path: str = ""
    sample_rate: int = 16000
    window_size: int = 512
    threshold: float = 0.5
    # Silence run required to close a speech segment.
    min_silence_duration_ms: int = 0
    # Speech run required to open a segment (streaming only).
    min_speech_duration_ms: int = 0
    speech_pad_ms: int = 0
    # Reserved for silence segments; not applied yet.
    silence_pad_ms: int = 0
    model_variant: ModelVariant = ModelVariant.UNIFIED

    def is_valid(self) -> None:
        """Raise ConfigError naming the first field out of range."""
        if not self.model_path:
            raise ConfigError("invalid model_path: should not be empty")

        if self.sample_rate not in SAMPLE_RATES:
            raise ConfigError("invalid sample_rate: valid values are 8000 and 16000")

        if self.window_size not in WINDOW_SIZES[self.sample_rate]:
            raise ConfigError(
                "invalid window_size: valid values are 512, 1024, 1536 for 16000 "
                "sample rate and 256, 512, 768 for 8000 sample rate"
            )

        if not 0 < self.threshold < 1:
            raise ConfigError("invalid threshold: should be in range (0, 1)")

        for name in (
            "min_silence_duration_ms",
            "min_speech_duration_ms",
            "speech_pad_ms",
            "silence_pad_ms",
        ):
            if getattr(self, name) < 0:
                raise ConfigError(f"invalid {name}: should be a positive number")

        if not isinstance(self.model_variant, ModelVariant):
            raise ConfigError("invalid model_variant: valid values are legacy and unified")

    def _ms_to_samples(self, ms: int) -> int:
        return ms * self.sample_rate // 1000

    @property
    def min_silence_samples(self) -> int:
        return self._ms_to_samples(self.min_silence_duration_ms)

    @property
    def min_speech_samples(self) -> int:
        return self._ms_to_samples(self.min_speech_duration_ms)

    @property
    def speech_pad_samples(self) -> int:
        return self._ms_to_samples(self.speech_pad_ms)


class Settings(BaseSettings):
    # Model
    model_path: str = "silero_vad.onnx"
    model_variant: str = "unified"

    # Audio
    sample_rate: int = 16000
    window_size: int = 512

    # Segmentation
    threshold: float = 0.5
    min_silence_duration_ms: int = 0
    min_speech_duration_ms: int = 0
    speech_pad_ms: int = 0
    silence_pad_ms: int = 0

    # Logging
    log_level: str = "INFO"
    log_dir: str | None = None
    log_json: bool = False

    model_config = {
        "env_prefix": "VAD_",
        "env_file": ".env",
        "extra": "ignore",
        "protected_namespaces": (),
    }

    def detector_config(self) -> DetectorConfig:
        """Build a DetectorConfig; validation happens when a Detector is created."""
        try:
            variant = ModelVariant(self.model_variant.lower())
        except ValueError:
            raise ConfigError(
                "invalid model_variant: valid values are legacy and unified"
            ) from None
        return DetectorConfig(
            model_path=self.model_path,
            sample_rate=self.sample_rate,
            window_size=self.window_size,
            threshold=self.threshold,
            min_silence_duration_ms=self.min_silence_duration_ms,
            min_speech_duration_ms=self.min_speech_duration_ms,
            speech_pad_ms=self.speech_pad_ms,
            silence_pad_ms=self.silence_pad_ms,
            model_variant=variant,
        )


settings = Settings()
