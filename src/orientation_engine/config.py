"""
Centralized configuration for the Orientation Engine
Contains the default marker phrases, thresholds and retry settings
"""

import json
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .error_handling import ConfigurationError


# Boilerplate expected to read right-side-up in the certificate/diploma population
DEFAULT_ORIENTATION_MARKERS = (
    "republic of the philippines",
    "professional regulation commission",
    "board of environmental planning",
    "republic act no",
    "certificate of registration",
    "this is to certify that",
)

# Text classification
MIN_TEXT_LENGTH = 20
NORMAL_SCORE_THRESHOLD = 2

# OCR
OCR_CONFIDENCE_THRESHOLD = 70.0
OCR_TIMEOUT_SECONDS = 30.0
RASTER_ZOOM = 2.0  # 2x scale for better OCR

# Layout: mean baseline position below this is "text in the upper half"
LAYOUT_SPLIT = 0.5

# Persistence
RETRY_MAX_ATTEMPTS = 3
RETRY_DELAY_SECONDS = 1.0

# Batch processing
WORKER_POOL_SIZE = 2

# Output
OUTPUT_FOLDER_NAME = "ORIENTED_FILES"


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry for transient write failures"""
    max_attempts: int = RETRY_MAX_ATTEMPTS  # Total attempts, first one included
    delay: float = RETRY_DELAY_SECONDS      # Seconds between attempts


@dataclass(frozen=True)
class OrientationConfig:
    """Immutable engine configuration, shared read-only across documents"""
    markers: Tuple[str, ...] = DEFAULT_ORIENTATION_MARKERS
    min_text_length: int = MIN_TEXT_LENGTH
    ocr_confidence_threshold: float = OCR_CONFIDENCE_THRESHOLD
    normal_score_threshold: int = NORMAL_SCORE_THRESHOLD
    retry_policy: RetryPolicy = field(default_factory=RetryPolicy)
    worker_pool_size: int = WORKER_POOL_SIZE
    ocr_timeout: float = OCR_TIMEOUT_SECONDS
    raster_zoom: float = RASTER_ZOOM
    layout_split: float = LAYOUT_SPLIT
    use_aspect_ratio_signal: bool = False
    tesseract_cmd: Optional[str] = None

    def __post_init__(self):
        # Extractors lowercase page text, so markers are matched lowercased too
        markers = tuple(str(marker).strip().lower() for marker in self.markers)
        object.__setattr__(self, 'markers', markers)

    def validate(self) -> "OrientationConfig":
        """
        Check every setting and raise on the first batch of problems

        Returns:
            OrientationConfig: self, so calls can be chained

        Raises:
            ConfigurationError: if any value is out of range
        """
        errors = []

        if not self.markers:
            errors.append("Marker list must not be empty")
        elif any(not marker for marker in self.markers):
            errors.append("Marker phrases must not be blank")

        if not _is_positive_int(self.min_text_length):
            errors.append("Minimum text length must be a positive integer")
        if not _is_positive_int(self.normal_score_threshold):
            errors.append("Normal score threshold must be a positive integer")
        if not _is_number(self.ocr_confidence_threshold) or not 0 <= self.ocr_confidence_threshold <= 100:
            errors.append("OCR confidence threshold must be between 0 and 100")
        if not _is_positive_int(self.worker_pool_size):
            errors.append("Worker pool size must be a positive integer")
        if not _is_number(self.ocr_timeout) or self.ocr_timeout <= 0:
            errors.append("OCR timeout must be positive")
        if not _is_number(self.raster_zoom) or self.raster_zoom <= 0:
            errors.append("Raster zoom must be positive")
        if not _is_number(self.layout_split) or not 0 < self.layout_split < 1:
            errors.append("Layout split must be between 0 and 1")

        policy = self.retry_policy
        if not _is_positive_int(policy.max_attempts):
            errors.append("Retry max attempts must be a positive integer")
        if not _is_number(policy.delay) or policy.delay < 0:
            errors.append("Retry delay must not be negative")

        if errors:
            raise ConfigurationError(f"Invalid configuration: {'; '.join(errors)}")
        return self

    def with_overrides(self, **overrides) -> "OrientationConfig":
        """Return a copy with the given (non-None) fields replaced"""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return replace(self, **changes) if changes else self


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _is_positive_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 1


def config_from_dict(data: Dict[str, Any]) -> OrientationConfig:
    """
    Build a configuration from a plain dictionary

    Keys mirror the OrientationConfig field names; the retry policy is given
    flat as ``retry_max_attempts`` and ``retry_delay``.

    Raises:
        ConfigurationError: on unknown keys or malformed values
    """
    data = dict(data)
    known = {f.name for f in fields(OrientationConfig)} - {'retry_policy'}

    policy_kwargs = {}
    if 'retry_max_attempts' in data:
        policy_kwargs['max_attempts'] = data.pop('retry_max_attempts')
    if 'retry_delay' in data:
        policy_kwargs['delay'] = data.pop('retry_delay')

    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigurationError(f"Unknown configuration keys: {', '.join(unknown)}")

    if 'markers' in data:
        markers = data['markers']
        if isinstance(markers, str) or not isinstance(markers, (list, tuple)):
            raise ConfigurationError("markers must be a list of strings")
        data['markers'] = tuple(markers)

    try:
        return OrientationConfig(retry_policy=RetryPolicy(**policy_kwargs), **data)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"Malformed configuration: {e}")


def load_config(config_path) -> OrientationConfig:
    """
    Load and validate configuration from a JSON file

    Args:
        config_path: Path to the JSON configuration file

    Returns:
        OrientationConfig: validated configuration
    """
    path = Path(config_path)
    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except FileNotFoundError:
        raise ConfigurationError(f"Configuration file not found: {path}")
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Could not read configuration file {path}: {e}")

    if not isinstance(data, dict):
        raise ConfigurationError(f"Configuration file must contain a JSON object: {path}")

    return config_from_dict(data).validate()
