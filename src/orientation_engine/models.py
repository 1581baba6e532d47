"""
Data model shared by the extractors, classifier and orchestrator
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple


CANONICAL_ANGLES = (0, 90, 180, 270)


def normalize_angle(angle: int) -> int:
    """
    Normalize an angle modulo 360 into one of the four canonical values

    Raises:
        ValueError: if the angle is not a multiple of 90
    """
    normalized = int(angle) % 360
    if normalized not in CANONICAL_ANGLES or int(angle) != angle:
        raise ValueError(f"Rotation must be a multiple of 90 degrees, got {angle}")
    return normalized


class SignalSource(Enum):
    """Where an observation or verdict came from"""
    EMBEDDED_TEXT = "embedded_text"
    OCR = "ocr"
    ASPECT_RATIO = "aspect_ratio"
    LAYOUT = "layout"
    MANUAL = "manual"


class PageState(Enum):
    """States of the per-page fallback chain"""
    NOT_STARTED = "not_started"
    TRIED_EMBEDDED = "tried_embedded"
    TRIED_OCR = "tried_ocr"
    TRIED_ASPECT_RATIO = "tried_aspect_ratio"
    TRIED_LAYOUT = "tried_layout"
    AWAITING_MANUAL = "awaiting_manual"
    DECIDED = "decided"


@dataclass(frozen=True)
class TextFragment:
    """A piece of page text and its baseline position (0 = top, 1 = bottom)"""
    text: str
    vertical_position: float


@dataclass(frozen=True)
class OCRResult:
    """Recognized text of a rasterized page"""
    text: str
    confidence: float
    fragments: Tuple[TextFragment, ...] = ()


@dataclass(frozen=True)
class Observation:
    """One extractor's view of a page; lives only while the page is classified"""
    source: SignalSource
    raw_text: Optional[str] = None
    confidence: Optional[float] = None
    suggested_angle: Optional[int] = None  # None means unknown
    fragments: Tuple[TextFragment, ...] = ()
    # Page rotation the observation was made under; 0 for the unrotated content
    frame_rotation: int = 0

    @property
    def text_length(self) -> int:
        return len(self.raw_text) if self.raw_text else 0

    def absolute_angle(self, angle: int) -> int:
        """Turn an angle judged in this observation's frame into an absolute page rotation"""
        return normalize_angle(self.frame_rotation + angle)


@dataclass(frozen=True)
class ClassificationVerdict:
    """Target rotation for a page; ``decided`` is False only while escalating"""
    angle: int = 0
    decided: bool = False
    source: Optional[SignalSource] = None

    @classmethod
    def undecided(cls) -> "ClassificationVerdict":
        return cls()


@dataclass
class PageDecision:
    """What happened to one page during a run"""
    page_index: int
    previous_rotation: int
    verdict: ClassificationVerdict
    changed: bool = False
    states_visited: List[PageState] = field(default_factory=list)

    @property
    def page_number(self) -> int:
        return self.page_index + 1


@dataclass
class DocumentResult:
    """Outcome of processing one document"""
    source_path: Path
    output_path: Optional[Path] = None
    success: bool = False
    pages: List[PageDecision] = field(default_factory=list)
    error: Optional[str] = None
    processing_time: float = 0.0

    @property
    def changed(self) -> bool:
        return any(decision.changed for decision in self.pages)

    def to_dict(self) -> dict:
        return {
            'source': str(self.source_path),
            'output': str(self.output_path) if self.output_path else None,
            'success': self.success,
            'changed': self.changed,
            'error': self.error,
            'processing_time': round(self.processing_time, 3),
            'pages': [
                {
                    'page': decision.page_number,
                    'previous_rotation': decision.previous_rotation,
                    'rotation': decision.verdict.angle,
                    'source': decision.verdict.source.value if decision.verdict.source else None,
                    'changed': decision.changed,
                }
                for decision in self.pages
            ],
        }
