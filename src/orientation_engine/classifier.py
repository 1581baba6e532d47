"""
Orientation Classifier

Decides whether page text reads upright (0°) or upside-down (180°) by counting
known marker phrases in the text and in its character-reversed form. Text
pulled from an upside-down page frequently comes out reversed, so a page whose
reversed text contains more markers than its forward text is treated as flipped.
"""

from typing import Optional, Sequence

from .config import OrientationConfig
from .models import ClassificationVerdict, SignalSource


def marker_score(text: str, markers: Sequence[str]) -> int:
    """Number of distinct markers found in the text; repeats count once"""
    return sum(1 for marker in markers if marker in text)


class OrientationClassifier:
    """Pure text classifier configured with a marker list and thresholds"""

    def __init__(self, config: OrientationConfig):
        self.markers = config.markers
        self.min_text_length = config.min_text_length
        self.normal_score_threshold = config.normal_score_threshold

    def normal_score(self, text: str) -> int:
        return marker_score(text, self.markers)

    def reversed_score(self, text: str) -> int:
        return marker_score(text[::-1], self.markers)

    def has_enough_text(self, text: Optional[str]) -> bool:
        return bool(text) and len(text) >= self.min_text_length

    def classify(self, text: Optional[str],
                 source: Optional[SignalSource] = None) -> ClassificationVerdict:
        """
        Classify text as 0°, 180° or undecided

        Args:
            text: Normalized (lowercased, single-spaced) page text
            source: Signal source recorded on a decided verdict

        Returns:
            ClassificationVerdict: decided=False when the text is too short or ambiguous
        """
        if not self.has_enough_text(text):
            return ClassificationVerdict.undecided()

        normal = self.normal_score(text)
        if normal >= self.normal_score_threshold:
            return ClassificationVerdict(angle=0, decided=True, source=source)

        # Ties, including 0/0, are never guessed
        if self.reversed_score(text) > normal:
            return ClassificationVerdict(angle=180, decided=True, source=source)

        return ClassificationVerdict.undecided()
