"""
Aspect-ratio signal: landscape pages are turned to 270°

A weaker heuristic than the text-based chain and off by default. It knows
nothing about content, so it is kept out of the classifier and only runs
when ``use_aspect_ratio_signal`` is set.
"""
from ..models import Observation, SignalSource
from .base_extractor import BaseExtractor

LANDSCAPE_ROTATION = 270


class AspectRatioExtractor(BaseExtractor):
    """Suggests 270° for pages wider than they are tall"""

    @property
    def source(self) -> SignalSource:
        return SignalSource.ASPECT_RATIO

    def extract(self, page) -> Observation:
        if page.is_landscape:
            width, height = page.size
            self.log(f"      Landscape page ({width:.0f}x{height:.0f}) → {LANDSCAPE_ROTATION}°")
            return Observation(source=self.source, suggested_angle=LANDSCAPE_ROTATION)
        return self.empty_observation()
