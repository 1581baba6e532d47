"""
Layout extraction: guesses 0° vs 180° from where the text sits on the page
"""
from ..models import Observation, SignalSource
from .base_extractor import BaseExtractor


class LayoutExtractor(BaseExtractor):
    """
    Mean normalized baseline position of the page's text fragments

    Text concentrated in the upper half reads as upright, otherwise as flipped.
    Uses the embedded text layer, or the word positions of an earlier OCR pass
    when the page has no text layer. No fragments at all means the strategy
    cannot run.

    Embedded positions are in the unrotated page; OCR positions are in the
    rendered image, which already shows the page's current rotation.
    """

    @property
    def source(self) -> SignalSource:
        return SignalSource.LAYOUT

    def extract(self, page) -> Observation:
        fragments = page.text_fragments()
        frame_rotation = 0
        if not fragments and page.ocr_result is not None:
            fragments = page.ocr_result.fragments
            frame_rotation = page.current_rotation

        if not fragments:
            return self.empty_observation()

        mean_position = sum(f.vertical_position for f in fragments) / len(fragments)
        angle = 0 if mean_position < self.config.layout_split else 180
        self.log(f"      Layout analysis: mean baseline {mean_position:.2f} over "
                 f"{len(fragments)} fragments → {angle}°")

        return Observation(source=self.source, suggested_angle=angle, fragments=tuple(fragments),
                           frame_rotation=frame_rotation)
