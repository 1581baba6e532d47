"""
Embedded text extraction: the cheapest signal, read straight from the PDF text layer
"""
from ..models import Observation, SignalSource
from .base_extractor import BaseExtractor


def join_fragments(fragments) -> str:
    """Join fragment texts with single spaces, lowercased and trimmed"""
    return " ".join(fragment.text for fragment in fragments).lower().strip()


class EmbeddedTextExtractor(BaseExtractor):
    """Reads the page's embedded text layer in container order"""

    @property
    def source(self) -> SignalSource:
        return SignalSource.EMBEDDED_TEXT

    def extract(self, page) -> Observation:
        fragments = page.text_fragments()
        if not fragments:
            return self.empty_observation()

        text = join_fragments(fragments)
        return Observation(
            source=self.source,
            raw_text=text or None,
            fragments=tuple(fragments),
        )
