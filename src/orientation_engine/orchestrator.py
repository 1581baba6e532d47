"""
Fallback Orchestrator

Runs the per-page fallback chain. Signals are tried from cheapest and most
reliable to weakest, and the first decided verdict wins:

    NOT_STARTED → TRIED_EMBEDDED → TRIED_OCR → [TRIED_ASPECT_RATIO] → TRIED_LAYOUT
                → AWAITING_MANUAL → DECIDED

Any step can jump straight to DECIDED. An extractor that raises is logged and
treated as "insufficient signal", so one bad page never aborts a document.
The orchestrator holds no per-page state and is shared by all documents.
"""

from dataclasses import replace
from typing import Optional, Tuple

from .classifier import OrientationClassifier
from .config import OrientationConfig
from .extractors import (
    AspectRatioExtractor, EmbeddedTextExtractor, LayoutExtractor, OCRExtractor,
)
from .manual_prompt import PromptChannel
from .models import ClassificationVerdict, Observation, PageDecision, PageState, SignalSource

Step = Tuple[PageState, ClassificationVerdict]


class FallbackOrchestrator:
    """Decides the target rotation of each page through the fallback chain"""

    def __init__(self, config: OrientationConfig, prompt_channel: Optional[PromptChannel] = None,
                 embedded=None, ocr=None, layout=None, aspect_ratio=None,
                 classifier=None, log_callback=None):
        """
        Initialize the orchestrator

        Args:
            config: Validated engine configuration
            prompt_channel: Shared manual prompt; defaults to always answering 0°
            embedded, ocr, layout, aspect_ratio: Extractor overrides
            classifier: Classifier override
            log_callback: Optional callback function for logging messages
        """
        self.config = config
        self.log_callback = log_callback
        self.classifier = classifier or OrientationClassifier(config)
        self.prompt_channel = prompt_channel or PromptChannel(log_callback=log_callback)

        self.embedded = embedded or EmbeddedTextExtractor(config, log_callback)
        self.ocr = ocr or OCRExtractor(config, log_callback=log_callback)
        self.layout = layout or LayoutExtractor(config, log_callback)
        self.aspect_ratio = None
        if config.use_aspect_ratio_signal:
            self.aspect_ratio = aspect_ratio or AspectRatioExtractor(config, log_callback)

        self._handlers = {
            PageState.NOT_STARTED: self._start,
            PageState.TRIED_EMBEDDED: self._try_embedded,
            PageState.TRIED_OCR: self._try_ocr,
            PageState.TRIED_ASPECT_RATIO: self._try_aspect_ratio,
            PageState.TRIED_LAYOUT: self._try_layout,
            PageState.AWAITING_MANUAL: self._ask_manual,
        }

    def log(self, message: str):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def decide_page(self, page, document_name: str = "") -> PageDecision:
        """
        Run the fallback chain for one page until it is decided

        Args:
            page (Page): Page to decide
            document_name: Shown in manual prompts

        Returns:
            PageDecision: the decided verdict and the states the page went through
        """
        state = PageState.NOT_STARTED
        verdict = ClassificationVerdict.undecided()
        visited = [state]

        while state is not PageState.DECIDED:
            state, verdict = self._handlers[state](page, document_name)
            visited.append(state)

        source = verdict.source.value if verdict.source else "unknown"
        self.log(f"   Page {page.number}: decided {verdict.angle}° via {source}")
        return PageDecision(
            page_index=page.index,
            previous_rotation=page.current_rotation,
            verdict=verdict,
            states_visited=visited,
        )

    def _observe(self, extractor, page) -> Optional[Observation]:
        """Run one extractor; failures count as insufficient signal"""
        try:
            return extractor.extract(page)
        except Exception as e:
            self.log(f"      {extractor.source.value} extraction failed on page {page.number}: {e}")
            return None

    def _start(self, page, document_name) -> Step:
        return PageState.TRIED_EMBEDDED, ClassificationVerdict.undecided()

    def _try_embedded(self, page, document_name) -> Step:
        observation = self._observe(self.embedded, page)
        if observation is None or not self.classifier.has_enough_text(observation.raw_text):
            length = observation.text_length if observation else 0
            self.log(f"      Page {page.number}: embedded text insufficient ({length} chars)")
            return PageState.TRIED_OCR, ClassificationVerdict.undecided()

        verdict = self.classifier.classify(observation.raw_text, SignalSource.EMBEDDED_TEXT)
        if verdict.decided:
            return PageState.DECIDED, verdict

        self.log(f"      Page {page.number}: embedded text ambiguous, trying OCR")
        return PageState.TRIED_OCR, verdict

    def _try_ocr(self, page, document_name) -> Step:
        after_ocr = PageState.TRIED_ASPECT_RATIO if self.aspect_ratio else PageState.TRIED_LAYOUT

        observation = self._observe(self.ocr, page)
        if observation is None or observation.raw_text is None:
            self.log(f"      Page {page.number}: OCR found no text")
            return after_ocr, ClassificationVerdict.undecided()

        confidence = observation.confidence or 0.0
        if confidence <= self.config.ocr_confidence_threshold:
            self.log(f"      Page {page.number}: OCR confidence {confidence:.0f} "
                     f"not above {self.config.ocr_confidence_threshold:.0f}")
            return after_ocr, ClassificationVerdict.undecided()

        verdict = self.classifier.classify(observation.raw_text, SignalSource.OCR)
        if verdict.decided:
            # OCR judged the rendered image, which already carries the current rotation
            return PageState.DECIDED, replace(verdict, angle=observation.absolute_angle(verdict.angle))

        self.log(f"      Page {page.number}: OCR text ambiguous")
        return after_ocr, verdict

    def _try_aspect_ratio(self, page, document_name) -> Step:
        observation = self._observe(self.aspect_ratio, page)
        if observation is not None and observation.suggested_angle is not None:
            return PageState.DECIDED, ClassificationVerdict(
                observation.absolute_angle(observation.suggested_angle), True, SignalSource.ASPECT_RATIO)
        return PageState.TRIED_LAYOUT, ClassificationVerdict.undecided()

    def _try_layout(self, page, document_name) -> Step:
        observation = self._observe(self.layout, page)
        if observation is not None and observation.suggested_angle is not None:
            return PageState.DECIDED, ClassificationVerdict(
                observation.absolute_angle(observation.suggested_angle), True, SignalSource.LAYOUT)

        self.log(f"      Page {page.number}: no text to analyze, asking for manual rotation")
        return PageState.AWAITING_MANUAL, ClassificationVerdict.undecided()

    def _ask_manual(self, page, document_name) -> Step:
        angle = self.prompt_channel.ask_rotation(page.number, document_name)
        return PageState.DECIDED, ClassificationVerdict(angle, True, SignalSource.MANUAL)
