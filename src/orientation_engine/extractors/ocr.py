"""
OCR extraction for scanned pages

Rasterizes the page with PyMuPDF and runs Tesseract over the image. Expensive,
so the orchestrator only calls it when the embedded text layer was not enough.

The Tesseract subprocess is killed after ``ocr_timeout`` seconds. Rasterization
runs in the calling thread under FITZ_LOCK and is not time-bounded.
"""
import threading
from typing import Optional

import pytesseract
from PIL import Image

from ..error_handling import ExtractionError
from ..models import OCRResult, Observation, SignalSource, TextFragment
from .base_extractor import BaseExtractor


class TesseractEngine:
    """Recognizes text in a Pillow image through pytesseract"""

    def __init__(self, tesseract_cmd: Optional[str] = None, log_callback=None):
        """
        Initialize the OCR engine

        Args:
            tesseract_cmd: Path to tesseract executable (optional)
            log_callback: Optional callback function for logging messages
        """
        self.log_callback = log_callback
        self._available = None
        self._lock = threading.Lock()

        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd

    def log(self, message):
        """Log a message using the callback or print"""
        if self.log_callback:
            self.log_callback(message)
        else:
            print(message)

    def is_available(self) -> bool:
        """Check once whether the tesseract binary can be run"""
        with self._lock:
            if self._available is None:
                try:
                    version = pytesseract.get_tesseract_version()
                    self.log(f"Tesseract OCR found and working (version {version})")
                    self._available = True
                except (pytesseract.TesseractNotFoundError, OSError) as e:
                    self.log(f"Warning: Tesseract OCR not found or not working: {e}")
                    self.log("OCR functionality will not be available")
                    self._available = False
            return self._available

    def recognize(self, image: Image.Image, timeout: Optional[float] = None) -> OCRResult:
        """
        Recognize the words on an image

        Args:
            image: Rasterized page
            timeout: Seconds before the tesseract process is killed

        Returns:
            OCRResult: words joined by single spaces and lowercased, the mean word
            confidence (0-100) and each word's normalized baseline position
        """
        try:
            data = pytesseract.image_to_data(
                image,
                output_type=pytesseract.Output.DICT,
                timeout=timeout or 0,
            )
        except RuntimeError as e:
            # pytesseract reports a killed process as RuntimeError
            raise ExtractionError(f"Tesseract failed: {e}")

        image_height = image.height or 1
        words = []
        confidences = []
        fragments = []

        for text, conf, top, height in zip(data['text'], data['conf'], data['top'], data['height']):
            word = str(text).strip()
            confidence = float(conf)
            # Tesseract reports -1 for layout rows that are not words
            if not word or confidence < 0:
                continue
            words.append(word)
            confidences.append(confidence)
            baseline = (float(top) + float(height)) / image_height
            fragments.append(TextFragment(word, max(0.0, min(1.0, baseline))))

        mean_confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return OCRResult(" ".join(words).lower(), mean_confidence, tuple(fragments))


class OCRExtractor(BaseExtractor):
    """Rasterize-and-recognize extractor"""

    def __init__(self, config, engine=None, log_callback=None):
        super().__init__(config, log_callback)
        self.engine = engine or TesseractEngine(config.tesseract_cmd, log_callback=log_callback)

    @property
    def source(self) -> SignalSource:
        return SignalSource.OCR

    def extract(self, page) -> Observation:
        if not self.engine.is_available():
            return self.empty_observation()

        # The image is drawn with the page's current rotation applied
        frame_rotation = page.current_rotation
        image = page.rasterize(self.config.raster_zoom)
        result = self.engine.recognize(image, timeout=self.config.ocr_timeout)

        # Layout can fall back to OCR word positions when the page has no text layer
        page.ocr_result = result

        if not result.text:
            return Observation(source=self.source, fragments=result.fragments,
                               frame_rotation=frame_rotation)

        return Observation(
            source=self.source,
            raw_text=result.text,
            confidence=result.confidence,
            fragments=result.fragments,
            frame_rotation=frame_rotation,
        )
