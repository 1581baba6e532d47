from .base_extractor import BaseExtractor
from .embedded_text import EmbeddedTextExtractor
from .ocr import OCRExtractor, TesseractEngine
from .layout import LayoutExtractor
from .aspect_ratio import AspectRatioExtractor

__all__ = [
    "BaseExtractor",
    "EmbeddedTextExtractor",
    "OCRExtractor",
    "TesseractEngine",
    "LayoutExtractor",
    "AspectRatioExtractor",
]
