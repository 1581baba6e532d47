"""
PDF Document Module

Thin wrapper around PyMuPDF that exposes exactly what the orientation engine
needs: pages, rotation metadata, the embedded text layer, rasterization and
serialization back to bytes.
"""

import threading
from pathlib import Path
from typing import List, Optional, Tuple

import fitz  # PyMuPDF
from PIL import Image

from .error_handling import DocumentLoadError
from .models import OCRResult, TextFragment, normalize_angle


# PyMuPDF is not thread-safe; every call into fitz goes through this lock
FITZ_LOCK = threading.RLock()


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


class Page:
    """
    Read-only view of one page of a PDFDocument

    Rotation is read through the owning document; only the RotationApplier
    writes it. The text layer is extracted on first use and then cached, as
    pages do not change once loaded.
    """

    def __init__(self, document: "PDFDocument", index: int):
        self.document = document
        self.index = index
        self._fragments: Optional[List[TextFragment]] = None
        self._size: Optional[Tuple[float, float]] = None
        self.ocr_result: Optional[OCRResult] = None

    @property
    def number(self) -> int:
        return self.index + 1

    @property
    def current_rotation(self) -> int:
        return self.document.get_rotation(self.index)

    @property
    def size(self) -> Tuple[float, float]:
        if self._size is None:
            self._size = self.document.get_page_size(self.index)
        return self._size

    @property
    def is_landscape(self) -> bool:
        width, height = self.size
        return width > height

    def text_fragments(self) -> List[TextFragment]:
        if self._fragments is None:
            self._fragments = self.document.get_page_text(self.index)
        return self._fragments

    def rasterize(self, zoom: float = 1.0) -> Image.Image:
        return self.document.rasterize(self.index, zoom)

    def __repr__(self):
        return f"Page({self.number}/{self.document.page_count}, rotation={self.current_rotation})"


class PDFDocument:
    """A loaded PDF owned by exactly one processing run"""

    def __init__(self, fitz_doc, source_path=None, original_bytes: bytes = b""):
        self._doc = fitz_doc
        self.source_path = Path(source_path) if source_path else None
        self.original_bytes = original_bytes
        self.modified = False
        self._pages = [Page(self, index) for index in range(fitz_doc.page_count)]

    @property
    def name(self) -> str:
        return self.source_path.name if self.source_path else "<memory>"

    @classmethod
    def load(cls, data: bytes, source_path=None) -> "PDFDocument":
        """
        Parse PDF bytes into a document

        Args:
            data: Raw PDF bytes
            source_path: Where the bytes came from (for messages only)

        Raises:
            DocumentLoadError: if the bytes are not a usable PDF
        """
        label = source_path or "<memory>"
        with FITZ_LOCK:
            try:
                doc = fitz.open(stream=data, filetype="pdf")
            except Exception as e:
                raise DocumentLoadError(label, f"unparseable PDF: {e}")

            if doc.needs_pass:
                doc.close()
                raise DocumentLoadError(label, "PDF is password-protected")

            if doc.page_count == 0:
                doc.close()
                raise DocumentLoadError(label, "PDF has no pages")

        return cls(doc, source_path=source_path, original_bytes=data)

    @classmethod
    def open(cls, path) -> "PDFDocument":
        """Read a PDF from disk and load it"""
        path = Path(path)
        try:
            data = path.read_bytes()
        except OSError as e:
            raise DocumentLoadError(path, e)
        return cls.load(data, source_path=path)

    @property
    def page_count(self) -> int:
        return len(self._pages)

    @property
    def pages(self) -> List[Page]:
        return list(self._pages)

    def get_rotation(self, index: int) -> int:
        with FITZ_LOCK:
            return normalize_angle(self._doc[index].rotation)

    def set_rotation(self, index: int, angle: int) -> None:
        angle = normalize_angle(angle)
        with FITZ_LOCK:
            page = self._doc[index]
            if page.rotation != angle:
                page.set_rotation(angle)
                self.modified = True

    def get_page_size(self, index: int) -> Tuple[float, float]:
        """Width and height of the unrotated page (its crop box), ignoring /Rotate"""
        with FITZ_LOCK:
            box = self._doc[index].cropbox
            return box.width, box.height

    def get_page_text(self, index: int) -> List[TextFragment]:
        """
        Extract the embedded text layer of a page in container order

        Uses span baselines from the structured ("dict") extraction and falls
        back to block extraction, where the block bottom stands in for the
        baseline.

        Returns:
            list: TextFragment per span (or block), possibly empty
        """
        with FITZ_LOCK:
            page = self._doc[index]
            page_height = page.rect.height or 1.0
            fragments = []

            text_dict = page.get_text("dict")
            for block in text_dict.get('blocks', []):
                for line in block.get('lines', []):
                    for span in line.get('spans', []):
                        text = span.get('text', '')
                        if not text.strip():
                            continue
                        baseline_y = span['origin'][1] if 'origin' in span else span['bbox'][3]
                        fragments.append(TextFragment(text, _clamp(baseline_y / page_height)))

            if not fragments:
                for block in page.get_text("blocks"):
                    x0, y0, x1, y1, text = block[:5]
                    if isinstance(text, str) and text.strip():
                        fragments.append(TextFragment(text.strip(), _clamp(y1 / page_height)))

            return fragments

    def rasterize(self, index: int, zoom: float = 1.0) -> Image.Image:
        """Render a page (with its current rotation) to an RGB Pillow image"""
        with FITZ_LOCK:
            pix = self._doc[index].get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
            return Image.frombytes("RGB", [pix.width, pix.height], pix.samples)

    def to_bytes(self) -> bytes:
        """Serialize the document, rotation changes included"""
        with FITZ_LOCK:
            return self._doc.tobytes(garbage=4, deflate=True)

    def close(self):
        with FITZ_LOCK:
            if not self._doc.is_closed:
                self._doc.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
