"""
Pytest configuration and fixtures for Orientation Engine tests
"""

import sys
import pytest
import tempfile
from pathlib import Path
from unittest.mock import MagicMock

import fitz  # PyMuPDF

# Add src directory to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from orientation_engine.config import OrientationConfig, RetryPolicy
from orientation_engine.models import OCRResult, TextFragment


# Two distinct marker phrases, enough to decide 0° on their own
UPRIGHT_TEXT = "Republic of the Philippines Professional Regulation Commission"


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def mock_log_callback():
    """Mock callback for logging"""
    return MagicMock()


@pytest.fixture
def config_factory():
    """Factory to create engine configurations for testing"""
    def _create_config(**kwargs):
        defaults = {
            'retry_policy': RetryPolicy(max_attempts=3, delay=0.0),
            'worker_pool_size': 2,
            'ocr_timeout': 5.0,
        }
        defaults.update(kwargs)
        return OrientationConfig(**defaults).validate()

    return _create_config


@pytest.fixture
def config(config_factory):
    return config_factory()


@pytest.fixture
def pdf_bytes_factory():
    """
    Factory that builds real PDFs with PyMuPDF

    Each page is described by a dict with optional keys ``lines`` (list of
    ``(baseline_y, text)``), ``rotation``, ``width``, ``height`` and ``band``
    (a black bar across the top of the content, standing in for a scan).
    """
    def _create_pdf(*pages):
        doc = fitz.open()
        for layout in pages or ({},):
            page = doc.new_page(width=layout.get('width', 612), height=layout.get('height', 792))
            if layout.get('band'):
                page.draw_rect(fitz.Rect(0, 0, page.rect.width, 100), color=(0, 0, 0), fill=(0, 0, 0))
            for baseline_y, text in layout.get('lines', []):
                page.insert_text((72, baseline_y), text, fontsize=10)
            if layout.get('rotation'):
                page.set_rotation(layout['rotation'])
        data = doc.tobytes()
        doc.close()
        return data

    return _create_pdf


@pytest.fixture
def pdf_file_factory(temp_dir, pdf_bytes_factory):
    """Factory that writes generated PDFs into the temp directory"""
    def _create_file(name, *pages, folder=None):
        target_dir = folder or temp_dir / "input"
        target_dir.mkdir(parents=True, exist_ok=True)
        pdf_path = target_dir / name
        pdf_path.write_bytes(pdf_bytes_factory(*pages))
        return pdf_path

    return _create_file


@pytest.fixture
def fake_page_factory():
    """Factory for page stand-ins that need no PDF behind them"""
    def _create_page(text_fragments=(), index=0, rotation=0, size=(612.0, 792.0)):
        page = MagicMock()
        page.index = index
        page.number = index + 1
        page.current_rotation = rotation
        page.size = size
        page.is_landscape = size[0] > size[1]
        page.ocr_result = None
        page.text_fragments.return_value = [
            fragment if isinstance(fragment, TextFragment) else TextFragment(*fragment)
            for fragment in text_fragments
        ]
        return page

    return _create_page


@pytest.fixture
def ocr_engine_factory():
    """Factory for OCR engine mocks answering with a fixed OCRResult"""
    def _create_engine(text="", confidence=0.0, fragments=(), available=True):
        engine = MagicMock()
        engine.is_available.return_value = available
        engine.recognize.return_value = OCRResult(text, confidence, tuple(fragments))
        return engine

    return _create_engine


@pytest.fixture
def mock_error_handler(mock_log_callback):
    """Real error handler wired to the mock log callback"""
    from orientation_engine.error_handling import ErrorHandler
    return ErrorHandler(log_callback=mock_log_callback)
