"""
Tests for the page signal extractors
"""

import threading
from unittest.mock import MagicMock, patch

import pytest

from orientation_engine.error_handling import ExtractionError
from orientation_engine.extractors import (
    AspectRatioExtractor, EmbeddedTextExtractor, LayoutExtractor, OCRExtractor, TesseractEngine,
)
from orientation_engine.extractors.embedded_text import join_fragments
from orientation_engine.models import OCRResult, SignalSource, TextFragment


class TestEmbeddedTextExtractor:

    def test_joins_and_lowercases(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory([("Republic of the", 0.1), ("PHILIPPINES", 0.15)])
        observation = EmbeddedTextExtractor(config, mock_log_callback).extract(page)

        assert observation.source is SignalSource.EMBEDDED_TEXT
        assert observation.raw_text == "republic of the philippines"
        assert len(observation.fragments) == 2
        assert observation.suggested_angle is None

    def test_no_text_layer(self, config, fake_page_factory, mock_log_callback):
        observation = EmbeddedTextExtractor(config, mock_log_callback).extract(fake_page_factory())
        assert observation.raw_text is None
        assert observation.text_length == 0

    def test_join_fragments_trims(self):
        assert join_fragments([TextFragment(" A ", 0.1), TextFragment("B ", 0.2)]) == "a  b"


class TestOCRExtractor:

    def test_returns_text_and_confidence(self, config, fake_page_factory, ocr_engine_factory,
                                         mock_log_callback):
        engine = ocr_engine_factory("this is to certify that", 88.0, [TextFragment("this", 0.2)])
        page = fake_page_factory()

        observation = OCRExtractor(config, engine=engine, log_callback=mock_log_callback).extract(page)

        assert observation.source is SignalSource.OCR
        assert observation.raw_text == "this is to certify that"
        assert observation.confidence == 88.0
        page.rasterize.assert_called_once_with(config.raster_zoom)
        engine.recognize.assert_called_once_with(page.rasterize.return_value, timeout=config.ocr_timeout)

    def test_caches_result_on_page(self, config, fake_page_factory, ocr_engine_factory,
                                   mock_log_callback):
        engine = ocr_engine_factory("some words", 50.0, [TextFragment("some", 0.7)])
        page = fake_page_factory()

        OCRExtractor(config, engine=engine, log_callback=mock_log_callback).extract(page)

        assert page.ocr_result == engine.recognize.return_value

    def test_no_text_keeps_fragments_only(self, config, fake_page_factory, ocr_engine_factory,
                                          mock_log_callback):
        page = fake_page_factory()
        observation = OCRExtractor(config, engine=ocr_engine_factory(), log_callback=mock_log_callback).extract(page)
        assert observation.raw_text is None
        assert observation.confidence is None

    def test_unavailable_engine_is_insufficient_signal(self, config, fake_page_factory,
                                                       ocr_engine_factory, mock_log_callback):
        engine = ocr_engine_factory(available=False)
        page = fake_page_factory()

        observation = OCRExtractor(config, engine=engine, log_callback=mock_log_callback).extract(page)

        assert observation.raw_text is None
        page.rasterize.assert_not_called()
        engine.recognize.assert_not_called()

    def test_rasterizes_in_calling_thread(self, config_factory, fake_page_factory, ocr_engine_factory,
                                          mock_log_callback):
        config = config_factory(ocr_timeout=0.5)
        page = fake_page_factory()
        threads = []
        page.rasterize.side_effect = lambda zoom: threads.append(threading.current_thread())

        OCRExtractor(config, engine=ocr_engine_factory("x", 99.0), log_callback=mock_log_callback).extract(page)

        assert threads == [threading.current_thread()]

    def test_recognition_error_propagates(self, config, fake_page_factory, ocr_engine_factory,
                                          mock_log_callback):
        engine = ocr_engine_factory()
        engine.recognize.side_effect = ExtractionError("Tesseract failed: process timeout")

        extractor = OCRExtractor(config, engine=engine, log_callback=mock_log_callback)
        with pytest.raises(ExtractionError, match="timeout"):
            extractor.extract(fake_page_factory())

    def test_observation_is_in_rendered_frame(self, config, fake_page_factory, ocr_engine_factory,
                                              mock_log_callback):
        engine = ocr_engine_factory("this is to certify that", 88.0)
        page = fake_page_factory(rotation=180)

        observation = OCRExtractor(config, engine=engine, log_callback=mock_log_callback).extract(page)

        assert observation.frame_rotation == 180
        # Upright in the rendered image means the current rotation is already right
        assert observation.absolute_angle(0) == 180
        assert observation.absolute_angle(180) == 0


class TestTesseractEngine:

    @pytest.fixture
    def image(self):
        image = MagicMock()
        image.height = 1000
        return image

    def test_recognize_skips_non_words(self, image, mock_log_callback):
        data = {
            'text': ["", "Republic", "ACT", "  ", "No"],
            'conf': ["-1", "90", "80", "-1", "70"],
            'top': [0, 100, 100, 0, 900],
            'height': [0, 20, 20, 0, 50],
        }
        with patch("orientation_engine.extractors.ocr.pytesseract.image_to_data", return_value=data):
            result = TesseractEngine(log_callback=mock_log_callback).recognize(image, timeout=5)

        assert result.text == "republic act no"
        assert result.confidence == pytest.approx(80.0)
        assert [f.vertical_position for f in result.fragments] == pytest.approx([0.12, 0.12, 0.95])

    def test_recognize_empty_page(self, image, mock_log_callback):
        data = {'text': [""], 'conf': [-1], 'top': [0], 'height': [0]}
        with patch("orientation_engine.extractors.ocr.pytesseract.image_to_data", return_value=data):
            result = TesseractEngine(log_callback=mock_log_callback).recognize(image)

        assert result == OCRResult("", 0.0, ())

    def test_recognize_timeout_becomes_extraction_error(self, image, mock_log_callback):
        with patch("orientation_engine.extractors.ocr.pytesseract.image_to_data",
                   side_effect=RuntimeError("Tesseract process timeout")):
            with pytest.raises(ExtractionError, match="Tesseract failed"):
                TesseractEngine(log_callback=mock_log_callback).recognize(image, timeout=1)

    def test_availability_checked_once(self, mock_log_callback):
        with patch("orientation_engine.extractors.ocr.pytesseract.get_tesseract_version",
                   return_value="5.3.0") as version:
            engine = TesseractEngine(log_callback=mock_log_callback)
            assert engine.is_available()
            assert engine.is_available()
        version.assert_called_once()

    def test_missing_binary_is_unavailable(self, mock_log_callback):
        with patch("orientation_engine.extractors.ocr.pytesseract.get_tesseract_version",
                   side_effect=OSError("not found")):
            assert not TesseractEngine(log_callback=mock_log_callback).is_available()


class TestLayoutExtractor:

    def test_text_in_upper_half_is_upright(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory([("a", 0.1), ("b", 0.2), ("c", 0.6)])
        observation = LayoutExtractor(config, mock_log_callback).extract(page)
        assert observation.source is SignalSource.LAYOUT
        assert observation.suggested_angle == 0

    def test_text_in_lower_half_is_flipped(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory([("a", 0.7), ("b", 0.7)])
        assert LayoutExtractor(config, mock_log_callback).extract(page).suggested_angle == 180

    def test_falls_back_to_ocr_positions(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory()
        page.ocr_result = OCRResult("words", 50.0, (TextFragment("words", 0.7),))
        assert LayoutExtractor(config, mock_log_callback).extract(page).suggested_angle == 180

    def test_embedded_positions_ignore_current_rotation(self, config, fake_page_factory,
                                                        mock_log_callback):
        page = fake_page_factory([("a", 0.1)], rotation=180)
        observation = LayoutExtractor(config, mock_log_callback).extract(page)
        assert observation.frame_rotation == 0
        assert observation.absolute_angle(observation.suggested_angle) == 0

    def test_ocr_positions_are_in_rendered_frame(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory(rotation=180)
        page.ocr_result = OCRResult("words", 50.0, (TextFragment("words", 0.7),))

        observation = LayoutExtractor(config, mock_log_callback).extract(page)

        assert observation.suggested_angle == 180
        assert observation.frame_rotation == 180
        assert observation.absolute_angle(observation.suggested_angle) == 0

    def test_no_fragments_is_insufficient(self, config, fake_page_factory, mock_log_callback):
        observation = LayoutExtractor(config, mock_log_callback).extract(fake_page_factory())
        assert observation.suggested_angle is None


class TestAspectRatioExtractor:

    def test_landscape_suggests_270(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory(size=(792.0, 612.0))
        observation = AspectRatioExtractor(config, mock_log_callback).extract(page)
        assert observation.source is SignalSource.ASPECT_RATIO
        assert observation.suggested_angle == 270

    def test_portrait_is_insufficient(self, config, fake_page_factory, mock_log_callback):
        observation = AspectRatioExtractor(config, mock_log_callback).extract(fake_page_factory())
        assert observation.suggested_angle is None

    def test_uses_page_orientation_flag(self, config, fake_page_factory, mock_log_callback):
        page = fake_page_factory(size=(792.0, 612.0))
        page.is_landscape = False
        observation = AspectRatioExtractor(config, mock_log_callback).extract(page)
        assert observation.suggested_angle is None
