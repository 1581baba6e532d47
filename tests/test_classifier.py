"""
Tests for the marker-phrase orientation classifier
"""

import pytest

from orientation_engine.classifier import OrientationClassifier, marker_score
from orientation_engine.models import SignalSource

from conftest import UPRIGHT_TEXT


@pytest.fixture
def classifier(config):
    return OrientationClassifier(config)


def reverse(text):
    return text.lower()[::-1]


class TestMarkerScore:

    def test_counts_each_marker(self):
        assert marker_score("republic act no and this is to certify that", ("republic act no", "this is to certify that")) == 2

    def test_repeated_marker_counts_once(self):
        text = "this is to certify that and this is to certify that"
        assert marker_score(text, ("this is to certify that",)) == 1

    def test_no_markers(self):
        assert marker_score("nothing interesting here", ("republic act no",)) == 0


class TestClassify:

    def test_upright_text_decides_zero(self, classifier):
        verdict = classifier.classify(UPRIGHT_TEXT.lower(), SignalSource.EMBEDDED_TEXT)
        assert verdict.decided
        assert verdict.angle == 0
        assert verdict.source is SignalSource.EMBEDDED_TEXT

    def test_reversed_text_decides_180(self, classifier):
        verdict = classifier.classify(reverse(UPRIGHT_TEXT), SignalSource.OCR)
        assert verdict.decided
        assert verdict.angle == 180
        assert verdict.source is SignalSource.OCR

    def test_normal_score_wins_regardless_of_reversed(self, classifier):
        text = UPRIGHT_TEXT.lower() + " " + reverse(UPRIGHT_TEXT + " republic act no")
        assert classifier.reversed_score(text) > classifier.normal_score(text)
        verdict = classifier.classify(text)
        assert verdict.decided and verdict.angle == 0

    def test_reversed_beats_single_forward_marker(self, classifier):
        text = "republic act no 9266 " + reverse(UPRIGHT_TEXT)
        assert classifier.normal_score(text) == 1
        assert classifier.reversed_score(text) == 2
        verdict = classifier.classify(text)
        assert verdict.decided and verdict.angle == 180

    def test_tie_is_undecided(self, classifier):
        text = "republic act no 9266 issued " + reverse("this is to certify that")
        assert classifier.normal_score(text) == classifier.reversed_score(text) == 1
        assert not classifier.classify(text).decided

    def test_no_markers_is_undecided(self, classifier):
        verdict = classifier.classify("a long page of text without any known phrases on it")
        assert not verdict.decided
        assert verdict.source is None

    def test_short_text_is_undecided(self, classifier):
        # A marker alone is shorter than the minimum text length
        assert not classifier.classify("republic act no").decided

    def test_empty_and_none_are_undecided(self, classifier):
        assert not classifier.classify("").decided
        assert not classifier.classify(None).decided

    def test_repeated_marker_is_not_enough(self, classifier):
        text = "republic act no 9266 and again republic act no 9266"
        assert classifier.normal_score(text) == 1
        assert not classifier.classify(text).decided

    def test_repeated_reversed_marker_does_not_outvote_forward_marker(self, classifier):
        text = "this is to certify that " + reverse("republic act no 1 republic act no 2")
        assert classifier.normal_score(text) == 1
        assert classifier.reversed_score(text) == 1
        assert not classifier.classify(text).decided

    def test_threshold_is_configurable(self, config_factory):
        classifier = OrientationClassifier(config_factory(normal_score_threshold=1))
        verdict = classifier.classify("this is to certify that the bearer")
        assert verdict.decided and verdict.angle == 0

    def test_custom_markers(self, config_factory):
        classifier = OrientationClassifier(config_factory(markers=("Invoice Number", "Total Due")))
        assert classifier.classify("invoice number 12345 total due 99.00").angle == 0
        assert classifier.classify(reverse("invoice number 12345 total due 99.00")).angle == 180
