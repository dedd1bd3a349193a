"""Tests for the heuristic and sound-event classifiers."""

import pytest

from soundscope.classifiers import (
    BandDistributionClassifier,
    EnergyClassifier,
    SoundEventClassifier,
    SpectralShapeClassifier,
    TemporalClassifier,
    create_classifiers,
    create_model_classifier,
)
from soundscope.core.classifier_base import BaseClassifier
from soundscope.core.models import AudioCategory, FrequencyBands
from soundscope.utils.config import get_default_config
from soundscope.utils.errors import ClassifierFailure


def bands(low, mid, high):
    return FrequencyBands(low=float(low), mid=float(mid), high=float(high))


class TestSpectralShapeClassifier:
    @pytest.fixture
    def classifier(self):
        return SpectralShapeClassifier()

    def test_no_vote_without_centroid(self, classifier, make_features):
        assert classifier.classify(make_features(spectral_centroid=0.0)) is None

    def test_tonal_bright_is_music(self, classifier, make_features):
        result = classifier.classify(make_features(spectral_flatness=0.1, spectral_centroid=1500.0))
        assert result.label == "Music"
        assert result.category == AudioCategory.MUSIC
        assert result.confidence == 0.75
        assert result.source == "spectral_shape"

    def test_vocal_range_is_speech(self, classifier, make_features):
        result = classifier.classify(make_features(
            spectral_flatness=0.3, spectral_centroid=1500.0, spectral_rolloff=3000.0
        ))
        assert result.label == "Speech"
        assert result.confidence == 0.70

    def test_bright_is_animal(self, classifier, make_features):
        result = classifier.classify(make_features(
            spectral_flatness=0.3, spectral_centroid=3500.0, spectral_rolloff=8000.0
        ))
        assert result.category == AudioCategory.ANIMAL
        assert result.confidence == 0.65

    def test_noise_like_is_environmental(self, classifier, make_features):
        result = classifier.classify(make_features(
            spectral_flatness=0.6, spectral_centroid=1500.0, spectral_rolloff=5000.0
        ))
        assert result.label == "Environmental Noise"
        assert result.confidence == 0.60

    def test_dark_is_other(self, classifier, make_features):
        result = classifier.classify(make_features(
            spectral_flatness=0.3, spectral_centroid=300.0, spectral_rolloff=1000.0
        ))
        assert result.label == "Low-Frequency Sounds"
        assert result.category == AudioCategory.OTHER
        assert result.confidence == 0.55

    def test_no_branch_matches(self, classifier, make_features):
        features = make_features(
            spectral_flatness=0.3, spectral_centroid=600.0, spectral_rolloff=5000.0
        )
        assert classifier.classify(features) is None


class TestBandDistributionClassifier:
    @pytest.fixture
    def classifier(self):
        return BandDistributionClassifier()

    def test_no_vote_without_energy(self, classifier, make_features):
        assert classifier.classify(make_features(frequency_bands=bands(0, 0, 0))) is None

    def test_low_dominant(self, classifier, make_features):
        result = classifier.classify(make_features(frequency_bands=bands(80, 10, 10)))
        assert result.label == "Bass-Heavy Music"
        assert result.category == AudioCategory.MUSIC
        assert result.confidence == pytest.approx(0.74)

    def test_mid_dominant(self, classifier, make_features):
        result = classifier.classify(make_features(frequency_bands=bands(12.5, 75, 12.5)))
        assert result.category == AudioCategory.SPEECH
        assert result.confidence == pytest.approx(0.70)

    def test_high_only(self, classifier, make_features):
        result = classifier.classify(make_features(frequency_bands=bands(0, 0, 100)))
        assert result.category == AudioCategory.ANIMAL
        assert result.confidence == pytest.approx(0.90)

    def test_balanced(self, classifier, make_features):
        result = classifier.classify(make_features(frequency_bands=bands(40, 30, 30)))
        assert result.label == "Balanced Audio"
        assert result.category == AudioCategory.OTHER
        assert result.confidence == 0.5

    def test_exactly_half_is_balanced(self, classifier, make_features):
        result = classifier.classify(make_features(frequency_bands=bands(50, 25, 25)))
        assert result.label == "Balanced Audio"


class TestTemporalClassifier:
    @pytest.fixture
    def classifier(self):
        return TemporalClassifier()

    def test_no_vote_without_crossings(self, classifier, make_features):
        assert classifier.classify(make_features(zero_crossing_rate=0.0)) is None

    @pytest.mark.parametrize("tempo,label,category,confidence", [
        (70.0, "Slow-Paced Audio", AudioCategory.ENVIRONMENTAL, 0.55),
        (100.0, "Moderate-Tempo Audio", AudioCategory.MUSIC, 0.60),
        (150.0, "Fast-Tempo Audio", AudioCategory.MUSIC, 0.65),
    ])
    def test_tempo_buckets(self, classifier, make_features, tempo, label, category, confidence):
        result = classifier.classify(make_features(zero_crossing_rate=0.05, tempo=tempo))
        assert result.label == label
        assert result.category == category
        assert result.confidence == confidence

    def test_high_activity_overrides_weaker_tempo_vote(self, classifier, make_features):
        result = classifier.classify(make_features(zero_crossing_rate=0.2, tempo=150.0))
        assert result.label == "High-Activity Speech"
        assert result.category == AudioCategory.SPEECH
        assert result.confidence == pytest.approx(0.75)

    def test_high_activity_confidence_capped(self, classifier, make_features):
        result = classifier.classify(make_features(zero_crossing_rate=0.5, tempo=200.0))
        assert result.confidence == pytest.approx(0.85)

    def test_tie_keeps_tempo_candidate(self, classifier, make_features):
        # 0.55 + 0.10001 rounds to 0.65, the fast-tempo confidence
        result = classifier.classify(make_features(zero_crossing_rate=0.10001, tempo=150.0))
        assert result.label == "Fast-Tempo Audio"

    def test_confidences_never_summed(self, classifier, make_features):
        for zcr in (0.11, 0.2, 0.3, 0.9):
            result = classifier.classify(make_features(zero_crossing_rate=zcr, tempo=150.0))
            assert result.confidence <= 0.85


class TestEnergyClassifier:
    @pytest.fixture
    def classifier(self):
        return EnergyClassifier()

    def test_no_vote_without_energy(self, classifier, make_features):
        assert classifier.classify(make_features(rms_energy=0.0)) is None

    @pytest.mark.parametrize("rms,category,confidence", [
        (0.6, AudioCategory.MUSIC, 0.60),
        (0.5, AudioCategory.SPEECH, 0.55),
        (0.3, AudioCategory.SPEECH, 0.55),
        (0.1, AudioCategory.ENVIRONMENTAL, 0.50),
    ])
    def test_thresholds(self, classifier, make_features, rms, category, confidence):
        result = classifier.classify(make_features(rms_energy=rms))
        assert result.category == category
        assert result.confidence == confidence


class TestSoundEventClassifier:
    @pytest.fixture
    def classifier(self):
        return SoundEventClassifier()

    def test_no_vote_without_energy(self, classifier, make_features):
        assert classifier.classify(make_features(frequency_bands=bands(0, 0, 0))) is None

    @pytest.mark.parametrize("overrides,label,category,confidence", [
        (dict(frequency_bands=bands(70, 20, 10), rms_energy=0.6),
         "Thunder", AudioCategory.ENVIRONMENTAL, 0.92),
        (dict(frequency_bands=bands(10, 30, 60), spectral_centroid=2000.0),
         "Cat Meowing", AudioCategory.ANIMAL, 0.89),
        (dict(frequency_bands=bands(10, 50, 40), rms_energy=0.4, spectral_centroid=1000.0),
         "Dog Barking", AudioCategory.ANIMAL, 0.87),
        (dict(frequency_bands=bands(45, 45, 10), spectral_flatness=0.1),
         "Music", AudioCategory.MUSIC, 0.85),
        (dict(frequency_bands=bands(10, 80, 10), spectral_flatness=0.5, spectral_centroid=1500.0),
         "Human Speech", AudioCategory.SPEECH, 0.83),
        (dict(frequency_bands=bands(10, 45, 45), spectral_flatness=0.5, spectral_centroid=1200.0),
         "Rain", AudioCategory.ENVIRONMENTAL, 0.80),
        (dict(frequency_bands=bands(40, 40, 20), rms_energy=0.45, spectral_flatness=0.5,
              spectral_centroid=600.0),
         "Traffic", AudioCategory.VEHICLE, 0.78),
        (dict(frequency_bands=bands(40, 40, 20), spectral_flatness=0.5),
         "Audio Content", AudioCategory.OTHER, 0.65),
    ])
    def test_rules(self, classifier, make_features, overrides, label, category, confidence):
        result = classifier.classify(make_features(**overrides))
        assert result.label == label
        assert result.category == category
        assert result.confidence == confidence
        assert result.source == "sound_event"

    def test_deterministic(self, classifier, make_features):
        features = make_features()
        assert classifier.classify(features) == classifier.classify(features)


class BrokenClassifier(BaseClassifier):
    def __init__(self):
        super().__init__("broken", "0.0.1")

    def _classify_impl(self, features):
        raise ValueError("bad input")


class TestBaseClassifier:
    def test_wraps_exceptions(self, make_features):
        with pytest.raises(ClassifierFailure) as exc_info:
            BrokenClassifier().classify(make_features())
        assert exc_info.value.classifier_name == "broken"
        assert isinstance(exc_info.value.original_error, ValueError)

    def test_name_and_version(self):
        classifier = BrokenClassifier()
        assert classifier.name == "broken"
        assert classifier.version == "0.0.1"


class TestFactories:
    def test_default_set_in_registration_order(self):
        names = [c.name for c in create_classifiers(get_default_config())]
        assert names == ["spectral_shape", "band_distribution", "temporal", "energy"]

    def test_disabled_classifier_skipped(self):
        config = {"classifiers": {"energy": {"enabled": False}}}
        names = [c.name for c in create_classifiers(config)]
        assert "energy" not in names
        assert len(names) == 3

    def test_empty_config_enables_all(self):
        assert len(create_classifiers({})) == 4

    def test_model_classifier(self):
        assert isinstance(create_model_classifier({}), SoundEventClassifier)
        config = {"classifiers": {"sound_event": {"enabled": False}}}
        assert create_model_classifier(config) is None
