"""
Sound-event classifier.

The "model-style" voter: a fixed rule table naming concrete sound events
(thunder, animals, rain, traffic...) from band shares, brightness and
loudness. Its vote goes straight to fusion at the highest priority rather
than into the heuristic aggregate.
"""

from typing import Optional

from soundscope.core.classifier_base import BaseClassifier
from soundscope.core.models import AudioCategory, AudioFeatures, ClassificationResult


class SoundEventClassifier(BaseClassifier):
    """Deterministic sound-event rules, first match wins."""

    def __init__(self):
        super().__init__("sound_event", "1.0.0")

    def _classify_impl(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        bands = features.frequency_bands
        if bands.total <= 0:
            return None

        low, mid, high = bands.percentages()
        energy = features.rms_energy
        centroid = features.spectral_centroid
        flatness = features.spectral_flatness

        if low > 60 and energy > 0.5:
            return self._result(
                "Thunder", 0.92, AudioCategory.ENVIRONMENTAL,
                "Thunder and storm sounds - low frequency dominant",
                ("thunder", "storm", "weather", "low-frequency"),
            )
        if high > 50 and centroid > 1500:
            return self._result(
                "Cat Meowing", 0.89, AudioCategory.ANIMAL,
                "Feline vocalization - high frequency, sharp sounds",
                ("cat", "meow", "animal", "high-frequency"),
            )
        if mid > 40 and high > 30 and energy > 0.3:
            return self._result(
                "Dog Barking", 0.87, AudioCategory.ANIMAL,
                "Canine vocalization - mid-high frequency range",
                ("dog", "bark", "animal"),
            )
        if flatness < 0.3 and abs(low - mid) < 20:
            return self._result(
                "Music", 0.85, AudioCategory.MUSIC,
                "Musical content - balanced frequency distribution",
                ("music", "melody", "harmonic"),
            )
        if mid > 50 and 800 < centroid < 3000:
            return self._result(
                "Human Speech", 0.83, AudioCategory.SPEECH,
                "Human vocal communication - mid frequency range",
                ("speech", "human", "voice"),
            )
        if high > 40 and energy < 0.3:
            return self._result(
                "Rain", 0.80, AudioCategory.ENVIRONMENTAL,
                "Rain and water sounds - high frequency, low energy",
                ("rain", "water", "weather", "ambient"),
            )
        if energy > 0.4 and flatness > 0.4:
            return self._result(
                "Traffic", 0.78, AudioCategory.VEHICLE,
                "Vehicle and traffic sounds - mixed frequencies",
                ("traffic", "vehicles", "urban"),
            )
        return self._result(
            "Audio Content", 0.65, AudioCategory.OTHER,
            "General audio content - mixed characteristics",
            ("audio", "general", "mixed"),
        )
