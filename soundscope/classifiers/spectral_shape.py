"""
Spectral-shape classifier.

Decision tree over centroid, rolloff and flatness.
"""

from typing import Optional

from soundscope.core.classifier_base import BaseClassifier
from soundscope.core.models import AudioCategory, AudioFeatures, ClassificationResult


class SpectralShapeClassifier(BaseClassifier):
    """
    Votes from the overall shape of the spectrum.

    Branches are checked in order and the first match wins:
    tonal and bright → music, speech-band centroid with limited rolloff →
    speech, very bright → animal, noise-like → environmental, dark → other.
    """

    def __init__(self):
        super().__init__("spectral_shape", "1.0.0")

    def _classify_impl(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        centroid = features.spectral_centroid
        rolloff = features.spectral_rolloff
        flatness = features.spectral_flatness

        if centroid <= 0:
            return None

        if flatness < 0.2 and centroid > 1000:
            return self._result(
                "Music", 0.75, AudioCategory.MUSIC,
                "Tonal content with a bright spectrum",
                ("music", "tonal", "harmonic"),
            )
        if 800 < centroid < 3000 and rolloff < 4000:
            return self._result(
                "Speech", 0.70, AudioCategory.SPEECH,
                "Energy concentrated in the vocal range",
                ("speech", "voice", "mid-frequency"),
            )
        if centroid > 2000 and rolloff > 6000:
            return self._result(
                "High-Frequency Sounds", 0.65, AudioCategory.ANIMAL,
                "Bright, high-pitched content typical of animal calls",
                ("animal", "high-frequency"),
            )
        if flatness > 0.5:
            return self._result(
                "Environmental Noise", 0.60, AudioCategory.ENVIRONMENTAL,
                "Noise-like spectrum without clear harmonics",
                ("environment", "noise", "ambient"),
            )
        if centroid < 500:
            return self._result(
                "Low-Frequency Sounds", 0.55, AudioCategory.OTHER,
                "Energy concentrated in the low end",
                ("low-frequency", "rumble"),
            )
        return None
