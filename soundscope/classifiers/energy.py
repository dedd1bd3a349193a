"""
Energy classifier.

Thresholds the RMS energy.
"""

from typing import Optional

from soundscope.core.classifier_base import BaseClassifier
from soundscope.core.models import AudioCategory, AudioFeatures, ClassificationResult

HIGH_ENERGY = 0.5
MEDIUM_ENERGY = 0.2


class EnergyClassifier(BaseClassifier):
    """Loud → music-like, medium → speech-like, quiet → ambience."""

    def __init__(self):
        super().__init__("energy", "1.0.0")

    def _classify_impl(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        rms = features.rms_energy
        if rms <= 0:
            return None

        if rms > HIGH_ENERGY:
            return self._result(
                "High Energy Audio", 0.60, AudioCategory.MUSIC,
                f"Loud signal (RMS {rms:.2f})",
                ("loud", "energetic"),
            )
        if rms > MEDIUM_ENERGY:
            return self._result(
                "Moderate Energy Audio", 0.55, AudioCategory.SPEECH,
                f"Conversational level (RMS {rms:.2f})",
                ("moderate", "voice-level"),
            )
        return self._result(
            "Low Energy Ambience", 0.50, AudioCategory.ENVIRONMENTAL,
            f"Quiet signal (RMS {rms:.3f})",
            ("quiet", "ambient", "background"),
        )
