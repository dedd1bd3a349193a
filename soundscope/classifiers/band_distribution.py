"""
Band-distribution classifier.

Looks at how energy is shared between the low, mid and high bands.
"""

from typing import Optional

from soundscope.core.classifier_base import BaseClassifier
from soundscope.core.models import AudioCategory, AudioFeatures, ClassificationResult

DOMINANCE_THRESHOLD = 50.0  # percent


class BandDistributionClassifier(BaseClassifier):
    """Votes for the band holding more than half the energy, else 'balanced'."""

    def __init__(self):
        super().__init__("band_distribution", "1.0.0")

    def _classify_impl(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        bands = features.frequency_bands
        if bands.total <= 0:
            return None

        low, mid, high = bands.percentages()

        if low > DOMINANCE_THRESHOLD:
            return self._result(
                "Bass-Heavy Music", _dominance_confidence(low), AudioCategory.MUSIC,
                f"{low:.0f}% of energy below 250 Hz",
                ("music", "bass", "low-frequency"),
            )
        if mid > DOMINANCE_THRESHOLD:
            return self._result(
                "Speech", _dominance_confidence(mid), AudioCategory.SPEECH,
                f"{mid:.0f}% of energy between 250 Hz and 4 kHz",
                ("speech", "voice", "mid-frequency"),
            )
        if high > DOMINANCE_THRESHOLD:
            return self._result(
                "High-Pitched Animal Sounds", _dominance_confidence(high), AudioCategory.ANIMAL,
                f"{high:.0f}% of energy above 4 kHz",
                ("animal", "high-frequency"),
            )
        return self._result(
            "Balanced Audio", 0.5, AudioCategory.OTHER,
            "Energy spread across all bands",
            ("balanced", "mixed"),
        )


def _dominance_confidence(share: float) -> float:
    """Map a 50-100% share onto 0.5-0.9 confidence."""
    return 0.5 + (share - DOMINANCE_THRESHOLD) / 100.0 * 0.8
