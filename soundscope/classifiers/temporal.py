"""
Temporal classifier.

Buckets the tempo estimate and lets a high zero-crossing rate compete
as a speech / high-activity vote.
"""

from typing import Optional

from soundscope.core.classifier_base import BaseClassifier
from soundscope.core.models import AudioCategory, AudioFeatures, ClassificationResult

SLOW_TEMPO = 80.0  # BPM
MODERATE_TEMPO = 120.0  # BPM
HIGH_ACTIVITY_ZCR = 0.1
MAX_ACTIVITY_CONFIDENCE = 0.85


class TemporalClassifier(BaseClassifier):
    """
    Tempo-bucket vote, overridden by a high-activity vote when stronger.

    The two candidates combine by max confidence, never by sum. A tie
    keeps the tempo candidate.
    """

    def __init__(self):
        super().__init__("temporal", "1.0.0")

    def _classify_impl(self, features: AudioFeatures) -> Optional[ClassificationResult]:
        zcr = features.zero_crossing_rate
        if zcr <= 0:
            return None

        candidate = self._tempo_candidate(features.tempo)

        if zcr > HIGH_ACTIVITY_ZCR:
            activity = self._result(
                "High-Activity Speech", min(MAX_ACTIVITY_CONFIDENCE, 0.55 + zcr),
                AudioCategory.SPEECH,
                f"Frequent sign changes (ZCR {zcr:.2f}) typical of speech",
                ("speech", "high-activity"),
            )
            if activity.confidence > candidate.confidence:
                candidate = activity

        return candidate

    def _tempo_candidate(self, tempo: float) -> ClassificationResult:
        if tempo < SLOW_TEMPO:
            return self._result(
                "Slow-Paced Audio", 0.55, AudioCategory.ENVIRONMENTAL,
                f"Slow activity (~{tempo:.0f} BPM)",
                ("slow", "ambient"),
            )
        if tempo < MODERATE_TEMPO:
            return self._result(
                "Moderate-Tempo Audio", 0.60, AudioCategory.MUSIC,
                f"Moderate activity (~{tempo:.0f} BPM)",
                ("moderate", "rhythm"),
            )
        return self._result(
            "Fast-Tempo Audio", 0.65, AudioCategory.MUSIC,
            f"Fast activity (~{tempo:.0f} BPM)",
            ("fast", "rhythm", "energetic"),
        )
