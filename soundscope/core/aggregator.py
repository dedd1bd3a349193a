"""
Classification aggregator.

Merges the heuristic votes of one recognition call into a single ranked
ClassificationAnalysis.
"""

import logging
from statistics import mean
from typing import Iterable, Optional

from soundscope.core.models import (
    AudioCategory,
    AudioType,
    ClassificationAnalysis,
    ClassificationResult,
)

MAX_SECONDARY = 2

FALLBACK_RESULT = ClassificationResult(
    label="Audio Content",
    confidence=0.5,
    category=AudioCategory.OTHER,
    description="General audio content",
    tags=("audio", "general"),
    source="fallback",
)

# Category whose presence decides the audio type, highest precedence first
_AUDIO_TYPE_PRECEDENCE = (
    (AudioCategory.MUSIC, AudioType.MUSIC),
    (AudioCategory.SPEECH, AudioType.SPEECH),
    (AudioCategory.ENVIRONMENTAL, AudioType.ENVIRONMENTAL),
)


def fallback_analysis() -> ClassificationAnalysis:
    """Analysis used when no classifier voted."""
    return ClassificationAnalysis(
        primary=FALLBACK_RESULT,
        secondary=(),
        overall_confidence=FALLBACK_RESULT.confidence,
        detected_categories=frozenset({AudioCategory.OTHER}),
        audio_type=AudioType.MIXED,
        is_fallback=True,
    )


class ClassificationAggregator:
    """
    Ranks votes by confidence and derives the audio type.

    Pure: the same votes always give the same analysis. Ties keep the
    order the votes were passed in.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def aggregate(
        self, results: Iterable[Optional[ClassificationResult]]
    ) -> ClassificationAnalysis:
        """
        Merge classifier votes.

        Args:
            results: Votes in classifier registration order; None entries
                are ignored

        Returns:
            ClassificationAnalysis: Fallback analysis when nothing voted
        """
        votes = [r for r in results if r is not None]

        if not votes:
            self.logger.debug("No classifier votes, using fallback analysis")
            return fallback_analysis()

        ranked = sorted(votes, key=lambda r: r.confidence, reverse=True)
        categories = frozenset(r.category for r in ranked)

        analysis = ClassificationAnalysis(
            primary=ranked[0],
            secondary=tuple(ranked[1:1 + MAX_SECONDARY]),
            overall_confidence=min(1.0, mean(r.confidence for r in ranked)),
            detected_categories=categories,
            audio_type=_audio_type(categories),
        )
        self.logger.debug(
            f"Aggregated {len(ranked)} votes: primary '{analysis.primary.label}', "
            f"type {analysis.audio_type.value}"
        )
        return analysis


def _audio_type(categories: frozenset) -> AudioType:
    for category, audio_type in _AUDIO_TYPE_PRECEDENCE:
        if category in categories:
            return audio_type
    return AudioType.MIXED
