"""
Fusion policy.

Combines the aggregated classification, the optional sound-event vote and
the optional speech analysis into the final recognition text, confidence,
audio type and detected-content list.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple

from soundscope.core.models import (
    AudioCategory,
    AudioFeatures,
    AudioType,
    ClassificationAnalysis,
    ClassificationResult,
    SpeechAnalysis,
)

BOOST_THRESHOLD = 0.7
BOOST_CEILING = 0.95
MAX_KEYWORDS_SHOWN = 5

_CATEGORY_AUDIO_TYPE = {
    AudioCategory.MUSIC: AudioType.MUSIC,
    AudioCategory.SPEECH: AudioType.SPEECH,
    AudioCategory.ENVIRONMENTAL: AudioType.ENVIRONMENTAL,
    AudioCategory.ANIMAL: AudioType.ENVIRONMENTAL,
    AudioCategory.VEHICLE: AudioType.ENVIRONMENTAL,
    AudioCategory.OTHER: AudioType.UNKNOWN,
}


@dataclass
class FusionOutcome:
    """Fused recognition fields, before timing is attached."""

    primary_recognition: str
    confidence: float
    audio_type: AudioType
    detected_content: List[str] = field(default_factory=list)


def category_audio_type(category: AudioCategory) -> AudioType:
    """Map a vote category onto the coarse audio type."""
    return _CATEGORY_AUDIO_TYPE[AudioCategory(category)]


def fuse(
    classification: ClassificationAnalysis,
    features: AudioFeatures,
    speech: Optional[SpeechAnalysis] = None,
    model_result: Optional[ClassificationResult] = None,
    degradations: Sequence[Tuple[str, str]] = (),
    confidence_boost: bool = False,
) -> FusionOutcome:
    """
    Fuse every signal of one recognition call.

    Sources are considered in priority order: the sound-event vote, then
    speech (only when a transcript was produced), then the aggregated
    primary vote. A later source takes over only with a strictly higher
    confidence.

    Args:
        classification: Aggregated heuristic votes
        features: Feature vector the votes were computed from
        speech: Speech analysis, if transcription ran
        model_result: Sound-event vote, if any
        degradations: (step, reason) pairs for steps that failed or timed out
        confidence_boost: Average in the overall confidence when speech and
            a strong primary vote agree

    Returns:
        FusionOutcome
    """
    has_speech = speech is not None and speech.contains_speech
    primary = classification.primary

    text: Optional[str] = None
    confidence = 0.0
    audio_type = AudioType.UNKNOWN

    if model_result is not None:
        text = f"{model_result.label}: {model_result.description}"
        confidence = model_result.confidence
        audio_type = category_audio_type(model_result.category)

    if has_speech and (text is None or speech.confidence > confidence):
        text = f"Speech detected: \"{speech.transcription}\""
        confidence = speech.confidence
        audio_type = AudioType.SPEECH

    if text is None or primary.confidence > confidence:
        text = f"{primary.label}: {primary.description}"
        confidence = primary.confidence
        audio_type = classification.audio_type

    if has_speech and classification.audio_type != AudioType.SPEECH:
        audio_type = AudioType.MIXED
        text = (
            f"Mixed content: speech \"{speech.transcription}\" "
            f"with background {primary.label.lower()}"
        )

    if confidence_boost and has_speech and primary.confidence > BOOST_THRESHOLD:
        confidence = min(BOOST_CEILING, (confidence + classification.overall_confidence) / 2)

    return FusionOutcome(
        primary_recognition=text,
        confidence=confidence,
        audio_type=audio_type,
        detected_content=_detected_content(
            classification, features, speech if has_speech else None,
            model_result, degradations,
        ),
    )


def _detected_content(
    classification: ClassificationAnalysis,
    features: AudioFeatures,
    speech: Optional[SpeechAnalysis],
    model_result: Optional[ClassificationResult],
    degradations: Sequence[Tuple[str, str]],
) -> List[str]:
    content: List[str] = []

    if speech is not None:
        content.extend([
            "Human Speech",
            f"Language: {speech.language}",
            f"Words: {speech.word_count}",
        ])
        if speech.keywords:
            content.append(f"Keywords: {', '.join(speech.keywords[:MAX_KEYWORDS_SHOWN])}")

    if model_result is not None:
        content.append(
            f"Sound event: {model_result.label} ({model_result.confidence * 100:.1f}%)"
        )

    content.append(f"Category: {classification.primary.category.value}")
    content.append(f"Confidence: {classification.overall_confidence * 100:.1f}%")

    if classification.secondary:
        labels = ", ".join(r.label for r in classification.secondary)
        content.append(f"Also detected: {labels}")

    if features.pitch > 0:
        content.append(f"Pitch: {features.pitch:.0f} Hz")
    if features.tempo > 0:
        content.append(f"Tempo: {features.tempo:.0f} BPM")

    for step, reason in degradations:
        content.append(f"{step} unavailable: {reason}")

    return content
