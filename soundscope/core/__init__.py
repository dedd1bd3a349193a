"""
Core module containing data models, feature extraction, aggregation,
fusion and the recognition orchestrator.

Uses lazy imports for modules with heavy dependencies (librosa, soundfile).
"""

# Models are lightweight - import directly
from soundscope.core.models import (
    AudioBuffer,
    FrequencySpectrum,
    FrequencyBands,
    AudioFeatures,
    AudioCategory,
    AudioType,
    ClassificationResult,
    ClassificationAnalysis,
    RecognitionStage,
    RecognitionProgress,
    TranscriptSegment,
    SpeechAnalysis,
    Sentiment,
    AIRecognitionResult,
    validate_confidence,
)

__all__ = [
    # Models (always available)
    "AudioBuffer",
    "FrequencySpectrum",
    "FrequencyBands",
    "AudioFeatures",
    "AudioCategory",
    "AudioType",
    "ClassificationResult",
    "ClassificationAnalysis",
    "RecognitionStage",
    "RecognitionProgress",
    "TranscriptSegment",
    "SpeechAnalysis",
    "Sentiment",
    "AIRecognitionResult",
    "validate_confidence",
    # Heavy modules (lazy loaded)
    "AudioLoader",
    "create_audio_loader",
    "SpectralFeatureExtractor",
    "create_feature_extractor",
    "Classifier",
    "BaseClassifier",
    "ClassificationAggregator",
    "fuse",
    "FusionOutcome",
    "RecognitionOrchestrator",
    "RecognitionSubsystems",
    "OrchestratorState",
    "create_recognition_orchestrator",
]


def __getattr__(name: str):
    """Lazy load modules with heavy dependencies."""
    if name in ("AudioLoader", "create_audio_loader"):
        from soundscope.core.loader import AudioLoader, create_audio_loader
        return AudioLoader if name == "AudioLoader" else create_audio_loader
    elif name in ("SpectralFeatureExtractor", "create_feature_extractor"):
        from soundscope.core.features import SpectralFeatureExtractor, create_feature_extractor
        return SpectralFeatureExtractor if name == "SpectralFeatureExtractor" else create_feature_extractor
    elif name in ("Classifier", "BaseClassifier"):
        from soundscope.core.classifier_base import Classifier, BaseClassifier
        return Classifier if name == "Classifier" else BaseClassifier
    elif name == "ClassificationAggregator":
        from soundscope.core.aggregator import ClassificationAggregator
        return ClassificationAggregator
    elif name in ("fuse", "FusionOutcome"):
        from soundscope.core.fusion import fuse, FusionOutcome
        return fuse if name == "fuse" else FusionOutcome
    elif name in (
        "RecognitionOrchestrator",
        "RecognitionSubsystems",
        "OrchestratorState",
        "create_recognition_orchestrator",
    ):
        import soundscope.core.orchestrator as orchestrator
        return getattr(orchestrator, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
