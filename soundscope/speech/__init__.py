"""
Speech recognition: transcriber interface, transcript analysis and the
optional Whisper backend (requires the ``speech`` extra at runtime).
"""

from soundscope.speech.transcriber import (
    Transcriber,
    analyze_sentiment,
    analyze_transcript,
    detect_language,
    extract_keywords,
)
from soundscope.speech.whisper_transcriber import WhisperTranscriber, create_whisper_transcriber

__all__ = [
    "Transcriber",
    "analyze_transcript",
    "analyze_sentiment",
    "detect_language",
    "extract_keywords",
    "WhisperTranscriber",
    "create_whisper_transcriber",
]
