"""
Speech-to-text interface and transcript analysis.

A Transcriber turns an AudioBuffer into transcript segments. The helpers
here derive the text-level insights (language, keywords, sentiment) that
fusion reports alongside the transcript.
"""

import re
from typing import Optional, Protocol, Sequence

from soundscope.core.models import AudioBuffer, Sentiment, SpeechAnalysis, TranscriptSegment

MIN_KEYWORD_LENGTH = 4
MAX_KEYWORDS = 10

STOP_WORDS = frozenset({
    'the', 'and', 'or', 'but', 'in', 'on', 'at', 'to', 'for', 'of', 'with', 'by',
    'this', 'that', 'these', 'those', 'is', 'are', 'was', 'were', 'be', 'been',
    'have', 'has', 'had', 'do', 'does', 'did', 'will', 'would', 'could', 'should',
})

POSITIVE_WORDS = (
    'good', 'great', 'excellent', 'amazing', 'wonderful', 'fantastic', 'awesome',
    'love', 'like', 'enjoy', 'happy', 'joy', 'pleasure', 'beautiful', 'perfect',
)

NEGATIVE_WORDS = (
    'bad', 'terrible', 'awful', 'horrible', 'dislike', 'hate', 'angry', 'sad',
    'disappointed', 'frustrated', 'annoying', 'boring', 'difficult', 'problem',
)

# Checked in order; German before the broader accented-Latin pattern
_LANGUAGE_PATTERNS = (
    (re.compile(r'[äöüß]', re.IGNORECASE), 'German'),
    (re.compile(r'[àáâãåæçèéêëìíîïðñòóôõøùúûýþÿ]', re.IGNORECASE), 'Spanish/French/Portuguese'),
    (re.compile(r'[а-яё]', re.IGNORECASE), 'Russian'),
    (re.compile(r'[一-龯]'), 'Chinese/Japanese'),
    (re.compile(r'[가-힣]'), 'Korean'),
    (re.compile(r'[ก-ฮ]'), 'Thai'),
)
DEFAULT_LANGUAGE = 'English'


class Transcriber(Protocol):
    """Protocol for speech-to-text capabilities."""

    @property
    def name(self) -> str:
        ...

    def transcribe(self, buffer: AudioBuffer) -> Sequence[TranscriptSegment]:
        """
        Transcribe a buffer.

        Raises:
            TranscriptionFailure: If the backend fails
        """
        ...


def detect_language(text: str) -> str:
    """Guess the language from the script the text is written in."""
    for pattern, language in _LANGUAGE_PATTERNS:
        if pattern.search(text):
            return language
    return DEFAULT_LANGUAGE


def extract_keywords(text: str, limit: int = MAX_KEYWORDS) -> list:
    """First ``limit`` non-stop words of four or more letters, in order."""
    words = re.sub(r'[^\w\s]', '', text.lower()).split()
    keywords = [
        word for word in words
        if len(word) >= MIN_KEYWORD_LENGTH and word not in STOP_WORDS
    ]
    return keywords[:limit]


def analyze_sentiment(text: str) -> Sentiment:
    """Count positive and negative word hits."""
    lower = text.lower()
    positive = sum(len(re.findall(rf'\b{word}\b', lower)) for word in POSITIVE_WORDS)
    negative = sum(len(re.findall(rf'\b{word}\b', lower)) for word in NEGATIVE_WORDS)

    if positive > negative:
        return Sentiment.POSITIVE
    if negative > positive:
        return Sentiment.NEGATIVE
    return Sentiment.NEUTRAL


def analyze_transcript(
    segments: Sequence[TranscriptSegment],
    duration: float,
    language: Optional[str] = None,
) -> Optional[SpeechAnalysis]:
    """
    Build a SpeechAnalysis from transcript segments.

    Only final segments count. Their texts are joined and their
    confidences averaged.

    Args:
        segments: Segments returned by a Transcriber
        duration: Duration of the transcribed audio in seconds
        language: Language name to report; otherwise the first language
                  a segment reports, otherwise detected from the script

    Returns:
        SpeechAnalysis, or None when no final segment carries text
    """
    final = [s for s in segments if s.is_final and s.text.strip()]
    if not final:
        return None

    text = " ".join(s.text.strip() for s in final)
    confidence = sum(s.confidence for s in final) / len(final)
    reported = next((s.language for s in final if s.language), None)

    return SpeechAnalysis(
        transcription=text,
        confidence=confidence,
        language=language or reported or detect_language(text),
        word_count=len(text.split()),
        duration=duration,
        keywords=extract_keywords(text),
        sentiment=analyze_sentiment(text),
    )
