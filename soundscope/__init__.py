"""
SoundScope

Feature-based audio recognition: spectral feature extraction, a set of
heuristic classifiers, optional speech transcription, and a fusion step
that turns them into one ranked recognition result.
"""

__version__ = "1.0.0"
