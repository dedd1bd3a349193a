"""
Heuristic classifier implementations.
"""

import logging
from typing import Any, Dict, List, Optional

from soundscope.classifiers.band_distribution import BandDistributionClassifier
from soundscope.classifiers.energy import EnergyClassifier
from soundscope.classifiers.sound_event import SoundEventClassifier
from soundscope.classifiers.spectral_shape import SpectralShapeClassifier
from soundscope.classifiers.temporal import TemporalClassifier

__all__ = [
    "SpectralShapeClassifier",
    "BandDistributionClassifier",
    "TemporalClassifier",
    "EnergyClassifier",
    "SoundEventClassifier",
    "HEURISTIC_CLASSIFIERS",
    "create_classifiers",
    "create_model_classifier",
]

# Registration order is the aggregator's tie-break order
HEURISTIC_CLASSIFIERS = {
    'spectral_shape': SpectralShapeClassifier,
    'band_distribution': BandDistributionClassifier,
    'temporal': TemporalClassifier,
    'energy': EnergyClassifier,
}


def _is_enabled(config: Dict[str, Any], name: str) -> bool:
    section = config.get('classifiers', {}).get(name, {})
    return bool(section.get('enabled', True))


def create_classifiers(config: Dict[str, Any]) -> List[Any]:
    """
    Factory function to create the enabled heuristic classifiers.

    Args:
        config: Configuration dict with optional 'classifiers' section

    Returns:
        List of classifiers in registration order
    """
    classifiers = [
        cls() for name, cls in HEURISTIC_CLASSIFIERS.items()
        if _is_enabled(config, name)
    ]
    logging.getLogger(__name__).debug(
        f"Created classifiers: {[c.name for c in classifiers]}"
    )
    return classifiers


def create_model_classifier(config: Dict[str, Any]) -> Optional[SoundEventClassifier]:
    """Factory for the sound-event classifier, or None if disabled."""
    if not _is_enabled(config, 'sound_event'):
        return None
    return SoundEventClassifier()
