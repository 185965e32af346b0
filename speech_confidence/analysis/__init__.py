"""Analysis modules for acoustic feature extraction and confidence classification"""

from speech_confidence.analysis.acoustic import FeatureExtractor, AudioProcessingError
from speech_confidence.analysis.confidence import (
    ConfidenceClassifier,
    calculate_confidence_category
)

__all__ = [
    'FeatureExtractor',
    'AudioProcessingError',
    'ConfidenceClassifier',
    'calculate_confidence_category',
]
