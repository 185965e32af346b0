"""Data models"""

from speech_confidence.models.frames import PcmBuffer
from speech_confidence.models.features import AudioFeatures, SpeechMetrics
from speech_confidence.models.enums import ConfidenceCategory
from speech_confidence.models.results import (
    ExtractionResult,
    ConfidenceAssessment,
    AnalysisReport
)

__all__ = [
    # Frames
    "PcmBuffer",
    # Features
    "AudioFeatures",
    "SpeechMetrics",
    # Enums
    "ConfidenceCategory",
    # Results
    "ExtractionResult",
    "ConfidenceAssessment",
    "AnalysisReport",
]
