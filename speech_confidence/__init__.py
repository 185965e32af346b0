"""Speech confidence engine: WAV decoding, acoustic features, confidence rubric"""

from speech_confidence.main import (
    ConfidenceEngine,
    extract_audio_features,
    try_extract_audio_features,
    calculate_confidence_category
)
from speech_confidence.models import (
    PcmBuffer,
    AudioFeatures,
    SpeechMetrics,
    ConfidenceCategory,
    ExtractionResult,
    ConfidenceAssessment,
    AnalysisReport
)
from speech_confidence.input import (
    WaveformDecoder,
    decode_wav,
    encode_wav,
    WavDecodeError,
    FormatError,
    UnsupportedFormatError,
    InsufficientDataError
)
from speech_confidence.analysis import (
    FeatureExtractor,
    AudioProcessingError,
    ConfidenceClassifier
)

__version__ = "0.1.0"

__all__ = [
    "ConfidenceEngine",
    "extract_audio_features",
    "try_extract_audio_features",
    "calculate_confidence_category",
    "PcmBuffer",
    "AudioFeatures",
    "SpeechMetrics",
    "ConfidenceCategory",
    "ExtractionResult",
    "ConfidenceAssessment",
    "AnalysisReport",
    "WaveformDecoder",
    "decode_wav",
    "encode_wav",
    "WavDecodeError",
    "FormatError",
    "UnsupportedFormatError",
    "InsufficientDataError",
    "FeatureExtractor",
    "AudioProcessingError",
    "ConfidenceClassifier",
]
