"""Data models for analysis results"""

from dataclasses import dataclass, field
from typing import List, Optional, Tuple
from speech_confidence.models.features import AudioFeatures
from speech_confidence.models.enums import ConfidenceCategory


@dataclass
class ExtractionResult:
    """Outcome of feature extraction

    Exactly one of ``features`` and ``error`` is set. Callers choose how to
    handle failure: ``unwrap()`` re-raises, ``unwrap_or_default()`` falls
    back to the neutral feature set.

    Attributes:
        features: Extracted features on success
        error: Exception raised during decoding or extraction
    """
    features: Optional[AudioFeatures] = None
    error: Optional[Exception] = None

    def __post_init__(self):
        """Validate result data"""
        assert (self.features is None) != (self.error is None), \
            "Exactly one of features and error must be set"

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> AudioFeatures:
        """Return the features, or raise the captured error"""
        if self.error is not None:
            raise self.error
        return self.features

    def unwrap_or_default(self, default: Optional[AudioFeatures] = None) -> AudioFeatures:
        """Return the features, or ``default`` (neutral features if None)"""
        if self.error is not None:
            return default if default is not None else AudioFeatures.neutral()
        return self.features


@dataclass
class ConfidenceAssessment:
    """Classifier output with the score breakdown

    Attributes:
        category: Final confidence label
        score: Sum of all rule deltas
        contributions: (rule name, delta) for every rule that fired, in
                       evaluation order
    """
    category: ConfidenceCategory
    score: float
    contributions: List[Tuple[str, float]] = field(default_factory=list)

    def __post_init__(self):
        """Validate assessment data"""
        assert isinstance(self.category, ConfidenceCategory), "Category must be a ConfidenceCategory"
        assert abs(sum(delta for _, delta in self.contributions) - self.score) < 1e-9, \
            "Score must equal the sum of contributions"


@dataclass
class AnalysisReport:
    """Combined result of analyzing one recording

    Attributes:
        features: Acoustic features used for classification
        assessment: Classifier output
        used_fallback: True when extraction failed and neutral features
                       were substituted
        error: Description of the extraction failure, if any
    """
    features: AudioFeatures
    assessment: ConfidenceAssessment
    used_fallback: bool = False
    error: Optional[str] = None

    @property
    def category(self) -> ConfidenceCategory:
        return self.assessment.category

    def to_dict(self) -> dict:
        """Serialize for the feedback composer"""
        return {
            'audioFeatures': self.features.to_dict(),
            'confidenceCategory': self.assessment.category.value,
            'confidenceScore': self.assessment.score,
            'contributions': [
                {'rule': name, 'delta': delta}
                for name, delta in self.assessment.contributions
            ],
            'usedFallback': self.used_fallback,
            'error': self.error,
        }
