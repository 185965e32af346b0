"""Confidence Classification

Combines acoustic features with transcript metrics into one of three labels
using an additive point rubric. Every rule is an independent guard clause;
all rules that match contribute, in the order listed in RULES.

Score mapping:
    score >= 6        -> confident
    2 <= score < 6    -> monotone
    score < 2         -> hesitant
"""

import logging
from typing import Callable, List, NamedTuple, Tuple

from speech_confidence.models.features import AudioFeatures, SpeechMetrics
from speech_confidence.models.enums import ConfidenceCategory
from speech_confidence.models.results import ConfidenceAssessment


logger = logging.getLogger(__name__)

CONFIDENT_THRESHOLD = 6.0
MONOTONE_THRESHOLD = 2.0


class Rule(NamedTuple):
    """One rubric line: applies ``delta`` when ``condition`` holds"""
    name: str
    condition: Callable[[AudioFeatures, SpeechMetrics], bool]
    delta: float


def _natural_pitch(f: AudioFeatures) -> bool:
    return 50 < f.average_pitch < 350


RULES: Tuple[Rule, ...] = (
    # Adequate, steady volume
    Rule('volume_adequate', lambda f, m: 0.15 < f.volume < 0.8, +2),
    Rule('volume_too_quiet', lambda f, m: f.volume < 0.05, -2),
    Rule('volume_too_loud', lambda f, m: f.volume > 0.9, -1),
    # Pitch variation
    Rule('pitch_varied', lambda f, m: f.pitch_variance > 30 and f.pitch_range > 50, +2),
    Rule('pitch_flat', lambda f, m: f.pitch_variance < 15 or f.pitch_range < 20, -2),
    # Pace
    Rule('rate_steady', lambda f, m: 120 <= m.rate_of_speech <= 160, +2),
    Rule('rate_too_slow', lambda f, m: m.rate_of_speech < 80, -2),
    Rule('rate_too_fast', lambda f, m: m.rate_of_speech > 200, -1),
    # Filler words
    Rule('fillers_few', lambda f, m: m.filler_word_count <= 3, +2),
    Rule('fillers_many', lambda f, m: m.filler_word_count >= 10, -2),
    Rule('fillers_some', lambda f, m: 6 <= m.filler_word_count < 10, -1),
    # Energy and consistency
    Rule('energy_steady', lambda f, m: f.energy > 0.3 and f.consistency > 0.6, +1),
    Rule('energy_weak', lambda f, m: f.energy < 0.1 or f.consistency < 0.3, -1),
    # Fluency
    Rule('fluency_high', lambda f, m: m.fluency_score >= 7, +1),
    Rule('fluency_low', lambda f, m: m.fluency_score <= 4, -1),
    # Average pitch; high pitch within the natural range suggests strain
    Rule('pitch_unnatural', lambda f, m: not _natural_pitch(f), -1),
    Rule('pitch_high', lambda f, m: _natural_pitch(f) and f.average_pitch > 200, -0.5),
)


class ConfidenceClassifier:
    """Maps (AudioFeatures, SpeechMetrics) to a ConfidenceCategory.

    Pure and deterministic; holds no state besides the rule table.
    """

    def __init__(self, rules: Tuple[Rule, ...] = RULES):
        self.rules = rules

    def contributions(self, features: AudioFeatures,
                      metrics: SpeechMetrics) -> List[Tuple[str, float]]:
        """(rule name, delta) for every matching rule, in evaluation order"""
        return [
            (rule.name, float(rule.delta))
            for rule in self.rules
            if rule.condition(features, metrics)
        ]

    def score(self, features: AudioFeatures, metrics: SpeechMetrics) -> float:
        """Sum of all matching rule deltas"""
        return sum(delta for _, delta in self.contributions(features, metrics))

    @staticmethod
    def categorize(score: float) -> ConfidenceCategory:
        """Map a rubric score to its category; boundaries go to the higher label"""
        if score >= CONFIDENT_THRESHOLD:
            return ConfidenceCategory.CONFIDENT
        if score >= MONOTONE_THRESHOLD:
            return ConfidenceCategory.MONOTONE
        return ConfidenceCategory.HESITANT

    def assess(self, features: AudioFeatures, metrics: SpeechMetrics) -> ConfidenceAssessment:
        """Classify and keep the score breakdown"""
        contributions = self.contributions(features, metrics)
        score = sum(delta for _, delta in contributions)
        category = self.categorize(score)
        logger.debug(f"Confidence calculation: score={score}, category={category.value}, "
                     f"rules={[name for name, _ in contributions]}")
        return ConfidenceAssessment(category=category, score=score, contributions=contributions)

    def classify(self, features: AudioFeatures, metrics: SpeechMetrics) -> ConfidenceCategory:
        return self.assess(features, metrics).category


_default_classifier = ConfidenceClassifier()


def calculate_confidence_category(features: AudioFeatures,
                                  metrics: SpeechMetrics) -> ConfidenceCategory:
    """Classify speaker confidence with the standard rubric"""
    return _default_classifier.classify(features, metrics)
