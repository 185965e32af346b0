"""Enumerations for classifier output"""

from enum import Enum


class ConfidenceCategory(Enum):
    """Speaker confidence labels"""
    CONFIDENT = "confident"
    MONOTONE = "monotone"
    HESITANT = "hesitant"

    def __str__(self) -> str:
        return self.value
