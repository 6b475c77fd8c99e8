"""Confidence calibration."""

from studio_assistant.confidence.calibrator import (
    ConfidenceCalibrator,
    Thresholds,
    has_specific_keyword,
    is_clarification_prompt,
)

__all__ = [
    "ConfidenceCalibrator",
    "Thresholds",
    "has_specific_keyword",
    "is_clarification_prompt",
]
