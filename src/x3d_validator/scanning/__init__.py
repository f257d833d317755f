"""Text scanning: line/column mapping and numeric literal anomaly detectors."""

from x3d_validator.scanning.detectors import (
    ValuesRegexChecker,
    ValuesScan,
    detect_leading_zeroes,
    detect_malformed_floats,
)
from x3d_validator.scanning.positions import LineOffsetTable

__all__ = [
    "LineOffsetTable",
    "ValuesRegexChecker",
    "ValuesScan",
    "detect_leading_zeroes",
    "detect_malformed_floats",
]
