"""Reliability layer: failure classification and rate-limit retry.

The retry engine lives in ``chat_driver_sdk.reliability.retry``.
"""

from .error_classifier import ErrorClassification, ErrorClassifier, FailureClass

__all__ = [
    "ErrorClassification",
    "ErrorClassifier",
    "FailureClass",
]
