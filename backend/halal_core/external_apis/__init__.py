"""
External services: remote classification fallback for unknown ingredients.
"""
from .http_retry import post_with_retries
from .remote_classifier import RemoteClassifier, parse_classification

__all__ = [
    "post_with_retries",
    "RemoteClassifier",
    "parse_classification",
]
