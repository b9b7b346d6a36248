"""
File classification and filtering.
"""

from gitdigest.analysis.classifier import FileClassifier, FileClassification
from gitdigest.analysis.filters import FilterEngine, SmartFilter

__all__ = [
    "FileClassifier",
    "FileClassification",
    "FilterEngine",
    "SmartFilter",
]
