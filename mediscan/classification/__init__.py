from mediscan.classification.classifier import Classifier, classify
from mediscan.classification.models import (
    ClassificationResult,
    ClassifiedParameter,
    ExtractedParameter,
    ReferenceRangeDefinition,
)
from mediscan.classification.registry import ReferenceRangeRegistry, default_registry

__all__ = [
    "ClassificationResult",
    "ClassifiedParameter",
    "Classifier",
    "ExtractedParameter",
    "ReferenceRangeDefinition",
    "ReferenceRangeRegistry",
    "classify",
    "default_registry",
]
