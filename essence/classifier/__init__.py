"""Content classification: which kind of content a resource holds and its payload."""
from essence.classifier.classifier import RULES, classify, fallback
from essence.classifier.rules import ClassificationRule

__all__ = ["RULES", "ClassificationRule", "classify", "fallback"]
