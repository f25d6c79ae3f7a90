"""Database models."""

from roboaudit.models.audit import Audit, RubricRating
from roboaudit.models.enums import Detail, Quality, Safety, Truthfulness

__all__ = ["Audit", "RubricRating", "Truthfulness", "Detail", "Safety", "Quality"]
