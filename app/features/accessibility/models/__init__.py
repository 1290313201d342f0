"""
Accessibility store models.
"""
from app.features.accessibility.models.opportunity import Opportunity
from app.features.accessibility.models.suggestion import Suggestion

__all__ = ["Opportunity", "Suggestion"]
