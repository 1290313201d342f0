"""
Opportunity templates

One creator per opportunity type. Each returns a fresh dict so callers may mutate it.
"""
from typing import Any, Callable, Dict

from app.features.accessibility.constants import (
    ASSISTIVE_OPPORTUNITY,
    COLOR_CONTRAST_OPPORTUNITY,
    OpportunityStatus,
)
from app.platform.exceptions import OpportunityCreatorNotFoundError

RUNBOOK_URL = "https://www.w3.org/WAI/test-evaluate/"

REPORT_DESCRIPTION = (
    "This report provides a structured overview of all detected accessibility issues "
    "across your website, organized by severity and page. Each issue includes WCAG "
    "guidelines, impact assessment, and actionable recommendations for improvement."
)


def _template(opportunity_type: str, title: str) -> Dict[str, Any]:
    return {
        "runbook": RUNBOOK_URL,
        "origin": "AUTOMATION",
        "type": opportunity_type,
        "title": title,
        "description": REPORT_DESCRIPTION,
        "tags": ["a11y"],
        "status": OpportunityStatus.NEW,
        "data": {"dataSources": ["axe-core"]},
    }


def create_accessibility_assistive_opportunity() -> Dict[str, Any]:
    return _template(ASSISTIVE_OPPORTUNITY, "Accessibility - Assistive technology is incompatible on site")


def create_accessibility_color_contrast_opportunity() -> Dict[str, Any]:
    return _template(COLOR_CONTRAST_OPPORTUNITY, "Accessibility - Color contrast is insufficient on site")


OPPORTUNITY_CREATORS: Dict[str, Callable[[], Dict[str, Any]]] = {
    ASSISTIVE_OPPORTUNITY: create_accessibility_assistive_opportunity,
    COLOR_CONTRAST_OPPORTUNITY: create_accessibility_color_contrast_opportunity,
}


def get_opportunity_creator(opportunity_type: str) -> Callable[[], Dict[str, Any]]:
    creator = OPPORTUNITY_CREATORS.get(opportunity_type)
    if creator is None:
        raise OpportunityCreatorNotFoundError(opportunity_type, sorted(OPPORTUNITY_CREATORS))
    return creator
