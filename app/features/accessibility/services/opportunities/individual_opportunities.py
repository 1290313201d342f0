"""
Individual accessibility opportunities

Entry point of an audit batch: aggregate raw violations, reconcile one opportunity per
opportunity type, sync its suggestions and request remediation for them.
"""
import asyncio
from typing import Any, Dict, List

from app.features.accessibility.constants import BatchStatus
from app.features.accessibility.context import AuditContext
from app.features.accessibility.services.aggregation.issue_aggregator import aggregate_a11y_issues_by_opp_type
from app.features.accessibility.services.opportunities.opportunity_reconciler import find_or_create_opportunity
from app.features.accessibility.services.opportunities.opportunity_templates import get_opportunity_creator
from app.features.accessibility.services.suggestions.suggestion_sync import create_individual_opportunity_suggestions
from app.platform.logger import get_logger

logger = get_logger(__name__)


def calculate_accessibility_metrics(aggregated_data: Dict[str, Any]) -> Dict[str, int]:
    """Totals over a list of candidate groups: {"data": [candidate_group, ...]}."""
    groups = aggregated_data.get("data") or []
    total_issues = sum(
        issue.get("occurrences") or 0
        for group in groups
        for issue in group.get("issues") or []
    )
    return {
        "totalIssues": total_issues,
        "totalSuggestions": len(groups),
        "pagesWithIssues": len({group.get("url") for group in groups}),
    }


async def _process_opportunity_type(
    opportunity_type: str,
    candidate_groups: List[Dict[str, Any]],
    context: AuditContext,
) -> Dict[str, Any]:
    logger.debug(f"[A11yIndividual] Creating opportunity for type: {opportunity_type}")

    try:
        creator = get_opportunity_creator(opportunity_type)
    except Exception as e:
        logger.error(f"[A11yProcessingError] {e}")
        raise

    resolution = await find_or_create_opportunity(creator(), context.audit_data(), context)
    opportunity = resolution.opportunity

    type_data = {"data": candidate_groups}
    await create_individual_opportunity_suggestions(opportunity, type_data, context)

    metrics = calculate_accessibility_metrics(type_data)
    status = BatchStatus.OPPORTUNITY_CREATED if resolution.is_new else BatchStatus.OPPORTUNITY_UPDATED
    verb = "Created" if resolution.is_new else "Updated"

    logger.info(
        f"[A11yIndividual] {verb} opportunity for {opportunity_type} with {metrics['totalSuggestions']} "
        f"suggestions ({metrics['totalIssues']} issues) across {metrics['pagesWithIssues']} pages"
    )

    return {
        "status": status.value,
        "opportunityType": opportunity_type,
        "opportunityId": opportunity.id,
        "suggestionsCount": metrics["totalSuggestions"],
        "totalIssues": metrics["totalIssues"],
        "pagesWithIssues": metrics["pagesWithIssues"],
        "summary": (
            f"{verb} {opportunity_type} opportunity with {metrics['totalSuggestions']} suggestions "
            f"across {metrics['pagesWithIssues']} pages"
        ),
    }


async def create_accessibility_individual_opportunities(
    accessibility_data: Dict[str, Any],
    context: AuditContext,
) -> Dict[str, Any]:
    """
    Run one audit batch for context.site.

    Returns {"opportunities": [...], "data": [...]} on success,
    {"status": "NO_OPPORTUNITIES", ...} when nothing maps to an opportunity type, and
    {"status": "OPPORTUNITIES_FAILED", "error": ...} when any type fails.
    """
    base_url = context.site.base_url if context.site else ""
    logger.info(f"[A11yIndividual] Creating accessibility opportunities for {base_url}")

    aggregated = aggregate_a11y_issues_by_opp_type(accessibility_data)
    if not aggregated["data"]:
        logger.info(f"[A11yIndividual] No individual accessibility opportunities found for {base_url}")
        return {
            "status": BatchStatus.NO_OPPORTUNITIES.value,
            "message": "No accessibility issues found in tracked categories",
            "data": [],
        }

    try:
        results = await asyncio.gather(*(
            _process_opportunity_type(opportunity_type, candidate_groups, context)
            for bucket in aggregated["data"]
            for opportunity_type, candidate_groups in bucket.items()
        ))
    except Exception as e:
        logger.error(f"[A11yProcessingError] Error creating accessibility opportunities: {e}")
        return {"status": BatchStatus.OPPORTUNITIES_FAILED.value, "error": str(e)}

    logger.info(f"[A11yIndividual] Processed {len(results)} individual accessibility opportunities")
    return {"opportunities": list(results), "data": aggregated["data"]}
