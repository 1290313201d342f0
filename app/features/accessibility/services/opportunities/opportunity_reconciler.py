"""
Opportunity Reconciler

Finds the site's active opportunity of a given type or creates one from a template.
"""
from dataclasses import dataclass
from typing import Any, Dict

from app.features.accessibility.constants import ACTIVE_OPPORTUNITY_STATUSES, SYSTEM_USER
from app.features.accessibility.context import AuditContext, AuditData
from app.features.accessibility.ports import OpportunityRecord
from app.features.accessibility.utils.tags import merge_tags_with_hardcoded_tags
from app.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass
class OpportunityResolution:
    opportunity: OpportunityRecord
    is_new: bool


async def find_or_create_opportunity(
    opportunity_instance: Dict[str, Any],
    audit_data: AuditData,
    context: AuditContext,
) -> OpportunityResolution:
    """
    Reuse the first NEW or IN_PROGRESS opportunity of the template's type, rebinding
    it to the current audit, or create a new one.

    RESOLVED and IGNORED opportunities are never reused. Store errors propagate.
    """
    opportunity_type = opportunity_instance["type"]

    try:
        opportunities = await context.opportunities.all_by_site_id(audit_data.site_id)
        existing = next(
            (
                opportunity for opportunity in opportunities
                if opportunity.type == opportunity_type and opportunity.status in ACTIVE_OPPORTUNITY_STATUSES
            ),
            None,
        )

        if existing is not None:
            existing.audit_id = audit_data.audit_id
            existing.updated_by = SYSTEM_USER
            await existing.save()
            logger.info(
                f"[A11yIndividual] Reusing {opportunity_type} opportunity {existing.id} "
                f"for site {audit_data.site_id}, audit {audit_data.audit_id}"
            )
            return OpportunityResolution(opportunity=existing, is_new=False)

        opportunity = await context.opportunities.create({
            "site_id": audit_data.site_id,
            "audit_id": audit_data.audit_id,
            "runbook": opportunity_instance.get("runbook"),
            "type": opportunity_type,
            "origin": opportunity_instance.get("origin"),
            "title": opportunity_instance.get("title"),
            "description": opportunity_instance.get("description"),
            "tags": merge_tags_with_hardcoded_tags(opportunity_type, opportunity_instance.get("tags")),
            "status": opportunity_instance.get("status"),
            "data": opportunity_instance.get("data"),
            "updated_by": SYSTEM_USER,
        })
        logger.info(
            f"[A11yIndividual] Created {opportunity_type} opportunity {opportunity.id} "
            f"for site {audit_data.site_id}, audit {audit_data.audit_id}"
        )
        return OpportunityResolution(opportunity=opportunity, is_new=True)

    except Exception as e:
        logger.error(
            f"[A11yProcessingError] Failed to create/update {opportunity_type} opportunity "
            f"for site {audit_data.site_id}, audit {audit_data.audit_id}: {e}"
        )
        raise
