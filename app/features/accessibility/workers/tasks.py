import asyncio
import logging
from typing import Any, Dict, Optional

from celery import shared_task

from app.features.accessibility.context import AuditSite, build_default_context
from app.features.accessibility.services.opportunities.individual_opportunities import (
    create_accessibility_individual_opportunities,
)
from app.features.accessibility.services.remediation.guidance_receiver import (
    handle_accessibility_remediation_guidance,
)
from app.platform.cache.redis import close_redis
from app.platform.db.session import engine

logger = logging.getLogger(__name__)


async def _release_resources(context) -> None:
    """
    Every task runs in a fresh event loop; pooled DB/Redis connections and the broker
    pool must not outlive it.
    """
    if context is not None and context.queue is not None:
        context.queue.close()
    await close_redis()
    await engine.dispose()


async def _run_opportunities(accessibility_data: Dict[str, Any], site: Dict[str, Any], audit_id: str) -> Dict[str, Any]:
    context = None
    try:
        context = build_default_context(AuditSite.from_dict(site), audit_id)
        return await create_accessibility_individual_opportunities(accessibility_data, context)
    finally:
        await _release_resources(context)


async def _run_guidance(message: Dict[str, Any]) -> Dict[str, Any]:
    context = None
    try:
        site_id: Optional[str] = message.get("siteId")
        site = AuditSite(id=site_id) if site_id else None
        context = build_default_context(site, message.get("auditId"))
        return await handle_accessibility_remediation_guidance(message, context)
    finally:
        await _release_resources(context)


@shared_task(name="app.features.accessibility.workers.tasks.run_accessibility_opportunities")
def run_accessibility_opportunities(
    accessibility_data: Dict[str, Any],
    site: Dict[str, Any],
    audit_id: str,
) -> Dict[str, Any]:
    """
    Audit batch for one site: aggregate -> opportunities -> suggestions -> remediation requests.

    Args:
        accessibility_data: raw per-URL violations ({url: {"violations": ...}})
        site: {"id", "base_url", "delivery_type", "requires_validation", "code_config"}
        audit_id: audit the opportunities are bound to
    """
    logger.info(f"Starting accessibility opportunities for site {site.get('id')}, audit {audit_id}")

    result = asyncio.run(_run_opportunities(accessibility_data, site, audit_id))

    status = result.get("status") or f"{len(result.get('opportunities', []))} opportunities"
    logger.info(f"Accessibility opportunities for site {site.get('id')} finished: {status}")
    return result


@shared_task(name="app.features.accessibility.workers.tasks.process_remediation_guidance")
def process_remediation_guidance(message: Dict[str, Any]) -> Dict[str, Any]:
    """Consume one guidance reply published by the remediation service."""
    data = message.get("data") or {}
    logger.info(f"Processing remediation guidance for opportunity {data.get('opportunityId')}")

    result = asyncio.run(_run_guidance(message))

    if not result.get("success"):
        logger.warning(f"Remediation guidance for opportunity {data.get('opportunityId')} not applied: {result.get('error')}")
    return result
