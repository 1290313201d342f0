"""
Remediation Dispatcher

Turns an opportunity's stored suggestions into one remediation request per page and
publishes them to the remediation service's queue.

Two flows exist per page:
- code-fix: every issue type on the page can be patched in source and the site has
  the auto-fix flag; the message carries the code snapshot location.
- legacy: everything else; the message carries only the issues.
"""
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from app.features.accessibility.constants import (
    ACCESSIBILITY_DOMAIN,
    AUTO_FIX_FLAG,
    AUTO_SUGGEST_FLAG,
    CODE_FIX_ISSUE_TYPES,
    ISSUE_TYPES_FOR_REMEDIATION,
    REMEDIATION_MESSAGE_TYPE,
    REMEDIATION_SKIPPED_STATUSES,
)
from app.features.accessibility.context import AuditContext
from app.features.accessibility.ports import OpportunityRecord, SuggestionRecord
from app.features.accessibility.schemas.remediation import (
    RemediationIssueItem,
    RemediationMessage,
    RemediationPayload,
)
from app.platform.logger import get_logger
from app.platform.utils.settle import settle_all

logger = get_logger(__name__)


@dataclass
class _PendingIssue:
    item: RemediationIssueItem
    has_guidance: bool
    code_change_available: bool


@dataclass
class RemediationBatch:
    """Everything sent to the remediation service for one page."""
    url: str
    source: Optional[str] = None
    code_fix: bool = False
    issues_list: List[RemediationIssueItem] = field(default_factory=list)

    @property
    def aggregation_key(self) -> str:
        return f"{self.url}|{self.source}" if self.source else self.url


def _has_guidance(html_entry: Dict[str, Any]) -> bool:
    return bool(html_entry.get("guidance"))


def build_remediation_batches(
    suggestions: Sequence[SuggestionRecord],
    auto_fix_enabled: bool,
) -> List[RemediationBatch]:
    """
    Group the suggestions' HTML elements into one batch per page (url + source).

    FIXED, SKIPPED and OUTDATED suggestions and issue types the remediation service
    does not handle are left out. Pages that end up empty are dropped.
    """
    pending: Dict[tuple, List[_PendingIssue]] = {}

    for suggestion in suggestions or []:
        if suggestion.status in REMEDIATION_SKIPPED_STATUSES:
            continue

        data = suggestion.data or {}
        issues = data.get("issues")
        if not data.get("url") or not isinstance(issues, list):
            continue

        page = (data["url"], data.get("source"))
        code_change_available = bool(data.get("isCodeChangeAvailable"))

        for issue in issues:
            if not isinstance(issue, dict) or issue.get("type") not in ISSUE_TYPES_FOR_REMEDIATION:
                continue

            for html_entry in issue.get("htmlWithIssues") or []:
                if not isinstance(html_entry, dict):
                    continue
                pending.setdefault(page, []).append(_PendingIssue(
                    item=RemediationIssueItem(
                        issue_name=issue["type"],
                        faulty_line=html_entry.get("update_from") or "",
                        target_selector=html_entry.get("target_selector") or "",
                        issue_description=issue.get("description") or "",
                        suggestion_id=str(suggestion.id),
                    ),
                    has_guidance=_has_guidance(html_entry),
                    code_change_available=code_change_available,
                ))

    batches = []
    for (url, source), entries in pending.items():
        code_fix = auto_fix_enabled and all(entry.item.issue_name in CODE_FIX_ISSUE_TYPES for entry in entries)

        if code_fix:
            to_send = [entry for entry in entries if not (entry.has_guidance and entry.code_change_available)]
        else:
            to_send = [entry for entry in entries if not entry.has_guidance]

        if to_send:
            batches.append(RemediationBatch(
                url=url,
                source=source,
                code_fix=code_fix,
                issues_list=[entry.item for entry in to_send],
            ))

    return batches


def create_remediation_message(
    batch: RemediationBatch,
    opportunity_id: str,
    site_id: str,
    audit_id: str,
    delivery_type: str,
    code_info: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    """
    Build the outbound envelope for one page.

    The code snapshot location is attached only to code-fix batches and only when
    both codeBucket and codePath are non-empty.
    """
    payload = RemediationPayload(
        url=batch.url,
        opportunity_id=opportunity_id,
        issues_list=batch.issues_list,
    )

    if batch.code_fix and isinstance(code_info, dict):
        code_bucket = code_info.get("codeBucket")
        code_path = code_info.get("codePath")
        if code_bucket and code_path:
            payload.code_bucket = code_bucket
            payload.code_path = code_path

    return RemediationMessage(
        type=REMEDIATION_MESSAGE_TYPE,
        site_id=site_id or "",
        audit_id=audit_id or "",
        delivery_type=delivery_type,
        time=datetime.now(timezone.utc).isoformat(),
        aggregation_key=batch.aggregation_key,
        data=payload,
    ).to_dict()


async def _load_code_info(context: AuditContext) -> Optional[Dict[str, Any]]:
    if context.code_info is None:
        return None
    try:
        return await context.code_info.get_code_info(context.site, ACCESSIBILITY_DOMAIN)
    except Exception as e:
        site_id = getattr(context.site, "id", None)
        logger.warning(f"[A11yIndividual] Code snapshot lookup failed for site {site_id}, sending without it: {e}")
        return None


async def _record_sent(context: AuditContext, opportunity_id: str, url: str) -> None:
    if context.metrics is None:
        return
    try:
        await context.metrics.record_sent(opportunity_id, url)
    except Exception as e:
        logger.warning(f"[A11yIndividual] Could not record sent metric for {url}: {e}")


async def _send_batch(
    context: AuditContext,
    queue_name: str,
    batch: RemediationBatch,
    message: Dict[str, Any],
) -> Dict[str, Any]:
    opportunity_id = message["data"]["opportunityId"]
    flow = "code-fix" if batch.code_fix else "legacy"
    try:
        await context.queue.send_message(queue_name, message)
    except Exception as e:
        logger.error(f"[A11yIndividual] Failed to send {flow} remediation request for {batch.url}: {e}")
        return {"success": False, "url": batch.url, "error": str(e)}

    logger.info(
        f"[A11yIndividual] Sent {flow} remediation request for {batch.url} "
        f"with {len(batch.issues_list)} issues"
    )
    await _record_sent(context, opportunity_id, batch.url)
    return {"success": True, "url": batch.url}


async def send_remediation_requests(opportunity: OpportunityRecord, context: AuditContext) -> Dict[str, Any]:
    """
    Publish one remediation request per page for the opportunity's suggestions.

    Sends are independent: a failed page is counted, not raised. Missing queue
    configuration is reported before anything is sent.
    """
    if not await context.feature_flags.is_audit_enabled_for_site(AUTO_SUGGEST_FLAG, context.site):
        logger.info("[A11yIndividual] Remediation suggestions are disabled for site, skipping message sending")
        return {"success": True}

    queue_name = context.settings.QUEUE_TO_REMEDIATION_SERVICE
    if context.queue is None or not queue_name:
        logger.error(
            f"[A11yProcessingError] Missing required context - queue client: {context.queue is not None}, "
            f"queue: {queue_name or 'undefined'}"
        )
        return {"success": False, "error": "Missing queue client or queue configuration"}

    refreshed = await context.opportunities.find_by_id(opportunity.id) or opportunity
    suggestions = await refreshed.get_suggestions()
    logger.debug(f"[A11yIndividual] Retrieved {len(suggestions)} suggestions from opportunity {refreshed.id}")

    auto_fix_enabled = await context.feature_flags.is_audit_enabled_for_site(AUTO_FIX_FLAG, context.site)
    batches = build_remediation_batches(suggestions, auto_fix_enabled)
    if not batches:
        logger.info("[A11yIndividual] No messages to send - no matching issue types found")
        return {"success": True, "messagesSent": 0, "messagesFailed": 0}

    code_info = await _load_code_info(context) if any(batch.code_fix for batch in batches) else None

    site_id = refreshed.site_id or (context.site.id if context.site else "")
    audit_id = refreshed.audit_id or context.audit_id or ""

    logger.info(f"[A11yIndividual] Sending {len(batches)} messages to queue: {queue_name}")
    results = await settle_all(
        _send_batch(
            context,
            queue_name,
            batch,
            create_remediation_message(
                batch,
                opportunity_id=refreshed.id,
                site_id=site_id,
                audit_id=audit_id,
                delivery_type=context.delivery_type,
                code_info=code_info,
            ),
        )
        for batch in batches
    )

    successful = sum(1 for result in results if result.fulfilled and result.value.get("success"))
    failed = sum(1 for result in results if result.fulfilled and not result.value.get("success"))
    rejected = sum(1 for result in results if result.rejected)

    logger.info(
        f"[A11yIndividual] Message sending completed: {successful} successful, "
        f"{failed} failed, {rejected} rejected"
    )

    return {"success": True, "messagesSent": successful, "messagesFailed": failed + rejected}
