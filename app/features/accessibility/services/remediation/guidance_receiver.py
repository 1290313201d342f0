"""
Remediation Guidance Receiver

Merges the remediation service's reply for one page into the stored suggestions.

Message shape:
    {
        "auditId": "...",
        "siteId": "...",
        "data": {
            "opportunityId": "...",
            "pageUrl": "https://...",
            "remediations": [
                {"suggestionId": "...", "issueName": "aria-hidden-focus",
                 "targetSelector": "div.a", "general_suggestion": "...",
                 "update_to": "...", "user_impact": "..."},
            ],
            "totalIssues": 1,
        },
    }

Each matched HTML element ends up with a camelCase `guidance` object:
    htmlWithIssues: [{"update_from": ..., "target_selector": ..., "guidance": {
        "generalSuggestion": ..., "updateTo": ..., "userImpact": ...}}]
"""
from typing import Any, Dict, List, Optional

from app.features.accessibility.constants import SYSTEM_USER
from app.features.accessibility.context import AuditContext
from app.features.accessibility.models.store import save_with_retry
from app.features.accessibility.ports import SuggestionRecord
from app.features.accessibility.schemas.remediation import Guidance
from app.platform.logger import get_logger
from app.platform.utils.settle import settle_all

logger = get_logger(__name__)


def _field(remediation: Dict[str, Any], camel: str, snake: str) -> Any:
    value = remediation.get(camel)
    return value if value not in (None, "") else remediation.get(snake)


def _suggestion_id(remediation: Any) -> Optional[str]:
    if not isinstance(remediation, dict):
        return None
    value = _field(remediation, "suggestionId", "suggestion_id")
    return str(value) if value not in (None, "") else None


def _pick_issue(issues: List[Dict[str, Any]], remediation: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """First issue of the remediation's type, preferring one holding its target selector."""
    issue_name = _field(remediation, "issueName", "issue_name")
    candidates = [issue for issue in issues if isinstance(issue, dict) and issue.get("type") == issue_name]
    if not candidates:
        return None

    selector = _field(remediation, "targetSelector", "target_selector")
    if selector:
        for issue in candidates:
            if any(
                isinstance(entry, dict) and entry.get("target_selector") == selector
                for entry in issue.get("htmlWithIssues") or []
            ):
                return issue
    return candidates[0]


def apply_guidance(suggestion_data: Dict[str, Any], remediations: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Return a copy of the suggestion data with guidance attached.

    Issues without htmlWithIssues are left as they are.
    """
    issues = [dict(issue) if isinstance(issue, dict) else issue for issue in suggestion_data.get("issues") or []]

    for remediation in remediations:
        issue = _pick_issue(issues, remediation)
        if issue is None or not issue.get("htmlWithIssues"):
            continue

        guidance = Guidance.from_remediation(remediation).to_dict()
        issue["htmlWithIssues"] = [
            {**entry, "guidance": dict(guidance)} if isinstance(entry, dict) else entry
            for entry in issue["htmlWithIssues"]
        ]

    return {**suggestion_data, "issues": issues}


async def _save_suggestion(suggestion: SuggestionRecord) -> str:
    await save_with_retry(suggestion)
    return suggestion.id


async def _record_metrics(context: AuditContext, opportunity_id: str, page_url: str, received: int) -> None:
    if context.metrics is None:
        return
    try:
        metrics = await context.metrics.record_received(opportunity_id, page_url, received)
        logger.info(
            f"[A11yRemediationGuidance] Validation metrics for {page_url}: "
            f"sent {metrics.get('sent')}, received {metrics.get('received')}"
        )
    except Exception as e:
        logger.warning(f"[A11yRemediationGuidance] Could not persist validation metrics for {page_url}: {e}")


async def handle_accessibility_remediation_guidance(message: Dict[str, Any], context: AuditContext) -> Dict[str, Any]:
    """
    Attach the guidance in `message` to the opportunity's suggestions.

    Expected conditions come back as result fields; only unexpected store errors turn
    into {"success": False, "error": ...}.
    """
    audit_id = message.get("auditId")
    site_id = message.get("siteId")
    data = message.get("data") or {}
    opportunity_id = data.get("opportunityId")
    page_url = data.get("pageUrl")
    remediations = data.get("remediations") or []
    total_issues = data.get("totalIssues")

    logger.info(
        f"[A11yRemediationGuidance] Received remediation guidance for opportunity {opportunity_id}, "
        f"page {page_url} ({len(remediations)} remediations)"
    )

    try:
        opportunity = await context.opportunities.find_by_id(opportunity_id)
        if not opportunity:
            logger.error(f"[A11yRemediationGuidance] Opportunity not found for ID: {opportunity_id}")
            return {"success": False, "error": "Opportunity not found"}

        if opportunity.site_id != site_id:
            logger.error(
                f"[A11yRemediationGuidance] Site ID mismatch. Expected: {site_id}, Found: {opportunity.site_id}"
            )
            return {"success": False, "error": "Site ID mismatch"}

        by_suggestion: Dict[str, List[Dict[str, Any]]] = {}
        invalid_remediations = []
        for remediation in remediations:
            suggestion_id = _suggestion_id(remediation)
            if suggestion_id is None:
                invalid_remediations.append(remediation)
            else:
                by_suggestion.setdefault(suggestion_id, []).append(remediation)

        if invalid_remediations:
            logger.warning(
                f"[A11yRemediationGuidance] {len(invalid_remediations)} remediations without a suggestion id "
                f"for page {page_url}"
            )

        suggestions = {str(suggestion.id): suggestion for suggestion in await opportunity.get_suggestions()}

        not_found_ids = [suggestion_id for suggestion_id in by_suggestion if suggestion_id not in suggestions]
        if not_found_ids:
            logger.warning(f"[A11yRemediationGuidance] Suggestions not found: {', '.join(not_found_ids)}")

        matched = []
        for suggestion_id, suggestion_remediations in by_suggestion.items():
            suggestion = suggestions.get(suggestion_id)
            if suggestion is None:
                continue
            suggestion.data = apply_guidance(suggestion.data or {}, suggestion_remediations)
            suggestion.updated_by = SYSTEM_USER
            matched.append(suggestion)

        results = await settle_all(_save_suggestion(suggestion) for suggestion in matched)

        failed_ids = []
        for suggestion, result in zip(matched, results):
            if result.rejected:
                failed_ids.append(str(suggestion.id))
                logger.error(
                    f"[A11yRemediationGuidance] Failed to save suggestion {suggestion.id}: {result.reason}"
                )

        opportunity.audit_id = audit_id
        opportunity.updated_by = SYSTEM_USER
        await save_with_retry(opportunity)

        await _record_metrics(context, opportunity.id, page_url, len(matched))

        logger.info(
            f"[A11yRemediationGuidance] Updated {len(matched) - len(failed_ids)} suggestions with remediations "
            f"for opportunity {opportunity_id}"
        )

        return {
            "success": True,
            "totalIssues": total_issues,
            "pageUrl": page_url,
            "notFoundSuggestionIds": not_found_ids,
            "invalidRemediations": invalid_remediations,
            "failedSuggestionIds": failed_ids,
        }

    except Exception as e:
        logger.error(f"[A11yRemediationGuidance] Failed to process accessibility remediation guidance: {e}")
        return {"success": False, "error": str(e)}
