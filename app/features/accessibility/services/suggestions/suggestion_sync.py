"""
Suggestion Synchronizer

Diffs freshly aggregated candidate groups against an opportunity's stored
suggestions: stale ones are marked outdated, known ones are merged and saved,
unknown ones are inserted.
"""
import asyncio
from typing import Any, Callable, Dict, List, Sequence

from app.features.accessibility.constants import (
    SYNC_PROTECTED_STATUSES,
    SYSTEM_USER,
    SuggestionStatus,
)
from app.features.accessibility.context import AuditContext
from app.features.accessibility.ports import OpportunityRecord
from app.features.accessibility.services.remediation.dispatcher import send_remediation_requests
from app.features.accessibility.services.suggestions.suggestion_policy import (
    build_key as default_build_key,
    make_new_suggestion_mapper,
    merge_data_function as default_merge_data_function,
)
from app.platform.exceptions import SuggestionSyncError
from app.platform.logger import get_logger

logger = get_logger(__name__)

MAX_LOGGED_ERRORS = 5


def _initial_status(context: AuditContext) -> SuggestionStatus:
    requires_validation = bool(context.site and context.site.requires_validation)
    return SuggestionStatus.PENDING_VALIDATION if requires_validation else SuggestionStatus.NEW


async def sync_suggestions(
    opportunity: OpportunityRecord,
    new_data: Sequence[Dict[str, Any]],
    context: AuditContext,
    build_key: Callable[[Dict[str, Any]], str],
    map_new_suggestion: Callable[[Dict[str, Any]], Dict[str, Any]],
    merge_data_function: Callable[[Dict[str, Any], Dict[str, Any]], Dict[str, Any]] = default_merge_data_function,
    status_to_set_for_outdated: SuggestionStatus = SuggestionStatus.OUTDATED,
) -> None:
    """
    Reconcile `new_data` with the opportunity's suggestions, matched by `build_key`.

    Raises SuggestionSyncError when every new suggestion fails to persist; store
    errors from the outdated update or the merged saves propagate as-is.
    """
    incoming_by_key: Dict[str, Dict[str, Any]] = {}
    for item in new_data:
        incoming_by_key.setdefault(build_key(item), item)

    existing_suggestions = await opportunity.get_suggestions()
    existing_keys = {build_key(suggestion.data or {}) for suggestion in existing_suggestions}

    outdated = [
        suggestion for suggestion in existing_suggestions
        if build_key(suggestion.data or {}) not in incoming_by_key
        and suggestion.status not in SYNC_PROTECTED_STATUSES
    ]
    if outdated:
        status_name = getattr(status_to_set_for_outdated, "value", status_to_set_for_outdated)
        logger.info(
            f"[SuggestionSync] Marking {len(outdated)} suggestions as {status_name} "
            f"for opportunity {opportunity.id}"
        )
        await context.suggestions.bulk_update_status(outdated, status_to_set_for_outdated)

    to_update = []
    for suggestion in existing_suggestions:
        incoming = incoming_by_key.get(build_key(suggestion.data or {}))
        if incoming is None:
            continue

        suggestion.data = merge_data_function(suggestion.data or {}, incoming)
        if suggestion.status == SuggestionStatus.OUTDATED:
            logger.warning(
                f"[SuggestionSync] Resolved suggestion {suggestion.id} found in audit. Possible regression."
            )
            suggestion.status = _initial_status(context)
        suggestion.updated_by = SYSTEM_USER
        to_update.append(suggestion)

    if to_update:
        await asyncio.gather(*(suggestion.save() for suggestion in to_update))
        logger.debug(f"[SuggestionSync] Updated {len(to_update)} existing suggestions for opportunity {opportunity.id}")

    status = _initial_status(context)
    new_suggestions: List[Dict[str, Any]] = [
        {**map_new_suggestion(item), "status": status}
        for key, item in incoming_by_key.items()
        if key not in existing_keys
    ]
    if not new_suggestions:
        return

    site_id = getattr(opportunity, "site_id", None) or "unknown"
    logger.info(f"[SuggestionSync] Adding {len(new_suggestions)} new suggestions for siteId {site_id}")

    result = await opportunity.add_suggestions(new_suggestions)
    if not result.error_items:
        logger.debug(f"[SuggestionSync] Created {len(result.created_items)} suggestions for siteId {site_id}")
        return

    logger.error(
        f"[SuggestionSync] Suggestions for siteId {site_id} contains {len(result.error_items)} "
        f"items with errors out of {len(new_suggestions)} total"
    )
    for index, error_item in enumerate(result.error_items[:MAX_LOGGED_ERRORS]):
        logger.error(f"[SuggestionSync] Error {index + 1}/{len(result.error_items)}: {error_item.get('error')}")
    if len(result.error_items) > MAX_LOGGED_ERRORS:
        logger.error(f"[SuggestionSync] ... and {len(result.error_items) - MAX_LOGGED_ERRORS} more errors")

    if not result.created_items:
        sample_error = result.error_items[0].get("error") or "Unknown error"
        raise SuggestionSyncError(f"Failed to create suggestions for siteId {site_id}. Sample error: {sample_error}")

    logger.warning(
        f"[SuggestionSync] Partial success: Created {len(result.created_items)} suggestions, "
        f"{len(result.error_items)} failed"
    )


async def create_individual_opportunity_suggestions(
    opportunity: OpportunityRecord,
    aggregated_data: Dict[str, Any],
    context: AuditContext,
) -> Dict[str, Any]:
    """Sync one opportunity type's candidate groups, then request remediation for them."""
    candidate_groups = aggregated_data.get("data") or []
    logger.debug(f"[A11yIndividual] Creating {len(candidate_groups)} suggestions for opportunity {opportunity.id}")

    try:
        await sync_suggestions(
            opportunity=opportunity,
            new_data=candidate_groups,
            context=context,
            build_key=default_build_key,
            map_new_suggestion=make_new_suggestion_mapper(opportunity),
            merge_data_function=default_merge_data_function,
        )
    except Exception as e:
        logger.error(f"[A11yProcessingError] Failed to create suggestions for opportunity {opportunity.id}: {e}")
        raise

    return await send_remediation_requests(opportunity, context)
