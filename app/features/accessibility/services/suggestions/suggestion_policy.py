"""
Suggestion policy

Pure functions handed to sync_suggestions: how a candidate group is keyed, how a new
one becomes a suggestion, and how incoming data is merged over stored data.
"""
from typing import Any, Callable, Dict

from app.features.accessibility.constants import SUGGESTION_TYPE_CODE_CHANGE
from app.features.accessibility.ports import OpportunityRecord


def build_key(candidate_group: Dict[str, Any]) -> str:
    """
    Identity of a candidate group across runs: url|issueType|targetSelector[|source].

    Only the first issue (and its first HTML element) is used. A group without issues
    is keyed by its url alone; a missing selector leaves an empty trailing segment.
    """
    parts = [str(candidate_group.get("url") or "")]

    issues = candidate_group.get("issues") or []
    if issues:
        issue = issues[0] or {}
        html_with_issues = issue.get("htmlWithIssues") or []
        first_html = html_with_issues[0] if html_with_issues else {}
        selector = first_html.get("target_selector") or first_html.get("targetSelector") or ""
        parts.extend([str(issue.get("type") or ""), str(selector)])

    source = candidate_group.get("source")
    if source:
        parts.append(str(source))

    return "|".join(parts)


def make_new_suggestion_mapper(opportunity: OpportunityRecord) -> Callable[[Dict[str, Any]], Dict[str, Any]]:
    def map_new_suggestion(candidate_group: Dict[str, Any]) -> Dict[str, Any]:
        issues = candidate_group.get("issues") or []
        return {
            "opportunityId": opportunity.id,
            "type": SUGGESTION_TYPE_CODE_CHANGE,
            "rank": sum(issue.get("occurrences") or 0 for issue in issues),
            "data": {**candidate_group, "jiraLink": ""},
        }

    return map_new_suggestion


def merge_data_function(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    """
    Shallow merge where incoming fields win. Keys only the stored data has (isEdited,
    a filled-in jiraLink) are kept, and a human-edited recommendedAction survives re-runs.
    """
    merged = {**existing, **incoming}
    if existing.get("isEdited") is True and "recommendedAction" in existing:
        merged["recommendedAction"] = existing["recommendedAction"]
    return merged


def keep_latest_merge_data_function(existing: Dict[str, Any], incoming: Dict[str, Any]) -> Dict[str, Any]:
    return dict(incoming)
