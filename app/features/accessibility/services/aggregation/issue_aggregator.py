"""
Issue Aggregator

Pure transformation from raw per-URL violation trees into suggestion candidates,
bucketed by opportunity type. No I/O.
"""
import re
from typing import Any, Dict, List, Mapping, Optional, Tuple

from app.features.accessibility.constants import (
    ISSUE_TYPE_TO_OPPORTUNITY_TYPE,
    OVERALL_KEY,
    SOURCE_SEPARATOR,
    SUCCESS_CRITERIA_LINKS,
)
from app.features.accessibility.schemas.issue import (
    CandidateGroup,
    FormattedIssue,
    HtmlWithIssue,
    ViolationItem,
)

WCAG_RULE_PATTERN = re.compile(r"^wcag(\d+)$")


def _criterion(criteria: Mapping, digits: str) -> Optional[Mapping]:
    entry = criteria.get(digits)
    if entry is None and digits.isdigit():
        entry = criteria.get(int(digits))
    return entry if isinstance(entry, Mapping) else None


def format_wcag_rule(wcag_rule: Any, criteria: Mapping = SUCCESS_CRITERIA_LINKS) -> Any:
    """
    Convert "wcag412" into "4.1.2 Name, Role, Value".

    Digits are dot-separated; the criterion name is appended when the lookup has
    one. Anything that is not "wcag" followed by digits is returned unchanged.
    """
    if not isinstance(wcag_rule, str):
        return wcag_rule

    match = WCAG_RULE_PATTERN.match(wcag_rule)
    if not match:
        return wcag_rule

    digits = match.group(1)
    formatted = ".".join(digits)

    entry = _criterion(criteria, digits)
    if entry and entry.get("name"):
        return f"{formatted} {entry['name']}"
    return formatted


def format_issue(
    issue_type: str,
    issue_data: Any,
    severity: str,
    criteria: Mapping = SUCCESS_CRITERIA_LINKS,
) -> FormattedIssue:
    """
    Normalize one violation item into a FormattedIssue.

    Never raises on missing or malformed fields; each one falls back to its default.
    """
    item = issue_data if isinstance(issue_data, ViolationItem) else ViolationItem.from_raw(issue_data)

    raw_rule = item.success_criteria_tags[0] if item.success_criteria_tags else ""
    match = WCAG_RULE_PATTERN.match(raw_rule)
    entry = _criterion(criteria, match.group(1)) if match else None

    html_with_issues = [
        HtmlWithIssue(update_from=snippet, target_selector=item.selector_at(index))
        for index, snippet in enumerate(item.html_with_issues)
    ]

    return FormattedIssue(
        type=issue_type,
        description=item.description,
        wcag_rule=format_wcag_rule(raw_rule, criteria),
        wcag_level=item.level,
        severity=severity or "",
        occurrences=item.count,
        html_with_issues=html_with_issues,
        failure_summary=item.failure_summary,
        understanding_url=(entry.get("understandingUrl") or None) if entry else None,
    )


def split_url_source(url: Any) -> Tuple[Any, Optional[str]]:
    """
    Split "https://x.com?source=footer" into ("https://x.com", "footer").

    URLs without the separator (or that are not strings) come back unchanged
    with no source.
    """
    if not isinstance(url, str) or SOURCE_SEPARATOR not in url:
        return url, None

    base, source = url.split(SOURCE_SEPARATOR, 1)
    return base, source


def _split_per_snippet(item: ViolationItem) -> List[ViolationItem]:
    """One single-snippet violation per HTML snippet, target kept index-aligned."""
    return [
        item.model_copy(update={
            "html_with_issues": [snippet],
            "target": [item.selector_at(index)],
            "count": 1,
        })
        for index, snippet in enumerate(item.html_with_issues)
    ]


def aggregate_a11y_issues_by_opp_type(
    accessibility_data: Any,
    criteria: Mapping = SUCCESS_CRITERIA_LINKS,
) -> Dict[str, List[Dict[str, List[Dict[str, Any]]]]]:
    """
    Group raw per-URL violations into per-opportunity-type candidate groups.

    Input: {url: {"violations": {severity: {"items": {issue_type: item}}}}}; the
    "overall" entry is the site-wide summary and is skipped.

    Output: {"data": [{opportunity_type: [candidate_group, ...]}, ...]} where every
    candidate group holds exactly one issue with exactly one HTML element, so each
    persisted suggestion maps to one DOM element.
    """
    if not accessibility_data or not isinstance(accessibility_data, dict):
        return {"data": []}

    grouped: Dict[str, List[Dict[str, Any]]] = {}

    for raw_url, page_data in accessibility_data.items():
        if raw_url == OVERALL_KEY or not isinstance(page_data, dict):
            continue

        violations = page_data.get("violations")
        if not isinstance(violations, dict):
            continue

        url, source = split_url_source(raw_url)

        for severity, tier in violations.items():
            items = tier.get("items") if isinstance(tier, dict) else None
            if not isinstance(items, dict):
                continue

            for issue_type, raw_item in items.items():
                opportunity_type = ISSUE_TYPE_TO_OPPORTUNITY_TYPE.get(issue_type)
                if not opportunity_type:
                    continue

                item = ViolationItem.from_raw(raw_item)
                if not item.html_with_issues:
                    continue

                for single in _split_per_snippet(item):
                    group = CandidateGroup(
                        url=url,
                        source=source,
                        issues=[format_issue(issue_type, single, severity, criteria)],
                    )
                    grouped.setdefault(opportunity_type, []).append(group.to_dict())

    return {"data": [{opportunity_type: groups} for opportunity_type, groups in grouped.items()]}
