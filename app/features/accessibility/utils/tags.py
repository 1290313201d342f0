from typing import Iterable, List, Optional

from app.features.accessibility.constants import HARDCODED_OPPORTUNITY_TAGS, PRESERVED_TAGS


def merge_tags_with_hardcoded_tags(opportunity_type: str, current_tags: Optional[Iterable[str]]) -> List[str]:
    """
    Rewrite an opportunity's tags for its type.

    Types with hardcoded tags get exactly those, followed by any marker tags
    (isElmo, isASO) the opportunity already carried. Other types keep their tags.
    """
    current = list(current_tags or [])
    hardcoded = list(HARDCODED_OPPORTUNITY_TAGS.get(opportunity_type, ()))
    if not hardcoded:
        return current

    merged = hardcoded
    for tag in PRESERVED_TAGS:
        if tag in current and tag not in merged:
            merged.append(tag)
    return merged
