from app.features.accessibility.schemas.issue import (
    CandidateGroup,
    FormattedIssue,
    HtmlWithIssue,
    ViolationItem,
)
from app.features.accessibility.schemas.remediation import (
    Guidance,
    RemediationIssueItem,
    RemediationMessage,
    RemediationPayload,
)

__all__ = [
    "CandidateGroup",
    "FormattedIssue",
    "HtmlWithIssue",
    "ViolationItem",
    "Guidance",
    "RemediationIssueItem",
    "RemediationMessage",
    "RemediationPayload",
]
