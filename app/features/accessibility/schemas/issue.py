"""
Issue Schemas

Records flowing from raw audit output into suggestion candidates. Every record
applies its defaults once at construction, so nothing downstream needs inline
fallbacks. Serialized with the camelCase keys the store and the remediation
service expect.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.features.accessibility.constants import CANDIDATE_GROUP_TYPE


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _snippet(item: Any) -> str:
    if isinstance(item, str):
        return item
    if isinstance(item, dict):
        return _text(item.get("update_from") or item.get("updateFrom"))
    return ""


class ViolationItem(BaseModel):
    """One rule violation on one page, as produced by the scraper."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    description: str = ""
    success_criteria_tags: List[str] = Field(default_factory=list, alias="successCriteriaTags")
    level: str = ""
    count: int = 0
    html_with_issues: List[str] = Field(default_factory=list, alias="htmlWithIssues")
    target: List[str] = Field(default_factory=list)
    failure_summary: str = Field("", alias="failureSummary")

    @field_validator("description", "level", "failure_summary", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        return _text(value)

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, value):
        if isinstance(value, bool) or not isinstance(value, (int, float)) or value != value:
            return 0
        return int(value)

    @field_validator("success_criteria_tags", mode="before")
    @classmethod
    def _coerce_tags(cls, value):
        if not isinstance(value, (list, tuple)):
            return []
        return [tag if isinstance(tag, str) else "" for tag in value]

    @field_validator("html_with_issues", mode="before")
    @classmethod
    def _coerce_snippets(cls, value):
        if not isinstance(value, (list, tuple)):
            return []
        return [_snippet(item) for item in value]

    @field_validator("target", mode="before")
    @classmethod
    def _coerce_target(cls, value):
        if isinstance(value, str):
            return [value]
        if not isinstance(value, (list, tuple)):
            return []
        return [_text(selector) for selector in value]

    @classmethod
    def from_raw(cls, raw: Any) -> "ViolationItem":
        if not isinstance(raw, dict):
            return cls()
        return cls.model_validate(raw)

    def selector_at(self, index: int) -> str:
        return self.target[index] if index < len(self.target) else ""


class HtmlWithIssue(BaseModel):
    update_from: str = ""
    target_selector: str = ""


class FormattedIssue(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    description: str = ""
    wcag_rule: Optional[str] = Field("", alias="wcagRule")
    wcag_level: str = Field("", alias="wcagLevel")
    severity: str = ""
    occurrences: int = 0
    html_with_issues: List[HtmlWithIssue] = Field(default_factory=list, alias="htmlWithIssues")
    failure_summary: str = Field("", alias="failureSummary")
    understanding_url: Optional[str] = Field(None, alias="understandingUrl")

    def to_dict(self) -> Dict[str, Any]:
        data = self.model_dump(by_alias=True, exclude={"understanding_url"})
        if self.understanding_url:
            data["understandingUrl"] = self.understanding_url
        return data


class CandidateGroup(BaseModel):
    """Issues for one page, not yet persisted."""
    type: str = CANDIDATE_GROUP_TYPE
    url: Any
    source: Optional[str] = None
    issues: List[FormattedIssue] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = {"type": self.type, "url": self.url}
        if self.source is not None:
            data["source"] = self.source
        data["issues"] = [issue.to_dict() for issue in self.issues]
        return data
