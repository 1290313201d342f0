"""
Remediation Schemas

Outbound request envelope for the remediation service and the guidance it sends back.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Guidance(BaseModel):
    """
    AI-proposed fix for one HTML element.

    Accepts snake_case (general_suggestion) or camelCase (generalSuggestion) input
    and always serializes camelCase.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    general_suggestion: str = Field("", alias="generalSuggestion")
    update_to: str = Field("", alias="updateTo")
    user_impact: str = Field("", alias="userImpact")

    @field_validator("general_suggestion", "update_to", "user_impact", mode="before")
    @classmethod
    def _coerce_text(cls, value):
        if value is None:
            return ""
        return value if isinstance(value, str) else str(value)

    @classmethod
    def from_remediation(cls, remediation: Dict[str, Any]) -> "Guidance":
        return cls.model_validate(remediation)

    def to_dict(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True)


class RemediationIssueItem(BaseModel):
    """One element the remediation service should propose a fix for."""
    model_config = ConfigDict(populate_by_name=True)

    issue_name: str = Field(alias="issueName")
    faulty_line: str = Field("", alias="faultyLine")
    target_selector: str = Field("", alias="targetSelector")
    issue_description: str = Field("", alias="issueDescription")
    suggestion_id: str = Field(alias="suggestionId")


class RemediationPayload(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    opportunity_id: str = Field(alias="opportunityId")
    issues_list: List[RemediationIssueItem] = Field(default_factory=list, alias="issuesList")
    code_bucket: Optional[str] = Field(None, alias="codeBucket")
    code_path: Optional[str] = Field(None, alias="codePath")


class RemediationMessage(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    type: str
    site_id: str = Field("", alias="siteId")
    audit_id: str = Field("", alias="auditId")
    delivery_type: str = Field(alias="deliveryType")
    time: str
    aggregation_key: Optional[str] = Field(None, alias="aggregationKey")
    data: RemediationPayload

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
