from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from app.features.accessibility.ports import (
    CodeInfoProvider,
    FeatureFlags,
    OpportunityRepository,
    QueueClient,
    RemediationMetrics,
    SuggestionRepository,
)
from app.platform.config import Settings, settings as default_settings


@dataclass
class AuditSite:
    """The audited site as the pipeline needs it."""
    id: str
    base_url: str = ""
    delivery_type: Optional[str] = None
    requires_validation: bool = False
    # Repository coordinates used to locate code snapshots (owner, repo, ref)
    code_config: Optional[Dict[str, Any]] = None

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "AuditSite":
        return cls(
            id=payload["id"],
            base_url=payload.get("base_url") or payload.get("baseURL") or "",
            delivery_type=payload.get("delivery_type") or payload.get("deliveryType"),
            requires_validation=bool(payload.get("requires_validation", False)),
            code_config=payload.get("code_config"),
        )


@dataclass(frozen=True)
class AuditData:
    site_id: str
    audit_id: str


@dataclass
class AuditContext:
    """Everything one audit batch (or one guidance reply) needs."""
    site: Optional[AuditSite]
    audit_id: Optional[str]
    opportunities: OpportunityRepository
    suggestions: SuggestionRepository
    feature_flags: FeatureFlags
    queue: Optional[QueueClient] = None
    code_info: Optional[CodeInfoProvider] = None
    metrics: Optional[RemediationMetrics] = None
    settings: Settings = field(default_factory=lambda: default_settings)

    @property
    def delivery_type(self) -> str:
        if self.site and self.site.delivery_type:
            return self.site.delivery_type
        return self.settings.DEFAULT_DELIVERY_TYPE

    def audit_data(self) -> AuditData:
        return AuditData(site_id=self.site.id, audit_id=self.audit_id or "")


def build_default_context(site: Optional[AuditSite], audit_id: Optional[str]) -> AuditContext:
    """Wire the production adapters: SQL store, kombu queue, Redis flags and metrics."""
    from app.features.accessibility.models.store import SqlOpportunityRepository, SqlSuggestionRepository
    from app.features.accessibility.services.remediation.metrics import RedisRemediationMetrics
    from app.features.accessibility.utils.code_info import SettingsCodeInfoProvider
    from app.features.accessibility.utils.feature_flags import RedisFeatureFlags
    from app.platform.messaging.queue_client import KombuQueueClient

    return AuditContext(
        site=site,
        audit_id=audit_id,
        opportunities=SqlOpportunityRepository(),
        suggestions=SqlSuggestionRepository(),
        feature_flags=RedisFeatureFlags(),
        queue=KombuQueueClient(),
        code_info=SettingsCodeInfoProvider(),
        metrics=RedisRemediationMetrics(),
    )
