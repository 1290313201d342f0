"""
Collaborator interfaces for the accessibility pipeline.

The pipeline only relies on these capabilities; the SQLAlchemy models, the kombu
queue client and the Redis-backed services are the production implementations.
"""
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Sequence, runtime_checkable


@runtime_checkable
class SuggestionRecord(Protocol):
    id: Optional[str]
    status: Any
    data: Dict[str, Any]
    updated_by: Optional[str]

    async def save(self) -> "SuggestionRecord": ...


@dataclass
class AddSuggestionsResult:
    created_items: List[SuggestionRecord] = field(default_factory=list)
    error_items: List[Dict[str, Any]] = field(default_factory=list)


@runtime_checkable
class OpportunityRecord(Protocol):
    id: Optional[str]
    site_id: str
    audit_id: Optional[str]
    type: str
    status: Any
    updated_by: Optional[str]
    data: Optional[Dict[str, Any]]

    async def save(self) -> "OpportunityRecord": ...

    async def get_suggestions(self) -> List[SuggestionRecord]: ...

    async def add_suggestions(self, items: Sequence[Dict[str, Any]]) -> AddSuggestionsResult: ...


class OpportunityRepository(Protocol):
    async def create(self, fields: Dict[str, Any]) -> OpportunityRecord: ...

    async def find_by_id(self, opportunity_id: str) -> Optional[OpportunityRecord]: ...

    async def all_by_site_id(self, site_id: str) -> List[OpportunityRecord]: ...


class SuggestionRepository(Protocol):
    async def bulk_update_status(self, suggestions: Sequence[SuggestionRecord], status: Any) -> None: ...


class QueueClient(Protocol):
    async def send_message(self, queue_name: str, message: Dict[str, Any]) -> None: ...


class CodeInfoProvider(Protocol):
    async def get_code_info(self, site: Any, domain: str) -> Optional[Dict[str, Any]]: ...


class FeatureFlags(Protocol):
    async def is_audit_enabled_for_site(self, flag_name: str, site: Any) -> bool: ...


class RemediationMetrics(Protocol):
    async def record_sent(self, opportunity_id: str, page_url: str, count: int = 1) -> None: ...

    async def record_received(self, opportunity_id: str, page_url: str, received: int) -> Dict[str, int]: ...
