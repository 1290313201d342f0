"""
In-memory collaborators for the accessibility pipeline tests.

They implement the same protocols as the SQLAlchemy models, the kombu queue client
and the Redis services, and record what was done to them.
"""
import itertools
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest

from app.features.accessibility.constants import OpportunityStatus, SuggestionStatus
from app.features.accessibility.context import AuditContext, AuditSite
from app.features.accessibility.ports import AddSuggestionsResult

_ids = itertools.count(1)


class FakeSuggestion:
    def __init__(self, id=None, status=SuggestionStatus.NEW, data=None, updated_by=None, fail_save=False):
        self.id = id or f"sugg-{next(_ids)}"
        self.status = status
        self.data = data if data is not None else {}
        self.updated_by = updated_by
        self.fail_save = fail_save
        self.save_calls = 0

    async def save(self):
        self.save_calls += 1
        if self.fail_save:
            raise RuntimeError(f"save failed for {self.id}")
        return self


class FakeOpportunity:
    def __init__(
        self,
        id=None,
        site_id="site-1",
        audit_id="audit-0",
        type="a11y-assistive",
        status=OpportunityStatus.NEW,
        suggestions: Optional[List[FakeSuggestion]] = None,
        fail_save=False,
        reject_all_new=False,
        **fields: Any,
    ):
        self.id = id or f"oppty-{next(_ids)}"
        self.site_id = site_id
        self.audit_id = audit_id
        self.type = type
        self.status = status
        self.updated_by = fields.pop("updated_by", None)
        self.data = fields.pop("data", None)
        self.fields = fields
        self.suggestions = list(suggestions or [])
        self.fail_save = fail_save
        self.reject_all_new = reject_all_new
        self.save_calls = 0
        self.added: List[Dict[str, Any]] = []

    async def save(self):
        self.save_calls += 1
        if self.fail_save:
            raise RuntimeError("database unreachable")
        return self

    async def get_suggestions(self):
        return list(self.suggestions)

    async def add_suggestions(self, items):
        result = AddSuggestionsResult()
        for item in items:
            self.added.append(item)
            if self.reject_all_new:
                result.error_items.append({"item": item, "error": "ValidationError: data is invalid"})
                continue
            suggestion = FakeSuggestion(status=item["status"], data=item["data"])
            self.suggestions.append(suggestion)
            result.created_items.append(suggestion)
        return result


class FakeOpportunityRepository:
    def __init__(self, opportunities: Optional[List[FakeOpportunity]] = None, fail=False):
        self.opportunities = list(opportunities or [])
        self.fail = fail
        self.created: List[Dict[str, Any]] = []

    async def create(self, fields):
        if self.fail:
            raise RuntimeError("database unreachable")
        self.created.append(fields)
        opportunity = FakeOpportunity(**fields)
        self.opportunities.append(opportunity)
        return opportunity

    async def find_by_id(self, opportunity_id):
        return next((o for o in self.opportunities if o.id == opportunity_id), None)

    async def all_by_site_id(self, site_id):
        if self.fail:
            raise RuntimeError("database unreachable")
        return [o for o in self.opportunities if o.site_id == site_id]


class FakeSuggestionRepository:
    def __init__(self):
        self.calls = []

    async def bulk_update_status(self, suggestions, status):
        self.calls.append(([s.id for s in suggestions], status))
        for suggestion in suggestions:
            suggestion.status = status


class FakeQueue:
    def __init__(self, fail_urls=()):
        self.fail_urls = set(fail_urls)
        self.sent: List[tuple] = []

    async def send_message(self, queue_name, message):
        if message["data"]["url"] in self.fail_urls:
            raise ConnectionError(f"queue rejected {message['data']['url']}")
        self.sent.append((queue_name, message))


class FakeFlags:
    def __init__(self, *enabled):
        self.enabled = set(enabled)

    async def is_audit_enabled_for_site(self, flag_name, site):
        return flag_name in self.enabled


class FakeCodeInfo:
    def __init__(self, result=None):
        self.result = result
        self.calls = []

    async def get_code_info(self, site, domain):
        self.calls.append((site.id, domain))
        return self.result


class FakeMetrics:
    def __init__(self, fail=False):
        self.fail = fail
        self.sent: Dict[tuple, int] = {}
        self.received: Dict[tuple, int] = {}

    async def record_sent(self, opportunity_id, page_url, count=1):
        key = (opportunity_id, page_url)
        self.sent[key] = self.sent.get(key, 0) + count

    async def record_received(self, opportunity_id, page_url, received):
        if self.fail:
            raise ConnectionError("redis down")
        self.received[(opportunity_id, page_url)] = received
        return {"sent": self.sent.get((opportunity_id, page_url), 0), "received": received}


@pytest.fixture
def fakes():
    return SimpleNamespace(
        Suggestion=FakeSuggestion,
        Opportunity=FakeOpportunity,
        OpportunityRepository=FakeOpportunityRepository,
        SuggestionRepository=FakeSuggestionRepository,
        Queue=FakeQueue,
        Flags=FakeFlags,
        CodeInfo=FakeCodeInfo,
        Metrics=FakeMetrics,
    )


@pytest.fixture
def site():
    return AuditSite(id="site-1", base_url="https://x.com")


@pytest.fixture
def make_context(site):
    def _make(**overrides) -> AuditContext:
        fields = dict(
            site=site,
            audit_id="audit-1",
            opportunities=FakeOpportunityRepository(),
            suggestions=FakeSuggestionRepository(),
            feature_flags=FakeFlags("a11y-mystique-auto-suggest"),
            queue=FakeQueue(),
            code_info=FakeCodeInfo(),
            metrics=FakeMetrics(),
        )
        fields.update(overrides)
        return AuditContext(**fields)

    return _make
