import logging

import pytest

from app.features.accessibility.constants import OpportunityStatus
from app.features.accessibility.context import AuditData
from app.features.accessibility.services.opportunities.opportunity_reconciler import find_or_create_opportunity
from app.features.accessibility.services.opportunities.opportunity_templates import (
    create_accessibility_assistive_opportunity,
    create_accessibility_color_contrast_opportunity,
    get_opportunity_creator,
)
from app.features.accessibility.utils.tags import merge_tags_with_hardcoded_tags
from app.platform.exceptions import OpportunityCreatorNotFoundError

AUDIT = AuditData(site_id="site-1", audit_id="audit-2")


class TestFindOrCreateOpportunity:
    """Reuse of active opportunities, creation otherwise"""

    @pytest.mark.asyncio
    async def test_creates_when_none_exists(self, make_context):
        context = make_context()

        resolution = await find_or_create_opportunity(create_accessibility_assistive_opportunity(), AUDIT, context)

        assert resolution.is_new is True
        created = context.opportunities.created[0]
        assert created["type"] == "a11y-assistive"
        assert created["site_id"] == "site-1"
        assert created["audit_id"] == "audit-2"
        assert created["origin"] == "AUTOMATION"
        assert created["status"] == OpportunityStatus.NEW
        assert created["data"] == {"dataSources": ["axe-core"]}
        assert created["tags"] == ["ARIA Labels", "Accessibility"]

    @pytest.mark.asyncio
    async def test_reuses_first_active_opportunity_of_the_type(self, fakes, make_context):
        resolved = fakes.Opportunity(id="resolved", status=OpportunityStatus.RESOLVED)
        other_type = fakes.Opportunity(id="contrast", type="a11y-color-contrast")
        first = fakes.Opportunity(id="first", status=OpportunityStatus.IN_PROGRESS)
        second = fakes.Opportunity(id="second")
        context = make_context(opportunities=fakes.OpportunityRepository([resolved, other_type, first, second]))

        resolution = await find_or_create_opportunity(create_accessibility_assistive_opportunity(), AUDIT, context)

        assert resolution.is_new is False
        assert resolution.opportunity is first
        assert first.audit_id == "audit-2"
        assert first.updated_by == "system"
        assert first.save_calls == 1
        assert second.save_calls == 0
        assert context.opportunities.created == []

    @pytest.mark.asyncio
    @pytest.mark.parametrize("status", [OpportunityStatus.RESOLVED, OpportunityStatus.IGNORED])
    async def test_terminal_opportunities_are_never_reused(self, fakes, make_context, status):
        old = fakes.Opportunity(status=status)
        context = make_context(opportunities=fakes.OpportunityRepository([old]))

        resolution = await find_or_create_opportunity(create_accessibility_assistive_opportunity(), AUDIT, context)

        assert resolution.is_new is True
        assert resolution.opportunity is not old
        assert old.save_calls == 0

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, fakes, make_context, caplog):
        context = make_context(opportunities=fakes.OpportunityRepository(fail=True))

        with caplog.at_level(logging.ERROR):
            with pytest.raises(RuntimeError, match="database unreachable"):
                await find_or_create_opportunity(create_accessibility_assistive_opportunity(), AUDIT, context)

        assert "[A11yProcessingError]" in caplog.text

    @pytest.mark.asyncio
    async def test_save_failure_on_reuse_propagates(self, fakes, make_context):
        existing = fakes.Opportunity(fail_save=True)
        context = make_context(opportunities=fakes.OpportunityRepository([existing]))

        with pytest.raises(RuntimeError):
            await find_or_create_opportunity(create_accessibility_assistive_opportunity(), AUDIT, context)


class TestOpportunityTemplates:

    def test_templates_are_fresh_copies(self):
        first = create_accessibility_color_contrast_opportunity()
        first["tags"].append("changed")

        second = create_accessibility_color_contrast_opportunity()

        assert second["type"] == "a11y-color-contrast"
        assert second["tags"] == ["a11y"]

    def test_unknown_type_has_no_creator(self):
        with pytest.raises(OpportunityCreatorNotFoundError, match="No opportunity creator found for type: a11y-forms"):
            get_opportunity_creator("a11y-forms")


class TestMergeTags:

    def test_hardcoded_tags_replace_current(self):
        assert merge_tags_with_hardcoded_tags("a11y-color-contrast", ["a11y", "old"]) == [
            "Color Contrast", "Accessibility", "Engagement",
        ]

    def test_marker_tags_are_kept(self):
        assert merge_tags_with_hardcoded_tags("a11y-assistive", ["isElmo", "old", "isASO"]) == [
            "ARIA Labels", "Accessibility", "isElmo", "isASO",
        ]

    @pytest.mark.parametrize("current", [None, []])
    def test_empty_current_tags(self, current):
        assert merge_tags_with_hardcoded_tags("a11y-assistive", current) == ["ARIA Labels", "Accessibility"]

    def test_unknown_type_keeps_current_tags(self):
        assert merge_tags_with_hardcoded_tags("generic-opportunity", ["Custom"]) == ["Custom"]
