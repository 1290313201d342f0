import logging

import pytest

from app.features.accessibility.services.remediation.guidance_receiver import (
    apply_guidance,
    handle_accessibility_remediation_guidance,
)


def _suggestion_data(*selectors, issue_type="aria-hidden-focus"):
    return {
        "type": "url",
        "url": "https://x.com",
        "issues": [{
            "type": issue_type,
            "htmlWithIssues": [{"update_from": f"<div class='{s}'></div>", "target_selector": s} for s in selectors],
        }],
    }


def _message(remediations, opportunity_id="oppty-1", site_id="site-1"):
    return {
        "auditId": "audit-9",
        "siteId": site_id,
        "data": {
            "opportunityId": opportunity_id,
            "pageUrl": "https://x.com",
            "remediations": remediations,
            "totalIssues": len(remediations),
        },
    }


def _remediation(suggestion_id, selector="div.a", **guidance):
    return {
        "suggestionId": suggestion_id,
        "issueName": "aria-hidden-focus",
        "targetSelector": selector,
        **(guidance or {"general_suggestion": "Remove tabindex", "update_to": "<div></div>", "user_impact": "High"}),
    }


class TestApplyGuidance:

    def test_guidance_is_written_camel_case_on_every_element(self):
        data = _suggestion_data("div.a", "div.b")

        updated = apply_guidance(data, [_remediation("s1")])

        for entry in updated["issues"][0]["htmlWithIssues"]:
            assert entry["guidance"] == {
                "generalSuggestion": "Remove tabindex",
                "updateTo": "<div></div>",
                "userImpact": "High",
            }
        assert "guidance" not in data["issues"][0]["htmlWithIssues"][0]

    def test_camel_case_input_is_accepted(self):
        remediation = _remediation("s1", generalSuggestion="Use a label", updateTo="<label/>", userImpact="Medium")

        updated = apply_guidance(_suggestion_data("div.a"), [remediation])

        assert updated["issues"][0]["htmlWithIssues"][0]["guidance"] == {
            "generalSuggestion": "Use a label",
            "updateTo": "<label/>",
            "userImpact": "Medium",
        }

    def test_prefers_issue_holding_the_target_selector(self):
        data = {
            "url": "https://x.com",
            "issues": [
                {"type": "aria-hidden-focus", "htmlWithIssues": [{"update_from": "<a/>", "target_selector": "a"}]},
                {"type": "aria-hidden-focus", "htmlWithIssues": [{"update_from": "<b/>", "target_selector": "b"}]},
            ],
        }

        updated = apply_guidance(data, [_remediation("s1", selector="b")])

        assert "guidance" not in updated["issues"][0]["htmlWithIssues"][0]
        assert "guidance" in updated["issues"][1]["htmlWithIssues"][0]

    def test_issue_without_elements_is_untouched(self):
        data = {"url": "https://x.com", "issues": [{"type": "aria-hidden-focus", "description": "d"}]}

        updated = apply_guidance(data, [_remediation("s1")])

        assert updated["issues"] == [{"type": "aria-hidden-focus", "description": "d"}]

    def test_other_issue_types_are_untouched(self):
        updated = apply_guidance(_suggestion_data("div.a", issue_type="button-name"), [_remediation("s1")])

        assert "guidance" not in updated["issues"][0]["htmlWithIssues"][0]


class TestHandleRemediationGuidance:
    """Inbound guidance replies"""

    def _context(self, fakes, make_context, *suggestions, **opportunity_fields):
        opportunity = fakes.Opportunity(id="oppty-1", suggestions=list(suggestions), **opportunity_fields)
        return opportunity, make_context(opportunities=fakes.OpportunityRepository([opportunity]))

    @pytest.mark.asyncio
    async def test_guidance_is_merged_and_saved(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        opportunity, context = self._context(fakes, make_context, suggestion)

        result = await handle_accessibility_remediation_guidance(_message([_remediation("s1")]), context)

        assert result == {
            "success": True,
            "totalIssues": 1,
            "pageUrl": "https://x.com",
            "notFoundSuggestionIds": [],
            "invalidRemediations": [],
            "failedSuggestionIds": [],
        }
        assert suggestion.save_calls == 1
        assert suggestion.updated_by == "system"
        assert suggestion.data["issues"][0]["htmlWithIssues"][0]["guidance"]["generalSuggestion"] == "Remove tabindex"
        assert opportunity.audit_id == "audit-9"
        assert opportunity.updated_by == "system"
        assert opportunity.save_calls == 1
        assert context.metrics.received == {("oppty-1", "https://x.com"): 1}

    @pytest.mark.asyncio
    async def test_unknown_suggestion_is_reported_not_failed(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        _, context = self._context(fakes, make_context, suggestion)

        result = await handle_accessibility_remediation_guidance(
            _message([_remediation("s1"), _remediation("missing"), _remediation("missing", selector="div.b")]),
            context,
        )

        assert result["success"] is True
        assert result["notFoundSuggestionIds"] == ["missing"]
        assert suggestion.save_calls == 1

    @pytest.mark.asyncio
    async def test_opportunity_not_found(self, fakes, make_context):
        context = make_context()

        result = await handle_accessibility_remediation_guidance(_message([_remediation("s1")]), context)

        assert result == {"success": False, "error": "Opportunity not found"}

    @pytest.mark.asyncio
    async def test_site_mismatch_changes_nothing(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        opportunity, context = self._context(fakes, make_context, suggestion)

        result = await handle_accessibility_remediation_guidance(
            _message([_remediation("s1")], site_id="other-site"), context,
        )

        assert result == {"success": False, "error": "Site ID mismatch"}
        assert suggestion.save_calls == 0
        assert opportunity.save_calls == 0

    @pytest.mark.asyncio
    async def test_remediations_without_suggestion_id_are_returned(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        _, context = self._context(fakes, make_context, suggestion)
        invalid = [{"issueName": "aria-hidden-focus"}, {"suggestionId": ""}, "garbage"]

        result = await handle_accessibility_remediation_guidance(_message([*invalid, _remediation("s1")]), context)

        assert result["success"] is True
        assert result["invalidRemediations"] == invalid
        assert suggestion.save_calls == 1

    @pytest.mark.asyncio
    async def test_snake_case_suggestion_id_is_accepted(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        _, context = self._context(fakes, make_context, suggestion)
        remediation = {"suggestion_id": "s1", "issue_name": "aria-hidden-focus", "general_suggestion": "x"}

        result = await handle_accessibility_remediation_guidance(_message([remediation]), context)

        assert result["notFoundSuggestionIds"] == []
        assert suggestion.data["issues"][0]["htmlWithIssues"][0]["guidance"]["generalSuggestion"] == "x"

    @pytest.mark.asyncio
    async def test_failed_saves_are_reported_per_suggestion(self, fakes, make_context, caplog):
        good = fakes.Suggestion(id="good", data=_suggestion_data("div.a"))
        bad = fakes.Suggestion(id="bad", data=_suggestion_data("div.a"), fail_save=True)
        opportunity, context = self._context(fakes, make_context, good, bad)

        with caplog.at_level(logging.ERROR):
            result = await handle_accessibility_remediation_guidance(
                _message([_remediation("good"), _remediation("bad")]), context,
            )

        assert result["success"] is True
        assert result["failedSuggestionIds"] == ["bad"]
        assert bad.save_calls == 3
        assert good.save_calls == 1
        assert opportunity.save_calls == 1
        assert "Failed to save suggestion bad" in caplog.text

    @pytest.mark.asyncio
    async def test_metrics_failure_does_not_fail_the_reply(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        opportunity = fakes.Opportunity(id="oppty-1", suggestions=[suggestion])
        context = make_context(opportunities=fakes.OpportunityRepository([opportunity]), metrics=fakes.Metrics(fail=True))

        result = await handle_accessibility_remediation_guidance(_message([_remediation("s1")]), context)

        assert result["success"] is True

    @pytest.mark.asyncio
    async def test_opportunity_save_failure_is_reported(self, fakes, make_context):
        suggestion = fakes.Suggestion(id="s1", data=_suggestion_data("div.a"))
        _, context = self._context(fakes, make_context, suggestion, fail_save=True)

        result = await handle_accessibility_remediation_guidance(_message([_remediation("s1")]), context)

        assert result == {"success": False, "error": "database unreachable"}
