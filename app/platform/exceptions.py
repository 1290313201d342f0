"""
Errors raised by the accessibility remediation pipeline.

Expected conditions (opportunity not found, site mismatch, unknown suggestion ids)
are reported through result dicts, not exceptions. These classes cover the cases
that must abort a step.
"""


class A11yConfigurationError(Exception):
    """Required queue, broker or store configuration is missing."""


class OpportunityCreatorNotFoundError(Exception):
    def __init__(self, opportunity_type: str, available: list):
        self.opportunity_type = opportunity_type
        self.available = available
        super().__init__(f"No opportunity creator found for type: {opportunity_type}")


class SuggestionSyncError(Exception):
    """Every new suggestion in a sync batch failed to persist."""
