"""
Static tables for the accessibility remediation pipeline.

All tables are read-only mappings; callers that need a different WCAG lookup
pass their own mapping into the formatting functions.
"""
import enum
from types import MappingProxyType

# Page key holding the site-wide summary in raw audit output
OVERALL_KEY = "overall"

# Query-parameter token carrying the "source" of a scraped URL
SOURCE_SEPARATOR = "?source="

SYSTEM_USER = "system"
ACCESSIBILITY_DOMAIN = "accessibility"

REMEDIATION_MESSAGE_TYPE = "guidance:accessibility-remediation"

AUTO_SUGGEST_FLAG = "a11y-mystique-auto-suggest"
AUTO_FIX_FLAG = "a11y-mystique-auto-fix"

SUGGESTION_TYPE_CODE_CHANGE = "CODE_CHANGE"
CANDIDATE_GROUP_TYPE = "url"


class OpportunityStatus(str, enum.Enum):
    NEW = "NEW"
    IN_PROGRESS = "IN_PROGRESS"
    RESOLVED = "RESOLVED"
    IGNORED = "IGNORED"


ACTIVE_OPPORTUNITY_STATUSES = (OpportunityStatus.NEW, OpportunityStatus.IN_PROGRESS)


class SuggestionStatus(str, enum.Enum):
    NEW = "NEW"
    APPROVED = "APPROVED"
    IN_PROGRESS = "IN_PROGRESS"
    SKIPPED = "SKIPPED"
    FIXED = "FIXED"
    OUTDATED = "OUTDATED"
    ERROR = "ERROR"
    PENDING_VALIDATION = "PENDING_VALIDATION"


# Never marked outdated again by a sync run
SYNC_PROTECTED_STATUSES = (
    SuggestionStatus.OUTDATED,
    SuggestionStatus.FIXED,
    SuggestionStatus.ERROR,
    SuggestionStatus.SKIPPED,
)

# Never sent to the remediation service
REMEDIATION_SKIPPED_STATUSES = (
    SuggestionStatus.FIXED,
    SuggestionStatus.SKIPPED,
    SuggestionStatus.OUTDATED,
)


class BatchStatus(str, enum.Enum):
    OPPORTUNITY_CREATED = "OPPORTUNITY_CREATED"
    OPPORTUNITY_UPDATED = "OPPORTUNITY_UPDATED"
    NO_OPPORTUNITIES = "NO_OPPORTUNITIES"
    OPPORTUNITIES_FAILED = "OPPORTUNITIES_FAILED"


ASSISTIVE_OPPORTUNITY = "a11y-assistive"
COLOR_CONTRAST_OPPORTUNITY = "a11y-color-contrast"

ACCESSIBILITY_OPPORTUNITIES_MAP = MappingProxyType({
    ASSISTIVE_OPPORTUNITY: (
        "aria-allowed-attr",
        "aria-allowed-role",
        "aria-command-name",
        "aria-hidden-body",
        "aria-hidden-focus",
        "aria-input-field-name",
        "aria-meter-name",
        "aria-progressbar-name",
        "aria-prohibited-attr",
        "aria-required-attr",
        "aria-required-children",
        "aria-required-parent",
        "aria-roles",
        "aria-toggle-field-name",
        "aria-tooltip-name",
        "aria-valid-attr",
        "aria-valid-attr-value",
        "button-name",
        "frame-title",
        "image-alt",
        "input-button-name",
        "input-image-alt",
        "label",
        "link-name",
        "nested-interactive",
        "role-img-alt",
        "select-name",
        "svg-img-alt",
    ),
    COLOR_CONTRAST_OPPORTUNITY: (
        "color-contrast",
    ),
})

ISSUE_TYPE_TO_OPPORTUNITY_TYPE = MappingProxyType({
    issue_type: opportunity_type
    for opportunity_type, issue_types in ACCESSIBILITY_OPPORTUNITIES_MAP.items()
    for issue_type in issue_types
})

# Issue types the remediation service accepts at all
ISSUE_TYPES_FOR_REMEDIATION = frozenset(ACCESSIBILITY_OPPORTUNITIES_MAP[ASSISTIVE_OPPORTUNITY])

# Issue types the remediation service can patch directly in source
CODE_FIX_ISSUE_TYPES = frozenset({
    "aria-allowed-attr",
    "aria-hidden-focus",
    "aria-prohibited-attr",
    "aria-required-attr",
    "aria-roles",
    "aria-valid-attr-value",
    "button-name",
    "link-name",
    "select-name",
})

# Tags that replace whatever an opportunity of the type carried before
HARDCODED_OPPORTUNITY_TAGS = MappingProxyType({
    ASSISTIVE_OPPORTUNITY: ("ARIA Labels", "Accessibility"),
    COLOR_CONTRAST_OPPORTUNITY: ("Color Contrast", "Accessibility", "Engagement"),
})

# Marker tags kept across a tag rewrite
PRESERVED_TAGS = ("isElmo", "isASO")

_W3 = "https://www.w3.org/WAI/WCAG22/Understanding/"

SUCCESS_CRITERIA_LINKS = MappingProxyType({
    "111": MappingProxyType({"name": "Non-text Content", "understandingUrl": _W3 + "non-text-content.html"}),
    "121": MappingProxyType({
        "name": "Audio-only and Video-only (Prerecorded)",
        "understandingUrl": _W3 + "audio-only-and-video-only-prerecorded.html",
    }),
    "131": MappingProxyType({"name": "Info and Relationships", "understandingUrl": _W3 + "info-and-relationships.html"}),
    "135": MappingProxyType({"name": "Identify Input Purpose", "understandingUrl": _W3 + "identify-input-purpose.html"}),
    "141": MappingProxyType({"name": "Use of Color", "understandingUrl": _W3 + "use-of-color.html"}),
    "143": MappingProxyType({"name": "Contrast (Minimum)", "understandingUrl": _W3 + "contrast-minimum.html"}),
    "1411": MappingProxyType({"name": "Non-text Contrast", "understandingUrl": _W3 + "non-text-contrast.html"}),
    "1412": MappingProxyType({"name": "Text Spacing", "understandingUrl": _W3 + "text-spacing.html"}),
    "211": MappingProxyType({"name": "Keyboard", "understandingUrl": _W3 + "keyboard.html"}),
    "241": MappingProxyType({"name": "Bypass Blocks", "understandingUrl": _W3 + "bypass-blocks.html"}),
    "242": MappingProxyType({"name": "Page Titled", "understandingUrl": _W3 + "page-titled.html"}),
    "244": MappingProxyType({"name": "Link Purpose (In Context)", "understandingUrl": _W3 + "link-purpose-in-context.html"}),
    "247": MappingProxyType({"name": "Focus Visible", "understandingUrl": _W3 + "focus-visible.html"}),
    "311": MappingProxyType({"name": "Language of Page", "understandingUrl": _W3 + "language-of-page.html"}),
    "312": MappingProxyType({"name": "Language of Parts", "understandingUrl": _W3 + "language-of-parts.html"}),
    "332": MappingProxyType({"name": "Labels or Instructions", "understandingUrl": _W3 + "labels-or-instructions.html"}),
    "412": MappingProxyType({"name": "Name, Role, Value", "understandingUrl": _W3 + "name-role-value.html"}),
})
