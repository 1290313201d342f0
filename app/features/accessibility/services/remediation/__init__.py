"""
Remediation exchange.

Outbound requests per page and inbound guidance replies.
"""
from app.features.accessibility.services.remediation.dispatcher import (
    build_remediation_batches,
    create_remediation_message,
    send_remediation_requests,
)
from app.features.accessibility.services.remediation.guidance_receiver import (
    apply_guidance,
    handle_accessibility_remediation_guidance,
)

__all__ = [
    "build_remediation_batches",
    "create_remediation_message",
    "send_remediation_requests",
    "apply_guidance",
    "handle_accessibility_remediation_guidance",
]
